"""
Room management endpoints.

Staff can create rooms, list them, assign a room to a guest and release
it again.  The assignment rules live in :mod:`core.services.rooms`;
these handlers only validate input and shape responses.
"""
from __future__ import annotations

from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework import status

from core.permissions import IsStaffRole
from core.serializers.rooms import RoomAssignSerializer, RoomCreateSerializer, RoomUnassignSerializer
from core.services.rooms import (
    assign_room,
    available_rooms,
    create_room,
    format_room,
    list_rooms,
    unassign_room,
    unassigned_occupants,
)
from core.services.users import format_user


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsStaffRole])
def rooms(request):
    if request.method == 'GET':
        return Response({'ok': True, 'data': [format_room(r) for r in list_rooms()]})
    s = RoomCreateSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    room = create_room(s.validated_data['roomNumber'], actor=request.user.email)
    return Response(
        {'ok': True, 'message': 'Room created successfully', 'data': format_room(room)},
        status=status.HTTP_201_CREATED,
    )


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsStaffRole])
def room_assign(request):
    s = RoomAssignSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    user, room = assign_room(s.validated_data['customerId'], s.validated_data['roomNumber'])
    return Response({
        'ok': True,
        'message': f'Room {room.number} assigned successfully to {user.email}',
        'data': {'customerId': user.id, 'roomNumber': room.number, 'room': format_room(room)},
    })


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsStaffRole])
def room_unassign(request):
    s = RoomUnassignSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    user, room = unassign_room(s.validated_data['customerId'])
    return Response({
        'ok': True,
        'message': f'Room unassigned successfully from {user.email}',
        'data': {'customerId': user.id, 'room': format_room(room) if room else None},
    })


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsStaffRole])
def rooms_available(request):
    return Response({'ok': True, 'data': [format_room(r) for r in available_rooms()]})


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsStaffRole])
def users_without_rooms(request):
    return Response({'ok': True, 'data': [format_user(u) for u in unassigned_occupants()]})
