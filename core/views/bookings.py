"""
Booking endpoints.

Any signed-in user can list and create restaurant/spa bookings; guests
only see and book for themselves.  Staff move bookings between
``pending``, ``confirmed`` and ``cancelled``.
"""
from __future__ import annotations

from rest_framework.decorators import api_view, permission_classes
from rest_framework.exceptions import PermissionDenied
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework import status

from core.permissions import IsStaffRole, STAFF_ROLES
from core.serializers.bookings import BookingCreateSerializer, BookingListQuerySerializer, BookingStatusSerializer
from core.services.bookings import create_booking, format_booking, list_bookings, update_booking_status


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def bookings(request):
    is_staff = request.user.role in STAFF_ROLES
    if request.method == 'GET':
        q = BookingListQuerySerializer(data=request.query_params)
        q.is_valid(raise_exception=True)
        qs = list_bookings(q.validated_data.get('status'))
        if not is_staff:
            qs = qs.filter(user=request.user)
        return Response({
            'ok': True,
            'message': 'Bookings fetched successfully',
            'data': [format_booking(b) for b in qs],
        })

    s = BookingCreateSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    vd = s.validated_data
    if not is_staff and vd['userId'] != request.user.id:
        raise PermissionDenied('customers can only book for themselves')
    booking = create_booking(
        vd['userId'], vd['departmentId'], vd['timeSlot'], vd['bookingType'],
        date=vd.get('date'), notes=vd.get('notes', ''),
    )
    return Response(
        {'ok': True, 'message': 'Booking created successfully!', 'data': format_booking(booking)},
        status=status.HTTP_201_CREATED,
    )


@api_view(['PUT'])
@permission_classes([IsAuthenticated, IsStaffRole])
def booking_status(request, pk: int):
    s = BookingStatusSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    new_status = s.validated_data['status']
    booking = update_booking_status(pk, new_status, actor=request.user.email)
    return Response({
        'ok': True,
        'message': f'Booking {booking.id} status updated to {new_status}',
        'data': format_booking(booking),
    })
