"""
User management views.

Staff can list and search users; managers create users, change their
status or role and delete them.  Deleting a user that holds a room
releases the room first.
"""
from __future__ import annotations

from rest_framework.decorators import api_view, permission_classes
from rest_framework.exceptions import PermissionDenied, ValidationError
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework import status

from core.permissions import IsManagerRole, IsStaffRole, MANAGER_ROLES
from core.serializers.users import (
    UserCreateSerializer,
    UserListQuerySerializer,
    UserRoleSerializer,
    UserStatusSerializer,
)
from core.services.users import (
    create_user,
    delete_user,
    format_user,
    search_users,
    update_user_role,
    update_user_status,
)


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsStaffRole])
def users(request):
    if request.method == 'GET':
        q = UserListQuerySerializer(data=request.query_params)
        q.is_valid(raise_exception=True)
        qs = search_users(q=q.validated_data.get('q'), role=q.validated_data.get('role'))
        total = qs.count()
        page = q.validated_data.get('page') or 1
        page_size = q.validated_data.get('pageSize') or 0
        if page_size:
            start = (page - 1) * page_size
            qs = qs[start:start + page_size]
        return Response({
            'ok': True,
            'data': [format_user(u) for u in qs],
            'pagination': {'total': total, 'page': page, 'pageSize': page_size or total},
        })

    # POST
    if request.user.role not in MANAGER_ROLES:
        raise PermissionDenied('Only managers can create users')
    s = UserCreateSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    vd = s.validated_data
    user, initial_password = create_user(
        email=vd['email'],
        password=vd.get('password') or None,
        name=vd.get('name', ''),
        phone=vd.get('phone'),
        role=vd['role'],
        status=vd['status'],
        actor=request.user.email,
    )
    payload = {'ok': True, 'message': 'User created successfully', 'data': format_user(user)}
    if not vd.get('password'):
        payload['initialPassword'] = initial_password
    return Response(payload, status=status.HTTP_201_CREATED)


@api_view(['PUT'])
@permission_classes([IsAuthenticated, IsManagerRole])
def user_status(request, pk: int):
    s = UserStatusSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    user = update_user_status(pk, s.validated_data['status'], actor=request.user.email)
    return Response({'ok': True, 'message': f'User {user.email} status updated to {user.status}',
                     'data': format_user(user)})


@api_view(['PUT'])
@permission_classes([IsAuthenticated, IsManagerRole])
def user_role(request, pk: int):
    s = UserRoleSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    user = update_user_role(pk, s.validated_data['role'], actor=request.user.email)
    return Response({'ok': True, 'message': f'User {user.email} role updated to {user.role}',
                     'data': format_user(user)})


@api_view(['DELETE'])
@permission_classes([IsAuthenticated, IsManagerRole])
def user_detail(request, pk: int):
    if pk == request.user.id:
        raise ValidationError('You cannot delete your own account')
    delete_user(pk, actor=request.user.email)
    return Response({'ok': True, 'message': 'User deleted successfully'})
