"""
Department, call log and activity trail endpoints.
"""
from __future__ import annotations

from rest_framework.decorators import api_view, permission_classes
from rest_framework.exceptions import PermissionDenied, ValidationError
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework import status

from core.models import AuditEvent, Call, Department
from core.permissions import IsManagerRole, IsStaffRole, MANAGER_ROLES
from core.serializers.directory import CallCreateSerializer, DepartmentCreateSerializer
from core.services.directory import create_call, create_department, format_call, format_department


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def departments(request):
    if request.method == 'GET':
        data = [format_department(d) for d in Department.objects.order_by('name')]
        return Response({'ok': True, 'message': 'Departments fetched successfully', 'data': data})

    if request.user.role not in MANAGER_ROLES:
        raise PermissionDenied('Only managers can create departments')
    s = DepartmentCreateSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    vd = s.validated_data
    contacts = list(vd.get('contacts') or [])
    if vd.get('contact'):
        contacts.insert(0, vd['contact'])
    dept = create_department(vd['name'], contacts, vd.get('managerId'), actor=request.user.email)
    return Response(
        {'ok': True, 'message': 'Department created successfully!', 'data': format_department(dept)},
        status=status.HTTP_201_CREATED,
    )


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsStaffRole])
def calls(request):
    if request.method == 'GET':
        data = [format_call(c) for c in Call.objects.order_by('-created_at')]
        return Response({'ok': True, 'message': 'Calls fetched successfully', 'data': data})

    s = CallCreateSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    vd = s.validated_data
    call = create_call(
        user_type=vd.get('userType', ''),
        call_time=vd.get('callTime', ''),
        status=vd['status'],
        call_type=vd.get('callType', ''),
        duration=vd.get('duration'),
        caller_id=vd.get('callerId'),
        receiver_id=vd.get('receiverId'),
    )
    return Response(
        {'ok': True, 'message': 'Call created successfully!', 'data': format_call(call)},
        status=status.HTTP_201_CREATED,
    )


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsManagerRole])
def activities(request):
    """Return the activity trail, newest first.

    Supports ``actor`` and ``q`` (substring of the action) filters and
    ``page``/``pageSize`` pagination (default page size 50).
    """
    qs = AuditEvent.objects.all()
    actor = request.query_params.get('actor')
    if actor:
        qs = qs.filter(actor=actor)
    q = request.query_params.get('q')
    if q:
        qs = qs.filter(action__icontains=q)
    try:
        page = max(1, int(request.query_params.get('page', 1)))
        page_size = min(200, max(1, int(request.query_params.get('pageSize', 50))))
    except (TypeError, ValueError):
        raise ValidationError('page and pageSize must be integers')
    total = qs.count()
    start = (page - 1) * page_size
    data = [{
        'id': e.id,
        'user': e.actor,
        'action': e.action,
        'details': e.details,
        'timestamp': e.timestamp.isoformat(),
    } for e in qs[start:start + page_size]]
    return Response({
        'ok': True,
        'message': 'Activities fetched successfully',
        'data': data,
        'pagination': {'total': total, 'page': page, 'pageSize': page_size},
    })
