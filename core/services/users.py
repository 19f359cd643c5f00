import logging
import secrets
from typing import Optional

from django.contrib.auth.password_validation import validate_password
from django.core.exceptions import ValidationError
from django.db import IntegrityError, transaction
from django.db.models import Q
from django.utils import timezone
from rest_framework.exceptions import NotFound

from core.exceptions import Conflict
from core.models import Room, User
from core.services import audit
from core.services.rooms import unassign_room

logger = logging.getLogger(__name__)


def normalize_email(email: str) -> str:
    return (email or '').strip().lower()


def create_user(*, email, password=None, name='', phone=None, role=User.ROLE_CUSTOMER,
                status=User.STATUS_ACTIVE, actor='Admin') -> tuple[User, str]:
    """Create a user and return it with its initial password."""
    email = normalize_email(email)
    phone = (phone or '').strip() or None
    if User.objects.filter(email=email).exists():
        raise Conflict('User already exists with this email')
    if phone and User.objects.filter(phone=phone).exists():
        raise Conflict('User already exists with this phone')

    if password:
        try:
            validate_password(password)
        except ValidationError as e:
            from rest_framework.exceptions import ValidationError as DRFValidation
            raise DRFValidation({'password': e.messages})
    else:
        password = secrets.token_urlsafe(12)

    try:
        with transaction.atomic():
            user = User.objects.create_user(
                username=email, email=email, password=password,
                first_name=name or '', phone=phone, role=role, status=status,
            )
    except IntegrityError as exc:
        raise Conflict('User already exists') from exc
    audit.record(actor, f'Created new user {email}', {'userId': user.pk, 'role': role})
    return user, password


def _get_user(user_id) -> User:
    user = User.objects.filter(pk=user_id).first()
    if not user:
        raise NotFound('User not found')
    return user


def update_user_status(user_id, status: str, *, actor='Admin') -> User:
    user = _get_user(user_id)
    user.status = status
    user.save(update_fields=['status'])
    audit.record(actor, f'Updated user {user.email} status to {status}', {'userId': user.pk})
    return user


def update_user_role(user_id, role: str, *, actor='Admin') -> User:
    user = _get_user(user_id)
    user.role = role
    user.save(update_fields=['role'])
    audit.record(actor, f'Updated user {user.email} role to {role}', {'userId': user.pk})
    return user


def delete_user(user_id, *, actor='Admin') -> None:
    user = _get_user(user_id)
    if user.room_number:
        # Rooms protect their occupant; release first
        user, _ = unassign_room(user.pk)
    email = user.email
    with transaction.atomic():
        # A room can still point here after drift cleared the user side
        stale = list(Room.objects.select_for_update().filter(assigned_occupant=user).values_list('number', flat=True))
        if stale:
            logger.warning('Room(s) %s still pointed at user %s; releasing before delete', stale, user.pk)
            Room.objects.filter(assigned_occupant=user).update(
                assigned_occupant=None, status=Room.STATUS_AVAILABLE, updated_at=timezone.now(),
            )
        user.delete()
    logger.info('Deleted user %s', email)
    audit.record(actor, f'Deleted user {email}', {'userId': user_id, 'releasedRooms': stale})


def search_users(*, q: Optional[str] = None, role: Optional[str] = None):
    qs = User.objects.select_related('department').order_by('-date_joined')
    if role:
        qs = qs.filter(role=role)
    if q:
        qs = qs.filter(Q(email__icontains=q) | Q(first_name__icontains=q) | Q(phone__icontains=q))
    return qs


def format_user(u: User) -> dict:
    return {
        'id': u.id,
        'name': u.first_name,
        'email': u.email,
        'phone': u.phone,
        'role': u.role,
        'status': u.status,
        'roomNumber': u.room_number,
        'departmentId': u.department_id,
        'createdAt': u.date_joined.isoformat() if u.date_joined else None,
    }
