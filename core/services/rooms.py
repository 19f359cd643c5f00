"""
Room allocation.

Maintains the exclusive, two-sided link between an occupant
(``User.room_number``) and a room (``Room.assigned_occupant`` plus
``Room.status``).  Both sides change inside one transaction: rows are
locked with ``select_for_update`` and every write is a conditional
``UPDATE`` that only matches while the row is still free, so two
concurrent requests cannot both claim the same room or occupant.  A
guard that matches nothing is reported as a conflict and rolls the
whole operation back.
"""
import logging
from typing import Optional

from django.db import DatabaseError, IntegrityError, transaction
from django.utils import timezone
from rest_framework.exceptions import NotFound

from core.exceptions import Conflict, InternalError
from core.models import Room, User
from core.services import audit

logger = logging.getLogger(__name__)


def _claim_room(room_id: int, occupant: User) -> bool:
    """Set the room's occupant only if the room is still free."""
    return Room.objects.filter(
        pk=room_id, status=Room.STATUS_AVAILABLE, assigned_occupant__isnull=True,
    ).update(
        assigned_occupant=occupant, status=Room.STATUS_OCCUPIED, updated_at=timezone.now(),
    ) == 1


def _bind_occupant(occupant_id: int, room_number: str) -> bool:
    """Set the occupant's room only if the occupant holds none."""
    return User.objects.filter(
        pk=occupant_id, room_number__isnull=True,
    ).update(room_number=room_number) == 1


def assign_room(occupant_id, room_number: str) -> tuple[User, Room]:
    """Assign ``room_number`` to the occupant and return the updated pair."""
    try:
        with transaction.atomic():
            user = User.objects.select_for_update().filter(pk=occupant_id).first()
            if not user:
                raise NotFound('Customer not found')
            if user.room_number:
                raise Conflict(f'User already has room number {user.room_number} assigned.')
            room = Room.objects.select_for_update().filter(number=room_number).first()
            if not room:
                raise NotFound('Room not found')
            if room.status == Room.STATUS_OCCUPIED:
                raise Conflict('Room is already occupied')

            if not _bind_occupant(user.pk, room.number):
                raise Conflict(f'User {user.email} was assigned a room concurrently')
            if not _claim_room(room.pk, user):
                raise Conflict('Room is already occupied')
    except IntegrityError as exc:
        logger.info('Assignment of room %s to %s rejected by constraint: %s', room_number, occupant_id, exc)
        raise Conflict('Room or customer is already assigned') from exc
    except DatabaseError as exc:
        logger.exception('Storage failure assigning room %s to %s', room_number, occupant_id)
        raise InternalError() from exc

    user.refresh_from_db()
    room.refresh_from_db()
    logger.info('Assigned room %s to user %s', room.number, user.pk)
    audit.record(user.email, f'Assigned room {room.number} to {user.email}',
                 {'occupantId': user.pk, 'roomNumber': room.number})
    return user, room


def unassign_room(occupant_id) -> tuple[User, Optional[Room]]:
    """Release the occupant's room.

    When the recorded room no longer exists, or no longer points back at
    the occupant, the occupant side is still cleared and the drift is
    logged; ``manage.py check_allocations`` reports what is left.
    """
    try:
        with transaction.atomic():
            user = User.objects.select_for_update().filter(pk=occupant_id).first()
            if not user:
                raise NotFound('User not found')
            if not user.room_number:
                raise Conflict('no room assigned')
            previous = user.room_number

            room = Room.objects.select_for_update().filter(number=previous, assigned_occupant=user).first()
            if room:
                Room.objects.filter(pk=room.pk).update(
                    assigned_occupant=None, status=Room.STATUS_AVAILABLE, updated_at=timezone.now(),
                )
            else:
                logger.warning('User %s recorded room %s but no such room points back; clearing user side only',
                               user.pk, previous)

            released = User.objects.filter(pk=user.pk, room_number=previous).update(room_number=None)
            if not released:
                raise Conflict('no room assigned')
    except DatabaseError as exc:
        logger.exception('Storage failure unassigning user %s', occupant_id)
        raise InternalError() from exc

    user.refresh_from_db()
    if room:
        room.refresh_from_db()
    logger.info('Unassigned user %s from room %s', user.pk, previous)
    audit.record(user.email, f'Unassigned from room {previous}',
                 {'occupantId': user.pk, 'roomNumber': previous, 'roomFound': room is not None})
    return user, room


def available_rooms():
    return Room.objects.filter(status=Room.STATUS_AVAILABLE).order_by('number')


def unassigned_occupants():
    return User.objects.filter(room_number__isnull=True).order_by('id')


def list_rooms():
    return Room.objects.select_related('assigned_occupant').order_by('number')


def create_room(number: str, *, actor: str = 'Admin') -> Room:
    number = (number or '').strip()
    if Room.objects.filter(number=number).exists():
        raise Conflict('Room number already exists')
    try:
        with transaction.atomic():
            room = Room.objects.create(number=number)
    except IntegrityError as exc:
        raise Conflict('Room number already exists') from exc
    audit.record(actor, f'Created room number {number}', {'roomNumber': number})
    return room


def format_room(room: Room) -> dict:
    occupant = room.assigned_occupant
    return {
        'id': room.id,
        'roomNumber': room.number,
        'status': room.status,
        'assignedUser': occupant.id if occupant else None,
        'assignedUserEmail': occupant.email if occupant else None,
        'createdAt': room.created_at.isoformat() if room.created_at else None,
        'updatedAt': room.updated_at.isoformat() if room.updated_at else None,
    }
