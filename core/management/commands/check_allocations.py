"""
Report (and optionally repair) room assignments whose two sides disagree.

A consistent assignment has ``Room.assigned_occupant == user`` and
``user.room_number == room.number``.  Drift can only come from manual
database edits or from an unassign that found no room; this command is
the reconciliation tool for both.
"""
import logging

from django.core.management.base import BaseCommand
from django.db import transaction
from django.utils import timezone

from core.models import Room, User
from core.services import audit

logger = logging.getLogger(__name__)


def find_drift():
    """Return ``(dangling_users, dangling_rooms)``.

    ``dangling_users`` hold a ``room_number`` that no room confirms;
    ``dangling_rooms`` point at an occupant whose ``room_number`` differs.
    """
    confirmed = {
        (r.number, r.assigned_occupant_id)
        for r in Room.objects.filter(assigned_occupant__isnull=False).only('number', 'assigned_occupant_id')
    }
    dangling_users = [
        u for u in User.objects.filter(room_number__isnull=False).only('id', 'email', 'room_number')
        if (u.room_number, u.id) not in confirmed
    ]
    dangling_rooms = [
        r for r in Room.objects.filter(assigned_occupant__isnull=False).select_related('assigned_occupant')
        if r.assigned_occupant.room_number != r.number
    ]
    return dangling_users, dangling_rooms


class Command(BaseCommand):
    help = 'Check that every room assignment is recorded on both the room and the user'

    def add_arguments(self, parser):
        parser.add_argument('--fix', action='store_true', help='Clear the dangling side of each broken assignment')

    def handle(self, *args, **options):
        dangling_users, dangling_rooms = find_drift()
        for u in dangling_users:
            self.stdout.write(f'user {u.id} ({u.email}) records room {u.room_number} but the room does not point back')
        for r in dangling_rooms:
            self.stdout.write(f'room {r.number} points at user {r.assigned_occupant_id} '
                              f'who records room {r.assigned_occupant.room_number!r}')

        if not dangling_users and not dangling_rooms:
            self.stdout.write(self.style.SUCCESS('All room assignments are consistent'))
            return
        if not options['fix']:
            self.stdout.write(self.style.WARNING(
                f'{len(dangling_users)} user(s) and {len(dangling_rooms)} room(s) out of step; rerun with --fix'))
            return

        with transaction.atomic():
            for u in dangling_users:
                User.objects.filter(pk=u.pk, room_number=u.room_number).update(room_number=None)
            for r in dangling_rooms:
                Room.objects.filter(pk=r.pk).update(
                    assigned_occupant=None, status=Room.STATUS_AVAILABLE, updated_at=timezone.now())
        logger.warning('Repaired %d user(s) and %d room(s)', len(dangling_users), len(dangling_rooms))
        audit.record('System', 'Repaired room assignments',
                     {'users': [u.id for u in dangling_users], 'rooms': [r.number for r in dangling_rooms]})
        self.stdout.write(self.style.SUCCESS(
            f'Cleared {len(dangling_users)} user(s) and {len(dangling_rooms)} room(s)'))
