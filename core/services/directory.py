"""Departments and the call log."""
from django.db import IntegrityError, transaction

from core.exceptions import Conflict
from core.models import Call, Department, User
from core.services import audit


def create_department(name: str, contacts=None, manager_id=None, *, actor='Admin') -> Department:
    name = (name or '').strip()
    if Department.objects.filter(name__iexact=name).exists():
        raise Conflict('Department already exists')
    manager = User.objects.filter(pk=manager_id).first() if manager_id else None
    try:
        with transaction.atomic():
            dept = Department.objects.create(name=name, contacts=list(contacts or []), manager=manager)
    except IntegrityError as exc:
        raise Conflict('Department already exists') from exc
    audit.record(actor, f'Created department {name}', {'departmentId': dept.pk})
    return dept


def create_call(*, user_type='', call_time='', status='ongoing', call_type='', duration=None,
                caller_id=None, receiver_id=None) -> Call:
    call = Call.objects.create(
        user_type=user_type or '',
        call_time=call_time or '',
        status=status,
        call_type=call_type or '',
        duration=duration,
        caller=User.objects.filter(pk=caller_id).first() if caller_id else None,
        receiver=User.objects.filter(pk=receiver_id).first() if receiver_id else None,
    )
    audit.record(user_type or 'System', f'Created call at {call_time} with status {status}', {'callId': call.pk})
    return call


def format_department(d: Department) -> dict:
    return {
        'id': d.id,
        'name': d.name,
        'contacts': d.contacts,
        'contact': d.contacts[0] if d.contacts else '',
        'managerId': d.manager_id,
    }


def format_call(c: Call) -> dict:
    return {
        'id': c.id,
        'userType': c.user_type,
        'callTime': c.call_time,
        'callType': c.call_type,
        'status': c.status,
        'duration': c.duration,
        'callerId': c.caller_id,
        'receiverId': c.receiver_id,
        'createdAt': c.created_at.isoformat() if c.created_at else None,
    }
