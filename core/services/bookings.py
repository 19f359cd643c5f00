from typing import Optional
from django.db import transaction
from rest_framework.exceptions import NotFound

from core.models import Booking, Department, User
from core.services import audit


def create_booking(occupant_id, department_id, time_slot: str, booking_type: str, *,
                   date=None, notes: str = '') -> Booking:
    user = User.objects.filter(pk=occupant_id).first()
    if not user:
        raise NotFound('User not found')
    department = Department.objects.filter(pk=department_id).first()
    if not department:
        raise NotFound('Department not found')
    with transaction.atomic():
        booking = Booking.objects.create(
            user=user, department=department, booking_type=booking_type,
            date=date, time_slot=time_slot, notes=notes or '',
            status=Booking.STATUS_PENDING,
        )
    audit.record(user.email, f'Created booking for department {department.name}',
                 {'bookingId': booking.pk, 'userId': user.pk, 'departmentId': department.pk,
                  'timeSlot': time_slot, 'bookingType': booking_type})
    return booking


def update_booking_status(booking_id, new_status: str, *, actor: str = 'Admin') -> Booking:
    # Any status may follow any other; allowed values are checked by the caller
    booking = Booking.objects.filter(pk=booking_id).first()
    if not booking:
        raise NotFound('Booking not found')
    previous = booking.status
    booking.status = new_status
    booking.save(update_fields=['status', 'updated_at'])
    audit.record(actor, f'Updated booking {booking.pk} status to {new_status}',
                 {'bookingId': booking.pk, 'from': previous, 'to': new_status})
    return booking


def list_bookings(status: Optional[str] = None):
    qs = Booking.objects.select_related('user', 'department').order_by('-created_at')
    if status:
        qs = qs.filter(status=status)
    return qs


def format_booking(b: Booking) -> dict:
    return {
        'id': b.id,
        'userId': b.user_id,
        'userEmail': b.user.email if b.user_id else None,
        'departmentId': b.department_id,
        'departmentName': b.department.name if b.department_id else None,
        'bookingType': b.booking_type,
        'date': b.date.isoformat() if b.date else None,
        'timeSlot': b.time_slot,
        'status': b.status,
        'notes': b.notes,
        'createdAt': b.created_at.isoformat() if b.created_at else None,
    }
