"""
Database models for the hotel backend.

These models capture the concepts the dashboard administers: users
(guests and staff), rooms, departments, bookings, calls and the
activity trail.  The room/occupant pair carries the only hard
invariant in the schema: a room is ``occupied`` exactly when it has an
occupant, and an occupant holds at most one room.
"""
from __future__ import annotations

from django.contrib.auth.models import AbstractUser
from django.db import models
from django.db.models import Q
from django.utils import timezone


class Department(models.Model):
    """A hotel department such as Front Desk or Housekeeping."""
    name = models.CharField(max_length=255, unique=True)
    contacts = models.JSONField(default=list, blank=True)
    manager = models.ForeignKey(
        'User', null=True, blank=True, on_delete=models.SET_NULL, related_name='managed_departments'
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self) -> str:
        return self.name


class User(AbstractUser):
    """Custom user model for guests and staff.

    Users log in with their email address.  ``room_number`` is the
    occupant side of a room assignment; it is written only by
    :mod:`core.services.rooms` and mirrors ``Room.assigned_occupant``.
    """
    ROLE_CUSTOMER = 'customer'
    ROLE_STAFF = 'staff'
    ROLE_MANAGER = 'manager'
    ROLE_ADMIN = 'admin'
    ROLE_CHOICES = [
        (ROLE_CUSTOMER, 'Customer'),
        (ROLE_STAFF, 'Staff'),
        (ROLE_MANAGER, 'Manager'),
        (ROLE_ADMIN, 'Administrator'),
    ]
    STATUS_ACTIVE = 'active'
    STATUS_INACTIVE = 'inactive'
    STATUS_CHOICES = [
        (STATUS_ACTIVE, 'Active'),
        (STATUS_INACTIVE, 'Inactive'),
    ]

    email = models.EmailField(unique=True)
    phone = models.CharField(max_length=32, unique=True, null=True, blank=True)
    role = models.CharField(max_length=10, choices=ROLE_CHOICES, default=ROLE_CUSTOMER, db_index=True)
    status = models.CharField(max_length=10, choices=STATUS_CHOICES, default=STATUS_ACTIVE)
    # Unique when set: one occupant per room number
    room_number = models.CharField(max_length=20, unique=True, null=True, blank=True)
    department = models.ForeignKey(
        Department, null=True, blank=True, on_delete=models.SET_NULL, related_name='members'
    )

    USERNAME_FIELD = 'email'
    REQUIRED_FIELDS = ['username']

    def __str__(self) -> str:
        return f"{self.email} ({self.role})"

    @property
    def display_name(self) -> str:
        return self.get_full_name() or self.email


class Room(models.Model):
    """An allocatable room with a binary occupancy state."""
    STATUS_AVAILABLE = 'available'
    STATUS_OCCUPIED = 'occupied'
    STATUS_CHOICES = [
        (STATUS_AVAILABLE, 'Available'),
        (STATUS_OCCUPIED, 'Occupied'),
    ]

    number = models.CharField(max_length=20, unique=True)
    # One-to-one: an occupant is referenced by at most one room
    assigned_occupant = models.OneToOneField(
        User, null=True, blank=True, on_delete=models.PROTECT, related_name='room'
    )
    status = models.CharField(max_length=16, choices=STATUS_CHOICES, default=STATUS_AVAILABLE, db_index=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['number']
        constraints = [
            models.CheckConstraint(
                condition=(
                    Q(status='occupied', assigned_occupant__isnull=False)
                    | Q(status='available', assigned_occupant__isnull=True)
                ),
                name='room_status_matches_occupant',
            ),
        ]

    def __str__(self) -> str:
        return f"Room {self.number} ({self.status})"


class Booking(models.Model):
    """A restaurant or spa booking made for a guest with a department."""
    TYPE_CHOICES = [
        ('restaurant', 'Restaurant'),
        ('spa', 'Spa'),
    ]
    STATUS_PENDING = 'pending'
    STATUS_CONFIRMED = 'confirmed'
    STATUS_CANCELLED = 'cancelled'
    STATUS_CHOICES = [
        (STATUS_PENDING, 'Pending'),
        (STATUS_CONFIRMED, 'Confirmed'),
        (STATUS_CANCELLED, 'Cancelled'),
    ]

    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name='bookings')
    department = models.ForeignKey(Department, on_delete=models.CASCADE, related_name='bookings')
    booking_type = models.CharField(max_length=20, choices=TYPE_CHOICES)
    date = models.DateField(null=True, blank=True)
    time_slot = models.CharField(max_length=50)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_PENDING, db_index=True)
    notes = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        indexes = [
            models.Index(fields=['department', 'date'], name='booking_dept_date_idx'),
        ]

    def __str__(self) -> str:
        return f"Booking #{self.pk} {self.booking_type} ({self.status})"


class Call(models.Model):
    """A logged phone call between guests and staff."""
    STATUS_CHOICES = [
        ('missed', 'Missed'),
        ('completed', 'Completed'),
        ('ongoing', 'Ongoing'),
    ]
    TYPE_CHOICES = [
        ('incoming', 'Incoming'),
        ('outgoing', 'Outgoing'),
    ]

    caller = models.ForeignKey(User, null=True, blank=True, on_delete=models.SET_NULL, related_name='calls_made')
    receiver = models.ForeignKey(User, null=True, blank=True, on_delete=models.SET_NULL, related_name='calls_received')
    user_type = models.CharField(max_length=50, blank=True)
    call_type = models.CharField(max_length=10, choices=TYPE_CHOICES, blank=True)
    status = models.CharField(max_length=10, choices=STATUS_CHOICES, default='ongoing')
    call_time = models.CharField(max_length=50, blank=True)
    duration = models.PositiveIntegerField(null=True, blank=True, help_text="Duration in seconds")
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self) -> str:
        return f"Call #{self.pk} {self.user_type} ({self.status})"


class AuditEvent(models.Model):
    """Structured sink of the activity trail.  Rows are write-once."""
    actor = models.CharField(max_length=255)
    action = models.CharField(max_length=255)
    details = models.JSONField(null=True, blank=True)
    timestamp = models.DateTimeField(default=timezone.now, db_index=True)

    class Meta:
        ordering = ['-timestamp', '-id']
        indexes = [
            models.Index(fields=['actor', 'timestamp'], name='auditevent_actor_ts_idx'),
        ]

    def __str__(self) -> str:
        return f"{self.actor}: {self.action} @ {self.timestamp:%F %T}"
