"""
Django admin registrations for the core models.

Rooms and users are editable for day to day data fixes, but the
occupancy fields are read-only here: they change only through the
assign/unassign endpoints so both sides of an assignment stay in step.
Activity entries are write-once and therefore fully read-only.
"""

from django.contrib import admin

from .models import AuditEvent, Booking, Call, Department, Room, User


@admin.register(Department)
class DepartmentAdmin(admin.ModelAdmin):
    list_display = ('id', 'name', 'manager', 'created_at')
    search_fields = ('name',)


@admin.register(User)
class UserAdmin(admin.ModelAdmin):
    list_display = ('email', 'first_name', 'role', 'status', 'room_number', 'department')
    list_filter = ('role', 'status', 'department')
    search_fields = ('email', 'first_name', 'phone', 'room_number')
    readonly_fields = ('room_number',)
    exclude = ('password',)


@admin.register(Room)
class RoomAdmin(admin.ModelAdmin):
    list_display = ('number', 'status', 'assigned_occupant', 'updated_at')
    list_filter = ('status',)
    search_fields = ('number', 'assigned_occupant__email')
    readonly_fields = ('status', 'assigned_occupant')


@admin.register(Booking)
class BookingAdmin(admin.ModelAdmin):
    list_display = ('id', 'user', 'department', 'booking_type', 'date', 'time_slot', 'status')
    list_filter = ('status', 'booking_type', 'department')
    search_fields = ('user__email', 'notes')


@admin.register(Call)
class CallAdmin(admin.ModelAdmin):
    list_display = ('id', 'user_type', 'call_type', 'status', 'call_time', 'duration', 'created_at')
    list_filter = ('status', 'call_type')


@admin.register(AuditEvent)
class AuditEventAdmin(admin.ModelAdmin):
    list_display = ('timestamp', 'actor', 'action')
    search_fields = ('actor', 'action')
    date_hierarchy = 'timestamp'

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
