"""
Custom permission classes for role based access control.
"""
from rest_framework.permissions import BasePermission

STAFF_ROLES = {"staff", "manager", "admin"}
MANAGER_ROLES = {"manager", "admin"}


class IsStaffRole(BasePermission):
    """Allow access only to hotel staff (staff, manager or admin)."""
    def has_permission(self, request, view) -> bool:  # type: ignore[override]
        user = getattr(request, "user", None)
        return bool(user and user.is_authenticated and getattr(user, "role", None) in STAFF_ROLES)


class IsManagerRole(BasePermission):
    """manager or admin."""
    def has_permission(self, request, view) -> bool:
        user = getattr(request, "user", None)
        return bool(user and user.is_authenticated and getattr(user, "role", None) in MANAGER_ROLES)
