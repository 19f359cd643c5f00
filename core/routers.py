"""
URL mappings for the hotel backend API.

Paths mirror the ones the dashboard calls.  Trailing slashes are
deliberately omitted.
"""
from django.urls import path, include

from .auth_views import (
    auto_login_view,
    jwt_logout_view,
    jwt_refresh_view,
    login_view,
    me_view,
    register_view,
)
from .views import health
from .views.bookings import bookings, booking_status
from .views.directory import activities, calls, departments
from .views.rooms import room_assign, room_unassign, rooms, rooms_available, users_without_rooms
from .views.users import user_detail, user_role, user_status, users


urlpatterns = [
    path('', include('django_prometheus.urls')),
    path('healthz', health.healthz),
    # Authentication
    path('api/auth/register', register_view, name='register_view'),
    path('api/auth/login', login_view, name='login_view'),
    path('api/auth/auto-login/<str:token>', auto_login_view, name='auto_login_view'),
    path('api/auth/me', me_view, name='me_view'),
    path('api/auth/refresh', jwt_refresh_view),
    path('api/auth/logout', jwt_logout_view),
    # Users
    path('api/users', users),
    path('api/users/<int:pk>', user_detail),
    path('api/users/<int:pk>/status', user_status),
    path('api/users/<int:pk>/role', user_role),
    # Rooms
    path('api/rooms', rooms),
    path('api/rooms/assign', room_assign),
    path('api/rooms/unassign', room_unassign),
    path('api/rooms/available', rooms_available),
    path('api/rooms/users-without-rooms', users_without_rooms),
    # Bookings
    path('api/bookings', bookings),
    path('api/bookings/<int:pk>/status', booking_status),
    # Calls, departments and the activity trail
    path('api/calls', calls),
    path('api/departments', departments),
    path('api/activities', activities),
]
