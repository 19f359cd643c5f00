"""Core application for the hotel backend.

This package contains the models, services, serializers, views and route
registrations behind the administration dashboard: users, rooms and their
assignment, bookings, calls, departments and the activity trail.
"""
