# core/management/commands/ensure_demo_users.py
from django.core.management.base import BaseCommand
from django.contrib.auth.hashers import make_password
from core.models import User

DEMO_SET = [
    ("admin@hotel.local", "admin"),
    ("manager@hotel.local", "manager"),
    ("staff@hotel.local", "staff"),
    ("guest@hotel.local", "customer"),
]


class Command(BaseCommand):
    help = "Ensure one demo user per role exists with the given password (idempotent)."

    def add_arguments(self, parser):
        parser.add_argument("--password", default="hotel123", help="Password for every demo user")

    def handle(self, *args, **opts):
        password = make_password(opts["password"])
        for email, role in DEMO_SET:
            u, created = User.objects.get_or_create(
                email=email,
                defaults={"username": email, "role": role, "password": password, "is_active": True},
            )
            if not created:
                u.password = password
                u.role = role
                u.is_active = True
                u.save(update_fields=["password", "role", "is_active"])
            self.stdout.write(self.style.SUCCESS(f"ok: {email} ({role})"))
        self.stdout.write(self.style.SUCCESS("All demo users ensured."))
