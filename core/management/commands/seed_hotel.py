"""
Management command to seed departments and rooms.
"""
from django.core.management.base import BaseCommand

from core.models import Department, Room


DEPARTMENTS = [
    {'name': 'Front Desk', 'contacts': ['1234567890']},
    {'name': 'Housekeeping', 'contacts': ['0987654321']},
    {'name': 'Restaurant', 'contacts': []},
    {'name': 'Spa', 'contacts': []},
]


class Command(BaseCommand):
    help = 'Seed departments and rooms (existing rows are left untouched)'

    def add_arguments(self, parser):
        parser.add_argument('--first', type=int, default=101, help='First room number')
        parser.add_argument('--count', type=int, default=10, help='How many rooms to ensure')

    def handle(self, *args, **options):
        depts = self.create_departments()
        rooms = self.create_rooms(options['first'], options['count'])
        self.stdout.write(self.style.SUCCESS(f'Seed complete: {depts} departments and {rooms} rooms created'))

    def create_departments(self):
        created_count = 0
        for data in DEPARTMENTS:
            _, created = Department.objects.get_or_create(name=data['name'], defaults={'contacts': data['contacts']})
            created_count += int(created)
        return created_count

    def create_rooms(self, first, count):
        created_count = 0
        for number in range(first, first + count):
            _, created = Room.objects.get_or_create(number=str(number))
            created_count += int(created)
        return created_count
