import pytest
from django.core.cache import cache
from rest_framework.test import APIClient

from core.models import Department, Room, User
from core.services import audit

PASSWORD = 'Str0ng-Pass!9'


def make_user(email, role=User.ROLE_CUSTOMER, password=PASSWORD, **extra):
    return User.objects.create_user(username=email, email=email, password=password, role=role, **extra)


@pytest.fixture(autouse=True)
def audit_inline(settings, tmp_path):
    """Run the activity trail inline and point its file sink at a temp file."""
    settings.AUDIT_ASYNC = False
    settings.AUDIT_LOG_FILE = str(tmp_path / 'activity.log')
    settings.AUDIT_SINK_RETRIES = 0
    settings.AUDIT_RETRY_DELAY = 0
    # throttle counters live in the cache
    cache.clear()
    yield
    audit.reset_recorder()


@pytest.fixture
def audit_lines(settings):
    def read():
        try:
            with open(settings.AUDIT_LOG_FILE, encoding='utf-8') as fh:
                return fh.read().splitlines()
        except FileNotFoundError:
            return []
    return read


@pytest.fixture
def guest(db):
    return make_user('guest1@example.com', first_name='Ada')


@pytest.fixture
def other_guest(db):
    return make_user('guest2@example.com', first_name='Grace')


@pytest.fixture
def staff_user(db):
    return make_user('staff@example.com', role=User.ROLE_STAFF)


@pytest.fixture
def manager_user(db):
    return make_user('manager@example.com', role=User.ROLE_MANAGER)


@pytest.fixture
def room_101(db):
    return Room.objects.create(number='101')


@pytest.fixture
def room_102(db):
    return Room.objects.create(number='102')


@pytest.fixture
def spa(db):
    return Department.objects.create(name='Spa', contacts=['555-0100'])


@pytest.fixture
def user_factory(db):
    return make_user


@pytest.fixture
def api_client():
    return APIClient()


@pytest.fixture
def staff_client(staff_user):
    c = APIClient()
    c.force_authenticate(user=staff_user)
    return c


@pytest.fixture
def manager_client(manager_user):
    c = APIClient()
    c.force_authenticate(user=manager_user)
    return c


@pytest.fixture
def guest_client(guest):
    c = APIClient()
    c.force_authenticate(user=guest)
    return c
