"""
Integration tests for the hotel backend API.

These tests exercise the room endpoints end to end, role based access
control, the error envelope and the activity trail listing.  They use
Django REST Framework's APIClient within the APITestCase base class.

To run the tests:

```
pytest -q core/tests
```
"""

from rest_framework.test import APITestCase, APIClient
from rest_framework import status

from ..models import AuditEvent, Call, Department, Room, User


class HotelAPITests(APITestCase):
    def setUp(self) -> None:
        """Create one user per role and a few rooms."""
        self.manager = User.objects.create_user(
            username="manager1@example.com", email="manager1@example.com",
            password="Str0ng-Pass!9", role="manager",
        )
        self.staff = User.objects.create_user(
            username="staff1@example.com", email="staff1@example.com",
            password="Str0ng-Pass!9", role="staff",
        )
        self.guest = User.objects.create_user(
            username="guest1@example.com", email="guest1@example.com",
            password="Str0ng-Pass!9", role="customer", first_name="Ada",
        )
        self.guest2 = User.objects.create_user(
            username="guest2@example.com", email="guest2@example.com",
            password="Str0ng-Pass!9", role="customer",
        )
        for number in ("101", "102"):
            Room.objects.create(number=number)

        self.staff_client = APIClient()
        self.staff_client.force_authenticate(user=self.staff)
        self.manager_client = APIClient()
        self.manager_client.force_authenticate(user=self.manager)
        self.guest_client = APIClient()
        self.guest_client.force_authenticate(user=self.guest)

    # ------------------------------------------------------------------
    # Rooms
    # ------------------------------------------------------------------
    def test_assign_and_unassign_room(self) -> None:
        resp = self.staff_client.post(
            "/api/rooms/assign", {"customerId": self.guest.id, "roomNumber": "101"}, format="json"
        )
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertTrue(resp.data["ok"])
        self.assertEqual(resp.data["data"]["room"]["status"], "occupied")
        self.assertEqual(resp.data["data"]["room"]["assignedUser"], self.guest.id)
        self.guest.refresh_from_db()
        self.assertEqual(self.guest.room_number, "101")

        resp = self.staff_client.get("/api/rooms/available")
        self.assertEqual([r["roomNumber"] for r in resp.data["data"]], ["102"])

        resp = self.staff_client.post("/api/rooms/unassign", {"customerId": self.guest.id}, format="json")
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual(resp.data["data"]["room"]["status"], "available")

        resp = self.staff_client.post("/api/rooms/unassign", {"customerId": self.guest.id}, format="json")
        self.assertEqual(resp.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(resp.data["error"]["code"], "conflict")

    def test_conflicting_assignments(self) -> None:
        self.staff_client.post("/api/rooms/assign", {"customerId": self.guest.id, "roomNumber": "101"}, format="json")

        resp = self.staff_client.post(
            "/api/rooms/assign", {"customerId": self.guest2.id, "roomNumber": "101"}, format="json"
        )
        self.assertEqual(resp.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(resp.data, {"ok": False, "error": {"code": "conflict", "message": "Room is already occupied"}})

        resp = self.staff_client.post(
            "/api/rooms/assign", {"customerId": self.guest.id, "roomNumber": "102"}, format="json"
        )
        self.assertEqual(resp.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(resp.data["error"]["message"], "User already has room number 101 assigned.")

    def test_assign_unknown_room_or_customer(self) -> None:
        resp = self.staff_client.post(
            "/api/rooms/assign", {"customerId": self.guest.id, "roomNumber": "999"}, format="json"
        )
        self.assertEqual(resp.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(resp.data["error"]["code"], "not_found")

        resp = self.staff_client.post("/api/rooms/assign", {"customerId": 99999, "roomNumber": "101"}, format="json")
        self.assertEqual(resp.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(resp.data["error"]["message"], "Customer not found")

    def test_assign_requires_fields(self) -> None:
        resp = self.staff_client.post("/api/rooms/assign", {"roomNumber": "101"}, format="json")
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertFalse(resp.data["ok"])
        self.assertIn("customerId", resp.data["error"]["message"])

    def test_create_room(self) -> None:
        resp = self.staff_client.post("/api/rooms", {"roomNumber": "201"}, format="json")
        self.assertEqual(resp.status_code, status.HTTP_201_CREATED)
        self.assertEqual(resp.data["data"]["status"], "available")

        resp = self.staff_client.post("/api/rooms", {"roomNumber": "201"}, format="json")
        self.assertEqual(resp.status_code, status.HTTP_409_CONFLICT)

    def test_users_without_rooms(self) -> None:
        self.staff_client.post("/api/rooms/assign", {"customerId": self.guest.id, "roomNumber": "101"}, format="json")

        resp = self.staff_client.get("/api/rooms/users-without-rooms")
        ids = [u["id"] for u in resp.data["data"]]
        self.assertNotIn(self.guest.id, ids)
        self.assertIn(self.guest2.id, ids)

    def test_guest_cannot_manage_rooms(self) -> None:
        resp = self.guest_client.get("/api/rooms")
        self.assertEqual(resp.status_code, status.HTTP_403_FORBIDDEN)
        resp = self.guest_client.post(
            "/api/rooms/assign", {"customerId": self.guest.id, "roomNumber": "101"}, format="json"
        )
        self.assertEqual(resp.status_code, status.HTTP_403_FORBIDDEN)
        self.assertFalse(Room.objects.filter(status="occupied").exists())

    def test_anonymous_is_rejected(self) -> None:
        resp = APIClient().get("/api/rooms")
        self.assertEqual(resp.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertEqual(resp.data["error"]["code"], "not_authenticated")

    # ------------------------------------------------------------------
    # Users
    # ------------------------------------------------------------------
    def test_manager_manages_users(self) -> None:
        resp = self.manager_client.post(
            "/api/users", {"name": "Linus", "email": "Linus@Example.com", "role": "staff"}, format="json"
        )
        self.assertEqual(resp.status_code, status.HTTP_201_CREATED)
        self.assertEqual(resp.data["data"]["email"], "linus@example.com")
        self.assertTrue(resp.data["initialPassword"])
        user_id = resp.data["data"]["id"]

        resp = self.manager_client.put(f"/api/users/{user_id}/status", {"status": "inactive"}, format="json")
        self.assertEqual(resp.data["data"]["status"], "inactive")
        resp = self.manager_client.put(f"/api/users/{user_id}/role", {"role": "manager"}, format="json")
        self.assertEqual(resp.data["data"]["role"], "manager")

        resp = self.manager_client.delete(f"/api/users/{user_id}")
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertFalse(User.objects.filter(pk=user_id).exists())

    def test_duplicate_email_conflicts(self) -> None:
        resp = self.manager_client.post("/api/users", {"email": "guest1@example.com"}, format="json")
        self.assertEqual(resp.status_code, status.HTTP_409_CONFLICT)

    def test_staff_cannot_create_users(self) -> None:
        resp = self.staff_client.post("/api/users", {"email": "x@example.com"}, format="json")
        self.assertEqual(resp.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(resp.data["error"]["code"], "permission_denied")

    def test_manager_cannot_delete_self(self) -> None:
        resp = self.manager_client.delete(f"/api/users/{self.manager.id}")
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(resp.data, {"ok": False, "error": {"code": "invalid", "message": "You cannot delete your own account"}})
        self.assertTrue(User.objects.filter(pk=self.manager.id).exists())

    def test_user_search_and_pagination(self) -> None:
        resp = self.staff_client.get("/api/users", {"role": "customer", "pageSize": 1})
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual(resp.data["pagination"]["total"], 2)
        self.assertEqual(len(resp.data["data"]), 1)

        resp = self.staff_client.get("/api/users", {"q": "guest2"})
        self.assertEqual([u["email"] for u in resp.data["data"]], ["guest2@example.com"])

    # ------------------------------------------------------------------
    # Departments, calls and the activity trail
    # ------------------------------------------------------------------
    def test_departments(self) -> None:
        resp = self.manager_client.post("/api/departments", {"name": "Spa", "contact": "555-0100"}, format="json")
        self.assertEqual(resp.status_code, status.HTTP_201_CREATED)
        self.assertEqual(resp.data["data"]["contact"], "555-0100")

        resp = self.manager_client.post("/api/departments", {"name": "spa"}, format="json")
        self.assertEqual(resp.status_code, status.HTTP_409_CONFLICT)

        resp = self.staff_client.post("/api/departments", {"name": "Laundry"}, format="json")
        self.assertEqual(resp.status_code, status.HTTP_403_FORBIDDEN)
        self.assertFalse(resp.data["ok"])
        self.assertEqual(resp.data["error"]["message"], "Only managers can create departments")

        resp = self.guest_client.get("/api/departments")
        self.assertEqual([d["name"] for d in resp.data["data"]], ["Spa"])
        self.assertEqual(Department.objects.count(), 1)

    def test_calls(self) -> None:
        resp = self.staff_client.post(
            "/api/calls",
            {"userType": "Guest", "callTime": "10:15", "status": "completed", "duration": 90,
             "callerId": self.guest.id, "receiverId": self.staff.id},
            format="json",
        )
        self.assertEqual(resp.status_code, status.HTTP_201_CREATED)
        self.assertEqual(Call.objects.get().caller, self.guest)
        self.assertTrue(AuditEvent.objects.filter(action="Created call at 10:15 with status completed").exists())

        resp = self.staff_client.get("/api/calls")
        self.assertEqual(len(resp.data["data"]), 1)

        resp = self.guest_client.get("/api/calls")
        self.assertEqual(resp.status_code, status.HTTP_403_FORBIDDEN)

    def test_activities(self) -> None:
        self.staff_client.post("/api/rooms/assign", {"customerId": self.guest.id, "roomNumber": "101"}, format="json")
        self.staff_client.post("/api/rooms/unassign", {"customerId": self.guest.id}, format="json")

        resp = self.manager_client.get("/api/activities")
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        actions = [a["action"] for a in resp.data["data"]]
        self.assertEqual(actions, ["Unassigned from room 101", "Assigned room 101 to guest1@example.com"])

        resp = self.manager_client.get("/api/activities", {"q": "assigned room", "pageSize": 1})
        self.assertEqual(resp.data["pagination"]["total"], 1)

        resp = self.manager_client.get("/api/activities", {"page": "x"})
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(resp.data["error"]["message"], "page and pageSize must be integers")

        resp = self.staff_client.get("/api/activities")
        self.assertEqual(resp.status_code, status.HTTP_403_FORBIDDEN)

    # ------------------------------------------------------------------
    # Plumbing
    # ------------------------------------------------------------------
    def test_unknown_api_route(self) -> None:
        resp = self.staff_client.get("/api/nothing-here")
        self.assertEqual(resp.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(resp.json()["error"]["code"], "not_found")

    def test_healthz(self) -> None:
        resp = self.client.get("/healthz")
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual(resp.json(), {"ok": True, "db": True})
