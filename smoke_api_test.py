#!/usr/bin/env python3
"""
Smoke test for a running hotel backend.

Logs in as each demo user (see ``manage.py ensure_demo_users``), calls
the endpoints that role may use and reports failures.  A room is
assigned to the demo guest and released again so the allocation path
is exercised end to end.

    python manage.py seed_hotel && python manage.py ensure_demo_users
    python manage.py runserver &
    python smoke_api_test.py
"""
import os
import sys
import time
from dataclasses import dataclass
from typing import Dict, Optional

import requests

BASE_URL = os.getenv("SMOKE_BASE_URL", "http://127.0.0.1:8000")
PASSWORD = os.getenv("SMOKE_PASSWORD", "hotel123")

DEMO_USERS = {
    "admin": "admin@hotel.local",
    "manager": "manager@hotel.local",
    "staff": "staff@hotel.local",
    "customer": "guest@hotel.local",
}


@dataclass
class SmokeResult:
    success: bool
    endpoint: str
    method: str
    status_code: int
    response_time: float
    error_message: str = ""
    user_role: str = ""


class SmokeTester:
    def __init__(self):
        self.session = requests.Session()
        self.headers = {}
        self.current_role = None
        self.results = []
        self.errors = []

    def reset(self):
        self.session = requests.Session()
        self.headers = {}
        self.current_role = None

    def login(self, role: str) -> Optional[dict]:
        email = DEMO_USERS[role]
        print(f"Logging in as {email} ({role})...")
        self.current_role = role
        result, body = self.call("POST", "/api/auth/login", {"email": email, "password": PASSWORD})
        if not result.success:
            return None
        self.headers = {"Authorization": f"Token {body['token']}"}
        return body["user"]

    def call(self, method: str, endpoint: str, data: Optional[Dict] = None, expected_status: int = 200):
        url = f"{BASE_URL}{endpoint}"
        start = time.time()
        body = None
        try:
            response = self.session.request(method, url, json=data, headers=self.headers, timeout=10)
            elapsed = time.time() - start
            try:
                body = response.json()
            except ValueError:
                body = None
            result = SmokeResult(
                success=response.status_code == expected_status,
                endpoint=endpoint,
                method=method,
                status_code=response.status_code,
                response_time=elapsed,
                error_message="" if response.status_code == expected_status else response.text[:200],
                user_role=self.current_role,
            )
        except requests.RequestException as e:
            result = SmokeResult(
                success=False,
                endpoint=endpoint,
                method=method,
                status_code=0,
                response_time=time.time() - start,
                error_message=str(e),
                user_role=self.current_role,
            )

        mark = "ok  " if result.success else "FAIL"
        print(f"  {mark} {method} {endpoint} -> {result.status_code} ({result.response_time:.2f}s)")
        self.results.append(result)
        if not result.success:
            self.errors.append(result)
        return result, body

    def run_role(self, role: str):
        if not self.login(role):
            return
        self.call("GET", "/healthz")
        self.call("GET", "/api/auth/me")
        self.call("GET", "/api/departments")
        self.call("GET", "/api/bookings")

        if role == "customer":
            self.call("GET", "/api/rooms", expected_status=403)
            self.call("GET", "/api/activities", expected_status=403)
        else:
            self.call("GET", "/api/rooms")
            self.call("GET", "/api/rooms/available")
            self.call("GET", "/api/rooms/users-without-rooms")
            self.call("GET", "/api/users")
            self.call("GET", "/api/calls")
            if role in ("manager", "admin"):
                self.call("GET", "/api/activities")

        self.call("POST", "/api/auth/logout")

    def run_allocation_round_trip(self):
        """Assign a free room to the demo guest and release it again."""
        if not self.login("staff"):
            return
        _, guests = self.call("GET", "/api/users?role=customer&q=guest@hotel.local")
        _, rooms = self.call("GET", "/api/rooms/available")
        if not guests or not guests.get("data") or not rooms or not rooms.get("data"):
            print("  skipping allocation round trip: no guest or no free room (run seed_hotel)")
            return
        guest = guests["data"][0]
        if guest["roomNumber"]:
            self.call("POST", "/api/rooms/unassign", {"customerId": guest["id"]})
        room_number = rooms["data"][0]["roomNumber"]
        self.call("POST", "/api/rooms/assign", {"customerId": guest["id"], "roomNumber": room_number})
        self.call("POST", "/api/rooms/assign", {"customerId": guest["id"], "roomNumber": room_number},
                  expected_status=409)
        self.call("POST", "/api/rooms/unassign", {"customerId": guest["id"]})
        self.call("POST", "/api/rooms/unassign", {"customerId": guest["id"]}, expected_status=409)
        self.call("POST", "/api/auth/logout")

    def run(self) -> bool:
        for role in DEMO_USERS:
            self.run_role(role)
            self.reset()
        self.run_allocation_round_trip()
        self.report()
        return not self.errors

    def report(self):
        total = len(self.results)
        passed = sum(1 for r in self.results if r.success)
        print(f"\n{passed}/{total} calls behaved as expected")
        for i, error in enumerate(self.errors, 1):
            print(f"{i}. [{error.user_role}] {error.method} {error.endpoint} -> {error.status_code}")
            print(f"   {error.error_message}")


def main():
    tester = SmokeTester()
    sys.exit(0 if tester.run() else 1)


if __name__ == "__main__":
    main()
