"""
Locust Load Test Suite

Run scenarios:
  locust -f locustfile.py --tags concurrency  # Burst bookings on one event
  locust -f locustfile.py --tags gate         # Verification at the gate
  locust -f locustfile.py --tags edge         # Test bad input
  locust -f locustfile.py                     # All tests

Admin credentials come from LOAD_ADMIN_EMAIL / LOAD_ADMIN_PASSWORD. The
account is registered on first use if registration is still open.
"""

import os
import random
from collections import Counter

from locust import HttpUser, task, between, tag, events

ADMIN_EMAIL = os.getenv("LOAD_ADMIN_EMAIL", "loadtest-admin@example.com")
ADMIN_PASSWORD = os.getenv("LOAD_ADMIN_PASSWORD", "loadtest-password")

# Shared state
EVENT_IDS = []
TICKET_NUMBERS = []
CONCURRENCY_EVENT_ID = None

RECEIPT_PNG = b"\x89PNG\r\n\x1a\n" + b"\x00" * 256


def admin_headers(client) -> dict:
    client.post("/api/v1/auth/register", json={
        "name": "Load Test Admin",
        "email": ADMIN_EMAIL,
        "password": ADMIN_PASSWORD,
    })
    resp = client.post("/api/v1/auth/login", json={
        "email": ADMIN_EMAIL,
        "password": ADMIN_PASSWORD,
    })
    if resp.status_code == 200:
        return {"Authorization": f"Bearer {resp.json()['access_token']}"}
    return {}


def booking_form(event_id: str) -> dict:
    n = random.randint(1, 10**6)
    return {
        "first_name": f"Load{n}",
        "last_name": "Tester",
        "contact_number": f"+63 9{n:09d}",
        "email_address": f"load_{n}@example.com",
        "city_name": random.choice(["Manila", "Cebu", "Davao"]),
        "ticket_type": random.choice(["Standard", "VIP"]),
        "event_id": event_id,
    }


def receipt():
    return {"receipt_image": ("receipt.png", RECEIPT_PNG, "image/png")}


@events.test_start.add_listener
def on_test_start(environment, **kwargs):
    print("\n" + "="*60)
    print("SETUP: Creating concurrency test event...")
    print("="*60)


@events.test_stop.add_listener
def on_test_stop(environment, **kwargs):
    """Every ticket number handed out during the run must be unique."""
    duplicates = [n for n, count in Counter(TICKET_NUMBERS).items() if count > 1]
    print("\n" + "="*60)
    print(f"Issued {len(TICKET_NUMBERS)} ticket numbers, {len(duplicates)} duplicates")
    if duplicates:
        print(f"DUPLICATES: {duplicates[:20]}")
        environment.process_exit_code = 1
    print("="*60)


class ConcurrencyUser(HttpUser):
    """
    TEST 1: Concurrency - many attendees booking one event at once

    Run: locust -f locustfile.py --tags concurrency -u 200 -r 100 --run-time 30s

    After test, verify:
      SELECT ticket_number, COUNT(*) FROM bookings GROUP BY 1 HAVING COUNT(*) > 1;
    Should return no rows
    """
    wait_time = between(0, 0.1)

    def on_start(self):
        global CONCURRENCY_EVENT_ID
        if CONCURRENCY_EVENT_ID:
            return

        headers = admin_headers(self.client)
        resp = self.client.post("/api/v1/events/",
            data={
                "title": "Concurrency Test Event",
                "description": "Burst booking target",
                "date": "2026-12-31",
                "location": "Test",
            },
            headers=headers
        )
        if resp.status_code == 201:
            CONCURRENCY_EVENT_ID = resp.json()["id"]
            print(f"\n✓ Created event {CONCURRENCY_EVENT_ID}\n")

    @tag("concurrency")
    @task
    def book_same_event(self):
        """All users book the same event; every ticket number must differ."""
        if not CONCURRENCY_EVENT_ID:
            return

        with self.client.post("/api/v1/bookings/",
            data=booking_form(CONCURRENCY_EVENT_ID),
            files=receipt(),
            catch_response=True
        ) as resp:
            if resp.status_code == 201:
                TICKET_NUMBERS.append(resp.json()["ticket_number"])
                resp.success()
            elif resp.status_code in (409, 503):
                resp.success()  # Expected under extreme contention: bounded retries gave up
            else:
                resp.failure(f"Unexpected: {resp.status_code}")


class GateUser(HttpUser):
    """
    TEST 2: Gate verification throughput

    Run: locust -f locustfile.py --tags gate -u 100 -r 20 --run-time 60s

    Verification is a public read and should stay fast while bookings are written.
    """
    wait_time = between(0.1, 0.5)

    @tag("gate")
    @task(10)
    def verify_known_ticket(self):
        if TICKET_NUMBERS:
            self.client.get(f"/api/v1/bookings/verify/{random.choice(TICKET_NUMBERS)}",
                name="/api/v1/bookings/verify/{ticket_number}")

    @tag("gate")
    @task(3)
    def verify_unknown_ticket(self):
        with self.client.get(f"/api/v1/bookings/verify/{random.randint(100000, 999999)}",
            name="/api/v1/bookings/verify/{random}",
            catch_response=True
        ) as resp:
            if resp.status_code == 200:
                resp.success()
            else:
                resp.failure(f"Expected 200, got {resp.status_code}")

    @tag("gate")
    @task(1)
    def health_check(self):
        self.client.get("/health")


class EdgeCaseUser(HttpUser):
    """
    TEST 3: Edge cases - Bad input handling

    Run: locust -f locustfile.py --tags edge -u 20 -r 5 --run-time 30s

    System should NOT crash, return proper error codes.
    """
    wait_time = between(0.5, 1.5)

    @tag("edge")
    @task
    def missing_receipt(self):
        with self.client.post("/api/v1/bookings/",
            data=booking_form("E1"),
            catch_response=True
        ) as resp:
            if resp.status_code == 422:
                resp.success()
            else:
                resp.failure(f"Expected 422, got {resp.status_code}")

    @tag("edge")
    @task
    def blank_field(self):
        form = booking_form("E1")
        form["city_name"] = "   "
        with self.client.post("/api/v1/bookings/",
            data=form,
            files=receipt(),
            catch_response=True
        ) as resp:
            if resp.status_code == 400:
                resp.success()
            else:
                resp.failure(f"Expected 400, got {resp.status_code}")

    @tag("edge")
    @task
    def invalid_ticket_type(self):
        form = booking_form("E1")
        form["ticket_type"] = "Backstage"
        with self.client.post("/api/v1/bookings/",
            data=form,
            files=receipt(),
            catch_response=True
        ) as resp:
            if resp.status_code == 400:
                resp.success()
            else:
                resp.failure(f"Expected 400, got {resp.status_code}")

    @tag("edge")
    @task
    def malformed_ticket_number(self):
        with self.client.get("/api/v1/bookings/verify/not-a-ticket",
            catch_response=True
        ) as resp:
            if resp.status_code == 200 and resp.json()["valid"] is False:
                resp.success()
            else:
                resp.failure(f"Expected valid=false, got {resp.status_code}")

    @tag("edge")
    @task
    def missing_auth(self):
        """Admin listing without a token."""
        with self.client.get("/api/v1/bookings/", catch_response=True) as resp:
            if resp.status_code == 401:
                resp.success()
            else:
                resp.failure(f"Expected 401, got {resp.status_code}")


class RealisticUser(HttpUser):
    """
    TEST 4: Realistic mixed workload

    Run: locust -f locustfile.py -u 200 -r 20 --run-time 120s

    Simulates real traffic:
      - Mostly browsing (70%)
      - Some bookings (20%)
      - Gate checks (10%)
    """
    wait_time = between(1, 3)

    @task(50)
    def browse_events(self):
        resp = self.client.get("/api/v1/events/")
        if resp.status_code == 200:
            for event in resp.json():
                if event["id"] not in EVENT_IDS:
                    EVENT_IDS.append(event["id"])

    @task(20)
    def view_event(self):
        if EVENT_IDS:
            self.client.get(f"/api/v1/events/{random.choice(EVENT_IDS)}",
                name="/api/v1/events/{id}")

    @task(20)
    def book_ticket(self):
        if EVENT_IDS:
            resp = self.client.post("/api/v1/bookings/",
                data=booking_form(random.choice(EVENT_IDS)),
                files=receipt())
            if resp.status_code == 201:
                TICKET_NUMBERS.append(resp.json()["ticket_number"])

    @task(10)
    def verify_ticket(self):
        if TICKET_NUMBERS:
            self.client.get(f"/api/v1/bookings/verify/{random.choice(TICKET_NUMBERS)}",
                name="/api/v1/bookings/verify/{ticket_number}")
