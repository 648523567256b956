"""
Locust Load Test Suite

Expects a running API with at least one active facility seeded
(LOAD_FACILITY, default "auditorium").

Run scenarios:
  locust -f locustfile.py --tags contention   # Many employees, one slot
  locust -f locustfile.py --tags throughput   # Calendar cache
  locust -f locustfile.py --tags edge         # Bad input
  locust -f locustfile.py                     # All tests
"""

import os
import random
from datetime import date, datetime, timedelta

from locust import HttpUser, task, between, tag, events

FACILITY = os.environ.get("LOAD_FACILITY", "auditorium")
PASSWORD = "loadtest-password"

# One contested slot per run, far enough ahead not to collide with real data
CONTESTED_DAY = date.today() + timedelta(days=random.randint(200, 300))


def random_employee_id():
    return random.randint(100_000, 999_999)


def slot_body(day: date, start_hour: int, end_hour: int, title: str = "Load test") -> dict:
    start = datetime(day.year, day.month, day.day, start_hour)
    end = datetime(day.year, day.month, day.day, end_hour)
    return {
        "title": title,
        "purpose": "Load test",
        "date": day.isoformat(),
        "start_time": start.isoformat(),
        "end_time": end.isoformat(),
    }


@events.test_start.add_listener
def on_test_start(environment, **kwargs):
    print("\n" + "=" * 60)
    print(f"Facility under test: {FACILITY}; contested day: {CONTESTED_DAY}")
    print("=" * 60)


class EmployeeUser(HttpUser):
    """Registers a fresh employee and keeps the session cookie on the client."""

    abstract = True

    def on_start(self):
        self.employee_id = random_employee_id()
        self.client.post("/api/v1/auth/register", json={
            "employee_id": self.employee_id,
            "name": f"Load {self.employee_id}",
            "password": PASSWORD,
        })
        resp = self.client.post("/api/v1/auth/login", json={
            "employee_id": self.employee_id,
            "password": PASSWORD,
        })
        self.logged_in = resp.status_code == 200


class ContentionUser(EmployeeUser):
    """
    TEST 1: Contention - N employees request the same slot

    Run: locust -f locustfile.py --tags contention -u 100 -r 50 --run-time 30s

    After test, verify exactly one active booking holds the slot:
      SELECT COUNT(*) FROM bookings
      WHERE start_time = '<CONTESTED_DAY> 09:00' AND status != 'REJECTED';
    Should be 1
    """
    wait_time = between(0, 0.1)

    @tag("contention")
    @task
    def request_contested_slot(self):
        if not self.logged_in:
            return
        with self.client.post(
            f"/api/v1/facility/{FACILITY}",
            json=slot_body(CONTESTED_DAY, 9, 10),
            name="/api/v1/facility/{slug} [contested]",
            catch_response=True,
        ) as resp:
            if resp.status_code in (201, 409):
                resp.success()  # 409: slot already taken
            else:
                resp.failure(f"Unexpected: {resp.status_code}")


class ThroughputUser(EmployeeUser):
    """
    TEST 2: Throughput - Calendar cache effectiveness

    Run twice:
      1. With Redis: locust -f locustfile.py --tags throughput -u 100 -r 20 --run-time 60s
      2. Without Redis: REDIS_ENABLED=false, run again

    Compare avg response time, requests/sec and P95/P99 latency.
    """
    wait_time = between(0.1, 0.5)

    @tag("throughput", "read")
    @task(10)
    def read_calendar(self):
        self.client.get(f"/api/v1/facility/{FACILITY}", name="/api/v1/facility/{slug} [cached]")

    @tag("throughput", "read")
    @task(3)
    def read_dashboard(self):
        self.client.get("/api/v1/dashboard")

    @tag("throughput")
    @task(1)
    def health_check(self):
        self.client.get("/health")


class EdgeCaseUser(EmployeeUser):
    """
    TEST 3: Edge cases - Bad input handling

    Run: locust -f locustfile.py --tags edge -u 20 -r 5 --run-time 30s

    System should NOT crash and should return proper error codes.
    """
    wait_time = between(0.5, 1.5)

    def _expect(self, resp, codes):
        if resp.status_code in codes:
            resp.success()
        else:
            resp.failure(f"Expected {codes}, got {resp.status_code}")

    @tag("edge")
    @task
    def unknown_facility(self):
        with self.client.post(
            "/api/v1/facility/no-such-facility",
            json=slot_body(CONTESTED_DAY, 11, 12),
            name="/api/v1/facility/{slug} [unknown]",
            catch_response=True,
        ) as resp:
            self._expect(resp, (404,))

    @tag("edge")
    @task
    def end_before_start(self):
        with self.client.post(
            f"/api/v1/facility/{FACILITY}",
            json=slot_body(CONTESTED_DAY, 12, 11),
            name="/api/v1/facility/{slug} [inverted]",
            catch_response=True,
        ) as resp:
            self._expect(resp, (400,))

    @tag("edge")
    @task
    def malformed_json(self):
        with self.client.post(
            f"/api/v1/facility/{FACILITY}",
            data="not json at all",
            headers={"Content-Type": "application/json"},
            name="/api/v1/facility/{slug} [garbage]",
            catch_response=True,
        ) as resp:
            self._expect(resp, (400,))

    @tag("edge")
    @task
    def approve_without_role(self):
        with self.client.post(
            "/api/v1/approvals/gd/1/approve",
            name="/api/v1/approvals/gd/{id}/approve [employee]",
            catch_response=True,
        ) as resp:
            self._expect(resp, (403,))

    @tag("edge")
    @task
    def missing_session(self):
        with self.client.get(
            "/api/v1/bookings/mine",
            cookies={"sid": "forged"},
            name="/api/v1/bookings/mine [forged]",
            catch_response=True,
        ) as resp:
            self._expect(resp, (401,))


class RealisticUser(EmployeeUser):
    """
    TEST 4: Realistic mixed workload

    Run: locust -f locustfile.py -u 200 -r 20 --run-time 120s

    Mostly calendar and dashboard reads, occasional booking requests
    on random future slots.
    """
    wait_time = between(1, 3)

    @task(50)
    def browse_calendar(self):
        self.client.get(f"/api/v1/facility/{FACILITY}", name="/api/v1/facility/{slug}")

    @task(20)
    def view_dashboard(self):
        self.client.get("/api/v1/dashboard")

    @task(10)
    def my_bookings(self):
        self.client.get("/api/v1/bookings/mine")

    @task(5)
    def request_booking(self):
        if not self.logged_in:
            return
        day = date.today() + timedelta(days=random.randint(1, 90))
        start = random.randint(8, 17)
        with self.client.post(
            f"/api/v1/facility/{FACILITY}",
            json=slot_body(day, start, start + 1, title=f"Meeting {random.randint(1, 10000)}"),
            name="/api/v1/facility/{slug} [request]",
            catch_response=True,
        ) as resp:
            if resp.status_code in (201, 409):
                resp.success()
            else:
                resp.failure(f"Unexpected: {resp.status_code}")
