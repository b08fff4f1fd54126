"""
Integration tests for Canvas API client and endpoints.
Runs the full stack (paginator, retry policy, gate, dispatcher) against an
in-memory Canvas server.
"""

import threading
import time
import unittest
from unittest.mock import Mock
from urllib.parse import urlparse

import requests

from canvas_connector.client import CanvasClient
from canvas_connector.endpoints import fetch_assignments, fetch_courses, fetch_students, update_assignment_score
from canvas_connector.errors import CanvasHTTPError, PaginationLimitExceeded
from canvas_connector.gate import ConcurrencyGate
from canvas_connector.retry import RetryPolicy

BASE = "https://test.canvas.com/api/v1"


class FakeCanvasSession:
    """Minimal stand-in for requests.Session serving paged Canvas collections."""

    def __init__(self, collections, token="good_token", throttle=0, endless=False, delay=0.0):
        self.collections = collections
        self.token = token
        self.throttle = throttle
        self.endless = endless
        self.delay = delay
        self.calls = []
        self.grades = {}
        self.lock = threading.Lock()
        self.current = 0
        self.peak = 0

    def request(self, method, url, headers=None, params=None, json=None, timeout=None, **kwargs):
        with self.lock:
            self.calls.append((method, url, list(params or [])))
            self.current += 1
            self.peak = max(self.peak, self.current)
            throttled = self.throttle > 0
            if throttled:
                self.throttle -= 1
        try:
            if self.delay:
                time.sleep(self.delay)
            if headers.get("Authorization") != f"Bearer {self.token}":
                return self._response(401)
            if throttled:
                return self._response(403)
            path = urlparse(url).path.replace("/api/v1/", "", 1)
            if method == "PUT":
                with self.lock:
                    self.grades[path] = json["submission"]["posted_grade"]
                return self._response(200, {})
            if path not in self.collections:
                return self._response(404)
            query = dict(params or [])
            page, per_page = int(query["page"]), int(query["per_page"])
            if self.endless:
                return self._response(200, [{"id": page, "name": f"Course {page}", "course_code": "E"}])
            items = self.collections[path][(page - 1) * per_page:page * per_page]
            return self._response(200, items)
        finally:
            with self.lock:
                self.current -= 1

    @staticmethod
    def _response(status, body=None):
        response = Mock(spec=requests.Response)
        response.status_code = status
        response.reason = "Forbidden" if status == 403 else ""
        response.json.return_value = body
        return response

    def close(self):
        pass


def make_courses(n):
    return [{"id": i, "name": f"Course {i}", "course_code": f"C{i}"} for i in range(1, n + 1)]


class TestCanvasIntegration(unittest.TestCase):
    """Integration tests for Canvas API components."""

    def client_for(self, session, **kwargs):
        kwargs.setdefault("retry_policy", RetryPolicy(max_attempts=5, retry_delay=0))
        return CanvasClient(base_url=BASE, token="good_token", session=session, **kwargs)

    def test_fetch_all_courses_over_several_pages(self):
        """Test that 250 courses at 100 per page take three data pages plus the empty one."""
        session = FakeCanvasSession({"courses": make_courses(250)})

        result = fetch_courses(self.client_for(session))

        self.assertEqual(len(result), 250)
        self.assertEqual([c.id for c in result][:3], [1, 2, 3])
        self.assertEqual(len(session.calls), 4)

    def test_courses_to_students_to_assignments_flow(self):
        """Test the full pipeline from courses to their students and assignments."""
        session = FakeCanvasSession({
            "courses": make_courses(2),
            "courses/1/users": [
                {"id": 10, "name": "Ana", "email": "ana@x.edu"},
                {"id": 11, "name": "Bo"},
            ],
            "courses/1/assignments": [{"id": 100, "name": "HW 1"}, {"id": 101, "name": "HW 2"}],
        })
        client = self.client_for(session)

        courses = fetch_courses(client)
        students = fetch_students(courses.items[0].id, client=client)
        assignments = fetch_assignments(courses.items[0].id, client=client)

        self.assertEqual([s.name for s in students], ["Ana"])
        self.assertEqual(students.skipped, 1)
        self.assertEqual([a.name for a in assignments], ["HW 1", "HW 2"])

    def test_throttled_requests_recover(self):
        """Test that a burst of 403 responses is absorbed by the retry policy."""
        session = FakeCanvasSession({"courses": make_courses(3)}, throttle=4)

        result = fetch_courses(self.client_for(session))

        self.assertEqual(len(result), 3)
        # 4 throttled attempts, then page 1 and the empty page 2
        self.assertEqual(len(session.calls), 6)

    def test_bad_token_fails_with_401(self):
        """Test that a wrong token fails once, without retries, mentioning 401."""
        session = FakeCanvasSession({"courses": make_courses(3)})
        client = CanvasClient(base_url=BASE, token="wrong", session=session)

        with self.assertRaises(CanvasHTTPError) as ctx:
            fetch_courses(client)

        self.assertIn("401", str(ctx.exception))
        self.assertEqual(len(session.calls), 1)

    def test_endless_server_hits_page_cap(self):
        """Test that a server that never returns an empty page is stopped."""
        session = FakeCanvasSession({"courses": []}, endless=True)

        with self.assertRaises(PaginationLimitExceeded) as ctx:
            fetch_courses(self.client_for(session, max_pages=20))

        self.assertEqual(len(session.calls), 20)
        self.assertEqual(len(ctx.exception.items), 20)

    def test_parallel_fetches_share_gate(self):
        """Test that concurrent fetches from several threads respect one limit."""
        collections = {f"courses/{i}/assignments": [{"id": i, "name": "A"}] for i in range(12)}
        session = FakeCanvasSession(collections, delay=0.02)
        gate = ConcurrencyGate(3)
        client = self.client_for(session, gate=gate)
        results = {}

        def worker(course_id):
            results[course_id] = fetch_assignments(course_id, client=client)

        threads = [threading.Thread(target=worker, args=(i,)) for i in range(12)]
        for t in threads:
            t.start()
        for t in threads:
            t.join(timeout=10)

        self.assertEqual(len(results), 12)
        self.assertLessEqual(session.peak, 3)
        self.assertEqual(gate.in_flight, 0)

    def test_update_score_reaches_server(self):
        session = FakeCanvasSession({})

        update_assignment_score(1, 2, 3, 8.0, client=self.client_for(session))

        self.assertEqual(session.grades, {"courses/1/assignments/2/submissions/3": 8.0})


if __name__ == "__main__":
    unittest.main()
