"""
Regression tests for Canvas API compatibility.
Ensures the client keeps following Canvas' pagination and auth conventions.
"""

import unittest
from unittest.mock import Mock

from canvas_connector.client import CanvasClient
from canvas_connector.endpoints import fetch_assignments, fetch_courses, fetch_students
from canvas_connector.errors import CanvasHTTPError, RetriesExhaustedError
from canvas_connector.retry import RetryPolicy


def make_response(status_code=200, json_data=None):
    response = Mock()
    response.status_code = status_code
    response.reason = ""
    response.json.return_value = json_data
    return response


class TestCanvasAPIRegression(unittest.TestCase):
    """Regression tests for Canvas API behavior."""

    def setUp(self):
        self.session = Mock()
        self.client = CanvasClient(
            base_url="https://test.canvas.com/api/v1", token="test_token_123",
            session=self.session, retry_policy=RetryPolicy(max_attempts=5, retry_delay=0),
        )

    def test_pagination_stops_on_empty_page(self):
        """
        REGRESSION: pagination ends when a page comes back as an empty array,
        not when a page is shorter than per_page.
        """
        self.session.request.side_effect = [
            make_response(200, [{"id": 1, "name": "A", "course_code": "A"}]),
            make_response(200, [{"id": 2, "name": "B", "course_code": "B"}]),
            make_response(200, []),
        ]

        result = fetch_courses(self.client)

        self.assertEqual([c.id for c in result], [1, 2])
        self.assertEqual(self.session.request.call_count, 3)

    def test_page_numbers_start_at_one(self):
        """
        REGRESSION: Canvas pages are 1-based.
        """
        self.session.request.side_effect = [make_response(200, [{"id": 1, "name": "A"}]), make_response(200, [])]

        fetch_assignments(3, client=self.client)

        pages = [dict(c.kwargs["params"])["page"] for c in self.session.request.call_args_list]
        self.assertEqual(pages, ["1", "2"])

    def test_students_use_larger_page_size(self):
        """
        REGRESSION: the users endpoint is fetched 150 per page.
        """
        self.session.request.return_value = make_response(200, [])

        fetch_students(3, client=self.client)

        self.assertEqual(dict(self.session.request.call_args.kwargs["params"])["per_page"], "150")

    def test_client_includes_auth_header(self):
        """
        REGRESSION: every request carries the Bearer token.
        """
        self.session.request.return_value = make_response(200, {})

        self.client.get("courses/1")

        headers = self.session.request.call_args.kwargs["headers"]
        self.assertEqual(headers["Authorization"], "Bearer test_token_123")

    def test_only_403_is_retried(self):
        """
        REGRESSION: Canvas signals throttling with 403; other errors fail immediately.
        """
        self.session.request.return_value = make_response(502)
        with self.assertRaises(CanvasHTTPError):
            self.client.get("courses/1")
        self.assertEqual(self.session.request.call_count, 1)

        self.session.request.reset_mock()
        self.session.request.return_value = make_response(403)
        with self.assertRaises(RetriesExhaustedError):
            self.client.get("courses/1")
        self.assertEqual(self.session.request.call_count, 5)

    def test_error_message_names_verb_url_and_status(self):
        """
        REGRESSION: errors must be loggable without re-deriving context.
        """
        self.session.request.return_value = make_response(404)

        with self.assertRaises(CanvasHTTPError) as ctx:
            self.client.put("courses/1/assignments/2/submissions/3", {})

        message = str(ctx.exception)
        self.assertIn("PUT", message)
        self.assertIn("https://test.canvas.com/api/v1/courses/1/assignments/2/submissions/3", message)
        self.assertIn("404", message)

    def test_client_has_request_timeout(self):
        """
        REGRESSION: Client should set reasonable timeout to prevent hanging.
        """
        self.session.request.return_value = make_response(200, {})

        self.client.get("courses/1")

        call_kwargs = self.session.request.call_args.kwargs
        self.assertIn('timeout', call_kwargs)
        self.assertGreater(call_kwargs['timeout'], 0)


if __name__ == "__main__":
    unittest.main()
