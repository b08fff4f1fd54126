"""Canvas API endpoint functions."""

import logging
import threading
from typing import Any, Dict, List, Optional

from constants import DEFAULT_PER_PAGE, STUDENTS_PER_PAGE

from .client import CanvasClient
from .models import Assignment, Course, Rubric, RubricSubmission, Student, Submission
from .pagination import PageResult
from .transport import HttpMethod

logger = logging.getLogger(__name__)

_default_client: Optional[CanvasClient] = None
_default_client_lock = threading.Lock()


def get_default_client() -> CanvasClient:
    """Client built from config on first use and shared afterwards."""
    global _default_client
    with _default_client_lock:
        if _default_client is None:
            _default_client = CanvasClient()
        return _default_client


def _client(client: Optional[CanvasClient]) -> CanvasClient:
    return client if client is not None else get_default_client()


# ========================================
# Courses
# ========================================

def fetch_courses(
    client: Optional[CanvasClient] = None,
    enrollment_role: Optional[str] = "TeacherEnrollment",
    cancel_event: Optional[threading.Event] = None,
) -> PageResult:
    """Fetch every course the user holds ``enrollment_role`` in (all courses if None)."""
    params = [("enrollment_role", enrollment_role)] if enrollment_role else []
    return _client(client).get_paginated(
        "courses", params=params, mapper=Course.from_json,
        per_page=DEFAULT_PER_PAGE, cancel_event=cancel_event,
    )


def fetch_course(course_id: int, client: Optional[CanvasClient] = None) -> Optional[Course]:
    data = _client(client).get(f"courses/{course_id}")
    return Course.from_json(data) if isinstance(data, dict) else None


def fetch_self(client: Optional[CanvasClient] = None) -> Dict[str, Any]:
    """Return the profile of the token's owner; a quick way to check credentials."""
    c = _client(client)
    response = c.request(HttpMethod.GET, "users/self")
    return c.json_body(response, HttpMethod.GET, "users/self")


# ========================================
# Students & Assignments
# ========================================

def fetch_students(
    course_id: int,
    client: Optional[CanvasClient] = None,
    cancel_event: Optional[threading.Event] = None,
) -> PageResult:
    """Fetch all students enrolled in a course, with their email addresses."""
    params = [("enrollment_type[]", "student"), ("include[]", "email")]
    return _client(client).get_paginated(
        f"courses/{course_id}/users", params=params, mapper=Student.from_json,
        per_page=STUDENTS_PER_PAGE, cancel_event=cancel_event,
    )


def fetch_assignments(
    course_id: int,
    client: Optional[CanvasClient] = None,
    cancel_event: Optional[threading.Event] = None,
) -> PageResult:
    return _client(client).get_paginated(
        f"courses/{course_id}/assignments", mapper=Assignment.from_json,
        per_page=DEFAULT_PER_PAGE, cancel_event=cancel_event,
    )


def create_assignment(
    course_id: int,
    name: str,
    client: Optional[CanvasClient] = None,
    points_possible: float = 10.0,
    submission_types: Optional[List[str]] = None,
    published: bool = True,
) -> Optional[Assignment]:
    """Create a points-graded assignment and return it as Canvas stored it."""
    body = {
        "assignment": {
            "name": name,
            "points_possible": points_possible,
            "grading_type": "points",
            "submission_types": submission_types or ["online_upload"],
            "published": published,
        }
    }
    c = _client(client)
    endpoint = f"courses/{course_id}/assignments"
    response = c.post(endpoint, body)
    logger.info("Assignment '%s' created in course %s", name, course_id)
    return Assignment.from_json(c.json_body(response, HttpMethod.POST, endpoint))


def create_announcement(course_id: int, title: str, message: str, client: Optional[CanvasClient] = None) -> None:
    body = {"title": title, "message": message, "is_announcement": True}
    _client(client).post(f"courses/{course_id}/discussion_topics", body)


# ========================================
# Submissions & Grades
# ========================================

def fetch_submissions(
    course_id: int,
    assignment_id: int,
    client: Optional[CanvasClient] = None,
    include_comments: bool = False,
    cancel_event: Optional[threading.Event] = None,
) -> PageResult:
    """Fetch every submission of an assignment."""
    params = [("include[]", "submission_comments")] if include_comments else []
    return _client(client).get_paginated(
        f"courses/{course_id}/assignments/{assignment_id}/submissions",
        params=params, mapper=Submission.from_json,
        per_page=DEFAULT_PER_PAGE, cancel_event=cancel_event,
    )


def fetch_submission(
    course_id: int,
    assignment_id: int,
    user_id: int,
    client: Optional[CanvasClient] = None,
) -> Optional[Submission]:
    data = _client(client).get(f"courses/{course_id}/assignments/{assignment_id}/submissions/{user_id}")
    return Submission.from_json(data) if isinstance(data, dict) else None


def update_assignment_score(
    course_id: int,
    assignment_id: int,
    student_id: int,
    score: Optional[float],
    client: Optional[CanvasClient] = None,
) -> None:
    """Post a grade for one student; a score of None clears the grade."""
    body = {"submission": {"posted_grade": score if score is not None else ""}}
    _client(client).put(
        f"courses/{course_id}/assignments/{assignment_id}/submissions/{student_id}", body
    )


def add_comment(
    course_id: int,
    assignment_id: int,
    user_id: int,
    text: str,
    file_ids: Optional[List[int]] = None,
    client: Optional[CanvasClient] = None,
) -> None:
    comment: Dict[str, Any] = {"text_comment": text}
    if file_ids:
        comment["file_ids"] = list(file_ids)
    _client(client).put(
        f"courses/{course_id}/assignments/{assignment_id}/submissions/{user_id}",
        {"comment": comment},
    )


def delete_comment(
    course_id: int,
    assignment_id: int,
    user_id: int,
    comment_id: int,
    client: Optional[CanvasClient] = None,
) -> None:
    _client(client).delete(
        f"courses/{course_id}/assignments/{assignment_id}/submissions/{user_id}/comments/{comment_id}"
    )


# ========================================
# Rubrics
# ========================================

def fetch_rubric(course_id: int, rubric_id: int, client: Optional[CanvasClient] = None) -> Optional[Rubric]:
    data = _client(client).get(f"courses/{course_id}/rubrics/{rubric_id}")
    rubric = Rubric.from_json(data) if isinstance(data, dict) else None
    if rubric is None:
        logger.warning("Rubric %s in course %s could not be parsed", rubric_id, course_id)
    return rubric


def create_rubric(course_id: int, rubric: RubricSubmission, client: Optional[CanvasClient] = None) -> Dict[str, Any]:
    c = _client(client)
    endpoint = f"courses/{course_id}/rubrics"
    response = c.post(endpoint, rubric.to_payload())
    return c.json_body(response, HttpMethod.POST, endpoint)
