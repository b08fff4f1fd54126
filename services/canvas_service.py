"""Canvas service layer combining several API calls into grading workflows."""

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Dict, Iterable, List, Mapping, Optional, Tuple

from canvas_connector.client import CanvasClient
from canvas_connector.endpoints import fetch_submission, update_assignment_score
from canvas_connector.errors import CanvasAPIError
from canvas_connector.models import Assignment, Submission

logger = logging.getLogger(__name__)


def fetch_submissions_for_student(
    client: CanvasClient,
    course_id: int,
    user_id: int,
    assignment_ids: Iterable[int],
    on_progress: Optional[Callable[[], None]] = None,
) -> List[Submission]:
    """Fetch one student's submission for each assignment, in the given order."""
    submissions: List[Submission] = []
    for assignment_id in assignment_ids:
        if on_progress is not None:
            on_progress()
        submission = fetch_submission(course_id, assignment_id, user_id, client=client)
        if submission is not None:
            submissions.append(submission)
    return submissions


def latest_submissions_by_assignment(
    assignments: Iterable[Assignment],
    submissions: Iterable[Submission],
) -> Dict[int, Tuple[Assignment, Optional[Submission]]]:
    """
    Pair every assignment with its most recently submitted submission.
    Assignments without a submission map to None; unsubmitted entries lose to
    any submission that has a timestamp.
    """
    by_assignment: Dict[int, List[Submission]] = {}
    for submission in submissions:
        by_assignment.setdefault(submission.assignment_id, []).append(submission)

    result: Dict[int, Tuple[Assignment, Optional[Submission]]] = {}
    for assignment in assignments:
        candidates = by_assignment.get(assignment.id, [])
        latest = None
        for candidate in candidates:
            if latest is None:
                latest = candidate
            elif candidate.submitted_at is not None and (
                latest.submitted_at is None or candidate.submitted_at > latest.submitted_at
            ):
                latest = candidate
        result[assignment.id] = (assignment, latest)
    return result


def post_grades(
    client: CanvasClient,
    course_id: int,
    assignment_id: int,
    grades: Mapping[int, Optional[float]],
    max_workers: int = 8,
) -> Dict[int, CanvasAPIError]:
    """
    Post grades for many students in parallel.

    Worker threads share the client's concurrency gate, so the number of
    requests on the wire never exceeds its limit. Returns the failures keyed by
    student id; an empty dict means every grade was posted.
    """
    def post(item: Tuple[int, Optional[float]]) -> Tuple[int, Optional[CanvasAPIError]]:
        student_id, score = item
        try:
            update_assignment_score(course_id, assignment_id, student_id, score, client=client)
        except CanvasAPIError as e:
            return student_id, e
        return student_id, None

    failures: Dict[int, CanvasAPIError] = {}
    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        for student_id, error in executor.map(post, grades.items()):
            if error is not None:
                failures[student_id] = error

    if failures:
        logger.error(
            "Failed to post %d of %d grades for assignment %s",
            len(failures), len(grades), assignment_id,
        )
    else:
        logger.info("Posted %d grades for assignment %s", len(grades), assignment_id)
    return failures
