"""Services package for business logic operations."""

from .canvas_service import fetch_submissions_for_student, latest_submissions_by_assignment, post_grades

__all__ = ['fetch_submissions_for_student', 'latest_submissions_by_assignment', 'post_grades']
