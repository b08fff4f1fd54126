"""Utilities package for helper functions."""

from .datetime_utils import (
    parse_canvas_datetime,
    current_year_and_semester,
)
from .logging_utils import setup_logging

__all__ = [
    'parse_canvas_datetime',
    'current_year_and_semester',
    'setup_logging',
]
