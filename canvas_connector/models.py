"""
Domain objects built from Canvas JSON.

Each ``from_json`` is a resource mapper: it returns the object, or None when
the element lacks a required field. Paginated fetches count the None results
as skipped elements.
"""

import json
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Mapping, Optional

from utils.datetime_utils import parse_canvas_datetime


def _int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.isdigit():
        return int(value)
    return None


def _str(value: Any) -> Optional[str]:
    return value if isinstance(value, str) else None


def _float(value: Any) -> Optional[float]:
    if isinstance(value, bool) or value is None:
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _datetime(value: Any) -> Optional[datetime]:
    if not isinstance(value, str) or not value:
        return None
    try:
        return parse_canvas_datetime(value)
    except ValueError:
        return None


@dataclass(frozen=True)
class Course:
    id: int
    name: str
    course_code: str
    start_at: Optional[datetime] = None
    end_at: Optional[datetime] = None

    @classmethod
    def from_json(cls, data: Mapping[str, Any]) -> Optional["Course"]:
        course_id = _int(data.get("id"))
        name = _str(data.get("name"))
        code = _str(data.get("course_code"))
        if course_id is None or name is None or code is None:
            return None
        return cls(
            id=course_id,
            name=name,
            course_code=code,
            start_at=_datetime(data.get("start_at")),
            end_at=_datetime(data.get("end_at")),
        )


@dataclass(frozen=True)
class Student:
    id: int
    name: str
    email: str

    @classmethod
    def from_json(cls, data: Mapping[str, Any]) -> Optional["Student"]:
        student_id = _int(data.get("id"))
        name = _str(data.get("name"))
        email = _str(data.get("email"))
        if student_id is None or name is None or email is None:
            return None
        return cls(id=student_id, name=name, email=email)


@dataclass(frozen=True)
class Assignment:
    id: int
    name: str
    description: Optional[str] = None
    due_at: Optional[datetime] = None
    points_possible: Optional[float] = None
    html_url: Optional[str] = None
    rubric_id: Optional[int] = None
    group_category_id: Optional[int] = None

    @classmethod
    def from_json(cls, data: Mapping[str, Any]) -> Optional["Assignment"]:
        assignment_id = _int(data.get("id"))
        name = _str(data.get("name"))
        if assignment_id is None or name is None:
            return None
        # Canvas reports the attached rubric under rubric_settings
        rubric_settings = data.get("rubric_settings") or {}
        rubric_id = _int(rubric_settings.get("id")) if isinstance(rubric_settings, dict) else None
        return cls(
            id=assignment_id,
            name=name,
            description=_str(data.get("description")),
            due_at=_datetime(data.get("due_at")),
            points_possible=_float(data.get("points_possible")),
            html_url=_str(data.get("html_url")),
            rubric_id=rubric_id,
            group_category_id=_int(data.get("group_category_id")),
        )


@dataclass(frozen=True)
class Comment:
    id: int
    comment: str
    author_id: Optional[int] = None
    author_name: Optional[str] = None
    created_at: Optional[datetime] = None

    @classmethod
    def from_json(cls, data: Mapping[str, Any]) -> Optional["Comment"]:
        comment_id = _int(data.get("id"))
        if comment_id is None:
            return None
        return cls(
            id=comment_id,
            comment=_str(data.get("comment")) or "",
            author_id=_int(data.get("author_id")),
            author_name=_str(data.get("author_name")),
            created_at=_datetime(data.get("created_at")),
        )


@dataclass(frozen=True)
class Submission:
    id: int
    assignment_id: int
    user_id: Optional[int] = None
    score: Optional[float] = None
    grade: Optional[str] = None
    submitted_at: Optional[datetime] = None
    workflow_state: Optional[str] = None
    attempt: Optional[int] = None
    comments: List[Comment] = field(default_factory=list)

    @classmethod
    def from_json(cls, data: Mapping[str, Any]) -> Optional["Submission"]:
        submission_id = _int(data.get("id"))
        assignment_id = _int(data.get("assignment_id"))
        if submission_id is None or assignment_id is None:
            return None
        raw_comments = data.get("submission_comments")
        if not isinstance(raw_comments, list):
            raw_comments = []
        comments = [c for c in (Comment.from_json(item) for item in raw_comments if isinstance(item, dict)) if c]
        return cls(
            id=submission_id,
            assignment_id=assignment_id,
            user_id=_int(data.get("user_id")),
            score=_float(data.get("score")),
            grade=_str(data.get("grade")),
            submitted_at=_datetime(data.get("submitted_at")),
            workflow_state=_str(data.get("workflow_state")),
            attempt=_int(data.get("attempt")),
            comments=comments,
        )


@dataclass(frozen=True)
class Rating:
    id: str
    description: str
    points: float
    long_description: str = ""


@dataclass(frozen=True)
class Criterion:
    id: str
    description: str
    points: float
    ratings: List[Rating] = field(default_factory=list)
    long_description: Optional[str] = None
    criterion_use_range: Optional[bool] = None


@dataclass(frozen=True)
class Rubric:
    id: int
    title: str
    points_possible: float
    criteria: List[Criterion] = field(default_factory=list)
    context_id: Optional[int] = None
    context_type: Optional[str] = None

    @classmethod
    def from_json(cls, data: Mapping[str, Any]) -> Optional["Rubric"]:
        rubric_id = _int(data.get("id"))
        title = _str(data.get("title"))
        if rubric_id is None or title is None:
            return None
        criteria = []
        for raw in data.get("data") or []:
            try:
                ratings = [
                    Rating(
                        id=str(r["id"]),
                        description=str(r.get("description", "")),
                        points=float(r.get("points", 0)),
                        long_description=str(r.get("long_description") or ""),
                    )
                    for r in raw.get("ratings") or []
                ]
                criteria.append(Criterion(
                    id=str(raw["id"]),
                    description=str(raw.get("description", "")),
                    points=float(raw.get("points", 0)),
                    ratings=ratings,
                    long_description=_str(raw.get("long_description")),
                    criterion_use_range=raw.get("criterion_use_range"),
                ))
            except (KeyError, TypeError, ValueError, AttributeError):
                return None
        return cls(
            id=rubric_id,
            title=title,
            points_possible=_float(data.get("points_possible")) or 0.0,
            criteria=criteria,
            context_id=_int(data.get("context_id")),
            context_type=_str(data.get("context_type")),
        )


@dataclass
class RubricSubmission:
    """
    Payload for creating a rubric.

    ``criteria`` is a list of dicts with ``description``, optional
    ``criterion_use_range`` and ``ratings`` (dicts with ``description`` and
    ``points``). Canvas expects both levels keyed by "1", "2", ...
    """

    title: str
    association_id: int
    criteria: List[Dict[str, Any]] = field(default_factory=list)
    association_type: str = "Course"
    use_for_grading: bool = False

    def to_payload(self) -> Dict[str, Any]:
        criteria = {}
        for index, criterion in enumerate(self.criteria, start=1):
            entry: Dict[str, Any] = {"description": criterion["description"]}
            if criterion.get("criterion_use_range") is not None:
                entry["criterion_use_range"] = criterion["criterion_use_range"]
            entry["ratings"] = {
                str(position): {"description": rating["description"], "points": rating["points"]}
                for position, rating in enumerate(criterion.get("ratings", []), start=1)
            }
            criteria[str(index)] = entry
        return {
            "rubric": {"title": self.title, "criteria": criteria},
            "rubric_association": {
                "association_type": self.association_type,
                "association_id": self.association_id,
                "use_for_grading": self.use_for_grading,
            },
        }

    @classmethod
    def load_from_json(cls, path: str) -> "RubricSubmission":
        """Load a payload previously written in Canvas' create-rubric shape."""
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
        rubric = data["rubric"]
        association = data["rubric_association"]
        criteria = []
        for key in sorted(rubric["criteria"], key=int):
            raw = rubric["criteria"][key]
            criteria.append({
                "description": raw["description"],
                "criterion_use_range": raw.get("criterion_use_range"),
                "ratings": [raw["ratings"][k] for k in sorted(raw.get("ratings", {}), key=int)],
            })
        return cls(
            title=rubric["title"],
            association_id=int(association["association_id"]),
            criteria=criteria,
            association_type=association.get("association_type", "Course"),
            use_for_grading=bool(association.get("use_for_grading", False)),
        )
