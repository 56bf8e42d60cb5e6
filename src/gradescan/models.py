from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any

from .config import GRADE_SET
from .stats import compute_term_stats


@dataclass(frozen=True)
class Course:
    id: int
    code: str
    units: int
    grade: float

    def is_valid(self) -> bool:
        return self.units > 0 and self.grade in GRADE_SET

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "code": self.code, "units": self.units, "grade": self.grade}


@dataclass(frozen=True)
class Term:
    """One academic term. Derived fields always reflect ``courses``."""

    id: int
    title: str
    courses: tuple[Course, ...] = ()
    gpa: float = 0.0
    recognition: str = ""

    @classmethod
    def build(cls, id: int, title: str, courses: tuple[Course, ...] | list[Course]) -> Term:
        courses = tuple(courses)
        stats = compute_term_stats(courses)
        return cls(id, title, courses, stats.gpa, stats.recognition)

    def with_courses(self, courses: tuple[Course, ...] | list[Course]) -> Term:
        return Term.build(self.id, self.title, courses)

    def with_id(self, id: int) -> Term:
        return replace(self, id=id)

    @property
    def total_units(self) -> int:
        return sum(c.units for c in self.courses)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "courses": [c.to_dict() for c in self.courses],
            "gpa": round(self.gpa, 3),
            "recognition": self.recognition,
        }
