from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING

from .config import (
    FIRST_HONORS_LABEL,
    FIRST_HONORS_MIN_GPA,
    GRADE_SET,
    HONORS_MIN_GRADE,
    HONORS_MIN_UNITS,
    SECOND_HONORS_LABEL,
    SECOND_HONORS_MIN_GPA,
)

if TYPE_CHECKING:
    from .models import Course, Term


@dataclass(frozen=True)
class TermStats:
    gpa: float
    recognition: str


@dataclass(frozen=True)
class CumulativeStats:
    gpa: float
    units: int
    terms: int


def _all_valid(courses: Sequence[Course]) -> bool:
    return all(c.units > 0 and c.grade in GRADE_SET for c in courses)


def _weighted(courses: Iterable[Course]) -> tuple[float, int]:
    points = 0.0
    units = 0
    for c in courses:
        points += c.units * c.grade
        units += c.units
    return points, units


def recognition_for(gpa: float, courses: Sequence[Course]) -> str:
    if not courses:
        return ""
    if any(c.grade < HONORS_MIN_GRADE for c in courses):
        return ""
    if sum(c.units for c in courses) < HONORS_MIN_UNITS:
        return ""
    if gpa >= FIRST_HONORS_MIN_GPA:
        return FIRST_HONORS_LABEL
    if gpa >= SECOND_HONORS_MIN_GPA:
        return SECOND_HONORS_LABEL
    return ""


def compute_term_stats(courses: Sequence[Course]) -> TermStats:
    """Weighted GPA and dean's list label; zero/empty when any course is invalid."""
    if not courses or not _all_valid(courses):
        return TermStats(0.0, "")
    points, units = _weighted(courses)
    if units == 0:
        return TermStats(0.0, "")
    gpa = points / units
    return TermStats(gpa, recognition_for(gpa, courses))


def compute_cumulative_stats(terms: Iterable[Term]) -> CumulativeStats:
    counted = [t for t in terms if t.courses and _all_valid(t.courses)]
    points, units = _weighted(c for t in counted for c in t.courses)
    gpa = points / units if units else 0.0
    return CumulativeStats(gpa, units, len(counted))
