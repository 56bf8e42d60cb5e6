from __future__ import annotations

import logging
import re
from collections.abc import Iterable
from dataclasses import dataclass

from .config import DEFAULT_EXCLUDED_PREFIXES, GRADE_SET, NON_ACADEMIC_MARKERS
from .models import Course

log = logging.getLogger(__name__)

# ---------- Regexes ----------
SUMMARY_LINE = re.compile(r"(?i)\b(?:Cumulative|Term)\s+GPA\s*:")
TERM_HEADER = re.compile(r"(?i)\bAY\s*(\d{4})\s*-\s*(\d{4})\b.*?\bTerm\s*(\d+)\b")
NON_ACADEMIC = re.compile(
    r"(?i)(?<![\w/])(?:" + "|".join(re.escape(m) for m in NON_ACADEMIC_MARKERS) + r")(?![\w/])"
)
NUMBER = re.compile(r"(?<![A-Za-z0-9.])\d+(?:\.\d+)?(?![A-Za-z0-9]|\.\d)")
BARE_INT = re.compile(r"^\d+$")
CODE_TOKEN = re.compile(r"^[A-Z][A-Z0-9]*(?:-[A-Z0-9]+)*(?=\s|$)")
LEADING_BULLETS = re.compile(r"^[\s\-*•·.]+")


@dataclass(frozen=True)
class RowDecision:
    """What the row parser made of one line: a course, or the reason it was skipped."""

    line: str
    course: Course | None
    reason: str

    @property
    def accepted(self) -> bool:
        return self.course is not None


# ---------- Row filter ----------
def is_summary_line(line: str) -> bool:
    return SUMMARY_LINE.search(line) is not None


def has_non_academic_marker(line: str) -> bool:
    return NON_ACADEMIC.search(line) is not None


def is_excluded_code(code: str, excluded_prefixes: Iterable[str]) -> bool:
    up = code.upper()
    return any(up.startswith(p.upper()) for p in excluded_prefixes if p)


# ---------- Token classification ----------
def is_grade_token(tok: str) -> bool:
    try:
        return float(tok) in GRADE_SET
    except ValueError:
        return False


def is_units_token(tok: str) -> bool:
    return BARE_INT.match(tok) is not None


def resolve_units_grade(a: str, b: str) -> tuple[int, float] | None:
    """
    Decide which of the last two numbers is the grade and which the units.

    Returns None when neither ordering gives one grade-set value plus one bare
    integer, or when both orderings do (e.g. "3 4"); such rows are dropped
    rather than guessed.
    """
    if is_units_token(a) and is_units_token(b) and is_grade_token(a) and is_grade_token(b):
        return None
    if is_grade_token(a) and is_units_token(b):
        return int(b), float(a)
    if is_grade_token(b) and is_units_token(a):
        return int(a), float(b)
    return None


def strip_term_header(line: str) -> str:
    m = TERM_HEADER.search(line)
    if not m:
        return line
    return line[m.end() :].strip(" ,;:-")


def derive_code(text: str) -> str:
    cleaned = re.sub(r"\s+", " ", text).strip()
    cleaned = LEADING_BULLETS.sub("", cleaned)
    if not cleaned:
        return ""
    m = CODE_TOKEN.match(cleaned)
    if m:
        return m.group(0)
    return cleaned.split(" ", 1)[0]


# ---------- Parser ----------
def explain_row(
    line: str,
    course_id: int = 1,
    excluded_prefixes: Iterable[str] = DEFAULT_EXCLUDED_PREFIXES,
) -> RowDecision:
    def skip(reason: str) -> RowDecision:
        return RowDecision(line, None, reason)

    if is_summary_line(line):
        return skip("summary line")
    if has_non_academic_marker(line):
        return skip("non-academic marker")

    rest = strip_term_header(line)
    if not rest:
        return skip("term header only")

    nums = list(NUMBER.finditer(rest))
    if len(nums) < 2:
        return skip("fewer than two numbers")

    a, b = nums[-2], nums[-1]
    resolved = resolve_units_grade(a.group(0), b.group(0))
    if resolved is None:
        return skip(f"ambiguous units/grade ({a.group(0)}, {b.group(0)})")
    units, grade = resolved
    if units == 0:
        return skip("zero units")

    code = derive_code(rest[: a.start()] + " " + rest[b.end() :])
    if not code:
        return skip("no course code")
    if is_excluded_code(code, excluded_prefixes):
        return skip(f"excluded code {code}")

    return RowDecision(line, Course(course_id, code, units, grade), "ok")


def parse_row(
    line: str,
    course_id: int = 1,
    excluded_prefixes: Iterable[str] = DEFAULT_EXCLUDED_PREFIXES,
) -> Course | None:
    return explain_row(line, course_id, excluded_prefixes).course


def parse_rows(
    lines: Iterable[str],
    excluded_prefixes: Iterable[str] = DEFAULT_EXCLUDED_PREFIXES,
) -> list[Course]:
    """Courses from ``lines`` in order, ids sequential from 1."""
    prefixes = tuple(excluded_prefixes)
    out: list[Course] = []
    for ln in lines:
        d = explain_row(ln, len(out) + 1, prefixes)
        if d.course is None:
            log.debug("skip %r: %s", ln, d.reason)
            continue
        out.append(d.course)
    return out
