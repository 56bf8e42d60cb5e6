from datetime import date

import pytest

from gradescan.models import Course, Term
from gradescan.stats import compute_cumulative_stats, compute_term_stats
from gradescan.terms import (
    build_term,
    build_terms,
    current_term_title,
    default_terms,
    find_title,
    is_placeholder,
)

SECTION = (
    "AY 2022-2023 Term 2",
    "CSC101 Intro 3 4.0",
    "NSTP1 1.0 3",
    "MTH101 Calc 3 3.0",
    "Term GPA: 3.5",
)


def test_build_term_from_section():
    term = build_term(SECTION, ordinal=1)
    assert term.title == "AY 2022-2023, Term 2"
    assert term.id == 0
    assert term.courses == (Course(1, "CSC101", 3, 4.0), Course(2, "MTH101", 3, 3.0))
    assert term.gpa == pytest.approx(3.5)
    assert term.recognition == ""  # only 6 units


def test_title_is_normalized():
    assert find_title(["foo", "AY2021 - 2022   2nd Term 3"]) == "AY 2021-2022, Term 3"
    assert find_title(["no header here"]) is None


def test_headerless_section_gets_placeholder_title():
    term = build_term(("CSC101 Intro 3 4.0", "Term GPA: 4.0"), ordinal=3)
    assert term.title == "Imported Term 3"


def test_build_terms_drops_empty_terms():
    sections = [("Cumulative GPA: 3.5",), SECTION, ("PEFIT P 2", "Term GPA: 0.0")]
    terms = build_terms(sections)
    assert [t.title for t in terms] == ["AY 2022-2023, Term 2"]


def test_build_is_deterministic():
    assert build_term(SECTION, 1) == build_term(SECTION, 1)
    assert repr(build_term(SECTION, 1).to_dict()) == repr(build_term(SECTION, 1).to_dict())


def test_default_terms():
    terms = default_terms(4)
    assert [t.title for t in terms] == ["Term 1", "Term 2", "Term 3", "Term 4"]
    assert [t.id for t in terms] == [1, 2, 3, 4]
    assert all(is_placeholder(t) for t in terms)
    assert not is_placeholder(terms[0].with_courses([Course(1, "CSC101", 3, 4.0)]))


# ---------- stats ----------
def _courses(*pairs):
    return [Course(i, f"C{i}", u, g) for i, (u, g) in enumerate(pairs, start=1)]


def test_first_honors():
    stats = compute_term_stats(_courses((3, 4.0), (3, 4.0), (3, 3.5), (3, 3.0)))
    assert stats.gpa == pytest.approx(3.625)
    assert stats.recognition == "First Honors Dean's List"


def test_second_honors():
    stats = compute_term_stats(_courses((3, 3.0), (3, 3.0), (3, 3.0), (3, 3.0)))
    assert stats.gpa == pytest.approx(3.0)
    assert stats.recognition == "Second Honors Dean's List"


def test_no_honors_with_low_grade_or_light_load():
    assert compute_term_stats(_courses((3, 4.0), (3, 4.0), (3, 4.0), (3, 1.5))).recognition == ""
    assert compute_term_stats(_courses((3, 4.0), (3, 4.0))).recognition == ""


def test_invalid_course_zeroes_stats():
    stats = compute_term_stats(_courses((3, 4.0), (0, 4.0)))
    assert (stats.gpa, stats.recognition) == (0.0, "")
    stats = compute_term_stats(_courses((3, 4.0), (3, 3.7)))
    assert (stats.gpa, stats.recognition) == (0.0, "")
    assert compute_term_stats([]).gpa == 0.0


def test_with_courses_recomputes():
    term = Term.build(5, "AY 2022-2023, Term 1", _courses((3, 4.0)))
    assert term.gpa == pytest.approx(4.0)
    changed = term.with_courses(_courses((3, 4.0), (3, 2.0)))
    assert changed.gpa == pytest.approx(3.0)
    assert changed.id == 5
    assert term.gpa == pytest.approx(4.0)


def test_cumulative_skips_empty_and_invalid_terms():
    a = Term.build(1, "a", _courses((3, 4.0), (3, 3.0)))
    b = Term.build(2, "b", _courses((6, 2.0)))
    empty = Term.build(3, "Term 3", ())
    cum = compute_cumulative_stats([a, b, empty])
    assert cum.units == 12
    assert cum.terms == 2
    assert cum.gpa == pytest.approx((12 + 9 + 12) / 12)


@pytest.mark.parametrize(
    "today,expected",
    [
        (date(2024, 9, 1), "AY 2024-2025, Term 1"),
        (date(2024, 12, 31), "AY 2024-2025, Term 1"),
        (date(2025, 1, 15), "AY 2024-2025, Term 2"),
        (date(2025, 4, 30), "AY 2024-2025, Term 2"),
        (date(2025, 5, 1), "AY 2024-2025, Term 3"),
        (date(2025, 8, 31), "AY 2024-2025, Term 3"),
    ],
)
def test_current_term_title(today, expected):
    assert current_term_title(today) == expected
