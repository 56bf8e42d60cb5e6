from __future__ import annotations

import re
from collections.abc import Iterable, Sequence
from datetime import date

from .config import DEFAULT_EXCLUDED_PREFIXES, DEFAULT_TERM_COUNT
from .models import Term
from .rows import TERM_HEADER, parse_rows

PLACEHOLDER_TITLE = re.compile(r"^Term \d+$")


def format_term_title(year_start: int, year_end: int, term: int) -> str:
    return f"AY {year_start}-{year_end}, Term {term}"


def find_title(section: Iterable[str]) -> str | None:
    for ln in section:
        m = TERM_HEADER.search(ln)
        if m:
            return format_term_title(int(m.group(1)), int(m.group(2)), int(m.group(3)))
    return None


def build_term(
    section: Sequence[str],
    ordinal: int,
    excluded_prefixes: Iterable[str] = DEFAULT_EXCLUDED_PREFIXES,
) -> Term:
    """
    Turn one section's lines into a Term.

    The id is a placeholder (0); the merger assigns the real one. Sections
    without a recognizable "AY yyyy-yyyy ... Term n" header get
    "Imported Term <ordinal>".
    """
    title = find_title(section) or f"Imported Term {ordinal}"
    return Term.build(0, title, parse_rows(section, excluded_prefixes))


def build_terms(
    sections: Sequence[Sequence[str]],
    excluded_prefixes: Iterable[str] = DEFAULT_EXCLUDED_PREFIXES,
) -> list[Term]:
    prefixes = tuple(excluded_prefixes)
    terms = [build_term(sec, i, prefixes) for i, sec in enumerate(sections, start=1)]
    return [t for t in terms if t.courses]


def current_term_title(today: date | None = None) -> str:
    """Sep-Dec is term 1, Jan-Apr term 2, May-Aug term 3 of the academic year."""
    d = today or date.today()
    if d.month >= 9:
        return format_term_title(d.year, d.year + 1, 1)
    if d.month <= 4:
        return format_term_title(d.year - 1, d.year, 2)
    return format_term_title(d.year - 1, d.year, 3)


def default_terms(count: int = DEFAULT_TERM_COUNT) -> tuple[Term, ...]:
    """Blank scaffolding a new session starts with."""
    return tuple(Term.build(i, f"Term {i}", ()) for i in range(1, count + 1))


def is_placeholder(term: Term) -> bool:
    return not term.courses and PLACEHOLDER_TITLE.fullmatch(term.title) is not None
