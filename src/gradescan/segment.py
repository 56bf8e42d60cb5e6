from __future__ import annotations

import re
from collections.abc import Iterable

SECTION_MARKER = re.compile(r"(?i)^Term\s+GPA\s*:")

Section = tuple[str, ...]


def _normalize_text(s: str) -> str:
    s = s.replace("\xa0", " ").replace("\u2009", " ").replace("\u202f", " ")
    s = s.replace("\u2013", "-").replace("\u2014", "-").replace("\u2212", "-")
    return s


def flatten_text(text: str) -> list[str]:
    """Newline-normalized, trimmed, non-blank lines."""
    text = _normalize_text(text).replace("\r\n", "\n").replace("\r", "\n")
    return [ln.strip() for ln in text.split("\n") if ln.strip()]


def is_section_marker(line: str) -> bool:
    return SECTION_MARKER.match(line) is not None


def split_sections(lines: Iterable[str]) -> list[Section]:
    """
    Partition transcript lines into per-term sections.

    A term's "Term GPA:" summary sits below its course rows, so the scan runs
    bottom-up: each marker line opens a new section and everything above it,
    up to the next marker, belongs to that section. Sections come out in the
    order they were closed (bottom-most first).
    """
    lines = list(lines)
    if not any(is_section_marker(ln) for ln in lines):
        return []

    sections: list[Section] = []
    buf: list[str] = []
    for ln in reversed(lines):
        if is_section_marker(ln):
            if buf:
                sections.append(tuple(reversed(buf)))
            buf = [ln]
        else:
            buf.append(ln)
    if buf:
        sections.append(tuple(reversed(buf)))
    return sections


def segment_text(text: str) -> list[Section]:
    return split_sections(flatten_text(text))
