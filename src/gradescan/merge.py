from __future__ import annotations

import logging
import re
from collections.abc import Sequence

from .config import DEFAULT_TERM_COUNT
from .models import Term
from .terms import is_placeholder

log = logging.getLogger(__name__)

SORT_TITLE = re.compile(r"(?i)\bAY\s*(\d{4})\s*-\s*\d{4}\s*,?\s*Term\s*(\d+)\b")


def term_sort_key(title: str) -> tuple[int, int] | None:
    m = SORT_TITLE.search(title)
    if not m:
        return None
    return int(m.group(1)), int(m.group(2))


def sort_terms(terms: Sequence[Term]) -> tuple[Term, ...]:
    """
    Order terms by (year start, term number).

    Terms whose titles carry no academic-year key stay in the slots they
    occupied; keyed terms are sorted (stably) into the remaining slots.
    """
    keys: dict[int, tuple[int, int]] = {}
    for i, t in enumerate(terms):
        k = term_sort_key(t.title)
        if k is not None:
            keys[i] = k
    slots = list(keys)
    ordered = sorted(slots, key=keys.__getitem__)
    out = list(terms)
    for slot, src in zip(slots, ordered):
        out[slot] = terms[src]
    return tuple(out)


def next_term_id(terms: Sequence[Term]) -> int:
    return max((t.id for t in terms), default=0) + 1


def only_defaults(terms: Sequence[Term], default_count: int = DEFAULT_TERM_COUNT) -> bool:
    return len(terms) <= default_count and all(is_placeholder(t) for t in terms)


def merge_terms(
    existing: Sequence[Term],
    incoming: Sequence[Term],
    *,
    first_import: bool,
    replace_defaults: bool | None = None,
    default_count: int = DEFAULT_TERM_COUNT,
) -> tuple[Term, ...]:
    """
    Fold freshly parsed terms into the session collection.

    Returns a new tuple; neither input is modified. On the first import an
    untouched default collection is replaced instead of appended to, unless
    ``replace_defaults`` says otherwise explicitly.
    """
    if replace_defaults is None:
        replace_defaults = first_import and only_defaults(existing, default_count)
    base: tuple[Term, ...] = () if replace_defaults else tuple(existing)
    if replace_defaults and existing:
        log.debug("discarding %d default term(s) on first import", len(existing))

    start = next_term_id(base)
    added = tuple(t.with_id(start + n) for n, t in enumerate(incoming))
    return sort_terms(base + added)
