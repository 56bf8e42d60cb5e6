from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from pathlib import Path

from .config import Settings
from .errors import GradeScanError, NoCoursesParsed, NoSectionsDetected
from .merge import merge_terms
from .models import Term
from .normalize import ImageInput, normalize_image
from .ocr import OcrEngine
from .segment import segment_text
from .sources import Source, TextSource, expand_input
from .stats import CumulativeStats, compute_cumulative_stats
from .terms import build_terms, default_terms

log = logging.getLogger(__name__)

ProgressFn = Callable[[str, float], None]


@dataclass
class ImportSession:
    """
    The term collection of one session plus the first-import flag.

    ``terms`` is only ever reassigned as a whole, from the merger's result.
    """

    terms: tuple[Term, ...] = field(default_factory=default_terms)
    first_import_done: bool = False

    def apply(
        self, incoming: list[Term], settings: Settings, replace_defaults: bool | None = None
    ) -> None:
        first = not self.first_import_done
        self.terms = merge_terms(
            self.terms,
            incoming,
            first_import=first,
            replace_defaults=replace_defaults if first else False,
            default_count=settings.default_term_count,
        )
        self.first_import_done = True

    def cumulative(self) -> CumulativeStats:
        return compute_cumulative_stats(self.terms)


@dataclass(frozen=True)
class ImportOutcome:
    source: str
    terms_imported: int = 0
    error: GradeScanError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def message(self) -> str:
        if self.error is not None:
            return self.error.message
        noun = "term" if self.terms_imported == 1 else "terms"
        return f"Imported {self.terms_imported} {noun}."


def process_text(text: str, settings: Settings | None = None) -> list[Term]:
    """Segment and parse OCR text. Same text in, same terms out."""
    s = settings or Settings()
    sections = segment_text(text)
    if not sections:
        raise NoSectionsDetected()
    terms = build_terms(sections, s.excluded_prefixes)
    if not terms:
        raise NoCoursesParsed(f"{len(sections)} section(s), no parseable course rows")
    log.debug("parsed %d term(s) from %d section(s)", len(terms), len(sections))
    return terms


def recognize(
    image: ImageInput,
    engine: OcrEngine,
    settings: Settings,
    name: str,
    on_progress: ProgressFn | None = None,
) -> str:
    normalized = normalize_image(image, settings)
    job = engine.recognize(normalized)
    for frac in job:
        if on_progress is not None:
            on_progress(name, frac)
    return job.text


def import_source(
    session: ImportSession,
    source: Source,
    engine: OcrEngine,
    settings: Settings | None = None,
    on_progress: ProgressFn | None = None,
    replace_defaults: bool | None = None,
) -> ImportOutcome:
    """
    Run one source end to end and merge the result into ``session``.

    Per-source failures come back in the outcome instead of being raised; the
    session is untouched unless at least one term was parsed.
    """
    s = settings or Settings()
    try:
        if isinstance(source, TextSource):
            text = source.text
        else:
            text = recognize(source.image, engine, s, source.name, on_progress)
        terms = process_text(text, s)
    except GradeScanError as e:
        log.warning("%s: %s", source.name, e)
        return ImportOutcome(source.name, error=e)

    session.apply(terms, s, replace_defaults=replace_defaults)
    log.info("%s: imported %d term(s)", source.name, len(terms))
    return ImportOutcome(source.name, terms_imported=len(terms))


def import_batch(
    session: ImportSession,
    sources: Iterable[Source],
    engine: OcrEngine,
    settings: Settings | None = None,
    on_progress: ProgressFn | None = None,
    replace_defaults: bool | None = None,
) -> list[ImportOutcome]:
    """Import sources one at a time, in order; each merge sees the previous ones."""
    return [
        import_source(session, src, engine, settings, on_progress, replace_defaults)
        for src in sources
    ]


def import_paths(
    session: ImportSession,
    paths: Iterable[str | Path],
    engine: OcrEngine,
    settings: Settings | None = None,
    on_progress: ProgressFn | None = None,
    replace_defaults: bool | None = None,
) -> list[ImportOutcome]:
    outcomes: list[ImportOutcome] = []
    for p in paths:
        try:
            sources = expand_input(p)
        except GradeScanError as e:
            log.warning("%s: %s", p, e)
            outcomes.append(ImportOutcome(Path(p).name, error=e))
            continue
        outcomes.extend(
            import_batch(session, sources, engine, settings, on_progress, replace_defaults)
        )
    return outcomes

