from __future__ import annotations

import argparse
import json
import logging
import sys
from dataclasses import replace
from pathlib import Path

from .config import Preferences, Settings
from .models import Term
from .ocr import resolve_engine
from .pipeline import ImportOutcome, ImportSession, import_paths
from .terms import current_term_title

IMPORT_GUIDE = """\
Tips for a clean import:
  - Screenshot the whole grade report, including each "Term GPA:" line.
  - Rows marked P, NGS or N/A and NSTP/PE-type courses are skipped on purpose.
  - Re-run with --verbose to see why a row was dropped.
(pass --hide-guide to stop showing this)"""


def _print_progress(name: str, frac: float) -> None:
    print(f"  [{name}] OCR {frac * 100:5.1f}%", file=sys.stderr)


def _print_term(term: Term) -> None:
    label = f" ({term.recognition})" if term.recognition else ""
    print(f"  {term.title} - GPA {term.gpa:.3f}{label}")
    if not term.courses:
        print("    [no courses]")
    for c in term.courses:
        print(f"    {c.code:<12} units: {c.units:<2} grade: {c.grade:.1f}")


def _print_outcomes(outcomes: list[ImportOutcome]) -> None:
    for out in outcomes:
        status = "ok" if out.ok else "failed"
        print(f"Results for {out.source}: {status} - {out.message}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="gradescan", description="Read terms and courses from grade report screenshots"
    )
    parser.add_argument("inputs", nargs="+", help="Image or PDF file(s), processed in order")
    parser.add_argument("--engine", default=None, help="OCR engine: tesseract (default) or paddle")
    parser.add_argument("--lang", default=None, help="OCR language (default: eng)")
    parser.add_argument(
        "--exclude",
        action="append",
        default=None,
        metavar="PREFIX",
        help="Course code prefix to skip; repeat for more (replaces the default NSTP/PE/... list)",
    )
    parser.add_argument(
        "--keep-defaults",
        action="store_true",
        help="Append to the default Term 1..4 placeholders instead of replacing them",
    )
    parser.add_argument("--json", dest="json_out", default=None, help="Write terms as JSON here")
    parser.add_argument("--prefs", default=None, help="Preferences file (JSON)")
    parser.add_argument("--hide-guide", action="store_true", help="Stop showing the import tips")
    parser.add_argument("--quiet", action="store_true", help="No OCR progress output")
    parser.add_argument("--verbose", action="store_true", help="Debug logging (row decisions)")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv if argv is not None else sys.argv[1:])
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    prefs = Preferences.load(args.prefs)
    if args.hide_guide:
        prefs.set("hide_import_guide", True)
    if not prefs.get("hide_import_guide", False):
        print(IMPORT_GUIDE)

    settings = Settings.from_env()
    overrides: dict[str, object] = {}
    if args.engine:
        overrides["ocr_engine"] = args.engine.lower()
    if args.lang:
        overrides["ocr_lang"] = args.lang
    if args.exclude is not None:
        overrides["excluded_prefixes"] = tuple(p.upper() for p in args.exclude)
    if overrides:
        settings = replace(settings, **overrides)

    try:
        engine = resolve_engine(settings.ocr_engine, lang=settings.ocr_lang)
    except ValueError as e:
        print(f"error: {e}", file=sys.stderr)
        return 2

    session = ImportSession()
    outcomes = import_paths(
        session,
        args.inputs,
        engine,
        settings,
        on_progress=None if args.quiet else _print_progress,
        replace_defaults=False if args.keep_defaults else None,
    )
    _print_outcomes(outcomes)

    print(f"Terms (current: {current_term_title()}):")
    for term in session.terms:
        _print_term(term)
    cum = session.cumulative()
    print(f"Cumulative GPA: {cum.gpa:.3f} over {cum.units} units ({cum.terms} terms)")

    if args.json_out:
        payload = {
            "terms": [t.to_dict() for t in session.terms],
            "cumulative": {"gpa": round(cum.gpa, 3), "units": cum.units},
            "imports": [
                {"source": o.source, "terms": o.terms_imported, "message": o.message}
                for o in outcomes
            ],
        }
        Path(args.json_out).write_text(json.dumps(payload, indent=2), encoding="utf-8")

    return 0 if any(o.ok for o in outcomes) else 1


if __name__ == "__main__":
    sys.exit(main())
