from __future__ import annotations

import argparse
import re
import sys
from pathlib import Path
from typing import Optional, Pattern

from .config import Settings
from .errors import GradeScanError
from .ocr import resolve_engine
from .pipeline import recognize
from .rows import explain_row
from .segment import flatten_text, split_sections
from .sources import TextSource, expand_input
from .terms import find_title


def read_transcript(path: Path, settings: Settings, as_text: bool = False) -> str:
    if as_text:
        return path.read_text(encoding="utf-8")
    chunks = []
    engine = None
    for src in expand_input(path):
        if isinstance(src, TextSource):
            chunks.append(src.text)
            continue
        if engine is None:
            engine = resolve_engine(settings.ocr_engine, lang=settings.ocr_lang)
        chunks.append(recognize(src.image, engine, settings, src.name))
    return "\n".join(chunks)


def dump(text: str, settings: Settings, rx: Optional[Pattern[str]] = None) -> None:
    lines = flatten_text(text)
    sections = split_sections(lines)
    if not sections:
        print(f"[no sections] {len(lines)} line(s), no 'Term GPA:' marker")
        return
    for sidx, sec in enumerate(sections, start=1):
        print(f"[section {sidx}] {find_title(sec) or '(no header)'} - {len(sec)} line(s)")
        n = 0
        for ln in sec:
            if rx and not rx.search(ln):
                continue
            d = explain_row(ln, n + 1, settings.excluded_prefixes)
            if d.course is not None:
                n += 1
                c = d.course
                print(f"   + {ln!r} -> {c.code} units={c.units} grade={c.grade}")
            else:
                print(f"   - {ln!r} ({d.reason})")
        print("-" * 60)


def main(argv: list[str] | None = None) -> int:
    ap = argparse.ArgumentParser(
        prog="gradescan-debug", description="Show sections and row decisions for one input"
    )
    ap.add_argument("input", help="Image, PDF, or (with --text) a saved OCR transcript")
    ap.add_argument("--text", action="store_true", help="Treat input as plain OCR text")
    ap.add_argument("--grep", help="Regex to filter rows", default=None)
    args = ap.parse_args(argv)

    path = Path(args.input)
    if not path.exists():
        print("File not found:", path)
        return 1

    settings = Settings.from_env()
    rx: Optional[Pattern[str]] = re.compile(args.grep, re.I) if args.grep else None
    try:
        text = read_transcript(path, settings, as_text=args.text)
    except GradeScanError as e:
        print(f"{path.name}: {e.message} ({e})")
        return 1
    dump(text, settings, rx)
    return 0


if __name__ == "__main__":
    sys.exit(main())
