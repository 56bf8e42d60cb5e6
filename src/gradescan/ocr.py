from __future__ import annotations

import logging
import os
import string
from collections.abc import Callable, Iterator
from dataclasses import dataclass
from typing import Protocol

import numpy as np
import pytesseract
from PIL import Image

from .config import ENV_OCR_ENGINE
from .errors import OcrEngineFailure

log = logging.getLogger(__name__)

# No quotes and no space: pytesseract shlex-splits the config string, and
# tesseract keeps word gaps regardless of the whitelist.
DEFAULT_WHITELIST = string.ascii_letters + string.digits + ".,:/()-"


@dataclass(frozen=True)
class OcrOptions:
    psm: int = 6  # uniform block of text
    dpi: int = 300
    preserve_interword_spaces: bool = True
    whitelist: str = DEFAULT_WHITELIST

    def tesseract_config(self) -> str:
        parts = [f"--psm {self.psm}", f"--dpi {self.dpi}"]
        if self.preserve_interword_spaces:
            parts.append("-c preserve_interword_spaces=1")
        if self.whitelist:
            parts.append(f"-c tessedit_char_whitelist={self.whitelist}")
        return " ".join(parts)


class OcrJob:
    """
    One recognition run. Iterating yields progress fractions in [0, 1]; once
    the iterator is exhausted ``text`` holds the recognized transcript.
    """

    def __init__(self, run: Callable[[], Iterator[float | str]]) -> None:
        self._run = run
        self._text: str | None = None

    def __iter__(self) -> Iterator[float]:
        for ev in self._run():
            if isinstance(ev, str):
                self._text = ev
                continue
            yield min(1.0, max(0.0, float(ev)))

    @property
    def text(self) -> str:
        if self._text is None:
            for _ in self:
                pass
        return self._text or ""


class OcrEngine(Protocol):
    name: str

    def recognize(self, image: Image.Image) -> OcrJob: ...


class TesseractEngine:
    name = "tesseract"

    def __init__(self, lang: str = "eng", options: OcrOptions | None = None) -> None:
        self.lang = lang
        self.options = options or OcrOptions()

    def recognize(self, image: Image.Image) -> OcrJob:
        def run() -> Iterator[float | str]:
            yield 0.0
            try:
                text = pytesseract.image_to_string(
                    image, lang=self.lang, config=self.options.tesseract_config()
                )
            except (pytesseract.TesseractError, pytesseract.TesseractNotFoundError, OSError) as e:
                raise OcrEngineFailure(f"tesseract: {e}") from e
            yield text
            yield 1.0

        return OcrJob(run)


class PaddleEngine:
    name = "paddle"

    def __init__(self, lang: str = "en") -> None:
        self.lang = "en" if lang == "eng" else lang
        self._ocr = None

    def _engine(self):
        if self._ocr is None:
            try:
                from paddleocr import PaddleOCR  # type: ignore
            except ImportError as e:
                raise OcrEngineFailure(f"paddleocr is not installed: {e}") from e
            try:
                self._ocr = PaddleOCR(lang=self.lang)
            except Exception as e:  # model download or init failures
                raise OcrEngineFailure(f"paddleocr init: {e}") from e
        return self._ocr

    def recognize(self, image: Image.Image) -> OcrJob:
        def run() -> Iterator[float | str]:
            yield 0.0
            ocr = self._engine()
            yield 0.1
            try:
                res = ocr.ocr(np.array(image.convert("RGB")))
            except Exception as e:  # paddle raises bare Exceptions from its C++ side
                raise OcrEngineFailure(f"paddleocr: {e}") from e
            yield _paddle_lines_to_text(res)
            yield 1.0

        return OcrJob(run)


def _paddle_lines_to_text(res, y_tol: float = 10.0) -> str:
    """Regroup paddle's per-box results into top-to-bottom text lines."""
    boxes: list[tuple[float, float, str]] = []
    for line in (res or [None])[0] or []:
        try:
            box, (txt, _conf) = line
        except (TypeError, ValueError):
            continue
        if not txt:
            continue
        xs = [pt[0] for pt in box]
        ys = [pt[1] for pt in box]
        boxes.append((float(min(ys)), float(min(xs)), txt))
    boxes.sort()

    rows: list[tuple[float, list[tuple[float, str]]]] = []
    for y, x, txt in boxes:
        if rows and abs(y - rows[-1][0]) <= y_tol:
            rows[-1][1].append((x, txt))
        else:
            rows.append((y, [(x, txt)]))
    return "\n".join(" ".join(t for _x, t in sorted(toks)) for _y, toks in rows)


ENGINES = {
    TesseractEngine.name: TesseractEngine,
    PaddleEngine.name: PaddleEngine,
}


def resolve_engine(name: str | None = None, lang: str = "eng") -> OcrEngine:
    key = (name or os.environ.get(ENV_OCR_ENGINE, "") or "tesseract").strip().lower()
    try:
        cls = ENGINES[key]
    except KeyError:
        raise ValueError(f"unknown OCR engine {key!r} (choose from {', '.join(ENGINES)})") from None
    log.debug("using OCR engine %s (lang=%s)", key, lang)
    return cls(lang=lang)
