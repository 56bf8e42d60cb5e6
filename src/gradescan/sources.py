from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

import pdfplumber
from pdf2image import convert_from_path
from pdf2image.exceptions import PDFInfoNotInstalledError, PDFPageCountError, PDFSyntaxError
from pdfminer.psparser import PSException
from pdfplumber.utils.exceptions import PdfminerException
from PIL import Image

from .errors import ImageDecodeError

log = logging.getLogger(__name__)

PDF_SUFFIXES = {".pdf"}


@dataclass(frozen=True)
class ImageSource:
    """An image (file path or decoded page) that still needs OCR."""

    name: str
    image: Path | Image.Image


@dataclass(frozen=True)
class TextSource:
    """Transcript text that came from a PDF text layer; no OCR needed."""

    name: str
    text: str


Source = ImageSource | TextSource


def _pdf_text(path: Path) -> str:
    with pdfplumber.open(path) as pdf:
        pages = [page.extract_text() or "" for page in pdf.pages]
    return "\n".join(pages)


def _pdf_sources(path: Path, dpi: int = 300) -> list[Source]:
    text = _pdf_text(path)
    if text.strip():
        log.info("%s: using embedded text layer", path.name)
        return [TextSource(path.name, text)]
    log.info("%s: no text layer, rasterizing at %d dpi", path.name, dpi)
    pages = convert_from_path(str(path), dpi=dpi)
    if len(pages) == 1:
        return [ImageSource(path.name, pages[0])]
    return [ImageSource(f"{path.name}#p{i}", im) for i, im in enumerate(pages, start=1)]


def expand_input(inp: str | Path, dpi: int = 300) -> list[Source]:
    """
    Turn one CLI input into sources.

    PDFs prefer their text layer (pdfplumber) and fall back to page images
    (pdf2image). Anything else is handed to the image normalizer as-is, so an
    unreadable file surfaces later as an ImageDecodeError for that one input.
    """
    p = Path(inp)
    if p.suffix.lower() not in PDF_SUFFIXES:
        return [ImageSource(p.name, p)]
    try:
        return _pdf_sources(p, dpi=dpi)
    except (
        PdfminerException,
        PSException,
        PDFInfoNotInstalledError,
        PDFPageCountError,
        PDFSyntaxError,
        OSError,
        ValueError,
    ) as e:
        raise ImageDecodeError(f"cannot read PDF {p}: {e}") from e
