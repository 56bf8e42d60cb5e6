"""Read academic terms and courses out of grade report screenshots."""

from .config import GRADE_SET, Preferences, Settings
from .errors import (
    GradeScanError,
    ImageDecodeError,
    NoCoursesParsed,
    NoSectionsDetected,
    OcrEngineFailure,
)
from .merge import merge_terms, sort_terms
from .models import Course, Term
from .pipeline import ImportOutcome, ImportSession, import_batch, import_paths, process_text
from .rows import parse_row
from .segment import segment_text, split_sections
from .terms import build_term, default_terms

__all__ = [
    "GRADE_SET",
    "Course",
    "GradeScanError",
    "ImageDecodeError",
    "ImportOutcome",
    "ImportSession",
    "NoCoursesParsed",
    "NoSectionsDetected",
    "OcrEngineFailure",
    "Preferences",
    "Settings",
    "Term",
    "build_term",
    "default_terms",
    "import_batch",
    "import_paths",
    "merge_terms",
    "parse_row",
    "process_text",
    "segment_text",
    "sort_terms",
    "split_sections",
]
