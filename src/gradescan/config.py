from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

log = logging.getLogger(__name__)

# ---------- Grades ----------
GRADE_SET: tuple[float, ...] = (4.0, 3.5, 3.0, 2.5, 2.0, 1.5, 1.0, 0.5, 0.0)

# Dean's list thresholds
FIRST_HONORS_MIN_GPA = 3.4
SECOND_HONORS_MIN_GPA = 3.0
HONORS_MIN_GRADE = 2.0
HONORS_MIN_UNITS = 12
FIRST_HONORS_LABEL = "First Honors Dean's List"
SECOND_HONORS_LABEL = "Second Honors Dean's List"

# ---------- Row filtering ----------
# Course families carrying non-GPA load: NSTP/ROTC/CWTS/LTS (civic and
# military service), LASARE (recollection), PE (physical education).
DEFAULT_EXCLUDED_PREFIXES: tuple[str, ...] = ("NSTP", "ROTC", "CWTS", "LTS", "LASARE", "PE")
NON_ACADEMIC_MARKERS: tuple[str, ...] = ("P", "NGS", "N/A")

# ---------- Image normalization ----------
MIN_WORK_WIDTH = 1400
MIN_WORK_HEIGHT = 900
MAX_UPSCALE = 2.5
CONTRAST_BOOST = 1.5
BRIGHTNESS_LIFT = 1.1

# ---------- Session ----------
DEFAULT_TERM_COUNT = 4

# ---------- Environment ----------
ENV_OCR_ENGINE = "GRADESCAN_OCR_ENGINE"
ENV_OCR_LANG = "GRADESCAN_OCR_LANG"
ENV_EXCLUDED_PREFIXES = "GRADESCAN_EXCLUDED_PREFIXES"
ENV_PREFS = "GRADESCAN_PREFS"

DEFAULT_PREFS_PATH = Path.home() / ".config" / "gradescan" / "prefs.json"


def _split_prefixes(raw: str) -> tuple[str, ...]:
    return tuple(p.strip().upper() for p in raw.split(",") if p.strip())


@dataclass(frozen=True)
class Settings:
    ocr_engine: str = "tesseract"
    ocr_lang: str = "eng"
    excluded_prefixes: tuple[str, ...] = DEFAULT_EXCLUDED_PREFIXES
    min_width: int = MIN_WORK_WIDTH
    min_height: int = MIN_WORK_HEIGHT
    max_scale: float = MAX_UPSCALE
    contrast: float = CONTRAST_BOOST
    brightness: float = BRIGHTNESS_LIFT
    default_term_count: int = DEFAULT_TERM_COUNT

    @classmethod
    def from_env(cls, environ: dict[str, str] | None = None) -> Settings:
        env = os.environ if environ is None else environ
        kwargs: dict[str, Any] = {}
        engine = env.get(ENV_OCR_ENGINE, "").strip().lower()
        if engine:
            kwargs["ocr_engine"] = engine
        lang = env.get(ENV_OCR_LANG, "").strip()
        if lang:
            kwargs["ocr_lang"] = lang
        prefixes = env.get(ENV_EXCLUDED_PREFIXES)
        if prefixes is not None:
            kwargs["excluded_prefixes"] = _split_prefixes(prefixes)
        return cls(**kwargs)


@dataclass
class Preferences:
    """Small JSON-backed key-value store: loaded once, written on every change."""

    path: Path
    values: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def load(cls, path: Path | str | None = None) -> Preferences:
        if path is None:
            path = os.environ.get(ENV_PREFS) or DEFAULT_PREFS_PATH
        p = Path(path)
        values: dict[str, Any] = {}
        if p.exists():
            try:
                data = json.loads(p.read_text(encoding="utf-8"))
            except (OSError, ValueError) as e:
                log.warning("ignoring unreadable preferences file %s: %s", p, e)
            else:
                if isinstance(data, dict):
                    values = data
        return cls(p, values)

    def get(self, key: str, default: Any = None) -> Any:
        return self.values.get(key, default)

    def set(self, key: str, value: Any) -> None:
        if self.values.get(key) == value and key in self.values:
            return
        self.values[key] = value
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(self.values, indent=2, sort_keys=True), encoding="utf-8")
