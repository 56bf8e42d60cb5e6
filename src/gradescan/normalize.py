from __future__ import annotations

import io
import logging
from pathlib import Path
from typing import BinaryIO, Union

from PIL import Image, ImageEnhance, ImageOps, UnidentifiedImageError

from .config import Settings
from .errors import ImageDecodeError

log = logging.getLogger(__name__)

ImageInput = Union[str, Path, bytes, BinaryIO, Image.Image]


def scale_factor(
    width: int,
    height: int,
    min_width: int,
    min_height: int,
    max_scale: float,
) -> float:
    """Upscale toward the working floor, capped at ``max_scale``; never below 1."""
    if width <= 0 or height <= 0:
        return 1.0
    wanted = max(min_width / width, min_height / height)
    return max(1.0, min(max_scale, wanted))


def _decode(source: ImageInput) -> Image.Image:
    if isinstance(source, Image.Image):
        return source.copy()
    fp = io.BytesIO(source) if isinstance(source, (bytes, bytearray)) else source
    try:
        with Image.open(fp) as im:
            im.load()
            return im.copy()
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError, ValueError) as e:
        raise ImageDecodeError(f"cannot decode image {_describe(source)}: {e}") from e


def _describe(source: ImageInput) -> str:
    if isinstance(source, (str, Path)):
        return str(source)
    if isinstance(source, (bytes, bytearray)):
        return f"<{len(source)} bytes>"
    return repr(getattr(source, "name", source))


def normalize_image(source: ImageInput, settings: Settings | None = None) -> Image.Image:
    s = settings or Settings()
    im = _decode(source)
    w, h = im.size
    factor = scale_factor(w, h, s.min_width, s.min_height, s.max_scale)
    if factor > 1.0:
        im = im.resize((round(w * factor), round(h * factor)), Image.Resampling.LANCZOS)
    log.debug("normalize %s: %dx%d scale=%.2f", _describe(source), w, h, factor)

    im = ImageOps.grayscale(im)
    im = ImageEnhance.Contrast(im).enhance(s.contrast)
    im = ImageEnhance.Brightness(im).enhance(s.brightness)
    return im
