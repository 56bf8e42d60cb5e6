from __future__ import annotations


class GradeScanError(Exception):
    """Base for per-source failures. ``message`` is safe to show to a user."""

    message = "Could not import this grade report."

    def __init__(self, detail: str | None = None) -> None:
        super().__init__(detail or self.message)
        self.detail = detail


class ImageDecodeError(GradeScanError):
    message = "Could not read the image. Try a PNG or JPEG screenshot."


class OcrEngineFailure(GradeScanError):
    message = "Text recognition failed for this image."


class NoSectionsDetected(GradeScanError):
    message = "Could not detect any term sections (no 'Term GPA:' lines found)."


class NoCoursesParsed(GradeScanError):
    message = "Found term sections but could not read any courses from them."
