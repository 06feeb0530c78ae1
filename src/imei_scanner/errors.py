"""
Error taxonomy for the scanning pipeline.

Per-region failures (ExtractionFailed) are absorbed by the pipeline; per-frame
failures are handed back to the caller on the FrameResult.
"""

from typing import Optional


class ScanError(Exception):
    """Base class for every condition the scanner reports."""


class InvalidFrame(ScanError):
    """Frame is missing or has zero width/height."""


class ModelUnavailable(ScanError):
    """Detection model is missing, failed to load, or failed at inference."""


class ExtractionFailed(ScanError):
    """OCR failed or timed out for a single region."""

    def __init__(self, message: str, region=None):
        super().__init__(message)
        self.region = region


class SessionClosed(ScanError):
    """The scanning session was closed before or during a run."""


class CaptureError(ScanError):
    """A frame source (camera, video file) could not deliver a frame."""

    def __init__(self, message: str, source: Optional[str] = None):
        super().__init__(message)
        self.source = source
