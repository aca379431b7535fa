"""Typed exceptions raised by configuration and generation."""
from typing import Any, Dict, List, Optional


class LabelgenError(Exception):
    """Base class for all labelgen errors."""


class InvalidConfig(LabelgenError, ValueError):
    """Raised when the generator configuration fails validation."""

    def __init__(self, message: str, errors: Optional[List[Dict[str, Any]]] = None):
        super().__init__(message)
        self.errors = errors or []


class WriteError(LabelgenError, OSError):
    """Raised when the output sink rejects a write mid-run.

    Partial output is left in the sink. ``bytes_written`` counts the bytes
    accepted before the failing write.
    """

    def __init__(self, stage: str, bytes_written: int, reason: str = ""):
        message = f"writing {stage} failed after {bytes_written} bytes"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)
        self.stage = stage
        self.bytes_written = bytes_written
