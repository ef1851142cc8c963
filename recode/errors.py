# recode/errors.py

from __future__ import annotations
from pathlib import Path


class RecodeError(Exception):
    """Base error for the detect/convert pipeline.

    Every error names the operation that failed and, when there is one, the
    path it failed on, so the orchestrator can print a single descriptive line.
    """

    operation = "process"

    def __init__(self, path: Path | str | None, cause: object = None, operation: str | None = None):
        self.path = Path(path) if path is not None else None
        self.cause = cause
        if operation:
            self.operation = operation
        super().__init__(self._message())

    def _message(self) -> str:
        where = f" for {self.path}" if self.path is not None else ""
        why = f": {self.cause}" if self.cause is not None else ""
        return f"{self.operation} failed{where}{why}"


class ConfigError(RecodeError):
    operation = "configure"


class OpenFailure(RecodeError):
    operation = "open"


class MetadataFailure(RecodeError):
    operation = "size"


class ReadFailure(RecodeError):
    """Mid-stream I/O error; `operation` carries the phase (detect/preview/convert)."""

    operation = "read"


class RewindFailure(RecodeError):
    operation = "rewind"


class DecodeFailure(RecodeError):
    operation = "decode"


class WriteFailure(RecodeError):
    operation = "write"


class InvariantViolation(RecodeError):
    operation = "internal check"
