# recode/model.py

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Optional, TYPE_CHECKING

from .errors import ConfigError, InvariantViolation
from .registry import Encoding

if TYPE_CHECKING:
    from .chunks import ChunkSource


@dataclass(frozen=True)
class EncodingVerdict:
    """Represents the result of an encoding detection."""
    encoding: Encoding
    bytes_scanned: int                  # bytes consumed while detecting (<= limit)
    confident: bool                     # False: provisional low-confidence guess
    bom_length: int = 0                 # length of the recognised byte-order mark
    reached_eof: bool = False           # the last fed chunk was the true end of file
    raw_label: Optional[str] = None     # what the classifier answered, None for BOM verdicts
    raw_confidence: float = 1.0


class FileState(Enum):
    UNSCANNED = "unscanned"
    DETECTED = "detected"
    PREVIEWED = "previewed"
    CONVERTED = "converted"
    SKIPPED = "skipped"


_TRANSITIONS = {
    FileState.UNSCANNED: {FileState.DETECTED},
    FileState.DETECTED: {FileState.PREVIEWED, FileState.CONVERTED, FileState.SKIPPED},
    FileState.PREVIEWED: {FileState.CONVERTED, FileState.SKIPPED},
    FileState.CONVERTED: set(),
    FileState.SKIPPED: set(),
}


class Interaction(Enum):
    """Batch-wide answer to the confirmation prompt."""
    CONVERT = "Convert"
    CANCEL = "Cancel"

    def __str__(self) -> str:
        return self.value


@dataclass
class FileEntry:
    """One input path and everything the run learns about it.

    The entry owns its reader for the whole run; it is closed when the file is
    converted or skipped.
    """
    path: Path
    total_size: int
    reader: "ChunkSource"
    verdict: Optional[EncodingVerdict] = None
    preview: str = ""
    state: FileState = FileState.UNSCANNED

    def advance(self, new_state: FileState) -> None:
        """Move to `new_state`, refusing transitions the lifecycle does not allow."""
        if new_state not in _TRANSITIONS[self.state]:
            raise InvariantViolation(
                self.path,
                f"illegal state change {self.state.value} -> {new_state.value}",
            )
        self.state = new_state

    def skip(self) -> None:
        self.advance(FileState.SKIPPED)
        self.reader.close()


@dataclass
class RunConfig:
    """Values the pipeline needs, however they were sourced."""
    buf: int = 8 * 1024
    preview_buf: int = 128
    limit: int = 16 * 1024
    confirm: bool = False
    min_confidence: float = 0.5
    report: Optional[Path] = None

    def __post_init__(self) -> None:
        for name in ("buf", "preview_buf", "limit"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
                raise ConfigError(None, f"{name} must be a positive integer, got {value!r}")
        if not 0.0 <= self.min_confidence <= 1.0:
            raise ConfigError(None, f"min_confidence must be within [0, 1], got {self.min_confidence!r}")


@dataclass
class ScratchBuffers:
    """Caller-owned byte buffers, reused from one file to the next."""
    buf: bytearray
    preview_buf: bytearray

    @classmethod
    def for_config(cls, cfg: RunConfig) -> "ScratchBuffers":
        return cls(buf=bytearray(cfg.buf), preview_buf=bytearray(cfg.preview_buf))


@dataclass
class ScanRow:
    """Represents a row in the detection report."""
    path: str
    size_bytes: int
    encoding: str
    confident: bool
    bytes_scanned: int
    bom: bool
    classifier_label: str
    classifier_confidence: float
    preview: str = field(repr=False)
