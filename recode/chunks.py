# recode/chunks.py

from __future__ import annotations
import os
from pathlib import Path
from typing import BinaryIO

from .errors import MetadataFailure, OpenFailure, ReadFailure, RewindFailure


class ChunkSource:
    """Sequential byte reader over one file, rewound between passes.

    Reads go straight into caller-supplied buffers; the source never keeps a
    reference to them.
    """

    def __init__(self, path: Path, stream: BinaryIO):
        self.path = path
        self._stream = stream

    @classmethod
    def open(cls, path: Path) -> "ChunkSource":
        try:
            stream = path.open("rb")
        except OSError as exc:
            raise OpenFailure(path, exc) from exc
        return cls(path, stream)

    @property
    def closed(self) -> bool:
        return self._stream.closed

    def total_size(self) -> int:
        """Byte length from file metadata, falling back to seeking to the end."""
        try:
            return os.fstat(self._stream.fileno()).st_size
        except (OSError, ValueError, AttributeError):
            pass
        try:
            size = self._stream.seek(0, os.SEEK_END)
        except OSError as exc:
            raise MetadataFailure(self.path, exc) from exc
        self.rewind()
        return size

    def read_chunk(self, buffer: memoryview | bytearray, phase: str = "read") -> int:
        """Fill as much of `buffer` as one read allows; 0 means end of stream."""
        try:
            return self._stream.readinto(buffer) or 0
        except OSError as exc:
            raise ReadFailure(self.path, exc, operation=f"{phase} read") from exc

    def read_exact(self, buffer: memoryview | bytearray, phase: str = "read") -> None:
        view = memoryview(buffer)
        filled = 0
        while filled < len(view):
            n = self.read_chunk(view[filled:], phase)
            if n == 0:
                raise ReadFailure(
                    self.path,
                    f"unexpected end of file after {filled} of {len(view)} bytes",
                    operation=f"{phase} read",
                )
            filled += n

    def rewind(self) -> None:
        try:
            self._stream.seek(0)
        except (OSError, ValueError) as exc:
            raise RewindFailure(self.path, exc) from exc

    def close(self) -> None:
        self._stream.close()

    def __enter__(self) -> "ChunkSource":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
