# recode/convert.py

from __future__ import annotations
import codecs
from typing import List

from .errors import DecodeFailure, InvariantViolation, WriteFailure
from .model import FileEntry, FileState
from .registry import CANONICAL


def _strip_bom(data: bytes, bom: bytes) -> bytes:
    if bom and data.startswith(bom):
        return data[len(bom):]
    return data


def _read_all(entry: FileEntry, buf: bytearray) -> bytes:
    reader = entry.reader
    reader.rewind()
    chunk = memoryview(buf)
    parts: List[bytes] = []
    while True:
        n = reader.read_chunk(chunk, "convert")
        if not n:
            break
        parts.append(bytes(chunk[:n]))
    return b"".join(parts)


def to_utf8(data: bytes, entry: FileEntry) -> bytes:
    """Return `data` re-encoded as UTF-8 without a byte-order mark.

    UTF-8 input is validated and passed through unchanged apart from the mark.
    """
    enc = entry.verdict.encoding
    payload = _strip_bom(data, enc.bom)
    try:
        if enc == CANONICAL:
            payload.decode("utf-8")
            return payload
        return codecs.decode(payload, enc.codec, enc.errors).encode("utf-8")
    except UnicodeError as exc:
        raise DecodeFailure(entry.path, f"not valid {enc.name}: {exc}") from exc


def convert(entry: FileEntry, buf: bytearray) -> int:
    """Rewrite `entry.path` as UTF-8 using its stored verdict.

    `buf` is the caller's scratch buffer, used for the read pass. Returns the
    number of bytes written. The file is truncated before the
    new content is written, so a failure part-way through can leave the file
    empty or short.
    """
    if entry.verdict is None or entry.state not in (FileState.DETECTED, FileState.PREVIEWED):
        raise InvariantViolation(entry.path, f"cannot convert a file in state {entry.state.value}")

    output = to_utf8(_read_all(entry, buf), entry)
    entry.reader.close()

    try:
        with entry.path.open("wb") as f:
            f.write(output)
    except OSError as exc:
        raise WriteFailure(entry.path, exc) from exc

    entry.advance(FileState.CONVERTED)
    return len(output)
