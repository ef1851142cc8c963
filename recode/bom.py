# recode/bom.py

from __future__ import annotations
from typing import Optional, Tuple

from .registry import Encoding, UTF_8, UTF_16BE, UTF_16LE, UTF_32BE, UTF_32LE

# Longest first: the UTF-32LE mark starts with the UTF-16LE one.
_BOMS: Tuple[Encoding, ...] = (UTF_32BE, UTF_32LE, UTF_8, UTF_16BE, UTF_16LE)
_UTF32 = (UTF_32BE, UTF_32LE)


def probe_bom(head: bytes | memoryview, total_size: Optional[int] = None) -> Optional[Tuple[Encoding, int]]:
    """Match a byte-order mark at the start of `head`.

    Returns (encoding, mark_length) or None. A UTF-32 mark whose payload is not
    a whole number of 4-byte units is read as UTF-16LE instead (FF FE 00 00 is
    also a UTF-16LE mark followed by U+0000).
    """
    head = bytes(head[:4])
    for enc in _BOMS:
        if not head.startswith(enc.bom):
            continue
        if enc in _UTF32 and total_size is not None and (total_size - len(enc.bom)) % 4:
            continue
        return enc, len(enc.bom)
    return None
