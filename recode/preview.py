# recode/preview.py

from __future__ import annotations
import codecs

from .chunks import ChunkSource
from .errors import InvariantViolation
from .model import EncodingVerdict

# A UTF-8 codepoint is at most 4 bytes, so a boundary is at most 3 bytes away.
MAX_OVERRUN = 3


def _is_continuation(byte: int) -> bool:
    return byte & 0xC0 == 0x80


def extract(decoded_text: str, max_bytes: int) -> str:
    """Return a prefix of `decoded_text` whose UTF-8 length is about `max_bytes`.

    CRLF is folded to LF first. When `max_bytes` falls inside a codepoint the
    cut moves forward, never backward, by up to 3 bytes.
    """
    text = decoded_text.replace("\r\n", "\n")
    data = text.encode("utf-8", errors="surrogatepass")
    if max_bytes >= len(data):
        return text
    for end in range(max_bytes, max_bytes + MAX_OVERRUN + 1):
        if end == len(data) or not _is_continuation(data[end]):
            return data[:end].decode("utf-8", errors="surrogatepass")
    raise InvariantViolation(
        None,
        f"no codepoint boundary within {MAX_OVERRUN} bytes of offset {max_bytes}",
        operation="preview truncation",
    )


def read_preview(
    reader: ChunkSource,
    verdict: EncodingVerdict,
    total_size: int,
    preview_buf: bytearray,
) -> str:
    """Decode the first `min(len(preview_buf), total_size)` bytes and truncate them.

    The reader is rewound first. A codepoint cut off by the end of the window
    is held back by the incremental decoder instead of being replaced.
    """
    reader.rewind()
    window = memoryview(preview_buf)[:min(len(preview_buf), total_size)]
    reader.read_exact(window, "preview")

    enc = verdict.encoding
    decoder = codecs.getincrementaldecoder(enc.codec)(errors=enc.lenient_errors)
    text = decoder.decode(bytes(window[verdict.bom_length:]), final=False)
    return extract(text, len(window))
