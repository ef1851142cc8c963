# recode/detect.py

"""
Streaming encoding detection: byte-order mark first, then the statistical
classifier fed from bounded windows until end of file or the scan limit.
"""
from __future__ import annotations
from typing import Callable, Optional, Protocol, Tuple

from chardet import UniversalDetector

from .bom import probe_bom
from .chunks import ChunkSource
from .errors import InvariantViolation
from .model import EncodingVerdict
from .registry import CANONICAL, FALLBACK, Encoding, lookup


class Classifier(Protocol):
    """Opaque statistical classifier: feed bytes, then ask for a best guess."""

    def feed(self, chunk: bytes, is_final: bool) -> None: ...

    def close(self) -> Tuple[Optional[str], float]: ...


class ChardetClassifier:
    """Classifier backed by chardet's UniversalDetector."""

    def __init__(self) -> None:
        self._detector = UniversalDetector()

    def feed(self, chunk: bytes, is_final: bool) -> None:
        # chardet has no end-of-input flag on feed; close() plays that part.
        if not self._detector.done:
            self._detector.feed(chunk)

    def close(self) -> Tuple[Optional[str], float]:
        result = self._detector.close() or {}
        return result.get("encoding"), float(result.get("confidence") or 0.0)


ClassifierFactory = Callable[[], Classifier]


class StatisticalAccumulator:
    """Feeds byte windows to a classifier and turns its answer into a verdict.

    `finalize()` must be called exactly once, after the last `feed()`.
    """

    def __init__(self, classifier: Optional[Classifier] = None, min_confidence: float = 0.5):
        self._classifier = classifier if classifier is not None else ChardetClassifier()
        self.min_confidence = min_confidence
        self.bytes_fed = 0
        self.reached_eof = False
        self.raw_label: Optional[str] = None
        self.raw_confidence = 0.0
        self._finalized = False

    def feed(self, chunk: bytes | memoryview, is_final: bool) -> None:
        if self._finalized:
            raise InvariantViolation(None, "feed after finalize")
        data = bytes(chunk)
        self._classifier.feed(data, is_final)
        self.bytes_fed += len(data)
        self.reached_eof = is_final

    def finalize(self) -> Tuple[Encoding, bool]:
        if self._finalized:
            raise InvariantViolation(None, "classifier finalized twice")
        self._finalized = True
        label, confidence = self._classifier.close()
        self.raw_label, self.raw_confidence = label, confidence

        if self.bytes_fed == 0:
            # Nothing to go on; an empty file is valid UTF-8.
            return CANONICAL, True
        enc = lookup(label)
        if enc is None:
            return FALLBACK, False
        return enc, confidence >= self.min_confidence


def detect_encoding(
    reader: ChunkSource,
    total_size: Optional[int],
    buf: bytearray,
    limit: int,
    min_confidence: float = 0.5,
    classifier_factory: Optional[ClassifierFactory] = None,
) -> EncodingVerdict:
    """Detect the encoding of the stream behind `reader`, from its current position.

    At most `limit` bytes are read, `len(buf)` at a time. A byte-order mark in
    the first chunk decides the verdict on its own; otherwise each chunk goes
    to the classifier, flagged final only when it ends exactly at `total_size`.
    """
    if limit <= 0:
        raise InvariantViolation(reader.path, f"scan limit must be positive, got {limit}")
    view = memoryview(buf)
    step = len(view)
    cur = 0

    n = reader.read_chunk(view[:min(step, limit)], "detect")
    cur += n
    if n:
        found = probe_bom(view[:n], total_size)
        if found:
            enc, mark_len = found
            return EncodingVerdict(
                encoding=enc,
                bytes_scanned=cur,
                confident=True,
                bom_length=mark_len,
                reached_eof=cur == total_size,
            )

    acc = StatisticalAccumulator(
        classifier_factory() if classifier_factory else None,
        min_confidence=min_confidence,
    )
    if n:
        acc.feed(view[:n], cur == total_size)
        while cur < limit:
            n = reader.read_chunk(view[:min(step, limit - cur)], "detect")
            if not n:
                break
            cur += n
            acc.feed(view[:n], cur == total_size)

    enc, confident = acc.finalize()
    return EncodingVerdict(
        encoding=enc,
        bytes_scanned=cur,
        confident=confident,
        reached_eof=acc.reached_eof or cur == total_size,
        raw_label=acc.raw_label,
        raw_confidence=acc.raw_confidence,
    )
