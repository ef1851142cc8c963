from __future__ import annotations

import sys
import tempfile
import unittest
from pathlib import Path
from typing import List, Optional, Tuple

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from recode.chunks import ChunkSource
from recode.detect import StatisticalAccumulator, detect_encoding
from recode.errors import InvariantViolation
from recode.registry import FALLBACK, UTF_8, UTF_16LE, WINDOWS_1252, lookup


class RecordingClassifier:
    """Stands in for the statistical classifier and records what it is fed."""

    def __init__(self, answer: Tuple[Optional[str], float] = ("windows-1251", 0.95)):
        self.answer = answer
        self.calls: List[Tuple[int, bool]] = []
        self.closed = 0

    def feed(self, chunk: bytes, is_final: bool) -> None:
        self.calls.append((len(chunk), is_final))

    def close(self) -> Tuple[Optional[str], float]:
        self.closed += 1
        return self.answer


class DetectEncodingTests(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.tmp = Path(self._tmp.name)
        self.classifier = RecordingClassifier()

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def _detect(self, data: bytes, buf_size: int = 16, limit: int = 1000, classifier=None):
        path = self.tmp / "sample.txt"
        path.write_bytes(data)
        factory = (lambda: classifier) if classifier is not None else (lambda: self.classifier)
        with ChunkSource.open(path) as reader:
            return detect_encoding(reader, len(data), bytearray(buf_size), limit, classifier_factory=factory)

    def test_bom_overrides_classifier(self) -> None:
        data = b"\xff\xfeA\x00B\x00C\x00D\x00"
        verdict = self._detect(data)
        self.assertIs(verdict.encoding, UTF_16LE)
        self.assertTrue(verdict.confident)
        self.assertEqual(verdict.bom_length, 2)
        self.assertEqual(verdict.bytes_scanned, 10)
        self.assertEqual(self.classifier.calls, [])
        self.assertEqual(self.classifier.closed, 0)

    def test_bom_wins_even_for_a_confident_contrary_classifier(self) -> None:
        contrary = RecordingClassifier(("windows-1252", 1.0))
        verdict = self._detect(b"\xef\xbb\xbf\xe9t\xe9", classifier=contrary)
        self.assertIs(verdict.encoding, UTF_8)
        self.assertTrue(verdict.confident)
        self.assertEqual(contrary.calls, [])

    def test_last_chunk_is_final_when_file_ends(self) -> None:
        verdict = self._detect(b"x" * 32, buf_size=16)
        self.assertEqual(self.classifier.calls, [(16, False), (16, True)])
        self.assertEqual(verdict.bytes_scanned, 32)
        self.assertTrue(verdict.reached_eof)
        self.assertEqual(self.classifier.closed, 1)

    def test_limit_stops_scan_without_marking_final(self) -> None:
        verdict = self._detect(b"x" * 100, buf_size=16, limit=40)
        self.assertEqual(self.classifier.calls, [(16, False), (16, False), (8, False)])
        self.assertEqual(verdict.bytes_scanned, 40)
        self.assertFalse(verdict.reached_eof)

    def test_limit_equal_to_size_still_reaches_eof(self) -> None:
        self._detect(b"x" * 40, buf_size=16, limit=40)
        self.assertEqual(self.classifier.calls[-1], (8, True))

    def test_buffer_larger_than_limit_is_capped(self) -> None:
        verdict = self._detect(b"x" * 100, buf_size=64, limit=10)
        self.assertEqual(self.classifier.calls, [(10, False)])
        self.assertEqual(verdict.bytes_scanned, 10)

    def test_bytes_scanned_never_exceeds_limit(self) -> None:
        for size in (0, 1, 7, 15, 16, 17, 63, 200):
            for limit in (1, 5, 16, 50):
                with self.subTest(size=size, limit=limit):
                    verdict = self._detect(b"y" * size, buf_size=16, limit=limit,
                                           classifier=RecordingClassifier())
                    self.assertLessEqual(verdict.bytes_scanned, limit)
                    self.assertEqual(verdict.bytes_scanned, min(size, limit))

    def test_empty_file_gets_default_verdict(self) -> None:
        verdict = self._detect(b"")
        self.assertIs(verdict.encoding, UTF_8)
        self.assertTrue(verdict.confident)
        self.assertEqual(verdict.bytes_scanned, 0)
        self.assertTrue(verdict.reached_eof)
        self.assertEqual(self.classifier.calls, [])
        self.assertEqual(self.classifier.closed, 1)

    def test_classifier_answer_becomes_verdict(self) -> None:
        verdict = self._detect("привет".encode("cp1251"))
        self.assertIs(verdict.encoding, lookup("windows-1251"))
        self.assertTrue(verdict.confident)
        self.assertEqual(verdict.raw_label, "windows-1251")
        self.assertAlmostEqual(verdict.raw_confidence, 0.95)

    def test_low_confidence_is_provisional(self) -> None:
        verdict = self._detect(b"caf\xe9", classifier=RecordingClassifier(("ISO-8859-1", 0.3)))
        self.assertIs(verdict.encoding, WINDOWS_1252)
        self.assertFalse(verdict.confident)

    def test_unknown_label_falls_back(self) -> None:
        for answer in (("EUC-TW", 0.99), (None, 0.0)):
            with self.subTest(answer=answer):
                verdict = self._detect(b"\xa4\xa1", classifier=RecordingClassifier(answer))
                self.assertIs(verdict.encoding, FALLBACK)
                self.assertFalse(verdict.confident)

    def test_ascii_file_with_chardet(self) -> None:
        path = self.tmp / "ascii.txt"
        path.write_bytes(b"a" * 1000)
        with ChunkSource.open(path) as reader:
            verdict = detect_encoding(reader, 1000, bytearray(8192), 16384)
        self.assertIn(verdict.encoding, (UTF_8, WINDOWS_1252))
        self.assertTrue(verdict.confident)
        self.assertEqual(verdict.bytes_scanned, 1000)

    def test_non_positive_limit_is_rejected(self) -> None:
        path = self.tmp / "a.txt"
        path.write_bytes(b"abc")
        with ChunkSource.open(path) as reader:
            with self.assertRaises(InvariantViolation):
                detect_encoding(reader, 3, bytearray(16), 0)


class StatisticalAccumulatorTests(unittest.TestCase):
    def test_finalize_only_once(self) -> None:
        acc = StatisticalAccumulator(RecordingClassifier())
        acc.feed(b"abc", True)
        acc.finalize()
        with self.assertRaises(InvariantViolation):
            acc.finalize()
        with self.assertRaises(InvariantViolation):
            acc.feed(b"more", True)

    def test_threshold_is_inclusive(self) -> None:
        acc = StatisticalAccumulator(RecordingClassifier(("windows-1250", 0.5)), min_confidence=0.5)
        acc.feed(b"\x9a", True)
        enc, confident = acc.finalize()
        self.assertEqual(enc.name, "windows-1250")
        self.assertTrue(confident)


if __name__ == "__main__":
    unittest.main()
