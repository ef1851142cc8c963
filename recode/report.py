# recode/report.py

from __future__ import annotations
import csv
from pathlib import Path
from typing import Iterable, List

from .model import FileEntry, ScanRow


def to_row(entry: FileEntry) -> ScanRow:
    """Build a report row from a detected (and previewed) entry."""
    v = entry.verdict
    return ScanRow(
        path=str(entry.path),
        size_bytes=entry.total_size,
        encoding=v.encoding.name,
        confident=v.confident,
        bytes_scanned=v.bytes_scanned,
        bom=v.bom_length > 0,
        classifier_label=v.raw_label or "",
        classifier_confidence=v.raw_confidence,
        preview=entry.preview,
    )


def write_csv(out_path: Path, rows: Iterable[ScanRow]) -> None:
    """Write detection results to a CSV file.

    Args:
        out_path (Path): Destination CSV file path.
        rows (Iterable[ScanRow]): Sequence of detection rows.

    Returns:
        None
    """
    out_path.parent.mkdir(parents=True, exist_ok=True)
    with out_path.open("w", encoding="utf-8", newline="") as f:
        writer = csv.writer(f)
        writer.writerow([
            "path", "size_bytes", "encoding", "confident", "bytes_scanned",
            "bom", "classifier_label", "classifier_confidence", "preview"
        ])
        for r in rows:
            writer.writerow([
                r.path,
                r.size_bytes,
                r.encoding,
                str(r.confident).lower(),
                r.bytes_scanned,
                str(r.bom).lower(),
                r.classifier_label,
                f"{r.classifier_confidence:.2f}",
                r.preview,
            ])


def _one_line(text: str) -> str:
    return text.replace("\n", "\\n").replace("\t", " ")


def render_table(rows: List[ScanRow], preview_buf: int) -> str:
    """Render rows as a plain-text table: File | Encoding | Preview."""
    header = ["File", "Encoding", f"Preview (first {preview_buf} bytes)"]
    body = [
        [r.path, r.encoding + ("" if r.confident else " (?)"), _one_line(r.preview)]
        for r in rows
    ]
    widths = [max(len(cells[i]) for cells in [header] + body) for i in range(len(header))]
    sep = "+" + "+".join("-" * (w + 2) for w in widths) + "+"

    def line(cells: List[str]) -> str:
        return "| " + " | ".join(c.ljust(w) for c, w in zip(cells, widths)) + " |"

    out = [sep, line(header), sep]
    out += [line(cells) for cells in body]
    out.append(sep)
    return "\n".join(out)
