# main.py

"""
Orchestrator: read params (JSON + CLI), detect each file's encoding, show a
preview report, then (after one confirmation) rewrite every file as UTF-8.
"""
from __future__ import annotations
import argparse
import json
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple

from recode.chunks import ChunkSource
from recode.convert import convert
from recode.detect import ClassifierFactory, detect_encoding
from recode.errors import ConfigError, RecodeError, WriteFailure
from recode.model import FileEntry, FileState, Interaction, RunConfig, ScratchBuffers
from recode.preview import read_preview
from recode.prompt import ask_interaction
from recode.report import render_table, to_row, write_csv
from recode.walk import iter_files


def load_config(path: Path | None) -> Dict[str, Any]:
    """Load configuration from a JSON file.

    Args:
        path (Path | None): Path to the JSON configuration file.

    Returns:
        Dict[str, Any]: Configuration dictionary. Empty if no file is provided or read fails.
    """
    if not path:
        return {}
    try:
        with path.open("r", encoding="utf-8") as f:
            cfg = json.load(f)
    except (OSError, ValueError) as exc:
        print(f"[WARN] Failed to read config {path}: {exc}", file=sys.stderr)
        return {}
    if not isinstance(cfg, dict):
        print(f"[WARN] Ignoring config {path}: expected a JSON object, got {type(cfg).__name__}", file=sys.stderr)
        return {}
    return cfg


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    """Parse CLI arguments.

    Returns:
        argparse.Namespace: Parsed command-line arguments.
    """
    p = argparse.ArgumentParser(
        description="Detect the text encoding of files and convert them to UTF-8 in place."
    )
    p.add_argument("files", nargs="*", help="Files (or directories, recursive) to convert.")
    p.add_argument("--buf", type=int, help="Detection read size in bytes (default: 8192).")
    p.add_argument("--preview-buf", type=int, help="Preview size in bytes (default: 128).")
    p.add_argument("--limit", type=int, help="Max bytes scanned per file for detection (default: 16384).")
    p.add_argument("-c", "--confirm", action="store_true", help="Convert without asking.")
    p.add_argument("--min-confidence", type=float, help="Classifier confidence treated as certain (default: 0.5).")
    p.add_argument("--report", type=str, help="Optional CSV report path.")
    p.add_argument("--config", type=str, help="Optional JSON config (flags override).")
    return p.parse_args(argv)


def _get_effective_config(args: argparse.Namespace) -> Tuple[Dict[str, Any], Path]:
    """Load CLI + JSON configuration, giving precedence to CLI flags."""
    script_dir = Path(__file__).parent
    default_config_path = script_dir / "params.json"
    config_path = Path(args.config) if args.config else default_config_path
    cfg = load_config(config_path if config_path.exists() else None)
    return cfg, config_path


def _pick(flag: Any, cfg: Dict[str, Any], key: str, default: Any) -> Any:
    return flag if flag is not None else cfg.get(key, default)


def _resolve_run(args: argparse.Namespace, cfg: Dict[str, Any]) -> Tuple[List[Path], RunConfig]:
    """Resolve the input list and the validated run configuration."""
    names = args.files or cfg.get("files", [])
    report = args.report or cfg.get("report")
    run_cfg = RunConfig(
        buf=_pick(args.buf, cfg, "buf", 8 * 1024),
        preview_buf=_pick(args.preview_buf, cfg, "preview_buf", 128),
        limit=_pick(args.limit, cfg, "limit", 16 * 1024),
        confirm=bool(args.confirm or cfg.get("confirm", False)),
        min_confidence=float(_pick(args.min_confidence, cfg, "min_confidence", 0.5)),
        report=Path(report) if report else None,
    )
    return [Path(n) for n in names], run_cfg


def scan_file(
    fp: Path,
    cfg: RunConfig,
    scratch: ScratchBuffers,
    classifier_factory: Optional[ClassifierFactory] = None,
) -> FileEntry:
    """Open one file, detect its encoding and read its preview.

    The returned entry keeps the reader open for the conversion pass.
    """
    reader = ChunkSource.open(fp)
    try:
        total = reader.total_size()
        entry = FileEntry(path=fp, total_size=total, reader=reader)
        entry.verdict = detect_encoding(
            reader, total, scratch.buf, cfg.limit,
            min_confidence=cfg.min_confidence,
            classifier_factory=classifier_factory,
        )
        entry.advance(FileState.DETECTED)
        entry.preview = read_preview(reader, entry.verdict, total, scratch.preview_buf)
        entry.advance(FileState.PREVIEWED)
    except BaseException:
        reader.close()
        raise
    return entry


def convert_all(entries: List[FileEntry], scratch: ScratchBuffers) -> int:
    """Convert entries in order, stopping at the first failure."""
    written = 0
    for i, entry in enumerate(entries, 1):
        print(f"[INFO] Converting ({i}/{len(entries)}): {entry.path}", file=sys.stderr)
        written += convert(entry, scratch.buf)
    return written


def _print_summary(entries: List[FileEntry], uncertain: int) -> None:
    """Print summary information to stderr."""
    converted = sum(1 for e in entries if e.state is FileState.CONVERTED)
    skipped = sum(1 for e in entries if e.state is FileState.SKIPPED)
    print(
        f"[INFO] Done. Total: {len(entries)} | Converted: {converted} | "
        f"Skipped: {skipped} | Low confidence: {uncertain}",
        file=sys.stderr,
    )


def run(
    files: List[Path],
    cfg: RunConfig,
    ask=ask_interaction,
    classifier_factory: Optional[ClassifierFactory] = None,
) -> List[FileEntry]:
    """Detect, report, confirm and convert. Raises RecodeError on the first failure."""
    scratch = ScratchBuffers.for_config(cfg)
    entries: List[FileEntry] = []
    try:
        paths = list(iter_files(files))
        for i, fp in enumerate(paths, 1):
            print(f"[INFO] Detecting ({i}/{len(paths)}): {fp}", file=sys.stderr)
            entry = scan_file(fp, cfg, scratch, classifier_factory)
            entries.append(entry)
            if not entry.verdict.confident:
                # Still converted with the best guess unless the user cancels.
                print(
                    f"[WARN] Low-confidence guess {entry.verdict.encoding} for {fp} "
                    f"(classifier said {entry.verdict.raw_label!r} at {entry.verdict.raw_confidence:.2f})",
                    file=sys.stderr,
                )

        rows = [to_row(e) for e in entries]
        print(render_table(rows, cfg.preview_buf))
        if cfg.report:
            try:
                write_csv(cfg.report, rows)
            except OSError as exc:
                raise WriteFailure(cfg.report, exc, operation="report write") from exc
            print(f"[INFO] Report: {cfg.report.resolve()}", file=sys.stderr)

        choice = Interaction.CONVERT if cfg.confirm else ask()
        if choice is Interaction.CANCEL:
            for entry in entries:
                entry.skip()
            print("Cancelled")
        else:
            convert_all(entries, scratch)
        _print_summary(entries, sum(1 for e in entries if not e.verdict.confident))
    finally:
        for entry in entries:
            entry.reader.close()
    return entries


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Main orchestration function.

    Returns:
        int: Exit code.
    """
    args = parse_args(argv)
    cfg, _ = _get_effective_config(args)
    try:
        files, run_cfg = _resolve_run(args, cfg)
    except (ConfigError, TypeError, ValueError) as exc:
        print(f"[ERR] {exc}", file=sys.stderr)
        return 2

    if not files:
        print("Nothing to detect, exiting...")
        return 0

    try:
        run(files, run_cfg)
    except RecodeError as exc:
        print(f"[ERR] {exc}", file=sys.stderr)
        return 3
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
