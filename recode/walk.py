# recode/walk.py

from __future__ import annotations
from pathlib import Path
from typing import Iterable, Iterator, Set


def iter_files(paths: Iterable[Path]) -> Iterator[Path]:
    """Iterate over the given paths, expanding directories recursively.

    Files are yielded in the order given; a directory contributes its files in
    sorted order. Anything else is yielded as-is so opening it reports the error.
    A file reached twice (`dir dir/a.txt`) is yielded only the first time.

    Args:
        paths (Iterable[Path]): Files or directories named by the user.

    Yields:
        Path: Paths to each file.
    """
    seen: Set[Path] = set()

    def first_time(p: Path) -> bool:
        key = p.resolve()
        if key in seen:
            return False
        seen.add(key)
        return True

    for root in paths:
        if root.is_dir():
            for p in sorted(root.rglob("*")):
                if p.is_file() and first_time(p):
                    yield p
        elif first_time(root):
            yield root
