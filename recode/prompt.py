# recode/prompt.py

from __future__ import annotations
import sys
from typing import Callable, TextIO

from .model import Interaction

CHOICES = list(Interaction)


def ask_interaction(
    read: Callable[[str], str] = input,
    out: TextIO = sys.stderr,
) -> Interaction:
    """Ask once for the whole batch.

    An empty answer picks the default (Convert), EOF counts as Cancel, and an
    answer may be any unambiguous prefix of a choice.
    """
    options = "/".join(str(c) for c in CHOICES)
    while True:
        try:
            answer = read(f"Do you want to continue? [{options}] ").strip().lower()
        except EOFError:
            return Interaction.CANCEL
        if not answer:
            return CHOICES[0]
        matches = [c for c in CHOICES if c.value.lower().startswith(answer)]
        if len(matches) == 1:
            return matches[0]
        print(f"[WARN] Unknown answer {answer!r}; choose one of {options}.", file=out)
