"""
delayed/graphemes.py — user-perceived character segmentation

The typewriter effect spreads a write's duration over what the reader sees
as characters, not over code points: "é" written as e + U+0301, a flag, or
a ZWJ emoji family each count as one typed unit.

Segmentation follows Unicode extended grapheme clusters via the `regex`
module's \\X pattern.
"""

from __future__ import annotations

from typing import Iterator

import regex

_GRAPHEME = regex.compile(r"\X")


class Graphemes:
    """
    Lazy, restartable view of the grapheme clusters in a string.

    Each iter() call starts a fresh scan; len() counts clusters without
    materialising them.

        g = Graphemes("héllo")
        len(g)        # 5
        list(g)       # ['h', 'é', 'l', 'l', 'o']
    """

    __slots__ = ("_text", "_count")

    def __init__(self, text: str) -> None:
        self._text = text
        self._count: int | None = None

    @property
    def text(self) -> str:
        return self._text

    def __iter__(self) -> Iterator[str]:
        for match in _GRAPHEME.finditer(self._text):
            yield match.group()

    def __len__(self) -> int:
        if self._count is None:
            self._count = sum(1 for _ in _GRAPHEME.finditer(self._text))
        return self._count

    def __repr__(self) -> str:
        return f"Graphemes({self._text!r})"


def count_graphemes(text: str) -> int:
    return len(Graphemes(text))


def split_graphemes(text: str) -> list[str]:
    return list(Graphemes(text))
