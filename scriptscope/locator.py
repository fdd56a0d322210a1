"""Translate character offsets into 1-based line/column positions."""

from __future__ import annotations

import bisect
from dataclasses import dataclass
from typing import List


@dataclass(frozen=True)
class Location:
    line: int
    column: int
    line_text: str


class OffsetLocator:
    """Resolve offsets against one source text.

    Line starts are computed once, so resolving many offsets of the same scan
    costs a bisection each instead of a walk over every line.
    """

    def __init__(self, source_text: str) -> None:
        self._lines: List[str] = source_text.split("\n")
        self._starts: List[int] = []
        cursor = 0
        for line in self._lines:
            self._starts.append(cursor)
            # +1 for the newline removed by split
            cursor += len(line) + 1

    def locate(self, char_offset: int) -> Location:
        if char_offset < 0:
            raise ValueError(f"Offset must be non-negative, got {char_offset}")
        index = bisect.bisect_right(self._starts, char_offset) - 1
        line_text = self._lines[index]
        column = char_offset - self._starts[index] + 1
        if index == len(self._lines) - 1:
            # Past the end of a text without trailing newline: clamp.
            column = min(column, len(line_text) + 1)
        return Location(line=index + 1, column=column, line_text=line_text)


def locate(source_text: str, char_offset: int) -> Location:
    """Return the line, column and verbatim line text for ``char_offset``."""

    return OffsetLocator(source_text).locate(char_offset)
