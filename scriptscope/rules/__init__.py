"""Pattern catalog for the scan engine.

The catalog is a fixed, ordered table of :class:`Pattern` objects grouped by
severity tier.  Tier order is HIGH, MEDIUM, LOW and patterns inside a tier keep
their declaration order; the engine relies on both when ordering findings that
share a line.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterator, Sequence, Tuple

from scriptscope.severity import Severity


@dataclass(frozen=True)
class Pattern:
    """One named detection rule."""

    name: str
    severity: Severity
    source: str
    description: str
    ignore_case: bool = False

    @property
    def flags(self) -> int:
        # \b, \d and \w stay ASCII-only.
        return re.ASCII | (re.IGNORECASE if self.ignore_case else 0)

    def compile(self) -> "re.Pattern[str]":
        return re.compile(self.source, self.flags)

    def finditer(self, text: str) -> Iterator["re.Match[str]"]:
        """Return a fresh iterator over every match in ``text``.

        A new iterator is built on each call so no search position carries
        over between scans or units.
        """

        return self.compile().finditer(text)


@dataclass(frozen=True)
class Tier:
    """The patterns sharing one severity, in declaration order."""

    severity: Severity
    patterns: Tuple[Pattern, ...]


def load_catalog() -> Tuple[Tier, ...]:
    """Return the catalog tiers in scan order."""

    from .disclosure import PATTERNS as LOW_PATTERNS
    from .secrets import PATTERNS as HIGH_PATTERNS
    from .sinks import PATTERNS as MEDIUM_PATTERNS

    return (
        Tier(Severity.HIGH, HIGH_PATTERNS),
        Tier(Severity.MEDIUM, MEDIUM_PATTERNS),
        Tier(Severity.LOW, LOW_PATTERNS),
    )


def iter_patterns(catalog: Sequence[Tier]) -> Iterator[Pattern]:
    """Yield every pattern of ``catalog`` in traversal order."""

    for tier in catalog:
        yield from tier.patterns
