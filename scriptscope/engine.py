"""Lexical scan engine: catalog + source text -> ordered findings."""

from __future__ import annotations

import logging
import re
from typing import List, Optional, Sequence, Union

from .locator import OffsetLocator
from .result import Finding, clip_match
from .rules import Tier, iter_patterns, load_catalog

_LOG = logging.getLogger(__name__)


class ScanError(Exception):
    """Base class for failures that abort a whole scan."""


class MatcherFailure(ScanError):
    """A pattern raised while compiling or matching."""

    def __init__(self, pattern_name: str, cause: BaseException) -> None:
        super().__init__(f"Pattern '{pattern_name}' failed: {cause}")
        self.pattern_name = pattern_name


class MalformedInput(ScanError):
    """The supplied source is not usable text."""


def _as_text(source: Union[str, bytes]) -> str:
    if isinstance(source, str):
        return source
    if isinstance(source, (bytes, bytearray)):
        try:
            return bytes(source).decode("utf-8")
        except UnicodeDecodeError as exc:
            raise MalformedInput(f"Source is not valid UTF-8: {exc}") from exc
    raise MalformedInput(f"Source must be text, got {type(source).__name__}")


def scan(source_text: Union[str, bytes], catalog: Optional[Sequence[Tier]] = None) -> List[Finding]:
    """Scan ``source_text`` against every catalog pattern.

    Findings are collected tier by tier and pattern by pattern, then stably
    sorted on line number alone: two findings on one line keep the order in
    which their patterns appear in the catalog, whatever their columns.

    Any error raised by a matcher aborts the scan; no partial list is
    returned.
    """

    text = _as_text(source_text)
    tiers = catalog if catalog is not None else load_catalog()
    locator = OffsetLocator(text)
    findings: List[Finding] = []

    for pattern in iter_patterns(tiers):
        try:
            # finditer steps past empty matches, so this always terminates.
            matches = list(pattern.finditer(text))
        except (re.error, RecursionError, MemoryError) as exc:
            raise MatcherFailure(pattern.name, exc) from exc
        for match in matches:
            location = locator.locate(match.start())
            findings.append(
                Finding(
                    pattern_name=pattern.name,
                    severity=pattern.severity,
                    line=location.line,
                    column=location.column,
                    match_text=clip_match(match.group(0)),
                    description=pattern.description,
                    char_offset=match.start(),
                    line_text=location.line_text.strip(),
                )
            )

    findings.sort(key=lambda finding: finding.line)
    _LOG.debug("Scanned %d characters, %d findings", len(text), len(findings))
    return findings
