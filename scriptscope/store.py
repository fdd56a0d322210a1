"""Per-unit finding storage with read-time suppression."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, FrozenSet, Iterable, List, Optional, Set

from .result import Finding, Summary


@dataclass(frozen=True)
class SuppressionKey:
    """Identity of an ignored finding.

    Offsets are volatile: once the unit's text shifts (for example after
    reformatting) the key stops matching and the finding shows again.
    """

    char_offset: int
    line: int
    unit_id: str

    @classmethod
    def for_finding(cls, finding: Finding, unit_id: str) -> "SuppressionKey":
        return cls(char_offset=finding.char_offset, line=finding.line, unit_id=unit_id)


class FindingStore:
    """Hold the latest findings of every unit plus the suppression set.

    Not thread-safe: callers mutating it from several threads must serialize
    access themselves.
    """

    def __init__(self) -> None:
        self._findings: Dict[str, List[Finding]] = {}
        self._suppressed: Set[SuppressionKey] = set()

    def __contains__(self, unit_id: object) -> bool:
        return unit_id in self._findings

    def unit_ids(self) -> List[str]:
        return list(self._findings)

    @property
    def suppressed_keys(self) -> FrozenSet[SuppressionKey]:
        return frozenset(self._suppressed)

    def replace(self, unit_id: str, findings: Iterable[Finding]) -> None:
        """Overwrite the unit's findings wholesale."""

        self._findings[unit_id] = list(findings)

    def findings(self, unit_id: str) -> List[Finding]:
        """Return every stored finding of the unit, suppressed ones included."""

        return list(self._findings.get(unit_id, ()))

    def suppress(self, finding: Finding, unit_id: str) -> SuppressionKey:
        key = SuppressionKey.for_finding(finding, unit_id)
        self._suppressed.add(key)
        return key

    def suppress_key(self, key: SuppressionKey) -> None:
        self._suppressed.add(key)

    def unsuppress(self, finding: Finding, unit_id: str) -> None:
        self._suppressed.discard(SuppressionKey.for_finding(finding, unit_id))

    def is_suppressed(self, finding: Finding, unit_id: str) -> bool:
        return SuppressionKey.for_finding(finding, unit_id) in self._suppressed

    def active_findings(self, unit_id: str) -> List[Finding]:
        return [
            finding
            for finding in self._findings.get(unit_id, ())
            if not self.is_suppressed(finding, unit_id)
        ]

    def all_active_findings(self) -> List[Finding]:
        active: List[Finding] = []
        for unit_id in self._findings:
            active.extend(self.active_findings(unit_id))
        return active

    def aggregate_by_severity(self, unit_id: Optional[str] = None) -> Summary:
        """Count active findings of one unit, or of every unit when omitted."""

        if unit_id is None:
            return Summary.from_findings(self.all_active_findings())
        return Summary.from_findings(self.active_findings(unit_id))

    def remove(self, unit_id: str) -> None:
        """Forget the unit's findings and its suppression keys."""

        self._findings.pop(unit_id, None)
        self._suppressed = {key for key in self._suppressed if key.unit_id != unit_id}
