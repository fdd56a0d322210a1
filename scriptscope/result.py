"""Core finding data structures and summaries."""

from __future__ import annotations

from dataclasses import dataclass, asdict
from typing import Dict, Iterable, List, Sequence, Tuple

from .severity import Severity

SEVERITY_ORDER: Sequence[Severity] = (
    Severity.HIGH,
    Severity.MEDIUM,
    Severity.LOW,
)

MAX_MATCH_TEXT = 100
TRUNCATION_MARKER = "..."


def clip_match(text: str, limit: int = MAX_MATCH_TEXT) -> str:
    """Truncate ``text`` to ``limit`` characters, marking the cut."""

    if len(text) > limit:
        return text[:limit] + TRUNCATION_MARKER
    return text


@dataclass(frozen=True)
class Finding:
    """One occurrence of a catalog pattern in a unit's source text."""

    pattern_name: str
    severity: Severity
    line: int
    column: int
    match_text: str
    description: str
    char_offset: int
    line_text: str

    def to_dict(self) -> Dict[str, object]:
        data = asdict(self)
        data["severity"] = self.severity.value
        return data

    def to_report_dict(self) -> Dict[str, object]:
        """Return the exported shape of a finding."""

        return {
            "type": self.pattern_name,
            "severity": self.severity.value,
            "line": self.line,
            "column": self.column,
            "description": self.description,
            "match_text": self.match_text,
            "line_text": self.line_text,
        }


@dataclass
class Summary:
    """Aggregate finding counts by severity."""

    high: int = 0
    medium: int = 0
    low: int = 0

    @classmethod
    def from_findings(cls, findings: Iterable[Finding]) -> "Summary":
        summary = cls()
        for finding in findings:
            summary.increment(finding.severity)
        return summary

    def increment(self, severity: Severity) -> None:
        attr = severity.value.lower()
        setattr(self, attr, getattr(self, attr) + 1)

    def count(self, severity: Severity) -> int:
        return getattr(self, severity.value.lower())

    def to_dict(self) -> Dict[str, int]:
        return asdict(self)

    def as_rows(self) -> List[Tuple[str, int]]:
        """Return severity/count pairs ordered for reporting."""

        return [(severity.value, self.count(severity)) for severity in SEVERITY_ORDER]

    @property
    def total(self) -> int:
        return sum(self.count(severity) for severity in SEVERITY_ORDER)

    def exit_code(self) -> int:
        for severity in SEVERITY_ORDER:
            if self.count(severity) > 0:
                return severity.exit_priority
        return 0


def risk_score(findings: Iterable[Finding]) -> int:
    """Weighted sum of findings: HIGH=10, MEDIUM=5, LOW=1."""

    return sum(finding.severity.weight for finding in findings)


def risk_level(findings: Iterable[Finding]) -> str:
    """Return the most severe tier present, or ``"NONE"``."""

    present = {finding.severity for finding in findings}
    for severity in SEVERITY_ORDER:
        if severity in present:
            return severity.value
    return "NONE"


def format_summary_table(summary: Summary, findings: Sequence[Finding] = (), max_findings: int = 5) -> str:
    """Create a human-readable summary table for console output."""

    lines: List[str] = []
    lines.append("Scan Summary")
    lines.append("=" * 40)
    header = f"{'Severity':<10} | {'Count':>5}"
    lines.append(header)
    lines.append("-" * len(header))
    for severity, count in summary.as_rows():
        lines.append(f"{severity:<10} | {count:>5}")
    lines.append("-" * len(header))
    lines.append(f"Risk      : {risk_level(findings)} (score {risk_score(findings)})")
    lines.append(f"Findings  : {summary.total}")

    severity_rank = {severity: idx for idx, severity in enumerate(SEVERITY_ORDER)}
    top = sorted(findings, key=lambda finding: severity_rank[finding.severity])[:max_findings]
    if top:
        lines.append("")
        lines.append("Top Findings")
        lines.append("-" * 40)
        for finding in top:
            lines.append(f"[{finding.severity.value}] {finding.pattern_name} at {finding.line}:{finding.column}")
            lines.append(f"  {finding.line_text}")
    return "\n".join(lines)
