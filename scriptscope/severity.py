"""Severity tiers for catalog patterns and findings."""

from __future__ import annotations

from enum import Enum


class Severity(str, Enum):
    """Enumerate the risk tiers a pattern can belong to."""

    HIGH = "HIGH"
    MEDIUM = "MEDIUM"
    LOW = "LOW"

    @property
    def weight(self) -> int:
        """Return the contribution of one finding to a risk score."""

        weights = {
            Severity.HIGH: 10,
            Severity.MEDIUM: 5,
            Severity.LOW: 1,
        }
        return weights[self]

    @property
    def exit_priority(self) -> int:
        """Return an integer ranking to drive exit code decisions."""

        ordering = {
            Severity.HIGH: 2,
            Severity.MEDIUM: 1,
            Severity.LOW: 0,
        }
        return ordering[self]
