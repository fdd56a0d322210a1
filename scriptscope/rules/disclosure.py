"""LOW tier: information disclosure signals."""

from __future__ import annotations

from typing import Tuple

from scriptscope.severity import Severity

from . import Pattern

IPV4_OCTET = r"(?:25[0-5]|2[0-4][0-9]|[01]?[0-9][0-9]?)"

PATTERNS: Tuple[Pattern, ...] = (
    Pattern(
        "IPv4 Address",
        Severity.LOW,
        rf"\b(?:{IPV4_OCTET}\.){{3}}{IPV4_OCTET}\b",
        "IP address found in code",
    ),
    Pattern(
        "Email Address",
        Severity.LOW,
        r"\b[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}\b",
        "Email address found in code",
    ),
    Pattern(
        "TODO Comment",
        Severity.LOW,
        r"//\s*TODO[\s:]",
        "TODO comment (may indicate incomplete code)",
        ignore_case=True,
    ),
    Pattern(
        "FIXME Comment",
        Severity.LOW,
        r"//\s*FIXME[\s:]",
        "FIXME comment (may indicate bugs)",
        ignore_case=True,
    ),
    Pattern(
        "Debug Statement",
        Severity.LOW,
        r"console\.(log|debug|info)\s*\(",
        "Debug console statement",
    ),
    Pattern(
        "Internal Path",
        Severity.LOW,
        r"[C-Z]:\\[^\s'\"]{10,}",
        "Windows file path found",
    ),
    Pattern(
        "Internal URL",
        Severity.LOW,
        r"https?://(localhost|127\.0\.0\.1|192\.168\.\d+\.\d+|10\.\d+\.\d+\.\d+"
        r"|172\.(?:1[6-9]|2\d|3[01])\.\d+\.\d+)",
        "Internal/localhost URL found",
        ignore_case=True,
    ),
)
