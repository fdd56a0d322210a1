"""HIGH tier: credential and secret shapes."""

from __future__ import annotations

from typing import Tuple

from scriptscope.severity import Severity

from . import Pattern


def _high(name: str, source: str, description: str, ignore_case: bool = False) -> Pattern:
    return Pattern(name, Severity.HIGH, source, description, ignore_case)


PATTERNS: Tuple[Pattern, ...] = (
    _high(
        "AWS Access Key",
        r"\b(AKIA[0-9A-Z]{16})\b",
        "AWS Access Key ID detected",
    ),
    _high(
        "AWS Temporary Access Key",
        r"\b(ASIA[0-9A-Z]{16})\b",
        "AWS temporary (STS) Access Key ID detected",
    ),
    _high(
        "AWS Secret Key",
        r"aws[_-]?secret[_-]?access[_-]?key['\"\s]*[:=]\s*['\"]([A-Za-z0-9/+=]{40})['\"]",
        "AWS Secret Access Key detected",
        ignore_case=True,
    ),
    _high(
        "Private Key",
        r"-----BEGIN\s+((?:RSA|EC|DSA|OPENSSH)\s+)?PRIVATE KEY-----",
        "Private cryptographic key detected",
    ),
    _high(
        "Google API Key",
        r"AIza[0-9A-Za-z\-_]{35}",
        "Google API Key detected",
    ),
    _high(
        "Stripe API Key",
        r"sk_live_[0-9a-zA-Z]{24,}",
        "Stripe Secret Key detected",
    ),
    _high(
        "Slack Token",
        r"xox[baprs]-[0-9a-zA-Z\-]{10,72}",
        "Slack Token detected",
    ),
    _high(
        "GitHub Token",
        r"gh[pousr]_[A-Za-z0-9_]{36,}",
        "GitHub Token detected",
    ),
    _high(
        "Generic API Key",
        r"api[_-]?key['\"\s]*[:=]\s*['\"]([a-zA-Z0-9\-_]{20,})['\"]",
        "Potential API key detected",
        ignore_case=True,
    ),
    _high(
        "Generic Secret",
        r"secret['\"\s]*[:=]\s*['\"]([a-zA-Z0-9\-_!@#$%^&*()+=]{16,})['\"]",
        "Potential secret value detected",
        ignore_case=True,
    ),
    _high(
        "Password in Code",
        r"password['\"\s]*[:=]\s*['\"]([^'\"]{8,})['\"]",
        "Hardcoded password detected",
        ignore_case=True,
    ),
)
