"""MEDIUM tier: DOM injection and dynamic code execution sinks."""

from __future__ import annotations

from typing import Tuple

from scriptscope.severity import Severity

from . import Pattern

PATTERNS: Tuple[Pattern, ...] = (
    Pattern(
        "innerHTML Assignment",
        Severity.MEDIUM,
        r"\.innerHTML\s*=",
        "Direct innerHTML assignment (XSS risk)",
    ),
    Pattern(
        "outerHTML Assignment",
        Severity.MEDIUM,
        r"\.outerHTML\s*=",
        "Direct outerHTML assignment (XSS risk)",
    ),
    Pattern(
        "document.write",
        Severity.MEDIUM,
        r"document\.write(?:ln)?\s*\(",
        "Use of document.write (XSS risk)",
    ),
    Pattern(
        "dangerouslySetInnerHTML",
        Severity.MEDIUM,
        r"dangerouslySetInnerHTML\s*=",
        "React dangerouslySetInnerHTML (XSS risk)",
    ),
    Pattern(
        "v-html Directive",
        Severity.MEDIUM,
        r"\bv-html\s*=",
        "Vue v-html raw HTML binding (XSS risk)",
    ),
    Pattern(
        "eval() usage",
        Severity.MEDIUM,
        r"\beval\s*\(",
        "Use of eval() (Code injection risk)",
    ),
    Pattern(
        "setTimeout with string",
        Severity.MEDIUM,
        r"setTimeout\s*\(\s*['\"`]",
        "setTimeout with string argument (Code injection risk)",
    ),
    Pattern(
        "setInterval with string",
        Severity.MEDIUM,
        r"setInterval\s*\(\s*['\"`]",
        "setInterval with string argument (Code injection risk)",
    ),
    Pattern(
        "Function constructor",
        Severity.MEDIUM,
        r"new\s+Function\s*\(",
        "Function constructor usage (Code injection risk)",
    ),
    Pattern(
        "insertAdjacentHTML",
        Severity.MEDIUM,
        r"\.insertAdjacentHTML\s*\(",
        "insertAdjacentHTML usage (XSS risk)",
    ),
)
