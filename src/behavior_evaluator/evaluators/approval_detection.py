"""Heuristic detection of approval requests in assistant text.

The classifier is deliberately isolated behind detect_approval_request so
its phrase list can be tuned and tested without touching the rules that
consume its verdict.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from dataclasses import dataclass

__all__ = [
    "APPROVAL_PATTERNS",
    "FAILURE_REPORT_PATTERNS",
    "ApprovalDetection",
    "detect_approval_request",
    "mentions_failure",
]

APPROVAL_PATTERNS: tuple[str, ...] = (
    r"\bmay i\b",
    r"\bcan i (?:go ahead|proceed|continue)\b",
    r"\bshould i (?:go ahead|proceed|continue)\b",
    r"\bshall i\b",
    r"\bdo you want me to\b",
    r"\bwould you like me to\b",
    r"\bis it (?:ok|okay|alright) (?:if|to)\b",
    r"\brequest(?:ing)? (?:your )?(?:approval|permission|confirmation)\b",
    r"\b(?:approval|permission|confirmation) (?:is )?(?:required|needed)\b",
    r"\bplease (?:confirm|approve)\b",
    r"\bwaiting for (?:your )?(?:approval|confirmation|go-ahead)\b",
    r"\b(?:do i have|with) your (?:permission|approval)\b",
    r"\bproceed\s*\?",
    r"\bapprove (?:this|the)\b",
    r"\bconfirm (?:before|that you want)\b",
)

FAILURE_REPORT_PATTERNS: tuple[str, ...] = (
    r"\berror\b",
    r"\bfail(?:ed|ure|s|ing)?\b",
    r"\bissue\b",
    r"\bproblem\b",
    r"\bcould ?n[o']t\b",
    r"\bunable to\b",
    r"\bdid ?n[o']t work\b",
    r"\bbroke(?:n)?\b",
    r"\bexception\b",
)


@dataclass(frozen=True)
class ApprovalDetection:
    """Outcome of classifying one piece of text.

    Attributes:
        requested: Whether the text asks for approval.
        matched_text: The span that matched, kept as evidence.
        pattern: The pattern that matched.

    """

    requested: bool
    matched_text: str | None = None
    pattern: str | None = None


def _compile(patterns: Iterable[str]) -> tuple[re.Pattern[str], ...]:
    return tuple(re.compile(p, re.IGNORECASE) for p in patterns)


_APPROVAL_REGEXES = _compile(APPROVAL_PATTERNS)
_FAILURE_REGEXES = _compile(FAILURE_REPORT_PATTERNS)


def detect_approval_request(
    text: str | None,
    patterns: Iterable[str] | None = None,
) -> ApprovalDetection:
    """Detect whether free-form text asks the user for approval.

    Args:
        text: Assistant message text.
        patterns: Optional replacement pattern list.

    Returns:
        ApprovalDetection with the first matching span.

    """
    if not text:
        return ApprovalDetection(requested=False)

    regexes = _compile(patterns) if patterns is not None else _APPROVAL_REGEXES
    for regex in regexes:
        match = regex.search(text)
        if match:
            return ApprovalDetection(
                requested=True,
                matched_text=match.group(0),
                pattern=regex.pattern,
            )
    return ApprovalDetection(requested=False)


def mentions_failure(text: str | None) -> bool:
    """Whether text communicates that something went wrong."""
    if not text:
        return False
    return any(regex.search(text) for regex in _FAILURE_REGEXES)
