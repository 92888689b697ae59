"""Reduce a validator reply to a completed/total ratio.

The reply is free prose, so parsing is a best-effort cascade of patterns
tried in a fixed order; the first one that matches wins:

1. ``fraction``    "3/4"
2. ``out_of``      "3 out of 4"
3. ``instead_of``  "2 cards instead of 3"
4. ``only``        "only 2 ... 3" (case-insensitive)

If nothing matches, the reply is taken as confirming every action entry
(completed = total = action count). This can report full success for an
incomplete request whose reply avoids all four patterns.
"""

import re
from dataclasses import dataclass
from typing import Optional, Pattern, Sequence, Tuple

RATIO_PATTERNS: Sequence[Tuple[str, Pattern[str]]] = (
    ("fraction", re.compile(r"(\d+)\s*/\s*(\d+)")),
    ("out_of", re.compile(r"(\d+)\s+out of\s+(\d+)")),
    ("instead_of", re.compile(r"(\d+)\s+\w+\s+instead of\s+(\d+)")),
    ("only", re.compile(r"only\s+(\d+).*?(\d+)", re.IGNORECASE)),
)

NEGATIVE_PHRASES = (
    "only able",
    "only created",
    "instead of",
    "failed",
    "incomplete",
    "partial",
)


@dataclass(frozen=True)
class CompletionRatio:
    completed: int
    total: int
    success: bool
    pattern: Optional[str] = None


def has_negative_indicator(content: str) -> bool:
    text = content.lower()
    return any(phrase in text for phrase in NEGATIVE_PHRASES)


def parse_completion_ratio(content: str, action_count: int) -> CompletionRatio:
    """Parse ``content`` into a ratio; ``completed`` never exceeds ``total``.

    A match whose total is 0 is ignored and falls through to the next
    pattern.
    """
    completed, total, matched = action_count, action_count, None

    for name, pattern in RATIO_PATTERNS:
        match = pattern.search(content)
        if not match:
            continue
        found_completed, found_total = int(match.group(1)), int(match.group(2))
        if found_total == 0:
            continue
        completed, total, matched = min(found_completed, found_total), found_total, name
        break

    success = completed == total and not has_negative_indicator(content)
    return CompletionRatio(completed=completed, total=total, success=success, pattern=matched)
