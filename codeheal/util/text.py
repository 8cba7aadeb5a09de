"""
Text similarity and line helpers
"""

import re

__all__ = (
    "extract_quoted_name",
    "levenshtein_distance",
    "similarity",
    "split_lines",
)

_QUOTED_RE = re.compile(r"['\"`]([^'\"`]+)['\"`]")


def split_lines(text: str) -> list[str]:
    """Split on ``\\n`` only, keeping a trailing empty line for a final newline."""
    return text.split("\n")


def levenshtein_distance(a: str, b: str) -> int:
    if len(a) < len(b):
        a, b = b, a
    previous = list(range(len(b) + 1))
    for i, ca in enumerate(a, 1):
        current = [i]
        for j, cb in enumerate(b, 1):
            cost = 0 if ca == cb else 1
            current.append(min(previous[j] + 1, current[j - 1] + 1, previous[j - 1] + cost))
        previous = current
    return previous[-1]


def similarity(a: str, b: str) -> float:
    """
    Edit-distance ratio in [0, 1]: ``(len(longer) - distance) / len(longer)``.
    Two empty strings are identical.
    """
    longer = max(len(a), len(b))
    if longer == 0:
        return 1.0
    return (longer - levenshtein_distance(a, b)) / longer


def extract_quoted_name(message: str, pattern: str | None = None) -> str | None:
    """
    Pull an identifier out of a defect message.

    With ``pattern`` its first group is used; otherwise the first quoted token.
    """
    if pattern:
        match = re.search(pattern, message)
        return match.group(1) if match else None
    match = _QUOTED_RE.search(message)
    return match.group(1) if match else None
