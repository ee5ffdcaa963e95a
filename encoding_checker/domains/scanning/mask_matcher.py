"""
Filename mask matching for the scan engine.

A mask is a glob pattern where '*' matches any run of characters and '?'
matches exactly one character. Every other character is literal, so
'*.txt' does not match 'notes_txt'. Masks are compared case-insensitively
against the complete file name.
"""
import re
from typing import Iterable, List, Pattern, Tuple


def parse_mask_text(mask_text: str) -> Tuple[str, ...]:
    """Split newline separated mask text into patterns, dropping empty lines."""
    if not mask_text:
        return ()
    return tuple(line.strip() for line in mask_text.splitlines() if line.strip())


def compile_mask(mask: str) -> Pattern[str]:
    parts = []
    for char in mask:
        if char == "*":
            parts.append(".*")
        elif char == "?":
            parts.append(".")
        else:
            parts.append(re.escape(char))
    return re.compile("".join(parts), re.IGNORECASE | re.DOTALL)


class MaskMatcher:
    """
    Matches file names against an ordered list of masks (logical OR).

    An empty mask list matches nothing: scanning with no masks should not
    silently inspect every file in the tree.
    """

    def __init__(self, patterns: Iterable[str]):
        self._patterns: Tuple[str, ...] = tuple(p.strip() for p in patterns if p and p.strip())
        self._compiled: List[Pattern[str]] = [compile_mask(p) for p in self._patterns]

    @classmethod
    def from_text(cls, mask_text: str) -> "MaskMatcher":
        return cls(parse_mask_text(mask_text))

    @property
    def patterns(self) -> Tuple[str, ...]:
        return self._patterns

    @property
    def is_empty(self) -> bool:
        return not self._compiled

    def matches(self, file_name: str) -> bool:
        return any(pattern.fullmatch(file_name) for pattern in self._compiled)
