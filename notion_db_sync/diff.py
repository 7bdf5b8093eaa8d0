"""
Line-level diff between two versions of a file.

Used to show what a sync changed in an existing file. The alignment
is greedy: a new line that appears anywhere further down the old text
makes the current old line count as removed. Repeated lines can
therefore misalign; the output is not a minimal edit script.
"""

from dataclasses import dataclass
from enum import Enum


class DiffTag(Enum):
    """How a line differs between old and new text."""
    UNCHANGED = "unchanged"
    ADDED = "added"
    REMOVED = "removed"


@dataclass(frozen=True)
class DiffLine:
    """One line of diff output."""

    value: str
    tag: DiffTag = DiffTag.UNCHANGED

    @property
    def added(self) -> bool:
        return self.tag == DiffTag.ADDED

    @property
    def removed(self) -> bool:
        return self.tag == DiffTag.REMOVED


def _split_lines(text: str) -> list[str]:
    # Empty text has no lines
    return text.split("\n") if text else []


def compute_diff(old_text: str, new_text: str) -> list[DiffLine]:
    """
    Compute a greedy line diff.

    Args:
        old_text: Previous file content.
        new_text: New file content.

    Returns:
        Lines in display order, each tagged unchanged, added or removed.
    """
    old_lines = _split_lines(old_text)
    new_lines = _split_lines(new_text)
    result: list[DiffLine] = []

    i = j = 0
    while i < len(old_lines) and j < len(new_lines):
        if old_lines[i] == new_lines[j]:
            result.append(DiffLine(old_lines[i]))
            i += 1
            j += 1
        elif new_lines[j] not in old_lines[i:]:
            result.append(DiffLine(new_lines[j], DiffTag.ADDED))
            j += 1
        else:
            result.append(DiffLine(old_lines[i], DiffTag.REMOVED))
            i += 1

    result.extend(DiffLine(line, DiffTag.REMOVED) for line in old_lines[i:])
    result.extend(DiffLine(line, DiffTag.ADDED) for line in new_lines[j:])

    return result


def diff_stats(lines: list[DiffLine]) -> tuple[int, int]:
    """Count (added, removed) lines."""
    added = sum(1 for line in lines if line.added)
    removed = sum(1 for line in lines if line.removed)
    return added, removed
