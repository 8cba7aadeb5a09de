"""
Code mutator: applies candidate fix edits to a text snapshot.
"""

from __future__ import annotations

from typing import Iterable

from codeheal.schema.defect import Position
from codeheal.schema.fix import CandidateFix, EditKind, TextEdit
from codeheal.util.text import split_lines

__all__ = ("EditError", "apply_edits", "apply_fix")


class EditError(ValueError):
    """An edit addresses a line that does not exist in the buffer."""


def apply_fix(text: str, fix: CandidateFix) -> str:
    return apply_edits(text, fix.edits)


def apply_edits(text: str, edits: Iterable[TextEdit]) -> str:
    """
    Apply ``edits`` in order and return the new text.

    Each edit is resolved against the result of the previous one.
    Columns are clamped to the line length; out-of-range lines raise
    ``EditError``.
    """
    lines = split_lines(text)
    for edit in edits:
        if edit.kind == EditKind.insert:
            lines = _insert(lines, edit)
        elif edit.kind == EditKind.delete:
            lines = _delete(lines, edit)
        elif edit.kind == EditKind.replace:
            lines = _replace(lines, edit)
        else:
            raise EditError(f"Unknown edit kind: {edit.kind}")
    return "\n".join(lines)


def _check_line(lines: list[str], line: int, *, allow_append: bool = False) -> int:
    upper = len(lines) + 1 if allow_append else len(lines)
    if line < 1 or line > upper:
        raise EditError(f"Line {line} outside buffer of {len(lines)} lines")
    return line - 1


def _offset(lines: list[str], idx: int, column: int) -> int:
    return max(0, min(column - 1, len(lines[idx])))


def _splice(lines: list[str], start: Position, end: Position, text: str) -> list[str]:
    start_idx = _check_line(lines, start.line)
    end_idx = _check_line(lines, end.line)
    start_col = _offset(lines, start_idx, start.column)
    end_col = _offset(lines, end_idx, end.column)
    if (end_idx, end_col) < (start_idx, start_col):
        raise EditError(f"Edit end {end.line}:{end.column} precedes start {start.line}:{start.column}")

    merged = lines[start_idx][:start_col] + text + lines[end_idx][end_col:]
    return lines[:start_idx] + split_lines(merged) + lines[end_idx + 1 :]


def _insert(lines: list[str], edit: TextEdit) -> list[str]:
    idx = _check_line(lines, edit.start.line, allow_append=True)
    if idx == len(lines):
        # appending past the last line
        return lines + split_lines(edit.text or "")
    col = _offset(lines, idx, edit.start.column)
    merged = lines[idx][:col] + (edit.text or "") + lines[idx][col:]
    return lines[:idx] + split_lines(merged) + lines[idx + 1 :]


def _delete(lines: list[str], edit: TextEdit) -> list[str]:
    if edit.end is not None:
        return _splice(lines, edit.start, edit.end, "")
    idx = _check_line(lines, edit.start.line)
    if len(lines) == 1:
        return [""]
    return lines[:idx] + lines[idx + 1 :]


def _replace(lines: list[str], edit: TextEdit) -> list[str]:
    if edit.end is not None:
        return _splice(lines, edit.start, edit.end, edit.text or "")
    idx = _check_line(lines, edit.start.line)
    return lines[:idx] + split_lines(edit.text or "") + lines[idx + 1 :]
