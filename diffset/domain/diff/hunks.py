"""
hunks.py

Turns the hunk section of one file diff into numbered added/deleted lines.
"""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Iterable, List, Optional, Tuple

from diffset.domain.diff.errors import MalformedDiffSegment
from diffset.domain.schemas.diff import DiffLine

logger = logging.getLogger(__name__)

_HUNK_HEADER_RE = re.compile(r"^@@ -(\d+)(?:,(\d+))? \+(\d+)(?:,(\d+))? @@")


@dataclass(frozen=True)
class HunkHeader:
    old_start: int
    old_count: int
    new_start: int
    new_count: int


def is_hunk_header(line: str) -> bool:
    return line.startswith("@@ ")


def parse_hunk_header(line: str, path: Optional[str] = None) -> HunkHeader:
    """
    `@@ -o[,oc] +n[,nc] @@ [section]` -> HunkHeader.
    An omitted count means 1.
    """
    m = _HUNK_HEADER_RE.match(line)
    if not m:
        raise MalformedDiffSegment(path, f"unparseable hunk header {line.rstrip()!r}")
    old_start, old_count, new_start, new_count = m.groups()
    return HunkHeader(
        old_start=int(old_start),
        old_count=int(old_count) if old_count is not None else 1,
        new_start=int(new_start),
        new_count=int(new_count) if new_count is not None else 1,
    )


def _drop_terminator(text: str) -> str:
    if text.endswith("\r\n"):
        return text[:-2]
    if text.endswith("\n"):
        return text[:-1]
    return text


def parse_hunks(
    body_lines: Iterable[str],
    path: Optional[str] = None,
) -> Tuple[List[DiffLine], List[DiffLine]]:
    """
    Returns (added_lines, deleted_lines) in appearance order across all hunks.

    body_lines starts at the first hunk header. Each header resets the
    cursors to its declared starts; its declared counts decide how many of
    the following lines belong to the hunk.
    """
    added: List[DiffLine] = []
    deleted: List[DiffLine] = []

    old_cursor = new_cursor = 0
    old_left = new_left = 0
    seen_header = False
    # (target list, index) of the line emitted just before, for "\ No newline"
    last_emitted: Optional[Tuple[List[DiffLine], int]] = None

    for line in body_lines:
        if is_hunk_header(line):
            header = parse_hunk_header(line, path)
            if old_left or new_left:
                logger.debug("HUNK_SHORT path=%s old_left=%s new_left=%s", path, old_left, new_left)
            old_cursor, new_cursor = header.old_start, header.new_start
            old_left, new_left = header.old_count, header.new_count
            seen_header = True
            last_emitted = None
            continue

        if line.startswith("\\"):
            # "\ No newline at end of file"
            if last_emitted is not None:
                target, idx = last_emitted
                prev = target[idx]
                target[idx] = DiffLine(prev.line_number, _drop_terminator(prev.content))
            last_emitted = None
            continue

        if not seen_header:
            raise MalformedDiffSegment(path, "hunk body without hunk header")

        if old_left <= 0 and new_left <= 0:
            logger.debug("HUNK_TRAILING_LINE path=%s line=%r", path, line[:80])
            continue

        marker = line[:1]
        if marker == "+":
            added.append(DiffLine(new_cursor, line[1:]))
            last_emitted = (added, len(added) - 1)
            new_cursor += 1
            new_left -= 1
        elif marker == "-":
            deleted.append(DiffLine(old_cursor, line[1:]))
            last_emitted = (deleted, len(deleted) - 1)
            old_cursor += 1
            old_left -= 1
        elif marker in (" ", "", "\n", "\r"):
            # context; an empty physical line is a context line whose space was stripped
            old_cursor += 1
            new_cursor += 1
            old_left -= 1
            new_left -= 1
            last_emitted = None
        else:
            raise MalformedDiffSegment(path, f"unexpected hunk line {line.rstrip()!r}")

    return added, deleted
