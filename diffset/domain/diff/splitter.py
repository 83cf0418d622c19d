"""
splitter.py

Resumable scanner that cuts a patch stream into per-file segments.

A segment starts at a physical line beginning with `diff --git `.
Content lines inside hunks always carry a ' ', '+' or '-' marker, so a
patch that is itself tracked as a file never produces extra segments.
"""
from __future__ import annotations

import io
import logging
from dataclasses import dataclass
from typing import Callable, Iterable, Iterator, List, Optional, Tuple, Union

from diffset.domain.diff.file_diff import GIT_HEADER_PREFIX

logger = logging.getLogger(__name__)

LineSource = Union[str, Iterable[str], Callable[[], Iterable[str]]]


@dataclass(frozen=True)
class Segment:
    """All patch lines of one file, starting with its `diff --git` line."""
    lines: Tuple[str, ...]

    @property
    def text(self) -> str:
        return "".join(self.lines)


def iter_lines(source: LineSource) -> Iterator[str]:
    """
    str -> lines with their terminators, read one at a time. Only "\\n" ends
    a line; a lone "\\r" is file content.
    A callable is called for a fresh iterable; any other iterable is used as is.
    """
    if callable(source):
        source = source()
    if isinstance(source, str):
        return iter(io.StringIO(source, newline="\n"))
    return iter(source)


def is_segment_start(line: str) -> bool:
    return line.startswith(GIT_HEADER_PREFIX)


class PatchSplitter:
    """
    Iterator of Segment over a line source.

    Each __next__ reads until the following `diff --git` line (kept as the
    start of the next segment) or the end of input. Nothing past that line
    is read, so an error raised by the source while producing file K+1 is
    only seen by the call that asks for file K+1.
    """

    def __init__(self, source: LineSource):
        self._source = source
        self._lines: Optional[Iterator[str]] = None
        self._pending: Optional[str] = None
        self._exhausted = False
        self.segments_read = 0

    def __iter__(self) -> "PatchSplitter":
        return self

    def __next__(self) -> Segment:
        if self._exhausted:
            raise StopIteration
        if self._lines is None:
            # opening the source is deferred to the first request
            self._lines = iter_lines(self._source)

        current: List[str] = []
        if self._pending is not None:
            current.append(self._pending)
            self._pending = None

        try:
            for line in self._lines:
                if is_segment_start(line):
                    if current:
                        self._pending = line
                        return self._emit(current)
                    current.append(line)
                elif current:
                    current.append(line)
                else:
                    logger.debug("SPLIT_SKIP_PREAMBLE line=%r", line[:80])
        except Exception:
            self._exhausted = True
            raise

        self._exhausted = True
        if current:
            return self._emit(current)
        raise StopIteration

    def _emit(self, lines: List[str]) -> Segment:
        self.segments_read += 1
        segment = Segment(lines=tuple(lines))
        logger.debug("SPLIT_SEGMENT n=%s header=%r", self.segments_read, lines[0].rstrip()[:120])
        return segment


def split_patch(source: LineSource) -> List[Segment]:
    """Eager variant: every segment of the source."""
    return list(PatchSplitter(source))
