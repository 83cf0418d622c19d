from __future__ import annotations

from typing import Optional


class DiffParseError(ValueError):
    pass


class MalformedDiffSegment(DiffParseError):
    """Raised when one file segment of a patch cannot be parsed."""

    def __init__(self, path: Optional[str], reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Malformed diff segment (path={path or '?'}): {reason}")
