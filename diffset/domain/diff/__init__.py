"""
Patch parsing and diff statistics.

This module provides:
- DiffSet / DiffFile: lazy, queryable view over a git patch
- Patch splitting into per-file segments
- File header and hunk parsing
- numstat parsing and stats aggregation
"""

from diffset.domain.diff.errors import (
    DiffParseError,
    MalformedDiffSegment,
)

from diffset.domain.diff.splitter import (
    PatchSplitter,
    Segment,
    split_patch,
)

from diffset.domain.diff.file_diff import (
    ParsedFileDiff,
    classify_change,
    parse_file_diff,
)

from diffset.domain.diff.hunks import (
    HunkHeader,
    parse_hunk_header,
    parse_hunks,
)

from diffset.domain.diff.stats import (
    NumstatEntry,
    aggregate_stats,
    parse_numstat,
)

from diffset.domain.diff.diff_set import (
    DiffFile,
    DiffSet,
)

__all__ = [
    # Errors
    "DiffParseError",
    "MalformedDiffSegment",
    # Splitter
    "PatchSplitter",
    "Segment",
    "split_patch",
    # File header
    "ParsedFileDiff",
    "classify_change",
    "parse_file_diff",
    # Hunks
    "HunkHeader",
    "parse_hunk_header",
    "parse_hunks",
    # Stats
    "NumstatEntry",
    "aggregate_stats",
    "parse_numstat",
    # Collection
    "DiffFile",
    "DiffSet",
]
