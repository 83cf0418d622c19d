from __future__ import annotations

import logging
from functools import cached_property
from typing import Any, Callable, Dict, Iterable, Iterator, List, Optional, Tuple, Union

from diffset.domain.diff.file_diff import ParsedFileDiff, parse_file_diff
from diffset.domain.diff.hunks import parse_hunks
from diffset.domain.diff.splitter import PatchSplitter, Segment, iter_lines
from diffset.domain.diff.stats import NumstatEntry, aggregate_stats, filter_entries, parse_numstat
from diffset.domain.schemas.diff import Blob, ChangeType, DiffLine, DiffStats

logger = logging.getLogger(__name__)

BlobLookup = Callable[[str], Optional[Blob]]
# raw text, an iterable of lines, or a factory returning a fresh iterable of lines
PatchSource = Union[str, Iterable[str], Callable[[], Iterable[str]]]
NumstatSource = Union[str, Iterable[NumstatEntry]]

_BLOB_SIDES = ("src", "dst")


class DiffFile:
    """
    One file of a DiffSet.

    Metadata comes from the segment header; added/deleted lines are parsed
    from the segment on first access and cached.
    """

    def __init__(self, segment: Segment, parsed: ParsedFileDiff, blob_lookup: Optional[BlobLookup] = None):
        self._segment = segment
        self._parsed = parsed
        self._blob_lookup = blob_lookup

    @classmethod
    def from_segment(cls, segment: Segment, blob_lookup: Optional[BlobLookup] = None) -> "DiffFile":
        return cls(segment, parse_file_diff(segment.lines), blob_lookup)

    @property
    def path(self) -> str:
        return self._parsed.path

    @property
    def src_path(self) -> str:
        return self._parsed.src_path

    @property
    def mode(self) -> str:
        return self._parsed.mode

    @property
    def old_mode(self) -> str:
        return self._parsed.old_mode

    @property
    def type(self) -> ChangeType:
        return self._parsed.type

    @property
    def src_id(self) -> Optional[str]:
        """None for new files, and for segments git wrote without an `index` line."""
        return self._parsed.src_id

    @property
    def dst_id(self) -> Optional[str]:
        """None for deleted files, and for segments git wrote without an `index` line."""
        return self._parsed.dst_id

    @property
    def similarity(self) -> Optional[int]:
        return self._parsed.similarity

    @property
    def binary(self) -> bool:
        return self._parsed.binary

    @property
    def patch(self) -> str:
        return self._segment.text

    def blob(self, side: str = "dst") -> Optional[Blob]:
        """Content on the given side ("src" | "dst"); None when that side has no object."""
        if side not in _BLOB_SIDES:
            raise ValueError(f"Unknown blob side: {side}")
        content_id = self.src_id if side == "src" else self.dst_id
        if content_id is None or self._blob_lookup is None:
            return None
        return self._blob_lookup(content_id)

    @cached_property
    def _line_changes(self) -> Tuple[List[DiffLine], List[DiffLine]]:
        if self.binary:
            return [], []
        return parse_hunks(self._segment.lines[self._parsed.body_start:], self.path)

    @property
    def added_lines(self) -> List[DiffLine]:
        return self._line_changes[0]

    @property
    def deleted_lines(self) -> List[DiffLine]:
        return self._line_changes[1]

    def __repr__(self) -> str:
        return f"DiffFile(path={self.path!r}, type={self.type.value!r}, mode={self.mode!r})"


class DiffFileIterator:
    """
    Single-pass iterator of DiffFile over one scan of the patch.
    Each step parses exactly one segment.
    """

    def __init__(self, splitter: PatchSplitter, *, path_filter: Optional[str], blob_lookup: Optional[BlobLookup]):
        self._splitter = splitter
        self._path_filter = path_filter
        self._blob_lookup = blob_lookup

    def __iter__(self) -> "DiffFileIterator":
        return self

    def __next__(self) -> DiffFile:
        while True:
            segment = next(self._splitter)
            diff_file = DiffFile.from_segment(segment, self._blob_lookup)
            if self._path_filter is None or diff_file.path.startswith(self._path_filter):
                return diff_file


class DiffSet:
    """
    Files and statistics of the comparison from_ref -> to_ref.

    from_ref/to_ref of None stand for the working contents / the last
    recorded state. The patch is only scanned when files are requested;
    statistics come from the numeric summary.
    """

    def __init__(
        self,
        from_ref: Optional[str] = None,
        to_ref: Optional[str] = None,
        *,
        patch: PatchSource = "",
        numstat: NumstatSource = (),
        blob_lookup: Optional[BlobLookup] = None,
        path_filter: Optional[str] = None,
    ):
        self.from_ref = from_ref
        self.to_ref = to_ref
        self.path_filter = path_filter
        self._patch_source = patch
        self._blob_lookup = blob_lookup
        self._all_numstat: List[NumstatEntry] = (
            parse_numstat(numstat) if isinstance(numstat, str) else list(numstat)
        )
        self._numstat = (
            filter_entries(self._all_numstat, path_filter) if path_filter is not None else self._all_numstat
        )
        self._size: Optional[int] = None

    # --------------------
    # Files
    # --------------------
    def each(self) -> DiffFileIterator:
        """New lazy scan from the start of the patch."""
        return DiffFileIterator(
            PatchSplitter(self._patch_source),
            path_filter=self.path_filter,
            blob_lookup=self._blob_lookup,
        )

    def __iter__(self) -> Iterator[DiffFile]:
        return self.each()

    @property
    def size(self) -> int:
        if self._size is None:
            self._size = sum(1 for _ in self.each())
            logger.debug("DIFFSET_SIZE from=%s to=%s path=%s size=%s", self.from_ref, self.to_ref, self.path_filter, self._size)
        return self._size

    def count(self) -> int:
        return self.size

    def __len__(self) -> int:
        return self.size

    def get(self, path: str) -> Optional[DiffFile]:
        for diff_file in self.each():
            if diff_file.path == path:
                return diff_file
        return None

    def __getitem__(self, path: str) -> Optional[DiffFile]:
        return self.get(path)

    def __contains__(self, path: object) -> bool:
        return isinstance(path, str) and self.get(path) is not None

    def first(self) -> Optional[DiffFile]:
        return next(self.each(), None)

    def path(self, prefix: str) -> "DiffSet":
        """Same endpoints, narrowed to paths starting with prefix."""
        return DiffSet(
            self.from_ref,
            self.to_ref,
            patch=self._patch_source,
            numstat=self._all_numstat,
            blob_lookup=self._blob_lookup,
            path_filter=prefix,
        )

    @property
    def patch(self) -> str:
        if self.path_filter is None:
            if isinstance(self._patch_source, str):
                return self._patch_source
            return "".join(iter_lines(self._patch_source))
        return "".join(diff_file.patch for diff_file in self.each())

    # --------------------
    # Stats
    # --------------------
    def diff_stats(self) -> DiffStats:
        return aggregate_stats(self._numstat)

    @property
    def stats(self) -> Dict[str, Any]:
        return self.diff_stats().model_dump()

    @property
    def lines(self) -> int:
        return self.diff_stats().total.lines

    @property
    def insertions(self) -> int:
        return self.diff_stats().total.insertions

    @property
    def deletions(self) -> int:
        return self.diff_stats().total.deletions

    def __repr__(self) -> str:
        return f"DiffSet(from_ref={self.from_ref!r}, to_ref={self.to_ref!r}, path={self.path_filter!r})"
