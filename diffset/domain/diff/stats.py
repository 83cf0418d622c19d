from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Dict, Iterable, List

from diffset.domain.diff.file_diff import unquote_path
from diffset.domain.schemas.diff import DiffStats, FileStats, TotalStats

# "dir/{old => new}/file" and "old => new"
_BRACE_RENAME_RE = re.compile(r"\{([^{}]*) => ([^{}]*)\}")
# a single C-quoted field with no unescaped quote inside
_QUOTED_RE = re.compile(r'^"(?:[^"\\]|\\.)*"$')


@dataclass(frozen=True)
class NumstatEntry:
    path: str
    insertions: int
    deletions: int


def _renamed_path(path: str) -> str:
    # non-ASCII names come C-quoted: the whole field, or each side of " => "
    if " => " in path and not _QUOTED_RE.match(path):
        old, new = path.split(" => ", 1)
        path = f"{unquote_path(old)} => {unquote_path(new)}"
    else:
        path = unquote_path(path)
    if "{" in path and " => " in path:
        path = _BRACE_RENAME_RE.sub(lambda m: m.group(2), path)
        return re.sub(r"/{2,}", "/", path).strip("/")
    if " => " in path:
        return path.split(" => ", 1)[1]
    return path


def parse_numstat(numstat_text: str) -> List[NumstatEntry]:
    """
    git diff --numstat output format:
      <ins>\t<del>\t<path>
    where ins/del can be "-" for binary.
    """
    entries: List[NumstatEntry] = []

    for line in (numstat_text or "").splitlines():
        if not line.strip():
            continue
        parts = line.split("\t")
        if len(parts) < 3:
            continue

        ins_raw, del_raw = parts[0].strip(), parts[1].strip()
        path = "\t".join(parts[2:])
        ins = int(ins_raw) if ins_raw.isdigit() else 0
        dele = int(del_raw) if del_raw.isdigit() else 0

        entries.append(NumstatEntry(path=_renamed_path(path), insertions=ins, deletions=dele))

    return entries


def filter_entries(entries: Iterable[NumstatEntry], prefix: str) -> List[NumstatEntry]:
    return [e for e in entries if e.path.startswith(prefix)]


def aggregate_stats(entries: Iterable[NumstatEntry]) -> DiffStats:
    """
    Reduces per-file counts into total + per-file stats.
    A path listed twice is summed into one entry.
    """
    files: Dict[str, FileStats] = {}
    total_ins = 0
    total_del = 0

    for entry in entries:
        current = files.get(entry.path) or FileStats()
        files[entry.path] = FileStats(
            insertions=current.insertions + entry.insertions,
            deletions=current.deletions + entry.deletions,
        )
        total_ins += entry.insertions
        total_del += entry.deletions

    total = TotalStats(
        files=len(files),
        lines=total_ins + total_del,
        insertions=total_ins,
        deletions=total_del,
    )
    return DiffStats(total=total, files=files)
