"""
file_diff.py

Reads the extended git header of one file segment
(`diff --git`, mode / rename / copy / index / ---, +++ lines)
and decides what kind of change the segment describes.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

from diffset.domain.diff.errors import MalformedDiffSegment
from diffset.domain.diff.hunks import is_hunk_header
from diffset.domain.schemas.diff import ChangeType

GIT_HEADER_PREFIX = "diff --git "

_DEV_NULL = "/dev/null"
# a/ b/ plus the diff.mnemonicPrefix variants
_SIDE_PREFIXES = ("a/", "b/", "c/", "i/", "o/", "w/")

_INDEX_RE = re.compile(r"^index ([0-9a-fA-F]+)\.\.([0-9a-fA-F]+)(?: (\S+))?\s*$")
_MODE_RE = re.compile(r"^(new file|deleted file|old|new) mode (\S*)\s*$")
_MODE_VALUE_RE = re.compile(r"^[0-7]{6}$")
_SIMILARITY_RE = re.compile(r"^similarity index (\d+)%")
_NULL_ID_RE = re.compile(r"^0+$")
_UNQUOTED_PAIR_RE = re.compile(r"^(\S/.+?) (\S/.+)$")

_C_ESCAPES = {
    "a": 0x07, "b": 0x08, "t": 0x09, "n": 0x0A,
    "v": 0x0B, "f": 0x0C, "r": 0x0D, '"': 0x22, "\\": 0x5C,
}


@dataclass(frozen=True)
class ParsedFileDiff:
    """
    Header metadata of one segment.

    src_id and dst_id come from the `index` line; all-zero ids are None.
    Segments without an `index` line (mode-only changes, exact renames and
    copies) have both ids None even though their type is not new or deleted.
    """
    path: str
    src_path: str
    type: ChangeType
    mode: str
    old_mode: str
    src_id: Optional[str]
    dst_id: Optional[str]
    similarity: Optional[int]
    binary: bool
    # index of the first hunk header inside the segment lines
    body_start: int


def unquote_path(text: str) -> str:
    """git quotes unusual paths C-style: "a/t\\303\\251st" -> a/tést"""
    if len(text) < 2 or not (text.startswith('"') and text.endswith('"')):
        return text
    raw = text[1:-1]
    out = bytearray()
    i = 0
    while i < len(raw):
        ch = raw[i]
        if ch != "\\" or i + 1 >= len(raw):
            out.extend(ch.encode("utf-8"))
            i += 1
            continue
        nxt = raw[i + 1]
        if nxt in _C_ESCAPES:
            out.append(_C_ESCAPES[nxt])
            i += 2
        elif nxt in "01234567":
            digits = raw[i + 1:i + 4]
            out.append(int(digits, 8) & 0xFF)
            i += 1 + len(digits)
        else:
            out.extend(nxt.encode("utf-8"))
            i += 2
    return out.decode("utf-8", errors="replace")


def _strip_side_prefix(path: str) -> str:
    if path[:2] in _SIDE_PREFIXES:
        return path[2:]
    return path


def split_header_paths(line: str) -> Optional[Tuple[str, str]]:
    """
    `diff --git a/x b/y` -> ("x", "y"); None when the pair can't be read.
    """
    if not line.startswith(GIT_HEADER_PREFIX):
        return None
    rest = line[len(GIT_HEADER_PREFIX):].rstrip("\r\n")

    if rest.startswith('"'):
        end = rest.find('"', 1)
        while end != -1 and rest[end - 1] == "\\":
            end = rest.find('"', end + 1)
        if end == -1:
            return None
        first, second = rest[:end + 1], rest[end + 1:].lstrip(" ")
    elif rest.endswith('"') and ' "' in rest:
        cut = rest.rfind(' "')
        first, second = rest[:cut], rest[cut + 1:]
    else:
        # same path on both sides is the common case: "a/P b/P"
        half = (len(rest) - 1) // 2
        if len(rest) % 2 == 1 and rest[half] == " " and rest[2:half] == rest[half + 3:]:
            first, second = rest[:half], rest[half + 1:]
        else:
            m = _UNQUOTED_PAIR_RE.match(rest)
            if not m:
                return None
            first, second = m.group(1), m.group(2)

    if not first or not second:
        return None
    return _strip_side_prefix(unquote_path(first)), _strip_side_prefix(unquote_path(second))


def _marker_path(value: str) -> Optional[str]:
    """Path of a ---/+++ line, None for /dev/null."""
    value = value.rstrip("\r\n").rstrip("\t")
    if value == _DEV_NULL:
        return None
    return _strip_side_prefix(unquote_path(value))


def _normalize_id(value: Optional[str]) -> Optional[str]:
    if value is None or _NULL_ID_RE.match(value):
        return None
    return value


def classify_change(*, deleted: bool, new: bool, copied: bool, renamed: bool) -> ChangeType:
    """
    deleted > new > copied > renamed > modified.
    Mode changes never change the classification.
    """
    if deleted:
        return ChangeType.deleted
    if new:
        return ChangeType.new
    if copied:
        return ChangeType.copied
    if renamed:
        return ChangeType.renamed
    return ChangeType.modified


def parse_file_diff(lines: Sequence[str]) -> ParsedFileDiff:
    """
    Parses the metadata of one segment (lines starting at `diff --git`).

    Raises MalformedDiffSegment when the header can't be trusted;
    no partial result is returned.
    """
    if not lines:
        raise MalformedDiffSegment(None, "empty segment")

    pair = split_header_paths(lines[0])
    if pair is None:
        raise MalformedDiffSegment(None, f"unparseable file header {lines[0].rstrip()!r}")
    header_src, header_dst = pair
    context_path = header_dst

    modes = {}
    src_id = dst_id = None
    index_mode = ""
    has_index = False
    similarity = None
    binary = False
    rename_from = rename_to = copy_from = copy_to = None
    minus_path = plus_path = None
    body_start = len(lines)

    for pos in range(1, len(lines)):
        line = lines[pos]
        if is_hunk_header(line):
            body_start = pos
            break
        if binary:
            # base85 payload of "GIT binary patch"
            continue

        text = line.rstrip("\r\n")
        if text.startswith("index "):
            m = _INDEX_RE.match(text)
            if not m:
                raise MalformedDiffSegment(context_path, f"unparseable index line {text!r}")
            src_id, dst_id = m.group(1), m.group(2)
            index_mode = m.group(3) or ""
            if index_mode and not _MODE_VALUE_RE.match(index_mode):
                raise MalformedDiffSegment(context_path, f"unparseable mode {index_mode!r}")
            has_index = True
        elif _MODE_RE.match(text):
            m = _MODE_RE.match(text)
            kind, value = m.group(1), m.group(2)
            if not _MODE_VALUE_RE.match(value):
                raise MalformedDiffSegment(context_path, f"unparseable mode {value!r}")
            modes[kind] = value
        elif text.startswith("similarity index "):
            m = _SIMILARITY_RE.match(text)
            similarity = int(m.group(1)) if m else None
        elif text.startswith("rename from "):
            rename_from = unquote_path(text[len("rename from "):])
        elif text.startswith("rename to "):
            rename_to = unquote_path(text[len("rename to "):])
        elif text.startswith("copy from "):
            copy_from = unquote_path(text[len("copy from "):])
        elif text.startswith("copy to "):
            copy_to = unquote_path(text[len("copy to "):])
        elif text.startswith("--- "):
            minus_path = _marker_path(text[4:])
        elif text.startswith("+++ "):
            plus_path = _marker_path(text[4:])
        elif text.startswith("Binary files ") or text == "GIT binary patch":
            binary = True

    if (rename_from is None) != (rename_to is None):
        raise MalformedDiffSegment(context_path, "rename without both 'rename from' and 'rename to'")
    if (copy_from is None) != (copy_to is None):
        raise MalformedDiffSegment(context_path, "copy without both 'copy from' and 'copy to'")

    path = rename_to or copy_to or plus_path or header_dst
    src_path = rename_from or copy_from or minus_path or header_src

    if body_start < len(lines) and not has_index:
        raise MalformedDiffSegment(path, "missing index line")

    change = classify_change(
        deleted="deleted file" in modes,
        new="new file" in modes,
        copied=copy_to is not None,
        renamed=rename_to is not None,
    )
    mode = modes.get("new file") or modes.get("deleted file") or modes.get("new") or index_mode

    return ParsedFileDiff(
        path=path,
        src_path=src_path,
        type=change,
        mode=mode,
        old_mode=modes.get("old", ""),
        src_id=_normalize_id(src_id),
        dst_id=_normalize_id(dst_id),
        similarity=similarity,
        binary=binary,
        body_start=body_start,
    )
