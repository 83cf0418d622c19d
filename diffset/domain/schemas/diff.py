from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


@dataclass(frozen=True)
class DiffLine:
    """
    Added or deleted line of a file diff.

    Attributes:
        line_number: line number on the side the line belongs to
            (new side for additions, old side for deletions)
        content: line text without the +/- marker, terminator included
    """
    line_number: int
    content: str


class ChangeType(str, Enum):
    new = "new"
    modified = "modified"
    deleted = "deleted"
    renamed = "renamed"
    copied = "copied"


@dataclass(frozen=True)
class Blob:
    id: str
    content: str


# --------------------
# Stats
# --------------------
class TotalStats(BaseModel):
    model_config = ConfigDict(extra="forbid")
    files: int = 0
    lines: int = 0
    insertions: int = 0
    deletions: int = 0


class FileStats(BaseModel):
    model_config = ConfigDict(extra="forbid")
    insertions: int = 0
    deletions: int = 0


class DiffStats(BaseModel):
    model_config = ConfigDict(extra="forbid")
    total: TotalStats = Field(default_factory=TotalStats)
    files: Dict[str, FileStats] = Field(default_factory=dict)


# --------------------
# API
# --------------------
class DiffRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")
    from_ref: Optional[str] = None
    to_ref: Optional[str] = None
    path: Optional[str] = None


class DiffFileRequest(DiffRequest):
    file: str


class DiffFileSummary(BaseModel):
    model_config = ConfigDict(extra="forbid")
    path: str
    src_path: str
    type: ChangeType
    mode: str = ""
    src_id: Optional[str] = None
    dst_id: Optional[str] = None
    binary: bool = False


class DiffLineOut(BaseModel):
    model_config = ConfigDict(extra="forbid")
    line_number: int
    content: str


class DiffFileDetail(DiffFileSummary):
    added_lines: List[DiffLineOut] = Field(default_factory=list)
    deleted_lines: List[DiffLineOut] = Field(default_factory=list)
    patch: str = ""


class DiffResponse(BaseModel):
    model_config = ConfigDict(extra="forbid")
    from_ref: Optional[str] = None
    to_ref: Optional[str] = None
    path: Optional[str] = None
    size: int = 0
    stats: DiffStats = Field(default_factory=DiffStats)
    files: List[DiffFileSummary] = Field(default_factory=list)
