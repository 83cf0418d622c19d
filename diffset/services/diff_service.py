from __future__ import annotations

import logging
from typing import Optional

from diffset.config.settings import settings
from diffset.domain.diff.diff_set import DiffFile, DiffSet
from diffset.domain.schemas.diff import (
    DiffFileDetail,
    DiffFileSummary,
    DiffLineOut,
    DiffResponse,
)
from diffset.tools.git_diff import GitRepository

logger = logging.getLogger(__name__)


class DiffService:
    """
    Thin facade.

    - repository settings come from `settings` unless a repo is given
    - resolve endpoints -> raw patch + numstat (GitRepository)
    - wrap both into a DiffSet; parsing stays lazy inside DiffSet
    """

    def __init__(self, repo: Optional[GitRepository] = None) -> None:
        self._repo = repo

    @property
    def repo(self) -> GitRepository:
        # opened on first use so the app can start outside a repository
        if self._repo is None:
            self._repo = GitRepository(
                str(settings.repo_path) if settings.repo_path else None,
                git_binary=settings.git_binary,
                timeout=settings.git_timeout,
                context_lines=settings.context_lines,
                find_renames=settings.find_renames,
            )
        return self._repo

    def diff(self, from_ref: Optional[str] = None, to_ref: Optional[str] = None, path: Optional[str] = None) -> DiffSet:
        patch_source, numstat = self.repo.resolve_and_diff(from_ref, to_ref)
        diff_set = DiffSet(
            from_ref,
            to_ref,
            patch=patch_source,
            numstat=numstat,
            blob_lookup=self.repo.lookup_blob,
        )
        logger.info("DIFF from=%s to=%s path=%s numstat_files=%s", from_ref, to_ref, path, len(numstat))
        return diff_set.path(path) if path else diff_set

    def summarize(self, from_ref: Optional[str] = None, to_ref: Optional[str] = None, path: Optional[str] = None) -> DiffResponse:
        diff_set = self.diff(from_ref, to_ref, path)
        files = [to_summary(f) for f in diff_set.each()]
        return DiffResponse(
            from_ref=diff_set.from_ref,
            to_ref=diff_set.to_ref,
            path=diff_set.path_filter,
            size=len(files),
            stats=diff_set.diff_stats(),
            files=files,
        )

    def file_detail(
        self,
        file: str,
        from_ref: Optional[str] = None,
        to_ref: Optional[str] = None,
        path: Optional[str] = None,
    ) -> Optional[DiffFileDetail]:
        diff_file = self.diff(from_ref, to_ref, path).get(file)
        if diff_file is None:
            return None
        return to_detail(diff_file)


def to_summary(diff_file: DiffFile) -> DiffFileSummary:
    return DiffFileSummary(
        path=diff_file.path,
        src_path=diff_file.src_path,
        type=diff_file.type,
        mode=diff_file.mode,
        src_id=diff_file.src_id,
        dst_id=diff_file.dst_id,
        binary=diff_file.binary,
    )


def to_detail(diff_file: DiffFile) -> DiffFileDetail:
    return DiffFileDetail(
        **to_summary(diff_file).model_dump(),
        added_lines=[DiffLineOut(line_number=l.line_number, content=l.content) for l in diff_file.added_lines],
        deleted_lines=[DiffLineOut(line_number=l.line_number, content=l.content) for l in diff_file.deleted_lines],
        patch=diff_file.patch,
    )
