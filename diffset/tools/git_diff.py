from __future__ import annotations

import logging
import os
import subprocess
import tempfile
from functools import partial
from typing import Iterator, List, Optional, Tuple

from diffset.domain.diff.stats import NumstatEntry, parse_numstat
from diffset.domain.schemas.diff import Blob

logger = logging.getLogger(__name__)


class GitError(RuntimeError):
    pass


class StreamReadFailure(GitError):
    """git exited non-zero after (part of) its output was already consumed."""
    pass


def _run_git(
    args: List[str],
    cwd: Optional[str] = None,
    timeout: int = 20,
    git_binary: str = "git",
) -> Tuple[int, str, str]:
    """
    Returns (returncode, stdout, stderr)
    """
    proc = subprocess.run(
        [git_binary, *args],
        cwd=cwd,
        stdout=subprocess.PIPE,
        stderr=subprocess.PIPE,
        text=True,
        encoding="utf-8",
        errors="replace",
        timeout=timeout,
        shell=False,
    )
    return proc.returncode, proc.stdout, proc.stderr


def _find_repo_root(start: Optional[str] = None, git_binary: str = "git") -> str:
    cwd = start or os.getcwd()
    code, out, err = _run_git(["rev-parse", "--show-toplevel"], cwd=cwd, git_binary=git_binary)
    if code != 0:
        raise GitError(f"Not a git repository (cwd={cwd}). git error: {err.strip()}")
    return out.strip()


class GitRepository:
    """
    Local repository adapter: produces the raw patch stream, the numstat
    summary and blob contents for DiffSet.
    """

    def __init__(
        self,
        repo_path: Optional[str] = None,
        *,
        git_binary: str = "git",
        timeout: int = 20,
        context_lines: int = 3,
        find_renames: bool = True,
    ):
        self.git_binary = git_binary
        self.timeout = timeout
        self.context_lines = context_lines
        self.find_renames = find_renames
        self.root = _find_repo_root(repo_path, git_binary=git_binary)

    def _git(self, args: List[str]) -> Tuple[int, str, str]:
        return _run_git(args, cwd=self.root, timeout=self.timeout, git_binary=self.git_binary)

    def verify_ref(self, ref: str) -> str:
        """commit-ish / tree-ish -> object id. Raises GitError for unknown refs."""
        code, out, err = self._git(["rev-parse", "--verify", "--quiet", f"{ref}^{{object}}"])
        if code != 0:
            raise GitError(f"Unknown revision {ref!r}: {err.strip()}")
        return out.strip()

    def _compare_args(self, from_ref: Optional[str], to_ref: Optional[str]) -> List[str]:
        # no from_ref: working tree against HEAD; from_ref only: working tree against from_ref
        refs = [from_ref or "HEAD"]
        if to_ref is not None:
            refs.append(to_ref)
        for ref in refs:
            self.verify_ref(ref)
        opts = ["--no-color", "--no-ext-diff"]
        opts.append("--find-renames" if self.find_renames else "--no-renames")
        return [*opts, *refs]

    def stream_patch(self, args: List[str]) -> Iterator[str]:
        """
        Yields `git diff -p` stdout line by line, terminators kept.
        The process starts on the first next() call.
        """
        cmd = [
            self.git_binary, "diff", "-p", f"--unified={self.context_lines}",
            "--src-prefix=a/", "--dst-prefix=b/", *args,
        ]
        logger.info("GIT_STREAM cwd=%s cmd=%s", self.root, " ".join(cmd))
        with tempfile.TemporaryFile() as err_file:
            proc = subprocess.Popen(cmd, cwd=self.root, stdout=subprocess.PIPE, stderr=err_file)
            try:
                for raw in proc.stdout:
                    yield raw.decode("utf-8", errors="replace")
                code = proc.wait(timeout=self.timeout)
                if code != 0:
                    err_file.seek(0)
                    err = err_file.read().decode("utf-8", errors="replace")
                    raise StreamReadFailure(f"git diff failed (exit={code}): {err.strip()}")
            finally:
                if proc.poll() is None:
                    proc.kill()
                    proc.wait()
                proc.stdout.close()

    def numstat(self, args: List[str]) -> List[NumstatEntry]:
        code, out, err = self._git(["diff", "--numstat", *args])
        if code != 0:
            raise GitError(f"git diff --numstat failed: {err.strip()}")
        return parse_numstat(out or "")

    def resolve_and_diff(self, from_ref: Optional[str], to_ref: Optional[str]):
        """
        Returns (patch_factory, numstat_entries).
        patch_factory() gives a fresh lazily-read line stream on every call.
        """
        args = self._compare_args(from_ref, to_ref)
        return partial(self.stream_patch, args), self.numstat(args)

    def lookup_blob(self, content_id: Optional[str]) -> Optional[Blob]:
        if content_id is None:
            return None
        # bytes, so CRLF content is not newline-translated
        proc = subprocess.run(
            [self.git_binary, "cat-file", "blob", content_id],
            cwd=self.root,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            timeout=self.timeout,
            shell=False,
        )
        if proc.returncode != 0:
            err = proc.stderr.decode("utf-8", errors="replace")
            logger.debug("BLOB_MISSING id=%s err=%s", content_id, err.strip())
            return None
        return Blob(id=content_id, content=proc.stdout.decode("utf-8", errors="replace"))
