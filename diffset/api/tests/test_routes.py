"""
Tests for api/routes.py
"""
import logging

import pytest
from fastapi.testclient import TestClient

from diffset.api.routes import get_diff_service
from diffset.main import create_app
from diffset.domain.diff.stats import NumstatEntry
from diffset.domain.schemas.diff import Blob
from diffset.services.diff_service import DiffService
from diffset.tools.git_diff import GitError


PATCH = (
    "diff --git a/src/app.py b/src/app.py\n"
    "index 83db48f..bf269f4 100644\n"
    "--- a/src/app.py\n"
    "+++ b/src/app.py\n"
    "@@ -1,3 +1,3 @@\n"
    " import os\n"
    "-DEBUG = True\n"
    "+DEBUG = False\n"
    " \n"
    "diff --git a/README.md b/README.md\n"
    "new file mode 100644\n"
    "index 0000000..e965047\n"
    "--- /dev/null\n"
    "+++ b/README.md\n"
    "@@ -0,0 +1,2 @@\n"
    "+# app\n"
    "+hello\n"
)

NUMSTAT = [
    NumstatEntry(path="src/app.py", insertions=1, deletions=1),
    NumstatEntry(path="README.md", insertions=2, deletions=0),
]


class FakeRepository:
    """Stands in for GitRepository; records the requested endpoints."""

    def __init__(self, patch=PATCH, numstat=NUMSTAT, error=None):
        self.patch = patch
        self.numstat = numstat
        self.error = error
        self.calls = []

    def resolve_and_diff(self, from_ref, to_ref):
        self.calls.append((from_ref, to_ref))
        if self.error:
            raise self.error
        return self.patch, self.numstat

    def lookup_blob(self, content_id):
        return Blob(id=content_id, content="") if content_id else None


def _client(repo: FakeRepository) -> TestClient:
    app = create_app()
    service = DiffService(repo=repo)
    app.dependency_overrides[get_diff_service] = lambda: service
    return TestClient(app)


def test_health():
    client = _client(FakeRepository())
    res = client.get("/health")
    assert res.status_code == 200
    assert res.json() == {"ok": True}
    assert res.headers.get("X-Run-Id")


def test_schema():
    res = _client(FakeRepository()).get("/schema/diff")
    assert res.status_code == 200
    assert set(res.json()) == {"request", "response", "file"}


def test_diff_summary():
    repo = FakeRepository()
    res = _client(repo).post("/diff", json={"from_ref": "v1", "to_ref": "v2"})

    assert res.status_code == 200
    body = res.json()
    assert repo.calls == [("v1", "v2")]
    assert body["from_ref"] == "v1"
    assert body["to_ref"] == "v2"
    assert body["size"] == 2
    assert body["stats"]["total"] == {"files": 2, "lines": 4, "insertions": 3, "deletions": 1}
    assert [f["path"] for f in body["files"]] == ["src/app.py", "README.md"]
    assert body["files"][1]["type"] == "new"
    assert body["files"][1]["src_id"] is None


def test_diff_summary_with_path():
    res = _client(FakeRepository()).post("/diff", json={"from_ref": "v1", "to_ref": "v2", "path": "src/"})

    body = res.json()
    assert body["path"] == "src/"
    assert body["size"] == 1
    assert body["stats"]["total"]["lines"] == 2
    assert list(body["stats"]["files"]) == ["src/app.py"]


def test_diff_file_detail():
    res = _client(FakeRepository()).post("/diff/file", json={"file": "src/app.py"})

    assert res.status_code == 200
    body = res.json()
    assert body["added_lines"] == [{"line_number": 2, "content": "DEBUG = False\n"}]
    assert body["deleted_lines"] == [{"line_number": 2, "content": "DEBUG = True\n"}]
    assert body["patch"].startswith("diff --git a/src/app.py b/src/app.py\n")


def test_diff_file_not_found():
    res = _client(FakeRepository()).post("/diff/file", json={"file": "missing.txt"})
    assert res.status_code == 404


def test_malformed_patch_is_422():
    repo = FakeRepository(patch="diff --git a/x.txt b/x.txt\nindex ???\n")
    res = _client(repo).post("/diff", json={})

    assert res.status_code == 422
    assert res.json()["file"] == "x.txt"


def test_git_error_is_503():
    repo = FakeRepository(error=GitError("Unknown revision 'nope'"))
    res = _client(repo).post("/diff", json={"from_ref": "nope"})

    assert res.status_code == 503
    assert "nope" in res.json()["detail"]


@pytest.mark.parametrize("payload", [{"unknown": 1}, {"from_ref": 3}])
def test_request_validation(payload):
    res = _client(FakeRepository()).post("/diff", json=payload)
    assert res.status_code == 422


def test_run_id_header_is_reused():
    res = _client(FakeRepository()).get("/health", headers={"X-Run-Id": "run-42"})
    assert res.headers["X-Run-Id"] == "run-42"


def test_request_log_names_compared_endpoints(caplog):
    caplog.set_level(logging.INFO, logger="diffset")
    _client(FakeRepository()).post("/diff", json={"from_ref": "v1", "path": "src/"})

    (line,) = [r.getMessage() for r in caplog.records if r.getMessage().startswith("REQ_DIFF")]
    assert "compare=v1..worktree" in line
    assert "filter=src/" in line
    assert "files=1" in line
    assert "status=200" in line
