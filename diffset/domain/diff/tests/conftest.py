"""
Patch fixtures shared by the diff domain tests.

`tags_*` mirror a three-file comparison:
  example.txt      modified  +64 -1
  scott/newfile    deleted   +0  -1
  scott/text.txt   modified  +0  -8
"""
from __future__ import annotations

import pytest

from diffset.domain.diff.stats import NumstatEntry
from diffset.domain.schemas.diff import Blob


EXAMPLE_PATCH = (
    "diff --git a/example.txt b/example.txt\n"
    "index 1f09f2e..8dc79ae 100644\n"
    "--- a/example.txt\n"
    "+++ b/example.txt\n"
    "@@ -1 +1,64 @@\n"
    "-replace with new text\n"
    + "".join(f"+example line {i}\n" for i in range(1, 65))
)

NEWFILE_PATCH = (
    "diff --git a/scott/newfile b/scott/newfile\n"
    "deleted file mode 100644\n"
    "index 5d46068..0000000\n"
    "--- a/scott/newfile\n"
    "+++ /dev/null\n"
    "@@ -1 +0,0 @@\n"
    "-you can't search me!\n"
)

TEXT_PATCH = (
    "diff --git a/scott/text.txt b/scott/text.txt\n"
    "index 3cc71b1..2e53b4c 100644\n"
    "--- a/scott/text.txt\n"
    "+++ b/scott/text.txt\n"
    "@@ -1,10 +1,2 @@\n"
    " this is\n"
    " a file\n"
    + "".join(f"-removed {i}\n" for i in range(3, 11))
)

MULTI_HUNK_PATCH = (
    "diff --git a/lorem.txt b/lorem.txt\n"
    "index 0b5d1a6..a3e6b52 100644\n"
    "--- a/lorem.txt\n"
    "+++ b/lorem.txt\n"
    "@@ -1,10 +1,9 @@\n"
    " Lorem\n"
    " ipsum\n"
    " dolor sit amet, consectetur\n"
    "-adipiscing\n"
    "-elit, sed do\n"
    "+first change\n"
    " eiusmod tempor\n"
    " incididunt ut\n"
    " labore et dolore\n"
    " magna aliqua.\n"
    " Ut enim ad minim\n"
    "@@ -18,8 +17,8 @@ exercitation\n"
    " in reprehenderit\n"
    " Duis aute irure\n"
    " dolor\n"
    " in\n"
    "-in voluptate\n"
    "+second change\n"
    " velit esse\n"
    " cillum dolore\n"
    " eu fugiat nulla\n"
)

# a tracked file that is itself a patch
PATCH_OVER_PATCH = (
    "diff --git a/fix.patch b/fix.patch\n"
    "index 7a2f3c1..91bd0e4 100644\n"
    "--- a/fix.patch\n"
    "+++ b/fix.patch\n"
    "@@ -1,7 +1,7 @@\n"
    " diff --git a/inner.txt b/inner.txt\n"
    "-index 1111111..2222222 100644\n"
    "+index 1111111..3333333 100644\n"
    " --- a/inner.txt\n"
    " +++ b/inner.txt\n"
    " @@ -1 +1 @@\n"
    "--old\n"
    "++new\n"
    " +newer\n"
)


@pytest.fixture
def tags_patch() -> str:
    return EXAMPLE_PATCH + NEWFILE_PATCH + TEXT_PATCH


@pytest.fixture
def tags_numstat() -> list[NumstatEntry]:
    return [
        NumstatEntry(path="example.txt", insertions=64, deletions=1),
        NumstatEntry(path="scott/newfile", insertions=0, deletions=1),
        NumstatEntry(path="scott/text.txt", insertions=0, deletions=8),
    ]


@pytest.fixture
def blob_store() -> dict[str, Blob]:
    return {
        "5d46068": Blob(id="5d46068", content="you can't search me!\n"),
        "1f09f2e": Blob(id="1f09f2e", content="replace with new text\n"),
    }


@pytest.fixture
def multi_hunk_patch() -> str:
    return MULTI_HUNK_PATCH


@pytest.fixture
def patch_over_patch() -> str:
    return PATCH_OVER_PATCH


@pytest.fixture
def newfile_patch() -> str:
    return NEWFILE_PATCH


@pytest.fixture
def text_patch() -> str:
    return TEXT_PATCH
