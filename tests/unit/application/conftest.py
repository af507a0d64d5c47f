"""Shared fixtures for application-layer tests."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from lookout.domain.diff.value_objects import ChangedFile
from lookout.shared.types import CommitSHA, FilePath

APP_SOURCE = "import { fmt } from './utils/format';\nimport React from 'react';\n" + (
    "\n".join(f"export const v{i} = fmt({i});" for i in range(1, 29))
)


@pytest.fixture
def repo_files() -> dict[str, str]:
    """File contents at the head commit, keyed by path."""
    return {
        "src/app.ts": APP_SOURCE,
        "src/utils/format.ts": (
            "import { pad } from '../lib/pad';\nexport function fmt(x) {\n"
            "  return pad(x);\n}"
        ),
        "src/lib/pad.ts": "export const pad = (x) => String(x).padStart(2);",
    }


@pytest.fixture
def changed_files() -> list[ChangedFile]:
    return [
        ChangedFile(path=FilePath("src/app.ts"), patch="@@ -1 +1 @@", additions=8),
        ChangedFile(path=FilePath("styles/main.css"), additions=2),
        ChangedFile(path=FilePath("package.json"), additions=1),
        ChangedFile(path=FilePath("dist/bundle.js"), additions=900),
    ]


@pytest.fixture
def code_host(
    repo_files: dict[str, str], changed_files: list[ChangedFile]
) -> MagicMock:
    """A code host serving ``repo_files``; unknown paths are missing."""
    host = MagicMock()
    host.list_pull_request_files.return_value = changed_files
    host.get_head_sha.return_value = CommitSHA("abc123")
    host.get_file_content.side_effect = lambda repo, path, ref: repo_files.get(path)
    host.post_issue_comment.return_value = 555
    return host
