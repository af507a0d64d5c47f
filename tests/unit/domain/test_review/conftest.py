"""Shared fixtures for Review domain tests."""

from __future__ import annotations

import pytest

from lookout.domain.review.value_objects import (
    ChangedFilePayload,
    ContextFilePayload,
    ReviewPayload,
)
from lookout.shared.types import FilePath


@pytest.fixture
def payload() -> ReviewPayload:
    """A 200-line changed file, a short file with blanks, and context."""
    real = "\n".join(f"const line{i} = {i};" for i in range(1, 201))
    return ReviewPayload(
        changed_files=[
            ChangedFilePayload(path=FilePath("src/real.ts"), content=real),
            ChangedFilePayload(
                path=FilePath("src/app.ts"),
                content="const a = 1;\n\n\nconst b = 2;",
            ),
        ],
        context_files=[
            ContextFilePayload(
                path=FilePath("src/utils/format.ts"),
                content="export function fmt(x) {\n  return x;\n}",
                relevance_score=0.5,
                reason="Imported by app.ts",
            ),
            ContextFilePayload(
                path=FilePath("src/empty.ts"),
                content="",
                relevance_score=0.3,
                reason="Imported by app.ts",
            ),
        ],
    )
