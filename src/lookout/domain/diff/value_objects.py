"""Value objects for the Diff bounded context."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum

from lookout.shared.types import ChangeStatus, FilePath

# =============================================================================
# ENUMS
# =============================================================================


class LanguageGroup(StrEnum):
    """Coarse grouping of changed files by extension."""

    TYPESCRIPT = "typescript"
    JAVASCRIPT = "javascript"
    REACT = "react"
    STYLES = "styles"
    CONFIG = "config"
    OTHER = "other"


# =============================================================================
# VALUE OBJECTS
# =============================================================================


@dataclass(frozen=True)
class ChangedFile:
    """A single file touched by a pull request."""

    path: FilePath
    patch: str = ""
    additions: int = 0
    deletions: int = 0
    status: ChangeStatus = ChangeStatus.MODIFIED

    def __post_init__(self) -> None:
        if self.additions < 0 or self.deletions < 0:
            msg = (
                f"additions ({self.additions}) and deletions ({self.deletions}) "
                "must be non-negative"
            )
            raise ValueError(msg)

    @property
    def total_changes(self) -> int:
        return self.additions + self.deletions


@dataclass(frozen=True)
class DiffStats:
    """Aggregate counts over the raw changed-file list."""

    total_files: int
    reviewable_files: int
    context_only_files: int
    ignored_files: int
    total_additions: int
    total_deletions: int

    @property
    def total_changes(self) -> int:
        return self.total_additions + self.total_deletions


@dataclass(frozen=True)
class DiffClassification:
    """A changed-file list split into reviewable, context-only and ignored."""

    reviewable: list[ChangedFile]
    context_only: list[ChangedFile]
    ignored: list[ChangedFile]
    stats: DiffStats


@dataclass(frozen=True)
class ChangedLines:
    """New-file line numbers touched by a patch."""

    added: list[int] = field(default_factory=list[int])
    removed: list[int] = field(default_factory=list[int])
    context: list[int] = field(default_factory=list[int])
