"""Domain-specific types that prevent primitive obsession."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum

# =============================================================================
# NEWTYPES
# =============================================================================


class FilePath(str):
    """A repository-relative path to a source file."""


class CommitSHA(str):
    """A git commit SHA."""


class TokenCount(int):
    """A count of LLM tokens."""

    def __add__(self, other: object) -> TokenCount:
        if isinstance(other, int):
            return TokenCount(int.__add__(self, other))
        return NotImplemented

    def __sub__(self, other: object) -> TokenCount:
        if isinstance(other, int):
            return TokenCount(int.__sub__(self, other))
        return NotImplemented


# =============================================================================
# VALUE OBJECTS
# =============================================================================


@dataclass(frozen=True)
class LineRange:
    """An inclusive range of line numbers within a file."""

    start: int
    end: int

    def __post_init__(self) -> None:
        if self.start > self.end:
            msg = f"start ({self.start}) must not exceed end ({self.end})"
            raise ValueError(msg)

    def __len__(self) -> int:
        return self.end - self.start + 1

    def __contains__(self, line: object) -> bool:
        if isinstance(line, int):
            return self.start <= line <= self.end
        return NotImplemented


# =============================================================================
# ENUMS
# =============================================================================


class Severity(StrEnum):
    """Finding severity as emitted by the reasoning service."""

    INFO = "info"
    WARNING = "warning"
    CRITICAL = "critical"


class ReviewCategory(StrEnum):
    """The three independent review passes run per job."""

    ARCHITECTURE = "architecture"
    SECURITY = "security"
    MAINTAINABILITY = "maintainability"


class Complexity(StrEnum):
    """Coarse change or structure complexity bucket."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class ChangeStatus(StrEnum):
    """Status of a file in a pull request diff."""

    ADDED = "added"
    MODIFIED = "modified"
    REMOVED = "removed"
    RENAMED = "renamed"
