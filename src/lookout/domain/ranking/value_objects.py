"""Value objects for the Ranking bounded context."""

from __future__ import annotations

from dataclasses import dataclass, field

from lookout.shared.types import Complexity, FilePath, TokenCount

# =============================================================================
# VALUE OBJECTS
# =============================================================================


@dataclass(frozen=True)
class ScoredFile:
    """A file discovered by graph traversal, with its relevance to the change.

    ``distance`` is the hop count at first discovery: 0 for a changed file,
    1 for a direct import or importer, and so on.
    """

    path: FilePath
    score: float
    distance: int
    reason: str
    is_critical: bool = False
    complexity: Complexity = Complexity.LOW

    def __post_init__(self) -> None:
        if self.score < 0:
            msg = f"score must be non-negative, got {self.score}"
            raise ValueError(msg)
        if self.distance < 0:
            msg = f"distance must be non-negative, got {self.distance}"
            raise ValueError(msg)

    @property
    def is_changed(self) -> bool:
        return self.distance == 0


@dataclass(frozen=True)
class SelectionResult:
    """Files chosen for review context, in descending score order."""

    files: list[ScoredFile] = field(default_factory=list[ScoredFile])
    estimated_tokens: TokenCount = TokenCount(0)
    by_distance: dict[int, int] = field(default_factory=dict[int, int])
    critical_count: int = 0
    total_candidates: int = 0

    @property
    def paths(self) -> list[FilePath]:
        return [f.path for f in self.files]

    def get(self, path: str) -> ScoredFile | None:
        """Look up a selected file by path."""
        return next((f for f in self.files if f.path == path), None)
