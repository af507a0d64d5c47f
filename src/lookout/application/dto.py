"""Application-layer command and result DTOs."""

from __future__ import annotations

from dataclasses import dataclass, field

from lookout.domain.diff.value_objects import DiffClassification
from lookout.domain.ranking.value_objects import SelectionResult
from lookout.domain.review.entities import ReviewRecord
from lookout.domain.review.value_objects import (
    ImpactAssessment,
    ReviewPayload,
    ValidationOutcome,
)
from lookout.shared.types import CommitSHA

# =============================================================================
# BUILD CONTEXT
# =============================================================================


@dataclass(frozen=True)
class BuildContextCommand:
    """Command to assemble review context for one pull request."""

    repository: str
    pr_number: int
    head_sha: CommitSHA


@dataclass(frozen=True)
class ContextStats:
    """Counts gathered while building context."""

    total_files: int
    reviewable_files: int
    critical_files: int
    total_additions: int
    total_deletions: int
    analyzed_files: int
    fetched_dependencies: int
    language_breakdown: dict[str, int] = field(default_factory=dict[str, int])
    role_breakdown: dict[str, int] = field(default_factory=dict[str, int])


@dataclass(frozen=True)
class PRContext:
    """Result of context building: the payload plus how it was chosen."""

    head_sha: CommitSHA
    classification: DiffClassification
    selection: SelectionResult
    payload: ReviewPayload
    impact: ImpactAssessment
    stats: ContextStats
    explanation: str


# =============================================================================
# PROCESS REVIEW
# =============================================================================


@dataclass(frozen=True)
class ProcessReviewResult:
    """Result of one successful pipeline run."""

    record: ReviewRecord
    validation: ValidationOutcome
    comment_id: int
    token_count: int
