"""Value objects for the Review bounded context."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum

from lookout.shared.types import FilePath, ReviewCategory, Severity

# =============================================================================
# ENUMS
# =============================================================================


class ImpactLevel(StrEnum):
    """Advisory risk bucket for a whole pull request."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class ValidationStage(StrEnum):
    """Validation step at which a comment was rejected."""

    REFERENCE = "reference"
    QUALITY = "quality"
    DUPLICATE = "duplicate"


# =============================================================================
# REVIEW PAYLOAD
# =============================================================================


@dataclass(frozen=True)
class ChangedFilePayload:
    """A changed file as shown to the reasoning service."""

    path: FilePath
    content: str
    patch: str = ""
    additions: int = 0
    deletions: int = 0
    is_critical: bool = False
    imports: list[str] = field(default_factory=list[str])
    exports: list[str] = field(default_factory=list[str])
    definitions: list[str] = field(default_factory=list[str])
    roles: list[str] = field(default_factory=list[str])
    # New-file line numbers added by the patch.
    changed_lines: list[int] = field(default_factory=list[int])


@dataclass(frozen=True)
class ContextFilePayload:
    """An unchanged file included for background."""

    path: FilePath
    content: str
    relevance_score: float
    reason: str


@dataclass(frozen=True)
class ReviewPayload:
    """Everything the reasoning service sees for one pull request.

    Comments are only trusted when they cite files and lines that exist in
    this payload.
    """

    changed_files: list[ChangedFilePayload] = field(
        default_factory=list[ChangedFilePayload]
    )
    context_files: list[ContextFilePayload] = field(
        default_factory=list[ContextFilePayload]
    )
    summary: str = ""

    def file_contents(self) -> dict[FilePath, str]:
        """Map every payload path to its text."""
        contents: dict[FilePath, str] = {}
        for changed in self.changed_files:
            contents[changed.path] = changed.content
        for context in self.context_files:
            contents[context.path] = context.content
        return contents

    @property
    def paths(self) -> list[FilePath]:
        return [f.path for f in self.changed_files] + [
            f.path for f in self.context_files
        ]


@dataclass(frozen=True)
class ImpactAssessment:
    """Coarse impact score for a pull request. Advisory only."""

    score: int
    level: ImpactLevel
    factors: list[str] = field(default_factory=list[str])


# =============================================================================
# COMMENTS
# =============================================================================


@dataclass(frozen=True)
class CategoryComment:
    """A single finding from one review category.

    Line numbers are 1-based and inclusive. An inverted range is accepted
    here so the validator can report it rather than fail on construction.
    """

    file_path: FilePath
    line_start: int
    line_end: int
    severity: Severity
    message: str
    reasoning: str = ""
    category: ReviewCategory = ReviewCategory.ARCHITECTURE

    @property
    def location(self) -> str:
        return f"{self.file_path}:{self.line_start}-{self.line_end}"

    @property
    def line_span(self) -> int:
        return self.line_end - self.line_start + 1


@dataclass(frozen=True)
class CategoryReviewResult:
    """Output of one category review call."""

    category: ReviewCategory
    comments: list[CategoryComment] = field(default_factory=list[CategoryComment])
    overall_assessment: str = ""
    tokens_used: int = 0


@dataclass(frozen=True)
class CategorySummary:
    """Accepted comments and assessment for one category, after validation."""

    comments: list[CategoryComment] = field(default_factory=list[CategoryComment])
    overall_assessment: str = ""


@dataclass(frozen=True)
class ReviewResult:
    """The structured outcome recorded on a completed review."""

    categories: dict[ReviewCategory, CategorySummary]
    summary: str
    files_analyzed: list[FilePath] = field(default_factory=list[FilePath])
    context_files: list[FilePath] = field(default_factory=list[FilePath])
    token_usage: int = 0

    @property
    def comments(self) -> list[CategoryComment]:
        return [
            comment
            for category in ReviewCategory
            for comment in self.categories.get(category, CategorySummary()).comments
        ]


# =============================================================================
# VALIDATION
# =============================================================================


@dataclass(frozen=True)
class RejectedComment:
    """A comment dropped by validation, with the stage and reason."""

    comment: CategoryComment
    stage: ValidationStage
    reason: str


@dataclass(frozen=True)
class ValidationOutcome:
    """A comment batch split into accepted and rejected.

    Every accepted comment cites a file in the payload and a line range
    inside that file.
    """

    accepted: list[CategoryComment]
    rejected: list[RejectedComment]
    pass_rate_threshold: float = 0.5

    @property
    def total(self) -> int:
        return len(self.accepted) + len(self.rejected)

    @property
    def final_count(self) -> int:
        return len(self.accepted)

    def _count(self, stage: ValidationStage) -> int:
        return sum(1 for r in self.rejected if r.stage == stage)

    @property
    def invalid_reference(self) -> int:
        return self._count(ValidationStage.REFERENCE)

    @property
    def low_quality(self) -> int:
        return self._count(ValidationStage.QUALITY)

    @property
    def duplicates(self) -> int:
        return self._count(ValidationStage.DUPLICATE)

    @property
    def pass_rate(self) -> float:
        """Share of comments that survived. An empty batch passes fully."""
        if self.total == 0:
            return 1.0
        return self.final_count / self.total

    @property
    def is_acceptable(self) -> bool:
        """Batch gate.

        An empty batch is accepted, since clean code is a valid outcome. A
        non-empty batch is rejected if nothing survived or if fewer than
        half the comments survived.
        """
        if self.total == 0:
            return True
        if self.final_count == 0:
            return False
        return self.pass_rate >= self.pass_rate_threshold

    def report(self) -> str:
        lines = [
            "=== Comment Validation Report ===",
            f"Total comments from AI: {self.total}",
            f"Invalid (bad file/lines): {self.invalid_reference}",
            f"Low quality (filtered): {self.low_quality}",
            f"Duplicates (removed): {self.duplicates}",
            f"Final valid comments: {self.final_count}",
            "",
            f"Pass rate: {self.pass_rate * 100:.1f}%",
        ]

        errors = [
            r for r in self.rejected if r.stage == ValidationStage.REFERENCE
        ]
        if errors:
            lines.append("")
            lines.append("Validation Errors:")
            for r in errors:
                lines.append(
                    f"  - Invalid comment for {r.comment.location}: {r.reason}"
                )

        return "\n".join(lines)
