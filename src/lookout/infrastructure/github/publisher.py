"""GitHub PR review publisher."""

from __future__ import annotations

import logging

from dataclasses import dataclass

from lookout.domain.review.entities import ReviewJob
from lookout.domain.review.repositories import CodeHost
from lookout.domain.review.value_objects import (
    CategoryComment,
    CategorySummary,
    ReviewResult,
)
from lookout.infrastructure.constants import SeverityLabel
from lookout.shared.types import ReviewCategory, Severity

logger = logging.getLogger(__name__)

# =============================================================================
# SEVERITY LABEL MAPPING
# =============================================================================

_SEVERITY_TO_LABEL: dict[Severity, SeverityLabel] = {
    Severity.CRITICAL: SeverityLabel.CRITICAL,
    Severity.WARNING: SeverityLabel.WARNING,
    Severity.INFO: SeverityLabel.INFO,
}

_SEVERITY_ORDER: dict[Severity, int] = {
    Severity.CRITICAL: 0,
    Severity.WARNING: 1,
    Severity.INFO: 2,
}

_CATEGORY_TITLES: dict[ReviewCategory, str] = {
    ReviewCategory.ARCHITECTURE: "Architecture",
    ReviewCategory.SECURITY: "Security",
    ReviewCategory.MAINTAINABILITY: "Maintainability",
}

_NO_FINDINGS = "_No issues found._"

# =============================================================================
# FORMATTING
# =============================================================================


def format_comment(comment: CategoryComment) -> str:
    label = _SEVERITY_TO_LABEL[comment.severity]
    return f"- {label} `{comment.location}` {comment.message}"


def format_category(category: ReviewCategory, summary: CategorySummary) -> str:
    """Render one category section, most severe findings first."""
    parts = [f"### {_CATEGORY_TITLES[category]}"]
    if summary.overall_assessment:
        parts.append(f"\n{summary.overall_assessment}")

    ordered = sorted(summary.comments, key=lambda c: _SEVERITY_ORDER[c.severity])
    if ordered:
        parts.append("\n" + "\n".join(format_comment(c) for c in ordered))
    else:
        parts.append(f"\n{_NO_FINDINGS}")
    return "\n".join(parts)


def format_review(result: ReviewResult, review_seconds: float) -> str:
    """Render the whole review as a single markdown comment body."""
    counts = {severity: 0 for severity in Severity}
    for comment in result.comments:
        counts[comment.severity] += 1

    sections = [
        "## Lookout Review",
        "",
        result.summary,
        "",
        (
            f"**{counts[Severity.CRITICAL]}** critical, "
            f"**{counts[Severity.WARNING]}** warnings, "
            f"**{counts[Severity.INFO]}** suggestions"
        ),
    ]

    for category in ReviewCategory:
        summary = result.categories.get(category, CategorySummary())
        sections.append("")
        sections.append(format_category(category, summary))

    sections.append("")
    sections.append("---")
    sections.append(
        f"<sub>{len(result.files_analyzed)} changed files, "
        f"{len(result.context_files)} context files, "
        f"{result.token_usage} tokens, {review_seconds:.1f}s</sub>"
    )
    return "\n".join(sections)


# =============================================================================
# PUBLISHER
# =============================================================================


@dataclass
class GitHubCommentPublisher:
    """Implements ReviewPublisher by posting one markdown issue comment."""

    def publish(
        self,
        host: CodeHost,
        job: ReviewJob,
        result: ReviewResult,
        review_seconds: float,
    ) -> int:
        """Post the review on the pull request.

        Raises:
            PublishError: If the API call fails.
        """
        body = format_review(result, review_seconds)
        comment_id = host.post_issue_comment(
            repository=job.repository_full_name,
            pr_number=job.pr_number,
            body=body,
        )
        logger.info(
            "Posted review on %s#%d (comment %d, %d findings)",
            job.repository_full_name,
            job.pr_number,
            comment_id,
            len(result.comments),
        )
        return comment_id
