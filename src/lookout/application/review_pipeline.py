"""Review pipeline use case: drives one job from pending to a terminal state."""

from __future__ import annotations

import asyncio
import logging
import time

from collections.abc import Callable
from dataclasses import dataclass, field
from enum import StrEnum

from lookout.application.context_assembler import ContextBuilder
from lookout.application.dto import BuildContextCommand, PRContext, ProcessReviewResult
from lookout.domain.review.entities import (
    CompletedUpdate,
    FailedUpdate,
    ReviewJob,
    ReviewRecord,
    StartedUpdate,
)
from lookout.domain.review.repositories import (
    CategoryReviewer,
    CodeHostProvider,
    ReviewPublisher,
    ReviewStore,
)
from lookout.domain.review.services import CommentValidator
from lookout.domain.review.value_objects import (
    CategoryComment,
    CategoryReviewResult,
    CategorySummary,
    ReviewPayload,
    ReviewResult,
    ValidationOutcome,
)
from lookout.shared.exceptions import (
    ReviewNotFoundError,
    StoreError,
    ValidationGateError,
)
from lookout.shared.types import ReviewCategory

logger = logging.getLogger(__name__)

# =============================================================================
# FAN-IN POLICY
# =============================================================================


class FanInPolicy(StrEnum):
    """How the three category reviews are joined.

    ``WAIT_ALL`` lets every review settle before reporting a failure.
    ``FAIL_FAST`` cancels the remaining reviews on the first failure.
    """

    WAIT_ALL = "wait_all"
    FAIL_FAST = "fail_fast"


# =============================================================================
# RESULT ASSEMBLY
# =============================================================================


def build_review_result(
    results: list[CategoryReviewResult],
    outcome: ValidationOutcome,
    context: PRContext,
) -> ReviewResult:
    """Group accepted comments by category into the stored result."""
    by_category: dict[ReviewCategory, list[CategoryComment]] = {
        category: [] for category in ReviewCategory
    }
    for comment in outcome.accepted:
        by_category[comment.category].append(comment)

    assessments = {r.category: r.overall_assessment for r in results}
    categories = {
        category: CategorySummary(
            comments=by_category[category],
            overall_assessment=assessments.get(category, ""),
        )
        for category in ReviewCategory
    }

    payload = context.payload
    return ReviewResult(
        categories=categories,
        summary=(
            f"Analyzed {len(context.selection.files)} files, "
            f"found {outcome.final_count} issues"
        ),
        files_analyzed=[f.path for f in payload.changed_files],
        context_files=[f.path for f in payload.context_files],
        token_usage=sum(r.tokens_used for r in results),
    )


# =============================================================================
# USE CASE
# =============================================================================


@dataclass
class ReviewPipeline:
    """Processes one review job.

    Steps:
    1. Load the latest review record and mark it running
    2. Build the review context
    3. Run the three category reviews concurrently
    4. Validate the merged comments and enforce the batch gate
    5. Store accepted comments, publish, mark completed

    Any failure after step 1 marks the record failed with the error text
    and re-raises so the job queue can retry.
    """

    store: ReviewStore
    hosts: CodeHostProvider
    context_builder: ContextBuilder
    reviewer: CategoryReviewer
    publisher: ReviewPublisher
    validator: CommentValidator = field(default_factory=CommentValidator)
    fan_in: FanInPolicy = FanInPolicy.WAIT_ALL
    clock: Callable[[], float] = time.monotonic

    async def process(self, job: ReviewJob) -> ProcessReviewResult:
        """Run the job to a terminal state.

        Raises:
            ReviewNotFoundError: If no review record exists for the job.
            LookoutError: Whatever failed the job, after the failure has
                been recorded.
        """
        logger.info(
            "Processing review for %s (pull request %s)",
            job.dedupe_key,
            job.pull_request_id,
        )
        record = await asyncio.to_thread(self.store.latest_for, job.pull_request_id)
        if record is None:
            raise ReviewNotFoundError(job.pull_request_id)

        await asyncio.to_thread(self.store.update_status, record.id, StartedUpdate())

        try:
            return await self._run(job, record)
        except Exception as exc:
            logger.exception("Review %s failed", record.id)
            await self._mark_failed(record, exc)
            raise

    async def _run(self, job: ReviewJob, record: ReviewRecord) -> ProcessReviewResult:
        host = self.hosts.for_installation(job.installation_id)
        head_sha = await asyncio.to_thread(
            host.get_head_sha, job.repository_full_name, job.pr_number
        )

        cmd = BuildContextCommand(
            repository=job.repository_full_name,
            pr_number=job.pr_number,
            head_sha=head_sha,
        )
        context = await asyncio.to_thread(self.context_builder.build, host, cmd)

        started = self.clock()
        results = await self._review_all(context.payload)
        review_seconds = self.clock() - started
        for result in results:
            logger.info(
                "%s review: %d comments, %d tokens",
                result.category,
                len(result.comments),
                result.tokens_used,
            )

        comments = [c for result in results for c in result.comments]
        outcome = self.validator.validate(comments, context.payload)
        logger.info("%s", outcome.report())
        if not outcome.is_acceptable:
            raise ValidationGateError(outcome)

        await asyncio.to_thread(self.store.save_comments, record.id, outcome.accepted)

        review_result = build_review_result(results, outcome, context)
        comment_id = await asyncio.to_thread(
            self.publisher.publish, host, job, review_result, review_seconds
        )
        logger.info("Review posted as comment %d", comment_id)

        completed = await asyncio.to_thread(
            self.store.update_status,
            record.id,
            CompletedUpdate(
                payload=review_result,
                comment_id=comment_id,
                token_count=review_result.token_usage,
                files_analyzed=len(context.selection.files),
            ),
        )
        return ProcessReviewResult(
            record=completed,
            validation=outcome,
            comment_id=comment_id,
            token_count=review_result.token_usage,
        )

    async def _review_all(self, payload: ReviewPayload) -> list[CategoryReviewResult]:
        """Fan out one task per category and join them per the fan-in policy.

        Returns:
            Results in category order.
        """
        tasks = {
            category: asyncio.create_task(
                asyncio.to_thread(self.reviewer.review, category, payload),
                name=f"review-{category}",
            )
            for category in ReviewCategory
        }

        if self.fan_in is FanInPolicy.FAIL_FAST:
            _, pending = await asyncio.wait(
                tasks.values(), return_when=asyncio.FIRST_EXCEPTION
            )
            for task in pending:
                task.cancel()
            if pending:
                await asyncio.wait(pending)
        else:
            await asyncio.wait(tasks.values())

        failures: list[BaseException] = []
        for category, task in tasks.items():
            if task.cancelled():
                continue
            error = task.exception()
            if error is not None:
                logger.error("%s review failed: %s", category, error)
                failures.append(error)
        if failures:
            raise failures[0]

        return [tasks[category].result() for category in ReviewCategory]

    async def _mark_failed(self, record: ReviewRecord, exc: Exception) -> None:
        try:
            await asyncio.to_thread(
                self.store.update_status,
                record.id,
                FailedUpdate(error_message=str(exc)),
            )
        except StoreError:
            logger.exception("Could not record failure for review %s", record.id)
