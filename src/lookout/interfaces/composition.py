"""Composition root: wires infrastructure into the review use case."""

from __future__ import annotations

from lookout.application.context_assembler import ContextBuilder
from lookout.application.review_pipeline import ReviewPipeline
from lookout.domain.llm.value_objects import ModelConfig
from lookout.domain.ranking.services import RelevanceRanker
from lookout.domain.review.repositories import ReviewStore
from lookout.domain.review.services import CommentValidator
from lookout.infrastructure.github.client import StaticTokenProvider
from lookout.infrastructure.github.publisher import GitHubCommentPublisher
from lookout.infrastructure.parsing.pattern_parser import PatternStructureParser
from lookout.infrastructure.queue.job_queue import ReviewJobQueue, RetryPolicy
from lookout.infrastructure.queue.rate_limiter import SlidingWindowRateLimiter
from lookout.infrastructure.reasoning.category_reviewer import LLMCategoryReviewer
from lookout.infrastructure.storage.review_store import FileReviewStore
from lookout.interfaces.config import WorkerConfig
from lookout.shared.types import TokenCount


def build_store(config: WorkerConfig) -> FileReviewStore:
    return FileReviewStore(storage_dir=config.storage_path)


def build_pipeline(config: WorkerConfig, store: ReviewStore) -> ReviewPipeline:
    """Assemble a ReviewPipeline from configuration."""
    settings = config.settings
    context_builder = ContextBuilder(
        parser=PatternStructureParser(),
        ranker=RelevanceRanker(max_distance=settings.max_distance),
        max_context_files=settings.max_context_files,
        max_tokens=settings.max_tokens,
        max_fetched_files=settings.max_fetched_files,
    )
    reviewer = LLMCategoryReviewer(
        config=ModelConfig(
            model=settings.model,
            max_tokens=TokenCount(settings.review_max_tokens),
        )
    )
    return ReviewPipeline(
        store=store,
        hosts=StaticTokenProvider(token=config.github_token),
        context_builder=context_builder,
        reviewer=reviewer,
        publisher=GitHubCommentPublisher(),
        validator=CommentValidator(
            pass_rate_threshold=settings.pass_rate_threshold
        ),
        fan_in=settings.fan_in,
    )


def build_queue(config: WorkerConfig, pipeline: ReviewPipeline) -> ReviewJobQueue:
    """Assemble the worker pool around a pipeline. Enter it to start workers."""
    settings = config.settings
    return ReviewJobQueue(
        processor=pipeline.process,
        concurrency=settings.concurrency,
        rate_limiter=SlidingWindowRateLimiter(
            max_starts=settings.rate_limit_max,
            window_seconds=settings.rate_limit_window,
        ),
        retry=RetryPolicy(
            attempts=settings.retry_attempts,
            backoff_seconds=settings.retry_backoff_seconds,
        ),
    )
