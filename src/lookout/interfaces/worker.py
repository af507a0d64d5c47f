"""Long-running worker: webhook deliveries on stdin, reviews via the job queue.

Each stdin line is one JSON delivery::

    {"event": "pull_request", "signature": "sha256=...", "body": "<raw json>"}

``GITHUB_WEBHOOK_SECRET`` is required: deliveries with a missing or wrong
signature are dropped before anything else is read from them. A delivery for
a pull request whose review is already queued is dropped too.
"""

from __future__ import annotations

import asyncio
import json
import logging
import sys

from typing import cast

from pydantic import BaseModel, ValidationError

from lookout.domain.review.repositories import ReviewStore
from lookout.infrastructure.github.webhook import (
    parse_pull_request_event,
    require_valid_signature,
)
from lookout.infrastructure.queue.job_queue import ReviewJobQueue
from lookout.interfaces.composition import build_pipeline, build_queue, build_store
from lookout.interfaces.config import WorkerConfig
from lookout.shared.exceptions import (
    ConfigurationError,
    LookoutError,
    SignatureError,
)

logger = logging.getLogger(__name__)


class WebhookDelivery(BaseModel):
    """One webhook delivery as forwarded to the worker."""

    event: str | None = None
    signature: str | None = None
    body: str


def run() -> None:
    """Start the worker pool and feed it from stdin until EOF."""
    try:
        config = WorkerConfig.from_env()
        asyncio.run(_serve(config))
    except LookoutError as e:
        logger.error("Lookout worker failed: %s", e)
        sys.exit(1)
    except KeyboardInterrupt:
        logger.info("Interrupted")
    except Exception:
        logger.exception("Unexpected error")
        sys.exit(1)


async def _serve(config: WorkerConfig) -> None:
    if config.webhook_secret is None:
        msg = "Missing required environment variable: GITHUB_WEBHOOK_SECRET"
        raise ConfigurationError(msg)
    secret = config.webhook_secret
    store = build_store(config)
    pipeline = build_pipeline(config, store)

    async with build_queue(config, pipeline) as queue:
        while True:
            line = await asyncio.to_thread(sys.stdin.readline)
            if not line:
                break
            if line.strip():
                handle_delivery(line, queue, store, secret)

        logger.info("Input closed, waiting for %d jobs", len(queue.in_flight))
        await queue.wait_idle()


def handle_delivery(
    line: str,
    queue: ReviewJobQueue,
    store: ReviewStore,
    secret: str,
) -> bool:
    """Verify, parse and enqueue one delivery.

    Returns:
        True if a review job was enqueued.
    """
    try:
        delivery = WebhookDelivery.model_validate_json(line)
        require_valid_signature(delivery.body.encode(), delivery.signature, secret)
        payload = json.loads(delivery.body)
    except SignatureError as e:
        logger.warning("Rejected delivery: %s", e)
        return False
    except (ValidationError, json.JSONDecodeError) as e:
        logger.warning("Malformed delivery skipped: %s", e)
        return False

    if not isinstance(payload, dict):
        logger.warning("Malformed delivery skipped: body is not an object")
        return False

    trigger = parse_pull_request_event(
        delivery.event, cast(dict[str, object], payload)
    )
    if trigger is None:
        return False

    job = trigger.to_job()
    if queue.is_queued(job.dedupe_key):
        logger.info("Review for %s already queued, delivery dropped", job.dedupe_key)
        return False

    record = store.create(trigger.pull_request_id)
    queue.enqueue(job)
    logger.info("Queued review %s for %s", record.id, trigger.pull_request_id)
    return True
