"""Single pull request review from a GitHub event file."""

from __future__ import annotations

import asyncio
import json
import logging
import os
import sys

from pathlib import Path
from typing import cast

from lookout.infrastructure.constants import PULL_REQUEST_EVENT
from lookout.infrastructure.github.webhook import parse_pull_request_event
from lookout.interfaces.composition import build_pipeline, build_store
from lookout.interfaces.config import WorkerConfig
from lookout.shared.exceptions import ConfigurationError, LookoutError

logger = logging.getLogger(__name__)


def run() -> None:
    """Review the pull request described by ``GITHUB_EVENT_PATH``."""
    try:
        config = WorkerConfig.from_env()
        _execute(config)
    except LookoutError as e:
        logger.error("Lookout failed: %s", e)
        sys.exit(1)
    except Exception:
        logger.exception("Unexpected error")
        sys.exit(1)


def _execute(config: WorkerConfig) -> None:
    if config.github_event_path is None:
        msg = "Missing required environment variable: GITHUB_EVENT_PATH"
        raise ConfigurationError(msg)

    event = _load_event(config.github_event_path)
    event_name = os.environ.get("GITHUB_EVENT_NAME", PULL_REQUEST_EVENT)
    trigger = parse_pull_request_event(event_name, event)
    if trigger is None:
        logger.info("Event does not call for a review, nothing to do")
        return

    store = build_store(config)
    pipeline = build_pipeline(config, store)
    store.create(trigger.pull_request_id)

    result = asyncio.run(pipeline.process(trigger.to_job()))
    logger.info(
        "Review %s completed: %d comments posted, %d tokens",
        result.record.id,
        result.validation.final_count,
        result.token_count,
    )


def _load_event(path: str) -> dict[str, object]:
    try:
        data = json.loads(Path(path).read_text())
    except (OSError, json.JSONDecodeError) as e:
        msg = f"Cannot read event file {path}: {e}"
        raise ConfigurationError(msg) from e
    if not isinstance(data, dict):
        msg = f"Event file {path} does not contain a JSON object"
        raise ConfigurationError(msg)
    return cast(dict[str, object], data)
