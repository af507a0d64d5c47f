"""Console entry point for lookout.

``INPUT_MODE`` picks what runs:

- ``review`` (default): review one pull request from a GitHub event file
- ``worker``: job queue and worker pool fed by webhook deliveries on stdin

``LOOKOUT_LOG_LEVEL`` (debug, info, warning, error) sets the root log level.
"""

from __future__ import annotations

import importlib
import logging
import sys

from lookout.interfaces.env_utils import choice_env
from lookout.shared.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

_LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

_LOG_LEVELS: dict[str, int] = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}

# Imported on demand so review mode never loads the queue machinery.
_MODE_MODULES: dict[str, str] = {
    "review": "lookout.interfaces.review_action",
    "worker": "lookout.interfaces.worker",
}

_VALID_MODES = frozenset(_MODE_MODULES)


def main() -> None:
    """Configure logging, then hand off to the module named by INPUT_MODE."""
    try:
        level = choice_env("LOOKOUT_LOG_LEVEL", _LOG_LEVELS, default="info")
        mode = choice_env("INPUT_MODE", _VALID_MODES, default="review")
    except ConfigurationError as e:
        logging.basicConfig(format=_LOG_FORMAT)
        logger.error("%s", e)
        sys.exit(1)

    logging.basicConfig(level=_LOG_LEVELS[level], format=_LOG_FORMAT)
    logger.debug("Starting lookout in %s mode", mode)

    entry_point = importlib.import_module(_MODE_MODULES[mode])
    entry_point.run()


if __name__ == "__main__":
    main()
