"""Configuration assembly from environment variables and ``pyproject.toml``."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from lookout.interfaces.env_utils import optional_env, require_env
from lookout.interfaces.toml_config import LookoutConfig, load_lookout_config


@dataclass(frozen=True)
class WorkerConfig:
    """Secrets from the environment plus settings from ``[tool.lookout]``."""

    github_token: str
    settings: LookoutConfig
    webhook_secret: str | None = None
    github_event_path: str | None = None

    @property
    def storage_path(self) -> Path:
        return Path(self.settings.storage_dir)

    @classmethod
    def from_env(cls, project_root: Path | None = None) -> WorkerConfig:
        """Build config from environment variables.

        Required:
            GITHUB_TOKEN

        Optional:
            GITHUB_WEBHOOK_SECRET, GITHUB_EVENT_PATH

        Raises:
            ConfigurationError: If a required variable is missing or the
                TOML settings are invalid.
        """
        return cls(
            github_token=require_env("GITHUB_TOKEN"),
            settings=load_lookout_config(project_root),
            webhook_secret=optional_env("GITHUB_WEBHOOK_SECRET"),
            github_event_path=optional_env("GITHUB_EVENT_PATH"),
        )
