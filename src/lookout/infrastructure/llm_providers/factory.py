"""Builds the pydantic-ai agents that run category reviews.

Reviewers reply in free text that is parsed afterwards, so every agent
produces ``str`` output.
"""

from __future__ import annotations

from pydantic_ai import Agent
from pydantic_ai.settings import ModelSettings

from lookout.domain.llm.value_objects import ModelConfig


def model_settings_for(config: ModelConfig) -> ModelSettings:
    """Per-request settings: reply token cap and sampling temperature."""
    return ModelSettings(
        max_tokens=int(config.max_tokens),
        temperature=config.temperature,
    )


def create_review_agent(config: ModelConfig, system_prompt: str) -> Agent[None, str]:
    """Build a text agent for one review category.

    Args:
        config: Model string, reply token cap, temperature and retry count.
        system_prompt: The category's reviewer instructions.

    Returns:
        An Agent ready for ``run_sync``.
    """
    return Agent(
        model=config.model,
        output_type=str,
        system_prompt=system_prompt,
        model_settings=model_settings_for(config),
        retries=config.retries,
    )
