"""Value objects for the LLM bounded context."""

from __future__ import annotations

from dataclasses import dataclass, replace

from lookout.shared.types import TokenCount

# =============================================================================
# VALUE OBJECTS
# =============================================================================


@dataclass(frozen=True)
class ModelConfig:
    """Model settings for one reasoning call via pydantic-ai.

    ``model`` is a pydantic-ai model string such as ``"openai:gpt-4o"``.
    """

    model: str
    max_tokens: TokenCount
    temperature: float = 0.0
    retries: int = 1

    def with_temperature(self, temperature: float) -> ModelConfig:
        return replace(self, temperature=temperature)
