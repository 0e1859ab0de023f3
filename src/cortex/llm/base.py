"""
LLM provider interface.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum

from cortex.core.typing import MessageDict


class ProviderType(Enum):
    CLAUDE = "claude"
    LOCAL = "local"


@dataclass
class LLMResponse:
    """Response from LLM provider."""

    content: str
    model: str
    provider: ProviderType
    input_tokens: int = 0
    output_tokens: int = 0
    metadata: dict | None = None


@dataclass
class LLMConfig:
    """Configuration for LLM call."""

    model: str | None
    max_tokens: int = 4096
    temperature: float = 0.7
    system_prompt: str | None = None


class LLMProvider(ABC):
    """Abstract LLM provider."""

    provider_type: ProviderType

    @abstractmethod
    async def complete(
        self,
        messages: list[MessageDict],
        config: LLMConfig,
    ) -> LLMResponse:
        """
        Generate completion from messages.

        Args:
            messages: Conversation messages (role/content dicts)
            config: LLM configuration

        Returns:
            LLMResponse with content and usage
        """
        ...

    @abstractmethod
    async def health_check(self) -> bool:
        """Check if provider is available."""
        ...
