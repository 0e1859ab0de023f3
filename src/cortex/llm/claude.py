"""
Claude API provider.

Primary summarizer backend. Memory prompts ask for complete JSON documents,
so a reply cut off by the token limit is flagged in the response metadata
and logged; the memory layer then rejects it as malformed.
"""

import anthropic
from anthropic import APIConnectionError, APIError, RateLimitError

from cortex.core.config import get_settings
from cortex.core.logging import get_logger
from cortex.core.typing import MessageDict
from cortex.llm.base import LLMConfig, LLMProvider, LLMResponse, ProviderType

logger = get_logger("llm.claude")


class ClaudeProvider(LLMProvider):
    """Anthropic Claude API provider."""

    provider_type = ProviderType.CLAUDE

    def __init__(
        self,
        api_key: str | None = None,
        default_model: str | None = None,
        timeout: float = 120.0,
        max_retries: int = 2,
    ):
        settings = get_settings()
        self.api_key = api_key or settings.anthropic_api_key
        self.default_model = default_model or settings.default_model
        self.timeout = timeout
        self.max_retries = max_retries
        self._client: anthropic.AsyncAnthropic | None = None

    @property
    def client(self) -> anthropic.AsyncAnthropic:
        if self._client is None:
            self._client = anthropic.AsyncAnthropic(
                api_key=self.api_key,
                timeout=self.timeout,
                max_retries=self.max_retries,
            )
        return self._client

    @staticmethod
    def _split_system(messages: list[MessageDict], system_prompt: str | None) -> tuple[str, list[MessageDict]]:
        """Claude takes the system prompt separately; a system message overrides config."""
        api_messages = []
        for msg in messages:
            if msg["role"] == "system":
                system_prompt = msg["content"]
            else:
                api_messages.append({"role": msg["role"], "content": msg["content"]})
        return system_prompt or "", api_messages

    async def complete(
        self,
        messages: list[MessageDict],
        config: LLMConfig,
    ) -> LLMResponse:
        """Generate completion using Claude API."""
        model = config.model or self.default_model
        system_prompt, api_messages = self._split_system(messages, config.system_prompt)

        prompt_chars = sum(len(str(m["content"])) for m in api_messages)
        logger.debug(f"Claude request: model={model}, max_tokens={config.max_tokens}, prompt={prompt_chars} chars")

        try:
            response = await self.client.messages.create(
                model=model,
                max_tokens=config.max_tokens,
                temperature=config.temperature,
                system=system_prompt,
                messages=api_messages,
            )
        except RateLimitError as e:
            logger.warning(f"Rate limited: {e}")
            raise
        except APIConnectionError as e:
            logger.error(f"Connection error: {e}")
            raise
        except APIError as e:
            logger.error(f"API error: {e}")
            raise

        content = "".join(block.text for block in response.content if getattr(block, "type", "") == "text")
        stop_reason = getattr(response, "stop_reason", None)
        if stop_reason == "max_tokens":
            logger.warning(f"Claude reply hit max_tokens ({config.max_tokens}); output is truncated")

        logger.debug(f"Claude response ({response.usage.output_tokens} tokens, stop={stop_reason})")

        return LLMResponse(
            content=content,
            model=getattr(response, "model", None) or model,
            provider=self.provider_type,
            input_tokens=response.usage.input_tokens,
            output_tokens=response.usage.output_tokens,
            metadata={"stop_reason": stop_reason},
        )

    async def health_check(self) -> bool:
        """Check if Claude API is accessible."""
        try:
            response = await self.client.messages.create(
                model=self.default_model,
                max_tokens=10,
                messages=[{"role": "user", "content": "ping"}],
            )
            return bool(response.content)
        except APIError as e:
            logger.warning(f"Claude health check failed: {e}")
            return False

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        if self._client is not None:
            await self._client.close()
            self._client = None
