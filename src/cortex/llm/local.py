"""Local LLM provider - OpenAI-compatible API for Ollama, LM Studio, etc."""

import httpx

from cortex.core.config import get_settings
from cortex.core.logging import get_logger
from cortex.core.typing import MessageDict
from cortex.llm.base import LLMConfig, LLMProvider, LLMResponse, ProviderType

logger = get_logger("llm.local")


class LocalProvider(LLMProvider):
    """Local LLM via OpenAI-compatible API (Ollama, LM Studio, vLLM, etc.)."""

    provider_type = ProviderType.LOCAL

    def __init__(self, base_url: str | None = None, default_model: str | None = None):
        settings = get_settings()
        self.base_url = base_url or settings.local_llm_url
        self.default_model = default_model or settings.fallback_model
        self._client: httpx.AsyncClient | None = None

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=300.0,  # Local models can be slow
            )
        return self._client

    async def complete(
        self,
        messages: list[MessageDict],
        config: LLMConfig,
    ) -> LLMResponse:
        """Generate completion via local OpenAI-compatible API."""
        model = config.model or self.default_model

        openai_messages = list(messages)
        if config.system_prompt and not any(m["role"] == "system" for m in messages):
            openai_messages.insert(0, {"role": "system", "content": config.system_prompt})

        payload = {
            "model": model,
            "messages": openai_messages,
            "max_tokens": config.max_tokens,
            "temperature": config.temperature,
            "stream": False,
        }

        logger.debug(f"Local request: model={model}, url={self.base_url}")

        try:
            response = await self.client.post("/chat/completions", json=payload)
            response.raise_for_status()
            data = response.json()

            message = data["choices"][0]["message"]
            content = message.get("content") or ""
            usage = data.get("usage", {})
            input_tokens = usage.get("prompt_tokens", 0)
            output_tokens = usage.get("completion_tokens", 0)

            logger.debug(f"Local response ({output_tokens} tokens): {content[:200]}...")

            return LLMResponse(
                content=content,
                model=data.get("model", model),
                provider=self.provider_type,
                input_tokens=input_tokens,
                output_tokens=output_tokens,
            )

        except httpx.ConnectError as e:
            logger.warning(f"Local LLM not reachable at {self.base_url}: {e}")
            raise
        except httpx.HTTPStatusError as e:
            logger.error(f"Local LLM error: {e.response.status_code}")
            raise

    async def health_check(self) -> bool:
        """Check if local LLM server is running."""
        try:
            response = await self.client.get("/models")
            return response.status_code == 200
        except httpx.HTTPError as e:
            logger.debug(f"Local LLM health check failed: {e}")
            return False

    async def close(self) -> None:
        """Close HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None
