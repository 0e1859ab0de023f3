"""LLM provider router - tries registered providers in order."""

from cortex.core.config import Settings, get_settings
from cortex.core.logging import get_logger
from cortex.core.typing import MessageDict
from cortex.llm.base import LLMConfig, LLMProvider, LLMResponse, ProviderType

logger = get_logger("llm.router")


class LLMRouter:
    """Routes LLM requests to the first provider that answers."""

    def __init__(self):
        self._providers: dict[ProviderType, LLMProvider] = {}

    def register(self, provider: LLMProvider) -> None:
        """Register a provider. Registration order is fallback order."""
        self._providers[provider.provider_type] = provider
        logger.info(f"Registered provider: {provider.provider_type.value}")

    def get(self, provider_type: ProviderType) -> LLMProvider | None:
        """Get specific provider."""
        return self._providers.get(provider_type)

    @property
    def available_providers(self) -> list[ProviderType]:
        """List registered providers."""
        return list(self._providers.keys())

    async def complete(
        self,
        messages: list[MessageDict],
        config: LLMConfig,
        preferred: ProviderType | None = None,
    ) -> LLMResponse:
        """Send the request to each provider in turn until one succeeds.

        Args:
            messages: List of message dicts with role/content
            config: LLM configuration (model, tokens, temperature)
            preferred: Provider to try first (optional)

        Returns:
            LLMResponse from the first provider that answered
        """
        if not self._providers:
            raise RuntimeError("No providers registered")

        order = list(self._providers.values())
        if preferred and preferred in self._providers:
            first = self._providers[preferred]
            order = [first] + [p for p in order if p is not first]

        last_error: Exception | None = None
        for provider in order:
            # An explicit model name only makes sense for the first provider
            call_config = config if provider is order[0] else LLMConfig(
                model=None,
                max_tokens=config.max_tokens,
                temperature=config.temperature,
                system_prompt=config.system_prompt,
            )
            try:
                response = await provider.complete(messages, call_config)
                logger.info(
                    f"Used {response.model} ({provider.provider_type.value}): "
                    f"{response.input_tokens} in, {response.output_tokens} out"
                )
                return response
            except Exception as e:
                logger.warning(f"Provider {provider.provider_type.value} failed: {e}")
                last_error = e

        raise RuntimeError(f"All providers failed. Last error: {last_error}")

    async def health_check_all(self) -> dict[ProviderType, bool]:
        """Check health of all registered providers."""
        results = {}
        for ptype, provider in self._providers.items():
            results[ptype] = await provider.health_check()
        return results

    async def close_all(self) -> None:
        """Close all provider connections."""
        for provider in self._providers.values():
            if hasattr(provider, "close"):
                await provider.close()


def create_default_router(settings: Settings | None = None) -> LLMRouter:
    """Create router with providers from settings."""
    from cortex.llm.claude import ClaudeProvider
    from cortex.llm.local import LocalProvider

    settings = settings or get_settings()
    router = LLMRouter()

    # Claude (primary)
    if settings.anthropic_api_key:
        try:
            router.register(
                ClaudeProvider(api_key=settings.anthropic_api_key, default_model=settings.default_model)
            )
        except Exception as e:
            logger.warning(f"Failed to init Claude: {e}")

    # Local LLM (fallback)
    if settings.local_llm_url:
        try:
            router.register(
                LocalProvider(base_url=settings.local_llm_url, default_model=settings.fallback_model)
            )
        except Exception as e:
            logger.warning(f"Failed to init local LLM: {e}")

    return router
