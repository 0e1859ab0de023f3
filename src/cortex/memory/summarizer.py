"""
Annotation summarizer capability.

The memory engine only needs ``summarize(prompt, task) -> str``. Any object
with that coroutine works; LLMSummarizer adapts an LLM provider or router.
Retries and timeouts belong to the provider, not to the engine.
"""

from enum import Enum
from typing import Protocol, runtime_checkable

from cortex.core.logging import get_logger
from cortex.llm.base import LLMConfig, LLMProvider

logger = get_logger("memory.summarizer")


class SummaryTask(Enum):
    """What a summarizer call is for."""

    MERGE_PROFILE = "merge_profile"
    CONDENSE_PROFILE = "condense_profile"
    DERIVE_WORKING = "derive_working"
    CONDENSE_WORKING = "condense_working"
    QUERY = "query"


class SummarizerError(Exception):
    """A summarizer call failed (network, service or provider error)."""


@runtime_checkable
class Summarizer(Protocol):
    """Anything that turns a prompt into a text answer."""

    async def summarize(self, prompt: str, task: SummaryTask) -> str:
        ...


async def ask(summarizer: Summarizer, prompt: str, task: SummaryTask) -> str:
    """Single summarizer attempt. Any failure surfaces as SummarizerError."""
    try:
        response = await summarizer.summarize(prompt, task)
    except SummarizerError:
        raise
    except Exception as e:
        raise SummarizerError(f"{task.value} call failed: {e}") from e
    if not isinstance(response, str):
        raise SummarizerError(f"{task.value} returned {type(response).__name__}, expected text")
    return response


# (max_tokens, temperature) per task. Structured tasks run cool.
TASK_LIMITS: dict[SummaryTask, tuple[int, float]] = {
    SummaryTask.MERGE_PROFILE: (4096, 0.3),
    SummaryTask.CONDENSE_PROFILE: (4096, 0.2),
    SummaryTask.DERIVE_WORKING: (2048, 0.3),
    SummaryTask.CONDENSE_WORKING: (2048, 0.2),
    SummaryTask.QUERY: (1024, 0.7),
}

SYSTEM_PROMPT = (
    "You are the memory component of a personal assistant that learns about its user "
    "from screen recordings. Follow the output format exactly."
)


class LLMSummarizer:
    """Summarizer backed by an LLM provider (or an LLMRouter)."""

    def __init__(self, llm: LLMProvider, model: str | None = None):
        self.llm = llm
        self.model = model

    async def summarize(self, prompt: str, task: SummaryTask) -> str:
        max_tokens, temperature = TASK_LIMITS[task]
        config = LLMConfig(
            model=self.model,
            max_tokens=max_tokens,
            temperature=temperature,
            system_prompt=SYSTEM_PROMPT,
        )
        messages = [{"role": "user", "content": prompt}]

        try:
            response = await self.llm.complete(messages, config)
        except Exception as e:
            raise SummarizerError(f"{task.value} call failed: {e}") from e

        logger.debug(f"Summarizer {task.value}: {len(response.content)} chars from {response.model}")
        return response.content
