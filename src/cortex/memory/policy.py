"""
Trim policies for the long-term profile and working memory.

Both policies are lossy on purpose and only run when a tier is over its
budget. Each step produces a structurally valid document, so callers can
rely on the shape whatever path was taken.
"""

from dataclasses import dataclass
from enum import Enum

from cortex.core.logging import get_logger
from cortex.memory.decode import decode_object, preview
from cortex.memory.profile import LongTermProfile, minimal_profile, project_priority, validate_profile
from cortex.memory.prompts import build_condense_profile_prompt, build_condense_working_prompt
from cortex.memory.summarizer import Summarizer, SummarizerError, SummaryTask, ask
from cortex.memory.working import WorkingMemory, validate_board

logger = get_logger("memory.policy")


class TrimMethod(Enum):
    NONE = "none"  # already within budget, nothing done
    CONDENSED = "condensed"  # summarizer produced a smaller document
    PROJECTION = "projection"  # priority fields only
    MINIMAL = "minimal"  # summary plus a few skills and UI preferences
    TRUNCATED = "truncated"  # hypothesis lists capped locally


@dataclass
class TrimOutcome:
    method: TrimMethod
    tokens_before: int
    tokens_after: int

    @property
    def changed(self) -> bool:
        return self.method is not TrimMethod.NONE


@dataclass
class ProfileTrim(TrimOutcome):
    profile: LongTermProfile


@dataclass
class WorkingTrim(TrimOutcome):
    working: WorkingMemory


class ProfileTrimmer:
    """Shrinks the long-term profile under its token budget.

    condensed summary -> priority projection (bad or oversized answer)
    -> minimal profile (summarizer call failed).
    """

    def __init__(self, summarizer: Summarizer, token_budget: int):
        self.summarizer = summarizer
        self.token_budget = token_budget

    async def trim(self, profile: LongTermProfile) -> ProfileTrim:
        before = profile.estimate()
        if before <= self.token_budget:
            return ProfileTrim(TrimMethod.NONE, before, before, profile)

        logger.info(f"Long-term profile over budget ({before} > {self.token_budget}), condensing")
        prompt = build_condense_profile_prompt(profile.to_dict(), self.token_budget)

        try:
            raw = await ask(self.summarizer, prompt, SummaryTask.CONDENSE_PROFILE)
        except SummarizerError as e:
            logger.error(f"Profile condensing failed, falling back to minimal profile: {e}")
            return self._outcome(TrimMethod.MINIMAL, before, minimal_profile(profile))

        decoded = decode_object(raw)
        result = validate_profile(decoded.value) if decoded.success else decoded
        if result.success:
            condensed = result.value
            size = condensed.estimate()
            if size <= self.token_budget:
                return self._outcome(TrimMethod.CONDENSED, before, condensed)
            logger.warning(f"Condensed profile still over budget ({size}), projecting priority fields")
        else:
            logger.warning(f"Rejected condensed profile ({result.error}): {preview(raw)}")

        return self._outcome(TrimMethod.PROJECTION, before, project_priority(profile, self.token_budget))

    def _outcome(self, method: TrimMethod, before: int, profile: LongTermProfile) -> ProfileTrim:
        after = profile.estimate()
        if after > self.token_budget:
            logger.warning(
                f"Long-term profile still over budget after {method.value} ({after} > {self.token_budget})"
            )
        logger.info(f"Long-term profile trimmed by {method.value}: {before} -> {after} tokens")
        return ProfileTrim(method, before, after, profile)


class WorkingTrimmer:
    """Shrinks working memory: local truncation first, then one condensing pass."""

    def __init__(
        self,
        summarizer: Summarizer,
        token_budget: int,
        untested_cap: int = 5,
        corroborated_cap: int = 10,
    ):
        self.summarizer = summarizer
        self.token_budget = token_budget
        self.untested_cap = untested_cap
        self.corroborated_cap = corroborated_cap

    async def trim(self, working: WorkingMemory) -> WorkingTrim:
        before = working.estimate()
        if before <= self.token_budget:
            return WorkingTrim(TrimMethod.NONE, before, before, working)

        truncated = working.truncated(self.untested_cap, self.corroborated_cap)
        size = truncated.estimate()
        if size <= self.token_budget:
            logger.info(f"Working memory truncated: {before} -> {size} tokens")
            return WorkingTrim(TrimMethod.TRUNCATED, before, size, truncated)

        logger.info(f"Working memory still over budget after truncation ({size}), condensing")
        prompt = build_condense_working_prompt(truncated.to_dict(), self.token_budget)
        try:
            raw = await ask(self.summarizer, prompt, SummaryTask.CONDENSE_WORKING)
        except SummarizerError as e:
            logger.error(f"Working memory condensing failed, keeping truncated board: {e}")
            return WorkingTrim(TrimMethod.TRUNCATED, before, size, truncated)

        decoded = decode_object(raw)
        result = validate_board(decoded.value) if decoded.success else decoded
        if not result.success:
            logger.warning(f"Rejected condensed working memory ({result.error}): {preview(raw)}")
            return WorkingTrim(TrimMethod.TRUNCATED, before, size, truncated)

        condensed = result.value
        after = condensed.estimate()
        if after > self.token_budget:
            logger.warning(f"Working memory still over budget after condensing ({after} > {self.token_budget})")
        return WorkingTrim(TrimMethod.CONDENSED, before, after, condensed)
