"""
Memory manager - the single entry point for the tiered memory model.

Pipeline per analysis result:
1. Decompose into observations and append them to short-term memory
2. Fold the oldest observations into the long-term profile when short-term
   memory is over budget (then trim the profile if needed)
3. Re-derive working memory from recent observations and the profile
   (then trim it if needed)
4. Persist the snapshot

Summarizer calls are the only suspension points. Any failure keeps the
last good state of the affected tier.
"""

import asyncio
import copy
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from cortex.core.logging import get_logger
from cortex.core.types import Observation, ObservationKind, utcnow
from cortex.core.typing import JSONDict
from cortex.memory.config import MemoryConfig
from cortex.memory.decode import decode_object, preview
from cortex.memory.policy import ProfileTrimmer, WorkingTrimmer
from cortex.memory.profile import LongTermProfile, validate_profile
from cortex.memory.prompts import build_derive_working_prompt, build_merge_prompt, build_query_prompt
from cortex.memory.short_term import ShortTermMemory
from cortex.memory.store import MemoryState, PersistenceError, SnapshotStore
from cortex.memory.summarizer import Summarizer, SummarizerError, SummaryTask, ask
from cortex.memory.working import WorkingMemory, validate_board

logger = get_logger("memory.manager")

SUMMARY_FIELDS = ("summary", "relevantContextSummary", "relevant_context_summary")
SOURCE_FIELDS = ("video_file", "videoFileName", "filename")

# Result array -> observation kind, in append order
ITEM_FIELDS: tuple[tuple[str, ObservationKind], ...] = (
    ("explicit_directives", ObservationKind.EXPLICIT_DIRECTIVE),
    ("explicit_statements", ObservationKind.EXPLICIT_STATEMENT),
    ("inferred_insights", ObservationKind.INFERRED_INSIGHT),
)


@dataclass
class IngestReport:
    """What one ingest call did."""

    observations_added: int = 0
    consolidated: int = 0  # observations folded into the profile
    profile_trimmed: bool = False
    working_updated: bool = False
    working_trimmed: bool = False


class MemoryManager:
    """Owns the three memory tiers and every mutation of them.

    Construct one per process and share it. ``ingest`` calls are serialized
    internally; ``get_state``, ``describe`` and ``query`` never mutate.
    """

    def __init__(
        self,
        store: SnapshotStore,
        summarizer: Summarizer,
        config: MemoryConfig | None = None,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.store = store
        self.summarizer = summarizer
        self.config = config or MemoryConfig()
        self._clock = clock
        self._state = MemoryState()
        self._lock = asyncio.Lock()
        self._profile_trimmer = ProfileTrimmer(summarizer, self.config.ltm_token_budget)
        self._working_trimmer = WorkingTrimmer(
            summarizer,
            self.config.wm_token_budget,
            untested_cap=self.config.wm_untested_cap,
            corroborated_cap=self.config.wm_corroborated_cap,
        )

    @property
    def short_term(self) -> ShortTermMemory:
        return self._state.short_term

    @property
    def long_term(self) -> LongTermProfile:
        return self._state.long_term

    @property
    def working(self) -> WorkingMemory:
        return self._state.working

    async def initialize(self, refresh_working: bool | None = None) -> None:
        """Load persisted tiers.

        Args:
            refresh_working: Re-derive working memory once after loading.
                Defaults to ``config.refresh_working_on_start``. Skipped
                when short-term memory is empty.
        """
        if refresh_working is None:
            refresh_working = self.config.refresh_working_on_start

        async with self._lock:
            self._state = self.store.load()
            logger.info(
                f"Memory loaded: {len(self.short_term)} observations, "
                f"profile ~{self.long_term.estimate()} tokens, "
                f"working ~{self.working.estimate()} tokens"
            )
            if refresh_working and self.short_term:
                await self._refresh_working(IngestReport())
                self._persist()

    # Public API

    async def ingest(self, analysis: JSONDict) -> IngestReport:
        """Fold one analysis result into memory.

        Not idempotent: ingesting the same result twice appends twice.
        """
        async with self._lock:
            report = IngestReport()

            observations = self._decompose(analysis)
            self.short_term.extend(observations)
            report.observations_added = len(observations)
            logger.info(f"Added {len(observations)} observations to short-term memory")
            self._persist()

            stm_tokens = self.short_term.estimate()
            logger.debug(f"Short-term memory: {len(self.short_term)} entries, ~{stm_tokens} tokens")
            if stm_tokens > self.config.stm_token_budget:
                logger.info(
                    f"Short-term memory over budget ({stm_tokens} > {self.config.stm_token_budget}), "
                    "consolidating oldest observations"
                )
                await self._consolidate(report)

            if self.short_term:
                await self._refresh_working(report)
            else:
                logger.debug("Short-term memory empty, skipping working memory refresh")

            self._persist()
            return report

    def get_state(self) -> JSONDict:
        """Read-only copy of all tiers."""
        return {
            "shortTermMemory": self.short_term.to_list(),
            "longTermMemory": self.long_term.to_dict(),
            "workingMemory": self.working.to_dict(),
        }

    def describe(self) -> str:
        """Short digest of memory contents for chat context."""
        working = self.working
        return (
            f"Working Memory: {len(working.established_facts)} established facts, "
            f"{len(working.corroborated_hypotheses)} corroborated and "
            f"{len(working.untested_hypotheses)} untested hypotheses\n"
            f"Short-Term Memory: {len(self.short_term)} recent items\n"
            f"Long-Term Memory: "
            + ("empty" if self.long_term.is_empty() else f"profile of ~{self.long_term.estimate()} tokens")
        )

    async def query(self, question: str) -> str:
        """Answer a question with every tier in full as context. Never mutates any tier.

        Raises SummarizerError if the summarizer fails.
        """
        prompt = build_query_prompt(
            question,
            profile=self.long_term.to_dict(),
            working=self.working.to_dict(),
            observations=self.short_term.entries,
        )
        answer = await ask(self.summarizer, prompt, SummaryTask.QUERY)
        return answer.strip()

    # Decomposition

    def _decompose(self, analysis: JSONDict) -> list[Observation]:
        """Turn an analysis result into observations: summary, directives, statements, insights."""
        now = self._clock()

        summary = ""
        for key in SUMMARY_FIELDS:
            value = analysis.get(key)
            if isinstance(value, str) and value.strip():
                summary = value
                break
        payload: dict[str, Any] = {"summary": summary}
        for key in SOURCE_FIELDS:
            if analysis.get(key):
                payload["source"] = analysis[key]
                break

        observations = [Observation(now, ObservationKind.VIDEO_ANALYSIS_SUMMARY, payload)]
        for key, kind in ITEM_FIELDS:
            items = analysis.get(key) or []
            if not isinstance(items, list):
                logger.warning(f"Ignoring {key}: expected a list, got {type(items).__name__}")
                continue
            observations.extend(Observation(now, kind, copy.deepcopy(item)) for item in items)
        return observations

    # Short-term -> long-term

    async def _consolidate(self, report: IngestReport) -> None:
        self.short_term.sort_by_time()
        batch = self.short_term.oldest_slice(self.config.consolidation_slice_tokens)
        if not batch:
            logger.warning(
                "No observations fit the consolidation slice "
                f"({self.config.consolidation_slice_tokens} tokens), skipping consolidation"
            )
            return

        logger.info(f"Consolidating {len(batch)} observations into long-term profile")
        prompt = build_merge_prompt(self.long_term.to_dict(), batch)
        try:
            raw = await ask(self.summarizer, prompt, SummaryTask.MERGE_PROFILE)
        except SummarizerError as e:
            logger.error(f"Consolidation failed, short-term memory kept: {e}")
            return

        decoded = decode_object(raw)
        result = validate_profile(decoded.value) if decoded.success else decoded
        if not result.success:
            logger.error(f"Rejected merged profile ({result.error}), short-term memory kept: {preview(raw)}")
            return

        self._state.long_term = result.value
        trim = await self._profile_trimmer.trim(self.long_term)
        if trim.changed:
            self._state.long_term = trim.profile
            report.profile_trimmed = True
        self._persist()

        self.short_term.drop_front(batch)
        report.consolidated = len(batch)
        self._persist()
        logger.info(
            f"Consolidated {len(batch)} observations; short-term memory now "
            f"{len(self.short_term)} entries, ~{self.short_term.estimate()} tokens"
        )

    # Working memory

    async def _refresh_working(self, report: IngestReport) -> None:
        recent = self.short_term.recent(self.config.wm_recent_window)
        prompt = build_derive_working_prompt(self.working.to_dict(), recent, self.long_term.to_dict())
        try:
            raw = await ask(self.summarizer, prompt, SummaryTask.DERIVE_WORKING)
        except SummarizerError as e:
            logger.error(f"Working memory update failed, keeping previous board: {e}")
            return

        decoded = decode_object(raw)
        result = validate_board(decoded.value) if decoded.success else decoded
        if not result.success:
            logger.error(f"Rejected working memory ({result.error}), keeping previous board: {preview(raw)}")
            return

        self._state.working = result.value
        report.working_updated = True
        self._persist()

        trim = await self._working_trimmer.trim(self.working)
        if trim.changed:
            self._state.working = trim.working
            report.working_trimmed = True
            self._persist()

    # Persistence

    def _persist(self) -> None:
        try:
            self.store.save(self._state)
        except PersistenceError as e:
            logger.error(f"Memory snapshot not saved, continuing with in-memory state: {e}")
