"""
Memory budgets and limits.
"""

from dataclasses import dataclass

from cortex.core.config import Settings


@dataclass
class MemoryConfig:
    """Token budgets and list caps for the three memory tiers."""

    # Short-term memory
    stm_token_budget: int = 8000
    consolidation_slice_tokens: int = 3000

    # Long-term profile
    ltm_token_budget: int = 8000

    # Working memory
    wm_token_budget: int = 4000
    wm_recent_window: int = 20
    wm_untested_cap: int = 5
    wm_corroborated_cap: int = 10
    refresh_working_on_start: bool = False

    @classmethod
    def from_settings(cls, settings: Settings) -> "MemoryConfig":
        """Build from application settings."""
        return cls(
            stm_token_budget=settings.stm_token_budget,
            consolidation_slice_tokens=settings.consolidation_slice_tokens,
            ltm_token_budget=settings.ltm_token_budget,
            wm_token_budget=settings.wm_token_budget,
            wm_recent_window=settings.wm_recent_window,
            wm_untested_cap=settings.wm_untested_cap,
            wm_corroborated_cap=settings.wm_corroborated_cap,
            refresh_working_on_start=settings.refresh_working_on_start,
        )
