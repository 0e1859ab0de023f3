"""
Configuration management.

Loads settings from environment variables and .env file.
Prefix: CORTEX_
"""

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="CORTEX_",
        env_file=".env",
        env_file_encoding="utf-8",
    )

    # LLM Providers
    anthropic_api_key: str = Field(default="", description="Claude API key")
    local_llm_url: str = Field(
        default="",
        description="Local LLM endpoint (OpenAI-compatible), empty to disable",
    )

    # Model defaults
    default_model: str = Field(default="claude-sonnet-4-20250514", description="Default model")
    fallback_model: str = Field(default="local", description="Model name sent to the local endpoint")

    # Storage
    data_dir: Path = Field(default=Path("data"), description="Data storage directory")
    memory_dir_name: str = Field(default="memory", description="Memory subdirectory name")
    snapshot_name: str = Field(default="memory.json", description="Snapshot file name")
    mirror_tier_files: bool = Field(
        default=True,
        description="Also write stm.json / ltm.json / wm.json next to the snapshot",
    )

    # Memory budgets (estimated tokens)
    stm_token_budget: int = Field(default=8000, description="Short-term memory budget")
    consolidation_slice_tokens: int = Field(
        default=3000, description="Tokens of old observations folded per consolidation"
    )
    ltm_token_budget: int = Field(default=8000, description="Long-term profile budget")
    wm_token_budget: int = Field(default=4000, description="Working memory budget")

    # Working memory
    wm_recent_window: int = Field(default=20, description="Recent observations shown to WM derivation")
    wm_untested_cap: int = Field(default=5, description="Untested hypotheses kept by local trim")
    wm_corroborated_cap: int = Field(default=10, description="Corroborated hypotheses kept by local trim")
    refresh_working_on_start: bool = Field(
        default=False, description="Re-derive working memory once after loading"
    )

    @property
    def memory_dir(self) -> Path:
        return self.data_dir / self.memory_dir_name

    @property
    def snapshot_path(self) -> Path:
        return self.memory_dir / self.snapshot_name


def get_settings() -> Settings:
    """Get settings instance."""
    return Settings()
