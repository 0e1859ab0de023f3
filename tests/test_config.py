"""Tests for configuration module."""

from pathlib import Path

from cortex.core.config import Settings
from cortex.memory.config import MemoryConfig


def test_default_settings():
    """Settings load with defaults."""
    settings = Settings(
        _env_file=None,  # Don't load .env in tests
    )
    assert settings.data_dir == Path("data")
    assert settings.stm_token_budget == 8000
    assert settings.consolidation_slice_tokens == 3000
    assert settings.ltm_token_budget == 8000
    assert settings.wm_recent_window == 20


def test_snapshot_path():
    """Snapshot path combines data_dir, memory dir and file name."""
    settings = Settings(
        data_dir=Path("/tmp/test"),
        memory_dir_name="mem",
        snapshot_name="snap.json",
        _env_file=None,
    )
    assert settings.memory_dir == Path("/tmp/test/mem")
    assert settings.snapshot_path == Path("/tmp/test/mem/snap.json")


def test_env_prefix(monkeypatch):
    """CORTEX_ environment variables override defaults."""
    monkeypatch.setenv("CORTEX_STM_TOKEN_BUDGET", "1234")
    monkeypatch.setenv("CORTEX_MIRROR_TIER_FILES", "false")
    settings = Settings(_env_file=None)
    assert settings.stm_token_budget == 1234
    assert settings.mirror_tier_files is False


def test_memory_config_from_settings():
    """MemoryConfig mirrors the memory limits from settings."""
    settings = Settings(
        stm_token_budget=100,
        consolidation_slice_tokens=40,
        ltm_token_budget=200,
        wm_token_budget=50,
        wm_untested_cap=2,
        _env_file=None,
    )
    config = MemoryConfig.from_settings(settings)
    assert config.stm_token_budget == 100
    assert config.consolidation_slice_tokens == 40
    assert config.ltm_token_budget == 200
    assert config.wm_token_budget == 50
    assert config.wm_untested_cap == 2
    assert config.wm_corroborated_cap == 10


def test_memory_config_defaults():
    config = MemoryConfig()
    assert config.stm_token_budget == 8000
    assert config.consolidation_slice_tokens == 3000
    assert config.ltm_token_budget == 8000
    assert config.refresh_working_on_start is False
