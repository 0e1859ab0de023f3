"""
CLI entry point.

Commands:
- init: Initialize data directory and an empty memory snapshot
- ingest <analysis.json>...: Feed analysis results into memory, in order
- state: Print the current memory snapshot as JSON
- query <question>: Ask a question against memory
- health: Check LLM provider connectivity

Flags:
- --debug: Enable debug logging
"""

import asyncio
import json
import logging
import sys
from pathlib import Path

from cortex.core.config import Settings, get_settings
from cortex.core.logging import get_logger, setup_logging
from cortex.memory import (
    LLMSummarizer,
    MemoryConfig,
    MemoryManager,
    PersistenceError,
    SnapshotStore,
    SummarizerError,
)

USAGE = """Usage: cortex [--debug] <command> [args]
Commands: init, ingest <analysis.json>..., state, query <question>, health
Flags: --debug (enable debug logging to data/cortex.log)"""


def main() -> int:
    """Main entry point."""
    settings = get_settings()

    debug_mode = "--debug" in sys.argv
    if debug_mode:
        sys.argv.remove("--debug")

    log_level = logging.DEBUG if debug_mode else logging.INFO
    log_file = settings.data_dir / "cortex.log"
    setup_logging(level=log_level, log_file=log_file)
    logger = get_logger("cli")

    if len(sys.argv) < 2:
        print(USAGE)
        return 1

    command, args = sys.argv[1], sys.argv[2:]

    if command == "init":
        store = _create_store(settings)
        if store.snapshot_path.exists():
            print(f"Already initialized: {store.snapshot_path}")
            return 0
        try:
            store.save(store.load())
        except PersistenceError as e:
            print(f"Error: {e}")
            return 1
        logger.info(f"Initialized memory snapshot: {store.snapshot_path}")
        print(f"Created: {store.snapshot_path}")
        return 0

    if command == "state":
        state = _create_store(settings).load()
        print(json.dumps(state.to_dict(), indent=2, ensure_ascii=False))
        return 0

    if command == "ingest":
        if not args:
            print("Usage: cortex ingest <analysis.json>...")
            return 1
        return asyncio.run(_ingest(settings, [Path(a) for a in args]))

    if command == "query":
        if not args:
            print("Usage: cortex query <question>")
            return 1
        return asyncio.run(_query(settings, " ".join(args)))

    if command == "health":
        return asyncio.run(_health_check(settings))

    print(f"Unknown command: {command}")
    return 1


def _create_store(settings: Settings) -> SnapshotStore:
    return SnapshotStore(
        settings.memory_dir,
        snapshot_name=settings.snapshot_name,
        mirror_tiers=settings.mirror_tier_files,
    )


async def _ingest(settings: Settings, paths: list[Path]) -> int:
    """Ingest analysis result files in the given order."""
    from cortex.llm.router import create_default_router

    logger = get_logger("cli.ingest")
    router = create_default_router(settings)
    if not router.available_providers:
        print("Error: No LLM providers available. Set CORTEX_ANTHROPIC_API_KEY or CORTEX_LOCAL_LLM_URL.")
        return 1

    manager = MemoryManager(
        _create_store(settings),
        LLMSummarizer(router),
        MemoryConfig.from_settings(settings),
    )

    failures = 0
    try:
        await manager.initialize()
        for path in paths:
            try:
                analysis = json.loads(path.read_text(encoding="utf-8"))
            except (OSError, json.JSONDecodeError) as e:
                logger.error(f"Skipping {path}: {e}")
                failures += 1
                continue
            if not isinstance(analysis, dict):
                logger.error(f"Skipping {path}: analysis result must be a JSON object")
                failures += 1
                continue

            report = await manager.ingest(analysis)
            print(
                f"{path.name}: +{report.observations_added} observations"
                + (f", consolidated {report.consolidated}" if report.consolidated else "")
                + (", working memory updated" if report.working_updated else "")
            )
        print(manager.describe())
    finally:
        await router.close_all()

    return 1 if failures else 0


async def _query(settings: Settings, question: str) -> int:
    """Answer a question from stored memory."""
    from cortex.llm.router import create_default_router

    router = create_default_router(settings)
    if not router.available_providers:
        print("Error: No LLM providers available.")
        return 1

    manager = MemoryManager(
        _create_store(settings),
        LLMSummarizer(router),
        MemoryConfig.from_settings(settings),
    )
    try:
        await manager.initialize(refresh_working=False)
        print(await manager.query(question))
    except SummarizerError as e:
        print(f"Error: {e}")
        return 1
    finally:
        await router.close_all()
    return 0


async def _health_check(settings: Settings) -> int:
    """Check LLM provider health."""
    from cortex.llm.router import create_default_router

    print("Checking LLM providers...")
    router = create_default_router(settings)

    if not router.available_providers:
        print("No providers configured.")
        return 1
    try:
        results = await router.health_check_all()
    finally:
        await router.close_all()
    for provider, ok in results.items():
        print(f"  {provider.value}: {'OK' if ok else 'UNAVAILABLE'}")
    return 0 if any(results.values()) else 1


if __name__ == "__main__":
    sys.exit(main())
