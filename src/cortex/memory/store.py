"""JSON snapshot store for the three memory tiers."""

import json
import os
import tempfile
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any

from cortex.core.logging import get_logger
from cortex.core.types import utcnow
from cortex.core.typing import JSONDict
from cortex.memory.profile import LongTermProfile
from cortex.memory.short_term import ShortTermMemory
from cortex.memory.working import WorkingMemory

logger = get_logger("memory.store")

STM_FILE = "stm.json"
LTM_FILE = "ltm.json"
WM_FILE = "wm.json"


class PersistenceError(Exception):
    """Snapshot could not be written."""


@dataclass
class MemoryState:
    """All three tiers as one logical unit."""

    short_term: ShortTermMemory = field(default_factory=ShortTermMemory)
    long_term: LongTermProfile = field(default_factory=LongTermProfile)
    working: WorkingMemory = field(default_factory=WorkingMemory)
    last_updated: datetime | None = None

    def to_dict(self) -> JSONDict:
        return {
            "shortTermMemory": self.short_term.to_list(),
            "longTermMemory": self.long_term.to_dict(),
            "workingMemory": self.working.to_dict(),
            "lastUpdated": self.last_updated.isoformat() if self.last_updated else None,
        }


class SnapshotStore:
    """Reads and writes the memory snapshot.

    The snapshot file is the source of truth. Per-tier mirror files are
    written next to it for inspection and are only read back when no
    snapshot exists (first run after migrating from per-tier storage).
    """

    def __init__(self, directory: Path, snapshot_name: str = "memory.json", mirror_tiers: bool = True):
        self.directory = directory
        self.snapshot_path = directory / snapshot_name
        self.mirror_tiers = mirror_tiers

    def load(self) -> MemoryState:
        """Load the last snapshot. Missing files yield empty defaults."""
        if self.snapshot_path.exists():
            data = self._read_json(self.snapshot_path)
            if isinstance(data, dict):
                logger.info(f"Loaded memory snapshot: {self.snapshot_path}")
                return self._state_from_snapshot(data)
            logger.warning(f"Ignoring unreadable snapshot {self.snapshot_path}")

        state = self._load_tier_files()
        if state is None:
            logger.info("No memory snapshot found, starting fresh")
            return MemoryState()
        logger.info(f"Migrated memory from per-tier files in {self.directory}")
        return state

    def save(self, state: MemoryState) -> None:
        """Write the snapshot atomically, then the mirrors.

        Raises PersistenceError if the snapshot could not be written.
        Mirror failures are logged only.
        """
        state.last_updated = utcnow()
        snapshot = state.to_dict()

        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            self._write_json(self.snapshot_path, snapshot)
        except (OSError, TypeError, ValueError) as e:
            raise PersistenceError(f"Failed to write {self.snapshot_path}: {e}") from e

        if not self.mirror_tiers:
            return
        mirrors = {
            STM_FILE: snapshot["shortTermMemory"],
            LTM_FILE: snapshot["longTermMemory"],
            WM_FILE: snapshot["workingMemory"],
        }
        for name, payload in mirrors.items():
            try:
                self._write_json(self.directory / name, payload)
            except OSError as e:
                logger.warning(f"Failed to write mirror {name}: {e}")

    def _state_from_snapshot(self, data: JSONDict) -> MemoryState:
        state = MemoryState()
        self._restore_tier(state, "short_term", data.get("shortTermMemory"))
        self._restore_tier(state, "long_term", data.get("longTermMemory"))
        self._restore_tier(state, "working", data.get("workingMemory"))
        if data.get("lastUpdated"):
            try:
                state.last_updated = datetime.fromisoformat(data["lastUpdated"])
            except ValueError:
                logger.warning(f"Bad lastUpdated value: {data['lastUpdated']!r}")
        return state

    def _load_tier_files(self) -> MemoryState | None:
        found = False
        state = MemoryState()
        for name, attr in ((STM_FILE, "short_term"), (LTM_FILE, "long_term"), (WM_FILE, "working")):
            path = self.directory / name
            if not path.exists():
                continue
            found = True
            self._restore_tier(state, attr, self._read_json(path))
        return state if found else None

    def _restore_tier(self, state: MemoryState, attr: str, data: Any) -> None:
        """Replace one tier of ``state`` from raw JSON, keeping the default on bad data."""
        if data is None:
            return
        try:
            if attr == "short_term":
                setattr(state, attr, ShortTermMemory.from_list(data))
            elif attr == "long_term":
                setattr(state, attr, LongTermProfile.from_dict(data))
            else:
                setattr(state, attr, WorkingMemory.from_dict(data))
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            logger.error(f"Stored {attr} memory is malformed, using empty default: {e}")

    @staticmethod
    def _read_json(path: Path) -> Any:
        try:
            return json.loads(path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            logger.error(f"Failed to read {path}: {e}")
            return None

    @staticmethod
    def _write_json(path: Path, payload: Any) -> None:
        """Write via a temp file and rename so readers never see a partial file."""
        fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(payload, fh, indent=2, ensure_ascii=False)
            os.replace(tmp_name, path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
