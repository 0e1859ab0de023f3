"""Tests for the JSON snapshot store."""

import json
from datetime import datetime, timezone
from pathlib import Path

import pytest

from cortex.core.types import Observation, ObservationKind
from cortex.memory.profile import LongTermProfile
from cortex.memory.short_term import ShortTermMemory
from cortex.memory.store import MemoryState, PersistenceError, SnapshotStore
from cortex.memory.working import WorkingMemory


@pytest.fixture
def store(tmp_path: Path) -> SnapshotStore:
    return SnapshotStore(tmp_path / "memory")


def make_state() -> MemoryState:
    profile = LongTermProfile(profile_summary="Writes Python tooling")
    profile.sections["skills_and_knowledge"]["confirmed_skills"] = ["Python", "git"]
    return MemoryState(
        short_term=ShortTermMemory(
            [
                Observation(
                    datetime(2026, 4, 1, 8, 30, tzinfo=timezone.utc),
                    ObservationKind.VIDEO_ANALYSIS_SUMMARY,
                    {"summary": "Refactoring a CLI"},
                )
            ]
        ),
        long_term=profile,
        working=WorkingMemory(established_facts=["Uses a tiling window manager [5 recordings]"]),
    )


def test_load_missing_returns_defaults(store: SnapshotStore):
    state = store.load()
    assert len(state.short_term) == 0
    assert state.long_term == LongTermProfile()
    assert state.working == WorkingMemory()
    assert state.last_updated is None


def test_save_and_load_round_trip(store: SnapshotStore):
    state = make_state()
    store.save(state)

    loaded = store.load()
    assert loaded.short_term.entries == state.short_term.entries
    assert loaded.long_term == state.long_term
    assert loaded.working == state.working
    assert loaded.last_updated is not None


def test_snapshot_layout(store: SnapshotStore):
    store.save(make_state())
    data = json.loads(store.snapshot_path.read_text(encoding="utf-8"))
    assert set(data) == {"shortTermMemory", "longTermMemory", "workingMemory", "lastUpdated"}
    assert data["shortTermMemory"][0]["kind"] == "video_analysis_summary"
    assert len(data["longTermMemory"]) == 7
    assert len(data["workingMemory"]) == 3


def test_save_writes_tier_mirrors(store: SnapshotStore):
    store.save(make_state())
    for name in ("stm.json", "ltm.json", "wm.json"):
        assert (store.directory / name).exists()
    ltm = json.loads((store.directory / "ltm.json").read_text(encoding="utf-8"))
    assert ltm["profile_summary"] == "Writes Python tooling"


def test_mirrors_can_be_disabled(tmp_path: Path):
    store = SnapshotStore(tmp_path, mirror_tiers=False)
    store.save(make_state())
    assert store.snapshot_path.exists()
    assert not (tmp_path / "wm.json").exists()


def test_save_leaves_no_temp_files(store: SnapshotStore):
    store.save(make_state())
    store.save(make_state())
    assert not [p for p in store.directory.iterdir() if p.name.endswith(".tmp")]


def test_migrates_legacy_tier_files(store: SnapshotStore):
    store.directory.mkdir(parents=True)
    (store.directory / "ltm.json").write_text(json.dumps({"summary": "Old summary"}), encoding="utf-8")
    (store.directory / "wm.json").write_text(
        json.dumps({"untested": ["u"], "tested": ["t"], "solid": ["s"]}), encoding="utf-8"
    )

    state = store.load()
    assert state.long_term.profile_summary == "Old summary"
    assert state.working.corroborated_hypotheses == ["t"]
    assert state.working.established_facts == ["s"]
    assert len(state.short_term) == 0


def test_snapshot_wins_over_tier_files(store: SnapshotStore):
    store.save(make_state())
    (store.directory / "ltm.json").write_text(json.dumps({"summary": "stale"}), encoding="utf-8")
    assert store.load().long_term.profile_summary == "Writes Python tooling"


def test_malformed_tier_falls_back_to_default(store: SnapshotStore):
    store.directory.mkdir(parents=True)
    store.snapshot_path.write_text(
        json.dumps(
            {
                "shortTermMemory": [],
                "longTermMemory": {"profile_summary": 12},
                "workingMemory": {"untested_hypotheses": ["kept"]},
            }
        ),
        encoding="utf-8",
    )
    state = store.load()
    assert state.long_term == LongTermProfile()
    assert state.working.untested_hypotheses == ["kept"]


def test_corrupt_snapshot_is_not_fatal(store: SnapshotStore):
    store.directory.mkdir(parents=True)
    store.snapshot_path.write_text("{not json", encoding="utf-8")
    state = store.load()
    assert len(state.short_term) == 0


def test_save_failure_raises_persistence_error(tmp_path: Path):
    blocker = tmp_path / "blocker"
    blocker.write_text("a file where the directory should be", encoding="utf-8")
    store = SnapshotStore(blocker / "memory")
    with pytest.raises(PersistenceError):
        store.save(make_state())


def test_unknown_observation_kind_survives_round_trip(store: SnapshotStore):
    store.directory.mkdir(parents=True)
    entries = [
        {"timestamp": "2026-04-01T08:00:00+00:00", "kind": "video_analysis_summary", "payload": {"summary": "a"}},
        {"timestamp": "2026-04-01T08:05:00+00:00", "kind": "transcript", "payload": "spoken words"},
    ]
    store.snapshot_path.write_text(json.dumps({"shortTermMemory": entries}), encoding="utf-8")

    state = store.load()
    assert len(state.short_term) == 2
    assert state.short_term.entries[1].kind == "transcript"

    store.save(state)
    data = json.loads(store.snapshot_path.read_text(encoding="utf-8"))
    assert data["shortTermMemory"] == entries


def test_unreadable_entry_skipped_alone(store: SnapshotStore):
    store.directory.mkdir(parents=True)
    entries = [
        {"timestamp": "2026-04-01T08:00:00+00:00", "kind": "explicit_statement", "payload": "kept"},
        {"kind": "explicit_statement", "payload": "no timestamp"},
        {"timestamp": "2026-04-01T08:10:00+00:00", "payload": "no kind"},
        {"timestamp": "2026-04-01T08:15:00+00:00", "kind": "inferred_insight", "payload": "also kept"},
    ]
    store.snapshot_path.write_text(json.dumps({"shortTermMemory": entries}), encoding="utf-8")

    state = store.load()
    assert [entry.payload for entry in state.short_term] == ["kept", "also kept"]
