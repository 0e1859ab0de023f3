"""Tests for the command-line entry point."""

import json
import sys
from unittest.mock import AsyncMock

import pytest

from cortex import cli
from cortex.llm.base import LLMResponse, ProviderType
from cortex.llm.router import LLMRouter
from cortex.memory.working import WorkingMemory


@pytest.fixture
def data_dir(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("CORTEX_DATA_DIR", str(tmp_path / "data"))
    monkeypatch.delenv("CORTEX_ANTHROPIC_API_KEY", raising=False)
    monkeypatch.delenv("CORTEX_LOCAL_LLM_URL", raising=False)
    return tmp_path / "data"


def run(monkeypatch, *args: str) -> int:
    monkeypatch.setattr(sys, "argv", ["cortex", *args])
    return cli.main()


def scripted_router(monkeypatch, content: str) -> AsyncMock:
    provider = AsyncMock()
    provider.provider_type = ProviderType.LOCAL
    provider.complete.return_value = LLMResponse(content=content, model="m", provider=ProviderType.LOCAL)
    router = LLMRouter()
    router.register(provider)
    monkeypatch.setattr("cortex.llm.router.create_default_router", lambda settings=None: router)
    return provider


def test_no_command_prints_usage(data_dir, monkeypatch, capsys):
    assert run(monkeypatch) == 1
    assert "Usage" in capsys.readouterr().out


def test_unknown_command(data_dir, monkeypatch):
    assert run(monkeypatch, "frobnicate") == 1


def test_init_creates_snapshot(data_dir, monkeypatch, capsys):
    assert run(monkeypatch, "init") == 0
    snapshot = data_dir / "memory" / "memory.json"
    assert snapshot.exists()
    assert "Created" in capsys.readouterr().out

    assert run(monkeypatch, "init") == 0
    assert "Already initialized" in capsys.readouterr().out


def test_state_prints_json(data_dir, monkeypatch, capsys):
    run(monkeypatch, "init")
    capsys.readouterr()

    assert run(monkeypatch, "state") == 0
    state = json.loads(capsys.readouterr().out)
    assert state["shortTermMemory"] == []
    assert set(state["workingMemory"]) == {
        "untested_hypotheses",
        "corroborated_hypotheses",
        "established_facts",
    }


def test_ingest_without_providers_fails(data_dir, monkeypatch, tmp_path, capsys):
    analysis = tmp_path / "a.json"
    analysis.write_text(json.dumps({"summary": "s"}), encoding="utf-8")
    assert run(monkeypatch, "ingest", str(analysis)) == 1
    assert "No LLM providers" in capsys.readouterr().out


def test_ingest_files(data_dir, monkeypatch, tmp_path, capsys):
    board = WorkingMemory(untested_hypotheses=["Edits spreadsheets [1 recording]"])
    scripted_router(monkeypatch, json.dumps(board.to_dict()))
    good = tmp_path / "rec1.json"
    good.write_text(json.dumps({"summary": "Editing a spreadsheet"}), encoding="utf-8")
    bad = tmp_path / "broken.json"
    bad.write_text("{oops", encoding="utf-8")

    assert run(monkeypatch, "ingest", str(good), str(bad)) == 1

    out = capsys.readouterr().out
    assert "rec1.json: +1 observations" in out
    snapshot = json.loads((data_dir / "memory" / "memory.json").read_text(encoding="utf-8"))
    assert len(snapshot["shortTermMemory"]) == 1
    assert snapshot["workingMemory"] == board.to_dict()


def test_query_prints_answer(data_dir, monkeypatch, capsys):
    provider = scripted_router(monkeypatch, "They like spreadsheets.")

    assert run(monkeypatch, "query", "What", "do", "they", "like?") == 0

    assert capsys.readouterr().out.strip() == "They like spreadsheets."
    prompt = provider.complete.await_args.args[0][0]["content"]
    assert "What do they like?" in prompt


def test_init_reports_unwritable_memory_dir(data_dir, monkeypatch, capsys):
    data_dir.mkdir()
    (data_dir / "memory").write_text("a file where the memory directory should be", encoding="utf-8")

    assert run(monkeypatch, "init") == 1
    assert capsys.readouterr().out.startswith("Error:")
