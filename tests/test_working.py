"""Tests for working memory."""

import pytest

from cortex.memory.working import BOARD_KEYS, WorkingMemory, validate_board


def test_default_board_has_three_empty_lists():
    assert WorkingMemory().to_dict() == {
        "untested_hypotheses": [],
        "corroborated_hypotheses": [],
        "established_facts": [],
    }


def test_round_trip():
    board = WorkingMemory(
        untested_hypotheses=["Learning Rust [one recording]"],
        corroborated_hypotheses=["Prefers dark mode [3 recordings]"],
        established_facts=["Uses VS Code daily [12 recordings]"],
    )
    assert WorkingMemory.from_dict(board.to_dict()) == board


def test_from_dict_migrates_legacy_keys():
    board = WorkingMemory.from_dict({"untested": ["a"], "tested": ["b"], "solid": ["c"]})
    assert board.untested_hypotheses == ["a"]
    assert board.corroborated_hypotheses == ["b"]
    assert board.established_facts == ["c"]


def test_from_dict_fills_missing_lists():
    board = WorkingMemory.from_dict({"established_facts": ["x"]})
    assert board.untested_hypotheses == []
    assert board.established_facts == ["x"]


def test_validate_accepts_exact_shape():
    result = validate_board({key: ["s"] for key in BOARD_KEYS})
    assert result.success
    assert result.value.established_facts == ["s"]


@pytest.mark.parametrize(
    "payload",
    [
        None,
        ["a list"],
        {"untested_hypotheses": "not an array", "corroborated_hypotheses": [], "established_facts": []},
        {"untested_hypotheses": [], "corroborated_hypotheses": [1], "established_facts": []},
        {"untested_hypotheses": [], "corroborated_hypotheses": []},
        {"untested_hypotheses": [], "corroborated_hypotheses": [], "established_facts": [], "notes": []},
    ],
)
def test_validate_rejects_other_shapes(payload):
    result = validate_board(payload)
    assert not result.success
    assert result.error


def test_truncated_caps_hypotheses_and_keeps_facts():
    board = WorkingMemory(
        untested_hypotheses=[f"u{i}" for i in range(8)],
        corroborated_hypotheses=[f"c{i}" for i in range(15)],
        established_facts=[f"f{i}" for i in range(30)],
    )
    truncated = board.truncated(untested_cap=5, corroborated_cap=10)
    assert truncated.untested_hypotheses == [f"u{i}" for i in range(5)]
    assert truncated.corroborated_hypotheses == [f"c{i}" for i in range(10)]
    assert len(truncated.established_facts) == 30
    assert len(board.untested_hypotheses) == 8
