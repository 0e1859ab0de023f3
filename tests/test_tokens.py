"""Tests for the token estimator."""

from datetime import datetime, timezone

from cortex.core.types import Observation, ObservationKind
from cortex.memory.tokens import estimate_many, estimate_tokens


def test_estimate_none_and_empty():
    assert estimate_tokens(None) == 0
    assert estimate_tokens("") == 0
    assert estimate_tokens("   ") == 0


def test_estimate_words_ratio():
    # 10 words * 1.3 = 13
    assert estimate_tokens("one two three four five six seven eight nine ten") == 13


def test_estimate_splits_on_punctuation():
    assert estimate_tokens("alpha,beta;gamma") == estimate_tokens("alpha beta gamma")


def test_estimate_is_deterministic_for_dicts():
    a = {"b": [1, 2, 3], "a": "hello world"}
    b = {"a": "hello world", "b": [1, 2, 3]}
    assert estimate_tokens(a) == estimate_tokens(b)
    assert estimate_tokens(a) == estimate_tokens(a)


def test_estimate_grows_with_content():
    small = {"items": ["short"]}
    large = {"items": ["short"] * 50}
    assert estimate_tokens(large) > estimate_tokens(small)


def test_estimate_observation_uses_dict_form():
    obs = Observation(
        datetime(2026, 1, 1, tzinfo=timezone.utc),
        ObservationKind.INFERRED_INSIGHT,
        {"insight": "Prefers keyboard shortcuts", "certainty": "high"},
    )
    assert estimate_tokens(obs) == estimate_tokens(obs.to_dict())
    assert estimate_tokens(obs) > 0


def test_estimate_many_sums():
    values = ["a b", "c d e"]
    assert estimate_many(values) == estimate_tokens("a b") + estimate_tokens("c d e")
