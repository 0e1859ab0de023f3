"""
Token estimator for memory budgets.

A cheap, deterministic proxy for how much a value costs a downstream LLM to
read. Only ordering and rough magnitude matter: the result gates soft
budgets, not a protocol limit.
"""

import json
import math
import re
from collections.abc import Iterable
from typing import Any

WORDS_TO_TOKENS = 1.3

_WORD_SPLIT = re.compile(r"[\s,.!?;:]+")


def estimate_tokens(value: Any) -> int:
    """Estimate tokens for any JSON-like value.

    The value is serialized to JSON, split on whitespace and punctuation,
    and the word count is scaled by WORDS_TO_TOKENS.
    """
    if value is None:
        return 0
    text = value if isinstance(value, str) else _to_text(value)
    words = [w for w in _WORD_SPLIT.split(text) if w]
    return math.ceil(len(words) * WORDS_TO_TOKENS)


def estimate_many(values: Iterable[Any]) -> int:
    """Sum of per-item estimates."""
    return sum(estimate_tokens(v) for v in values)


def _to_text(value: Any) -> str:
    if hasattr(value, "to_dict"):
        value = value.to_dict()
    return json.dumps(value, ensure_ascii=False, sort_keys=True, default=str)
