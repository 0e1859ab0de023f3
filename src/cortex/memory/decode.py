"""
Decoding of summarizer responses.

The summarizer returns free text. Everything taken from it goes through two
gates: JSON extraction (tolerating markdown fences and surrounding prose)
and a shape check. Callers only act on a successful DecodeResult.
"""

import json
import re
from typing import Any

from cortex.core.types import DecodeResult
from cortex.core.typing import JSONDict

_FENCE = re.compile(r"```(?:json|JSON)?\s*\n?(.*?)```", re.DOTALL)


def extract_json(text: str) -> DecodeResult[Any]:
    """Pull a JSON document out of an LLM response."""
    if not text or not text.strip():
        return DecodeResult.invalid("empty response")

    candidates = []
    fenced = _FENCE.search(text)
    if fenced:
        candidates.append(fenced.group(1).strip())
    candidates.append(text.strip())

    # Outermost object, for answers wrapped in prose
    start, end = text.find("{"), text.rfind("}")
    if 0 <= start < end:
        candidates.append(text[start : end + 1])

    last_error = "no JSON found"
    for candidate in candidates:
        try:
            return DecodeResult.valid(json.loads(candidate))
        except (json.JSONDecodeError, ValueError) as e:
            last_error = f"invalid JSON: {e}"
    return DecodeResult.invalid(last_error)


def is_string_list(value: Any) -> bool:
    return isinstance(value, list) and all(isinstance(item, str) for item in value)


def decode_object(text: str) -> DecodeResult[JSONDict]:
    """Extract JSON and require it to be an object."""
    result = extract_json(text)
    if not result.success:
        return result
    if not isinstance(result.value, dict):
        return DecodeResult.invalid(f"expected object, got {type(result.value).__name__}")
    return result


def preview(text: str, limit: int = 500) -> str:
    """Shortened raw response for logs."""
    text = text or ""
    return text if len(text) <= limit else text[:limit] + "..."
