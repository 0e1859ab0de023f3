"""
Shared type definitions.

Core data structures used across modules.
"""

import copy
import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Generic, TypeVar

T = TypeVar("T")


class ObservationKind(Enum):
    VIDEO_ANALYSIS_SUMMARY = "video_analysis_summary"
    EXPLICIT_DIRECTIVE = "explicit_directive"
    EXPLICIT_STATEMENT = "explicit_statement"
    INFERRED_INSIGHT = "inferred_insight"
    ANALYSIS_COMPLETE = "analysis_complete"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def parse_timestamp(value: Any) -> datetime:
    """Parse a stored timestamp, treating naive values as UTC."""
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, (int, float)):
        # Epoch milliseconds (JavaScript Date.now())
        parsed = datetime.fromtimestamp(value / 1000, tz=timezone.utc)
    else:
        parsed = datetime.fromisoformat(str(value))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def parse_kind(value: str) -> ObservationKind | str:
    """Known kinds become ObservationKind members; unknown ones stay strings."""
    try:
        return ObservationKind(value)
    except ValueError:
        return value


@dataclass(frozen=True)
class Observation:
    """Single short-term memory entry.

    Immutable once created. Only the memory manager creates observations,
    by decomposing an analysis result; only consolidation removes them.
    ``kind`` stays a plain string for kinds this version does not know, so
    entries written by newer producers survive a load/save cycle.
    """

    timestamp: datetime
    kind: ObservationKind | str
    payload: Any = field(default=None)

    @property
    def kind_name(self) -> str:
        return self.kind.value if isinstance(self.kind, ObservationKind) else self.kind

    def to_dict(self) -> dict[str, Any]:
        """Serializable copy; mutating it never touches the observation."""
        return {
            "timestamp": self.timestamp.isoformat(),
            "kind": self.kind_name,
            "payload": copy.deepcopy(self.payload),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Observation":
        """Deserialize an observation.

        Accepts the legacy ``{timestamp, type, data}`` layout as well.
        Raises KeyError or ValueError on an entry without a usable
        timestamp or kind.
        """
        kind = data.get("kind", data.get("type"))
        if not isinstance(kind, str) or not kind:
            raise ValueError(f"observation kind must be a non-empty string, got {kind!r}")
        payload = data["payload"] if "payload" in data else data.get("data")
        return cls(
            timestamp=parse_timestamp(data["timestamp"]),
            kind=parse_kind(kind),
            payload=copy.deepcopy(payload),
        )

    def to_prompt_line(self) -> str:
        """One-line rendering used when observations are shown to the summarizer."""
        body = json.dumps(self.payload, ensure_ascii=False, default=str)
        return f"[{self.timestamp.isoformat()}] ({self.kind_name}): {body}"


@dataclass
class DecodeResult(Generic[T]):
    """Result of validating an external response.

    ``success`` is only True when ``value`` passed the shape check.
    """

    success: bool
    value: T | None = None
    error: str | None = None

    @classmethod
    def valid(cls, value: T) -> "DecodeResult[T]":
        return cls(success=True, value=value)

    @classmethod
    def invalid(cls, reason: str) -> "DecodeResult[T]":
        return cls(success=False, error=reason)
