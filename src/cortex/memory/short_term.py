"""Short-term memory: append-ordered log of observations."""

from collections.abc import Iterable, Iterator
from typing import Any

from cortex.core.logging import get_logger
from cortex.core.types import Observation
from cortex.memory.tokens import estimate_many, estimate_tokens

logger = get_logger("memory.short_term")


class ShortTermMemory:
    """Ordered log of recent observations.

    Entries are only reordered by sort_by_time(), which consolidation calls
    right before picking the oldest slice. Removal happens from the front.
    """

    def __init__(self, entries: Iterable[Observation] | None = None):
        self._entries: list[Observation] = list(entries or [])

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[Observation]:
        return iter(self._entries)

    def __bool__(self) -> bool:
        return bool(self._entries)

    @property
    def entries(self) -> list[Observation]:
        return list(self._entries)

    def append(self, observation: Observation) -> None:
        self._entries.append(observation)

    def extend(self, observations: Iterable[Observation]) -> None:
        self._entries.extend(observations)

    def estimate(self) -> int:
        """Estimated tokens of the whole log (sum of entries)."""
        return estimate_many(self._entries)

    def sort_by_time(self) -> None:
        """Stable sort, oldest first."""
        self._entries.sort(key=lambda entry: entry.timestamp)

    def oldest_slice(self, token_limit: int) -> list[Observation]:
        """Longest prefix whose cumulative estimate stays within token_limit.

        Stops at the first entry that would overflow, so the result is
        always a prefix and may be empty.
        """
        taken: list[Observation] = []
        total = 0
        for entry in self._entries:
            size = estimate_tokens(entry)
            if total + size > token_limit:
                break
            taken.append(entry)
            total += size
        return taken

    def drop_front(self, entries: list[Observation]) -> None:
        """Remove exactly these entries from the front of the log."""
        count = len(entries)
        if self._entries[:count] != entries:
            raise ValueError("Entries to drop are not the current front of short-term memory")
        del self._entries[:count]

    def recent(self, limit: int) -> list[Observation]:
        """Most recent entries in log order."""
        if limit <= 0:
            return []
        return self._entries[-limit:]

    def to_list(self) -> list[dict[str, Any]]:
        return [entry.to_dict() for entry in self._entries]

    @classmethod
    def from_list(cls, data: list[dict[str, Any]]) -> "ShortTermMemory":
        """Restore a stored log. Unreadable entries are skipped one by one."""
        if not isinstance(data, list):
            raise TypeError(f"short-term memory must be a list, got {type(data).__name__}")
        entries = []
        for index, item in enumerate(data):
            try:
                entries.append(Observation.from_dict(item))
            except (KeyError, TypeError, ValueError, AttributeError) as e:
                logger.warning(f"Skipping unreadable short-term entry #{index}: {e}")
        return cls(entries)
