"""Working memory: three ranked lists of hypotheses and facts."""

from dataclasses import dataclass, field
from typing import Any

from cortex.core.types import DecodeResult
from cortex.core.typing import JSONDict
from cortex.memory.decode import is_string_list
from cortex.memory.tokens import estimate_tokens

UNTESTED = "untested_hypotheses"
CORROBORATED = "corroborated_hypotheses"
ESTABLISHED = "established_facts"

BOARD_KEYS: tuple[str, ...] = (UNTESTED, CORROBORATED, ESTABLISHED)

# Layout used by earlier versions of the board
LEGACY_KEYS = {"untested": UNTESTED, "tested": CORROBORATED, "solid": ESTABLISHED}


@dataclass
class WorkingMemory:
    """Current reasoning state about the user.

    Each entry is a short statement that carries its own evidence, by
    convention as a trailing bracketed citation, e.g.
    ``"Prefers dark themes [seen in 3 recordings]"``.
    """

    untested_hypotheses: list[str] = field(default_factory=list)
    corroborated_hypotheses: list[str] = field(default_factory=list)
    established_facts: list[str] = field(default_factory=list)

    def to_dict(self) -> JSONDict:
        return {
            UNTESTED: list(self.untested_hypotheses),
            CORROBORATED: list(self.corroborated_hypotheses),
            ESTABLISHED: list(self.established_facts),
        }

    @classmethod
    def from_dict(cls, data: JSONDict) -> "WorkingMemory":
        """Deserialize a stored board, migrating the legacy key names."""
        if not any(key in data for key in BOARD_KEYS) and any(key in data for key in LEGACY_KEYS):
            data = {new: data.get(old, []) for old, new in LEGACY_KEYS.items()}
        result = validate_board({key: data.get(key, []) for key in BOARD_KEYS})
        if not result.success:
            raise ValueError(result.error)
        return result.value

    def estimate(self) -> int:
        return estimate_tokens(self.to_dict())

    def truncated(self, untested_cap: int, corroborated_cap: int) -> "WorkingMemory":
        """Copy with the hypothesis lists capped. Facts are always kept."""
        return WorkingMemory(
            untested_hypotheses=self.untested_hypotheses[:untested_cap],
            corroborated_hypotheses=self.corroborated_hypotheses[:corroborated_cap],
            established_facts=list(self.established_facts),
        )


def validate_board(data: Any) -> DecodeResult[WorkingMemory]:
    """Accept only an object with exactly the three keys, each a list of strings."""
    if not isinstance(data, dict):
        return DecodeResult.invalid(f"working memory must be an object, got {type(data).__name__}")

    keys = set(data)
    if keys != set(BOARD_KEYS):
        missing = sorted(set(BOARD_KEYS) - keys)
        extra = sorted(keys - set(BOARD_KEYS))
        return DecodeResult.invalid(f"working memory keys mismatch (missing={missing}, extra={extra})")

    for key in BOARD_KEYS:
        if not is_string_list(data[key]):
            return DecodeResult.invalid(f"{key} must be a list of strings")

    return DecodeResult.valid(
        WorkingMemory(
            untested_hypotheses=list(data[UNTESTED]),
            corroborated_hypotheses=list(data[CORROBORATED]),
            established_facts=list(data[ESTABLISHED]),
        )
    )
