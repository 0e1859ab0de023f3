"""Long-term memory: structured user profile and its reduced forms."""

import copy
from dataclasses import dataclass, field
from typing import Any

from cortex.core.types import DecodeResult
from cortex.core.typing import JSONDict, SectionDict
from cortex.memory.decode import is_string_list
from cortex.memory.tokens import estimate_tokens

PROFILE_SUMMARY = "profile_summary"

SECTIONS: tuple[str, ...] = (
    "skills_and_knowledge",
    "preferences_and_habits",
    "workflows",
    "challenges",
    "goals_and_motivations",
    "traits_and_attitudes",
)

PROFILE_KEYS: tuple[str, ...] = (PROFILE_SUMMARY, *SECTIONS)

# Fields a fresh profile starts with. The summarizer may add more.
DEFAULT_FIELDS: dict[str, tuple[str, ...]] = {
    "skills_and_knowledge": ("confirmed_skills", "learning_areas", "knowledge_gaps"),
    "preferences_and_habits": ("ui_preferences", "tool_preferences", "work_habits"),
    "workflows": ("common_workflows", "automation_candidates"),
    "challenges": ("recurring_frustrations", "blockers"),
    "goals_and_motivations": ("stated_goals", "inferred_motivations"),
    "traits_and_attitudes": ("personality_traits", "attitudes"),
}

# Fields kept by the priority projection, most important first.
PRIORITY_FIELDS: tuple[tuple[str, str], ...] = (
    (PROFILE_SUMMARY, PROFILE_SUMMARY),
    ("skills_and_knowledge", "confirmed_skills"),
    ("preferences_and_habits", "ui_preferences"),
    ("preferences_and_habits", "tool_preferences"),
    ("goals_and_motivations", "stated_goals"),
    ("challenges", "recurring_frustrations"),
)

MINIMAL_LIST_CAP = 5


def _empty_sections() -> dict[str, SectionDict]:
    return {section: {name: [] for name in DEFAULT_FIELDS[section]} for section in SECTIONS}


@dataclass
class LongTermProfile:
    """Durable user profile with exactly seven top-level sections.

    ``profile_summary`` is free text; every other section maps field names
    to lists of short statements. Instances are only replaced wholesale by
    consolidation or trimming, never edited field by field.
    """

    profile_summary: str = ""
    sections: dict[str, SectionDict] = field(default_factory=_empty_sections)

    def to_dict(self) -> JSONDict:
        data: JSONDict = {PROFILE_SUMMARY: self.profile_summary}
        for section in SECTIONS:
            data[section] = copy.deepcopy(self.sections.get(section, {}))
        return data

    @classmethod
    def from_dict(cls, data: JSONDict) -> "LongTermProfile":
        """Deserialize a stored profile.

        Tolerates the legacy ``{"summary": "..."}`` layout. Raises ValueError
        on a malformed document; use validate_profile() for untrusted input.
        """
        if PROFILE_SUMMARY not in data and "summary" in data and not any(s in data for s in SECTIONS):
            return cls(profile_summary=str(data.get("summary") or ""))
        result = validate_profile(data)
        if not result.success:
            raise ValueError(result.error)
        return result.value

    def estimate(self) -> int:
        return estimate_tokens(self.to_dict())

    def get_field(self, section: str, name: str) -> list[str]:
        if section == PROFILE_SUMMARY:
            return [self.profile_summary] if self.profile_summary else []
        return list(self.sections.get(section, {}).get(name, []))

    def is_empty(self) -> bool:
        return not self.profile_summary and not any(
            values for fields in self.sections.values() for values in fields.values()
        )


def validate_profile(data: Any) -> DecodeResult[LongTermProfile]:
    """Shape-check a candidate profile document.

    Missing sections are filled with empty mappings and unknown top-level
    keys are dropped. Wrong value types reject the whole document.
    """
    if not isinstance(data, dict):
        return DecodeResult.invalid(f"profile must be an object, got {type(data).__name__}")

    summary = data.get(PROFILE_SUMMARY, "")
    if summary is None:
        summary = ""
    if not isinstance(summary, str):
        return DecodeResult.invalid("profile_summary must be a string")

    sections: dict[str, SectionDict] = {}
    for section in SECTIONS:
        raw = data.get(section, {})
        if raw is None:
            raw = {}
        if not isinstance(raw, dict):
            return DecodeResult.invalid(f"section {section} must be an object")
        fields: SectionDict = {}
        for name, values in raw.items():
            if not is_string_list(values):
                return DecodeResult.invalid(f"{section}.{name} must be a list of strings")
            fields[str(name)] = list(values)
        sections[section] = fields

    return DecodeResult.valid(LongTermProfile(profile_summary=summary, sections=sections))


def project_priority(profile: LongTermProfile, token_budget: int | None = None) -> LongTermProfile:
    """Keep only the priority fields, dropping everything else.

    With a budget, lower-priority fields are dropped one at a time (last
    first) until the projection fits. The summary is never dropped.
    """
    kept = list(PRIORITY_FIELDS)

    def build(fields: list[tuple[str, str]]) -> LongTermProfile:
        sections: dict[str, SectionDict] = {section: {} for section in SECTIONS}
        summary = ""
        for section, name in fields:
            if section == PROFILE_SUMMARY:
                summary = profile.profile_summary
            else:
                sections[section][name] = profile.get_field(section, name)
        return LongTermProfile(profile_summary=summary, sections=sections)

    projected = build(kept)
    while token_budget is not None and len(kept) > 1 and projected.estimate() > token_budget:
        kept.pop()
        projected = build(kept)
    return projected


def minimal_profile(profile: LongTermProfile) -> LongTermProfile:
    """Smallest safe profile: summary plus a handful of skills and UI preferences."""
    sections: dict[str, SectionDict] = {section: {} for section in SECTIONS}
    sections["skills_and_knowledge"]["confirmed_skills"] = profile.get_field(
        "skills_and_knowledge", "confirmed_skills"
    )[:MINIMAL_LIST_CAP]
    sections["preferences_and_habits"]["ui_preferences"] = profile.get_field(
        "preferences_and_habits", "ui_preferences"
    )[:MINIMAL_LIST_CAP]
    return LongTermProfile(profile_summary=profile.profile_summary, sections=sections)
