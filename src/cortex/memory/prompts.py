"""Prompt templates for the annotation summarizer.

Every template asks for a bare JSON document except the query prompt,
which expects free text.
"""

import json

from cortex.core.types import Observation
from cortex.core.typing import JSONDict

PROFILE_SCHEMA = """\
{
  "profile_summary": "string",
  "skills_and_knowledge": {"confirmed_skills": [], "learning_areas": [], "knowledge_gaps": []},
  "preferences_and_habits": {"ui_preferences": [], "tool_preferences": [], "work_habits": []},
  "workflows": {"common_workflows": [], "automation_candidates": []},
  "challenges": {"recurring_frustrations": [], "blockers": []},
  "goals_and_motivations": {"stated_goals": [], "inferred_motivations": []},
  "traits_and_attitudes": {"personality_traits": [], "attitudes": []}
}"""

BOARD_SCHEMA = """\
{"untested_hypotheses": [], "corroborated_hypotheses": [], "established_facts": []}"""

MERGE_PROMPT = """You maintain a long-term profile of a user, built from analyses of their screen recordings.
Merge the new observations below into the existing profile.

Rules:
- Keep every section of the schema, even when a section has nothing in it.
- Merge duplicates, generalize repeated evidence, and drop statements the new observations contradict.
- Every list item is a short string. profile_summary is a short paragraph.
- Output the *entire updated* profile as a single JSON object matching this schema, with no surrounding text:
{schema}

Existing profile:
---
{profile}
---

New observations (oldest first):
---
{observations}
---
"""

CONDENSE_PROFILE_PROMPT = """The user profile below is too long. Condense it to roughly {budget} tokens.

Rules:
- Keep the same seven top-level sections and the same JSON layout.
- Prefer confirmed skills, UI and tool preferences, stated goals and recurring frustrations.
- Merge near-duplicates and drop low-value details.
- Output only the JSON object, with no surrounding text.

Profile:
---
{profile}
---
"""

DERIVE_WORKING_PROMPT = """Based on the recent activity log (STM) and the long-term profile (LTM), update the user's working memory (WM).

Current WM:
---
{working}
---

STM (most recent {window} entries):
---
{observations}
---

LTM:
---
{profile}
---

Instructions:
1. Add genuinely new insights about the user's goals, preferences, skills, habits or context to untested_hypotheses.
2. Move an untested hypothesis to corroborated_hypotheses when recent activity supports it; remove it when contradicted.
3. Move a corroborated hypothesis to established_facts when it is consistently supported over time (consider LTM); demote or remove it when contradicted.
4. End every entry with its evidence in square brackets, e.g. "Prefers keyboard shortcuts [seen in 3 recordings]".
5. Keep entries concise. Avoid redundancy. Lists contain only strings, most important first.
6. Output the *entire updated* WM as one JSON object with exactly these keys and nothing else:
{schema}
"""

CONDENSE_WORKING_PROMPT = """The working memory below is too long. Condense it to roughly {budget} tokens.

Merge overlapping entries, keep the strongest evidence in brackets, and keep every established fact that is still supported.
Output one JSON object with exactly these keys and nothing else:
{schema}

Working memory:
---
{working}
---
"""

QUERY_PROMPT = """You answer questions about a user using what their assistant has learned from screen recordings.
Answer from the memory below only. Say so when the memory does not contain the answer.

Long-term profile:
---
{profile}
---

Working memory:
---
{working}
---

Short-term observations (oldest first):
---
{observations}
---

Question: {question}
"""


def _dump(data: JSONDict) -> str:
    return json.dumps(data, indent=2, ensure_ascii=False)


def _lines(observations: list[Observation]) -> str:
    return "\n".join(obs.to_prompt_line() for obs in observations) or "No recent activity"


def build_merge_prompt(profile: JSONDict, observations: list[Observation]) -> str:
    return MERGE_PROMPT.format(
        schema=PROFILE_SCHEMA,
        profile=_dump(profile),
        observations=_lines(observations),
    )


def build_condense_profile_prompt(profile: JSONDict, budget: int) -> str:
    return CONDENSE_PROFILE_PROMPT.format(budget=budget, profile=_dump(profile))


def build_derive_working_prompt(
    working: JSONDict,
    observations: list[Observation],
    profile: JSONDict,
) -> str:
    return DERIVE_WORKING_PROMPT.format(
        working=_dump(working),
        window=len(observations),
        observations=_lines(observations),
        profile=_dump(profile),
        schema=BOARD_SCHEMA,
    )


def build_condense_working_prompt(working: JSONDict, budget: int) -> str:
    return CONDENSE_WORKING_PROMPT.format(budget=budget, schema=BOARD_SCHEMA, working=_dump(working))


def build_query_prompt(
    question: str,
    profile: JSONDict,
    working: JSONDict,
    observations: list[Observation],
) -> str:
    return QUERY_PROMPT.format(
        profile=_dump(profile),
        working=_dump(working),
        observations=_lines(observations),
        question=question,
    )
