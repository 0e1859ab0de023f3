"""Shared typing aliases used across modules."""

from typing import Any, TypeAlias

JSONDict: TypeAlias = dict[str, Any]
MessageDict: TypeAlias = dict[str, Any]
SectionDict: TypeAlias = dict[str, list[str]]
