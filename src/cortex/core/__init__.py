"""
Core module - configuration and shared types.

Components:
- config: Settings management via pydantic-settings
- types: Shared data structures (Observation, DecodeResult, etc.)
- logging: Structured logging setup
"""

from cortex.core.config import Settings
from cortex.core.types import DecodeResult, Observation, ObservationKind

__all__ = ["Settings", "Observation", "ObservationKind", "DecodeResult"]
