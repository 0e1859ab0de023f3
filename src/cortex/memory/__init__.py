"""
Memory module - tiered user memory.

Tiers:
- short_term: append-ordered observations from recent recordings
- working: untested / corroborated / established statements about the user
- profile: durable long-term user profile (seven sections)

Storage: one JSON snapshot plus optional per-tier mirror files.
"""

from cortex.memory.config import MemoryConfig
from cortex.memory.manager import IngestReport, MemoryManager
from cortex.memory.profile import LongTermProfile
from cortex.memory.short_term import ShortTermMemory
from cortex.memory.store import MemoryState, PersistenceError, SnapshotStore
from cortex.memory.summarizer import LLMSummarizer, Summarizer, SummarizerError, SummaryTask
from cortex.memory.tokens import estimate_tokens
from cortex.memory.working import WorkingMemory

__all__ = [
    "IngestReport",
    "LLMSummarizer",
    "LongTermProfile",
    "MemoryConfig",
    "MemoryManager",
    "MemoryState",
    "PersistenceError",
    "ShortTermMemory",
    "SnapshotStore",
    "Summarizer",
    "SummarizerError",
    "SummaryTask",
    "WorkingMemory",
    "estimate_tokens",
]
