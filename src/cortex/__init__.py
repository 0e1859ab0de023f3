"""
Cortex - layered user memory built from screen-recording analyses.

Package structure:
- core: config, logging, common types
- memory: tiered memory model (short-term, working, long-term) and consolidation
- llm: LLM provider abstraction backing the annotation summarizer
"""

__version__ = "0.1.0"
