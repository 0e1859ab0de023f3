"""
LLM module - language model provider abstraction.

Providers:
- claude: Anthropic Claude API (primary)
- local: Local LLMs via OpenAI-compatible API (fallback)

The router tries providers in registration order. The memory engine never
talks to providers directly; it goes through cortex.memory.summarizer.
"""
