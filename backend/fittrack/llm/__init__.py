"""
LLM coach package.

- tools: question-aware context and trend numbers built from a snapshot
- coach: OpenAI chat completions for chat answers and the daily insight
"""
