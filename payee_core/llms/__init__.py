"""LLM provider factories for DSPy agents."""
