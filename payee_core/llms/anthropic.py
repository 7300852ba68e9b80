"""Anthropic LLM provider implementation."""

import dspy
from payee_core.config import get_config


def create_anthropic_lm() -> dspy.LM:
    """
    Create DSPy LM instance for Anthropic.

    Returns:
        Configured dspy.LM instance for Anthropic
    """
    config = get_config()

    lm_kwargs = {
        # DSPy routes "anthropic/<model>" through LiteLLM
        "model": f"anthropic/{config.anthropic.model}",
        "api_key": config.anthropic.api_key,
        "temperature": config.anthropic.temperature,
        "timeout": config.anthropic.timeout,
    }
    if config.anthropic.max_tokens:
        lm_kwargs["max_tokens"] = config.anthropic.max_tokens

    return dspy.LM(**lm_kwargs)
