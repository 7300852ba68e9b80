"""OpenAI LLM provider implementation."""

import os
import dspy
from payee_core.config import get_config

# OpenAI model names mapped to their OpenRouter equivalents
OPENROUTER_MODEL_MAPPING = {
    "gpt-4o": "openrouter/openai/gpt-4o",
    "gpt-4o-mini": "openrouter/openai/gpt-4o-mini",
    "gpt-4": "openrouter/openai/gpt-4",
    "gpt-3.5-turbo": "openrouter/openai/gpt-3.5-turbo",
}


def create_openai_lm() -> dspy.LM:
    """
    Create DSPy LM instance for OpenAI or OpenRouter.

    OpenRouter keys (prefix ``sk-or-``) are detected automatically and the
    model name is rewritten to the ``openrouter/`` form.

    Returns:
        Configured dspy.LM instance for OpenAI/OpenRouter
    """
    config = get_config()

    model = config.openai.model
    api_key = config.openai.api_key

    if api_key and api_key.startswith("sk-or-"):
        # LiteLLM reads the OpenRouter key from the environment
        os.environ["OPENROUTER_API_KEY"] = api_key
        if not model.startswith("openrouter/"):
            model = OPENROUTER_MODEL_MAPPING.get(model, f"openrouter/openai/{model}")

    lm_kwargs = {
        "model": model,
        "api_key": api_key,
        "temperature": config.openai.temperature,
        "timeout": config.openai.timeout,
    }

    if config.openai.max_tokens:
        lm_kwargs["max_tokens"] = config.openai.max_tokens

    if config.openai.base_url:
        lm_kwargs["api_base"] = config.openai.base_url

    return dspy.LM(**lm_kwargs)
