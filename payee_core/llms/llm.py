"""LLM selection and configuration based on config."""

import dspy
from payee_core.config import get_config
from payee_core.llms.openai import create_openai_lm
from payee_core.llms.anthropic import create_anthropic_lm

_PROVIDERS = {
    "openai": create_openai_lm,
    "anthropic": create_anthropic_lm,
}


def get_llm_for_agent(agent_name: str) -> dspy.LM:
    """
    Get DSPy LM instance for a specific agent based on config.

    The provider is read from the ``<agent_name>_llm`` setting, e.g.
    ``PAYEE_CLASSIFICATION_LLM=anthropic``.

    Args:
        agent_name: Name of the agent ('payee_classification')

    Returns:
        Configured dspy.LM instance
    """
    config = get_config()

    provider = str(getattr(config, f"{agent_name}_llm", "openai")).lower()
    factory = _PROVIDERS.get(provider)
    if factory is None:
        raise ValueError(
            f"Unknown LLM provider: {provider}. Available: {', '.join(_PROVIDERS)}"
        )
    return factory()
