"""Build the LLM provider from settings."""

from designer_agents.core.config import Settings
from designer_agents.core.logging import get_logger
from designer_agents.core.pricing import ModelRegistry
from designer_agents.llm.types import LLMProvider

logger = get_logger(__name__)


def create_llm_provider(config: Settings, models: ModelRegistry) -> LLMProvider:
    """Create the chat transport configured in ``config``."""
    model_config = models.get(config.llm_model)

    if config.llm_provider != model_config.provider:
        raise ValueError(
            f"Model '{model_config.model}' is served by '{model_config.provider}', "
            f"but llm_provider is '{config.llm_provider}'"
        )

    if config.llm_provider == "anthropic":
        from designer_agents.llm.anthropic_provider import AnthropicProvider

        if not config.anthropic_api_key:
            logger.warning("anthropic_api_key_missing", model=model_config.model)
        return AnthropicProvider(
            model_config,
            api_key=config.anthropic_api_key,
            default_max_tokens=config.llm_max_tokens,
        )

    raise ValueError(f"Unsupported LLM provider: {config.llm_provider}")
