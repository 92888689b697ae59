"""Model pricing registry and token accounting.

Token counts are estimated from text length rather than read from provider
usage fields, so accounting behaves the same for every transport.
"""

import math
from dataclasses import dataclass, field
from typing import Dict, Optional

from designer_agents.core.logging import get_logger

logger = get_logger(__name__)

# Rough estimate: ~4 chars per token for English text
CHARS_PER_TOKEN = 4


@dataclass(frozen=True)
class ModelPricing:
    """Price in USD per million tokens."""
    input_per_million: float
    output_per_million: float


@dataclass(frozen=True)
class ModelConfig:
    """Provider, pricing and request capabilities of one model."""
    provider: str
    model: str
    pricing: ModelPricing
    supports_custom_temperature: bool = True
    default_temperature: Optional[float] = None
    supports_max_tokens: bool = True


AVAILABLE_MODELS: Dict[str, ModelConfig] = {
    "claude-sonnet-4-5": ModelConfig(
        provider="anthropic",
        model="claude-sonnet-4-5",
        pricing=ModelPricing(3.00, 15.00),
    ),
    "claude-haiku-4-5": ModelConfig(
        provider="anthropic",
        model="claude-haiku-4-5",
        pricing=ModelPricing(1.00, 5.00),
    ),
    "gpt-5-mini": ModelConfig(
        provider="openai",
        model="gpt-5-mini",
        pricing=ModelPricing(0.25, 2.00),
        supports_custom_temperature=False,
        default_temperature=1.0,
        supports_max_tokens=False,
    ),
    "gpt-5-nano": ModelConfig(
        provider="openai",
        model="gpt-5-nano",
        pricing=ModelPricing(0.05, 0.40),
        supports_custom_temperature=False,
        default_temperature=1.0,
        supports_max_tokens=False,
    ),
}

DEFAULT_MODEL = "claude-haiku-4-5"


class ModelRegistry:
    """Lookup of model configurations.

    Built once at startup and handed to the orchestrator; nothing reaches it
    through module state.
    """

    def __init__(self, models: Optional[Dict[str, ModelConfig]] = None, default_model: str = DEFAULT_MODEL):
        self._models = dict(models if models is not None else AVAILABLE_MODELS)
        if default_model not in self._models:
            raise ValueError(f"Default model not registered: {default_model}")
        self.default_model = default_model

    def get(self, model: str) -> ModelConfig:
        """Get a model config, falling back to the default model."""
        config = self._models.get(model)
        if config is None:
            logger.warning("model_not_found", model=model, fallback=self.default_model)
            return self._models[self.default_model]
        return config


def estimate_tokens(text: str) -> int:
    """Estimate tokens for text (4 chars ~ 1 token, rounded up)."""
    if not text:
        return 0
    return math.ceil(len(text) / CHARS_PER_TOKEN)


def calculate_cost(input_tokens: int, output_tokens: int, pricing: ModelPricing) -> float:
    """Calculate cost in USD for token usage."""
    input_cost = (input_tokens / 1_000_000) * pricing.input_per_million
    output_cost = (output_tokens / 1_000_000) * pricing.output_per_million
    return input_cost + output_cost


@dataclass
class TokenUsage:
    """Token counters for one agent execution or one orchestration phase."""
    pricing: ModelPricing
    input_tokens: int = 0
    output_tokens: int = 0
    calls: int = field(default=0)

    def record_input(self, text: str) -> int:
        tokens = estimate_tokens(text)
        self.input_tokens += tokens
        self.calls += 1
        return tokens

    def record_output(self, text: Optional[str]) -> int:
        tokens = estimate_tokens(text or "")
        self.output_tokens += tokens
        return tokens

    @property
    def total_tokens(self) -> int:
        return self.input_tokens + self.output_tokens

    @property
    def cost(self) -> float:
        return calculate_cost(self.input_tokens, self.output_tokens, self.pricing)
