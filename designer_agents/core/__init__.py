"""Core configuration, logging and accounting."""

from .config import settings, Settings
from .logging import configure_logging, get_logger
from .pricing import (
    ModelConfig,
    ModelPricing,
    ModelRegistry,
    TokenUsage,
    calculate_cost,
    estimate_tokens,
)

__all__ = [
    "settings",
    "Settings",
    "configure_logging",
    "get_logger",
    "ModelConfig",
    "ModelPricing",
    "ModelRegistry",
    "TokenUsage",
    "calculate_cost",
    "estimate_tokens",
]
