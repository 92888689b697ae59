"""LLM transport types and providers."""

from .types import (
    CancelToken,
    ChatMessage,
    LLMProvider,
    LLMResponse,
    RequestCancelledError,
    TextReply,
    ToolCall,
    ToolCallsReply,
)
from .factory import create_llm_provider

__all__ = [
    "CancelToken",
    "ChatMessage",
    "LLMProvider",
    "LLMResponse",
    "RequestCancelledError",
    "TextReply",
    "ToolCall",
    "ToolCallsReply",
    "create_llm_provider",
]
