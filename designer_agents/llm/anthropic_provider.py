"""Anthropic chat transport.

Maps the neutral ``ChatMessage`` / tool definition shapes onto the Messages
API: system prompts move to the ``system`` parameter, assistant tool calls
become ``tool_use`` blocks and tool results become ``tool_result`` blocks in
a user turn.
"""

from typing import Any, Dict, List, Optional, Tuple

from anthropic import AsyncAnthropic

from designer_agents.core.logging import get_logger
from designer_agents.core.pricing import ModelConfig
from designer_agents.llm.types import ChatMessage, LLMResponse, TextReply, ToolCall, ToolCallsReply

logger = get_logger(__name__)


def to_anthropic_messages(messages: List[ChatMessage]) -> Tuple[str, List[Dict[str, Any]]]:
    """Split out the system prompt and convert the rest to API messages."""
    system_parts: List[str] = []
    converted: List[Dict[str, Any]] = []

    for message in messages:
        if message.role == "system":
            system_parts.append(message.content)
            continue

        if message.role == "tool":
            block = {
                "type": "tool_result",
                "tool_use_id": message.tool_call_id,
                "content": message.content,
            }
            # Consecutive tool results share one user turn
            if converted and converted[-1]["role"] == "user" and isinstance(converted[-1]["content"], list) \
                    and all(b.get("type") == "tool_result" for b in converted[-1]["content"]):
                converted[-1]["content"].append(block)
            else:
                converted.append({"role": "user", "content": [block]})
            continue

        if message.role == "assistant" and message.tool_calls:
            content: List[Dict[str, Any]] = []
            if message.content:
                content.append({"type": "text", "text": message.content})
            for call in message.tool_calls:
                content.append({
                    "type": "tool_use",
                    "id": call.id,
                    "name": call.name,
                    "input": call.arguments,
                })
            converted.append({"role": "assistant", "content": content})
            continue

        converted.append({"role": message.role, "content": message.content})

    return "\n\n".join(system_parts), converted


def from_anthropic_response(response: Any) -> LLMResponse:
    """Convert a Messages API response into the tagged reply union."""
    text_parts: List[str] = []
    calls: List[ToolCall] = []

    for block in response.content:
        if block.type == "text":
            text_parts.append(block.text)
        elif block.type == "tool_use":
            calls.append(ToolCall(id=block.id, name=block.name, arguments=dict(block.input or {})))

    text = "".join(text_parts)
    finish_reason = response.stop_reason or "stop"

    if calls:
        return ToolCallsReply(calls=calls, content=text or None, finish_reason=finish_reason)
    return TextReply(content=text, finish_reason=finish_reason)


class AnthropicProvider:
    """LLM provider backed by ``anthropic.AsyncAnthropic``."""

    name = "anthropic"

    def __init__(
        self,
        model_config: ModelConfig,
        api_key: Optional[str] = None,
        default_max_tokens: int = 4096,
        client: Optional[AsyncAnthropic] = None,
    ):
        self.model_config = model_config
        self.default_max_tokens = default_max_tokens
        self.client = client or AsyncAnthropic(api_key=api_key)

    async def chat(
        self,
        messages: List[ChatMessage],
        tools: Optional[List[Dict[str, Any]]] = None,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
    ) -> LLMResponse:
        system, api_messages = to_anthropic_messages(messages)

        params: Dict[str, Any] = {
            "model": self.model_config.model,
            # max_tokens is mandatory for the Messages API
            "max_tokens": max_tokens or self.default_max_tokens,
            "messages": api_messages,
        }
        if system:
            params["system"] = system
        if tools:
            params["tools"] = tools
        if temperature is not None and self.model_config.supports_custom_temperature:
            params["temperature"] = temperature

        logger.debug(
            "llm_request",
            model=self.model_config.model,
            message_count=len(api_messages),
            tool_count=len(tools or []),
        )

        response = await self.client.messages.create(**params)
        reply = from_anthropic_response(response)

        logger.debug(
            "llm_response",
            model=self.model_config.model,
            kind=reply.kind,
            finish_reason=reply.finish_reason,
        )
        return reply
