"""LLM transport abstraction.

Responses are a tagged union: a reply either carries tool calls
(``ToolCallsReply``) or is plain text (``TextReply``). Call sites dispatch on
the type instead of probing optional fields.
"""

import asyncio
from dataclasses import dataclass, field
from typing import Any, Awaitable, Dict, List, Literal, Optional, Protocol, TypeVar, Union

T = TypeVar("T")


@dataclass(frozen=True)
class ToolCall:
    """A structured tool invocation requested by the model."""
    id: str
    name: str
    arguments: Dict[str, Any] = field(default_factory=dict)


@dataclass
class ChatMessage:
    """One message in a chat request."""
    role: Literal["system", "user", "assistant", "tool"]
    content: str = ""
    tool_calls: Optional[List[ToolCall]] = None
    tool_call_id: Optional[str] = None


@dataclass(frozen=True)
class ToolCallsReply:
    """The model asked for one or more tools to run."""
    calls: List[ToolCall]
    content: Optional[str] = None
    finish_reason: str = "tool_calls"
    kind: Literal["tool_calls"] = "tool_calls"

    @property
    def text(self) -> str:
        return self.content or ""


@dataclass(frozen=True)
class TextReply:
    """The model answered with text only."""
    content: str
    finish_reason: str = "stop"
    kind: Literal["text"] = "text"

    @property
    def text(self) -> str:
        return self.content


LLMResponse = Union[ToolCallsReply, TextReply]


class LLMProvider(Protocol):
    """Chat transport used by every agent."""

    name: str

    async def chat(
        self,
        messages: List[ChatMessage],
        tools: Optional[List[Dict[str, Any]]] = None,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
    ) -> LLMResponse:
        ...


# =============================================================================
# Cancellation
# =============================================================================

class RequestCancelledError(Exception):
    """Raised when a request is cancelled while waiting on the LLM."""

    def __init__(self, message: str = "Request cancelled"):
        super().__init__(message)


class CancelToken:
    """Cooperative cancellation signal threaded through every LLM call.

    Cancelling aborts the outstanding call; work already done (memory
    entries, document mutations) is not rolled back.
    """

    def __init__(self):
        self._event = asyncio.Event()
        self.reason: Optional[str] = None

    def cancel(self, reason: str = "Request cancelled") -> None:
        self.reason = reason
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self) -> None:
        if self.cancelled:
            raise RequestCancelledError(self.reason or "Request cancelled")

    async def guard(self, awaitable: Awaitable[T]) -> T:
        """Await ``awaitable`` unless the token fires first."""
        if self.cancelled:
            if asyncio.iscoroutine(awaitable):
                awaitable.close()
            self.raise_if_cancelled()

        call = asyncio.ensure_future(awaitable)
        waiter = asyncio.ensure_future(self._event.wait())
        try:
            done, _ = await asyncio.wait({call, waiter}, return_when=asyncio.FIRST_COMPLETED)
        except asyncio.CancelledError:
            call.cancel()
            raise
        finally:
            waiter.cancel()

        if call in done:
            return call.result()

        call.cancel()
        raise RequestCancelledError(self.reason or "Request cancelled")
