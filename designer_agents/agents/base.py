"""Base agent classes with LLM integration and tool execution."""

import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Union

from designer_agents.core.logging import get_logger
from designer_agents.core.pricing import ModelPricing, TokenUsage
from designer_agents.llm.types import CancelToken, ChatMessage, LLMProvider, LLMResponse, ToolCall
from designer_agents.memory.store import ActionType, MemoryEntry, MemoryStore
from designer_agents.tools.context import ToolContext
from designer_agents.tools.executor import ToolExecutor
from designer_agents.tools.registry import AgentTool, ToolResult
from designer_agents.agents.types import AgentProgressMessage, AgentResult, ProgressCallback, ProgressType

logger = get_logger(__name__)


@dataclass
class AgentRun:
    """State of a single ``execute()`` call.

    Everything that accumulates while an agent works (tokens, memory entry
    count, tool log) lives here rather than on the agent, so one agent
    instance can serve any number of requests.
    """
    memory: MemoryStore
    usage: TokenUsage
    context: Optional[ToolContext] = None
    on_progress: Optional[ProgressCallback] = None
    cancel: Optional[CancelToken] = None
    executor: Optional[ToolExecutor] = None
    memory_entries_created: int = 0
    started_at: float = field(default_factory=time.monotonic)


class BaseAgent(ABC):
    """Shared capabilities: progress, LLM calls with accounting, memory."""

    name: str = "BaseAgent"

    def __init__(self, llm: LLMProvider, pricing: ModelPricing):
        self.llm = llm
        self.pricing = pricing

    def new_usage(self) -> TokenUsage:
        return TokenUsage(pricing=self.pricing)

    def emit(
        self,
        run: AgentRun,
        type: ProgressType,
        message: str,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> None:
        """Emit a progress message to the caller."""
        logger.debug("agent_progress", agent=self.name, type=type, message=message)
        if run.on_progress is not None:
            run.on_progress(AgentProgressMessage(
                agent=self.name,
                type=type,
                message=message,
                metadata=metadata,
            ))

    async def call_llm(
        self,
        run: AgentRun,
        messages: List[ChatMessage],
        tools: Optional[List[Dict[str, Any]]] = None,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
    ) -> LLMResponse:
        """Call the LLM, charging estimated tokens to ``run.usage``."""
        if run.cancel is not None:
            run.cancel.raise_if_cancelled()
        run.usage.record_input("\n".join(message.content for message in messages))

        request = self.llm.chat(messages, tools=tools, temperature=temperature, max_tokens=max_tokens)
        if run.cancel is not None:
            response = await run.cancel.guard(request)
        else:
            response = await request

        run.usage.record_output(response.text)
        return response

    def write_memory(
        self,
        run: AgentRun,
        action: Union[ActionType, str],
        entity_id: Union[str, Sequence[str], None] = None,
        entity_type: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        parent_action: Optional[str] = None,
    ) -> MemoryEntry:
        """Write to memory attributed to this agent."""
        entry = run.memory.write(
            agent=self.name,
            action=action,
            entity_id=entity_id,
            entity_type=entity_type,
            details=details,
            parent_action=parent_action,
        )
        run.memory_entries_created += 1
        return entry

    def search_memory(self, run: AgentRun, **filters: Any) -> List[MemoryEntry]:
        return run.memory.search(**filters)

    def success_result(self, run: AgentRun, message: str, data: Optional[Dict[str, Any]] = None) -> AgentResult:
        return AgentResult(
            success=True,
            message=message,
            memory_entries_created=run.memory_entries_created,
            tokens_used=run.usage.total_tokens,
            cost=run.usage.cost,
            data=data,
        )

    def error_result(self, run: AgentRun, message: str, error: Optional[str] = None) -> AgentResult:
        return AgentResult(
            success=False,
            message=message,
            memory_entries_created=run.memory_entries_created,
            tokens_used=run.usage.total_tokens,
            cost=run.usage.cost,
            error=error or message,
        )


class SpecialistAgent(BaseAgent):
    """Agent that owns a tool set and handles one kind of request."""

    required_tools: Sequence[str] = ()

    def __init__(self, llm: LLMProvider, pricing: ModelPricing):
        super().__init__(llm, pricing)
        self.tools: List[AgentTool] = []

    def set_tools(self, tools: Sequence[AgentTool]) -> None:
        """Install the tools resolved from the registry."""
        self.tools = list(tools)

    def tool_schemas(self) -> List[Dict[str, Any]]:
        return [tool.definition() for tool in self.tools]

    @abstractmethod
    def can_handle(self, request: str, memory: MemoryStore) -> bool:
        """Cheap keyword check; never calls the LLM."""

    @abstractmethod
    async def _execute(self, request: str, run: AgentRun) -> AgentResult:
        """Do the work. Must emit at least one progress message."""

    async def execute(
        self,
        request: str,
        context: ToolContext,
        memory: MemoryStore,
        on_progress: Optional[ProgressCallback] = None,
        cancel: Optional[CancelToken] = None,
        usage: Optional[TokenUsage] = None,
    ) -> AgentResult:
        """Run the agent and emit exactly one terminal progress message.

        Exceptions are reported with an error message and re-raised.
        """
        run = AgentRun(
            memory=memory,
            usage=usage if usage is not None else self.new_usage(),
            context=context,
            on_progress=on_progress,
            cancel=cancel,
            executor=ToolExecutor(self.name, self.tools),
        )
        logger.info("agent_started", agent=self.name, request=request[:200])

        try:
            result = await self._execute(request, run)
        except Exception as e:
            self.emit(run, "error", str(e))
            logger.error("agent_raised", agent=self.name, error=str(e), error_type=type(e).__name__)
            raise

        result.duration = time.monotonic() - run.started_at
        result.tool_records = list(run.executor.records)
        self.emit(run, "success" if result.success else "error", result.message)
        logger.info(
            "agent_finished",
            agent=self.name,
            success=result.success,
            memory_entries=result.memory_entries_created,
            tokens_used=result.tokens_used,
            llm_calls=run.usage.calls,
            tool_calls=len(result.tool_records),
            duration=round(result.duration, 3),
        )
        return result

    def run_tool(self, run: AgentRun, call: ToolCall) -> Optional[ToolResult]:
        """Execute one requested tool call.

        Returns None when the model named a tool outside this agent's set.
        """
        if not run.executor.can_execute(call.name):
            logger.warning("unknown_tool_skipped", agent=self.name, tool=call.name)
            return None

        self.emit(run, "progress", f"Executing {call.name}...")
        result = run.executor.execute(call.name, call.arguments, run.context)
        if result.success:
            self.emit(run, "progress", result.message)
        return result

    def tool_failure(self, run: AgentRun, result: ToolResult) -> AgentResult:
        return self.error_result(run, result.message or "Tool execution failed", error=result.error)
