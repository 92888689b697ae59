"""Per-agent tool execution.

An agent may only run the tools it was given. Every attempt, allowed or not,
is kept as a :class:`ToolExecutionRecord` so a request can be traced tool by
tool after the fact.
"""

import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional

from designer_agents.core.logging import get_logger
from designer_agents.tools.context import ToolContext
from designer_agents.tools.registry import AgentTool, ToolResult

logger = get_logger(__name__)

# Strings longer than this (markup, custom table rows) are shortened in records
MAX_RECORDED_STRING = 1000
RECORDED_PREFIX = 500
TRUNCATION_MARKER = "... [TRUNCATED]"


def _shorten(value: Any) -> Any:
    if isinstance(value, str):
        if len(value) > MAX_RECORDED_STRING:
            return value[:RECORDED_PREFIX] + TRUNCATION_MARKER
        return value
    if isinstance(value, dict):
        return {key: _shorten(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_shorten(item) for item in value]
    return value


@dataclass
class ToolExecutionRecord:
    tool_name: str
    inputs: Dict[str, Any]
    result: Any = None
    error: Optional[str] = None
    duration_ms: int = 0
    timestamp: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat())


class ToolExecutor:
    """Runs one agent's tools against a document.

    Expected failures come back from the tool as ``ToolResult(success=False)``.
    Exceptions raised by a tool are recorded and re-raised unchanged.
    """

    def __init__(self, agent_name: str, tools: Iterable[AgentTool]):
        self.agent_name = agent_name
        self.tools: Dict[str, AgentTool] = {tool.name: tool for tool in tools}
        self.records: List[ToolExecutionRecord] = []

    def can_execute(self, tool_name: str) -> bool:
        return tool_name in self.tools

    def get(self, tool_name: str) -> Optional[AgentTool]:
        return self.tools.get(tool_name)

    def execute(self, tool_name: str, arguments: Dict[str, Any], context: ToolContext) -> ToolResult:
        tool = self.tools.get(tool_name)
        if tool is None:
            message = f"Tool '{tool_name}' not allowed for agent '{self.agent_name}'"
            logger.warning("tool_not_allowed", agent=self.agent_name, tool=tool_name)
            self._record(tool_name, arguments, error=message)
            return ToolResult(success=False, message=message, error=message)

        started = time.monotonic()
        try:
            result = tool.function(arguments, context)
        except Exception as e:
            error = f"{type(e).__name__}: {e}"
            logger.error("tool_raised", agent=self.agent_name, tool=tool_name, error=error)
            self._record(tool_name, arguments, error=error, duration_ms=_elapsed_ms(started))
            raise

        result.execution_time_ms = _elapsed_ms(started)
        if result.success:
            self._record(tool_name, arguments, result=result.data, duration_ms=result.execution_time_ms)
        else:
            logger.info("tool_failed", agent=self.agent_name, tool=tool_name, error=result.error)
            self._record(tool_name, arguments, error=result.error, duration_ms=result.execution_time_ms)
        return result

    def _record(self, tool_name: str, inputs: Dict[str, Any], **outcome: Any) -> None:
        if outcome.get("result") is not None:
            outcome["result"] = _shorten(outcome["result"])
        self.records.append(ToolExecutionRecord(tool_name=tool_name, inputs=_shorten(inputs), **outcome))


def _elapsed_ms(started: float) -> int:
    return int((time.monotonic() - started) * 1000)
