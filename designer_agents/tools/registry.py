"""Tool registry.

Tools are registered on an explicit ``ToolRegistry`` instance that is built
once at startup and passed to the orchestrator. Each agent declares the tool
names it needs; the orchestrator resolves them here.
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, List, Literal, Optional, Tuple

from designer_agents.tools.context import ToolContext


@dataclass
class ToolResult:
    """Result of a tool execution."""
    success: bool
    message: str
    data: Dict[str, Any] = field(default_factory=dict)
    error: Optional[str] = None
    execution_time_ms: int = 0

    @classmethod
    def ok(cls, message: str, **data: Any) -> "ToolResult":
        return cls(success=True, message=message, data=data)

    @classmethod
    def fail(cls, message: str, error: Optional[str] = None, **data: Any) -> "ToolResult":
        return cls(success=False, message=message, data=data, error=error or message)

    @classmethod
    def bad_argument(cls, name: str, expected: str, value: Any) -> "ToolResult":
        """Failure for a model-supplied argument of the wrong shape."""
        return cls.fail(
            f'"{name}" must be {expected}, got {type(value).__name__}',
            error="Invalid argument",
            argument=name,
        )


ToolFunction = Callable[[Dict[str, Any], ToolContext], ToolResult]


@dataclass
class AgentTool:
    """A named, schema-described action the LLM may invoke.

    ``context`` tools are read-only guidance; ``action`` tools mutate the
    document.
    """
    name: str
    description: str
    function: ToolFunction
    category: Literal["context", "action"] = "action"
    parameters: Dict[str, Dict[str, Any]] = field(default_factory=dict)
    required: List[str] = field(default_factory=list)

    @property
    def is_action(self) -> bool:
        return self.category == "action"

    def definition(self) -> Dict[str, Any]:
        """Tool definition for LLM context."""
        schema: Dict[str, Any] = {
            "type": "object",
            "properties": self.parameters,
        }
        if self.required:
            schema["required"] = list(self.required)
        return {
            "name": self.name,
            "description": self.description,
            "input_schema": schema,
        }


class ToolRegistry:
    """Name-to-tool map of the domain actions available to agents."""

    def __init__(self, tools: Iterable[AgentTool] = ()):
        self._tools: Dict[str, AgentTool] = {}
        for tool in tools:
            self.register(tool)

    def register(self, tool: AgentTool) -> None:
        self._tools[tool.name] = tool

    def get(self, name: str) -> Optional[AgentTool]:
        return self._tools.get(name)

    def resolve(self, names: Iterable[str]) -> Tuple[List[AgentTool], List[str]]:
        """Look up ``names``; returns (found tools, missing names)."""
        found: List[AgentTool] = []
        missing: List[str] = []
        for name in names:
            tool = self.get(name)
            if tool is None:
                missing.append(name)
            else:
                found.append(tool)
        return found, missing
