"""Domain tools available to agents."""

from .component_tools import COMPONENT_TOOLS
from .context import ComponentNode, Page, ToolContext
from .executor import ToolExecutor
from .markup import MarkupError, parse_markup
from .page_tools import PAGE_TOOLS
from .registry import AgentTool, ToolRegistry, ToolResult


def create_default_registry() -> ToolRegistry:
    """Registry holding every built-in tool."""
    return ToolRegistry([*PAGE_TOOLS, *COMPONENT_TOOLS])


__all__ = [
    "AgentTool",
    "ComponentNode",
    "MarkupError",
    "Page",
    "ToolContext",
    "ToolExecutor",
    "ToolRegistry",
    "ToolResult",
    "create_default_registry",
    "parse_markup",
]
