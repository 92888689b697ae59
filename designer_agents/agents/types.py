"""Result and progress types shared by the agents and the orchestrator."""

import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Literal, Optional

from designer_agents.memory.store import MemoryStore
from designer_agents.tools.executor import ToolExecutionRecord

ProgressType = Literal["progress", "success", "error"]


@dataclass(frozen=True)
class AgentProgressMessage:
    """UI-facing progress event. Never persisted."""
    agent: str
    type: ProgressType
    message: str
    timestamp: float = field(default_factory=time.time)
    metadata: Optional[Dict[str, Any]] = None


ProgressCallback = Callable[[AgentProgressMessage], None]


@dataclass
class AgentResult:
    """Outcome of one specialist execution."""
    success: bool
    message: str
    memory_entries_created: int = 0
    tokens_used: int = 0
    cost: float = 0.0
    duration: float = 0.0
    data: Optional[Dict[str, Any]] = None
    error: Optional[str] = None
    # Every tool attempt of the execution, in call order
    tool_records: List[ToolExecutionRecord] = field(default_factory=list, repr=False)


@dataclass(frozen=True)
class AgentStep:
    """One step of a multi-step plan."""
    agent: str
    instruction: str


@dataclass
class ValidationResult:
    success: bool
    completed_tasks: int
    total_tasks: int
    message: str
    tokens_used: int = 0
    cost: float = 0.0


@dataclass
class OrchestrationResult:
    """Aggregate outcome of one top-level request."""
    success: bool
    message: str
    tokens_used: int = 0
    cost: float = 0.0
    duration: float = 0.0
    memory_entries_created: int = 0
    validation: Optional[ValidationResult] = None
    memory: Optional[MemoryStore] = field(default=None, repr=False)
