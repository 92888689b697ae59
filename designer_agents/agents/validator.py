"""Validator agent.

Compares the memory log with the original request and reports how many of
the requested tasks were completed.
"""

from typing import List, Optional

from designer_agents.agents.base import AgentRun, BaseAgent
from designer_agents.agents.prompts import VALIDATOR_INSTRUCTION, VALIDATOR_PROMPT_TEMPLATE
from designer_agents.agents.types import ProgressCallback, ValidationResult
from designer_agents.agents.validation_parser import parse_completion_ratio
from designer_agents.core.logging import get_logger
from designer_agents.core.pricing import TokenUsage
from designer_agents.llm.types import CancelToken, ChatMessage
from designer_agents.memory.store import ActionType, MemoryEntry, MemoryStore

logger = get_logger(__name__)

NON_ACTION_TYPES = frozenset({ActionType.ERROR, ActionType.VALIDATION_PASSED, ActionType.VALIDATION_FAILED})


def format_memory_for_validation(entries: List[MemoryEntry]) -> str:
    lines = []
    for entry in entries:
        line = f"- {entry.action.value.replace('_', ' ')}: {entry.entity_type or ''}"
        details = entry.details
        if details.get("count"):
            line += f" (count: {details['count']})"
        origin = [
            f"{key}: {details[key]}"
            for key in ("method", "template", "sub_request")
            if details.get(key)
        ]
        if origin:
            line += f" [{', '.join(origin)}]"
        lines.append(line)
    return "\n".join(lines)


class ValidatorAgent(BaseAgent):
    """Final check of a request against what the agents recorded."""

    name = "ValidatorAgent"

    async def validate(
        self,
        request: str,
        memory: MemoryStore,
        on_progress: Optional[ProgressCallback] = None,
        cancel: Optional[CancelToken] = None,
        usage: Optional[TokenUsage] = None,
    ) -> ValidationResult:
        """Validate and record exactly one validation_passed/failed entry."""
        run = AgentRun(
            memory=memory,
            usage=usage if usage is not None else self.new_usage(),
            on_progress=on_progress,
            cancel=cancel,
        )
        result = await self._validate(request, run)

        self.write_memory(
            run,
            ActionType.VALIDATION_PASSED if result.success else ActionType.VALIDATION_FAILED,
            details={"completed_tasks": result.completed_tasks, "total_tasks": result.total_tasks},
        )
        logger.info(
            "validation_finished",
            success=result.success,
            completed_tasks=result.completed_tasks,
            total_tasks=result.total_tasks,
        )
        return result

    async def _validate(self, request: str, run: AgentRun) -> ValidationResult:
        entries = run.memory.get_all()
        actions = [entry for entry in entries if entry.action not in NON_ACTION_TYPES]
        errors = [entry for entry in entries if entry.action == ActionType.ERROR]

        if errors and not actions:
            error = errors[0].details.get("error") or "Unknown error"
            return self._result(run, False, 0, 1, f"I encountered an error: {error}")

        if not actions:
            return self._result(run, False, 0, 1, "No actions were taken")

        prompt = VALIDATOR_PROMPT_TEMPLATE.format(
            memory_context=format_memory_for_validation(actions),
            request=request,
        )
        response = await self.call_llm(
            run,
            [
                ChatMessage(role="system", content=prompt),
                ChatMessage(role="user", content=VALIDATOR_INSTRUCTION),
            ],
            max_tokens=200,
        )

        reply = response.text
        ratio = parse_completion_ratio(reply, len(actions))
        if ratio.pattern is None:
            logger.warning("validation_ratio_unparsed", action_count=len(actions))

        if ratio.success:
            message = f"✓ Completed {ratio.completed}/{ratio.total} tasks. {reply}"
        else:
            message = f"I was only able to complete {ratio.completed} out of {ratio.total} tasks. {reply}"
        return self._result(run, ratio.success, ratio.completed, ratio.total, message)

    def _result(self, run: AgentRun, success: bool, completed: int, total: int, message: str) -> ValidationResult:
        return ValidationResult(
            success=success,
            completed_tasks=completed,
            total_tasks=total,
            message=message,
            tokens_used=run.usage.total_tokens,
            cost=run.usage.cost,
        )
