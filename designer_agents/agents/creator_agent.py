"""Component creation agent.

A request is first decomposed into independent sub-requests ("pricing cards
and testimonials" becomes two), then each sub-request gets its own
tool-augmented LLM call. When the model only asks for design guidance, one
follow-up call is made with the guidance attached as tool results.
"""

import re
from typing import Any, Dict, List, Optional, Tuple

from pydantic import TypeAdapter, ValidationError

from designer_agents.agents.base import AgentRun, SpecialistAgent
from designer_agents.agents.classifier import strip_code_fence
from designer_agents.agents.keywords import is_creation_request
from designer_agents.agents.prompts import CREATOR_AGENT_PROMPT, DECOMPOSER_PROMPT
from designer_agents.agents.types import AgentResult
from designer_agents.core.logging import get_logger
from designer_agents.llm.types import ChatMessage, RequestCancelledError, TextReply, ToolCall, ToolCallsReply
from designer_agents.memory.store import ActionType, MemoryStore
from designer_agents.tools.registry import ToolResult

logger = get_logger(__name__)

_SUB_REQUESTS = TypeAdapter(List[str])

_CARD_TAG = re.compile(r"<Card\b")
_LEAF_TAG = re.compile(r"<(Card|Button|Text|Heading|DataViews)\b")


def get_entity_type(tool_name: str, arguments: Dict[str, Any]) -> str:
    """Entity type recorded for a creation tool call."""
    if tool_name == "table_create":
        return "DataViews"
    markup = arguments.get("markup") or ""
    if "<Card" in markup:
        return "Card"
    if "<Button" in markup:
        return "Button"
    if "<Grid" in markup:
        return "Grid"
    return "Component"


def estimate_component_count(arguments: Dict[str, Any]) -> int:
    """Count Cards, else leaf components; containers are not counted."""
    markup = arguments.get("markup")
    if not markup:
        return 1
    cards = len(_CARD_TAG.findall(markup))
    if cards:
        return cards
    leaves = len(_LEAF_TAG.findall(markup))
    return leaves or 1


class CreatorAgent(SpecialistAgent):
    """Creates components, sections and data tables."""

    name = "CreatorAgent"
    required_tools = ("build_from_markup", "table_create", "design_get_heuristics")

    def can_handle(self, request: str, memory: MemoryStore) -> bool:
        return is_creation_request(request)

    def page_context(self, run: AgentRun) -> str:
        recent = self.search_memory(run, action=ActionType.PAGE_CREATED, latest=True)
        if recent:
            entry = recent[0]
            return f"Recently created page: {entry.details.get('name')} ({entry.entity_id})"
        return f"Current page: {run.context.current_page_id}"

    async def decompose(self, run: AgentRun, request: str) -> List[str]:
        """Split ``request`` into sub-requests; falls back to ``[request]``."""
        try:
            response = await self.call_llm(
                run,
                [
                    ChatMessage(role="system", content=DECOMPOSER_PROMPT),
                    ChatMessage(role="user", content=request),
                ],
                temperature=0.3,
                max_tokens=300,
            )
        except RequestCancelledError:
            raise
        except Exception as e:
            logger.warning("decomposition_failed", agent=self.name, error=str(e))
            return [request]

        content = response.text.strip()
        if not content:
            return [request]

        try:
            sub_requests = _SUB_REQUESTS.validate_json(strip_code_fence(content))
        except ValidationError:
            logger.info("decomposition_unparsed", agent=self.name, content=content[:200])
            return [request]

        sub_requests = [item.strip() for item in sub_requests if item.strip()]
        return sub_requests or [request]

    async def _execute(self, request: str, run: AgentRun) -> AgentResult:
        self.emit(run, "progress", "Analyzing component creation request...")
        page_context = self.page_context(run)

        self.emit(run, "progress", "Decomposing request...")
        sub_requests = await self.decompose(run, request)
        multiple = len(sub_requests) > 1
        if multiple:
            self.emit(run, "progress", f"Split into {len(sub_requests)} sub-requests")

        for i, sub_request in enumerate(sub_requests, start=1):
            if multiple:
                self.emit(run, "progress", f"[{i}/{len(sub_requests)}] Creating: {sub_request}")
            else:
                self.emit(run, "progress", "Preparing to create components...")

            failure = await self._create(run, sub_request, page_context)
            if failure is not None:
                return failure

        if multiple:
            return self.success_result(run, f"Created {len(sub_requests)} component groups")
        return self.success_result(run, "Component creation completed")

    async def _create(self, run: AgentRun, sub_request: str, page_context: str) -> Optional[AgentResult]:
        """Handle one sub-request. Returns an error result, or None on success."""
        messages = [
            ChatMessage(role="system", content=CREATOR_AGENT_PROMPT),
            ChatMessage(role="user", content=f"{page_context}\n\nUser request: {sub_request}"),
        ]
        response = await self.call_llm(run, messages, tools=self.tool_schemas(), max_tokens=1500)

        if isinstance(response, TextReply):
            if response.content:
                self.emit(run, "progress", response.content)
            return None

        guidance: List[Tuple[ToolCall, ToolResult]] = []
        action_executed = False
        for call in response.calls:
            result = self.run_tool(run, call)
            if result is None:
                continue
            if not result.success:
                return self.tool_failure(run, result)
            if run.executor.get(call.name).is_action:
                action_executed = True
                self._record(run, call, result, sub_request)
            else:
                guidance.append((call, result))

        if not guidance or action_executed:
            return None

        self.emit(run, "progress", "Generating markup with design heuristics...")
        follow_up_messages = messages + [
            ChatMessage(role="assistant", content=response.content or "", tool_calls=[c for c, _ in guidance]),
        ] + [
            ChatMessage(role="tool", content=result.message, tool_call_id=call.id) for call, result in guidance
        ]
        follow_up = await self.call_llm(
            run,
            follow_up_messages,
            tools=self.tool_schemas(),
            temperature=0.7,
            max_tokens=2000,
        )

        if isinstance(follow_up, ToolCallsReply):
            for call in follow_up.calls:
                result = self.run_tool(run, call)
                if result is None:
                    continue
                if not result.success:
                    return self.tool_failure(run, result)
                if run.executor.get(call.name).is_action:
                    self._record(run, call, result, sub_request)
        elif follow_up.content:
            self.emit(run, "progress", follow_up.content)
        return None

    def _record(self, run: AgentRun, call: ToolCall, result: ToolResult, sub_request: str) -> None:
        data = result.data
        self.write_memory(
            run,
            ActionType.COMPONENT_CREATED,
            entity_id=data.get("component_ids") or data.get("component_id") or "unknown",
            entity_type=get_entity_type(call.name, call.arguments),
            details={
                **data,
                "method": call.name,
                "template": call.arguments.get("template"),
                "count": estimate_component_count(call.arguments),
                "sub_request": sub_request,
            },
        )
