"""Page management agent."""

from typing import Optional

from designer_agents.agents.base import AgentRun, SpecialistAgent
from designer_agents.agents.keywords import is_page_request
from designer_agents.agents.prompts import PAGE_AGENT_PROMPT
from designer_agents.agents.types import AgentResult
from designer_agents.llm.types import ChatMessage, TextReply, ToolCall, ToolCallsReply
from designer_agents.memory.store import ActionType, MemoryStore
from designer_agents.tools.context import Page, ToolContext
from designer_agents.tools.registry import ToolResult


def describe_pages(context: ToolContext) -> str:
    if context.pages:
        listing = ", ".join(f'"{page.name}" (id: {page.id})' for page in context.pages)
        existing = f"Existing pages: {listing}"
    else:
        existing = "No existing pages"

    current = next((page for page in context.pages if page.id == context.current_page_id), None)
    if context.current_page_id:
        current_line = f"Currently on page: {current.name if current else 'Unknown'}"
    else:
        current_line = "No current page"
    return f"{existing}\n{current_line}"


class PageAgent(SpecialistAgent):
    """Creates, switches between and deletes pages."""

    name = "PageAgent"
    required_tools = ("create_page", "switch_page", "delete_page")

    def can_handle(self, request: str, memory: MemoryStore) -> bool:
        return is_page_request(request)

    async def _execute(self, request: str, run: AgentRun) -> AgentResult:
        self.emit(run, "progress", "Analyzing page operation...")
        context = run.context

        response = await self.call_llm(
            run,
            [
                ChatMessage(role="system", content=PAGE_AGENT_PROMPT),
                ChatMessage(role="user", content=f"{describe_pages(context)}\n\nUser request: {request}"),
            ],
            tools=self.tool_schemas(),
            max_tokens=1000,
        )

        if isinstance(response, ToolCallsReply):
            for call in response.calls:
                previous_page_id = context.current_page_id
                result = self.run_tool(run, call)
                if result is None:
                    continue
                if not result.success:
                    return self.tool_failure(run, result)
                self._record(run, call, result, previous_page_id)

        elif isinstance(response, TextReply) and response.content:
            self.emit(run, "progress", response.content)
            self._use_existing_page(run, response.content)

        return self.success_result(run, "Page operation completed")

    def _record(self, run: AgentRun, call: ToolCall, result: ToolResult, previous_page_id: Optional[str]) -> None:
        data = result.data
        if call.name == "create_page":
            self.write_memory(
                run,
                ActionType.PAGE_CREATED,
                entity_id=data.get("page_id"),
                entity_type="Page",
                details={"name": data.get("name", call.arguments.get("name"))},
            )
        elif call.name == "switch_page":
            self.write_memory(
                run,
                ActionType.PAGE_SWITCHED,
                entity_id=data.get("page_id"),
                entity_type="Page",
                details={"name": data.get("page_name"), "previous_page_id": previous_page_id},
            )
        elif call.name == "delete_page":
            self.write_memory(
                run,
                ActionType.PAGE_DELETED,
                entity_id=data.get("page_id"),
                entity_type="Page",
                details={"name": data.get("page_name")},
            )

    def _use_existing_page(self, run: AgentRun, content: str) -> None:
        """Switch to a page the model reported as already existing."""
        text = content.lower()
        if "already exists" not in text:
            return

        context = run.context
        existing: Optional[Page] = next((p for p in context.pages if p.name.lower() in text), None)
        if existing is None or existing.id == context.current_page_id:
            return

        previous_page_id = context.current_page_id
        context.set_current_page(existing.id)
        self.write_memory(
            run,
            ActionType.PAGE_SWITCHED,
            entity_id=existing.id,
            entity_type="Page",
            details={"name": existing.name, "reason": "used_existing", "previous_page_id": previous_page_id},
        )
        self.emit(run, "progress", f"Switched to existing {existing.name} page")
