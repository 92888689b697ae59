"""Component modification agent."""

from designer_agents.agents.base import AgentRun, SpecialistAgent
from designer_agents.agents.keywords import is_modification_request
from designer_agents.agents.prompts import UPDATE_AGENT_PROMPT
from designer_agents.agents.types import AgentResult
from designer_agents.llm.types import ChatMessage, TextReply, ToolCall, ToolCallsReply
from designer_agents.memory.store import ActionType, MemoryStore
from designer_agents.tools.registry import ToolResult

RECENT_COMPONENTS = 3


class UpdateAgent(SpecialistAgent):
    """Updates, moves and deletes existing components."""

    name = "UpdateAgent"
    required_tools = ("component_update", "component_move", "component_delete")

    def can_handle(self, request: str, memory: MemoryStore) -> bool:
        return is_modification_request(request)

    def recent_components(self, run: AgentRun) -> str:
        created = self.search_memory(run, action=ActionType.COMPONENT_CREATED)
        if not created:
            return "No recent components in memory"
        recent = ", ".join(f"{entry.entity_type} ({entry.entity_id})" for entry in created[-RECENT_COMPONENTS:])
        return f"Recently created: {recent}"

    async def _execute(self, request: str, run: AgentRun) -> AgentResult:
        self.emit(run, "progress", "Analyzing update request...")

        response = await self.call_llm(
            run,
            [
                ChatMessage(role="system", content=UPDATE_AGENT_PROMPT),
                ChatMessage(role="user", content=f"{self.recent_components(run)}\n\nUser request: {request}"),
            ],
            tools=self.tool_schemas(),
            max_tokens=1000,
        )

        if isinstance(response, ToolCallsReply):
            for call in response.calls:
                result = self.run_tool(run, call)
                if result is None:
                    continue
                if not result.success:
                    return self.tool_failure(run, result)
                self._record(run, call, result)

        elif isinstance(response, TextReply) and response.content:
            self.emit(run, "progress", response.content)

        return self.success_result(run, "Component update completed")

    def _record(self, run: AgentRun, call: ToolCall, result: ToolResult) -> None:
        data = result.data
        entity_type = data.get("component_type", "Component")

        if call.name == "component_update":
            self.write_memory(
                run,
                ActionType.COMPONENT_UPDATED,
                entity_id=data.get("component_id"),
                entity_type=entity_type,
                details={"changes": data.get("changes", {})},
            )
        elif call.name == "component_move":
            self.write_memory(
                run,
                ActionType.COMPONENT_MOVED,
                entity_id=data.get("component_id"),
                entity_type=entity_type,
                details={
                    "from": data.get("from_parent_id"),
                    "to": data.get("to_parent_id"),
                    "position": data.get("position"),
                },
            )
        elif call.name == "component_delete":
            self.write_memory(
                run,
                ActionType.COMPONENT_DELETED,
                entity_id=data.get("component_ids") or data.get("component_id"),
                entity_type=entity_type,
                details={"count": data.get("count", 1)},
            )
