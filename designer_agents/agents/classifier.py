"""Request classification.

``classify`` routes a request to one specialist with keyword rules and costs
nothing. ``classify_multi_step`` asks the LLM for an ordered plan, but only
when the request both contains a conjunction and matches more than one agent.
"""

import re
from typing import Dict, List, Optional, Sequence

from pydantic import BaseModel, TypeAdapter, ValidationError

from designer_agents.agents.base import AgentRun, BaseAgent, SpecialistAgent
from designer_agents.agents.keywords import has_conjunction
from designer_agents.agents.prompts import PLANNER_PROMPT
from designer_agents.agents.types import AgentStep
from designer_agents.core.logging import get_logger
from designer_agents.core.pricing import ModelPricing, TokenUsage
from designer_agents.llm.types import CancelToken, ChatMessage, LLMProvider
from designer_agents.memory.store import MemoryStore

logger = get_logger(__name__)

_CODE_FENCE = re.compile(r"^```(?:json)?\s*|\s*```$")


class PlanStep(BaseModel):
    agent: str
    instruction: str


_PLAN = TypeAdapter(List[PlanStep])


def strip_code_fence(text: str) -> str:
    return _CODE_FENCE.sub("", text.strip())


class Classifier(BaseAgent):
    """Routes requests to specialist agents in fixed priority order."""

    name = "Classifier"

    def __init__(self, agents: Sequence[SpecialistAgent], llm: LLMProvider, pricing: ModelPricing):
        super().__init__(llm, pricing)
        self.agents = list(agents)
        self._by_name: Dict[str, SpecialistAgent] = {agent.name: agent for agent in self.agents}

    def get_agent(self, name: str) -> Optional[SpecialistAgent]:
        return self._by_name.get(name)

    def capable_agents(self, request: str, memory: MemoryStore) -> List[str]:
        return [agent.name for agent in self.agents if agent.can_handle(request, memory)]

    def classify(self, request: str, memory: MemoryStore) -> Optional[str]:
        """Name of the first agent that can handle ``request``, or None."""
        if not request or not request.strip():
            return None

        for agent in self.agents:
            if agent.can_handle(request, memory):
                logger.info("request_classified", agent=agent.name)
                return agent.name

        logger.info("request_unclassified", request=request[:200])
        return None

    async def classify_multi_step(
        self,
        request: str,
        memory: MemoryStore,
        usage: Optional[TokenUsage] = None,
        cancel: Optional[CancelToken] = None,
    ) -> Optional[List[AgentStep]]:
        """Plan a multi-step workflow, or None when one agent suffices.

        Tokens are charged to ``usage`` only when the LLM is consulted.
        """
        if not request or not request.strip() or not has_conjunction(request):
            return None

        capable = self.capable_agents(request, memory)
        if len(capable) < 2:
            return None

        run = AgentRun(memory=memory, usage=usage if usage is not None else self.new_usage(), cancel=cancel)
        response = await self.call_llm(
            run,
            [
                ChatMessage(role="system", content=PLANNER_PROMPT),
                ChatMessage(role="user", content=request),
            ],
            temperature=0.3,
            max_tokens=500,
        )

        steps = self.parse_plan(response.text)
        if steps is None or len(steps) < 2:
            logger.info("multi_step_rejected", capable=capable, steps=len(steps) if steps else 0)
            return None

        logger.info("multi_step_planned", agents=[step.agent for step in steps])
        return steps

    def parse_plan(self, content: str) -> Optional[List[AgentStep]]:
        """Parse a JSON plan. Unknown agents or malformed JSON yield None."""
        try:
            raw_steps = _PLAN.validate_json(strip_code_fence(content))
        except ValidationError as e:
            logger.warning("multi_step_plan_invalid", error=str(e)[:200])
            return None

        steps = []
        for step in raw_steps:
            if step.agent not in self._by_name:
                logger.warning("multi_step_unknown_agent", agent=step.agent)
                return None
            if not step.instruction.strip():
                return None
            steps.append(AgentStep(agent=step.agent, instruction=step.instruction.strip()))
        return steps
