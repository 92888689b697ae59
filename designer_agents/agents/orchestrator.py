"""Orchestrator that coordinates classification, specialists and validation."""

import time
import uuid
from typing import List, Optional, Sequence

from designer_agents.agents.base import SpecialistAgent
from designer_agents.agents.classifier import Classifier
from designer_agents.agents.creator_agent import CreatorAgent
from designer_agents.agents.page_agent import PageAgent
from designer_agents.agents.types import (
    AgentProgressMessage,
    AgentResult,
    OrchestrationResult,
    ProgressCallback,
    ProgressType,
)
from designer_agents.agents.update_agent import UpdateAgent
from designer_agents.agents.validator import ValidatorAgent
from designer_agents.core.config import Settings, settings as default_settings
from designer_agents.core.logging import get_logger, request_scope
from designer_agents.core.pricing import ModelRegistry, TokenUsage
from designer_agents.llm.factory import create_llm_provider
from designer_agents.llm.types import CancelToken, LLMProvider
from designer_agents.memory.store import ActionType, MemoryStore
from designer_agents.tools import ToolContext, ToolRegistry, create_default_registry

logger = get_logger(__name__)

UNCLASSIFIED_MESSAGE = "I'm not sure how to handle that request. Could you please rephrase it?"


class _RequestTotals:
    """Token usage of every phase of one request."""

    def __init__(self, agent: ValidatorAgent):
        self._agent = agent
        self._usages: List[TokenUsage] = []
        self.memory_entries_created = 0

    def new_usage(self) -> TokenUsage:
        usage = self._agent.new_usage()
        self._usages.append(usage)
        return usage

    def add(self, result: AgentResult) -> None:
        self.memory_entries_created += result.memory_entries_created

    @property
    def tokens_used(self) -> int:
        return sum(usage.total_tokens for usage in self._usages)

    @property
    def cost(self) -> float:
        return sum(usage.cost for usage in self._usages)

    @property
    def llm_calls(self) -> int:
        return sum(usage.calls for usage in self._usages)


class AgentOrchestrator:
    """Runs one request through Classifier -> specialist agent(s) -> Validator.

    Every request gets its own empty memory log, so one orchestrator can
    serve concurrent requests. Steps of a
    multi-step plan run strictly in order, each with only its own
    instruction, and the first failing step ends the request.
    """

    def __init__(
        self,
        llm: LLMProvider,
        tools: ToolRegistry,
        models: ModelRegistry,
        model: str,
        multi_step_enabled: bool = True,
    ):
        self.model_config = models.get(model)
        pricing = self.model_config.pricing
        self.multi_step_enabled = multi_step_enabled
        self._last_memory = MemoryStore()

        self.page_agent = PageAgent(llm, pricing)
        self.creator_agent = CreatorAgent(llm, pricing)
        self.update_agent = UpdateAgent(llm, pricing)
        self.validator = ValidatorAgent(llm, pricing)

        # Classifier priority order: page, creation, modification
        self.specialists: Sequence[SpecialistAgent] = (self.page_agent, self.creator_agent, self.update_agent)
        self.classifier = Classifier(self.specialists, llm, pricing)

        for agent in self.specialists:
            self._inject_tools(agent, tools)

    @classmethod
    def from_settings(
        cls,
        config: Optional[Settings] = None,
        tools: Optional[ToolRegistry] = None,
        models: Optional[ModelRegistry] = None,
        llm: Optional[LLMProvider] = None,
    ) -> "AgentOrchestrator":
        """Build an orchestrator with the configured provider and default tools."""
        config = config or default_settings
        models = models or ModelRegistry()
        return cls(
            llm=llm or create_llm_provider(config, models),
            tools=tools or create_default_registry(),
            models=models,
            model=config.llm_model,
            multi_step_enabled=config.multi_step_enabled,
        )

    @property
    def memory(self) -> MemoryStore:
        """Memory log of the most recently started request."""
        return self._last_memory

    def _inject_tools(self, agent: SpecialistAgent, registry: ToolRegistry) -> None:
        found, missing = registry.resolve(agent.required_tools)
        if missing:
            logger.warning("agent_tools_missing", agent=agent.name, missing=missing)
        agent.set_tools(found)

    @staticmethod
    def _emit(on_progress: Optional[ProgressCallback], agent: str, type: ProgressType, message: str) -> None:
        if on_progress is not None:
            on_progress(AgentProgressMessage(agent=agent, type=type, message=message))

    async def handle_message(
        self,
        request: str,
        context: ToolContext,
        on_progress: Optional[ProgressCallback] = None,
        cancel: Optional[CancelToken] = None,
    ) -> OrchestrationResult:
        """Handle one user request end to end.

        Never raises for failures inside the request: unexpected exceptions
        (including cancellation) are recorded as an ``error`` memory entry and
        returned as a failed result.
        """
        with request_scope(uuid.uuid4().hex[:12]):
            return await self._run_request(request, context, on_progress, cancel)

    async def _run_request(
        self,
        request: str,
        context: ToolContext,
        on_progress: Optional[ProgressCallback],
        cancel: Optional[CancelToken],
    ) -> OrchestrationResult:
        started = time.monotonic()
        # One log per request
        memory = MemoryStore()
        self._last_memory = memory
        totals = _RequestTotals(self.validator)

        def finish(success: bool, message: str, validation=None) -> OrchestrationResult:
            result = OrchestrationResult(
                success=success,
                message=message,
                tokens_used=totals.tokens_used,
                cost=totals.cost,
                duration=time.monotonic() - started,
                memory_entries_created=totals.memory_entries_created,
                validation=validation,
                memory=memory,
            )
            logger.info(
                "request_finished",
                success=success,
                tokens_used=result.tokens_used,
                llm_calls=totals.llm_calls,
                cost=round(result.cost, 6),
                memory_entries=result.memory_entries_created,
                duration=round(result.duration, 3),
            )
            return result

        logger.info("request_started", request=request[:200])
        try:
            self._emit(on_progress, "Classifier", "progress", "Analyzing request...")

            steps = None
            if self.multi_step_enabled:
                steps = await self.classifier.classify_multi_step(request, memory, totals.new_usage(), cancel)

            if steps:
                workflow = " → ".join(step.agent for step in steps)
                self._emit(on_progress, "Classifier", "success", f"Multi-step workflow: {workflow}")

                for i, step in enumerate(steps, start=1):
                    logger.info("workflow_step", step=i, total_steps=len(steps), agent=step.agent)
                    agent = self.classifier.get_agent(step.agent)
                    result = await agent.execute(
                        step.instruction, context, memory, on_progress, cancel, totals.new_usage()
                    )
                    totals.add(result)
                    if not result.success:
                        logger.info("workflow_stopped", step=i, agent=step.agent)
                        return finish(False, result.message)
            else:
                agent_name = self.classifier.classify(request, memory)
                if agent_name is None:
                    self._emit(on_progress, "Classifier", "error", "Could not match the request to an agent")
                    return OrchestrationResult(
                        success=False,
                        message=UNCLASSIFIED_MESSAGE,
                        duration=time.monotonic() - started,
                        memory=memory,
                    )

                self._emit(on_progress, "Classifier", "success", f"Routing to {agent_name}")
                agent = self.classifier.get_agent(agent_name)
                result = await agent.execute(request, context, memory, on_progress, cancel, totals.new_usage())
                totals.add(result)
                if not result.success:
                    return finish(False, result.message)

            self._emit(on_progress, "ValidatorAgent", "progress", "Validating results...")
            validation = await self.validator.validate(request, memory, on_progress, cancel, totals.new_usage())
            totals.memory_entries_created += 1
            self._emit(
                on_progress,
                "ValidatorAgent",
                "success" if validation.success else "error",
                f"Completed {validation.completed_tasks}/{validation.total_tasks} tasks",
            )
            return finish(validation.success, validation.message, validation)

        except Exception as e:
            # Count entries written before the failure, including those of the agent that raised
            totals.memory_entries_created = len(memory)
            memory.write(agent="Orchestrator", action=ActionType.ERROR, details={"error": str(e)})
            logger.error("request_failed", error=str(e), error_type=type(e).__name__)
            return finish(False, f"Error: {e}")
