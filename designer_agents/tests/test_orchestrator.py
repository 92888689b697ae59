"""End-to-end tests for request orchestration."""

import asyncio
import json

import pytest

from designer_agents.agents.orchestrator import UNCLASSIFIED_MESSAGE, AgentOrchestrator
from designer_agents.core.config import Settings
from designer_agents.core.logging import request_id_var
from designer_agents.core.pricing import ModelRegistry, calculate_cost, estimate_tokens
from designer_agents.llm.types import CancelToken
from designer_agents.memory import ActionType
from designer_agents.tests.fakes import TEST_MODEL, FakeDocument, text_reply, tool_reply
from designer_agents.tools import ToolRegistry
from designer_agents.tools.page_tools import PAGE_TOOLS

PRICING_REQUEST = "Create a pricing page and add three pricing cards"


def _plan(*steps):
    return text_reply(json.dumps([{"agent": agent, "instruction": instruction} for agent, instruction in steps]))


class TestSingleAgentRequests:
    """Tests for requests routed to one specialist."""

    @pytest.mark.asyncio
    async def test_create_page_on_empty_document(self, orchestrator, empty_document, llm, progress):
        """Test that a page request on an empty document creates and validates one page."""
        llm.queue(
            tool_reply(("create_page", {"name": "Dashboard"})),
            text_reply("Completed 1/1 tasks. The Dashboard page was created."),
        )

        result = await orchestrator.handle_message("Create a dashboard page", empty_document, progress)

        assert result.success
        assert result.message.startswith("✓ Completed 1/1 tasks.")
        assert result.memory_entries_created == 2
        assert result.validation.completed_tasks == 1
        assert "No existing pages" in llm.requests[0]["messages"][1].content

        created = orchestrator.memory.search(action=ActionType.PAGE_CREATED)
        assert len(created) == 1
        assert created[0].details["name"] == "Dashboard"
        assert len(orchestrator.memory.search(action=ActionType.VALIDATION_PASSED)) == 1
        assert empty_document.current_page.name == "Dashboard"

    @pytest.mark.asyncio
    async def test_progress_sequence(self, orchestrator, document, llm, progress):
        """Test that the orchestrator brackets agent progress with classifier and validator messages."""
        llm.queue(tool_reply(("create_page", {"name": "Blog"})), text_reply("1/1 done"))

        await orchestrator.handle_message("Create a blog page", document, progress)

        assert [(m.type, m.message) for m in progress.of("Classifier")] == [
            ("progress", "Analyzing request..."),
            ("success", "Routing to PageAgent"),
        ]
        assert len(progress.terminal("PageAgent")) == 1
        assert [(m.type, m.message) for m in progress.of("ValidatorAgent")] == [
            ("progress", "Validating results..."),
            ("success", "Completed 1/1 tasks"),
        ]
        agents = [m.agent for m in progress.messages]
        assert agents.index("PageAgent") > agents.index("Classifier")
        assert agents[-2:] == ["ValidatorAgent", "ValidatorAgent"]

    @pytest.mark.asyncio
    async def test_add_card_routes_to_creator(self, orchestrator, document, llm, progress):
        """Test that a simple creation request routes to the creator agent."""
        markup = "<Card><CardBody><Text>Welcome back</Text></CardBody></Card>"
        llm.queue(
            text_reply('["Add a card"]'),
            tool_reply(("build_from_markup", {"markup": markup})),
            text_reply("Completed 1/1 tasks."),
        )

        result = await orchestrator.handle_message("Add a card", document, progress)

        assert result.success
        assert ("success", "Routing to CreatorAgent") in [(m.type, m.message) for m in progress.of("Classifier")]
        created = orchestrator.memory.search(action=ActionType.COMPONENT_CREATED)
        assert len(created) == 1
        assert created[0].agent == "CreatorAgent"
        assert created[0].entity_type == "Card"

    @pytest.mark.asyncio
    async def test_unclassified_request(self, orchestrator, document, llm, progress):
        """Test that an unroutable request fails without any cost."""
        result = await orchestrator.handle_message("What is the meaning of life?", document, progress)

        assert not result.success
        assert result.message == UNCLASSIFIED_MESSAGE
        assert result.tokens_used == 0
        assert result.cost == 0
        assert result.memory_entries_created == 0
        assert len(orchestrator.memory) == 0
        assert llm.requests == []
        assert progress.terminal("Classifier")[0].type == "error"

    @pytest.mark.asyncio
    async def test_agent_failure_skips_validation(self, orchestrator, document, llm):
        """Test that a failed tool ends the request before validation."""
        llm.queue(tool_reply(("delete_page", {"name": "Home"})))

        result = await orchestrator.handle_message("Delete the home page", document)

        assert not result.success
        assert result.message == "Cannot delete the only page"
        assert result.validation is None
        assert len(llm.requests) == 1

    @pytest.mark.asyncio
    async def test_partial_completion(self, orchestrator, document, llm):
        """Test that a validator shortfall fails the request."""
        llm.queue(
            text_reply('["Add three pricing cards"]'),
            tool_reply(("build_from_markup", {"markup": "<Grid columns={12}><Card /><Card /></Grid>"})),
            text_reply("Only 2 cards were created, the user asked for 3."),
        )

        result = await orchestrator.handle_message("Add three pricing cards", document)

        assert not result.success
        assert result.message.startswith("I was only able to complete 2 out of 3 tasks.")
        assert orchestrator.memory.search(action=ActionType.VALIDATION_FAILED)

    @pytest.mark.asyncio
    async def test_token_totals_cover_every_call(self, orchestrator, document, llm, pricing):
        """Test that totals include every LLM call of the request."""
        validator_reply = "Completed 1/1 tasks. All good."
        llm.queue(tool_reply(("create_page", {"name": "Blog"})), text_reply(validator_reply))

        result = await orchestrator.handle_message("Create a blog page", document)

        input_tokens = sum(
            estimate_tokens("\n".join(m.content for m in request["messages"])) for request in llm.requests
        )
        output_tokens = estimate_tokens(validator_reply)
        assert result.tokens_used == input_tokens + output_tokens
        assert result.cost == pytest.approx(
            input_tokens * pricing.input_per_million / 1e6 + output_tokens * pricing.output_per_million / 1e6
        )


class TestMultiStepRequests:
    """Tests for planned multi-step workflows."""

    @pytest.mark.asyncio
    async def test_steps_run_in_order(self, orchestrator, document, llm, progress):
        """Test that plan steps run sequentially with their own instructions."""
        llm.queue(
            _plan(("PageAgent", "Create a page called Pricing"), ("CreatorAgent", "Add three pricing cards")),
            tool_reply(("create_page", {"name": "Pricing"})),
            text_reply('["Add three pricing cards"]'),
            tool_reply(("build_from_markup", {"markup": "<Grid columns={12}><Card /><Card /><Card /></Grid>"})),
            text_reply("Completed 2/2 tasks."),
        )

        result = await orchestrator.handle_message(PRICING_REQUEST, document, progress)

        assert result.success
        assert result.memory_entries_created == 3
        assert [e.action for e in orchestrator.memory.get_all()] == [
            ActionType.PAGE_CREATED,
            ActionType.COMPONENT_CREATED,
            ActionType.VALIDATION_PASSED,
        ]
        # Each step sees only its own instruction
        assert llm.requests[1]["messages"][1].content.endswith("User request: Create a page called Pricing")
        assert llm.requests[2]["messages"][1].content == "Add three pricing cards"
        assert "Recently created page: Pricing" in llm.requests[3]["messages"][1].content
        # Cards land on the new page
        assert document.current_page.name == "Pricing"
        assert len(document.tree) == 1

        assert ("success", "Multi-step workflow: PageAgent → CreatorAgent") in [
            (m.type, m.message) for m in progress.of("Classifier")
        ]

    @pytest.mark.asyncio
    async def test_failing_step_stops_workflow(self, orchestrator, document, llm, pricing):
        """Test that later steps never run after a failure and every step that ran is charged."""
        replies = [
            _plan(
                ("PageAgent", "Create a page called Pricing"),
                ("CreatorAgent", "Add three pricing cards"),
                ("UpdateAgent", "Make the first card primary"),
            ),
            tool_reply(("create_page", {"name": "Pricing"})),
            text_reply('["Add three pricing cards"]'),
            tool_reply(("build_from_markup", {"markup": "<Card>"})),
        ]
        llm.queue(*replies)

        result = await orchestrator.handle_message(PRICING_REQUEST, document)

        assert not result.success
        assert result.message.startswith("Invalid markup")
        assert len(llm.requests) == 4
        assert result.memory_entries_created == 1
        assert [e.action for e in orchestrator.memory.get_all()] == [ActionType.PAGE_CREATED]

        input_tokens = sum(
            estimate_tokens("\n".join(m.content for m in request["messages"])) for request in llm.requests
        )
        output_tokens = sum(estimate_tokens(reply.text) for reply in replies)
        assert result.tokens_used == input_tokens + output_tokens
        assert result.cost == pytest.approx(calculate_cost(input_tokens, output_tokens, pricing))

    @pytest.mark.asyncio
    async def test_rejected_plan_falls_back_to_single_agent(self, orchestrator, document, llm, progress):
        """Test that an unusable plan falls back to keyword routing."""
        llm.queue(
            text_reply("I think this is one step."),
            tool_reply(("create_page", {"name": "Pricing"})),
            text_reply("Completed 1/1 tasks."),
        )

        result = await orchestrator.handle_message(PRICING_REQUEST, document, progress)

        assert result.success
        assert ("success", "Routing to PageAgent") in [(m.type, m.message) for m in progress.of("Classifier")]

    @pytest.mark.asyncio
    async def test_multi_step_disabled(self, llm, registry, document):
        """Test that planning can be switched off."""
        orchestrator = AgentOrchestrator(
            llm=llm, tools=registry, models=ModelRegistry(), model=TEST_MODEL, multi_step_enabled=False
        )
        llm.queue(tool_reply(("create_page", {"name": "Pricing"})), text_reply("Completed 1/1 tasks."))

        result = await orchestrator.handle_message(PRICING_REQUEST, document)

        assert result.success
        assert len(llm.requests) == 2


class TestFailures:
    """Tests for exceptions, cancellation and memory lifecycle."""

    @pytest.mark.asyncio
    async def test_tool_exception_becomes_error_entry(self, orchestrator, document, llm, progress, monkeypatch):
        """Test that an exception raised by a tool is recorded as an error entry."""
        def broken_create_page(name, route):
            raise RuntimeError("disk full")

        monkeypatch.setattr(document, "create_page", broken_create_page)
        llm.queue(tool_reply(("create_page", {"name": "Dashboard"})))

        result = await orchestrator.handle_message("Create a dashboard page", document, progress)

        assert not result.success
        assert result.message == "Error: disk full"
        assert result.validation is None
        entries = orchestrator.memory.get_all()
        assert [(e.agent, e.action) for e in entries] == [("Orchestrator", ActionType.ERROR)]
        assert entries[0].details == {"error": "disk full"}
        assert [(m.type, m.message) for m in progress.terminal("PageAgent")] == [("error", "disk full")]

    @pytest.mark.asyncio
    async def test_llm_exception_becomes_error_entry(self, orchestrator, document, llm):
        """Test that a transport exception is recorded as an error entry."""
        llm.queue(ConnectionError("upstream unavailable"))

        result = await orchestrator.handle_message("Create a dashboard page", document)

        assert result.message == "Error: upstream unavailable"
        assert orchestrator.memory.get_all()[-1].action is ActionType.ERROR

    @pytest.mark.asyncio
    async def test_cancelled_before_start(self, orchestrator, document, llm):
        """Test that a cancelled token aborts before any LLM call and charges nothing."""
        cancel = CancelToken()
        cancel.cancel("User cancelled")

        result = await orchestrator.handle_message("Add a card", document, cancel=cancel)

        assert not result.success
        assert result.message == "Error: User cancelled"
        assert llm.requests == []
        assert result.tokens_used == 0
        assert result.cost == 0
        assert orchestrator.memory.get_all()[-1].details == {"error": "User cancelled"}

    @pytest.mark.asyncio
    async def test_cancelled_while_waiting_on_llm(self, registry, document):
        """Test that cancelling interrupts an outstanding LLM call."""
        started = asyncio.Event()

        class HangingLLM:
            name = "hanging"

            async def chat(self, messages, tools=None, temperature=None, max_tokens=None):
                started.set()
                await asyncio.sleep(30)

        orchestrator = AgentOrchestrator(llm=HangingLLM(), tools=registry, models=ModelRegistry(), model=TEST_MODEL)
        cancel = CancelToken()
        task = asyncio.ensure_future(orchestrator.handle_message("Add a card", document, cancel=cancel))

        await asyncio.wait_for(started.wait(), timeout=1)
        cancel.cancel()
        result = await asyncio.wait_for(task, timeout=1)

        assert result.message == "Error: Request cancelled"
        assert document.tree == []

    @pytest.mark.asyncio
    async def test_memory_cleared_per_request(self, orchestrator, document, llm):
        """Test that memory never survives across requests."""
        llm.queue(tool_reply(("create_page", {"name": "One"})), text_reply("1/1"))
        first = await orchestrator.handle_message("Create page One", document)
        assert len(orchestrator.memory) == 2
        assert first.memory is orchestrator.memory

        second = await orchestrator.handle_message("What is the meaning of life?", document)
        assert len(orchestrator.memory) == 0
        assert second.memory is orchestrator.memory
        assert len(first.memory) == 2

    @pytest.mark.asyncio
    async def test_concurrent_requests_keep_separate_memory(self, registry):
        """Test that two requests in flight on one orchestrator never see each other's entries."""

        class InterleavingLLM:
            """Creates the page named in the request, yielding before every reply."""
            name = "interleaving"

            def __init__(self):
                self.validator_prompts = []

            async def chat(self, messages, tools=None, temperature=None, max_tokens=None):
                await asyncio.sleep(0)
                if tools:
                    page = "Alpha" if "Alpha" in messages[-1].content else "Beta"
                    return tool_reply(("create_page", {"name": page}))
                self.validator_prompts.append(messages[0].content)
                return text_reply("Completed 1/1 tasks.")

        llm = InterleavingLLM()
        orchestrator = AgentOrchestrator(llm=llm, tools=registry, models=ModelRegistry(), model=TEST_MODEL)

        alpha, beta = await asyncio.gather(
            orchestrator.handle_message("Create page Alpha", FakeDocument()),
            orchestrator.handle_message("Create page Beta", FakeDocument()),
        )

        for result, page in ((alpha, "Alpha"), (beta, "Beta")):
            assert result.success
            assert result.validation.total_tasks == 1
            assert [e.action for e in result.memory.get_all()] == [
                ActionType.PAGE_CREATED,
                ActionType.VALIDATION_PASSED,
            ]
            assert result.memory.get_all()[0].details["name"] == page
        assert len(llm.validator_prompts) == 2
        assert all(("Alpha" in p) != ("Beta" in p) for p in llm.validator_prompts)

    @pytest.mark.asyncio
    async def test_request_id_reset(self, orchestrator, document):
        """Test that the request id is unbound after the request."""
        await orchestrator.handle_message("What is the meaning of life?", document)
        assert request_id_var.get() is None


class TestConstruction:

    def test_missing_tools_leave_agent_without_them(self, llm):
        """Test that missing tools are non-fatal."""
        orchestrator = AgentOrchestrator(
            llm=llm, tools=ToolRegistry(PAGE_TOOLS), models=ModelRegistry(), model=TEST_MODEL
        )
        assert len(orchestrator.page_agent.tools) == 3
        assert orchestrator.creator_agent.tools == []

    def test_from_settings_uses_configured_model(self, llm):
        """Test building an orchestrator from settings."""
        config = Settings(llm_model="claude-sonnet-4-5", multi_step_enabled=False)
        orchestrator = AgentOrchestrator.from_settings(config, llm=llm)

        assert orchestrator.model_config.model == "claude-sonnet-4-5"
        assert orchestrator.multi_step_enabled is False
        assert orchestrator.page_agent.llm is llm
