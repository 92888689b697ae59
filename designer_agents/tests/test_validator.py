"""Tests for the validator and its completion-ratio parser."""

import pytest

from designer_agents.agents.validation_parser import has_negative_indicator, parse_completion_ratio
from designer_agents.agents.validator import ValidatorAgent, format_memory_for_validation
from designer_agents.memory import ActionType
from designer_agents.tests.fakes import text_reply


class TestCompletionRatio:
    """Golden cases for parsing validator replies."""

    @pytest.mark.parametrize(
        "content, action_count, expected",
        [
            ("Completed 3/3 tasks successfully.", 1, (3, 3, True, "fraction")),
            ("Completed 2 / 3 tasks.", 1, (2, 3, False, "fraction")),
            ("2 out of 3 cards were created.", 5, (2, 3, False, "out_of")),
            ("Created 2 cards instead of 3.", 1, (2, 3, False, "instead_of")),
            ("Only 2 cards exist but the user wanted 3", 1, (2, 3, False, "only")),
            ("Completed 3/2 tasks.", 1, (2, 2, True, "fraction")),
            ("All requested components were created.", 4, (4, 4, True, None)),
        ],
    )
    def test_golden_cases(self, content, action_count, expected):
        ratio = parse_completion_ratio(content, action_count)
        assert (ratio.completed, ratio.total, ratio.success, ratio.pattern) == expected

    def test_zero_total_falls_through(self):
        ratio = parse_completion_ratio("Step 1/0 done, 2 out of 2 finished", 1)
        assert (ratio.completed, ratio.total, ratio.pattern) == (2, 2, "out_of")

    def test_negative_phrase_fails_full_ratio(self):
        ratio = parse_completion_ratio("Completed 1/1 tasks, but the layout is incomplete.", 1)
        assert ratio.completed == ratio.total == 1
        assert not ratio.success

    def test_negative_indicators(self):
        assert has_negative_indicator("I was Only Able to add one")
        assert not has_negative_indicator("Everything looks good")


class TestFormatMemory:

    def test_includes_count_and_origin(self, memory):
        memory.write(
            agent="CreatorAgent",
            action=ActionType.COMPONENT_CREATED,
            entity_type="Card",
            details={"count": 3, "method": "build_from_markup", "sub_request": "three pricing cards"},
        )
        memory.write(agent="PageAgent", action=ActionType.PAGE_CREATED, entity_type="Page", details={"name": "X"})

        assert format_memory_for_validation(memory.get_all()) == (
            "- component created: Card (count: 3) [method: build_from_markup, sub_request: three pricing cards]\n"
            "- page created: Page"
        )


class TestValidatorAgent:
    """Tests for the validator agent."""

    @pytest.fixture
    def validator(self, llm, pricing):
        return ValidatorAgent(llm, pricing)

    @pytest.mark.asyncio
    async def test_no_actions(self, validator, memory, llm):
        result = await validator.validate("Add a card", memory)

        assert not result.success
        assert (result.completed_tasks, result.total_tasks) == (0, 1)
        assert result.message == "No actions were taken"
        assert result.tokens_used == 0
        assert llm.requests == []

        entry = memory.get_all()[-1]
        assert entry.action is ActionType.VALIDATION_FAILED
        assert entry.agent == "ValidatorAgent"
        assert entry.details == {"completed_tasks": 0, "total_tasks": 1}

    @pytest.mark.asyncio
    async def test_error_only(self, validator, memory, llm):
        memory.write(agent="Orchestrator", action=ActionType.ERROR, details={"error": "timeout"})
        result = await validator.validate("Add a card", memory)

        assert result.message == "I encountered an error: timeout"
        assert (result.completed_tasks, result.total_tasks) == (0, 1)
        assert llm.requests == []

    @pytest.mark.asyncio
    async def test_passed(self, validator, memory, llm):
        memory.write(agent="PageAgent", action=ActionType.PAGE_CREATED, entity_type="Page")
        llm.queue(text_reply("Completed 1/1 tasks. The page was created."))

        result = await validator.validate("Create a dashboard page", memory)

        assert result.success
        assert result.message == "✓ Completed 1/1 tasks. Completed 1/1 tasks. The page was created."
        assert result.tokens_used > 0
        assert llm.requests[0]["max_tokens"] == 200
        assert "- page created: Page" in llm.requests[0]["messages"][0].content
        assert "Create a dashboard page" in llm.requests[0]["messages"][0].content

        passed = memory.search(action=ActionType.VALIDATION_PASSED)
        assert len(passed) == 1
        assert passed[0].details == {"completed_tasks": 1, "total_tasks": 1}

    @pytest.mark.asyncio
    async def test_partial(self, validator, memory, llm):
        memory.write(agent="CreatorAgent", action=ActionType.COMPONENT_CREATED, entity_type="Card")
        llm.queue(text_reply("Only 2 cards were created instead of 3."))

        result = await validator.validate("Add three cards", memory)

        assert not result.success
        assert result.message.startswith("I was only able to complete 2 out of 3 tasks.")
        assert memory.search(action=ActionType.VALIDATION_FAILED, latest=True)[0].details == {
            "completed_tasks": 2,
            "total_tasks": 3,
        }

    @pytest.mark.asyncio
    async def test_unparsed_reply_confirms_every_action(self, validator, memory, llm):
        memory.write(agent="PageAgent", action=ActionType.PAGE_CREATED)
        memory.write(agent="CreatorAgent", action=ActionType.COMPONENT_CREATED)
        llm.queue(text_reply("Looks great."))

        result = await validator.validate("Create a page with a card", memory)

        assert result.success
        assert (result.completed_tasks, result.total_tasks) == (2, 2)

    @pytest.mark.asyncio
    async def test_errors_and_previous_validations_not_counted(self, validator, memory, llm):
        memory.write(agent="CreatorAgent", action=ActionType.COMPONENT_CREATED)
        memory.write(agent="Orchestrator", action=ActionType.ERROR, details={"error": "x"})
        memory.write(agent="ValidatorAgent", action=ActionType.VALIDATION_FAILED)
        llm.queue(text_reply("Done."))

        result = await validator.validate("Add a card", memory)
        assert result.total_tasks == 1
