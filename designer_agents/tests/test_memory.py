"""Tests for the per-request memory log."""

import dataclasses
import time

import pytest

from designer_agents.memory import ActionType, MemoryQuery, MemoryStore


class TestMemoryWrite:
    """Tests for appending entries."""

    def test_write_generates_id_and_timestamp(self, memory):
        before = time.time()
        entry = memory.write(agent="PageAgent", action="page_created", entity_id="page-1")

        assert entry.id.startswith("mem-")
        assert entry.timestamp >= before
        assert entry.action is ActionType.PAGE_CREATED
        assert memory.get_all() == [entry]

    def test_ids_are_unique(self, memory):
        ids = {memory.write(agent="A", action="component_created").id for _ in range(100)}
        assert len(ids) == 100

    def test_entries_are_immutable(self, memory):
        entry = memory.write(agent="A", action="page_created")
        with pytest.raises(dataclasses.FrozenInstanceError):
            entry.agent = "B"

    def test_details_are_copied(self, memory):
        details = {"name": "Dashboard"}
        entry = memory.write(agent="A", action="page_created", details=details)
        details["name"] = "Changed"
        assert entry.details["name"] == "Dashboard"

    def test_list_entity_id_becomes_tuple(self, memory):
        entry = memory.write(agent="A", action="component_created", entity_id=["n1", "n2"])
        assert entry.entity_id == ("n1", "n2")
        assert entry.to_dict()["entity_id"] == ["n1", "n2"]

    def test_unknown_action_rejected(self, memory):
        with pytest.raises(ValueError):
            memory.write(agent="A", action="user_request")


class TestMemorySearch:
    """Tests for filtered search."""

    @pytest.fixture
    def populated(self, memory):
        memory.write(agent="PageAgent", action="page_created", entity_id="page-1", entity_type="Page")
        memory.write(agent="CreatorAgent", action="component_created", entity_id=["n1", "n2"], entity_type="Card")
        memory.write(agent="CreatorAgent", action="component_created", entity_id="n3", entity_type="DataViews")
        memory.write(agent="UpdateAgent", action="component_updated", entity_id="n1", entity_type="Card")
        return memory

    def test_empty_query_returns_everything_in_order(self, populated):
        assert populated.search() == populated.get_all()
        assert populated.search(MemoryQuery()) == populated.get_all()

    def test_filters_are_combined(self, populated):
        results = populated.search(agent="CreatorAgent", entity_type="Card")
        assert len(results) == 1
        assert results[0].entity_id == ("n1", "n2")

    def test_entity_id_matches_inside_lists(self, populated):
        results = populated.search(entity_id="n1")
        assert [e.action for e in results] == [ActionType.COMPONENT_CREATED, ActionType.COMPONENT_UPDATED]

    def test_latest_returns_single_most_recent(self, populated):
        results = populated.search(action=ActionType.COMPONENT_CREATED, latest=True)
        assert len(results) == 1
        assert results[0].entity_id == "n3"

    def test_latest_with_no_match_is_empty(self, populated):
        assert populated.search(action="page_deleted", latest=True) == []

    def test_since_is_strictly_greater(self, memory):
        first = memory.write(agent="A", action="page_created")
        time.sleep(0.001)
        second = memory.write(agent="A", action="page_switched")
        assert memory.search(since=first.timestamp) == [second]


class TestMemoryLifecycle:
    """Tests for get, clear and the performance contract."""

    def test_get_by_id(self, memory):
        entry = memory.write(agent="A", action="page_created")
        assert memory.get(entry.id) is entry
        assert memory.get("mem-missing") is None

    def test_clear_empties_log(self, memory):
        memory.write(agent="A", action="page_created")
        memory.clear()
        assert memory.get_all() == []
        assert len(memory) == 0

    def test_get_all_returns_copy(self, memory):
        memory.write(agent="A", action="page_created")
        memory.get_all().clear()
        assert len(memory) == 1

    def test_linear_scan_is_fast_enough(self):
        store = MemoryStore()
        start = time.perf_counter()
        for i in range(1000):
            store.write(agent="A", action="component_created", entity_id=f"n{i}")
        for i in range(0, 1000, 100):
            store.search(entity_id=f"n{i}", latest=True)
        assert time.perf_counter() - start < 0.1
