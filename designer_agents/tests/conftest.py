"""Pytest configuration and fixtures."""

import os

import pytest

# Set test environment before importing app modules
os.environ["LOG_LEVEL"] = "DEBUG"
os.environ["LOG_FORMAT"] = "text"
os.environ.pop("ANTHROPIC_API_KEY", None)

from designer_agents.agents.orchestrator import AgentOrchestrator
from designer_agents.core.logging import configure_logging
from designer_agents.core.pricing import ModelPricing, ModelRegistry
from designer_agents.memory.store import MemoryStore
from designer_agents.tests.fakes import TEST_MODEL, FakeDocument, ProgressRecorder, ScriptedLLM
from designer_agents.tools import create_default_registry


@pytest.fixture(scope="session", autouse=True)
def logging_configured():
    """Configure structlog once for the test session."""
    configure_logging()


@pytest.fixture
def pricing() -> ModelPricing:
    return ModelRegistry().get(TEST_MODEL).pricing


@pytest.fixture
def document() -> FakeDocument:
    return FakeDocument()


@pytest.fixture
def empty_document() -> FakeDocument:
    """Document without any pages."""
    return FakeDocument(pages=[])


@pytest.fixture
def memory() -> MemoryStore:
    return MemoryStore()


@pytest.fixture
def llm() -> ScriptedLLM:
    return ScriptedLLM()


@pytest.fixture
def registry():
    return create_default_registry()


@pytest.fixture
def progress() -> ProgressRecorder:
    return ProgressRecorder()


@pytest.fixture
def orchestrator(llm, registry) -> AgentOrchestrator:
    return AgentOrchestrator(llm=llm, tools=registry, models=ModelRegistry(), model=TEST_MODEL)
