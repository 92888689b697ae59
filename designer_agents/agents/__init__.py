"""Specialist agents, classifier, validator and orchestrator."""

from .base import AgentRun, BaseAgent, SpecialistAgent
from .classifier import Classifier
from .creator_agent import CreatorAgent
from .orchestrator import AgentOrchestrator
from .page_agent import PageAgent
from .types import (
    AgentProgressMessage,
    AgentResult,
    AgentStep,
    OrchestrationResult,
    ValidationResult,
)
from .update_agent import UpdateAgent
from .validation_parser import parse_completion_ratio
from .validator import ValidatorAgent

__all__ = [
    "AgentOrchestrator",
    "AgentProgressMessage",
    "AgentResult",
    "AgentRun",
    "AgentStep",
    "BaseAgent",
    "Classifier",
    "CreatorAgent",
    "OrchestrationResult",
    "PageAgent",
    "SpecialistAgent",
    "UpdateAgent",
    "ValidationResult",
    "ValidatorAgent",
    "parse_completion_ratio",
]
