"""Agents for the dispatch pipeline."""

from .profiles import AgentProfile, ClassifierProfile, PromptCatalog
from .classifier import ClassifierAgent
from .dispatcher import AgentDispatcher
from .escalation import EscalationNotifier

__all__ = [
    "AgentProfile",
    "ClassifierProfile",
    "PromptCatalog",
    "ClassifierAgent",
    "AgentDispatcher",
    "EscalationNotifier",
]
