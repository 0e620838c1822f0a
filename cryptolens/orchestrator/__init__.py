"""
Orchestration layer - intent resolution and query handling

Contains:
- IntentResolver: soft routing (LLM + rule fallback)
- QueryOrchestrator: the query entry point
- create_orchestrator: factory function
"""

from cryptolens.orchestrator.intent_resolver import IntentResolver, IntentPayload
from cryptolens.orchestrator.orchestrator import QueryOrchestrator, create_orchestrator

__all__ = [
    "IntentResolver",
    "IntentPayload",
    "QueryOrchestrator",
    "create_orchestrator",
]
