"""
Process-wide service instances, handed to endpoints as FastAPI dependencies.
"""
import logging
from typing import Optional

from unreplied.conversations.resolver import ConversationResolver
from unreplied.db.postgres import get_sql
from unreplied.reputation.orchestrator import ReputationOrchestrator, build_orchestrator

logger = logging.getLogger(__name__)

# Global orchestrator; the caches live as long as the process
orchestrator: Optional[ReputationOrchestrator] = None


def init_reputation() -> ReputationOrchestrator:
    global orchestrator
    orchestrator = build_orchestrator()
    return orchestrator


def get_orchestrator() -> ReputationOrchestrator:
    if orchestrator is None:
        return init_reputation()
    return orchestrator


def get_resolver() -> ConversationResolver:
    return ConversationResolver(get_sql())
