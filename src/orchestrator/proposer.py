"""
src/orchestrator/proposer.py

Proposer: one model request per loop iteration, mapped to a ToolCallDecision.
Transport failures propagate unchanged; nothing is retried here.
"""


import logging
from typing import Any, Dict, List, Protocol

from orchestrator.history import ConversationHistory
from orchestrator.models import Message, ToolCallDecision, ToolCallProposal
from orchestrator.registry import ToolRegistry


logger = logging.getLogger(__name__)


class ModelClient(Protocol):
    """Anything that turns messages + tool specs into a decision (or raises TransportError)."""

    def propose(self, messages: List[Message], tools: List[Dict[str, Any]]) -> ToolCallDecision:
        ...


def propose_tool_call(client: ModelClient, history: ConversationHistory, registry: ToolRegistry) -> ToolCallDecision:
    """Ask the model for its next move given the full history (system first) and the registry's specs."""

    messages = history.messages_with_system()
    decision = client.propose(messages, registry.specs())

    if isinstance(decision, ToolCallProposal):
        logger.debug("Proposal: tool %s args=%s", decision.name, decision.arguments)
    else:
        logger.debug("Proposal: text (%d chars)", len(decision.text))

    return decision
