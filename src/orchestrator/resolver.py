"""
src/orchestrator/resolver.py

Resolver: classify a decision against the registry and run the handler.
Pure classification/execution step, no retries.
"""


import logging

from pydantic import ValidationError

from orchestrator.models import (
    ArgumentsParseError,
    Executed,
    ExecutionError,
    ModelText,
    TextDecision,
    ToolCallDecision,
    ToolNotFound,
    ToolResolution,
)
from orchestrator.registry import ToolRegistry


logger = logging.getLogger(__name__)


def resolve_and_execute(decision: ToolCallDecision, registry: ToolRegistry) -> ToolResolution:
    """
    Steps:
      1) plain text -> ModelText
      2) unknown name -> ToolNotFound
      3) payload fails the argument model -> ArgumentsParseError
      4) handler raises -> ExecutionError, otherwise Executed
    """

    if isinstance(decision, TextDecision):
        return ModelText(text=decision.text)

    tool = registry.get(decision.name)
    if tool is None:
        logger.warning("Model requested unknown tool %s", decision.name)
        return ToolNotFound(requested=decision.name, suggestion=registry.suggest(decision.name))

    try:
        args = tool.parse_arguments(decision.arguments)
    except ValidationError as e:
        logger.warning("Bad arguments for %s: %s", tool.name, e)
        return ArgumentsParseError(name=tool.name, raw=decision.arguments, error=str(e))

    try:
        result = tool.execute(args)
    except Exception as e:
        logger.exception("Tool %s raised", tool.name)
        return ExecutionError(name=tool.name, error=str(e) or type(e).__name__)

    return Executed(name=tool.name, result=result)
