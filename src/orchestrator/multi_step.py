"""
src/orchestrator/multi_step.py

Multi-step loop: Propose -> Resolve -> (append tool result, repeat) until the
model answers in plain text, a tool request fails, or the step budget runs out.

Propose and execute alternate until the exchange is done or failed.
Every transition emits exactly one StepEvent to the optional observer.
"""


import logging
from typing import Callable, List, Optional

from config import DEFAULT_MAX_LOOPS, get_settings
from orchestrator.errors import LoopExhaustedError, OrchestratorError, ToolCallError
from orchestrator.history import ConversationHistory
from orchestrator.models import Executed, ModelText, MultiStepAnswer, StepEvent, StepKind
from orchestrator.proposer import ModelClient, propose_tool_call
from orchestrator.registry import ToolRegistry
from orchestrator.resolver import resolve_and_execute


logger = logging.getLogger(__name__)

StepObserver = Callable[[StepEvent], None]


class _Emitter:
    """Builds events for one exchange and hands them to the observer."""

    def __init__(self, observer: Optional[StepObserver], request_id: Optional[str]):

        self.observer = observer
        self.request_id = request_id

    def __call__(self, kind: StepKind, step: int, detail: str = "", **fields) -> None:

        event = StepEvent(kind=kind, step=step, detail=detail, request_id=self.request_id, **fields)
        logger.debug("Step event: %s", event)
        if self.observer is None:
            return
        try:
            self.observer(event)
        except Exception:
            # An observer must never fail the loop
            logger.exception("Step observer raised on %s", event.kind.value)


def run(
    prompt: str,
    *,
    client: ModelClient,
    registry: ToolRegistry,
    history: Optional[ConversationHistory] = None,
    max_loops: int = DEFAULT_MAX_LOOPS,
    observer: Optional[StepObserver] = None,
    request_id: Optional[str] = None,
    system_prompt: Optional[str] = None,
) -> MultiStepAnswer:
    """
    Entry point: append `prompt` to `history` and loop until a terminal state.
    Without a history, a fresh one is started with `system_prompt` (the
    configured prompt when omitted).

    Returns a MultiStepAnswer on DONE. Raises TransportError, ToolCallError or
    LoopExhaustedError on FAILED. The history is borrowed: tool results are
    appended to it, the final answer is not.
    """

    if max_loops < 1:
        raise ValueError("max_loops must be at least 1")

    if history is None:
        history = ConversationHistory(system=system_prompt or get_settings().system_prompt)
    history.add_user(prompt)
    emit = _Emitter(observer, request_id)
    executed: List[Executed] = []

    logger.info("Multi-step start: max_loops=%d tools=%d", max_loops, len(registry))

    for step in range(1, max_loops + 1):
        try:
            decision = propose_tool_call(client, history, registry)
        except OrchestratorError as e:
            emit(StepKind.FAILED, step, str(e), error_kind=e.kind)
            raise
        emit(StepKind.PROPOSED, step, decision.kind, tool_name=getattr(decision, "name", None))

        resolution = resolve_and_execute(decision, registry)

        if isinstance(resolution, ModelText):
            emit(StepKind.ANSWERED, step, f"{len(resolution.text)} chars")
            logger.info("Multi-step done: steps=%d executed=%d", step, len(executed))
            return MultiStepAnswer(final_text=resolution.text, steps=step, resolutions=executed)

        if isinstance(resolution, Executed):
            history.add_tool_result(resolution.name, resolution.result_json())
            executed.append(resolution)
            emit(StepKind.EXECUTED, step, "ok", tool_name=resolution.name)
            continue

        error = ToolCallError(resolution)
        emit(StepKind.FAILED, step, str(error), tool_name=error.tool_name, error_kind=error.kind)
        logger.error("Multi-step failed at step %d: %s", step, error)
        raise error

    exhausted = LoopExhaustedError(max_loops)
    emit(StepKind.FAILED, max_loops, str(exhausted), error_kind=exhausted.kind)
    logger.error("Multi-step failed: %s", exhausted)
    raise exhausted
