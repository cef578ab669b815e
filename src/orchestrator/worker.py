"""
src/orchestrator/worker.py

Worker bridge: one background thread that takes prompts from a request queue,
runs the multi-step loop to a terminal state and puts exactly one reply on the
response queue. Step events go to a third queue the foreground drains on its own.

The foreground never calls into the loop directly; it only touches the queues.
"""


import logging
import queue
import threading
import uuid
from typing import Callable, List, Optional

from pydantic import BaseModel, ConfigDict

from config import Settings, get_settings
from orchestrator import multi_step
from orchestrator.errors import OrchestratorError
from orchestrator.history import ConversationHistory
from orchestrator.models import Answer, Failure, Reply, StepEvent
from orchestrator.proposer import ModelClient
from orchestrator.registry import ToolRegistry


logger = logging.getLogger(__name__)


class PromptRequest(BaseModel):

    model_config = ConfigDict(frozen=True)

    request_id: str
    prompt: str


class WorkerBridge:
    """
    FIFO prompt processor on a dedicated daemon thread.

    Usage:
        bridge = WorkerBridge(client=OpenAIChatClient(settings), registry_factory=build_default_registry)
        bridge.start()
        rid = bridge.submit("what is X + Y?")
        ...
        reply = bridge.poll()   # None until the exchange finishes
    """

    def __init__(
        self,
        *,
        client: ModelClient,
        registry_factory: Callable[[], ToolRegistry],
        settings: Optional[Settings] = None,
        max_loops: Optional[int] = None,
        keep_history: Optional[bool] = None,
    ):

        self.settings = settings or get_settings()
        self.client = client
        self.registry_factory = registry_factory
        self.max_loops = self.settings.max_loops if max_loops is None else max_loops
        if self.max_loops < 1:
            raise ValueError("max_loops must be at least 1")
        self.keep_history = self.settings.keep_history if keep_history is None else keep_history

        self._requests: "queue.Queue[Optional[PromptRequest]]" = queue.Queue()
        self._replies: "queue.Queue[Reply]" = queue.Queue()
        self._events: "queue.Queue[StepEvent]" = queue.Queue()
        self._thread: Optional[threading.Thread] = None
        # Only touched from the worker thread once started
        self._history: Optional[ConversationHistory] = None

    # -------- Foreground side ------------------------------------------------

    @property
    def running(self) -> bool:

        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:

        if self.running:
            return
        self._thread = threading.Thread(target=self._loop, name="openai-worker", daemon=True)
        self._thread.start()
        logger.info("Worker started (max_loops=%d, keep_history=%s)", self.max_loops, self.keep_history)

    def stop(self, timeout: Optional[float] = None) -> None:
        """Ask the thread to exit after the queued prompts are done."""

        if self._thread is None:
            return
        self._requests.put(None)
        self._thread.join(timeout)
        if self._thread.is_alive():
            logger.warning("Worker still busy after %.1fs; leaving it to finish", timeout or 0.0)
            return
        self._thread = None
        logger.info("Worker stopped")

    def submit(self, prompt: str) -> str:
        """Queue a prompt and return its request id."""

        request = PromptRequest(request_id=uuid.uuid4().hex, prompt=prompt)
        self._requests.put(request)

        return request.request_id

    def poll(self) -> Optional[Reply]:
        """Non-blocking: the next reply, or None."""

        try:
            return self._replies.get_nowait()
        except queue.Empty:
            return None

    def wait(self, timeout: Optional[float] = None) -> Reply:
        """Blocking variant for one-shot CLI use. Raises queue.Empty on timeout."""

        return self._replies.get(timeout=timeout)

    def drain_events(self) -> List[StepEvent]:

        events: List[StepEvent] = []
        while True:
            try:
                events.append(self._events.get_nowait())
            except queue.Empty:
                return events

    # -------- Worker side ----------------------------------------------------

    def _loop(self) -> None:

        while True:
            request = self._requests.get()
            if request is None:
                return
            logger.info("Prompt received: id=%s len=%d", request.request_id, len(request.prompt))
            reply = self._process(request)
            self._replies.put(reply)
            logger.info("Reply sent: id=%s ok=%s", request.request_id, reply.ok)

    def _history_for_request(self) -> ConversationHistory:

        if not self.keep_history:
            return ConversationHistory(system=self.settings.system_prompt)
        if self._history is None:
            self._history = ConversationHistory(system=self.settings.system_prompt)

        return self._history

    def _rollback(self, history: ConversationHistory, mark: int) -> None:
        """A failed exchange leaves no prompt or tool results in a kept history."""

        if self.keep_history and len(history) > mark:
            logger.info("Dropping %d message(s) from the failed exchange", len(history) - mark)
            history.truncate(mark)

    def _process(self, request: PromptRequest) -> Reply:
        """Run one exchange to a terminal state; always produces exactly one reply."""

        history = self._history_for_request()
        mark = len(history)
        try:
            answer = multi_step.run(
                request.prompt,
                client=self.client,
                registry=self.registry_factory(),
                history=history,
                max_loops=self.max_loops,
                observer=self._events.put,
                request_id=request.request_id,
            )
        except OrchestratorError as e:
            self._rollback(history, mark)
            return Failure(request_id=request.request_id, kind=e.kind, message=str(e), tool_name=e.tool_name)
        except Exception as e:
            # A crash here would leave the foreground waiting forever
            logger.exception("Unexpected error while processing %s", request.request_id)
            self._rollback(history, mark)
            return Failure(request_id=request.request_id, kind="internal_error", message=str(e) or type(e).__name__)

        if self.keep_history:
            history.add_assistant(answer.final_text)

        return Answer(request_id=request.request_id, text=answer.final_text, steps=answer.steps)
