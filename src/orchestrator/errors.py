"""
src/orchestrator/errors.py

Terminal errors of a multi-step exchange. Each carries a stable `kind` tag
that the worker copies into its Failure reply.
"""


from typing import Optional

from orchestrator.models import ToolFailure


class OrchestratorError(Exception):

    kind: str = "orchestrator_error"
    tool_name: Optional[str] = None


class TransportError(OrchestratorError):
    """Network, timeout or API status failure from the model client. Never retried here."""

    kind = "transport_error"


class ToolCallError(OrchestratorError):
    """A tool request that could not be resolved or executed."""

    def __init__(self, resolution: ToolFailure):

        super().__init__(resolution.describe())
        self.resolution = resolution
        self.kind = resolution.kind
        self.tool_name = resolution.name


class LoopExhaustedError(OrchestratorError):

    kind = "loop_exhausted"

    def __init__(self, max_loops: int):

        super().__init__(f"No final answer after {max_loops} steps")
        self.max_loops = max_loops
