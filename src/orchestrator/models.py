"""
src/orchestrator/models.py

Pydantic models for messages, tool-call decisions, resolutions, step events and replies.
"""


import json
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


# -------- Messages -------------------------------------------------------------


class Role(str, Enum):

    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"
    TOOL = "tool"


class Message(BaseModel):
    """One immutable entry of a conversation."""

    model_config = ConfigDict(frozen=True)

    role: Role
    content: str
    name: Optional[str] = None  # origin tool for TOOL messages

    def to_openai(self) -> Dict[str, Any]:
        """Chat Completions shape. Tool results go out as legacy function messages."""

        if self.role is Role.TOOL:
            return {"role": "function", "name": self.name, "content": self.content}

        return {"role": self.role.value, "content": self.content}


# -------- Decisions ------------------------------------------------------------


class TextDecision(BaseModel):

    model_config = ConfigDict(frozen=True)

    kind: Literal["text"] = "text"
    text: str


class ToolCallProposal(BaseModel):

    model_config = ConfigDict(frozen=True)

    kind: Literal["tool_call"] = "tool_call"
    name: str
    arguments: str  # raw JSON payload as sent by the model


ToolCallDecision = Union[TextDecision, ToolCallProposal]


# -------- Resolutions ----------------------------------------------------------


class ModelText(BaseModel):

    model_config = ConfigDict(frozen=True)

    kind: Literal["model_text"] = "model_text"
    text: str


class Executed(BaseModel):

    model_config = ConfigDict(frozen=True)

    kind: Literal["executed"] = "executed"
    name: str
    result: Any

    def result_json(self) -> str:
        """Serialize the handler's result for a tool-result message."""

        value = self.result.model_dump(mode="json") if isinstance(self.result, BaseModel) else self.result

        return json.dumps(value, ensure_ascii=False, default=str)


class ToolNotFound(BaseModel):

    model_config = ConfigDict(frozen=True)

    kind: Literal["tool_not_found"] = "tool_not_found"
    requested: str
    suggestion: Optional[str] = None

    @property
    def name(self) -> str:

        return self.requested

    def describe(self) -> str:

        hint = f" (did you mean '{self.suggestion}'?)" if self.suggestion else ""

        return f"Unknown tool '{self.requested}'{hint}"


class ArgumentsParseError(BaseModel):

    model_config = ConfigDict(frozen=True)

    kind: Literal["arguments_parse_error"] = "arguments_parse_error"
    name: str
    raw: str
    error: str

    def describe(self) -> str:

        return f"Could not parse arguments for tool '{self.name}': {self.error}"


class ExecutionError(BaseModel):

    model_config = ConfigDict(frozen=True)

    kind: Literal["execution_error"] = "execution_error"
    name: str
    error: str

    def describe(self) -> str:

        return f"Tool '{self.name}' failed: {self.error}"


ToolFailure = Union[ToolNotFound, ArgumentsParseError, ExecutionError]
ToolResolution = Union[ModelText, Executed, ToolNotFound, ArgumentsParseError, ExecutionError]


# -------- Step events ----------------------------------------------------------


class StepKind(str, Enum):

    PROPOSED = "proposed"
    EXECUTED = "executed"
    ANSWERED = "answered"
    FAILED = "failed"


class StepEvent(BaseModel):
    """Record of one loop transition. Built fresh per transition and never mutated."""

    model_config = ConfigDict(frozen=True)

    kind: StepKind
    step: int
    detail: str = ""
    tool_name: Optional[str] = None
    error_kind: Optional[str] = None
    request_id: Optional[str] = None
    ts: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    def __str__(self) -> str:

        tool = f" tool={self.tool_name}" if self.tool_name else ""

        return f"[{self.step}] {self.kind.value}{tool} {self.detail}".rstrip()


# -------- Results --------------------------------------------------------------


class MultiStepAnswer(BaseModel):

    final_text: str
    steps: int
    resolutions: List[Executed] = Field(default_factory=list)


class Answer(BaseModel):
    """Successful worker reply."""

    model_config = ConfigDict(frozen=True)

    ok: Literal[True] = True
    request_id: str
    text: str
    steps: int


class Failure(BaseModel):
    """Structured worker reply for any terminal error."""

    model_config = ConfigDict(frozen=True)

    ok: Literal[False] = False
    request_id: str
    kind: str
    message: str
    tool_name: Optional[str] = None


Reply = Union[Answer, Failure]
