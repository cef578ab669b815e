"""
src/orchestrator/history.py

Conversation history: an ordered message log plus an optional system preamble
kept apart so callers can include or omit it per request.
"""


from typing import Any, Dict, List, Optional

from orchestrator.models import Message, Role


class ConversationHistory:
    """
    Ordered log of user / assistant / tool messages.

    The system message is stored separately. `messages()` never contains it;
    `messages_with_system()` places it first when one is set.
    """

    def __init__(self, system: Optional[str] = None):

        self._system: Optional[Message] = None
        self._messages: List[Message] = []
        if system is not None:
            self.set_system(system)

    def __len__(self) -> int:

        return len(self._messages)

    def __repr__(self) -> str:

        return f"ConversationHistory(system={self._system is not None}, messages={len(self._messages)})"

    @property
    def system(self) -> Optional[Message]:

        return self._system

    def set_system(self, content: str) -> "ConversationHistory":
        """Set or replace the system preamble."""

        self._system = Message(role=Role.SYSTEM, content=content)

        return self

    def clear_system(self) -> "ConversationHistory":

        self._system = None

        return self

    def add_user(self, content: str) -> "ConversationHistory":

        self._messages.append(Message(role=Role.USER, content=content))

        return self

    def add_assistant(self, content: str) -> "ConversationHistory":

        self._messages.append(Message(role=Role.ASSISTANT, content=content))

        return self

    def add_tool_result(self, name: str, content: str) -> "ConversationHistory":

        self._messages.append(Message(role=Role.TOOL, content=content, name=name))

        return self

    def truncate(self, length: int) -> "ConversationHistory":
        """Drop every message after the first `length`. The system preamble stays."""

        if length < 0:
            raise ValueError("length must not be negative")
        del self._messages[length:]

        return self

    def messages(self) -> List[Message]:
        """Copy of the log without the system preamble."""

        return list(self._messages)

    def messages_with_system(self) -> List[Message]:

        if self._system is None:
            return list(self._messages)

        return [self._system, *self._messages]

    def to_openai(self) -> List[Dict[str, Any]]:
        """Request payload: system first, then the log in insertion order."""

        return [m.to_openai() for m in self.messages_with_system()]
