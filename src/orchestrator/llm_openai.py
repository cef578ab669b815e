"""
src/orchestrator/llm_openai.py

OpenAI client wrapper for function calling.
- propose(): one request with tools, mapped to a ToolCallDecision
- answer_once(): one request without tools, returns text
"""


import logging
from typing import Any, Dict, List, Optional

import openai
from openai import OpenAI

from config import Settings, get_settings
from orchestrator.errors import TransportError
from orchestrator.models import Message, Role, TextDecision, ToolCallDecision, ToolCallProposal


logger = logging.getLogger(__name__)

NO_CHOICES_TEXT = "(no response)"
EMPTY_CONTENT_TEXT = "(empty response)"


class OpenAIChatClient:
    """Thin wrapper over Chat Completions. The SDK client is created on first use."""

    def __init__(self, settings: Optional[Settings] = None, client: Optional[OpenAI] = None):

        self.settings = settings or get_settings()
        self._client = client

    @property
    def client(self) -> OpenAI:

        if self._client is None:
            self._client = OpenAI(api_key=self.settings.openai_api_key)

        return self._client

    def _request_kwargs(self) -> Dict[str, Any]:
        """Model plus the token limit field this model family accepts."""

        limit = self.settings.token_limit

        return {"model": self.settings.openai_model, limit.value: self.settings.token_limit_value}

    def call_model(self, messages: List[Dict[str, Any]], tools: Optional[List[Dict[str, Any]]] = None):
        """
        Low-level call to Chat Completions with optional tool specs.
        Returns the raw response object; SDK errors become TransportError.
        """

        kwargs = self._request_kwargs()
        if tools:
            kwargs["tools"] = tools
            kwargs["tool_choice"] = "auto"

        logger.info("Chat request: model=%s %s=%s tools=%d messages=%d",
                    kwargs["model"], self.settings.token_limit.value,
                    self.settings.token_limit_value, len(tools or []), len(messages))
        try:
            resp = self.client.chat.completions.create(messages=messages, **kwargs)
        except openai.APIError as e:
            logger.error("Chat request failed: %s", e)
            raise TransportError(str(e)) from e

        logger.debug("Chat response: %d choice(s)", len(resp.choices))

        return resp

    def propose(self, messages: List[Message], tools: List[Dict[str, Any]]) -> ToolCallDecision:
        """
        Send one request and map the first choice to a decision.
        Only the first tool call of a choice is honoured.
        """

        resp = self.call_model([m.to_openai() for m in messages], tools=tools)

        return extract_decision(resp)

    def answer_once(self, prompt: str) -> str:
        """Plain question/answer without tools or history."""

        messages = [
            Message(role=Role.SYSTEM, content=self.settings.system_prompt).to_openai(),
            Message(role=Role.USER, content=prompt).to_openai(),
        ]
        decision = extract_decision(self.call_model(messages))

        if isinstance(decision, TextDecision):
            return decision.text

        return EMPTY_CONTENT_TEXT


def extract_decision(resp) -> ToolCallDecision:
    """
    Normalize the response: a function tool call if present, otherwise text.
    Missing arguments are sent on as "{}".
    """

    if not resp.choices:
        return TextDecision(text=NO_CHOICES_TEXT)

    message = resp.choices[0].message
    tcs = getattr(message, "tool_calls", None) or []

    for tc in tcs:
        if tc.type == "function" and tc.function:
            return ToolCallProposal(name=tc.function.name, arguments=tc.function.arguments or "{}")

    return TextDecision(text=message.content or EMPTY_CONTENT_TEXT)
