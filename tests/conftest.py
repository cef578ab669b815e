"""Pytest fixtures for all test modules."""
import logging
from typing import Any, Dict, List, Sequence, Union

import pytest

from config import Settings
from orchestrator.models import Message, TextDecision, ToolCallDecision, ToolCallProposal
from orchestrator.registry import ToolDefinition, ToolRegistry
from tools.basic import build_add_tool, build_get_constants_tool


ScriptItem = Union[ToolCallDecision, Exception]


class ScriptedClient:
    """
    Stand-in for the model API. Returns (or raises) scripted items in order.
    With repeat_last=True the final item is returned forever.
    """

    def __init__(self, script: Sequence[ScriptItem], repeat_last: bool = False):
        self.script = list(script)
        self.repeat_last = repeat_last
        self.calls: List[List[Message]] = []
        self.tool_specs: List[List[Dict[str, Any]]] = []

    def propose(self, messages: List[Message], tools: List[Dict[str, Any]]) -> ToolCallDecision:
        self.calls.append(list(messages))
        self.tool_specs.append(tools)
        index = len(self.calls) - 1
        if index >= len(self.script):
            if not self.repeat_last:
                raise AssertionError(f"Unexpected model call #{index + 1}")
            index = len(self.script) - 1
        item = self.script[index]
        if isinstance(item, Exception):
            raise item
        return item


def text(value: str) -> TextDecision:
    return TextDecision(text=value)


def call(name: str, arguments: str = "{}") -> ToolCallProposal:
    return ToolCallProposal(name=name, arguments=arguments)


def _boom(_args):
    raise RuntimeError("kaboom")


@pytest.fixture
def boom_tool() -> ToolDefinition:
    return ToolDefinition(name="boom", description="Always fails", handler=_boom)


@pytest.fixture
def registry(boom_tool) -> ToolRegistry:
    return ToolRegistry([build_add_tool(), build_get_constants_tool(), boom_tool])


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        _env_file=None,
        docs_dir=tmp_path / "docs",
        log_dir=tmp_path / "logs",
        poll_interval_ms=5,
        max_loops=10,
    )


@pytest.fixture
def restore_root_logging():
    """Put the root logger back the way it was after configure_logging()."""
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    for handler in list(root.handlers):
        root.removeHandler(handler)
        if handler not in handlers:
            handler.close()
    for handler in handlers:
        root.addHandler(handler)
    root.setLevel(level)
