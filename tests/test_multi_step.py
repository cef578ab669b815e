"""Unit tests for the multi-step tool-calling loop."""

import json

import pytest
from conftest import ScriptedClient, call, text

from config import get_settings
from orchestrator import multi_step
from orchestrator.errors import LoopExhaustedError, ToolCallError, TransportError
from orchestrator.history import ConversationHistory
from orchestrator.models import Role, StepKind


def _run(client, registry, **kwargs):
    events = []
    kwargs.setdefault("history", ConversationHistory(system="be brief"))
    answer = multi_step.run("question", client=client, registry=registry, observer=events.append, **kwargs)
    return answer, events


class TestTerminalText:

    def test_plain_text_first_call_is_one_step(self, registry):
        client = ScriptedClient([text("42")])

        answer, events = _run(client, registry)

        assert answer.final_text == "42"
        assert answer.steps == 1
        assert answer.resolutions == []
        assert [e.kind for e in events] == [StepKind.PROPOSED, StepKind.ANSWERED]

    def test_final_answer_not_appended(self, registry):
        history = ConversationHistory()
        client = ScriptedClient([text("42")])

        _run(client, registry, history=history)

        assert [m.role for m in history.messages()] == [Role.USER]

    def test_proposer_sees_system_first_then_prompt(self, registry):
        client = ScriptedClient([text("ok")])

        _run(client, registry)

        sent = client.calls[0]
        assert sent[0].role is Role.SYSTEM
        assert sent[1].role is Role.USER
        assert sent[1].content == "question"
        assert {s["function"]["name"] for s in client.tool_specs[0]} == {"add", "get_constants", "boom"}

    def test_fresh_history_starts_with_configured_system_prompt(self, registry):
        client = ScriptedClient([text("ok")])

        answer = multi_step.run("q", client=client, registry=registry)

        assert answer.steps == 1
        sent = client.calls[0]
        assert [m.role for m in sent] == [Role.SYSTEM, Role.USER]
        assert sent[0].content == get_settings().system_prompt

    def test_fresh_history_with_explicit_system_prompt(self, registry):
        client = ScriptedClient([text("ok")])

        multi_step.run("q", client=client, registry=registry, system_prompt="answer in haiku")

        assert client.calls[0][0].role is Role.SYSTEM
        assert client.calls[0][0].content == "answer in haiku"


class TestToolSteps:

    def test_n_tools_then_text(self, registry):
        history = ConversationHistory()
        client = ScriptedClient([
            call("get_constants"),
            call("add", '{"x": 42, "y": 7}'),
            text("X + Y = 49"),
        ])

        answer, events = _run(client, registry, history=history)

        assert answer.steps == 3
        assert answer.final_text == "X + Y = 49"
        tool_msgs = [m for m in history.messages() if m.role is Role.TOOL]
        assert [m.name for m in tool_msgs] == ["get_constants", "add"]
        assert json.loads(tool_msgs[0].content) == {"X": 42, "Y": 7}
        assert json.loads(tool_msgs[1].content) == {"sum": 49}
        assert [r.name for r in answer.resolutions] == ["get_constants", "add"]
        assert [e.kind for e in events] == [
            StepKind.PROPOSED, StepKind.EXECUTED,
            StepKind.PROPOSED, StepKind.EXECUTED,
            StepKind.PROPOSED, StepKind.ANSWERED,
        ]
        assert [e.step for e in events] == [1, 1, 2, 2, 3, 3]

    def test_tool_result_visible_to_next_proposal(self, registry):
        client = ScriptedClient([call("get_constants"), text("done")])

        _run(client, registry)

        second = client.calls[1]
        assert second[-1].role is Role.TOOL
        assert second[-1].name == "get_constants"

    def test_loop_exhausted(self, registry):
        client = ScriptedClient([call("get_constants")], repeat_last=True)

        with pytest.raises(LoopExhaustedError) as exc:
            _run(client, registry, max_loops=4)

        assert exc.value.max_loops == 4
        assert exc.value.kind == "loop_exhausted"
        assert len(client.calls) == 4

    def test_loop_exhausted_emits_failed_last(self, registry):
        client = ScriptedClient([call("get_constants")], repeat_last=True)
        events = []

        with pytest.raises(LoopExhaustedError):
            multi_step.run("q", client=client, registry=registry, max_loops=2, observer=events.append)

        assert events[-1].kind is StepKind.FAILED
        assert events[-1].error_kind == "loop_exhausted"
        assert sum(e.kind is StepKind.FAILED for e in events) == 1

    def test_max_loops_must_be_positive(self, registry):
        with pytest.raises(ValueError):
            multi_step.run("q", client=ScriptedClient([]), registry=registry, max_loops=0)


class TestFailures:

    def test_unknown_tool_is_terminal(self, registry):
        client = ScriptedClient([call("weather", '{"city": "Oslo"}')])
        events = []

        with pytest.raises(ToolCallError) as exc:
            multi_step.run("q", client=client, registry=registry, observer=events.append)

        assert exc.value.kind == "tool_not_found"
        assert exc.value.tool_name == "weather"
        assert len(client.calls) == 1
        assert events[-1].kind is StepKind.FAILED
        assert events[-1].tool_name == "weather"

    def test_bad_arguments_is_terminal(self, registry):
        client = ScriptedClient([call("add", "oops")])

        with pytest.raises(ToolCallError) as exc:
            multi_step.run("q", client=client, registry=registry)

        assert exc.value.kind == "arguments_parse_error"
        assert exc.value.tool_name == "add"

    def test_execution_error_is_terminal(self, registry):
        history = ConversationHistory()
        client = ScriptedClient([call("boom")])

        with pytest.raises(ToolCallError) as exc:
            multi_step.run("q", client=client, registry=registry, history=history)

        assert exc.value.kind == "execution_error"
        assert "kaboom" in str(exc.value)
        assert all(m.role is not Role.TOOL for m in history.messages())

    def test_transport_error_propagates_unchanged(self, registry):
        err = TransportError("connection reset")
        client = ScriptedClient([call("get_constants"), err])
        events = []

        with pytest.raises(TransportError) as exc:
            multi_step.run("q", client=client, registry=registry, observer=events.append)

        assert exc.value is err
        assert events[-1].kind is StepKind.FAILED
        assert events[-1].step == 2
        assert events[-1].error_kind == "transport_error"


class TestObserver:

    def test_observer_errors_do_not_fail_loop(self, registry):
        client = ScriptedClient([call("get_constants"), text("fine")])

        def broken(_event):
            raise RuntimeError("observer down")

        answer = multi_step.run("q", client=client, registry=registry, observer=broken)

        assert answer.final_text == "fine"

    def test_events_carry_request_id(self, registry):
        client = ScriptedClient([text("ok")])
        events = []

        multi_step.run("q", client=client, registry=registry, observer=events.append, request_id="r1")

        assert {e.request_id for e in events} == {"r1"}
