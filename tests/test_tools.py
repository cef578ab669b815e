"""Tests for the built-in tools."""

import json

import httpx
import pytest

from context.loader import MAX_DOC_BYTES
from tools.basic import build_add_tool, build_get_constants_tool, build_number_guess_tool
from tools.defaults import build_default_registry
from tools.docs import build_read_doc_tool
from tools.search import TAVILY_URL, build_tavily_search_tool, tavily_search


def run_tool(tool, payload):
    return tool.execute(tool.parse_arguments(json.dumps(payload)))


class TestBasicTools:

    def test_get_constants(self):
        assert run_tool(build_get_constants_tool(), {}) == {"X": 42, "Y": 7}
        assert run_tool(build_get_constants_tool(1, 2), {}) == {"X": 1, "Y": 2}

    def test_add(self):
        assert run_tool(build_add_tool(), {"x": -5, "y": 12}) == {"sum": 7}

    @pytest.mark.parametrize("guess,expected", [
        (10, "low"),
        (77, "high"),
        (42, "correct"),
        (0, "out_of_range"),
        (101, "out_of_range"),
    ])
    def test_number_guess(self, guess, expected):
        tool = build_number_guess_tool(42, 100)

        assert run_tool(tool, {"guess": guess}) == {"result": expected}

    def test_number_guess_clamps_target(self):
        assert run_tool(build_number_guess_tool(50, 50), {"guess": 51}) == {"result": "out_of_range"}
        assert run_tool(build_number_guess_tool(0, 10), {"guess": 1}) == {"result": "correct"}
        assert run_tool(build_number_guess_tool(9, 0), {"guess": 1}) == {"result": "correct"}


class TestReadDocs:

    @pytest.fixture
    def docs_dir(self, tmp_path):
        (tmp_path / "usage.md").write_text("# Usage\nhello", encoding="utf-8")
        return tmp_path

    def test_reads_whitelisted_file(self, docs_dir):
        out = run_tool(build_read_doc_tool(docs_dir), {"filename": "usage.md"})

        assert out == {"filename": "usage.md", "content": "# Usage\nhello"}

    def test_not_whitelisted(self, docs_dir):
        out = run_tool(build_read_doc_tool(docs_dir), {"filename": "secrets.md"})

        assert "not allowed" in out["error"]

    def test_path_traversal(self, docs_dir):
        out = run_tool(build_read_doc_tool(docs_dir), {"filename": "../usage.md"})

        assert out == {"error": "invalid filename"}

    def test_missing_file(self, docs_dir):
        out = run_tool(build_read_doc_tool(docs_dir), {"filename": "tools.md"})

        assert out["error"].startswith("read error")

    def test_truncates_large_file(self, docs_dir):
        (docs_dir / "testing.md").write_text("x" * (MAX_DOC_BYTES + 100), encoding="utf-8")

        out = run_tool(build_read_doc_tool(docs_dir), {"filename": "testing.md"})

        assert out["truncated"] is True
        assert out["max_bytes"] == MAX_DOC_BYTES
        assert len(out["content"]) == MAX_DOC_BYTES


class TestTavilySearch:

    def make_http(self, handler):
        return httpx.Client(transport=httpx.MockTransport(handler))

    def test_returns_answer(self):
        seen = {}

        def handler(request):
            seen["auth"] = request.headers["Authorization"]
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json={"answer": "Oslo", "results": []})

        out = tavily_search(" capital of Norway ", 50, "key", client=self.make_http(handler))

        assert out == "Oslo"
        assert seen["auth"] == "Bearer key"
        assert seen["body"]["query"] == "capital of Norway"
        assert seen["body"]["max_results"] == 10

    def test_tool_without_key(self):
        tool = build_tavily_search_tool(None)

        assert run_tool(tool, {"query": "x"}) == {"error": "TAVILY_API_KEY not set"}

    def test_tool_reports_http_error(self):
        http = self.make_http(lambda request: httpx.Response(500, text="boom", request=request))
        tool = build_tavily_search_tool("key", client=http)

        out = run_tool(tool, {"query": "x"})

        assert "500" in out["error"]

    def test_tool_reports_empty_query(self):
        tool = build_tavily_search_tool("key", client=self.make_http(lambda r: httpx.Response(200, json={})))

        assert run_tool(tool, {"query": "   "}) == {"error": "query is empty"}

    def test_request_goes_to_tavily(self):
        urls = []

        def handler(request):
            urls.append(str(request.url))
            return httpx.Response(200, json={"answer": "ok"})

        tool = build_tavily_search_tool("key", client=self.make_http(handler))

        assert run_tool(tool, {"query": "x", "max_results": 0}) == {"answer": "ok"}
        assert urls == [TAVILY_URL]


class TestDefaultRegistry:

    def test_registers_all_tools(self, settings):
        registry = build_default_registry(settings)

        assert sorted(registry.names()) == ["add", "get_constants", "number_guess", "read_docs_file", "tavily_search"]
