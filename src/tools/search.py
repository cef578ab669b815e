"""
src/tools/search.py — tavily_search tool

Web search through the Tavily HTTP API. Returns {"answer": ...} or {"error": ...}.
"""


import logging
from typing import Any, Dict, Optional

import httpx
from pydantic import BaseModel, ConfigDict, Field

from orchestrator.registry import ToolDefinition


logger = logging.getLogger(__name__)

TAVILY_URL = "https://api.tavily.com/search"
TAVILY_TIMEOUT = 15.0
DEFAULT_MAX_RESULTS = 5


class SearchArgs(BaseModel):

    model_config = ConfigDict(extra="forbid")

    query: str = Field(description="Search query string to send to Tavily")
    max_results: int = Field(default=DEFAULT_MAX_RESULTS, description="Maximum number of results to request (1-10)")


def tavily_search(query: str, max_results: int, api_key: str, client: Optional[httpx.Client] = None) -> str:
    """
    Run one search and return Tavily's answer text (or the raw JSON when there is none).

    Raises:
        ValueError: empty query
        httpx.HTTPError: transport failure or non-2xx status
    """

    query = query.strip()
    if not query:
        raise ValueError("query is empty")

    body = {
        "query": query,
        "max_results": min(max(max_results, 1), 10),
        "search_depth": "basic",
        "include_answer": True,
        "include_raw_content": False,
        "include_images": False,
        "topic": "general",
    }
    http = client or httpx.Client(timeout=TAVILY_TIMEOUT, headers={"User-Agent": "toolchat-tavily/0.1"})
    try:
        resp = http.post(TAVILY_URL, json=body, headers={"Authorization": f"Bearer {api_key}"})
        logger.debug("Tavily response: status=%s len=%d", resp.status_code, len(resp.text))
        resp.raise_for_status()
    finally:
        if client is None:
            http.close()

    try:
        data = resp.json()
    except ValueError:
        return resp.text

    answer = data.get("answer") if isinstance(data, dict) else None
    if isinstance(answer, str):
        return answer

    return resp.text


def build_tavily_search_tool(api_key: Optional[str], client: Optional[httpx.Client] = None) -> ToolDefinition:

    def handler(args: SearchArgs) -> Dict[str, Any]:
        if not api_key:
            return {"error": "TAVILY_API_KEY not set"}
        try:
            return {"answer": tavily_search(args.query, args.max_results, api_key, client=client)}
        except (ValueError, httpx.HTTPError) as e:
            logger.warning("tavily_search failed: %s", e)
            return {"error": str(e)}

    return ToolDefinition(
        name="tavily_search",
        description="Perform a web search via the Tavily API and return the answer (pass query, optional max_results).",
        args_model=SearchArgs,
        handler=handler,
    )
