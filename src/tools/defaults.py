"""
src/tools/defaults.py

The registry handed to the model by the terminal app.
"""


import random
from typing import Optional

from config import Settings, get_settings
from orchestrator.registry import ToolRegistry
from tools.basic import build_add_tool, build_get_constants_tool, build_number_guess_tool
from tools.docs import build_read_doc_tool
from tools.search import build_tavily_search_tool


NUMBER_GUESS_MAX = 10


def build_default_registry(settings: Optional[Settings] = None) -> ToolRegistry:

    settings = settings or get_settings()

    return ToolRegistry([
        build_get_constants_tool(),
        build_add_tool(),
        build_number_guess_tool(random.randint(1, NUMBER_GUESS_MAX), NUMBER_GUESS_MAX),
        build_read_doc_tool(settings.docs_dir),
        build_tavily_search_tool(settings.tavily_api_key),
    ])
