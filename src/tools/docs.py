"""
src/tools/docs.py — read_docs_file tool

Returns {"filename", "content", ("truncated", "max_bytes")?} or {"error": ...}.
Problems with the request are reported in the result so the model can see them.
"""


import logging
from pathlib import Path
from typing import Any, Dict

from pydantic import BaseModel, ConfigDict, Field

from context.loader import ALLOWED_DOCS, DocNotAllowed, load_doc
from orchestrator.registry import ToolDefinition


logger = logging.getLogger(__name__)


class ReadDocArgs(BaseModel):

    model_config = ConfigDict(extra="forbid")

    filename: str = Field(description=f"Target docs file name (one of {', '.join(ALLOWED_DOCS)})")


def read_docs_file(filename: str, docs_dir: Path) -> Dict[str, Any]:

    try:
        doc = load_doc(filename, docs_dir)
    except DocNotAllowed as e:
        return {"error": str(e)}
    except OSError as e:
        logger.warning("read_docs_file failed for %s: %s", filename, e)
        return {"error": f"read error: {e}"}

    if doc.truncated:
        return doc.model_dump()

    return {"filename": doc.filename, "content": doc.content}


def build_read_doc_tool(docs_dir: Path) -> ToolDefinition:

    return ToolDefinition(
        name="read_docs_file",
        description="Read a markdown file from the local docs directory and return its text content.",
        args_model=ReadDocArgs,
        handler=lambda args: read_docs_file(args.filename, docs_dir),
    )
