"""
src/context/loader.py

Read-only access to the local docs directory served by the read_docs_file tool.
Only whitelisted file names are readable; content is capped at MAX_DOC_BYTES.
"""


from pathlib import Path
from typing import Optional, Tuple

from pydantic import BaseModel


ALLOWED_DOCS: Tuple[str, ...] = ("usage.md", "tools.md", "configuration.md", "testing.md")
MAX_DOC_BYTES = 16 * 1024


class DocNotAllowed(ValueError):
    pass


class DocFile(BaseModel):

    filename: str
    content: str
    truncated: bool = False
    max_bytes: Optional[int] = None


def _truncate_utf8(raw: bytes, limit: int) -> str:
    """Cut to `limit` bytes without splitting a multi-byte character."""

    return raw[:limit].decode("utf-8", errors="ignore")


def load_doc(filename: str, docs_dir: Path, max_bytes: int = MAX_DOC_BYTES) -> DocFile:
    """
    Load one whitelisted markdown file.

    Raises:
        DocNotAllowed: name has a path separator or is not whitelisted.
        FileNotFoundError: the file is whitelisted but missing on disk.
    """

    if "/" in filename or "\\" in filename:
        raise DocNotAllowed("invalid filename")
    if filename not in ALLOWED_DOCS:
        raise DocNotAllowed(f"filename not allowed: {filename}")

    path = docs_dir / filename
    if not path.exists():
        raise FileNotFoundError(f"Docs file not found: {path}")

    raw = path.read_bytes()
    if len(raw) <= max_bytes:
        return DocFile(filename=filename, content=raw.decode("utf-8", errors="replace"))

    return DocFile(filename=filename, content=_truncate_utf8(raw, max_bytes), truncated=True, max_bytes=max_bytes)
