"""
Document loading: read a file into memory and parse it as JSON5, so
comments, trailing commas, and unquoted keys are accepted.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import json5

from copilot.errors import CopilotError, DocumentNotFoundError, DocumentParseError


def parse_document(text: str, source: str = "<string>") -> Any:
    try:
        return json5.loads(text)
    except ValueError as exc:
        raise DocumentParseError(source, str(exc)) from exc


def load_document(path: str | Path) -> Any:
    """Read and parse the document at path (relative to the working directory)."""
    resolved = Path(path).expanduser().resolve()
    if not resolved.is_file():
        raise DocumentNotFoundError(str(path))
    try:
        text = resolved.read_text(encoding="utf-8")
    except UnicodeDecodeError as exc:
        raise DocumentParseError(str(path), str(exc)) from exc
    except OSError as exc:
        raise CopilotError(f"Unable to read file: {path} ({exc.strerror})") from exc
    return parse_document(text, source=str(path))
