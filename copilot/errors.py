"""
Error Taxonomy

File and parse failures propagate to the CLI and end the invocation.
Enrichment failures never leave the explainer: they degrade to fallback text.
Evaluators do not raise at all; absent data becomes a finding.
"""

from __future__ import annotations


class CopilotError(Exception):
    """Base class for failures that terminate a `check` invocation."""


class DocumentNotFoundError(CopilotError):
    def __init__(self, path: str):
        self.path = path
        super().__init__(f"File not found: {path}")


class DocumentParseError(CopilotError):
    def __init__(self, path: str, reason: str = ""):
        self.path = path
        self.reason = reason
        super().__init__(f"Invalid JSON format in file: {path}")


class EnrichmentError(Exception):
    """Raised inside an explainer; always converted to fallback text."""

    def __init__(self, status: int, message: str, details: str | None = None):
        self.status = status
        self.message = message
        self.details = details
        super().__init__(f"{message} (status={status})")
