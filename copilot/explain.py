"""
Explanation Enricher

Turns an (issue, suggestion) pair into a plain-language explanation using
an OpenAI-compatible chat completions endpoint. Requests are made one at a
time, with no retries.

explain() never raises: a missing key short-circuits to a fixed message and
every failure degrades to fallback text.
"""

from __future__ import annotations

import logging
from typing import Optional, Protocol

import httpx
from pydantic import BaseModel, ValidationError

from copilot.errors import EnrichmentError
from copilot.settings import Settings

logger = logging.getLogger(__name__)

MISSING_KEY_TEXT = (
    "OpenAI API key not configured. Please set the OPENAI_API_KEY environment "
    "variable to enable detailed explanations."
)
EMPTY_RESPONSE_TEXT = "Unable to generate explanation."
FAILURE_TEXT = "Failed to generate explanation. Please check your OpenAI API key and try again."

SYSTEM_PROMPT = (
    "You are a helpful assistant that explains Turnkey API integration issues "
    "clearly and concisely."
)

PROMPT_TEMPLATE = """
You are an expert in Turnkey API integration and crypto wallet infrastructure.
Explain the following issue in simple terms and why it's important to fix:

Issue: {issue}

Suggested fix: {suggestion}

Provide a clear explanation of:
1. Why this issue occurs
2. What problems it might cause
3. How the suggested fix resolves the issue
4. Any additional context that would help a developer understand
"""


# ---------------------------------------------------------------------------
# Wire models
# ---------------------------------------------------------------------------

class ChatMessage(BaseModel):
    role: str
    content: Optional[str] = None


class ChatChoice(BaseModel):
    index: int = 0
    message: ChatMessage


class ChatCompletion(BaseModel):
    """Subset of a chat completions response body."""
    choices: list[ChatChoice] = []


# ---------------------------------------------------------------------------
# Explainers
# ---------------------------------------------------------------------------

class Explainer(Protocol):
    def explain(self, issue: str, suggestion: Optional[str]) -> str: ...


class StaticExplainer:
    """Returns the same text for every issue. Used offline and in tests."""

    def __init__(self, text: str = MISSING_KEY_TEXT):
        self.text = text
        self.calls: list[tuple[str, Optional[str]]] = []

    def explain(self, issue: str, suggestion: Optional[str]) -> str:
        self.calls.append((issue, suggestion))
        return self.text

    def __enter__(self) -> "StaticExplainer":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def close(self) -> None:
        pass


def parse_api_error(exc: Exception) -> EnrichmentError:
    """Normalize an httpx failure into status / message / details."""
    if isinstance(exc, httpx.HTTPStatusError):
        response = exc.response
        try:
            body = response.json()
        except ValueError:
            body = None
        message = "API Error"
        if isinstance(body, dict) and isinstance(body.get("error"), dict):
            message = body["error"].get("message") or message
        return EnrichmentError(
            status=response.status_code,
            message=message,
            details=response.text,
        )
    if isinstance(exc, httpx.RequestError):
        return EnrichmentError(
            status=0,
            message="No response received from server",
            details="This could be due to network issues or the server being down",
        )
    return EnrichmentError(status=0, message=str(exc) or "Unknown error", details=repr(exc))


class OpenAIExplainer:
    """
    Chat completions client.

    One httpx.Client per explainer; call close() when done, or use it as a
    context manager.
    """

    def __init__(self, settings: Settings, client: httpx.Client | None = None):
        """
        Args:
            settings: API key, base URL, model, and timeout
            client: preconfigured httpx client (tests pass a MockTransport)
        """
        self.settings = settings
        self.base_url = settings.openai_base_url.rstrip("/")
        self._client = client or httpx.Client(timeout=settings.openai_timeout_seconds)

    def __enter__(self) -> "OpenAIExplainer":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def close(self) -> None:
        self._client.close()

    def _request(self, issue: str, suggestion: Optional[str]) -> ChatCompletion:
        resp = self._client.post(
            f"{self.base_url}/chat/completions",
            json={
                "model": self.settings.openai_model,
                "messages": [
                    {"role": "system", "content": SYSTEM_PROMPT},
                    {
                        "role": "user",
                        "content": PROMPT_TEMPLATE.format(issue=issue, suggestion=suggestion or ""),
                    },
                ],
                "max_tokens": 500,
                "temperature": 0.7,
            },
            headers={"Authorization": f"Bearer {self.settings.openai_api_key}"},
        )
        resp.raise_for_status()
        return ChatCompletion.model_validate(resp.json())

    def explain(self, issue: str, suggestion: Optional[str]) -> str:
        if not self.settings.has_api_key:
            return MISSING_KEY_TEXT

        try:
            completion = self._request(issue, suggestion)
        except httpx.HTTPError as exc:
            err = parse_api_error(exc)
            logger.warning("Error generating explanation: %s", err, extra={"details": err.details})
            return FAILURE_TEXT
        except (ValueError, ValidationError) as exc:
            logger.warning("Error generating explanation: malformed response (%s)", exc)
            return FAILURE_TEXT
        except Exception as exc:
            logger.warning("Error generating explanation: %s", parse_api_error(exc))
            return FAILURE_TEXT

        if not completion.choices:
            return EMPTY_RESPONSE_TEXT
        return completion.choices[0].message.content or EMPTY_RESPONSE_TEXT


def build_explainer(settings: Settings | None = None) -> OpenAIExplainer:
    return OpenAIExplainer(settings or Settings.from_env())
