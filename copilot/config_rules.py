"""
Config Evaluator

Checks a Turnkey client configuration for missing credentials, weak key
material, and an insecure API base URL. Every check runs; none short-circuits.
"""

from __future__ import annotations

import re
from typing import Any

from copilot.document import AnalysisResult, Document, json_block

Finding = tuple[str, str]

MIN_PRIVATE_KEY_LENGTH = 20
MIN_PUBLIC_KEY_LENGTH = 10
PUBLIC_KEY_MARKER = "TK"
PLACEHOLDER_MARKER = "$"
PRIVATE_KEY_ENV_SNIPPET = json_block(
    "{",
    '  "api_private_key": "${TURNKEY_API_PRIVATE_KEY}",',
    "  ...",
    "}",
)

# key -> (issue, suggestion lead-in, example value)
REQUIRED_FIELDS = {
    "org_id": (
        "Missing organization ID (org_id)",
        "Add your Turnkey organization ID to the configuration:",
        "your-org-id",
    ),
    "wallet_id": (
        "Missing wallet ID (wallet_id)",
        "Add your Turnkey wallet ID to the configuration:",
        "your-wallet-id",
    ),
    "api_public_key": (
        "Missing API public key (api_public_key)",
        "Add your Turnkey API public key to the configuration:",
        "your-api-public-key",
    ),
    "base_url": (
        "Missing base URL (base_url)",
        "Add the Turnkey API base URL to the configuration:",
        "https://api.turnkey.com",
    ),
}


def _missing_field(key: str) -> Finding:
    issue, lead, example = REQUIRED_FIELDS[key]
    return issue, lead + "\n" + json_block("{", f'  "{key}": "{example}",', "  ...", "}")


# ---------------------------------------------------------------------------
# Checks
# ---------------------------------------------------------------------------

def _check_org_id(cfg: Document) -> list[Finding]:
    return [_missing_field("org_id")] if cfg.get_str("org_id").missing else []


def _check_wallet_id(cfg: Document) -> list[Finding]:
    return [_missing_field("wallet_id")] if cfg.get_str("wallet_id").missing else []


def _check_public_key_present(cfg: Document) -> list[Finding]:
    return [_missing_field("api_public_key")] if cfg.get_str("api_public_key").missing else []


def _check_private_key(cfg: Document) -> list[Finding]:
    key = cfg.get_str("api_private_key")
    if key.missing:
        return [(
            "Missing API private key (api_private_key)",
            "Add your Turnkey API private key to the configuration. "
            "For security, consider using environment variables:\n" + PRIVATE_KEY_ENV_SNIPPET,
        )]
    if key.present and len(key.value) < MIN_PRIVATE_KEY_LENGTH and PLACEHOLDER_MARKER not in key.value:
        return [(
            "API private key appears to be invalid or too short",
            "Ensure your API private key is correctly formatted. "
            "For security, consider using environment variables:\n" + PRIVATE_KEY_ENV_SNIPPET,
        )]
    return []


def _check_base_url(cfg: Document) -> list[Finding]:
    url = cfg.get_str("base_url")
    if url.missing:
        return [_missing_field("base_url")]
    if url.present and not url.value.startswith("https://"):
        host = re.sub(r"^http://", "", url.value)
        return [(
            "Base URL should use HTTPS for security",
            "Update the base URL to use HTTPS:\n"
            + json_block("{", f'  "base_url": "https://{host}",', "  ...", "}"),
        )]
    return []


def _check_public_key_format(cfg: Document) -> list[Finding]:
    """Malformed public keys are the usual cause of 401s from the API."""
    public = cfg.get_str("api_public_key")
    private = cfg.get_str("api_private_key")
    if not (public.present and public.is_set and private.is_set):
        return []
    if PUBLIC_KEY_MARKER not in public.value or len(public.value) < MIN_PUBLIC_KEY_LENGTH:
        return [(
            "API public key format appears invalid (might cause 401 errors)",
            'Ensure your API public key starts with "TK" and is correctly '
            "formatted according to Turnkey documentation",
        )]
    return []


CONFIG_CHECKS = (
    _check_org_id,
    _check_wallet_id,
    _check_public_key_present,
    _check_private_key,
    _check_base_url,
    _check_public_key_format,
)


def analyze_config(data: Any) -> AnalysisResult:
    cfg = data if isinstance(data, Document) else Document(data)
    result = AnalysisResult()
    for check in CONFIG_CHECKS:
        for issue, suggestion in check(cfg):
            result.add(issue, suggestion)
    return result
