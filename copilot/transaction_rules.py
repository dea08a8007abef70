"""
Transaction Evaluator

Checks an ACTIVITY_TYPE_SIGN_TRANSACTION_V2 request: top-level envelope
fields, then the signing parameters. When the parameters object is missing,
its sub-field checks are skipped entirely.
"""

from __future__ import annotations

import re
import time
from typing import Any, Callable

from copilot.classifier import SIGN_TRANSACTION_ACTIVITY
from copilot.document import AnalysisResult, Document, json_block

Finding = tuple[str, str]

ETHEREUM = "TRANSACTION_TYPE_ETHEREUM"
SUPPORTED_CHAINS = [ETHEREUM, "TRANSACTION_TYPE_SOLANA", "TRANSACTION_TYPE_BITCOIN"]
ETHEREUM_ADDRESS_LENGTH = 42
HEX_PAYLOAD = re.compile(r"(0x)?[0-9a-f]+", re.IGNORECASE)

NEXT_STEPS = (
    "Your transaction signing request looks valid! Here's how to use it with Turnkey:\n\n"
    "1. Use the Turnkey API to submit this request:\n"
    "```bash\n"
    "turnkey request --path /public/v1/submit/sign_transaction --body '<your-json-content>' --key-name your-key-name\n"
    "```\n\n"
    '2. From the response, extract the "signedTransaction" value:\n'
    "```json\n"
    "{\n"
    '  "activity": {\n'
    '    "result": {\n'
    '      "signTransactionResult": {\n'
    '        "signedTransaction": "0x..." // This is what you need\n'
    "      }\n"
    "    }\n"
    "  }\n"
    "}\n"
    "```\n\n"
    "3. Broadcast the signed transaction to the blockchain network using etherscan:\n"
    "https://etherscan.io/tx/0x...\n\n"
    "4. Track your transaction on a blockchain explorer like Etherscan"
)


def _now_ms() -> int:
    return int(time.time() * 1000)


# ---------------------------------------------------------------------------
# Envelope checks
# ---------------------------------------------------------------------------

def _check_organization(tx: Document) -> list[Finding]:
    if tx.get_str("organizationId").missing:
        return [(
            "Missing organizationId field",
            "Add your Turnkey organization ID to the request:\n"
            + json_block("{", '  "organizationId": "your-org-id",', "  ...", "}"),
        )]
    return []


def _check_activity_type(tx: Document) -> list[Finding]:
    activity = tx.get_str("type")
    if activity.missing:
        return [(
            "Missing type field",
            "Add the activity type to the request:\n"
            + json_block("{", f'  "type": "{SIGN_TRANSACTION_ACTIVITY}",', "  ...", "}"),
        )]
    if activity.raw != SIGN_TRANSACTION_ACTIVITY:
        return [(
            f"Unsupported transaction type: {activity.raw}",
            f'Use "{SIGN_TRANSACTION_ACTIVITY}" for the type field:\n'
            + json_block("{", f'  "type": "{SIGN_TRANSACTION_ACTIVITY}",', "  ...", "}"),
        )]
    return []


def _check_timestamp(tx: Document, now_ms: Callable[[], int]) -> list[Finding]:
    if tx.get_str("timestampMs").missing:
        return [(
            "Missing timestampMs field",
            "Add a current timestamp in milliseconds:\n"
            + json_block("{", f'  "timestampMs": "{now_ms()}",', "  ...", "}"),
        )]
    return []


# ---------------------------------------------------------------------------
# Parameter checks
# ---------------------------------------------------------------------------

def _check_chain(params: Document) -> list[Finding]:
    chain = params.get_str("type")
    if chain.missing:
        return [(
            "Missing transaction type in parameters",
            "Add the transaction type to parameters:\n"
            + json_block('"parameters": {', f'  "type": "{ETHEREUM}",', "  ...", "}"),
        )]
    if chain.raw not in SUPPORTED_CHAINS:
        return [(
            f"Unsupported blockchain type: {chain.raw}",
            f"Use one of the supported blockchain types: {', '.join(SUPPORTED_CHAINS)}",
        )]
    return []


def _check_sign_with(params: Document) -> list[Finding]:
    address = params.get_str("signWith")
    if address.missing:
        return [(
            "Missing signWith address in parameters",
            "Add the address to sign with:\n"
            + json_block('"parameters": {', '  "signWith": "your-blockchain-address",', "  ...", "}"),
        )]
    if params.get("type") == ETHEREUM:
        value = address.value if address.present else ""
        if not value.startswith("0x") or len(value) != ETHEREUM_ADDRESS_LENGTH:
            return [(
                "Invalid Ethereum address format",
                'Ethereum addresses should start with "0x" and be 42 characters long',
            )]
    return []


def _check_unsigned_transaction(params: Document) -> list[Finding]:
    payload = params.get_str("unsignedTransaction")
    if payload.missing:
        return [(
            "Missing unsignedTransaction in parameters",
            "Add the unsigned transaction hex:\n"
            + json_block('"parameters": {', '  "unsignedTransaction": "your-unsigned-transaction-hex",', "  ...", "}"),
        )]
    if not (payload.present and HEX_PAYLOAD.fullmatch(payload.value)):
        return [(
            "Invalid transaction hex format",
            'Transaction hex should contain only hexadecimal characters, optionally starting with "0x"',
        )]
    return []


PARAMETER_CHECKS = (
    _check_chain,
    _check_sign_with,
    _check_unsigned_transaction,
)


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

def analyze_transaction(data: Any, now_ms: Callable[[], int] = _now_ms) -> AnalysisResult:
    """
    Evaluate a transaction signing request.

    Args:
        data: parsed request (dict or Document)
        now_ms: clock used for the timestampMs example in suggestions

    Returns:
        AnalysisResult; a clean request carries one "next steps" suggestion.
    """
    tx = data if isinstance(data, Document) else Document(data)
    findings: list[Finding] = []
    findings.extend(_check_organization(tx))
    findings.extend(_check_activity_type(tx))
    findings.extend(_check_timestamp(tx, now_ms))

    if tx.get_mapping("parameters").missing:
        findings.append((
            "Missing parameters object",
            "Add the parameters object with transaction details:\n"
            + json_block(
                "{",
                '  "parameters": {',
                f'    "type": "{ETHEREUM}",',
                '    "signWith": "your-ethereum-address",',
                '    "unsignedTransaction": "your-unsigned-transaction-hex"',
                "  },",
                "  ...",
                "}",
            ),
        ))
    else:
        params = tx.child("parameters")
        for check in PARAMETER_CHECKS:
            findings.extend(check(params))

    result = AnalysisResult()
    for issue, suggestion in findings:
        result.add(issue, suggestion)
    if result.passed:
        result.note(NEXT_STEPS)
    return result
