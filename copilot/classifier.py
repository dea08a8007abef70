"""
Document Classifier

Tags a parsed document as a transaction signing request, a policy, or a
configuration file. First match wins; anything unrecognized is a config.
"""

from __future__ import annotations

from typing import Any

from copilot.document import Document, DocumentKind

SIGN_TRANSACTION_ACTIVITY = "ACTIVITY_TYPE_SIGN_TRANSACTION_V2"

STRUCTURED_POLICY_KEYS = ("required_approvals", "signing_keys")
SIMPLIFIED_POLICY_KEYS = ("policyName", "effect", "condition")


def is_simplified_policy(doc: Document) -> bool:
    return doc.has(*SIMPLIFIED_POLICY_KEYS)


def classify(data: Any) -> DocumentKind:
    doc = data if isinstance(data, Document) else Document(data)

    if doc.get("type") == SIGN_TRANSACTION_ACTIVITY:
        return DocumentKind.TRANSACTION

    if any(doc.has(k) for k in STRUCTURED_POLICY_KEYS) or is_simplified_policy(doc):
        return DocumentKind.POLICY

    return DocumentKind.CONFIG
