"""
Policy Evaluator

Two policy shapes are understood:

  - simplified:  {policyName, effect, condition}
  - structured:  {required_approvals, signing_keys, allowed_activities}

A document carrying all three simplified keys is evaluated as simplified and
the structured rules are skipped, even if structured keys are also present.
"""

from __future__ import annotations

from typing import Any

from copilot.classifier import is_simplified_policy
from copilot.document import AnalysisResult, Document, FieldState, json_block

Finding = tuple[str, str]

SENDER_PLACEHOLDER = "<SENDER_ADDRESS>"
SOLANA_TRANSFERS = "solana.tx.transfers"
QUANTIFIERS = (".all(", ".any(")
INTENT_ACTIVITY_TYPES = ("SIGN_WITH_INTENT", "SIGN_TRANSACTION")
EFFECTS = ("EFFECT_ALLOW", "EFFECT_DENY")


def _condition_findings(condition: str) -> tuple[bool, bool]:
    """Return (has_placeholder, missing_quantifier) for a policy condition."""
    placeholder = SENDER_PLACEHOLDER in condition
    unquantified = SOLANA_TRANSFERS in condition and not any(q in condition for q in QUANTIFIERS)
    return placeholder, unquantified


# ---------------------------------------------------------------------------
# Structured policy checks
# ---------------------------------------------------------------------------

def _check_required_approvals(policy: Document) -> list[Finding]:
    approvals = policy.get_number("required_approvals")
    if approvals.state is FieldState.ABSENT:
        return [(
            "Missing required_approvals field",
            "Add the required_approvals field to specify how many approvals are needed:\n"
            + json_block("{", '  "required_approvals": 1,', "  ...", "}"),
        )]
    # null compares below 1
    if approvals.raw is None or (approvals.present and approvals.value < 1):
        return [(
            "required_approvals must be at least 1",
            "Update required_approvals to be at least 1:\n"
            + json_block("{", '  "required_approvals": 1,', "  ...", "}"),
        )]
    return []


def _check_signing_keys(policy: Document) -> list[Finding]:
    keys = policy.get_list("signing_keys")
    if not keys.present or not keys.value:
        return [(
            "No signing keys defined in the policy",
            "Add at least one signing key to the policy:\n"
            + json_block(
                "{",
                '  "signing_keys": [',
                "    {",
                '      "key_id": "your-key-id",',
                '      "name": "Key Name",',
                '      "public_key": "your-public-key",',
                '      "algorithm": "ECDSA_SECP256K1"',
                "    }",
                "  ],",
                "  ...",
                "}",
            ),
        )]

    findings: list[Finding] = []
    for index, key in enumerate(policy.children("signing_keys")):
        for name, example in (("key_id", "your-key-id"), ("public_key", "your-public-key")):
            if key.get_str(name).missing:
                findings.append((
                    f"Signing key at index {index} is missing {name}",
                    f"Add {name} to the signing key at index {index}:\n"
                    + json_block('"signing_keys": [', "  {", f'    "{name}": "{example}",', "    ...", "  }", "]"),
                ))
    return findings


def _check_activity(index: int, activity: Document) -> list[Finding]:
    findings: list[Finding] = []

    if activity.get_str("type").missing:
        findings.append((
            f"Allowed activity at index {index} is missing type",
            f"Add type to the allowed activity at index {index}:\n"
            + json_block('"allowed_activities": [', "  {", '    "type": "SIGN_WITH_INTENT",', "    ...", "  }", "]"),
        ))

    resources = activity.get_list("resources")
    if not resources.present or not resources.value:
        findings.append((
            f"Allowed activity at index {index} has no resources defined",
            f"Add resources to the allowed activity at index {index}:\n"
            + json_block('"allowed_activities": [', "  {", '    "resources": ["*"],', "    ...", "  }", "]"),
        ))

    condition = activity.child("parameters").get_str("condition")
    if condition.present and condition.is_set:
        placeholder, unquantified = _condition_findings(condition.value)
        if placeholder:
            findings.append((
                f"Solana policy condition at index {index} contains placeholder '{SENDER_PLACEHOLDER}'",
                f"Replace '{SENDER_PLACEHOLDER}' with an actual Solana address in the condition:\n"
                + json_block(
                    "\"condition\": \"solana.tx.transfers.all(transfer, transfer.from == 'actual_solana_address')\""
                ),
            ))
        if unquantified:
            findings.append((
                f"Solana policy condition at index {index} might be missing quantifier (all/any)",
                "Consider using 'all' or 'any' quantifier in your Solana condition:\n"
                + json_block("\"condition\": \"solana.tx.transfers.all(transfer, transfer.from == '<ADDRESS>')\""),
            ))

    return findings


def _check_allowed_activities(policy: Document) -> list[Finding]:
    activities = policy.get_list("allowed_activities")
    if not activities.present or not activities.value:
        return [(
            "No allowed_activities defined in the policy",
            "Add allowed_activities to specify what operations are permitted:\n"
            + json_block(
                "{",
                '  "allowed_activities": [',
                "    {",
                '      "type": "SIGN_WITH_INTENT",',
                '      "resources": ["*"]',
                "    }",
                "  ],",
                "  ...",
                "}",
            ),
        )]

    findings: list[Finding] = []
    for index, activity in enumerate(policy.children("allowed_activities")):
        findings.extend(_check_activity(index, activity))
    return findings


def _check_sign_with_intent(policy: Document) -> list[Finding]:
    """Only the first signing activity in list order is inspected."""
    first = next(
        (a for a in policy.children("allowed_activities") if a.get("type") in INTENT_ACTIVITY_TYPES),
        None,
    )
    if first is None or first.get("type") != "SIGN_WITH_INTENT":
        return []

    parameters = first.get_mapping("parameters")
    if parameters.missing:
        return [(
            "SIGN_WITH_INTENT activity is missing parameters",
            "Add parameters to the SIGN_WITH_INTENT activity:\n"
            + json_block(
                "{",
                '  "type": "SIGN_WITH_INTENT",',
                '  "parameters": {',
                '    "intent_action": "eth_signTypedData_v4",',
                '    "intent_version": "1"',
                "  },",
                "  ...",
                "}",
            ),
        )]
    if first.child("parameters").get_str("intent_action").missing:
        return [(
            "SIGN_WITH_INTENT activity is missing intent_action parameter",
            "Add intent_action parameter to the SIGN_WITH_INTENT activity:\n"
            + json_block('"parameters": {', '  "intent_action": "eth_signTypedData_v4",', "  ...", "}"),
        )]
    return []


STRUCTURED_CHECKS = (
    _check_required_approvals,
    _check_signing_keys,
    _check_allowed_activities,
    _check_sign_with_intent,
)


# ---------------------------------------------------------------------------
# Simplified policy checks
# ---------------------------------------------------------------------------

def _check_policy_name(policy: Document) -> list[Finding]:
    if policy.get_str("policyName").missing:
        return [(
            "Missing policyName field",
            "Add a descriptive policy name:\n"
            + json_block("{", '  "policyName": "Your Policy Name",', "  ...", "}"),
        )]
    return []


def _check_effect(policy: Document) -> list[Finding]:
    effect = policy.get_str("effect")
    if effect.missing:
        return [(
            "Missing effect field",
            "Add the effect field (EFFECT_ALLOW or EFFECT_DENY):\n"
            + json_block("{", '  "effect": "EFFECT_ALLOW",', "  ...", "}"),
        )]
    if effect.raw not in EFFECTS:
        return [(
            f"Invalid effect value: {effect.raw}",
            'Use either "EFFECT_ALLOW" or "EFFECT_DENY" for the effect field',
        )]
    return []


def _check_condition(policy: Document) -> list[Finding]:
    condition = policy.get_str("condition")
    if condition.missing:
        return [(
            "Missing condition field",
            "Add a condition expression:\n"
            + json_block("{", '  "condition": "your.condition.expression",', "  ...", "}"),
        )]
    if not condition.present:
        return []

    findings: list[Finding] = []
    placeholder, unquantified = _condition_findings(condition.value)
    if placeholder:
        findings.append((
            f"Condition contains placeholder {SENDER_PLACEHOLDER}",
            f"Replace {SENDER_PLACEHOLDER} with an actual blockchain address",
        ))
    if unquantified:
        findings.append((
            "Solana condition might be missing quantifier (all/any)",
            'Consider using "all" or "any" quantifier in your Solana condition:\n'
            + json_block(
                "{",
                "  \"condition\": \"solana.tx.transfers.all(transfer, transfer.from == 'your_address')\",",
                "  ...",
                "}",
            ),
        ))
    return findings


SIMPLIFIED_CHECKS = (
    _check_policy_name,
    _check_effect,
    _check_condition,
)


def _valid_policy_note(policy: Document) -> str:
    verb = "allow" if policy.get("effect") == "EFFECT_ALLOW" else "deny"
    return (
        "Your policy looks valid! Here's how to use it with Turnkey:\n\n"
        f"1. This policy will {verb} transactions that match the condition:\n"
        f"   `{policy.get('condition')}`\n\n"
        "2. For Solana conditions, make sure to replace any placeholders with actual addresses\n\n"
        "3. You can apply this policy to your Turnkey organization or specific wallets"
    )


# ---------------------------------------------------------------------------
# Entry points
# ---------------------------------------------------------------------------

def _run(checks, policy: Document) -> AnalysisResult:
    result = AnalysisResult()
    for check in checks:
        for issue, suggestion in check(policy):
            result.add(issue, suggestion)
    return result


def analyze_simplified_policy(data: Any) -> AnalysisResult:
    policy = data if isinstance(data, Document) else Document(data)
    result = _run(SIMPLIFIED_CHECKS, policy)
    if result.passed:
        result.note(_valid_policy_note(policy))
    return result


def analyze_policy(data: Any) -> AnalysisResult:
    policy = data if isinstance(data, Document) else Document(data)
    if is_simplified_policy(policy):
        return analyze_simplified_policy(policy)
    return _run(STRUCTURED_CHECKS, policy)
