"""
Policy Evaluator Test Suite
Covers structured policies (approvals, signing keys, activities, intent
parameters) and simplified {policyName, effect, condition} policies.

Usage:  pytest tests/test_policy_rules.py
"""

from __future__ import annotations

import copy

from copilot.policy_rules import analyze_policy, analyze_simplified_policy

SIGNING_KEY = {
    "key_id": "test-key",
    "name": "Test Key",
    "public_key": "test-public-key",
    "algorithm": "ECDSA_SECP256K1",
}


def _policy(**overrides):
    policy = {
        "required_approvals": 1,
        "signing_keys": [dict(SIGNING_KEY)],
        "allowed_activities": [
            {
                "type": "SIGN_WITH_INTENT",
                "resources": ["*"],
                "parameters": {"intent_action": "eth_signTypedData_v4", "intent_version": "1"},
            }
        ],
    }
    policy.update(overrides)
    return policy


# ---------------------------------------------------------------------------
# Structured: required_approvals
# ---------------------------------------------------------------------------

def test_valid_structured_policy():
    result = analyze_policy(_policy())
    assert result.issues == []
    assert result.suggestions == []


def test_required_approvals_zero():
    result = analyze_policy(_policy(
        required_approvals=0,
        allowed_activities=[{"type": "SIGN_WITH_INTENT", "resources": ["*"]}],
    ))
    assert "required_approvals must be at least 1" in result.issues
    assert len(result.suggestions) > 0


def test_required_approvals_missing():
    policy = _policy()
    del policy["required_approvals"]
    result = analyze_policy(policy)
    assert result.issues == ["Missing required_approvals field"]


def test_required_approvals_null_is_below_one():
    result = analyze_policy(_policy(required_approvals=None))
    assert result.issues == ["required_approvals must be at least 1"]


def test_required_approvals_missing_and_invalid_are_exclusive():
    result = analyze_policy(_policy(required_approvals=-2))
    assert result.issues == ["required_approvals must be at least 1"]
    assert "Missing required_approvals field" not in result.issues


# ---------------------------------------------------------------------------
# Structured: signing keys
# ---------------------------------------------------------------------------

def test_signing_key_missing_key_id():
    key = dict(SIGNING_KEY)
    del key["key_id"]
    result = analyze_policy(_policy(signing_keys=[key]))
    assert result.issues == ["Signing key at index 0 is missing key_id"]
    assert len(result.suggestions) > 0


def test_signing_key_missing_both_fields_reports_both():
    result = analyze_policy(_policy(signing_keys=[dict(SIGNING_KEY), {"name": "bare"}]))
    assert result.issues == [
        "Signing key at index 1 is missing key_id",
        "Signing key at index 1 is missing public_key",
    ]


def test_empty_signing_keys():
    result = analyze_policy(_policy(signing_keys=[]))
    assert result.issues == ["No signing keys defined in the policy"]


# ---------------------------------------------------------------------------
# Structured: allowed activities
# ---------------------------------------------------------------------------

def test_missing_allowed_activities():
    policy = _policy()
    del policy["allowed_activities"]
    result = analyze_policy(policy)
    assert result.issues == ["No allowed_activities defined in the policy"]


def test_activity_missing_type_and_resources():
    result = analyze_policy(_policy(allowed_activities=[{"resources": []}]))
    assert result.issues == [
        "Allowed activity at index 0 is missing type",
        "Allowed activity at index 0 has no resources defined",
    ]


def test_activity_resources_must_be_a_list():
    result = analyze_policy(_policy(allowed_activities=[
        {"type": "SIGN_TRANSACTION", "resources": "*"},
    ]))
    assert result.issues == ["Allowed activity at index 0 has no resources defined"]


def test_activity_condition_placeholder():
    activity = {
        "type": "SIGN_TRANSACTION",
        "resources": ["*"],
        "parameters": {
            "condition": "solana.tx.transfers.all(t, t.from == '<SENDER_ADDRESS>')",
        },
    }
    result = analyze_policy(_policy(allowed_activities=[activity]))
    assert result.issues == [
        "Solana policy condition at index 0 contains placeholder '<SENDER_ADDRESS>'",
    ]


def test_activity_condition_missing_quantifier():
    activity = {
        "type": "SIGN_TRANSACTION",
        "resources": ["*"],
        "parameters": {"condition": "solana.tx.transfers.count() < 2"},
    }
    result = analyze_policy(_policy(allowed_activities=[activity]))
    assert result.issues == [
        "Solana policy condition at index 0 might be missing quantifier (all/any)",
    ]


def test_activity_condition_with_any_quantifier_is_accepted():
    activity = {
        "type": "SIGN_TRANSACTION",
        "resources": ["*"],
        "parameters": {"condition": "solana.tx.transfers.any(t, t.amount < 100)"},
    }
    assert analyze_policy(_policy(allowed_activities=[activity])).passed


# ---------------------------------------------------------------------------
# Structured: SIGN_WITH_INTENT parameters
# ---------------------------------------------------------------------------

def test_sign_with_intent_missing_parameters():
    result = analyze_policy(_policy(
        allowed_activities=[{"type": "SIGN_WITH_INTENT", "resources": ["*"]}],
    ))
    assert result.issues == ["SIGN_WITH_INTENT activity is missing parameters"]


def test_sign_with_intent_missing_intent_action():
    result = analyze_policy(_policy(
        allowed_activities=[{"type": "SIGN_WITH_INTENT", "resources": ["*"], "parameters": {}}],
    ))
    assert result.issues == ["SIGN_WITH_INTENT activity is missing intent_action parameter"]


def test_only_first_signing_activity_is_inspected():
    result = analyze_policy(_policy(allowed_activities=[
        {"type": "SIGN_TRANSACTION", "resources": ["*"]},
        {"type": "SIGN_WITH_INTENT", "resources": ["*"]},
    ]))
    assert result.passed


def test_non_signing_activities_are_skipped_when_finding_first():
    result = analyze_policy(_policy(allowed_activities=[
        {"type": "CREATE_WALLET", "resources": ["*"]},
        {"type": "SIGN_WITH_INTENT", "resources": ["*"]},
    ]))
    assert result.issues == ["SIGN_WITH_INTENT activity is missing parameters"]


# ---------------------------------------------------------------------------
# Simplified policies
# ---------------------------------------------------------------------------

def test_valid_simplified_policy_gets_usage_note():
    result = analyze_policy({
        "policyName": "Allow treasury transfers",
        "effect": "EFFECT_ALLOW",
        "condition": "solana.tx.transfers.all(t, t.from == 'abc')",
    })
    assert result.issues == []
    assert len(result.suggestions) == 1
    assert result.suggestions[0].startswith("Your policy looks valid!")
    assert "will allow transactions" in result.suggestions[0]
    assert "solana.tx.transfers.all(t, t.from == 'abc')" in result.suggestions[0]


def test_deny_policy_note_says_deny():
    result = analyze_simplified_policy({
        "policyName": "Block",
        "effect": "EFFECT_DENY",
        "condition": "eth.tx.value > 100",
    })
    assert "will deny transactions" in result.suggestions[0]


def test_simplified_invalid_effect():
    result = analyze_policy({"policyName": "x", "effect": "ALLOW", "condition": "true"})
    assert result.issues == ["Invalid effect value: ALLOW"]


def test_simplified_blank_fields():
    result = analyze_policy({"policyName": "", "effect": "", "condition": ""})
    assert result.issues == [
        "Missing policyName field",
        "Missing effect field",
        "Missing condition field",
    ]
    assert len(result.suggestions) == 3


def test_simplified_condition_checks():
    result = analyze_policy({
        "policyName": "x",
        "effect": "EFFECT_ALLOW",
        "condition": "solana.tx.transfers.count() == 1 && sender == '<SENDER_ADDRESS>'",
    })
    assert result.issues == [
        "Condition contains placeholder <SENDER_ADDRESS>",
        "Solana condition might be missing quantifier (all/any)",
    ]


def test_simplified_shape_takes_precedence_over_structured_keys():
    result = analyze_policy({
        "required_approvals": 0,
        "policyName": "x",
        "effect": "EFFECT_ALLOW",
        "condition": "true",
    })
    assert result.issues == []
    assert "required_approvals must be at least 1" not in result.issues


def test_policy_analysis_is_idempotent_and_pure():
    policy = _policy(required_approvals=0, signing_keys=[{"name": "k"}])
    before = copy.deepcopy(policy)
    assert analyze_policy(policy) == analyze_policy(policy)
    assert policy == before
