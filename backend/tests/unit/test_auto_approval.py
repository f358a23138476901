"""
Unit tests for the Auto Approval skill.

Tests cover:
- Each decision rule and its reason text
- High/critical never auto-approved (property based)
- Fail-closed error handling
- Decision ledger statistics

Author: SentinelZero Team
"""

from types import SimpleNamespace

import pytest
from hypothesis import given, strategies as st
from pydantic import ValidationError

from risk_skills.auto_approval import (
    ApprovalLedger,
    ApprovalPolicy,
    ApprovalRule,
    AutoApprovalEngine,
)
from risk_skills.risk_taxonomy import SeverityTier


policies = st.builds(
    ApprovalPolicy,
    enabled=st.booleans(),
    threshold=st.integers(min_value=0, max_value=100),
    auto_approve_low=st.booleans(),
    auto_approve_medium=st.booleans(),
)


class TestDecisionRules:
    """Tests for the ordered rules."""

    def test_medium_without_flag_rejected(self, approval_engine, enabled_policy):
        """Score 65 MEDIUM with threshold 70 is rejected by the medium flag."""
        decision = approval_engine.decide(65, "MEDIUM", enabled_policy)

        assert decision.approved is False
        assert decision.requires_manual_review is True
        assert decision.rule == ApprovalRule.MEDIUM_RISK_NOT_ENABLED
        assert decision.reason == "Medium risk contracts are not set for auto-approval"

    def test_disabled_policy_rejects_everything(self, approval_engine):
        decision = approval_engine.decide(5, "low", ApprovalPolicy(enabled=False))

        assert decision.approved is False
        assert decision.reason == "Auto-approval is disabled"
        assert decision.rule == ApprovalRule.POLICY_DISABLED

    def test_low_without_flag_rejected(self, approval_engine):
        policy = ApprovalPolicy(enabled=True, auto_approve_low=False)
        decision = approval_engine.decide(25, "low", policy)

        assert decision.reason == "Low risk contracts are not set for auto-approval"

    @pytest.mark.parametrize("level,score", [("high", 76), ("critical", 95)])
    def test_high_and_critical_need_manual_review(self, approval_engine, level, score):
        policy = ApprovalPolicy(enabled=True, threshold=100, auto_approve_medium=True)
        decision = approval_engine.decide(score, level, policy)

        assert decision.approved is False
        assert decision.reason == f"{level.upper()} risk contracts require manual review"
        assert decision.rule == ApprovalRule.HIGH_RISK_MANUAL_REVIEW

    def test_threshold_exceeded(self, approval_engine):
        policy = ApprovalPolicy(enabled=True, threshold=30)
        decision = approval_engine.decide(35, "low", policy)

        assert decision.approved is False
        assert decision.reason == "Risk score 35 exceeds threshold 30"

    def test_score_equal_to_threshold_approved(self, approval_engine):
        policy = ApprovalPolicy(enabled=True, threshold=35)
        decision = approval_engine.decide(35, "low", policy)

        assert decision.approved is True
        assert "Risk score 35 is at or below threshold 35" in decision.reason

    def test_low_risk_approved(self, approval_engine, enabled_policy):
        decision = approval_engine.decide(25, SeverityTier.LOW, enabled_policy)

        assert decision.approved is True
        assert decision.requires_manual_review is False
        assert decision.rule == ApprovalRule.APPROVED
        assert decision.reason == (
            "Auto-approved: Risk score 25 is at or below threshold 70 and risk level LOW is acceptable"
        )

    def test_medium_approved_when_flag_set(self, approval_engine):
        policy = ApprovalPolicy(enabled=True, threshold=70, auto_approve_medium=True)
        assert approval_engine.decide(65, "medium", policy).approved is True

    def test_informational_only_checked_against_threshold(self, approval_engine):
        policy = ApprovalPolicy(enabled=True, threshold=10, auto_approve_low=False)

        assert approval_engine.decide(5, "informational", policy).approved is True
        assert approval_engine.decide(15, "informational", policy).rule == ApprovalRule.THRESHOLD_EXCEEDED

    def test_policy_accepts_camel_case(self):
        policy = ApprovalPolicy.model_validate({"enabled": True, "autoApproveMedium": True})
        assert policy.auto_approve_medium is True

    def test_policy_has_no_high_risk_flag(self):
        with pytest.raises(ValidationError):
            ApprovalPolicy.model_validate({"enabled": True, "autoApproveHigh": True})

    @given(
        policy=policies,
        level=st.sampled_from(["high", "HIGH", "critical", "CRITICAL"]),
        score=st.integers(min_value=0, max_value=100),
    )
    def test_high_and_critical_never_approved(self, policy, level, score):
        decision = AutoApprovalEngine().decide(score, level, policy)

        assert decision.approved is False
        assert decision.requires_manual_review is True


class TestFailClosed:
    """Tests for the never-raise contract."""

    @pytest.mark.parametrize(
        "score,level",
        [(50, "severe"), (None, "low"), (150, "low"), ("50", "low")],
    )
    def test_bad_input_becomes_manual_review(self, approval_engine, enabled_policy, score, level):
        decision = approval_engine.decide(score, level, enabled_policy)

        assert decision.approved is False
        assert decision.requires_manual_review is True
        assert decision.rule == ApprovalRule.PROCESSING_ERROR
        assert decision.reason.startswith("Error during auto-approval processing")

    def test_evaluation_without_score_fails_closed(self, approval_engine, enabled_policy):
        decision = approval_engine.decide_evaluation(object(), enabled_policy)
        assert decision.rule == ApprovalRule.PROCESSING_ERROR

    def test_decide_evaluation_reads_result(self, approval_engine, enabled_policy):
        evaluation = SimpleNamespace(score=25, level=SeverityTier.LOW, subject_id="0xabc")
        decision = approval_engine.decide_evaluation(evaluation, enabled_policy)

        assert decision.approved is True
        assert decision.subject_id == "0xabc"
        assert decision.level == "low"


class TestLedger:
    """Tests for decision recording and statistics."""

    def test_process_records_decision(self, approval_engine, ledger, enabled_policy):
        evaluation = SimpleNamespace(score=25, level="low", subject_id="0xabc")
        approval_engine.process(evaluation, enabled_policy)

        assert len(ledger.history()) == 1
        assert ledger.history("0xabc")[0].approved is True
        assert ledger.history("0xother") == []

    def test_stats_by_level(self, approval_engine, ledger, enabled_policy):
        for score, level in [(25, "low"), (30, "low"), (65, "medium"), (80, "high")]:
            approval_engine.process(SimpleNamespace(score=score, level=level), enabled_policy)

        stats = ledger.stats()

        assert stats.total == 4
        assert stats.approved == 2
        assert stats.rejected == 2
        assert stats.by_level["low"].approved == 2
        assert stats.by_level["medium"].rejected == 1
        assert stats.by_level["high"].rejected == 1
        assert stats.by_level["critical"].approved == 0

    def test_empty_ledger_stats(self):
        stats = ApprovalLedger().stats()
        assert stats.total == 0
        assert set(stats.by_level) == {tier.value for tier in SeverityTier}

    def test_decision_round_trips_through_json(self, approval_engine, enabled_policy):
        decision = approval_engine.decide(25, "low", enabled_policy, subject_id="0xabc")
        restored = type(decision).model_validate_json(decision.model_dump_json())

        assert restored == decision
