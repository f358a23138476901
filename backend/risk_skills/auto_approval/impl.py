"""
Auto Approval - Implementation

Policy evaluator for scored contracts:
- Ordered decision rules, first match wins
- High and critical tiers always routed to manual review
- Fail-closed: any internal error becomes a reject for manual review
- Decision ledger with per-level statistics

Author: SentinelZero Team
"""

import logging
import threading
from typing import Any, List, Optional

from risk_skills.risk_taxonomy.definition import SeverityTier

try:
    from .definition import (
        ApprovalPolicy,
        ApprovalRule,
        ApprovalStats,
        Decision,
        LevelStats,
    )
except ImportError:
    from definition import (
        ApprovalPolicy,
        ApprovalRule,
        ApprovalStats,
        Decision,
        LevelStats,
    )

logger = logging.getLogger(__name__)


NEVER_AUTO_APPROVED = frozenset({SeverityTier.HIGH, SeverityTier.CRITICAL})


class ApprovalLedger:
    """Thread-safe, append-only list of decisions."""

    def __init__(self):
        self._decisions: List[Decision] = []
        self._lock = threading.Lock()

    def record(self, decision: Decision) -> Decision:
        with self._lock:
            self._decisions.append(decision)
        return decision

    def history(self, subject_id: Optional[str] = None) -> List[Decision]:
        with self._lock:
            decisions = list(self._decisions)
        if subject_id is None:
            return decisions
        return [d for d in decisions if d.subject_id == subject_id]

    def stats(self) -> ApprovalStats:
        """Totals and approved/rejected counts per severity tier."""
        by_level = {tier.value: LevelStats() for tier in SeverityTier}
        approved = rejected = 0
        for decision in self.history():
            bucket = by_level.setdefault(decision.level or "unknown", LevelStats())
            if decision.approved:
                approved += 1
                bucket.approved += 1
            else:
                rejected += 1
                bucket.rejected += 1
        return ApprovalStats(
            total=approved + rejected,
            approved=approved,
            rejected=rejected,
            by_level=by_level,
        )


class AutoApprovalEngine:
    """
    Approve/reject decisions against a caller-supplied policy.

    Usage:
        engine = AutoApprovalEngine()
        decision = engine.decide(
            65,
            "medium",
            ApprovalPolicy(enabled=True, threshold=70, auto_approve_medium=False),
        )
        print(decision.approved, decision.reason)

    Never raises: errors surface as a reject with manual review.
    """

    def __init__(self, ledger: Optional[ApprovalLedger] = None):
        """
        Initialize the engine.

        Args:
            ledger: Where process() records decisions. Defaults to a new ledger.
        """
        self.ledger = ledger if ledger is not None else ApprovalLedger()

    def decide(
        self,
        score: int,
        level: "str | SeverityTier",
        policy: ApprovalPolicy,
        subject_id: Optional[str] = None,
    ) -> Decision:
        """
        Evaluate the decision rules in order.

        Args:
            score: Risk score (0-100).
            level: Severity tier name (case-insensitive) or SeverityTier.
            policy: Auto-approval policy.
            subject_id: Optional subject the decision refers to.
        """
        try:
            decision = self._apply_rules(score, level, policy, subject_id)
        except Exception as e:
            logger.error(f"Auto-approval processing error for {subject_id or 'subject'}: {e}")
            decision = Decision(
                approved=False,
                reason=f"Error during auto-approval processing: {type(e).__name__}: {str(e)[:200]}",
                requires_manual_review=True,
                rule=ApprovalRule.PROCESSING_ERROR,
                level=str(getattr(level, "value", level)),
                subject_id=subject_id,
            )

        logger.info(
            f"Auto-approval decision for {subject_id or 'subject'}: "
            f"{'APPROVED' if decision.approved else 'REJECTED'} ({decision.reason})"
        )
        return decision

    def decide_evaluation(self, evaluation: Any, policy: ApprovalPolicy) -> Decision:
        """
        Decide on an evaluation result (any object with ``score``, ``level``
        and optionally ``subject_id``).
        """
        return self.decide(
            getattr(evaluation, "score", None),
            getattr(evaluation, "level", None),
            policy,
            getattr(evaluation, "subject_id", None),
        )

    def process(self, evaluation: Any, policy: ApprovalPolicy) -> Decision:
        """Decide on an evaluation and record the decision in the ledger."""
        return self.ledger.record(self.decide_evaluation(evaluation, policy))

    def _apply_rules(
        self,
        score: int,
        level: "str | SeverityTier",
        policy: ApprovalPolicy,
        subject_id: Optional[str],
    ) -> Decision:
        tier = SeverityTier.parse(level)
        if isinstance(score, bool) or not isinstance(score, int):
            raise TypeError(f"score must be an integer, got {score!r}")
        if not 0 <= score <= 100:
            raise ValueError(f"score {score} outside 0-100")

        def reject(rule: ApprovalRule, reason: str) -> Decision:
            return Decision(
                approved=False,
                reason=reason,
                requires_manual_review=True,
                rule=rule,
                score=score,
                level=tier.value,
                subject_id=subject_id,
            )

        if not policy.enabled:
            return reject(ApprovalRule.POLICY_DISABLED, "Auto-approval is disabled")

        if tier == SeverityTier.LOW and not policy.auto_approve_low:
            return reject(
                ApprovalRule.LOW_RISK_NOT_ENABLED,
                "Low risk contracts are not set for auto-approval",
            )

        if tier == SeverityTier.MEDIUM and not policy.auto_approve_medium:
            return reject(
                ApprovalRule.MEDIUM_RISK_NOT_ENABLED,
                "Medium risk contracts are not set for auto-approval",
            )

        if tier in NEVER_AUTO_APPROVED:
            return reject(
                ApprovalRule.HIGH_RISK_MANUAL_REVIEW,
                f"{tier.value.upper()} risk contracts require manual review",
            )

        if score > policy.threshold:
            return reject(
                ApprovalRule.THRESHOLD_EXCEEDED,
                f"Risk score {score} exceeds threshold {policy.threshold}",
            )

        return Decision(
            approved=True,
            reason=(
                f"Auto-approved: Risk score {score} is at or below threshold "
                f"{policy.threshold} and risk level {tier.value.upper()} is acceptable"
            ),
            requires_manual_review=False,
            rule=ApprovalRule.APPROVED,
            score=score,
            level=tier.value,
            subject_id=subject_id,
        )
