"""
Auto Approval - Data Definitions

Pydantic models for policy-driven approve/reject decisions on scored
contracts.

Author: SentinelZero Team
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Dict, Optional

from pydantic import BaseModel, ConfigDict, Field


class ApprovalRule(str, Enum):
    """
    Decision rules, in evaluation order. The first match wins.

    - POLICY_DISABLED: auto-approval switched off
    - LOW_RISK_NOT_ENABLED: low tier without its auto-approve flag
    - MEDIUM_RISK_NOT_ENABLED: medium tier without its auto-approve flag
    - HIGH_RISK_MANUAL_REVIEW: high/critical tier (never auto-approved)
    - THRESHOLD_EXCEEDED: score above the policy threshold
    - APPROVED: every check passed
    - PROCESSING_ERROR: the decision itself failed; rejected for review
    """
    POLICY_DISABLED = "policy_disabled"
    LOW_RISK_NOT_ENABLED = "low_risk_not_enabled"
    MEDIUM_RISK_NOT_ENABLED = "medium_risk_not_enabled"
    HIGH_RISK_MANUAL_REVIEW = "high_risk_manual_review"
    THRESHOLD_EXCEEDED = "threshold_exceeded"
    APPROVED = "approved"
    PROCESSING_ERROR = "processing_error"


class ApprovalPolicy(BaseModel):
    """
    Caller-supplied auto-approval configuration.

    High and critical tiers have no flag. Unknown keys are rejected.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="forbid")

    enabled: bool = Field(default=False, description="Master switch.")
    threshold: int = Field(
        default=70,
        ge=0,
        le=100,
        description="Scores above this value are rejected."
    )
    auto_approve_low: bool = Field(
        default=True,
        alias="autoApproveLow",
        description="Allow auto-approval of LOW tier contracts."
    )
    auto_approve_medium: bool = Field(
        default=False,
        alias="autoApproveMedium",
        description="Allow auto-approval of MEDIUM tier contracts."
    )


class Decision(BaseModel):
    """
    Outcome of one approval check.

    Serializable as-is so the caller's persistence layer can record it.
    """

    model_config = ConfigDict(frozen=True)

    approved: bool
    reason: str
    requires_manual_review: bool
    rule: ApprovalRule
    score: Optional[int] = None
    level: Optional[str] = None
    subject_id: Optional[str] = None
    decided_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class LevelStats(BaseModel):
    approved: int = 0
    rejected: int = 0


class ApprovalStats(BaseModel):
    """Counts over recorded decisions."""

    total: int = 0
    approved: int = 0
    rejected: int = 0
    by_level: Dict[str, LevelStats] = Field(default_factory=dict)
