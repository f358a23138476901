"""
Auto Approval Skill

Policy-driven approve/reject decisions on scored contracts.
"""

from .definition import (
    ApprovalPolicy,
    ApprovalRule,
    ApprovalStats,
    Decision,
    LevelStats,
)

from .impl import (
    ApprovalLedger,
    AutoApprovalEngine,
    NEVER_AUTO_APPROVED,
)

__all__ = [
    # Classes
    "ApprovalLedger",
    "AutoApprovalEngine",
    # Models
    "ApprovalPolicy",
    "ApprovalRule",
    "ApprovalStats",
    "Decision",
    "LevelStats",
    # Constants
    "NEVER_AUTO_APPROVED",
]
