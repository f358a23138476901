"""
Risk Score Calculator Skill

Deterministic smart-contract risk scoring for SentinelZero.
Converts gathered contract attributes into a 0-100 score and a severity tier.
"""

from .definition import (
    ContractProfile,
    InvalidProfileError,
    RiskCalculatorError,
    ScoreBreakdown,
    ScoreResult,
)

from .impl import (
    RiskScoreCalculator,
    calculate_risk_score,
    round_half_up,
    AUDIT_AGE_BANDS,
    PRODUCTION_BANDS,
    TVL_BANDS,
)

__all__ = [
    # Classes
    "RiskScoreCalculator",
    # Models
    "ContractProfile",
    "ScoreBreakdown",
    "ScoreResult",
    # Exceptions
    "InvalidProfileError",
    "RiskCalculatorError",
    # Functions
    "calculate_risk_score",
    "round_half_up",
    # Constants
    "AUDIT_AGE_BANDS",
    "PRODUCTION_BANDS",
    "TVL_BANDS",
]
