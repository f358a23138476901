"""Result types produced by the evaluation pipeline."""

from datetime import datetime
from enum import Enum
from typing import List

from pydantic import BaseModel, ConfigDict, Field

from risk_skills.historical_context.definition import HistoricalContext
from risk_skills.risk_score_calculator.definition import ScoreBreakdown
from risk_skills.risk_taxonomy.definition import SeverityTier
from risk_skills.score_history.definition import ScoreTrend


class AlertLevel(str, Enum):
    WARNING = "warning"
    HIGH = "high"
    CRITICAL = "critical"


class Alert(BaseModel):
    model_config = ConfigDict(frozen=True)

    level: AlertLevel
    message: str


class EvaluationResult(BaseModel):
    """
    Outcome of one pipeline evaluation.

    ``timestamp`` is the instant the score was recorded in the history
    store; the remaining fields are a pure function of the profile and the
    algorithm version, except ``trend`` which depends on prior records.
    """

    model_config = ConfigDict(frozen=True)

    subject_id: str
    score: int = Field(..., ge=0, le=100)
    base_score: int = Field(..., ge=0, le=100)
    level: SeverityTier
    color: str
    action_required: str
    breakdown: ScoreBreakdown
    trend: ScoreTrend
    alerts: List[Alert] = Field(default_factory=list)
    historical_context: HistoricalContext
    mitigation_strategies: List[dict] = Field(default_factory=list)
    scoring_version: str
    scoring_algorithm: str
    trend_modifier: float = 1.0
    timestamp: datetime
