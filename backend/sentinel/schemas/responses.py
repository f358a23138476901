from datetime import date

from pydantic import BaseModel, Field

from risk_skills.auto_approval import Decision
from risk_skills.score_history import ScoreRecord, ScoreTrend
from sentinel.engine.models import EvaluationResult


class EvaluateResponse(BaseModel):
    result: EvaluationResult
    decision: Decision | None = Field(default=None, description="Decision de auto-aprobacion si se solicito")


class HistoryResponse(BaseModel):
    subject_id: str
    records: list[ScoreRecord] = Field(default_factory=list)


class TrendResponse(BaseModel):
    subject_id: str
    trend: ScoreTrend


class AlgorithmInfo(BaseModel):
    version: str
    name: str
    description: str
    release_date: date
    variant: str
    trending_vulnerabilities: list[str] = Field(default_factory=list)
    is_default: bool = False


class CategoryInfo(BaseModel):
    key: str
    id: str
    name: str
    severity_weight: float


class SeverityBandInfo(BaseModel):
    name: str
    min_score: int
    max_score: int
    color: str
    action_required: str


class TaxonomyResponse(BaseModel):
    version: str
    categories: list[CategoryInfo] = Field(default_factory=list)
    factor_weights: dict[str, float] = Field(default_factory=dict)
    severity_levels: list[SeverityBandInfo] = Field(default_factory=list)
