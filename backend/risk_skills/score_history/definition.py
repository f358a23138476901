"""
Score History - Data Definitions

Append-only records of past scores per subject and the backend
protocol a persistence collaborator must satisfy.

Author: SentinelZero Team
"""

from datetime import datetime, timezone
from enum import Enum
from typing import List, Optional, Protocol, runtime_checkable

from pydantic import BaseModel, ConfigDict, Field, field_validator

from risk_skills.risk_score_calculator.definition import ScoreBreakdown
from risk_skills.risk_taxonomy.definition import SeverityTier


class ScoreTrend(str, Enum):
    """Direction of a subject's recent scores."""
    INCREASING = "increasing"
    DECREASING = "decreasing"
    STABLE = "stable"
    INSUFFICIENT_DATA = "insufficient_data"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class ScoreRecord(BaseModel):
    """
    One recorded evaluation of a subject.

    ``score`` is the reported score of ``algorithm_version`` and is what
    trends are derived from. ``breakdown`` is the base formula's, so for
    enhanced versions ``breakdown.total`` is the pre-modifier total and may
    differ from ``score``.

    Serialized with ``model_dump(mode="json")``; the timestamp becomes an
    ISO-8601 string and parses back to the same instant.
    """

    model_config = ConfigDict(frozen=True)

    subject_id: str = Field(..., min_length=1, description="Contract address or other stable id.")
    score: int = Field(..., ge=0, le=100)
    level: SeverityTier
    breakdown: ScoreBreakdown
    algorithm_version: str
    timestamp: datetime = Field(default_factory=utc_now)

    @field_validator("timestamp")
    @classmethod
    def ensure_utc(cls, v: datetime) -> datetime:
        if v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v


@runtime_checkable
class HistoryBackend(Protocol):
    """
    Storage collaborator behind the history store.

    ``add`` must be all-or-nothing: when it raises, the record is not
    visible to later ``get`` calls.
    """

    def add(self, record: ScoreRecord) -> None:
        ...

    def get(self, subject_id: str) -> List[ScoreRecord]:
        """All records of a subject, oldest first."""
        ...

    def subjects(self) -> List[str]:
        ...


# Custom Exceptions

class ScoreHistoryError(Exception):
    """Base exception for score history errors."""
    pass


class HistoryUnavailableError(ScoreHistoryError):
    """The storage collaborator failed; nothing was recorded."""
    def __init__(self, operation: str, original_error: Optional[Exception] = None):
        self.operation = operation
        self.original_error = original_error
        message = f"Score history unavailable during '{operation}'"
        if original_error is not None:
            message = f"{message}: {type(original_error).__name__}: {str(original_error)[:200]}"
        super().__init__(message)
