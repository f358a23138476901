"""
Historical Context - Data Definitions

Pydantic models for past exploit incidents and the context they give
to a new risk score.

Author: SentinelZero Team
"""

import datetime
from enum import Enum
from typing import Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, computed_field


class RiskTrend(str, Enum):
    """Industry-wide direction of a set of vulnerability categories."""
    INCREASING = "increasing"
    STABLE = "stable"
    DECREASING = "decreasing"


class Incident(BaseModel):
    """A past exploit from the incident corpus."""

    model_config = ConfigDict(frozen=True)

    id: str
    protocol_name: str
    chain: str = ""
    date: datetime.date
    attack_type: str = ""
    vulnerability_category: str
    financial_impact_usd: float = Field(default=0.0, ge=0.0)
    funds_recovered: bool = False


class CorpusStatistics(BaseModel):
    """Aggregate figures over the incident corpus."""

    total_incidents: int = 0
    total_financial_impact_usd: float = 0.0
    incidents_with_recovery: int = 0
    recovery_rate: float = 0.0
    largest_exploit: Optional[Incident] = None
    incidents_by_category: Dict[str, int] = Field(default_factory=dict)
    most_common_vulnerability: Optional[str] = None


class IncidentCorpus(BaseModel):
    """
    Past incidents used for similarity lookups.

    ``available`` is False when the corpus source could not be read; the
    engine then reports zero incidents and an unknown loss.
    """

    model_config = ConfigDict(frozen=True)

    incidents: Tuple[Incident, ...] = ()
    available: bool = True

    def statistics(self) -> CorpusStatistics:
        if not self.incidents:
            return CorpusStatistics()

        by_category: Dict[str, int] = {}
        for incident in self.incidents:
            key = incident.vulnerability_category
            by_category[key] = by_category.get(key, 0) + 1

        # Stable ordering: most frequent first, then name.
        ordered = dict(sorted(by_category.items(), key=lambda kv: (-kv[1], kv[0])))
        recovered = sum(1 for i in self.incidents if i.funds_recovered)
        total = len(self.incidents)

        return CorpusStatistics(
            total_incidents=total,
            total_financial_impact_usd=sum(i.financial_impact_usd for i in self.incidents),
            incidents_with_recovery=recovered,
            recovery_rate=recovered / total,
            largest_exploit=max(self.incidents, key=lambda i: i.financial_impact_usd),
            incidents_by_category=ordered,
            most_common_vulnerability=next(iter(ordered)),
        )


class IncidentSummary(BaseModel):
    """Incidents matching one vulnerability tag."""

    model_config = ConfigDict(frozen=True)

    vulnerability: str
    incident_count: int = Field(default=0, ge=0)
    total_loss_usd: Optional[float] = Field(
        default=None,
        description="Aggregate loss; None when the corpus is unavailable."
    )

    @computed_field
    @property
    def total_loss(self) -> str:
        """Loss in millions, e.g. '$611M', or 'N/A'."""
        if self.total_loss_usd is None:
            return "N/A"
        return f"${self.total_loss_usd / 1_000_000:.0f}M"


class TrendRules(BaseModel):
    """
    Ordered trend rules; the first matching rule wins.

    1. any tag in ``high_trend`` -> increasing
    2. any tag in ``stable`` -> stable
    3. otherwise -> decreasing
    """

    model_config = ConfigDict(frozen=True)

    high_trend: Tuple[str, ...] = ("cross_chain_bridge",)
    stable: Tuple[str, ...] = ("mev_frontrunning",)


class HistoricalContext(BaseModel):
    """Context attached to an evaluation."""

    similar_incidents: List[IncidentSummary] = Field(default_factory=list)
    risk_trend: RiskTrend = RiskTrend.DECREASING
    recommendations: List[str] = Field(default_factory=list)


# Custom Exceptions

class HistoricalContextError(Exception):
    """Base exception for historical context errors."""
    pass


class CorpusFormatError(HistoricalContextError):
    """The incident corpus document is malformed."""
    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"Malformed incident corpus: {reason}")
