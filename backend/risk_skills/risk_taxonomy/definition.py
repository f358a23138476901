"""
Risk Taxonomy - Data Definitions

Pydantic models for the smart-contract risk taxonomy: vulnerability
categories, scoring-factor weights and severity bands.

Author: SentinelZero Team
"""

from enum import Enum
from typing import Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


WEIGHT_SUM_EPSILON = 1e-6
SCORE_MIN = 0
SCORE_MAX = 100


class ScoringFactor(str, Enum):
    """The six factors combined by the scoring formula."""
    VULNERABILITY_PRESENCE = "vulnerability_presence"
    TVL_EXPOSURE = "tvl_exposure"
    AUDIT_STATUS = "audit_status"
    CODE_COMPLEXITY = "code_complexity"
    TIME_IN_PRODUCTION = "time_in_production"
    BUG_BOUNTY = "bug_bounty"


class SeverityTier(str, Enum):
    """
    Named severity bands, lowest first.

    - INFORMATIONAL / LOW / MEDIUM: eligible for auto-approval by policy
    - HIGH / CRITICAL: always routed to manual review
    """
    INFORMATIONAL = "informational"
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"

    @classmethod
    def parse(cls, value: "str | SeverityTier") -> "SeverityTier":
        """Accepts 'HIGH', 'high' or a SeverityTier."""
        if isinstance(value, SeverityTier):
            return value
        return cls(str(value).strip().lower())


class RiskCategory(BaseModel):
    """A vulnerability category of the taxonomy."""

    model_config = ConfigDict(frozen=True)

    key: str = Field(..., min_length=1, description="Stable lookup key, e.g. 'reentrancy'.")
    id: str = Field(..., min_length=1, description="Catalog identifier, e.g. 'RISK-001'.")
    name: str = Field(..., description="Display name.")
    severity_weight: float = Field(..., ge=0.0, le=1.0)
    mitigation_strategies: Tuple[str, ...] = Field(default_factory=tuple)


class ScoringFactorWeight(BaseModel):
    """Weight fraction of one scoring factor."""

    model_config = ConfigDict(frozen=True)

    factor: ScoringFactor
    weight: float = Field(..., ge=0.0, le=1.0)
    description: str = ""


class SeverityLevel(BaseModel):
    """Inclusive score band mapped to a severity tier."""

    model_config = ConfigDict(frozen=True)

    name: SeverityTier
    score_range: Tuple[int, int]
    color: str = "#95a5a6"
    action_required: str = ""

    @field_validator("score_range")
    @classmethod
    def validate_range(cls, v: Tuple[int, int]) -> Tuple[int, int]:
        low, high = v
        if low > high:
            raise ValueError(f"score_range min {low} is greater than max {high}")
        return v

    @property
    def min_score(self) -> int:
        return self.score_range[0]

    @property
    def max_score(self) -> int:
        return self.score_range[1]

    def contains(self, score: int) -> bool:
        return self.min_score <= score <= self.max_score


class Taxonomy(BaseModel):
    """
    Immutable taxonomy loaded once at start-up.

    Invariants checked on construction:
    - factor weights cover all six factors and sum to 1.0 (+/- 1e-6)
    - severity bands partition [0, 100] with no gaps or overlaps
    """

    model_config = ConfigDict(frozen=True)

    version: str = "1.0.0"
    categories: Dict[str, RiskCategory]
    factor_weights: Dict[ScoringFactor, ScoringFactorWeight]
    severity_levels: Tuple[SeverityLevel, ...]

    @model_validator(mode="after")
    def check_invariants(self) -> "Taxonomy":
        missing = [f.value for f in ScoringFactor if f not in self.factor_weights]
        if missing:
            raise ValueError(f"missing scoring factor weights: {missing}")

        total = sum(w.weight for w in self.factor_weights.values())
        if abs(total - 1.0) > WEIGHT_SUM_EPSILON:
            raise ValueError(f"scoring factor weights sum to {total}, expected 1.0")

        bands = sorted(self.severity_levels, key=lambda lvl: lvl.min_score)
        if not bands:
            raise ValueError("at least one severity level is required")
        expected_start = SCORE_MIN
        for band in bands:
            if band.min_score != expected_start:
                raise ValueError(
                    f"severity band '{band.name.value}' starts at {band.min_score}, "
                    f"expected {expected_start} (gap or overlap)"
                )
            expected_start = band.max_score + 1
        if expected_start != SCORE_MAX + 1:
            raise ValueError(f"severity bands end at {expected_start - 1}, expected {SCORE_MAX}")
        return self

    def weight(self, factor: ScoringFactor) -> float:
        return self.factor_weights[factor].weight

    def get_category(self, key_or_id: str) -> Optional[RiskCategory]:
        """Looks a category up by key or by catalog id; None when unknown."""
        if key_or_id in self.categories:
            return self.categories[key_or_id]
        for category in self.categories.values():
            if category.id == key_or_id:
                return category
        return None

    def severity_for(self, score: int) -> SeverityLevel:
        """Returns the single band containing ``score`` (clamped to 0-100)."""
        clamped = min(max(int(score), SCORE_MIN), SCORE_MAX)
        for level in self.severity_levels:
            if level.contains(clamped):
                return level
        # Unreachable once the partition invariant holds.
        raise LookupError(f"no severity level for score {score}")

    def level(self, tier: SeverityTier) -> SeverityLevel:
        for level in self.severity_levels:
            if level.name == tier:
                return level
        raise KeyError(tier.value)

    def mitigation_strategies(self, vulnerabilities: List[str]) -> List[dict]:
        """Mitigation strategies for the known categories among ``vulnerabilities``."""
        strategies = []
        for key in vulnerabilities:
            category = self.get_category(key)
            if category is None:
                continue
            strategies.append({
                "vulnerability": category.name,
                "strategies": list(category.mitigation_strategies),
                "severity_weight": category.severity_weight,
            })
        return strategies


# Custom Exceptions

class TaxonomyError(Exception):
    """Base exception for taxonomy errors."""
    pass


class TaxonomyValidationError(TaxonomyError):
    """The taxonomy document breaks a structural invariant."""
    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"Invalid risk taxonomy: {reason}")


class TaxonomyNotFoundError(TaxonomyError):
    """The taxonomy document could not be read."""
    def __init__(self, path: str):
        self.path = path
        super().__init__(f"Risk taxonomy not found at {path}")
