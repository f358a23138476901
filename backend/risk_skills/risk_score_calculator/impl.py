"""
Risk Score Calculator - Implementation

Deterministic smart-contract risk scoring with:
- Worst-case vulnerability weighting
- Banded TVL, audit freshness and production-age factors
- Linear complexity factor and binary bug-bounty factor
- Severity tier lookup through the taxonomy

Author: SentinelZero Team
"""

import logging
import math
from typing import Any, Iterable, List, Mapping, Optional, Tuple

from risk_skills.risk_taxonomy import ScoringFactor, Taxonomy, load_taxonomy

try:
    from .definition import (
        ContractProfile,
        InvalidProfileError,
        RiskCalculatorError,
        ScoreBreakdown,
        ScoreResult,
    )
except ImportError:
    from definition import (
        ContractProfile,
        InvalidProfileError,
        RiskCalculatorError,
        ScoreBreakdown,
        ScoreResult,
    )

logger = logging.getLogger(__name__)


# TVL bands in USD: (exclusive lower bound, factor score)
TVL_BANDS: List[Tuple[float, int]] = [
    (100_000_000, 100),
    (10_000_000, 80),
    (1_000_000, 60),
    (100_000, 40),
]
TVL_FLOOR_SCORE = 20

# Audit age bands in days: (exclusive upper bound, factor score)
AUDIT_AGE_BANDS: List[Tuple[float, int]] = [
    (90, 20),
    (180, 40),
    (365, 60),
]
STALE_AUDIT_SCORE = 80
UNAUDITED_SCORE = 100

# Production age bands in days: (exclusive lower bound, factor score).
# Risk decreases the longer a contract survives in production.
PRODUCTION_BANDS: List[Tuple[float, int]] = [
    (365, 20),
    (180, 40),
    (90, 60),
    (30, 80),
]
NEW_DEPLOYMENT_SCORE = 100

BUG_BOUNTY_SCORE = 20
NO_BUG_BOUNTY_SCORE = 80


def round_half_up(value: float) -> int:
    """Round .5 away from zero for positive values, as the score corpus was built."""
    return int(math.floor(value + 0.5))


def vulnerability_factor(taxonomy: Taxonomy, vulnerabilities: Iterable[str]) -> int:
    """Max severity weight among known categories, scaled to 0-100."""
    weights = []
    for tag in vulnerabilities:
        category = taxonomy.get_category(tag)
        if category is None:
            logger.debug(f"Unknown vulnerability category '{tag}' contributes 0")
            weights.append(0.0)
        else:
            weights.append(category.severity_weight)
    if not weights:
        return 0
    return round_half_up(max(weights) * 100)


def tvl_factor(tvl: float) -> int:
    for threshold, score in TVL_BANDS:
        if tvl > threshold:
            return score
    return TVL_FLOOR_SCORE


def audit_factor(is_audited: bool, audit_age: float) -> int:
    if not is_audited:
        return UNAUDITED_SCORE
    for limit, score in AUDIT_AGE_BANDS:
        if audit_age < limit:
            return score
    return STALE_AUDIT_SCORE


def complexity_factor(complexity: float) -> float:
    return (complexity / 10) * 100


def production_factor(days_in_production: float) -> int:
    for threshold, score in PRODUCTION_BANDS:
        if days_in_production > threshold:
            return score
    return NEW_DEPLOYMENT_SCORE


def bug_bounty_factor(has_bug_bounty: bool) -> int:
    return BUG_BOUNTY_SCORE if has_bug_bounty else NO_BUG_BOUNTY_SCORE


class RiskScoreCalculator:
    """
    Deterministic smart-contract risk calculator.

    Combines six weighted factors into a 0-100 score and maps it to a
    severity tier of the taxonomy.

    Usage:
        calculator = RiskScoreCalculator()
        result = calculator.score(ContractProfile(
            vulnerabilities=["reentrancy"],
            tvl=50_000_000,
            is_audited=True,
            audit_age=120,
            complexity=7,
            days_in_production=45,
            has_bug_bounty=True,
        ))

        print(f"Score: {result.score}, Level: {result.level.value}")

    Raises:
        InvalidProfileError: From score_from_dict, if raw data is out of range
    """

    def __init__(self, taxonomy: Optional[Taxonomy] = None):
        """
        Initialize the calculator.

        Args:
            taxonomy: Taxonomy providing category weights, factor weights
                      and severity bands. Defaults to the shipped taxonomy.
        """
        self.taxonomy = taxonomy or load_taxonomy()

    def score(self, profile: ContractProfile) -> ScoreResult:
        """
        Score a contract profile.

        Args:
            profile: Validated contract attributes.

        Returns:
            ScoreResult with total score, breakdown and severity tier.
        """
        weights = self.taxonomy

        vulnerability = vulnerability_factor(weights, profile.vulnerabilities) * weights.weight(
            ScoringFactor.VULNERABILITY_PRESENCE
        )
        tvl = tvl_factor(profile.tvl) * weights.weight(ScoringFactor.TVL_EXPOSURE)
        audit = audit_factor(profile.is_audited, profile.audit_age) * weights.weight(
            ScoringFactor.AUDIT_STATUS
        )
        complexity = complexity_factor(profile.complexity) * weights.weight(
            ScoringFactor.CODE_COMPLEXITY
        )
        production = production_factor(profile.days_in_production) * weights.weight(
            ScoringFactor.TIME_IN_PRODUCTION
        )
        bounty = bug_bounty_factor(profile.has_bug_bounty) * weights.weight(
            ScoringFactor.BUG_BOUNTY
        )

        total = round_half_up(vulnerability + tvl + audit + complexity + production + bounty)
        total = min(max(total, 0), 100)
        level = self.taxonomy.severity_for(total)

        breakdown = ScoreBreakdown(
            vulnerability=round_half_up(vulnerability),
            tvl=round_half_up(tvl),
            audit=round_half_up(audit),
            complexity=round_half_up(complexity),
            production=round_half_up(production),
            bug_bounty=round_half_up(bounty),
            total=total,
        )

        logger.debug(f"Scored profile {profile.vulnerabilities}: {total} ({level.name.value})")

        return ScoreResult(
            score=total,
            base_score=total,
            level=level.name,
            color=level.color,
            action_required=level.action_required,
            breakdown=breakdown,
        )

    def score_from_dict(self, data: Mapping[str, Any]) -> ScoreResult:
        """
        Score a profile given as a raw mapping.

        Convenience method for profiles that come from JSON/API.

        Raises:
            InvalidProfileError: If a field is outside its documented range.
        """
        return self.score(ContractProfile.from_raw(data))


# Convenience function
def calculate_risk_score(profile: ContractProfile) -> ScoreResult:
    """
    Score a profile with the shipped taxonomy.

    Convenience function for simple use cases.
    """
    calculator = RiskScoreCalculator()
    return calculator.score(profile)
