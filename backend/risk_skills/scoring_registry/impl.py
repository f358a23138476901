"""
Scoring Registry - Implementation

Read-only mapping from version string to scoring algorithm, with:
- Base variant (raw formula)
- Enhanced variant (trend modifier for trending exploits and protocol type)
- Additive extension: new registries wrap, never replace, published versions

Author: SentinelZero Team
"""

import logging
from datetime import date
from types import MappingProxyType
from typing import Callable, Dict, Iterable, List, Mapping, Optional

from risk_skills.risk_score_calculator import (
    ContractProfile,
    RiskScoreCalculator,
    ScoreResult,
    round_half_up,
)

try:
    from .definition import (
        AlgorithmVersion,
        DuplicateAlgorithmVersionError,
        ScoringRegistryError,
        ScoringVariant,
        TrendModifierPolicy,
        UnknownAlgorithmVersionError,
    )
except ImportError:
    from definition import (
        AlgorithmVersion,
        DuplicateAlgorithmVersionError,
        ScoringRegistryError,
        ScoringVariant,
        TrendModifierPolicy,
        UnknownAlgorithmVersionError,
    )

logger = logging.getLogger(__name__)


MAX_SCORE = 100

BUILTIN_VERSIONS: tuple = (
    AlgorithmVersion(
        version="v1.0.0",
        name="Base Risk Scoring",
        description="Initial risk scoring algorithm based on static analysis",
        release_date=date(2026, 1, 12),
        variant=ScoringVariant.BASE,
    ),
    AlgorithmVersion(
        version="v1.1.0",
        name="Enhanced Risk Scoring with Historical Data",
        description="Incorporates historical exploit patterns and trend analysis",
        release_date=date(2026, 1, 12),
        variant=ScoringVariant.ENHANCED,
        trend_policy=TrendModifierPolicy(),
    ),
)

DEFAULT_VERSION = "v1.1.0"


def calculate_trend_modifier(
    profile: ContractProfile,
    policy: TrendModifierPolicy,
) -> float:
    """
    Multiplicative adjustment for contextual risk escalation.

    Starts at 1.0, applies the trending multiplier once if any flagged
    vulnerability is trending, then the protocol-type multiplier.
    """
    modifier = 1.0

    trending = set(policy.trending_vulnerabilities)
    if any(tag in trending for tag in profile.vulnerabilities):
        modifier *= policy.trending_multiplier

    modifier *= policy.protocol_multiplier(profile.protocol_type)
    return modifier


def apply_trend_modifier(base_score: int, modifier: float) -> int:
    """Adjusted score, capped at 100."""
    return min(MAX_SCORE, round_half_up(base_score * modifier))


class AlgorithmRegistry:
    """
    Versioned scoring algorithms.

    The mapping is built once and exposed read-only. Adding a version
    means building a new registry with ``extend``; a published version
    string always resolves to the same variant and trend policy.

    Usage:
        registry = build_default_registry()
        result = registry.score(profile, "v1.1.0")
        print(result.to_summary())

    Raises:
        UnknownAlgorithmVersionError: If a version string is not registered
        DuplicateAlgorithmVersionError: If a version string is registered twice
    """

    def __init__(
        self,
        versions: Iterable[AlgorithmVersion],
        calculator: Optional[RiskScoreCalculator] = None,
        default_version: str = DEFAULT_VERSION,
    ):
        """
        Initialize the registry.

        Args:
            versions: Algorithm versions to publish.
            calculator: Formula implementation shared by all variants.
            default_version: Version used when callers do not pick one.
        """
        table: Dict[str, AlgorithmVersion] = {}
        for entry in versions:
            if entry.version in table:
                raise DuplicateAlgorithmVersionError(entry.version)
            table[entry.version] = entry

        self._versions: Mapping[str, AlgorithmVersion] = MappingProxyType(table)
        self.calculator = calculator or RiskScoreCalculator()

        if default_version not in self._versions:
            raise UnknownAlgorithmVersionError(default_version, self._versions.keys())
        self.default_version = default_version

        self._variants: Mapping[
            ScoringVariant, Callable[[AlgorithmVersion, ContractProfile], ScoreResult]
        ] = MappingProxyType({
            ScoringVariant.BASE: self._score_base,
            ScoringVariant.ENHANCED: self._score_enhanced,
        })

    @property
    def versions(self) -> Mapping[str, AlgorithmVersion]:
        return self._versions

    def list_versions(self) -> List[AlgorithmVersion]:
        """Registered versions in publication order."""
        return list(self._versions.values())

    def resolve(self, version: Optional[str] = None) -> AlgorithmVersion:
        """
        Look a version up.

        Args:
            version: Version string; None selects the default version.

        Raises:
            UnknownAlgorithmVersionError: If the version is not registered.
        """
        key = version or self.default_version
        entry = self._versions.get(key)
        if entry is None:
            raise UnknownAlgorithmVersionError(key, self._versions.keys())
        return entry

    def score(
        self,
        profile: ContractProfile,
        version: Optional[str] = None,
    ) -> ScoreResult:
        """
        Score a profile with a registered version.

        Same profile and version always produce the same ScoreResult.
        """
        entry = self.resolve(version)
        return self.score_with(entry, profile)

    def score_with(self, entry: AlgorithmVersion, profile: ContractProfile) -> ScoreResult:
        """Score with an already resolved version."""
        result = self._variants[entry.variant](entry, profile)
        return result.model_copy(
            update={
                "scoring_version": entry.version,
                "scoring_algorithm": entry.name,
            }
        )

    def extend(self, *new_versions: AlgorithmVersion) -> "AlgorithmRegistry":
        """
        Return a new registry publishing the current versions plus ``new_versions``.

        Raises:
            DuplicateAlgorithmVersionError: If a new version reuses a published string.
        """
        return AlgorithmRegistry(
            versions=[*self._versions.values(), *new_versions],
            calculator=self.calculator,
            default_version=self.default_version,
        )

    def _score_base(self, entry: AlgorithmVersion, profile: ContractProfile) -> ScoreResult:
        return self.calculator.score(profile)

    def _score_enhanced(self, entry: AlgorithmVersion, profile: ContractProfile) -> ScoreResult:
        base = self.calculator.score(profile)
        modifier = calculate_trend_modifier(profile, entry.trend_policy)
        adjusted = apply_trend_modifier(base.score, modifier)

        # Level follows the adjusted score; the breakdown stays the formula's.
        level = self.calculator.taxonomy.severity_for(adjusted)

        if adjusted != base.score:
            logger.debug(
                f"Trend modifier {modifier:.4f}x moved score {base.score} -> {adjusted}"
            )

        return ScoreResult(
            score=adjusted,
            base_score=base.base_score,
            level=level.name,
            color=level.color,
            action_required=level.action_required,
            breakdown=base.breakdown,
            trend_modifier=modifier,
        )


def build_default_registry(
    calculator: Optional[RiskScoreCalculator] = None,
    default_version: str = DEFAULT_VERSION,
    extra_versions: Iterable[AlgorithmVersion] = (),
) -> AlgorithmRegistry:
    """
    Registry with the built-in versions (v1.0.0 base, v1.1.0 enhanced).

    ``extra_versions`` are published after the built-ins, so the default
    version may point at one of them.
    """
    registry = AlgorithmRegistry(
        versions=[*BUILTIN_VERSIONS, *extra_versions],
        calculator=calculator,
        default_version=default_version,
    )
    logger.info(
        f"Scoring registry ready: {', '.join(registry.versions)} "
        f"(default {registry.default_version})"
    )
    return registry
