"""
Scoring Registry Skill

Versioned scoring algorithms for SentinelZero.
Keeps historical scores reproducible while the formula evolves.
"""

from .definition import (
    AlgorithmVersion,
    DuplicateAlgorithmVersionError,
    ScoringRegistryError,
    ScoringVariant,
    TrendModifierPolicy,
    UnknownAlgorithmVersionError,
)

from .impl import (
    AlgorithmRegistry,
    apply_trend_modifier,
    build_default_registry,
    calculate_trend_modifier,
    BUILTIN_VERSIONS,
    DEFAULT_VERSION,
)

__all__ = [
    # Classes
    "AlgorithmRegistry",
    # Models
    "AlgorithmVersion",
    "ScoringVariant",
    "TrendModifierPolicy",
    # Exceptions
    "DuplicateAlgorithmVersionError",
    "ScoringRegistryError",
    "UnknownAlgorithmVersionError",
    # Functions
    "apply_trend_modifier",
    "build_default_registry",
    "calculate_trend_modifier",
    # Constants
    "BUILTIN_VERSIONS",
    "DEFAULT_VERSION",
]
