"""
Risk Taxonomy Skill

Static catalog of smart-contract risk categories, scoring-factor
weights and severity bands.
"""

from .definition import (
    RiskCategory,
    ScoringFactor,
    ScoringFactorWeight,
    SeverityLevel,
    SeverityTier,
    Taxonomy,
    TaxonomyError,
    TaxonomyNotFoundError,
    TaxonomyValidationError,
    WEIGHT_SUM_EPSILON,
)

from .impl import (
    DEFAULT_TAXONOMY_PATH,
    build_taxonomy,
    load_taxonomy,
)

__all__ = [
    # Models
    "RiskCategory",
    "ScoringFactor",
    "ScoringFactorWeight",
    "SeverityLevel",
    "SeverityTier",
    "Taxonomy",
    # Exceptions
    "TaxonomyError",
    "TaxonomyNotFoundError",
    "TaxonomyValidationError",
    # Functions
    "build_taxonomy",
    "load_taxonomy",
    # Constants
    "DEFAULT_TAXONOMY_PATH",
    "WEIGHT_SUM_EPSILON",
]
