"""
Scoring Registry - Data Definitions

Versioned scoring algorithms. Each version is an immutable record
pointing at one variant of the scoring formula together with the policy
that variant reads, so a historical score can be recomputed exactly from
its profile and version string.

Author: SentinelZero Team
"""

from datetime import date
from enum import Enum
from typing import Dict, Iterable, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class ScoringVariant(str, Enum):
    """
    Closed set of formula variants a version can point at.

    - BASE: raw weighted formula
    - ENHANCED: formula output scaled by the trend modifier
    """
    BASE = "base"
    ENHANCED = "enhanced"


class TrendModifierPolicy(BaseModel):
    """
    Inputs of the enhanced variant's trend modifier.

    Pinned to an AlgorithmVersion; a different trending set is published
    under a new version string.
    """

    model_config = ConfigDict(frozen=True)

    trending_vulnerabilities: Tuple[str, ...] = (
        "cross_chain_bridge",
        "price_oracle_manipulation",
    )
    trending_multiplier: float = Field(default=1.15, gt=0.0)
    protocol_multipliers: Dict[str, float] = Field(
        default_factory=lambda: {
            "bridge": 1.20,
            "lending": 1.10,
            "dex": 1.05,
            "defi": 1.00,
            "nft": 0.90,
        }
    )
    default_protocol_type: str = "defi"

    @field_validator("trending_vulnerabilities", mode="before")
    @classmethod
    def normalize_tags(cls, v: Iterable[str]) -> Tuple[str, ...]:
        return tuple(str(tag).strip() for tag in v if str(tag).strip())

    def protocol_multiplier(self, protocol_type: "str | None") -> float:
        """Multiplier for a protocol family; unknown families map to 1.0."""
        key = (protocol_type or self.default_protocol_type).lower()
        return self.protocol_multipliers.get(key, 1.0)


class AlgorithmVersion(BaseModel):
    """A registered scoring algorithm version."""

    model_config = ConfigDict(frozen=True)

    version: str = Field(
        ...,
        pattern=r"^v\d+\.\d+\.\d+$",
        description="Semver-like identifier, e.g. 'v1.1.0'."
    )
    name: str = Field(..., min_length=1)
    description: str = ""
    release_date: date
    variant: ScoringVariant
    trend_policy: Optional[TrendModifierPolicy] = Field(
        default=None,
        description="Trend modifier inputs; required for the enhanced variant."
    )

    @model_validator(mode="after")
    def enhanced_pins_policy(self) -> "AlgorithmVersion":
        if self.variant == ScoringVariant.ENHANCED and self.trend_policy is None:
            raise ValueError(f"Enhanced version {self.version} must pin a trend_policy")
        return self


# Custom Exceptions

class ScoringRegistryError(Exception):
    """Base exception for registry errors."""
    pass


class UnknownAlgorithmVersionError(ScoringRegistryError):
    """The requested version string is not registered."""
    def __init__(self, version: str, available: Iterable[str] = ()):
        self.version = version
        self.available = list(available)
        message = f"Unknown scoring version: {version}"
        if self.available:
            message = f"{message} (available: {', '.join(self.available)})"
        super().__init__(message)


class DuplicateAlgorithmVersionError(ScoringRegistryError):
    """A version string is registered twice."""
    def __init__(self, version: str):
        self.version = version
        super().__init__(
            f"Scoring version {version} is already registered; "
            f"published versions cannot be replaced."
        )
