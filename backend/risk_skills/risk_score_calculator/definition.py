"""
Risk Score Calculator - Data Definitions

Pydantic models for the weighted smart-contract risk score.
Profiles are validated on construction; results are immutable.

Author: SentinelZero Team
"""

from typing import Any, Mapping, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from risk_skills.risk_taxonomy.definition import SeverityTier


class ContractProfile(BaseModel):
    """
    Contract attributes gathered by the caller before scoring.

    Data acquisition (bytecode, balances, explorer metadata) happens
    outside the engine; this model is the standard input every
    collaborator hands to the calculator. Field aliases accept the
    camelCase keys used by the JSON API payloads.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    vulnerabilities: Tuple[str, ...] = Field(
        default_factory=tuple,
        description="Vulnerability category keys flagged for the contract."
    )

    tvl: float = Field(
        default=0.0,
        ge=0.0,
        description="Total value locked, in USD."
    )

    is_audited: bool = Field(
        default=False,
        alias="isAudited",
        description="Whether the contract has a security audit."
    )

    audit_age: float = Field(
        default=999,
        ge=0,
        alias="auditAge",
        description="Days since the last audit."
    )

    complexity: float = Field(
        default=5,
        ge=0,
        le=10,
        description="Code complexity rating from 0 (trivial) to 10."
    )

    days_in_production: float = Field(
        default=0,
        ge=0,
        alias="daysInProduction",
        description="Days since deployment."
    )

    has_bug_bounty: bool = Field(
        default=False,
        alias="hasBugBounty",
        description="Whether an active bug bounty program exists."
    )

    protocol_type: Optional[str] = Field(
        default=None,
        alias="protocolType",
        description="Protocol family: bridge, lending, dex, defi, nft."
    )

    @field_validator("vulnerabilities", mode="before")
    @classmethod
    def normalize_vulnerabilities(cls, v: Any) -> Any:
        if v is None:
            return ()
        if isinstance(v, str):
            return (v.strip(),)
        return tuple(str(tag).strip() for tag in v if str(tag).strip())

    @field_validator("protocol_type")
    @classmethod
    def normalize_protocol_type(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        v = v.strip().lower()
        return v or None

    @classmethod
    def from_raw(cls, data: Mapping[str, Any]) -> "ContractProfile":
        """
        Parse a raw mapping (JSON body, collaborator payload).

        Raises:
            InvalidProfileError: If a field is out of its documented range.
        """
        try:
            return cls.model_validate(dict(data))
        except ValidationError as e:
            problems = "; ".join(
                f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}"
                for err in e.errors()
            )
            raise InvalidProfileError(problems) from e


class ScoreBreakdown(BaseModel):
    """
    Weighted contribution of each factor plus the total.

    Each component is rounded on its own, so the six values do not
    necessarily add up to ``total``.
    """

    model_config = ConfigDict(frozen=True)

    vulnerability: int = Field(ge=0, le=100)
    tvl: int = Field(ge=0, le=100)
    audit: int = Field(ge=0, le=100)
    complexity: int = Field(ge=0, le=100)
    production: int = Field(ge=0, le=100)
    bug_bounty: int = Field(ge=0, le=100)
    total: int = Field(ge=0, le=100)


class ScoreResult(BaseModel):
    """Outcome of one scoring call."""

    model_config = ConfigDict(frozen=True)

    score: int = Field(..., ge=0, le=100, description="Final score (0-100).")
    base_score: int = Field(..., ge=0, le=100, description="Formula score before modifiers.")
    level: SeverityTier
    color: str = ""
    action_required: str = ""
    breakdown: ScoreBreakdown
    trend_modifier: float = Field(default=1.0, gt=0.0)
    scoring_version: Optional[str] = None
    scoring_algorithm: Optional[str] = None

    def to_summary(self) -> str:
        """One-line summary for logs and CLIs."""
        version = f" [{self.scoring_version}]" if self.scoring_version else ""
        return (
            f"Score: {self.score}/100 | Level: {self.level.value.upper()} | "
            f"Modifier: {self.trend_modifier:.2f}x{version}"
        )


# Custom Exceptions

class RiskCalculatorError(Exception):
    """Base exception for calculator errors."""
    pass


class InvalidProfileError(RiskCalculatorError):
    """A contract profile field is outside its documented range."""
    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"Invalid contract profile: {reason}")
