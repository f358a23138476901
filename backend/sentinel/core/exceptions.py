"""
Custom exceptions for the SentinelZero risk engine.

Application-level errors inherit from SentinelBaseException. The skill
errors raised by the scoring core are re-exported here so callers handle
every failure kind from a single module.

Example:
    try:
        result = pipeline.evaluate("0xabc", profile, "v1.0.0")
    except UnknownAlgorithmVersionError as e:
        logger.error(f"Evaluation rejected: {e}")
"""

from typing import Optional

from risk_skills.historical_context.definition import CorpusFormatError, HistoricalContextError
from risk_skills.risk_score_calculator.definition import InvalidProfileError, RiskCalculatorError
from risk_skills.risk_taxonomy.definition import (
    TaxonomyError,
    TaxonomyNotFoundError,
    TaxonomyValidationError,
)
from risk_skills.score_history.definition import HistoryUnavailableError, ScoreHistoryError
from risk_skills.scoring_registry.definition import (
    DuplicateAlgorithmVersionError,
    ScoringRegistryError,
    UnknownAlgorithmVersionError,
)


class SentinelBaseException(Exception):
    """
    Base exception class for application-level SentinelZero errors.

    Attributes:
        message: Human-readable description of the error.
        details: Optional additional context for debugging.
    """

    def __init__(self, message: str, details: Optional[str] = None) -> None:
        self.message = message
        self.details = details
        super().__init__(self.message)

    def __str__(self) -> str:
        """Return string representation with optional details."""
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class EvaluationError(SentinelBaseException):
    """
    Exception raised when an evaluation stage fails unexpectedly.

    Domain errors (unknown version, invalid profile, history unavailable)
    propagate unchanged; anything else is wrapped in this error.

    Attributes:
        subject_id: Subject being evaluated.
        stage: The pipeline stage where the error occurred.
        original_error: The underlying exception if available.
    """

    def __init__(
        self,
        message: str,
        subject_id: Optional[str] = None,
        stage: Optional[str] = None,
        original_error: Optional[Exception] = None,
        details: Optional[str] = None,
    ) -> None:
        """
        Initialize evaluation error.

        Args:
            message: Human-readable description of the error.
            subject_id: Subject being evaluated.
            stage: The pipeline stage where the error occurred
                   (e.g., 'score', 'context', 'record', 'alerts').
            original_error: The underlying exception if available.
            details: Optional additional context for debugging.
        """
        self.subject_id = subject_id
        self.stage = stage
        self.original_error = original_error

        enhanced_message = message
        if subject_id:
            enhanced_message = f"[{subject_id}] {enhanced_message}"
        if stage:
            enhanced_message = f"{enhanced_message} (stage: {stage})"
        if original_error:
            enhanced_message = (
                f"{enhanced_message} | Caused by: "
                f"{type(original_error).__name__}: {str(original_error)[:200]}"
            )

        super().__init__(enhanced_message, details)


DOMAIN_ERRORS = (
    UnknownAlgorithmVersionError,
    InvalidProfileError,
    HistoryUnavailableError,
)


__all__ = [
    "SentinelBaseException",
    "EvaluationError",
    "DOMAIN_ERRORS",
    "CorpusFormatError",
    "DuplicateAlgorithmVersionError",
    "HistoricalContextError",
    "HistoryUnavailableError",
    "InvalidProfileError",
    "RiskCalculatorError",
    "ScoreHistoryError",
    "ScoringRegistryError",
    "TaxonomyError",
    "TaxonomyNotFoundError",
    "TaxonomyValidationError",
    "UnknownAlgorithmVersionError",
]
