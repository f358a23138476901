"""
Evaluation Pipeline

Flow: resolve version → parse profile → score → historical context →
record + trend (subject lock) → alerts.

Only the record stage has a side effect, and it runs after every stage
that can reject the input.
"""

from typing import Any, Iterable, List, Mapping, Optional, Tuple, Union

from risk_skills.historical_context import HistoricalContextEngine
from risk_skills.risk_score_calculator import ContractProfile, InvalidProfileError, ScoreResult
from risk_skills.score_history import ScoreHistoryStore, ScoreRecord, ScoreTrend
from risk_skills.scoring_registry import AlgorithmRegistry

from sentinel.core.exceptions import DOMAIN_ERRORS, EvaluationError
from sentinel.core.logging import PipelineLogger
from sentinel.engine.models import Alert, AlertLevel, EvaluationResult

ProfileInput = Union[ContractProfile, Mapping[str, Any]]

CRITICAL_ALERT_SCORE = 90
HIGH_ALERT_SCORE = 75
VULNERABILITY_ALERT_POINTS = 35


def generate_alerts(result: ScoreResult) -> List[Alert]:
    """
    Alerts for a score result.

    Critical and high are exclusive (critical wins); the vulnerability
    warning is independent of both.
    """
    alerts: List[Alert] = []

    if result.score >= CRITICAL_ALERT_SCORE:
        alerts.append(Alert(
            level=AlertLevel.CRITICAL,
            message="Critical risk detected - immediate action required",
        ))
    elif result.score >= HIGH_ALERT_SCORE:
        alerts.append(Alert(
            level=AlertLevel.HIGH,
            message="High risk - urgent review recommended",
        ))

    if result.breakdown.vulnerability > VULNERABILITY_ALERT_POINTS:
        alerts.append(Alert(
            level=AlertLevel.WARNING,
            message="Multiple vulnerability categories detected",
        ))

    return alerts


def parse_profile(profile: ProfileInput) -> ContractProfile:
    """Accept a ContractProfile or a raw mapping (snake_case or camelCase keys)."""
    if isinstance(profile, ContractProfile):
        return profile
    if isinstance(profile, Mapping):
        return ContractProfile.from_raw(profile)
    raise InvalidProfileError(f"expected a mapping, got {type(profile).__name__}")


class EvaluationPipeline:
    """
    Scores a subject, enriches the score and records it.

    Usage:
        pipeline = EvaluationPipeline(registry, context_engine, store)
        result = pipeline.evaluate("0xabc", {"vulnerabilities": ["reentrancy"], "tvl": 5e7})
        for alert in result.alerts:
            print(alert.level.value, alert.message)

    Raises:
        UnknownAlgorithmVersionError: Version not registered; nothing recorded.
        InvalidProfileError: Profile failed validation; nothing recorded.
        HistoryUnavailableError: History backend failed; nothing recorded.
        EvaluationError: Any other stage failure.
    """

    def __init__(
        self,
        registry: AlgorithmRegistry,
        context_engine: HistoricalContextEngine,
        store: ScoreHistoryStore,
        logger: Optional[PipelineLogger] = None,
    ):
        self.registry = registry
        self.context_engine = context_engine
        self.store = store
        self.logger = logger or PipelineLogger("evaluation")

    def evaluate(
        self,
        subject_id: str,
        profile: ProfileInput,
        version: Optional[str] = None,
    ) -> EvaluationResult:
        """
        Evaluate one subject.

        Args:
            subject_id: Contract address or other stable identifier.
            profile: ContractProfile or raw mapping.
            version: Algorithm version; None selects the registry default.
        """
        entry = self.registry.resolve(version)
        self.logger.evaluation_start(subject_id, entry.version)

        stage = "profile"
        try:
            parsed = parse_profile(profile)

            stage = "score"
            score = self.registry.score_with(entry, parsed)
            self.logger.stage(stage, score.to_summary())

            stage = "context"
            context = self.context_engine.context(parsed.vulnerabilities)
            mitigations = self.registry.calculator.taxonomy.mitigation_strategies(
                list(parsed.vulnerabilities)
            )
            self.logger.stage(
                stage,
                f"{len(context.similar_incidents)} incident groups, trend {context.risk_trend.value}",
            )

            stage = "record"
            record, trend = self.store.record_and_trend(ScoreRecord(
                subject_id=subject_id,
                score=score.score,
                level=score.level,
                breakdown=score.breakdown,
                algorithm_version=entry.version,
            ))
            self.logger.stage(stage, f"score trend {trend.value}")

            stage = "alerts"
            alerts = generate_alerts(score)
        except DOMAIN_ERRORS as e:
            self.logger.error(stage, e)
            raise
        except Exception as e:
            self.logger.error(stage, e)
            raise EvaluationError(
                "Evaluation failed",
                subject_id=subject_id,
                stage=stage,
                original_error=e,
            ) from e

        result = EvaluationResult(
            subject_id=subject_id,
            score=score.score,
            base_score=score.base_score,
            level=score.level,
            color=score.color,
            action_required=score.action_required,
            breakdown=score.breakdown,
            trend=trend,
            alerts=alerts,
            historical_context=context,
            mitigation_strategies=mitigations,
            scoring_version=entry.version,
            scoring_algorithm=entry.name,
            trend_modifier=score.trend_modifier,
            timestamp=record.timestamp,
        )
        self.logger.evaluation_end(
            subject_id, result.score, result.level.value, trend.value, len(alerts)
        )
        return result

    def evaluate_batch(
        self,
        items: Iterable[Tuple[str, ProfileInput]],
        version: Optional[str] = None,
    ) -> List[EvaluationResult]:
        """
        Evaluate ``(subject_id, profile)`` pairs in order.

        The version is resolved once up front. The first failing item
        propagates its error; items before it stay recorded.
        """
        entry = self.registry.resolve(version)
        return [self.evaluate(subject_id, profile, entry.version) for subject_id, profile in items]

    def history(self, subject_id: str, limit: Optional[int] = None) -> List[ScoreRecord]:
        return self.store.history(subject_id, limit)

    def trend(self, subject_id: str) -> ScoreTrend:
        return self.store.trend(subject_id)
