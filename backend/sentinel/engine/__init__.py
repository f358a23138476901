from sentinel.engine.models import Alert, AlertLevel, EvaluationResult
from sentinel.engine.pipeline import (
    CRITICAL_ALERT_SCORE,
    HIGH_ALERT_SCORE,
    VULNERABILITY_ALERT_POINTS,
    EvaluationPipeline,
    generate_alerts,
)

__all__ = [
    "Alert",
    "AlertLevel",
    "EvaluationResult",
    "EvaluationPipeline",
    "generate_alerts",
    "CRITICAL_ALERT_SCORE",
    "HIGH_ALERT_SCORE",
    "VULNERABILITY_ALERT_POINTS",
]
