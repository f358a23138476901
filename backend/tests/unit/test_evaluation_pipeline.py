"""
Unit tests for the EvaluationPipeline.

Tests the full evaluate flow, alert generation, the guarantee that
rejected evaluations leave the score history untouched, and serialized
record+trend under concurrent evaluations of one subject.
"""

import threading
import time

import pytest

from risk_skills.historical_context import RiskTrend
from risk_skills.risk_score_calculator import InvalidProfileError, ScoreBreakdown, ScoreResult
from risk_skills.risk_taxonomy import SeverityTier
from risk_skills.score_history import (
    HistoryUnavailableError,
    InMemoryHistoryBackend,
    ScoreHistoryStore,
    ScoreRecord,
    ScoreTrend,
    derive_trend,
)
from risk_skills.scoring_registry import UnknownAlgorithmVersionError

from sentinel.core.exceptions import EvaluationError
from sentinel.engine import AlertLevel, EvaluationPipeline, generate_alerts


def make_score(score: int, vulnerability: int = 0) -> ScoreResult:
    return ScoreResult(
        score=score,
        base_score=score,
        level=SeverityTier.MEDIUM,
        breakdown=ScoreBreakdown(
            vulnerability=vulnerability, tvl=0, audit=0, complexity=0,
            production=0, bug_bounty=0, total=score,
        ),
    )


class TestEvaluate:
    """Tests for a single evaluation."""

    def test_reentrancy_profile(self, pipeline, sample_profile):
        result = pipeline.evaluate("0xabc", sample_profile, "v1.0.0")

        assert result.score == 76
        assert result.level == SeverityTier.HIGH
        assert result.breakdown.vulnerability == 38
        assert result.trend == ScoreTrend.INSUFFICIENT_DATA
        assert result.scoring_version == "v1.0.0"
        assert result.historical_context.risk_trend == RiskTrend.DECREASING
        assert result.historical_context.similar_incidents[0].incident_count == 2
        assert [a.level for a in result.alerts] == [AlertLevel.HIGH, AlertLevel.WARNING]
        assert [m["vulnerability"] for m in result.mitigation_strategies] == ["Reentrancy Attacks"]

    def test_default_version_is_enhanced(self, pipeline, sample_profile):
        result = pipeline.evaluate("0xabc", sample_profile)
        assert result.scoring_version == "v1.1.0"

    def test_raw_mapping_profile(self, pipeline):
        result = pipeline.evaluate("0xabc", {"vulnerabilities": ["reentrancy"], "isAudited": True})
        assert result.breakdown.vulnerability == 38

    def test_records_history_and_trend(self, pipeline, sample_profile, safe_profile):
        pipeline.evaluate("0xabc", safe_profile, "v1.0.0")
        second = pipeline.evaluate("0xabc", sample_profile, "v1.0.0")

        assert second.trend == ScoreTrend.INCREASING
        assert [r.score for r in pipeline.history("0xabc")] == [17, 76]
        assert pipeline.trend("0xabc") == ScoreTrend.INCREASING
        assert second.timestamp == pipeline.history("0xabc")[-1].timestamp

    def test_record_keeps_reported_score_and_formula_breakdown(
        self, pipeline, sample_profile, safe_profile
    ):
        """nft multiplier moves 76 to 68; the trend follows the reported score."""
        nft = sample_profile.model_copy(update={"protocol_type": "nft"})
        pipeline.evaluate("0xabc", safe_profile, "v1.1.0")
        result = pipeline.evaluate("0xabc", nft, "v1.1.0")

        record = pipeline.history("0xabc")[-1]
        assert record.score == result.score == 68
        assert record.breakdown.total == result.base_score == 76
        assert record.level == SeverityTier.MEDIUM
        assert result.trend == derive_trend([17, 68], 10)

    def test_traces_stages(self, pipeline, sample_profile, mock_logger):
        pipeline.evaluate("0xabc", sample_profile)

        mock_logger.evaluation_start.assert_called_once_with("0xabc", "v1.1.0")
        mock_logger.evaluation_end.assert_called_once()


class TestRejectedEvaluations:
    """Tests for evaluations that must not write history."""

    def test_unknown_version_leaves_store_unchanged(self, pipeline, sample_profile):
        pipeline.evaluate("0xabc", sample_profile)

        with pytest.raises(UnknownAlgorithmVersionError):
            pipeline.evaluate("0xabc", sample_profile, "v9.9.9")

        assert len(pipeline.history("0xabc")) == 1

    def test_invalid_profile_leaves_store_unchanged(self, pipeline):
        with pytest.raises(InvalidProfileError):
            pipeline.evaluate("0xabc", {"complexity": 11})

        assert pipeline.history("0xabc") == []

    def test_non_mapping_profile_rejected(self, pipeline):
        with pytest.raises(InvalidProfileError):
            pipeline.evaluate("0xabc", ["reentrancy"])

    def test_history_failure_propagates(self, registry, context_engine, failing_backend, sample_profile, mock_logger):
        pipeline = EvaluationPipeline(
            registry, context_engine, ScoreHistoryStore(backend=failing_backend), logger=mock_logger
        )

        with pytest.raises(HistoryUnavailableError):
            pipeline.evaluate("0xabc", sample_profile)

        mock_logger.error.assert_called_once()

    def test_unexpected_failure_wrapped(self, pipeline, sample_profile, monkeypatch):
        def broken_context(tags):
            raise RuntimeError("corpus index corrupted")

        monkeypatch.setattr(pipeline.context_engine, "context", broken_context)

        with pytest.raises(EvaluationError) as exc_info:
            pipeline.evaluate("0xabc", sample_profile)

        assert exc_info.value.stage == "context"
        assert pipeline.history("0xabc") == []


class TestBatch:
    """Tests for evaluate_batch."""

    def test_items_evaluated_in_order(self, pipeline, sample_profile, safe_profile):
        results = pipeline.evaluate_batch(
            [("0xaaa", sample_profile), ("0xbbb", safe_profile)], "v1.0.0"
        )
        assert [(r.subject_id, r.score) for r in results] == [("0xaaa", 76), ("0xbbb", 17)]

    def test_unknown_version_rejected_before_any_item(self, pipeline, sample_profile):
        with pytest.raises(UnknownAlgorithmVersionError):
            pipeline.evaluate_batch([("0xaaa", sample_profile)], "v9.9.9")

        assert pipeline.history("0xaaa") == []


class TestAlerts:
    """Tests for alert generation."""

    @pytest.mark.parametrize(
        "score,vulnerability,expected",
        [
            (95, 0, [AlertLevel.CRITICAL]),
            (90, 38, [AlertLevel.CRITICAL, AlertLevel.WARNING]),
            (89, 0, [AlertLevel.HIGH]),
            (75, 0, [AlertLevel.HIGH]),
            (74, 36, [AlertLevel.WARNING]),
            (74, 35, []),
        ],
    )
    def test_alert_levels(self, score, vulnerability, expected):
        alerts = generate_alerts(make_score(score, vulnerability))
        assert [a.level for a in alerts] == expected

    def test_alert_messages(self):
        critical, warning = generate_alerts(make_score(95, 40))

        assert critical.message == "Critical risk detected - immediate action required"
        assert warning.message == "Multiple vulnerability categories detected"
        assert generate_alerts(make_score(80))[0].message == "High risk - urgent review recommended"


class _OrderedBackend(InMemoryHistoryBackend):
    """In-memory backend that notes which thread wrote each record, in order."""

    def __init__(self):
        super().__init__()
        self.writers = []

    def add(self, record: ScoreRecord) -> None:
        time.sleep(0.001)
        super().add(record)
        self.writers.append(threading.get_ident())


class TestSerializedEvaluation:
    """Concurrent evaluations of one subject see a consistent history."""

    @pytest.mark.slow
    def test_each_trend_matches_history_prefix(
        self, registry, context_engine, mock_logger, sample_profile, safe_profile
    ):
        backend = _OrderedBackend()
        store = ScoreHistoryStore(backend=backend)
        pipeline = EvaluationPipeline(
            registry=registry,
            context_engine=context_engine,
            store=store,
            logger=mock_logger,
        )

        workers = 24
        barrier = threading.Barrier(workers)
        results = {}

        def evaluate(profile):
            # All workers are alive at once, so thread idents are unique
            barrier.wait()
            results[threading.get_ident()] = pipeline.evaluate("0xabc", profile)

        threads = [
            threading.Thread(target=evaluate, args=(sample_profile if i % 3 else safe_profile,))
            for i in range(workers)
        ]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        history = store.history("0xabc", workers)
        scores = [r.score for r in history]
        assert len(backend.writers) == workers
        assert sorted(scores) == sorted(r.score for r in results.values())

        for position, writer in enumerate(backend.writers):
            observed = scores[: position + 1][-store.trend_window:]
            assert results[writer].trend == derive_trend(observed, store.trend_delta)
            assert results[writer].score == scores[position]
