"""
Pytest configuration and shared fixtures.

This module provides common fixtures for testing the SentinelZero risk
engine. Every fixture builds fresh in-memory collaborators, so tests never
share score history or approval decisions.

Usage:
    def test_example(pipeline, sample_profile):
        result = pipeline.evaluate("0xabc", sample_profile)
        assert result.level.value == "high"
"""

from typing import List

import pytest
from unittest.mock import MagicMock

from risk_skills.auto_approval import ApprovalLedger, ApprovalPolicy, AutoApprovalEngine
from risk_skills.historical_context import HistoricalContextEngine, load_incident_corpus
from risk_skills.risk_score_calculator import ContractProfile, RiskScoreCalculator
from risk_skills.risk_taxonomy import load_taxonomy
from risk_skills.score_history import ScoreHistoryStore, ScoreRecord
from risk_skills.scoring_registry import build_default_registry


# =============================================================================
# SCORING FIXTURES
# =============================================================================


@pytest.fixture
def taxonomy():
    """Shipped risk taxonomy."""
    return load_taxonomy()


@pytest.fixture
def calculator(taxonomy):
    return RiskScoreCalculator(taxonomy)


@pytest.fixture
def registry(calculator):
    """Registry with v1.0.0 (base) and v1.1.0 (enhanced, default)."""
    return build_default_registry(calculator=calculator)


@pytest.fixture
def context_engine():
    return HistoricalContextEngine(load_incident_corpus())


# =============================================================================
# PROFILE FIXTURES
# =============================================================================


@pytest.fixture
def sample_profile():
    """
    Reentrancy profile scoring 76 (HIGH) with the base formula.

    Breakdown: vulnerability 38, tvl 20, audit 6, complexity 7,
    production 4, bug_bounty 1.
    """
    return ContractProfile(
        vulnerabilities=["reentrancy"],
        tvl=50_000_000,
        is_audited=True,
        audit_age=120,
        complexity=7,
        days_in_production=45,
        has_bug_bounty=True,
    )


@pytest.fixture
def safe_profile():
    """Audited, long-running, bounty-covered contract with no findings."""
    return ContractProfile(
        vulnerabilities=[],
        tvl=500_000,
        is_audited=True,
        audit_age=30,
        complexity=2,
        days_in_production=900,
        has_bug_bounty=True,
    )


# =============================================================================
# HISTORY FIXTURES
# =============================================================================


@pytest.fixture
def store():
    """Empty in-memory history store (window 5, delta 10)."""
    return ScoreHistoryStore()


@pytest.fixture
def make_record(calculator, sample_profile):
    """
    Factory fixture for ScoreRecords with a chosen score.

    Usage:
        def test_example(make_record):
            record = make_record("0xabc", 42)
    """
    breakdown = calculator.score(sample_profile).breakdown

    def _create_record(subject_id: str = "0xabc", score: int = 50) -> ScoreRecord:
        return ScoreRecord(
            subject_id=subject_id,
            score=score,
            level=calculator.taxonomy.severity_for(score).name,
            breakdown=breakdown,
            algorithm_version="v1.0.0",
        )
    return _create_record


@pytest.fixture
def failing_backend():
    """
    History backend whose add() always fails.

    Usage:
        def test_example(failing_backend):
            store = ScoreHistoryStore(backend=failing_backend)
    """
    records: List[ScoreRecord] = []
    backend = MagicMock()
    backend.add.side_effect = OSError("disk full")
    backend.get.side_effect = lambda subject_id: [r for r in records if r.subject_id == subject_id]
    backend.subjects.return_value = []
    return backend


# =============================================================================
# PIPELINE / APPROVAL FIXTURES
# =============================================================================


@pytest.fixture
def mock_logger():
    """
    Mock PipelineLogger for asserting traced stages.

    Usage:
        def test_example(mock_logger):
            pipeline = EvaluationPipeline(..., logger=mock_logger)
            mock_logger.evaluation_start.assert_called_once()
    """
    return MagicMock()


@pytest.fixture
def pipeline(registry, context_engine, store, mock_logger):
    from sentinel.engine.pipeline import EvaluationPipeline

    return EvaluationPipeline(
        registry=registry,
        context_engine=context_engine,
        store=store,
        logger=mock_logger,
    )


@pytest.fixture
def ledger():
    return ApprovalLedger()


@pytest.fixture
def approval_engine(ledger):
    return AutoApprovalEngine(ledger=ledger)


@pytest.fixture
def enabled_policy():
    """Auto-approval on, threshold 70, low allowed, medium not."""
    return ApprovalPolicy(enabled=True, threshold=70)


# =============================================================================
# CONTAINER / API FIXTURES
# =============================================================================


@pytest.fixture
def test_container():
    """
    Fresh DependencyContainer with in-memory history.

    Usage:
        def test_example(test_container):
            result = test_container.pipeline.evaluate("0xabc", {"tvl": 1})
    """
    from sentinel.core.config import Settings
    from sentinel.services.container import DependencyContainer

    return DependencyContainer(Settings(history_backend="memory", _env_file=None))


@pytest.fixture
def client(test_container):
    """
    TestClient whose routes resolve the test container.

    Server exceptions are turned into 500 responses instead of being
    re-raised, so the global handler can be asserted.
    """
    from fastapi.testclient import TestClient

    from sentinel.main import app
    from sentinel.services import get_container

    app.dependency_overrides[get_container] = lambda: test_container
    with TestClient(app, raise_server_exceptions=False) as test_client:
        yield test_client
    app.dependency_overrides.clear()


# =============================================================================
# PYTEST CONFIGURATION
# =============================================================================


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests"
    )
