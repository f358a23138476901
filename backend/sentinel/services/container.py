"""
Dependency Injection Container.

This module provides a centralized container for the scoring core. It
builds each collaborator once from Settings and hands the same instances
to the pipeline, the approval engine and the API.

The container pattern enables:
- Centralized dependency management
- Easy testing with substitute history backends
- Lazy initialization of data-file backed services

Example:
    from sentinel.services.container import get_container

    container = get_container()
    result = container.pipeline.evaluate("0xabc", profile)
    decision = container.approval_engine.process(result, container.approval_policy)
"""

from datetime import date
from functools import lru_cache
from typing import List, Optional

from risk_skills.auto_approval import ApprovalLedger, ApprovalPolicy, AutoApprovalEngine
from risk_skills.historical_context import (
    HistoricalContextEngine,
    TrendRules,
    load_incident_corpus,
)
from risk_skills.risk_score_calculator import RiskScoreCalculator
from risk_skills.risk_taxonomy import Taxonomy, load_taxonomy
from risk_skills.score_history import (
    HistoryBackend,
    InMemoryHistoryBackend,
    JsonFileHistoryBackend,
    ScoreHistoryStore,
)
from risk_skills.scoring_registry import (
    AlgorithmRegistry,
    AlgorithmVersion,
    ScoringVariant,
    TrendModifierPolicy,
    build_default_registry,
)

from sentinel.core.config import Settings, get_settings
from sentinel.core.logging import PipelineLogger
from sentinel.engine.pipeline import EvaluationPipeline


class DependencyContainer:
    """
    Centralized container for application dependencies.

    Every service is created on first access and cached until reset().

    Attributes:
        settings: Settings the services are built from.
    """

    def __init__(self, settings: Optional[Settings] = None) -> None:
        """Initialize the container with lazy service references."""
        self.settings = settings or get_settings()
        self._taxonomy: Optional[Taxonomy] = None
        self._registry: Optional[AlgorithmRegistry] = None
        self._context_engine: Optional[HistoricalContextEngine] = None
        self._history_backend: Optional[HistoryBackend] = None
        self._history_store: Optional[ScoreHistoryStore] = None
        self._pipeline: Optional[EvaluationPipeline] = None
        self._ledger: Optional[ApprovalLedger] = None
        self._approval_engine: Optional[AutoApprovalEngine] = None
        self._logger: Optional[PipelineLogger] = None

    @property
    def logger(self) -> PipelineLogger:
        if self._logger is None:
            self._logger = PipelineLogger("evaluation")
        return self._logger

    @property
    def taxonomy(self) -> Taxonomy:
        """
        Get the risk taxonomy.

        Raises:
            TaxonomyValidationError: If the configured document is invalid.
        """
        if self._taxonomy is None:
            self._taxonomy = load_taxonomy(self.settings.taxonomy_path)
        return self._taxonomy

    @property
    def configured_versions(self) -> List[AlgorithmVersion]:
        """
        Versions published from settings.

        A configured trending set never alters v1.1.0; it is published as
        an enhanced version under ``trending_algorithm_version``.
        """
        if self.settings.trending_vulnerabilities is None:
            return []
        return [
            AlgorithmVersion(
                version=self.settings.trending_algorithm_version,
                name="Enhanced Risk Scoring with Configured Trends",
                description="Enhanced variant pinned to the configured trending set",
                release_date=date.today(),
                variant=ScoringVariant.ENHANCED,
                trend_policy=TrendModifierPolicy(
                    trending_vulnerabilities=self.settings.trending_vulnerabilities,
                ),
            )
        ]

    @property
    def trend_rules(self) -> TrendRules:
        return TrendRules(
            high_trend=tuple(self.settings.high_trend_vulnerabilities),
            stable=tuple(self.settings.stable_trend_vulnerabilities),
        )

    @property
    def approval_policy(self) -> ApprovalPolicy:
        """Default auto-approval policy from settings."""
        return ApprovalPolicy(
            enabled=self.settings.auto_approve_enabled,
            threshold=self.settings.auto_approve_threshold,
            auto_approve_low=self.settings.auto_approve_low_risk,
            auto_approve_medium=self.settings.auto_approve_medium_risk,
        )

    @property
    def registry(self) -> AlgorithmRegistry:
        if self._registry is None:
            self._registry = build_default_registry(
                calculator=RiskScoreCalculator(self.taxonomy),
                default_version=self.settings.default_algorithm_version,
                extra_versions=self.configured_versions,
            )
        return self._registry

    @property
    def context_engine(self) -> HistoricalContextEngine:
        if self._context_engine is None:
            self._context_engine = HistoricalContextEngine(
                corpus=load_incident_corpus(self.settings.incident_corpus_path),
                trend_rules=self.trend_rules,
            )
        return self._context_engine

    @property
    def history_backend(self) -> HistoryBackend:
        """
        Get the history backend selected by ``history_backend``.

        Raises:
            HistoryUnavailableError: If the JSON history file cannot be loaded.
        """
        if self._history_backend is None:
            if self.settings.history_backend == "json":
                self._history_backend = JsonFileHistoryBackend(self.settings.history_path)
            else:
                self._history_backend = InMemoryHistoryBackend()
        return self._history_backend

    @property
    def history_store(self) -> ScoreHistoryStore:
        if self._history_store is None:
            self._history_store = ScoreHistoryStore(
                backend=self.history_backend,
                trend_window=self.settings.trend_window,
                trend_delta=self.settings.trend_delta,
                default_limit=self.settings.history_default_limit,
            )
        return self._history_store

    @property
    def pipeline(self) -> EvaluationPipeline:
        """
        Get the EvaluationPipeline instance.

        The pipeline is wired with the container's registry, context
        engine, history store and logger.
        """
        if self._pipeline is None:
            self._pipeline = EvaluationPipeline(
                registry=self.registry,
                context_engine=self.context_engine,
                store=self.history_store,
                logger=self.logger,
            )
        return self._pipeline

    @property
    def ledger(self) -> ApprovalLedger:
        if self._ledger is None:
            self._ledger = ApprovalLedger()
        return self._ledger

    @property
    def approval_engine(self) -> AutoApprovalEngine:
        if self._approval_engine is None:
            self._approval_engine = AutoApprovalEngine(ledger=self.ledger)
        return self._approval_engine

    def reset(self) -> None:
        """
        Reset all cached services.

        Useful for testing to ensure fresh instances.
        """
        self._taxonomy = None
        self._registry = None
        self._context_engine = None
        self._history_backend = None
        self._history_store = None
        self._pipeline = None
        self._ledger = None
        self._approval_engine = None
        self._logger = None

    def override_history_backend(self, backend: HistoryBackend) -> None:
        """
        Override the history backend, e.g. with a failing fake.

        Args:
            backend: Object satisfying the HistoryBackend protocol.
        """
        self._history_backend = backend
        # Rebuild store and pipeline around the new backend
        self._history_store = None
        self._pipeline = None


@lru_cache(maxsize=1)
def get_container() -> DependencyContainer:
    """
    Get the singleton DependencyContainer instance.

    Uses lru_cache to ensure only one container exists per process.

    Example:
        >>> container = get_container()
        >>> container.pipeline.evaluate("0xabc", {"tvl": 1_000_000})
    """
    return DependencyContainer()


def reset_container() -> None:
    """
    Reset the global container singleton.

    Clears the lru_cache and allows a fresh container to be created.
    Useful for testing isolation.
    """
    get_container.cache_clear()
