"""
Historical Context - Implementation

Contextualizes a set of vulnerability tags against past incidents:
- Similar incidents per tag, with aggregate financial loss
- Rule-based industry risk trend (first matching rule wins)
- Fixed mitigation recommendations per tag

Author: SentinelZero Team
"""

import json
import logging
import re
from pathlib import Path
from typing import Dict, Iterable, List, Mapping, Optional, Sequence

from pydantic import ValidationError

try:
    from .definition import (
        CorpusFormatError,
        HistoricalContext,
        HistoricalContextError,
        Incident,
        IncidentCorpus,
        IncidentSummary,
        RiskTrend,
        TrendRules,
    )
except ImportError:
    from definition import (
        CorpusFormatError,
        HistoricalContext,
        HistoricalContextError,
        Incident,
        IncidentCorpus,
        IncidentSummary,
        RiskTrend,
        TrendRules,
    )

logger = logging.getLogger(__name__)


DEFAULT_CORPUS_PATH = Path(__file__).parent / "data" / "historical_exploits.json"

_SEPARATORS = re.compile(r"[\s/]")

# Tag -> mitigation texts, in the order they are reported.
RECOMMENDATIONS: Dict[str, Sequence[str]] = {
    "reentrancy": (
        "Implement ReentrancyGuard on all external functions",
        "Follow Checks-Effects-Interactions pattern",
    ),
    "price_oracle_manipulation": (
        "Use Chainlink price feeds with multiple sources",
        "Implement TWAP with minimum 30-minute window",
    ),
    "governance_exploit": (
        "Add 48-hour timelock to all governance actions",
        "Require token vesting for voting power",
    ),
    "cross_chain_bridge": (
        "Require threshold signatures from independent bridge validators",
        "Rate-limit bridge withdrawals per epoch",
    ),
    "flash_loan_attack": (
        "Do not derive prices or voting power from same-block balances",
    ),
    "access_control": (
        "Move privileged roles behind a multisig with a timelock",
    ),
}


def normalize_category(category: str) -> str:
    """'Governance/Access Control' -> 'governance_access_control'."""
    return _SEPARATORS.sub("_", category.lower())


def load_incident_corpus(path: Optional[Path] = None) -> IncidentCorpus:
    """
    Load the incident corpus from ``path`` or from the shipped document.

    A missing or unreadable corpus yields an unavailable, empty corpus
    instead of an error.
    """
    source = Path(path) if path is not None else DEFAULT_CORPUS_PATH
    try:
        with open(source, "r", encoding="utf-8") as f:
            document = json.load(f)
        return parse_incident_corpus(document)
    except (OSError, json.JSONDecodeError, HistoricalContextError) as e:
        logger.warning(f"Incident corpus unavailable ({source}): {e}")
        return IncidentCorpus(incidents=(), available=False)


def parse_incident_corpus(document: Mapping) -> IncidentCorpus:
    """
    Build a corpus from a parsed document with an ``exploits`` list.

    Raises:
        CorpusFormatError: If the document shape or an incident is invalid.
    """
    raw_incidents = document.get("exploits")
    if not isinstance(raw_incidents, list):
        raise CorpusFormatError("'exploits' must be a list")
    try:
        incidents = tuple(Incident.model_validate(raw) for raw in raw_incidents)
    except ValidationError as e:
        raise CorpusFormatError(str(e)) from e
    logger.info(f"Loaded incident corpus: {len(incidents)} incidents")
    return IncidentCorpus(incidents=incidents, available=True)


class HistoricalContextEngine:
    """
    Historical context for vulnerability tags.

    Usage:
        engine = HistoricalContextEngine(load_incident_corpus())
        ctx = engine.context(["reentrancy", "cross_chain_bridge"])

        print(ctx.risk_trend.value)
        for summary in ctx.similar_incidents:
            print(summary.vulnerability, summary.incident_count, summary.total_loss)

    Never raises for unknown tags: they report zero incidents and no
    recommendation.
    """

    def __init__(
        self,
        corpus: Optional[IncidentCorpus] = None,
        trend_rules: Optional[TrendRules] = None,
        recommendations: Optional[Mapping[str, Sequence[str]]] = None,
    ):
        """
        Initialize the engine.

        Args:
            corpus: Past incidents. Defaults to the shipped corpus.
            trend_rules: Tags driving the increasing/stable rules.
            recommendations: Tag -> mitigation texts lookup table.
        """
        self.corpus = corpus if corpus is not None else load_incident_corpus()
        self.trend_rules = trend_rules or TrendRules()
        self.recommendations = dict(recommendations if recommendations is not None else RECOMMENDATIONS)
        self._normalized = [
            (normalize_category(incident.vulnerability_category), incident)
            for incident in self.corpus.incidents
        ]

    def context(self, vulnerabilities: Iterable[str]) -> HistoricalContext:
        """Similar incidents, risk trend and recommendations for the tags."""
        tags = [tag for tag in vulnerabilities if tag]
        return HistoricalContext(
            similar_incidents=self.find_similar_incidents(tags),
            risk_trend=self.assess_risk_trend(tags),
            recommendations=self.generate_recommendations(tags),
        )

    def find_similar_incidents(self, vulnerabilities: Iterable[str]) -> List[IncidentSummary]:
        """
        Count matching incidents per tag.

        A tag matches an incident when the normalized category contains the
        lower-cased tag, or the tag contains the normalized category.
        """
        summaries = []
        for tag in vulnerabilities:
            if not self.corpus.available:
                summaries.append(IncidentSummary(vulnerability=tag))
                continue

            needle = tag.lower()
            matches = [
                incident
                for category, incident in self._normalized
                if needle in category or category in needle
            ]
            if not matches:
                logger.debug(f"No recorded incidents match '{tag}'")
            summaries.append(IncidentSummary(
                vulnerability=tag,
                incident_count=len(matches),
                total_loss_usd=sum(i.financial_impact_usd for i in matches),
            ))
        return summaries

    def assess_risk_trend(self, vulnerabilities: Iterable[str]) -> RiskTrend:
        tags = set(vulnerabilities)
        if tags.intersection(self.trend_rules.high_trend):
            return RiskTrend.INCREASING
        if tags.intersection(self.trend_rules.stable):
            return RiskTrend.STABLE
        return RiskTrend.DECREASING

    def generate_recommendations(self, vulnerabilities: Iterable[str]) -> List[str]:
        """Mitigation texts for mapped tags, in lookup-table order, without duplicates."""
        tags = set(vulnerabilities)
        recommendations: List[str] = []
        for tag, texts in self.recommendations.items():
            if tag not in tags:
                continue
            for text in texts:
                if text not in recommendations:
                    recommendations.append(text)
        return recommendations
