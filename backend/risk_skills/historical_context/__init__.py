"""
Historical Context Skill

Past-incident lookups, industry risk trend and mitigation
recommendations for vulnerability tags.
"""

from .definition import (
    CorpusFormatError,
    CorpusStatistics,
    HistoricalContext,
    HistoricalContextError,
    Incident,
    IncidentCorpus,
    IncidentSummary,
    RiskTrend,
    TrendRules,
)

from .impl import (
    HistoricalContextEngine,
    load_incident_corpus,
    normalize_category,
    parse_incident_corpus,
    DEFAULT_CORPUS_PATH,
    RECOMMENDATIONS,
)

__all__ = [
    # Classes
    "HistoricalContextEngine",
    # Models
    "CorpusStatistics",
    "HistoricalContext",
    "Incident",
    "IncidentCorpus",
    "IncidentSummary",
    "RiskTrend",
    "TrendRules",
    # Exceptions
    "CorpusFormatError",
    "HistoricalContextError",
    # Functions
    "load_incident_corpus",
    "normalize_category",
    "parse_incident_corpus",
    # Constants
    "DEFAULT_CORPUS_PATH",
    "RECOMMENDATIONS",
]
