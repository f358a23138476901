"""
Score History Skill

Append-only per-subject score history and trend derivation.
"""

from .definition import (
    HistoryBackend,
    HistoryUnavailableError,
    ScoreHistoryError,
    ScoreRecord,
    ScoreTrend,
)

from .impl import (
    InMemoryHistoryBackend,
    JsonFileHistoryBackend,
    ScoreHistoryStore,
    derive_trend,
    DEFAULT_HISTORY_LIMIT,
    DEFAULT_TREND_DELTA,
    DEFAULT_TREND_WINDOW,
)

__all__ = [
    # Classes
    "InMemoryHistoryBackend",
    "JsonFileHistoryBackend",
    "ScoreHistoryStore",
    # Models
    "HistoryBackend",
    "ScoreRecord",
    "ScoreTrend",
    # Exceptions
    "HistoryUnavailableError",
    "ScoreHistoryError",
    # Functions
    "derive_trend",
    # Constants
    "DEFAULT_HISTORY_LIMIT",
    "DEFAULT_TREND_DELTA",
    "DEFAULT_TREND_WINDOW",
]
