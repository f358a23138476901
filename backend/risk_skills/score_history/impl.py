"""
Score History - Implementation

Append-only per-subject score history with:
- Per-subject locking (unrelated subjects never wait on each other)
- All-or-nothing appends through a pluggable backend
- Trend derivation over the most recent records

Author: SentinelZero Team
"""

import json
import logging
import os
import tempfile
import threading
from contextlib import contextmanager, nullcontext
from pathlib import Path
from typing import Dict, Iterator, List, Optional, Sequence, Tuple

from pydantic import ValidationError

try:
    from .definition import (
        HistoryBackend,
        HistoryUnavailableError,
        ScoreHistoryError,
        ScoreRecord,
        ScoreTrend,
    )
except ImportError:
    from definition import (
        HistoryBackend,
        HistoryUnavailableError,
        ScoreHistoryError,
        ScoreRecord,
        ScoreTrend,
    )

logger = logging.getLogger(__name__)


DEFAULT_HISTORY_LIMIT = 10
DEFAULT_TREND_WINDOW = 5
DEFAULT_TREND_DELTA = 10


def derive_trend(scores: Sequence[int], delta: int = DEFAULT_TREND_DELTA) -> ScoreTrend:
    """
    Compare the oldest and newest score of a window.

    Fewer than two scores is insufficient data; a difference of exactly
    ``delta`` in either direction is still stable.
    """
    if len(scores) < 2:
        return ScoreTrend.INSUFFICIENT_DATA

    change = scores[-1] - scores[0]
    if change > delta:
        return ScoreTrend.INCREASING
    if change < -delta:
        return ScoreTrend.DECREASING
    return ScoreTrend.STABLE


class InMemoryHistoryBackend:
    """Process-local backend; records live as long as the process."""

    def __init__(self):
        self._records: Dict[str, List[ScoreRecord]] = {}
        self._lock = threading.Lock()

    def add(self, record: ScoreRecord) -> None:
        with self._lock:
            self._records.setdefault(record.subject_id, []).append(record)

    def get(self, subject_id: str) -> List[ScoreRecord]:
        with self._lock:
            return list(self._records.get(subject_id, ()))

    def subjects(self) -> List[str]:
        with self._lock:
            return list(self._records)


class JsonFileHistoryBackend:
    """
    JSON document on disk: ``{"records": [<ScoreRecord>, ...]}``.

    The whole document is rewritten through a temporary file and an
    atomic rename on every add. A failed write rolls the in-memory
    append back before the error propagates.
    """

    def __init__(self, path: Path):
        self.path = Path(path)
        self._records: List[ScoreRecord] = []
        self._lock = threading.Lock()
        self._load()

    def _load(self) -> None:
        if not self.path.exists():
            logger.info(f"New score history file will be created at {self.path}")
            return
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                document = json.load(f)
            self._records = [ScoreRecord.model_validate(raw) for raw in document.get("records", [])]
        except (OSError, json.JSONDecodeError, ValidationError, AttributeError) as e:
            raise HistoryUnavailableError("load", e) from e
        logger.info(f"Score history loaded from {self.path}: {len(self._records)} records")

    def _write(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        document = {"records": [r.model_dump(mode="json") for r in self._records]}
        fd, tmp_name = tempfile.mkstemp(dir=self.path.parent, suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(document, f, indent=2)
            os.replace(tmp_name, self.path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    def add(self, record: ScoreRecord) -> None:
        with self._lock:
            self._records.append(record)
            try:
                self._write()
            except OSError:
                self._records.pop()
                raise

    def get(self, subject_id: str) -> List[ScoreRecord]:
        with self._lock:
            return [r for r in self._records if r.subject_id == subject_id]

    def subjects(self) -> List[str]:
        with self._lock:
            return list(dict.fromkeys(r.subject_id for r in self._records))


class ScoreHistoryStore:
    """
    Append-only score history keyed by subject.

    Usage:
        store = ScoreHistoryStore()
        with store.subject_lock("0xabc"):
            store.record(record)
            trend = store.trend("0xabc")

    Raises:
        HistoryUnavailableError: If the backend fails. Nothing is appended.
    """

    def __init__(
        self,
        backend: Optional[HistoryBackend] = None,
        trend_window: int = DEFAULT_TREND_WINDOW,
        trend_delta: int = DEFAULT_TREND_DELTA,
        default_limit: int = DEFAULT_HISTORY_LIMIT,
    ):
        """
        Initialize the store.

        Args:
            backend: Storage collaborator. Defaults to in-memory storage.
            trend_window: Number of most recent records the trend compares.
            trend_delta: Exclusive score change marking a trend.
            default_limit: Records returned by history() when no limit is given.
        """
        if trend_window < 2:
            raise ValueError("trend_window must be at least 2")
        self.backend: HistoryBackend = backend if backend is not None else InMemoryHistoryBackend()
        self.trend_window = trend_window
        self.trend_delta = trend_delta
        self.default_limit = default_limit

        self._locks: Dict[str, threading.RLock] = {}
        self._locks_guard = threading.Lock()

    def _lock_for(self, subject_id: str) -> threading.RLock:
        with self._locks_guard:
            lock = self._locks.get(subject_id)
            if lock is None:
                lock = threading.RLock()
                self._locks[subject_id] = lock
            return lock

    @contextmanager
    def subject_lock(self, subject_id: str) -> Iterator[None]:
        """Serialize access to one subject's history (re-entrant)."""
        lock = self._lock_for(subject_id)
        with lock:
            yield

    def _read_lock(self, subject_id: str):
        """
        Existing lock of a subject, or a no-op context.

        Locks are only created on the write path; reads of subjects that
        were never written do not grow the lock table.
        """
        with self._locks_guard:
            lock = self._locks.get(subject_id)
        return lock if lock is not None else nullcontext()

    def record(self, record: ScoreRecord) -> ScoreRecord:
        """Append a record to its subject's history."""
        with self.subject_lock(record.subject_id):
            try:
                self.backend.add(record)
            except ScoreHistoryError:
                raise
            except Exception as e:
                logger.error(f"History backend failed to add record for {record.subject_id}: {e}")
                raise HistoryUnavailableError("add", e) from e
        return record

    def history(self, subject_id: str, limit: Optional[int] = None) -> List[ScoreRecord]:
        """Most recent ``limit`` records, oldest first within the window."""
        limit = self.default_limit if limit is None else limit
        if limit <= 0:
            return []
        with self._read_lock(subject_id):
            records = self._get(subject_id)
        return records[-limit:]

    def trend(self, subject_id: str) -> ScoreTrend:
        """Trend over the last ``trend_window`` records."""
        window = self.history(subject_id, self.trend_window)
        return derive_trend([r.score for r in window], self.trend_delta)

    def record_and_trend(self, record: ScoreRecord) -> Tuple[ScoreRecord, ScoreTrend]:
        """Append and derive the trend without another evaluation interleaving."""
        with self.subject_lock(record.subject_id):
            self.record(record)
            return record, self.trend(record.subject_id)

    def subjects(self) -> List[str]:
        try:
            return self.backend.subjects()
        except Exception as e:
            raise HistoryUnavailableError("subjects", e) from e

    def _get(self, subject_id: str) -> List[ScoreRecord]:
        try:
            return self.backend.get(subject_id)
        except ScoreHistoryError:
            raise
        except Exception as e:
            logger.error(f"History backend failed to read {subject_id}: {e}")
            raise HistoryUnavailableError("get", e) from e
