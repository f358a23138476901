import logging
import sys
from functools import lru_cache
from logging.handlers import TimedRotatingFileHandler
from pathlib import Path
from typing import Literal, Optional

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]

_LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Directorio de logs (backend/logs/)
_LOG_DIR = Path(__file__).parent.parent.parent / "logs"

# Símbolos para visualizar el flujo
FLOW_SYMBOLS = {
    "start": "╔",
    "stage": "║",
    "arrow": "→",
    "end": "╚",
    "decision": "◆",
}


def _configure_root_logger(level: LogLevel) -> None:
    """Configura el logger raíz con handlers de consola y archivo."""
    root = logging.getLogger()
    if root.handlers:
        return

    # Silenciar loggers ruidosos de terceros
    for logger_name in ("watchfiles", "watchfiles.main", "httpx", "httpcore", "urllib3"):
        logging.getLogger(logger_name).setLevel(logging.WARNING)

    formatter = logging.Formatter(_LOG_FORMAT, _DATE_FORMAT)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    root.addHandler(console_handler)
    root.setLevel(level)

    # Rotación diaria, mantiene 7 días
    try:
        _LOG_DIR.mkdir(exist_ok=True)
        file_handler = TimedRotatingFileHandler(
            _LOG_DIR / "sentinel.log",
            when="midnight",
            interval=1,
            backupCount=7,
            encoding="utf-8",
        )
    except OSError as e:
        root.warning(f"File logging disabled, console only: {e}")
        return
    file_handler.setFormatter(formatter)
    root.addHandler(file_handler)


@lru_cache(maxsize=128)
def get_logger(name: str) -> logging.Logger:
    """
    Retorna un logger configurado para el módulo especificado.

    Uso:
        from sentinel.core.logging import get_logger
        logger = get_logger(__name__)
        logger.info("Mensaje")
    """
    from sentinel.core.config import settings

    _configure_root_logger(settings.log_level)
    return logging.getLogger(name)


class PipelineLogger:
    """Tracer for the stages of a contract evaluation."""

    def __init__(self, component: str):
        self._logger = get_logger(f"pipeline.{component}")
        self.component = component

    def evaluation_start(self, subject_id: str, version: str) -> None:
        self._logger.info(
            f"{FLOW_SYMBOLS['start']}══ EVALUATION START ══ {subject_id} (algorithm {version})"
        )

    def evaluation_end(
        self,
        subject_id: str,
        score: int,
        level: str,
        trend: str,
        alert_count: int,
    ) -> None:
        """Log the evaluation summary."""
        self._logger.info(
            f"{FLOW_SYMBOLS['end']}══ EVALUATION COMPLETE ══ {subject_id} | "
            f"score={score} level={level.upper()} trend={trend} alerts={alert_count}"
        )

    def stage(self, stage: str, detail: Optional[str] = None) -> None:
        self._logger.debug(
            f"{FLOW_SYMBOLS['stage']} [{stage.upper()}] {FLOW_SYMBOLS['arrow']} {detail or 'OK'}"
        )

    def decision(self, subject_id: Optional[str], approved: bool, reason: str) -> None:
        """Log an auto-approval outcome."""
        verdict = "APPROVED" if approved else "REJECTED"
        self._logger.info(f"{FLOW_SYMBOLS['decision']} DECISION {subject_id or '-'}: {verdict} | {reason}")

    def error(self, stage: str, error: Exception) -> None:
        self._logger.error(
            f"{FLOW_SYMBOLS['stage']} [{stage.upper()}] ERROR: {type(error).__name__}: {error}"
        )
