from functools import lru_cache
from pathlib import Path
from typing import List, Literal, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Configuración centralizada del motor de riesgo con validación de tipos."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # App
    app_env: Literal["development", "staging", "production"] = "development"
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"

    # Scoring
    default_algorithm_version: str = Field(default="v1.1.0", pattern=r"^v\d+\.\d+\.\d+$")
    taxonomy_path: Optional[Path] = None
    incident_corpus_path: Optional[Path] = None

    # Score history
    history_backend: Literal["memory", "json"] = "memory"
    history_path: Path = Path("data/score_history.json")
    history_default_limit: int = Field(default=10, ge=1, le=1000)
    trend_window: int = Field(default=5, ge=2, le=100)
    trend_delta: int = Field(default=10, ge=0, le=100)

    # Auto-approval policy
    auto_approve_enabled: bool = False
    auto_approve_threshold: int = Field(default=70, ge=0, le=100)
    auto_approve_low_risk: bool = True
    auto_approve_medium_risk: bool = False

    # Conjunto trending propio: se publica como version nueva, v1.1.0 no cambia
    # (JSON en env, e.g. TRENDING_VULNERABILITIES='["reentrancy"]')
    trending_vulnerabilities: Optional[List[str]] = None
    trending_algorithm_version: str = Field(default="v1.2.0", pattern=r"^v\d+\.\d+\.\d+$")

    # Reglas de tendencia del contexto historico
    high_trend_vulnerabilities: List[str] = Field(default_factory=lambda: ["cross_chain_bridge"])
    stable_trend_vulnerabilities: List[str] = Field(default_factory=lambda: ["mev_frontrunning"])


@lru_cache
def get_settings() -> Settings:
    """Singleton cacheado para evitar recargar .env en cada request."""
    return Settings()


settings = get_settings()
