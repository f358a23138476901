"""
Risk Taxonomy - Implementation

Loads the taxonomy JSON document (shipped with the package or supplied
by the caller) into an immutable Taxonomy.

Author: SentinelZero Team
"""

import json
import logging
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Optional

from pydantic import ValidationError

try:
    from .definition import (
        RiskCategory,
        ScoringFactor,
        ScoringFactorWeight,
        SeverityLevel,
        Taxonomy,
        TaxonomyNotFoundError,
        TaxonomyValidationError,
    )
except ImportError:
    from definition import (
        RiskCategory,
        ScoringFactor,
        ScoringFactorWeight,
        SeverityLevel,
        Taxonomy,
        TaxonomyNotFoundError,
        TaxonomyValidationError,
    )

logger = logging.getLogger(__name__)


DEFAULT_TAXONOMY_PATH = Path(__file__).parent / "data" / "risk_taxonomy.json"


def build_taxonomy(document: Dict[str, Any]) -> Taxonomy:
    """
    Build a Taxonomy from a parsed taxonomy document.

    The document layout is the one of ``data/risk_taxonomy.json``:
    ``risk_categories``, ``scoring_factors`` and ``severity_levels`` keyed
    by name.

    Raises:
        TaxonomyValidationError: If a section is missing or an invariant
            (weight sum, band partition) does not hold.
    """
    try:
        categories = {
            key: RiskCategory(key=key, **raw)
            for key, raw in document["risk_categories"].items()
        }
        factor_weights = {
            ScoringFactor(name): ScoringFactorWeight(factor=name, **raw)
            for name, raw in document["scoring_factors"].items()
        }
        severity_levels = tuple(
            SeverityLevel(name=name, **raw)
            for name, raw in document["severity_levels"].items()
        )
        return Taxonomy(
            version=document.get("version", "1.0.0"),
            categories=categories,
            factor_weights=factor_weights,
            severity_levels=severity_levels,
        )
    except KeyError as e:
        raise TaxonomyValidationError(f"missing section {e}") from e
    except (ValidationError, ValueError) as e:
        raise TaxonomyValidationError(str(e)) from e


def load_taxonomy(path: Optional[Path] = None) -> Taxonomy:
    """
    Load the taxonomy from ``path`` or from the shipped document.

    The shipped document is parsed once per process; caller-supplied
    paths are read on every call.
    """
    if path is None:
        return _load_default_taxonomy()
    return _read_taxonomy(Path(path))


@lru_cache(maxsize=1)
def _load_default_taxonomy() -> Taxonomy:
    return _read_taxonomy(DEFAULT_TAXONOMY_PATH)


def _read_taxonomy(path: Path) -> Taxonomy:
    if not path.exists():
        raise TaxonomyNotFoundError(str(path))

    with open(path, "r", encoding="utf-8") as f:
        try:
            document = json.load(f)
        except json.JSONDecodeError as e:
            raise TaxonomyValidationError(f"{path.name} is not valid JSON: {e}") from e

    taxonomy = build_taxonomy(document)
    logger.info(
        f"Loaded risk taxonomy v{taxonomy.version}: "
        f"{len(taxonomy.categories)} categories, "
        f"{len(taxonomy.severity_levels)} severity levels"
    )
    return taxonomy
