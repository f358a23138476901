"""Construccion de respuestas API desde los objetos del motor de scoring."""

from risk_skills.risk_taxonomy import Taxonomy
from risk_skills.scoring_registry import AlgorithmRegistry
from sentinel.schemas import AlgorithmInfo, CategoryInfo, SeverityBandInfo, TaxonomyResponse


def build_algorithm_list(registry: AlgorithmRegistry) -> list[AlgorithmInfo]:
    """Versiones publicadas en orden de publicacion, marcando la default."""
    return [
        AlgorithmInfo(
            version=entry.version,
            name=entry.name,
            description=entry.description,
            release_date=entry.release_date,
            variant=entry.variant.value,
            trending_vulnerabilities=(
                list(entry.trend_policy.trending_vulnerabilities) if entry.trend_policy else []
            ),
            is_default=entry.version == registry.default_version,
        )
        for entry in registry.list_versions()
    ]


def build_taxonomy_response(taxonomy: Taxonomy) -> TaxonomyResponse:
    """Convierte la taxonomia en TaxonomyResponse tipado."""
    categories = [
        CategoryInfo(
            key=category.key,
            id=category.id,
            name=category.name,
            severity_weight=category.severity_weight,
        )
        for category in taxonomy.categories.values()
    ]
    bands = [
        SeverityBandInfo(
            name=level.name.value,
            min_score=level.min_score,
            max_score=level.max_score,
            color=level.color,
            action_required=level.action_required,
        )
        for level in taxonomy.severity_levels
    ]
    weights = {factor.value: entry.weight for factor, entry in taxonomy.factor_weights.items()}

    return TaxonomyResponse(
        version=taxonomy.version,
        categories=categories,
        factor_weights=weights,
        severity_levels=bands,
    )
