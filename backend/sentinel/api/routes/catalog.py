"""Endpoints de solo lectura: versiones de algoritmo, taxonomia e incidentes."""

from fastapi import APIRouter, Depends

from risk_skills.historical_context import CorpusStatistics
from sentinel.api.response_builder import build_algorithm_list, build_taxonomy_response
from sentinel.schemas import AlgorithmInfo, TaxonomyResponse
from sentinel.services import DependencyContainer, get_container

router = APIRouter()


@router.get("/algorithms", response_model=list[AlgorithmInfo])
def list_algorithms(container: DependencyContainer = Depends(get_container)) -> list[AlgorithmInfo]:
    return build_algorithm_list(container.registry)


@router.get("/taxonomy", response_model=TaxonomyResponse)
def get_taxonomy(container: DependencyContainer = Depends(get_container)) -> TaxonomyResponse:
    """Categorias, pesos de factores y bandas de severidad vigentes."""
    return build_taxonomy_response(container.taxonomy)


@router.get("/incidents/stats", response_model=CorpusStatistics)
def get_incident_statistics(
    container: DependencyContainer = Depends(get_container),
) -> CorpusStatistics:
    """Cifras agregadas del corpus de exploits; vacias si el corpus no esta disponible."""
    return container.context_engine.corpus.statistics()
