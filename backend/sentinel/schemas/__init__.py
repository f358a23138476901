from sentinel.schemas.requests import DecideRequest, EvaluateRequest
from sentinel.schemas.responses import (
    AlgorithmInfo,
    CategoryInfo,
    EvaluateResponse,
    HistoryResponse,
    SeverityBandInfo,
    TaxonomyResponse,
    TrendResponse,
)

__all__ = [
    "AlgorithmInfo",
    "CategoryInfo",
    "DecideRequest",
    "EvaluateRequest",
    "EvaluateResponse",
    "HistoryResponse",
    "SeverityBandInfo",
    "TaxonomyResponse",
    "TrendResponse",
]
