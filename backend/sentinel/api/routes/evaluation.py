"""Endpoints de evaluacion de contratos e historial de scores."""

from fastapi import APIRouter, Depends, Query

from risk_skills.auto_approval import ApprovalPolicy
from sentinel.core.logging import get_logger
from sentinel.schemas import EvaluateRequest, EvaluateResponse, HistoryResponse, TrendResponse
from sentinel.services import DependencyContainer, get_container

logger = get_logger(__name__)
router = APIRouter()


@router.post("/evaluate", response_model=EvaluateResponse)
def evaluate(
    request: EvaluateRequest,
    container: DependencyContainer = Depends(get_container),
) -> EvaluateResponse:
    """Evalua un contrato, registra el score y opcionalmente decide su auto-aprobacion."""
    result = container.pipeline.evaluate(
        request.subject_id,
        request.profile,
        request.algorithm_version,
    )

    decision = None
    if isinstance(request.auto_approve, ApprovalPolicy):
        decision = container.approval_engine.process(result, request.auto_approve)
    elif request.auto_approve:
        decision = container.approval_engine.process(result, container.approval_policy)

    if decision is not None:
        container.logger.decision(result.subject_id, decision.approved, decision.reason)
    return EvaluateResponse(result=result, decision=decision)


@router.get("/history/{subject_id}", response_model=HistoryResponse)
def get_history(
    subject_id: str,
    limit: int | None = Query(default=None, ge=0, le=1000),
    container: DependencyContainer = Depends(get_container),
) -> HistoryResponse:
    """Ultimos registros del sujeto, del mas antiguo al mas reciente."""
    records = container.pipeline.history(subject_id, limit)
    return HistoryResponse(subject_id=subject_id, records=records)


@router.get("/history/{subject_id}/trend", response_model=TrendResponse)
def get_trend(
    subject_id: str,
    container: DependencyContainer = Depends(get_container),
) -> TrendResponse:
    return TrendResponse(subject_id=subject_id, trend=container.pipeline.trend(subject_id))
