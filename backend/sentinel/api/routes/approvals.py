"""Endpoints de auto-aprobacion."""

from fastapi import APIRouter, Depends

from risk_skills.auto_approval import ApprovalStats, Decision
from sentinel.schemas import DecideRequest
from sentinel.services import DependencyContainer, get_container

router = APIRouter()


@router.post("/decide", response_model=Decision)
def decide(
    request: DecideRequest,
    container: DependencyContainer = Depends(get_container),
) -> Decision:
    """Decide sobre un score ya calculado; la politica de settings aplica si no se envia una."""
    policy = request.policy or container.approval_policy
    decision = container.approval_engine.decide(
        request.score, request.level, policy, request.subject_id
    )
    return container.ledger.record(decision)


@router.get("/approvals/stats", response_model=ApprovalStats)
def approval_stats(container: DependencyContainer = Depends(get_container)) -> ApprovalStats:
    return container.ledger.stats()
