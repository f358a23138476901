from typing import Any

from pydantic import BaseModel, Field

from risk_skills.auto_approval import ApprovalPolicy


class EvaluateRequest(BaseModel):
    subject_id: str = Field(..., min_length=1, max_length=256, description="Direccion del contrato u otro id estable")
    profile: dict[str, Any] = Field(default_factory=dict, description="Perfil del contrato (snake_case o camelCase)")
    algorithm_version: str | None = Field(default=None, description="Version del algoritmo; default de settings si se omite")
    auto_approve: ApprovalPolicy | bool | None = Field(
        default=None,
        description="true usa la politica de settings; un objeto define la politica para esta llamada",
    )


class DecideRequest(BaseModel):
    score: int = Field(..., ge=0, le=100)
    level: str = Field(..., min_length=1)
    policy: ApprovalPolicy | None = None
    subject_id: str | None = None
