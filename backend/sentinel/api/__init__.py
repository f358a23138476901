from fastapi import APIRouter

from sentinel.api.routes import approvals_router, catalog_router, evaluation_router

router = APIRouter()
router.include_router(evaluation_router)
router.include_router(approvals_router)
router.include_router(catalog_router)

__all__ = ["router"]
