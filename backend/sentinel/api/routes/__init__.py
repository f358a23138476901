"""Coleccion de routers de la API."""

from sentinel.api.routes.approvals import router as approvals_router
from sentinel.api.routes.catalog import router as catalog_router
from sentinel.api.routes.evaluation import router as evaluation_router

__all__ = ["approvals_router", "catalog_router", "evaluation_router"]
