from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from sentinel.api import router
from sentinel.core import get_logger, settings
from sentinel.core.exceptions import (
    HistoryUnavailableError,
    InvalidProfileError,
    UnknownAlgorithmVersionError,
)
from sentinel.services import get_container

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(f"Iniciando SentinelZero Risk Engine [{settings.app_env}]")
    container = get_container()
    logger.info(
        f"Algoritmo por defecto {container.registry.default_version}, "
        f"historial '{settings.history_backend}'"
    )
    yield
    logger.info("Cerrando SentinelZero Risk Engine")


app = FastAPI(
    title="SentinelZero Risk Engine",
    version="0.1.0",
    lifespan=lifespan,
)


@app.exception_handler(UnknownAlgorithmVersionError)
async def unknown_version_handler(request: Request, exc: UnknownAlgorithmVersionError):
    logger.warning(f"Unknown algorithm version: {exc}")
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": str(exc), "version": exc.version, "available": list(exc.available)},
    )


@app.exception_handler(InvalidProfileError)
async def invalid_profile_handler(request: Request, exc: InvalidProfileError):
    logger.warning(f"Invalid profile: {exc}")
    return JSONResponse(
        status_code=422,
        content={"detail": str(exc)},
    )


@app.exception_handler(HistoryUnavailableError)
async def history_unavailable_handler(request: Request, exc: HistoryUnavailableError):
    logger.error(f"Score history unavailable: {exc}")
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"detail": str(exc), "operation": exc.operation},
    )


# Exception handler global
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled exception: {type(exc).__name__}: {exc}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal server error"},
    )


# Routes
app.include_router(router, prefix="/api", tags=["Risk"])


@app.get("/health")
async def health_check():
    return {"status": "ok", "env": settings.app_env}
