"""FastAPI application entry point.

Run with: uvicorn src.main:app --reload --port 8080
"""

# ruff: noqa: E402  -- uvloop.install() must run before other imports

import uvloop

uvloop.install()

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from config.settings import settings
from src.sk_common.database import dispose_engine, get_engine
from src.sk_common.errors import AppError, InternalError, RewardValidationError
from src.sk_common.logging_config import configure_logging
from src.sk_common.response import error_response
from src.sk_gateway.middleware.request_log import RequestLogMiddleware
from src.sk_reward.api.router import router as reward_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup: pick the store, verify DB if configured. Shutdown: dispose."""
    configure_logging(settings.ENVIRONMENT)
    if settings.use_in_memory_store:
        logger.warning("DATABASE_URL not set, using in-memory store. Data will reset on restart.")
    else:
        async with get_engine().connect() as conn:
            await conn.execute(text("SELECT 1"))
        logger.info("Connected to database")
    yield
    await dispose_engine()


app = FastAPI(
    title=settings.APP_NAME,
    version="0.1.0",
    lifespan=lifespan,
)


app.add_middleware(RequestLogMiddleware)


def _error_json(request: Request, exc: AppError) -> JSONResponse:
    request_id = getattr(request.state, "request_id", None)
    resp = error_response(exc.code, exc.message, exc.data, request_id)
    return JSONResponse(status_code=exc.http_status, content=resp.model_dump())


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    return _error_json(request, exc)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    details = "; ".join(
        f"{'.'.join(str(p) for p in err.get('loc', ()) if p != 'body')}: {err.get('msg')}"
        for err in exc.errors()
    )
    return _error_json(request, RewardValidationError(details or "malformed request"))


@app.exception_handler(SQLAlchemyError)
async def database_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.error("Database failure on %s %s", request.method, request.url.path, exc_info=exc)
    return _error_json(request, InternalError("Storage backend unavailable"))


app.include_router(reward_router, prefix="/api/v1")


@app.get("/health")
async def health() -> dict[str, str]:
    return {"status": "ok", "version": "0.1.0"}
