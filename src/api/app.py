"""FastAPI application factory"""

import logging
import time
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlmodel import SQLModel

from src.api.error import ClientError
from src.api.routes import credits, rate_limits, sales, tenants
from src.domain.exceptions import StoreBusyError

logger = logging.getLogger(__name__)

RETRY_AFTER_SECONDS = 1


def create_app(config) -> FastAPI:
    logging.basicConfig(
        level=getattr(logging, str(config.LOG_LEVEL).upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if config.AUTO_CREATE_TABLES:
            from src import domain  # noqa: F401  registers every table on SQLModel.metadata
            from src.depends import engine

            async with engine.begin() as conn:
                await conn.run_sync(SQLModel.metadata.create_all)
        yield

    app = FastAPI(
        title="Commerce Ledger Service",
        description="Tenant credit ledger and atomic point-of-sale transactions",
        version="1.0.0",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.CORS_ORIGINS,
        allow_credentials=config.CORS_ALLOW_CREDENTIALS,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    if config.ENABLE_LOGGING_MIDDLEWARE:
        @app.middleware("http")
        async def log_requests(request: Request, call_next):
            start = time.time()
            response = await call_next(request)
            elapsed_ms = (time.time() - start) * 1000.0
            logger.info(
                f"{request.method} {request.url.path} -> {response.status_code} ({elapsed_ms:.1f}ms)"
            )
            return response

    @app.exception_handler(ClientError)
    async def client_error_handler(request: Request, exc: ClientError):
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": exc.error.model_dump(exclude_none=True)},
            headers=exc.headers,
        )

    @app.exception_handler(StoreBusyError)
    async def store_busy_handler(request: Request, exc: StoreBusyError):
        logger.warning(f"Store busy on {request.method} {request.url.path}: {exc}")
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={
                "error": {
                    "code": "STORE_BUSY",
                    "message": "The store is busy, retry the request",
                    "reason": exc.operation,
                }
            },
            headers={"Retry-After": str(RETRY_AFTER_SECONDS)},
        )

    @app.get("/health", tags=["Health"])
    async def health():
        return {"status": "ok"}

    app.include_router(credits.router, prefix=config.API_PREFIX)
    app.include_router(rate_limits.router, prefix=config.API_PREFIX)
    app.include_router(sales.router, prefix=config.API_PREFIX)
    app.include_router(tenants.router, prefix=config.API_PREFIX)

    return app
