"""FastAPI application factory — entry point for Shoplens."""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.api.routes.catalog import router as catalog_router
from app.api.routes.interactions import router as interactions_router
from app.api.routes.recommendations import router as recommendations_router
from app.config import settings
from app.domain.errors import ClientInputError, UpstreamDataError

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan: startup and shutdown events."""
    logger.info("%s starting up...", settings.app_name)
    if settings.gemini_mock:
        logger.info("Explanations: mock mode")
    elif settings.gemini_disabled:
        logger.info("Explanations: disabled, template text only")
    elif not settings.gemini_api_key:
        logger.warning("Explanations: GEMINI_API_KEY not set, template text only")
    else:
        logger.info("Explanations: Gemini at %s", settings.gemini_base_url)
    logger.info("Preference cache TTL: %.0fs", settings.preference_cache_ttl_seconds)
    yield
    logger.info("%s shutting down...", settings.app_name)


async def client_input_error_handler(request: Request, exc: ClientInputError) -> JSONResponse:
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"error": str(exc)})


async def upstream_data_error_handler(request: Request, exc: UpstreamDataError) -> JSONResponse:
    logger.error("Upstream data error on %s: %s", request.url.path, exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content={"error": str(exc)}
    )


def create_app() -> FastAPI:
    """Build and configure the FastAPI application."""
    application = FastAPI(
        title=settings.app_name,
        description="Product recommendations with generated explanations",
        version="1.0.0",
        lifespan=lifespan,
    )

    # ── Middleware ──────────────────────────────────
    application.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # ── Error Handlers ─────────────────────────────
    application.add_exception_handler(ClientInputError, client_input_error_handler)
    application.add_exception_handler(UpstreamDataError, upstream_data_error_handler)

    # ── Routes ─────────────────────────────────────
    application.include_router(recommendations_router)
    application.include_router(interactions_router)
    application.include_router(catalog_router)

    # ── Health Check ───────────────────────────────
    @application.get("/health", tags=["System"])
    async def health() -> dict[str, str]:
        return {"status": "healthy", "service": "shoplens"}

    return application


app = create_app()
