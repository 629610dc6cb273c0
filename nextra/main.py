# nextra/main.py
# Nextra backend - real-estate management API
# Run: uvicorn nextra.main:app --reload (from repo root)

from contextlib import asynccontextmanager
from typing import Dict

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from nextra.api import ApiResponse
from nextra.bootstrap import bootstrap
from nextra.config import CORS_ORIGINS, ENV, IS_PROD, LOG_LEVEL
from nextra.db import init_db
from nextra.domains.account.routes import router as account_router
from nextra.domains.appointment.routes import router as appointment_router
from nextra.domains.category.routes import router as category_router
from nextra.domains.client.routes import router as client_router
from nextra.domains.property.routes import router as property_router
from nextra.domains.user.routes import router as user_router
from nextra.errors import install_exception_handlers
from nextra.observability import configure_logging, correlation_id_middleware, get_logger
from nextra.routes_auth import router as auth_router
from nextra.routes_storage import router as storage_router

logger = get_logger(__name__)

HEALTH_MESSAGE = "NEXTRA Core is running"


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    bootstrap()
    logger.info("startup_complete", env=ENV)
    yield


def create_app() -> FastAPI:
    configure_logging(LOG_LEVEL)

    app = FastAPI(title="Nextra Backend", version="0.1", lifespan=lifespan)

    # CORS configuration from config module
    app.add_middleware(
        CORSMiddleware,
        allow_origins=CORS_ORIGINS if IS_PROD else ["*"],  # Restrict origins in production
        allow_credentials=IS_PROD,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Correlation-Id"],
    )
    # Outermost: every log line below this point carries the correlation id
    app.middleware("http")(correlation_id_middleware)
    install_exception_handlers(app)

    for router in (
        auth_router,
        user_router,
        account_router,
        category_router,
        property_router,
        client_router,
        appointment_router,
        storage_router,
    ):
        app.include_router(router)

    @app.get("/health")
    def health() -> Dict[str, str]:
        return {"status": "ok"}

    @app.get("/api/health", response_model=ApiResponse[str])
    def api_health() -> ApiResponse:
        return ApiResponse.ok(HEALTH_MESSAGE)

    return app


app = create_app()
