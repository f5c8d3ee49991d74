from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.openapi.utils import get_openapi
from starlette.middleware.base import BaseHTTPMiddleware

from turnos import __version__
from turnos.clinic.api.routes import (
    coverages_router,
    doctors_router,
    insurers_router,
    offices_router,
    patients_router,
    specialties_router,
)
from turnos.config import Settings, get_settings
from turnos.dependencies import extract_bearer_token
from turnos.identity.api.routes import auth_router, users_router
from turnos.identity.application.access_control import AccessControl
from turnos.scheduling.api.routes import horarios_router, turnos_router
from turnos.shared.database import DatabaseSessionFactory
from turnos.shared.exceptions import register_exception_handlers
from turnos.shared.http.health import router as health_router
from turnos.shared.http.middleware import CorrelationIdMiddleware
from turnos.shared.logging import configure_logging, get_logger
from turnos.shared.security import PasswordService, TokenService

logger = get_logger(__name__)


class JwtContextMiddleware(BaseHTTPMiddleware):
    """
    Parses Bearer JWT and attaches claims to request.state.user_claims.
    An absent or unusable token leaves the caller anonymous (None); routes
    that need a caller reject it through get_current_claims.
    """

    async def dispatch(self, request: Request, call_next):
        access: AccessControl = request.app.state.access_control
        request.state.user_claims = access.decode(extract_bearer_token(request))
        return await call_next(request)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings: Settings = app.state.settings
    if settings.AUTO_CREATE_SCHEMA:
        await app.state.db.create_schema()
    logger.info("Application started", environment=settings.ENVIRONMENT, version=settings.PROJECT_VERSION)
    yield
    await app.state.db.dispose()
    logger.info("Application stopped")


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or get_settings()
    configure_logging(settings.LOG_LEVEL, settings.log_format)

    app = FastAPI(
        title="Turnos API",
        description="Medical appointment scheduling: doctors, patients, offices and turnos",
        version=settings.PROJECT_VERSION or __version__,
        lifespan=lifespan,
        swagger_ui_parameters={"persistAuthorization": True},
    )

    # Singletons shared by every request
    tokens = TokenService(
        settings.JWT_SECRET,
        algorithm=settings.JWT_ALGORITHM,
        expires_minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES,
    )
    app.state.settings = settings
    app.state.db = DatabaseSessionFactory(settings.DATABASE_URL, echo=settings.DATABASE_ECHO)
    app.state.tokens = tokens
    app.state.passwords = PasswordService(
        time_cost=settings.PASSWORD_HASH_TIME_COST,
        memory_cost=settings.PASSWORD_HASH_MEMORY_COST,
        parallelism=settings.PASSWORD_HASH_PARALLELISM,
    )
    app.state.access_control = AccessControl(tokens)

    # JWT → request.state.user_claims (innermost), then request id/logging, then CORS
    app.add_middleware(JwtContextMiddleware)
    app.add_middleware(CorrelationIdMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins(),
        allow_methods=["*"],
        allow_headers=["*"],
        allow_credentials=True,
        expose_headers=["X-Request-ID"],
    )

    # Routers
    app.include_router(health_router)
    app.include_router(auth_router)
    app.include_router(users_router)
    app.include_router(turnos_router)
    app.include_router(horarios_router)
    app.include_router(doctors_router)
    app.include_router(patients_router)
    app.include_router(offices_router)
    app.include_router(specialties_router)
    app.include_router(coverages_router)
    app.include_router(insurers_router)

    # Centralized error handling → {code, message, details?, correlation_id?}
    register_exception_handlers(app)

    @app.get("/", tags=["Root"])
    async def root():
        """Root endpoint."""
        return {"message": "Turnos API", "docs": "/docs", "health": "/health"}

    # ---- Custom OpenAPI to add Bearer auth ----
    def custom_openapi():
        if app.openapi_schema:
            return app.openapi_schema
        schema = get_openapi(
            title=app.title,
            version=app.version,
            description=app.description,
            routes=app.routes,
        )
        schema.setdefault("components", {}).setdefault("securitySchemes", {})["bearerAuth"] = {
            "type": "http",
            "scheme": "bearer",
            "bearerFormat": "JWT",
        }
        schema["security"] = [{"bearerAuth": []}]
        app.openapi_schema = schema
        return schema

    app.openapi = custom_openapi

    return app


app = create_app()
