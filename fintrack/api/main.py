"""FastAPI application factory"""

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from starlette.responses import Response

from fintrack.api.middleware import RequestIDMiddleware, MetricsMiddleware
from fintrack.api.v1 import auth, debts, entries, history, summary
from fintrack.domain.models import AuthenticatedUser
from fintrack.infrastructure.auth.state import AuthStateStore
from fintrack.infrastructure.observability.logging import log_auth_change, setup_logging
from fintrack.infrastructure.observability.metrics import record_auth_change
from fintrack.config import settings

# Setup structured logging
setup_logging(settings.log_level)


def on_auth_change(token_hint: str, user: Optional[AuthenticatedUser]) -> None:
    log_auth_change(token_hint, user)
    record_auth_change(signed_in=user is not None)


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    app.state.auth_state.close()


def create_app() -> FastAPI:
    """Create and configure FastAPI application"""
    app = FastAPI(
        title="Fintrack",
        description="Personal finance tracker: income, expenses and installment debts",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    # One auth state per application, shared by every request
    app.state.auth_state = AuthStateStore(ttl_seconds=settings.auth_cache_ttl_seconds)
    app.state.auth_state.subscribe(on_auth_change)

    # Add middleware (order matters: last added = first executed)
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(RequestIDMiddleware)

    # Health check endpoint
    @app.get("/health")
    def health_check():
        return {"status": "ok", "service": settings.service_name}

    # Prometheus metrics endpoint
    @app.get("/metrics")
    def metrics():
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    # Register API routers
    app.include_router(auth.router, prefix="/v1", tags=["auth"])
    app.include_router(entries.router, prefix="/v1", tags=["entries"])
    app.include_router(debts.router, prefix="/v1", tags=["debts"])
    app.include_router(history.router, prefix="/v1", tags=["history"])
    app.include_router(summary.router, prefix="/v1", tags=["summary"])

    return app


app = create_app()
