"""FastAPI application factory"""

from contextlib import asynccontextmanager
from fastapi import FastAPI
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from starlette.responses import Response

from recurpay.api.middleware import RequestIDMiddleware, MetricsMiddleware
from recurpay.api.v1 import clients, financing, installments, payments, reminders
from recurpay.infrastructure.database.session import init_db
from recurpay.infrastructure.observability.logging import setup_logging
from recurpay.config import settings

# Setup structured logging
setup_logging(settings.log_level)


@asynccontextmanager
async def lifespan(app: FastAPI):
    if settings.auto_create_tables:
        init_db()
    yield


def create_app() -> FastAPI:
    """Create and configure FastAPI application"""
    app = FastAPI(
        title="RecurPay CRM",
        description="Clients, financing plans, installment schedules and payment review",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    # Add middleware (order matters: last added = first executed)
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(RequestIDMiddleware)

    @app.get("/health")
    def health_check():
        return {"status": "ok", "service": settings.service_name}

    @app.get("/metrics")
    def metrics():
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    app.include_router(financing.router, prefix="/v1", tags=["financing"])
    app.include_router(clients.router, prefix="/v1", tags=["clients"])
    app.include_router(installments.router, prefix="/v1", tags=["installments"])
    app.include_router(payments.router, prefix="/v1", tags=["payments"])
    app.include_router(reminders.router, prefix="/v1", tags=["reminders"])

    return app


app = create_app()
