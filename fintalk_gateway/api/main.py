"""FastAPI application factory"""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from starlette.responses import Response

from fintalk_gateway.api.middleware import RequestIDMiddleware, MetricsMiddleware
from fintalk_gateway.api.v1 import feedback, loans, process, summary, transactions
from fintalk_gateway.infrastructure.database.session import init_db
from fintalk_gateway.infrastructure.observability.logging import setup_logging
from fintalk_gateway.config import settings

# Setup structured logging
setup_logging(settings.log_level)


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    yield


def create_app() -> FastAPI:
    """Create and configure FastAPI application"""
    app = FastAPI(
        title="FinTalk Gateway",
        description="Turns spoken or typed money talk into expense, income and loan records",
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

    # Prometheus metrics endpoint
    @app.get("/metrics")
    def metrics():
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    app.include_router(process.router, prefix="/v1", tags=["process"])
    app.include_router(transactions.router, prefix="/v1", tags=["transactions"])
    app.include_router(loans.router, prefix="/v1", tags=["loans"])
    app.include_router(summary.router, prefix="/v1", tags=["summary"])
    app.include_router(feedback.router, prefix="/v1", tags=["feedback"])

    return app


app = create_app()
