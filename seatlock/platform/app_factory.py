"""
Shared FastAPI App Factory

Common app setup for the service entrypoint and the test app.
"""

from collections.abc import Callable
from contextlib import AbstractAsyncContextManager
from typing import Any

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from seatlock.platform.config.core_setting import settings
from seatlock.platform.exception.exception_handlers import register_exception_handlers
from seatlock.platform.observability.tracing import TracingConfig
from seatlock.service.order.driving_adapter.http_controller.order_controller import (
    router as order_router,
)
from seatlock.service.order.driving_adapter.http_controller.ticket_controller import (
    router as ticket_router,
)
from seatlock.service.reservation.app.query.list_active_locks_use_case import (
    ListActiveLocksUseCase,
)
from seatlock.service.reservation.driving_adapter.http_controller.schema.seat_lock_schema import (
    HealthResponse,
)
from seatlock.service.reservation.driving_adapter.http_controller.seat_lock_controller import (
    router as seat_lock_router,
)


def create_app(
    *,
    lifespan: Callable[[FastAPI], AbstractAsyncContextManager[Any]] | None = None,
    title_suffix: str = '',
    description: str = 'Seat lock reservation service',
    service_name: str = 'seatlock',
) -> FastAPI:
    """
    Create a configured FastAPI application.

    Args:
        lifespan: Async context manager for app lifespan (startup/shutdown)
        title_suffix: Optional suffix for app title (e.g., " (Test)")
        description: App description
        service_name: Service name for tracing
    """
    app = FastAPI(
        title=f'{settings.PROJECT_NAME}{title_suffix}',
        description=description,
        version=settings.VERSION,
        lifespan=lifespan,
    )

    # Auto-instrument FastAPI (must be done before mounting routes)
    TracingConfig(service_name=service_name).instrument_fastapi(app=app)

    app.add_middleware(
        CORSMiddleware,  # type: ignore
        allow_origins=settings.BACKEND_CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=['*'],
        allow_headers=['*'],
    )

    register_exception_handlers(app)

    app.include_router(seat_lock_router, prefix='/api/locks', tags=['locks'])
    app.include_router(order_router, prefix='/api/orders', tags=['orders'])
    app.include_router(ticket_router, prefix='/api', tags=['tickets'])

    _register_common_endpoints(app, service_name=service_name)

    return app


def _register_common_endpoints(app: FastAPI, *, service_name: str) -> None:
    """Register health and metrics endpoints."""

    @app.get('/health')
    async def health_check(
        use_case: ListActiveLocksUseCase = Depends(ListActiveLocksUseCase.depends),
    ) -> HealthResponse:
        """Health check with the number of unexpired holds; 503 when the store is down."""
        active_locks = await use_case.count_active_holds()
        return HealthResponse(status='healthy', service=service_name, active_locks=active_locks)

    @app.get('/metrics')
    async def get_metrics() -> PlainTextResponse:
        """Prometheus metrics endpoint."""
        return PlainTextResponse(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
