"""
Seat Lock Service - Main Application

Temporary seat/table holds, permanent allocation on payment, and the
active-lock seat map. Run with:

    uvicorn seatlock.main:app --host 0.0.0.0 --port 8000
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from seatlock.platform.app_factory import create_app
from seatlock.platform.config import di
from seatlock.platform.config.core_setting import settings
from seatlock.platform.config.wire_modules import WIRE_MODULES
from seatlock.platform.database.orm_db_setting import dispose_engine, get_engine
from seatlock.platform.logging.loguru_io import Logger
from seatlock.platform.observability.tracing import TracingConfig


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    Logger.base.info(f'🚀 [Seat Lock Service] Starting up ({settings.PROJECT_NAME})...')

    tracing = TracingConfig(service_name='seatlock')
    tracing.setup()
    tracing.instrument_sqlalchemy(engine=get_engine())
    Logger.base.info('📊 [Seat Lock Service] Tracing configured')

    di.container.wire(modules=WIRE_MODULES)
    di.setup()
    Logger.base.info('🔌 [Seat Lock Service] Dependency injection wired')

    Logger.base.info('✅ [Seat Lock Service] Startup complete')

    yield

    Logger.base.info('🛑 [Seat Lock Service] Shutting down...')

    await dispose_engine()
    Logger.base.info('🗄️ [Seat Lock Service] Database engine disposed')

    tracing.shutdown()
    di.container.unwire()
    di.cleanup()

    Logger.base.info('👋 [Seat Lock Service] Shutdown complete')


app = create_app(lifespan=lifespan)


@app.get('/')
async def root() -> dict[str, str]:
    return {
        'service': settings.PROJECT_NAME,
        'docs': '/docs',
        'health': '/health',
    }
