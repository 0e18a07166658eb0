# stockforum/main.py
"""
Application entrypoint. Includes routers, error handlers and the optional
background price refresher.
"""
import asyncio
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from stockforum.api.errors import register_exception_handlers
from stockforum.api.routers import comments, stock_data, stocks
from stockforum.config.logging import setup_logging
from stockforum.config.settings import settings
from stockforum.infrastructure.db.session import AsyncSessionLocal, create_tables
from stockforum.infrastructure.quote_client import TwelveDataClient
from stockforum.services.price_service import price_refresh_worker

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()
    logger.info("Starting (env=%s)", settings.ENV)
    await create_tables()

    refresh_task = None
    if settings.PRICE_REFRESH_INTERVAL_SECONDS > 0:
        if settings.TWELVE_DATA_API_KEY:
            refresh_task = asyncio.create_task(
                price_refresh_worker(
                    AsyncSessionLocal,
                    TwelveDataClient.from_settings,
                    settings.PRICE_REFRESH_INTERVAL_SECONDS,
                )
            )
        else:
            logger.warning("PRICE_REFRESH_INTERVAL_SECONDS is set but TWELVE_DATA_API_KEY is not; refresher disabled")

    try:
        yield
    finally:
        if refresh_task:
            refresh_task.cancel()
            try:
                await refresh_task
            except asyncio.CancelledError:
                pass
        logger.info("Shutdown complete")


def create_app() -> FastAPI:
    app = FastAPI(title="Stock Forum Backend", lifespan=lifespan)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_exception_handlers(app)

    app.include_router(stocks.router, prefix="/api/stocks", tags=["stocks"])
    app.include_router(comments.router, prefix="/api/comments", tags=["comments"])
    app.include_router(stock_data.router, prefix="/api/stock-data", tags=["stock-data"])

    @app.get("/")
    async def index():
        """Health / basic info endpoint."""
        return {"status": "ok", "service": "stockforum-backend", "env": settings.ENV}

    return app


app = create_app()
