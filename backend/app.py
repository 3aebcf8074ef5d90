"""FastAPI application entry point for the shipping assistant API."""

import asyncio
import contextlib
import logging
import sys
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware

from config import Settings, settings
from errors import register_error_handlers
from services.browser import PagePool
from services.cache import CacheStore, flush_async, load_from_durable, run_flush_loop
from services.fetcher import Fetcher
from services.shipping import ShippingService

# Structured logging: JSON for production, human-readable for local
if settings.is_production:
    logging.basicConfig(
        level=logging.INFO,
        format='{"time":"%(asctime)s","level":"%(levelname)s","logger":"%(name)s","message":"%(message)s"}',
        stream=sys.stdout,
    )
else:
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Launch the browser and flush loop; on shutdown flush once more and close."""
    cfg: Settings = app.state.settings
    missing = cfg.validate()
    if missing:
        logger.warning("Unusable env vars (check values): %s", ", ".join(missing))

    pool = app.state.page_pool
    store = app.state.shipping.store
    await pool.start()

    flusher = asyncio.create_task(run_flush_loop(store, cfg.cache_file, cfg.cache_flush_interval))
    try:
        yield
    finally:
        flusher.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await flusher
        try:
            await flush_async(store, cfg.cache_file)
            logger.info("Cache flushed to %s on shutdown", cfg.cache_file)
        except OSError as e:
            logger.error("Final cache flush failed: %s", e)
        await pool.close()


def create_app(
    app_settings: Settings | None = None,
    store: CacheStore | None = None,
    page_pool: PagePool | None = None,
    fetcher: Fetcher | None = None,
) -> FastAPI:
    cfg = app_settings or settings
    app = FastAPI(title="Shipping Assistant API", version="1.0.0", lifespan=lifespan)

    if store is None:
        store = load_from_durable(cfg.cache_file)
    if page_pool is None:
        page_pool = PagePool(
            max_pages=cfg.browser_max_pages,
            acquire_timeout=cfg.page_acquire_timeout,
            headless=cfg.browser_headless,
        )
    if fetcher is None:
        fetcher = Fetcher(page_pool, navigation_timeout_ms=cfg.navigation_timeout_ms)

    app.state.settings = cfg
    app.state.page_pool = page_pool
    app.state.shipping = ShippingService(store, fetcher)

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cfg.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Security headers
    @app.middleware("http")
    async def add_security_headers(request: Request, call_next):
        response: Response = await call_next(request)
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        if cfg.is_production:
            response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"
        return response

    # Centralized error handlers
    register_error_handlers(app)

    from routes.health import router as health_router
    from routes.shipping import router as shipping_router

    app.include_router(health_router)
    app.include_router(shipping_router)

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=settings.port)
