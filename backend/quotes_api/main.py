# quotes_api/main.py
import time
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from quotes_api.config import settings
from quotes_api.core.bootstrap import ensure_default_admin
from quotes_api.core.db import init_db, close_db
from quotes_api.core.errors import register_exception_handlers
from quotes_api.core.logs import configure_logging
from quotes_api.models.user import utc_now
from quotes_api.services.catalog import Catalog, CatalogService
from quotes_api.services.catalog_data import DEFAULT_CATALOG

from quotes_api.api.v1.routers import admin, auth, products, quotes, users

logger = logging.getLogger("uvicorn.error")


def create_app(catalog: Catalog = DEFAULT_CATALOG) -> FastAPI:
    """
    Build the API. The product catalog is injected so another source can be
    plugged in without touching the routes.
    """
    configure_logging()

    app = FastAPI(title=settings.APP_NAME, version=settings.APP_VERSION)
    app.state.catalog_service = CatalogService(catalog)
    app.state.started_monotonic = time.monotonic()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_exception_handlers(app)

    @app.on_event("startup")
    async def on_startup():
        await init_db()
        # Ensure there's an admin account on first run
        await ensure_default_admin()
        logger.info("%s %s started (env=%s)", settings.APP_NAME, settings.APP_VERSION, settings.env)

    @app.on_event("shutdown")
    async def on_shutdown():
        await close_db()

    # REST
    app.include_router(auth.router, prefix="/api")
    app.include_router(quotes.router, prefix="/api")
    app.include_router(products.router, prefix="/api")
    app.include_router(users.router, prefix="/api")
    app.include_router(admin.router, prefix="/api")

    @app.get("/health")
    async def health():
        return {
            "status": "OK",
            "message": f"{settings.APP_NAME} is running",
            "timestamp": utc_now().isoformat(),
            "version": settings.APP_VERSION,
        }

    return app


app = create_app()
