import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
import uvicorn
from fastapi.middleware.cors import CORSMiddleware

from core.config import Settings, settings as default_settings
from core.exception_handlers import setup_exception_handlers, unhandled_errors
from core.security_headers import security_headers
from core.session import session_gate
from db.database import Database
from db.migrations import run_migrations
from routers.auth import router as auth_router
from routers.health import router as health_router
from routers.items import router as items_router
from routers.scan import router as scan_router
from routers.stock import router as stock_router

logger = logging.getLogger(__name__)


def create_app(settings: Optional[Settings] = None, database: Optional[Database] = None) -> FastAPI:
    settings = settings or default_settings
    database = database or Database(
        settings.database_url,
        echo=settings.database_echo,
        ssl_enabled=settings.database_ssl,
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if settings.run_migrations:
            await run_migrations(database.engine, settings.migrations_dir)
        yield
        await database.dispose()

    app = FastAPI(
        title="Prepperstore API",
        description="Barcode-driven inventory tracking",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.database = database

    setup_exception_handlers(app)

    # Last registered runs outermost: CORS, security headers, gate, error wrapper.
    # Gate 401s and route 500s therefore carry CORS and security headers.
    app.middleware("http")(unhandled_errors)
    app.middleware("http")(session_gate)
    app.middleware("http")(security_headers)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/")
    async def root():
        return {"status": "ok", "service": "prepperstore-backend"}

    app.include_router(health_router, prefix="/api", tags=["health"])
    app.include_router(auth_router, prefix="/api", tags=["auth"])
    app.include_router(scan_router, prefix="/api", tags=["scan"])
    app.include_router(items_router, prefix="/api", tags=["items"])
    app.include_router(stock_router, prefix="/api", tags=["stock"])

    return app


app = create_app()

if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    uvicorn.run("main:app", host="0.0.0.0", port=default_settings.port)
