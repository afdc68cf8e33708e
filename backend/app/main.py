import logging
import time
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from app.api.v1 import health
from app.api.v1.router import api_router
from app.core.config import Settings, settings as default_settings
from app.core.database import Database
from app.core.errors import register_exception_handlers
from app.core.logging import configure_logging
from app.services.settings_service import seed_default_settings

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    config: Settings = app.state.settings
    database: Database = app.state.database
    database.ensure_directory()
    if config.AUTO_CREATE_SCHEMA:
        database.create_all()
        with database.session() as db:
            seed_default_settings(db, config)
    logger.info("%s %s started (%s)", config.APP_NAME, config.APP_VERSION, config.ENVIRONMENT)
    yield
    database.dispose()


def create_app(config: Optional[Settings] = None) -> FastAPI:
    config = config or default_settings
    configure_logging(config.LOG_LEVEL)
    app = FastAPI(title=f"{config.APP_NAME} Billing API", version=config.APP_VERSION, lifespan=lifespan)

    app.state.settings = config
    app.state.database = Database(config.database_url)
    app.state.started_at = time.monotonic()

    # Allow the billing frontend (vite dev server by default)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        started = time.perf_counter()
        response = await call_next(request)
        logger.info(
            "%s %s -> %s (%.1f ms)",
            request.method,
            request.url.path,
            response.status_code,
            (time.perf_counter() - started) * 1000,
        )
        return response

    register_exception_handlers(app)
    app.include_router(health.router, tags=["Health"])
    app.include_router(api_router, prefix=config.API_PREFIX)
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host=default_settings.HOST, port=default_settings.PORT)
