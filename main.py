import logging
import os
from contextlib import asynccontextmanager
from typing import Callable, Optional

from fastapi import Depends, FastAPI
from fastapi.concurrency import run_in_threadpool
from fastapi.middleware.cors import CORSMiddleware

from app.database import get_init
from app.routers.schema import router as schema_router
from descriptor.catalog import CATALOG_SCHEMA
from descriptor.models import SchemaDescriptor
from orchestrator.initializer import FatalInitializationError, initialize
from report.report_models import InitializationResult
from utils.config import DatabaseConfig, load_config

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO"),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


# ------------------- FastAPI setup -------------------
def create_app(
    config: Optional[DatabaseConfig] = None,
    descriptor: SchemaDescriptor = CATALOG_SCHEMA,
    init: Callable[..., InitializationResult] = initialize,
) -> FastAPI:
    """Build the API; the database is initialized once in the lifespan."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        cfg = config or load_config()
        try:
            # blocking database round-trips; keep them off the event loop
            result = await run_in_threadpool(init, cfg, descriptor)
        except FatalInitializationError as e:
            logger.critical("❌ Critical failure during database initialization: %s", e)
            raise
        app.state.config = cfg
        app.state.descriptor = descriptor
        app.state.db_init = result
        for warning in result.warnings():
            logger.warning("⚠️ %s", warning)
        try:
            yield
        finally:
            app.state.db_init = None
            result.connection.close()

    app = FastAPI(title="Anime Catalog Admin", lifespan=lifespan)

    # permissive CORS for development
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/")
    def health(init_result: InitializationResult = Depends(get_init)):
        return {"status": "ok", "schema": init_result.status.value}

    app.include_router(schema_router)
    return app


app = create_app()
