"""FastAPI application setup"""
import logging
from contextlib import asynccontextmanager
from typing import Optional
from fastapi import FastAPI
from fastapi.responses import JSONResponse

from habitplanet.api.routes import router
from habitplanet.api.metrics_routes import router as metrics_router
from habitplanet.api.middleware import setup_cors, setup_rate_limiting
from habitplanet.config import LOG_LEVEL, STORAGE_BACKEND, DATA_PATH, validate_config
from habitplanet.db import SnapshotRepository, StateStore, create_kv_store
from habitplanet.services import init_container, reset_container

# Configure logging
logging.basicConfig(
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    level=getattr(logging, LOG_LEVEL.upper(), logging.INFO)
)

logger = logging.getLogger(__name__)


async def build_state() -> StateStore:
    """Build the configured storage backend and load persisted state"""
    kv = create_kv_store(STORAGE_BACKEND, DATA_PATH)
    state = StateStore(SnapshotRepository(kv))
    await state.load()
    logger.info(f"Storage backend '{kv.name}' ready")
    return state


def create_api_application(state: Optional[StateStore] = None, **container_overrides) -> FastAPI:
    """
    Create and configure FastAPI application

    Args:
        state: Pre-built StateStore (tests); built from config at startup when omitted
        **container_overrides: clock, content or rng passed to init_container
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Lifecycle manager for FastAPI application"""
        # Startup
        logger.info("Starting API server...")
        validate_config()
        app_state = state if state is not None else await build_state()
        init_container(app_state, **container_overrides)

        yield

        # Shutdown
        logger.info("Shutting down API server...")
        reset_container()

    app = FastAPI(
        title="HabitPlanet API",
        description="Habit check-ins, pet progression and card draws",
        version="1.0.0",
        lifespan=lifespan
    )

    # Setup middleware
    setup_cors(app)
    setup_rate_limiting(app)

    # Include routes
    app.include_router(router)
    app.include_router(metrics_router)

    # Global exception handler
    @app.exception_handler(Exception)
    async def global_exception_handler(request, exc):
        logger.error(f"Unhandled exception: {exc}", exc_info=True)
        return JSONResponse(
            status_code=500,
            content={"error": "Internal server error", "detail": str(exc)}
        )

    logger.info("FastAPI application created")

    return app
