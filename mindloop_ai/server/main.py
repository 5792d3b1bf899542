"""
Main Application Entry Point.

Initializes the FastAPI application, configures CORS and monitoring, and
includes the API routers.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from mindloop_ai.core.logging_config import get_logger, setup_logging
from mindloop_ai.core.monitoring import initialize_logfire

from .api.v1 import agent, health
from .core import constant
from .core.config import settings
from .services.runtime import init_runtime, shutdown_runtime

setup_logging()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Build the agent runtime on startup and release its database pool on shutdown."""
    try:
        logger.info("Starting up MindLoop-AI Server...")
        await init_runtime()
    except Exception as e:
        logger.error(f"Agent runtime initialization failed: {e}", exc_info=True)

    yield

    logger.info("Shutting down MindLoop-AI Server...")
    await shutdown_runtime()


app = FastAPI(
    title=constant.PROJECT_NAME,
    description="""
    MindLoop-AI Server API

    Control surface for an autonomous agent that runs single-flight think-cycles:
    start and stop the loop, inspect its lease, and talk to the agent.
    """,
    version=constant.VERSION,
    openapi_url=f"{constant.API_V1_STR}/openapi.json",
    docs_url=f"{constant.API_V1_STR}/docs",
    redoc_url=f"{constant.API_V1_STR}/redoc",
    lifespan=lifespan,
)

cors = settings.cors
app.add_middleware(
    CORSMiddleware,
    allow_origins=cors.origins,
    allow_credentials=cors.allow_credentials,
    allow_methods=cors.allow_methods,
    allow_headers=cors.allow_headers,
)

initialize_logfire(app)

app.include_router(health.router, tags=["health"])
app.include_router(agent.router, prefix=f"{constant.API_V1_STR}/agent", tags=["agent"])
