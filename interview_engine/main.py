"""
Interview Dialogue Engine - Main FastAPI Application

This is the entry point for the interview dialogue API.
"""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from interview_engine.core.config import get_settings
from interview_engine.providers.llm import close_llm_provider
from interview_engine.api import health, interviews

settings = get_settings()

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.
    Handles startup and shutdown events.
    """
    logger.info(f"Starting {settings.app_name} ({settings.app_env})...")

    yield

    logger.info(f"Shutting down {settings.app_name}...")
    await close_llm_provider()
    logger.info("LLM provider closed")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title=settings.app_name,
        description="Conversational interview orchestrator with LLM-driven transitions",
        version="0.1.0",
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        lifespan=lifespan,
    )

    # Configure CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"] if settings.debug else [],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Include routers
    app.include_router(health.router, tags=["Health"])
    app.include_router(interviews.router, prefix="/api/v1/interviews", tags=["Interviews"])

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "interview_engine.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
    )
