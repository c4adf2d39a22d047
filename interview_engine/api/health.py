"""
Health check endpoints.
"""
from fastapi import APIRouter
from pydantic import BaseModel

from interview_engine.core.config import get_settings
from interview_engine.providers.llm import get_llm_provider_sync

router = APIRouter()


class HealthResponse(BaseModel):
    """Health check response model."""
    status: str
    llm: bool
    voice_enabled: bool
    version: str = "0.1.0"


@router.get("/health", response_model=HealthResponse)
async def health_check():
    """
    Check the health of the LLM backend.

    The service stays usable when the LLM is down (canonical texts are
    used), so an unreachable LLM reports "degraded" rather than failing.
    """
    llm_ok = await get_llm_provider_sync().health_check()

    return HealthResponse(
        status="healthy" if llm_ok else "degraded",
        llm=llm_ok,
        voice_enabled=get_settings().enable_voice_pipeline,
    )


@router.get("/")
async def root():
    """Root endpoint with API info."""
    return {
        "name": "Interview Dialogue Engine",
        "version": "0.1.0",
        "docs": "/docs",
    }
