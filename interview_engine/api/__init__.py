"""
API routers package.
"""
from interview_engine.api import health, interviews

__all__ = ["health", "interviews"]
