"""
Exception types raised by the interview engine.

Session lookup errors surface to the caller. External service errors are
raised by the provider wrappers and recovered inside the orchestrator.
"""
from typing import Optional


class InterviewEngineError(Exception):
    """Base class for interview engine errors."""


class SessionNotFoundError(InterviewEngineError):
    """Raised when a session id is unknown to the store."""

    def __init__(self, session_id: str):
        self.session_id = session_id
        super().__init__(f"Session not found: {session_id}")


class DuplicateSessionError(InterviewEngineError):
    """Raised when a session id is initialized twice."""

    def __init__(self, session_id: str):
        self.session_id = session_id
        super().__init__(f"Session already exists: {session_id}")


class PhaseTransitionError(InterviewEngineError):
    """Raised when a phase change would move the interview backwards."""


class ExternalServiceError(InterviewEngineError):
    """A call to an external service failed or timed out."""

    service: str = "external"

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        self.cause = cause
        super().__init__(message)


class ClassificationServiceError(ExternalServiceError):
    """The text-classification call failed, timed out or returned no JSON."""

    service = "classification"


class GenerationServiceError(ExternalServiceError):
    """The text-generation call failed or produced unusable output."""

    service = "generation"


class VoiceSynthesisError(ExternalServiceError):
    """Speech synthesis failed; the response goes out text-only."""

    service = "voice_synthesis"
