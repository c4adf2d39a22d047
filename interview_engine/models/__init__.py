"""
Models package.
"""
from interview_engine.models.interview import (
    InterviewPhase,
    PHASE_ORDER,
    SessionStatus,
    Speaker,
    TurnType,
    Intent,
    QualityTier,
    FollowUpAction,
    TransitionCategory,
    ResponseType,
    OrchestratorConfig,
    Candidate,
    AnalysisResult,
    Turn,
    QuestionResponse,
    InterviewSession,
    ResponseDescriptor,
    InterviewSummary,
)

__all__ = [
    "InterviewPhase",
    "PHASE_ORDER",
    "SessionStatus",
    "Speaker",
    "TurnType",
    "Intent",
    "QualityTier",
    "FollowUpAction",
    "TransitionCategory",
    "ResponseType",
    "OrchestratorConfig",
    "Candidate",
    "AnalysisResult",
    "Turn",
    "QuestionResponse",
    "InterviewSession",
    "ResponseDescriptor",
    "InterviewSummary",
]
