"""
Services package.
"""
from interview_engine.services.session_store import SessionStore, InMemorySessionStore
from interview_engine.services.response_analyzer import ResponseAnalyzer
from interview_engine.services.follow_up_policy import FollowUpPolicy
from interview_engine.services.transition_generator import (
    TransitionGenerator,
    TransitionContext,
    MetaInstructionRule,
    DEFAULT_META_RULES,
)
from interview_engine.services.interview_orchestrator import (
    InterviewOrchestrator,
    get_interview_orchestrator,
)
from interview_engine.services.evaluation import (
    Evaluator,
    TranscriptEvaluator,
    EvaluationReport,
    Recommendation,
    get_transcript_evaluator,
)

__all__ = [
    # Session storage
    "SessionStore",
    "InMemorySessionStore",
    # Dialogue components
    "ResponseAnalyzer",
    "FollowUpPolicy",
    "TransitionGenerator",
    "TransitionContext",
    "MetaInstructionRule",
    "DEFAULT_META_RULES",
    # Orchestration
    "InterviewOrchestrator",
    "get_interview_orchestrator",
    # Evaluation
    "Evaluator",
    "TranscriptEvaluator",
    "EvaluationReport",
    "Recommendation",
    "get_transcript_evaluator",
]
