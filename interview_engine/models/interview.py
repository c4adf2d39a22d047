"""
Pydantic models for interview sessions.
"""
from datetime import datetime
from typing import Annotated, Dict, List, Literal, Optional, Union
from enum import Enum

from pydantic import BaseModel, Field


class InterviewPhase(str, Enum):
    """Interview phases in order."""
    GREETING = "greeting"
    WARMUP = "warmup"
    CORE_QUESTIONS = "core_questions"
    CLOSING = "closing"
    COMPLETED = "completed"


PHASE_ORDER = [
    InterviewPhase.GREETING,
    InterviewPhase.WARMUP,
    InterviewPhase.CORE_QUESTIONS,
    InterviewPhase.CLOSING,
    InterviewPhase.COMPLETED,
]


class SessionStatus(str, Enum):
    """Status of an interview session."""
    ACTIVE = "active"
    COMPLETED = "completed"


class Speaker(str, Enum):
    """Who produced a turn."""
    AI = "ai"
    CANDIDATE = "candidate"


class TurnType(str, Enum):
    """Kind of turn in the conversation history."""
    GREETING = "greeting"
    QUESTION = "question"
    CLARIFICATION = "clarification"
    REPEAT = "repeat"
    FOLLOWUP = "followup"
    TRANSITION = "transition"
    CONCLUSION = "conclusion"
    ANSWER = "answer"


class Intent(str, Enum):
    """Classified purpose of a candidate utterance."""
    NORMAL = "normal"
    REPEAT_REQUEST = "repeat_request"
    CLARIFY_REQUEST = "clarify_request"
    SKIP_REQUEST = "skip_request"
    COMPLETION_SIGNAL = "completion_signal"
    OFFTOPIC = "offtopic"


class QualityTier(str, Enum):
    """Coarse answer quality."""
    BRIEF = "brief"
    ADEQUATE = "adequate"
    DETAILED = "detailed"
    COMPREHENSIVE = "comprehensive"


class FollowUpAction(str, Enum):
    """Decision of the follow-up policy."""
    CLARIFY = "clarify"
    REPEAT = "repeat"
    FOLLOWUP = "followup"
    ADVANCE = "advance"


class TransitionCategory(str, Enum):
    """What kind of interviewer text to generate."""
    GREETING = "greeting"
    WARMUP_TO_CORE = "warmup_to_core"
    CORE_TO_CORE = "core_to_core"
    CORE_TO_CLOSING = "core_to_closing"
    CLARIFICATION = "clarification"
    REPEAT = "repeat"
    FOLLOWUP = "followup"
    CONCLUSION = "conclusion"


class ResponseType(str, Enum):
    """Type tag of a response descriptor."""
    GREETING = "greeting"
    QUESTION = "question"
    CLARIFICATION = "clarification"
    REPEAT = "repeat"
    FOLLOWUP = "followup"
    TRANSITION = "transition"
    CONCLUSION = "conclusion"
    COMPLETED = "completed"


class OrchestratorConfig(BaseModel):
    """Tunable dialogue policy for the orchestrator."""
    max_follow_ups_per_question: int = Field(default=1, ge=0)
    min_word_threshold: int = Field(default=10, ge=0)
    complete_word_threshold: int = Field(default=20, ge=1)
    follow_up_probability: float = Field(default=0.3, ge=0.0, le=1.0)
    history_window: int = Field(default=5, ge=0)
    classification_timeout_seconds: float = Field(default=15.0, gt=0)
    generation_timeout_seconds: float = Field(default=20.0, gt=0)
    minutes_per_question: int = 5

    @classmethod
    def from_settings(cls, settings) -> "OrchestratorConfig":
        """Build the policy from application settings."""
        return cls(
            max_follow_ups_per_question=settings.interview_max_follow_ups_per_question,
            min_word_threshold=settings.interview_min_word_threshold,
            complete_word_threshold=settings.interview_complete_word_threshold,
            follow_up_probability=settings.interview_follow_up_probability,
            history_window=settings.interview_history_window,
            classification_timeout_seconds=settings.interview_classification_timeout_seconds,
            generation_timeout_seconds=settings.interview_generation_timeout_seconds,
        )


class Candidate(BaseModel):
    """Candidate identity."""
    name: str = "Candidate"
    email: Optional[str] = None


class AnalysisResult(BaseModel):
    """Structured classification of one candidate utterance."""
    intent: Intent = Intent.NORMAL
    completeness: bool = True
    quality_tier: QualityTier = QualityTier.ADEQUATE
    missing_elements: List[str] = Field(default_factory=list)
    word_count: int = 0
    degraded: bool = False


class Turn(BaseModel):
    """One utterance in the conversation history."""
    speaker: Speaker
    text: str
    timestamp: datetime = Field(default_factory=datetime.utcnow)
    turn_type: TurnType
    question_index: Optional[int] = None
    intent: Optional[Intent] = None


class QuestionResponse(BaseModel):
    """The accepted answer to one question."""
    question_index: int
    question_text: str
    answer_text: str
    timestamp: datetime = Field(default_factory=datetime.utcnow)
    analysis: Optional[AnalysisResult] = None


class InterviewSession(BaseModel):
    """Complete mutable record of one candidate's interview run."""
    id: str
    candidate: Candidate = Field(default_factory=Candidate)
    role: str = "General"
    question_list: List[str]

    current_phase: InterviewPhase = InterviewPhase.GREETING
    current_question_index: int = -1
    has_greeted: bool = False

    conversation_history: List[Turn] = Field(default_factory=list)
    responses: List[QuestionResponse] = Field(default_factory=list)
    follow_up_count: Dict[int, int] = Field(default_factory=dict)

    status: SessionStatus = SessionStatus.ACTIVE
    start_time: datetime = Field(default_factory=datetime.utcnow)
    end_time: Optional[datetime] = None
    last_activity_at: datetime = Field(default_factory=datetime.utcnow)

    @property
    def current_question(self) -> Optional[str]:
        """Question at the current index, if any has been asked."""
        if 0 <= self.current_question_index < len(self.question_list):
            return self.question_list[self.current_question_index]
        return None

    @property
    def closing_index(self) -> int:
        return len(self.question_list) - 1

    @property
    def last_core_index(self) -> int:
        return len(self.question_list) - 2

    @property
    def duration_minutes(self) -> int:
        """Interview duration in whole minutes."""
        end_time = self.end_time or datetime.utcnow()
        return int((end_time - self.start_time).total_seconds() / 60)

    def follow_ups_for(self, index: int) -> int:
        return self.follow_up_count.get(index, 0)

    def response_for(self, index: int) -> Optional[QuestionResponse]:
        for response in self.responses:
            if response.question_index == index:
                return response
        return None


# Response descriptors (discriminated on `type`)

class _Descriptor(BaseModel):
    text: str
    phase: InterviewPhase
    expecting_response: bool = True


class GreetingDescriptor(_Descriptor):
    type: Literal[ResponseType.GREETING] = ResponseType.GREETING


class QuestionDescriptor(_Descriptor):
    type: Literal[ResponseType.QUESTION] = ResponseType.QUESTION
    question_index: int


class ClarificationDescriptor(_Descriptor):
    type: Literal[ResponseType.CLARIFICATION] = ResponseType.CLARIFICATION
    question_index: int


class RepeatDescriptor(_Descriptor):
    type: Literal[ResponseType.REPEAT] = ResponseType.REPEAT
    question_index: int


class FollowUpDescriptor(_Descriptor):
    type: Literal[ResponseType.FOLLOWUP] = ResponseType.FOLLOWUP
    question_index: int


class TransitionDescriptor(_Descriptor):
    type: Literal[ResponseType.TRANSITION] = ResponseType.TRANSITION
    question_index: int


class ConclusionDescriptor(_Descriptor):
    type: Literal[ResponseType.CONCLUSION] = ResponseType.CONCLUSION
    expecting_response: Literal[False] = False


class CompletedDescriptor(_Descriptor):
    type: Literal[ResponseType.COMPLETED] = ResponseType.COMPLETED
    expecting_response: Literal[False] = False


ResponseDescriptor = Annotated[
    Union[
        GreetingDescriptor,
        QuestionDescriptor,
        ClarificationDescriptor,
        RepeatDescriptor,
        FollowUpDescriptor,
        TransitionDescriptor,
        ConclusionDescriptor,
        CompletedDescriptor,
    ],
    Field(discriminator="type"),
]


# API Request/Response Models

class InitializeInterviewRequest(BaseModel):
    """Request to start a new interview session."""
    session_id: Optional[str] = None
    candidate: Candidate
    role: str = Field(..., min_length=1)
    question_list: List[str] = Field(default_factory=list)


class InitializeInterviewResponse(BaseModel):
    """Response after creating a session."""
    session_id: str
    phase: InterviewPhase
    total_questions: int
    message: str


class InteractRequest(BaseModel):
    """One candidate turn."""
    utterance: Optional[str] = None
    synthesize_audio: bool = False


class InteractResponse(BaseModel):
    """Interviewer reply to one candidate turn."""
    session_id: str
    response: ResponseDescriptor
    audio_base64: Optional[str] = None


class InterviewSummary(BaseModel):
    """Session data handed to the evaluator."""
    id: str
    candidate: Candidate
    role: str
    duration_minutes: int
    responses: List[QuestionResponse]
    question_count: int
    completion_rate: float
    conversation_history: List[Turn]
