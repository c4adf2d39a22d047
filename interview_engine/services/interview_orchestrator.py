"""
Interview Orchestrator Service.

Phase state machine driving one conversational interview per session:
GREETING -> WARMUP -> CORE_QUESTIONS -> CLOSING -> COMPLETED.

Each candidate utterance is analyzed, run through the follow-up policy and
answered with generated interviewer text. External calls degrade to
canonical fallbacks, so the only errors a caller sees are session lookup
errors.
"""
import logging
import random
import uuid
from datetime import datetime
from typing import List, Optional

from interview_engine.core.config import get_model_config, get_settings
from interview_engine.core.exceptions import PhaseTransitionError, SessionNotFoundError
from interview_engine.models.interview import (
    AnalysisResult,
    ClarificationDescriptor,
    CompletedDescriptor,
    ConclusionDescriptor,
    FollowUpAction,
    FollowUpDescriptor,
    GreetingDescriptor,
    InitializeInterviewRequest,
    Intent,
    InterviewPhase,
    InterviewSession,
    InterviewSummary,
    OrchestratorConfig,
    PHASE_ORDER,
    QuestionDescriptor,
    QuestionResponse,
    RepeatDescriptor,
    ResponseDescriptor,
    SessionStatus,
    Speaker,
    TransitionCategory,
    TransitionDescriptor,
    Turn,
    TurnType,
)
from interview_engine.providers.llm import (
    GenerationConfig,
    LLMTextClassifier,
    LLMTextGenerator,
    get_llm_provider_sync,
)
from interview_engine.services.follow_up_policy import FollowUpPolicy
from interview_engine.services.prompts import (
    CLOSING_QUESTION,
    COMPLETED_TEXT,
    DEFAULT_CORE_QUESTIONS,
    READY_ACKNOWLEDGEMENT,
    WARMUP_QUESTION_TEMPLATE,
)
from interview_engine.services.response_analyzer import ResponseAnalyzer
from interview_engine.services.session_store import InMemorySessionStore, SessionStore
from interview_engine.services.transition_generator import TransitionContext, TransitionGenerator

logger = logging.getLogger(__name__)


# Candidate utterances that ask for the question again do not form part of the answer
_NON_ANSWER_INTENTS = (Intent.REPEAT_REQUEST, Intent.CLARIFY_REQUEST)


class InterviewOrchestrator:
    """
    Runs interview sessions turn by turn.

    Responsibilities:
    - Build the question list (ice-breaker, core questions, closing question)
    - Track phase, question index and per-question follow-up budget
    - Decide between repeating, clarifying, probing and advancing
    - Keep the conversation history and the accepted answers

    The orchestrator is the only writer of session state. Every interaction
    loads a copy from the store, mutates it, and saves it back while holding
    the session's lock.
    """

    def __init__(
        self,
        store: SessionStore,
        analyzer: ResponseAnalyzer,
        policy: FollowUpPolicy,
        transition_generator: TransitionGenerator,
        config: Optional[OrchestratorConfig] = None,
    ):
        self.store = store
        self.analyzer = analyzer
        self.policy = policy
        self.transitions = transition_generator
        self.config = config or OrchestratorConfig()

    @staticmethod
    def prepare_questions(role: str, core_questions: Optional[List[str]] = None) -> List[str]:
        """
        Build the full question list for a role.

        The ice-breaker goes first and the closing question last. With no
        core questions configured, the role's default set is used.
        """
        core = [q.strip() for q in (core_questions or []) if q and q.strip()]
        if not core:
            defaults = DEFAULT_CORE_QUESTIONS.get(role)
            if defaults is None:
                by_lower = {k.lower(): v for k, v in DEFAULT_CORE_QUESTIONS.items()}
                defaults = by_lower.get(role.strip().lower(), DEFAULT_CORE_QUESTIONS["default"])
            core = list(defaults)
        return [WARMUP_QUESTION_TEMPLATE.format(role=role), *core, CLOSING_QUESTION]

    def initialize_interview(
        self,
        session_id: Optional[str],
        data: InitializeInterviewRequest,
    ) -> InterviewSession:
        """
        Create a new session.

        Raises:
            DuplicateSessionError: A session with this id already exists
        """
        session = InterviewSession(
            id=session_id or str(uuid.uuid4()),
            candidate=data.candidate,
            role=data.role,
            question_list=self.prepare_questions(data.role, data.question_list),
        )
        self.store.create(session)
        logger.info(
            f"Interview {session.id} initialized for {session.candidate.name} "
            f"({session.role}) with {len(session.question_list)} questions"
        )
        return session

    async def handle_interaction(
        self,
        session_id: str,
        utterance: Optional[str] = None,
    ) -> ResponseDescriptor:
        """
        Process one candidate turn and return the interviewer's reply.

        Args:
            session_id: Interview session ID
            utterance: What the candidate said; None or blank when the
                caller only wants the interviewer to speak

        Raises:
            SessionNotFoundError: Unknown session id
        """
        if not self.store.exists(session_id):
            raise SessionNotFoundError(session_id)

        async with self.store.lock(session_id):
            session = self.store.get(session_id)

            if session.current_phase == InterviewPhase.COMPLETED:
                return CompletedDescriptor(text=COMPLETED_TEXT, phase=InterviewPhase.COMPLETED)

            if utterance is not None and not utterance.strip():
                utterance = None
            elif utterance is not None:
                utterance = utterance.strip()

            if session.current_phase == InterviewPhase.GREETING:
                descriptor = await self._handle_greeting(session, utterance)
            elif session.current_phase == InterviewPhase.WARMUP:
                descriptor = await self._handle_warmup(session, utterance)
            elif session.current_phase == InterviewPhase.CORE_QUESTIONS:
                descriptor = await self._handle_core_question(session, utterance)
            else:
                descriptor = await self._handle_closing(session, utterance)

            session.last_activity_at = datetime.utcnow()
            self.store.save(session)
            return descriptor

    # Phase handlers

    async def _handle_greeting(self, session: InterviewSession, utterance: Optional[str]) -> ResponseDescriptor:
        if utterance:
            self._add_candidate_turn(session, utterance)

        if not session.has_greeted:
            question_count = len(session.question_list)
            text = await self.transitions.generate(
                TransitionCategory.GREETING,
                TransitionContext(
                    candidate_name=session.candidate.name,
                    role=session.role,
                    question_count=question_count,
                    duration_minutes=question_count * self.config.minutes_per_question,
                ),
            )
            session.has_greeted = True
            self._add_ai_turn(session, text, TurnType.GREETING)
            return GreetingDescriptor(text=text, phase=session.current_phase)

        # Any reply to the greeting counts as readiness
        self._transition_to(session, InterviewPhase.WARMUP)
        session.current_question_index = 0
        text = f"{READY_ACKNOWLEDGEMENT} {session.current_question}"
        self._add_ai_turn(session, text, TurnType.QUESTION, question_index=0)
        return QuestionDescriptor(text=text, phase=session.current_phase, question_index=0)

    async def _handle_warmup(self, session: InterviewSession, utterance: Optional[str]) -> ResponseDescriptor:
        if utterance is None:
            return self._reask(session)

        index = session.current_question_index
        analysis = await self.analyzer.analyze(
            session.current_question,
            utterance,
            session.conversation_history,
            question_type="warmup",
        )
        self._add_candidate_turn(session, utterance, question_index=index, intent=analysis.intent)
        self._record_response(session, index, analysis)

        self._transition_to(session, InterviewPhase.CORE_QUESTIONS)
        session.current_question_index = index + 1
        return await self._transition_descriptor(session, TransitionCategory.WARMUP_TO_CORE, utterance)

    async def _handle_core_question(self, session: InterviewSession, utterance: Optional[str]) -> ResponseDescriptor:
        if utterance is None:
            return self._reask(session)

        index = session.current_question_index
        question = session.current_question
        analysis = await self.analyzer.analyze(question, utterance, session.conversation_history)
        self._add_candidate_turn(session, utterance, question_index=index, intent=analysis.intent)

        action = self.policy.decide(
            analysis,
            session.follow_ups_for(index),
            phase=session.current_phase,
            utterance=utterance,
        )
        logger.debug(
            f"Session {session.id}: question {index} intent={analysis.intent.value} "
            f"words={analysis.word_count} -> {action.value}"
        )

        if action == FollowUpAction.ADVANCE:
            self._record_response(session, index, analysis)
            if index >= session.last_core_index:
                self._transition_to(session, InterviewPhase.CLOSING)
                session.current_question_index = session.closing_index
                category = TransitionCategory.CORE_TO_CLOSING
            else:
                session.current_question_index = index + 1
                category = TransitionCategory.CORE_TO_CORE
            return await self._transition_descriptor(session, category, utterance)

        session.follow_up_count[index] = session.follow_ups_for(index) + 1
        context = TransitionContext(
            question=question,
            previous_answer=utterance,
            candidate_name=session.candidate.name,
            role=session.role,
            missing_elements=analysis.missing_elements,
        )

        if action == FollowUpAction.REPEAT:
            text = await self.transitions.generate(TransitionCategory.REPEAT, context)
            self._add_ai_turn(session, text, TurnType.REPEAT, question_index=index)
            return RepeatDescriptor(text=text, phase=session.current_phase, question_index=index)

        if action == FollowUpAction.CLARIFY:
            text = await self.transitions.generate(TransitionCategory.CLARIFICATION, context)
            self._add_ai_turn(session, text, TurnType.CLARIFICATION, question_index=index)
            return ClarificationDescriptor(text=text, phase=session.current_phase, question_index=index)

        text = await self.transitions.generate(TransitionCategory.FOLLOWUP, context)
        self._add_ai_turn(session, text, TurnType.FOLLOWUP, question_index=index)
        return FollowUpDescriptor(text=text, phase=session.current_phase, question_index=index)

    async def _handle_closing(self, session: InterviewSession, utterance: Optional[str]) -> ResponseDescriptor:
        if utterance is None:
            return self._reask(session)

        index = session.current_question_index
        self._add_candidate_turn(session, utterance, question_index=index)
        self._record_response(session, index, None)

        session.end_time = datetime.utcnow()
        session.status = SessionStatus.COMPLETED
        self._transition_to(session, InterviewPhase.COMPLETED)

        text = await self.transitions.generate(
            TransitionCategory.CONCLUSION,
            TransitionContext(
                candidate_name=session.candidate.name,
                role=session.role,
                question_count=len(session.question_list),
                duration_minutes=session.duration_minutes,
            ),
        )
        self._add_ai_turn(session, text, TurnType.CONCLUSION)
        logger.info(f"Session {session.id}: Interview completed with {len(session.responses)} responses")
        return ConclusionDescriptor(text=text, phase=session.current_phase)

    # Helpers

    def _reask(self, session: InterviewSession) -> ResponseDescriptor:
        index = session.current_question_index
        text = session.current_question
        self._add_ai_turn(session, text, TurnType.QUESTION, question_index=index)
        return QuestionDescriptor(text=text, phase=session.current_phase, question_index=index)

    async def _transition_descriptor(
        self,
        session: InterviewSession,
        category: TransitionCategory,
        previous_answer: str,
    ) -> TransitionDescriptor:
        index = session.current_question_index
        text = await self.transitions.generate(
            category,
            TransitionContext(
                question=session.current_question,
                previous_answer=previous_answer,
                candidate_name=session.candidate.name,
                role=session.role,
            ),
        )
        self._add_ai_turn(session, text, TurnType.TRANSITION, question_index=index)
        return TransitionDescriptor(text=text, phase=session.current_phase, question_index=index)

    def _transition_to(self, session: InterviewSession, phase: InterviewPhase) -> None:
        current = PHASE_ORDER.index(session.current_phase)
        target = PHASE_ORDER.index(phase)
        if target < current:
            raise PhaseTransitionError(
                f"Session {session.id}: cannot move from {session.current_phase.value} back to {phase.value}"
            )
        if target != current:
            logger.info(f"Session {session.id}: Phase transition {session.current_phase.value} -> {phase.value}")
            session.current_phase = phase

    def _record_response(
        self,
        session: InterviewSession,
        index: int,
        analysis: Optional[AnalysisResult],
    ) -> None:
        if session.response_for(index) is not None:
            return

        candidate_turns = [
            t for t in session.conversation_history
            if t.speaker == Speaker.CANDIDATE and t.question_index == index
        ]
        answer_parts = [t.text for t in candidate_turns if t.intent not in _NON_ANSWER_INTENTS]
        if not answer_parts and candidate_turns:
            answer_parts = [candidate_turns[-1].text]

        session.responses.append(
            QuestionResponse(
                question_index=index,
                question_text=session.question_list[index],
                answer_text=" ".join(answer_parts),
                analysis=analysis,
            )
        )

    def _add_ai_turn(
        self,
        session: InterviewSession,
        text: str,
        turn_type: TurnType,
        question_index: Optional[int] = None,
    ) -> None:
        session.conversation_history.append(
            Turn(speaker=Speaker.AI, text=text, turn_type=turn_type, question_index=question_index)
        )

    def _add_candidate_turn(
        self,
        session: InterviewSession,
        text: str,
        question_index: Optional[int] = None,
        intent: Optional[Intent] = None,
    ) -> None:
        session.conversation_history.append(
            Turn(
                speaker=Speaker.CANDIDATE,
                text=text,
                turn_type=TurnType.ANSWER,
                question_index=question_index,
                intent=intent,
            )
        )

    # Session access

    def get_session(self, session_id: str) -> InterviewSession:
        return self.store.get(session_id)

    def get_interview_summary(self, session_id: str) -> InterviewSummary:
        """Session data for evaluation: answers, completion rate and the full history."""
        session = self.store.get(session_id)
        duration = 0
        if session.end_time:
            duration = round((session.end_time - session.start_time).total_seconds() / 60)
        question_count = len(session.question_list)
        return InterviewSummary(
            id=session.id,
            candidate=session.candidate,
            role=session.role,
            duration_minutes=duration,
            responses=session.responses,
            question_count=question_count,
            completion_rate=len(session.responses) / question_count * 100 if question_count else 0.0,
            conversation_history=session.conversation_history,
        )

    def list_sessions(
        self,
        status: Optional[SessionStatus] = None,
        limit: int = 50,
    ) -> List[InterviewSession]:
        return self.store.list_sessions(status=status, limit=limit)

    def delete_session(self, session_id: str) -> bool:
        return self.store.delete(session_id)


# Global orchestrator instance (lazy loaded)
_orchestrator: Optional[InterviewOrchestrator] = None


def get_interview_orchestrator() -> InterviewOrchestrator:
    """Get or create the global interview orchestrator."""
    global _orchestrator
    if _orchestrator is None:
        settings = get_settings()
        config = OrchestratorConfig.from_settings(settings)
        llm_config = get_model_config().get("providers", {}).get("llm", {})
        llm = get_llm_provider_sync()

        classifier = LLMTextClassifier(
            llm, GenerationConfig.from_dict(llm_config.get("classification"), max_tokens=200, temperature=0.3)
        )
        generator = LLMTextGenerator(
            llm, GenerationConfig.from_dict(llm_config.get("generation"), max_tokens=150, temperature=0.7)
        )

        _orchestrator = InterviewOrchestrator(
            store=InMemorySessionStore(),
            analyzer=ResponseAnalyzer(classifier, config),
            policy=FollowUpPolicy(config, rng=random.Random(settings.interview_random_seed)),
            transition_generator=TransitionGenerator(generator, timeout=config.generation_timeout_seconds),
            config=config,
        )
    return _orchestrator
