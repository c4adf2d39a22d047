"""
Response Analyzer.

Classifies one candidate utterance with a single classification call and
normalises the result into an `AnalysisResult`. The classifier's verdict is
softened by local heuristics: long answers count as complete, and a
repeat/clarify label on a long answer is only kept when the candidate
actually asked for one.
"""
import logging
import re
from typing import Any, Dict, List, Optional

from interview_engine.core.exceptions import ClassificationServiceError
from interview_engine.core.resilience import resilient_call
from interview_engine.models.interview import (
    AnalysisResult,
    Intent,
    OrchestratorConfig,
    QualityTier,
    Speaker,
    Turn,
)
from interview_engine.providers.llm.text_services import TextClassifier
from interview_engine.services.prompts import RESPONSE_ANALYSIS_PROMPT

logger = logging.getLogger(__name__)


INTENT_SYNONYMS: Dict[str, Intent] = {
    "normal": Intent.NORMAL,
    "answer": Intent.NORMAL,
    "repeat": Intent.REPEAT_REQUEST,
    "repeat_request": Intent.REPEAT_REQUEST,
    "clarify": Intent.CLARIFY_REQUEST,
    "clarification": Intent.CLARIFY_REQUEST,
    "clarify_request": Intent.CLARIFY_REQUEST,
    "skip": Intent.SKIP_REQUEST,
    "skip_request": Intent.SKIP_REQUEST,
    "pass": Intent.SKIP_REQUEST,
    "completion": Intent.COMPLETION_SIGNAL,
    "complete": Intent.COMPLETION_SIGNAL,
    "completion_signal": Intent.COMPLETION_SIGNAL,
    "done": Intent.COMPLETION_SIGNAL,
    "offtopic": Intent.OFFTOPIC,
    "off_topic": Intent.OFFTOPIC,
    "off-topic": Intent.OFFTOPIC,
    "irrelevant": Intent.OFFTOPIC,
}

REPEAT_PHRASES = re.compile(
    r"\b(repeat|say (that|it) again|what was the question|come again|"
    r"didn'?t (catch|hear) (that|it|the question))\b",
    re.IGNORECASE,
)

CLARIFY_PHRASES = re.compile(
    r"\b(clarify|what do you mean|what does that mean|not sure what you mean|"
    r"rephrase|explain (the|that) question|what are you asking)\b",
    re.IGNORECASE,
)


def count_words(text: str) -> int:
    return len(text.split())


def normalize_intent(value: Any) -> Optional[Intent]:
    """Map a classifier intent label onto `Intent`, or None if unknown."""
    if not isinstance(value, str):
        return None
    key = value.strip().lower().replace(" ", "_")
    return INTENT_SYNONYMS.get(key)


class ResponseAnalyzer:
    """
    Produces an `AnalysisResult` for a candidate utterance.

    Never raises for classifier problems: timeouts, transport errors and
    unparseable output all yield a degraded NORMAL/complete result so the
    interview keeps moving.
    """

    def __init__(
        self,
        classifier: TextClassifier,
        config: Optional[OrchestratorConfig] = None,
    ):
        self.classifier = classifier
        self.config = config or OrchestratorConfig()

    async def analyze(
        self,
        question: str,
        utterance: str,
        recent_history: List[Turn],
        question_type: str = "core",
    ) -> AnalysisResult:
        """
        Analyze a candidate utterance against the current question.

        Args:
            question: The question the candidate is answering
            utterance: What the candidate said
            recent_history: Conversation history; only the last
                `history_window` turns are sent to the classifier
            question_type: Label for the prompt (warmup, core, closing)

        Returns:
            AnalysisResult, with `degraded=True` when the classifier failed
        """
        word_count = count_words(utterance)
        prompt = RESPONSE_ANALYSIS_PROMPT.format(
            question_type=question_type,
            question=question,
            response=utterance,
            context=self._format_history(recent_history),
            complete_word_threshold=self.config.complete_word_threshold,
        )

        outcome = await resilient_call(
            lambda: self.classifier.classify(prompt),
            timeout=self.config.classification_timeout_seconds,
            fallback=None,
            error_cls=ClassificationServiceError,
            description="Response classification",
        )
        if outcome.degraded or outcome.value is None:
            return self._fallback(word_count)

        return self._interpret(outcome.value, utterance, word_count)

    def _interpret(self, data: Dict[str, Any], utterance: str, word_count: int) -> AnalysisResult:
        intent = normalize_intent(data.get("intent"))
        if intent is None or intent == Intent.NORMAL:
            # Older prompt versions answered with booleans instead of a label
            if data.get("requested_repeat") is True:
                intent = Intent.REPEAT_REQUEST
            elif data.get("requested_clarification") is True:
                intent = Intent.CLARIFY_REQUEST
        if intent is None:
            logger.debug(f"Unknown intent label {data.get('intent')!r}, treating as normal")
            intent = Intent.NORMAL

        long_answer = word_count >= self.config.complete_word_threshold

        if long_answer and intent == Intent.REPEAT_REQUEST and not REPEAT_PHRASES.search(utterance):
            intent = Intent.NORMAL
        elif long_answer and intent == Intent.CLARIFY_REQUEST and not CLARIFY_PHRASES.search(utterance):
            intent = Intent.NORMAL

        is_complete = data.get("is_complete", data.get("completeness", True))
        completeness = bool(is_complete) if isinstance(is_complete, bool) else True
        if long_answer and intent == Intent.NORMAL:
            completeness = True

        missing = data.get("missing_elements") or []
        if not isinstance(missing, list):
            missing = [missing]
        missing_elements = [str(item).strip() for item in missing if str(item).strip()]
        if completeness:
            missing_elements = []

        return AnalysisResult(
            intent=intent,
            completeness=completeness,
            quality_tier=self._quality_tier(data.get("quality"), word_count),
            missing_elements=missing_elements,
            word_count=word_count,
        )

    def _quality_tier(self, label: Any, word_count: int) -> QualityTier:
        if isinstance(label, str):
            try:
                return QualityTier(label.strip().lower())
            except ValueError:
                pass
        return self._local_quality_tier(word_count)

    def _local_quality_tier(self, word_count: int) -> QualityTier:
        if word_count < self.config.min_word_threshold:
            return QualityTier.BRIEF
        if word_count < self.config.complete_word_threshold:
            return QualityTier.ADEQUATE
        if word_count < self.config.complete_word_threshold * 3:
            return QualityTier.DETAILED
        return QualityTier.COMPREHENSIVE

    def _fallback(self, word_count: int) -> AnalysisResult:
        return AnalysisResult(
            intent=Intent.NORMAL,
            completeness=True,
            quality_tier=self._local_quality_tier(word_count),
            word_count=word_count,
            degraded=True,
        )

    def _format_history(self, history: List[Turn]) -> str:
        window = self.config.history_window
        if window <= 0 or not history:
            return "(no prior conversation)"
        lines = []
        for turn in history[-window:]:
            speaker = "Interviewer" if turn.speaker == Speaker.AI else "Candidate"
            lines.append(f"{speaker}: {turn.text}")
        return "\n".join(lines)
