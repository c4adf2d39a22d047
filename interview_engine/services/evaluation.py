"""
Transcript Evaluation Service (LLM-as-Judge).

Scores a completed interview from its summary: fit, communication,
strengths, concerns and a hiring recommendation. Evaluation never fails
outright; when the model is unreachable or returns nothing usable, a
default report asks for manual review.
"""
import logging
from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from interview_engine.core.config import get_model_config
from interview_engine.models.interview import InterviewSummary
from interview_engine.providers.llm import (
    BaseLLMProvider,
    GenerationConfig,
    get_llm_provider_sync,
    parse_json_object,
    system_message,
    user_message,
)
from interview_engine.services.prompts import TRANSCRIPT_EVALUATION_PROMPT

logger = logging.getLogger(__name__)


class Recommendation(str, Enum):
    """Hiring recommendation levels."""
    STRONG_YES = "strong_yes"
    YES = "yes"
    MAYBE = "maybe"
    NO = "no"


class EvaluationReport(BaseModel):
    """Assessment of one completed interview."""
    session_id: str
    candidate_name: str
    role: str
    fit_score: int = Field(default=5, ge=1, le=10)
    communication_score: int = Field(default=5, ge=1, le=10)
    technical_readiness: str = "Unable to assess"
    summary: str = ""
    key_quotes: List[str] = Field(default_factory=list)
    strengths: List[str] = Field(default_factory=list)
    concerns: List[str] = Field(default_factory=list)
    suggested_followups: List[str] = Field(default_factory=list)
    recommendation: Recommendation = Recommendation.MAYBE
    completion_rate: float = 0.0
    degraded: bool = False


def _clamp_score(value: Any, default: int = 5) -> int:
    try:
        score = int(round(float(value)))
    except (TypeError, ValueError):
        return default
    return max(1, min(10, score))


def _string_list(value: Any, limit: Optional[int] = None) -> List[str]:
    if not isinstance(value, list):
        return []
    items = [str(v).strip() for v in value if str(v).strip()]
    return items[:limit] if limit else items


def score_to_recommendation(fit_score: int) -> Recommendation:
    if fit_score >= 9:
        return Recommendation.STRONG_YES
    if fit_score >= 7:
        return Recommendation.YES
    if fit_score >= 5:
        return Recommendation.MAYBE
    return Recommendation.NO


class Evaluator(ABC):
    """Scores a completed interview."""

    @abstractmethod
    async def evaluate(self, summary: InterviewSummary) -> EvaluationReport:
        """Return an evaluation report for the interview summary."""


class TranscriptEvaluator(Evaluator):
    """
    Evaluates interview transcripts with a single LLM call.
    """

    def __init__(
        self,
        llm_provider: Optional[BaseLLMProvider] = None,
        config: Optional[GenerationConfig] = None,
    ):
        """
        Initialize the evaluator.

        Args:
            llm_provider: LLM provider instance. If None, uses default from factory.
            config: Sampling settings for the evaluation request
        """
        self.llm = llm_provider or get_llm_provider_sync()
        self._config = config or GenerationConfig(max_tokens=1500, temperature=0.4, json_mode=True)

    async def evaluate(self, summary: InterviewSummary) -> EvaluationReport:
        prompt = TRANSCRIPT_EVALUATION_PROMPT.format(
            role=summary.role,
            candidate_name=summary.candidate.name,
            duration_minutes=summary.duration_minutes,
            answered=len(summary.responses),
            question_count=summary.question_count,
            responses=self._format_responses(summary),
        )
        messages = [
            system_message("You are an experienced hiring manager reviewing interview transcripts."),
            user_message(prompt),
        ]

        try:
            response = await self.llm.generate(messages, self._config)
        except Exception as e:
            logger.error(f"Failed to evaluate interview {summary.id}: {e}")
            return self.default_report(summary)

        data = parse_json_object(response.content)
        if not data:
            logger.warning(f"Evaluation for interview {summary.id} returned no usable JSON")
            return self.default_report(summary)

        return self._build_report(summary, data)

    def _build_report(self, summary: InterviewSummary, data: Dict[str, Any]) -> EvaluationReport:
        fit_score = _clamp_score(data.get("fit_score"))

        try:
            recommendation = Recommendation(str(data.get("recommendation", "")).strip().lower())
        except ValueError:
            recommendation = score_to_recommendation(fit_score)
            logger.debug(f"Invalid recommendation label, derived {recommendation.value} from fit score")

        concerns = data.get("concerns", data.get("red_flags"))
        return EvaluationReport(
            session_id=summary.id,
            candidate_name=summary.candidate.name,
            role=summary.role,
            fit_score=fit_score,
            communication_score=_clamp_score(data.get("communication_score")),
            technical_readiness=str(data.get("technical_readiness") or "Unable to assess"),
            summary=str(data.get("summary") or ""),
            key_quotes=_string_list(data.get("key_quotes"), limit=3),
            strengths=_string_list(data.get("strengths")),
            concerns=_string_list(concerns),
            suggested_followups=_string_list(data.get("suggested_followups")),
            recommendation=recommendation,
            completion_rate=summary.completion_rate,
        )

    def default_report(self, summary: InterviewSummary) -> EvaluationReport:
        return EvaluationReport(
            session_id=summary.id,
            candidate_name=summary.candidate.name,
            role=summary.role,
            summary=(
                f"Interview completed with {len(summary.responses)} of {summary.question_count} "
                f"questions answered. Automated analysis unavailable; manual review recommended."
            ),
            completion_rate=summary.completion_rate,
            degraded=True,
        )

    @staticmethod
    def _format_responses(summary: InterviewSummary) -> str:
        if not summary.responses:
            return "(no responses recorded)"
        lines = []
        for response in summary.responses:
            lines.append(f"Q{response.question_index + 1}: {response.question_text}")
            lines.append(f"A: {response.answer_text}")
            lines.append("")
        return "\n".join(lines).strip()


# Global instance (lazy loaded)
_transcript_evaluator: Optional[TranscriptEvaluator] = None


def get_transcript_evaluator() -> TranscriptEvaluator:
    """Get or create the transcript evaluator instance."""
    global _transcript_evaluator
    if _transcript_evaluator is None:
        llm_config = get_model_config().get("providers", {}).get("llm", {})
        _transcript_evaluator = TranscriptEvaluator(
            config=GenerationConfig.from_dict(
                llm_config.get("evaluation"), max_tokens=1500, temperature=0.4, json_mode=True
            ),
        )
    return _transcript_evaluator
