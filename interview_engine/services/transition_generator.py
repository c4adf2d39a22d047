"""
Transition Text Generator.

Produces what the interviewer says between turns: greetings, transitions to
the next question, clarifications, repeats, follow-ups and the closing. One
generation call per request; the output is cleaned of leaked prompt
fragments and, for question-bearing categories, guaranteed to contain the
question being asked.
"""
import logging
import re
from dataclasses import dataclass, field
from typing import List, Optional, Pattern, Sequence, Set

from interview_engine.core.exceptions import GenerationServiceError
from interview_engine.core.resilience import resilient_call
from interview_engine.models.interview import TransitionCategory
from interview_engine.providers.llm.text_services import TextGenerator
from interview_engine.services.prompts import (
    CONCLUSION_FALLBACK,
    FOLLOWUP_FALLBACK,
    FOLLOWUP_FALLBACK_WITH_MISSING,
    GREETING_FALLBACK,
    TRANSITION_PROMPTS,
)

logger = logging.getLogger(__name__)


QUESTION_BEARING = frozenset({
    TransitionCategory.WARMUP_TO_CORE,
    TransitionCategory.CORE_TO_CORE,
    TransitionCategory.CORE_TO_CLOSING,
    TransitionCategory.CLARIFICATION,
    TransitionCategory.REPEAT,
})

# Stands in for the question while cleanup rules run
_KEEP_MARKER = "\x00"

STOPWORDS: Set[str] = {
    "a", "an", "and", "are", "as", "at", "be", "but", "by", "can", "could",
    "did", "do", "does", "for", "from", "had", "has", "have", "how", "i",
    "in", "is", "it", "me", "my", "of", "on", "or", "so", "that", "the",
    "this", "to", "was", "we", "were", "what", "when", "where", "which",
    "who", "why", "will", "with", "would", "you", "your",
}


@dataclass
class TransitionContext:
    """Inputs for one piece of interviewer text."""
    question: Optional[str] = None
    previous_answer: str = ""
    candidate_name: str = "Candidate"
    role: str = ""
    missing_elements: List[str] = field(default_factory=list)
    question_count: int = 0
    duration_minutes: int = 0


@dataclass(frozen=True)
class MetaInstructionRule:
    """One cleanup rule applied to generated text."""
    name: str
    pattern: Pattern
    replacement: str = ""

    def apply(self, text: str) -> str:
        return self.pattern.sub(self.replacement, text)


DEFAULT_META_RULES: Sequence[MetaInstructionRule] = (
    MetaInstructionRule(
        "speaker_label",
        re.compile(r"^\s*(interviewer|assistant|ai|response|transition|output)\s*:\s*", re.IGNORECASE | re.MULTILINE),
    ),
    MetaInstructionRule(
        "preamble",
        re.compile(r"^\s*(sure[,!.]?\s*)?(here'?s|here is)\b[^:\n]*:\s*", re.IGNORECASE | re.MULTILINE),
    ),
    MetaInstructionRule(
        "note_line",
        re.compile(r"^\s*\(?(note|notes)\s*:.*$", re.IGNORECASE | re.MULTILINE),
    ),
    MetaInstructionRule(
        "bracket_placeholder",
        re.compile(r"\[[^\]]*\]"),
    ),
    MetaInstructionRule(
        "length_directive",
        re.compile(
            r"\(\s*(\d+(\s*-\s*\d+)?\s+sentences?(\s+total)?|keep it [^)]*|word for word)\s*\)",
            re.IGNORECASE,
        ),
    ),
    MetaInstructionRule(
        "markdown_emphasis",
        re.compile(r"\*{1,3}|`+"),
    ),
    MetaInstructionRule(
        "wrapping_quotes",
        re.compile(r'^\s*["“](.*)["”]\s*$', re.DOTALL),
        r"\1",
    ),
)


def normalize_text(text: str) -> str:
    text = re.sub(r"[^a-z0-9\s]", " ", text.lower())
    return " ".join(text.split())


def content_words(text: str) -> Set[str]:
    return {w for w in normalize_text(text).split() if len(w) > 2 and w not in STOPWORDS}


class TransitionGenerator:
    """
    Generates interviewer text for a `TransitionCategory`.

    Generation failures, timeouts and outputs that are empty after cleanup
    fall back to canonical text: the bare question for question-bearing
    categories, a fixed elaboration prompt for follow-ups, and fixed
    greeting and closing texts.
    """

    def __init__(
        self,
        generator: TextGenerator,
        timeout: float = 20.0,
        rules: Optional[Sequence[MetaInstructionRule]] = None,
        paraphrase_threshold: float = 0.6,
    ):
        self.generator = generator
        self.timeout = timeout
        self.rules = list(rules) if rules is not None else list(DEFAULT_META_RULES)
        self.paraphrase_threshold = paraphrase_threshold

    async def generate(self, category: TransitionCategory, context: TransitionContext) -> str:
        if category in QUESTION_BEARING and not context.question:
            raise ValueError(f"{category.value} text needs a question")

        prompt = self._build_prompt(category, context)
        outcome = await resilient_call(
            lambda: self.generator.generate(prompt),
            timeout=self.timeout,
            fallback=None,
            error_cls=GenerationServiceError,
            description=f"Transition generation ({category.value})",
        )
        if outcome.degraded or not outcome.value:
            return self.fallback_text(category, context)

        text = self.strip_meta_instructions(outcome.value, keep=context.question)
        if not text:
            logger.warning(f"Generated {category.value} text was empty after cleanup, using fallback")
            return self.fallback_text(category, context)

        if category in QUESTION_BEARING:
            text = self.ensure_question(text, context.question, exact=category == TransitionCategory.REPEAT)
        return text

    def strip_meta_instructions(self, text: str, keep: Optional[str] = None) -> str:
        """
        Apply the cleanup rules.

        A verbatim occurrence of `keep` is shielded from the rules, so markup
        that belongs to the question itself survives.
        """
        shielded = bool(keep) and keep in text
        if shielded:
            text = text.replace(keep, _KEEP_MARKER)
        for rule in self.rules:
            text = rule.apply(text)
        text = " ".join(text.split())
        if shielded:
            text = text.replace(_KEEP_MARKER, keep)
        return text

    def contains_question(self, text: str, question: str, exact: bool = False) -> bool:
        """
        Check whether `text` asks `question`.

        Exact mode requires the question verbatim. Otherwise normalised
        containment or a paraphrase sharing enough of the question's content
        words also counts.
        """
        if question in text:
            return True
        if exact:
            return False

        normalized_question = normalize_text(question)
        if normalized_question and normalized_question in normalize_text(text):
            return True

        question_words = content_words(question)
        if not question_words:
            return False
        overlap = len(question_words & content_words(text)) / len(question_words)
        return overlap >= self.paraphrase_threshold

    def ensure_question(self, text: str, question: str, exact: bool = False) -> str:
        if self.contains_question(text, question, exact=exact):
            return text
        logger.debug(f"Question missing from generated text, appending: {question[:60]}")
        return f"{text} {question}"

    def fallback_text(self, category: TransitionCategory, context: TransitionContext) -> str:
        if category in QUESTION_BEARING:
            return context.question
        if category == TransitionCategory.FOLLOWUP:
            if context.missing_elements:
                return FOLLOWUP_FALLBACK_WITH_MISSING.format(
                    missing=", ".join(context.missing_elements[:2])
                )
            return FOLLOWUP_FALLBACK
        if category == TransitionCategory.GREETING:
            return GREETING_FALLBACK.format(
                candidate_name=context.candidate_name,
                role=context.role,
                question_count=context.question_count,
                duration_minutes=context.duration_minutes,
            )
        return CONCLUSION_FALLBACK.format(candidate_name=context.candidate_name)

    def _build_prompt(self, category: TransitionCategory, context: TransitionContext) -> str:
        return TRANSITION_PROMPTS[category].format(
            question=context.question or "",
            previous_answer=context.previous_answer[:500],
            candidate_name=context.candidate_name,
            role=context.role,
            missing=", ".join(context.missing_elements) or "none identified",
            question_count=context.question_count,
            duration_minutes=context.duration_minutes,
        )
