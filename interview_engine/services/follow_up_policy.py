"""
Follow-up Policy Engine.

Decides what the interviewer does after a core-question answer: repeat the
question, clarify it, probe for more detail, or move on. The decision is a
pure function of the analysis, the follow-up budget and an injected random
source.
"""
import random
import re
from typing import Optional

from interview_engine.models.interview import (
    AnalysisResult,
    FollowUpAction,
    Intent,
    InterviewPhase,
    OrchestratorConfig,
)


HEDGING_MARKERS = re.compile(
    r"\b(i guess|i think|maybe|probably|sort of|kind of|not sure|i suppose|"
    r"it depends|something like that|stuff like that|i don'?t know)\b",
    re.IGNORECASE,
)

SPECIFICITY_MARKERS = re.compile(
    r"\d|\bfor example\b|\bfor instance\b|\bsuch as\b|\be\.g\.",
    re.IGNORECASE,
)

_SENTENCE_SPLIT = re.compile(r"[.!?]+\s+")


def mentions_proper_name(utterance: str) -> bool:
    """True if a capitalised word appears anywhere but the start of a sentence."""
    for sentence in _SENTENCE_SPLIT.split(utterance.strip()):
        for word in sentence.split()[1:]:
            word = word.strip("\"'(),;:")
            if word[:1].isupper() and word not in ("I", "I'm", "I've", "I'd", "I'll"):
                return True
    return False


def has_specifics(utterance: str) -> bool:
    if SPECIFICITY_MARKERS.search(utterance):
        return True
    return mentions_proper_name(utterance)


def is_hedging(utterance: str) -> bool:
    return bool(utterance) and HEDGING_MARKERS.search(utterance) is not None and not has_specifics(utterance)


class FollowUpPolicy:
    """
    Follow-up decision rules, first match wins:

    1. budget for this question spent -> ADVANCE
    2. repeat request -> REPEAT
    3. clarify request -> CLARIFY
    4. skip or completion signal -> ADVANCE
    5. answer shorter than the minimum (core questions only) -> FOLLOWUP
    6. off-topic answer -> FOLLOWUP
    7. hedged answer with no specifics -> FOLLOWUP
    8. random draw under `follow_up_probability` -> FOLLOWUP, else ADVANCE
    """

    def __init__(
        self,
        config: Optional[OrchestratorConfig] = None,
        rng: Optional[random.Random] = None,
    ):
        self.config = config or OrchestratorConfig()
        self.rng = rng or random.Random()

    def decide(
        self,
        analysis: AnalysisResult,
        follow_up_count: int,
        cap: Optional[int] = None,
        phase: InterviewPhase = InterviewPhase.CORE_QUESTIONS,
        utterance: str = "",
    ) -> FollowUpAction:
        if cap is None:
            cap = self.config.max_follow_ups_per_question

        if follow_up_count >= cap:
            return FollowUpAction.ADVANCE

        if analysis.intent == Intent.REPEAT_REQUEST:
            return FollowUpAction.REPEAT
        if analysis.intent == Intent.CLARIFY_REQUEST:
            return FollowUpAction.CLARIFY
        if analysis.intent in (Intent.SKIP_REQUEST, Intent.COMPLETION_SIGNAL):
            return FollowUpAction.ADVANCE

        if (
            phase == InterviewPhase.CORE_QUESTIONS
            and analysis.word_count < self.config.min_word_threshold
        ):
            return FollowUpAction.FOLLOWUP

        if analysis.intent == Intent.OFFTOPIC:
            return FollowUpAction.FOLLOWUP

        if is_hedging(utterance):
            return FollowUpAction.FOLLOWUP

        if self.rng.random() < self.config.follow_up_probability:
            return FollowUpAction.FOLLOWUP
        return FollowUpAction.ADVANCE
