"""
pytest configuration and shared fixtures.

The dialogue tests run against scripted text services instead of a live
LLM: the classifier labels utterances by keyword and the generator returns
short canned sentences, so every reply is deterministic.
"""
import random
import re
from typing import Any, Dict, List

import pytest

from interview_engine.core.exceptions import ClassificationServiceError, GenerationServiceError
from interview_engine.models.interview import (
    Candidate,
    InitializeInterviewRequest,
    OrchestratorConfig,
)
from interview_engine.providers.llm.text_services import TextClassifier, TextGenerator
from interview_engine.services.follow_up_policy import FollowUpPolicy
from interview_engine.services.interview_orchestrator import InterviewOrchestrator
from interview_engine.services.response_analyzer import ResponseAnalyzer
from interview_engine.services.session_store import InMemorySessionStore
from interview_engine.services.transition_generator import TransitionGenerator


LONG_ANSWER = (
    "In my last role I led the migration of our billing service to a new event pipeline, "
    "coordinating three teams and cutting invoice latency from hours to minutes over one quarter."
)

SHORT_ANSWER = "It went pretty well overall."


class ScriptedClassifier(TextClassifier):
    """Keyword-driven stand-in for the classification service."""

    def __init__(self, overrides: Dict[str, Dict[str, Any]] = None):
        self.overrides = overrides or {}
        self.prompts: List[str] = []

    async def classify(self, prompt: str) -> Dict[str, Any]:
        self.prompts.append(prompt)
        match = re.search(r'Candidate\'s Response: "(.*)"', prompt)
        utterance = match.group(1).lower() if match else ""

        for keyword, result in self.overrides.items():
            if keyword in utterance:
                return result
        if "repeat" in utterance:
            return {"intent": "repeat", "is_complete": False}
        if "what do you mean" in utterance or "clarify" in utterance:
            return {"intent": "clarify", "is_complete": False}
        if "skip" in utterance:
            return {"intent": "skip", "is_complete": False}
        return {"intent": "normal", "is_complete": True, "quality": "adequate", "missing_elements": []}


class CannedGenerator(TextGenerator):
    """Returns a fixed acknowledgement; the question is appended by the generator."""

    def __init__(self, text: str = "Thank you for sharing that."):
        self.text = text
        self.prompts: List[str] = []

    async def generate(self, prompt: str) -> str:
        self.prompts.append(prompt)
        return self.text


class FailingClassifier(TextClassifier):
    async def classify(self, prompt: str) -> Dict[str, Any]:
        raise ClassificationServiceError("classifier offline")


class FailingGenerator(TextGenerator):
    async def generate(self, prompt: str) -> str:
        raise GenerationServiceError("generator offline")


@pytest.fixture
def orchestrator_config():
    """Policy with the random follow-up branch switched off."""
    return OrchestratorConfig(follow_up_probability=0.0)


@pytest.fixture
def classifier():
    return ScriptedClassifier()


@pytest.fixture
def generator():
    return CannedGenerator()


@pytest.fixture
def store():
    return InMemorySessionStore()


def build_orchestrator(store, classifier, generator, config, seed=42):
    return InterviewOrchestrator(
        store=store,
        analyzer=ResponseAnalyzer(classifier, config),
        policy=FollowUpPolicy(config, rng=random.Random(seed)),
        transition_generator=TransitionGenerator(generator, timeout=config.generation_timeout_seconds),
        config=config,
    )


@pytest.fixture
def orchestrator(store, classifier, generator, orchestrator_config):
    return build_orchestrator(store, classifier, generator, orchestrator_config)


@pytest.fixture
def interview_request():
    """Scenario session: two core questions for an engineer."""
    return InitializeInterviewRequest(
        candidate=Candidate(name="Alice"),
        role="Engineer",
        question_list=["Q1", "Q2"],
    )
