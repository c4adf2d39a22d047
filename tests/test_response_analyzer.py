"""
Response Analyzer Tests.

Tests intent normalisation, leniency heuristics and the degraded path,
with the classifier mocked.
"""
import asyncio
from unittest.mock import AsyncMock

import pytest

from interview_engine.core.exceptions import ClassificationServiceError
from interview_engine.models.interview import (
    Intent,
    OrchestratorConfig,
    QualityTier,
    Speaker,
    Turn,
    TurnType,
)
from interview_engine.services.response_analyzer import ResponseAnalyzer, count_words, normalize_intent
from tests.conftest import LONG_ANSWER


@pytest.fixture
def mock_classifier():
    classifier = AsyncMock()
    classifier.classify.return_value = {"intent": "normal", "is_complete": True, "quality": "adequate"}
    return classifier


@pytest.fixture
def analyzer(mock_classifier):
    return ResponseAnalyzer(mock_classifier, OrchestratorConfig())


class TestIntentNormalisation:
    """Test classifier label mapping."""

    @pytest.mark.parametrize("label,expected", [
        ("normal", Intent.NORMAL),
        ("repeat", Intent.REPEAT_REQUEST),
        ("Clarify", Intent.CLARIFY_REQUEST),
        ("clarification", Intent.CLARIFY_REQUEST),
        ("skip", Intent.SKIP_REQUEST),
        ("completion", Intent.COMPLETION_SIGNAL),
        ("off-topic", Intent.OFFTOPIC),
        ("off topic", Intent.OFFTOPIC),
    ])
    def test_known_labels(self, label, expected):
        assert normalize_intent(label) == expected

    def test_unknown_label(self):
        assert normalize_intent("banana") is None
        assert normalize_intent(None) is None

    def test_count_words(self):
        assert count_words("  one two   three ") == 3
        assert count_words("") == 0


class TestAnalyze:
    """Test analyze() against classifier output."""

    @pytest.mark.asyncio
    async def test_normal_answer(self, analyzer):
        result = await analyzer.analyze("Q1", "I built a small thing", [])

        assert result.intent == Intent.NORMAL
        assert result.completeness is True
        assert result.quality_tier == QualityTier.ADEQUATE
        assert result.word_count == 5
        assert result.degraded is False

    @pytest.mark.asyncio
    async def test_prompt_contains_question_and_window(self, mock_classifier):
        analyzer = ResponseAnalyzer(mock_classifier, OrchestratorConfig(history_window=2))
        history = [
            Turn(speaker=Speaker.AI, text=f"turn {i}", turn_type=TurnType.QUESTION)
            for i in range(5)
        ]

        await analyzer.analyze("Tell me about testing", "I write unit tests", history)

        prompt = mock_classifier.classify.call_args.args[0]
        assert "Tell me about testing" in prompt
        assert "I write unit tests" in prompt
        assert "turn 4" in prompt and "turn 3" in prompt
        assert "turn 2" not in prompt

    @pytest.mark.asyncio
    async def test_repeat_request_kept_for_short_utterance(self, analyzer, mock_classifier):
        mock_classifier.classify.return_value = {"intent": "repeat", "is_complete": False}

        result = await analyzer.analyze("Q1", "sorry, come again?", [])

        assert result.intent == Intent.REPEAT_REQUEST
        assert result.completeness is False

    @pytest.mark.asyncio
    async def test_long_answer_mislabelled_as_repeat_becomes_normal(self, analyzer, mock_classifier):
        mock_classifier.classify.return_value = {"intent": "repeat", "is_complete": False}

        result = await analyzer.analyze("Q1", LONG_ANSWER, [])

        assert result.intent == Intent.NORMAL
        assert result.completeness is True

    @pytest.mark.asyncio
    async def test_long_explicit_repeat_request_kept(self, analyzer, mock_classifier):
        mock_classifier.classify.return_value = {"intent": "repeat"}
        utterance = (
            "I am sorry, the connection dropped for a few seconds on my side and I missed most of it, "
            "could you please repeat the question for me?"
        )

        result = await analyzer.analyze("Q1", utterance, [])

        assert result.intent == Intent.REPEAT_REQUEST

    @pytest.mark.asyncio
    async def test_long_answer_marked_complete(self, analyzer, mock_classifier):
        mock_classifier.classify.return_value = {
            "intent": "normal", "is_complete": False, "missing_elements": ["outcome"],
        }

        result = await analyzer.analyze("Q1", LONG_ANSWER, [])

        assert result.completeness is True
        assert result.missing_elements == []

    @pytest.mark.asyncio
    async def test_missing_elements_kept_when_incomplete(self, analyzer, mock_classifier):
        mock_classifier.classify.return_value = {
            "intent": "normal", "is_complete": False, "missing_elements": ["specific example", " "],
        }

        result = await analyzer.analyze("Q1", "I handled it fine", [])

        assert result.completeness is False
        assert result.missing_elements == ["specific example"]

    @pytest.mark.asyncio
    async def test_legacy_boolean_flags(self, analyzer, mock_classifier):
        mock_classifier.classify.return_value = {"requested_clarification": True, "is_complete": False}

        result = await analyzer.analyze("Q1", "which project?", [])

        assert result.intent == Intent.CLARIFY_REQUEST

    @pytest.mark.asyncio
    async def test_quality_from_word_count_when_label_missing(self, analyzer, mock_classifier):
        mock_classifier.classify.return_value = {"intent": "normal"}

        result = await analyzer.analyze("Q1", "yes", [])

        assert result.quality_tier == QualityTier.BRIEF


class TestDegradedAnalysis:
    """Test the fallback result."""

    @pytest.mark.asyncio
    async def test_classifier_error(self, analyzer, mock_classifier):
        mock_classifier.classify.side_effect = ClassificationServiceError("down")

        result = await analyzer.analyze("Q1", "short answer here", [])

        assert result.intent == Intent.NORMAL
        assert result.completeness is True
        assert result.word_count == 3
        assert result.quality_tier == QualityTier.BRIEF
        assert result.degraded is True

    @pytest.mark.asyncio
    async def test_classifier_timeout(self, mock_classifier):
        async def slow(prompt):
            await asyncio.sleep(1)
            return {"intent": "repeat"}

        mock_classifier.classify.side_effect = slow
        analyzer = ResponseAnalyzer(mock_classifier, OrchestratorConfig(classification_timeout_seconds=0.01))

        result = await analyzer.analyze("Q1", "can you repeat that", [])

        assert result.intent == Intent.NORMAL
        assert result.degraded is True
