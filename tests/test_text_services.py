"""
Text Service Tests.

Tests the LLM-backed classifier and generator with a mocked provider.
"""
import pytest
from unittest.mock import AsyncMock

import httpx

from interview_engine.core.exceptions import ClassificationServiceError, GenerationServiceError
from interview_engine.providers.llm.base import GenerationConfig, LLMResponse
from interview_engine.providers.llm.text_services import (
    LLMTextClassifier,
    LLMTextGenerator,
    parse_json_object,
)


@pytest.fixture
def mock_llm():
    llm = AsyncMock()
    llm.generate.return_value = LLMResponse(content='{"intent": "normal"}', model="test")
    return llm


class TestParseJsonObject:
    """Test JSON extraction from model output."""

    def test_plain_json(self):
        assert parse_json_object('{"intent": "repeat"}') == {"intent": "repeat"}

    def test_fenced_json(self):
        text = 'Here you go:\n```json\n{"intent": "clarify"}\n```'
        assert parse_json_object(text) == {"intent": "clarify"}

    def test_surrounding_prose(self):
        text = 'The analysis is {"intent": "skip", "is_complete": false} as requested.'
        assert parse_json_object(text) == {"intent": "skip", "is_complete": False}

    def test_invalid(self):
        assert parse_json_object("not json at all") == {}

    def test_non_object(self):
        assert parse_json_object("[1, 2, 3]") == {}


class TestLLMTextClassifier:
    """Test classification over the provider."""

    @pytest.mark.asyncio
    async def test_classify(self, mock_llm):
        classifier = LLMTextClassifier(mock_llm)

        result = await classifier.classify("Analyze this")

        assert result == {"intent": "normal"}
        messages, config = mock_llm.generate.call_args.args
        assert messages[0].role == "system"
        assert messages[1].content == "Analyze this"
        assert config.json_mode is True

    @pytest.mark.asyncio
    async def test_json_mode_forced(self, mock_llm):
        classifier = LLMTextClassifier(mock_llm, GenerationConfig(max_tokens=50, json_mode=False))

        await classifier.classify("Analyze this")

        config = mock_llm.generate.call_args.args[1]
        assert config.json_mode is True
        assert config.max_tokens == 50

    @pytest.mark.asyncio
    async def test_provider_error(self, mock_llm):
        mock_llm.generate.side_effect = httpx.ConnectError("Connection refused")
        classifier = LLMTextClassifier(mock_llm)

        with pytest.raises(ClassificationServiceError) as exc_info:
            await classifier.classify("Analyze this")
        assert isinstance(exc_info.value.cause, httpx.ConnectError)

    @pytest.mark.asyncio
    async def test_unparseable_output(self, mock_llm):
        mock_llm.generate.return_value = LLMResponse(content="I think it is normal", model="test")
        classifier = LLMTextClassifier(mock_llm)

        with pytest.raises(ClassificationServiceError):
            await classifier.classify("Analyze this")


class TestLLMTextGenerator:
    """Test generation over the provider."""

    @pytest.mark.asyncio
    async def test_generate(self, mock_llm):
        mock_llm.generate.return_value = LLMResponse(content="  Thank you. Next question?  ", model="test")
        generator = LLMTextGenerator(mock_llm)

        assert await generator.generate("Write a transition") == "Thank you. Next question?"

    @pytest.mark.asyncio
    async def test_empty_output(self, mock_llm):
        mock_llm.generate.return_value = LLMResponse(content="   ", model="test")
        generator = LLMTextGenerator(mock_llm)

        with pytest.raises(GenerationServiceError):
            await generator.generate("Write a transition")

    @pytest.mark.asyncio
    async def test_provider_error(self, mock_llm):
        mock_llm.generate.side_effect = httpx.ReadTimeout("timed out")
        generator = LLMTextGenerator(mock_llm)

        with pytest.raises(GenerationServiceError):
            await generator.generate("Write a transition")
