"""
Text classification and text generation services.

The orchestrator depends on two narrow contracts: `TextClassifier`
(prompt in, JSON object out) and `TextGenerator` (prompt in, text out).
The LLM-backed implementations translate provider failures into
`ClassificationServiceError` / `GenerationServiceError`.
"""
import json
import logging
from abc import ABC, abstractmethod
from dataclasses import replace
from typing import Any, Dict, Optional

from interview_engine.core.exceptions import (
    ClassificationServiceError,
    GenerationServiceError,
)
from interview_engine.providers.llm.base import (
    BaseLLMProvider,
    GenerationConfig,
    system_message,
    user_message,
)

logger = logging.getLogger(__name__)

CLASSIFIER_SYSTEM_PROMPT = (
    "You are analyzing interview responses. Be accurate and consider context. "
    "Err on the side of marking answers as complete unless the candidate explicitly "
    "asks for clarification or repetition. Respond with a single JSON object."
)

GENERATOR_SYSTEM_PROMPT = (
    "You are a professional interviewer. Speak directly to the candidate. "
    "Output only the words you would say, with no labels, notes or stage directions."
)


def parse_json_object(response: str) -> Dict[str, Any]:
    """
    Extract a JSON object from raw model output.

    Handles markdown code fences and leading/trailing prose. Returns an
    empty dict when nothing parses.
    """
    response = response.strip()

    if "```json" in response:
        start = response.find("```json") + 7
        end = response.find("```", start)
        response = response[start:end].strip()
    elif "```" in response:
        start = response.find("```") + 3
        end = response.find("```", start)
        response = response[start:end].strip()

    if not response.startswith("{"):
        start = response.find("{")
        if start != -1:
            response = response[start:]

    if not response.endswith("}"):
        end = response.rfind("}")
        if end != -1:
            response = response[:end + 1]

    try:
        data = json.loads(response)
    except json.JSONDecodeError as e:
        logger.debug(f"Unparseable JSON ({e}): {response[:300]}")
        return {}
    return data if isinstance(data, dict) else {}


class TextClassifier(ABC):
    """Classifies text into a structured JSON object."""

    @abstractmethod
    async def classify(self, prompt: str) -> Dict[str, Any]:
        """Return the JSON object the prompt asks for."""


class TextGenerator(ABC):
    """Generates free text for the interviewer to say."""

    @abstractmethod
    async def generate(self, prompt: str) -> str:
        """Return generated text for the prompt."""


class LLMTextClassifier(TextClassifier):
    """Classification over a chat LLM in JSON mode."""

    def __init__(
        self,
        llm_provider: BaseLLMProvider,
        config: Optional[GenerationConfig] = None,
        system_prompt: str = CLASSIFIER_SYSTEM_PROMPT,
    ):
        self.llm = llm_provider
        self.system_prompt = system_prompt
        self._config = replace(
            config or GenerationConfig(max_tokens=200, temperature=0.3),
            json_mode=True,
        )

    async def classify(self, prompt: str) -> Dict[str, Any]:
        messages = [system_message(self.system_prompt), user_message(prompt)]
        try:
            response = await self.llm.generate(messages, self._config)
        except Exception as e:
            raise ClassificationServiceError(f"Classification request failed: {e}", cause=e)

        data = parse_json_object(response.content)
        if not data:
            raise ClassificationServiceError("Classification returned no JSON object")
        return data


class LLMTextGenerator(TextGenerator):
    """Free-text generation over a chat LLM."""

    def __init__(
        self,
        llm_provider: BaseLLMProvider,
        config: Optional[GenerationConfig] = None,
        system_prompt: str = GENERATOR_SYSTEM_PROMPT,
    ):
        self.llm = llm_provider
        self.system_prompt = system_prompt
        self._config = config or GenerationConfig(max_tokens=150, temperature=0.7)

    async def generate(self, prompt: str) -> str:
        messages = [system_message(self.system_prompt), user_message(prompt)]
        try:
            response = await self.llm.generate(messages, self._config)
        except Exception as e:
            raise GenerationServiceError(f"Generation request failed: {e}", cause=e)

        text = (response.content or "").strip()
        if not text:
            raise GenerationServiceError("Generation returned empty text")
        return text
