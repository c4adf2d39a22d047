"""
LLM Providers Package.

Provides the Ollama and OpenAI-compatible backends and the text
classification/generation services built on them.
"""
from interview_engine.providers.llm.base import (
    BaseLLMProvider,
    LLMProvider,
    Message,
    GenerationConfig,
    LLMResponse,
    system_message,
    user_message,
)
from interview_engine.providers.llm.vllm_provider import VLLMProvider
from interview_engine.providers.llm.ollama_provider import OllamaProvider
from interview_engine.providers.llm.factory import (
    LLMProviderFactory,
    get_llm_provider_sync,
    close_llm_provider,
)
from interview_engine.providers.llm.text_services import (
    TextClassifier,
    TextGenerator,
    LLMTextClassifier,
    LLMTextGenerator,
    parse_json_object,
)

__all__ = [
    # Base classes
    "BaseLLMProvider",
    "LLMProvider",
    "Message",
    "GenerationConfig",
    "LLMResponse",
    # Message helpers
    "system_message",
    "user_message",
    # Providers
    "VLLMProvider",
    "OllamaProvider",
    # Factory
    "LLMProviderFactory",
    "get_llm_provider_sync",
    "close_llm_provider",
    # Text services
    "TextClassifier",
    "TextGenerator",
    "LLMTextClassifier",
    "LLMTextGenerator",
    "parse_json_object",
]
