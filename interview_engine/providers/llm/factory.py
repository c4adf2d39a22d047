"""
LLM Provider Factory.

Creates the provider named in `config/models.yaml` (or the environment
overrides) for the classification, generation and evaluation calls.
"""
import logging
from typing import Optional

from interview_engine.core.config import load_model_config, get_settings
from interview_engine.providers.llm.base import BaseLLMProvider, LLMProvider
from interview_engine.providers.llm.vllm_provider import VLLMProvider
from interview_engine.providers.llm.ollama_provider import OllamaProvider

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "qwen2.5:3b"


class LLMProviderFactory:
    """Factory for creating LLM provider instances."""

    @staticmethod
    def create(
        provider_type: Optional[str] = None,
        model: Optional[str] = None,
        **kwargs
    ) -> BaseLLMProvider:
        """
        Create an LLM provider instance.

        Args:
            provider_type: Provider type (ollama, vllm, openai-compatible). If None, reads from config.
            model: Model name. If None, reads from config.
            **kwargs: Additional provider-specific arguments.

        Returns:
            Configured LLM provider instance.
        """
        settings = get_settings()
        llm_config = load_model_config().get("providers", {}).get("llm", {})

        provider_type = provider_type or llm_config.get("provider", LLMProvider.OLLAMA.value)
        model = model or llm_config.get("model", DEFAULT_MODEL)
        kwargs.setdefault("timeout", float(llm_config.get("timeout_seconds", 60.0)))

        logger.info(f"Creating LLM provider: {provider_type} with model: {model}")

        if provider_type in (LLMProvider.VLLM.value, LLMProvider.OPENAI_COMPATIBLE.value):
            return VLLMProvider(
                model=model,
                api_url=kwargs.pop("api_url", settings.vllm_api_url),
                api_key=kwargs.pop("api_key", settings.vllm_api_key),
                **kwargs
            )

        if provider_type == LLMProvider.OLLAMA.value:
            return OllamaProvider(
                model=model,
                api_url=kwargs.pop("api_url", settings.ollama_api_url),
                **kwargs
            )

        raise ValueError(f"Unsupported LLM provider: {provider_type}")


# Global provider instance (lazy loaded)
_llm_provider: Optional[BaseLLMProvider] = None


def get_llm_provider_sync() -> BaseLLMProvider:
    """
    Get or create the global LLM provider.

    No health check is made here; a dead provider shows up as degraded
    classification and generation calls.
    """
    global _llm_provider
    if _llm_provider is None:
        _llm_provider = LLMProviderFactory.create()
    return _llm_provider


async def close_llm_provider():
    """Close the global provider, if one was created."""
    global _llm_provider
    if _llm_provider is not None:
        await _llm_provider.close()
        _llm_provider = None
