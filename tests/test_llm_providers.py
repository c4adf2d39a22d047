"""
LLM Provider Unit Tests.

Tests the Ollama and OpenAI-compatible providers and the factory with
mocked HTTP responses.
"""
import pytest
from unittest.mock import AsyncMock, MagicMock, patch

import httpx

from interview_engine.providers.llm.base import (
    GenerationConfig,
    LLMResponse,
    system_message,
    user_message,
)
from interview_engine.providers.llm.ollama_provider import OllamaProvider
from interview_engine.providers.llm.vllm_provider import VLLMProvider
from interview_engine.providers.llm.factory import LLMProviderFactory


@pytest.fixture
def sample_messages():
    """Sample chat messages."""
    return [
        system_message("You are a professional interviewer."),
        user_message("Generate a greeting."),
    ]


def _mock_response(payload, status_code=200):
    mock_response = MagicMock()
    mock_response.status_code = status_code
    mock_response.json.return_value = payload
    mock_response.raise_for_status = MagicMock()
    return mock_response


class TestOllamaProvider:
    """Test OllamaProvider with mocked HTTP."""

    @pytest.fixture
    def provider(self):
        """Create OllamaProvider instance."""
        return OllamaProvider(model="qwen2.5:3b", api_url="http://localhost:11434")

    @pytest.fixture
    def ollama_chat_response(self):
        """Sample Ollama chat API response."""
        return {
            "model": "qwen2.5:3b",
            "message": {
                "role": "assistant",
                "content": "Hello Alice, welcome to the interview!"
            },
            "done": True,
            "prompt_eval_count": 25,
            "eval_count": 12,
        }

    def test_initialization(self, provider):
        """Test provider initialization."""
        assert provider.model == "qwen2.5:3b"
        assert provider.api_url == "http://localhost:11434"
        assert provider.timeout == 60.0

    def test_initialization_with_custom_url(self):
        """Test initialization with custom URL."""
        provider = OllamaProvider(
            model="llama3.1:8b",
            api_url="http://custom-server:8080/",
            timeout=30.0,
        )
        assert provider.api_url == "http://custom-server:8080"  # Trailing slash removed
        assert provider.timeout == 30.0

    @pytest.mark.asyncio
    async def test_generate_success(self, provider, sample_messages, ollama_chat_response):
        """Test successful generation."""
        with patch.object(provider._client, 'post', new_callable=AsyncMock) as mock_post:
            mock_post.return_value = _mock_response(ollama_chat_response)

            result = await provider.generate(sample_messages)

            assert isinstance(result, LLMResponse)
            assert result.content == "Hello Alice, welcome to the interview!"
            assert result.finish_reason == "stop"
            assert result.tokens_used == 37
            assert result.latency_ms is not None

            call_args = mock_post.call_args
            assert call_args.args[0] == "http://localhost:11434/api/chat"
            assert call_args.kwargs["json"]["model"] == "qwen2.5:3b"
            assert call_args.kwargs["json"]["stream"] is False
            assert "format" not in call_args.kwargs["json"]

    @pytest.mark.asyncio
    async def test_generate_with_config(self, provider, sample_messages, ollama_chat_response):
        """Test generation with custom config and JSON mode."""
        config = GenerationConfig(
            max_tokens=200,
            temperature=0.3,
            top_p=0.95,
            stop_sequences=["END"],
            json_mode=True,
        )

        with patch.object(provider._client, 'post', new_callable=AsyncMock) as mock_post:
            mock_post.return_value = _mock_response(ollama_chat_response)

            await provider.generate(sample_messages, config)

            payload = mock_post.call_args.kwargs["json"]
            assert payload["options"]["num_predict"] == 200
            assert payload["options"]["temperature"] == 0.3
            assert payload["options"]["top_p"] == 0.95
            assert payload["options"]["stop"] == ["END"]
            assert payload["format"] == "json"

    @pytest.mark.asyncio
    async def test_generate_http_error(self, provider, sample_messages):
        """Test handling of HTTP errors."""
        mock_response = MagicMock()
        mock_response.status_code = 404
        mock_response.text = '{"error":"model not found"}'
        mock_response.raise_for_status.side_effect = httpx.HTTPStatusError(
            "Not Found", request=MagicMock(), response=mock_response
        )

        with patch.object(provider._client, 'post', new_callable=AsyncMock) as mock_post:
            mock_post.return_value = mock_response

            with pytest.raises(httpx.HTTPStatusError):
                await provider.generate(sample_messages)

    @pytest.mark.asyncio
    async def test_generate_connection_error(self, provider, sample_messages):
        """Test handling of connection errors."""
        with patch.object(provider._client, 'post', new_callable=AsyncMock) as mock_post:
            mock_post.side_effect = httpx.ConnectError("Connection refused")

            with pytest.raises(httpx.RequestError):
                await provider.generate(sample_messages)

    @pytest.mark.asyncio
    async def test_health_check_healthy(self, provider):
        """Test health check when server is healthy."""
        with patch.object(provider._client, 'get', new_callable=AsyncMock) as mock_get:
            mock_get.return_value = MagicMock(status_code=200)

            assert await provider.health_check() is True
            mock_get.assert_called_with("http://localhost:11434/api/tags")

    @pytest.mark.asyncio
    async def test_health_check_unhealthy(self, provider):
        """Test health check when server is not responding."""
        with patch.object(provider._client, 'get', new_callable=AsyncMock) as mock_get:
            mock_get.side_effect = httpx.ConnectError("Connection refused")

            assert await provider.health_check() is False

    @pytest.mark.asyncio
    async def test_close(self, provider):
        """Test closing the client."""
        with patch.object(provider._client, 'aclose', new_callable=AsyncMock) as mock_close:
            await provider.close()
            mock_close.assert_called_once()


class TestVLLMProvider:
    """Test the OpenAI-compatible provider."""

    @pytest.fixture
    def provider(self):
        return VLLMProvider(model="meta-llama/Llama-3.1-8B-Instruct", api_url="http://gpu:8001/v1", api_key="secret")

    def test_auth_header(self, provider):
        assert provider._client.headers["Authorization"] == "Bearer secret"

    @pytest.mark.asyncio
    async def test_generate_success(self, provider, sample_messages):
        payload = {
            "model": "meta-llama/Llama-3.1-8B-Instruct",
            "choices": [{"message": {"role": "assistant", "content": "Welcome!"}, "finish_reason": "stop"}],
            "usage": {"prompt_tokens": 10, "completion_tokens": 3, "total_tokens": 13},
        }

        with patch.object(provider._client, 'post', new_callable=AsyncMock) as mock_post:
            mock_post.return_value = _mock_response(payload)

            result = await provider.generate(sample_messages, GenerationConfig(json_mode=True))

            assert result.content == "Welcome!"
            assert result.tokens_used == 13
            assert mock_post.call_args.args[0] == "http://gpu:8001/v1/chat/completions"
            assert mock_post.call_args.kwargs["json"]["response_format"] == {"type": "json_object"}

    @pytest.mark.asyncio
    async def test_health_check(self, provider):
        with patch.object(provider._client, 'get', new_callable=AsyncMock) as mock_get:
            mock_get.return_value = MagicMock(status_code=200)

            assert await provider.health_check() is True
            mock_get.assert_called_with("http://gpu:8001/v1/models")


class TestGenerationConfig:
    """Test GenerationConfig."""

    def test_default_values(self):
        config = GenerationConfig()
        assert config.max_tokens == 256
        assert config.temperature == 0.7
        assert config.top_p == 0.9
        assert config.stop_sequences == []
        assert config.json_mode is False

    def test_from_dict_overrides_defaults(self):
        config = GenerationConfig.from_dict({"temperature": 0.4}, max_tokens=1500, temperature=0.9)
        assert config.max_tokens == 1500
        assert config.temperature == 0.4

    def test_from_dict_none(self):
        config = GenerationConfig.from_dict(None, max_tokens=150)
        assert config.max_tokens == 150


class TestLLMResponse:
    """Test LLMResponse."""

    def test_token_properties_no_usage(self):
        response = LLMResponse(content="Hello!", model="test")
        assert response.tokens_used == 0


class TestLLMProviderFactory:
    """Test LLMProviderFactory."""

    def test_create_ollama_provider(self):
        """Test creating Ollama provider."""
        with patch("interview_engine.providers.llm.factory.load_model_config") as mock_config:
            mock_config.return_value = {}

            provider = LLMProviderFactory.create(provider_type="ollama", model="qwen2.5:3b")

            assert isinstance(provider, OllamaProvider)
            assert provider.model == "qwen2.5:3b"

    def test_create_from_config(self):
        """Test creating provider from config file."""
        with patch("interview_engine.providers.llm.factory.load_model_config") as mock_config, \
             patch("interview_engine.providers.llm.factory.get_settings") as mock_settings:

            mock_config.return_value = {
                "providers": {
                    "llm": {
                        "provider": "ollama",
                        "model": "llama3.1:8b",
                        "timeout_seconds": 45,
                    }
                }
            }
            mock_settings.return_value = MagicMock(ollama_api_url="http://ollama:11434")

            provider = LLMProviderFactory.create()

            assert isinstance(provider, OllamaProvider)
            assert provider.model == "llama3.1:8b"
            assert provider.api_url == "http://ollama:11434"
            assert provider.timeout == 45.0

    def test_create_openai_compatible(self):
        with patch("interview_engine.providers.llm.factory.load_model_config") as mock_config, \
             patch("interview_engine.providers.llm.factory.get_settings") as mock_settings:

            mock_config.return_value = {}
            mock_settings.return_value = MagicMock(vllm_api_url="http://gpu:8001/v1", vllm_api_key=None)

            provider = LLMProviderFactory.create(provider_type="openai-compatible", model="some-model")

            assert isinstance(provider, VLLMProvider)
            assert provider.api_url == "http://gpu:8001/v1"

    def test_create_invalid_provider(self):
        """Test creating invalid provider raises error."""
        with patch("interview_engine.providers.llm.factory.load_model_config") as mock_config:
            mock_config.return_value = {}

            with pytest.raises(ValueError, match="Unsupported LLM provider"):
                LLMProviderFactory.create(provider_type="invalid_provider")
