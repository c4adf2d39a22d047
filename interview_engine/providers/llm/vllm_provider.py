"""
OpenAI-compatible Provider Implementation.

Talks to vLLM or any server exposing /chat/completions with the OpenAI
request shape.
"""
import time
import logging
from typing import Any, Dict, List, Optional

import httpx

from interview_engine.providers.llm.base import (
    BaseLLMProvider,
    Message,
    GenerationConfig,
    LLMResponse,
)

logger = logging.getLogger(__name__)


class VLLMProvider(BaseLLMProvider):
    """Provider for OpenAI-compatible chat completion servers."""

    def __init__(
        self,
        model: str,
        api_url: str = "http://localhost:8001/v1",
        api_key: Optional[str] = None,
        timeout: float = 60.0,
        **kwargs
    ):
        """
        Initialize the provider.

        Args:
            model: Model name (e.g., "meta-llama/Llama-3.1-8B-Instruct")
            api_url: Base URL including the /v1 suffix
            api_key: Optional bearer token
            timeout: HTTP timeout in seconds
        """
        super().__init__(model, **kwargs)
        self.api_url = api_url.rstrip("/")
        self.api_key = api_key
        self.timeout = timeout

        self._client = httpx.AsyncClient(
            timeout=httpx.Timeout(timeout),
            headers=self._build_headers(),
        )

    def _build_headers(self) -> dict:
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        return headers

    def _build_payload(self, messages: List[Message], config: GenerationConfig) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "model": self.model,
            "messages": [msg.to_dict() for msg in messages],
            "max_tokens": config.max_tokens,
            "temperature": config.temperature,
            "top_p": config.top_p,
            "stream": False,
        }
        if config.stop_sequences:
            payload["stop"] = config.stop_sequences
        if config.json_mode:
            payload["response_format"] = {"type": "json_object"}
        return payload

    async def generate(
        self,
        messages: List[Message],
        config: Optional[GenerationConfig] = None,
    ) -> LLMResponse:
        config = config or GenerationConfig()
        start_time = time.time()

        try:
            response = await self._client.post(
                f"{self.api_url}/chat/completions",
                json=self._build_payload(messages, config),
            )
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPStatusError as e:
            logger.error(f"vLLM API error: {e.response.status_code} - {e.response.text}")
            raise
        except httpx.RequestError as e:
            logger.error(f"vLLM connection error: {e}")
            raise

        choice = data["choices"][0]
        return LLMResponse(
            content=choice["message"]["content"] or "",
            model=data.get("model", self.model),
            finish_reason=choice.get("finish_reason"),
            usage=data.get("usage"),
            latency_ms=(time.time() - start_time) * 1000,
        )

    async def health_check(self) -> bool:
        """Check if the server lists models."""
        try:
            response = await self._client.get(f"{self.api_url}/models")
            return response.status_code == 200
        except httpx.HTTPError:
            return False

    async def close(self):
        await self._client.aclose()
