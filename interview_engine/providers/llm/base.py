"""
LLM Provider Interface and Base Classes.

Defines the abstract interface the interview engine talks to, so the
classification and generation calls can run against Ollama or any
OpenAI-compatible server.
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import List, Dict, Any, Optional
from enum import Enum


class LLMProvider(str, Enum):
    """Supported LLM provider backends."""
    VLLM = "vllm"
    OLLAMA = "ollama"
    OPENAI_COMPATIBLE = "openai-compatible"


@dataclass
class Message:
    """Chat message structure."""
    role: str  # "system", "user", "assistant"
    content: str

    def to_dict(self) -> Dict[str, str]:
        return {"role": self.role, "content": self.content}


@dataclass
class GenerationConfig:
    """Sampling settings for one request."""
    max_tokens: int = 256
    temperature: float = 0.7
    top_p: float = 0.9
    stop_sequences: List[str] = field(default_factory=list)
    json_mode: bool = False  # ask the server to constrain output to a JSON object

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]], **defaults) -> "GenerationConfig":
        """Build from a `config/models.yaml` section, falling back to `defaults`."""
        merged = {**defaults, **(data or {})}
        return cls(
            max_tokens=int(merged.get("max_tokens", 256)),
            temperature=float(merged.get("temperature", 0.7)),
            top_p=float(merged.get("top_p", 0.9)),
            stop_sequences=list(merged.get("stop_sequences", [])),
            json_mode=bool(merged.get("json_mode", False)),
        )


@dataclass
class LLMResponse:
    """Response from LLM generation."""
    content: str
    model: str
    finish_reason: Optional[str] = None
    usage: Optional[Dict[str, int]] = None
    latency_ms: Optional[float] = None

    @property
    def tokens_used(self) -> int:
        """Total tokens used (prompt + completion)."""
        return self.usage.get("total_tokens", 0) if self.usage else 0


class BaseLLMProvider(ABC):
    """
    Abstract base class for LLM providers.

    All LLM backends must implement this interface to be swappable.
    """

    def __init__(self, model: str, **kwargs):
        self.model = model
        self.config = kwargs

    @abstractmethod
    async def generate(
        self,
        messages: List[Message],
        config: Optional[GenerationConfig] = None,
    ) -> LLMResponse:
        """
        Generate a response from the LLM.

        Args:
            messages: Chat messages, system prompt first
            config: Sampling settings

        Returns:
            LLMResponse with generated content and metadata
        """

    @abstractmethod
    async def health_check(self) -> bool:
        """Check if the LLM provider is healthy and responding."""

    async def close(self):
        """Release network resources."""


def system_message(content: str) -> Message:
    """Create a system message."""
    return Message(role="system", content=content)


def user_message(content: str) -> Message:
    """Create a user message."""
    return Message(role="user", content=content)
