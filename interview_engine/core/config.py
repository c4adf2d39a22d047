"""
Core configuration module for the interview engine.
Loads settings from environment variables and config files.
"""
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # Application
    app_name: str = "Interview_Engine"
    app_env: str = "development"
    debug: bool = True
    log_level: str = "INFO"

    # Server
    host: str = "0.0.0.0"
    port: int = 8000

    # Model Provider Overrides
    provider_llm: Optional[str] = None
    provider_llm_model: Optional[str] = None

    # vLLM / OpenAI-compatible
    vllm_api_url: str = "http://localhost:8001/v1"
    vllm_api_key: Optional[str] = None

    # Ollama
    ollama_api_url: str = "http://localhost:11434"

    # Interview dialogue policy
    interview_max_follow_ups_per_question: int = 1
    interview_min_word_threshold: int = 10
    interview_complete_word_threshold: int = 20
    interview_follow_up_probability: float = 0.3
    interview_history_window: int = 5
    interview_classification_timeout_seconds: float = 15.0
    interview_generation_timeout_seconds: float = 20.0
    interview_random_seed: Optional[int] = None

    # Feature Flags
    enable_voice_pipeline: bool = False


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


def load_model_config(config_path: Optional[str] = None) -> Dict[str, Any]:
    """
    Load model configuration from YAML file.
    Environment variables can override config values.
    """
    if config_path is None:
        config_path = Path(__file__).parent.parent.parent / "config" / "models.yaml"
    else:
        config_path = Path(config_path)

    if not config_path.exists():
        raise FileNotFoundError(f"Model config not found: {config_path}")

    with open(config_path, "r") as f:
        config = yaml.safe_load(f) or {}

    settings = get_settings()
    llm_config = config.setdefault("providers", {}).setdefault("llm", {})

    if settings.provider_llm:
        llm_config["provider"] = settings.provider_llm

    if settings.provider_llm_model:
        llm_config["model"] = settings.provider_llm_model

    return config


def get_model_config() -> Dict[str, Any]:
    """Get model configuration."""
    return load_model_config()
