import os
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field

load_dotenv(".env")


def _env_float(name: str, default: float) -> float:
    try:
        return float(os.getenv(name, str(default)))
    except ValueError:
        return default


def _env_int(name: str, default: int) -> int:
    try:
        value = int(os.getenv(name, str(default)))
        return value if value >= 0 else default
    except ValueError:
        return default


class LLMSettings(BaseModel):
    model: str = Field(default_factory=lambda: os.getenv("LLM_MODEL", "gpt-4o-mini"))
    base_url: str = Field(default_factory=lambda: os.getenv("OPENAI_API_BASE", "https://api.openai.com/v1"))
    api_key: str = Field(default_factory=lambda: os.getenv("OPENAI_API_KEY", ""))
    max_tokens: int = Field(
        default_factory=lambda: _env_int("LLM_MAX_TOKENS", 2048),
        description="Maximum number of tokens per request"
    )
    temperature: float = Field(
        default_factory=lambda: _env_float("LLM_TEMPERATURE", 0.7),
        description="Sampling temperature"
    )
    timeout: float = Field(
        default_factory=lambda: _env_float("LLM_TIMEOUT", 120.0),
        description="Per-request timeout in seconds"
    )


class ImageSettings(BaseModel):
    api_token: str = Field(default_factory=lambda: os.getenv("REPLICATE_API_TOKEN", ""))
    base_url: str = Field(default_factory=lambda: os.getenv("REPLICATE_API_BASE", "https://api.replicate.com/v1"))
    model_version: str = Field(
        default_factory=lambda: os.getenv(
            "REPLICATE_MODEL_VERSION",
            "2c5476c6a915d984b3e98c4721fcfac3e82529bb5b4f4a4e6951d4cb85b8b1dd",
        ),
        description="Pinned Replicate model version hash"
    )
    size: str = Field(
        default_factory=lambda: os.getenv("SLIDE_IMAGE_SIZE", "1024x576"),
        description="WIDTHxHEIGHT, 16:9 by default"
    )
    inference_steps: int = Field(default=4, description="Fast generation")
    timeout: float = Field(default_factory=lambda: _env_float("REPLICATE_TIMEOUT", 60.0))

    @property
    def enabled(self) -> bool:
        return bool(self.api_token)


class Settings(BaseModel):
    """Runtime settings; every field can be overridden from the environment."""

    llm_settings: LLMSettings = Field(
        default_factory=LLMSettings,
        description="Settings for the content model"
    )
    image_settings: ImageSettings = Field(
        default_factory=ImageSettings,
        description="Settings for the optional image model"
    )

    # Prompt budgets (characters of source content)
    plan_content_chars: int = Field(default_factory=lambda: _env_int("SLIDES_PLAN_CONTENT_CHARS", 6000))
    slide_content_chars: int = Field(default_factory=lambda: _env_int("SLIDES_SLIDE_CONTENT_CHARS", 3000))

    # Streaming
    slide_delay: float = Field(
        default_factory=lambda: _env_float("SLIDES_DELAY_SECONDS", 0.5),
        description="Pause between slide events"
    )
    push_timeout: float = Field(
        default_factory=lambda: _env_float("SLIDES_PUSH_TIMEOUT", 5.0),
        description="Abandon a channel send after this many seconds"
    )
    stream_base_url: str = Field(
        default_factory=lambda: os.getenv("SLIDES_STREAM_BASE_URL", "ws://localhost:8081")
    )

    # Jobs
    max_active_jobs: int = Field(
        default_factory=lambda: _env_int("SLIDES_MAX_ACTIVE_JOBS", 0),
        description="0 means unlimited"
    )

    history_dir: Optional[str] = Field(
        default_factory=lambda: os.getenv("CHAT_HISTORY_DIR") or None,
        description="Directory of <conversation_id>.json files; in-memory store when unset"
    )


settings = Settings()
