# review_pulse/core/config.py
from __future__ import annotations

from typing import Annotated, List, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings, loaded from environment variables and/or .env file.
    """

    # Environment settings
    APP_NAME: str = "Review Pulse"
    APP_ENV: str = "development"
    LOG_LEVEL: str = "INFO"
    CORS_ALLOW_ORIGINS: Annotated[List[str], NoDecode] = Field(
        default_factory=lambda: ["http://localhost:3000"],
        description="Comma-delimited list of allowed origins",
    )

    # Inference settings
    INFERENCE_MODE: str = "remote"  # "remote" or "offline"
    INFERENCE_MODEL_NAME: str = "distilbert-base-uncased-finetuned-sst-2-english"
    INFERENCE_MODEL_URL: str = (
        "https://api-inference.huggingface.co/models/"
        "distilbert-base-uncased-finetuned-sst-2-english"
    )
    INFERENCE_RELAY_TEMPLATES: Annotated[List[str], NoDecode] = Field(
        default_factory=lambda: [
            "https://corsproxy.io/?{url}",
            "https://api.allorigins.win/raw?url={url}",
        ],
        description="Comma-delimited relay URL templates with a {url} placeholder",
    )
    INFERENCE_TIMEOUT_SECONDS: float = 15.0
    INFERENCE_WARMUP_BACKOFF_SECONDS: float = 3.0

    # Session state
    CACHE_FINGERPRINT_LENGTH: int = 100
    REVIEWS_PATH: str = "reviews_test.tsv"
    TOKEN_STORE_PATH: str = ".review_pulse/hf_api_token"

    # Logging sink (spreadsheet web hook)
    SHEET_LOGGER_URL: Optional[str] = None
    SHEET_LOGGER_TIMEOUT_SECONDS: float = 10.0

    # Observability settings
    SENTRY_DSN: Optional[str] = None

    @property
    def offline(self) -> bool:
        return self.INFERENCE_MODE.strip().lower() == "offline"

    @field_validator("CORS_ALLOW_ORIGINS", "INFERENCE_RELAY_TEMPLATES", mode="before")
    @classmethod
    def _split_list(cls, value: str | List[str]) -> List[str]:
        """Allow comma-separated strings for list env vars."""
        if isinstance(value, str):
            return [item.strip() for item in value.split(",") if item.strip()]
        return value

    @field_validator("INFERENCE_RELAY_TEMPLATES")
    @classmethod
    def _require_placeholder(cls, value: List[str]) -> List[str]:
        for template in value:
            if "{url}" not in template:
                raise ValueError(
                    f"Relay template must contain a {{url}} placeholder: {template}"
                )
        return value

    @field_validator("INFERENCE_MODE")
    @classmethod
    def _check_mode(cls, value: str) -> str:
        if value.strip().lower() not in {"remote", "offline"}:
            raise ValueError("INFERENCE_MODE must be 'remote' or 'offline'")
        return value

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )


settings = Settings()
