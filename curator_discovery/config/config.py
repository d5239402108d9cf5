"""Configuration management for the discovery agent."""

from typing import List

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings


REQUIRED_VARS = [
    "SUPABASE_URL",
    "SUPABASE_KEY",
]

DEFAULT_PROXY_TEMPLATES = [
    "https://corsproxy.io/?{url}",
    "https://api.allorigins.win/raw?url={url}",
    "https://api.codetabs.com/v1/proxy?quest={url}",
]


def split_keys(raw: str) -> List[str]:
    """Split a comma-separated key list, dropping blanks and duplicates."""
    keys: List[str] = []
    for part in (raw or "").split(","):
        key = part.strip()
        if key and key not in keys:
            keys.append(key)
    return keys


class Config(BaseSettings):
    """Application configuration from environment variables."""

    # Required
    supabase_url: str
    supabase_key: str

    # Inference providers (comma-separated, several keys per provider)
    google_api_key: str = Field(
        "", validation_alias=AliasChoices("GOOGLE_API_KEY", "GEMINI_API_KEY")
    )
    groq_api_key: str = ""

    # Discovery
    target_geography: str = "India"
    request_delay_seconds: float = 1.0
    fetch_timeout_seconds: float = 15.0
    default_target_count: int = 5
    proxy_templates: List[str] = Field(default_factory=lambda: list(DEFAULT_PROXY_TEMPLATES))

    # Optional
    public_base_url: str = "https://nxfcurator.org"
    scan_interval_hours: int = 24
    log_level: str = "INFO"

    model_config = {"env_file": ".env", "case_sensitive": False, "populate_by_name": True}

    @property
    def google_api_keys(self) -> List[str]:
        return split_keys(self.google_api_key)

    @property
    def groq_api_keys(self) -> List[str]:
        return split_keys(self.groq_api_key)


def validate_config() -> Config:
    """Load and validate configuration from environment.

    Raises ValueError with descriptive message listing ALL missing
    required variables (not just the first one).
    """
    try:
        return Config()  # type: ignore[call-arg]
    except Exception as exc:
        missing = []
        err_str = str(exc)
        for var in REQUIRED_VARS:
            if var.lower() in err_str.lower():
                missing.append(var)
        if missing:
            names = ", ".join(missing)
            raise ValueError(
                f"Missing required environment variable(s): {names}. "
                "Please set them in your .env file or environment."
            ) from exc
        raise


def load_config() -> Config:
    """Load configuration from environment (startup entry point)."""
    return validate_config()
