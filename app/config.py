"""
Fairness Audit Configuration — pydantic-settings based.

All settings are read from environment variables or .env file.
GROQ_API_KEY is optional: without it, LLM routes require the caller to
send a key in the X-LLM-API-Key header.
"""

from pydantic_settings import BaseSettings
from pydantic import Field


class Settings(BaseSettings):
    """Application-wide settings sourced from environment variables."""

    # ── LLM ──
    groq_api_key: str = Field(default="", description="Groq API key for the LLM gateway")
    fairaudit_model: str = Field(
        default="llama-3.3-70b-versatile",
        description="Model identifier for Groq completions",
    )
    llm_timeout: int = Field(default=60, description="LLM request timeout in seconds")
    llm_max_retries: int = Field(default=3, description="Max LLM retry attempts")
    llm_temperature: float = Field(default=0.3, description="LLM temperature")
    llm_max_tokens: int = Field(default=4096, description="Max tokens per completion")

    # ── Server ──
    port: int = Field(default=5001, description="Server port")
    host: str = Field(default="0.0.0.0", description="Server bind host")
    cors_origins: list[str] = Field(
        default=["*"], description="Allowed CORS origins"
    )

    # ── Audit ──
    default_mode: str = Field(
        default="learn", description="Mode a fresh audit starts in: 'learn' or 'audit'"
    )

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
    }


# Singleton instance, imported by other modules
settings = Settings()
