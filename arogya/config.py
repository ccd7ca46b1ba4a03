# arogya/config.py
from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field


PACKAGE_DIR = Path(__file__).resolve().parent


class Settings(BaseSettings):
    # Provider keys relayed to the browser by GET /api/keys
    groq_api_key: str = Field("", validation_alias="GROQ_API_KEY")
    perplexity_api_key: str = Field("", validation_alias="PERPLEXITY_API_KEY")
    gemini_api_key: str = Field("", validation_alias="GEMINI_API_KEY")

    llm_base_url: str = Field(
        "https://api.groq.com/openai/v1", validation_alias="LLM_BASE_URL"
    )
    llm_model: str = Field("llama-3.3-70b-versatile", validation_alias="LLM_MODEL")
    llm_temperature: float = Field(0.7, validation_alias="LLM_TEMPERATURE")
    llm_max_tokens: int = Field(1000, validation_alias="LLM_MAX_TOKENS")
    llm_timeout: float = Field(60.0, validation_alias="LLM_TIMEOUT")

    # Ask for name/age/gender/location again after every completed assessment
    reset_fields_on_assessment: bool = Field(
        True, validation_alias="RESET_FIELDS_ON_ASSESSMENT"
    )
    pdf_export_enabled: bool = Field(True, validation_alias="PDF_EXPORT_ENABLED")
    # Unicode TTF for report text; empty means search the system font dirs
    pdf_font_path: str = Field("", validation_alias="PDF_FONT_PATH")

    # In-memory sessions idle longer than this are dropped
    session_ttl_minutes: float = Field(60.0, validation_alias="SESSION_TTL_MINUTES")
    max_sessions: int = Field(1000, validation_alias="MAX_SESSIONS")

    static_dir: Path = Field(PACKAGE_DIR / "static", validation_alias="STATIC_DIR")
    log_level: str = Field("INFO", validation_alias="LOG_LEVEL")
    host: str = Field("0.0.0.0", validation_alias="HOST")
    port: int = Field(8000, validation_alias="PORT")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
