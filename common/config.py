"""
Configuration for the ContextFlow back-end.

All settings can be overridden with CONTEXTFLOW_* environment variables
(or a .env file). The OpenAI key is also read from plain OPENAI_API_KEY.
"""
import os
from typing import List, Optional

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ContextFlowConfig(BaseSettings):
    """Configuration settings for the API server."""

    model_config = SettingsConfigDict(
        env_prefix="CONTEXTFLOW_",
        env_file=".env",
        extra="ignore",
        case_sensitive=False,
    )

    # AI service settings
    openai_api_key: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("CONTEXTFLOW_OPENAI_API_KEY", "OPENAI_API_KEY"),
        description="OpenAI API key",
    )
    openai_model: str = Field(default="gpt-4.1-mini", description="Model used by explain and chat")
    ai_timeout: int = Field(default=120, description="AI service timeout in seconds")
    ai_max_retries: int = Field(default=3, description="Attempts per model call")

    # Request settings
    max_content_length: int = Field(default=25 * 1024 * 1024, description="Max request body (screenshots are base64)")
    history_limit: int = Field(default=30, description="Chat turns forwarded to the model")

    # Upload settings
    upload_folder: str = Field(default="temp", description="Upload folder path")
    purge_after_hours: int = Field(default=12, description="Delete uploads older than this")

    # Viewer layout
    render_scale: float = Field(default=1.2, description="PDF page scale")
    page_padding: int = Field(default=24, description="Scroll container padding in px")
    page_gap: int = Field(default=16, description="Gap below each page in px")
    min_selection: int = Field(default=6, description="Minimum selection width/height in px")

    # Cache settings
    cache_enabled: bool = Field(default=True, description="Cache explain results")
    cache_size: int = Field(default=50, description="Max cached explain results")

    # Observability
    log_level: str = Field(default="INFO", description="Root log level")
    debug_metrics: bool = Field(default=False, description="Attach _debug metrics to results")

    cors_origins: List[str] = Field(
        default_factory=lambda: ["http://localhost:5173", "http://127.0.0.1:5173"],
        description="Allowed front-end origins",
    )

    def get_ai_config(self) -> dict:
        """Get AI service configuration."""
        return {
            "model": self.openai_model,
            "timeout": self.ai_timeout,
            "max_retries": self.ai_max_retries,
            "api_key_set": bool(self.openai_api_key),
        }

    def get_layout_config(self) -> dict:
        """Get viewer layout configuration."""
        return {
            "scale": self.render_scale,
            "padding": self.page_padding,
            "gap": self.page_gap,
        }

    def validate_ai_config(self) -> bool:
        """Validate AI configuration."""
        return bool(self.openai_api_key)

    def get_effective_upload_folder(self) -> str:
        """Get the effective upload folder path."""
        if os.path.isabs(self.upload_folder):
            return self.upload_folder
        return os.path.join(os.getcwd(), self.upload_folder)


# Global configuration instance
config = ContextFlowConfig()
