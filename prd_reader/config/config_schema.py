"""Pydantic models for configuration validation."""

from typing import Optional
from pydantic import BaseModel, Field, field_validator


class RetryConfig(BaseModel):
    """Retry policy for embedded database queries."""

    max_attempts: int = Field(default=3, ge=1, le=10, description="Maximum attempts per query")
    base_delay: float = Field(default=1.0, ge=0.0, description="Backoff before the second attempt (seconds)")


class NotionConfig(BaseModel):
    """Notion API configuration."""

    api_key: str = Field(..., description="Notion integration API key")
    notion_version: Optional[str] = Field(default=None, description="Notion-Version header override")
    timeout_ms: int = Field(default=60_000, gt=0, description="Per-request timeout (milliseconds)")
    rate_limit_delay: float = Field(default=0.0, ge=0.0, description="Delay before each API call (seconds)")
    page_size: int = Field(default=100, ge=1, le=100, description="Items per page on list endpoints")
    max_depth: int = Field(default=99, ge=1, description="Block tree depth ceiling")
    max_concurrency: int = Field(default=8, ge=1, description="Maximum concurrent child listings")
    fetch_timeout: Optional[float] = Field(
        default=None, gt=0, description="Overall deadline for one page fetch (seconds)"
    )
    retry: RetryConfig = Field(default_factory=RetryConfig, description="Database query retry policy")

    @field_validator("api_key")
    @classmethod
    def strip_api_key(cls, v: str) -> str:
        """Strip surrounding whitespace from the API key."""
        return v.strip()


class LoggingConfig(BaseModel):
    """Logging configuration."""

    verbosity: int = Field(default=0, ge=0, le=3, description="0=WARNING, 1=INFO, 2-3=DEBUG")
    log_file: Optional[str] = Field(default=None, description="Optional DEBUG log file path")


class AppConfig(BaseModel):
    """Main application configuration."""

    notion: NotionConfig = Field(..., description="Notion configuration")
    logging: LoggingConfig = Field(default_factory=LoggingConfig, description="Logging configuration")

    def validate(self) -> None:
        """Validate configuration consistency."""
        if not self.notion.api_key:
            raise ValueError("notion.api_key must not be empty")
