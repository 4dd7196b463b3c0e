"""
Module: settings.py
Description: Queue client configuration using pydantic-settings.

Loads client defaults from QUEUE_* environment variables and AWS
credentials from AWS_ACCESS_KEY / AWS_ACCESS_SECRET / AWS_REGION.
Supports .env files for local development.
"""

from typing import Optional

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from workqueue.models.options import AwsCredentials, ClientOptions


class QueueSettings(BaseSettings):
    """Queue client settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="QUEUE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # Queue defaults
    url: Optional[str] = Field(default=None, description="Full queue URL")
    messages: int = Field(default=1, ge=1, le=10, description="Max messages per pull")
    wait: int = Field(default=20, ge=0, le=20, description="Long-poll wait seconds")
    visibility: int = Field(
        default=30,
        ge=0,
        le=43200,
        description="Visibility timeout seconds for received messages"
    )
    remove_invalid: bool = Field(
        default=True,
        description="Delete received messages that fail validation"
    )
    delay: int = Field(default=0, ge=0, le=900, description="Push delay seconds")
    logger: str = Field(default="queue", description="Logger name bound to client logs")
    log_level: str = Field(default="INFO", description="Logging level")

    # AWS settings
    aws_access_key: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("aws_access_key", "queue_aws_access_key"),
        description="AWS access key id"
    )
    aws_access_secret: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("aws_access_secret", "queue_aws_access_secret"),
        description="AWS secret access key"
    )
    aws_region: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("aws_region", "queue_aws_region"),
        description="AWS region"
    )

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is a valid logging level."""
        valid_levels = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']
        if v.upper() not in valid_levels:
            raise ValueError(f"log_level must be one of: {', '.join(valid_levels)}")
        return v.upper()

    def to_options(self) -> ClientOptions:
        """Build client options from the loaded settings."""
        return ClientOptions(
            url=self.url,
            messages=self.messages,
            wait=self.wait,
            visibility=self.visibility,
            remove_invalid=self.remove_invalid,
            delay=self.delay,
            logger=self.logger,
            aws=AwsCredentials(
                key=self.aws_access_key,
                secret=self.aws_access_secret,
                region=self.aws_region,
            ),
        )


# Global settings instance
settings = QueueSettings()
