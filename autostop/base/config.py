"""
Pydantic configuration model for the AWS session.

Validates session settings at configure time instead of silently passing
bad values to the boto3 clients.
"""

from __future__ import annotations

import os
from typing import Any

from botocore.config import Config
from pydantic import BaseModel, ConfigDict, Field, model_validator

DEFAULT_REQUEST_TIMEOUT = 30.0


class AWSConfig(BaseModel):
    """Configuration for the EC2 and CloudWatch clients.

    Credentials are resolved in order:
    1. Explicit values passed in the config dict.
    2. Environment variables (AWS_ACCESS_KEY_ID, AWS_SECRET_ACCESS_KEY,
       AWS_SESSION_TOKEN, AWS_DEFAULT_REGION / AWS_REGION).
    3. If neither is set, fields are left as None so boto3 can fall back to its
       own credential chain (instance metadata, ~/.aws/credentials, etc.).
    """

    model_config = ConfigDict(extra="forbid")

    aws_access_key_id: str | None = Field(default=None, description="AWS access key ID")
    aws_secret_access_key: str | None = Field(default=None, description="AWS secret access key")
    aws_session_token: str | None = Field(default=None, description="Temporary session token")
    region_name: str | None = Field(default=None, description="AWS region (e.g. 'us-east-1')")
    request_timeout: float = Field(
        default=DEFAULT_REQUEST_TIMEOUT,
        gt=0,
        description="Per-request connect/read timeout in seconds",
    )

    @model_validator(mode="before")
    @classmethod
    def resolve_from_env(cls, values: dict[str, Any]) -> dict[str, Any]:
        """Fall back to environment variables for missing credentials."""
        env_map = {
            "aws_access_key_id": ("AWS_ACCESS_KEY_ID",),
            "aws_secret_access_key": ("AWS_SECRET_ACCESS_KEY",),
            "aws_session_token": ("AWS_SESSION_TOKEN",),
            "region_name": ("AWS_DEFAULT_REGION", "AWS_REGION"),
        }
        for field, env_vars in env_map.items():
            if not values.get(field):
                values[field] = next(
                    (os.environ[v] for v in env_vars if os.environ.get(v)), None
                )
        return values

    def client_kwargs(self) -> dict[str, Any]:
        """Keyword arguments shared by every boto3 client built from this config."""
        return {
            "aws_access_key_id": self.aws_access_key_id,
            "aws_secret_access_key": self.aws_secret_access_key,
            "aws_session_token": self.aws_session_token,
            "region_name": self.region_name,
            "config": self.botocore_config(),
        }

    def botocore_config(self) -> Config:
        """Timeouts applied to every request; botocore's own retries are off."""
        return Config(
            connect_timeout=self.request_timeout,
            read_timeout=self.request_timeout,
            retries={"total_max_attempts": 1},
        )


def validate_config(config: dict[str, Any] | AWSConfig) -> AWSConfig:
    """Validate and return a typed session config.

    Args:
        config: Raw configuration dictionary or an existing :class:`AWSConfig`.

    Returns:
        A validated :class:`AWSConfig`.

    Raises:
        pydantic.ValidationError: If the config is invalid.
    """
    if isinstance(config, AWSConfig):
        return config
    return AWSConfig(**config)


__all__ = [
    "AWSConfig",
    "DEFAULT_REQUEST_TIMEOUT",
    "validate_config",
]
