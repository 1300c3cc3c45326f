"""
Session binding: one region, one EC2 client and one CloudWatch client.

A :class:`Session` is an explicit value. Nothing is stored at module level,
so several sessions (different accounts, regions, or test fakes) can be used
side by side.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict

from autostop.base import AlarmBlueprint, ComputeBlueprint
from autostop.base.config import AWSConfig
from autostop.base.exceptions import RegionNotConfiguredError
from autostop.base.logger import as_logger
from autostop.factory import service_factory


class Session(BaseModel):
    """Clients bound to one credential set and region.

    The clients hold no mutable state and are safe to share across
    concurrent lifecycle calls.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True)

    region: str | None = None
    compute: ComputeBlueprint | None = None
    alarms: AlarmBlueprint | None = None


def configure(
    region: str | None,
    credentials: Mapping[str, Any] | None = None,
    **options: Any,
) -> Session:
    """Build a :class:`Session` for *region*.

    Args:
        region: AWS region name. Falls back to ``AWS_DEFAULT_REGION`` /
            ``AWS_REGION`` when empty.
        credentials: Mapping with ``aws_access_key_id``,
            ``aws_secret_access_key`` and optionally ``aws_session_token``.
            Missing values fall back to the environment, then to boto3's
            own credential chain.
        **options: Extra :class:`AWSConfig` fields (e.g. ``request_timeout``).

    Returns:
        A session holding the EC2 and CloudWatch clients.

    Raises:
        RegionNotConfiguredError: If no region is given or found in the
            environment. No client is built.
        pydantic.ValidationError: If the settings are invalid.
    """
    config = AWSConfig(**{**dict(credentials or {}), **options, "region_name": region})
    if not config.region_name:
        raise RegionNotConfiguredError("AWS region not configured")
    session = Session(
        region=config.region_name,
        compute=service_factory("compute", config),
        alarms=service_factory("alarms", config),
    )
    as_logger.info(
        f"Session configured for region {session.region}",
        service="session",
        operation="configure",
    )
    return session
