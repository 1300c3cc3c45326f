"""AWS CloudWatch implementation of the Alarm blueprint."""

from __future__ import annotations

from collections.abc import Sequence
from typing import NoReturn

import boto3
from botocore.exceptions import (
    BotoCoreError,
    ClientError,
    ConnectTimeoutError,
    ReadTimeoutError,
)

from autostop.base.alarms import AlarmBlueprint
from autostop.base.config import AWSConfig
from autostop.base.exceptions import AlarmError, ProviderTimeoutError
from autostop.base.models import AlarmSpec

# DeleteAlarms accepts at most 100 names per call.
_DELETE_BATCH = 100


def _handle(e: Exception, msg: str) -> NoReturn:
    if isinstance(e, ClientError):
        raise AlarmError(f"{msg}: {e.response.get('Error', {}).get('Message', e)}") from e
    if isinstance(e, (ReadTimeoutError, ConnectTimeoutError)):
        raise ProviderTimeoutError(f"{msg}: request timed out") from e
    raise AlarmError(f"{msg}: {e}") from e


class Alarms(AlarmBlueprint):
    """AWS CloudWatch metric alarms.

    Attributes:
        client: boto3 CloudWatch client.
    """

    def __init__(self, config: AWSConfig) -> None:
        self.client = boto3.client("cloudwatch", **config.client_kwargs())

    def put_alarm(self, spec: AlarmSpec) -> None:
        """Submit *spec* through ``PutMetricAlarm``.

        Raises:
            AlarmError: If CloudWatch rejects the specification.
            ProviderTimeoutError: If the request times out.
        """
        try:
            self.client.put_metric_alarm(**spec.to_cloudwatch())
        except (ClientError, BotoCoreError) as e:
            _handle(e, f"Failed to create alarm '{spec.name}'")

    def delete_alarms(self, names: Sequence[str]) -> None:
        """Delete alarms by name, batching to the CloudWatch limit.

        Raises:
            AlarmError: If CloudWatch rejects the request.
        """
        names = list(names)
        try:
            for i in range(0, len(names), _DELETE_BATCH):
                self.client.delete_alarms(AlarmNames=names[i:i + _DELETE_BATCH])
        except (ClientError, BotoCoreError) as e:
            _handle(e, f"Failed to delete alarms {names}")
