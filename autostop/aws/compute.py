"""AWS EC2 implementation of the Compute blueprint."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any, NoReturn

import boto3
from botocore.exceptions import (
    BotoCoreError,
    ClientError,
    ConnectTimeoutError,
    ReadTimeoutError,
)

from autostop.base.compute import ComputeBlueprint
from autostop.base.config import AWSConfig
from autostop.base.exceptions import (
    AutostopError,
    InstanceNotFoundError,
    ProviderError,
    ProviderTimeoutError,
    UnsupportedOperationError,
)
from autostop.base.models import RawInstanceRecord

_ERROR_MAP: dict[str, type[AutostopError]] = {
    "InvalidInstanceID.NotFound": InstanceNotFoundError,
    "InvalidInstanceID.Malformed": InstanceNotFoundError,
    "UnsupportedOperation": UnsupportedOperationError,
}


def _handle(e: Exception, msg: str) -> NoReturn:
    if isinstance(e, ClientError):
        error = e.response.get("Error", {})
        exc = _ERROR_MAP.get(error.get("Code", ""))
        raise (exc or ProviderError)(f"{msg}: {error.get('Message', e)}") from e
    if isinstance(e, (ReadTimeoutError, ConnectTimeoutError)):
        raise ProviderTimeoutError(f"{msg}: request timed out") from e
    raise ProviderError(f"{msg}: {e}") from e


def _to_record(inst: dict[str, Any]) -> RawInstanceRecord:
    return RawInstanceRecord(
        instance_id=inst["InstanceId"],
        tags={t["Key"]: t.get("Value", "") for t in inst.get("Tags", [])},
        state=inst.get("State", {}).get("Name"),
        instance_type=inst.get("InstanceType"),
        public_ip=inst.get("PublicIpAddress"),
        private_ip=inst.get("PrivateIpAddress"),
        instance_lifecycle=inst.get("InstanceLifecycle"),
        spot_request_id=inst.get("SpotInstanceRequestId"),
        platform=inst.get("Platform"),
        launch_time=inst.get("LaunchTime"),
    )


def _records(page: dict[str, Any]) -> list[RawInstanceRecord]:
    return [
        _to_record(inst)
        for reservation in page.get("Reservations", [])
        for inst in reservation.get("Instances", [])
    ]


class Compute(ComputeBlueprint):
    """AWS EC2 compute service.

    Attributes:
        client: boto3 EC2 client.
    """

    def __init__(self, config: AWSConfig) -> None:
        """Initialize the EC2 client.

        Args:
            config: AWS configuration object containing credentials, region
                and the per-request timeout.
        """
        self.client = boto3.client("ec2", **config.client_kwargs())

    def list_instances(self) -> list[RawInstanceRecord]:
        """List every EC2 instance, following all result pages.

        Returns:
            One record per instance across all reservations.

        Raises:
            ProviderError: On EC2 API failure.
            ProviderTimeoutError: If a page request times out.
        """
        try:
            records: list[RawInstanceRecord] = []
            paginator = self.client.get_paginator("describe_instances")
            for page in paginator.paginate():
                records.extend(_records(page))
            return records
        except (ClientError, BotoCoreError) as e:
            _handle(e, "Failed to list instances")

    def describe_instances(self, instance_ids: Sequence[str]) -> list[RawInstanceRecord]:
        """Describe specific EC2 instances.

        Args:
            instance_ids: EC2 instance IDs.

        Returns:
            Records for the identifiers EC2 resolved (possibly empty).

        Raises:
            InstanceNotFoundError: If EC2 rejects an identifier outright.
        """
        try:
            resp = self.client.describe_instances(InstanceIds=list(instance_ids))
            return _records(resp)
        except (ClientError, BotoCoreError) as e:
            _handle(e, f"Failed to describe instances {list(instance_ids)}")

    def start_instance(self, instance_id: str) -> None:
        """Start a stopped EC2 instance.

        Args:
            instance_id: EC2 instance ID (e.g. ``i-0abcd1234``).

        Raises:
            InstanceNotFoundError: If the instance does not exist.
            ProviderError: On any other EC2 rejection.
        """
        try:
            self.client.start_instances(InstanceIds=[instance_id])
        except (ClientError, BotoCoreError) as e:
            _handle(e, f"Failed to start instance '{instance_id}'")

    def stop_instance(self, instance_id: str) -> None:
        """Stop a running EC2 instance (preserves EBS volumes).

        Args:
            instance_id: EC2 instance ID.

        Raises:
            UnsupportedOperationError: If EC2 cannot stop this instance
                configuration (e.g. a one-time spot request).
            InstanceNotFoundError: If the instance does not exist.
        """
        try:
            self.client.stop_instances(InstanceIds=[instance_id])
        except (ClientError, BotoCoreError) as e:
            _handle(e, f"Failed to stop instance '{instance_id}'")

    def terminate_instance(self, instance_id: str) -> None:
        """Terminate an EC2 instance permanently.

        Args:
            instance_id: EC2 instance ID.

        Raises:
            InstanceNotFoundError: If the instance does not exist.
        """
        try:
            self.client.terminate_instances(InstanceIds=[instance_id])
        except (ClientError, BotoCoreError) as e:
            _handle(e, f"Failed to terminate instance '{instance_id}'")
