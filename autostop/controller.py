"""
Instance lifecycle controller.

Defines what start, stop and terminate mean for an instance:

* ``start`` issues the provider call, then installs any requested auto-stop
  alarms. A failed alarm install never turns a successful start into a
  failure; it is reported as ``schedule_error`` so the caller can warn that
  the instance is running unsupervised.
* ``stop`` re-reads the instance first. A spot instance that EC2 refuses to
  stop yields ``can_terminate=True`` instead of an error.
* ``terminate`` is a single unconditional provider call. Confirmation is the
  caller's job.

No state is cached between calls and nothing is retried.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Callable

from autostop.base.async_support import AsyncMixin
from autostop.base.compute import ComputeBlueprint
from autostop.base.exceptions import (
    AutostopError,
    InstanceNotFoundError,
    InvalidArgumentError,
    NotConfiguredError,
    UnsupportedOperationError,
)
from autostop.base.logger import as_logger
from autostop.base.models import (
    AlarmSpec,
    AutoStopPolicy,
    InstalledPolicy,
    Instance,
    InstanceState,
    InstanceStatus,
    LifecycleOutcome,
    PolicyFailure,
    PolicyKind,
    RawInstanceRecord,
    StartOutcome,
    StopOutcome,
)
from autostop.policy import AutoStopPolicyEngine
from autostop.session import Session

SPOT_STOP_ERROR = (
    "Spot instances cannot be stopped, only terminated. Use the terminate option instead."
)
UNSUPPORTED_DETAILS = "This operation is not supported for this instance type"

_POLICY_LABELS = {
    PolicyKind.DURATION: "Time-based auto-stop",
    PolicyKind.IDLE: "Idle detection",
}


class LifecycleController(AsyncMixin):
    """Start, stop and terminate instances, with auto-stop scheduling.

    Every public method has an ``a``-prefixed coroutine twin
    (``astart``, ``astop``, ...) provided by :class:`AsyncMixin`.

    Attributes:
        session: Session providing the EC2 client.
        engine: Policy engine used after a successful start.
    """

    def __init__(
        self,
        session: Session | None,
        engine: AutoStopPolicyEngine | None = None,
    ) -> None:
        self.session = session
        self.engine = engine or AutoStopPolicyEngine(session)

    def _compute(self) -> ComputeBlueprint:
        if self.session is None or self.session.compute is None:
            raise NotConfiguredError("AWS not configured")
        return self.session.compute

    def _describe(self, instance_id: str) -> RawInstanceRecord:
        records = self._compute().describe_instances([instance_id])
        if not records:
            raise InstanceNotFoundError(f"Instance '{instance_id}' not found")
        return records[0]

    # --- Reads ---

    def list_instances(self) -> list[Instance]:
        """Every instance visible to the session, across all result pages."""
        return [Instance.from_record(r) for r in self._compute().list_instances()]

    def get_status(self, instance_id: str) -> InstanceStatus:
        """Fresh status read for one instance.

        Raises:
            InstanceNotFoundError: If the provider returns no record.
        """
        record = self._describe(instance_id)
        return InstanceStatus(
            instance_id=record.instance_id,
            state=InstanceState.parse(record.state),
            instance_type=record.instance_type,
            public_ip=record.public_ip,
            private_ip=record.private_ip,
            is_spot=record.is_spot,
        )

    # --- Mutations ---

    def start(self, instance_id: str, policy: AutoStopPolicy | None = None) -> StartOutcome:
        """Start *instance_id* and install the requested auto-stop policies.

        Args:
            instance_id: Instance to start.
            policy: Optional duration and/or idle policy.

        Returns:
            A successful :class:`StartOutcome`. ``auto_stop`` is True only
            when every requested policy was installed; otherwise
            ``schedule_error`` joins the per-policy failures.

        Raises:
            InvalidArgumentError: If ``policy.minutes`` is negative. Nothing
                is sent to the provider.
            NotConfiguredError: If the session has no EC2 client.
            InstanceNotFoundError: If EC2 does not recognise *instance_id*.
                This is not a :class:`ProviderError` subclass.
            ProviderError: If EC2 rejects the start for any other reason.
        """
        policy = policy or AutoStopPolicy()
        if policy.minutes is not None and policy.minutes < 0:
            raise InvalidArgumentError(
                f"Auto-stop duration cannot be negative, got {policy.minutes}"
            )

        self._compute().start_instance(instance_id)
        as_logger.info(
            f"Start requested for {instance_id}",
            service="ec2",
            operation="start",
            instance_id=instance_id,
        )
        if policy.is_empty:
            return StartOutcome(success=True, method="started", auto_stop=False)

        requested_at = datetime.now(timezone.utc)
        installed: list[InstalledPolicy] = []
        failures: list[PolicyFailure] = []

        if policy.wants_duration:
            self._install(
                PolicyKind.DURATION,
                instance_id,
                lambda: self.engine.install_duration_policy(instance_id, policy.minutes),
                installed,
                failures,
            )
        if policy.idle:
            self._install(
                PolicyKind.IDLE,
                instance_id,
                lambda: self.engine.install_idle_policy(instance_id),
                installed,
                failures,
            )

        if failures:
            return StartOutcome(
                success=True,
                method="started",
                auto_stop=False,
                schedule_error="; ".join(
                    f"{_POLICY_LABELS[f.kind]}: {f.error}" for f in failures
                ),
                installed=installed,
                failures=failures,
            )

        features = []
        stop_time = None
        if policy.wants_duration:
            features.append(f"stops after {policy.minutes} minutes")
            stop_time = requested_at + timedelta(minutes=policy.minutes)
        if policy.idle:
            features.append("stops when idle")
        return StartOutcome(
            success=True,
            method="cloudwatch",
            auto_stop=True,
            stop_time=stop_time,
            features=" and ".join(features),
            installed=installed,
        )

    def _install(
        self,
        kind: PolicyKind,
        instance_id: str,
        install: Callable[[], AlarmSpec],
        installed: list[InstalledPolicy],
        failures: list[PolicyFailure],
    ) -> None:
        try:
            spec = install()
        except AutostopError as e:
            as_logger.warning(
                f"{_POLICY_LABELS[kind]} not installed for {instance_id}: {e}",
                service="cloudwatch",
                operation=f"install_{kind.value}_policy",
                instance_id=instance_id,
            )
            failures.append(PolicyFailure(kind=kind, error=str(e)))
        else:
            installed.append(InstalledPolicy(kind=kind, alarm_name=spec.name))

    def stop(self, instance_id: str) -> StopOutcome:
        """Stop *instance_id*, offering termination for unstoppable spot instances.

        Returns:
            ``success=True`` once EC2 accepted the stop, or
            ``success=False, is_spot_instance=True, can_terminate=True`` when
            EC2 refuses to stop a spot instance.

        Raises:
            InstanceNotFoundError: If the instance cannot be read.
            UnsupportedOperationError: If EC2 refuses to stop an on-demand
                instance; ``details`` explains the refusal.
            ProviderError: On any other EC2 rejection.
        """
        # Spot-ness decides the recovery path, so read it fresh.
        is_spot = self._describe(instance_id).is_spot
        try:
            self._compute().stop_instance(instance_id)
        except UnsupportedOperationError as e:
            if is_spot:
                as_logger.warning(
                    f"Spot instance {instance_id} cannot be stopped; termination offered",
                    service="ec2",
                    operation="stop",
                    instance_id=instance_id,
                )
                return StopOutcome(
                    success=False,
                    error=SPOT_STOP_ERROR,
                    is_spot_instance=True,
                    can_terminate=True,
                )
            if e.details is None:
                e.details = UNSUPPORTED_DETAILS
            raise

        as_logger.info(
            f"Stop requested for {instance_id}",
            service="ec2",
            operation="stop",
            instance_id=instance_id,
        )
        return StopOutcome(
            success=True,
            method="stopped",
            message=(
                "Spot instance stopped successfully"
                if is_spot
                else "Instance stopped successfully"
            ),
            is_spot_instance=is_spot,
        )

    def terminate(self, instance_id: str) -> LifecycleOutcome:
        """Terminate *instance_id*. Irreversible; the caller must confirm first.

        Raises:
            InstanceNotFoundError: If EC2 does not recognise *instance_id*.
                This is not a :class:`ProviderError` subclass.
            ProviderError: If EC2 rejects the request, including repeat calls
                on an already-terminated instance.
        """
        self._compute().terminate_instance(instance_id)
        as_logger.info(
            f"Terminate requested for {instance_id}",
            service="ec2",
            operation="terminate",
            instance_id=instance_id,
        )
        return LifecycleOutcome(
            success=True,
            method="terminated",
            message="Instance terminated successfully",
        )
