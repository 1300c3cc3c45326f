"""
Auto-stop policy engine.

Translates an auto-stop request into a CloudWatch metric alarm on the
instance's ``CPUUtilization`` and submits it. Each alarm carries the native
``arn:aws:automate:<region>:ec2:stop`` action, so the alarm service itself
stops the instance when the alarm fires.

Two policies exist:

* **duration**: CloudWatch has no delayed-action primitive, so elapsed time
  is modelled as an alarm whose threshold (``> -1``) is always exceeded,
  evaluated over ``minutes`` one-minute periods. Missing data counts as
  breaching, so the instance still stops when metrics stop reporting.
* **idle**: CPU below 5% in each of 5 consecutive one-minute periods, again
  with missing data counted as breaching.

Installing is fire-and-forget. Success means CloudWatch accepted the alarm;
there is no channel reporting whether it later fired.
"""

from __future__ import annotations

import uuid
from collections.abc import Sequence
from datetime import datetime, timedelta, timezone

from autostop.base.alarms import AlarmBlueprint
from autostop.base.exceptions import (
    AlarmServiceUnavailableError,
    InvalidArgumentError,
    RegionNotConfiguredError,
)
from autostop.base.logger import as_logger
from autostop.base.models import AlarmSpec
from autostop.session import Session

PERIOD_SECONDS = 60
ALWAYS_BREACHED_THRESHOLD = -1.0
IDLE_CPU_THRESHOLD = 5.0
IDLE_WINDOWS = 5

DURATION_PREFIX = "AutoStop"
IDLE_PREFIX = "IdleStop"


def alarm_name(prefix: str, instance_id: str, now: datetime | None = None) -> str:
    """Name unique per install attempt: instance id, epoch millis, random suffix."""
    millis = int((now or datetime.now(timezone.utc)).timestamp() * 1000)
    return f"{prefix}-{instance_id}-{millis}-{uuid.uuid4().hex[:8]}"


def stop_action(region: str) -> str:
    return f"arn:aws:automate:{region}:ec2:stop"


def _check_minutes(minutes: object) -> int:
    # bool is an int subclass; reject it explicitly.
    if isinstance(minutes, bool) or not isinstance(minutes, int) or minutes <= 0:
        raise InvalidArgumentError(
            f"Auto-stop duration must be a positive whole number of minutes, got {minutes!r}"
        )
    return minutes


def build_duration_alarm(
    instance_id: str,
    minutes: int,
    region: str,
    *,
    now: datetime | None = None,
) -> AlarmSpec:
    """Alarm that fires after ``minutes`` elapsed minutes.

    Raises:
        InvalidArgumentError: If *minutes* is not a positive integer.
    """
    minutes = _check_minutes(minutes)
    now = now or datetime.now(timezone.utc)
    target = now + timedelta(minutes=minutes)
    return AlarmSpec(
        name=alarm_name(DURATION_PREFIX, instance_id, now),
        description=(
            f"Auto-stop {instance_id} after {minutes} minutes "
            f"(scheduled for {target.isoformat()})"
        ),
        alarm_actions=(stop_action(region),),
        dimensions=(("InstanceId", instance_id),),
        period=PERIOD_SECONDS,
        evaluation_periods=minutes,
        threshold=ALWAYS_BREACHED_THRESHOLD,
        comparison_operator="GreaterThanThreshold",
        treat_missing_data="breaching",
        datapoints_to_alarm=1,
    )


def build_idle_alarm(
    instance_id: str,
    region: str,
    *,
    now: datetime | None = None,
) -> AlarmSpec:
    """Alarm that fires when every one of the last 5 minutes averaged under 5% CPU."""
    return AlarmSpec(
        name=alarm_name(IDLE_PREFIX, instance_id, now),
        description=(
            f"Auto-stop {instance_id} when idle "
            f"(CPU < {IDLE_CPU_THRESHOLD:g}% for {IDLE_WINDOWS} minutes)"
        ),
        alarm_actions=(stop_action(region),),
        dimensions=(("InstanceId", instance_id),),
        period=PERIOD_SECONDS,
        evaluation_periods=IDLE_WINDOWS,
        threshold=IDLE_CPU_THRESHOLD,
        comparison_operator="LessThanThreshold",
        treat_missing_data="breaching",
        datapoints_to_alarm=IDLE_WINDOWS,
    )


class AutoStopPolicyEngine:
    """Installs auto-stop alarms through a session's alarm client.

    Attributes:
        session: Session providing the CloudWatch client and region.
    """

    def __init__(self, session: Session | None) -> None:
        self.session = session

    def _alarms(self) -> AlarmBlueprint:
        if self.session is None or self.session.alarms is None:
            raise AlarmServiceUnavailableError("CloudWatch not configured")
        return self.session.alarms

    def _target(self) -> tuple[AlarmBlueprint, str]:
        alarms = self._alarms()
        # The stop action ARN is region-qualified.
        if not self.session.region:
            raise RegionNotConfiguredError("AWS region not configured")
        return alarms, self.session.region

    def install_duration_policy(self, instance_id: str, minutes: int) -> AlarmSpec:
        """Install an alarm that stops *instance_id* after *minutes* minutes.

        Args:
            instance_id: Target instance.
            minutes: Positive number of minutes.

        Returns:
            The alarm specification CloudWatch accepted.

        Raises:
            InvalidArgumentError: If *minutes* is not positive. No request is sent.
            AlarmServiceUnavailableError: If the session has no alarm client.
            RegionNotConfiguredError: If the session has no region.
            AlarmError: If CloudWatch rejects the alarm.
        """
        _check_minutes(minutes)
        alarms, region = self._target()
        spec = build_duration_alarm(instance_id, minutes, region)
        alarms.put_alarm(spec)
        as_logger.info(
            f"Auto-stop alarm created; {instance_id} stops in about {minutes} minutes",
            service="cloudwatch",
            operation="install_duration_policy",
            instance_id=instance_id,
            alarm_name=spec.name,
        )
        return spec

    def install_idle_policy(self, instance_id: str) -> AlarmSpec:
        """Install an alarm that stops *instance_id* once it is idle.

        Returns:
            The alarm specification CloudWatch accepted.

        Raises:
            AlarmServiceUnavailableError: If the session has no alarm client.
            RegionNotConfiguredError: If the session has no region.
            AlarmError: If CloudWatch rejects the alarm.
        """
        alarms, region = self._target()
        spec = build_idle_alarm(instance_id, region)
        alarms.put_alarm(spec)
        as_logger.info(
            f"Idle-stop alarm created for {instance_id}",
            service="cloudwatch",
            operation="install_idle_policy",
            instance_id=instance_id,
            alarm_name=spec.name,
        )
        return spec

    def remove_alarms(self, names: Sequence[str]) -> None:
        """Delete previously installed alarms. An empty list sends nothing."""
        if not names:
            return
        self._alarms().delete_alarms(list(names))
        as_logger.info(
            f"Deleted {len(names)} auto-stop alarm(s)",
            service="cloudwatch",
            operation="remove_alarms",
        )
