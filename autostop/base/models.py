"""
Pydantic models shared by the provider clients, the policy engine and the
lifecycle controller.

Instances are projections of fresh provider reads; alarm specs are
write-once requests to the alarm service; outcomes are built per call and
never persisted.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_PLATFORM = "Linux/Unix"


class InstanceState(str, Enum):
    """Provider lifecycle states as observed on each read."""

    PENDING = "pending"
    RUNNING = "running"
    STOPPING = "stopping"
    STOPPED = "stopped"
    TERMINATING = "shutting-down"
    TERMINATED = "terminated"
    UNKNOWN = "unknown"

    @classmethod
    def parse(cls, value: str | None) -> InstanceState:
        try:
            return cls(value)
        except ValueError:
            return cls.UNKNOWN


class LifecycleKind(str, Enum):
    ON_DEMAND = "on-demand"
    SPOT = "spot"


# ── Compute ───────────────────────────────────────────────────────────
class RawInstanceRecord(BaseModel):
    """An instance record exactly as the compute client reported it."""

    instance_id: str
    tags: dict[str, str] = Field(default_factory=dict)
    state: str | None = None
    instance_type: str | None = None
    public_ip: str | None = None
    private_ip: str | None = None
    instance_lifecycle: str | None = None
    spot_request_id: str | None = None
    platform: str | None = None
    launch_time: datetime | None = None

    def name_tag(self) -> str | None:
        return self.tags.get("Name") or None

    @property
    def is_spot(self) -> bool:
        return self.instance_lifecycle == "spot" or bool(self.spot_request_id)


class Instance(BaseModel):
    """An instance as presented to callers."""

    instance_id: str
    name: str
    state: InstanceState
    instance_type: str | None = None
    public_ip: str | None = None
    private_ip: str | None = None
    lifecycle: LifecycleKind = LifecycleKind.ON_DEMAND
    platform: str = DEFAULT_PLATFORM
    launch_time: datetime | None = None

    @classmethod
    def from_record(cls, record: RawInstanceRecord) -> Instance:
        return cls(
            instance_id=record.instance_id,
            name=record.name_tag() or record.instance_id,
            state=InstanceState.parse(record.state),
            instance_type=record.instance_type,
            public_ip=record.public_ip,
            private_ip=record.private_ip,
            lifecycle=LifecycleKind.SPOT if record.is_spot else LifecycleKind.ON_DEMAND,
            platform=record.platform or DEFAULT_PLATFORM,
            launch_time=record.launch_time,
        )

    @property
    def is_spot(self) -> bool:
        return self.lifecycle is LifecycleKind.SPOT


class InstanceStatus(BaseModel):
    """Result of a single-instance status read."""

    instance_id: str
    state: InstanceState
    instance_type: str | None = None
    public_ip: str | None = None
    private_ip: str | None = None
    is_spot: bool = False


# ── Alarms ────────────────────────────────────────────────────────────
class PolicyKind(str, Enum):
    DURATION = "duration"
    IDLE = "idle"


class AlarmSpec(BaseModel):
    """A metric alarm bound to a native instance stop action."""

    model_config = ConfigDict(frozen=True)

    name: str
    description: str
    actions_enabled: bool = True
    alarm_actions: tuple[str, ...]
    metric_name: str = "CPUUtilization"
    namespace: str = "AWS/EC2"
    statistic: str = "Average"
    dimensions: tuple[tuple[str, str], ...]
    period: int
    evaluation_periods: int
    threshold: float
    comparison_operator: str
    treat_missing_data: str = "breaching"
    datapoints_to_alarm: int

    def to_cloudwatch(self) -> dict[str, Any]:
        """Render the spec as ``PutMetricAlarm`` keyword arguments."""
        return {
            "AlarmName": self.name,
            "AlarmDescription": self.description,
            "ActionsEnabled": self.actions_enabled,
            "AlarmActions": list(self.alarm_actions),
            "MetricName": self.metric_name,
            "Namespace": self.namespace,
            "Statistic": self.statistic,
            "Dimensions": [{"Name": k, "Value": v} for k, v in self.dimensions],
            "Period": self.period,
            "EvaluationPeriods": self.evaluation_periods,
            "Threshold": self.threshold,
            "ComparisonOperator": self.comparison_operator,
            "TreatMissingData": self.treat_missing_data,
            "DatapointsToAlarm": self.datapoints_to_alarm,
        }


class AutoStopPolicy(BaseModel):
    """What a caller asks for when starting an instance.

    ``minutes`` of ``None`` or ``0`` requests no duration policy.
    """

    minutes: int | None = None
    idle: bool = False

    @property
    def wants_duration(self) -> bool:
        return bool(self.minutes)

    @property
    def is_empty(self) -> bool:
        return not self.wants_duration and not self.idle


class InstalledPolicy(BaseModel):
    kind: PolicyKind
    alarm_name: str


class PolicyFailure(BaseModel):
    kind: PolicyKind
    error: str


# ── Outcomes ──────────────────────────────────────────────────────────
class LifecycleOutcome(BaseModel):
    """Result of a controller operation."""

    success: bool
    error: str | None = None
    details: str | None = None
    method: str | None = None
    message: str | None = None

    @classmethod
    def from_error(cls, exc: Exception) -> LifecycleOutcome:
        """Failure shape for callers that render errors instead of raising them."""
        return cls(success=False, error=str(exc), details=getattr(exc, "details", None))


class StartOutcome(LifecycleOutcome):
    auto_stop: bool = False
    stop_time: datetime | None = None
    features: str | None = None
    schedule_error: str | None = None
    installed: list[InstalledPolicy] = Field(default_factory=list)
    failures: list[PolicyFailure] = Field(default_factory=list)


class StopOutcome(LifecycleOutcome):
    is_spot_instance: bool = False
    can_terminate: bool = False


__all__ = [
    "AlarmSpec",
    "AutoStopPolicy",
    "DEFAULT_PLATFORM",
    "InstalledPolicy",
    "Instance",
    "InstanceState",
    "InstanceStatus",
    "LifecycleKind",
    "LifecycleOutcome",
    "PolicyFailure",
    "PolicyKind",
    "RawInstanceRecord",
    "StartOutcome",
    "StopOutcome",
]
