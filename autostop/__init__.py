"""Autostop: EC2 instance lifecycle control with CloudWatch auto-stop alarms.

Build a session once, then drive instances through the controller::

    from autostop import AutoStopPolicy, LifecycleController, configure

    session = configure("us-east-1", {"aws_access_key_id": "...", "aws_secret_access_key": "..."})
    controller = LifecycleController(session)
    outcome = controller.start("i-0abc", AutoStopPolicy(minutes=60, idle=True))
"""

from .base import AlarmBlueprint, ComputeBlueprint
from .base.models import (
    AlarmSpec,
    AutoStopPolicy,
    Instance,
    InstanceState,
    InstanceStatus,
    LifecycleKind,
    LifecycleOutcome,
    StartOutcome,
    StopOutcome,
)
from .controller import LifecycleController
from .policy import AutoStopPolicyEngine
from .refresh import StatusRefresher
from .session import Session, configure

__all__ = [
    "AlarmBlueprint",
    "AlarmSpec",
    "AutoStopPolicy",
    "AutoStopPolicyEngine",
    "ComputeBlueprint",
    "Instance",
    "InstanceState",
    "InstanceStatus",
    "LifecycleController",
    "LifecycleKind",
    "LifecycleOutcome",
    "Session",
    "StartOutcome",
    "StatusRefresher",
    "StopOutcome",
    "configure",
]
