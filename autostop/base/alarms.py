"""Alarm service client blueprint."""

from abc import ABC, abstractmethod
from collections.abc import Sequence

from autostop.base.models import AlarmSpec


class AlarmBlueprint(ABC):
    """Abstract interface for metric alarms.

    Maps to AWS CloudWatch. Alarms are write-once from the caller's point of
    view: there is no read-back of alarm state.
    """

    @abstractmethod
    def put_alarm(self, spec: AlarmSpec) -> None:
        """Create (or replace) the alarm described by *spec*.

        Args:
            spec: Complete alarm specification, including its stop action.
        """

    @abstractmethod
    def delete_alarms(self, names: Sequence[str]) -> None:
        """Delete alarms by name.

        Args:
            names: Alarm names previously passed to :meth:`put_alarm`.
        """
