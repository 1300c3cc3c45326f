"""Compute (VM) control client blueprint."""

from abc import ABC, abstractmethod
from collections.abc import Sequence

from autostop.base.models import RawInstanceRecord


class ComputeBlueprint(ABC):
    """Abstract interface for instance lifecycle calls.

    Maps to AWS EC2. Implementations are stateless wrappers: every method is a
    single provider request and every read is fresh.
    """

    @abstractmethod
    def list_instances(self) -> list[RawInstanceRecord]:
        """Return every instance visible under the current credentials.

        Implementations must exhaust all result pages.
        """

    @abstractmethod
    def describe_instances(self, instance_ids: Sequence[str]) -> list[RawInstanceRecord]:
        """Return the records for *instance_ids*.

        An empty list means none of the identifiers resolved.
        """

    @abstractmethod
    def start_instance(self, instance_id: str) -> None:
        """Start a stopped instance."""

    @abstractmethod
    def stop_instance(self, instance_id: str) -> None:
        """Stop a running instance (keep disk)."""

    @abstractmethod
    def terminate_instance(self, instance_id: str) -> None:
        """Terminate (destroy) an instance."""
