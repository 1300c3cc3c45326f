"""Abstract client blueprints and core utilities.

The provider clients inherit from the blueprints defined here. Import them to
type-hint your own code or to plug in fake clients for tests.
"""

from .alarms import AlarmBlueprint
from .compute import ComputeBlueprint
from .supported_services import existing_services


__all__ = [
    "AlarmBlueprint",
    "ComputeBlueprint",
    "existing_services",
]
