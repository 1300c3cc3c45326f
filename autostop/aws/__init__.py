"""AWS provider implementations."""

from .alarms import Alarms
from .compute import Compute

__all__ = [
    "Alarms",
    "Compute",
]
