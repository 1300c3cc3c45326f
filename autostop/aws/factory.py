"""AWS service factory.

Maps service names to their AWS SDK implementations.
``SERVICE_REGISTRY`` is consumed by :func:`autostop.factory.service_factory`.
"""

from autostop.aws.alarms import Alarms
from autostop.aws.compute import Compute


SERVICE_REGISTRY: dict[str, type] = {
    "compute": Compute,
    "alarms": Alarms,
}
