"""Service factory.

Provides :func:`service_factory`, which builds an AWS client for one of the
supported services from a validated config. ``@overload`` signatures return
the matching blueprint type so IDEs can autocomplete methods.
"""

from typing import Any, Literal, overload

from autostop.aws.factory import SERVICE_REGISTRY
from autostop.base import AlarmBlueprint, ComputeBlueprint, existing_services
from autostop.base.config import AWSConfig, validate_config


@overload
def service_factory(
    service_name: Literal["compute"], config: dict | AWSConfig
) -> ComputeBlueprint: ...


@overload
def service_factory(
    service_name: Literal["alarms"], config: dict | AWSConfig
) -> AlarmBlueprint: ...


def service_factory(service_name: existing_services, config: dict | AWSConfig) -> Any:
    """
    Create a service client by name.
    Args:
        service_name: ``"compute"`` or ``"alarms"``.
        config: Configuration dictionary or :class:`AWSConfig`.
    Returns:
        An instance of the requested service class.
    Raises:
        ValueError: If the service is not supported.
    """
    if service_name not in SERVICE_REGISTRY:
        raise ValueError(f"Unsupported service '{service_name}'")

    service_class = SERVICE_REGISTRY[service_name]
    return service_class(validate_config(config))
