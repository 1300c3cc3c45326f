"""
Autostop exception hierarchy.

Every failure surfaced by the library inherits from :class:`AutostopError`.
Provider clients classify raw SDK failures into these types so callers can
branch on the exception class rather than on provider error strings.
"""

from __future__ import annotations


# ── Base ──────────────────────────────────────────────────────────────
class AutostopError(Exception):
    """Root exception for all Autostop errors.

    Attributes:
        details: Optional human-readable annotation for the caller.
    """

    def __init__(self, message: str = "", *, details: str | None = None) -> None:
        super().__init__(message)
        self.details = details


# ── Session / configuration ───────────────────────────────────────────
class NotConfiguredError(AutostopError):
    """No session (or no compute client) has been configured."""


class RegionNotConfiguredError(AutostopError):
    """The session is not bound to an operating region."""


class InvalidArgumentError(AutostopError, ValueError):
    """A caller-supplied argument is out of range."""


# ── Provider ──────────────────────────────────────────────────────────
class ProviderError(AutostopError):
    """The provider rejected a request; the provider message is passed through."""


class ProviderTimeoutError(ProviderError):
    """A provider request did not complete within the request timeout."""


class UnsupportedOperationError(ProviderError):
    """The provider does not support the operation for this instance configuration."""


# ── Compute ───────────────────────────────────────────────────────────
class InstanceNotFoundError(AutostopError):
    """The instance identifier could not be resolved."""


# ── Alarms ────────────────────────────────────────────────────────────
class AlarmServiceUnavailableError(AutostopError):
    """No alarm-service client is available in the session."""


class AlarmError(ProviderError):
    """The alarm service rejected an alarm specification."""
