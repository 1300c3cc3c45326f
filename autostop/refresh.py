"""
Periodic status refresh for the currently selected instance.

Meant for presentation layers that show one instance at a time. Each poll
captures a selection token before awaiting the provider; if the selection
changed (or :meth:`StatusRefresher.select` was called with ``None``) while
the request was in flight, the result is dropped instead of being delivered
for a target the caller no longer shows.

Cancel :meth:`StatusRefresher.run` by cancelling its task.
"""

from __future__ import annotations

import asyncio
from typing import Callable

from autostop.base.exceptions import AutostopError
from autostop.base.models import InstanceStatus
from autostop.controller import LifecycleController

DEFAULT_INTERVAL = 30.0


class StatusRefresher:
    """Poll the selected instance's status and hand fresh results to a callback.

    Attributes:
        controller: Controller used for the status reads.
        interval: Seconds between polls in :meth:`run`.
    """

    def __init__(
        self,
        controller: LifecycleController,
        on_status: Callable[[InstanceStatus], None],
        on_error: Callable[[AutostopError], None] | None = None,
        interval: float = DEFAULT_INTERVAL,
    ) -> None:
        self.controller = controller
        self.interval = interval
        self._on_status = on_status
        self._on_error = on_error
        self._selected: str | None = None
        self._token = 0

    @property
    def selected(self) -> str | None:
        return self._selected

    def select(self, instance_id: str | None) -> None:
        """Change the target. Results of polls already in flight are discarded."""
        self._selected = instance_id
        self._token += 1

    async def refresh(self) -> bool:
        """Poll once. Returns True if a status was delivered.

        Errors for the current target go to ``on_error``; without one they
        propagate. Errors for a stale target are dropped with the result.
        """
        instance_id, token = self._selected, self._token
        if instance_id is None:
            return False
        try:
            status = await self.controller.aget_status(instance_id)
        except AutostopError as e:
            if token != self._token:
                return False
            if self._on_error is None:
                raise
            self._on_error(e)
            return False
        if token != self._token:
            return False
        self._on_status(status)
        return True

    async def run(self) -> None:
        """Poll forever at :attr:`interval` until the task is cancelled."""
        while True:
            await self.refresh()
            await asyncio.sleep(self.interval)
