"""
Async support for the lifecycle controller.

Provider calls are blocking boto3 requests. ``AsyncMixin`` gives a class an
``a<method>`` coroutine for each public method, running the synchronous call
in a worker thread via :func:`asyncio.to_thread`, so independent lifecycle
operations (two starts, or a status poll racing a stop) can run concurrently
from an event loop.

Usage::

    controller = LifecycleController(session)
    outcome = await controller.astart("i-0abc", AutoStopPolicy(minutes=30))
"""

from __future__ import annotations

import asyncio
import functools
import inspect
from typing import Any, Callable, Coroutine, TypeVar

T = TypeVar("T")


def async_wrap(
    fn: Callable[..., T],
) -> Callable[..., Coroutine[Any, Any, T]]:
    """Return an async version of *fn* that runs it in a thread.

    Args:
        fn: A synchronous callable to wrap.

    Returns:
        An async callable with the same parameters and return type.
    """

    @functools.wraps(fn)
    async def _wrapper(*args: Any, **kwargs: Any) -> T:
        return await asyncio.to_thread(fn, *args, **kwargs)

    return _wrapper


class AsyncMixin:
    """Mixin that generates ``a<method>`` variants at class definition time.

    Only plain public functions defined on the subclass itself are wrapped;
    properties, class attributes and existing coroutines are left alone.
    """

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        for name, attr in list(vars(cls).items()):
            if name.startswith("_") or not inspect.isfunction(attr):
                continue
            if inspect.iscoroutinefunction(attr):
                continue
            async_name = f"a{name}"
            if not hasattr(cls, async_name):
                setattr(cls, async_name, async_wrap(attr))
