import asyncio
import logging
import time
from typing import Any, Awaitable, Callable, List, Optional

from .const import LIST_CACHE_SETTLE, LIST_CACHE_WINDOW
from .models import LuxorResult, LuxorStatus

_LOGGER = logging.getLogger(__name__)


class ListCache:
    """Serves at most one list fetch per window for a single controller endpoint.

    The window is armed when a fetch goes out, not when it returns, so calls
    racing the very first fetch find the window active with nothing cached yet.
    Those callers wait ``settle`` seconds and get whatever has arrived by then.
    """

    def __init__(
        self,
        name: str,
        window: float = LIST_CACHE_WINDOW,
        settle: float = LIST_CACHE_SETTLE,
        time_func: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ):
        self._name = name
        self._window = window
        self._settle = settle
        self._time = time_func
        self._sleep = sleep
        self._armed_at: Optional[float] = None
        self._data: Optional[List[Any]] = None

    @property
    def data(self) -> Optional[List[Any]]:
        return self._data

    @property
    def active(self) -> bool:
        """True while a fetch is in flight or its result is still fresh."""
        if self._armed_at is None:
            return False
        return self._time() - self._armed_at < self._window

    def invalidate(self) -> None:
        """Expire the window so the next call goes to the controller."""
        self._armed_at = None

    def update(self, data: List[Any]) -> None:
        """Replace the cached list without touching the window."""
        self._data = data

    async def async_get(self, fetch: Callable[[], Awaitable[LuxorResult]]) -> LuxorResult:
        """Return the cached list while the window is active, else fetch it."""
        if self.active:
            if self._data is None:
                _LOGGER.debug(f"{self._name}: fetch in flight, waiting {self._settle}s for its result")
                await self._sleep(self._settle)
            else:
                _LOGGER.debug(f"Skipping {self._name} request, returning results cached in the past {self._window}s")
            data = self._data if self._data is not None else []
            return LuxorResult(status=LuxorStatus.OK, data=data, cached=True)

        self._armed_at = self._time()
        result = await fetch()
        if result.ok:
            self._data = result.data
        elif self._data is None:
            # Nothing to serve, let the next caller ask the controller
            self.invalidate()
        return result
