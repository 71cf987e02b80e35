import asyncio
from collections.abc import Callable

import structlog

logger = structlog.get_logger(__name__)


class Debouncer:
    """Run `callback` once `delay` seconds after the last `trigger()`.

    Each trigger restarts the timer. The timer belongs to this instance only.
    Timers need a running event loop; without one a trigger is skipped.
    """

    def __init__(self, callback: Callable[[], None], delay: float) -> None:
        self._callback = callback
        self._delay = delay
        self._handle: asyncio.TimerHandle | None = None

    @property
    def pending(self) -> bool:
        return self._handle is not None

    def trigger(self) -> bool:
        """Restart the timer. Returns False if no event loop is running."""
        self.cancel()
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.warning("debounce_skipped", reason="no running event loop")
            return False
        self._handle = loop.call_later(self._delay, self._fire)
        return True

    def cancel(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _fire(self) -> None:
        self._handle = None
        self._callback()
