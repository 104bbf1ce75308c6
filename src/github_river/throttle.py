"""Fixed-interval request throttle.

Keeps the sync worker polite toward GitHub's rate limits by pausing after
every resource-kind call. Pages of one fetch are not throttled.
"""

import asyncio
from collections.abc import Awaitable, Callable
from typing import Any

__all__ = ["RequestThrottle"]


class RequestThrottle:
    """Pauses a fixed interval per call.

    Example:
        >>> throttle = RequestThrottle.from_rate(requests_per_second=1)
        >>> await throttle.pause()  # sleeps 1s
    """

    def __init__(
        self,
        interval_seconds: float,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ) -> None:
        """Initialize throttle.

        Args:
            interval_seconds: Pause length; 0 disables waiting
            sleep: Awaitable sleep (injected by tests)
        """
        if interval_seconds < 0:
            raise ValueError("interval_seconds must be >= 0")
        self.interval_seconds = interval_seconds
        self.pauses = 0
        self._sleep = sleep

    @classmethod
    def from_rate(
        cls,
        requests_per_second: float,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ) -> "RequestThrottle":
        if requests_per_second <= 0:
            raise ValueError("requests_per_second must be > 0")
        return cls(1.0 / requests_per_second, sleep=sleep)

    async def pause(self) -> None:
        """Wait one interval."""
        self.pauses += 1
        if self.interval_seconds > 0:
            await self._sleep(self.interval_seconds)
