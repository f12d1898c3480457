"""Timestamp gate that paces GitHub requests and honours quota resets.

The unauthenticated GitHub quota is small (60 requests / hour), so every
request waits for a fixed interval after the previous one, and once the API
reports ``x-ratelimit-remaining: 0`` further requests fail fast until the
advertised reset time.
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Awaitable, Callable, Mapping

from readme_forge.domain.exceptions import RateLimitedError

logger = logging.getLogger(__name__)

Clock = Callable[[], float]
Sleep = Callable[[float], Awaitable[None]]


def parse_retry_after(headers: Mapping[str, str], now: float) -> float | None:
    """Return seconds until the quota resets, if the headers say so."""
    retry_after = headers.get("retry-after")
    if retry_after:
        try:
            return max(0.0, float(retry_after))
        except ValueError:
            pass
    reset_raw = headers.get("x-ratelimit-reset")
    if reset_raw:
        try:
            return max(0.0, float(reset_raw) - now)
        except ValueError:
            return None
    return None


class RequestGate:
    """Serialises request timing for one remote API budget.

    Parameters
    ----------
    min_interval:
        Seconds that must elapse between the start of consecutive requests.
    clock:
        Wall-clock source in epoch seconds (``time.time`` by default).
    sleep:
        Awaitable sleep (``asyncio.sleep`` by default); tests pass a no-op.
    """

    def __init__(
        self,
        min_interval: float = 1.0,
        clock: Clock = time.time,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        self._min_interval = min_interval
        self._clock = clock
        self._sleep = sleep
        self._last_request: float | None = None
        self._blocked_until: float = 0.0
        self._lock = asyncio.Lock()
        self.request_count = 0

    @property
    def blocked_until(self) -> float:
        return self._blocked_until

    def now(self) -> float:
        return self._clock()

    def seconds_until_reset(self) -> float:
        return max(0.0, self._blocked_until - self._clock())

    async def wait(self) -> None:
        """Block until the next request may go out, or raise if over quota.

        Callers are served one at a time, so concurrent requests are spaced
        by ``min_interval`` as well.
        """
        async with self._lock:
            now = self._clock()
            if self._blocked_until > now:
                wait_s = self._blocked_until - now
                raise RateLimitedError(
                    f"GitHub API rate limit exceeded. Try again in {int(wait_s // 60) + 1} minute(s).",
                    retry_after=wait_s,
                )

            if self._last_request is not None:
                elapsed = now - self._last_request
                if elapsed < self._min_interval:
                    await self._sleep(self._min_interval - elapsed)

            self._last_request = self._clock()
            self.request_count += 1

    def observe(self, headers: Mapping[str, str]) -> None:
        """Record quota exhaustion advertised by response headers."""
        if headers.get("x-ratelimit-remaining") != "0":
            return
        reset_raw = headers.get("x-ratelimit-reset", "")
        try:
            reset_at = float(reset_raw)
        except ValueError:
            return
        if reset_at > self._blocked_until:
            logger.warning("GitHub quota exhausted until %s", int(reset_at))
            self._blocked_until = reset_at
