"""Rate limiting for reverse geocoding requests."""

from __future__ import annotations

import logging
import threading
import time
from typing import Mapping

from ..config import (
    GEOCODER_MAX_CONCURRENT,
    GEOCODER_MIN_INTERVAL_SECONDS,
    GEOCODER_THROTTLE_SECONDS,
)

__all__ = ["RateLimiter"]


class RateLimiter:
    """Concurrency cap plus minimum spacing between request starts.

    Public geocoding services allow roughly one request per second; a 429
    answer pauses all callers for ``throttle_seconds`` (or ``Retry-After``).
    """

    def __init__(
        self,
        max_concurrent: int = GEOCODER_MAX_CONCURRENT,
        min_interval_seconds: float = GEOCODER_MIN_INTERVAL_SECONDS,
        throttle_seconds: float = GEOCODER_THROTTLE_SECONDS,
    ) -> None:
        if max_concurrent < 1:
            raise ValueError("max_concurrent must be >= 1")
        if min_interval_seconds < 0:
            raise ValueError("min_interval_seconds must be >= 0")
        self._lock = threading.Lock()
        self._cond = threading.Condition(self._lock)
        self._max_allowed = max_concurrent
        self._in_flight = 0
        self._min_interval = min_interval_seconds
        self._throttle_seconds = throttle_seconds
        self._next_slot_at: float = 0.0
        self._throttle_until: float = 0.0

    def resize(self, new_max: int) -> None:
        """Adjust maximum concurrent requests (soft limit) at runtime."""

        if new_max < 1:
            raise ValueError("new_max must be >= 1")
        with self._cond:
            old = self._max_allowed
            self._max_allowed = new_max
            self._cond.notify_all()
        logging.info("RateLimiter resized from %s to %s", old, new_max)

    def before_request(self) -> None:
        with self._cond:
            while self._in_flight >= self._max_allowed:
                self._cond.wait()
            self._in_flight += 1
            now = time.monotonic()
            start_at = max(now, self._next_slot_at, self._throttle_until)
            self._next_slot_at = start_at + self._min_interval
            wait_for = start_at - now
        if wait_for > 0:
            time.sleep(wait_for)

    def after_response(
        self, headers: Mapping[str, object] | None, status_code: int | None
    ) -> None:
        if status_code == 429:
            pause = self._retry_after(headers)
            logging.warning("Geocoder rate limit: 429. Throttling %ss.", pause)
            with self._cond:
                self._throttle_until = time.monotonic() + pause
        with self._cond:
            self._in_flight = max(0, self._in_flight - 1)
            if self._in_flight < self._max_allowed:
                self._cond.notify()

    def _retry_after(self, headers: Mapping[str, object] | None) -> float:
        if headers:
            raw = headers.get("Retry-After")
            if raw is not None:
                try:
                    return max(0.0, float(str(raw)))
                except ValueError:
                    logging.debug("Ignoring unparseable Retry-After header: %s", raw)
        return self._throttle_seconds

    def snapshot(self) -> dict[str, float | int]:
        """Return current limiter stats (used by tests and diagnostics)."""

        with self._lock:
            return {
                "max_allowed": self._max_allowed,
                "in_flight": self._in_flight,
                "throttle_until": self._throttle_until,
            }
