import logging
import threading
import time
from collections import OrderedDict

from fastapi import HTTPException, Request, status

from config.settings import settings

logger = logging.getLogger(__name__)


class FixedWindowRateLimiter:
    """Counts hits per key in fixed windows of ``window_seconds``.

    A key's window opens on its first hit and resets once ``window_seconds``
    have passed. Keys with an expired window are evicted, and at most
    ``max_keys`` keys are tracked; past that the oldest windows are dropped.
    """

    def __init__(self, max_attempts: int, window_seconds: float, max_keys: int = 10000, clock=time.monotonic):
        self.max_attempts = max_attempts
        self.window_seconds = window_seconds
        self.max_keys = max_keys
        self._clock = clock
        self._windows: "OrderedDict[str, list]" = OrderedDict()  # key -> [window_start, count]
        self._lock = threading.Lock()
        self._last_sweep = clock()

    def __len__(self) -> int:
        return len(self._windows)

    def hit(self, key: str) -> bool:
        """Record one attempt for ``key``; returns False once the window is exhausted."""
        with self._lock:
            now = self._clock()
            if now - self._last_sweep >= self.window_seconds:
                self._evict_expired(now)

            window = self._windows.get(key)
            if window is None or now - window[0] >= self.window_seconds:
                self._windows.pop(key, None)
                self._windows[key] = [now, 1]
                while len(self._windows) > self.max_keys:
                    self._windows.popitem(last=False)
                return True

            if window[1] >= self.max_attempts:
                return False
            window[1] += 1
            return True

    def _evict_expired(self, now: float) -> None:
        # Insertion order is window-start order, so expired keys sit at the front.
        while self._windows:
            key, (started, _) = next(iter(self._windows.items()))
            if now - started < self.window_seconds:
                break
            del self._windows[key]
        self._last_sweep = now

    def reset(self) -> None:
        with self._lock:
            self._windows.clear()
            self._last_sweep = self._clock()


auth_rate_limiter = FixedWindowRateLimiter(
    settings.AUTH_RATE_LIMIT_ATTEMPTS,
    settings.AUTH_RATE_LIMIT_WINDOW_SECONDS,
    settings.AUTH_RATE_LIMIT_MAX_KEYS,
)


def rate_limit_auth(request: Request):
    client_ip = request.client.host if request.client else "unknown"
    if not auth_rate_limiter.hit(client_ip):
        logger.warning("Rate limit exceeded for IP: %s", client_ip)
        minutes = max(1, int(auth_rate_limiter.window_seconds // 60))
        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail=f"Too many authentication attempts. Please try again in {minutes} minutes.",
        )
