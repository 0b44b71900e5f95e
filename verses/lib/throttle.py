"""In-process throttling of failed login attempts."""

import time

from litestar.connection import ASGIConnection


class FailedLoginLimiter:
    """Counts failed logins per key in a sliding window.

    Only failures are recorded; a key is blocked once it reaches
    ``max_failures`` within ``window`` seconds.
    """

    def __init__(self, max_failures: int = 5, window: float = 300.0, cleanup_interval: float = 60.0) -> None:
        self.max_failures = max_failures
        self.window = window
        self._failures: dict[str, list[float]] = {}
        self._cleanup_interval = cleanup_interval
        self._last_cleanup = time.monotonic()

    def _prune(self, key: str, now: float) -> list[float]:
        cutoff = now - self.window
        recent = [t for t in self._failures.get(key, []) if t > cutoff]
        if recent:
            self._failures[key] = recent
        else:
            self._failures.pop(key, None)
        return recent

    def _cleanup_stale(self, now: float) -> None:
        if now - self._last_cleanup < self._cleanup_interval:
            return
        self._last_cleanup = now
        for key in list(self._failures):
            self._prune(key, now)

    def record_failure(self, key: str) -> None:
        now = time.monotonic()
        self._cleanup_stale(now)
        self._failures.setdefault(key, []).append(now)

    def retry_after(self, key: str) -> int:
        """Seconds until ``key`` may try again; 0 when it is not blocked."""
        now = time.monotonic()
        self._cleanup_stale(now)
        recent = self._prune(key, now)
        if len(recent) < self.max_failures:
            return 0
        return max(int(recent[0] + self.window - now) + 1, 1)


def get_client_ip(connection: ASGIConnection) -> str:
    """Client address, preferring the first ``x-forwarded-for`` hop."""
    forwarded = connection.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    client = connection.scope.get("client")
    if client:
        return client[0]
    return "unknown"
