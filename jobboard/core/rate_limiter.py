import threading
import time

# Paths guarded against credential stuffing / signup floods.
AUTH_PATHS = frozenset({"/api/auth/login", "/api/auth/register"})


class InMemoryRateLimiter:
    """
    Fixed-window counter per key (client ip + path).
    State lives in this process only; run one instance or front it with a shared limiter.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._windows: dict[str, tuple[int, float]] = {}

    def allow(self, key: str, limit: int, window_seconds: int = 60) -> tuple[bool, int]:
        """
        Count one hit for ``key``. Returns (allowed, retry_after_seconds).
        """
        now = time.monotonic()
        with self._lock:
            count, started = self._windows.get(key, (0, now))
            if now - started >= window_seconds:
                count, started = 0, now
            if count >= limit:
                return False, max(1, int(window_seconds - (now - started)))
            self._windows[key] = (count + 1, started)
            return True, 0

    def reset(self) -> None:
        with self._lock:
            self._windows.clear()


rate_limiter = InMemoryRateLimiter()
