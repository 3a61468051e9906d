import threading
import time
from collections import defaultdict, deque
from typing import Deque, Dict

from ...application.ports.rate_limiter import RateLimiter


class InMemoryRateLimiter(RateLimiter):
    """Sliding-window limiter kept in process memory.

    Keys whose hits have all left the window are swept at most once per
    window, so clients that stop calling do not stay in memory.
    """

    def __init__(self) -> None:
        self._hits: Dict[str, Deque[float]] = defaultdict(deque)
        self._lock = threading.Lock()
        self._last_sweep = time.time()

    def allow(self, key: str, max_requests: int, window_seconds: int) -> bool:
        now = time.time()
        window_start = now - window_seconds
        with self._lock:
            if now - self._last_sweep >= window_seconds:
                self._sweep(window_start)
                self._last_sweep = now
            hits = self._hits[key]
            while hits and hits[0] <= window_start:
                hits.popleft()
            if len(hits) >= max_requests:
                return False
            hits.append(now)
            return True

    def tracked_keys(self) -> int:
        with self._lock:
            return len(self._hits)

    def _sweep(self, window_start: float) -> None:
        stale = [k for k, hits in self._hits.items() if not hits or hits[-1] <= window_start]
        for k in stale:
            del self._hits[k]
