"""
rate_limit.py
─────────────
Per-client sliding-window limiter for the explain endpoint.

One instance is created in main.py and kept on app.state for the life of the
process; routers reach it through the `get_rate_limiter` dependency.

Windows are pruned lazily, only when the owning client makes another request.
Keys are never evicted, so memory grows with the number of distinct clients.
"""

import threading
import time
from typing import Callable, Dict, List, Optional

from fastapi import Request

RATE_LIMIT = 10                  # requests per window
RATE_LIMIT_WINDOW_MS = 60 * 1000  # 1 minute

UNKNOWN_CLIENT = "unknown"


def _now_ms() -> int:
    return int(time.time() * 1000)


class SlidingWindowRateLimiter:
    """Admits at most `limit` requests per client within any `window_ms` span."""

    def __init__(
        self,
        limit: int = RATE_LIMIT,
        window_ms: int = RATE_LIMIT_WINDOW_MS,
        clock: Callable[[], int] = _now_ms,
    ):
        self.limit = limit
        self.window_ms = window_ms
        self._clock = clock
        self._windows: Dict[str, List[int]] = {}
        self._lock = threading.Lock()

    def admit(self, client_id: str) -> bool:
        """
        Record and admit a request from `client_id`, or reject it.

        Rejected attempts are not recorded, but the pruned window is still
        stored so old timestamps keep dropping out.
        """
        now = self._clock()
        with self._lock:
            recent = [t for t in self._windows.get(client_id, []) if now - t < self.window_ms]
            if len(recent) >= self.limit:
                self._windows[client_id] = recent
                return False
            recent.append(now)
            self._windows[client_id] = recent
            return True

    def reset(self, client_id: Optional[str] = None) -> None:
        """Forget one client's window, or every window when no id is given."""
        with self._lock:
            if client_id is None:
                self._windows.clear()
            else:
                self._windows.pop(client_id, None)

    @property
    def tracked_clients(self) -> int:
        return len(self._windows)


def client_identifier(request: Request) -> str:
    """
    Key used for rate limiting: the whole X-Forwarded-For value, then X-Real-IP,
    then the socket peer address. Clients with none of these share the
    "unknown" bucket.
    """
    # Whole header, proxy hops included.
    forwarded = request.headers.get("x-forwarded-for", "").strip()
    if forwarded:
        return forwarded
    real_ip = request.headers.get("x-real-ip", "").strip()
    if real_ip:
        return real_ip
    if request.client and request.client.host:
        return request.client.host
    return UNKNOWN_CLIENT


def get_rate_limiter(request: Request) -> SlidingWindowRateLimiter:
    return request.app.state.rate_limiter
