# careerforge/rate_limit.py
# In-memory fixed-window rate limiter keyed by client identity. Single process only.

import threading
import time
from dataclasses import dataclass
from typing import Callable, Dict, Mapping, Optional

ANONYMOUS = "anonymous"


@dataclass
class RateLimitEntry:
    count: int
    reset_at: float


@dataclass(frozen=True)
class RateLimitResult:
    allowed: bool
    remaining: int
    reset_in: float


class RateLimiter:
    """
    Fixed window counter: at most `max_requests` per `window_seconds` per identifier.

    A rejected request still counts against the window. The check-and-increment
    must stay free of awaits; the lock keeps it atomic for threaded callers too.
    Expired entries are pruned once the table grows past `max_entries`.
    """

    def __init__(
        self,
        window_seconds: float = 60.0,
        max_requests: int = 30,
        max_entries: int = 10_000,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._window = window_seconds
        self._max = max_requests
        self._max_entries = max_entries
        self._clock = clock
        self._store: Dict[str, RateLimitEntry] = {}
        self._lock = threading.Lock()

    @property
    def max_requests(self) -> int:
        return self._max

    @staticmethod
    def _key(identifier: str) -> str:
        return f"rl:{identifier}"

    def _prune_expired(self, now: float) -> None:
        expired = [k for k, e in self._store.items() if now >= e.reset_at]
        for k in expired:
            del self._store[k]

    def check(self, identifier: str) -> RateLimitResult:
        key = self._key(identifier)
        with self._lock:
            now = self._clock()
            entry = self._store.get(key)

            if entry is None or now >= entry.reset_at:
                if entry is None and len(self._store) >= self._max_entries:
                    self._prune_expired(now)
                entry = RateLimitEntry(count=1, reset_at=now + self._window)
                self._store[key] = entry
                return RateLimitResult(True, self._max - 1, self._window)

            entry.count += 1
            reset_in = entry.reset_at - now
            if entry.count > self._max:
                return RateLimitResult(False, 0, reset_in)
            return RateLimitResult(True, self._max - entry.count, reset_in)

    def __len__(self) -> int:
        return len(self._store)


def client_identifier(headers: Mapping[str, str]) -> str:
    """First X-Forwarded-For hop, or the shared anonymous bucket."""
    forwarded: Optional[str] = headers.get("x-forwarded-for")
    if forwarded:
        ip = forwarded.split(",")[0].strip()
        if ip:
            return ip
    return ANONYMOUS
