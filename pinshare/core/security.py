"""
Login gate collaborators: PIN check, signed session cookies and a per-address
limit on login attempts.
"""

import hmac
import logging
import threading
import time
from collections import deque
from typing import Callable, Deque, Dict, Optional

from itsdangerous import BadSignature, SignatureExpired, URLSafeTimedSerializer

logger = logging.getLogger(__name__)

SESSION_COOKIE = "session"


def check_pin(candidate: Optional[str], expected: str) -> bool:
    if not candidate or not expected:
        return False
    return hmac.compare_digest(candidate.encode("utf-8"), expected.encode("utf-8"))


class SessionSigner:
    """Issues and verifies timestamped, signed session tokens."""

    def __init__(self, secret_key: str, max_age: int):
        self._serializer = URLSafeTimedSerializer(secret_key, salt="pinshare-session")
        self.max_age = max_age

    def issue(self) -> str:
        return self._serializer.dumps({"sub": "pinshare"})

    def verify(self, token: Optional[str]) -> bool:
        if not token:
            return False
        try:
            data = self._serializer.loads(token, max_age=self.max_age)
        except SignatureExpired:
            logger.info("Session token expired")
            return False
        except BadSignature:
            logger.warning("Session token failed signature check")
            return False
        return isinstance(data, dict) and data.get("sub") == "pinshare"


class LoginRateLimiter:
    """Sliding-window cap on login attempts per client address."""

    def __init__(self, limit: int, window: float, clock: Callable[[], float] = time.monotonic):
        self.limit = max(1, int(limit))
        self.window = window
        self._clock = clock
        self._hits: Dict[str, Deque[float]] = {}
        self._lock = threading.Lock()
        self._last_sweep = clock()

    def hit(self, key: str) -> bool:
        """Record an attempt. Returns False when `key` is over the limit."""
        now = self._clock()
        with self._lock:
            if now - self._last_sweep >= self.window:
                self._sweep(now)
            hits = self._hits.setdefault(key, deque())
            self._prune(hits, now)
            if len(hits) >= self.limit:
                return False
            hits.append(now)
            return True

    def _prune(self, hits: Deque[float], now: float) -> None:
        while hits and now - hits[0] >= self.window:
            hits.popleft()

    def _sweep(self, now: float) -> None:
        # drop addresses with no attempts left in the window
        for key in list(self._hits):
            hits = self._hits[key]
            self._prune(hits, now)
            if not hits:
                del self._hits[key]
        self._last_sweep = now

    def __len__(self) -> int:
        with self._lock:
            return len(self._hits)

    def reset(self) -> None:
        with self._lock:
            self._hits.clear()
