import threading
import time
from dataclasses import dataclass
from typing import Callable, Dict, List

from textilehome.security.config import LimitRule


@dataclass
class LimitResult:
    allowed: bool
    limit: int
    remaining: int
    reset_after: float


class FixedWindowLimiter:
    """Counts hits per key in fixed windows that start at a key's first hit."""

    def __init__(self, rule: LimitRule, clock: Callable[[], float] = time.time):
        self.rule = rule
        self.clock = clock
        self._lock = threading.Lock()
        self._windows: Dict[str, List[float]] = {}  # key -> [count, window_end]

    def applies_to(self, path: str) -> bool:
        prefix = self.rule.path_prefix
        if not prefix:
            return True
        return path == prefix or path.startswith(prefix + "/")

    def hit(self, key: str) -> LimitResult:
        now = self.clock()
        with self._lock:
            window = self._windows.get(key)
            if window is None or window[1] <= now:
                window = [0, now + self.rule.window_seconds]
                self._windows[key] = window
            window[0] += 1
            count, end = window
        return LimitResult(
            allowed=count <= self.rule.max_requests,
            limit=self.rule.max_requests,
            remaining=max(0, self.rule.max_requests - int(count)),
            reset_after=max(0.0, end - now),
        )

    def undo(self, key: str):
        """Give back one hit; used by tiers that only count failed requests."""
        with self._lock:
            window = self._windows.get(key)
            if window and window[0] > 0:
                window[0] -= 1

    def prune(self) -> int:
        now = self.clock()
        with self._lock:
            expired = [k for k, (_, end) in self._windows.items() if end <= now]
            for k in expired:
                del self._windows[k]
        return len(expired)

    def reset(self):
        with self._lock:
            self._windows.clear()
