import logging
import threading
import time
from dataclasses import dataclass, replace
from typing import Callable, Dict, List, Optional, Tuple

from textilehome.security.config import SecurityConfig

log = logging.getLogger("textilehome.security")

LOCALHOST = "127.0.0.1"


@dataclass
class ActivityRecord:
    attempts: int = 0
    last_attempt: float = 0.0
    blocked_until: Optional[float] = None


class SuspiciousActivityTracker:
    """
    Per-IP failure counter with temporary and permanent bans.

    Every response >= 400 counts as an attempt; every success takes one back.
    Crossing ``temp_ban_threshold`` bans the IP for ``temp_ban_seconds`` (the
    ban is pushed out again on every further failure), crossing
    ``permanent_ban_threshold`` puts it on the blocklist for the life of the
    process.

    State is in-process only. Handlers run in a thread pool and the sweep runs
    on the scheduler thread, so every access goes through ``_lock``.
    """

    def __init__(self, config: SecurityConfig, clock: Callable[[], float] = time.time):
        self.config = config
        self.clock = clock
        self._lock = threading.Lock()
        self._blocked: Dict[str, float] = {}  # ip -> when it was blocked
        self._suspicious: Dict[str, ActivityRecord] = {}

    def block(self, ip: str):
        with self._lock:
            self._blocked.setdefault(ip, self.clock())

    def is_blocked(self, ip: str) -> bool:
        with self._lock:
            return ip in self._blocked

    def ban_remaining(self, ip: str) -> Optional[float]:
        """Seconds left on a temporary ban, or None."""
        with self._lock:
            rec = self._suspicious.get(ip)
            if not rec or rec.blocked_until is None:
                return None
            left = rec.blocked_until - self.clock()
            return left if left > 0 else None

    def record(self, ip: str, status_code: int):
        now = self.clock()
        cfg = self.config
        with self._lock:
            if status_code >= 400:
                rec = self._suspicious.setdefault(ip, ActivityRecord())
                rec.attempts += 1
                rec.last_attempt = now

                if rec.attempts >= cfg.temp_ban_threshold:
                    rec.blocked_until = now + cfg.temp_ban_seconds
                    log.warning("Temporarily blocking IP %s for suspicious activity", ip)

                if rec.attempts >= cfg.permanent_ban_threshold and ip not in self._blocked:
                    if not (cfg.development and ip == LOCALHOST):
                        self._blocked[ip] = now
                        log.warning("Permanently blocking IP %s for repeated violations", ip)
                return

            rec = self._suspicious.get(ip)
            if rec:
                rec.attempts = max(0, rec.attempts - 1)
                if rec.attempts == 0:
                    del self._suspicious[ip]

    def sweep(self) -> int:
        """Evict entries idle for longer than ``stale_after_seconds`` whose ban, if any, is over."""
        now = self.clock()
        cutoff = now - self.config.stale_after_seconds
        with self._lock:
            stale = [
                ip
                for ip, rec in self._suspicious.items()
                if rec.last_attempt < cutoff
                and (rec.blocked_until is None or rec.blocked_until < now)
            ]
            for ip in stale:
                del self._suspicious[ip]
        if stale:
            log.info("Swept %d stale suspicious-IP entries", len(stale))
        return len(stale)

    def snapshot(self) -> Tuple[List[str], Dict[str, ActivityRecord]]:
        with self._lock:
            return (
                list(self._blocked),
                {ip: replace(rec) for ip, rec in self._suspicious.items()},
            )

    def reset(self):
        with self._lock:
            self._blocked.clear()
            self._suspicious.clear()
