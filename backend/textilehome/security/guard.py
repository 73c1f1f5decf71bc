import time
from datetime import datetime, timezone
from typing import Callable, List, Optional

from textilehome.security.config import SecurityConfig
from textilehome.security.rate_limit import FixedWindowLimiter
from textilehome.security.tracker import SuspiciousActivityTracker

MAX_BLOCKED_LISTED = 10
MAX_RECENT_LISTED = 20


def mask_ip(ip: str) -> str:
    """Hide the host part: 203.0.113.7 -> 203.0.113.***"""
    if "." in ip:
        return ip[: ip.rindex(".")] + ".***"
    if ":" in ip:
        return ip[: ip.rindex(":")] + ":****"
    return "***"


def _iso(ts: float) -> str:
    return (
        datetime.fromtimestamp(ts, tz=timezone.utc)
        .isoformat(timespec="milliseconds")
        .replace("+00:00", "Z")
    )


class SecurityGuard:
    """Holds the process-wide security state shared by the middleware, routes and scheduler."""

    def __init__(self, config: SecurityConfig, clock: Callable[[], float] = time.time):
        self.config = config
        self.clock = clock
        self.tracker = SuspiciousActivityTracker(config, clock=clock)
        self.limiters: List[FixedWindowLimiter] = [
            FixedWindowLimiter(rule, clock=clock) for rule in config.rate_limits
        ]
        self.started_at = time.monotonic()

    def client_ip(self, headers, client) -> str:
        if self.config.trust_proxy:
            forwarded = headers.get("x-forwarded-for")
            if forwarded:
                hops = [h.strip() for h in forwarded.split(",") if h.strip()]
                if hops:
                    return hops[-1]
        if client and client[0]:
            return client[0]
        return "unknown"

    def limiters_for(self, path: str) -> List[FixedWindowLimiter]:
        if not self.config.rate_limit_enabled:
            return []
        return [lim for lim in self.limiters if lim.applies_to(path)]

    def sweep(self) -> int:
        for lim in self.limiters:
            lim.prune()
        return self.tracker.sweep()

    def reset(self):
        self.tracker.reset()
        for lim in self.limiters:
            lim.reset()

    def status_report(self, redact: bool = True, now: Optional[float] = None) -> dict:
        now = self.clock() if now is None else now
        blocked, suspicious = self.tracker.snapshot()
        show = mask_ip if redact else (lambda ip: ip)

        recent = [
            {
                "ip": show(ip),
                "attempts": rec.attempts,
                "lastAttempt": _iso(rec.last_attempt),
                "blockedUntil": _iso(rec.blocked_until) if rec.blocked_until else None,
            }
            for ip, rec in suspicious.items()
            if now - rec.last_attempt < self.config.recent_window_seconds
        ]

        return {
            "blockedIPs": {
                "count": len(blocked),
                "list": [show(ip) for ip in blocked[:MAX_BLOCKED_LISTED]],
            },
            "suspiciousIPs": {
                "count": len(suspicious),
                "recentActivity": recent[:MAX_RECENT_LISTED],
            },
            "timestamp": _iso(now),
            "uptime": round(time.monotonic() - self.started_at, 3),
        }
