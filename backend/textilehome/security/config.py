from dataclasses import dataclass, field
from typing import List, Optional


@dataclass
class LimitRule:
    """One fixed-window rate limit tier."""
    name: str
    window_seconds: int
    max_requests: int
    path_prefix: Optional[str] = None
    skip_successful: bool = False


@dataclass
class SecurityConfig:
    """Request-security policy; production and development differ only in thresholds."""
    development: bool = False
    trust_proxy: bool = True
    trusted_origin_hosts: List[str] = field(default_factory=lambda: ["localhost:5000"])
    max_request_bytes: int = 1024 * 1024

    temp_ban_threshold: int = 10
    temp_ban_seconds: int = 30 * 60
    permanent_ban_threshold: int = 50
    stale_after_seconds: int = 60 * 60
    recent_window_seconds: int = 24 * 60 * 60

    rate_limit_enabled: bool = True
    rate_limits: List[LimitRule] = field(default_factory=list)

    @classmethod
    def for_environment(cls, development: bool = False, **overrides) -> "SecurityConfig":
        if development:
            base = dict(
                development=True,
                temp_ban_threshold=25,
                temp_ban_seconds=5 * 60,
                permanent_ban_threshold=100,
                rate_limits=[
                    LimitRule("strict", 60, 100),
                    LimitRule("general", 15 * 60, 500),
                    LimitRule("cart", 5 * 60, 50, path_prefix="/api/cart", skip_successful=True),
                    LimitRule("search", 60, 30, path_prefix="/api/products/search"),
                ],
            )
        else:
            base = dict(
                rate_limits=[
                    LimitRule("strict", 60, 30),
                    LimitRule("general", 15 * 60, 200),
                    LimitRule("cart", 5 * 60, 15, path_prefix="/api/cart", skip_successful=True),
                    LimitRule("search", 60, 10, path_prefix="/api/products/search"),
                ],
            )
        base.update(overrides)
        return cls(**base)

    @classmethod
    def from_settings(cls, settings) -> "SecurityConfig":
        return cls.for_environment(
            development=settings.is_development,
            trust_proxy=settings.TRUST_PROXY,
            trusted_origin_hosts=list(settings.TRUSTED_ORIGIN_HOSTS),
            max_request_bytes=settings.MAX_REQUEST_BYTES,
            rate_limit_enabled=settings.RATE_LIMIT_ENABLED,
        )
