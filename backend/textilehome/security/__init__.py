from textilehome.security.config import LimitRule, SecurityConfig
from textilehome.security.guard import SecurityGuard, mask_ip
from textilehome.security.middleware import SecurityMiddleware

__all__ = ["LimitRule", "SecurityConfig", "SecurityGuard", "SecurityMiddleware", "mask_ip"]
