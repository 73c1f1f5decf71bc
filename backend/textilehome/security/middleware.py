import json
import logging
import math
from urllib.parse import urlencode

from starlette.datastructures import Headers, MutableHeaders
from starlette.requests import Request
from starlette.responses import JSONResponse

from textilehome.security import filters
from textilehome.security.guard import SecurityGuard

log = logging.getLogger("textilehome.security")

RATE_LIMIT_MESSAGE = "Too many requests from this IP, please try again later."

SECURITY_HEADERS = {
    "Content-Security-Policy": "; ".join(
        [
            "default-src 'self'",
            "img-src 'self' https://images.unsplash.com data:",
            "style-src 'self' 'unsafe-inline'",
            "script-src 'self' 'unsafe-inline'",
            "connect-src 'self'",
            "font-src 'self'",
            "object-src 'none'",
            "media-src 'self'",
            "frame-src 'none'",
        ]
    ),
    "Strict-Transport-Security": "max-age=31536000; includeSubDomains; preload",
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "X-XSS-Protection": "0",
    "Referrer-Policy": "no-referrer",
    "Cross-Origin-Opener-Policy": "same-origin",
    "Cross-Origin-Resource-Policy": "same-origin",
}


class RequestTooLarge(Exception):
    pass


def _content_length(headers: Headers) -> int:
    try:
        return int(headers.get("content-length") or 0)
    except ValueError:
        return 0


class SecurityMiddleware:
    """
    The request-security pipeline, in order:

    honeypot -> IP block / temporary ban -> request size -> content type ->
    SQL patterns -> XSS sanitising -> CSRF -> bot user agents ->
    suspicious-activity tracking -> rate limiters.

    Written as plain ASGI because the XSS step rewrites the query string and
    the body that the route handlers eventually see.
    """

    def __init__(self, app, guard: SecurityGuard):
        self.app = app
        self.guard = guard

    async def __call__(self, scope, receive, send):
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        send = self._with_security_headers(send)
        cfg = self.guard.config
        tracker = self.guard.tracker
        request = Request(scope)
        headers = request.headers
        path = scope["path"]
        method = scope["method"]
        ip = self.guard.client_ip(headers, scope.get("client"))

        if filters.is_honeypot(path):
            log.warning("Honeypot triggered by automated attack from %s to %s", ip, path)
            tracker.block(ip)
            await self._reply(scope, receive, send, 200, {"status": "success", "message": "Access granted"})
            return

        if tracker.is_blocked(ip):
            log.warning("Blocked request from banned IP: %s", ip)
            await self._reply(scope, receive, send, 403, {"error": "Access denied"})
            return

        remaining = tracker.ban_remaining(ip)
        if remaining:
            log.warning("Blocked request from temporarily banned IP: %s", ip)
            await self._reply(
                scope, receive, send, 403,
                {"error": "Access temporarily denied", "retryAfter": math.ceil(remaining)},
            )
            return

        length = _content_length(headers)
        if length > cfg.max_request_bytes:
            log.warning("Request size limit exceeded: %d bytes from %s", length, ip)
            await self._reply(scope, receive, send, 413, {"error": "Request too large"})
            return

        content_type = headers.get("content-type")
        if method in ("POST", "PUT") and path.startswith("/api/"):
            if not content_type or "application/json" not in content_type:
                log.warning("Blocked request with invalid content type: %s", content_type)
                await self._reply(scope, receive, send, 400, {"error": "Invalid content type"})
                return

        if filters.count_forwarded_headers(headers) > 1:
            log.warning("Suspicious forwarded headers detected from %s", ip)

        try:
            body = await self._read_body(receive, cfg.max_request_bytes)
        except RequestTooLarge:
            log.warning("Request size limit exceeded while streaming from %s", ip)
            await self._reply(scope, receive, send, 413, {"error": "Request too large"})
            return

        payload = None
        if body and content_type and "application/json" in content_type:
            try:
                payload = json.loads(body)
            except ValueError:
                # malformed JSON is the route's problem (400 from validation)
                payload = None

        query_items = request.query_params.multi_items()
        if any(filters.contains_sql_injection(v) for _, v in query_items):
            log.warning("SQL injection attempt detected in query params from %s", ip)
            await self._reply(scope, receive, send, 400, {"error": "Invalid request parameters"})
            return
        if (
            payload is not None
            and filters.scans_body_for_sql(path)
            and filters.contains_sql_injection(payload)
        ):
            log.warning("SQL injection attempt detected in request body from %s", ip)
            await self._reply(scope, receive, send, 400, {"error": "Invalid request data"})
            return

        scope, body = self._sanitize(scope, query_items, payload, body, ip)

        if not filters.csrf_allowed(
            method,
            headers.get("origin"),
            headers.get("referer"),
            headers.get("host"),
            cfg.trusted_origin_hosts,
        ):
            log.warning(
                "CSRF attempt blocked from %s, origin: %s, referer: %s",
                ip, headers.get("origin"), headers.get("referer"),
            )
            await self._reply(scope, receive, send, 403, {"error": "Cross-site request blocked"})
            return

        user_agent = headers.get("user-agent")
        if filters.is_malicious_agent(user_agent):
            log.warning("Blocked malicious user agent: %s", user_agent)
            await self._reply(scope, receive, send, 403, {"error": "Access denied"})
            return

        # from here on every response status feeds the suspicious-activity tracker
        status = {"code": 500, "started": False}
        rate_headers = {}
        applied = []

        async def tracked_send(message):
            if message["type"] == "http.response.start":
                status["code"] = message["status"]
                status["started"] = True
                if rate_headers:
                    h = MutableHeaders(scope=message)
                    for k, v in rate_headers.items():
                        h[k] = v
            await send(message)

        try:
            for limiter in self.guard.limiters_for(path):
                result = limiter.hit(ip)
                applied.append(limiter)
                rate_headers.update(
                    {
                        "RateLimit-Limit": str(result.limit),
                        "RateLimit-Remaining": str(result.remaining),
                        "RateLimit-Reset": str(math.ceil(result.reset_after)),
                    }
                )
                if not result.allowed:
                    log.warning("Rate limit (%s) exceeded for IP: %s", limiter.rule.name, ip)
                    rate_headers["Retry-After"] = str(limiter.rule.window_seconds)
                    await self._reply(
                        scope, receive, tracked_send, 429,
                        {"error": RATE_LIMIT_MESSAGE, "retryAfter": limiter.rule.window_seconds},
                    )
                    return

            try:
                await self.app(scope, self._replay(body, receive), tracked_send)
            except Exception:
                # respond from inside the stack; the app-level handler logs it once re-raised
                if not status["started"]:
                    await self._reply(
                        scope, receive, tracked_send, 500, {"detail": "Internal Server Error"}
                    )
                raise
        finally:
            tracker.record(ip, status["code"])
            if status["code"] < 400:
                for limiter in applied:
                    if limiter.rule.skip_successful:
                        limiter.undo(ip)

    def _sanitize(self, scope, query_items, payload, body, ip):
        changed = False

        clean_items = []
        for key, value in query_items:
            clean, c = filters.sanitize(value)
            clean_items.append((key, clean))
            changed = changed or c
        if changed:
            scope = dict(scope)
            scope["query_string"] = urlencode(clean_items).encode("latin-1")

        if payload is not None:
            clean_payload, body_changed = filters.sanitize(payload)
            if body_changed:
                changed = True
                body = json.dumps(clean_payload).encode("utf-8")
                scope = dict(scope)
                scope["headers"] = [
                    (k, v) for k, v in scope["headers"] if k.lower() != b"content-length"
                ] + [(b"content-length", str(len(body)).encode("latin-1"))]

        if changed:
            log.warning("XSS attempt detected and sanitized from %s", ip)
        return scope, body

    def _with_security_headers(self, send):
        async def wrapped(message):
            if message["type"] == "http.response.start":
                h = MutableHeaders(scope=message)
                for k, v in SECURITY_HEADERS.items():
                    h[k] = v
            await send(message)

        return wrapped

    @staticmethod
    async def _read_body(receive, limit: int) -> bytes:
        chunks = []
        size = 0
        more = True
        while more:
            message = await receive()
            if message["type"] != "http.request":
                break
            chunk = message.get("body", b"")
            size += len(chunk)
            if size > limit:
                raise RequestTooLarge()
            chunks.append(chunk)
            more = message.get("more_body", False)
        return b"".join(chunks)

    @staticmethod
    def _replay(body: bytes, receive):
        sent = False

        async def replay():
            nonlocal sent
            if not sent:
                sent = True
                return {"type": "http.request", "body": body, "more_body": False}
            return await receive()

        return replay

    @staticmethod
    async def _reply(scope, receive, send, status_code: int, content: dict):
        response = JSONResponse(content, status_code=status_code)
        await response(scope, receive, send)
