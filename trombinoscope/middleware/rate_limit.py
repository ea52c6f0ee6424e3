"""
Limitation du nombre de requêtes par adresse IP (fenêtre glissante)
"""
import time
from collections import defaultdict, deque

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse

from trombinoscope.middleware.request_logging import client_ip


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Rejette en 429 au-delà de max_requests par IP sur window_seconds"""

    def __init__(self, app, max_requests: int = 100, window_seconds: int = 900, enabled: bool = True):
        super().__init__(app)
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self.enabled = enabled
        self._hits = defaultdict(deque)

    def allow(self, ip: str, now: float = None) -> bool:
        now = time.time() if now is None else now
        hits = self._hits[ip]
        while hits and hits[0] <= now - self.window_seconds:
            hits.popleft()
        if len(hits) >= self.max_requests:
            return False
        hits.append(now)
        return True

    def retry_after(self, ip: str, now: float = None) -> int:
        now = time.time() if now is None else now
        hits = self._hits[ip]
        if not hits:
            return 0
        return max(1, int(hits[0] + self.window_seconds - now))

    async def dispatch(self, request: Request, call_next):
        if not self.enabled:
            return await call_next(request)

        ip = client_ip(request)
        if not self.allow(ip):
            return JSONResponse(
                status_code=429,
                content={
                    "success": False,
                    "error": "Trop de requêtes depuis cette IP, veuillez réessayer plus tard.",
                    "code": "RATE_LIMITED",
                },
                headers={"Retry-After": str(self.retry_after(ip))},
            )
        return await call_next(request)
