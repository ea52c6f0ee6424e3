"""
Journalisation des requêtes HTTP (access.log / error.log)
"""
import time
from datetime import datetime

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

from trombinoscope.utils.audit import ACCESS_LOG, ERROR_LOG, write_log


def client_ip(request: Request) -> str:
    return request.client.host if request.client else "unknown"


def format_log_entry(request: Request, status_code: int, response_time_ms: int, error: Exception = None) -> dict:
    user_info = getattr(request.state, "user_label", None) or "anonymous"
    url = request.url.path
    if request.url.query:
        url += "?" + request.url.query

    return {
        "timestamp": datetime.utcnow().isoformat() + "Z",
        "method": request.method,
        "url": url,
        "statusCode": status_code,
        "responseTime": f"{response_time_ms}ms",
        "user": user_info,
        "ip": client_ip(request),
        "userAgent": request.headers.get("user-agent", "unknown"),
        "error": str(error) if error else None,
    }


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Une ligne JSON par requête; les réponses >= 400 vont dans error.log"""

    async def dispatch(self, request: Request, call_next):
        start = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception as exc:
            elapsed = int((time.perf_counter() - start) * 1000)
            write_log(format_log_entry(request, 500, elapsed, exc), ERROR_LOG)
            raise

        elapsed = int((time.perf_counter() - start) * 1000)
        filename = ERROR_LOG if response.status_code >= 400 else ACCESS_LOG
        write_log(format_log_entry(request, response.status_code, elapsed), filename)
        return response
