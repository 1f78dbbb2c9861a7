import time
import uuid

from fastapi import Request

from orderflow.core.logging import add_context, clear_context, get_logger

logger = get_logger("orderflow.http")


def _is_sensitive(method: str, path: str) -> bool:
    return method == "POST" and path.rstrip("/").endswith("/users")


async def request_logging_middleware(request: Request, call_next):
    """Bind a request id for the duration of the request and log one line per request."""
    request_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex
    clear_context()
    add_context(request_id=request_id, method=request.method, path=request.url.path)

    started = time.perf_counter()
    status_code = 500
    try:
        response = await call_next(request)
        status_code = response.status_code
        response.headers["X-Request-ID"] = request_id
        return response
    finally:
        fields = {
            "status_code": status_code,
            "latency_ms": round((time.perf_counter() - started) * 1000, 3),
            "client_ip": request.client.host if request.client else None,
            "user_agent": request.headers.get("user-agent"),
        }
        if _is_sensitive(request.method, request.url.path):
            fields["sensitive_data"] = True
        logger.info("HTTP Request", **fields)
        clear_context()
