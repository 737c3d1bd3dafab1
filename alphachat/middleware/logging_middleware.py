"""
Request logging middleware.

Pure ASGI (not BaseHTTPMiddleware). Logs method, path, client, status and
duration of every HTTP request. Bodies are not logged since they carry chat
content; for error responses the ``error.message`` of the body is recorded.
"""

import json
import logging
import time
import uuid
from typing import Iterable, Optional
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from ..core.logging_config import truncate_large_data

logger = logging.getLogger(__name__)


def _error_reason(body: bytes) -> Optional[str]:
    """Pull the client-facing message out of an error envelope."""
    text = body.decode("utf-8", errors="ignore")
    try:
        payload = json.loads(text)
    except json.JSONDecodeError:
        return truncate_large_data(text, max_length=500) if text else None
    if isinstance(payload, dict):
        error = payload.get("error")
        if isinstance(error, dict) and error.get("message"):
            return str(error["message"])
        if payload.get("detail"):
            return truncate_large_data(str(payload["detail"]), max_length=500)
    return None


class RequestLoggingMiddleware:
    """Logs one line per HTTP request with its outcome and timing."""

    def __init__(self, app: ASGIApp, exclude_paths: Optional[Iterable[str]] = None):
        """
        Args:
            app: The ASGI application
            exclude_paths: Paths that are not logged (e.g., ["/health"])
        """
        self.app = app
        self.exclude_paths = set(exclude_paths or ["/health", "/"])

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http" or scope.get("path", "") in self.exclude_paths:
            await self.app(scope, receive, send)
            return

        start_time = time.time()
        request_id = uuid.uuid4().hex[:12]
        method = scope.get("method", "UNKNOWN")
        path = scope.get("path", "")
        client = scope.get("client")
        headers = {
            k.decode("latin-1"): v.decode("latin-1") for k, v in scope.get("headers", [])
        }

        status_code = 0
        error_chunks = []

        async def logging_send(message: Message) -> None:
            nonlocal status_code
            if message["type"] == "http.response.start":
                status_code = message.get("status", 0)
            elif message["type"] == "http.response.body" and status_code >= 400:
                error_chunks.append(message.get("body", b""))
            await send(message)

        try:
            await self.app(scope, receive, logging_send)
        except Exception as e:
            logger.error(
                f"Request failed: {method} {path} - {str(e)}",
                exc_info=True,
                extra={"extra_fields": {
                    "request_id": request_id,
                    "method": method,
                    "path": path,
                    "duration_ms": round((time.time() - start_time) * 1000, 2),
                }}
            )
            raise

        duration_ms = round((time.time() - start_time) * 1000, 2)
        error_reason = _error_reason(b"".join(error_chunks)) if error_chunks else None

        if status_code < 400:
            level = logging.INFO
        elif status_code < 500:
            level = logging.WARNING
        else:
            level = logging.ERROR

        summary = f"{method} {path} - {status_code} ({duration_ms:.2f}ms)"
        if error_reason:
            summary += f" | error_reason={error_reason}"

        logger.log(
            level,
            summary,
            extra={"extra_fields": {
                "request_id": request_id,
                "method": method,
                "path": path,
                "status_code": status_code,
                "duration_ms": duration_ms,
                "client": client[0] if client else None,
                "user_agent": headers.get("user-agent"),
                "error_reason": error_reason,
            }}
        )
