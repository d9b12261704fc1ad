"""
FastAPI middleware for logging API requests and responses.

Uses pure ASGI middleware (not BaseHTTPMiddleware) so request bodies can be
observed without consuming them.

This middleware logs:
- Request: method, path, query string, client
- Response: status code, processing time, error reason for 4xx/5xx
- JSON bodies with sensitive and image fields filtered; binary and multipart
  bodies are summarized by size only
"""

import json
import logging
import time
from typing import Dict, List, Optional
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from ..core.logging_config import filter_sensitive_data, truncate_large_data

logger = logging.getLogger(__name__)

_TEXT_CONTENT_TYPES = ("application/json", "text/")


def _is_textual(content_type: Optional[str]) -> bool:
    return bool(content_type) and content_type.startswith(_TEXT_CONTENT_TYPES)


def _summarize_body(data: bytes, content_type: Optional[str]) -> Optional[str]:
    """Loggable form of a body: filtered JSON, truncated text, or a size note."""
    if not data:
        return None
    if not _is_textual(content_type):
        return f"<{content_type or 'binary'} {len(data)} bytes>"

    text = data.decode("utf-8", errors="ignore")
    try:
        payload = json.loads(text)
    except json.JSONDecodeError:
        return truncate_large_data(text, max_length=2000)
    return truncate_large_data(
        json.dumps(filter_sensitive_data(payload), ensure_ascii=False), max_length=2000
    )


def _extract_error_reason(body: bytes) -> Optional[str]:
    """Pull the `error` field out of a failure response."""
    try:
        payload = json.loads(body.decode("utf-8", errors="ignore"))
    except json.JSONDecodeError:
        return None
    if isinstance(payload, dict):
        for key in ("error", "detail", "message"):
            if payload.get(key):
                return truncate_large_data(str(payload[key]), max_length=500)
    return None


def _header(headers: List, name: bytes) -> Optional[str]:
    for key, value in headers:
        if key.lower() == name:
            return value.decode("latin-1")
    return None


class RequestLoggingMiddleware:
    """Pure ASGI middleware to log all API requests and responses."""

    def __init__(self, app: ASGIApp, exclude_paths: Optional[list] = None):
        """
        Initialize the logging middleware.

        Args:
            app: The ASGI application
            exclude_paths: Paths to skip entirely (e.g., ["/health"])
        """
        self.app = app
        self.exclude_paths = exclude_paths or ["/health", "/"]

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        """ASGI entry point."""
        if scope["type"] != "http" or scope.get("path", "") in self.exclude_paths:
            await self.app(scope, receive, send)
            return

        start_time = time.time()
        request_id = id(scope)
        method = scope.get("method", "UNKNOWN")
        path = scope.get("path", "")
        query_string = scope.get("query_string", b"").decode("utf-8", errors="ignore")
        client = scope.get("client")
        request_content_type = _header(scope.get("headers", []), b"content-type")

        request_chunks: List[bytes] = []
        response_chunks: List[bytes] = []
        response_info: Dict[str, object] = {"status": 0, "content_type": None}

        async def logging_receive() -> Message:
            message = await receive()
            if message["type"] == "http.request":
                request_chunks.append(message.get("body", b""))
            return message

        async def logging_send(message: Message) -> None:
            if message["type"] == "http.response.start":
                response_info["status"] = message.get("status", 0)
                response_info["content_type"] = _header(message.get("headers", []), b"content-type")
            elif message["type"] == "http.response.body":
                response_chunks.append(message.get("body", b""))
            await send(message)

        logger.info(
            f"Request started: {method} {path}",
            extra={"extra_fields": {
                "request_id": request_id,
                "method": method,
                "path": path,
                "query": query_string or None,
                "client": client[0] if client else None,
            }}
        )

        try:
            await self.app(scope, logging_receive, logging_send)
        except Exception as e:
            duration_ms = (time.time() - start_time) * 1000
            logger.error(
                f"Request failed: {method} {path} - {str(e)}",
                exc_info=True,
                extra={"extra_fields": {
                    "request_id": request_id,
                    "method": method,
                    "path": path,
                    "duration_ms": round(duration_ms, 2),
                    "error": str(e),
                }}
            )
            raise

        duration_ms = (time.time() - start_time) * 1000
        status_code = int(response_info["status"])
        response_body = b"".join(response_chunks)
        request_body_text = _summarize_body(b"".join(request_chunks), request_content_type)
        response_body_text = _summarize_body(response_body, response_info["content_type"])
        error_reason = _extract_error_reason(response_body) if status_code >= 400 else None

        if status_code < 400:
            log_level = logging.INFO
        elif status_code < 500:
            log_level = logging.WARNING
        else:
            log_level = logging.ERROR

        completion_message = f"Request completed: {method} {path} - {status_code} ({duration_ms:.2f}ms)"
        if error_reason:
            completion_message += f" | error_reason={error_reason}"

        logger.log(
            log_level,
            completion_message,
            extra={"extra_fields": {
                "request_id": request_id,
                "method": method,
                "path": path,
                "status_code": status_code,
                "duration_ms": round(duration_ms, 2),
                "request_body": request_body_text,
                "response_body": response_body_text,
                "error_reason": error_reason,
            }}
        )
