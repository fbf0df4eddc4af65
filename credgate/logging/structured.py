"""
Structured Logging
==================
structlog configuration, request logging and PII masking for credgate.

Usage:
    from credgate.logging import setup_logging, RequestLoggingMiddleware

    setup_logging(service_name="credgate")
    app.add_middleware(RequestLoggingMiddleware)

Identifiers are masked before they reach a log line; OTP codes and passwords
are never logged.
"""

import logging
import sys
import time
import uuid
from typing import Optional

import structlog


# =============================================================================
# Setup
# =============================================================================

def setup_logging(
    service_name: str,
    level: str = "INFO",
    json_output: bool = True,
) -> None:
    """
    Configure stdlib logging and structlog for a service.

    Args:
        service_name: Bound to every event as ``service``
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_output: Render JSON (production) or key-value console lines
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(log_level)
    handler.setFormatter(logging.Formatter("%(message)s"))
    root_logger.addHandler(handler)

    renderer = (
        structlog.processors.JSONRenderer()
        if json_output
        else structlog.dev.ConsoleRenderer(colors=False)
    )

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    structlog.contextvars.bind_contextvars(service=service_name)
    structlog.get_logger(__name__).info("Logging configured", service=service_name)


# =============================================================================
# Masking
# =============================================================================

def mask_email(email: Optional[str]) -> str:
    """Keep only the domain: ``****@example.com``."""
    if not email or "@" not in email:
        return "****@****.***"
    return "****@" + email.split("@", 1)[1]


def mask_phone(phone: Optional[str]) -> str:
    """Keep only the last four digits: ``****1234``."""
    if not phone or len(phone) < 4:
        return "****"
    return "****" + phone[-4:]


def mask_identifier(identifier: Optional[str]) -> str:
    """Mask an email or phone number, whichever it looks like."""
    if identifier is None:
        return "****"
    return mask_email(identifier) if "@" in identifier else mask_phone(identifier)


# =============================================================================
# Request Logging Middleware (FastAPI / ASGI)
# =============================================================================

class RequestLoggingMiddleware:
    """
    ASGI middleware logging one event per request and response.

    Binds a short ``request_id`` into the structlog context for the duration
    of the request so that every event emitted by the engine carries it.
    """

    def __init__(self, app):
        self.app = app
        self.logger = structlog.get_logger("http")

    async def __call__(self, scope, receive, send):
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        headers = dict(scope.get("headers", []))
        request_id = headers.get(b"x-request-id", b"").decode() or str(uuid.uuid4())[:8]
        method = scope.get("method", "")
        path = scope.get("path", "")

        structlog.contextvars.bind_contextvars(request_id=request_id)
        start_time = time.time()
        self.logger.info("Request", method=method, path=path)

        status_code = 500

        async def send_wrapper(message):
            nonlocal status_code
            if message["type"] == "http.response.start":
                status_code = message.get("status", 500)
                message.setdefault("headers", []).append(
                    (b"x-request-id", request_id.encode())
                )
            await send(message)

        try:
            await self.app(scope, receive, send_wrapper)
        finally:
            duration_ms = int((time.time() - start_time) * 1000)
            level = "info" if status_code < 400 else "warning" if status_code < 500 else "error"
            getattr(self.logger, level)(
                "Response",
                method=method,
                path=path,
                status_code=status_code,
                duration_ms=duration_ms,
            )
            structlog.contextvars.unbind_contextvars("request_id")
