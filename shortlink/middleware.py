"""Request identifiers and per-request access logging for Flask apps."""

from __future__ import annotations

import itertools
import logging
import secrets
import socket
import time

from flask import Flask, Response, g, has_request_context, request

_COMPONENT = "middleware/logger"
_counter = itertools.count(1)
_PREFIX = f"{socket.gethostname() or 'localhost'}/{secrets.token_urlsafe(8)[:10]}"


def get_request_id() -> str:
    """Return the identifier of the current request, or an empty string outside one."""
    return g.get("request_id", "") if has_request_context() else ""


def install_request_logging(app: Flask, logger: logging.Logger) -> None:
    """Tag every request with an id (reusing ``X-Request-Id``) and log its completion."""
    logger.info("logger middleware enabled", extra={"attrs": {"component": _COMPONENT}})

    @app.before_request
    def _start_request() -> None:
        g.request_id = request.headers.get("X-Request-Id") or f"{_PREFIX}-{next(_counter):06d}"
        g.request_started = time.perf_counter()

    @app.after_request
    def _finish_request(response: Response) -> Response:
        elapsed = time.perf_counter() - g.get("request_started", time.perf_counter())
        duration = f"{elapsed * 1e3:.3f}ms" if elapsed < 1.0 else f"{elapsed:.3f}s"
        logger.info("request completed", extra={"attrs": {
            "component": _COMPONENT,
            "method": request.method,
            "path": request.path,
            "host": request.host,
            "remote_addr": request.remote_addr or "",
            "user_agent": request.headers.get("User-Agent", ""),
            "request_id": get_request_id(),
            "status": response.status_code,
            "bytes": response.calculate_content_length() or 0,
            "duration": duration,
        }})
        return response