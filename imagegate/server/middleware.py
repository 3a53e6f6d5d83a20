"""WSGI middleware: utility routes, query stripping, error recovery and logs."""

from __future__ import annotations

import json
import logging
import sys
import time
from http import HTTPStatus
from typing import Any, Callable, Iterable, Mapping
from wsgiref.util import request_uri

from .realip import real_ip

StartResponse = Callable[..., Any]
WSGIApp = Callable[[dict, StartResponse], Iterable[bytes]]

_LOGGER = logging.getLogger(__name__)


def _status_line(code: int) -> str:
    return f"{code} {HTTPStatus(code).phrase}"


def handle_ok(environ: dict, start_response: StartResponse) -> Iterable[bytes]:
    """Answer with an empty 200 response."""
    start_response(_status_line(200), [("Content-Length", "0")])
    return []


def path_handler(
    method: str, handlers: Mapping[str, WSGIApp]
) -> Callable[[WSGIApp], WSGIApp]:
    """Route requests of ``method`` for the given paths to their own handlers."""

    def middleware(app: WSGIApp) -> WSGIApp:
        def handler(environ: dict, start_response: StartResponse) -> Iterable[bytes]:
            if environ.get("REQUEST_METHOD", "GET") == method:
                route = handlers.get(environ.get("PATH_INFO", ""))
                if route is not None:
                    return route(environ, start_response)
            return app(environ, start_response)

        return handler

    return middleware


def strip_query_string(app: WSGIApp) -> WSGIApp:
    """Redirect requests carrying a query string to the same URL without it."""

    def handler(environ: dict, start_response: StartResponse) -> Iterable[bytes]:
        if environ.get("QUERY_STRING"):
            location = request_uri(environ, include_query=False)
            start_response(
                _status_line(307),
                [("Location", location), ("Content-Length", "0")],
            )
            return []
        return app(environ, start_response)

    return handler


def write_json(
    environ: dict, start_response: StartResponse, status: int, payload: Any
) -> Iterable[bytes]:
    """Send ``payload`` as compact JSON; the body is left out for HEAD requests."""
    body = json.dumps(payload, separators=(",", ":"), ensure_ascii=False).encode("utf-8")
    start_response(
        _status_line(status),
        [("Content-Type", "application/json"), ("Content-Length", str(len(body)))],
    )
    if environ.get("REQUEST_METHOD") == "HEAD":
        return []
    return [body]


def _error_payload(message: str, code: int) -> dict[str, Any]:
    payload: dict[str, Any] = {}
    if message:
        payload["message"] = message
    if code:
        payload["status"] = code
    return payload


def recover_panics(app: WSGIApp, logger: logging.Logger | None = None) -> WSGIApp:
    """Turn any exception raised by ``app`` into a JSON 500 response."""
    log = logger or _LOGGER

    def handler(environ: dict, start_response: StartResponse) -> Iterable[bytes]:
        try:
            result = app(environ, start_response)
            try:
                return list(result)
            finally:
                close = getattr(result, "close", None)
                if close is not None:
                    close()
        except Exception as exc:
            log.error("panic", exc_info=True)
            exc_info = sys.exc_info()

            def restart(status: str, headers: list, _exc_info: Any = None) -> Any:
                return start_response(status, headers, exc_info)

            return write_json(environ, restart, 500, _error_payload(str(exc), 500))

    return handler


def access_log(app: WSGIApp, logger: logging.Logger | None = None) -> WSGIApp:
    """Log one ``access`` record per request with status, method, URI and client."""
    log = logger or _LOGGER

    def handler(environ: dict, start_response: StartResponse) -> Iterable[bytes]:
        started = time.monotonic()
        status = 200

        def recording(status_line: str, headers: list, exc_info: Any = None) -> Any:
            nonlocal status
            status = int(status_line.split(" ", 1)[0])
            return start_response(status_line, headers, exc_info)

        result = app(environ, recording)
        uri = environ.get("SCRIPT_NAME", "") + environ.get("PATH_INFO", "")
        if environ.get("QUERY_STRING"):
            uri += "?" + environ["QUERY_STRING"]
        forwarding = {
            "X-Real-Ip": environ.get("HTTP_X_REAL_IP", ""),
            "X-Forwarded-For": environ.get("HTTP_X_FORWARDED_FOR", ""),
        }
        log.info(
            "access",
            extra={
                "status": status,
                "method": environ.get("REQUEST_METHOD", ""),
                "uri": uri,
                "ip": real_ip(forwarding, environ.get("REMOTE_ADDR", "")),
                "user_agent": environ.get("HTTP_USER_AGENT", ""),
                "took": time.monotonic() - started,
            },
        )
        return result

    return handler


class ServerErrorLog:
    """Sink for server error messages, demoting known harmless noise to debug."""

    def __init__(self, logger: logging.Logger | None = None) -> None:
        self.logger = logger or _LOGGER

    def write(self, message: str) -> int:
        """Log ``message`` and return its length."""
        harmless = (
            message.startswith("http: TLS handshake error") and message.endswith(": EOF\n")
        ) or message.startswith("http: URL query contains semicolon")
        if harmless:
            self.logger.debug("server", extra={"log": message})
        else:
            self.logger.warning("server", extra={"log": message})
        return len(message)