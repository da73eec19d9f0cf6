"""
=============================================================================
ACCESS LOGGING MIDDLEWARE
=============================================================================

One log line per request: who asked for which resource, what we answered,
and how long it took.

    127.0.0.1 - - [18/Oct/2026:10:00:00 +0000] "GET /public/app-ver-42.js" 200 - 0.41ms
    127.0.0.1 - - [18/Oct/2026:10:00:01 +0000] "GET /public/app-ver-42.js" 304 0 0.12ms

Stream bodies have no length until they are sent, so the size column shows
the Content-Length header when one is set and "-" otherwise. The duration
covers producing the response, not sending it.

The access log goes to the "assetserver.access" logger so it can be routed
separately from application logs:

    logging.getLogger("assetserver.access").addHandler(file_handler)

=============================================================================
"""

import json
import logging
import time
import uuid
from dataclasses import asdict, dataclass
from typing import Iterable, Optional

from .base import Middleware, NextHandler
from ..http.request import HTTPRequest
from ..http.response import HTTPResponse


logger = logging.getLogger("assetserver.access")

LOG_FORMATS = ("text", "json")


@dataclass
class RequestLog:
    """
    One access log entry.

    content_length is None for stream bodies without a Content-Length.
    """

    request_id: str
    method: str
    path: str
    query: str
    client_ip: str
    user_agent: str
    status_code: int
    content_length: Optional[int]
    duration_ms: float
    timestamp: str

    def to_dict(self) -> dict:
        entry = asdict(self)
        entry["duration_ms"] = round(self.duration_ms, 2)
        return entry

    def to_text(self) -> str:
        """Apache common log style, with the duration appended."""
        size = "-" if self.content_length is None else str(self.content_length)
        return (
            f'{self.client_ip or "-"} - - [{self.timestamp}] '
            f'"{self.method} {self.path}" {self.status_code} {size} '
            f'{self.duration_ms:.2f}ms'
        )


def _response_length(response: HTTPResponse) -> Optional[int]:
    declared = response.get_header("Content-Length")
    if declared is not None:
        return int(declared) if declared.isdigit() else None
    return None if response.has_stream else len(response.body)


def _query_string(request: HTTPRequest) -> str:
    return "&".join(
        f"{name}={value}" for name, values in request.query_params.items() for value in values
    )


class LoggingMiddleware(Middleware):
    """
    Access log and X-Request-ID.

    Add it first so it is outermost and also sees requests that fail
    further in:

        app.use(LoggingMiddleware(log_format="json"))
        app.use(LoggingMiddleware(skip_paths=["/favicon.ico"]))
    """

    def __init__(
        self,
        log_format: str = "text",
        include_request_id: bool = True,
        log_level: int = logging.INFO,
        skip_paths: Optional[Iterable[str]] = None,
    ):
        """
        Args:
            log_format: "text" or "json" (one object per line).
            include_request_id: Add an X-Request-ID header to responses.
            log_level: Level of the access records.
            skip_paths: Exact request paths that are never logged.
        """
        if log_format not in LOG_FORMATS:
            raise ValueError(f"Unknown log format: {log_format!r}")
        self.log_format = log_format
        self.include_request_id = include_request_id
        self.log_level = log_level
        self.skip_paths = frozenset(skip_paths or ())

    def __call__(self, request: HTTPRequest, next: NextHandler) -> HTTPResponse:
        request_id = uuid.uuid4().hex[:8]
        started = time.perf_counter()

        try:
            response = next(request)
        except Exception as e:
            elapsed = (time.perf_counter() - started) * 1000
            logger.error(
                f"Request failed: {request.method} {request.path} "
                f"- {type(e).__name__}: {e} ({elapsed:.2f}ms)"
            )
            raise

        elapsed = (time.perf_counter() - started) * 1000

        if self.include_request_id:
            # Bypasses set_header(): the response is usually committed by now
            response.headers["X-Request-ID"] = request_id

        if request.path not in self.skip_paths:
            self._emit(self._entry(request, response, request_id, elapsed))

        return response

    def _entry(
        self,
        request: HTTPRequest,
        response: HTTPResponse,
        request_id: str,
        elapsed: float,
    ) -> RequestLog:
        return RequestLog(
            request_id=request_id,
            method=request.method,
            path=request.path,
            query=_query_string(request),
            client_ip=request.client_address[0],
            user_agent=request.user_agent or "-",
            status_code=int(response.status),
            content_length=_response_length(response),
            duration_ms=elapsed,
            timestamp=time.strftime("%d/%b/%Y:%H:%M:%S %z"),
        )

    def _emit(self, entry: RequestLog) -> None:
        if self.log_format == "json":
            logger.log(self.log_level, json.dumps(entry.to_dict()))
        else:
            logger.log(self.log_level, entry.to_text())
