"""
=============================================================================
HTTP RESPONSE SINK
=============================================================================

The response object handlers write into. It holds the status, headers and
body of one response, and it gets committed exactly once.

=============================================================================
BYTES BODY VS STREAM BODY
=============================================================================

Short responses (errors, JSON) carry their body as bytes. Resources are
never read into memory; the handler opens a byte stream and hands it over:

    ┌─────────────────────────────────────────────────────────────────────┐
    │                     STREAM OWNERSHIP                                │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   handler                 HTTPResponse               WSGI server    │
    │   ───────                 ────────────               ───────────    │
    │   location.open() ─────►  write_stream_body() ─────► iter_body()    │
    │                           (response owns it)         reads chunks,  │
    │                                                      closes stream  │
    │                                                      in finally     │
    │                                                                      │
    │   If the body is never iterated (HEAD, 304, error after commit)     │
    │   close() releases the stream instead.                              │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
COMMIT
=============================================================================

commit() marks the response final. After that, status, headers and body
are frozen and a second commit() raises ResponseCommitted.

=============================================================================
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from typing import Any, BinaryIO, Dict, Iterator, List, Optional, Tuple, Union
import json

from .status_codes import HTTPStatus
from .mime_types import get_content_type


DEFAULT_CHUNK_SIZE = 64 * 1024


class ResponseCommitted(RuntimeError):
    """Raised when a committed response is committed or mutated again."""


@dataclass
class HTTPResponse:
    """
    Represents an HTTP response under construction.

    =========================================================================
    RESPONSE LIFECYCLE
    =========================================================================

        handler mutates      commit()             server sends
        status / headers ──► frozen    ──────────► header_items()
        body / stream                              iter_body()

    =========================================================================
    """

    status: HTTPStatus = HTTPStatus.OK
    headers: Dict[str, str] = field(default_factory=dict)
    body: bytes = b""
    stream: Optional[BinaryIO] = field(default=None, repr=False)
    filename: Optional[str] = None           # Set for file downloads
    version: str = "HTTP/1.1"
    committed: bool = False

    @property
    def status_line(self) -> str:
        """
        Get the HTTP status line.

        Example: "HTTP/1.1 304 Not Modified"
        """
        return f"{self.version} {int(self.status)} {self.status.phrase}"

    @property
    def wsgi_status(self) -> str:
        """Status string in the form WSGI start_response() expects."""
        return f"{int(self.status)} {self.status.phrase}"

    @property
    def has_stream(self) -> bool:
        return self.stream is not None

    def _check_open(self) -> None:
        if self.committed:
            raise ResponseCommitted("Response has already been committed")

    # =========================================================================
    # STATUS
    # =========================================================================

    def set_status(self, status: Union[HTTPStatus, int]) -> "HTTPResponse":
        """
        Set the status code.

        Returns:
            Self for method chaining
        """
        self._check_open()
        self.status = HTTPStatus(status)
        return self

    def ok(self) -> "HTTPResponse":
        return self.set_status(HTTPStatus.OK)

    def not_found(self) -> "HTTPResponse":
        return self.set_status(HTTPStatus.NOT_FOUND)

    def not_modified(self) -> "HTTPResponse":
        return self.set_status(HTTPStatus.NOT_MODIFIED)

    # =========================================================================
    # HEADERS
    # =========================================================================

    def set_header(self, name: str, value: str) -> "HTTPResponse":
        """
        Set a response header, replacing any previous value.

        Args:
            name: Header name (case-sensitive in responses)
            value: Header value

        Returns:
            Self for method chaining
        """
        self._check_open()
        self.headers[name] = value
        return self

    def set_content_type(self, content_type: str) -> "HTTPResponse":
        """Set the Content-Type header."""
        return self.set_header("Content-Type", content_type)

    def get_header(self, name: str, default: Optional[str] = None) -> Optional[str]:
        """Case-insensitive header lookup."""
        lowered = name.lower()
        for key, value in self.headers.items():
            if key.lower() == lowered:
                return value
        return default

    # =========================================================================
    # BODY
    # =========================================================================

    def set_body(self, body: Union[str, bytes]) -> "HTTPResponse":
        """
        Set a bytes body. Strings are encoded to UTF-8.

        Returns:
            Self for method chaining
        """
        self._check_open()
        self.body = body.encode("utf-8") if isinstance(body, str) else body
        return self

    def write_stream_body(self, stream: BinaryIO) -> "HTTPResponse":
        """
        Attach a byte stream as the body.

        The response takes ownership: the stream is closed by iter_body()
        or close(), whichever runs.
        """
        self._check_open()
        self._release_stream()
        self.stream = stream
        self.body = b""
        return self

    def write_file_body(self, filename: str, stream: BinaryIO) -> "HTTPResponse":
        """
        Attach a byte stream as a named file download.

        Sets Content-Disposition with the filename and, unless a
        Content-Type is already set, a type inferred from the filename
        (application/octet-stream for unknown extensions).
        """
        self.write_stream_body(stream)
        self.filename = filename
        if self.get_header("Content-Type") is None:
            self.headers["Content-Type"] = get_content_type(filename)
        disposition_name = filename.replace("\\", "\\\\").replace('"', '\\"')
        self.headers["Content-Disposition"] = f'attachment; filename="{disposition_name}"'
        return self

    # =========================================================================
    # COMMIT / SERIALIZATION
    # =========================================================================

    def commit(self) -> "HTTPResponse":
        """
        Finalize the response.

        Raises:
            ResponseCommitted: if the response was already committed.
        """
        self._check_open()
        if not self.status.allows_body:
            # 304 and 204 never carry a body
            self._release_stream()
            self.body = b""
        self.committed = True
        return self

    def header_items(self, server_name: str = "assetserver") -> List[Tuple[str, str]]:
        """
        Headers as (name, value) pairs, with Date and Server filled in.

        Content-Length is added for bytes bodies only; stream bodies rely
        on an explicit header or chunked/close framing by the server.
        """
        response_headers = dict(self.headers)

        if self.stream is None and "Content-Length" not in response_headers \
                and self.status.allows_body:
            response_headers["Content-Length"] = str(len(self.body))

        if "Date" not in response_headers:
            response_headers["Date"] = format_http_date(datetime.now(timezone.utc))

        if "Server" not in response_headers:
            response_headers["Server"] = server_name

        return list(response_headers.items())

    def iter_body(self, chunk_size: int = DEFAULT_CHUNK_SIZE) -> Iterator[bytes]:
        """
        Yield the body in chunks.

        For stream bodies, the stream is closed when iteration finishes,
        fails, or the generator is closed early.
        """
        if self.stream is None:
            if self.body:
                yield self.body
            return

        stream = self.stream
        try:
            while True:
                chunk = stream.read(chunk_size)
                if not chunk:
                    break
                yield chunk
        finally:
            stream.close()
            self.stream = None

    def close(self) -> None:
        """Release an unconsumed body stream."""
        self._release_stream()

    def _release_stream(self) -> None:
        if self.stream is not None:
            try:
                self.stream.close()
            finally:
                self.stream = None


class ResponseBuilder:
    """
    Fluent builder for short, fully-formed responses.

    Used for error pages and JSON. Resource bodies go through the
    HTTPResponse sink operations instead.

        response = (ResponseBuilder()
            .status(HTTPStatus.NOT_FOUND)
            .json({"error": "Not Found"})
            .build())
    """

    def __init__(self):
        self._status = HTTPStatus.OK
        self._headers: Dict[str, str] = {}
        self._body: bytes = b""

    def status(self, status: HTTPStatus) -> "ResponseBuilder":
        self._status = status
        return self

    def header(self, name: str, value: str) -> "ResponseBuilder":
        self._headers[name] = value
        return self

    def json(self, data: Any, pretty: bool = False) -> "ResponseBuilder":
        """
        Set a JSON body.

        Args:
            data: Any JSON-serializable data
            pretty: If True, format with indentation for readability
        """
        indent = 2 if pretty else None
        self._body = json.dumps(data, indent=indent, ensure_ascii=False).encode("utf-8")
        self._headers["Content-Type"] = "application/json; charset=utf-8"
        return self

    def build(self) -> HTTPResponse:
        return HTTPResponse(
            status=self._status,
            headers=self._headers,
            body=self._body,
        )


# =============================================================================
# HTTP DATES
# =============================================================================

def format_http_date(dt: datetime) -> str:
    """
    Format a datetime as an HTTP-date (RFC 7231 IMF-fixdate).

    Format: Day, DD Mon YYYY HH:MM:SS GMT
    Example: Wed, 01 Jan 2026 12:00:00 GMT

    HTTP dates are ALWAYS in GMT (UTC), never local time.
    """
    if dt.tzinfo is not None:
        dt = dt.astimezone(timezone.utc)

    days = ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]
    months = ["Jan", "Feb", "Mar", "Apr", "May", "Jun",
              "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"]

    return (
        f"{days[dt.weekday()]}, "
        f"{dt.day:02d} {months[dt.month - 1]} {dt.year} "
        f"{dt.hour:02d}:{dt.minute:02d}:{dt.second:02d} GMT"
    )


def format_http_date_millis(millis: int) -> str:
    """HTTP-date for a millisecond epoch timestamp."""
    return format_http_date(datetime.fromtimestamp(millis / 1000, tz=timezone.utc))


def parse_http_date(value: str) -> Optional[datetime]:
    """
    Parse an HTTP-date header value.

    Accepts the three formats RFC 7231 requires recipients to understand
    (IMF-fixdate, RFC 850, asctime). Returns None when the value does not
    parse, so callers can treat a malformed validator as absent.
    """
    if not value:
        return None
    try:
        parsed = parsedate_to_datetime(value)
    except (TypeError, ValueError, IndexError):
        return None
    if parsed is None:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


# =============================================================================
# CONVENIENCE FUNCTIONS
# =============================================================================

def not_found(message: str = "Not Found") -> HTTPResponse:
    """Create a 404 Not Found response with a JSON error body."""
    return ResponseBuilder().status(HTTPStatus.NOT_FOUND).json({"error": message}).build()


def method_not_allowed(allowed_methods: List[str]) -> HTTPResponse:
    """
    Create a 405 Method Not Allowed response.

    Includes the Allow header listing valid methods (RFC 7231 requirement).
    """
    return (ResponseBuilder()
        .status(HTTPStatus.METHOD_NOT_ALLOWED)
        .header("Allow", ", ".join(allowed_methods))
        .json({"error": "Method Not Allowed", "allowed": allowed_methods})
        .build())


def internal_error(message: str = "Internal Server Error") -> HTTPResponse:
    """
    Create a 500 Internal Server Error response.

    Keep the message generic; details go to the log, not the client.
    """
    return ResponseBuilder().status(HTTPStatus.INTERNAL_SERVER_ERROR).json({"error": message}).build()
