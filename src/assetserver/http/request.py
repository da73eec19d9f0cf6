"""
=============================================================================
HTTP REQUEST
=============================================================================

The parsed view of an incoming request that handlers read from.

Requests reach us through WSGI, so there is no byte-level parsing here:
the server already split the request line and headers into the environ
dict. HTTPRequest.from_environ() normalizes that into a small dataclass.

    ┌─────────────────────────────────────────────────────────────────────┐
    │  environ["REQUEST_METHOD"]        → request.method                  │
    │  environ["PATH_INFO"]             → request.path                    │
    │  environ["QUERY_STRING"]          → request.query_params            │
    │  environ["HTTP_IF_NONE_MATCH"]    → request.headers["if-none-match"]│
    │  environ["REMOTE_ADDR"]           → request.client_address[0]       │
    └─────────────────────────────────────────────────────────────────────┘

Header names are stored LOWERCASE. HTTP headers are case-insensitive
(RFC 7230), and normalizing once avoids .lower() everywhere else.

=============================================================================
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional
from urllib.parse import parse_qs


@dataclass
class HTTPRequest:
    """
    Represents a parsed HTTP request.

    Attributes:
        method:         GET, HEAD, POST, ...
        path:           Request path without query string
        version:        HTTP version string
        headers:        Header name (lowercase) → value
        query_params:   "?a=1&a=2" → {"a": ["1", "2"]}
        path_params:    Values captured by the mount, e.g. resource_path
        client_address: (ip, port) of the client
    """

    method: str
    path: str
    version: str = "HTTP/1.1"
    headers: Dict[str, str] = field(default_factory=dict)
    query_params: Dict[str, list] = field(default_factory=dict)
    path_params: Dict[str, str] = field(default_factory=dict)
    client_address: tuple = ("", 0)

    @classmethod
    def from_environ(cls, environ: Mapping[str, Any]) -> "HTTPRequest":
        """
        Build a request from a WSGI environ (PEP 3333).

        PATH_INFO arrives as latin-1 decoded bytes; it is re-decoded as
        UTF-8 so non-ASCII resource names round-trip.
        """
        headers: Dict[str, str] = {}
        for key, value in environ.items():
            if key.startswith("HTTP_"):
                headers[key[5:].replace("_", "-").lower()] = value
        if environ.get("CONTENT_TYPE"):
            headers["content-type"] = environ["CONTENT_TYPE"]
        if environ.get("CONTENT_LENGTH"):
            headers["content-length"] = environ["CONTENT_LENGTH"]

        raw_path = environ.get("PATH_INFO", "") or "/"
        try:
            path = raw_path.encode("latin-1").decode("utf-8")
        except (UnicodeEncodeError, UnicodeDecodeError):
            path = raw_path

        try:
            port = int(environ.get("REMOTE_PORT", 0) or 0)
        except ValueError:
            port = 0

        return cls(
            method=environ.get("REQUEST_METHOD", "GET").upper(),
            path=path,
            version=environ.get("SERVER_PROTOCOL", "HTTP/1.1"),
            headers=headers,
            query_params=parse_qs(environ.get("QUERY_STRING", ""), keep_blank_values=True),
            client_address=(environ.get("REMOTE_ADDR", ""), port),
        )

    @property
    def user_agent(self) -> str:
        return self.headers.get("user-agent", "")

    @property
    def is_head(self) -> bool:
        return self.method == "HEAD"

    def get_header(self, name: str, default: str = "") -> str:
        """
        Get a header value (case-insensitive lookup).

        Example:
            etag = request.get_header("If-None-Match")
        """
        return self.headers.get(name.lower(), default)

    def get_query(self, name: str, default: Optional[str] = None) -> Optional[str]:
        """First value of a query parameter, or default."""
        values = self.query_params.get(name, [])
        return values[0] if values else default
