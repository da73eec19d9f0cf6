"""
=============================================================================
HTTP COLLABORATORS
=============================================================================

The HTTP-level pieces a resource handler talks to:

    ┌─────────────────────────────────────────────────────────────────────┐
    │  request.py      HTTPRequest - parsed view of the WSGI environ      │
    │  response.py     HTTPResponse - the response sink (status, headers, │
    │                  stream body, single commit)                        │
    │  cache.py        HttpCacheToolkit - ETag / Last-Modified, 304       │
    │  mime_types.py   MimeTypes - filename → Content-Type                │
    │  status_codes.py HTTPStatus enum                                    │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
"""

from .request import HTTPRequest
from .response import (
    HTTPResponse,
    ResponseBuilder,
    ResponseCommitted,
    format_http_date,
    parse_http_date,
    not_found,           # 404 Not Found
    method_not_allowed,  # 405 Method Not Allowed
    internal_error,      # 500 Internal Server Error
)
from .cache import HttpCacheToolkit
from .status_codes import HTTPStatus
from .mime_types import MimeTypes, content_type_for, get_mime_type, get_content_type

__all__ = [
    # Request
    "HTTPRequest",

    # Response sink
    "HTTPResponse",
    "ResponseBuilder",
    "ResponseCommitted",
    "format_http_date",
    "parse_http_date",
    "not_found",
    "method_not_allowed",
    "internal_error",

    # Caching
    "HttpCacheToolkit",

    # Status codes
    "HTTPStatus",

    # MIME types
    "MimeTypes",
    "content_type_for",
    "get_mime_type",
    "get_content_type",
]
