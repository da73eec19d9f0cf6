"""
=============================================================================
HTTP STATUS CODES
=============================================================================

The status codes a resource server actually emits, with reason phrases.

=============================================================================
STATUS CODES FOR STATIC RESOURCES
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │ Code │ When                                                         │
    ├─────────────────────────────────────────────────────────────────────┤
    │ 200  │ Resource found, body streamed                                │
    │ 304  │ Client cache is fresh (ETag / Last-Modified matched)         │
    │ 403  │ Path escapes the served root                                 │
    │ 404  │ Resource could not be resolved                               │
    │ 405  │ Anything but GET/HEAD on a resource mount                    │
    │ 500  │ Metadata read or stream open failed                          │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
"""

from enum import IntEnum


class HTTPStatus(IntEnum):
    """
    HTTP status codes and reason phrases.

    IntEnum, so codes compare equal to plain integers:

        >>> HTTPStatus.NOT_MODIFIED == 304
        True
        >>> HTTPStatus.NOT_MODIFIED.phrase
        'Not Modified'
    """

    # 2xx SUCCESS
    OK = 200
    NO_CONTENT = 204

    # 3xx REDIRECTION
    NOT_MODIFIED = 304           # Cached version is still valid

    # 4xx CLIENT ERRORS
    FORBIDDEN = 403
    NOT_FOUND = 404
    METHOD_NOT_ALLOWED = 405

    # 5xx SERVER ERRORS
    INTERNAL_SERVER_ERROR = 500

    @property
    def phrase(self) -> str:
        """
        Get the reason phrase for this status code.

            HTTP/1.1 304 Not Modified
                     ─── ────────────
                      │   └── Reason phrase
                      └────── Status code
        """
        return _STATUS_PHRASES.get(self, "Unknown")

    @property
    def is_success(self) -> bool:
        return 200 <= self < 300

    @property
    def is_redirect(self) -> bool:
        return 300 <= self < 400

    @property
    def is_client_error(self) -> bool:
        return 400 <= self < 500

    @property
    def is_server_error(self) -> bool:
        return 500 <= self < 600

    @property
    def is_error(self) -> bool:
        """Check if this is an error status code (4xx or 5xx)."""
        return self >= 400

    @property
    def allows_body(self) -> bool:
        """
        Whether a response with this status may carry a body.

        304 and 204 never do (RFC 7230 section 3.3.3).
        """
        return self not in (HTTPStatus.NOT_MODIFIED, HTTPStatus.NO_CONTENT)


_STATUS_PHRASES = {
    HTTPStatus.OK: "OK",
    HTTPStatus.NO_CONTENT: "No Content",
    HTTPStatus.NOT_MODIFIED: "Not Modified",
    HTTPStatus.FORBIDDEN: "Forbidden",
    HTTPStatus.NOT_FOUND: "Not Found",
    HTTPStatus.METHOD_NOT_ALLOWED: "Method Not Allowed",
    HTTPStatus.INTERNAL_SERVER_ERROR: "Internal Server Error",
}
