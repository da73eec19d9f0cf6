"""
=============================================================================
HTTP CACHE TOOLKIT
=============================================================================

Conditional-request support for resources whose only version signal is a
last-modified timestamp.

=============================================================================
VALIDATORS
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                    CONDITIONAL GET                                  │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   First request                                                      │
    │   ─────────────                                                      │
    │   GET /public/app.js                                                 │
    │   ◄── 200 OK                                                         │
    │       ETag: "1699999999000"                                          │
    │       Last-Modified: Tue, 14 Nov 2023 22:13:19 GMT                   │
    │                                                                      │
    │   Revalidation                                                       │
    │   ────────────                                                       │
    │   GET /public/app.js                                                 │
    │   If-None-Match: "1699999999000"                                     │
    │   ◄── 304 Not Modified   (no body, stream never opened)              │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

If-None-Match wins when both validators are present (RFC 7232 6).
If-Modified-Since is compared at one-second resolution, the precision of
an HTTP-date.

=============================================================================
"""

import logging
from typing import List

from .request import HTTPRequest
from .response import HTTPResponse, format_http_date_millis, parse_http_date


logger = logging.getLogger(__name__)

_CONDITIONAL_METHODS = ("GET", "HEAD")


class HttpCacheToolkit:
    """
    Sets caching headers and decides 304 responses.

    Args:
        max_age: Cache-Control max-age in seconds, production mode only.
        production: In production, resources are publicly cacheable.
                    Otherwise Cache-Control is no-cache so browsers
                    revalidate on every load while you edit files.
    """

    def __init__(self, max_age: int = 3600, production: bool = True):
        if max_age < 0:
            raise ValueError(f"max_age must be >= 0, got {max_age}")
        self.max_age = max_age
        self.production = production

    @staticmethod
    def etag_for(last_modified: int) -> str:
        return f'"{last_modified}"'

    def add_etag(self, request: HTTPRequest, response: HTTPResponse, last_modified: int) -> None:
        """
        Apply cache headers and request validators to the response.

        Marks the response 304 when the client's copy is current;
        otherwise adds Last-Modified and leaves the status alone.

        Args:
            request: The request carrying If-None-Match / If-Modified-Since.
            response: The response to mutate.
            last_modified: Resource timestamp in milliseconds since epoch.
        """
        if self.production:
            response.set_header("Cache-Control", f"public, max-age={self.max_age}")
        else:
            response.set_header("Cache-Control", "no-cache")

        etag = self.etag_for(last_modified)
        response.set_header("ETag", etag)

        if not self.is_modified(request, etag, last_modified):
            if request.method in _CONDITIONAL_METHODS:
                logger.debug(f"Not modified: {request.path} ({etag})")
                response.not_modified()
        else:
            response.set_header("Last-Modified", format_http_date_millis(last_modified))

    def is_modified(self, request: HTTPRequest, etag: str, last_modified: int) -> bool:
        """
        Check the request validators against the current resource state.

        Returns:
            True if the client must receive the resource again.
        """
        if_none_match = request.get_header("if-none-match")
        if if_none_match:
            tags = _parse_etags(if_none_match)
            return not ("*" in tags or etag in tags)

        since = parse_http_date(request.get_header("if-modified-since"))
        if since is None:
            return True

        # HTTP-dates have second resolution
        return last_modified // 1000 > int(since.timestamp())


def _parse_etags(header: str) -> List[str]:
    """
    Split an If-None-Match value into opaque tags.

    Weak tags compare equal to strong ones for GET (weak comparison,
    RFC 7232 2.3.2), so the W/ prefix is dropped.
    """
    tags = []
    for tag in header.split(","):
        tag = tag.strip()
        if tag.startswith("W/"):
            tag = tag[2:]
        if tag:
            tags.append(tag)
    return tags
