"""
=============================================================================
VERSIONED RESOURCE HANDLER
=============================================================================

Serves static resources from any store a resolver understands, with
conditional caching and cache-busting version fragments.

=============================================================================
REQUEST FLOW
=============================================================================

    GET /public/css/site-ver-1699999999000.css
                    ───────────┬──────────────
                               │ resource path
                               ▼
    ┌─────────────────────────────────────────────────────────────────────┐
    │ 1. remove_version      css/site-ver-1699999999000.css               │
    │                          → css/site.css                             │
    │ 2. resolver.resolve    css/site.css → ResourceLocation | None       │
    │       None ─────────────────────────────────► 404, commit           │
    │ 3. cache toolkit       ETag / Last-Modified vs request validators   │
    │       fresh ────────────────────────────────► 304, commit           │
    │                                               (stream never opened) │
    │ 4. MIME lookup         "text/css; charset=utf-8"                    │
    │       known   → 200, stream body                                    │
    │       unknown → 200, file download (Content-Disposition)            │
    │ 5. commit                                                           │
    └─────────────────────────────────────────────────────────────────────┘

Every request ends in exactly one commit. Not found is a normal outcome;
failing to read a resource that does exist is not, and surfaces as a
ResourceError for the application to turn into a 500.

=============================================================================
WHY VERSION FRAGMENTS?
=============================================================================

With a version in the URL, resources can be cached "forever": a changed
file gets a new URL, so stale copies are never requested again.

    handler.url_for("css/site.css")
        → "/public/css/site-ver-1699999999000.css"

The version is the resource's own last-modified time, so no build step
or manifest is needed.

=============================================================================
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Union

from ..http.cache import HttpCacheToolkit
from ..http.mime_types import MimeTypes
from ..http.request import HTTPRequest
from ..http.response import HTTPResponse
from ..http.status_codes import HTTPStatus
from ..resources import versioning
from ..resources.location import (
    DirectoryResolver,
    PackageResolver,
    ResourceError,
    ResourceLocation,
    ResourceResolver,
    WebjarsResolver,
    split_resource_path,
)


logger = logging.getLogger(__name__)

RESOURCE_PATH_PARAM = "resource_path"


@dataclass
class RouteContext:
    """
    The request being handled and the response being written.

    Handlers mutate `response` through its sink operations and commit it.
    """

    request: HTTPRequest
    response: HTTPResponse = field(default_factory=HTTPResponse)


class ResourceHandler:
    """
    Handler for versioned static resources.

    =========================================================================
    FEATURES
    =========================================================================

    - Any store: directory, package data, bundled web libraries
    - Version fragments in URLs (inject_version / remove_version)
    - ETag and Last-Modified validators, 304 without touching the body
    - MIME type from the filename, download fallback for unknown types
    - Path traversal protection

    =========================================================================
    USAGE
    =========================================================================

        handler = ResourceHandler("/public", DirectoryResolver("./public"))

        app.mount(handler)
        app.url_for("css/site.css")
        # → "/public/css/site-ver-1699999999000.css"

    =========================================================================
    """

    def __init__(
        self,
        url_path: str,
        resolver: ResourceResolver,
        cache_toolkit: Optional[HttpCacheToolkit] = None,
        mime_types: Optional[MimeTypes] = None,
        log: Optional[logging.Logger] = None,
    ):
        """
        Initialize a resource handler.

        Args:
            url_path: URL prefix the handler is mounted under, e.g. "/public".

            resolver: Maps resource paths to locations. Any object with
                      a resolve(path) method.

            cache_toolkit: Applies ETag/Last-Modified and decides 304s.
                           Defaults to a production toolkit (1 hour).

            mime_types: Filename → Content-Type registry.

            log: Where version and streaming events go. Defaults to
                 this module's logger.
        """
        self.url_path = "/" + url_path.strip("/") if url_path.strip("/") else ""
        self.resolver = resolver
        self.cache_toolkit = cache_toolkit or HttpCacheToolkit()
        self.mime_types = mime_types or MimeTypes()
        self.log = log or logger

    @property
    def url_pattern(self) -> str:
        """Route pattern this handler answers, e.g. "/public/*resource_path"."""
        return f"{self.url_path}/*{RESOURCE_PATH_PARAM}"

    # =========================================================================
    # ENTRY POINT
    # =========================================================================

    def handle(self, context: RouteContext) -> None:
        """
        Handle a request routed to this handler.

        Extracts the resource path from the request (the resource_path
        path parameter, or the request path minus url_path), rejects
        traversal attempts and directory-style paths, and delegates to
        handle_resource().
        """
        request = context.request
        resource_path = request.path_params.get(RESOURCE_PATH_PARAM)
        if resource_path is None:
            resource_path = request.path
            if resource_path == self.url_path or resource_path.startswith(self.url_path + "/"):
                resource_path = resource_path[len(self.url_path):]

        resource_path = resource_path.lstrip("/")

        # ─────────────────────────────────────────────────────────────────
        # SECURITY: PATH TRAVERSAL CHECK
        # ─────────────────────────────────────────────────────────────────
        if split_resource_path(resource_path) is None:
            self.log.warning(f"Path traversal attempt: {resource_path}")
            context.response.set_status(HTTPStatus.FORBIDDEN).commit()
            return

        if not resource_path or resource_path.endswith("/"):
            # Directories are not resources
            context.response.not_found().commit()
            return

        self.handle_resource(resource_path, context)

    def handle_resource(self, resource_path: str, context: RouteContext) -> None:
        """
        Serve one resource path.

        Strips a version fragment, resolves the remaining path, and
        either commits a 404 or streams the resource.

        Raises:
            ResourceError: the store failed to resolve the path, or the
                           resource exists but could not be read.
        """
        unversioned_path = self.remove_version(resource_path)
        if unversioned_path != resource_path:
            self.log.debug(
                f"Remove version from resource path: '{resource_path}' => '{unversioned_path}'"
            )
            resource_path = unversioned_path

        location = self.resolver.resolve(resource_path)
        if location is None:
            context.response.not_found().commit()
        else:
            self.stream_resource(location, context)

    # =========================================================================
    # VERSION FRAGMENTS
    # =========================================================================

    def inject_version(self, resource_path: str) -> str:
        """
        Insert the resource's version fragment into its path.

            "css/site.css" → "css/site-ver-1699999999000.css"

        Raises:
            ResourceError: the path does not resolve, or its last-modified
                           time cannot be read.
        """
        location = self.resolver.resolve(resource_path)
        if location is None:
            raise ResourceError(
                f"Cannot inject version, resource '{resource_path}' not found by {self.resolver!r}"
            )

        versioned_path = versioning.inject_version(resource_path, location.last_modified())
        self.log.debug(
            f"Inject version in resource path: '{resource_path}' => '{versioned_path}'"
        )
        return versioned_path

    def remove_version(self, resource_path: str) -> str:
        """Strip the version fragment, if any. Unversioned paths pass through."""
        return versioning.remove_version(resource_path)

    def url_for(self, resource_path: str, versioned: bool = True) -> str:
        """
        Public URL of a resource under this handler's url_path.

        Args:
            resource_path: Logical path, e.g. "css/site.css".
            versioned: Inject the version fragment (default).
        """
        resource_path = resource_path.lstrip("/")
        if versioned:
            resource_path = self.inject_version(resource_path)
        return f"{self.url_path}/{resource_path}"

    # =========================================================================
    # STREAMING
    # =========================================================================

    def stream_resource(self, location: ResourceLocation, context: RouteContext) -> None:
        """
        Send a resolved resource, honoring conditional request headers.

        A 304 commits without opening the resource.

        Raises:
            ResourceError: reading metadata or opening the stream failed.
        """
        try:
            last_modified = location.last_modified()
            self.cache_toolkit.add_etag(context.request, context.response, last_modified)

            if context.response.status == HTTPStatus.NOT_MODIFIED:
                # do not stream anything out, simply return 304
                context.response.commit()
            else:
                self.send_resource(location, context)
        except ResourceError:
            raise
        except OSError as e:
            raise ResourceError(f"Failed to stream resource {location.uri}", location) from e

    def send_resource(self, location: ResourceLocation, context: RouteContext) -> None:
        """
        Attach the resource body and commit.

        Known MIME type → inline stream with that Content-Type.
        Unknown → file download named after the resource.
        """
        response = context.response
        content_type = self.mime_types.content_type_for(location.filename)

        if content_type:
            self.log.debug(f"Streaming as resource '{location.uri}'")
            response.set_content_type(content_type)
            response.ok().write_stream_body(location.open())
        else:
            self.log.debug(f"Streaming as file '{location.uri}'")
            response.ok().write_file_body(location.filename, location.open())

        response.commit()

    def __repr__(self) -> str:
        return f"ResourceHandler({self.url_path!r}, {self.resolver!r})"


# =============================================================================
# FACTORIES
# =============================================================================

def public_resources(
    package: str,
    url_path: str = "/public",
    base: str = "public",
    **kwargs,
) -> ResourceHandler:
    """
    Serve the "public" directory bundled inside a package.

    Example:
        app.mount(public_resources("myapp"))
        # GET /public/css/site.css → myapp/public/css/site.css
    """
    return ResourceHandler(url_path, PackageResolver(package, base), **kwargs)


def webjars_resources(
    package: str,
    url_path: str = "/webjars",
    base: str = "webjars",
    **kwargs,
) -> ResourceHandler:
    """
    Serve bundled third-party web libraries.

    Example:
        app.mount(webjars_resources("myapp.vendor"))
        # GET /webjars/jquery/jquery.min.js
        #   → myapp/vendor/webjars/jquery/<newest>/jquery.min.js
    """
    return ResourceHandler(url_path, WebjarsResolver(package, base), **kwargs)


def file_resources(
    directory: Union[str, Path],
    url_path: str = "/files",
    **kwargs,
) -> ResourceHandler:
    """
    Serve resources from a filesystem directory.

    Example:
        app.mount(file_resources("./public", url_path="/public"))
    """
    return ResourceHandler(url_path, DirectoryResolver(directory), **kwargs)
