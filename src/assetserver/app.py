"""
=============================================================================
RESOURCE APPLICATION
=============================================================================

A WSGI application that mounts resource handlers under URL prefixes.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                    REQUEST PIPELINE                                 │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   WSGI server                                                        │
    │      │  environ                                                      │
    │      ▼                                                               │
    │   HTTPRequest.from_environ                                           │
    │      │                                                               │
    │      ▼                                                               │
    │   middleware (LoggingMiddleware, ...)                                │
    │      │                                                               │
    │      ▼                                                               │
    │   dispatch: longest mounted prefix wins                              │
    │      /public/...  → file_resources("./public")                       │
    │      /webjars/... → webjars_resources("myapp.vendor")                │
    │      (no mount)   → 404                                              │
    │      │                                                               │
    │      ▼                                                               │
    │   start_response(status, headers)                                    │
    │   body iterable - closes the resource stream when done               │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

Resource handlers own everything below their prefix, so dispatch is a
prefix match. Put this app behind (or inside) your web framework of
choice.

=============================================================================
ERRORS
=============================================================================

A ResourceError (the store failed, or a resource exists but cannot be
read) is logged with its traceback and answered with a generic 500.
Anything else propagates to the WSGI server.

=============================================================================
"""

import logging
from typing import Any, Callable, Iterable, Iterator, List, Optional
from wsgiref.simple_server import WSGIRequestHandler, make_server

from .config import AppConfig
from .handlers import (
    ResourceHandler,
    RouteContext,
    file_resources,
    public_resources,
    webjars_resources,
)
from .http.cache import HttpCacheToolkit
from .http.mime_types import MimeTypes
from .http.request import HTTPRequest
from .http.response import (
    DEFAULT_CHUNK_SIZE,
    HTTPResponse,
    internal_error,
    method_not_allowed,
    not_found,
)
from .middleware import LoggingMiddleware, Middleware, MiddlewarePipeline, NextHandler
from .resources.location import ResourceError


logger = logging.getLogger(__name__)

RESOURCE_METHODS = ["GET", "HEAD"]

StartResponse = Callable[..., Any]


class ResponseBody:
    """
    WSGI body iterable that always releases the response stream.

    PEP 3333 servers call close() on the iterable when they are done,
    including when the client disconnects before the body is consumed.
    """

    def __init__(self, response: HTTPResponse, chunk_size: int = DEFAULT_CHUNK_SIZE):
        self.response = response
        self.chunk_size = chunk_size

    def __iter__(self) -> Iterator[bytes]:
        return self.response.iter_body(self.chunk_size)

    def close(self) -> None:
        self.response.close()


class ResourceApplication:
    """
    WSGI application serving mounted resource handlers.

        app = ResourceApplication()
        app.use(LoggingMiddleware())
        app.mount(file_resources("./public", url_path="/public"))

        app.url_for("css/site.css")
        # → "/public/css/site-ver-1699999999000.css"

        run(app, port=8080)
    """

    def __init__(self, config: Optional[AppConfig] = None):
        self.config = config or AppConfig()
        self.cache_toolkit = HttpCacheToolkit(
            max_age=self.config.cache_max_age,
            production=self.config.production,
        )
        self.mime_types = MimeTypes()
        self._handlers: List[ResourceHandler] = []
        self._middleware = MiddlewarePipeline()
        self._pipeline: Optional[NextHandler] = None

    # =========================================================================
    # SETUP
    # =========================================================================

    def mount(self, handler: ResourceHandler) -> ResourceHandler:
        """
        Mount a resource handler under its url_path.

        Raises:
            ValueError: another handler already owns that url_path.
        """
        for existing in self._handlers:
            if existing.url_path == handler.url_path:
                raise ValueError(f"A handler is already mounted at '{handler.url_path or '/'}'")

        self._handlers.append(handler)
        # Longest prefix first, so /public/vendor wins over /public
        self._handlers.sort(key=lambda h: len(h.url_path), reverse=True)
        logger.info(f"Mounted {handler!r} at {handler.url_pattern}")
        return handler

    def use(self, middleware: Middleware) -> "ResourceApplication":
        """
        Add middleware (first added = outermost).

        Returns:
            Self for method chaining
        """
        self._middleware.add(middleware)
        self._pipeline = None
        return self

    @property
    def handlers(self) -> List[ResourceHandler]:
        return list(self._handlers)

    def find_handler(self, path: str) -> Optional[ResourceHandler]:
        """Handler whose url_path is the longest prefix of path."""
        for handler in self._handlers:
            prefix = handler.url_path
            if not prefix or path == prefix or path.startswith(prefix + "/"):
                return handler
        return None

    # =========================================================================
    # URLS
    # =========================================================================

    def url_for(self, resource_path: str, url_path: Optional[str] = None, versioned: bool = True) -> str:
        """
        Versioned public URL for a resource.

        Args:
            resource_path: Logical path, e.g. "css/site.css".
            url_path: Restrict the lookup to the handler mounted there.
                      Otherwise the first handler that can resolve the
                      path is used (longest prefix first).
            versioned: Inject the version fragment.

        Raises:
            ResourceError: no mounted handler can resolve the path.
        """
        candidates = self._handlers
        if url_path is not None:
            wanted = "/" + url_path.strip("/") if url_path.strip("/") else ""
            candidates = [h for h in self._handlers if h.url_path == wanted]

        for handler in candidates:
            if handler.resolver.resolve(resource_path.lstrip("/")) is not None:
                return handler.url_for(resource_path, versioned=versioned)

        raise ResourceError(f"No mounted handler can resolve '{resource_path}'")

    # =========================================================================
    # REQUEST HANDLING
    # =========================================================================

    def dispatch(self, request: HTTPRequest) -> HTTPResponse:
        """
        Route a request to its handler and return the committed response.
        """
        handler = self.find_handler(request.path)
        if handler is None:
            return not_found(f"No resource handler for {request.path}")

        if request.method not in RESOURCE_METHODS:
            return method_not_allowed(RESOURCE_METHODS)

        context = RouteContext(request)
        try:
            handler.handle(context)
        except ResourceError as e:
            context.response.close()
            logger.exception(f"Failed to serve {request.path}: {e}")
            return internal_error()

        return context.response

    def handle_request(self, request: HTTPRequest) -> HTTPResponse:
        """Run a request through the middleware pipeline and dispatch."""
        if self._pipeline is None:
            self._pipeline = self._middleware.wrap(self.dispatch)
        return self._pipeline(request)

    def __call__(self, environ: dict, start_response: StartResponse) -> Iterable[bytes]:
        """WSGI entry point (PEP 3333)."""
        request = HTTPRequest.from_environ(environ)
        response = self.handle_request(request)

        start_response(response.wsgi_status, response.header_items())

        if request.is_head or not response.status.allows_body:
            response.close()
            return []
        return ResponseBody(response)


# =============================================================================
# FACTORY / RUNNER
# =============================================================================

def create_app(config: Optional[AppConfig] = None) -> ResourceApplication:
    """
    Build an application from configuration.

    Mounts whichever of the public directory, package resources and
    webjars are configured, with access logging in front.

    Raises:
        ConfigError: invalid configuration.
    """
    config = config or AppConfig()
    config.validate()

    app = ResourceApplication(config)
    app.use(LoggingMiddleware(log_format=config.log_format))

    shared = dict(cache_toolkit=app.cache_toolkit, mime_types=app.mime_types)

    if config.public_dir:
        app.mount(file_resources(config.public_dir, url_path=config.public_url_path, **shared))

    if config.resource_package:
        app.mount(public_resources(config.resource_package, url_path=config.resource_url_path, **shared))

    if config.webjars_package:
        app.mount(webjars_resources(config.webjars_package, url_path=config.webjars_url_path, **shared))

    if not app.handlers:
        logger.warning("No resource locations configured; every request will 404")

    return app


def setup_logging(level: str = "INFO") -> None:
    """Configure logging based on config."""
    numeric_level = getattr(logging, level.upper(), logging.INFO)

    logging.basicConfig(
        level=numeric_level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    logging.getLogger("assetserver").setLevel(numeric_level)


class _QuietRequestHandler(WSGIRequestHandler):
    # Access lines come from LoggingMiddleware; keep wsgiref's at DEBUG
    def log_message(self, format: str, *args: Any) -> None:
        logger.debug("wsgiref: " + format % args)


def run(app: ResourceApplication, host: Optional[str] = None, port: Optional[int] = None) -> None:
    """
    Serve the application with wsgiref (blocking, development use).

    For production, hand `app` to any WSGI server instead.
    """
    host = host or app.config.host
    port = app.config.port if port is None else port

    with make_server(host, port, app, handler_class=_QuietRequestHandler) as httpd:
        logger.info(f"Serving resources on http://{host}:{httpd.server_port}")
        for handler in app.handlers:
            logger.info(f"  {handler.url_pattern} -> {handler.resolver!r}")
        try:
            httpd.serve_forever()
        except KeyboardInterrupt:
            logger.info("Received keyboard interrupt")
        finally:
            logger.info("Server stopped")
