"""
=============================================================================
ASSETSERVER - Versioned Static Resources for WSGI Applications
=============================================================================

Serves static resources (files on disk, package data, bundled web
libraries) with cache-busting version fragments and HTTP conditional
caching.

=============================================================================
PROJECT OVERVIEW
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                    ASSETSERVER ARCHITECTURE                         │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   1. VERSION FRAGMENTS                                              │
    │      - css/site.css ⇄ css/site-ver-1699999999000.css                │
    │      - the version is the resource's last-modified time             │
    │                                                                      │
    │   2. RESOLVERS                                                      │
    │      - DirectoryResolver: a directory on disk                       │
    │      - PackageResolver: data shipped inside a Python package        │
    │      - WebjarsResolver: <library>/<version>/ trees, version-free    │
    │        lookups                                                      │
    │                                                                      │
    │   3. CONDITIONAL CACHING                                            │
    │      - ETag + Last-Modified on every resource                       │
    │      - 304 Not Modified without opening the resource                │
    │                                                                      │
    │   4. RESPONSE SINK                                                  │
    │      - status, headers, stream body, exactly one commit             │
    │                                                                      │
    │   5. WSGI APPLICATION                                               │
    │      - prefix mounts, middleware, access logging                    │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
PACKAGE STRUCTURE
=============================================================================

    assetserver/
    ├── __init__.py          # This file - package exports
    ├── __main__.py          # CLI entry point (python -m assetserver)
    ├── app.py               # ResourceApplication, create_app, run
    ├── config.py            # AppConfig dataclass
    ├── resources/           # Where resources live
    │   ├── versioning.py    # -ver-<n> fragments
    │   └── location.py      # ResourceLocation and resolvers
    ├── http/                # HTTP collaborators
    │   ├── request.py       # HTTPRequest from a WSGI environ
    │   ├── response.py      # HTTPResponse sink
    │   ├── cache.py         # HttpCacheToolkit
    │   ├── status_codes.py  # HTTP status enums
    │   └── mime_types.py    # MIME type detection
    ├── middleware/          # Middleware components
    │   ├── base.py          # Base middleware classes
    │   └── logging.py       # Access logging
    └── handlers/            # Request handlers
        └── resource.py      # ResourceHandler and factories

=============================================================================
QUICK START
=============================================================================

    from assetserver import ResourceApplication, file_resources, run

    app = ResourceApplication()
    app.mount(file_resources("./public", url_path="/public"))

    print(app.url_for("css/site.css"))
    # /public/css/site-ver-1699999999000.css

    run(app, port=8080)

=============================================================================
"""

__version__ = "1.0.0"

from .app import ResourceApplication, create_app, run, setup_logging
from .config import AppConfig, ConfigError
from .handlers import (
    ResourceHandler,
    RouteContext,
    file_resources,
    public_resources,
    webjars_resources,
)
from .http import HTTPRequest, HTTPResponse, HttpCacheToolkit, HTTPStatus, MimeTypes
from .resources import (
    DirectoryResolver,
    PackageResolver,
    ResourceError,
    ResourceLocation,
    ResourceResolver,
    WebjarsResolver,
    inject_version,
    remove_version,
)

__all__ = [
    # Application
    "ResourceApplication",
    "create_app",
    "run",
    "setup_logging",
    "AppConfig",
    "ConfigError",

    # Handlers
    "ResourceHandler",
    "RouteContext",
    "file_resources",
    "public_resources",
    "webjars_resources",

    # HTTP
    "HTTPRequest",
    "HTTPResponse",
    "HttpCacheToolkit",
    "HTTPStatus",
    "MimeTypes",

    # Resources
    "DirectoryResolver",
    "PackageResolver",
    "ResourceError",
    "ResourceLocation",
    "ResourceResolver",
    "WebjarsResolver",
    "inject_version",
    "remove_version",

    # Version
    "__version__",
]
