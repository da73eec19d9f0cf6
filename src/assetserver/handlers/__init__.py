"""
=============================================================================
HANDLERS MODULE
=============================================================================

Built-in request handlers.

    ┌─────────────────────────────────────────────────────────────────────┐
    │ Type              │ Use Case                                        │
    ├─────────────────────────────────────────────────────────────────────┤
    │ Class Handler     │ ResourceHandler - any resolver, versioned URLs  │
    ├─────────────────────────────────────────────────────────────────────┤
    │ Factory Function  │ public_resources("myapp")                      │
    │                   │ webjars_resources("myapp.vendor")              │
    │                   │ file_resources("./public")                     │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
USAGE EXAMPLES
=============================================================================

    from assetserver.handlers import file_resources

    static = file_resources("/var/www/static", url_path="/static")
    app.mount(static)

    static.url_for("app.js")   # "/static/app-ver-1699999999000.js"

=============================================================================
"""

from .resource import (
    RESOURCE_PATH_PARAM,
    ResourceHandler,
    RouteContext,
    file_resources,
    public_resources,
    webjars_resources,
)

__all__ = [
    "RESOURCE_PATH_PARAM",
    "ResourceHandler",
    "RouteContext",
    "file_resources",
    "public_resources",
    "webjars_resources",
]
