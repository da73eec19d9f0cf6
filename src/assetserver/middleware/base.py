"""
=============================================================================
MIDDLEWARE BASE
=============================================================================

Middleware runs around ResourceApplication.dispatch, so concerns such as
access logging stay out of the resource handlers.

    ┌─────────────────────────────────────────────────────────────────┐
    │  LoggingMiddleware                                              │
    │  ┌───────────────────────────────────────────────────────────┐  │
    │  │  ...                                                      │  │
    │  │  ┌─────────────────────────────────────────────────────┐  │  │
    │  │  │         ResourceApplication.dispatch                │  │  │
    │  │  └─────────────────────────────────────────────────────┘  │  │
    │  └───────────────────────────────────────────────────────────┘  │
    └─────────────────────────────────────────────────────────────────┘

The request travels inward in the order middleware was added; the
committed response travels back out. Middleware that touches the response
on the way out must remember it is usually committed already, so only
plain header assignment is possible there.

=============================================================================
"""

import logging
from abc import ABC, abstractmethod
from typing import Callable, List

from ..http.request import HTTPRequest
from ..http.response import HTTPResponse


logger = logging.getLogger(__name__)


# Dispatch function, or the rest of the chain in front of it
NextHandler = Callable[[HTTPRequest], HTTPResponse]


class Middleware(ABC):
    """
    One layer around dispatch.

    Implementations call next(request) to continue, or return their own
    response to short-circuit.
    """

    @abstractmethod
    def __call__(self, request: HTTPRequest, next: NextHandler) -> HTTPResponse:
        ...

    @property
    def name(self) -> str:
        return type(self).__name__


def _bind(middleware: Middleware, inner: NextHandler) -> NextHandler:
    def layer(request: HTTPRequest) -> HTTPResponse:
        return middleware(request, inner)
    layer.__name__ = middleware.name
    return layer


class MiddlewarePipeline:
    """
    Ordered middleware, first added outermost.

        pipeline = MiddlewarePipeline().add(LoggingMiddleware())
        handle = pipeline.wrap(app.dispatch)
        response = handle(request)
    """

    def __init__(self):
        self._layers: List[Middleware] = []

    def add(self, middleware: Middleware) -> "MiddlewarePipeline":
        """
        Append a layer inside the ones already added.

        Returns:
            Self for method chaining
        """
        self._layers.append(middleware)
        logger.debug(f"Added middleware: {middleware.name}")
        return self

    def wrap(self, dispatch: NextHandler) -> NextHandler:
        """Build the chain around dispatch, innermost layer first."""
        chain = dispatch
        for middleware in self._layers[::-1]:
            chain = _bind(middleware, chain)
        return chain

    def __len__(self) -> int:
        return len(self._layers)
