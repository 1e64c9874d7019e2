"""Atto Routes - minimal request routing and view composition for Python.

Public API surface for registering named routes, matching request paths,
assembling URLs back from route names and rendering views inside a layout.

Public exports:
    - ``Atto``: The engine (routes, data, lifecycle callbacks, views)
    - ``route``: Decorator for marking methods of an ``Atto`` subclass
    - ``Router``: The ordered route table
    - ``DispatchOptions``: Timing and argument coercion settings
    - ``RoutePattern``: Pattern grammar compiler, matcher and assembler
    - ``HandlerDescriptor`` / ``HandlerParameter`` / ``call``: Callback binder
    - Exceptions: ``UnknownRoute``, ``MissingRequiredParameter``,
      ``MissingRequiredArgument``, ``MalformedPattern``

Example::

    from atto_routes import Atto

    app = Atto()
    app.add_route("user", "/users[/:id]", handler=lambda id=None: f"user {id}")

    app.run("/users/7")          # "user 7"
    app.assemble("user")         # "/users"
    app.assemble("user", {"id": 7})  # "/users/7"
"""

__version__ = "0.1.0"

from .core import (
    Atto,
    DispatchOptions,
    HandlerDescriptor,
    HandlerParameter,
    Route,
    RouteMatch,
    RoutePattern,
    Router,
    call,
    route,
)
from .exceptions import (
    AttoError,
    MalformedPattern,
    MissingRequiredArgument,
    MissingRequiredParameter,
    UnknownRoute,
)

__all__ = [
    "Atto",
    "DispatchOptions",
    "HandlerDescriptor",
    "HandlerParameter",
    "Route",
    "RouteMatch",
    "RoutePattern",
    "Router",
    "call",
    "route",
    "AttoError",
    "MalformedPattern",
    "MissingRequiredArgument",
    "MissingRequiredParameter",
    "UnknownRoute",
]
