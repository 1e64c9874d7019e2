"""Core runtime aggregator for Atto Routes.

Exposes the runtime building blocks from a single module.

Public API:
    - ``RoutePattern``: Compiled pattern (matcher and assembler)
    - ``Router``: Ordered route table
    - ``DispatchOptions``: Per-router and per-route handler call options
    - ``HandlerDescriptor`` / ``HandlerParameter``: Callback binder metadata
    - ``call``: Invoke a handler with name-bound arguments
    - ``route``: Decorator for marking handler methods
    - ``Atto``: The engine (route table, data, callbacks, views)
"""

from .atto import Atto
from .binder import HandlerDescriptor, HandlerParameter, call, describe
from .decorators import route
from .dispatch import ArgumentCoercer, DispatchOptions
from .pattern import RoutePattern, parse_pattern
from .renderer import ViewRenderer
from .route import Route, RouteMatch
from .router import Router

__all__ = [
    "ArgumentCoercer",
    "Atto",
    "DispatchOptions",
    "HandlerDescriptor",
    "HandlerParameter",
    "Route",
    "RouteMatch",
    "RoutePattern",
    "Router",
    "ViewRenderer",
    "call",
    "describe",
    "parse_pattern",
    "route",
]
