"""Route table for Atto Routes.

This module exposes :class:`Router`, which keeps named routes in
registration order, matches request paths against them, assembles URLs from
route names and calls matched handlers through the callback binder.

Constructor and slots
---------------------
Constructor signature::

    Router(owner=None, name=None, *, description=None, dispatch=None)

- ``owner``: default receiver passed to handlers whose first parameter is
  ``self``. Methods marked with ``@route`` on the owner's class are
  registered by ``add_marked()``.
- ``dispatch``: default ``DispatchOptions`` (or a mapping of them) for every
  route of this router.
- Slots: ``owner``, ``name``, ``description``, ``defaults``, ``_routes``
  (name → Route, in registration order).

Route table
-----------
``add_route`` compiles the pattern, describes the handler and validates the
dispatch options before touching the table, so a failed registration leaves
the previous route (if any) in place. Registering an existing name replaces
the whole route but keeps its original position in the table.

Matching
--------
``match(path)`` strips the query string and tries every route in
registration order; the first route whose pattern accepts the whole path
wins. A ``*`` route accepts everything, so register catch-alls last. No
match returns None.

Assembly
--------
``assemble(name, parameters)`` raises ``UnknownRoute`` for an unregistered
name and ``MissingRequiredParameter`` when a parameter outside all optional
segments is absent. Optional segments with absent parameters are dropped.

Dispatch
--------
``dispatch(match, receiver)`` coerces the captures when the route asks for
it, then calls the handler, logging start and end with the elapsed time
unless the route turned timing off.
"""

from __future__ import annotations

import inspect
import logging
import re
import time
from collections.abc import Callable, Iterator, Mapping
from typing import Any

from atto_routes.exceptions import UnknownRoute

from .binder import HandlerDescriptor
from .dispatch import ArgumentCoercer, DispatchOptions, route_overrides
from .pattern import RoutePattern
from .route import Route, RouteMatch

__all__ = ["Router"]

MARKER_ATTR = "_atto_route_markers"

logger = logging.getLogger("atto_routes")


class Router:
    """Ordered route table.

    Responsibilities:
        - Register routes by name (overwrite on repeated names)
        - Match paths in registration order and extract captures
        - Assemble URLs from route names and parameter maps
        - Call matched handlers with captures bound by name
    """

    __slots__ = ("owner", "name", "description", "defaults", "_routes")

    def __init__(
        self,
        owner: Any = None,
        name: str | None = None,
        *,
        description: str | None = None,
        dispatch: DispatchOptions | Mapping[str, Any] | None = None,
    ) -> None:
        self.owner = owner
        self.name = name
        self.description = description
        if isinstance(dispatch, DispatchOptions):
            self.defaults = dispatch
        else:
            self.defaults = DispatchOptions.model_validate(dict(dispatch or {}))
        self._routes: dict[str, Route] = {}

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------
    def add_route(
        self,
        name: str,
        pattern: str,
        view: str | None = None,
        handler: Callable[..., Any] | None = None,
        *,
        descriptor: HandlerDescriptor | None = None,
        **options: Any,
    ) -> Router:
        """Register (or replace) a route.

        Args:
            name: Unique route name.
            pattern: Route pattern (see ``atto_routes.core.pattern``).
            view: Template identifier used when the route matches.
            handler: Callable invoked with the captured parameters.
            descriptor: Explicit binding metadata; introspected from
                ``handler`` when omitted.
            **options: Route metadata. ``dispatch_``-prefixed keys
                (e.g. ``dispatch_log=False``) override the router's
                dispatch defaults for this route.

        Returns:
            self (for method chaining).

        Raises:
            ValueError: If ``name`` is empty.
            MalformedPattern: If ``pattern`` has unbalanced brackets.
            pydantic.ValidationError: If a dispatch override is invalid.
        """
        if not name or not isinstance(name, str):
            raise ValueError("Route name must be a non-empty string")
        compiled = RoutePattern(pattern)
        if handler is not None and descriptor is None:
            descriptor = HandlerDescriptor.from_callable(handler)
        settings = self.defaults.merged(route_overrides(options))
        coercer = None
        if handler is not None and descriptor is not None and settings.coerce:
            coercer = ArgumentCoercer.for_handler(handler, descriptor.names)
        self._routes[name] = Route(
            name=name,
            pattern=compiled,
            view=view,
            handler=handler,
            descriptor=descriptor,
            options=dict(options),
            dispatch=settings,
            coercer=coercer,
        )
        return self

    def add_marked(self) -> Router:
        """Register every ``@route``-marked method of the owner's class.

        Methods are bound to the owner. Derived classes win over their bases
        when they redefine a method with the same attribute name.
        """
        for func, marker in self._iter_marked_methods():
            payload = dict(marker)
            bound = func.__get__(self.owner, type(self.owner))
            self.add_route(
                payload.pop("route_name"),
                payload.pop("pattern"),
                payload.pop("view", None),
                bound,
                **payload,
            )
        return self

    def _iter_marked_methods(self) -> Iterator[tuple[Callable[..., Any], dict[str, Any]]]:
        if self.owner is None:
            return
        seen_names: set[str] = set()
        for base in type(self.owner).__mro__:
            for attr_name, value in vars(base).items():
                if not inspect.isfunction(value) or attr_name in seen_names:
                    continue
                seen_names.add(attr_name)
                for marker in getattr(value, MARKER_ATTR, ()):
                    yield value, marker

    def get_route(self, name: str) -> Route | None:
        """Return the route registered under ``name`` or None."""
        return self._routes.get(name)

    @property
    def routes(self) -> list[Route]:
        """Registered routes in matching order."""
        return list(self._routes.values())

    def __contains__(self, name: object) -> bool:
        return name in self._routes

    # ------------------------------------------------------------------
    # Matching and assembly
    # ------------------------------------------------------------------
    def match(self, path: str) -> RouteMatch | None:
        """Return the first route (registration order) accepting ``path``."""
        path = path.split("?", 1)[0]
        for route in self._routes.values():
            params = route.pattern.match(path)
            if params is not None:
                return RouteMatch(route=route, params=params)
        return None

    def assemble(self, name: str, parameters: Mapping[str, Any] | None = None) -> str:
        """Build the URL of route ``name`` from ``parameters``.

        Raises:
            UnknownRoute: If no route is registered under ``name``.
            MissingRequiredParameter: If a required parameter is absent.
        """
        route = self._routes.get(name)
        if route is None:
            raise UnknownRoute(name)
        return route.pattern.assemble(parameters, route=name)

    # ------------------------------------------------------------------
    # Invocation
    # ------------------------------------------------------------------
    def dispatch(self, match: RouteMatch, receiver: Any = None) -> Any:
        """Call the matched route's handler with its captures.

        Args:
            match: Result of ``match()``.
            receiver: Object passed to a ``self`` first parameter; defaults
                to the router owner.

        Returns:
            The handler result, or None when the route has no handler.
        """
        route = match.route
        if route.handler is None or route.descriptor is None:
            return None
        if receiver is None:
            receiver = self.owner
        arguments: Mapping[str, Any] = match.params
        if route.coercer is not None:
            arguments = route.coercer.coerce(arguments)
        if not route.dispatch.log:
            return route.descriptor.invoke(route.handler, receiver, arguments)

        level = getattr(logging, route.dispatch.log_level)
        logger.log(level, "%s start", route.name)
        started = time.perf_counter()
        result = route.descriptor.invoke(route.handler, receiver, arguments)
        logger.log(level, "%s end (%.2f ms)", route.name, (time.perf_counter() - started) * 1000)
        return result

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------
    def nodes(self, pattern: str | None = None) -> dict[str, Any]:
        """Return introspection data for the route table.

        Args:
            pattern: Regex filter applied to route names.

        Returns:
            Dict with ``name``, ``description`` and, when non-empty, ``routes``
            (name → description, in matching order).
        """
        regex = re.compile(pattern) if pattern else None
        routes = {
            route.name: self._describe_route(route)
            for route in self._routes.values()
            if regex is None or regex.search(route.name)
        }
        result: dict[str, Any] = {"name": self.name, "description": self.description}
        if routes:
            result["routes"] = routes
        return result

    def _describe_route(self, route: Route) -> dict[str, Any]:
        handler = route.handler
        description: dict[str, Any] = {
            "name": route.name,
            "pattern": route.pattern.source,
            "view": route.view,
            "parameters": list(route.pattern.parameters),
            "required": list(route.pattern.required),
            "handler": route.descriptor.name if route.descriptor else None,
            "doc": (inspect.getdoc(handler) or "") if handler is not None else "",
            "dispatch": route.dispatch.model_dump(),
        }
        if route.options:
            description["options"] = dict(route.options)
        return description

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r}, routes={list(self._routes)!r})"
