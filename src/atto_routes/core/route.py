"""Route and RouteMatch records."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from .binder import HandlerDescriptor
from .dispatch import ArgumentCoercer, DispatchOptions
from .pattern import RoutePattern

__all__ = ["Route", "RouteMatch"]


@dataclass(frozen=True)
class Route:
    """A registered route.

    Every field is fixed at registration; replacing a route replaces the
    whole record.

    Attributes:
        name: Unique route name (key in the route table).
        pattern: Compiled pattern; ``pattern.source`` is the raw string.
        view: Template identifier applied when the route matches.
        handler: Callable invoked when the route matches.
        descriptor: Binding metadata for ``handler`` (None without handler).
        options: Keyword options given at registration.
        dispatch: Effective dispatch options (router defaults plus overrides).
        coercer: Argument validator, present when coercion applies.
    """

    name: str
    pattern: RoutePattern
    view: str | None = None
    handler: Callable[..., Any] | None = None
    descriptor: HandlerDescriptor | None = None
    options: dict[str, Any] = field(default_factory=dict, compare=False)
    dispatch: DispatchOptions = field(default_factory=DispatchOptions, compare=False)
    coercer: ArgumentCoercer | None = field(default=None, compare=False)

    @property
    def path(self) -> str:
        return self.pattern.source


@dataclass(frozen=True, slots=True)
class RouteMatch:
    """Result of a successful match: the route and its captured strings."""

    route: Route
    params: dict[str, str]
