"""Decorator helpers for marking route handler methods.

This module contains only marker helpers; no router mutation happens at
decoration time.

``route(name, pattern, view=None, **options)``
    Returns a decorator storing metadata on the function under
    ``_atto_route_markers`` as a list of dicts. Each payload holds
    ``route_name``, ``pattern``, ``view`` and any extra ``**options``
    (e.g. ``dispatch_coerce=True``).

    - Multiple routes can target the same function by stacking decorators.
    - The decorator returns the original function unchanged aside from the marker.
    - Marked methods are registered, bound to the instance, when an ``Atto``
      subclass is instantiated.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from .router import MARKER_ATTR

__all__ = ["route"]


def route(
    name: str, pattern: str, view: str | None = None, **options: Any
) -> Callable[[Callable], Callable]:
    """Mark a method as the handler of route ``name``.

    Args:
        name: Route name (used by ``assemble`` and ``redirect``).
        pattern: Route pattern, e.g. ``"/posts/:slug[/:page]"``.
        view: Optional template applied when the route matches.
        **options: Extra route options, copied verbatim into the registration.

    Returns:
        Decorator that marks the function for registration.

    Example::

        class Blog(Atto):
            @route("post", "/posts/:slug[/:page]", view="post.html")
            def show(self, slug: str, page: str = "1"):
                self.set_data("post", load_post(slug))

            @route("feed", "/feed.xml")
            @route("atom", "/atom.xml")
            def feed(self):
                return render_feed()
    """

    def decorator(func: Callable) -> Callable:
        markers = list(getattr(func, MARKER_ATTR, []))
        payload: dict[str, Any] = {"route_name": name, "pattern": pattern}
        if view is not None:
            payload["view"] = view
        payload.update(options)
        markers.append(payload)
        setattr(func, MARKER_ATTR, markers)
        return func

    return decorator
