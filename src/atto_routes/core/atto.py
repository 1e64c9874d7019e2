# Copyright 2025 Softwell S.r.l.
# Licensed under the Apache License, Version 2.0

"""Atto - request routing and view composition engine.

``Atto`` owns a route table, a data container, lifecycle callbacks and the
view/layout pair, and turns one request path into one response body.

Request lifecycle (``run``)
---------------------------
1. ``start`` callback; a truthy return is the response.
2. Match the path; a matched route's view replaces the current view and its
   handler is called with the captures (a truthy return is the response).
3. Render the view and store it as data ``view``; render the layout.
4. ``finish`` callback with ``render``; a truthy return is the response.
5. Any exception goes to the ``error`` callback as ``error`` (also
   ``throwable``); its truthy
   return is the response, otherwise the exception message is. If the error
   callback raises too, that message is the response.

Handlers and callbacks are bound by parameter name. A plain function whose
first parameter is ``self`` receives the engine in that slot, so it can use
``self.view``, ``self.set_data()`` or ``self.assemble()``.

Example::

    from atto_routes import Atto, route

    class Site(Atto):
        @route("post", "/posts/:slug[/:page]", view="post.html")
        def show(self, slug: str, page: str = "1"):
            self.set_data("title", slug.replace("-", " ").title())

    site = Site(layout="layout.html", template_dir="templates")
    site.on_error(lambda error: f"<h1>Oops</h1><p>{error}</p>")
    body = site.run("/posts/hello-world?ref=rss")
    site.assemble("post", {"slug": "hello-world"})  # "/posts/hello-world"
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from pathlib import Path
from typing import Any

from markupsafe import Markup

from .binder import HandlerDescriptor
from .binder import call as call_handler
from .dispatch import DispatchOptions
from .renderer import ViewRenderer
from .route import Route, RouteMatch
from .router import Router

__all__ = ["Atto"]

logger = logging.getLogger("atto_routes")


class Atto:
    """Routing and view-composition engine.

    Attributes:
        view: Template (or literal) rendered as the main view.
        layout: Template (or literal) wrapping the rendered view.
        data: Values exposed to templates and handlers.
        status: Status code set by ``redirect`` (200 until then).
        headers: Response headers set by ``redirect``.
        router: The route table.
        renderer: The view renderer.
    """

    CALLBACK_ON_START = "start"
    CALLBACK_ON_FINISH = "finish"
    CALLBACK_ON_ERROR = "error"

    def __init__(
        self,
        *,
        view: str | None = None,
        layout: str | None = None,
        template_dir: str | Path = ".",
        autoescape: bool = False,
        dispatch: DispatchOptions | Mapping[str, Any] | None = None,
        name: str | None = None,
    ) -> None:
        self.view = view
        self.layout = layout
        self.data: dict[str, Any] = {}
        self.status = 200
        self.headers: dict[str, str] = {}
        self._callbacks: dict[str, Callable[..., Any]] = {}
        self.renderer = ViewRenderer(template_dir, autoescape=autoescape)
        self.router = Router(self, name=name or type(self).__name__, dispatch=dispatch)
        self.router.add_marked()

    # ------------------------------------------------------------------
    # Data and callbacks
    # ------------------------------------------------------------------
    def set_data(self, name: str, value: Any) -> Atto:
        self.data[name] = value
        return self

    def get_data(self, name: str, default: Any = None) -> Any:
        return self.data.get(name, default)

    def callback(
        self, event: str, func: Callable[..., Any] | None = None
    ) -> Callable[..., Any] | None | Atto:
        """Register the callback for ``event``, or return it when ``func`` is None."""
        if func is None:
            return self._callbacks.get(event)
        self._callbacks[event] = func
        return self

    def on_start(self, func: Callable[..., Any]) -> Callable[..., Any]:
        """Register ``func`` as the start callback (usable as a decorator)."""
        self._callbacks[self.CALLBACK_ON_START] = func
        return func

    def on_finish(self, func: Callable[..., Any]) -> Callable[..., Any]:
        """Register ``func`` as the finish callback; it may take ``render``."""
        self._callbacks[self.CALLBACK_ON_FINISH] = func
        return func

    def on_error(self, func: Callable[..., Any]) -> Callable[..., Any]:
        """Register ``func`` as the error callback; it may take ``error`` or ``throwable``."""
        self._callbacks[self.CALLBACK_ON_ERROR] = func
        return func

    # ------------------------------------------------------------------
    # Routes
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
    ) -> Atto:
        """Register (or replace) a route. See ``Router.add_route``."""
        self.router.add_route(name, pattern, view, handler, descriptor=descriptor, **options)
        return self

    def get_route(self, name: str) -> Route | None:
        return self.router.get_route(name)

    def match(self, path: str) -> RouteMatch | None:
        return self.router.match(path)

    def assemble(self, name: str, parameters: Mapping[str, Any] | None = None) -> str:
        return self.router.assemble(name, parameters)

    def redirect(
        self, url: str, parameters: Mapping[str, Any] | None = None, status: int | None = None
    ) -> None:
        """Point the response at ``url`` (a route name or a literal URL).

        Sets ``headers["Location"]`` and ``status`` (301 by default).
        """
        if url in self.router:
            url = self.assemble(url, parameters)
        self.headers["Location"] = url
        self.status = status or 301

    # ------------------------------------------------------------------
    # Rendering and invocation
    # ------------------------------------------------------------------
    def render(self, filename: str, receiver: Any = None) -> str:
        """Render a template file for ``receiver`` (the engine by default)."""
        return self.renderer.render(filename, self if receiver is None else receiver)

    def call(
        self,
        callback: Callable[..., Any],
        receiver: Any = None,
        arguments: Mapping[str, Any] | None = None,
    ) -> Any:
        """Invoke ``callback`` with name-bound ``arguments`` and ``receiver``."""
        return call_handler(callback, self if receiver is None else receiver, arguments)

    def run(self, path: str) -> str:
        """Process one request path and return the response body."""
        try:
            callback = self.callback(self.CALLBACK_ON_START)
            if callback is not None:
                result = self.call(callback, self)
                if result:
                    return str(result)

            match = self.match(path)
            if match is not None:
                if match.route.view:
                    self.view = match.route.view
                if match.route.handler is not None:
                    result = self.router.dispatch(match, self)
                    if result:
                        return str(result)

            rendered = ""
            if self.view:
                rendered = self.render(self.view, self)
                self.data["view"] = Markup(rendered)
            if self.layout:
                rendered = self.render(self.layout, self)

            callback = self.callback(self.CALLBACK_ON_FINISH)
            if callback is not None:
                result = self.call(callback, self, {"render": rendered})
                if result:
                    return str(result)

            return rendered
        except Exception as exc:
            logger.debug("Request %r failed", path, exc_info=True)
            try:
                callback = self.callback(self.CALLBACK_ON_ERROR)
                if callback is not None:
                    result = self.call(callback, self, {"error": exc, "throwable": exc})
                    if result:
                        return str(result)
            except Exception as error:
                return str(error)
            return str(exc)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(routes={[r.name for r in self.router.routes]!r})"
