# Copyright 2025 Softwell S.r.l.
# Licensed under the Apache License, Version 2.0

"""View renderer for Atto Routes.

A view or layout identifier is either the name of a template file below the
template directory or a literal string. Existing files are rendered with
Jinja2; anything else is returned unchanged, so a route can use a short
literal body as its view.

The template context holds the receiver's data (when it exposes a ``data``
mapping) plus the receiver itself as ``app``::

    {# layout.html #}
    <title>{{ title }}</title>
    <main>{{ view }}</main>
    <a href="{{ app.assemble('home') }}">home</a>

Rendering either returns the whole output or raises; no partial output
escapes a failing template.
"""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from typing import Any

from jinja2 import Environment, FileSystemLoader, StrictUndefined, Undefined

__all__ = ["ViewRenderer"]


class ViewRenderer:
    """Render template files or echo literal strings.

    Attributes:
        template_dir: Root directory for template lookup.
        environment: The Jinja2 environment used for files.
    """

    __slots__ = ("template_dir", "environment")

    def __init__(
        self,
        template_dir: str | Path = ".",
        *,
        autoescape: bool = False,
        strict: bool = False,
    ) -> None:
        self.template_dir = Path(template_dir)
        self.environment = Environment(
            loader=FileSystemLoader(str(self.template_dir)),
            autoescape=autoescape,
            undefined=StrictUndefined if strict else Undefined,
            keep_trailing_newline=True,
        )

    def exists(self, filename: str) -> bool:
        """True if ``filename`` names a template file."""
        try:
            return (self.template_dir / filename).is_file()
        except (OSError, ValueError):
            return False

    def render(self, filename: str, receiver: Any = None) -> str:
        """Render ``filename`` for ``receiver``, or return it literally."""
        if not self.exists(filename):
            return filename
        path = Path(filename)
        if path.is_absolute():
            template = self.environment.from_string(path.read_text(encoding="utf-8"))
        else:
            template = self.environment.get_template(path.as_posix())
        return template.render(self.context(receiver))

    def context(self, receiver: Any) -> dict[str, Any]:
        data = getattr(receiver, "data", None)
        context: dict[str, Any] = dict(data) if isinstance(data, Mapping) else {}
        context["app"] = receiver
        return context
