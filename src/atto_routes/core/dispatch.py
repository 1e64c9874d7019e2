# Copyright 2025 Softwell S.r.l.
# Licensed under the Apache License, Version 2.0

"""Dispatch options and argument coercion.

Calling a matched route's handler can involve two optional steps:

- timing: ``"<route> start"`` and ``"<route> end (x.xx ms)"`` records on the
  ``atto_routes`` logger, at ``log_level``;
- coercion: captured strings are validated against the handler's type hints
  with a pydantic model, so ``"7"`` reaches ``id: int`` as ``7``.

A router's defaults come from its ``dispatch`` argument. A route overrides
them with ``dispatch_``-prefixed registration options::

    router = Router(dispatch={"coerce": True})
    router.add_route("raw", "/raw/:id", handler=show, dispatch_coerce=False)

Unknown keys and wrong value types raise ``pydantic.ValidationError`` when
the route is registered.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from typing import Any, Literal, get_type_hints

from genro_toolbox import dictExtract
from pydantic import BaseModel, ConfigDict, create_model

__all__ = ["OPTION_PREFIX", "DispatchOptions", "ArgumentCoercer", "route_overrides"]

OPTION_PREFIX = "dispatch_"


class DispatchOptions(BaseModel):
    """How a route's handler is called.

    Attributes:
        log: Emit start/end timing records.
        log_level: Level of the timing records.
        coerce: Validate captures against the handler's annotations.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    log: bool = True
    log_level: Literal["DEBUG", "INFO", "WARNING"] = "DEBUG"
    coerce: bool = False

    def merged(self, overrides: Mapping[str, Any]) -> DispatchOptions:
        """Return these options updated with ``overrides``, validated."""
        if not overrides:
            return self
        return DispatchOptions.model_validate({**self.model_dump(), **overrides})


def route_overrides(options: Mapping[str, Any]) -> dict[str, Any]:
    """Pick the ``dispatch_*`` registration options, prefix removed."""
    return dictExtract(dict(options), OPTION_PREFIX, slice_prefix=True, pop=False) or {}


class ArgumentCoercer:
    """Validates named arguments with a model built from handler hints."""

    __slots__ = ("model",)

    def __init__(self, model: type[BaseModel]) -> None:
        self.model = model

    @classmethod
    def for_handler(
        cls, handler: Callable[..., Any], names: Iterable[str]
    ) -> ArgumentCoercer | None:
        """Build a coercer for the annotated ``names`` of ``handler``.

        Returns None when none of them carries a resolvable annotation.
        """
        try:
            hints = get_type_hints(handler)
        except (NameError, TypeError):
            return None
        fields: dict[str, Any] = {
            name: (hints[name], None)
            for name in names
            if name in hints and not name.startswith("_")
        }
        if not fields:
            return None
        return cls(create_model("HandlerArguments", **fields))

    def coerce(self, arguments: Mapping[str, Any]) -> dict[str, Any]:
        """Return ``arguments`` with every annotated value validated.

        Raises:
            pydantic.ValidationError: If a value does not fit its annotation.
        """
        present = {k: v for k, v in arguments.items() if k in self.model.model_fields}
        if not present:
            return dict(arguments)
        validated = self.model.model_validate(present)
        return {**arguments, **{name: getattr(validated, name) for name in present}}
