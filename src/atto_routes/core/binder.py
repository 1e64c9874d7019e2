# Copyright 2025 Softwell S.r.l.
# Licensed under the Apache License, Version 2.0

"""Dynamic callback binder.

Handlers are invoked with values looked up by parameter name. Each formal
parameter, in declaration order, receives:

1. the value supplied under its name, else
2. its declared default, else
3. ``None`` when its annotation allows it (unannotated, ``Any``, ``None``,
   ``Optional[X]`` or ``X | None``), else
4. ``MissingRequiredArgument`` is raised.

Receiver passing
----------------
A plain function whose first positional parameter is named ``self`` is
treated as if it were a method of the receiver: the caller-supplied receiver
is passed in that slot. Bound methods already carry their own receiver.

Descriptors are normally built by introspection (``describe``) but can be
declared explicitly::

    descriptor = HandlerDescriptor(
        [HandlerParameter("slug"), HandlerParameter("page", has_default=True, default=1)],
        receiver=True,
    )
    call(handler, app, {"slug": "intro"}, descriptor=descriptor)
"""

from __future__ import annotations

import inspect
import types
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass
from typing import Any, Union, get_args, get_origin, get_type_hints

from atto_routes.exceptions import MissingRequiredArgument

__all__ = ["HandlerParameter", "HandlerDescriptor", "describe", "call"]

_EMPTY = inspect.Parameter.empty
_POSITIONAL = (inspect.Parameter.POSITIONAL_ONLY, inspect.Parameter.POSITIONAL_OR_KEYWORD)
_NONE_TYPE = type(None)


@dataclass(frozen=True, slots=True)
class HandlerParameter:
    """Binding metadata for one formal parameter."""

    name: str
    has_default: bool = False
    default: Any = None
    nullable: bool = False
    keyword_only: bool = False


class HandlerDescriptor:
    """Ordered parameter metadata for a handler.

    Attributes:
        parameters: Bindable parameters in declaration order.
        receiver: True if the first positional slot takes the receiver.
        accepts_kwargs: True if unconsumed arguments go to ``**kwargs``.
        name: Handler name used in error messages.
    """

    __slots__ = ("parameters", "receiver", "accepts_kwargs", "name")

    def __init__(
        self,
        parameters: Iterable[HandlerParameter] = (),
        *,
        receiver: bool = False,
        accepts_kwargs: bool = False,
        name: str = "<handler>",
    ) -> None:
        self.parameters: tuple[HandlerParameter, ...] = tuple(parameters)
        self.receiver = receiver
        self.accepts_kwargs = accepts_kwargs
        self.name = name

    @classmethod
    def from_callable(cls, func: Callable[..., Any]) -> HandlerDescriptor:
        """Build a descriptor by inspecting ``func``'s signature."""
        sig = inspect.signature(func)
        try:
            hints = get_type_hints(func)
        except Exception:
            hints = {}

        parameters: list[HandlerParameter] = []
        receiver = False
        accepts_kwargs = False
        for index, (name, param) in enumerate(sig.parameters.items()):
            if param.kind is inspect.Parameter.VAR_POSITIONAL:
                continue
            if param.kind is inspect.Parameter.VAR_KEYWORD:
                accepts_kwargs = True
                continue
            if index == 0 and name == "self" and param.kind in _POSITIONAL:
                receiver = True
                continue
            has_default = param.default is not _EMPTY
            parameters.append(
                HandlerParameter(
                    name=name,
                    has_default=has_default,
                    default=param.default if has_default else None,
                    nullable=_is_nullable(hints.get(name, param.annotation)),
                    keyword_only=param.kind is inspect.Parameter.KEYWORD_ONLY,
                )
            )
        return cls(
            parameters,
            receiver=receiver,
            accepts_kwargs=accepts_kwargs,
            name=_handler_name(func),
        )

    @property
    def names(self) -> tuple[str, ...]:
        return tuple(p.name for p in self.parameters)

    def bind(self, arguments: Mapping[str, Any] | None = None) -> tuple[list[Any], dict[str, Any]]:
        """Resolve ``arguments`` into positional and keyword call arguments.

        Raises:
            MissingRequiredArgument: If a parameter has no value, no default
                and is not nullable.
        """
        arguments = arguments or {}
        args: list[Any] = []
        kwargs: dict[str, Any] = {}
        for parameter in self.parameters:
            if parameter.name in arguments:
                value = arguments[parameter.name]
            elif parameter.has_default:
                value = parameter.default
            elif parameter.nullable:
                value = None
            else:
                raise MissingRequiredArgument(parameter.name, self.name)
            if parameter.keyword_only:
                kwargs[parameter.name] = value
            else:
                args.append(value)
        if self.accepts_kwargs:
            known = set(self.names)
            if self.receiver:
                known.add("self")
            kwargs.update((k, v) for k, v in arguments.items() if k not in known)
        return args, kwargs

    def invoke(
        self,
        func: Callable[..., Any],
        receiver: Any = None,
        arguments: Mapping[str, Any] | None = None,
    ) -> Any:
        """Bind ``arguments`` and call ``func``, passing ``receiver`` if described."""
        args, kwargs = self.bind(arguments)
        if self.receiver:
            args.insert(0, receiver)
        return func(*args, **kwargs)

    def __repr__(self) -> str:
        return f"HandlerDescriptor({self.name!r}, {list(self.names)!r}, receiver={self.receiver})"


def describe(func: Callable[..., Any]) -> HandlerDescriptor:
    """Shortcut for ``HandlerDescriptor.from_callable``."""
    return HandlerDescriptor.from_callable(func)


def call(
    handler: Callable[..., Any],
    receiver: Any = None,
    arguments: Mapping[str, Any] | None = None,
    *,
    descriptor: HandlerDescriptor | None = None,
) -> Any:
    """Invoke ``handler`` with name-keyed ``arguments`` and ``receiver``."""
    descriptor = descriptor or HandlerDescriptor.from_callable(handler)
    return descriptor.invoke(handler, receiver, arguments)


def _is_nullable(annotation: Any) -> bool:
    if annotation is _EMPTY or annotation is Any or annotation is None or annotation is _NONE_TYPE:
        return True
    if isinstance(annotation, str):
        # Unresolvable forward reference: read the annotation text.
        text = annotation.replace(" ", "")
        return (
            text in ("None", "Any", "typing.Any")
            or text.startswith(("Optional[", "typing.Optional["))
            or "|None" in text
            or "None|" in text
        )
    origin = get_origin(annotation)
    if origin is Union or origin is types.UnionType:
        return _NONE_TYPE in get_args(annotation)
    return False


def _handler_name(func: Callable[..., Any]) -> str:
    return getattr(func, "__qualname__", None) or getattr(func, "__name__", None) or repr(func)
