# Copyright 2025 Softwell S.r.l.
# Licensed under the Apache License, Version 2.0

"""Route pattern grammar, matcher and assembler.

A pattern is parsed once into a small tree of nodes and then interpreted two
ways: compiled into an anchored regular expression for matching, and walked
with a parameter map for URL assembly.

Grammar
-------
- literal text: matched and emitted verbatim
- ``:name``: required parameter, one or more characters except ``/``; the name
  is a letter followed by letters, digits or underscores
- ``[...]``: optional segment, may nest and may contain parameters
- ``*`` as the whole pattern: wildcard, matches every path without captures

Example::

    pattern = RoutePattern("/users[/:id]")
    pattern.match("/users/7")          # {"id": "7"}
    pattern.match("/users")            # {}
    pattern.assemble({}, route="user")  # "/users"
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Union

from atto_routes.exceptions import MalformedPattern, MissingRequiredParameter

__all__ = [
    "Literal",
    "Parameter",
    "OptionalSegment",
    "Wildcard",
    "RoutePattern",
    "parse_pattern",
]

WILDCARD = "*"

_NAME_RE = re.compile(r"[A-Za-z][A-Za-z0-9_]*")


@dataclass(frozen=True, slots=True)
class Literal:
    """Verbatim text."""

    text: str


@dataclass(frozen=True, slots=True)
class Parameter:
    """A ``:name`` token."""

    name: str


@dataclass(frozen=True, slots=True)
class OptionalSegment:
    """A bracketed ``[...]`` segment."""

    children: tuple[Node, ...]


@dataclass(frozen=True, slots=True)
class Wildcard:
    """The catch-all ``*`` pattern."""


Node = Union[Literal, Parameter, OptionalSegment, Wildcard]


def parse_pattern(pattern: str) -> tuple[Node, ...]:
    """Parse a pattern string into a tuple of nodes.

    Raises:
        MalformedPattern: If brackets are unbalanced.
    """
    if pattern == WILDCARD:
        return (Wildcard(),)

    stack: list[list[Node]] = [[]]
    buffer: list[str] = []

    def flush() -> None:
        if buffer:
            stack[-1].append(Literal("".join(buffer)))
            buffer.clear()

    index = 0
    while index < len(pattern):
        char = pattern[index]
        if char == "[":
            flush()
            stack.append([])
        elif char == "]":
            if len(stack) == 1:
                raise MalformedPattern(pattern, f"unexpected ']' at position {index}")
            flush()
            children = stack.pop()
            stack[-1].append(OptionalSegment(tuple(children)))
        elif char == ":" and (found := _NAME_RE.match(pattern, index + 1)):
            flush()
            stack[-1].append(Parameter(found.group()))
            index = found.end()
            continue
        else:
            buffer.append(char)
        index += 1

    if len(stack) > 1:
        raise MalformedPattern(pattern, f"{len(stack) - 1} unclosed '['")
    flush()
    return tuple(stack[0])


class RoutePattern:
    """Compiled form of a route pattern.

    Attributes:
        source: The raw pattern string.
        nodes: Parsed node tree.
        regex: Anchored expression used by ``match`` (None for the wildcard).
        parameters: Parameter names in order of first appearance.
    """

    __slots__ = ("source", "nodes", "regex", "parameters")

    def __init__(self, source: str) -> None:
        self.source = source
        self.nodes = parse_pattern(source)
        if self.is_wildcard:
            self.regex: re.Pattern[str] | None = None
            self.parameters: tuple[str, ...] = ()
        else:
            seen: list[str] = []
            self.regex = re.compile(self._expression(self.nodes, seen))
            self.parameters = tuple(seen)

    @property
    def is_wildcard(self) -> bool:
        return self.nodes == (Wildcard(),)

    @property
    def required(self) -> tuple[str, ...]:
        """Parameter names that appear outside every optional segment."""
        names: list[str] = []
        for node in self.nodes:
            if isinstance(node, Parameter) and node.name not in names:
                names.append(node.name)
        return tuple(names)

    # ------------------------------------------------------------------
    # Matching
    # ------------------------------------------------------------------
    def _expression(self, nodes: tuple[Node, ...], seen: list[str]) -> str:
        parts: list[str] = []
        for node in nodes:
            if isinstance(node, Literal):
                parts.append(re.escape(node.text))
            elif isinstance(node, Parameter):
                # A repeated name must capture the same text again.
                if node.name in seen:
                    parts.append(f"(?P={node.name})")
                else:
                    seen.append(node.name)
                    parts.append(f"(?P<{node.name}>[^/]+)")
            elif isinstance(node, OptionalSegment):
                inner = self._expression(node.children, seen)
                if inner:
                    parts.append(f"(?:{inner})?")
        return "".join(parts)

    def match(self, path: str) -> dict[str, str] | None:
        """Return the named captures if ``path`` matches, else None.

        Optional groups that did not take part in the match are omitted.
        """
        if self.regex is None:
            return {}
        found = self.regex.fullmatch(path)
        if found is None:
            return None
        return {name: value for name, value in found.groupdict().items() if value is not None}

    # ------------------------------------------------------------------
    # Assembly
    # ------------------------------------------------------------------
    def assemble(self, parameters: Mapping[str, Any] | None = None, *, route: str = "") -> str:
        """Substitute ``parameters`` into the pattern.

        Optional segments whose parameters are not all present are dropped,
        nested segments first. A missing parameter outside every optional
        segment raises ``MissingRequiredParameter``. ``None`` values count
        as missing.
        """
        if self.is_wildcard:
            return self.source
        return self._substitute(self.nodes, parameters or {}, route, optional=False) or ""

    def _substitute(
        self,
        nodes: tuple[Node, ...],
        parameters: Mapping[str, Any],
        route: str,
        *,
        optional: bool,
    ) -> str | None:
        parts: list[str] = []
        for node in nodes:
            if isinstance(node, Literal):
                parts.append(node.text)
            elif isinstance(node, OptionalSegment):
                parts.append(
                    self._substitute(node.children, parameters, route, optional=True) or ""
                )
            elif isinstance(node, Parameter):
                value = parameters.get(node.name)
                if value is None:
                    if optional:
                        return None
                    raise MissingRequiredParameter(node.name, route)
                parts.append(str(value))
        return "".join(parts)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, RoutePattern):
            return self.source == other.source
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self.source)

    def __repr__(self) -> str:
        return f"RoutePattern({self.source!r})"
