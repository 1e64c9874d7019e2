# Copyright 2025 Softwell S.r.l. - All Rights Reserved
# SPDX-License-Identifier: Apache-2.0
"""Exceptions for Atto Routes.

This module defines custom exceptions used throughout the routing engine.
Matching never raises: a path no route accepts is a ``None`` result. The
errors below signal programming or configuration mistakes and propagate to
the caller unchanged.
"""

__all__ = [
    "AttoError",
    "UnknownRoute",
    "MissingRequiredParameter",
    "MissingRequiredArgument",
    "MalformedPattern",
]


class AttoError(Exception):
    """Base class for all Atto Routes errors."""


class UnknownRoute(AttoError, LookupError):
    """Raised when a route name was never registered.

    Attributes:
        name: The route name that was looked up.
    """

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(
            f"No route found with name '{name}'. Check the name of the route "
            "or register a route with that name."
        )


class MissingRequiredParameter(AttoError, ValueError):
    """Raised when assembly needs a parameter outside every optional segment.

    Attributes:
        parameter: Name of the missing parameter.
        route: Name of the route being assembled.
    """

    def __init__(self, parameter: str, route: str) -> None:
        self.parameter = parameter
        self.route = route
        super().__init__(
            f"Required parameter '{parameter}' for route '{route}' is missing. "
            "Provide the parameter or make it optional in the route pattern."
        )


class MissingRequiredArgument(AttoError, TypeError):
    """Raised when a handler parameter cannot be bound.

    The parameter was not supplied, has no default value and is not nullable.

    Attributes:
        parameter: Name of the unbound parameter.
        handler: Qualified name of the handler.
    """

    def __init__(self, parameter: str, handler: str) -> None:
        self.parameter = parameter
        self.handler = handler
        super().__init__(
            f"Required argument '{parameter}' for '{handler}' was not provided, "
            "has no default value and is not nullable."
        )


class MalformedPattern(AttoError, ValueError):
    """Raised when a route pattern has unbalanced optional brackets.

    Attributes:
        pattern: The offending pattern.
        reason: Short description of the problem.
    """

    def __init__(self, pattern: str, reason: str) -> None:
        self.pattern = pattern
        self.reason = reason
        super().__init__(f"Malformed route pattern '{pattern}': {reason}")
