"""
Exceptions raised while turning ``input-event-codes.h`` into categories.

Parse failures share :class:`HeaderParseError` and always carry the line
and character offset at which the header stopped making sense. The
categorizer's failures are invariant violations and are kept outside
that family on purpose.
"""

from __future__ import annotations

from typing import Sequence

__all__ = [
    "HeaderParseError",
    "MalformedPreamble",
    "UnrecognizedValueGrammar",
    "UnterminatedComment",
    "UnexpectedContent",
    "InvalidDefineName",
    "UnexpectedDeferredExpression",
    "ResolutionError",
    "UnknownReference",
    "CircularReference",
    "ValueOverflow",
    "CodeGenError",
]


###############################################################################
# Parsing                                                                      #
###############################################################################

class HeaderParseError(ValueError):
    """
    Represents an error encountered while parsing the header text.
    """

    def __init__(self, reason: str, lineno: int, offset: int) -> None:
        self.reason = reason
        self.lineno = lineno
        self.offset = offset
        super().__init__(f"line {lineno} (offset {offset}): {reason}")


class MalformedPreamble(HeaderParseError):
    """
    The ``#ifndef GUARD`` / ``#define GUARD`` pair is missing or out of order.
    """


class UnrecognizedValueGrammar(HeaderParseError):
    """
    A define value is none of: hex literal, decimal literal,
    ``(NAME + N)`` or a bare name.
    """


class UnterminatedComment(HeaderParseError):
    """
    A ``/*`` was never closed.
    """


class UnexpectedContent(HeaderParseError):
    """
    A line that is neither a define, a comment nor blank, or a missing ``#endif``.
    """


###############################################################################
# Categorization                                                               #
###############################################################################

class InvalidDefineName(AssertionError):
    """A define name without a ``_`` separator reached the categorizer."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"define name {name!r} has no '_' separator")


class UnexpectedDeferredExpression(NotImplementedError):
    """An unresolved reference to another define reached the categorizer."""

    def __init__(self, name: str, other: str) -> None:
        self.name = name
        self.other = other
        super().__init__(
            f"define {name!r} refers to {other!r}; resolve deferred defines "
            f"before categorizing"
        )


###############################################################################
# Resolution                                                                   #
###############################################################################

class ResolutionError(ValueError):
    pass


class UnknownReference(ResolutionError):
    def __init__(self, name: str, other: str) -> None:
        self.name = name
        self.other = other
        super().__init__(f"define {name!r} refers to unknown define {other!r}")


class CircularReference(ResolutionError):
    def __init__(self, chain: Sequence[str]) -> None:
        self.chain = list(chain)
        super().__init__("circular define reference: " + " -> ".join(self.chain))


class ValueOverflow(ResolutionError):
    def __init__(self, name: str, value: int) -> None:
        self.name = name
        self.value = value
        super().__init__(f"define {name!r} resolves to {value}, which does not fit in 32 bits")


###############################################################################
# Code generation                                                              #
###############################################################################

class CodeGenError(ValueError):
    pass
