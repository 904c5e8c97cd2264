"""
Resolve defines that refer to other defines into literal values.

``input-event-codes.h`` has a few of these::

    #define KEY_MIN_INTERESTING	KEY_MUTE
    #define KEY_CNT			(KEY_MAX+1)

The categorizer only accepts literal values, so this pass runs between
parsing and categorization and replaces every :class:`Deferred` with the
:class:`Constant` it stands for.
"""

from __future__ import annotations

import sys
from dataclasses import replace
from typing import Dict, List, Sequence, Set

from define_parser import U32_MAX, Constant, Deferred, Define
from header_errors import CircularReference, UnknownReference, ValueOverflow

__all__ = ["resolve_defines", "drop_deferred"]


def resolve_defines(defines: Sequence[Define]) -> List[Define]:
    """
    Return *defines* in the same order with all references replaced by values.

    A name defined twice resolves to its last definition, as the C
    preprocessor would see it at the end of the header.

    Raises
    ------
    UnknownReference
        A define refers to a name that is never defined.
    CircularReference
        Following references leads back to a define already on the chain.
    ValueOverflow
        A ``(NAME + N)`` offset leaves the 32-bit range.
    """
    table: Dict[str, Define] = {}
    for define in defines:
        previous = table.get(define.name)
        if previous is not None and previous.expression != define.expression:
            print(
                f"Warning: line {define.lineno}: '{define.name}' redefined "
                f"(previous definition on line {previous.lineno})",
                file=sys.stderr,
            )
        table[define.name] = define

    resolved: Dict[str, int] = {}

    def evaluate(define: Define) -> int:
        # no recursion: reference chains may be deeper than the interpreter stack
        path: List[Define] = []
        on_path: Set[int] = set()
        current = define
        while True:
            expression = current.expression
            if isinstance(expression, Constant):
                value = expression.value
                break
            path.append(current)
            on_path.add(id(current))
            target = table.get(expression.other)
            if target is None:
                raise UnknownReference(current.name, expression.other)
            if id(target) in on_path:
                names = [d.name for d in path]
                start = next(i for i, d in enumerate(path) if d is target)
                raise CircularReference(names[start:] + [target.name])
            if target.name in resolved:
                value = resolved[target.name]
                break
            current = target

        for step in reversed(path):
            value += step.expression.add or 0
            if value > U32_MAX:
                raise ValueOverflow(step.name, value)
            # only the last definition of a name is visible to references
            if table[step.name] is step:
                resolved[step.name] = value
        return value

    out: List[Define] = []
    for define in defines:
        if isinstance(define.expression, Deferred):
            define = replace(define, expression=Constant(evaluate(define)))
        out.append(define)
    return out


def drop_deferred(defines: Sequence[Define]) -> List[Define]:
    """Keep only the defines that already carry a literal value."""
    return [d for d in defines if isinstance(d.expression, Constant)]
