"""
Group parsed defines into categories by name prefix.

``KEY_A`` and ``KEY_B`` end up in category ``KEY`` as constants ``A`` and
``B``; ``BTN_X`` ends up in ``BTN``. Category order and constant order
both follow the header, so regenerating from the same header always
produces the same output.
"""

from __future__ import annotations

import string
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple

from define_parser import Constant, Define, parse_header
from header_errors import InvalidDefineName, UnexpectedDeferredExpression
from resolver import drop_deferred, resolve_defines

__all__ = [
    "CategoryConstant",
    "Category",
    "Categories",
    "split_name",
    "constant_name",
    "categorize",
    "categorize_header",
    "categories_as_dict",
    "DEFERRED_MODES",
]

DEFERRED_MODES = ("resolve", "drop", "error")


###############################################################################
# Types                                                                        #
###############################################################################

@dataclass(frozen=True)
class CategoryConstant:
    name: str            # identifier-safe, prefix stripped
    alias_name: str      # the define exactly as spelled in the header
    value: int
    comment: Optional[str] = None


@dataclass
class Category:
    prefix: str
    constants: List[CategoryConstant] = field(default_factory=list)


Categories = Dict[str, Category]  # raw prefix -> Category, first-seen order


###############################################################################
# Helpers                                                                      #
###############################################################################

def split_name(name: str) -> Tuple[str, str]:
    """ 'KEY_VOLUMEUP'   -> ('KEY', 'VOLUMEUP')
        'ABS_MT_SLOT'    -> ('ABS', 'MT_SLOT') """
    prefix, sep, suffix = name.partition("_")
    if not sep:
        raise InvalidDefineName(name)
    return prefix, suffix


def constant_name(suffix: str) -> str:
    """'3D' is not an identifier, '_3D' is."""
    if suffix[:1] in string.digits:
        return "_" + suffix
    return suffix


###############################################################################
# Public API                                                                   #
###############################################################################

def categorize(defines: Sequence[Define]) -> Categories:
    """
    Build the prefix -> :class:`Category` mapping.

    Every define must already carry a literal value; run
    :func:`resolver.resolve_defines` first when the header has references.
    """
    categories: Categories = {}
    for define in defines:
        prefix, suffix = split_name(define.name)
        expression = define.expression
        if not isinstance(expression, Constant):
            raise UnexpectedDeferredExpression(define.name, expression.other)

        category = categories.get(prefix)
        if category is None:
            category = categories[prefix] = Category(prefix)
        category.constants.append(CategoryConstant(
            name=constant_name(suffix),
            alias_name=define.name,
            value=expression.value,
            comment=define.comment,
        ))
    return categories


def categorize_header(text: str, deferred: str = "resolve") -> Categories:
    """
    Parse *text* and categorize it in one go.

    *deferred* decides what happens to defines that refer to other defines:
    ``"resolve"`` replaces them with their values, ``"drop"`` leaves them
    out, ``"error"`` hands them to :func:`categorize` unchanged, which
    rejects them.
    """
    if deferred not in DEFERRED_MODES:
        raise ValueError(f"deferred must be one of {DEFERRED_MODES}, not {deferred!r}")

    defines = parse_header(text)
    if deferred == "resolve":
        defines = resolve_defines(defines)
    elif deferred == "drop":
        defines = drop_deferred(defines)
    return categorize(defines)


def categories_as_dict(categories: Categories) -> Dict[str, List[dict]]:
    return {
        prefix: [
            {
                "name": c.name,
                "alias_name": c.alias_name,
                "value": c.value,
                "comment": c.comment,
            }
            for c in category.constants
        ]
        for prefix, category in categories.items()
    }
