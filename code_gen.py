"""
Code-generator : renders categorized input event codes as a Python module.

Every category becomes an ``int`` subclass named after the rename table,
and every constant a typed class attribute::

    class EventType(int):
        \"\"\"Event types, ...\"\"\"
        ...

    EventType.SYN = EventType(0)  # EV_SYN

A ``BY_ALIAS`` dict at the end maps each macro name, as spelled in the
header, to its typed value.
"""
from __future__ import annotations

import keyword
from textwrap import indent
from typing import List, Optional

from categorizer import Categories, Category
from header_errors import CodeGenError
from renames import DEFAULT_RENAMES, RenameTable, category_type_name

__all__ = ["generate_category", "generate_module", "category_display"]


###############################################################################
# templates                                                                    #
###############################################################################
PRELUDE = '''\
"""
Input event codes, generated from input-event-codes.h.

THIS FILE IS GENERATED, DO NOT EDIT.
"""
'''

CLASS_TPL = '''\
class {type_name}(int):
{docstring}

    __slots__ = ()

    def __repr__(self) -> str:
        return f"{{type(self).__name__}}({{int(self)}})"
'''


###############################################################################
# helpers                                                                      #
###############################################################################

def _check_identifier(name: str, what: str) -> str:
    if not name.isidentifier() or keyword.iskeyword(name):
        raise CodeGenError(f"{what} {name!r} is not a valid Python identifier")
    return name


def _docstring(text: str) -> str:
    text = text.replace("\\", "\\\\").replace('"""', '\\"\\"\\"')
    if text.endswith('"'):
        text = text[:-1] + '\\"'
    return f'"""{text}"""'


def category_display(prefix: str, renames: RenameTable = DEFAULT_RENAMES) -> tuple[str, Optional[str]]:
    """``('BTN', table)`` -> ``('Button', 'Buttons on mice, ...')``"""
    return renames.lookup(category_type_name(prefix))


###############################################################################
# generation                                                                   #
###############################################################################

def generate_category(prefix: str,
                      category: Category,
                      renames: RenameTable = DEFAULT_RENAMES) -> str:
    type_name, documentation = category_display(prefix, renames)
    _check_identifier(type_name, "category name")
    doc = documentation or f"Input event codes sharing the ``{prefix}_`` prefix."

    lines: List[str] = [
        CLASS_TPL.format(type_name=type_name, docstring=indent(_docstring(doc), "    ")),
        "",
    ]
    for constant in category.constants:
        _check_identifier(constant.name, f"constant name (from {constant.alias_name})")
        if constant.comment:
            lines.append(f"#: {constant.comment}")
        lines.append(
            f"{type_name}.{constant.name} = {type_name}({constant.value})  # {constant.alias_name}"
        )
    return "\n".join(lines) + "\n"


def generate_module(categories: Categories,
                    renames: RenameTable = DEFAULT_RENAMES) -> str:
    parts: List[str] = [PRELUDE]
    type_names: List[str] = []
    aliases: List[str] = []

    for prefix, category in categories.items():
        type_name, _ = category_display(prefix, renames)
        if type_name in type_names:
            raise CodeGenError(f"two categories would both be named {type_name!r}")
        type_names.append(type_name)
        parts.append(generate_category(prefix, category, renames))
        aliases.extend(
            f'    "{c.alias_name}": {type_name}.{c.name},' for c in category.constants
        )

    exported = type_names + ["BY_ALIAS"]
    parts.insert(1, "__all__ = [\n" + "".join(f'    "{n}",\n' for n in exported) + "]\n")
    parts.append("BY_ALIAS = {\n" + "".join(a + "\n" for a in aliases) + "}\n")
    return "\n\n".join(parts)
