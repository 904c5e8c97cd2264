#!/usr/bin/env python3
"""
define_parser.py – read the ``#define`` constants out of ``input-event-codes.h``.

Usage :
    python define_parser.py /usr/include/linux/input-event-codes.h

The header is expected to look like this (comments and blank lines may
appear anywhere)::

    /* license */
    #ifndef _UAPI_INPUT_EVENT_CODES_H
    #define _UAPI_INPUT_EVENT_CODES_H
    #define EV_SYN			0x00
    #define KEY_MIN_INTERESTING	KEY_MUTE
    #define KEY_CNT			(KEY_MAX+1)
    #endif

Parsing is done in two phases: :func:`comment_joiner.join_lines` folds
comments spanning several lines, then every logical line is matched
against the grammar below. Any deviation aborts the whole parse.
"""

from __future__ import annotations

import json
import re
import string
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Tuple, Union

from comment_joiner import LogicalLine, join_lines
from header_errors import (
    HeaderParseError,
    MalformedPreamble,
    UnexpectedContent,
    UnrecognizedValueGrammar,
)

__all__ = [
    "Constant",
    "Deferred",
    "Expression",
    "Define",
    "U32_MAX",
    "parse_define",
    "parse_header",
    "valueless_define_name",
    "normalize_comment",
]

U32_MAX = 0xFFFFFFFF
_MAX_HEX_DIGITS = 8

_IDENT = r"[A-Za-z_][A-Za-z0-9_]*"
_IDENT_RE = re.compile(_IDENT)
_DECIMAL_RE = re.compile(r"[0-9]+")
# (KEY_MAX+1) and (INPUT_PROP_MAX + 1) are both in the wild
_SUM_RE = re.compile(r"\((?P<other>%s)[ \t]*\+[ \t]*(?P<add>[0-9]+)\)" % _IDENT)
_DEFINE_HEAD_RE = re.compile(r"[ \t]*#[ \t]*define[ \t]+(?P<name>%s)" % _IDENT)
_VALUELESS_RE = re.compile(r"[ \t]*#[ \t]*define[ \t]+(?P<name>%s)[ \t]*$" % _IDENT)
_IFNDEF_RE = re.compile(r"[ \t]*#[ \t]*ifndef[ \t]+(?P<name>%s)[ \t]*$" % _IDENT)
_ENDIF_RE = re.compile(r"[ \t]*#[ \t]*endif[ \t]*$")
_TRAILING_COMMENT_RE = re.compile(r"[ \t]+/\*(?P<body>.*?)\*/")
_COMMENT_RE = re.compile(r"/\*.*?\*/")
_LEADING_COMMENTS_RE = re.compile(r"(?:[ \t]*/\*.*?\*/)*[ \t]*")


###############################################################################
# Model                                                                        #
###############################################################################

@dataclass(frozen=True)
class Constant:
    """A literal value, ``0x1f`` or ``31``."""
    value: int


@dataclass(frozen=True)
class Deferred:
    """A reference to another define, ``KEY_MUTE`` or ``(KEY_MAX+1)``."""
    other: str
    add: Optional[int] = None


Expression = Union[Constant, Deferred]


@dataclass(frozen=True)
class Define:
    name: str
    expression: Expression
    comment: Optional[str] = None
    lineno: int = field(default=0, compare=False)


###############################################################################
# Helpers                                                                      #
###############################################################################

def normalize_comment(body: str) -> Optional[str]:
    """Collapse whitespace runs to one space and trim; ``None`` when empty."""
    text = " ".join(body.split())
    return text or None


def _strip_comments(text: str) -> str:
    return _COMMENT_RE.sub("", text)


def _parse_hex(text: str) -> Optional[Tuple[Expression, int]]:
    if not text.startswith("0x"):
        return None
    digits = ""
    for ch in text[2:2 + _MAX_HEX_DIGITS]:
        if ch not in string.hexdigits:
            break
        digits += ch
    if not digits:
        return None
    return Constant(int(digits, 16)), 2 + len(digits)


def _parse_decimal(text: str) -> Optional[Tuple[Expression, int]]:
    m = _DECIMAL_RE.match(text)
    if not m or int(m.group()) > U32_MAX:
        return None
    return Constant(int(m.group())), m.end()


def _parse_sum(text: str) -> Optional[Tuple[Expression, int]]:
    m = _SUM_RE.match(text)
    if not m or int(m.group("add")) > U32_MAX:
        return None
    return Deferred(m.group("other"), int(m.group("add"))), m.end()


def _parse_reference(text: str) -> Optional[Tuple[Expression, int]]:
    m = _IDENT_RE.match(text)
    if not m:
        return None
    return Deferred(m.group()), m.end()


# Order matters: "0x1f" must not be read as the decimal 0.
_VALUE_PARSERS = (_parse_hex, _parse_decimal, _parse_sum, _parse_reference)


###############################################################################
# Public API                                                                   #
###############################################################################

def valueless_define_name(line: str) -> Optional[str]:
    """Return NAME for a ``#define NAME`` line that carries no value."""
    m = _VALUELESS_RE.match(_strip_comments(line))
    return m.group("name") if m else None


def parse_define(line: str, lineno: int = 1, offset: int = 0) -> Tuple[Define, str]:
    """
    Parse one ``#define NAME VALUE [/* comment */]`` line.

    Parameters
    ----------
    line
        A single logical line (multi-line comments already folded).
    lineno, offset
        Position of *line* in the header, used in error messages.

    Returns
    -------
    Tuple[Define, str]
        The define and whatever text followed it. A hex literal longer
        than 8 digits leaves its extra digits in that remainder.
    """
    head = _DEFINE_HEAD_RE.match(line)
    if not head:
        raise UnexpectedContent(f"expected '#define NAME VALUE', found {line.strip()!r}", lineno, offset)
    name = head.group("name")

    pos = head.end()
    gap = len(line) - pos - len(line[pos:].lstrip(" \t"))
    if gap == 0:
        raise UnrecognizedValueGrammar(
            f"expected whitespace after define name {name!r}", lineno, offset + pos
        )
    pos += gap

    for value_parser in _VALUE_PARSERS:
        parsed = value_parser(line[pos:])
        if parsed is not None:
            expression, consumed = parsed
            break
    else:
        raise UnrecognizedValueGrammar(
            f"cannot parse value {line[pos:].strip()!r} of define {name!r}", lineno, offset + pos
        )
    pos += consumed

    comment = None
    m = _TRAILING_COMMENT_RE.match(line, pos)
    if m:
        comment = normalize_comment(m.group("body"))
        pos = m.end()

    return Define(name, expression, comment, lineno), line[pos:]


def _is_blank(line: LogicalLine) -> bool:
    return not _strip_comments(line.text).strip()


def parse_header(text: str) -> List[Define]:
    """
    Parse a whole ``input-event-codes.h`` style header.

    The include guard line is discarded; every other define becomes a
    :class:`Define`, in source order.
    """
    lines = [line for line in join_lines(text) if not _is_blank(line)]
    end_lineno, end_offset = text.count("\n") + 1, len(text)
    it = iter(lines)

    guard_line = next(it, None)
    if guard_line is None:
        raise MalformedPreamble("expected '#ifndef GUARD', found end of input", end_lineno, end_offset)
    m = _IFNDEF_RE.match(_strip_comments(guard_line.text))
    if not m:
        raise MalformedPreamble(
            f"expected '#ifndef GUARD', found {guard_line.text.strip()!r}",
            guard_line.lineno,
            guard_line.offset,
        )
    guard = m.group("name")

    guard_define = next(it, None)
    if guard_define is None:
        raise MalformedPreamble(f"expected '#define {guard}', found end of input", end_lineno, end_offset)
    if valueless_define_name(guard_define.text) != guard:
        raise MalformedPreamble(
            f"expected '#define {guard}', found {guard_define.text.strip()!r}",
            guard_define.lineno,
            guard_define.offset,
        )

    defines: List[Define] = []
    for line in it:
        if _ENDIF_RE.match(_strip_comments(line.text)):
            break
        # a comment may close on the same line the define starts on
        skip = _LEADING_COMMENTS_RE.match(line.text).end()
        body = line.text[skip:]
        offset = line.offset + skip
        lineno = text.count("\n", 0, offset) + 1

        if not _DEFINE_HEAD_RE.match(body):
            raise UnexpectedContent(f"expected '#define' or '#endif', found {body.strip()!r}", lineno, offset)

        name = valueless_define_name(body)
        if name is not None:
            print(f"Warning: line {lineno}: discarding '#define {name}' without a value", file=sys.stderr)
            continue

        define, rest = parse_define(body, lineno, offset)
        if _strip_comments(rest).strip():
            raise UnrecognizedValueGrammar(
                f"unexpected {rest.strip()!r} after the value of define {define.name!r}",
                lineno,
                offset + len(body) - len(rest),
            )
        defines.append(define)
    else:
        raise UnexpectedContent("expected '#endif', found end of input", end_lineno, end_offset)

    trailing = next(it, None)
    if trailing is not None:
        raise UnexpectedContent(
            f"unexpected {trailing.text.strip()!r} after '#endif'", trailing.lineno, trailing.offset
        )

    return defines


def _expression_to_json(expression: Expression) -> dict:
    if isinstance(expression, Constant):
        return {"constant": expression.value}
    return {"other": expression.other, "add": expression.add}


def main() -> None:
    if len(sys.argv) != 2:
        print("Usage: python define_parser.py input-event-codes.h", file=sys.stderr)
        sys.exit(1)

    header_path = Path(sys.argv[1])
    try:
        defines = parse_header(header_path.read_text(encoding="utf-8"))
    except OSError as exc:
        print(f"Error reading {header_path}: {exc}", file=sys.stderr)
        sys.exit(1)
    except HeaderParseError as exc:
        print(f"Error: {header_path}: {exc}", file=sys.stderr)
        sys.exit(1)

    # Easy to consume elsewhere
    print(json.dumps(
        [
            {"name": d.name, "expression": _expression_to_json(d.expression), "comment": d.comment}
            for d in defines
        ],
        indent=2,
        ensure_ascii=False,
    ))


if __name__ == "__main__":
    main()
