"""
Fold block comments that span several physical lines into single lines.

``input-event-codes.h`` has a handful of defines whose trailing comment
runs onto the next line::

    #define SW_RFKILL_ALL		0x03  /* rfkill master switch, type "any"
                                             set = radio enabled */

The parser works one logical line at a time, so this pre-pass walks the
text with two states, ``SEARCHING`` and ``IN_COMMENT``, and glues every
continuation line onto the line that opened the comment (joined by a
single space). Free-standing comment blocks such as the license header
are folded the same way, which leaves the parser a comment-only line it
can skip.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterator, List, Tuple

from header_errors import UnterminatedComment

__all__ = ["LogicalLine", "join_lines", "open_comment_start", "SEARCHING", "IN_COMMENT"]

SEARCHING = "searching"
IN_COMMENT = "in-comment"

_DEFINE_RE = re.compile(r"^[ \t]*#[ \t]*define\b")


@dataclass(frozen=True)
class LogicalLine:
    text: str          # never contains a newline
    lineno: int        # 1-based, first physical line
    offset: int        # character offset of the first physical line
    line_count: int = 1


# --------------------------------------------------------------------------- #
# boundaries                                                                  #
# --------------------------------------------------------------------------- #

def open_comment_start(line: str) -> int:
    """
    Return the index of a ``/*`` in *line* that has no matching ``*/``
    on the same line, or -1 when every comment opened on it is closed.
    """
    pos = 0
    while True:
        start = line.find("/*", pos)
        if start < 0:
            return -1
        end = line.find("*/", start + 2)
        if end < 0:
            return start
        pos = end + 2


def _physical_lines(text: str) -> Iterator[Tuple[int, int, str]]:
    offset = 0
    for lineno, raw in enumerate(text.split("\n"), start=1):
        yield lineno, offset, raw.rstrip("\r")
        offset += len(raw) + 1


def _is_define(line: str) -> bool:
    return _DEFINE_RE.match(line) is not None


# --------------------------------------------------------------------------- #
# folding                                                                     #
# --------------------------------------------------------------------------- #

def join_lines(text: str) -> List[LogicalLine]:
    """
    Split *text* into logical lines, folding unterminated block comments.

    Raises
    ------
    UnterminatedComment
        When the input ends inside a comment, or when a comment trailing a
        ``#define`` is still open at the start of the next ``#define``.
    """
    lines: List[LogicalLine] = []
    state = SEARCHING
    pending: List[str] = []
    start_lineno = start_offset = 0
    opened_by_define = False

    for lineno, offset, line in _physical_lines(text):
        if state == SEARCHING:
            if open_comment_start(line) < 0:
                lines.append(LogicalLine(line, lineno, offset))
                continue
            state = IN_COMMENT
            pending = [line]
            start_lineno, start_offset = lineno, offset
            opened_by_define = _is_define(line)
            continue

        if opened_by_define and _is_define(line):
            raise UnterminatedComment(
                f"comment after #define is still open when the #define on "
                f"line {lineno} starts",
                start_lineno,
                start_offset,
            )

        pending.append(line)
        joined = " ".join(pending)
        if open_comment_start(joined) < 0:
            lines.append(LogicalLine(joined, start_lineno, start_offset, len(pending)))
            state = SEARCHING
            pending = []

    if state == IN_COMMENT:
        raise UnterminatedComment(
            "end of input reached inside a /* comment", start_lineno, start_offset
        )
    return lines
