#!/usr/bin/env python3
"""
Generate typed Python constants from Linux's input-event-codes.h.

Usage:
    main.py <input-event-codes.h> [-o out.py] [--renames renames.json]
            [--json] [--drop-deferred]

The script:
  • parses the header's #define constants (folding multi-line comments);
  • resolves defines that refer to other defines (or drops them);
  • groups the constants by prefix and applies the rename table;
  • writes the generated module (or, with --json, the categories) to
    out.py or stdout.
"""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Dict, List, Optional

from categorizer import categories_as_dict, categorize_header
from code_gen import generate_module
from header_errors import (
    CodeGenError,
    HeaderParseError,
    InvalidDefineName,
    ResolutionError,
    UnexpectedDeferredExpression,
)
from renames import DEFAULT_RENAMES, load_renames

USAGE = (
    "Usage: main.py <input-event-codes.h> [-o out.py] [--renames renames.json] "
    "[--json] [--drop-deferred]\n"
)

# options that take a *separate* argument
_OPTIONS_WITH_ARG = {"-o", "--renames"}
_FLAGS = {"--json", "--drop-deferred"}

_PIPELINE_ERRORS = (
    HeaderParseError,
    ResolutionError,
    InvalidDefineName,
    UnexpectedDeferredExpression,
    CodeGenError,
)


# --------------------------------------------------------------------------- #
# helpers                                                                     #
# --------------------------------------------------------------------------- #

def _parse_args(argv: List[str]) -> Optional[Dict[str, object]]:
    """
    Split the command line into the header path, options and flags.

    Returns ``None`` when the command line is malformed.
    """
    opts: Dict[str, object] = {"header": None, "-o": None, "--renames": None}
    opts.update({flag: False for flag in _FLAGS})
    it = iter(argv)

    for tok in it:
        if tok in _OPTIONS_WITH_ARG:
            try:
                opts[tok] = next(it)
            except StopIteration:
                sys.stderr.write(f"Error: expected an argument after '{tok}'.\n")
                return None
        elif tok in _FLAGS:
            opts[tok] = True
        elif tok.startswith("-") and tok != "-":
            sys.stderr.write(f"Error: unknown option '{tok}'.\n")
            return None
        elif opts["header"] is None:
            opts["header"] = tok
        else:
            sys.stderr.write(f"Error: unexpected argument '{tok}'.\n")
            return None

    if opts["header"] is None:
        return None
    return opts


# --------------------------------------------------------------------------- #
# main                                                                        #
# --------------------------------------------------------------------------- #

def main(argv: Optional[List[str]] = None) -> int:
    opts = _parse_args(sys.argv[1:] if argv is None else argv)
    if opts is None:
        sys.stderr.write(USAGE)
        return 1

    # --------------------------------------------------------------------- #
    # 1. Read inputs                                                        #
    # --------------------------------------------------------------------- #
    header_path = Path(str(opts["header"]))
    try:
        text = header_path.read_text(encoding="utf-8")
    except OSError as exc:
        sys.stderr.write(f"Error reading {header_path}: {exc}\n")
        return 1

    renames = DEFAULT_RENAMES
    if opts["--renames"] is not None:
        try:
            renames = load_renames(str(opts["--renames"]))
        except (OSError, ValueError) as exc:
            sys.stderr.write(f"Error reading rename table {opts['--renames']}: {exc}\n")
            return 1

    # --------------------------------------------------------------------- #
    # 2. Parse, resolve, categorize and render                              #
    # --------------------------------------------------------------------- #
    deferred = "drop" if opts["--drop-deferred"] else "resolve"
    try:
        categories = categorize_header(text, deferred=deferred)
        if opts["--json"]:
            output = json.dumps(categories_as_dict(categories), indent=2, ensure_ascii=False) + "\n"
        else:
            output = generate_module(categories, renames)
    except _PIPELINE_ERRORS as exc:
        sys.stderr.write(f"Error: {header_path}: {exc}\n")
        return 1

    print(
        f"Parsed {sum(len(c.constants) for c in categories.values())} constants "
        f"in {len(categories)} categories from {header_path}",
        file=sys.stderr,
    )

    # --------------------------------------------------------------------- #
    # 3. Write the result                                                   #
    # --------------------------------------------------------------------- #
    if opts["-o"] is None:
        sys.stdout.write(output)
    else:
        out_path = Path(str(opts["-o"]))
        try:
            out_path.write_text(output, encoding="utf-8")
        except OSError as exc:
            sys.stderr.write(f"Error writing {out_path}: {exc}\n")
            return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
