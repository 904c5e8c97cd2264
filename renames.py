"""
Display names and documentation for the input event code categories.

The categorizer groups constants by their raw prefix (``KEY``, ``BTN``...).
Those prefixes make poor type names, so the emitter asks a
:class:`RenameTable` what to call each category. Lookups use the
capitalized spelling (``Btn``) and are exact and case-sensitive; a
prefix without an entry keeps its name and gets no documentation.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType
from typing import Iterable, Optional, Tuple

__all__ = [
    "CategoryRename",
    "RenameTable",
    "RENAMES",
    "DEFAULT_RENAMES",
    "category_type_name",
    "load_renames",
]


@dataclass(frozen=True)
class CategoryRename:
    name: str                            # capitalized raw prefix, e.g. "Btn"
    rename_to: Optional[str] = None      # None keeps ``name``
    documentation: Optional[str] = None


RENAMES: Tuple[CategoryRename, ...] = (
    CategoryRename("Input", "InputQuirk",
                   "Device properties and quirks (INPUT_PROP_*)."),
    CategoryRename("Ev", "EventType",
                   "Event types, the first level of an input event's classification."),
    CategoryRename("Syn", "SynchronizationEvent",
                   "Synchronization events, used to separate and frame other events."),
    CategoryRename("Key", None,
                   "Keys and buttons on keyboards and keyboard-like devices."),
    CategoryRename("Btn", "Button",
                   "Buttons on mice, joysticks, gamepads, digitizers and other devices."),
    CategoryRename("Rel", "RelativeAxis",
                   "Relative axis value changes, such as mouse motion."),
    CategoryRename("Abs", "AbsoluteAxis",
                   "Absolute axis value changes, such as touchscreen coordinates."),
    CategoryRename("Sw", "SwitchEvent",
                   "Binary state input switches, such as a laptop lid."),
    CategoryRename("Msc", "MiscEvent",
                   "Miscellaneous input and output values that do not fit other types."),
    CategoryRename("Rep", "AutoRepeat",
                   "Autorepeat configuration values."),
    CategoryRename("Snd", "Sound",
                   "Commands for simple sound output devices."),
)


def category_type_name(prefix: str) -> str:
    """ 'KEY'   -> 'Key'
        'INPUT' -> 'Input' """
    return prefix[:1].upper() + prefix[1:].lower()


class RenameTable:
    """Read-only mapping from a capitalized prefix to its :class:`CategoryRename`."""

    def __init__(self, entries: Iterable[CategoryRename]) -> None:
        by_name = {}
        for entry in entries:
            if entry.name in by_name:
                raise ValueError(f"duplicate rename entry for {entry.name!r}")
            by_name[entry.name] = entry
        self._by_name = MappingProxyType(by_name)

    def __len__(self) -> int:
        return len(self._by_name)

    def __contains__(self, name: object) -> bool:
        return name in self._by_name

    def __iter__(self):
        return iter(self._by_name.values())

    def lookup(self, prefix: str) -> Tuple[str, Optional[str]]:
        """Return ``(display_name, documentation)`` for *prefix*."""
        entry = self._by_name.get(prefix)
        if entry is None:
            return prefix, None
        return entry.rename_to or entry.name, entry.documentation


DEFAULT_RENAMES = RenameTable(RENAMES)


def load_renames(path: str | Path) -> RenameTable:
    """
    Read a rename table from a JSON file holding a list of
    ``{"name": ..., "rename_to": ..., "documentation": ...}`` objects.
    """
    data = json.loads(Path(path).read_text(encoding="utf-8"))
    if not isinstance(data, list):
        raise ValueError(f"{path}: expected a JSON list of rename entries")

    entries = []
    for item in data:
        if not isinstance(item, dict) or not isinstance(item.get("name"), str):
            raise ValueError(f"{path}: every rename entry needs a string 'name': {item!r}")
        unknown = set(item) - {"name", "rename_to", "documentation"}
        if unknown:
            raise ValueError(f"{path}: unknown keys {sorted(unknown)} in entry {item['name']!r}")
        entries.append(CategoryRename(
            item["name"],
            item.get("rename_to"),
            item.get("documentation"),
        ))
    return RenameTable(entries)
