"""
Read-only catalog of programming languages the game can pick from.

- LanguageRecord: one immutable entry (name + scored attributes)
- Catalog: case-insensitive lookup and uniform random choice

The catalog is passed into the scorer, picker and sessions; nothing mutates it.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, Iterable, Iterator, Optional, Tuple

from .errors import NotFoundError
from .types import AttributeName, Typing


@dataclass(frozen=True)
class LanguageRecord:
    name: str
    # Order matters: exact paradigm match compares the listed order
    paradigm: Tuple[str, ...]
    typing: Typing
    garbage_collection: bool
    designed_by: str
    first_appeared: int
    main_use_case: str

    def attribute(self, key: AttributeName):
        """Value of a scored attribute by its public (camelCase) name."""
        return getattr(self, ATTRIBUTE_FIELDS[key])


# Public attribute name -> dataclass field, in declaration (scoring) order
ATTRIBUTE_FIELDS: Dict[AttributeName, str] = {
    "paradigm": "paradigm",
    "typing": "typing",
    "garbageCollection": "garbage_collection",
    "designedBy": "designed_by",
    "firstAppeared": "first_appeared",
    "mainUseCase": "main_use_case",
}


class Catalog:
    def __init__(self, records: Iterable[LanguageRecord]) -> None:
        self._records: Tuple[LanguageRecord, ...] = tuple(records)
        self._by_key = {}
        for record in self._records:
            key = record.name.lower()
            if key in self._by_key:
                raise ValueError(f"Duplicate language name in catalog: {record.name!r}")
            self._by_key[key] = record
        if not self._records:
            raise ValueError("Catalog must contain at least one language.")

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[LanguageRecord]:
        return iter(self._records)

    def find(self, name: str) -> Optional[LanguageRecord]:
        return self._by_key.get(name.strip().lower())

    def get(self, name: str) -> LanguageRecord:
        """Like find(), but an unknown name raises NotFoundError."""
        record = self.find(name)
        if record is None:
            raise NotFoundError(name.strip())
        return record

    def names(self) -> list[str]:
        return [record.name for record in self._records]

    def choose(self, randbelow: Callable[[int], int]) -> LanguageRecord:
        """Pick one record using an index source returning 0..n-1."""
        index = randbelow(len(self._records))
        if index < 0 or index >= len(self._records):
            raise ValueError(f"Random index {index} out of range for {len(self._records)} languages.")
        return self._records[index]


def _lang(name, paradigm, typing, gc, designed_by, year, use_case) -> LanguageRecord:
    return LanguageRecord(
        name=name,
        paradigm=tuple(paradigm),
        typing=typing,
        garbage_collection=gc,
        designed_by=designed_by,
        first_appeared=year,
        main_use_case=use_case,
    )


DEFAULT_CATALOG = Catalog([
    _lang("JavaScript", ["Object-oriented", "Functional", "Event-driven"], "Dynamic", True, "Brendan Eich", 1995, "Web"),
    _lang("Python", ["Object-oriented", "Functional", "Imperative"], "Dynamic", True, "Guido van Rossum", 1991, "General-purpose"),
    _lang("Rust", ["Multi-paradigm", "Concurrent"], "Static", False, "Graydon Hoare", 2010, "Systems"),
    _lang("Go", ["Concurrent", "Imperative", "Structured"], "Static", True, "Robert Griesemer, Rob Pike, Ken Thompson", 2009, "Systems"),
    _lang("TypeScript", ["Object-oriented", "Functional"], "Static", True, "Anders Hejlsberg", 2012, "Web"),
    _lang("Java", ["Object-oriented", "Imperative", "Concurrent"], "Static", True, "James Gosling", 1995, "Enterprise"),
    _lang("C", ["Imperative", "Structured", "Procedural"], "Static", False, "Dennis Ritchie", 1972, "Systems"),
    _lang("C++", ["Object-oriented", "Imperative", "Generic"], "Static", False, "Bjarne Stroustrup", 1985, "Systems"),
    _lang("C#", ["Object-oriented", "Functional", "Imperative"], "Static", True, "Anders Hejlsberg", 2000, "Enterprise"),
    _lang("Ruby", ["Object-oriented", "Functional", "Imperative"], "Dynamic", True, "Yukihiro Matsumoto", 1995, "Web"),
    _lang("PHP", ["Object-oriented", "Imperative", "Procedural"], "Dynamic", True, "Rasmus Lerdorf", 1995, "Web"),
    _lang("Swift", ["Object-oriented", "Functional", "Protocol-oriented"], "Static", True, "Chris Lattner", 2014, "Mobile"),
    _lang("Kotlin", ["Object-oriented", "Functional"], "Static", True, "JetBrains", 2011, "Mobile"),
    _lang("Haskell", ["Functional", "Lazy"], "Static", True, "Lennart Augustsson, Paul Hudak, Simon Peyton Jones", 1990, "Academic"),
    _lang("Elixir", ["Functional", "Concurrent"], "Dynamic", True, "José Valim", 2012, "Web"),
    _lang("Lua", ["Imperative", "Procedural", "Scripting"], "Dynamic", True, "Roberto Ierusalimschy", 1993, "Embedded scripting"),
    _lang("Perl", ["Imperative", "Procedural", "Object-oriented"], "Dynamic", True, "Larry Wall", 1987, "Scripting"),
    _lang("Scala", ["Object-oriented", "Functional"], "Static", True, "Martin Odersky", 2004, "Data processing"),
    _lang("Zig", ["Imperative", "Procedural", "Generic"], "Static", False, "Andrew Kelley", 2016, "Systems"),
    _lang("Dart", ["Object-oriented", "Imperative"], "Static", True, "Lars Bak, Kasper Lund", 2011, "Mobile"),
])
