from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass, fields
from typing import Any

from bibshelf.core.errors import ParseError

INTEGER_FIELDS = ("volume", "number", "year")

_INTEGER_RE = re.compile(r"[+-]?[0-9]+")

# Stored as SQLite INTEGER, which is a signed 64-bit value.
INT_MIN = -(2**63)
INT_MAX = 2**63 - 1


@dataclass(frozen=True, slots=True)
class Entry:
    cite_key: str
    bib_type: str
    doi: str
    url: str
    author: str
    title: str
    journal: str
    publisher: str
    volume: int
    number: int
    month: str
    year: int

    @classmethod
    def field_names(cls) -> tuple[str, ...]:
        return tuple(f.name for f in fields(cls))

    @classmethod
    def from_bibtex_fields(cls, entry_type: str, cite_key: str, tags: Mapping[str, str]) -> Entry:
        """Build an entry from one tokenized BibTeX record.

        Tag names are matched case-insensitively. Every tag is required; the
        numeric ones must parse as integers.
        """
        if not cite_key.strip():
            raise ParseError("BibTeX entry has an empty citation key")
        if not entry_type.strip():
            raise ParseError(f"BibTeX entry {cite_key} has no entry type")

        lowered = {name.lower(): value for name, value in tags.items()}
        values: dict[str, Any] = {"cite_key": cite_key.strip(), "bib_type": entry_type.strip()}

        for name in cls.field_names()[2:]:
            if name not in lowered:
                raise ParseError(f"BibTeX entry {cite_key} is missing required field '{name}'")
            raw = lowered[name]
            if name in INTEGER_FIELDS:
                values[name] = _parse_int(cite_key, name, raw)
            else:
                values[name] = raw

        return cls(**values)

    @classmethod
    def from_dict(cls, data: Any) -> Entry:
        if not isinstance(data, Mapping):
            raise ParseError(f"Expected an object with entry fields, got {type(data).__name__}")

        names = cls.field_names()
        missing = [name for name in names if name not in data]
        if missing:
            raise ParseError(f"Entry is missing required field(s): {', '.join(missing)}")
        unknown = sorted(str(key) for key in data if key not in names)
        if unknown:
            raise ParseError(f"Entry has unknown field(s): {', '.join(unknown)}")

        for name in names:
            value = data[name]
            if name in INTEGER_FIELDS:
                if isinstance(value, bool) or not isinstance(value, int):
                    raise ParseError(f"Field '{name}' must be an integer, got {value!r}")
                if not INT_MIN <= value <= INT_MAX:
                    raise ParseError(f"Field '{name}' is out of range: {value}")
            elif not isinstance(value, str):
                raise ParseError(f"Field '{name}' must be a string, got {value!r}")

        if not data["cite_key"].strip():
            raise ParseError("Field 'cite_key' must not be empty")

        return cls(**{name: data[name] for name in names})

    def to_dict(self) -> dict[str, Any]:
        return {name: getattr(self, name) for name in self.field_names()}


def _parse_int(cite_key: str, name: str, raw: str) -> int:
    text = raw.strip()
    if not _INTEGER_RE.fullmatch(text):
        raise ParseError(f"BibTeX entry {cite_key} has non-numeric '{name}': {raw!r}")
    value = int(text)
    if not INT_MIN <= value <= INT_MAX:
        raise ParseError(f"BibTeX entry {cite_key} has out-of-range '{name}': {text}")
    return value
