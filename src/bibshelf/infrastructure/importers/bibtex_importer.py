from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from bibshelf.core.errors import ParseError
from bibshelf.domain.models.entry import INTEGER_FIELDS, Entry


@dataclass(slots=True)
class BibTeXRecord:
    entry_type: str
    cite_key: str
    fields: dict[str, str]


class BibTeXParserError(ValueError):
    pass


# Blocks that carry no bibliographic record.
NON_ENTRY_TYPES = frozenset({"comment", "string", "preamble"})


def parse_entry(raw_bibtex: str) -> Entry:
    """Parse the first record of a BibTeX payload into an Entry."""
    entries = parse_entries(raw_bibtex)
    if not entries:
        raise ParseError("No BibTeX entry found in text")
    return entries[0]


def parse_entries(raw_bibtex: str) -> list[Entry]:
    try:
        records = parse_bibtex(raw_bibtex)
    except BibTeXParserError as exc:
        raise ParseError(f"Failed to parse BibTeX: {exc}") from exc
    return [
        Entry.from_bibtex_fields(record.entry_type, record.cite_key, record.fields)
        for record in records
    ]


def render_bibtex(entries: Iterable[Entry]) -> str:
    blocks = []
    for entry in entries:
        data = entry.to_dict()
        lines = [f"@{entry.bib_type}{{{entry.cite_key},"]
        for name in Entry.field_names()[2:]:
            value = data[name]
            if name in INTEGER_FIELDS:
                lines.append(f"  {name} = {value},")
            else:
                lines.append(f"  {name} = {{{value}}},")
        lines.append("}")
        blocks.append("\n".join(lines))
    return "\n\n".join(blocks) + ("\n" if blocks else "")


def parse_bibtex(text: str) -> list[BibTeXRecord]:
    entries: list[BibTeXRecord] = []
    idx = 0

    while True:
        start = text.find("@", idx)
        if start == -1:
            break

        entry, end_idx = _parse_entry(text, start)
        if entry is not None:
            entries.append(entry)
        idx = end_idx

    return entries


def _parse_entry(text: str, start_idx: int) -> tuple[BibTeXRecord | None, int]:
    i = start_idx + 1
    n = len(text)

    while i < n and text[i].isspace():
        i += 1

    type_start = i
    while i < n and (text[i].isalpha() or text[i] in "-_"):
        i += 1

    if i == type_start:
        return None, start_idx + 1

    entry_type = text[type_start:i].strip()

    while i < n and text[i].isspace():
        i += 1

    if i >= n or text[i] != "{":
        return None, start_idx + 1

    body_start = i + 1
    i += 1
    depth = 1

    while i < n and depth > 0:
        ch = text[i]
        if ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
        i += 1

    if depth != 0:
        raise BibTeXParserError("Unbalanced braces in BibTeX entry")

    if entry_type.lower() in NON_ENTRY_TYPES:
        return None, i

    body = text[body_start : i - 1]

    comma_idx = body.find(",")
    if comma_idx == -1:
        raise BibTeXParserError("BibTeX entry missing key separator comma")

    cite_key = body[:comma_idx].strip()
    if not cite_key:
        raise BibTeXParserError("BibTeX entry missing cite key")

    fields = _parse_fields(body[comma_idx + 1 :])
    return (
        BibTeXRecord(
            entry_type=entry_type,
            cite_key=cite_key,
            fields=fields,
        ),
        i,
    )


def _parse_fields(text: str) -> dict[str, str]:
    fields: dict[str, str] = {}
    i = 0
    n = len(text)

    while i < n:
        while i < n and (text[i].isspace() or text[i] == ","):
            i += 1
        if i >= n:
            break

        name_start = i
        while i < n and (text[i].isalnum() or text[i] in "-_"):
            i += 1
        name = text[name_start:i].strip().lower()

        while i < n and text[i].isspace():
            i += 1
        if i >= n or text[i] != "=":
            while i < n and text[i] != ",":
                i += 1
            continue

        i += 1
        while i < n and text[i].isspace():
            i += 1

        value, i = _parse_value(text, i)
        if name:
            fields[name] = value.strip()

    return fields


def _parse_value(text: str, start_idx: int) -> tuple[str, int]:
    i = start_idx
    n = len(text)
    if i >= n:
        return "", i

    ch = text[i]
    if ch == "{":
        i += 1
        depth = 1
        value_start = i
        while i < n and depth > 0:
            if text[i] == "{":
                depth += 1
            elif text[i] == "}":
                depth -= 1
            i += 1
        if depth != 0:
            raise BibTeXParserError("Unbalanced braces in BibTeX field value")
        return text[value_start : i - 1], i

    if ch == '"':
        i += 1
        value_start = i
        escaped = False
        while i < n:
            current = text[i]
            if current == '"' and not escaped:
                break
            escaped = current == "\\" and not escaped
            i += 1
        if i >= n:
            raise BibTeXParserError("Unterminated quoted BibTeX field value")
        return text[value_start:i], i + 1

    value_start = i
    while i < n and text[i] not in ",\n":
        i += 1
    return text[value_start:i].strip(), i
