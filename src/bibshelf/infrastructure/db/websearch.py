"""Translate web-style search queries into FTS5 MATCH expressions.

Supported syntax mirrors what search boxes usually accept:

    quantum computing        both terms (implicit AND)
    "quantum computing"      the exact phrase
    quantum -classical       exclude rows matching a term
    quantum or classical     either term

FTS5 has no unary NOT, so exclusions are returned as a separate expression
which the caller subtracts from the positive match set.
"""

from __future__ import annotations

from dataclasses import dataclass

_OR = "OR"


@dataclass(frozen=True, slots=True)
class CompiledQuery:
    match: str | None
    exclude: str | None

    @property
    def is_empty(self) -> bool:
        return self.match is None and self.exclude is None


def compile_websearch(query: str) -> CompiledQuery:
    positives: list[str] = []
    negatives: list[str] = []

    for negated, quoted, text in _tokenize(query):
        if not quoted and not negated and text.lower() == "or":
            if positives and positives[-1] != _OR:
                positives.append(_OR)
            continue
        if not any(ch.isalnum() for ch in text):
            continue
        term = _quote(text)
        if negated:
            negatives.append(term)
        else:
            positives.append(term)

    while positives and positives[-1] == _OR:
        positives.pop()

    return CompiledQuery(
        match=_join_positive(positives) if positives else None,
        exclude=" OR ".join(negatives) if negatives else None,
    )


def _join_positive(terms: list[str]) -> str:
    parts: list[str] = []
    for term in terms:
        if term == _OR:
            parts.append(_OR)
            continue
        if parts and parts[-1] != _OR:
            parts.append("AND")
        parts.append(term)
    return " ".join(parts)


def _quote(text: str) -> str:
    return '"' + text.replace('"', '""') + '"'


def _tokenize(query: str) -> list[tuple[bool, bool, str]]:
    """Split into (negated, quoted, text) tokens."""
    tokens: list[tuple[bool, bool, str]] = []
    i = 0
    n = len(query)

    while i < n:
        while i < n and query[i].isspace():
            i += 1
        if i >= n:
            break

        negated = False
        if query[i] == "-" and i + 1 < n and not query[i + 1].isspace():
            negated = True
            i += 1

        if query[i] == '"':
            i += 1
            start = i
            while i < n and query[i] != '"':
                i += 1
            # An unterminated quote runs to the end of the query.
            tokens.append((negated, True, query[start:i]))
            i += 1
            continue

        start = i
        while i < n and not query[i].isspace() and query[i] != '"':
            i += 1
        tokens.append((negated, False, query[start:i]))

    return tokens
