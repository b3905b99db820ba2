from __future__ import annotations

import sqlite3
from pathlib import Path
from typing import Any

from bibshelf.core.errors import DuplicateKeyError, NotFoundError
from bibshelf.domain.models.entry import Entry
from bibshelf.infrastructure.db.sqlite import get_connection
from bibshelf.infrastructure.db.websearch import compile_websearch

_COLUMNS = Entry.field_names()
_COLUMN_LIST = ", ".join(_COLUMNS)


class EntryRepo:
    def __init__(self, db_path: Path) -> None:
        self.db_path = db_path

    def create(self, entry: Entry) -> Entry:
        placeholders = ", ".join("?" for _ in _COLUMNS)
        with get_connection(self.db_path) as conn:
            try:
                conn.execute(
                    f"INSERT INTO entries ({_COLUMN_LIST}) VALUES ({placeholders})",
                    self._params(entry),
                )
            except sqlite3.IntegrityError as exc:
                raise DuplicateKeyError(f"Entry already exists for cite key: {entry.cite_key}") from exc
            row = self._fetch_row(conn, entry.cite_key)
            conn.commit()
        return self._to_model(row)

    def update(self, old_key: str, entry: Entry) -> Entry:
        assignments = ", ".join(f"{name} = ?" for name in _COLUMNS)
        with get_connection(self.db_path) as conn:
            try:
                cursor = conn.execute(
                    f"UPDATE entries SET {assignments} WHERE cite_key = ?",
                    (*self._params(entry), old_key),
                )
            except sqlite3.IntegrityError as exc:
                raise DuplicateKeyError(
                    f"Cannot rename {old_key} to {entry.cite_key}: cite key already in use"
                ) from exc
            if cursor.rowcount == 0:
                raise NotFoundError(f"Entry not found for cite key: {old_key}")
            row = self._fetch_row(conn, entry.cite_key)
            conn.commit()
        return self._to_model(row)

    def delete(self, key: str) -> Entry:
        with get_connection(self.db_path) as conn:
            row = self._fetch_row(conn, key)
            if row is None:
                raise NotFoundError(f"Entry not found for cite key: {key}")
            conn.execute("DELETE FROM entries WHERE id = ?", (row["id"],))
            conn.commit()
        return self._to_model(row)

    def get(self, key: str) -> Entry | None:
        with get_connection(self.db_path) as conn:
            row = self._fetch_row(conn, key)
        return self._to_model(row) if row else None

    def project_json(self, key: str) -> dict[str, Any]:
        entry = self.get(key)
        if entry is None:
            raise NotFoundError(f"Entry not found for cite key: {key}")
        return entry.to_dict()

    def list_all(self) -> list[Entry]:
        with get_connection(self.db_path) as conn:
            rows = conn.execute("SELECT * FROM entries ORDER BY cite_key").fetchall()
        return [self._to_model(row) for row in rows]

    def count(self) -> int:
        with get_connection(self.db_path) as conn:
            row = conn.execute("SELECT COUNT(*) AS c FROM entries").fetchone()
        return int(row["c"])

    def search(self, query: str) -> list[Entry]:
        compiled = compile_websearch(query)
        if compiled.match is None and compiled.exclude is None:
            return []

        params: list[str] = []
        if compiled.match is not None:
            sql = """
                SELECT e.* FROM entries AS e
                JOIN (
                    SELECT rowid AS id, rank FROM entries_search
                    WHERE entries_search MATCH ?
                ) AS hits ON hits.id = e.id
            """
            order_by = "ORDER BY hits.rank, e.cite_key"
            params.append(compiled.match)
        else:
            sql = "SELECT e.* FROM entries AS e"
            order_by = "ORDER BY e.cite_key"

        if compiled.exclude is not None:
            sql += """
                WHERE e.id NOT IN (
                    SELECT rowid FROM entries_search WHERE entries_search MATCH ?
                )
            """
            params.append(compiled.exclude)

        with get_connection(self.db_path) as conn:
            rows = conn.execute(f"{sql} {order_by}", params).fetchall()
        return [self._to_model(row) for row in rows]

    @staticmethod
    def _fetch_row(conn: sqlite3.Connection, key: str) -> sqlite3.Row | None:
        return conn.execute("SELECT * FROM entries WHERE cite_key = ?", (key,)).fetchone()

    @staticmethod
    def _params(entry: Entry) -> tuple[Any, ...]:
        return tuple(getattr(entry, name) for name in _COLUMNS)

    @staticmethod
    def _to_model(row) -> Entry:
        return Entry(**{name: row[name] for name in _COLUMNS})
