from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from bibshelf.core.errors import BibshelfError, DuplicateKeyError, ParseError
from bibshelf.core.files import write_text_atomic
from bibshelf.domain.models.entry import Entry
from bibshelf.infrastructure.db.repos.entry_repo import EntryRepo
from bibshelf.infrastructure.doi.resolver import DoiResolver
from bibshelf.infrastructure.importers.bibtex_importer import parse_entries, render_bibtex

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class BibImportSummary:
    entries_seen: int
    inserted: int
    skipped_duplicates: list[str]


class EntryService:
    def __init__(self, entry_repo: EntryRepo, resolver: DoiResolver | None = None) -> None:
        self.entry_repo = entry_repo
        self.resolver = resolver

    def add_doi(self, doi: str) -> Entry:
        if self.resolver is None:
            raise BibshelfError("No DOI resolver configured")
        entry = self.resolver.resolve(doi)
        stored = self.entry_repo.create(entry)
        logger.info("Added %s", stored.cite_key)
        return stored

    def delete(self, key: str) -> Entry:
        removed = self.entry_repo.delete(key)
        logger.info("Deleted %s", removed.cite_key)
        return removed

    def list_all(self) -> list[Entry]:
        return self.entry_repo.list_all()

    def search(self, query: str) -> list[Entry]:
        return self.entry_repo.search(query)

    def find_by_tag(self, tag: str) -> list[Entry]:
        phrase = tag.replace('"', " ").strip()
        if not phrase:
            return []
        return self.entry_repo.search(f'"{phrase}"')

    def import_bibtex(self, bib_path: Path) -> BibImportSummary:
        path = bib_path.expanduser().resolve()
        if not path.exists() or not path.is_file():
            raise BibshelfError(f"BibTeX file not found: {path}")

        # Parse everything before writing so a bad record leaves storage untouched.
        try:
            raw = path.read_text(encoding="utf-8")
        except UnicodeDecodeError as exc:
            raise ParseError(f"BibTeX file is not valid UTF-8: {path}") from exc
        except OSError as exc:
            raise BibshelfError(f"Could not read BibTeX file {path}: {exc}") from exc
        entries = parse_entries(raw)

        inserted = 0
        skipped: list[str] = []
        for entry in entries:
            try:
                self.entry_repo.create(entry)
            except DuplicateKeyError:
                logger.warning("Skipping %s: cite key already exists", entry.cite_key)
                skipped.append(entry.cite_key)
                continue
            inserted += 1

        return BibImportSummary(
            entries_seen=len(entries),
            inserted=inserted,
            skipped_duplicates=skipped,
        )

    def export_bibtex(self, bib_path: Path) -> int:
        entries = self.entry_repo.list_all()
        write_text_atomic(bib_path.expanduser().resolve(), render_bibtex(entries))
        return len(entries)
