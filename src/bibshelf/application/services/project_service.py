from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from bibshelf.core.config import AppPaths
from bibshelf.core.files import ensure_directory
from bibshelf.infrastructure.db.sqlite import SCHEMA_PATH, initialize_schema


@dataclass(slots=True)
class InitResult:
    created: bool
    db_path: Path


class ProjectService:
    def __init__(self, paths: AppPaths) -> None:
        self.paths = paths

    def init_project(self) -> InitResult:
        created = not self.paths.db_path.exists()
        ensure_directory(self.paths.home_dir)
        initialize_schema(self.paths.db_path, SCHEMA_PATH)
        return InitResult(created=created, db_path=self.paths.db_path)
