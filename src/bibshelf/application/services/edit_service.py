from __future__ import annotations

import json
import logging
import shlex
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from bibshelf.core.errors import EditorError, ParseError
from bibshelf.domain.models.entry import Entry
from bibshelf.infrastructure.db.repos.entry_repo import EntryRepo
from bibshelf.infrastructure.process.runner import ProcessRunner

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class EditResult:
    key: str
    changed: bool
    entry: Entry | None
    editor_error: EditorError | None = None


def serialize_for_editing(data: dict[str, Any]) -> str:
    return json.dumps(data, indent=2, ensure_ascii=False) + "\n"


class EditService:
    """Round-trip one entry through an external editor.

    Storage is written only when the saved text differs from what was handed
    to the editor and decodes into a valid entry.
    """

    def __init__(self, entry_repo: EntryRepo, runner: ProcessRunner, editor_command: str) -> None:
        self.entry_repo = entry_repo
        self.runner = runner
        try:
            self.editor_argv = shlex.split(editor_command)
        except ValueError as exc:
            raise EditorError(f"Cannot parse editor command {editor_command!r}: {exc}") from exc
        if not self.editor_argv:
            raise EditorError("Editor command is empty")

    def edit(self, key: str) -> EditResult:
        original = self.entry_repo.project_json(key)
        original_text = serialize_for_editing(original)

        tmp = tempfile.NamedTemporaryFile(
            "w",
            encoding="utf-8",
            prefix="bibshelf-",
            suffix=".json",
            delete=False,
        )
        temp_path = Path(tmp.name)

        try:
            try:
                with tmp:
                    tmp.write(original_text)
            except (OSError, UnicodeEncodeError) as exc:
                raise EditorError(f"Could not write temporary file {temp_path}: {exc}") from exc
            editor_error = self._run_editor(temp_path)
            try:
                edited_text = temp_path.read_text(encoding="utf-8")
            except (OSError, UnicodeDecodeError) as exc:
                raise EditorError(f"Could not read back edited file {temp_path}: {exc}") from exc
        finally:
            temp_path.unlink(missing_ok=True)

        if edited_text.strip() == original_text.strip():
            logger.info("No changes made to %s", key)
            return EditResult(key=key, changed=False, entry=None, editor_error=editor_error)

        new_entry = self._materialize(edited_text)
        stored = self.entry_repo.update(key, new_entry)
        logger.info("Updated %s", key if key == stored.cite_key else f"{key} -> {stored.cite_key}")
        return EditResult(key=key, changed=True, entry=stored, editor_error=editor_error)

    def _run_editor(self, path: Path) -> EditorError | None:
        argv = [*self.editor_argv, str(path)]
        try:
            result = self.runner.run(argv)
        except OSError as exc:
            raise EditorError(f"Could not start editor {self.editor_argv[0]!r}: {exc}") from exc

        if result.returncode != 0:
            error = EditorError(f"Editor exited with status {result.returncode}")
            logger.warning("%s; checking the file for changes anyway", error)
            return error
        return None

    @staticmethod
    def _materialize(text: str) -> Entry:
        try:
            data = json.loads(text)
        except json.JSONDecodeError as exc:
            raise ParseError(f"Edited entry is not valid JSON: {exc}") from exc
        return Entry.from_dict(data)
