import json
from collections.abc import Callable, Sequence
from pathlib import Path

import pytest

from bibshelf.application.services.edit_service import EditService
from bibshelf.core.errors import EditorError, NotFoundError, ParseError
from bibshelf.domain.models.entry import Entry
from bibshelf.infrastructure.db.repos.entry_repo import EntryRepo
from bibshelf.infrastructure.db.sqlite import initialize_schema
from bibshelf.infrastructure.process.runner import ProcessResult


class FakeEditor:
    def __init__(self, edit: Callable[[str], str] | None = None, returncode: int = 0) -> None:
        self.edit = edit
        self.returncode = returncode
        self.calls: list[list[str]] = []
        self.seen_paths: list[Path] = []

    def run(self, argv: Sequence[str], *, input_text: str | None = None, capture_output: bool = False) -> ProcessResult:
        self.calls.append(list(argv))
        path = Path(argv[-1])
        self.seen_paths.append(path)
        if self.edit is not None:
            path.write_text(self.edit(path.read_text(encoding="utf-8")), encoding="utf-8")
        return ProcessResult(returncode=self.returncode, stdout="")


class MissingEditor:
    def run(self, argv, *, input_text=None, capture_output=False) -> ProcessResult:
        raise FileNotFoundError(2, "No such file or directory", argv[0])


class CountingRepo(EntryRepo):
    def __init__(self, db_path: Path) -> None:
        super().__init__(db_path)
        self.update_calls = 0

    def update(self, old_key: str, entry: Entry) -> Entry:
        self.update_calls += 1
        return super().update(old_key, entry)


STORED = Entry(
    cite_key="smith2020",
    bib_type="article",
    doi="10.1000/xyz",
    url="https://doi.org/10.1000/xyz",
    author="Smith, Jane",
    title="Old Title",
    journal="Journal of Things",
    publisher="Thing Press",
    volume=12,
    number=3,
    month="mar",
    year=2020,
)


def _repo(tmp_path: Path) -> CountingRepo:
    db_path = tmp_path / "bibshelf.db"
    initialize_schema(db_path)
    repo = CountingRepo(db_path)
    repo.create(STORED)
    return repo


def _set_field(name: str, value) -> Callable[[str], str]:
    def edit(text: str) -> str:
        data = json.loads(text)
        data[name] = value
        return json.dumps(data, indent=4)

    return edit


def test_unchanged_content_writes_nothing(tmp_path: Path) -> None:
    repo = _repo(tmp_path)
    editor = FakeEditor(edit=lambda text: "\n\n" + text + "   \n")

    result = EditService(repo, editor, "vim").edit("smith2020")

    assert result.changed is False
    assert repo.update_calls == 0
    assert repo.get("smith2020") == STORED


def test_changed_title_updates_only_that_field(tmp_path: Path) -> None:
    repo = _repo(tmp_path)
    editor = FakeEditor(edit=_set_field("title", "New Title"))

    result = EditService(repo, editor, "vim").edit("smith2020")

    assert result.changed is True
    assert repo.update_calls == 1
    stored = repo.get("smith2020")
    assert stored.title == "New Title"
    assert stored.to_dict() == {**STORED.to_dict(), "title": "New Title"}
    assert result.entry == stored


def test_cite_key_can_be_changed_through_edit(tmp_path: Path) -> None:
    repo = _repo(tmp_path)
    editor = FakeEditor(edit=_set_field("cite_key", "smith2020a"))

    EditService(repo, editor, "vim").edit("smith2020")

    assert repo.get("smith2020") is None
    assert repo.get("smith2020a").title == "Old Title"


def test_invalid_json_raises_parse_error_and_writes_nothing(tmp_path: Path) -> None:
    repo = _repo(tmp_path)
    editor = FakeEditor(edit=lambda text: text.replace("}", ""))

    with pytest.raises(ParseError):
        EditService(repo, editor, "vim").edit("smith2020")

    assert repo.update_calls == 0
    assert repo.get("smith2020") == STORED


def test_incomplete_entry_raises_parse_error_and_writes_nothing(tmp_path: Path) -> None:
    repo = _repo(tmp_path)

    def drop_year(text: str) -> str:
        data = json.loads(text)
        del data["year"]
        return json.dumps(data)

    with pytest.raises(ParseError, match="year"):
        EditService(repo, FakeEditor(edit=drop_year), "vim").edit("smith2020")

    assert repo.update_calls == 0


def test_missing_key_aborts_before_launching_editor(tmp_path: Path) -> None:
    repo = _repo(tmp_path)
    editor = FakeEditor()

    with pytest.raises(NotFoundError):
        EditService(repo, editor, "vim").edit("ghost")

    assert editor.calls == []


def test_editor_command_is_split_and_gets_temp_file(tmp_path: Path) -> None:
    repo = _repo(tmp_path)
    editor = FakeEditor()

    EditService(repo, editor, "code --wait").edit("smith2020")

    argv = editor.calls[0]
    assert argv[:2] == ["code", "--wait"]
    assert argv[2].endswith(".json")
    assert len(argv) == 3


def test_temp_file_is_removed_on_success_and_failure(tmp_path: Path) -> None:
    repo = _repo(tmp_path)
    ok_editor = FakeEditor(edit=_set_field("title", "New Title"))
    bad_editor = FakeEditor(edit=lambda text: "not json")

    EditService(repo, ok_editor, "vim").edit("smith2020")
    with pytest.raises(ParseError):
        EditService(repo, bad_editor, "vim").edit("smith2020")

    assert not ok_editor.seen_paths[0].exists()
    assert not bad_editor.seen_paths[0].exists()


def test_nonzero_editor_exit_still_diffs_and_is_reported(tmp_path: Path) -> None:
    repo = _repo(tmp_path)
    editor = FakeEditor(edit=_set_field("title", "New Title"), returncode=1)

    result = EditService(repo, editor, "vim").edit("smith2020")

    assert result.changed is True
    assert isinstance(result.editor_error, EditorError)
    assert repo.get("smith2020").title == "New Title"


def test_editor_that_cannot_start_raises_editor_error(tmp_path: Path) -> None:
    repo = _repo(tmp_path)

    with pytest.raises(EditorError):
        EditService(repo, MissingEditor(), "no-such-editor").edit("smith2020")

    assert repo.update_calls == 0


def test_out_of_range_integer_is_rejected_without_writing(tmp_path: Path) -> None:
    repo = _repo(tmp_path)
    service = EditService(repo, FakeEditor(_set_field("volume", 2**63)), "vim")

    with pytest.raises(ParseError, match="out of range"):
        service.edit("smith2020")

    assert repo.update_calls == 0
    assert repo.get("smith2020") == STORED


def test_unbalanced_quote_in_editor_command_is_an_editor_error(tmp_path: Path) -> None:
    with pytest.raises(EditorError, match="Cannot parse editor command"):
        EditService(_repo(tmp_path), FakeEditor(), "vim '")


def test_failed_temp_write_leaves_no_file_behind(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    from bibshelf.application.services import edit_service

    scratch = tmp_path / "scratch"
    scratch.mkdir()
    monkeypatch.setattr(edit_service.tempfile, "tempdir", str(scratch))
    # A lone surrogate cannot be encoded as UTF-8.
    monkeypatch.setattr(edit_service, "serialize_for_editing", lambda data: "\ud800")
    repo = _repo(tmp_path)
    editor = FakeEditor()

    with pytest.raises(EditorError, match="Could not write temporary file"):
        EditService(repo, editor, "vim").edit("smith2020")

    assert list(scratch.iterdir()) == []
    assert editor.calls == []
    assert repo.update_calls == 0
