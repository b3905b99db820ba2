from collections.abc import Sequence

import pytest

from bibshelf.application.services.selector_service import SelectorService
from bibshelf.core.errors import EmptySelectionError, SelectorError
from bibshelf.domain.models.entry import Entry
from bibshelf.infrastructure.process.runner import ProcessResult


class FakeSelector:
    def __init__(self, stdout: str, returncode: int = 0) -> None:
        self.stdout = stdout
        self.returncode = returncode
        self.calls: list[tuple[list[str], str | None, bool]] = []

    def run(self, argv: Sequence[str], *, input_text: str | None = None, capture_output: bool = False) -> ProcessResult:
        self.calls.append((list(argv), input_text, capture_output))
        return ProcessResult(returncode=self.returncode, stdout=self.stdout)


def _entry(cite_key: str) -> Entry:
    return Entry(
        cite_key=cite_key,
        bib_type="article",
        doi="10.1000/x",
        url="https://doi.org/10.1000/x",
        author="A",
        title="T",
        journal="J",
        publisher="P",
        volume=1,
        number=1,
        month="jan",
        year=2000,
    )


def test_streams_keys_in_order_and_returns_trimmed_choice() -> None:
    selector = FakeSelector(stdout="  beta2021 \n")

    key = SelectorService(selector, "fzf --height 40%").select([_entry("alpha2020"), _entry("beta2021")])

    assert key == "beta2021"
    argv, input_text, capture_output = selector.calls[0]
    assert argv == ["fzf", "--height", "40%"]
    assert input_text == "alpha2020\nbeta2021\n"
    assert capture_output is True


def test_empty_candidates_fail_without_launching() -> None:
    selector = FakeSelector(stdout="anything")

    with pytest.raises(EmptySelectionError):
        SelectorService(selector).select([])

    assert selector.calls == []


def test_cancelled_selection_returns_empty_string() -> None:
    selector = FakeSelector(stdout="", returncode=130)

    assert SelectorService(selector).select([_entry("alpha2020")]) == ""


def test_missing_selector_raises_selector_error() -> None:
    class Missing:
        def run(self, argv, *, input_text=None, capture_output=False) -> ProcessResult:
            raise FileNotFoundError(2, "No such file or directory", argv[0])

    with pytest.raises(SelectorError):
        SelectorService(Missing()).select([_entry("alpha2020")])


def test_unbalanced_quote_in_selector_command_is_a_selector_error() -> None:
    with pytest.raises(SelectorError, match="Cannot parse selector command"):
        SelectorService(FakeSelector(stdout=""), "fzf --prompt '")
