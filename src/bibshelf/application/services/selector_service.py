from __future__ import annotations

import logging
import shlex
from collections.abc import Sequence

from bibshelf.core.config import DEFAULT_SELECTOR
from bibshelf.core.errors import EmptySelectionError, SelectorError
from bibshelf.domain.models.entry import Entry
from bibshelf.infrastructure.process.runner import ProcessRunner

logger = logging.getLogger(__name__)


class SelectorService:
    def __init__(self, runner: ProcessRunner, selector_command: str = DEFAULT_SELECTOR) -> None:
        self.runner = runner
        try:
            self.selector_argv = shlex.split(selector_command)
        except ValueError as exc:
            raise SelectorError(f"Cannot parse selector command {selector_command!r}: {exc}") from exc
        if not self.selector_argv:
            raise SelectorError("Selector command is empty")

    def select(self, entries: Sequence[Entry]) -> str:
        """Return the chosen cite key, or "" when the user cancelled."""
        if not entries:
            raise EmptySelectionError("There are no entries to choose from")

        listing = "\n".join(entry.cite_key for entry in entries) + "\n"
        try:
            result = self.runner.run(self.selector_argv, input_text=listing, capture_output=True)
        except OSError as exc:
            raise SelectorError(f"Could not start selector {self.selector_argv[0]!r}: {exc}") from exc

        key = result.stdout.strip()
        if not key:
            logger.info("No entry selected (selector exit status %s)", result.returncode)
        return key
