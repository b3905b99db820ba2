from __future__ import annotations

import logging
import subprocess
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Protocol

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class ProcessResult:
    returncode: int
    stdout: str


class ProcessRunner(Protocol):
    def run(
        self,
        argv: Sequence[str],
        *,
        input_text: str | None = None,
        capture_output: bool = False,
    ) -> ProcessResult: ...


class SubprocessRunner:
    """Run an interactive program to completion in the foreground.

    stderr is always inherited so terminal UIs (fzf draws on it) stay usable.
    stdout is captured only when asked for. ``OSError`` from a missing or
    non-executable program is left to the caller.
    """

    def run(
        self,
        argv: Sequence[str],
        *,
        input_text: str | None = None,
        capture_output: bool = False,
    ) -> ProcessResult:
        logger.debug("Running %s", " ".join(argv))
        completed = subprocess.run(
            list(argv),
            input=input_text,
            stdout=subprocess.PIPE if capture_output else None,
            text=True,
            check=False,
        )
        return ProcessResult(
            returncode=completed.returncode,
            stdout=completed.stdout or "",
        )
