from __future__ import annotations

from dataclasses import dataclass, field

from rich.console import Console

from bibshelf.core.config import AppPaths, ToolSettings
from bibshelf.infrastructure.process.runner import ProcessRunner, SubprocessRunner


@dataclass(slots=True)
class CLIContext:
    paths: AppPaths
    settings: ToolSettings
    console: Console
    runner: ProcessRunner = field(default_factory=SubprocessRunner)
