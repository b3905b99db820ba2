from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

from bibshelf.core.errors import ConfigurationError


@dataclass(frozen=True)
class AppPaths:
    home_dir: Path
    db_path: Path


@dataclass(frozen=True)
class ToolSettings:
    editor: str | None
    selector: str
    doi_url: str
    user_agent: str
    timeout_seconds: float

    def require_editor(self) -> str:
        if not self.editor:
            raise ConfigurationError(
                "No editor configured. Set BIBSHELF_EDITOR, VISUAL or EDITOR."
            )
        return self.editor


DEFAULT_HOME_DIRNAME = ".bibshelf"
DEFAULT_DOI_URL = "https://doi.org"
DEFAULT_USER_AGENT = "bibshelf/1.0"
DEFAULT_SELECTOR = "fzf"
DEFAULT_HTTP_TIMEOUT_SECONDS = 30.0


def load_paths(home: Path | None = None) -> AppPaths:
    if home is not None:
        home_dir = home.expanduser().resolve()
    else:
        home_raw = os.getenv("BIBSHELF_HOME")
        if home_raw:
            home_dir = Path(home_raw).expanduser().resolve()
        else:
            home_dir = Path.home() / DEFAULT_HOME_DIRNAME

    return AppPaths(home_dir=home_dir, db_path=home_dir / "bibshelf.db")


def load_tool_settings(environ: Mapping[str, str] | None = None) -> ToolSettings:
    env = os.environ if environ is None else environ

    editor = env.get("BIBSHELF_EDITOR") or env.get("VISUAL") or env.get("EDITOR") or None

    timeout_raw = env.get("BIBSHELF_HTTP_TIMEOUT")
    timeout = DEFAULT_HTTP_TIMEOUT_SECONDS
    if timeout_raw:
        try:
            timeout = float(timeout_raw)
        except ValueError as exc:
            raise ConfigurationError(f"BIBSHELF_HTTP_TIMEOUT must be a number, got {timeout_raw!r}") from exc
        if timeout <= 0:
            raise ConfigurationError("BIBSHELF_HTTP_TIMEOUT must be positive")

    return ToolSettings(
        editor=editor,
        selector=env.get("BIBSHELF_SELECTOR") or DEFAULT_SELECTOR,
        doi_url=(env.get("BIBSHELF_DOI_URL") or DEFAULT_DOI_URL).rstrip("/"),
        user_agent=DEFAULT_USER_AGENT,
        timeout_seconds=timeout,
    )
