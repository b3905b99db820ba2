from __future__ import annotations

import argparse
import logging
from pathlib import Path

from rich.console import Console

from bibshelf.cli.commands import (
    add_cmd,
    delete_cmd,
    edit_cmd,
    export_cmd,
    import_cmd,
    init_cmd,
    list_cmd,
)
from bibshelf.cli.context import CLIContext
from bibshelf.core.config import load_paths, load_tool_settings
from bibshelf.core.errors import BibshelfError
from bibshelf.core.logging import configure_logging

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="bibshelf",
        description="Bibliography manager",
    )
    parser.add_argument(
        "--home",
        type=Path,
        default=None,
        help="Directory holding the bibliography database (default: $BIBSHELF_HOME or ~/.bibshelf)",
    )
    parser.add_argument("-v", "--verbose", action="count", default=0)

    subparsers = parser.add_subparsers(dest="command", required=True)
    init_cmd.register(subparsers)
    add_cmd.register(subparsers)
    delete_cmd.register(subparsers)
    edit_cmd.register(subparsers)
    list_cmd.register(subparsers)
    export_cmd.register(subparsers)
    import_cmd.register(subparsers)

    return parser


def main(argv: list[str] | None = None, ctx: CLIContext | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    configure_logging(args.verbose)

    handler = getattr(args, "handler", None)
    if handler is None:
        parser.print_help()
        return 2

    try:
        if ctx is None:
            ctx = CLIContext(
                paths=load_paths(args.home),
                settings=load_tool_settings(),
                console=Console(),
            )
        return handler(args, ctx)
    except BibshelfError as exc:
        logger.error(str(exc))
        return 1
