from __future__ import annotations

import argparse
from pathlib import Path

from rich.markup import escape

from bibshelf.application.services.entry_service import EntryService
from bibshelf.cli.common import open_repo
from bibshelf.cli.context import CLIContext


def register(subparsers: argparse._SubParsersAction[argparse.ArgumentParser]) -> None:
    parser = subparsers.add_parser("export", help="Export the bibliography to a BibTeX file")
    parser.add_argument("filename", help="BibTeX file to write")
    parser.set_defaults(handler=run)


def run(args: argparse.Namespace, ctx: CLIContext) -> int:
    count = EntryService(open_repo(ctx)).export_bibtex(Path(args.filename))
    ctx.console.print(f"[green]Exported[/green] {count} entries to {escape(args.filename)}")
    return 0
