from __future__ import annotations

import argparse
from pathlib import Path

from rich.markup import escape
from rich.panel import Panel

from bibshelf.application.services.entry_service import EntryService
from bibshelf.cli.common import open_repo
from bibshelf.cli.context import CLIContext


def register(subparsers: argparse._SubParsersAction[argparse.ArgumentParser]) -> None:
    parser = subparsers.add_parser("import", help="Import entries from a BibTeX file")
    parser.add_argument("filename", help="BibTeX file to read")
    parser.set_defaults(handler=run)


def run(args: argparse.Namespace, ctx: CLIContext) -> int:
    summary = EntryService(open_repo(ctx)).import_bibtex(Path(args.filename))

    lines = [
        f"Entries seen: {summary.entries_seen}",
        f"Entries inserted: {summary.inserted}",
        f"Skipped (cite key exists): {len(summary.skipped_duplicates)}",
    ]
    if summary.skipped_duplicates:
        lines.append(escape(", ".join(summary.skipped_duplicates)))
    ctx.console.print(Panel.fit("\n".join(lines), title="BibTeX Import Summary"))
    return 0
