from __future__ import annotations

import argparse

from rich.markup import escape
from rich.table import Table

from bibshelf.application.services.entry_service import EntryService
from bibshelf.cli.common import open_repo, select_key
from bibshelf.cli.context import CLIContext
from bibshelf.domain.models.entry import Entry


def register(subparsers: argparse._SubParsersAction[argparse.ArgumentParser]) -> None:
    parser = subparsers.add_parser("list", help="List entries in the bibliography")
    group = parser.add_mutually_exclusive_group()
    group.add_argument("-i", "--interactive", action="store_true", help="Pick an entry interactively")
    group.add_argument("-t", "--tag", help="List entries containing this exact term or phrase")
    group.add_argument("-q", "--query", help='Full-text query, e.g. quantum -classical "error correction"')
    parser.set_defaults(handler=run)


def run(args: argparse.Namespace, ctx: CLIContext) -> int:
    repo = open_repo(ctx)
    service = EntryService(repo)

    if args.interactive:
        key = select_key(ctx, repo)
        if key:
            ctx.console.print(escape(key))
        else:
            ctx.console.print("[yellow]No entry selected[/yellow]")
        return 0

    if args.query is not None:
        entries = service.search(args.query)
        title = f"Matches for {escape(repr(args.query))}"
    elif args.tag is not None:
        entries = service.find_by_tag(args.tag)
        title = f"Tagged {escape(repr(args.tag))}"
    else:
        entries = service.list_all()
        title = "Entries"

    ctx.console.print(_entries_table(f"{title} ({len(entries)})", entries))
    return 0


def _entries_table(title: str, entries: list[Entry]) -> Table:
    table = Table(title=title)
    table.add_column("Cite Key")
    table.add_column("Year")
    table.add_column("Title", overflow="fold")
    table.add_column("Author", overflow="fold")
    table.add_column("Journal", overflow="fold")

    for entry in entries:
        table.add_row(
            escape(entry.cite_key),
            str(entry.year),
            escape(entry.title),
            escape(entry.author),
            escape(entry.journal),
        )
    return table
