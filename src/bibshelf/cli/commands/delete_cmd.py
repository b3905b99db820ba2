from __future__ import annotations

import argparse

from rich.markup import escape

from bibshelf.application.services.entry_service import EntryService
from bibshelf.cli.common import open_repo, select_key
from bibshelf.cli.context import CLIContext


def register(subparsers: argparse._SubParsersAction[argparse.ArgumentParser]) -> None:
    parser = subparsers.add_parser("delete", help="Delete an entry from the bibliography")
    group = parser.add_mutually_exclusive_group(required=True)
    group.add_argument("-k", "--key", help="Citation key of the entry to delete")
    group.add_argument("-i", "--interactive", action="store_true", help="Pick the entry interactively")
    parser.set_defaults(handler=run)


def run(args: argparse.Namespace, ctx: CLIContext) -> int:
    repo = open_repo(ctx)

    key = args.key
    if args.interactive:
        key = select_key(ctx, repo)
        if not key:
            ctx.console.print("[yellow]No entry selected[/yellow]")
            return 0

    removed = EntryService(repo).delete(key)
    ctx.console.print(f"[green]Deleted[/green] {escape(removed.cite_key)}")
    return 0
