from __future__ import annotations

import argparse

from rich.markup import escape

from bibshelf.application.services.edit_service import EditService
from bibshelf.cli.common import open_repo, select_key
from bibshelf.cli.context import CLIContext


def register(subparsers: argparse._SubParsersAction[argparse.ArgumentParser]) -> None:
    parser = subparsers.add_parser("edit", help="Edit an entry in $EDITOR")
    group = parser.add_mutually_exclusive_group(required=True)
    group.add_argument("-k", "--key", help="Citation key of the entry to edit")
    group.add_argument("-i", "--interactive", action="store_true", help="Pick the entry interactively")
    parser.set_defaults(handler=run)


def run(args: argparse.Namespace, ctx: CLIContext) -> int:
    editor = ctx.settings.require_editor()
    repo = open_repo(ctx)

    key = args.key
    if args.interactive:
        key = select_key(ctx, repo)
        if not key:
            ctx.console.print("[yellow]No entry selected[/yellow]")
            return 0

    result = EditService(repo, ctx.runner, editor).edit(key)

    if result.editor_error is not None:
        ctx.console.print(f"[yellow]Warning:[/yellow] {escape(str(result.editor_error))}")
    if result.changed and result.entry is not None:
        ctx.console.print(f"[green]Updated[/green] {escape(result.entry.cite_key)}")
    else:
        ctx.console.print(f"[yellow]No changes[/yellow] {escape(key)}")
    return 0
