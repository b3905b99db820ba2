from __future__ import annotations

import argparse

from rich.markup import escape

from bibshelf.application.services.project_service import ProjectService
from bibshelf.cli.context import CLIContext


def register(subparsers: argparse._SubParsersAction[argparse.ArgumentParser]) -> None:
    parser = subparsers.add_parser("init", help="Create the bibliography database")
    parser.set_defaults(handler=run)


def run(args: argparse.Namespace, ctx: CLIContext) -> int:
    result = ProjectService(ctx.paths).init_project()

    if result.created:
        ctx.console.print(f"[green]Created[/green] {escape(str(result.db_path))}")
    else:
        ctx.console.print(f"[yellow]Database already existed[/yellow] {escape(str(result.db_path))}")
    return 0
