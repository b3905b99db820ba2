from __future__ import annotations

import argparse

from rich.markup import escape

from bibshelf.application.services.entry_service import EntryService
from bibshelf.cli.common import open_repo
from bibshelf.cli.context import CLIContext
from bibshelf.infrastructure.doi.resolver import DoiResolver


def register(subparsers: argparse._SubParsersAction[argparse.ArgumentParser]) -> None:
    parser = subparsers.add_parser("add", help="Add an entry to the bibliography by DOI")
    parser.add_argument("entry", help="DOI of the entry to add")
    parser.set_defaults(handler=run)


def run(args: argparse.Namespace, ctx: CLIContext) -> int:
    repo = open_repo(ctx)
    settings = ctx.settings

    with DoiResolver(
        base_url=settings.doi_url,
        user_agent=settings.user_agent,
        timeout=settings.timeout_seconds,
    ) as resolver:
        entry = EntryService(repo, resolver).add_doi(args.entry)

    ctx.console.print(f"[green]Added[/green] {escape(entry.cite_key)}: {escape(entry.title)}")
    return 0
