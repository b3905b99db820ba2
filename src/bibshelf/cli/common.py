from __future__ import annotations

from bibshelf.application.services.project_service import ProjectService
from bibshelf.application.services.selector_service import SelectorService
from bibshelf.cli.context import CLIContext
from bibshelf.infrastructure.db.repos.entry_repo import EntryRepo


def open_repo(ctx: CLIContext) -> EntryRepo:
    # Schema creation is idempotent; running it on every command keeps old
    # databases current.
    ProjectService(ctx.paths).init_project()
    return EntryRepo(ctx.paths.db_path)


def select_key(ctx: CLIContext, repo: EntryRepo) -> str:
    """Pick a cite key interactively; "" means the user cancelled."""
    selector = SelectorService(ctx.runner, ctx.settings.selector)
    return selector.select(repo.list_all())
