"""glnote CLI: all commands."""

import asyncio
import logging
from pathlib import Path
from typing import Annotated

import typer
from rich import print as rprint
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from glnote.console import ConsoleNotifier, PromptPickerView, project_table
from glnote.orchestrator import IssueCreator, Outcome
from glnote.picker import dedupe_projects, sort_projects_favoring
from glnote.providers.gitlab import DEFAULT_GITLAB_URL, GitLabProvider
from glnote.settings import CONFIG_PATH, SettingsStore
from glnote.vault import Vault

app = typer.Typer(help="glnote: create GitLab issues from Obsidian notes", no_args_is_help=True)

VaultOpt = Annotated[
    Path,
    typer.Option("--vault", envvar="GLNOTE_VAULT", help="Vault root directory"),
]


# ---------------------------------------------------------------------------
# Wiring
# ---------------------------------------------------------------------------


def get_store() -> SettingsStore:
    return SettingsStore(CONFIG_PATH)


def get_provider(store: SettingsStore) -> GitLabProvider:
    settings = store.settings
    if not settings.has_token:
        rprint("[red]No GitLab token configured. Run: glnote init[/red]")
        raise typer.Exit(1)
    return GitLabProvider(settings.token.get_secret_value(), settings.gitlab_url)


@app.callback()
def main(
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Show debug logging")] = False,
) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )
    # httpx logs every request at INFO; keep it out of the way unless asked.
    logging.getLogger("httpx").setLevel(logging.DEBUG if verbose else logging.WARNING)


def _mask(val: str) -> str:
    if not val:
        return "[dim](not set)[/dim]"
    if len(val) <= 5:
        return "***"
    return f"...{val[-5:]}"


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


@app.command("create")
def create(
    note: Annotated[Path | None, typer.Argument(help="Note to turn into an issue (default: last modified note)")] = None,
    vault: VaultOpt = Path("."),
) -> None:
    """Create a GitLab issue from a note and record its URL in the note's frontmatter."""
    console = Console()
    view = PromptPickerView(console)
    creator = IssueCreator(
        store=get_store(),
        vault=Vault(vault),
        notifier=ConsoleNotifier(console),
        view=view,
        search_debounce=view.search_debounce,
    )
    outcome = asyncio.run(creator.run(note))
    if outcome is Outcome.FAILED:
        raise typer.Exit(1)


@app.command("projects")
def list_projects(
    search: Annotated[str | None, typer.Option("--search", "-s", help="Search GitLab instead of listing")] = None,
) -> None:
    """List GitLab projects you are a member of, favorites first."""
    store = get_store()
    provider = get_provider(store)
    if search:
        projects = asyncio.run(provider.search_projects(search))
    else:
        projects = asyncio.run(provider.list_projects())

    favorites = store.settings.fav_projects
    ordered = sort_projects_favoring(dedupe_projects(projects), favorites)
    if not ordered:
        rprint("[dim]No projects found.[/dim]")
        return
    rprint(project_table(ordered, favorites))


@app.command("favorite")
def favorite(
    project_id: Annotated[int, typer.Argument(help="GitLab project ID")],
) -> None:
    """Star or unstar a project; starred projects sort first in the picker."""
    store = get_store()
    if store.toggle_favorite(project_id):
        rprint(f"[green]✓[/green] Project {project_id} added to favorites")
    else:
        rprint(f"[green]✓[/green] Project {project_id} removed from favorites")


@app.command("test-connection")
def test_connection() -> None:
    """Check the configured token against the GitLab instance."""
    provider = get_provider(get_store())
    result = asyncio.run(provider.test_connection())
    if result.success:
        rprint(f"[green]✓[/green] {result.message}")
    else:
        rprint(f"[red]Connection failed: {result.message}[/red]")
        raise typer.Exit(1)


@app.command("config-set")
def config_set(
    token: Annotated[str | None, typer.Option("--token", help="GitLab Personal Access Token")] = None,
    labels: Annotated[str | None, typer.Option("--labels", help="Comma-separated default labels")] = None,
    url: Annotated[str | None, typer.Option("--url", help="GitLab instance URL")] = None,
) -> None:
    """Update settings. Each given value is saved immediately."""
    store = get_store()
    changes = {
        key: value
        for key, value in (("token", token), ("default_labels", labels), ("gitlab_url", url))
        if value is not None
    }
    if not changes:
        rprint("[yellow]Nothing to change.[/yellow] Pass --token, --labels or --url.")
        raise typer.Exit(1)
    for key, value in changes.items():
        store.update(**{key: value})
        rprint(f"[green]✓[/green] Saved {key}")


@app.command("config-show")
def config_show() -> None:
    """Show resolved configuration (masks the token)."""
    store = get_store()
    settings = store.settings

    table = Table(title="glnote Configuration")
    table.add_column("Field", style="bold")
    table.add_column("Value")

    table.add_row("config file", str(store.path))
    table.add_row("token", _mask(settings.token.get_secret_value()))
    table.add_row("gitlab_url", settings.gitlab_url)
    table.add_row("default_labels", ", ".join(settings.labels()) or "[dim](none)[/dim]")
    table.add_row("fav_projects", ", ".join(str(p) for p in settings.fav_projects) or "[dim](none)[/dim]")

    rprint(table)


@app.command("init")
def init_cmd() -> None:
    """Interactive first-time setup wizard."""
    rprint("[bold]glnote Setup Wizard[/bold]")
    rprint("")

    store = get_store()
    settings = store.settings

    rprint("Create a token at GitLab → User Settings → Access Tokens with the \"api\" scope.")
    token = typer.prompt("Paste token", hide_input=True).strip()
    if not token:
        rprint("[red]Token cannot be empty.[/red]")
        raise typer.Exit(1)
    store.update(token=token)

    url = typer.prompt("GitLab instance URL", default=settings.gitlab_url or DEFAULT_GITLAB_URL).strip()
    store.update(gitlab_url=url)

    labels = typer.prompt("Default labels (comma-separated, or leave blank)", default="").strip()
    store.update(default_labels=labels)

    rprint(f"[green]✓[/green] Settings written to {store.path}")

    if typer.confirm("Test the connection now?", default=True):
        provider = GitLabProvider(token, store.settings.gitlab_url)
        result = asyncio.run(provider.test_connection())
        if result.success:
            rprint(f"[green]✓[/green] {result.message}")
        else:
            rprint(f"[yellow]Warning:[/yellow] Connection failed: {result.message}")

    rprint("")
    config_show()
