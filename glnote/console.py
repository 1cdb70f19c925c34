"""Terminal front end: notifications, progress indicator and the prompt-driven project picker."""

from collections.abc import Callable, Iterator
from contextlib import contextmanager

import typer
from rich.console import Console
from rich.table import Table

from glnote.models import Project
from glnote.picker import REMOTE_SEARCH_PREFIX, ProjectPicker

PICKER_PROMPT = "Project [number to pick, *number to star, ?? to search GitLab, q to cancel]"


class ConsoleNotifier:
    def __init__(self, console: Console | None = None) -> None:
        self.console = console or Console()

    def success(self, message: str) -> None:
        self.console.print(f"[green]✓[/green] {message}")

    def info(self, message: str) -> None:
        self.console.print(message)

    def warning(self, message: str) -> None:
        self.console.print(f"[yellow]Warning:[/yellow] {message}")

    def error(self, message: str) -> None:
        self.console.print(f"[red]{message}[/red]")

    @contextmanager
    def progress(self, message: str) -> Iterator[None]:
        with self.console.status(message):
            yield


def project_table(projects: list[Project], favorites: list[int], title: str = "Projects") -> Table:
    table = Table(title=title)
    table.add_column("#", style="dim", justify="right")
    table.add_column("★")
    table.add_column("Name", style="cyan")
    table.add_column("Path")
    table.add_column("ID", style="dim")
    table.add_column("Description", style="dim")

    for row, project in enumerate(projects, start=1):
        star = "[yellow]★[/yellow]" if project.id in favorites else ""
        table.add_row(
            str(row),
            star,
            project.name,
            project.path_with_namespace,
            str(project.id),
            project.description or "",
        )
    return table


class PromptPickerView:
    """Line-at-a-time picker UI. Each entered line counts as one keystroke burst.

    The prompt blocks until a whole line arrives, so there is never a burst of
    queries to merge. Remote searches run without the debounce delay here.
    """

    search_debounce = 0.0

    def __init__(
        self,
        console: Console | None = None,
        prompt: Callable[..., str] = typer.prompt,
        limit: int = 25,
    ) -> None:
        self.console = console or Console()
        self._prompt = prompt
        self.limit = limit

    async def interact(self, picker: ProjectPicker) -> None:
        query = ""
        shown = picker.items()
        self._render(picker, shown, query)

        while not picker.resolved:
            try:
                raw = self._prompt(PICKER_PROMPT, default="", show_default=False)
            except typer.Abort:
                picker.cancel()
                return

            command = raw.strip()
            if command.lower() in ("q", ":q"):
                picker.cancel()
                return

            if command.isdigit():
                row = int(command)
                if 1 <= row <= min(len(shown), self.limit):
                    picker.choose(shown[row - 1])
                    return
                self.console.print(f"[red]No row {row}.[/red]")
                continue

            if command.startswith("*") and command[1:].isdigit():
                row = int(command[1:])
                if 1 <= row <= min(len(shown), self.limit):
                    project = shown[row - 1]
                    starred = picker.toggle_favorite(project)
                    verb = "Starred" if starred else "Unstarred"
                    self.console.print(f"{verb} {project.path_with_namespace}")
                    if query.startswith(REMOTE_SEARCH_PREFIX):
                        shown = picker.favorites_first(shown)
                    else:
                        shown = picker.filter(query)
                    self._render(picker, shown, query)
                else:
                    self.console.print(f"[red]No row {row}.[/red]")
                continue

            results = await picker.suggestions(raw)
            if results is None:
                continue
            query = raw
            shown = results
            self._render(picker, shown, query)

    def _render(self, picker: ProjectPicker, projects: list[Project], query: str) -> None:
        if not projects:
            message = picker.no_match_message(query) if query else picker.empty_message()
            self.console.print(f"[dim]{message}[/dim]")
            return
        visible = projects[: self.limit]
        favorites = [p.id for p in visible if picker.is_favorite(p)]
        self.console.print(project_table(visible, favorites))
        if len(projects) > self.limit:
            self.console.print(f"[dim]… {len(projects) - self.limit} more, refine your search[/dim]")
