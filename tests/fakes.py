"""Test doubles for the tracker, notifier and picker view."""

from contextlib import contextmanager

from glnote.models import ConnectionResult, Project
from glnote.providers.base import IssueTracker


def make_project(project_id: int, name: str, path: str | None = None, description: str | None = None) -> Project:
    slug = name.lower().replace(" ", "-")
    return Project(
        id=project_id,
        name=name,
        path_with_namespace=path or f"group/{slug}",
        description=description,
        web_url=f"https://gitlab.example/{path or f'group/{slug}'}",
    )


def project_node(project_id: int, name: str | None = None) -> dict:
    name = name or f"project-{project_id}"
    return {
        "id": project_id,
        "name": name,
        "path_with_namespace": f"group/{name}",
        "description": None,
        "web_url": f"https://gitlab.example/group/{name}",
    }


class FakeTracker(IssueTracker):
    def __init__(
        self,
        projects: list[Project] | None = None,
        search_results: list[Project] | None = None,
        issue_url: str = "https://gitlab.example/p/-/issues/7",
        create_error: Exception | None = None,
        list_error: Exception | None = None,
    ) -> None:
        self._projects = projects or []
        self._search_results = search_results or []
        self._issue_url = issue_url
        self._create_error = create_error
        self._list_error = list_error
        self.list_calls = 0
        self.search_calls: list[str] = []
        self.created: list[dict] = []

    async def list_projects(self) -> list[Project]:
        self.list_calls += 1
        if self._list_error is not None:
            raise self._list_error
        return list(self._projects)

    async def search_projects(self, query: str) -> list[Project]:
        self.search_calls.append(query)
        return list(self._search_results)

    async def create_issue(self, project_id: int, title: str, description: str, labels: list[str]) -> str:
        self.created.append({"project_id": project_id, "title": title, "description": description, "labels": labels})
        if self._create_error is not None:
            raise self._create_error
        return self._issue_url

    async def test_connection(self) -> ConnectionResult:
        return ConnectionResult(success=True, message="Connected successfully as tester", username="tester")


class RecordingNotifier:
    def __init__(self) -> None:
        self.messages: list[tuple[str, str]] = []
        self.progress_active = False
        self.progress_entered = 0

    def success(self, message: str) -> None:
        self.messages.append(("success", message))

    def info(self, message: str) -> None:
        self.messages.append(("info", message))

    def warning(self, message: str) -> None:
        self.messages.append(("warning", message))

    def error(self, message: str) -> None:
        self.messages.append(("error", message))

    @contextmanager
    def progress(self, message: str):
        self.progress_entered += 1
        self.progress_active = True
        try:
            yield
        finally:
            self.progress_active = False


class ScriptedView:
    """Picker view that runs a scripted interaction against the picker."""

    def __init__(self, script=None) -> None:
        self._script = script

    async def interact(self, picker) -> None:
        if self._script is not None:
            await self._script(picker)


def choose_by_id(project_id: int) -> ScriptedView:
    async def script(picker) -> None:
        for project in picker.items():
            if project.id == project_id:
                picker.choose(project)
                return

    return ScriptedView(script)
