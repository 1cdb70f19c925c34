"""Abstract base class for issue tracker providers."""

from abc import ABC, abstractmethod

from glnote.models import ConnectionResult, Project


class IssueTracker(ABC):
    @abstractmethod
    async def list_projects(self) -> list[Project]: ...

    @abstractmethod
    async def search_projects(self, query: str) -> list[Project]: ...

    @abstractmethod
    async def create_issue(
        self,
        project_id: int,
        title: str,
        description: str,
        labels: list[str],
    ) -> str: ...

    @abstractmethod
    async def test_connection(self) -> ConnectionResult: ...
