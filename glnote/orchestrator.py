"""The create-issue-from-note command.

Every run ends in exactly one user notification: success with the issue URL,
a specific failure, a cancellation notice, or success-with-warning when the
issue exists but the note could not be updated.
"""

import logging
from collections.abc import Callable
from contextlib import AbstractContextManager
from enum import Enum
from pathlib import Path
from typing import Protocol

from glnote.content import transform_markdown
from glnote.errors import GlnoteError, LocalWriteError, SelectionCancelled
from glnote.frontmatter import add_issue_url, has_frontmatter_block
from glnote.picker import SEARCH_DEBOUNCE_SECONDS, PickerView, ProjectPicker
from glnote.providers.base import IssueTracker
from glnote.providers.gitlab import GitLabProvider
from glnote.settings import SettingsStore
from glnote.vault import Vault

logger = logging.getLogger(__name__)


class Notifier(Protocol):
    def success(self, message: str) -> None: ...
    def info(self, message: str) -> None: ...
    def warning(self, message: str) -> None: ...
    def error(self, message: str) -> None: ...
    def progress(self, message: str) -> AbstractContextManager[None]: ...


class Outcome(str, Enum):
    CREATED = "created"
    CREATED_WITH_WARNING = "created_with_warning"
    CANCELLED = "cancelled"
    FAILED = "failed"


TrackerFactory = Callable[[str, str], IssueTracker]


class IssueCreator:
    def __init__(
        self,
        store: SettingsStore,
        vault: Vault,
        notifier: Notifier,
        view: PickerView,
        tracker_factory: TrackerFactory = GitLabProvider,
        search_debounce: float = SEARCH_DEBOUNCE_SECONDS,
    ) -> None:
        self._store = store
        self._vault = vault
        self._notifier = notifier
        self._view = view
        self._tracker_factory = tracker_factory
        self._search_debounce = search_debounce

    async def run(self, note: Path | str | None = None) -> Outcome:
        try:
            return await self._run(note)
        except Exception:
            logger.exception("Unexpected error while creating GitLab issue")
            self._notifier.error("An unexpected error occurred while creating the GitLab issue.")
            return Outcome.FAILED

    async def _run(self, note: Path | str | None) -> Outcome:
        settings = self._store.settings
        if not settings.has_token:
            self._notifier.error(
                "GitLab Personal Access Token is required. Run 'glnote init' or 'glnote config-set --token'."
            )
            return Outcome.FAILED

        path = self._vault.resolve(note)
        if path is None:
            self._notifier.error("No active file found. Please open a markdown file first.")
            return Outcome.FAILED
        if not self._vault.is_note(path):
            self._notifier.error("Active file is not a markdown file. Please select a .md file.")
            return Outcome.FAILED

        tracker = self._tracker_factory(settings.token.get_secret_value(), settings.gitlab_url)
        picker = ProjectPicker(tracker, self._store, self._notifier, debounce=self._search_debounce)
        try:
            project = await picker.select(self._view)
            if project is None:
                raise SelectionCancelled("Issue creation cancelled: no project selected.")
        except SelectionCancelled as exc:
            self._notifier.info(str(exc))
            return Outcome.CANCELLED

        try:
            content = await self._vault.read(path)
        except GlnoteError as exc:
            self._notifier.error(str(exc))
            return Outcome.FAILED

        title = path.stem
        if not title.strip():
            self._notifier.error("File has no valid title. Cannot create GitLab issue.")
            return Outcome.FAILED

        with self._notifier.progress(f"Creating GitLab issue in {project.path_with_namespace}..."):
            description = transform_markdown(content)
            try:
                issue_url = await tracker.create_issue(project.id, title, description, settings.labels())
            except GlnoteError as exc:
                logger.debug("create_issue failed: %r", exc)
                self._notifier.error(f"Error creating GitLab issue: {exc}")
                return Outcome.FAILED

            try:
                await self._record_issue_url(path, content, issue_url)
            except LocalWriteError as exc:
                logger.warning("Issue %s created but %s was not updated: %s", issue_url, path, exc)
                self._notifier.warning(
                    f"GitLab issue created successfully!\nURL: {issue_url}\n\n"
                    f"Could not update file frontmatter: {exc}"
                )
                return Outcome.CREATED_WITH_WARNING

        self._notifier.success(f"GitLab issue created successfully!\nURL: {issue_url}")
        return Outcome.CREATED

    async def _record_issue_url(self, path: Path, content: str, issue_url: str) -> None:
        if self._vault.has_metadata_block(path) != has_frontmatter_block(content):
            logger.debug("Metadata hint for %s disagrees with frontmatter detection", path)
        updated = add_issue_url(content, issue_url)
        if updated == content:
            raise LocalWriteError("No changes made to file content")
        await self._vault.write(path, updated)
