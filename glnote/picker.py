"""Interactive project selection.

The picker loads the member project list once per instance, filters it
locally with a fuzzy subsequence match, and switches to GitLab's own search
when the query starts with ``??``. Remote searches are debounced so only the
last keystroke in a burst reaches the API.

Lifecycle::

    IDLE -> LOADING -> READY -> RESOLVED

RESOLVED is terminal and carries the chosen project or None (cancelled). The
choice lives in a one-shot future, so the first resolution wins and later
attempts are ignored.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable, Iterable
from enum import Enum
from typing import Any, Protocol

from glnote.errors import GlnoteError
from glnote.models import Project
from glnote.providers.base import IssueTracker
from glnote.settings import SettingsStore

logger = logging.getLogger(__name__)

REMOTE_SEARCH_PREFIX = "??"
SEARCH_DEBOUNCE_SECONDS = 0.3

_WORD_BOUNDARIES = " /-_."


class PickerState(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    READY = "ready"
    RESOLVED = "resolved"


class Notifier(Protocol):
    def warning(self, message: str) -> None: ...


class PickerView(Protocol):
    async def interact(self, picker: "ProjectPicker") -> None: ...


def sort_projects_favoring(projects: Iterable[Project], favorites: Iterable[int]) -> list[Project]:
    """Favorites first, then alphabetical by display name."""
    fav_ids = set(favorites)
    return sorted(projects, key=lambda p: (p.id not in fav_ids, p.name.casefold(), p.name))


def dedupe_projects(projects: Iterable[Project]) -> list[Project]:
    """Drop repeated project IDs; the first occurrence wins."""
    seen: set[int] = set()
    result = []
    for project in projects:
        if project.id in seen:
            continue
        seen.add(project.id)
        result.append(project)
    return result


def fuzzy_score(query: str, text: str) -> float | None:
    """Score ``query`` as a case-insensitive subsequence of ``text``.

    Returns None when some query character cannot be matched in order.
    Consecutive matches and matches at word starts score higher.
    """
    needle = "".join(query.lower().split())
    haystack = text.lower()
    if not needle:
        return 0.0

    score = 0.0
    last = -1
    for char in needle:
        idx = haystack.find(char, last + 1)
        if idx == -1:
            return None
        if idx == last + 1:
            score += 2.0
        if idx == 0 or haystack[idx - 1] in _WORD_BOUNDARIES:
            score += 1.0
        score -= (idx - last - 1) * 0.01
        last = idx
    return score


class Debouncer:
    """Runs only the most recent call after a quiet period.

    Each call cancels whatever is still pending.
    """

    def __init__(self, delay: float) -> None:
        self.delay = delay
        self._pending: asyncio.Task | None = None

    def call(self, fn: Callable[..., Awaitable[Any]], *args: Any) -> asyncio.Task:
        self.cancel()
        self._pending = asyncio.ensure_future(self._run(fn, *args))
        return self._pending

    async def _run(self, fn: Callable[..., Awaitable[Any]], *args: Any) -> Any:
        await asyncio.sleep(self.delay)
        return await fn(*args)

    def cancel(self) -> None:
        if self._pending is not None and not self._pending.done():
            self._pending.cancel()
        self._pending = None


class ProjectPicker:
    def __init__(
        self,
        tracker: IssueTracker,
        store: SettingsStore,
        notifier: Notifier | None = None,
        *,
        debounce: float = SEARCH_DEBOUNCE_SECONDS,
    ) -> None:
        self._tracker = tracker
        self._store = store
        self._notifier = notifier
        self._debouncer = Debouncer(debounce)
        self._projects: list[Project] | None = None
        self._loading: asyncio.Task | None = None
        self._choice: asyncio.Future | None = None
        self.state = PickerState.IDLE

    @property
    def search_debounce(self) -> float:
        return self._debouncer.delay

    # -- loading ----------------------------------------------------------

    async def open(self) -> None:
        """Load the project list. Concurrent calls share one in-flight load."""
        if self.state is PickerState.RESOLVED:
            return
        self._ensure_choice()
        if self._loading is None:
            self.state = PickerState.LOADING
            self._loading = asyncio.ensure_future(self._load())
        await self._loading

    async def _load(self) -> None:
        try:
            projects = await self._tracker.list_projects()
            logger.debug("Loaded %d projects", len(projects))
        except GlnoteError as exc:
            logger.warning("Failed to load projects: %s", exc)
            if self._notifier is not None:
                self._notifier.warning(f"Failed to load projects: {exc}")
            projects = []
        if self.state is PickerState.RESOLVED:
            return
        self._projects = projects
        self.state = PickerState.READY

    @property
    def projects(self) -> list[Project]:
        return list(self._projects or [])

    # -- listing ----------------------------------------------------------

    def _favorites(self) -> list[int]:
        return self._store.settings.fav_projects

    def is_favorite(self, project: Project) -> bool:
        return self._store.settings.is_favorite(project.id)

    def items(self) -> list[Project]:
        return sort_projects_favoring(self.projects, self._favorites())

    def favorites_first(self, projects: Iterable[Project]) -> list[Project]:
        return sort_projects_favoring(projects, self._favorites())

    def filter(self, query: str) -> list[Project]:
        items = self.items()
        if not query.strip():
            return items
        scored = []
        for position, project in enumerate(items):
            score = fuzzy_score(query, project.search_text)
            if score is not None:
                scored.append((-score, position, project))
        scored.sort(key=lambda entry: entry[:2])
        return [project for _, _, project in scored]

    async def suggestions(self, query: str) -> list[Project] | None:
        """Projects to show for ``query``.

        Returns None when a newer keystroke superseded this remote search.
        """
        if not query.startswith(REMOTE_SEARCH_PREFIX):
            self._debouncer.cancel()
            return self.filter(query)

        term = query[len(REMOTE_SEARCH_PREFIX) :].strip()
        if not term:
            self._debouncer.cancel()
            return []

        task = self._debouncer.call(self._remote_search, term)
        await asyncio.wait({task})
        if task.cancelled():
            return None
        return task.result()

    async def _remote_search(self, term: str) -> list[Project]:
        found = await self._tracker.search_projects(term)
        return self.favorites_first(dedupe_projects([*self.projects, *found]))

    def empty_message(self) -> str:
        if self.state is PickerState.LOADING:
            return "Loading projects..."
        if self.state is PickerState.READY and not self._projects:
            return "No projects found. Make sure you have access to GitLab projects."
        return f'Type to search projects, or use "{REMOTE_SEARCH_PREFIX}" for remote search...'

    @staticmethod
    def no_match_message(query: str) -> str:
        return f'No projects found matching "{query}"'

    # -- favorites --------------------------------------------------------

    def toggle_favorite(self, project: Project) -> bool:
        """Flip the favorite flag and persist. Never selects the project."""
        return self._store.toggle_favorite(project.id)

    # -- resolution -------------------------------------------------------

    def _ensure_choice(self) -> asyncio.Future:
        if self._choice is None:
            self._choice = asyncio.get_running_loop().create_future()
        return self._choice

    @property
    def resolved(self) -> bool:
        return self._choice is not None and self._choice.done()

    def _resolve(self, project: Project | None) -> None:
        choice = self._ensure_choice()
        if choice.done():
            return
        choice.set_result(project)
        self.state = PickerState.RESOLVED
        self._debouncer.cancel()

    def choose(self, project: Project) -> None:
        self._resolve(project)

    def cancel(self) -> None:
        self._resolve(None)

    def close(self) -> None:
        """Tear down: drop any pending search, resolve as cancelled if still open, forget the cache."""
        self._debouncer.cancel()
        self._resolve(None)
        self._projects = None

    async def select(self, view: PickerView) -> Project | None:
        """Open the picker, let ``view`` drive it, and return the choice (None if cancelled)."""
        choice = self._ensure_choice()
        try:
            await self.open()
            await view.interact(self)
        finally:
            self.close()
        return choice.result()
