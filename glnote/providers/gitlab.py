"""GitLab REST API v4 provider."""

import asyncio
import logging
from typing import Any

import httpx

from glnote.errors import (
    GlnoteError,
    InvalidResponseError,
    NetworkError,
    RequestTimeoutError,
    ValidationError,
    error_for_status,
)
from glnote.models import ConnectionResult, Project, partition_projects
from glnote.providers.base import IssueTracker

logger = logging.getLogger(__name__)

DEFAULT_GITLAB_URL = "https://gitlab.com"
API_PREFIX = "/api/v4"

PER_PAGE = 100
SEARCH_PER_PAGE = 50
MAX_PAGES = 100

REQUEST_TIMEOUT = 30.0
PROBE_TIMEOUT = 10.0


def sanitize_base_url(url: str) -> str:
    return (url or DEFAULT_GITLAB_URL).strip().rstrip("/")


class GitLabProvider(IssueTracker):
    def __init__(
        self,
        token: str,
        base_url: str = DEFAULT_GITLAB_URL,
        *,
        timeout: float = REQUEST_TIMEOUT,
        probe_timeout: float = PROBE_TIMEOUT,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url = sanitize_base_url(base_url)
        self._timeout = timeout
        self._probe_timeout = probe_timeout
        self._transport = transport
        self._headers = {
            "Authorization": f"Bearer {token}",
            "Content-Type": "application/json",
        }

    @property
    def base_url(self) -> str:
        return self._base_url

    async def _request(
        self,
        method: str,
        path: str,
        *,
        params: dict | None = None,
        body: dict | None = None,
        timeout: float | None = None,
    ) -> httpx.Response:
        """Send one request; the deadline cancels it in flight. No retries."""
        deadline = timeout or self._timeout
        url = f"{self._base_url}{API_PREFIX}{path}"
        try:
            async with asyncio.timeout(deadline):
                async with httpx.AsyncClient(
                    headers=self._headers,
                    timeout=deadline,
                    transport=self._transport,
                ) as client:
                    response = await client.request(method, url, params=params, json=body)
        except (TimeoutError, httpx.TimeoutException) as exc:
            raise RequestTimeoutError(
                "Request timeout: GitLab API request took too long. Please try again."
            ) from exc
        except httpx.TransportError as exc:
            raise NetworkError(
                "Network error: Unable to connect to GitLab. "
                "Please check your internet connection and GitLab instance URL."
            ) from exc

        if response.is_error:
            raise error_for_status(response.status_code, response.reason_phrase, _error_detail(response))
        return response

    async def _get_list(self, path: str, params: dict) -> tuple[list[Any], httpx.Response]:
        response = await self._request("GET", path, params=params)
        payload = _json(response)
        if not isinstance(payload, list):
            raise ValidationError("Unexpected response format from GitLab API")
        return payload, response

    async def list_projects(self) -> list[Project]:
        projects: list[Project] = []
        page = 1
        fetched = 0
        while True:
            items, response = await self._get_list(
                "/projects",
                {"membership": "true", "simple": "true", "per_page": PER_PAGE, "page": page},
            )
            fetched += 1
            valid, invalid = partition_projects(items)
            if invalid:
                logger.debug("Dropped %d malformed project(s) from page %d", len(invalid), page)
            projects.extend(valid)
            logger.debug("Fetched %d projects from page %d", len(valid), page)

            # X-Next-Page wins over the short-page heuristic when both are present.
            next_page = response.headers.get("X-Next-Page", "").strip()
            if next_page.isdigit():
                page = int(next_page)
            elif len(items) < PER_PAGE:
                break
            else:
                page += 1

            if fetched >= MAX_PAGES:
                logger.warning("Reached maximum page limit (%d) while fetching GitLab projects", MAX_PAGES)
                break

        logger.debug("Fetched %d GitLab projects in total", len(projects))
        return projects

    async def search_projects(self, query: str) -> list[Project]:
        # Best-effort: this backs the interactive "??" search, so failures become no results.
        term = query.strip()
        if not term:
            return []
        try:
            items, _ = await self._get_list(
                "/projects",
                {"membership": "true", "simple": "true", "search": term, "per_page": SEARCH_PER_PAGE},
            )
        except GlnoteError as exc:
            logger.warning("Project search for %r failed: %s", term, exc)
            return []
        valid, invalid = partition_projects(items)
        if invalid:
            logger.debug("Dropped %d malformed project(s) from search results", len(invalid))
        return valid

    async def create_issue(
        self,
        project_id: int,
        title: str,
        description: str,
        labels: list[str],
    ) -> str:
        if not title.strip():
            raise ValidationError("Issue title is required.")
        if not description.strip():
            raise ValidationError("Issue description is required.")
        response = await self._request(
            "POST",
            f"/projects/{project_id}/issues",
            body={"title": title, "description": description, "labels": list(labels)},
        )
        node = _json(response)
        web_url = node.get("web_url") if isinstance(node, dict) else None
        if not isinstance(web_url, str) or not web_url:
            raise InvalidResponseError(
                "Invalid response from GitLab API. Issue may have been created but URL is missing."
            )
        return web_url

    async def test_connection(self) -> ConnectionResult:
        try:
            response = await self._request("GET", "/user", timeout=self._probe_timeout)
            node = _json(response)
        except RequestTimeoutError:
            return ConnectionResult(success=False, message="Connection timeout")
        except GlnoteError as exc:
            return ConnectionResult(success=False, message=str(exc))

        username = "Unknown"
        if isinstance(node, dict):
            username = node.get("username") or node.get("name") or "Unknown"
        return ConnectionResult(
            success=True,
            message=f"Connected successfully as {username}",
            username=username,
        )


def _json(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError as exc:
        raise ValidationError("Unexpected response format from GitLab API") from exc


def _error_detail(response: httpx.Response) -> str | None:
    try:
        data = response.json()
    except ValueError:
        return None
    if isinstance(data, dict) and data.get("message"):
        return str(data["message"])
    return None
