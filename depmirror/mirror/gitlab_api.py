"""
GitLab API — Namespace lookup, project inventory and project creation.

Thin request/response client over the GitLab REST API. It keeps no state
between calls besides the HTTP session; the caller owns the inventory
snapshot returned by list_projects().
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterator, List, Optional

import httpx

from ..errors import DepMirrorError
from .config import DEFAULT_VISIBILITY

logger = logging.getLogger(__name__)

PER_PAGE = 100


class MirrorHostError(DepMirrorError):
    """The mirror host could not be reached or rejected a request."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.status_code = status_code
        super().__init__(message)


class NamespaceNotFoundError(MirrorHostError):
    """No group matched the requested namespace name."""


class AmbiguousNamespaceError(MirrorHostError):
    """More than one group matched the requested namespace name."""


class ProjectConflictError(MirrorHostError):
    """A project with the requested name already exists in the namespace."""


def _get_headers(token: str) -> Dict[str, str]:
    """Get GitLab API headers."""
    return {
        "Accept": "application/json",
        "Authorization": f"Bearer {token}",
    }


def _is_name_taken(resp: httpx.Response) -> bool:
    if resp.status_code == 409:
        return True
    return resp.status_code == 400 and "already been taken" in resp.text


class GitLabClient:
    """
    Minimal GitLab client for mirror inventory.

    Usage:

        with GitLabClient("https://gitlab.example.com/api/v4", token) as client:
            group_id = client.resolve_namespace("go-mirrors")
            projects = client.list_projects(group_id)
    """

    def __init__(
        self,
        api_url: str,
        token: str,
        timeout: Optional[float] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self.api_url = api_url.rstrip("/")
        self._client = httpx.Client(
            base_url=self.api_url,
            headers=_get_headers(token),
            timeout=timeout,
            transport=transport,
        )

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "GitLabClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    # ─── HTTP helpers ───────────────────────────────────────

    def _request(self, method: str, path: str, **kwargs) -> httpx.Response:
        try:
            resp = self._client.request(method, path, **kwargs)
        except httpx.HTTPError as e:
            raise MirrorHostError(f"{method} {path} failed: {e}") from e
        return resp

    def _check(self, resp: httpx.Response, what: str) -> None:
        if resp.is_success:
            return
        raise MirrorHostError(
            f"{what} failed: HTTP {resp.status_code}: {resp.text[:200]}",
            status_code=resp.status_code,
        )

    def _json(self, resp: httpx.Response, what: str) -> Any:
        try:
            return resp.json()
        except ValueError as e:
            raise MirrorHostError(
                f"{what} returned a non-JSON reply: {resp.text[:200]}",
                status_code=resp.status_code,
            ) from e

    def _paginate(self, path: str, params: Optional[Dict[str, Any]] = None) -> Iterator[Dict[str, Any]]:
        """Yield every item of a paginated collection, following X-Next-Page."""
        query = dict(params or {})
        query["per_page"] = PER_PAGE
        page = 1

        while True:
            query["page"] = page
            resp = self._request("GET", path, params=query)
            self._check(resp, f"GET {path} (page {page})")

            items = self._json(resp, f"GET {path}")
            if not isinstance(items, list):
                raise MirrorHostError(f"GET {path} returned {type(items).__name__}, expected a list")
            yield from items

            next_page = resp.headers.get("X-Next-Page", "").strip()
            if not next_page:
                break
            try:
                page = int(next_page)
            except ValueError as e:
                raise MirrorHostError(f"GET {path} returned bad X-Next-Page '{next_page}'") from e

    # ─── Operations ─────────────────────────────────────────

    def resolve_namespace(self, name: str) -> int:
        """
        Look up a group by name and return its numeric ID.

        Search results are narrowed to exact name/path matches when any
        exist; otherwise the raw search results are used.

        Raises:
            NamespaceNotFoundError: No group matches.
            AmbiguousNamespaceError: More than one group matches.
        """
        groups = list(self._paginate("/groups", {"search": name}))

        exact = [
            g for g in groups
            if name in (g.get("name"), g.get("path"), g.get("full_path"))
        ]
        candidates: List[Dict[str, Any]] = exact or groups

        if not candidates:
            raise NamespaceNotFoundError(f"Can't find the group '{name}'")
        if len(candidates) > 1:
            found = ", ".join(str(g.get("full_path") or g.get("name")) for g in candidates)
            raise AmbiguousNamespaceError(
                f"Group name '{name}' is ambiguous, matches: {found}"
            )

        try:
            group_id = int(candidates[0]["id"])
        except (KeyError, TypeError, ValueError) as e:
            raise MirrorHostError(f"Group '{name}' has no usable id") from e
        logger.info(f"[gitlab] Group '{name}' resolved to id {group_id}")
        return group_id

    def list_projects(self, namespace_id: int) -> Dict[str, str]:
        """Return {project name: https clone URL} for every project in the group."""
        projects: Dict[str, str] = {}
        for project in self._paginate(f"/groups/{namespace_id}/projects"):
            try:
                projects[project["name"]] = project["http_url_to_repo"]
            except (KeyError, TypeError) as e:
                raise MirrorHostError(f"Unexpected project entry in group {namespace_id}: {project!r:.200}") from e

        logger.info(f"[gitlab] Group {namespace_id} holds {len(projects)} project(s)")
        return projects

    def create_project(
        self,
        name: str,
        namespace_id: int,
        visibility: str = DEFAULT_VISIBILITY,
    ) -> str:
        """
        Create a project in the group and return its https clone URL.

        Raises:
            ProjectConflictError: The name is already taken in the group.
        """
        resp = self._request(
            "POST",
            "/projects",
            json={
                "name": name,
                "path": name,
                "namespace_id": namespace_id,
                "visibility": visibility,
            },
        )
        if _is_name_taken(resp):
            raise ProjectConflictError(
                f"Project '{name}' already exists in group {namespace_id}",
                status_code=resp.status_code,
            )
        self._check(resp, f"Create project '{name}'")

        data = self._json(resp, f"Create project '{name}'")
        try:
            url = data["http_url_to_repo"]
        except (KeyError, TypeError) as e:
            raise MirrorHostError(f"Create project '{name}' returned no clone URL") from e
        logger.info(f"[gitlab] Created project {url}")
        return url
