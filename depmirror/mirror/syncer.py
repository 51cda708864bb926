"""
Repository Syncer — Mirror one cached dependency into the GitLab group.

For each import path:

1. derive cache and mirror names
2. skip if Glide never cloned it
3. reuse the mirror project from the inventory, or create it
4. point the clone's "upstream" remote at the mirror
5. push all branches, then all tags

Any failure in steps 3-5 propagates and aborts the run.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional

from . import git_sync
from .cache import clone_path, has_local_clone
from .config import DEFAULT_VISIBILITY, NamespaceContext
from .gitlab_api import GitLabClient
from .naming import NameRegistry, cache_name

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SyncResult:
    """Outcome for one dependency: a mirror URL, or None if never cached."""

    import_path: str
    mirror_url: Optional[str] = None

    @property
    def mirrored(self) -> bool:
        return self.mirror_url is not None


class RepositorySyncer:
    """
    Synchronizes dependencies one at a time against an inventory snapshot.

    The inventory dict is copied on construction and extended with every
    project created during the run, so a name is created at most once.
    """

    def __init__(
        self,
        client: GitLabClient,
        namespace: NamespaceContext,
        inventory: Dict[str, str],
        cache_root: Path,
        visibility: str = DEFAULT_VISIBILITY,
    ):
        self.client = client
        self.namespace = namespace
        self.inventory = dict(inventory)
        self.cache_root = Path(cache_root)
        self.visibility = visibility
        self.names = NameRegistry()
        self.created: List[str] = []
        self._done: Dict[str, SyncResult] = {}

    def resolve_mirror_url(self, name: str) -> str:
        """Return the URL of the mirror project, creating it if absent."""
        url = self.inventory.get(name)
        if url:
            logger.info(f"[sync] Remote repo '{url}' already exists")
            return url

        url = self.client.create_project(name, self.namespace.namespace_id, self.visibility)
        self.inventory[name] = url
        self.created.append(name)
        logger.info(f"[sync] Remote repo '{url}' created in group '{self.namespace.namespace_name or self.namespace.namespace_id}'")
        return url

    def sync(self, import_path: str) -> SyncResult:
        """Mirror a single dependency. Returns an absent result if not cached."""
        if import_path in self._done:
            return self._done[import_path]

        logger.info(f"[sync] Processing '{import_path}'", extra={"dependency": import_path})

        local_name = cache_name(import_path)
        if not has_local_clone(self.cache_root, local_name):
            logger.info(f"[sync] No local cache for '{import_path}', skipping")
            result = SyncResult(import_path)
            self._done[import_path] = result
            return result

        repo = clone_path(self.cache_root, local_name)
        logger.info(f"[sync] Found local cache repo '{repo}'")

        name = self.names.claim(import_path)
        url = self.resolve_mirror_url(name)

        git_sync.configure_upstream(repo, url)
        git_sync.push_branches(repo)
        git_sync.push_tags(repo)

        logger.info(
            f"[sync] Updated with upstream '{url}'",
            extra={"dependency": import_path, "mirror_name": name},
        )
        result = SyncResult(import_path, url)
        self._done[import_path] = result
        return result
