"""
Mirror Orchestrator — Runs the whole mirror pipeline once.

    resolve group → list group projects → glide init → drop self references
    → glide install → sync every locked dependency → write glide.yaml

## Usage:

    from depmirror.mirror.config import SyncSettings
    from depmirror.orchestrator import MirrorOrchestrator

    settings = SyncSettings.from_env(url, group, token)
    report = MirrorOrchestrator(settings).run()

Every step is fatal on failure; glide.yaml only receives mirror URLs once
every dependency has been pushed.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from .manifest.loader import save_manifest
from .manifest.rewriter import apply_mirrors, filter_self_references
from .mirror.config import NamespaceContext, SyncSettings
from .mirror.gitlab_api import GitLabClient
from .mirror.syncer import RepositorySyncer
from .resolver import GlideResolver

logger = logging.getLogger(__name__)


@dataclass
class RunReport:
    """Summary of a completed run."""

    imports: int = 0
    dev_imports: int = 0
    skipped: List[str] = field(default_factory=list)
    ignored: List[str] = field(default_factory=list)
    created: List[str] = field(default_factory=list)

    @property
    def mirrored(self) -> int:
        return self.imports + self.dev_imports


class MirrorOrchestrator:
    """Sequences namespace lookup, glide, syncing and manifest rewriting."""

    def __init__(
        self,
        settings: SyncSettings,
        client: Optional[GitLabClient] = None,
        resolver: Optional[GlideResolver] = None,
    ):
        self.settings = settings
        self.client = client or GitLabClient(settings.api_url, settings.token)
        self.resolver = resolver or GlideResolver(settings.project_dir, settings.glide_bin)

    def run(self) -> RunReport:
        settings = self.settings
        report = RunReport()

        group_id = self.client.resolve_namespace(settings.namespace)
        namespace = NamespaceContext(namespace_id=group_id, namespace_name=settings.namespace)
        inventory = self.client.list_projects(group_id)

        self.resolver.clear_cache()
        generated = self.resolver.generate_manifest()

        cleaned = filter_self_references(generated)
        report.ignored = list(cleaned.ignore)
        for name in report.ignored:
            logger.info(f"Ignoring self reference '{name}'")
        save_manifest(cleaned, settings.manifest_path)
        logger.info(f"Recreated '{settings.manifest_path.name}'")

        lock = self.resolver.install_lock()

        syncer = RepositorySyncer(
            self.client,
            namespace,
            inventory,
            settings.cache_root,
            visibility=settings.visibility,
        )
        mirror_urls: Dict[str, Optional[str]] = {}
        for dep in [*lock.imports, *lock.dev_imports]:
            result = syncer.sync(dep.name)
            mirror_urls[dep.name] = result.mirror_url
            if not result.mirrored and dep.name not in report.skipped:
                report.skipped.append(dep.name)

        final = apply_mirrors(cleaned, lock.imports, lock.dev_imports, mirror_urls)
        save_manifest(final, settings.manifest_path)

        report.imports = len(final.imports)
        report.dev_imports = len(final.dev_imports)
        report.created = list(syncer.created)
        logger.info(f"Created {settings.manifest_path.name} with {report.mirrored} repos.")
        return report

    def close(self) -> None:
        self.client.close()
