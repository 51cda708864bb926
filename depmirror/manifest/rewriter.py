"""
Manifest Rewriter — Turn Glide's output into a mirror-backed glide.yaml.

Two passes, each applied to the primary and test imports alike:

- filter_self_references(): before locking, drop the project's own
  packages (recorded under "ignore") and strip every other entry down to
  its name and subpackages.
- apply_mirrors(): after syncing, emit one entry per locked dependency
  that was mirrored, pinned to the locked version and pointing at the
  mirror URL. Dependencies without a mirror are dropped silently.
"""

from __future__ import annotations

from typing import List, Mapping, Optional, Sequence, Tuple

from .models import Dependency, LockedDependency, Manifest


def is_self_reference(project: str, package: str) -> bool:
    """True if the package lives under the project's own import path."""
    return package.startswith(project)


def _filter(project: str, deps: Sequence[Dependency]) -> Tuple[List[Dependency], List[str]]:
    kept: List[Dependency] = []
    ignored: List[str] = []
    for dep in deps:
        if is_self_reference(project, dep.name):
            ignored.append(dep.name)
        else:
            kept.append(Dependency(name=dep.name, subpackages=list(dep.subpackages)))
    return kept, ignored


def filter_self_references(manifest: Manifest) -> Manifest:
    """Pass A: remove self references and reset entries to name + subpackages."""
    imports, ignored = _filter(manifest.name, manifest.imports)
    dev_imports, dev_ignored = _filter(manifest.name, manifest.dev_imports)

    return manifest.model_copy(
        update={
            "imports": imports,
            "dev_imports": dev_imports,
            "ignore": ignored + dev_ignored,
        }
    )


def _mirrored(
    locks: Sequence[LockedDependency],
    mirror_urls: Mapping[str, Optional[str]],
) -> List[Dependency]:
    deps: List[Dependency] = []
    for lock in locks:
        url = mirror_urls.get(lock.name)
        if not url:
            continue
        deps.append(
            Dependency(
                name=lock.name,
                version=lock.version,
                repo=url,
                subpackages=list(lock.subpackages),
            )
        )
    return deps


def apply_mirrors(
    manifest: Manifest,
    imports: Sequence[LockedDependency],
    dev_imports: Sequence[LockedDependency],
    mirror_urls: Mapping[str, Optional[str]],
) -> Manifest:
    """
    Pass B: rebuild the import lists from locked dependencies.

    Args:
        manifest: The filtered manifest; its metadata and ignore list are kept.
        imports: Locked primary dependencies, in lock order.
        dev_imports: Locked test dependencies, in lock order.
        mirror_urls: Import path → mirror URL, or None when not mirrored.
    """
    return manifest.model_copy(
        update={
            "imports": _mirrored(imports, mirror_urls),
            "dev_imports": _mirrored(dev_imports, mirror_urls),
        }
    )
