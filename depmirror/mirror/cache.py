"""
Local Cache — Locate Glide's cached clone of a dependency.
"""

from __future__ import annotations

from pathlib import Path

from .config import CACHE_SCHEME_PREFIX


def clone_path(cache_root: Path, cache_name: str) -> Path:
    """Path where Glide keeps the clone for a cache name."""
    return Path(cache_root) / f"{CACHE_SCHEME_PREFIX}{cache_name}"


def has_local_clone(cache_root: Path, cache_name: str) -> bool:
    """True if a clone directory exists. Repository integrity is not checked."""
    return clone_path(cache_root, cache_name).is_dir()
