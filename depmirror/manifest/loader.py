"""
Manifest Loader — Read and write glide.yaml / glide.lock.
"""

from __future__ import annotations

import logging
import shutil
from pathlib import Path
from typing import Any, Dict

import yaml
from pydantic import ValidationError

from ..errors import DepMirrorError
from .models import Lockfile, Manifest

logger = logging.getLogger(__name__)


class ManifestError(DepMirrorError):
    """A manifest or lock file is missing or malformed."""


def load_yaml(path: Path) -> Dict[str, Any]:
    """Load a YAML mapping from a file."""
    try:
        with path.open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except OSError as e:
        raise ManifestError(f"Cannot read {path}: {e}") from e
    except yaml.YAMLError as e:
        raise ManifestError(f"Cannot parse {path}: {e}") from e

    if not isinstance(data, dict):
        raise ManifestError(f"{path} does not contain a YAML mapping")
    return data


def load_manifest(path: Path) -> Manifest:
    """Load and validate a glide.yaml file."""
    data = load_yaml(path)
    try:
        manifest = Manifest(**data)
    except ValidationError as e:
        raise ManifestError(f"Invalid manifest {path}: {e}") from e
    logger.debug(
        f"Manifest loaded: package={manifest.name}, "
        f"imports={len(manifest.imports)}, testImports={len(manifest.dev_imports)}"
    )
    return manifest


def load_lockfile(path: Path) -> Lockfile:
    """Load and validate a glide.lock file."""
    data = load_yaml(path)
    try:
        lock = Lockfile(**data)
    except ValidationError as e:
        raise ManifestError(f"Invalid lock file {path}: {e}") from e
    logger.debug(
        f"Lock loaded: hash={lock.hash[:12]}, "
        f"imports={len(lock.imports)}, testImports={len(lock.dev_imports)}"
    )
    return lock


def dump_manifest(manifest: Manifest) -> str:
    """Serialize a manifest to glide.yaml text."""
    return yaml.safe_dump(
        manifest.to_yaml_dict(),
        default_flow_style=False,
        sort_keys=False,
    )


def save_manifest(manifest: Manifest, path: Path) -> None:
    """
    Write a manifest to disk.

    Uses atomic write (write to temp, then rename) so a failed run never
    leaves a truncated glide.yaml behind.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    temp_path = path.with_suffix(path.suffix + ".tmp")

    with temp_path.open("w", encoding="utf-8") as f:
        f.write(dump_manifest(manifest))

    temp_path.replace(path)
    logger.info(f"Manifest saved: {len(manifest.imports)} import(s) → {path.name}")


def remove_path(path: Path) -> bool:
    """Remove a file or directory tree if present. Returns True if removed."""
    if path.is_dir() and not path.is_symlink():
        shutil.rmtree(path)
        return True
    if path.exists() or path.is_symlink():
        path.unlink()
        return True
    return False
