"""
Glide Resolver — Run glide to produce a manifest and a lock document.

Glide is treated as a black box: it reads the project sources and its
own config and writes glide.new / glide.lock, which are parsed here and
then removed. Every invocation returns its own combined output.
"""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path
from typing import Sequence

from .errors import DepMirrorError
from .manifest.loader import load_lockfile, load_manifest, remove_path
from .manifest.models import Lockfile, Manifest

logger = logging.getLogger(__name__)

GENERATED_MANIFEST = "glide.new"
LOCK_FILE = "glide.lock"
VENDOR_DIR = "vendor"


class ResolverError(DepMirrorError):
    """glide could not be run or exited with a non-zero status."""

    def __init__(self, args: Sequence[str], returncode: int, output: str):
        self.args_list = list(args)
        self.returncode = returncode
        self.output = output
        super().__init__(f"{' '.join(self.args_list)} exited with status {returncode}")


class GlideResolver:
    """Runs glide inside the project directory."""

    def __init__(self, project_dir: Path, glide_bin: str = "glide"):
        self.project_dir = Path(project_dir)
        self.glide_bin = glide_bin

    def run(self, *args: str) -> str:
        """Run glide with --no-color and return its combined output."""
        cmd = [self.glide_bin, "--no-color", *args]
        logger.info(f"[glide] Executing '{' '.join(cmd[1:])}'")
        try:
            result = subprocess.run(
                cmd,
                cwd=str(self.project_dir),
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                text=True,
            )
        except OSError as e:
            raise ResolverError(cmd, -1, str(e)) from e

        output = result.stdout or ""
        if result.returncode != 0:
            logger.error(f"[glide] {' '.join(cmd)} failed:\n{output}")
            raise ResolverError(cmd, result.returncode, output)

        logger.debug(f"[glide] output:\n{output}")
        return output

    def clear_cache(self) -> str:
        return self.run("cache-clear")

    def generate_manifest(self) -> Manifest:
        """Create a fresh manifest from the project sources."""
        new_path = self.project_dir / GENERATED_MANIFEST
        if remove_path(new_path):
            logger.info(f"[glide] Removed stale '{GENERATED_MANIFEST}'")

        self.run("--yaml", GENERATED_MANIFEST, "init", "--non-interactive")
        try:
            return load_manifest(new_path)
        finally:
            remove_path(new_path)

    def install_lock(self) -> Lockfile:
        """Resolve glide.yaml from scratch and return the resulting lock."""
        lock_path = self.project_dir / LOCK_FILE
        if remove_path(lock_path):
            logger.info(f"[glide] Removed stale '{LOCK_FILE}'")
        if remove_path(self.project_dir / VENDOR_DIR):
            logger.info(f"[glide] Purged '{VENDOR_DIR}' directory")

        self.run("--debug", "install", "--strip-vendor")
        try:
            return load_lockfile(lock_path)
        finally:
            remove_path(lock_path)
