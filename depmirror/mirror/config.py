"""
Mirror Configuration — Run settings and the resolved namespace context.

Settings come from CLI options, falling back to environment variables:

    DEPMIRROR_MANIFEST=glide.yaml
    DEPMIRROR_GLIDE_BIN=glide
    DEPMIRROR_API_VERSION=v4
    GLIDE_HOME=~/.glide

The namespace context is built once, after the group has been resolved
on the mirror host, and never changes during a run.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)

DEFAULT_API_VERSION = "v4"
DEFAULT_VISIBILITY = "internal"
ALLOWED_VISIBILITIES = ("internal", "private")

# Glide keeps https clones under <GLIDE_HOME>/cache/src/https-<cache name>
CACHE_SUBDIR = Path("cache") / "src"
CACHE_SCHEME_PREFIX = "https-"


def default_glide_home() -> Path:
    """Glide's home directory: $GLIDE_HOME or ~/.glide."""
    env_home = os.environ.get("GLIDE_HOME")
    if env_home:
        return Path(env_home).expanduser()
    return Path.home() / ".glide"


@dataclass(frozen=True)
class NamespaceContext:
    """The resolved target group. The API session holds the host and token."""

    namespace_id: int
    namespace_name: str = ""


@dataclass
class SyncSettings:
    """Settings for one mirror run."""

    host_url: str
    namespace: str
    token: str = field(repr=False)
    project_dir: Path = Path(".")
    manifest_name: str = "glide.yaml"
    glide_bin: str = "glide"
    glide_home: Optional[Path] = None
    api_version: str = DEFAULT_API_VERSION
    visibility: str = DEFAULT_VISIBILITY

    def __post_init__(self):
        if self.visibility not in ALLOWED_VISIBILITIES:
            raise ValueError(
                f"Visibility must be one of {', '.join(ALLOWED_VISIBILITIES)}, "
                f"got '{self.visibility}'"
            )
        self.host_url = self.host_url.rstrip("/")
        if self.glide_home is None:
            self.glide_home = default_glide_home()

    @classmethod
    def from_env(
        cls,
        host_url: str,
        namespace: str,
        token: str,
        project_dir: Optional[Path] = None,
        **overrides,
    ) -> "SyncSettings":
        """
        Build settings for the given target, reading the rest from env.

        Keyword overrides (e.g. from CLI options) win over the environment;
        overrides set to None are ignored.
        """
        glide_home = os.environ.get("GLIDE_HOME")
        values = {
            "manifest_name": os.environ.get("DEPMIRROR_MANIFEST", "glide.yaml"),
            "glide_bin": os.environ.get("DEPMIRROR_GLIDE_BIN", "glide"),
            "glide_home": Path(glide_home) if glide_home else None,
            "api_version": os.environ.get("DEPMIRROR_API_VERSION", DEFAULT_API_VERSION),
        }
        values.update({k: v for k, v in overrides.items() if v is not None})
        if values["glide_home"] is not None:
            values["glide_home"] = Path(values["glide_home"]).expanduser()

        settings = cls(
            host_url=host_url,
            namespace=namespace,
            token=token,
            project_dir=project_dir or Path.cwd(),
            **values,
        )
        logger.debug(f"Loaded settings for {settings.host_url} / {settings.namespace}")
        return settings

    @property
    def api_url(self) -> str:
        return f"{self.host_url}/api/{self.api_version}"

    @property
    def cache_root(self) -> Path:
        """Directory holding Glide's cached clones."""
        return self.glide_home / CACHE_SUBDIR

    @property
    def manifest_path(self) -> Path:
        return self.project_dir / self.manifest_name
