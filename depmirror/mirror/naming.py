"""
Naming — Derive cache and mirror names from an import path.

    github.com/org/pkg  →  cache name  github.com-org-pkg
                        →  mirror name github-com-org-pkg

Both transforms are pure; the mirror name is the only link between an
import path and its project on the mirror host, so they must never change.
"""

from __future__ import annotations

import re
from typing import Dict

from ..errors import DepMirrorError

_SEPARATORS_RE = re.compile(r"[/]+")
_SEPARATORS_AND_DOTS_RE = re.compile(r"[/.]+")


class MirrorNameCollisionError(DepMirrorError):
    """Two different import paths normalize to the same mirror name."""

    def __init__(self, mirror_name: str, existing: str, incoming: str):
        self.mirror_name = mirror_name
        self.existing = existing
        self.incoming = incoming
        super().__init__(
            f"Import paths '{existing}' and '{incoming}' both map to "
            f"mirror project '{mirror_name}'"
        )


def cache_name(import_path: str) -> str:
    """Name of the dependency's clone inside the local Glide cache."""
    return _SEPARATORS_RE.sub("-", import_path)


def mirror_name(import_path: str) -> str:
    """Name of the dependency's project on the mirror host."""
    return _SEPARATORS_AND_DOTS_RE.sub("-", import_path)


class NameRegistry:
    """Remembers which import path claimed each mirror name during a run."""

    def __init__(self) -> None:
        self._claims: Dict[str, str] = {}

    def claim(self, import_path: str) -> str:
        """
        Claim the mirror name for an import path and return it.

        Claiming the same import path again is a no-op.

        Raises:
            MirrorNameCollisionError: If another import path already
                claimed the same mirror name.
        """
        name = mirror_name(import_path)
        owner = self._claims.setdefault(name, import_path)
        if owner != import_path:
            raise MirrorNameCollisionError(name, owner, import_path)
        return name

    def __len__(self) -> int:
        return len(self._claims)
