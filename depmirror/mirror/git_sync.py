"""
Git Sync — Push cached clones to their mirror projects.

Every call returns the combined stdout/stderr of the git invocation it
made. Any non-zero exit raises GitCommandError carrying that output.
"""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path
from typing import Sequence

from ..errors import DepMirrorError
from ..logging_config import mask_credentials

logger = logging.getLogger(__name__)

UPSTREAM_REMOTE = "upstream"


class GitCommandError(DepMirrorError):
    """A git invocation exited with a non-zero status."""

    def __init__(self, args: Sequence[str], returncode: int, output: str):
        self.args_list = list(args)
        self.returncode = returncode
        self.output = output
        super().__init__(
            f"{mask_credentials(' '.join(self.args_list))} exited with status {returncode}"
        )


def _git(repo: Path, *args: str) -> subprocess.CompletedProcess:
    """Run a git command in the repo directory, stderr folded into stdout."""
    cmd = ["git"] + list(args)
    try:
        return subprocess.run(
            cmd,
            cwd=str(repo),
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            text=True,
        )
    except OSError as e:
        logger.error(f"[mirror-git] Cannot run git in {repo}: {e}")
        raise GitCommandError(cmd, -1, str(e)) from e


def run_git(repo: Path, *args: str) -> str:
    """Run a git command and return its output, raising on failure."""
    result = _git(repo, *args)
    output = result.stdout or ""
    if result.returncode != 0:
        logger.error(f"[mirror-git] git {' '.join(args)} failed in {repo}:\n{output}")
        raise GitCommandError(["git", *args], result.returncode, output)
    return output


def configure_upstream(repo: Path, url: str, remote: str = UPSTREAM_REMOTE) -> str:
    """
    Point the clone's upstream remote at the mirror URL.

    The remote is removed (a missing remote is fine) and re-added, so
    repeated runs always leave exactly one remote with the given URL.
    """
    removed = _git(repo, "remote", "remove", remote)
    if removed.returncode == 0:
        logger.debug(f"[mirror-git] Removed previous '{remote}' remote from {repo.name}")

    return run_git(repo, "remote", "add", remote, url)


def push_branches(repo: Path, remote: str = UPSTREAM_REMOTE) -> str:
    """Push every local branch to the remote."""
    output = run_git(repo, "push", "--all", remote)
    logger.debug(f"[mirror-git] push all branches:\n{output}")
    return output


def push_tags(repo: Path, remote: str = UPSTREAM_REMOTE) -> str:
    """Push every tag to the remote."""
    output = run_git(repo, "push", "--tags", remote)
    logger.debug(f"[mirror-git] push all tags:\n{output}")
    return output
