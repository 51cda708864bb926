"""
Shared fixtures for depmirror tests.

Provides a fake GitLab API (served through httpx.MockTransport), a
temporary Glide cache, and a fake subprocess runner that plays the part
of both glide and git so the pipeline can run without either installed.
"""

from __future__ import annotations

import json
import subprocess
from pathlib import Path
from typing import Any, Dict, List, Optional

import httpx
import pytest
import yaml

from depmirror.mirror.cache import clone_path
from depmirror.mirror.gitlab_api import GitLabClient
from depmirror.mirror.naming import cache_name

API_URL = "https://gitlab.test/api/v4"


class FakeGitLab:
    """In-memory stand-in for the parts of the GitLab API we call."""

    def __init__(self, page_size: int = 100):
        self.page_size = page_size
        self.groups: List[Dict[str, Any]] = [
            {"id": 42, "name": "go-mirrors", "path": "go-mirrors", "full_path": "go-mirrors"},
        ]
        self.projects: Dict[int, List[Dict[str, Any]]] = {42: []}
        self.create_calls: List[Dict[str, Any]] = []
        self.requests: List[httpx.Request] = []
        self.fail_create_with: Optional[int] = None

    def add_project(self, group_id: int, name: str, url: Optional[str] = None) -> str:
        url = url or f"https://gitlab.test/go-mirrors/{name}.git"
        self.projects.setdefault(group_id, []).append(
            {"id": len(self.projects[group_id]) + 1, "name": name, "http_url_to_repo": url}
        )
        return url

    def _page(self, request: httpx.Request, items: List[Dict[str, Any]]) -> httpx.Response:
        page = int(request.url.params.get("page", "1"))
        start = (page - 1) * self.page_size
        chunk = items[start:start + self.page_size]
        has_next = start + self.page_size < len(items)
        headers = {"X-Next-Page": str(page + 1) if has_next else ""}
        return httpx.Response(200, json=chunk, headers=headers)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path.replace("/api/v4", "", 1)

        if request.method == "GET" and path == "/groups":
            search = request.url.params.get("search", "")
            matches = [g for g in self.groups if search in g["name"]]
            return self._page(request, matches)

        if request.method == "GET" and path.startswith("/groups/") and path.endswith("/projects"):
            group_id = int(path.split("/")[2])
            if group_id not in self.projects:
                return httpx.Response(404, json={"message": "404 Group Not Found"})
            return self._page(request, self.projects[group_id])

        if request.method == "POST" and path == "/projects":
            body = json.loads(request.content)
            self.create_calls.append(body)
            if self.fail_create_with:
                return httpx.Response(self.fail_create_with, json={"message": "boom"})
            existing = self.projects.get(body["namespace_id"], [])
            if any(p["name"] == body["name"] for p in existing):
                return httpx.Response(
                    400, json={"message": {"name": ["has already been taken"]}}
                )
            url = self.add_project(body["namespace_id"], body["name"])
            return httpx.Response(201, json={"id": 99, "name": body["name"], "http_url_to_repo": url})

        return httpx.Response(404, json={"message": "404 Not Found"})


class FakeProcesses:
    """
    Replacement for subprocess.run that answers glide and git calls.

    glide init writes `generated` as glide.new, glide install writes
    `lock` as glide.lock. git calls always succeed unless listed in
    `fail_git`.
    """

    def __init__(self):
        self.calls: List[Dict[str, Any]] = []
        self.generated: Dict[str, Any] = {"package": "github.com/org/app", "import": []}
        self.lock: Dict[str, Any] = {"hash": "abc", "updated": "2017-01-01T00:00:00Z", "imports": []}
        self.fail_git: Dict[str, str] = {}
        self.fail_glide: Dict[str, str] = {}

    def git_calls(self) -> List[List[str]]:
        return [c["cmd"] for c in self.calls if c["cmd"][0] == "git"]

    def glide_calls(self) -> List[List[str]]:
        return [c["cmd"] for c in self.calls if c["cmd"][0] != "git"]

    def __call__(self, cmd, cwd=None, **kwargs) -> subprocess.CompletedProcess:
        cmd = list(cmd)
        self.calls.append({"cmd": cmd, "cwd": cwd})
        joined = " ".join(cmd)

        if cmd[0] == "git":
            for fragment, output in self.fail_git.items():
                if fragment in joined:
                    return subprocess.CompletedProcess(cmd, 1, stdout=output)
            return subprocess.CompletedProcess(cmd, 0, stdout="")

        for fragment, output in self.fail_glide.items():
            if fragment in joined:
                return subprocess.CompletedProcess(cmd, 1, stdout=output)

        workdir = Path(cwd)
        if "init" in cmd:
            target = cmd[cmd.index("--yaml") + 1]
            (workdir / target).write_text(yaml.safe_dump(self.generated), encoding="utf-8")
        elif "install" in cmd:
            (workdir / "glide.lock").write_text(yaml.safe_dump(self.lock), encoding="utf-8")
        return subprocess.CompletedProcess(cmd, 0, stdout=f"[INFO] {joined}\n")


@pytest.fixture
def gitlab() -> FakeGitLab:
    return FakeGitLab()


@pytest.fixture
def client(gitlab: FakeGitLab):
    c = GitLabClient(API_URL, "s3cret", transport=httpx.MockTransport(gitlab.handler))
    yield c
    c.close()


@pytest.fixture
def glide_home(tmp_path: Path) -> Path:
    home = tmp_path / "glide-home"
    (home / "cache" / "src").mkdir(parents=True)
    return home


@pytest.fixture
def cache_root(glide_home: Path) -> Path:
    return glide_home / "cache" / "src"


@pytest.fixture
def make_clone(cache_root: Path):
    """Create an (empty) cached clone directory for an import path."""

    def _make(import_path: str) -> Path:
        path = clone_path(cache_root, cache_name(import_path))
        path.mkdir(parents=True)
        return path

    return _make


@pytest.fixture
def processes(monkeypatch) -> FakeProcesses:
    fake = FakeProcesses()
    monkeypatch.setattr(subprocess, "run", fake)
    return fake


@pytest.fixture
def project_dir(tmp_path: Path) -> Path:
    path = tmp_path / "project"
    path.mkdir()
    return path
