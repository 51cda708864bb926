"""
Tests for the GitLab inventory client.

All HTTP traffic goes through the FakeGitLab handler via MockTransport.
"""

from __future__ import annotations

import httpx
import pytest

from depmirror.mirror.gitlab_api import (
    AmbiguousNamespaceError,
    GitLabClient,
    MirrorHostError,
    NamespaceNotFoundError,
    ProjectConflictError,
)

API_URL = "https://gitlab.test/api/v4"


class TestResolveNamespace:

    def test_single_match(self, client):
        assert client.resolve_namespace("go-mirrors") == 42

    def test_sends_bearer_token(self, client, gitlab):
        client.resolve_namespace("go-mirrors")
        assert gitlab.requests[0].headers["Authorization"] == "Bearer s3cret"

    def test_not_found(self, client):
        with pytest.raises(NamespaceNotFoundError):
            client.resolve_namespace("nope")

    def test_ambiguous(self, client, gitlab):
        gitlab.groups = [
            {"id": 1, "name": "mirrors-a", "path": "mirrors-a", "full_path": "mirrors-a"},
            {"id": 2, "name": "mirrors-b", "path": "mirrors-b", "full_path": "mirrors-b"},
        ]
        with pytest.raises(AmbiguousNamespaceError):
            client.resolve_namespace("mirrors")

    def test_exact_match_wins_over_fuzzy(self, client, gitlab):
        gitlab.groups.append(
            {"id": 7, "name": "go-mirrors-old", "path": "go-mirrors-old", "full_path": "go-mirrors-old"}
        )
        assert client.resolve_namespace("go-mirrors") == 42


class TestListProjects:

    def test_empty_group(self, client):
        assert client.list_projects(42) == {}

    def test_maps_name_to_url(self, client, gitlab):
        gitlab.add_project(42, "github-com-x-y", "https://host/ns/github-com-x-y.git")
        assert client.list_projects(42) == {
            "github-com-x-y": "https://host/ns/github-com-x-y.git",
        }

    def test_reads_every_page(self, client, gitlab):
        gitlab.page_size = 2
        for i in range(5):
            gitlab.add_project(42, f"project-{i}")

        projects = client.list_projects(42)

        assert sorted(projects) == [f"project-{i}" for i in range(5)]
        pages = [r.url.params["page"] for r in gitlab.requests]
        assert pages == ["1", "2", "3"]

    def test_http_error(self, client):
        with pytest.raises(MirrorHostError) as exc:
            client.list_projects(999)
        assert exc.value.status_code == 404

    def test_transport_error(self):
        def boom(request):
            raise httpx.ConnectError("connection refused", request=request)

        with GitLabClient(API_URL, "t", transport=httpx.MockTransport(boom)) as c:
            with pytest.raises(MirrorHostError) as exc:
                c.list_projects(42)
        assert "connection refused" in str(exc.value)


class TestCreateProject:

    def test_creates_internal_project(self, client, gitlab):
        url = client.create_project("github-com-x-y", 42)

        assert url == "https://gitlab.test/go-mirrors/github-com-x-y.git"
        assert gitlab.create_calls == [
            {
                "name": "github-com-x-y",
                "path": "github-com-x-y",
                "namespace_id": 42,
                "visibility": "internal",
            }
        ]

    def test_conflict(self, client, gitlab):
        gitlab.add_project(42, "github-com-x-y")
        with pytest.raises(ProjectConflictError):
            client.create_project("github-com-x-y", 42)

    def test_server_error(self, client, gitlab):
        gitlab.fail_create_with = 500
        with pytest.raises(MirrorHostError) as exc:
            client.create_project("github-com-x-y", 42)
        assert exc.value.status_code == 500
        assert not isinstance(exc.value, ProjectConflictError)


class TestUnexpectedReplies:

    def _client(self, handler) -> GitLabClient:
        return GitLabClient(API_URL, "t", transport=httpx.MockTransport(handler))

    def test_html_sign_in_page(self):
        def sign_in(request):
            return httpx.Response(200, text="<html>Sign in</html>", headers={"Content-Type": "text/html"})

        with self._client(sign_in) as c:
            with pytest.raises(MirrorHostError) as exc:
                c.resolve_namespace("go-mirrors")
        assert "non-JSON" in str(exc.value)
        assert exc.value.status_code == 200

    def test_object_instead_of_list(self):
        with self._client(lambda request: httpx.Response(200, json={"message": "hi"})) as c:
            with pytest.raises(MirrorHostError):
                c.list_projects(42)

    def test_project_without_clone_url(self):
        with self._client(lambda request: httpx.Response(200, json=[{"name": "p"}])) as c:
            with pytest.raises(MirrorHostError):
                c.list_projects(42)

    def test_group_without_id(self):
        reply = [{"name": "go-mirrors", "path": "go-mirrors"}]
        with self._client(lambda request: httpx.Response(200, json=reply)) as c:
            with pytest.raises(MirrorHostError):
                c.resolve_namespace("go-mirrors")

    def test_created_project_without_clone_url(self):
        with self._client(lambda request: httpx.Response(201, json={"id": 1})) as c:
            with pytest.raises(MirrorHostError):
                c.create_project("github-com-x-y", 42)

    def test_created_project_html_reply(self):
        with self._client(lambda request: httpx.Response(201, text="<html></html>")) as c:
            with pytest.raises(MirrorHostError):
                c.create_project("github-com-x-y", 42)
