# -*- coding: utf-8 -*-
"""
Tests for github.rest_engine and the shared FetchEngine capabilities
"""

import asyncio
import json

import httpx
import pytest

from conftest import json_response, mock_client
from nativehub.github.engine import contents_path, clamp_per_page
from nativehub.github.errors import HttpStatusError, ParseError, TransportError
from nativehub.github.rest_engine import API_VERSION, RestEngine


class Recorder:
    """MockTransport handler that records requests and replies from a route table."""

    def __init__(self, routes):
        self.routes = routes
        self.requests = []

    def __call__(self, request):
        self.requests.append(request)
        key = (request.method, request.url.path)
        reply = self.routes.get(key)
        if reply is None:
            return httpx.Response(404, json={"message": "Not Found"})
        if isinstance(reply, httpx.Response):
            return reply
        return json_response(reply)


def run_engine(routes, call):
    recorder = Recorder(routes)

    async def run():
        async with mock_client(recorder) as client:
            engine = RestEngine(client, "gho_secret", api_base="https://api.github.com")
            return await call(engine)

    return asyncio.run(run()), recorder


class TestPaths:
    def test_contents_root(self):
        assert contents_path("o", "r") == "/repos/o/r/contents"
        assert contents_path("o", "r", "/") == "/repos/o/r/contents"

    def test_contents_encodes_segments(self):
        assert contents_path("o", "r", "docs/my file.md") == "/repos/o/r/contents/docs/my%20file.md"

    def test_clamp(self):
        assert clamp_per_page(500) == 100
        assert clamp_per_page(0) == 100
        assert clamp_per_page(30) == 30


class TestHeaders:
    """Every request carries auth, API version, user agent and accept"""

    def test_request_headers(self):
        _, recorder = run_engine(
            {("GET", "/user/repos"): []}, lambda e: e.list_repositories()
        )
        request = recorder.requests[0]
        assert request.headers["Authorization"] == "Bearer gho_secret"
        assert request.headers["X-GitHub-Api-Version"] == API_VERSION
        assert request.headers["Accept"] == "application/vnd.github+json"
        assert request.headers["User-Agent"].startswith("NativeHub/")


class TestRepositories:
    def test_list_repositories_limit(self):
        repos, recorder = run_engine(
            {
                ("GET", "/user/repos"): [
                    {"name": "a", "full_name": "o/a", "private": False},
                    {"name": "b", "full_name": "o/b", "private": True},
                ]
            },
            lambda e: e.list_repositories(),
        )
        assert [r.full_name for r in repos] == ["o/a", "o/b"]
        params = recorder.requests[0].url.params
        assert params["per_page"] == "50"
        assert params["sort"] == "updated"

    def test_repository_info(self):
        info, _ = run_engine(
            {("GET", "/repos/o/r"): {"default_branch": "main", "stargazers_count": 4}},
            lambda e: e.get_repository_info("o", "r"),
        )
        assert info.default_branch == "main"
        assert info.stargazers_count == 4

    def test_search_query_encoded(self):
        result, recorder = run_engine(
            {("GET", "/search/repositories"): {"total_count": 0, "items": []}},
            lambda e: e.search_repositories("cad language:python"),
        )
        assert result.total_count == 0
        request = recorder.requests[0]
        assert request.url.params["q"] == "cad language:python"
        assert b"cad+language%3Apython" in request.url.query or b"cad%20language%3Apython" in request.url.query


class TestDirectory:
    def test_list_root(self):
        nodes, recorder = run_engine(
            {
                ("GET", "/repos/o/r/contents"): [
                    {"name": "src", "path": "src", "type": "dir"},
                    {"name": "README.md", "path": "README.md", "type": "file",
                     "download_url": "https://raw.githubusercontent.com/o/r/main/README.md"},
                ]
            },
            lambda e: e.list_directory("o", "r", ""),
        )
        assert [n.name for n in nodes] == ["src", "README.md"]
        assert recorder.requests[0].url.path == "/repos/o/r/contents"

    def test_file_path_is_not_a_directory(self):
        with pytest.raises(ParseError):
            run_engine(
                {("GET", "/repos/o/r/contents/setup.py"): {"type": "file", "name": "setup.py"}},
                lambda e: e.list_directory("o", "r", "setup.py"),
            )

    def test_read_file_raw(self):
        url = "https://raw.githubusercontent.com/o/r/main/README.md"
        content, recorder = run_engine(
            {("GET", "/o/r/main/README.md"): httpx.Response(200, content=b"# Widgets\n")},
            lambda e: e.read_file(url),
        )
        assert content == "# Widgets\n"
        assert recorder.requests[0].headers["Accept"] == "application/vnd.github.raw"


class TestIssuesAndPulls:
    def test_list_issues_keeps_pr_marker(self):
        issues, recorder = run_engine(
            {
                ("GET", "/repos/o/r/issues"): [
                    {"number": 1, "title": "Bug"},
                    {"number": 2, "title": "PR", "pull_request": {"url": "x"}},
                ]
            },
            lambda e: e.list_issues("o", "r", "closed"),
        )
        assert [i.is_pull_request for i in issues] == [False, True]
        assert recorder.requests[0].url.params["state"] == "closed"

    def test_create_comment_posts_body(self):
        comment, recorder = run_engine(
            {("POST", "/repos/o/r/issues/7/comments"): {"id": 99, "body": "LGTM"}},
            lambda e: e.create_comment("o", "r", 7, "LGTM"),
        )
        assert comment.id == 99
        assert json.loads(recorder.requests[0].content) == {"body": "LGTM"}

    def test_set_issue_state(self):
        issue, recorder = run_engine(
            {("PATCH", "/repos/o/r/issues/7"): {"number": 7, "state": "closed"}},
            lambda e: e.set_issue_state("o", "r", 7, "closed"),
        )
        assert issue.state == "closed"
        assert json.loads(recorder.requests[0].content) == {"state": "closed"}

    def test_merge_pull_request(self):
        result, recorder = run_engine(
            {("PUT", "/repos/o/r/pulls/3/merge"): {"sha": "abc", "merged": True, "message": "ok"}},
            lambda e: e.merge_pull_request("o", "r", 3, "squash"),
        )
        assert result.merged
        assert json.loads(recorder.requests[0].content) == {"merge_method": "squash"}

    def test_close_pull_request(self):
        pr, recorder = run_engine(
            {("PATCH", "/repos/o/r/pulls/3"): {"number": 3, "state": "closed"}},
            lambda e: e.close_pull_request("o", "r", 3),
        )
        assert pr.state == "closed"


class TestErrors:
    def test_unauthorized(self):
        with pytest.raises(HttpStatusError) as exc:
            run_engine(
                {("GET", "/user/repos"): httpx.Response(401, json={"message": "Bad credentials"})},
                lambda e: e.list_repositories(),
            )
        assert exc.value.kind == "UNAUTHORIZED"
        assert exc.value.status == 401

    def test_invalid_json(self):
        with pytest.raises(ParseError):
            run_engine(
                {("GET", "/user/repos"): httpx.Response(200, text="{not json")},
                lambda e: e.list_repositories(),
            )

    def test_transport_failure(self):
        def boom(request):
            raise httpx.ConnectTimeout("timed out", request=request)

        async def run():
            async with mock_client(boom) as client:
                await RestEngine(client, "t").list_repositories()

        with pytest.raises(TransportError) as exc:
            asyncio.run(run())
        assert exc.value.timeout is True
