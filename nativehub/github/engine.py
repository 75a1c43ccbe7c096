# -*- coding: utf-8 -*-
"""
Fetch Engine capability interface.

Both strategies speak to the same GitHub REST resources; they differ only in
how a JSON request is carried (direct HTTPS vs. ``gh api``) and in the few
capabilities that have a native gh subcommand. Endpoint construction and
response parsing therefore live here, once.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional
from urllib.parse import quote

from nativehub.github.errors import ParseError
from nativehub.github.models import (
    FileNode,
    Issue,
    IssueComment,
    MergeResult,
    PullRequest,
    RepoSummary,
    RepositoryInfo,
    SearchResult,
)

MAX_PER_PAGE = 100
REPO_LIST_LIMIT = 50
SEARCH_PER_PAGE = 30


def clamp_per_page(per_page: int, maximum: int = MAX_PER_PAGE) -> int:
    """Clamp a page size into 1..maximum."""
    if per_page <= 0 or per_page > maximum:
        return maximum
    return per_page


def repo_path(owner: str, repo: str) -> str:
    return f"/repos/{quote(owner, safe='')}/{quote(repo, safe='')}"


def contents_path(owner: str, repo: str, path: str = "") -> str:
    """
    Build the contents endpoint for a directory.

    An empty path addresses the repository root.
    """
    base = f"{repo_path(owner, repo)}/contents"
    path = (path or "").strip("/")
    if not path:
        return base
    return f"{base}/{quote(path, safe='/')}"


def _expect_list(data: Any, what: str) -> List[Any]:
    if not isinstance(data, list):
        raise ParseError(
            f"Failed to parse {what}.",
            details=f"expected array, got {type(data).__name__}",
        )
    return data


class FetchEngine(ABC):
    """
    Repository / file / issue / pull request capabilities.

    Subclasses implement ``_request_json``; they may override a capability
    when their transport has a better native command for it.
    """

    name = "engine"

    @abstractmethod
    async def _request_json(
        self,
        method: str,
        endpoint: str,
        params: Optional[Dict[str, Any]] = None,
        body: Optional[Dict[str, Any]] = None,
    ) -> Any:
        """
        Perform one REST call and return the decoded JSON body.

        Raises:
            TransportError, HttpStatusError, ParseError, ExternalToolError
        """

    @abstractmethod
    async def read_file(self, url: str) -> str:
        """Fetch raw file content from a download URL."""

    async def list_repositories(self, limit: int = REPO_LIST_LIMIT) -> List[RepoSummary]:
        """Repositories of the authenticated user, most recently updated first."""
        data = await self._request_json(
            "GET",
            "/user/repos",
            params={
                "per_page": clamp_per_page(limit, REPO_LIST_LIMIT),
                "sort": "updated",
                "direction": "desc",
                "affiliation": "owner,collaborator,organization_member",
            },
        )
        return [RepoSummary.from_api(item) for item in _expect_list(data, "repository list")]

    async def get_repository_info(self, owner: str, repo: str) -> RepositoryInfo:
        data = await self._request_json("GET", repo_path(owner, repo))
        return RepositoryInfo.from_api(data)

    async def list_directory(self, owner: str, repo: str, path: str = "") -> List[FileNode]:
        data = await self._request_json("GET", contents_path(owner, repo, path))
        if isinstance(data, dict):
            # The contents endpoint returns a single object for a file path
            raise ParseError(
                "Failed to parse directory listing.",
                details=f"{path!r} is a {data.get('type', 'file')}, not a directory",
            )
        return [FileNode.from_api(item) for item in _expect_list(data, "directory listing")]

    async def search_repositories(
        self, query: str, per_page: int = SEARCH_PER_PAGE
    ) -> SearchResult:
        data = await self._request_json(
            "GET",
            "/search/repositories",
            params={"q": query, "per_page": clamp_per_page(per_page)},
        )
        return SearchResult.from_api(data)

    async def list_issues(
        self, owner: str, repo: str, state: str = "open", per_page: int = MAX_PER_PAGE
    ) -> List[Issue]:
        """
        Issues of a repository.

        GitHub returns pull requests here too; entries keep their
        ``is_pull_request`` marker and filtering is up to the caller.
        """
        data = await self._request_json(
            "GET",
            f"{repo_path(owner, repo)}/issues",
            params={"state": state, "per_page": clamp_per_page(per_page)},
        )
        return [Issue.from_api(item) for item in _expect_list(data, "issue list")]

    async def list_issue_comments(
        self, owner: str, repo: str, number: int, per_page: int = MAX_PER_PAGE
    ) -> List[IssueComment]:
        data = await self._request_json(
            "GET",
            f"{repo_path(owner, repo)}/issues/{int(number)}/comments",
            params={"per_page": clamp_per_page(per_page)},
        )
        return [IssueComment.from_api(item) for item in _expect_list(data, "comment list")]

    async def create_comment(
        self, owner: str, repo: str, number: int, body: str
    ) -> IssueComment:
        data = await self._request_json(
            "POST",
            f"{repo_path(owner, repo)}/issues/{int(number)}/comments",
            body={"body": body},
        )
        return IssueComment.from_api(data)

    async def set_issue_state(
        self, owner: str, repo: str, number: int, state: str
    ) -> Issue:
        data = await self._request_json(
            "PATCH",
            f"{repo_path(owner, repo)}/issues/{int(number)}",
            body={"state": state},
        )
        return Issue.from_api(data)

    async def list_pull_requests(
        self, owner: str, repo: str, state: str = "open", per_page: int = MAX_PER_PAGE
    ) -> List[PullRequest]:
        data = await self._request_json(
            "GET",
            f"{repo_path(owner, repo)}/pulls",
            params={"state": state, "per_page": clamp_per_page(per_page)},
        )
        return [PullRequest.from_api(item) for item in _expect_list(data, "pull request list")]

    async def merge_pull_request(
        self, owner: str, repo: str, number: int, method: str = "merge"
    ) -> MergeResult:
        data = await self._request_json(
            "PUT",
            f"{repo_path(owner, repo)}/pulls/{int(number)}/merge",
            body={"merge_method": method},
        )
        return MergeResult.from_api(data)

    async def close_pull_request(self, owner: str, repo: str, number: int) -> PullRequest:
        data = await self._request_json(
            "PATCH",
            f"{repo_path(owner, repo)}/pulls/{int(number)}",
            body={"state": "closed"},
        )
        return PullRequest.from_api(data)
