# -*- coding: utf-8 -*-
"""
GitHub resource snapshots shared by both fetch engines.

All models are frozen: a later fetch replaces an earlier snapshot for the
same identifier instead of mutating it. ``from_api`` constructors accept the
REST JSON shape; ``RepoSummary.from_gh_json`` accepts ``gh repo list --json``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

from nativehub.github.errors import ParseError

NODE_FILE = "file"
NODE_DIR = "dir"

# Fields requested from `gh repo list --json`
GH_REPO_FIELDS = (
    "name",
    "nameWithOwner",
    "description",
    "isPrivate",
    "updatedAt",
    "stargazerCount",
    "forkCount",
)

# Fields requested from `gh search repos --json`
GH_SEARCH_FIELDS = (
    "name",
    "fullName",
    "description",
    "isPrivate",
    "updatedAt",
    "stargazersCount",
    "forksCount",
)


def _require(data: Any, key: str, what: str) -> Any:
    if not isinstance(data, dict):
        raise ParseError(
            f"Failed to parse {what}.",
            details=f"expected object, got {type(data).__name__}",
        )
    if key not in data or data[key] is None:
        raise ParseError(f"Failed to parse {what}.", details=f"missing field {key!r}")
    return data[key]


def _login(user: Optional[Dict[str, Any]]) -> str:
    if isinstance(user, dict):
        return user.get("login") or ""
    return ""


def short_date(iso: Optional[str]) -> str:
    """Return the date part of an ISO timestamp ("2024-05-01T10:00:00Z" -> "2024-05-01")."""
    if not iso:
        return ""
    return iso.split("T", 1)[0]


@dataclass(frozen=True)
class RepoSummary:
    name: str
    full_name: str
    description: str
    is_private: bool
    last_updated: str
    stars_count: int = 0
    forks_count: int = 0

    @staticmethod
    def from_api(item: Dict[str, Any]) -> RepoSummary:
        if not isinstance(item, dict):
            raise ParseError("Failed to parse repository.", details="expected object")
        full_name = item.get("full_name") or ""
        name = item.get("name") or ""
        if not full_name:
            owner = _login(item.get("owner"))
            full_name = f"{owner}/{name}".strip("/")
        if not full_name:
            raise ParseError("Failed to parse repository.", details="missing full_name")
        return RepoSummary(
            name=name or full_name.split("/")[-1],
            full_name=full_name,
            description=item.get("description") or "",
            is_private=bool(item.get("private", False)),
            last_updated=short_date(item.get("updated_at")),
            stars_count=int(item.get("stargazers_count") or 0),
            forks_count=int(item.get("forks_count") or 0),
        )

    @staticmethod
    def from_gh_json(item: Dict[str, Any]) -> RepoSummary:
        return RepoSummary(
            name=_require(item, "name", "gh repo list output"),
            full_name=_require(item, "nameWithOwner", "gh repo list output"),
            description=item.get("description") or "",
            is_private=bool(item.get("isPrivate", False)),
            last_updated=short_date(item.get("updatedAt")),
            stars_count=int(item.get("stargazerCount") or 0),
            forks_count=int(item.get("forkCount") or 0),
        )

    @staticmethod
    def from_gh_search(item: Dict[str, Any]) -> RepoSummary:
        return RepoSummary(
            name=_require(item, "name", "gh search output"),
            full_name=_require(item, "fullName", "gh search output"),
            description=item.get("description") or "",
            is_private=bool(item.get("isPrivate", False)),
            last_updated=short_date(item.get("updatedAt")),
            stars_count=int(item.get("stargazersCount") or 0),
            forks_count=int(item.get("forksCount") or 0),
        )


@dataclass(frozen=True)
class FileNode:
    """A file or directory entry in a repository listing."""

    name: str
    path: str
    type: str
    download_url: Optional[str] = None
    size: int = 0

    @property
    def is_dir(self) -> bool:
        return self.type == NODE_DIR

    @staticmethod
    def from_api(item: Dict[str, Any]) -> FileNode:
        return FileNode(
            name=_require(item, "name", "directory listing"),
            path=_require(item, "path", "directory listing"),
            type=_require(item, "type", "directory listing"),
            download_url=item.get("download_url"),
            size=int(item.get("size") or 0),
        )


@dataclass(frozen=True)
class RepositoryInfo:
    description: Optional[str]
    stargazers_count: int
    forks_count: int
    watchers_count: int
    language: Optional[str]
    topics: Tuple[str, ...]
    license: Optional[str]
    open_issues_count: int
    default_branch: str

    @staticmethod
    def from_api(data: Dict[str, Any]) -> RepositoryInfo:
        default_branch = _require(data, "default_branch", "repository metadata")
        license_obj = data.get("license")
        license_name = None
        if isinstance(license_obj, dict):
            license_name = license_obj.get("spdx_id") or license_obj.get("name")
        return RepositoryInfo(
            description=data.get("description"),
            stargazers_count=int(data.get("stargazers_count") or 0),
            forks_count=int(data.get("forks_count") or 0),
            watchers_count=int(data.get("watchers_count") or 0),
            language=data.get("language"),
            topics=tuple(data.get("topics") or ()),
            license=license_name,
            open_issues_count=int(data.get("open_issues_count") or 0),
            default_branch=default_branch,
        )


@dataclass(frozen=True)
class SearchResult:
    total_count: int
    incomplete_results: bool
    items: Tuple[RepoSummary, ...]

    @staticmethod
    def from_api(data: Dict[str, Any]) -> SearchResult:
        items = _require(data, "items", "search results")
        if not isinstance(items, list):
            raise ParseError("Failed to parse search results.", details="items is not a list")
        return SearchResult(
            total_count=int(data.get("total_count") or 0),
            incomplete_results=bool(data.get("incomplete_results", False)),
            items=tuple(RepoSummary.from_api(item) for item in items),
        )


@dataclass(frozen=True)
class Label:
    name: str
    color: str = ""


@dataclass(frozen=True)
class IssueComment:
    id: int
    user: str
    body: str
    created_at: str

    @staticmethod
    def from_api(data: Dict[str, Any]) -> IssueComment:
        return IssueComment(
            id=int(_require(data, "id", "issue comment")),
            user=_login(data.get("user")),
            body=data.get("body") or "",
            created_at=data.get("created_at") or "",
        )


@dataclass(frozen=True)
class Issue:
    number: int
    title: str
    state: str
    user: str
    body: str
    labels: Tuple[Label, ...]
    comments: int
    created_at: str
    updated_at: str
    html_url: str
    is_pull_request: bool = False

    @staticmethod
    def from_api(data: Dict[str, Any]) -> Issue:
        number = int(_require(data, "number", "issue"))
        labels = tuple(
            Label(name=lbl.get("name") or "", color=lbl.get("color") or "")
            for lbl in (data.get("labels") or ())
            if isinstance(lbl, dict)
        )
        return Issue(
            number=number,
            title=data.get("title") or "",
            state=data.get("state") or "",
            user=_login(data.get("user")),
            body=data.get("body") or "",
            labels=labels,
            comments=int(data.get("comments") or 0),
            created_at=data.get("created_at") or "",
            updated_at=data.get("updated_at") or "",
            html_url=data.get("html_url") or "",
            is_pull_request=data.get("pull_request") is not None,
        )


@dataclass(frozen=True)
class PullRequest:
    number: int
    title: str
    state: str
    user: str
    body: str
    head_ref: str
    base_ref: str
    draft: bool
    merged: bool
    mergeable: Optional[bool]
    created_at: str
    html_url: str

    @staticmethod
    def from_api(data: Dict[str, Any]) -> PullRequest:
        number = int(_require(data, "number", "pull request"))
        head = data.get("head") or {}
        base = data.get("base") or {}
        return PullRequest(
            number=number,
            title=data.get("title") or "",
            state=data.get("state") or "",
            user=_login(data.get("user")),
            body=data.get("body") or "",
            head_ref=head.get("ref") or "",
            base_ref=base.get("ref") or "",
            draft=bool(data.get("draft", False)),
            merged=bool(data.get("merged") or data.get("merged_at")),
            mergeable=data.get("mergeable"),
            created_at=data.get("created_at") or "",
            html_url=data.get("html_url") or "",
        )


@dataclass(frozen=True)
class MergeResult:
    sha: str
    merged: bool
    message: str

    @staticmethod
    def from_api(data: Dict[str, Any]) -> MergeResult:
        merged = bool(_require(data, "merged", "merge result"))
        return MergeResult(
            sha=data.get("sha") or "",
            merged=merged,
            message=data.get("message") or "",
        )
