# -*- coding: utf-8 -*-
"""
Events: notifications issued by backend work units to the UI.

A closed set of frozen dataclasses. Delivery is at-most-once and events from
different actions may interleave in any order.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple, Union

from nativehub.auth.oauth_device_flow import DeviceCodeResponse
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


@dataclass(frozen=True)
class LogLine:
    text: str


@dataclass(frozen=True)
class DeviceCodeIssued:
    code: DeviceCodeResponse


@dataclass(frozen=True)
class AuthSucceeded:
    token: str

    def __repr__(self) -> str:
        return "AuthSucceeded(token=[REDACTED])"


@dataclass(frozen=True)
class Failed:
    message: str
    code: str = "NativeHubError"


@dataclass(frozen=True)
class RepositoryList:
    items: Tuple[RepoSummary, ...]


@dataclass(frozen=True)
class DirectoryListed:
    repo: str
    path: str
    nodes: Tuple[FileNode, ...]


@dataclass(frozen=True)
class FileRead:
    name: str
    content: str


@dataclass(frozen=True)
class RepositoryInfoLoaded:
    repo: str
    info: RepositoryInfo


@dataclass(frozen=True)
class ReadmeLoaded:
    repo: str
    text: str


@dataclass(frozen=True)
class SearchResults:
    result: SearchResult

    @property
    def items(self) -> Tuple[RepoSummary, ...]:
        return self.result.items


@dataclass(frozen=True)
class IssueList:
    repo: str
    items: Tuple[Issue, ...]


@dataclass(frozen=True)
class IssueCommentsLoaded:
    issue_number: int
    comments: Tuple[IssueComment, ...]


@dataclass(frozen=True)
class CommentCreated:
    comment: IssueComment


@dataclass(frozen=True)
class IssueStateChanged:
    issue: Issue


@dataclass(frozen=True)
class PullRequestList:
    repo: str
    items: Tuple[PullRequest, ...]


@dataclass(frozen=True)
class PullRequestMerged:
    result: MergeResult


@dataclass(frozen=True)
class PullRequestClosed:
    pr: PullRequest


Event = Union[
    LogLine,
    DeviceCodeIssued,
    AuthSucceeded,
    Failed,
    RepositoryList,
    DirectoryListed,
    FileRead,
    RepositoryInfoLoaded,
    ReadmeLoaded,
    SearchResults,
    IssueList,
    IssueCommentsLoaded,
    CommentCreated,
    IssueStateChanged,
    PullRequestList,
    PullRequestMerged,
    PullRequestClosed,
]

# Events that end a work unit successfully
TERMINAL_SUCCESS_EVENTS = (
    AuthSucceeded,
    RepositoryList,
    DirectoryListed,
    FileRead,
    ReadmeLoaded,
    SearchResults,
    IssueList,
    IssueCommentsLoaded,
    CommentCreated,
    IssueStateChanged,
    PullRequestList,
    PullRequestMerged,
    PullRequestClosed,
)
