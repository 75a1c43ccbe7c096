# -*- coding: utf-8 -*-
"""
Actions: commands issued by the UI to the backend.

A closed set of frozen dataclasses. Only the UI constructs them.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union


@dataclass(frozen=True)
class Login:
    pass


@dataclass(frozen=True)
class Cancel:
    pass


@dataclass(frozen=True)
class ListRepositories:
    pass


@dataclass(frozen=True)
class SelectRepository:
    name: str  # owner/name


@dataclass(frozen=True)
class OpenInBrowser:
    repo: str


@dataclass(frozen=True)
class ListDirectory:
    repo: str
    path: str = ""


@dataclass(frozen=True)
class ReadFile:
    url: str


@dataclass(frozen=True)
class Search:
    query: str


@dataclass(frozen=True)
class ListIssues:
    repo: str
    state: str = "open"


@dataclass(frozen=True)
class ListIssueComments:
    repo: str
    issue_number: int


@dataclass(frozen=True)
class CreateComment:
    repo: str
    issue_number: int
    body: str


@dataclass(frozen=True)
class SetIssueState:
    repo: str
    issue_number: int
    state: str


@dataclass(frozen=True)
class ListPullRequests:
    repo: str
    state: str = "open"


@dataclass(frozen=True)
class MergePullRequest:
    repo: str
    number: int
    method: str = "merge"


@dataclass(frozen=True)
class ClosePullRequest:
    repo: str
    number: int


Action = Union[
    Login,
    Cancel,
    ListRepositories,
    SelectRepository,
    OpenInBrowser,
    ListDirectory,
    ReadFile,
    Search,
    ListIssues,
    ListIssueComments,
    CreateComment,
    SetIssueState,
    ListPullRequests,
    MergePullRequest,
    ClosePullRequest,
]
