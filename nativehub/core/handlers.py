# -*- coding: utf-8 -*-
"""
NativeHub Action Handlers
One coroutine per action type. Each coroutine is a work unit body: it emits
progress and result events and raises NativeHubError subclasses on failure.
Turning an exception into the single terminal Failed event is the bridge's
job (see ``failure_prefix``).
"""

from __future__ import annotations

from typing import Awaitable, Callable, Dict, Optional, Sequence
from urllib.parse import unquote, urlparse

from nativehub.auth.controller import AuthFlowController
from nativehub.auth.token_resolver import TokenResolver
from nativehub.core import log, settings
from nativehub.core.actions import (
    Action,
    ClosePullRequest,
    CreateComment,
    ListDirectory,
    ListIssueComments,
    ListIssues,
    ListPullRequests,
    ListRepositories,
    Login,
    MergePullRequest,
    OpenInBrowser,
    ReadFile,
    Search,
    SelectRepository,
    SetIssueState,
)
from nativehub.core.events import (
    CommentCreated,
    DirectoryListed,
    Event,
    Failed,
    FileRead,
    IssueCommentsLoaded,
    IssueList,
    IssueStateChanged,
    LogLine,
    PullRequestClosed,
    PullRequestList,
    PullRequestMerged,
    ReadmeLoaded,
    RepositoryInfoLoaded,
    RepositoryList,
    SearchResults,
)
from nativehub.core.input_validator import (
    ISSUE_STATES,
    MERGE_METHODS,
    SETTABLE_ISSUE_STATES,
    check_choice,
    normalize_content_path,
    parse_repo_id,
)
from nativehub.github.engine import FetchEngine
from nativehub.github.errors import ArgumentError, NativeHubError
from nativehub.github.gh_cli import GhCli
from nativehub.github.models import FileNode

Emit = Callable[[Event], None]
EngineFactory = Callable[[str], FetchEngine]

FAILURE_PREFIXES = {
    Login: "AUTH FAILED",
    ListRepositories: "FETCH FAILED",
    SelectRepository: "REPO FAILED",
    OpenInBrowser: "BROWSE FAILED",
    ListDirectory: "LISTING FAILED",
    ReadFile: "READ FAILED",
    Search: "SEARCH FAILED",
    ListIssues: "ISSUES FAILED",
    ListIssueComments: "COMMENTS FAILED",
    CreateComment: "COMMENT FAILED",
    SetIssueState: "ISSUE UPDATE FAILED",
    ListPullRequests: "PULL REQUESTS FAILED",
    MergePullRequest: "MERGE FAILED",
    ClosePullRequest: "CLOSE FAILED",
}


def failure_prefix(action: Action) -> str:
    return FAILURE_PREFIXES.get(type(action), "ACTION FAILED")


def find_readme(nodes: Sequence[FileNode]) -> Optional[FileNode]:
    """First file whose name starts with "readme" (any case), or None."""
    for node in nodes:
        if not node.is_dir and node.name.lower().startswith("readme"):
            return node
    return None


def file_name_from_url(url: str) -> str:
    """Last path segment of a download URL, percent-decoded."""
    path = urlparse(url).path.rstrip("/")
    name = unquote(path.rsplit("/", 1)[-1]) if path else ""
    return name or url


class ActionHandlers:
    """
    Routes actions to their work unit coroutine.

    Args:
        controller: Authentication flow controller (Login)
        resolver: Token resolver for REST work units
        gh: gh CLI wrapper (OpenInBrowser, CLI listing profile)
        rest_engine_factory: Builds a REST engine for a token
        cli_engine_factory: Builds the CLI engine (listing profile "cli")
        engine_profile: "rest" or "cli"
    """

    def __init__(
        self,
        controller: AuthFlowController,
        resolver: TokenResolver,
        gh: GhCli,
        rest_engine_factory: EngineFactory,
        cli_engine_factory: Optional[Callable[[], FetchEngine]] = None,
        engine_profile: str = settings.ENGINE_REST,
    ):
        self._controller = controller
        self._resolver = resolver
        self._gh = gh
        self._rest_engine_factory = rest_engine_factory
        self._cli_engine_factory = cli_engine_factory
        self._engine_profile = engine_profile
        self._routes: Dict[type, Callable[[Action, Emit], Awaitable[None]]] = {
            Login: self.login,
            ListRepositories: self.list_repositories,
            SelectRepository: self.select_repository,
            OpenInBrowser: self.open_in_browser,
            ListDirectory: self.list_directory,
            ReadFile: self.read_file,
            Search: self.search,
            ListIssues: self.list_issues,
            ListIssueComments: self.list_issue_comments,
            CreateComment: self.create_comment,
            SetIssueState: self.set_issue_state,
            ListPullRequests: self.list_pull_requests,
            MergePullRequest: self.merge_pull_request,
            ClosePullRequest: self.close_pull_request,
        }

    async def handle(self, action: Action, emit: Emit) -> None:
        """
        Run the work unit for ``action``.

        Raises:
            ArgumentError: For an action type without a handler
            NativeHubError: Whatever the work unit raises
        """
        handler = self._routes.get(type(action))
        if handler is None:
            raise ArgumentError(f"Unsupported action {type(action).__name__}")
        await handler(action, emit)

    async def _rest_engine(self) -> FetchEngine:
        token = await self._resolver.resolve()
        log.debug(f"Using token from {self._resolver.last_source}")
        return self._rest_engine_factory(token)

    async def _listing_engine(self) -> FetchEngine:
        if self._engine_profile == settings.ENGINE_CLI and self._cli_engine_factory:
            return self._cli_engine_factory()
        return await self._rest_engine()

    # ---- Auth ----

    async def login(self, action: Login, emit: Emit) -> None:
        await self._controller.login(emit)

    # ---- Repositories ----

    async def list_repositories(self, action: ListRepositories, emit: Emit) -> None:
        engine = await self._listing_engine()
        emit(LogLine(f"FETCHING REPOS VIA {engine.name.upper()} ENGINE..."))
        repos = await engine.list_repositories()
        emit(LogLine(f"FOUND {len(repos)} REPOSITORIES."))
        emit(RepositoryList(tuple(repos)))

    async def select_repository(self, action: SelectRepository, emit: Emit) -> None:
        owner, name = parse_repo_id(action.name)
        repo = f"{owner}/{name}"
        engine = await self._rest_engine()

        emit(LogLine(f"OPENING REPO: {repo}..."))
        info = await engine.get_repository_info(owner, name)
        emit(RepositoryInfoLoaded(repo, info))
        await self._list_directory(engine, owner, name, "", emit)

    async def open_in_browser(self, action: OpenInBrowser, emit: Emit) -> None:
        owner, name = parse_repo_id(action.repo)
        await self._gh.browse(f"{owner}/{name}")
        emit(LogLine(f"OPENED {owner}/{name} IN BROWSER."))

    async def list_directory(self, action: ListDirectory, emit: Emit) -> None:
        owner, name = parse_repo_id(action.repo)
        path = normalize_content_path(action.path)
        engine = await self._rest_engine()
        await self._list_directory(engine, owner, name, path, emit)

    async def _list_directory(
        self, engine: FetchEngine, owner: str, name: str, path: str, emit: Emit
    ) -> None:
        repo = f"{owner}/{name}"
        nodes = tuple(await engine.list_directory(owner, name, path))
        emit(DirectoryListed(repo, path, nodes))

        if path:
            return

        readme = find_readme(nodes)
        if readme is None or not readme.download_url:
            return

        # The listing already succeeded; a README failure is reported on its own
        try:
            text = await engine.read_file(readme.download_url)
        except NativeHubError as e:
            log.warning(f"README fetch failed for {repo}: {e}")
            emit(Failed(f"README FAILED: {e}", code=e.code))
            return
        emit(ReadmeLoaded(repo, text))

    async def read_file(self, action: ReadFile, emit: Emit) -> None:
        url = (action.url or "").strip()
        if not url:
            raise ArgumentError("No file URL given")
        engine = await self._rest_engine()
        content = await engine.read_file(url)
        emit(FileRead(file_name_from_url(url), content))

    async def search(self, action: Search, emit: Emit) -> None:
        query = (action.query or "").strip()
        if not query:
            raise ArgumentError("Search query is empty")
        engine = await self._rest_engine()
        emit(LogLine(f"SEARCHING: {query}..."))
        result = await engine.search_repositories(query)
        emit(SearchResults(result))

    # ---- Issues ----

    async def list_issues(self, action: ListIssues, emit: Emit) -> None:
        owner, name = parse_repo_id(action.repo)
        state = check_choice(action.state, ISSUE_STATES, "issue state")
        engine = await self._rest_engine()
        issues = await engine.list_issues(owner, name, state)
        emit(IssueList(f"{owner}/{name}", tuple(i for i in issues if not i.is_pull_request)))

    async def list_issue_comments(self, action: ListIssueComments, emit: Emit) -> None:
        owner, name = parse_repo_id(action.repo)
        engine = await self._rest_engine()
        comments = await engine.list_issue_comments(owner, name, action.issue_number)
        emit(IssueCommentsLoaded(action.issue_number, tuple(comments)))

    async def create_comment(self, action: CreateComment, emit: Emit) -> None:
        owner, name = parse_repo_id(action.repo)
        body = (action.body or "").strip()
        if not body:
            raise ArgumentError("Comment body is empty")
        engine = await self._rest_engine()
        comment = await engine.create_comment(owner, name, action.issue_number, body)
        emit(CommentCreated(comment))

    async def set_issue_state(self, action: SetIssueState, emit: Emit) -> None:
        owner, name = parse_repo_id(action.repo)
        state = check_choice(action.state, SETTABLE_ISSUE_STATES, "issue state")
        engine = await self._rest_engine()
        issue = await engine.set_issue_state(owner, name, action.issue_number, state)
        emit(IssueStateChanged(issue))

    # ---- Pull requests ----

    async def list_pull_requests(self, action: ListPullRequests, emit: Emit) -> None:
        owner, name = parse_repo_id(action.repo)
        state = check_choice(action.state, ISSUE_STATES, "pull request state")
        engine = await self._rest_engine()
        prs = await engine.list_pull_requests(owner, name, state)
        emit(PullRequestList(f"{owner}/{name}", tuple(prs)))

    async def merge_pull_request(self, action: MergePullRequest, emit: Emit) -> None:
        owner, name = parse_repo_id(action.repo)
        method = check_choice(action.method, MERGE_METHODS, "merge method")
        engine = await self._rest_engine()
        result = await engine.merge_pull_request(owner, name, action.number, method)
        emit(PullRequestMerged(result))

    async def close_pull_request(self, action: ClosePullRequest, emit: Emit) -> None:
        owner, name = parse_repo_id(action.repo)
        engine = await self._rest_engine()
        pr = await engine.close_pull_request(owner, name, action.number)
        emit(PullRequestClosed(pr))
