# -*- coding: utf-8 -*-
"""
gh CLI engine
Fetch engine that shells out to the GitHub CLI instead of holding a token.

Repository listing uses ``gh repo list`` and search uses ``gh search repos``;
the other JSON capabilities go through ``gh api``. Errors from gh are
surfaced verbatim.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from nativehub.github.engine import (
    FetchEngine,
    REPO_LIST_LIMIT,
    SEARCH_PER_PAGE,
    clamp_per_page,
)
from nativehub.github.errors import ExternalToolError
from nativehub.github.gh_cli import GhCli
from nativehub.github.models import (
    GH_REPO_FIELDS,
    GH_SEARCH_FIELDS,
    RepoSummary,
    SearchResult,
)


class CliEngine(FetchEngine):
    """Engine that wraps the ``gh`` command line tool."""

    name = "cli"

    def __init__(self, gh: Optional[GhCli] = None):
        self._gh = gh or GhCli()

    async def _request_json(
        self,
        method: str,
        endpoint: str,
        params: Optional[Dict[str, Any]] = None,
        body: Optional[Dict[str, Any]] = None,
    ) -> Any:
        fields = dict(params or {})
        fields.update(body or {})
        return await self._gh.api(endpoint, method=method, fields=fields)

    async def list_repositories(self, limit: int = REPO_LIST_LIMIT) -> List[RepoSummary]:
        raw_repos = await self._gh.repo_list(
            GH_REPO_FIELDS, clamp_per_page(limit, REPO_LIST_LIMIT)
        )
        return [RepoSummary.from_gh_json(item) for item in raw_repos]

    async def search_repositories(
        self, query: str, per_page: int = SEARCH_PER_PAGE
    ) -> SearchResult:
        raw_repos = await self._gh.search_repos(
            query, GH_SEARCH_FIELDS, clamp_per_page(per_page)
        )
        items = tuple(RepoSummary.from_gh_search(item) for item in raw_repos)
        # gh does not report the overall hit count
        return SearchResult(total_count=len(items), incomplete_results=False, items=items)

    async def read_file(self, url: str) -> str:
        raise ExternalToolError(
            "Reading raw file URLs is not supported by the gh CLI engine",
        )
