"""
GitHub provider for Aura Pulse.

Fetches repository facts from the GitHub REST API and normalizes them into
the typed snapshot records consumed by the scorers.
"""

import asyncio
import os
from datetime import datetime, timedelta, timezone
from typing import Any

import httpx
from dotenv import load_dotenv
from rich.console import Console

from aura_pulse.http_client import _get_async_http_client
from aura_pulse.metrics.base import (
    CommitStats,
    Issue,
    Label,
    PullRequest,
    RepositoryInfo,
    RepositorySnapshot,
    TreeEntry,
    WorkflowFile,
)
from aura_pulse.vcs.base import BaseVCSProvider, RateLimitError

# Load environment variables
load_dotenv()
# Progress goes to stderr; stdout carries results
console = Console(stderr=True)

GITHUB_API_BASE = "https://api.github.com"
GITHUB_API_VERSION = "2022-11-28"
JSON_ACCEPT = "application/vnd.github+json"
RAW_ACCEPT = "application/vnd.github.v3.raw"
WORKFLOW_DIR = ".github/workflows"

PER_PAGE = 100
COMMIT_BATCH_SIZE = 10


class GitHubProvider(BaseVCSProvider):
    """GitHub provider using the REST API."""

    def __init__(
        self,
        token: str | None = None,
        workflow_content_limit: int = 5,
        commit_detail_limit: int | None = None,
    ):
        """
        Initialize GitHub provider.

        Args:
            token: GitHub Personal Access Token. If not provided, reads from
                   GITHUB_TOKEN environment variable. Anonymous access works
                   with a much lower rate limit.
            workflow_content_limit: Number of workflow files whose content
                   is fetched.
            commit_detail_limit: Maximum number of commits whose detailed
                   stats are fetched. None fetches stats for every listed
                   commit; commits past the limit keep zero line stats.
        """
        self.token = token or os.getenv("GITHUB_TOKEN")
        self.workflow_content_limit = workflow_content_limit
        self.commit_detail_limit = commit_detail_limit

    def get_platform_name(self) -> str:
        return "github"

    def validate_credentials(self) -> bool:
        """Check if a GitHub token is configured."""
        return bool(self.token)

    def get_repository_url(self, owner: str, repo: str) -> str:
        return f"https://github.com/{owner}/{repo}"

    def _headers(self, accept: str = JSON_ACCEPT) -> dict[str, str]:
        headers = {
            "Accept": accept,
            "X-GitHub-Api-Version": GITHUB_API_VERSION,
        }
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    async def _request(
        self,
        url: str,
        params: dict[str, Any] | None = None,
        accept: str = JSON_ACCEPT,
    ) -> httpx.Response:
        """
        Issue a GET request against the GitHub API.

        Raises:
            RateLimitError: If the response reports an exhausted rate limit.
        """
        if not url.startswith("http"):
            url = f"{GITHUB_API_BASE}{url}"
        client = await _get_async_http_client()
        response = await client.get(url, params=params, headers=self._headers(accept))

        if response.status_code in (403, 429) and (
            response.headers.get("x-ratelimit-remaining") == "0"
        ):
            reset = response.headers.get("x-ratelimit-reset")
            reset_at = (
                datetime.fromtimestamp(int(reset), tz=timezone.utc) if reset else None
            )
            raise RateLimitError(
                "GitHub API rate limit exceeded. Resets at "
                f"{reset_at.isoformat() if reset_at else 'unknown'}",
                reset_at,
            )
        return response

    async def _get_optional(
        self,
        url: str,
        params: dict[str, Any] | None = None,
        accept: str = JSON_ACCEPT,
    ) -> httpx.Response | None:
        """GET that returns None instead of raising on HTTP or network errors."""
        try:
            response = await self._request(url, params=params, accept=accept)
        except httpx.HTTPError as e:
            console.print(f"[dim]Note: request to {url} failed: {e}[/dim]")
            return None
        if not response.is_success:
            console.print(
                f"[dim]Note: {url} returned HTTP {response.status_code}[/dim]"
            )
            return None
        return response

    async def get_repository_info(self, owner: str, repo: str) -> RepositoryInfo:
        """
        Fetch top-level repository metadata.

        Raises:
            ValueError: If the repository does not exist or is inaccessible.
            httpx.HTTPStatusError: If GitHub API returns another error.
        """
        response = await self._request(f"/repos/{owner}/{repo}")
        if response.status_code == 404:
            raise ValueError(f"Repository {owner}/{repo} not found or is inaccessible.")
        response.raise_for_status()
        data = response.json()

        return RepositoryInfo(
            name=data.get("name", repo),
            full_name=data.get("full_name", f"{owner}/{repo}"),
            stargazers_count=data.get("stargazers_count") or 0,
            forks_count=data.get("forks_count") or 0,
            default_branch=data.get("default_branch") or "main",
        )

    async def get_tree(self, owner: str, repo: str, branch: str) -> list[TreeEntry]:
        """Fetch the full recursive file tree of a branch."""
        response = await self._get_optional(
            f"/repos/{owner}/{repo}/git/trees/{branch}", params={"recursive": "1"}
        )
        if response is None:
            return []
        return _normalize_tree(response.json())

    async def get_workflow_content(
        self, owner: str, repo: str, path: str
    ) -> str | None:
        response = await self._get_optional(
            f"/repos/{owner}/{repo}/contents/{path}", accept=RAW_ACCEPT
        )
        return response.text if response is not None else None

    async def get_workflow_files(self, owner: str, repo: str) -> list[WorkflowFile]:
        """
        List YAML workflow files and fetch the content of the first few.

        Files beyond ``workflow_content_limit`` are listed without content.
        """
        response = await self._get_optional(
            f"/repos/{owner}/{repo}/contents/{WORKFLOW_DIR}"
        )
        if response is None:
            return []
        listing = response.json()
        if not isinstance(listing, list):
            return []

        files = [
            item
            for item in listing
            if item.get("type") == "file"
            and item.get("name", "").endswith((".yml", ".yaml"))
        ]
        fetched = files[: self.workflow_content_limit]
        contents = await asyncio.gather(
            *(self.get_workflow_content(owner, repo, item["path"]) for item in fetched)
        )
        contents = list(contents) + [None] * (len(files) - len(fetched))

        return [
            WorkflowFile(name=item["name"], path=item["path"], content=content)
            for item, content in zip(files, contents)
        ]

    async def get_readme(self, owner: str, repo: str) -> str | None:
        response = await self._get_optional(
            f"/repos/{owner}/{repo}/readme", accept=RAW_ACCEPT
        )
        return response.text if response is not None else None

    async def _list_commits(
        self, owner: str, repo: str, since: datetime
    ) -> list[dict[str, Any]]:
        """Page through the whole commit listing since a point in time."""
        commits: list[dict[str, Any]] = []
        page = 1
        while True:
            response = await self._get_optional(
                f"/repos/{owner}/{repo}/commits",
                params={
                    "since": since.isoformat(),
                    "per_page": PER_PAGE,
                    "page": page,
                },
            )
            if response is None:
                break
            batch = response.json()
            if not isinstance(batch, list) or not batch:
                break
            commits.extend(batch)
            if len(batch) < PER_PAGE:
                break
            page += 1
        return commits

    async def _get_commit_stats(
        self, owner: str, repo: str, commit: dict[str, Any]
    ) -> CommitStats:
        """Fetch a commit's detail; stats fall back to zero when unavailable."""
        sha = commit.get("sha", "")
        response = await self._get_optional(f"/repos/{owner}/{repo}/commits/{sha}")
        detail = response.json() if response is not None else commit
        return _normalize_commit(detail)

    async def get_recent_commits(
        self,
        owner: str,
        repo: str,
        days: int = 30,
        now: datetime | None = None,
    ) -> list[CommitStats]:
        """
        Fetch commits from the last ``days`` days with line-change stats.

        Every listed commit is returned. Detail requests run concurrently in
        batches of 10 for the first ``commit_detail_limit`` commits.
        """
        since = (now or datetime.now(timezone.utc)) - timedelta(days=days)
        listed = await self._list_commits(owner, repo, since)
        limit = self.commit_detail_limit
        detailed = listed if limit is None else listed[:limit]

        commits: list[CommitStats] = []
        for start in range(0, len(detailed), COMMIT_BATCH_SIZE):
            batch = detailed[start : start + COMMIT_BATCH_SIZE]
            commits.extend(
                await asyncio.gather(
                    *(self._get_commit_stats(owner, repo, item) for item in batch)
                )
            )
        commits.extend(_normalize_commit(item) for item in listed[len(detailed) :])
        return commits

    async def get_issues(self, owner: str, repo: str) -> list[Issue]:
        """Fetch closed issues, skipping pull requests in the listing."""
        response = await self._get_optional(
            f"/repos/{owner}/{repo}/issues",
            params={"state": "closed", "per_page": PER_PAGE},
        )
        if response is None:
            return []
        return [
            _normalize_issue(item)
            for item in response.json()
            if "pull_request" not in item
        ]

    async def get_pull_requests(self, owner: str, repo: str) -> list[PullRequest]:
        """Fetch closed pull requests (merged ones carry ``merged_at``)."""
        response = await self._get_optional(
            f"/repos/{owner}/{repo}/pulls",
            params={"state": "closed", "per_page": PER_PAGE},
        )
        if response is None:
            return []
        return [_normalize_pull_request(item) for item in response.json()]

    async def get_snapshot(
        self,
        owner: str,
        repo: str,
        window_days: int = 30,
        default_branch: str | None = None,
        now: datetime | None = None,
    ) -> RepositorySnapshot:
        """
        Assemble a RepositorySnapshot, fetching all parts concurrently.

        Raises:
            ValueError: If the repository does not exist (only checked when
                the default branch has to be looked up).
        """
        if default_branch is None:
            info = await self.get_repository_info(owner, repo)
            default_branch = info.default_branch

        tree, workflows, commits, readme = await asyncio.gather(
            self.get_tree(owner, repo, default_branch),
            self.get_workflow_files(owner, repo),
            self.get_recent_commits(owner, repo, window_days, now=now),
            self.get_readme(owner, repo),
        )
        return RepositorySnapshot(
            owner=owner,
            name=repo,
            tree=tree,
            workflows=workflows,
            commits=commits,
            readme=readme,
            window_days=window_days,
        )


def _normalize_tree(data: Any) -> list[TreeEntry]:
    if not isinstance(data, dict):
        return []
    return [
        TreeEntry(path=node["path"], type=node["type"])
        for node in data.get("tree", [])
        if node.get("type") in ("blob", "tree") and "path" in node
    ]


def _normalize_commit(data: dict[str, Any]) -> CommitStats:
    commit_info = data.get("commit") or {}
    author = commit_info.get("author") or {}
    stats = data.get("stats") or {}
    return CommitStats(
        sha=data.get("sha", ""),
        date=author.get("date", ""),
        message=commit_info.get("message", ""),
        additions=stats.get("additions") or 0,
        deletions=stats.get("deletions") or 0,
    )


def _normalize_labels(raw_labels: list[Any]) -> list[Label]:
    labels = []
    for label in raw_labels or []:
        if isinstance(label, dict):
            labels.append(Label(name=label.get("name", "")))
        elif isinstance(label, str):
            labels.append(Label(name=label))
    return labels


def _normalize_issue(data: dict[str, Any]) -> Issue:
    return Issue(
        title=data.get("title") or "",
        state=data.get("state", "open"),
        labels=_normalize_labels(data.get("labels", [])),
        closed_at=data.get("closed_at"),
    )


def _normalize_pull_request(data: dict[str, Any]) -> PullRequest:
    return PullRequest(
        title=data.get("title") or "",
        state=data.get("state", "open"),
        merged_at=data.get("merged_at"),
        labels=_normalize_labels(data.get("labels", [])),
    )
