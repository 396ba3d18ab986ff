"""
Base provider interface for Aura Pulse.

Every provider turns a hosting platform's API into the typed snapshot
records consumed by the scorers.
"""

from abc import ABC, abstractmethod
from datetime import datetime

from aura_pulse.metrics.base import (
    Issue,
    PullRequest,
    RepositoryInfo,
    RepositorySnapshot,
)


class RateLimitError(Exception):
    """Raised when a provider's API rate limit is exhausted."""

    def __init__(self, message: str, reset_at: datetime | None = None):
        super().__init__(message)
        self.reset_at = reset_at


class BaseVCSProvider(ABC):
    """Abstract base class for VCS providers."""

    @abstractmethod
    def get_platform_name(self) -> str:
        """Return the platform identifier, e.g. 'github'."""

    @abstractmethod
    def validate_credentials(self) -> bool:
        """Return True if credentials are configured."""

    @abstractmethod
    def get_repository_url(self, owner: str, repo: str) -> str:
        """Return the web URL of a repository."""

    @abstractmethod
    async def get_repository_info(self, owner: str, repo: str) -> RepositoryInfo:
        """
        Fetch top-level repository metadata.

        Raises:
            ValueError: If the repository does not exist or is inaccessible.
        """

    @abstractmethod
    async def get_snapshot(
        self,
        owner: str,
        repo: str,
        window_days: int = 30,
        default_branch: str | None = None,
        now: datetime | None = None,
    ) -> RepositorySnapshot:
        """Assemble the tree, workflows, commits and README of a repository."""

    @abstractmethod
    async def get_issues(self, owner: str, repo: str) -> list[Issue]:
        """Fetch closed issues (pull requests excluded)."""

    @abstractmethod
    async def get_pull_requests(self, owner: str, repo: str) -> list[PullRequest]:
        """Fetch closed pull requests."""
