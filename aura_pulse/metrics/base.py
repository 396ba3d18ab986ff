"""
Shared snapshot types and dimension helpers.
"""

import math
from typing import Any, Callable, NamedTuple

BOILERPLATE_KEYWORDS = [
    "initial commit",
    "generated",
    "scaffolded",
    "boilerplate",
    "npm install",
    "yarn add",
    "package-lock",
    "lock file",
    "merge branch",
    "merge pull request",
    "auto-generated",
    "prettier",
    "eslint",
    "formatted",
]


class TreeEntry(NamedTuple):
    """A single entry of a recursive repository tree listing."""

    path: str
    type: str  # "blob" or "tree"


class WorkflowFile(NamedTuple):
    """A CI workflow file and its raw text, if it could be fetched."""

    name: str
    path: str
    content: str | None = None


def is_likely_boilerplate(message: str, additions: int, deletions: int) -> bool:
    """
    Detect commits that are likely generated or housekeeping work.

    A commit counts as boilerplate when its message mentions a known
    housekeeping keyword, when it is huge (>5000 lines) with a terse message,
    or when it only removes code (>100 deletions, <10 additions).
    """
    message_lower = message.lower()
    has_keyword = any(keyword in message_lower for keyword in BOILERPLATE_KEYWORDS)
    huge_without_context = (additions + deletions) > 5000 and len(message) < 30
    only_deletions = deletions > 100 and additions < 10

    return has_keyword or huge_without_context or only_deletions


class CommitStats(NamedTuple):
    """A commit inside the analysis window with its line-change stats."""

    sha: str
    date: str  # ISO-8601 author date
    message: str = ""
    additions: int = 0
    deletions: int = 0

    @property
    def total_changes(self) -> int:
        return self.additions + self.deletions

    @property
    def is_likely_boilerplate(self) -> bool:
        return is_likely_boilerplate(self.message, self.additions, self.deletions)


class RepositorySnapshot(NamedTuple):
    """Immutable bundle of raw repository facts fed into the scorers."""

    owner: str
    name: str
    tree: list[TreeEntry] = []
    workflows: list[WorkflowFile] = []
    commits: list[CommitStats] = []
    readme: str | None = None
    window_days: int = 30

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.name}"

    @property
    def workflow_names(self) -> list[str]:
        return [workflow.name for workflow in self.workflows]

    @property
    def workflow_contents(self) -> list[str]:
        # Workflows whose content could not be fetched are skipped
        return [w.content for w in self.workflows if w.content is not None]


class Label(NamedTuple):
    """An issue label."""

    name: str


class Issue(NamedTuple):
    """A repository issue (pull requests excluded)."""

    title: str
    state: str  # "open" or "closed"
    labels: list[Label] = []
    closed_at: str | None = None


class PullRequest(NamedTuple):
    """A repository pull request."""

    title: str
    state: str  # "open" or "closed"
    merged_at: str | None = None
    labels: list[Label] = []


class RepositoryInfo(NamedTuple):
    """Top-level repository metadata used by the adoption metric."""

    name: str
    full_name: str
    stargazers_count: int = 0
    forks_count: int = 0
    default_branch: str = "main"


class DimensionSpec(NamedTuple):
    """Specification for one engineering rigor dimension."""

    name: str
    key: str  # Field name inside RigorBreakdown
    max_score: float
    analyzer: Callable[[RepositorySnapshot], Any]


def round_half_up(value: float, digits: int = 0) -> float:
    """Round with halves going up, e.g. round_half_up(6.25, 1) == 6.3."""
    factor = 10**digits
    return math.floor(value * factor + 0.5) / factor


def to_serializable(value: Any) -> Any:
    """
    Convert nested result records into JSON-compatible structures.

    NamedTuples become dicts (recursively), tuples become lists.
    """
    if hasattr(value, "_asdict"):
        return {key: to_serializable(item) for key, item in value._asdict().items()}
    if isinstance(value, dict):
        return {key: to_serializable(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_serializable(item) for item in value]
    return value
