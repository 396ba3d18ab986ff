"""
Impact metrics for Aura Pulse.

Keyword classifiers over closed issues and merged pull requests, plus a
stars/forks adoption score. Matching is case-insensitive substring search.
"""

from typing import NamedTuple

from aura_pulse.metrics.base import Issue, PullRequest, RepositoryInfo

CRITICAL_KEYWORDS = ["bug", "critical", "security", "urgent", "hotfix", "vulnerability"]
PERFORMANCE_KEYWORDS = [
    "optimize",
    "performance",
    "speed",
    "faster",
    "cache",
    "efficiency",
    "latency",
]
QUALITY_KEYWORDS = [
    "refactor",
    "cleanup",
    "tech-debt",
    "technical debt",
    "clean",
    "quality",
    "maintainability",
]
FEATURE_KEYWORDS = ["feature", "enhancement", "add", "new", "implement"]

# Counts above these thresholds mark a metric as trending up
ISSUES_TREND_THRESHOLD = 5
PERFORMANCE_TREND_THRESHOLD = 3
STARS_TREND_THRESHOLD = 50
QUALITY_TREND_THRESHOLD = 5
FEATURES_TREND_THRESHOLD = 5


class ImpactMetric(NamedTuple):
    """A categorical impact count for one repository."""

    id: str
    type: str  # issues_resolved, performance, users, quality, features
    title: str
    description: str
    value: int
    icon: str
    trend: str | None = None  # "up", "down", "stable"


def contains_keywords(text: str, keywords: list[str]) -> bool:
    lower_text = text.lower()
    return any(keyword.lower() in lower_text for keyword in keywords)


def has_label_keywords(label_names: list[str], keywords: list[str]) -> bool:
    return any(contains_keywords(name, keywords) for name in label_names)


def issue_matches(issue: Issue, keywords: list[str]) -> bool:
    """A closed issue matches when its title or any label matches."""
    if issue.state != "closed":
        return False
    return contains_keywords(issue.title, keywords) or has_label_keywords(
        [label.name for label in issue.labels], keywords
    )


def pull_request_matches(pr: PullRequest, keywords: list[str]) -> bool:
    """A merged pull request matches on its title only."""
    return bool(pr.merged_at) and contains_keywords(pr.title, keywords)


def _trend(count: int, threshold: int) -> str:
    return "up" if count > threshold else "stable"


def calculate_issues_resolved(issues: list[Issue], repo_name: str) -> ImpactMetric:
    """Count closed issues tagged as bugs, security or urgent work."""
    resolved = sum(1 for issue in issues if issue_matches(issue, CRITICAL_KEYWORDS))
    return ImpactMetric(
        id=f"issues-resolved-{repo_name}",
        type="issues_resolved",
        title="Critical Issues Resolved",
        description=f"Fixed {resolved} critical bugs and security vulnerabilities",
        value=resolved,
        icon="🔧",
        trend=_trend(resolved, ISSUES_TREND_THRESHOLD),
    )


def calculate_performance(prs: list[PullRequest], repo_name: str) -> ImpactMetric:
    """Count merged pull requests with performance-related titles."""
    improvements = sum(
        1 for pr in prs if pull_request_matches(pr, PERFORMANCE_KEYWORDS)
    )
    return ImpactMetric(
        id=f"performance-{repo_name}",
        type="performance",
        title="Performance Optimizations",
        description=f"Implemented {improvements} performance improvements",
        value=improvements,
        icon="⚡",
        trend=_trend(improvements, PERFORMANCE_TREND_THRESHOLD),
    )


def calculate_user_adoption(repo: RepositoryInfo) -> ImpactMetric:
    """
    Use stars + 2 x forks as a proxy for adoption.

    Description tiers: >1000 high adoption, >100 growing, else building.
    """
    adoption_score = repo.stargazers_count + repo.forks_count * 2
    stars = f"{repo.stargazers_count:,}"

    if adoption_score > 1000:
        description = f"High community adoption with {stars} stars"
    elif adoption_score > 100:
        description = f"Growing community with {stars} stars"
    else:
        description = f"Building community with {stars} stars"

    return ImpactMetric(
        id=f"users-{repo.name}",
        type="users",
        title="User Adoption",
        description=description,
        value=adoption_score,
        icon="👥",
        trend=_trend(repo.stargazers_count, STARS_TREND_THRESHOLD),
    )


def calculate_code_quality(
    issues: list[Issue], prs: list[PullRequest], repo_name: str
) -> ImpactMetric:
    """Count closed issues and merged PRs about refactoring and cleanup."""
    total = sum(1 for issue in issues if issue_matches(issue, QUALITY_KEYWORDS)) + sum(
        1 for pr in prs if pull_request_matches(pr, QUALITY_KEYWORDS)
    )
    return ImpactMetric(
        id=f"quality-{repo_name}",
        type="quality",
        title="Code Quality Improvements",
        description=f"Completed {total} refactoring and cleanup tasks",
        value=total,
        icon="✨",
        trend=_trend(total, QUALITY_TREND_THRESHOLD),
    )


def calculate_feature_delivery(
    issues: list[Issue], prs: list[PullRequest], repo_name: str
) -> ImpactMetric:
    """Count closed issues and merged PRs that shipped features."""
    total = sum(1 for issue in issues if issue_matches(issue, FEATURE_KEYWORDS)) + sum(
        1 for pr in prs if pull_request_matches(pr, FEATURE_KEYWORDS)
    )
    return ImpactMetric(
        id=f"features-{repo_name}",
        type="features",
        title="Features Delivered",
        description=f"Shipped {total} new features and enhancements",
        value=total,
        icon="🚀",
        trend=_trend(total, FEATURES_TREND_THRESHOLD),
    )


def calculate_impacts(
    repo: RepositoryInfo, issues: list[Issue], prs: list[PullRequest]
) -> list[ImpactMetric]:
    """
    Calculate all five impact metrics for a repository.

    Args:
        repo: Repository metadata (name, stars, forks).
        issues: Issues of the repository (pull requests excluded).
        prs: Pull requests of the repository.

    Returns:
        Metrics in fixed order: issues resolved, performance, users,
        quality, features. Zero-valued metrics are included.
    """
    return [
        calculate_issues_resolved(issues, repo.name),
        calculate_performance(prs, repo.name),
        calculate_user_adoption(repo),
        calculate_code_quality(issues, prs, repo.name),
        calculate_feature_delivery(issues, prs, repo.name),
    ]


def filter_non_zero_metrics(metrics: list[ImpactMetric]) -> list[ImpactMetric]:
    """Drop metrics whose value is zero."""
    return [metric for metric in metrics if metric.value > 0]
