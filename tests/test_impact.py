"""
Tests for the impact metric classifiers.
"""

from aura_pulse.impact import (
    CRITICAL_KEYWORDS,
    calculate_code_quality,
    calculate_feature_delivery,
    calculate_impacts,
    calculate_issues_resolved,
    calculate_performance,
    calculate_user_adoption,
    contains_keywords,
    filter_non_zero_metrics,
)
from aura_pulse.metrics.base import Issue, Label, PullRequest, RepositoryInfo


def _issue(title, labels=(), state="closed"):
    return Issue(
        title=title,
        state=state,
        labels=[Label(name=name) for name in labels],
        closed_at="2024-01-01T00:00:00Z" if state == "closed" else None,
    )


def _pr(title, merged=True):
    return PullRequest(
        title=title,
        state="closed",
        merged_at="2024-01-01T00:00:00Z" if merged else None,
    )


class TestIssuesResolved:
    """Test the calculate_issues_resolved function."""

    def test_title_and_label_match_counts_once(self):
        issues = [_issue("Critical security fix", labels=["bug"])]
        metric = calculate_issues_resolved(issues, "demo")
        assert metric.value == 1
        assert metric.id == "issues-resolved-demo"
        assert metric.trend == "stable"

    def test_label_only_match(self):
        issues = [_issue("Login fails on Safari", labels=["Type: Bug"])]
        assert calculate_issues_resolved(issues, "demo").value == 1

    def test_open_issues_are_ignored(self):
        issues = [_issue("Security hole", state="open")]
        assert calculate_issues_resolved(issues, "demo").value == 0

    def test_trend_is_up_above_threshold(self):
        issues = [_issue(f"Hotfix {n}") for n in range(6)]
        metric = calculate_issues_resolved(issues, "demo")
        assert metric.value == 6
        assert metric.trend == "up"

    def test_matching_is_case_insensitive(self):
        assert contains_keywords("Fix CRITICAL bug", CRITICAL_KEYWORDS)
        assert contains_keywords("fix critical bug", CRITICAL_KEYWORDS)
        upper = calculate_issues_resolved([_issue("Fix CRITICAL bug")], "demo")
        lower = calculate_issues_resolved([_issue("fix critical bug")], "demo")
        assert upper.value == lower.value == 1


class TestPerformance:
    """Test the calculate_performance function."""

    def test_only_merged_prs_count(self):
        prs = [_pr("Optimize query planner"), _pr("Speed up startup", merged=False)]
        assert calculate_performance(prs, "demo").value == 1

    def test_trend_threshold(self):
        prs = [_pr(f"Reduce latency in step {n}") for n in range(4)]
        metric = calculate_performance(prs, "demo")
        assert metric.value == 4
        assert metric.trend == "up"


class TestUserAdoption:
    """Test the calculate_user_adoption function."""

    def test_growing_community(self):
        repo = RepositoryInfo(
            name="demo", full_name="o/demo", stargazers_count=60, forks_count=30
        )
        metric = calculate_user_adoption(repo)
        assert metric.value == 120
        assert metric.description == "Growing community with 60 stars"
        assert metric.trend == "up"

    def test_high_adoption_formats_stars(self):
        repo = RepositoryInfo(name="demo", full_name="o/demo", stargazers_count=1500)
        metric = calculate_user_adoption(repo)
        assert metric.description == "High community adoption with 1,500 stars"

    def test_building_community(self):
        repo = RepositoryInfo(name="demo", full_name="o/demo", stargazers_count=10)
        metric = calculate_user_adoption(repo)
        assert metric.description == "Building community with 10 stars"
        assert metric.trend == "stable"


class TestQualityAndFeatures:
    """Test the combined issue and pull request classifiers."""

    def test_code_quality_counts_issues_and_prs(self):
        issues = [_issue("Refactor the parser")]
        prs = [_pr("Code cleanup"), _pr("Tech-debt sweep", merged=False)]
        assert calculate_code_quality(issues, prs, "demo").value == 2

    def test_feature_delivery(self):
        issues = [_issue("Add dark mode"), _issue("Add export", state="open")]
        prs = [_pr("Implement search")]
        metric = calculate_feature_delivery(issues, prs, "demo")
        assert metric.value == 2
        assert metric.description == "Shipped 2 new features and enhancements"


class TestCalculateImpacts:
    """Test the aggregate impact list."""

    def test_order_and_zero_filtering(self):
        repo = RepositoryInfo(name="quiet", full_name="o/quiet")
        metrics = calculate_impacts(repo, [], [])

        assert [m.type for m in metrics] == [
            "issues_resolved",
            "performance",
            "users",
            "quality",
            "features",
        ]
        assert all(m.value == 0 for m in metrics)
        assert filter_non_zero_metrics(metrics) == []

    def test_filter_is_idempotent(self):
        repo = RepositoryInfo(name="demo", full_name="o/demo", stargazers_count=3)
        metrics = calculate_impacts(repo, [_issue("Fix bug")], [])
        once = filter_non_zero_metrics(metrics)
        assert [m.type for m in once] == ["issues_resolved", "users"]
        assert filter_non_zero_metrics(once) == once
