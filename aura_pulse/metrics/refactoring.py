"""Refactor signal dimension."""

from typing import NamedTuple

from aura_pulse.metrics.base import (
    CommitStats,
    DimensionSpec,
    RepositorySnapshot,
    round_half_up,
)

MAX_SCORE = 1.5

TECH_DEBT = "Technical Debt Management"
FEATURE_BLOAT = "Feature Bloat"
BALANCED = "Balanced"

CATEGORY_POINTS = {
    TECH_DEBT: 1.5,
    BALANCED: 1.0,
    FEATURE_BLOAT: 0.5,
}


class RefactorSignal(NamedTuple):
    """Code growth versus cleanup over the commit window."""

    total_commits_30d: int
    commits_with_net_deletions: int
    total_additions_30d: int
    total_deletions_30d: int
    net_change_30d: int  # positive means growth, negative means refactoring
    refactor_ratio: float  # deletions / additions
    has_active_refactoring: bool
    score: float  # 0-1.5 points
    category: str


def classify_refactoring(
    total_additions: int,
    total_deletions: int,
    total_commits: int,
    commits_with_net_deletions: int,
) -> tuple[str, bool, float]:
    """
    Classify commit activity as cleanup, bloat or balanced growth.

    Technical Debt Management when any of:
    - net lines are negative
    - deletions / additions > 0.7
    - more than 30% of commits delete more than they add (and >5 commits)

    Otherwise Feature Bloat when deletions / additions < 0.2 and the net
    change exceeds 1000 lines, else Balanced.

    The ratio is 0 when there are no additions, so a window with only
    deletions is still classified through its negative net change.

    Returns:
        Tuple of (category, has_active_refactoring, refactor_ratio).
    """
    net_change = total_additions - total_deletions
    refactor_ratio = total_deletions / total_additions if total_additions > 0 else 0.0
    deletion_share = (
        commits_with_net_deletions / total_commits if total_commits > 0 else 0.0
    )

    has_active_refactoring = (
        net_change < 0
        or refactor_ratio > 0.7
        or (deletion_share > 0.3 and total_commits > 5)
    )

    if has_active_refactoring:
        category = TECH_DEBT
    elif refactor_ratio < 0.2 and net_change > 1000:
        category = FEATURE_BLOAT
    else:
        category = BALANCED

    return category, has_active_refactoring, refactor_ratio


def analyze_refactor_signal(commits: list[CommitStats]) -> RefactorSignal:
    """Sum line changes across the window and score the refactor category."""
    total_additions = sum(commit.additions for commit in commits)
    total_deletions = sum(commit.deletions for commit in commits)
    commits_with_net_deletions = sum(
        1 for commit in commits if commit.deletions > commit.additions
    )

    category, has_active_refactoring, refactor_ratio = classify_refactoring(
        total_additions,
        total_deletions,
        len(commits),
        commits_with_net_deletions,
    )

    return RefactorSignal(
        total_commits_30d=len(commits),
        commits_with_net_deletions=commits_with_net_deletions,
        total_additions_30d=total_additions,
        total_deletions_30d=total_deletions,
        net_change_30d=total_additions - total_deletions,
        refactor_ratio=round_half_up(refactor_ratio, 2),
        has_active_refactoring=has_active_refactoring,
        score=CATEGORY_POINTS[category],
        category=category,
    )


def _analyze(snapshot: RepositorySnapshot) -> RefactorSignal:
    return analyze_refactor_signal(snapshot.commits)


DIMENSION = DimensionSpec(
    name="Refactor Signal",
    key="refactoring",
    max_score=MAX_SCORE,
    analyzer=_analyze,
)
