"""
Sprint signature and project lifecycle detection.

The sprint signature is the window with the highest commit density in a
repository's history: the actual build phase of the project.
"""

import math
from datetime import datetime, timedelta, timezone
from typing import NamedTuple

from aura_pulse.metrics.base import CommitStats, round_half_up
from aura_pulse.velocity import parse_commit_date

SPRINT_WINDOW_SIZES = [7, 10, 14, 21, 30]
MIN_SPRINT_COMMITS = 3
NO_COMMITS_DAYS = 999

SPRINT_LABELS = [
    (9.0, "Intense Sprint"),
    (7.0, "Fast Sprint"),
    (5.0, "Solid Sprint"),
    (3.0, "Steady Build"),
]


class SprintWindow(NamedTuple):
    """Highest-velocity period of development."""

    start_date: str
    end_date: str
    duration_days: int
    commits: int
    velocity_score: float  # 0-10 scale
    total_additions: int
    total_deletions: int
    avg_commits_per_day: float
    is_peak_velocity: bool = False
    label: str = ""


class ProjectLifecycle(NamedTuple):
    """Current lifecycle status of a project."""

    status: str  # Active Development, Maintenance Mode, Stable/Production, Archived
    emoji: str
    description: str
    reasoning: str
    days_since_last_commit: int


def get_sprint_label(velocity: float) -> str:
    for minimum, label in SPRINT_LABELS:
        if velocity >= minimum:
            return label
    return "Incremental Build"


def analyze_window(commits: list[CommitStats]) -> SprintWindow:
    """
    Score one window of commits (sorted oldest first).

    Intensity peaks at 4+ commits/day; complexity uses the same log scale
    as the velocity complexity factor.
    """
    start = parse_commit_date(commits[0].date)
    end = parse_commit_date(commits[-1].date)
    actual_days = max(1, math.ceil((end - start).total_seconds() / 86400))

    total_commits = len(commits)
    total_additions = sum(c.additions for c in commits)
    total_deletions = sum(c.deletions for c in commits)
    avg_commits_per_day = total_commits / actual_days

    intensity_factor = min(2.0, avg_commits_per_day / 2)
    complexity_factor = min(
        2.0,
        math.log10((total_additions + total_deletions) / total_commits + 1) / 2.7,
    )
    velocity_score = min(10.0, intensity_factor * complexity_factor * 5)

    return SprintWindow(
        start_date=start.isoformat(),
        end_date=end.isoformat(),
        duration_days=actual_days,
        commits=total_commits,
        velocity_score=round_half_up(velocity_score, 1),
        total_additions=total_additions,
        total_deletions=total_deletions,
        avg_commits_per_day=round_half_up(avg_commits_per_day, 1),
    )


def detect_sprint_window(commits: list[CommitStats]) -> SprintWindow | None:
    """
    Find the highest-velocity window using sliding windows of several sizes.

    Returns:
        The peak SprintWindow with its label, or None when there are no
        non-boilerplate commits or no window reaches a positive velocity.
    """
    valid_commits = [c for c in commits if not c.is_likely_boilerplate]
    if not valid_commits:
        return None

    ordered = sorted(valid_commits, key=lambda c: parse_commit_date(c.date))

    # Short histories are analyzed as a single window
    if len(ordered) < 5:
        sprint = analyze_window(ordered)
        return sprint._replace(label=get_sprint_label(sprint.velocity_score))

    dates = [parse_commit_date(c.date) for c in ordered]
    best: SprintWindow | None = None
    highest_velocity = 0.0

    for size in SPRINT_WINDOW_SIZES:
        for window_start in dates:
            window_end = window_start + timedelta(days=size)
            window_commits = [
                commit
                for commit, commit_date in zip(ordered, dates)
                if window_start <= commit_date <= window_end
            ]
            if len(window_commits) < MIN_SPRINT_COMMITS:
                continue

            sprint = analyze_window(window_commits)
            if sprint.velocity_score > highest_velocity:
                highest_velocity = sprint.velocity_score
                best = sprint

    if best is None:
        return None
    return best._replace(
        is_peak_velocity=True, label=get_sprint_label(best.velocity_score)
    )


def days_since_last_commit(
    commits: list[CommitStats], now: datetime | None = None
) -> int:
    if not commits:
        return NO_COMMITS_DAYS
    now = now or datetime.now(timezone.utc)
    latest = max(parse_commit_date(c.date) for c in commits)
    return math.floor((now - latest).total_seconds() / 86400)


def count_commits_since(
    commits: list[CommitStats], days: int, now: datetime | None = None
) -> int:
    cutoff = (now or datetime.now(timezone.utc)) - timedelta(days=days)
    return sum(1 for c in commits if parse_commit_date(c.date) >= cutoff)


def determine_lifecycle_status(
    recent_commits_7d: int,
    recent_commits_30d: int,
    is_live: bool,
    days_since_last: int,
    user_defined_ongoing: bool = False,
) -> ProjectLifecycle:
    """
    Determine the project lifecycle status.

    Priority:
    1. Marked ongoing by the developer -> Active Development (the reasoning
       cites the commit count when there were 5+ commits in the last 7 days)
    2. 5+ commits in the last 7 days -> Active Development
    3. Recent commits and deployed -> Maintenance Mode
    4. No recent commits, deployed, last commit within 90 days -> Stable/Production
    5. Last commit more than 90 days ago -> Archived
    6. Otherwise -> Stable/Production (completed)
    """
    busy_week = recent_commits_7d >= 5
    if user_defined_ongoing and not busy_week:
        return ProjectLifecycle(
            "Active Development",
            "⚡️",
            "Under active development",
            "Marked as ongoing by developer",
            days_since_last,
        )

    if busy_week:
        return ProjectLifecycle(
            "Active Development",
            "⚡️",
            "Under active development",
            f"{recent_commits_7d} commits in the last 7 days",
            days_since_last,
        )

    if recent_commits_30d >= 1 and is_live:
        return ProjectLifecycle(
            "Maintenance Mode",
            "🔧",
            "Live and maintained",
            f"{recent_commits_30d} commits in the last 30 days, currently deployed",
            days_since_last,
        )

    if recent_commits_30d == 0 and is_live and days_since_last <= 90:
        return ProjectLifecycle(
            "Stable/Production",
            "✅",
            "Production-ready and stable",
            "Live deployment with no recent changes needed",
            days_since_last,
        )

    if days_since_last > 90:
        return ProjectLifecycle(
            "Archived",
            "📦",
            "Completed/Archived",
            f"Last commit {days_since_last} days ago",
            days_since_last,
        )

    return ProjectLifecycle(
        "Stable/Production",
        "✅",
        "Completed project",
        "Build phase complete",
        days_since_last,
    )
