"""
Velocity scoring for Aura Pulse.

Velocity = (commits x complexity factor) / days active, normalized to 0-10.
Boilerplate commits (lockfile bumps, merges, formatting runs) are excluded.
"""

import math
from datetime import date, datetime, timedelta, timezone
from typing import NamedTuple

from aura_pulse.metrics.base import CommitStats, round_half_up

# Velocity bands (inclusive lower bounds), highest first
VELOCITY_BANDS = [
    (8.0, "Intense Sprint", "🔥"),
    (6.0, "High Velocity", "⚡"),
    (3.0, "Steady Progress", "🚀"),
    (0.0, "Maintenance Mode", "🔧"),
]

VELOCITY_AI_CONTEXT = [
    (8.0, "High execution momentum, ideal for rapid prototyping and feature delivery."),
    (6.0, "Strong development pace with consistent commit activity."),
    (3.0, "Moderate activity, suitable for incremental improvements."),
    (0.0, "Low recent activity, project may be in stable/maintenance phase."),
]


class VelocityRawData(NamedTuple):
    """Raw inputs behind a velocity score."""

    commits_30d: int
    avg_commits_per_day: float
    total_additions: int
    total_deletions: int
    net_lines_changed: int
    days_active: int
    complexity_factor: float


class VelocityMetrics(NamedTuple):
    """Commit cadence score for the analysis window."""

    score: float  # 0-10 scale
    label: str
    trend: str  # "increasing", "stable", "decreasing"
    raw_data: VelocityRawData


class HeatmapDay(NamedTuple):
    """Per-day commit activity for the velocity heatmap."""

    date: str
    commits: int
    additions: int
    deletions: int
    intensity: float  # 0-10 scale


def parse_commit_date(value: str) -> datetime:
    """Parse an ISO-8601 timestamp into an aware UTC datetime."""
    parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def commit_day(commit: CommitStats) -> date:
    return parse_commit_date(commit.date).date()


def calculate_days_active(commits: list[CommitStats]) -> int:
    """Count distinct UTC calendar days with at least one commit."""
    return len({commit_day(commit) for commit in commits})


def calculate_complexity_factor(
    total_additions: int, total_deletions: int, commits: int
) -> float:
    """
    Log-scaled weight for the average change size per commit.

    Roughly 0.6 for ~40-line commits, 1.0 for ~500 lines and 1.4 for
    ~6000 lines. Clamped to [0.1, 2.0].
    """
    lines_changed = total_additions + total_deletions
    avg_changes_per_commit = lines_changed / commits if commits > 0 else 0
    base_factor = math.log10(avg_changes_per_commit + 1) / 2.7
    return min(2.0, max(0.1, base_factor))


def normalize_velocity(
    commits: int, complexity_factor: float, days_active: int
) -> float:
    """Map raw velocity onto the 0-10 scale (2 commits/day at factor 1.0 -> 4)."""
    if days_active <= 0:
        return 0.0
    raw_velocity = (commits * complexity_factor) / days_active
    return min(10.0, raw_velocity * 2)


def _band(score: float, bands: list) -> tuple:
    for band in bands:
        if score >= band[0]:
            return band
    return bands[-1]


def get_velocity_label(score: float) -> str:
    return _band(score, VELOCITY_BANDS)[1]


def get_velocity_emoji(score: float) -> str:
    return _band(score, VELOCITY_BANDS)[2]


def get_velocity_ai_context(score: float) -> str:
    return _band(score, VELOCITY_AI_CONTEXT)[1]


def _commits_per_active_day(commits: list[CommitStats]) -> float:
    days = calculate_days_active(commits)
    return len(commits) / days if days > 0 else 0.0


def calculate_trend(commits: list[CommitStats]) -> str:
    """Compare commit density of the second half of the list to the first."""
    midpoint = len(commits) // 2
    first_rate = _commits_per_active_day(commits[:midpoint])
    second_rate = _commits_per_active_day(commits[midpoint:])

    if second_rate > first_rate * 1.2:
        return "increasing"
    if second_rate < first_rate * 0.8:
        return "decreasing"
    return "stable"


def calculate_velocity_score(commits: list[CommitStats]) -> VelocityMetrics:
    """
    Calculate the velocity score (0-10) for commits in the window.

    Args:
        commits: Commits in the trailing window, newest first as returned by
            the GitHub API.

    Returns:
        VelocityMetrics with score, label, trend and raw data.
    """
    real_commits = [c for c in commits if not c.is_likely_boilerplate]

    total_commits = len(real_commits)
    total_additions = sum(c.additions for c in real_commits)
    total_deletions = sum(c.deletions for c in real_commits)
    days_active = calculate_days_active(real_commits)
    avg_commits_per_day = total_commits / days_active if days_active > 0 else 0.0

    complexity_factor = calculate_complexity_factor(
        total_additions, total_deletions, total_commits
    )
    velocity_score = round_half_up(
        normalize_velocity(total_commits, complexity_factor, days_active), 1
    )

    return VelocityMetrics(
        score=velocity_score,
        label=get_velocity_label(velocity_score),
        trend=calculate_trend(commits),
        raw_data=VelocityRawData(
            commits_30d=total_commits,
            avg_commits_per_day=round_half_up(avg_commits_per_day, 1),
            total_additions=total_additions,
            total_deletions=total_deletions,
            net_lines_changed=total_additions + total_deletions,
            days_active=days_active,
            complexity_factor=round_half_up(complexity_factor, 2),
        ),
    )


def generate_heatmap_data(
    commits: list[CommitStats], days: int = 30, now: datetime | None = None
) -> list[HeatmapDay]:
    """
    Build per-day activity for the last ``days`` days, oldest first.

    Intensity is log-scaled so a single huge commit does not flatten the
    rest of the map.
    """
    today = (now or datetime.now(timezone.utc)).astimezone(timezone.utc).date()

    by_day: dict[date, list[CommitStats]] = {}
    for commit in commits:
        by_day.setdefault(commit_day(commit), []).append(commit)

    heatmap = []
    for offset in range(days - 1, -1, -1):
        day = today - timedelta(days=offset)
        day_commits = by_day.get(day, [])
        additions = sum(c.additions for c in day_commits)
        deletions = sum(c.deletions for c in day_commits)
        total_changes = additions + deletions
        intensity = (
            min(10.0, math.log10(total_changes + 1) * 2.5) if total_changes > 0 else 0.0
        )
        heatmap.append(
            HeatmapDay(
                date=day.isoformat(),
                commits=len(day_commits),
                additions=additions,
                deletions=deletions,
                intensity=round_half_up(intensity, 1),
            )
        )
    return heatmap
