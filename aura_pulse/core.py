"""
Core analysis logic for Aura Pulse.

The aggregator and Dual Pulse composition are pure. ``analyze_repository``
and ``analyze_impact`` fetch through a provider, score and cache.
"""

from datetime import datetime, timedelta, timezone
from typing import Any, NamedTuple

import httpx
from rich.console import Console

from aura_pulse.cache import get_cached_entry, save_cache
from aura_pulse.config import get_window_days, is_cache_enabled
from aura_pulse.impact import (
    ImpactMetric,
    calculate_impacts,
    filter_non_zero_metrics,
)
from aura_pulse.metrics import analyze_dimensions
from aura_pulse.metrics.base import (
    CommitStats,
    RepositorySnapshot,
    round_half_up,
    to_serializable,
)
from aura_pulse.metrics.documentation import DocumentationDepth
from aura_pulse.metrics.infrastructure import StabilityInfrastructure
from aura_pulse.metrics.refactoring import FEATURE_BLOAT, TECH_DEBT, RefactorSignal
from aura_pulse.metrics.testing import TestingRatio
from aura_pulse.metrics.tooling import ToolingIntent
from aura_pulse.repository import parse_repository_url
from aura_pulse.sprint import (
    count_commits_since,
    days_since_last_commit,
    detect_sprint_window,
    determine_lifecycle_status,
)
from aura_pulse.velocity import (
    VelocityMetrics,
    calculate_velocity_score,
    generate_heatmap_data,
    get_velocity_ai_context,
    get_velocity_emoji,
    parse_commit_date,
)
from aura_pulse.vcs.base import RateLimitError

# Progress goes to stderr; stdout carries results
console = Console(stderr=True)

# --- Constants ---

# Grade bands (inclusive lower bounds), highest first
GRADE_BANDS = [
    (9.5, "A+"),
    (8.5, "A"),
    (7.5, "B+"),
    (6.5, "B"),
    (5.5, "C+"),
    (4.5, "C"),
    (3.5, "D"),
]

# (minimum score, category, badge), highest first
CATEGORY_BANDS = [
    (8.5, "Production Ready", "Clean Architect"),
    (7.0, "Professional", "Quality Focused"),
    (5.0, "Growing", "Active Builder"),
    (3.0, "Hobby Project", "Learning"),
]
FALLBACK_CATEGORY = ("Early Stage", "Quick Prototype")

MAX_KEY_SIGNALS = 3
NO_SIGNALS = "No signals detected"

REFACTOR_SUFFIXES = {
    TECH_DEBT: " Active technical debt management.",
    FEATURE_BLOAT: " High code growth without proportional refactoring.",
}

# Sprint detection and lifecycle look back over a year of history
HISTORY_DAYS = 365
# Rigor dimensions read at most this many of the most recent window commits
RIGOR_COMMIT_LIMIT = 100


# --- Data Structures ---


class RigorBreakdown(NamedTuple):
    """The five scored rigor dimensions."""

    tooling: ToolingIntent
    infrastructure: StabilityInfrastructure
    testing: TestingRatio
    refactoring: RefactorSignal
    documentation: DocumentationDepth


class EngineeringRigorMetrics(NamedTuple):
    """Aggregated engineering rigor of a repository."""

    overall_score: float  # 0-10, one decimal
    grade: str  # A+, A, B+, B, C+, C, D, F
    category: str
    badge: str
    breakdown: RigorBreakdown
    key_signals: list[str]  # At most 3
    improvements: list[str]
    ai_context: str


class PulseSummary(NamedTuple):
    """One side of the Dual Pulse card."""

    score: float
    label: str
    badge: str
    key_signal: str
    ai_context: str


class DualPulseMetrics(NamedTuple):
    """Velocity and engineering rigor side by side."""

    repository_url: str
    velocity: PulseSummary
    engineering_rigor: PulseSummary
    last_updated: str  # ISO-8601 UTC


# --- Aggregation ---


def get_grade(overall_score: float) -> str:
    for minimum, grade in GRADE_BANDS:
        if overall_score >= minimum:
            return grade
    return "F"


def get_category_and_badge(overall_score: float) -> tuple[str, str]:
    for minimum, category, badge in CATEGORY_BANDS:
        if overall_score >= minimum:
            return category, badge
    return FALLBACK_CATEGORY


def build_key_signals(
    tooling: ToolingIntent,
    infrastructure: StabilityInfrastructure,
    testing: TestingRatio,
    refactoring: RefactorSignal,
    documentation: DocumentationDepth,
) -> list[str]:
    """
    Collect the top highlights in priority order, at most three.

    Fallback signals only fill slots left open by the primary ones.
    """
    signals = []

    if testing.testing_ratio >= 0.5:
        coverage = int(round_half_up(testing.testing_ratio * 100))
        signals.append(f"{coverage}% Test Coverage")
    if infrastructure.workflow_complexity == "advanced":
        signals.append("CI/CD Verified")
    elif infrastructure.has_ci_cd:
        signals.append(f"CI/CD: {infrastructure.workflow_complexity}")
    if refactoring.category == TECH_DEBT:
        signals.append("Active Refactoring")
    if len(tooling.config_files_found) >= 3:
        signals.append(f"{len(tooling.config_files_found)} Config Files")
    if documentation.section_count >= 4:
        signals.append("Comprehensive Docs")

    if len(signals) < MAX_KEY_SIGNALS and testing.test_file_count > 0:
        signals.append(f"{testing.test_file_count} Test Files")
    if len(signals) < MAX_KEY_SIGNALS and infrastructure.has_ci_cd:
        signals.append("Has CI/CD")
    if len(signals) < MAX_KEY_SIGNALS and tooling.has_typescript_config:
        signals.append("TypeScript")

    return signals[:MAX_KEY_SIGNALS]


def build_improvements(
    tooling: ToolingIntent,
    infrastructure: StabilityInfrastructure,
    testing: TestingRatio,
    refactoring: RefactorSignal,
    documentation: DocumentationDepth,
) -> list[str]:
    improvements = []
    if testing.testing_ratio < 0.3:
        improvements.append("Add more unit tests to increase coverage")
    if not infrastructure.has_ci_cd:
        improvements.append("Set up CI/CD pipeline (GitHub Actions)")
    if len(tooling.config_files_found) < 2:
        improvements.append("Add linting and formatting configuration")
    if documentation.section_count < 3:
        improvements.append("Add Setup, Architecture, and API sections to README")
    if refactoring.category == FEATURE_BLOAT:
        improvements.append("Consider refactoring to reduce codebase complexity")
    return improvements


def build_ai_context(
    category: str, grade: str, key_signals: list[str], refactor_category: str
) -> str:
    """One-line summary: category, grade, first two signals, refactor note."""
    suffix = REFACTOR_SUFFIXES.get(refactor_category, "")
    signals_text = ", ".join(signal for signal in key_signals[:2] if signal)
    if signals_text:
        return f"{category} project with {grade} grade. {signals_text}.{suffix}"
    return f"{category} project with {grade} grade.{suffix}"


def calculate_engineering_rigor(
    tooling: ToolingIntent,
    infrastructure: StabilityInfrastructure,
    testing: TestingRatio,
    refactoring: RefactorSignal,
    documentation: DocumentationDepth,
) -> EngineeringRigorMetrics:
    """
    Combine the five dimension records into the overall rigor metrics.

    The overall score is the sum of the dimension scores rounded to one
    decimal; grade, category and badge are read off that rounded score.
    """
    overall_score = round_half_up(
        tooling.score
        + infrastructure.score
        + testing.score
        + refactoring.score
        + documentation.score,
        1,
    )
    grade = get_grade(overall_score)
    category, badge = get_category_and_badge(overall_score)

    dimensions = (tooling, infrastructure, testing, refactoring, documentation)
    key_signals = build_key_signals(*dimensions)

    return EngineeringRigorMetrics(
        overall_score=overall_score,
        grade=grade,
        category=category,
        badge=badge,
        breakdown=RigorBreakdown(*dimensions),
        key_signals=key_signals,
        improvements=build_improvements(*dimensions),
        ai_context=build_ai_context(
            category, grade, key_signals, refactoring.category
        ),
    )


def analyze_rigor(snapshot: RepositorySnapshot) -> EngineeringRigorMetrics:
    """Score all rigor dimensions of a snapshot and aggregate them."""
    return calculate_engineering_rigor(**analyze_dimensions(snapshot))


def analyze_velocity(snapshot: RepositorySnapshot) -> VelocityMetrics:
    return calculate_velocity_score(snapshot.commits)


def compute_dual_pulse(
    repository_url: str,
    velocity: VelocityMetrics,
    rigor: EngineeringRigorMetrics,
    now: datetime | None = None,
) -> DualPulseMetrics:
    """Pair velocity and rigor into the presentation-ready Dual Pulse."""
    last_updated = (now or datetime.now(timezone.utc)).isoformat()

    return DualPulseMetrics(
        repository_url=repository_url,
        velocity=PulseSummary(
            score=velocity.score,
            label=velocity.label,
            badge=get_velocity_emoji(velocity.score),
            key_signal=f"{velocity.raw_data.avg_commits_per_day} Commits/Day",
            ai_context=get_velocity_ai_context(velocity.score),
        ),
        engineering_rigor=PulseSummary(
            score=rigor.overall_score,
            label=rigor.category,
            badge=rigor.badge,
            key_signal=rigor.key_signals[0] if rigor.key_signals else NO_SIGNALS,
            ai_context=rigor.ai_context,
        ),
        last_updated=last_updated,
    )


# --- End-to-end analysis ---


def _commits_within(
    commits: list[CommitStats], days: int, now: datetime
) -> list[CommitStats]:
    cutoff = now - timedelta(days=days)
    return [c for c in commits if parse_commit_date(c.date) >= cutoff]


def _most_recent(commits: list[CommitStats], limit: int) -> list[CommitStats]:
    ordered = sorted(commits, key=lambda c: parse_commit_date(c.date), reverse=True)
    return ordered[:limit]


def _get_provider(provider):
    if provider is not None:
        return provider
    from aura_pulse.vcs import get_vcs_provider

    return get_vcs_provider("github")


def _load_cached(kind: str, key: str, use_cache: bool) -> dict[str, Any] | None:
    if not (use_cache and is_cache_enabled()):
        return None
    entry = get_cached_entry(kind, key)
    if entry is not None:
        console.print(f"[dim]Using cached {kind} analysis for {key}[/dim]")
    return entry


def _store_cached(
    kind: str, key: str, result: dict[str, Any], use_cache: bool
) -> None:
    if use_cache and is_cache_enabled():
        save_cache(kind, {key: dict(result)})


async def analyze_repository(
    repository_url: str,
    provider=None,
    use_cache: bool = True,
    window_days: int | None = None,
    user_defined_ongoing: bool = False,
    now: datetime | None = None,
) -> dict[str, Any]:
    """
    Performs a full rigor and velocity analysis of a GitHub repository.

    Commits from the last year feed sprint detection and the lifecycle
    status; velocity and refactoring only see the trailing window.

    Args:
        repository_url: "owner/repo" or a github.com URL.
        provider: Provider instance (defaults to the GitHub provider).
        use_cache: Read and write the local result cache.
        window_days: Trailing commit window (defaults to configuration).
        user_defined_ongoing: The developer marked the project as ongoing.
        now: Reference time for windows and timestamps.

    Returns:
        Serializable dict with keys rigor, velocity, dual_pulse, heatmap,
        sprint and lifecycle.

    Raises:
        ValueError: If the URL is invalid or the repository does not exist.
        httpx.HTTPStatusError: If GitHub API returns an error.
        RateLimitError: If the GitHub API rate limit is exhausted.
    """
    try:
        reference = parse_repository_url(repository_url)
        key = reference.full_name

        window_days = window_days or get_window_days()

        cached = _load_cached("pulse", key, use_cache)
        # Results computed with other options do not count as hits
        if (
            cached is not None
            and cached.get("window_days") == window_days
            and cached.get("user_defined_ongoing") == user_defined_ongoing
        ):
            return cached

        console.print(f"Analyzing [bold cyan]{key}[/bold cyan]...")

        provider = _get_provider(provider)
        now = now or datetime.now(timezone.utc)

        history_snapshot = await provider.get_snapshot(
            reference.owner, reference.name, window_days=HISTORY_DAYS, now=now
        )
        history = history_snapshot.commits
        snapshot = history_snapshot._replace(
            commits=_commits_within(history, window_days, now),
            window_days=window_days,
        )

        rigor = analyze_rigor(
            snapshot._replace(
                commits=_most_recent(snapshot.commits, RIGOR_COMMIT_LIMIT)
            )
        )
        velocity = analyze_velocity(snapshot)
        dual_pulse = compute_dual_pulse(key, velocity, rigor, now=now)
        lifecycle = determine_lifecycle_status(
            recent_commits_7d=count_commits_since(history, 7, now=now),
            recent_commits_30d=count_commits_since(history, 30, now=now),
            is_live=False,
            days_since_last=days_since_last_commit(history, now=now),
            user_defined_ongoing=user_defined_ongoing,
        )

        result = to_serializable(
            {
                "repository": key,
                "window_days": window_days,
                "user_defined_ongoing": user_defined_ongoing,
                "rigor": rigor,
                "velocity": velocity,
                "dual_pulse": dual_pulse,
                "heatmap": generate_heatmap_data(
                    snapshot.commits, days=window_days, now=now
                ),
                "sprint": detect_sprint_window(history),
                "lifecycle": lifecycle,
            }
        )
        _store_cached("pulse", key, result, use_cache)
        return result

    except httpx.HTTPStatusError as e:
        console.print(f"[red]HTTP Error: {e}[/red]")
        raise
    except ValueError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise
    except RateLimitError:
        raise
    except Exception as e:
        console.print(f"[red]Unexpected error during analysis: {e}[/red]")
        raise


async def analyze_impact(
    repository_url: str,
    provider=None,
    use_cache: bool = True,
    include_zero: bool = False,
) -> dict[str, Any]:
    """
    Calculate impact metrics from closed issues and merged pull requests.

    Returns:
        Serializable dict with the repository name and its ``metrics``
        (zero-valued metrics dropped unless ``include_zero``).

    Raises:
        ValueError: If the URL is invalid or the repository does not exist.
        httpx.HTTPStatusError: If GitHub API returns an error.
        RateLimitError: If the GitHub API rate limit is exhausted.
    """
    try:
        reference = parse_repository_url(repository_url)
        key = reference.full_name

        cached = _load_cached("impact", key, use_cache)
        if cached is None:
            console.print(f"Measuring impact of [bold cyan]{key}[/bold cyan]...")
            provider = _get_provider(provider)
            repo = await provider.get_repository_info(reference.owner, reference.name)
            issues = await provider.get_issues(reference.owner, reference.name)
            prs = await provider.get_pull_requests(reference.owner, reference.name)

            cached = to_serializable(
                {
                    "repository": key,
                    "metrics": calculate_impacts(repo, issues, prs),
                }
            )
            _store_cached("impact", key, cached, use_cache)

        metrics = [ImpactMetric(**metric) for metric in cached["metrics"]]
        if not include_zero:
            metrics = filter_non_zero_metrics(metrics)
        return {"repository": key, "metrics": to_serializable(metrics)}

    except httpx.HTTPStatusError as e:
        console.print(f"[red]HTTP Error: {e}[/red]")
        raise
    except ValueError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise
    except RateLimitError:
        raise
    except Exception as e:
        console.print(f"[red]Unexpected error during analysis: {e}[/red]")
        raise
