"""
Command-line interface for Aura Pulse.
"""

import asyncio
import json
from pathlib import Path
from typing import Any

import httpx
import typer
from rich.console import Console
from rich.table import Table

from aura_pulse.cache import (
    CACHE_KINDS,
    clear_cache,
    clear_expired_cache,
    get_cache_stats,
)
from aura_pulse.config import (
    set_cache_dir,
    set_cache_ttl,
    set_verify_ssl,
    set_window_days,
)
from aura_pulse.core import analyze_impact, analyze_repository
from aura_pulse.http_client import close_http_client
from aura_pulse.vcs import RateLimitError

# --- Typer App ---
app = typer.Typer(help="Velocity, engineering rigor and impact for GitHub repos.")
console = Console()

ANALYSIS_ERRORS = (ValueError, httpx.HTTPError, RateLimitError)

# --- Shared Options ---

JSON_OPTION = typer.Option(False, "--json", help="Print raw JSON instead of tables.")
NO_CACHE_OPTION = typer.Option(
    False, "--no-cache", help="Disable cache and fetch fresh data."
)
INSECURE_OPTION = typer.Option(
    False,
    "--insecure",
    help="Disable SSL certificate verification for HTTPS requests.",
)
CACHE_DIR_OPTION = typer.Option(
    None,
    "--cache-dir",
    help="Cache directory path (default: ~/.cache/aura-pulse).",
)
CACHE_TTL_OPTION = typer.Option(
    None,
    "--cache-ttl",
    help="Cache TTL in seconds (default: 86400 = 24 hours).",
)

# --- Helper Functions ---


def _apply_options(
    insecure: bool, cache_dir: Path | None, cache_ttl: int | None
) -> None:
    if cache_dir:
        set_cache_dir(cache_dir)
    if cache_ttl:
        set_cache_ttl(cache_ttl)
    set_verify_ssl(not insecure)


async def _run_and_close(coro):
    try:
        return await coro
    finally:
        await close_http_client()


def _run(coro) -> dict[str, Any]:
    """Run an analysis coroutine, exiting with code 1 on analysis errors."""
    try:
        return asyncio.run(_run_and_close(coro))
    except ANALYSIS_ERRORS as e:
        if isinstance(e, RateLimitError):
            console.print(f"[red]{e}[/red]")
        raise typer.Exit(code=1) from None


def _print_json(data: Any) -> None:
    console.print_json(json.dumps(data, ensure_ascii=False))


def _score_color(score: float, max_score: float) -> str:
    ratio = score / max_score if max_score else 0
    if ratio >= 0.7:
        return "green"
    if ratio >= 0.4:
        return "yellow"
    return "red"


def display_rigor(result: dict[str, Any]) -> None:
    """Display the rigor breakdown in a rich table."""
    rigor = result["rigor"]
    breakdown = rigor["breakdown"]

    console.print(
        f"\n📦 [bold cyan]{result['repository']}[/bold cyan]  "
        f"Rigor [bold]{rigor['overall_score']}/10[/bold] "
        f"(grade [magenta]{rigor['grade']}[/magenta]) "
        f"{rigor['category']} · {rigor['badge']}"
    )

    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("Dimension", style="cyan", no_wrap=True)
    table.add_column("Score", justify="center")
    table.add_column("Max", justify="center", style="magenta")
    table.add_column("Details", justify="left")

    rows = [
        (
            "Tooling Intent",
            "tooling",
            2.0,
            ", ".join(breakdown["tooling"]["config_files_found"]) or "No config files",
        ),
        (
            "CI/CD Infrastructure",
            "infrastructure",
            3.0,
            f"{breakdown['infrastructure']['workflow_complexity']} "
            f"({len(breakdown['infrastructure']['workflow_files'])} workflows)",
        ),
        (
            "Testing Ratio",
            "testing",
            2.5,
            f"{breakdown['testing']['test_file_count']} test / "
            f"{breakdown['testing']['source_file_count']} source files",
        ),
        (
            "Refactor Signal",
            "refactoring",
            1.5,
            breakdown["refactoring"]["category"],
        ),
        (
            "Documentation Depth",
            "documentation",
            1.0,
            f"{breakdown['documentation']['section_count']} README sections",
        ),
    ]
    for name, key, max_score, details in rows:
        score = breakdown[key]["score"]
        color = _score_color(score, max_score)
        table.add_row(name, f"[{color}]{score}[/{color}]", str(max_score), details)

    console.print(table)

    if rigor["key_signals"]:
        console.print("Key signals: " + " • ".join(rigor["key_signals"]))
    for improvement in rigor["improvements"]:
        console.print(f"  [yellow]→[/yellow] {improvement}")
    console.print(f"[dim]{rigor['ai_context']}[/dim]")


def display_pulse(result: dict[str, Any]) -> None:
    """Display the Dual Pulse view with sprint and lifecycle lines."""
    pulse = result["dual_pulse"]

    table = Table(
        title=f"Dual Pulse: {result['repository']}",
        show_header=True,
        header_style="bold magenta",
    )
    table.add_column("Pulse", style="cyan", no_wrap=True)
    table.add_column("Score", justify="center")
    table.add_column("Label", justify="left")
    table.add_column("Key Signal", justify="left")
    table.add_column("Context", justify="left")

    for name, summary in (
        ("Velocity", pulse["velocity"]),
        ("Engineering Rigor", pulse["engineering_rigor"]),
    ):
        color = _score_color(summary["score"], 10)
        table.add_row(
            name,
            f"[{color}]{summary['score']}/10[/{color}]",
            f"{summary['badge']} {summary['label']}",
            summary["key_signal"],
            summary["ai_context"],
        )
    console.print(table)

    velocity = result["velocity"]
    console.print(
        f"Trend: {velocity['trend']} · "
        f"{velocity['raw_data']['commits_30d']} commits over "
        f"{velocity['raw_data']['days_active']} active days"
    )

    sprint = result.get("sprint")
    if sprint:
        console.print(
            f"Sprint signature: [bold]{sprint['label']}[/bold] "
            f"({sprint['commits']} commits in {sprint['duration_days']} days, "
            f"velocity {sprint['velocity_score']})"
        )
    else:
        console.print("[dim]No sprint signature detected.[/dim]")

    lifecycle = result["lifecycle"]
    console.print(
        f"Lifecycle: {lifecycle['emoji']} [bold]{lifecycle['status']}[/bold] "
        f"- {lifecycle['reasoning']}"
    )


def display_impact(result: dict[str, Any]) -> None:
    metrics = result["metrics"]
    if not metrics:
        console.print(f"No measurable impact found for {result['repository']}.")
        return

    table = Table(
        title=f"Impact: {result['repository']}",
        show_header=True,
        header_style="bold magenta",
    )
    table.add_column("", no_wrap=True)
    table.add_column("Metric", style="cyan")
    table.add_column("Value", justify="right")
    table.add_column("Trend", justify="center")
    table.add_column("Description", justify="left")

    for metric in metrics:
        trend = "[green]↑[/green]" if metric["trend"] == "up" else "→"
        table.add_row(
            metric["icon"],
            metric["title"],
            str(metric["value"]),
            trend,
            metric["description"],
        )
    console.print(table)


def display_heatmap(result: dict[str, Any]) -> None:
    table = Table(
        title=f"Commit heatmap: {result['repository']}",
        show_header=True,
        header_style="bold magenta",
    )
    table.add_column("Date", style="cyan", no_wrap=True)
    table.add_column("Commits", justify="right")
    table.add_column("+/-", justify="right")
    table.add_column("Intensity", justify="left")

    for day in result["heatmap"]:
        bar = "█" * int(day["intensity"])
        table.add_row(
            day["date"],
            str(day["commits"]),
            f"[green]+{day['additions']}[/green] [red]-{day['deletions']}[/red]",
            f"[green]{bar}[/green] {day['intensity']}",
        )
    console.print(table)


# --- Commands ---


@app.command()
def rigor(
    repository: str = typer.Argument(..., help="Repository as owner/repo or URL."),
    output_json: bool = JSON_OPTION,
    no_cache: bool = NO_CACHE_OPTION,
    insecure: bool = INSECURE_OPTION,
    cache_dir: Path | None = CACHE_DIR_OPTION,
    cache_ttl: int | None = CACHE_TTL_OPTION,
):
    """Score the engineering rigor of a repository."""
    _apply_options(insecure, cache_dir, cache_ttl)
    result = _run(analyze_repository(repository, use_cache=not no_cache))

    if output_json:
        _print_json({"repository": result["repository"], "rigor": result["rigor"]})
    else:
        display_rigor(result)


@app.command()
def pulse(
    repository: str = typer.Argument(..., help="Repository as owner/repo or URL."),
    window_days: int | None = typer.Option(
        None,
        "--window-days",
        help="Trailing commit window in days (default: 30).",
    ),
    ongoing: bool = typer.Option(
        False,
        "--ongoing",
        help="Treat the project as under active development.",
    ),
    output_json: bool = JSON_OPTION,
    no_cache: bool = NO_CACHE_OPTION,
    insecure: bool = INSECURE_OPTION,
    cache_dir: Path | None = CACHE_DIR_OPTION,
    cache_ttl: int | None = CACHE_TTL_OPTION,
):
    """Show the Dual Pulse (velocity and rigor) of a repository."""
    _apply_options(insecure, cache_dir, cache_ttl)
    if window_days:
        set_window_days(window_days)
    result = _run(
        analyze_repository(
            repository, use_cache=not no_cache, user_defined_ongoing=ongoing
        )
    )

    if output_json:
        _print_json(result)
    else:
        display_pulse(result)


@app.command()
def impact(
    repository: str = typer.Argument(..., help="Repository as owner/repo or URL."),
    show_all: bool = typer.Option(
        False, "--all", help="Include metrics whose value is zero."
    ),
    output_json: bool = JSON_OPTION,
    no_cache: bool = NO_CACHE_OPTION,
    insecure: bool = INSECURE_OPTION,
    cache_dir: Path | None = CACHE_DIR_OPTION,
    cache_ttl: int | None = CACHE_TTL_OPTION,
):
    """Measure impact from closed issues, merged PRs, stars and forks."""
    _apply_options(insecure, cache_dir, cache_ttl)
    result = _run(
        analyze_impact(repository, use_cache=not no_cache, include_zero=show_all)
    )

    if output_json:
        _print_json(result)
    else:
        display_impact(result)


@app.command()
def heatmap(
    repository: str = typer.Argument(..., help="Repository as owner/repo or URL."),
    days: int = typer.Option(30, "--days", help="Number of days to show."),
    output_json: bool = JSON_OPTION,
    no_cache: bool = NO_CACHE_OPTION,
    insecure: bool = INSECURE_OPTION,
    cache_dir: Path | None = CACHE_DIR_OPTION,
    cache_ttl: int | None = CACHE_TTL_OPTION,
):
    """Show per-day commit activity."""
    _apply_options(insecure, cache_dir, cache_ttl)
    result = _run(
        analyze_repository(repository, use_cache=not no_cache, window_days=days)
    )

    if output_json:
        _print_json({"repository": result["repository"], "heatmap": result["heatmap"]})
    else:
        display_heatmap(result)


@app.command()
def cache_stats(
    kind: str | None = typer.Argument(
        None,
        help=f"Specific cache kind ({', '.join(CACHE_KINDS)}), or omit for all.",
    ),
    cache_dir: Path | None = CACHE_DIR_OPTION,
):
    """Display cache statistics."""
    if cache_dir:
        set_cache_dir(cache_dir)
    stats = get_cache_stats(kind)

    if not stats["exists"]:
        console.print(
            f"[yellow]Cache directory does not exist: {stats['cache_dir']}[/yellow]"
        )
        return

    console.print("[bold cyan]Cache Statistics[/bold cyan]")
    console.print(f"  Directory: {stats['cache_dir']}")
    console.print(f"  Total entries: {stats['total_entries']}")
    console.print(f"  Valid entries: [green]{stats['valid_entries']}[/green]")
    console.print(f"  Expired entries: [yellow]{stats['expired_entries']}[/yellow]")

    if stats["kinds"]:
        table = Table(show_header=True, header_style="bold magenta")
        table.add_column("Kind", style="cyan")
        table.add_column("Total", justify="right")
        table.add_column("Valid", justify="right", style="green")
        table.add_column("Expired", justify="right", style="yellow")

        for name, kind_stats in stats["kinds"].items():
            table.add_row(
                name,
                str(kind_stats["total"]),
                str(kind_stats["valid"]),
                str(kind_stats["expired"]),
            )

        console.print(table)


@app.command("clear-cache")
def clear_cache_command(
    kind: str | None = typer.Argument(
        None,
        help=f"Specific cache kind ({', '.join(CACHE_KINDS)}), or omit for all.",
    ),
    expired_only: bool = typer.Option(
        False, "--expired-only", help="Remove only expired entries."
    ),
    cache_dir: Path | None = CACHE_DIR_OPTION,
):
    """Clear cached analysis results."""
    if cache_dir:
        set_cache_dir(cache_dir)
    if kind and kind not in CACHE_KINDS:
        console.print(
            f"[yellow]Unknown cache kind: {kind}. "
            f"Choose from: {', '.join(CACHE_KINDS)}[/yellow]"
        )
        raise typer.Exit(code=1)

    if expired_only:
        removed = clear_expired_cache(kind)
        console.print(f"[green]✨ Removed {removed} expired cache entries.[/green]")
    else:
        cleared = clear_cache(kind)
        console.print(f"[green]✨ Cleared {cleared} cache file(s).[/green]")


if __name__ == "__main__":
    app()
