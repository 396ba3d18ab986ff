"""
Tests for the command-line interface.
"""

import json
from datetime import datetime, timezone
from unittest.mock import AsyncMock, patch

import pytest
from typer.testing import CliRunner

from aura_pulse.cache import save_cache
from aura_pulse.cli import app
from aura_pulse.config import (
    get_verify_ssl,
    get_window_days,
    reset_overrides,
    set_cache_dir,
)
from aura_pulse.core import analyze_rigor, analyze_velocity, compute_dual_pulse
from aura_pulse.metrics.base import (
    CommitStats,
    RepositorySnapshot,
    TreeEntry,
    to_serializable,
)
from aura_pulse.sprint import determine_lifecycle_status
from aura_pulse.vcs import RateLimitError
from aura_pulse.velocity import generate_heatmap_data

runner = CliRunner()

NOW = datetime(2024, 3, 10, 12, 0, tzinfo=timezone.utc)


def _pulse_result(sprint=None):
    snapshot = RepositorySnapshot(
        owner="octo",
        name="demo",
        tree=[TreeEntry(".eslintrc.json", "blob"), TreeEntry("tsconfig.json", "blob")],
        commits=[
            CommitStats("a", "2024-03-10T09:00:00Z", "Add api", 40, 9),
            CommitStats("b", "2024-03-09T09:00:00Z", "Add cli", 40, 9),
        ],
        readme="# Demo\n\n## Installation\n",
    )
    rigor = analyze_rigor(snapshot)
    velocity = analyze_velocity(snapshot)
    return to_serializable(
        {
            "repository": "octo/demo",
            "window_days": 30,
            "user_defined_ongoing": False,
            "rigor": rigor,
            "velocity": velocity,
            "dual_pulse": compute_dual_pulse("octo/demo", velocity, rigor, now=NOW),
            "heatmap": generate_heatmap_data(snapshot.commits, days=3, now=NOW),
            "sprint": sprint,
            "lifecycle": determine_lifecycle_status(2, 2, False, 0),
        }
    )


IMPACT_RESULT = {
    "repository": "octo/demo",
    "metrics": [
        {
            "id": "issues-resolved-demo",
            "type": "issues_resolved",
            "title": "Critical Issues Resolved",
            "description": "Fixed 7 critical bugs and security vulnerabilities",
            "value": 7,
            "icon": "🔧",
            "trend": "up",
        }
    ],
}


@pytest.fixture(autouse=True)
def reset_config():
    """Undo settings applied by CLI flags."""
    yield
    reset_overrides()


class TestRigorCommand:
    """Test the rigor command."""

    def test_json_output(self):
        mock_analyze = AsyncMock(return_value=_pulse_result())
        with patch("aura_pulse.cli.analyze_repository", mock_analyze):
            result = runner.invoke(app, ["rigor", "octo/demo", "--json"])

        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["repository"] == "octo/demo"
        assert data["rigor"]["breakdown"]["tooling"]["score"] == 1.25
        mock_analyze.assert_called_once_with("octo/demo", use_cache=True)

    def test_table_output(self):
        with patch(
            "aura_pulse.cli.analyze_repository",
            AsyncMock(return_value=_pulse_result()),
        ):
            result = runner.invoke(app, ["rigor", "octo/demo"])

        assert result.exit_code == 0
        assert "Tooling Intent" in result.output
        assert "Documentation Depth" in result.output
        assert "octo/demo" in result.output

    def test_insecure_flag(self):
        with patch(
            "aura_pulse.cli.analyze_repository",
            AsyncMock(return_value=_pulse_result()),
        ):
            runner.invoke(app, ["rigor", "octo/demo", "--insecure"])

        assert get_verify_ssl() is False

    def test_invalid_repository_exits_with_error(self):
        with patch(
            "aura_pulse.cli.analyze_repository",
            AsyncMock(side_effect=ValueError("Invalid repository URL: nope")),
        ):
            result = runner.invoke(app, ["rigor", "nope"])

        assert result.exit_code == 1

    def test_rate_limit_is_reported(self):
        with patch(
            "aura_pulse.cli.analyze_repository",
            AsyncMock(side_effect=RateLimitError("GitHub API rate limit exceeded")),
        ):
            result = runner.invoke(app, ["rigor", "octo/demo"])

        assert result.exit_code == 1
        assert "rate limit exceeded" in result.output


class TestPulseCommand:
    """Test the pulse command."""

    def test_options_are_forwarded(self):
        mock_analyze = AsyncMock(return_value=_pulse_result())
        with patch("aura_pulse.cli.analyze_repository", mock_analyze):
            result = runner.invoke(
                app,
                ["pulse", "octo/demo", "--window-days", "7", "--ongoing", "--no-cache"],
            )

        assert result.exit_code == 0
        mock_analyze.assert_called_once_with(
            "octo/demo", use_cache=False, user_defined_ongoing=True
        )
        assert get_window_days() == 7

    def test_dual_pulse_display(self):
        with patch(
            "aura_pulse.cli.analyze_repository",
            AsyncMock(return_value=_pulse_result()),
        ):
            result = runner.invoke(app, ["pulse", "octo/demo"])

        assert result.exit_code == 0
        assert "Velocity" in result.output
        assert "No sprint signature detected." in result.output
        assert "Lifecycle:" in result.output

    def test_sprint_line(self):
        sprint = {
            "label": "Fast Sprint",
            "commits": 4,
            "duration_days": 1,
            "velocity_score": 7.4,
        }
        with patch(
            "aura_pulse.cli.analyze_repository",
            AsyncMock(return_value=_pulse_result(sprint=sprint)),
        ):
            result = runner.invoke(app, ["pulse", "octo/demo"])

        assert "Sprint signature: Fast Sprint" in result.output


class TestImpactCommand:
    """Test the impact command."""

    def test_all_flag(self):
        mock_analyze = AsyncMock(return_value=IMPACT_RESULT)
        with patch("aura_pulse.cli.analyze_impact", mock_analyze):
            result = runner.invoke(app, ["impact", "octo/demo", "--all"])

        assert result.exit_code == 0
        assert "Critical Issues Resolved" in result.output
        mock_analyze.assert_called_once_with(
            "octo/demo", use_cache=True, include_zero=True
        )

    def test_json_output(self):
        with patch(
            "aura_pulse.cli.analyze_impact", AsyncMock(return_value=IMPACT_RESULT)
        ):
            result = runner.invoke(app, ["impact", "octo/demo", "--json"])

        assert json.loads(result.stdout) == IMPACT_RESULT

    def test_no_impact(self):
        empty = {"repository": "octo/demo", "metrics": []}
        with patch("aura_pulse.cli.analyze_impact", AsyncMock(return_value=empty)):
            result = runner.invoke(app, ["impact", "octo/demo"])

        assert "No measurable impact found for octo/demo." in result.output


class TestHeatmapCommand:
    """Test the heatmap command."""

    def test_days_become_the_window(self):
        mock_analyze = AsyncMock(return_value=_pulse_result())
        with patch("aura_pulse.cli.analyze_repository", mock_analyze):
            result = runner.invoke(app, ["heatmap", "octo/demo", "--days", "3"])

        assert result.exit_code == 0
        mock_analyze.assert_called_once_with("octo/demo", use_cache=True, window_days=3)
        assert "2024-03-10" in result.output

    def test_json_output(self):
        with patch(
            "aura_pulse.cli.analyze_repository",
            AsyncMock(return_value=_pulse_result()),
        ):
            result = runner.invoke(app, ["heatmap", "octo/demo", "--json"])

        data = json.loads(result.stdout)
        assert [day["date"] for day in data["heatmap"]] == [
            "2024-03-08",
            "2024-03-09",
            "2024-03-10",
        ]


class TestCacheCommands:
    """Test cache-stats and clear-cache."""

    def test_stats_for_missing_directory(self, tmp_path):
        missing = tmp_path / "missing"
        result = runner.invoke(app, ["cache-stats", "--cache-dir", str(missing)])

        assert result.exit_code == 0
        assert "Cache directory does not exist" in result.output

    def test_stats_table(self, tmp_path):
        set_cache_dir(tmp_path)
        save_cache("pulse", {"octo/demo": {"repository": "octo/demo"}})

        result = runner.invoke(app, ["cache-stats", "--cache-dir", str(tmp_path)])

        assert result.exit_code == 0
        assert "Total entries: 1" in result.output
        assert "pulse" in result.output

    def test_clear_cache(self, tmp_path):
        set_cache_dir(tmp_path)
        save_cache("pulse", {"octo/demo": {}})

        result = runner.invoke(app, ["clear-cache", "--cache-dir", str(tmp_path)])

        assert result.exit_code == 0
        assert "Cleared 1 cache file(s)." in result.output
        assert not (tmp_path / "pulse.json.gz").exists()

    def test_clear_expired_only(self, tmp_path):
        set_cache_dir(tmp_path)
        save_cache("impact", {"octo/demo": {}})

        result = runner.invoke(
            app,
            ["clear-cache", "impact", "--expired-only", "--cache-dir", str(tmp_path)],
        )

        assert result.exit_code == 0
        assert "Removed 0 expired cache entries." in result.output
        assert (tmp_path / "impact.json.gz").exists()

    def test_unknown_kind(self, tmp_path):
        result = runner.invoke(
            app, ["clear-cache", "rigor", "--cache-dir", str(tmp_path)]
        )

        assert result.exit_code == 1
        assert "Unknown cache kind: rigor" in result.output
