"""
Tests for the dimension registry.
"""

from aura_pulse.metrics import analyze_dimensions, get_dimension_specs
from aura_pulse.metrics.base import (
    CommitStats,
    RepositorySnapshot,
    round_half_up,
    to_serializable,
)


def test_dimension_specs_order_and_budget():
    """Five dimensions in breakdown order, summing to a 10 point scale."""
    specs = get_dimension_specs()
    assert [spec.key for spec in specs] == [
        "tooling",
        "infrastructure",
        "testing",
        "refactoring",
        "documentation",
    ]
    assert sum(spec.max_score for spec in specs) == 10.0


def test_analyze_dimensions_on_empty_snapshot():
    """An empty snapshot degrades to the nothing-detected state."""
    results = analyze_dimensions(RepositorySnapshot(owner="o", name="r"))
    assert set(results) == {
        "tooling",
        "infrastructure",
        "testing",
        "refactoring",
        "documentation",
    }
    for spec in get_dimension_specs():
        assert 0 <= results[spec.key].score <= spec.max_score
    assert results["infrastructure"].score == 0
    # An empty commit window is classified as balanced
    assert results["refactoring"].score == 1.0


def test_round_half_up():
    assert round_half_up(6.25, 1) == 6.3
    assert round_half_up(0.5) == 1
    assert round_half_up(1.25, 1) == 1.3
    assert round_half_up(2.0, 1) == 2.0


def test_to_serializable_converts_nested_records():
    commit = CommitStats(sha="a", date="2024-01-01T00:00:00Z", additions=1)
    data = to_serializable({"commits": [commit], "pair": (1, 2)})
    assert data == {
        "commits": [
            {
                "sha": "a",
                "date": "2024-01-01T00:00:00Z",
                "message": "",
                "additions": 1,
                "deletions": 0,
            }
        ],
        "pair": [1, 2],
    }


def test_commit_boilerplate_detection():
    """Housekeeping commits are flagged; regular work is not."""

    def commit(message, additions=10, deletions=5):
        return CommitStats(
            sha="s",
            date="2024-01-01T00:00:00Z",
            message=message,
            additions=additions,
            deletions=deletions,
        )

    assert commit("Merge pull request #12 from fork/main").is_likely_boilerplate
    assert commit("Bump package-lock").is_likely_boilerplate
    assert commit("wip", additions=6000, deletions=0).is_likely_boilerplate
    assert commit("remove old module", additions=2, deletions=400).is_likely_boilerplate
    assert not commit("Add retry logic to the fetch layer").is_likely_boilerplate
    assert commit("x", additions=3, deletions=4).total_changes == 7
