"""
Tests for repository reference parsing.
"""

import pytest

from aura_pulse.repository import RepositoryReference, parse_repository_url


class TestParseRepositoryUrl:
    """Test the parse_repository_url function."""

    def test_owner_slash_name(self):
        assert parse_repository_url("octocat/hello-world") == RepositoryReference(
            "octocat", "hello-world"
        )

    def test_https_url(self):
        ref = parse_repository_url("https://github.com/octocat/hello-world")
        assert ref.full_name == "octocat/hello-world"
        assert ref.url == "https://github.com/octocat/hello-world"

    def test_git_suffix_and_extra_segments(self):
        ref = parse_repository_url("https://github.com/octocat/hello-world.git")
        assert ref.name == "hello-world"
        ref = parse_repository_url("https://github.com/octocat/hello-world/tree/main")
        assert ref.full_name == "octocat/hello-world"

    def test_host_without_scheme(self):
        ref = parse_repository_url("  github.com/octocat/hello-world  ")
        assert ref.full_name == "octocat/hello-world"

    @pytest.mark.parametrize(
        "value", ["", "octocat", "https://github.com/octocat", "https://github.com/"]
    )
    def test_invalid_references(self, value):
        with pytest.raises(ValueError, match="Invalid repository URL"):
            parse_repository_url(value)
