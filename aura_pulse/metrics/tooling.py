"""Tooling intent dimension."""

from typing import NamedTuple

from aura_pulse.metrics.base import DimensionSpec, RepositorySnapshot, TreeEntry

MAX_SCORE = 2.0

PRETTIER_FILES = {".prettierrc", ".prettierrc.json", ".prettierrc.js"}
ESLINT_FILES = {
    ".eslintrc",
    ".eslintrc.json",
    ".eslintrc.js",
    "eslint.config.mjs",
    "eslint.config.js",
}
TYPESCRIPT_FILES = {"tsconfig.json", "tsconfig.build.json"}
RUFF_FILES = {"ruff.toml", "pyproject.toml"}
BLACK_FILES = {".black", "pyproject.toml"}
PYLINT_FILES = {".pylintrc", "pylintrc"}

# Substrings that mark a path as a tooling config file
CONFIG_PATH_MARKERS = [
    "prettier",
    "eslint",
    "ruff.toml",
    ".editorconfig",
    ".black",
    "pylint",
]


class ToolingIntent(NamedTuple):
    """Linting, formatting and type-checking configuration facts."""

    has_prettier: bool
    has_eslint: bool
    has_typescript_config: bool
    has_ruff: bool
    has_black: bool
    has_pylint: bool
    has_editorconfig: bool
    config_files_found: list[str]
    score: float  # 0-2 points


def find_config_files(tree: list[TreeEntry]) -> list[str]:
    """Return the as-written paths of blobs that look like tooling config."""
    found = []
    for entry in tree:
        if entry.type != "blob":
            continue
        path = entry.path.lower()
        if path == "tsconfig.json" or any(m in path for m in CONFIG_PATH_MARKERS):
            found.append(entry.path)
    return found


def score_tooling(
    has_prettier: bool,
    has_eslint: bool,
    has_typescript_config: bool,
    has_ruff: bool,
    has_black: bool,
    has_pylint: bool,
    has_editorconfig: bool,
) -> float:
    """
    Allocate tooling points.

    Scoring (2 points max):
    - Formatter (Prettier or Black): +0.5
    - Linter (ESLint, Pylint or Ruff): +0.75
    - TypeScript config: +0.5
    - EditorConfig: +0.25
    """
    score = 0.0
    if has_prettier or has_black:
        score += 0.5
    if has_eslint or has_pylint or has_ruff:
        score += 0.75
    if has_typescript_config:
        score += 0.5
    if has_editorconfig:
        score += 0.25
    return min(MAX_SCORE, score)


def analyze_tooling_intent(tree: list[TreeEntry]) -> ToolingIntent:
    """
    Detect tooling configuration files in a repository tree.

    Matching is case-insensitive against full blob paths, so only
    root-level config files count for the boolean flags.
    """
    paths = {entry.path.lower() for entry in tree if entry.type == "blob"}

    has_prettier = bool(paths & PRETTIER_FILES) or any(
        "prettier.config" in path for path in paths
    )
    has_eslint = bool(paths & ESLINT_FILES)
    has_typescript_config = bool(paths & TYPESCRIPT_FILES)
    has_ruff = bool(paths & RUFF_FILES)
    has_black = bool(paths & BLACK_FILES)
    has_pylint = bool(paths & PYLINT_FILES)
    has_editorconfig = ".editorconfig" in paths

    return ToolingIntent(
        has_prettier=has_prettier,
        has_eslint=has_eslint,
        has_typescript_config=has_typescript_config,
        has_ruff=has_ruff,
        has_black=has_black,
        has_pylint=has_pylint,
        has_editorconfig=has_editorconfig,
        config_files_found=find_config_files(tree),
        score=score_tooling(
            has_prettier,
            has_eslint,
            has_typescript_config,
            has_ruff,
            has_black,
            has_pylint,
            has_editorconfig,
        ),
    )


def _analyze(snapshot: RepositorySnapshot) -> ToolingIntent:
    return analyze_tooling_intent(snapshot.tree)


DIMENSION = DimensionSpec(
    name="Tooling Intent",
    key="tooling",
    max_score=MAX_SCORE,
    analyzer=_analyze,
)
