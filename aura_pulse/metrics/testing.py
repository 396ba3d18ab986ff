"""Testing ratio dimension."""

from typing import NamedTuple

from aura_pulse.metrics.base import (
    DimensionSpec,
    RepositorySnapshot,
    TreeEntry,
    round_half_up,
)

MAX_SCORE = 2.5

TEST_MARKERS = ["test", "spec", "__tests__"]
TEST_SUFFIXES = (
    ".test.ts",
    ".test.js",
    ".test.tsx",
    ".test.jsx",
    ".spec.ts",
    ".spec.js",
    "_test.py",
    "_test.go",
)
SOURCE_EXTENSIONS = (".ts", ".tsx", ".js", ".jsx", ".py", ".go", ".java", ".rb", ".rs")
EXCLUDED_SOURCE_MARKERS = [
    "node_modules",
    "dist",
    "build",
    ".next",
    "coverage",
    "vendor",
    "test",
    "spec",
    "__tests__",
]

# Framework name -> path fragments that reveal it
TEST_FRAMEWORKS = {
    "Jest": ["jest", "jest.config"],
    "Vitest": ["vitest", "vitest.config"],
    "pytest": ["pytest", "conftest.py"],
    "Mocha": ["mocha", ".mocharc"],
    "Cypress": ["cypress"],
    "Playwright": ["playwright"],
}

# (minimum ratio, points), checked in order
RATIO_TIERS = [(0.8, 1.5), (0.5, 1.0), (0.3, 0.5), (0.1, 0.25)]


class TestingRatio(NamedTuple):
    """Test-to-source file facts."""

    __test__ = False  # Keep pytest from collecting this record

    test_file_count: int
    source_file_count: int
    test_directories: list[str]
    testing_ratio: float  # test files / source files
    has_test_directory: bool
    test_frameworks_detected: list[str]
    score: float  # 0-2.5 points


def is_test_file(path: str) -> bool:
    path = path.lower()
    return any(marker in path for marker in TEST_MARKERS) or path.endswith(
        TEST_SUFFIXES
    )


def is_source_file(path: str) -> bool:
    path = path.lower()
    if any(marker in path for marker in EXCLUDED_SOURCE_MARKERS):
        return False
    return path.endswith(SOURCE_EXTENSIONS)


def find_test_directories(tree: list[TreeEntry]) -> list[str]:
    """Return distinct directory paths that look like test folders, in order."""
    directories: list[str] = []
    for entry in tree:
        if entry.type != "tree":
            continue
        if any(marker in entry.path for marker in TEST_MARKERS):
            if entry.path not in directories:
                directories.append(entry.path)
    return directories


def detect_test_frameworks(tree: list[TreeEntry]) -> list[str]:
    """Detect test frameworks mentioned anywhere in the tree paths."""
    all_paths = " ".join(entry.path.lower() for entry in tree)
    return [
        framework
        for framework, fragments in TEST_FRAMEWORKS.items()
        if any(fragment in all_paths for fragment in fragments)
    ]


def ratio_points(testing_ratio: float) -> float:
    for minimum, points in RATIO_TIERS:
        if testing_ratio >= minimum:
            return points
    return 0.0


def score_testing(
    has_test_directory: bool, frameworks: list[str], testing_ratio: float
) -> float:
    """
    Allocate testing points.

    Scoring (2.5 points max):
    - Test directory present: +0.5
    - Any test framework detected: +0.5
    - Ratio >= 0.8: +1.5, >= 0.5: +1.0, >= 0.3: +0.5, >= 0.1: +0.25
    """
    score = 0.0
    if has_test_directory:
        score += 0.5
    if frameworks:
        score += 0.5
    score += ratio_points(testing_ratio)
    return min(MAX_SCORE, score)


def analyze_testing_ratio(tree: list[TreeEntry]) -> TestingRatio:
    """
    Classify blobs into test and source files and score the ratio.

    Source files exclude build output, vendored code and anything that
    already looks like a test.
    """
    blobs = [entry.path for entry in tree if entry.type == "blob"]

    test_file_count = sum(1 for path in blobs if is_test_file(path))
    source_file_count = sum(1 for path in blobs if is_source_file(path))
    testing_ratio = (
        test_file_count / source_file_count if source_file_count > 0 else 0.0
    )

    test_directories = find_test_directories(tree)
    has_test_directory = len(test_directories) > 0
    frameworks = detect_test_frameworks(tree)

    return TestingRatio(
        test_file_count=test_file_count,
        source_file_count=source_file_count,
        test_directories=test_directories,
        testing_ratio=round_half_up(testing_ratio, 2),
        has_test_directory=has_test_directory,
        test_frameworks_detected=frameworks,
        score=score_testing(has_test_directory, frameworks, testing_ratio),
    )


def _analyze(snapshot: RepositorySnapshot) -> TestingRatio:
    return analyze_testing_ratio(snapshot.tree)


DIMENSION = DimensionSpec(
    name="Testing Ratio",
    key="testing",
    max_score=MAX_SCORE,
    analyzer=_analyze,
)
