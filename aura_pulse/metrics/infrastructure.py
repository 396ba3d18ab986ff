"""CI/CD stability infrastructure dimension."""

from typing import NamedTuple

from aura_pulse.metrics.base import DimensionSpec, RepositorySnapshot

MAX_SCORE = 3.0

TESTING_MARKERS = ["test", "jest", "pytest", "vitest"]
LINTING_MARKERS = ["lint", "eslint", "ruff", "black"]
DEPLOYMENT_MARKERS = ["deploy", "vercel", "netlify", "aws", "docker"]
SECURITY_MARKERS = ["security", "snyk", "dependabot", "trivy", "semgrep"]
MULTI_STAGE_MARKERS = ["needs:", "depends-on"]
CACHING_MARKERS = ["cache", "actions/cache", "setup-node@"]


class CIFeatures(NamedTuple):
    """Features detected across all workflow files."""

    has_testing: bool
    has_linting: bool
    has_deployment: bool
    has_security_scanning: bool
    has_multi_stage: bool
    has_caching: bool

    @property
    def enabled_count(self) -> int:
        return sum(self)


class StabilityInfrastructure(NamedTuple):
    """CI/CD pipeline facts."""

    has_ci_cd: bool
    workflow_files: list[str]
    workflow_complexity: str  # "none", "basic", "intermediate", "advanced"
    complexity_score: int
    ci_features: CIFeatures
    score: float  # 0-3 points


def _contains_any(content: str, markers: list[str]) -> bool:
    return any(marker in content for marker in markers)


def detect_ci_features(workflow_contents: list[str]) -> CIFeatures:
    """Flag CI features by substring search over the lower-cased workflows."""
    content = "\n".join(workflow_contents).lower()

    return CIFeatures(
        has_testing=_contains_any(content, TESTING_MARKERS),
        has_linting=_contains_any(content, LINTING_MARKERS),
        has_deployment=_contains_any(content, DEPLOYMENT_MARKERS),
        has_security_scanning=_contains_any(content, SECURITY_MARKERS),
        has_multi_stage=_contains_any(content, MULTI_STAGE_MARKERS)
        or content.count("jobs:") > 2,
        has_caching=_contains_any(content, CACHING_MARKERS),
    )


def classify_complexity(has_ci_cd: bool, feature_count: int) -> tuple[str, int]:
    """
    Map the number of CI features to a complexity label and point value.

    Scoring (3 points max):
    - No workflows: none, 0
    - 0-1 features: basic, 1
    - 2-3 features: intermediate, 2
    - 4+ features: advanced, 3
    """
    if not has_ci_cd:
        return "none", 0
    if feature_count <= 1:
        return "basic", 1
    if feature_count <= 3:
        return "intermediate", 2
    return "advanced", 3


def analyze_stability_infrastructure(
    workflow_files: list[str], workflow_contents: list[str]
) -> StabilityInfrastructure:
    """
    Analyze CI/CD workflow complexity.

    Args:
        workflow_files: Names of the files under the workflow directory.
        workflow_contents: Raw text of the workflows that could be fetched.

    Returns:
        StabilityInfrastructure with the detected features and score.
    """
    has_ci_cd = len(workflow_files) > 0
    ci_features = detect_ci_features(workflow_contents)
    complexity, complexity_score = classify_complexity(
        has_ci_cd, ci_features.enabled_count
    )

    return StabilityInfrastructure(
        has_ci_cd=has_ci_cd,
        workflow_files=list(workflow_files),
        workflow_complexity=complexity,
        complexity_score=complexity_score,
        ci_features=ci_features,
        score=min(MAX_SCORE, float(complexity_score)),
    )


def _analyze(snapshot: RepositorySnapshot) -> StabilityInfrastructure:
    return analyze_stability_infrastructure(
        snapshot.workflow_names, snapshot.workflow_contents
    )


DIMENSION = DimensionSpec(
    name="Stability Infrastructure",
    key="infrastructure",
    max_score=MAX_SCORE,
    analyzer=_analyze,
)
