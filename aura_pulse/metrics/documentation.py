"""Documentation depth dimension."""

from typing import NamedTuple

from aura_pulse.metrics.base import (
    DimensionSpec,
    RepositorySnapshot,
    TreeEntry,
    round_half_up,
)

MAX_SCORE = 1.0

SECTION_HEADERS = {
    "setup": ["## setup", "## installation", "## getting started", "## quick start"],
    "architecture": [
        "## architecture",
        "## design",
        "## structure",
        "## technical",
    ],
    "api_reference": ["## api", "## endpoints", "## reference"],
    "contributing": ["## contributing", "## contribution", "## development"],
    "testing": ["## testing", "## tests", "## test"],
    "deployment": ["## deployment", "## deploy", "## production"],
}

NAMED_DOC_FILES = {"contributing.md", "architecture.md", "api.md"}


class DocSections(NamedTuple):
    """Canonical README sections."""

    setup: bool
    architecture: bool
    api_reference: bool
    contributing: bool
    testing: bool
    deployment: bool


class DocumentationDepth(NamedTuple):
    """README and documentation file facts."""

    readme_length: int
    has_readme: bool
    sections_found: DocSections
    section_count: int
    has_other_docs: bool
    doc_files: list[str]
    score: float  # 0-1 point


def detect_sections(readme: str | None) -> DocSections:
    """Search the lower-cased README for the canonical section headers."""
    content = (readme or "").lower()
    return DocSections(
        **{
            section: any(header in content for header in headers)
            for section, headers in SECTION_HEADERS.items()
        }
    )


def find_doc_files(tree: list[TreeEntry]) -> list[str]:
    found = []
    for entry in tree:
        if entry.type != "blob":
            continue
        path = entry.path.lower()
        if "docs/" in path or path in NAMED_DOC_FILES or "changelog" in path:
            found.append(entry.path)
    return found


def score_documentation(
    has_readme: bool, readme_length: int, section_count: int, has_other_docs: bool
) -> float:
    """
    Allocate documentation points.

    Scoring (1 point max):
    - README exists: +0.2
    - README longer than 500 characters: +0.2, longer than 2000: +0.1 more
    - Each canonical section: +0.1
    - Other documentation files: +0.2
    """
    score = 0.0
    if has_readme:
        score += 0.2
    if readme_length > 500:
        score += 0.2
    if readme_length > 2000:
        score += 0.1
    score += section_count * 0.1
    if has_other_docs:
        score += 0.2
    return min(MAX_SCORE, round_half_up(score, 2))


def analyze_documentation_depth(
    readme: str | None, tree: list[TreeEntry]
) -> DocumentationDepth:
    """
    Measure README depth and the presence of additional documentation.

    A missing README (None) is not an error; it simply scores nothing.
    """
    has_readme = readme is not None
    readme_length = len(readme) if readme else 0
    sections = detect_sections(readme)
    section_count = sum(sections)
    doc_files = find_doc_files(tree)
    has_other_docs = len(doc_files) > 0

    return DocumentationDepth(
        readme_length=readme_length,
        has_readme=has_readme,
        sections_found=sections,
        section_count=section_count,
        has_other_docs=has_other_docs,
        doc_files=doc_files,
        score=score_documentation(
            has_readme, readme_length, section_count, has_other_docs
        ),
    )


def _analyze(snapshot: RepositorySnapshot) -> DocumentationDepth:
    return analyze_documentation_depth(snapshot.readme, snapshot.tree)


DIMENSION = DimensionSpec(
    name="Documentation Depth",
    key="documentation",
    max_score=MAX_SCORE,
    analyzer=_analyze,
)
