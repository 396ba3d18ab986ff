"""
Engineering rigor dimensions.

Each dimension module exposes a ``DIMENSION`` spec whose analyzer maps a
RepositorySnapshot to a scored record.
"""

from importlib import import_module
from typing import Any

from aura_pulse.metrics.base import DimensionSpec, RepositorySnapshot

# Order matters: it is the order of the rigor breakdown
_BUILTIN_MODULES = [
    "aura_pulse.metrics.tooling",
    "aura_pulse.metrics.infrastructure",
    "aura_pulse.metrics.testing",
    "aura_pulse.metrics.refactoring",
    "aura_pulse.metrics.documentation",
]

_DIMENSION_SPECS: list[DimensionSpec] | None = None


def _load_builtin_dimension_specs() -> list[DimensionSpec]:
    specs = []
    for module_path in _BUILTIN_MODULES:
        module = import_module(module_path)
        spec = getattr(module, "DIMENSION", None)
        if isinstance(spec, DimensionSpec):
            specs.append(spec)
    return specs


def get_dimension_specs() -> list[DimensionSpec]:
    """Return the registered dimension specs, loading them on first use."""
    global _DIMENSION_SPECS
    if _DIMENSION_SPECS is None:
        _DIMENSION_SPECS = _load_builtin_dimension_specs()
    return _DIMENSION_SPECS


def analyze_dimensions(snapshot: RepositorySnapshot) -> dict[str, Any]:
    """
    Run every dimension analyzer against a snapshot.

    Returns:
        Mapping of dimension key (e.g. "tooling") to its scored record.
    """
    return {spec.key: spec.analyzer(snapshot) for spec in get_dimension_specs()}


__all__ = ["DimensionSpec", "analyze_dimensions", "get_dimension_specs"]
