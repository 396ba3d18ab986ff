"""
Cache management for Aura Pulse.

Analysis results are stored per kind ("pulse", "impact") in a gzip
JSON file inside the cache directory, keyed by "owner/repo".
"""

import gzip
import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from aura_pulse.config import get_cache_dir, get_cache_ttl

# Bump when scoring changes so stale results are recomputed
ANALYSIS_VERSION = "1.0"

CACHE_KINDS = ("pulse", "impact")


def _get_cache_path(kind: str) -> Path:
    return get_cache_dir() / f"{kind}.json.gz"


def _read_cache_file(cache_path: Path) -> dict[str, Any]:
    """Read a cache file, treating missing or corrupted files as empty."""
    if not cache_path.exists():
        return {}
    try:
        with gzip.open(cache_path, "rt", encoding="utf-8") as f:
            data = json.load(f)
    except (json.JSONDecodeError, OSError, EOFError):
        return {}
    return data if isinstance(data, dict) else {}


def _write_cache_file(cache_path: Path, data: dict[str, Any]) -> None:
    with gzip.open(cache_path, "wt", encoding="utf-8") as f:
        json.dump(data, f, indent=2, ensure_ascii=False, sort_keys=True)


def _cache_kinds_on_disk(cache_dir: Path) -> list[str]:
    return sorted(f.name.removesuffix(".json.gz") for f in cache_dir.glob("*.json.gz"))


def is_cache_valid(
    entry: dict[str, Any],
    expected_version: str = ANALYSIS_VERSION,
    now: datetime | None = None,
) -> bool:
    """
    Check if a cache entry is still valid based on TTL and analysis version.

    Args:
        entry: Cache entry dict with cache_metadata and analysis_version.
        expected_version: Expected analysis_version string.
        now: Reference time (defaults to the current UTC time).

    Returns:
        True if the version matches and the entry is younger than its TTL.
    """
    if entry.get("analysis_version") != expected_version:
        return False

    metadata = entry.get("cache_metadata")
    if not metadata or "fetched_at" not in metadata:
        return False

    try:
        fetched_at = datetime.fromisoformat(metadata["fetched_at"])
        ttl_seconds = metadata.get("ttl_seconds", get_cache_ttl())

        if fetched_at.tzinfo is None:
            fetched_at = fetched_at.replace(tzinfo=timezone.utc)

        now = now or datetime.now(timezone.utc)
        age_seconds = (now - fetched_at).total_seconds()

        return age_seconds < ttl_seconds
    except (ValueError, TypeError):
        return False


def load_cache(kind: str, expected_version: str = ANALYSIS_VERSION) -> dict[str, Any]:
    """
    Load the valid entries of one cache kind.

    Args:
        kind: Cache kind ("pulse" or "impact").
        expected_version: Expected analysis_version for cache entries.

    Returns:
        Dictionary of cached entries keyed by "owner/repo" (expired and
        version-mismatched entries are left out).
    """
    all_data = _read_cache_file(_get_cache_path(kind))
    return {
        key: entry
        for key, entry in all_data.items()
        if isinstance(entry, dict) and is_cache_valid(entry, expected_version)
    }


def get_cached_entry(
    kind: str, key: str, expected_version: str = ANALYSIS_VERSION
) -> dict[str, Any] | None:
    """Return one valid cache entry, or None on a miss."""
    return load_cache(kind, expected_version).get(key)


def save_cache(kind: str, data: dict[str, Any], merge: bool = True) -> None:
    """
    Save entries to the cache of one kind.

    Entries without cache_metadata are stamped with the current time and TTL,
    and all entries are tagged with the current analysis version.

    Args:
        kind: Cache kind ("pulse" or "impact").
        data: Dictionary of entries keyed by "owner/repo".
        merge: If True, merge with the existing cache. If False, replace it.
    """
    cache_dir = get_cache_dir()
    cache_dir.mkdir(parents=True, exist_ok=True)
    cache_path = _get_cache_path(kind)

    existing_data = _read_cache_file(cache_path) if merge else {}

    now = datetime.now(timezone.utc).isoformat()
    ttl = get_cache_ttl()

    for entry in data.values():
        entry.setdefault("analysis_version", ANALYSIS_VERSION)
        if "cache_metadata" not in entry:
            entry["cache_metadata"] = {
                "fetched_at": now,
                "ttl_seconds": ttl,
                "source": "github",
            }

    _write_cache_file(cache_path, {**existing_data, **data})


def clear_cache(kind: str | None = None) -> int:
    """
    Clear cache for one or all kinds.

    Args:
        kind: Specific kind to clear, or None to clear all.

    Returns:
        Number of cache files removed.
    """
    cache_dir = get_cache_dir()

    if not cache_dir.exists():
        return 0

    if kind:
        cache_files = [_get_cache_path(kind)]
    else:
        cache_files = list(cache_dir.glob("*.json.gz"))

    cleared = 0
    for cache_file in cache_files:
        if cache_file.exists():
            cache_file.unlink()
            cleared += 1
    return cleared


def clear_expired_cache(
    kind: str | None = None, expected_version: str = ANALYSIS_VERSION
) -> int:
    """
    Remove expired entries while preserving valid ones.

    Returns:
        Number of expired entries removed.
    """
    cache_dir = get_cache_dir()

    if not cache_dir.exists():
        return 0

    kinds = [kind] if kind else _cache_kinds_on_disk(cache_dir)
    total_cleared = 0

    for current in kinds:
        cache_path = _get_cache_path(current)
        if not cache_path.exists():
            continue

        all_data = _read_cache_file(cache_path)
        valid_data = {
            key: entry
            for key, entry in all_data.items()
            if isinstance(entry, dict) and is_cache_valid(entry, expected_version)
        }
        expired_count = len(all_data) - len(valid_data)
        if expired_count > 0:
            _write_cache_file(cache_path, valid_data)
            total_cleared += expired_count

    return total_cleared


def get_cache_stats(
    kind: str | None = None, expected_version: str = ANALYSIS_VERSION
) -> dict[str, Any]:
    """
    Get cache statistics.

    Args:
        kind: Specific kind to check, or None for all.
        expected_version: Expected analysis_version to check validity.

    Returns:
        Dictionary with the cache directory, totals and per-kind counts.
    """
    cache_dir = get_cache_dir()

    if not cache_dir.exists():
        return {
            "cache_dir": str(cache_dir),
            "exists": False,
            "total_entries": 0,
            "valid_entries": 0,
            "expired_entries": 0,
            "kinds": {},
        }

    kinds = [kind] if kind else _cache_kinds_on_disk(cache_dir)

    total_entries = 0
    valid_entries = 0
    kind_stats = {}

    for current in kinds:
        cache_path = _get_cache_path(current)
        if not cache_path.exists():
            continue

        data = _read_cache_file(cache_path)
        kind_total = len(data)
        kind_valid = sum(
            1
            for entry in data.values()
            if isinstance(entry, dict) and is_cache_valid(entry, expected_version)
        )

        total_entries += kind_total
        valid_entries += kind_valid
        kind_stats[current] = {
            "total": kind_total,
            "valid": kind_valid,
            "expired": kind_total - kind_valid,
        }

    return {
        "cache_dir": str(cache_dir),
        "exists": True,
        "total_entries": total_entries,
        "valid_entries": valid_entries,
        "expired_entries": total_entries - valid_entries,
        "kinds": kind_stats,
    }
