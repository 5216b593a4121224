"""Canonical exclude patterns for source discovery.

Tier 0 (HARDCODED_DIRS): Never traversed, not user-configurable.
    - VCS internals, the codegraft data directory

Tier 1 (DEFAULT_PRUNABLE_DIRS): Excluded by default. The extraction config's
``exclude_dirs`` adds to this set.
"""

from __future__ import annotations

HARDCODED_DIRS: frozenset[str] = frozenset(
    (
        # VCS internals
        ".git",
        ".svn",
        ".hg",
        # codegraft data
        ".codegraft",
    )
)

DEFAULT_PRUNABLE_DIRS: frozenset[str] = frozenset(
    (
        # JavaScript/Node.js
        "node_modules",
        ".next",
        "bower_components",
        # Python
        "venv",
        ".venv",
        "__pycache__",
        ".pytest_cache",
        ".mypy_cache",
        ".ruff_cache",
        ".tox",
        "site-packages",
        # Go
        "vendor",
        # Rust
        "target",
        # Generic build output
        "dist",
        "build",
        "coverage",
    )
)

PRUNABLE_DIRS: frozenset[str] = HARDCODED_DIRS | DEFAULT_PRUNABLE_DIRS


def is_prunable(dirname: str, extra: frozenset[str] | set[str] = frozenset()) -> bool:
    """Check if discovery should skip a directory."""
    return dirname in PRUNABLE_DIRS or dirname in extra
