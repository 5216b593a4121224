"""Canonical language definitions.

Carries the test file patterns used to classify entities as test or
production code. Extensions and tree-sitter grammar metadata live with the
query packs in ``codegraft.extraction.packs``.
"""

from __future__ import annotations

from dataclasses import dataclass
from fnmatch import fnmatch
from pathlib import Path


@dataclass(frozen=True, slots=True)
class Language:
    """Canonical definition for a language name.

    Attributes:
        name: Unique identifier (lowercase, e.g., "rust", "python")
        test_patterns: Glob patterns for test files. Patterns containing
            ``/`` are matched against the full path.
    """

    name: str
    test_patterns: tuple[str, ...] = ()


ALL_LANGUAGES: tuple[Language, ...] = (
    Language(
        name="rust",
        test_patterns=("tests/*.rs", "*/tests/*.rs", "*_test.rs"),
    ),
    Language(
        name="python",
        test_patterns=("test_*.py", "*_test.py", "conftest.py"),
    ),
    Language(
        name="javascript",
        test_patterns=("*.test.js", "*.spec.js", "*.test.jsx"),
    ),
    Language(
        name="typescript",
        test_patterns=("*.test.ts", "*.spec.ts", "*.test.tsx"),
    ),
    Language(
        name="go",
        test_patterns=("*_test.go",),
    ),
)


def is_test_file(path: str | Path) -> bool:
    """Check if a file path matches any known test file pattern.

    Patterns are ``fnmatch``-style globs matched against the filename;
    a pattern containing ``/`` is matched against the full POSIX path so
    directory conventions like Rust's ``tests/`` are recognised.
    """
    p = Path(path) if isinstance(path, str) else path
    name = p.name
    path_str = p.as_posix()

    for lang in ALL_LANGUAGES:
        for pattern in lang.test_patterns:
            if "/" in pattern:
                if fnmatch(path_str, pattern):
                    return True
            elif fnmatch(name, pattern):
                return True
    return False
