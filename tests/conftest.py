"""Root conftest.py for test configuration.

Ensures local src/ directory takes priority over any installed packages,
and provides store and graph fixtures shared across the suite.
"""

import sys
from collections.abc import Generator
from pathlib import Path

import pytest

# Insert local src directory at the beginning of sys.path
_src_dir = Path(__file__).parent.parent / "src"
if str(_src_dir) not in sys.path:
    sys.path.insert(0, str(_src_dir))

from codegraft.graph.identity import line_based_key  # noqa: E402
from codegraft.graph.models import (  # noqa: E402
    Entity,
    EntityClass,
    InterfaceSignature,
    LineRange,
    TemporalState,
)
from codegraft.store import CodeGraphStore  # noqa: E402


def make_entity(
    name: str,
    *,
    path: str = "src/lib.rs",
    kind: str = "function",
    start: int = 1,
    end: int = 3,
    code: str | None = None,
    classification: EntityClass = EntityClass.CODE_IMPLEMENTATION,
) -> Entity:
    """An UNCHANGED on-disk Rust entity with a line-based identity."""
    return Entity(
        identity=line_based_key("rust", kind, name, path, start, end),
        signature=InterfaceSignature(name=name, kind=kind, visibility="pub"),
        state=TemporalState.UNCHANGED,
        current_code=code if code is not None else f"fn {name}() {{}}",
        classification=classification,
        file_path=path,
        language="rust",
        entity_kind=kind,
        line_range=LineRange(start, end),
    )


@pytest.fixture
def store(tmp_path: Path) -> Generator[CodeGraphStore, None, None]:
    """A fresh, empty store in a temporary directory."""
    s = CodeGraphStore.open(tmp_path / ".codegraft" / "graph.db", create=True)
    yield s
    s.close()


@pytest.fixture
def rust_project(tmp_path: Path) -> Path:
    """A tiny Rust crate: add() calls helper(), a test calls add()."""
    root = tmp_path / "proj"
    (root / "src").mkdir(parents=True)
    (root / "src" / "lib.rs").write_text(
        "/// Adds one.\n"
        "pub fn add(a: i32) -> i32 {\n"
        "    helper(a)\n"
        "}\n"
        "\n"
        "fn helper(a: i32) -> i32 {\n"
        "    a + 1\n"
        "}\n"
        "\n"
        "#[cfg(test)]\n"
        "mod tests {\n"
        "    use super::*;\n"
        "\n"
        "    #[test]\n"
        "    fn it_adds() {\n"
        "        let r = add(1);\n"
        "        assert_eq!(r, 2);\n"
        "    }\n"
        "}\n"
    )
    return root


@pytest.fixture
def entity_factory():  # type: ignore[no-untyped-def]
    """Build UNCHANGED Rust entities (see ``make_entity``)."""
    return make_entity
