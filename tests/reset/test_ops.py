"""Tests for the reset controller."""

from pathlib import Path

import pytest

from codegraft.core.errors import ExtractionError
from codegraft.extraction import ExtractionResult, Extractor
from codegraft.extraction.treesitter import ParsedEntity, ParsedFile
from codegraft.graph.models import InterfaceSignature, TemporalState
from codegraft.reset import ResetController
from codegraft.store import CodeGraphStore, EntityFilter
from codegraft.temporal import TemporalStateManager


class OneFileParser:
    """Reports a single function spanning the whole file."""

    def parse_file(self, path: str, source: str) -> ParsedFile:
        lines = source.count("\n") or 1
        name = Path(path).stem
        return ParsedFile(
            path,
            "rust",
            [
                ParsedEntity(
                    kind="function",
                    name=name,
                    signature=InterfaceSignature(name=name, kind="function"),
                    start_line=1,
                    end_line=lines,
                    code=source,
                )
            ],
        )


class ExplodingExtractor(Extractor):
    def extract(self, project_root: Path) -> ExtractionResult:
        raise ExtractionError.parse_failed(str(project_root), "boom")


@pytest.fixture
def project(tmp_path: Path) -> Path:
    root = tmp_path / "proj"
    (root / "src").mkdir(parents=True)
    (root / "src" / "lib.rs").write_text("fn lib() {}\n")
    return root


class TestReset:
    def test_given_empty_store_when_reset_then_populated_unchanged(
        self, store: CodeGraphStore, project: Path
    ) -> None:
        result = ResetController(store, Extractor(OneFileParser())).reset(project)

        assert result.entities_inserted == 1
        assert result.entities_deleted == 0
        [entity] = list(store.scan())
        assert entity.identity == "rust:fn:lib:src_lib_rs:1-1"
        assert entity.state is TemporalState.UNCHANGED
        assert store.info().project_root == str(project)

    def test_given_pending_changes_when_reset_then_all_discarded(
        self, store: CodeGraphStore, project: Path
    ) -> None:
        # Given
        controller = ResetController(store, Extractor(OneFileParser()))
        controller.index(project)
        manager = TemporalStateManager(store)
        manager.edit("rust:fn:lib:src_lib_rs:1-1", "fn lib() { 1 }")
        manager.create(
            "src_lib_rs-extra-fn-abc12345",
            "fn extra() {}",
            InterfaceSignature(name="extra", kind="function"),
        )

        # When
        result = controller.reset(project)

        # Then
        assert result.entities_deleted == 2
        assert store.count(EntityFilter.CHANGED_ONLY) == 0
        assert store.get("src_lib_rs-extra-fn-abc12345") is None

    def test_given_unchanged_disk_when_reset_twice_then_identical_graph(
        self, store: CodeGraphStore, project: Path
    ) -> None:
        controller = ResetController(store, Extractor(OneFileParser()))

        controller.reset(project)
        first = list(store.scan())
        controller.reset(project)

        assert list(store.scan()) == first

    def test_given_applied_change_on_disk_when_reset_then_new_identity(
        self, store: CodeGraphStore, project: Path
    ) -> None:
        # Given: the external writer grew the function by two lines
        controller = ResetController(store, Extractor(OneFileParser()))
        controller.reset(project)
        (project / "src" / "lib.rs").write_text("fn lib() {\n    1\n}\n")

        # When
        controller.reset(project)

        # Then
        assert [e.identity for e in store.scan()] == ["rust:fn:lib:src_lib_rs:1-3"]

    def test_given_extraction_raises_when_reset_then_store_untouched(
        self, store: CodeGraphStore, project: Path
    ) -> None:
        ResetController(store, Extractor(OneFileParser())).reset(project)
        before = list(store.scan())
        revision = store.revision()

        with pytest.raises(ExtractionError):
            ResetController(store, ExplodingExtractor(OneFileParser())).reset(project)

        assert list(store.scan()) == before
        assert store.revision() == revision

    def test_given_result_when_serialised_then_counts_present(
        self, store: CodeGraphStore, project: Path
    ) -> None:
        result = ResetController(store, Extractor(OneFileParser())).reset(project)

        data = result.to_dict()

        assert data["entities_inserted"] == 1
        assert data["files_scanned"] == 1
        assert data["failures"] == []
