"""Extraction: source tree to entities and relationships.

Walks the project, hands each supported file to a ``StructuralParser`` and
turns the parser's name-level output into store-ready rows:

- every entity gets a line-based identity and starts ``UNCHANGED``
- relationship names are resolved to identities, same file first, then a
  unique match anywhere in the project; ambiguous and external names are
  dropped

A file that cannot be read or parsed is recorded as an ``ExtractionFailure``
and skipped. One bad file never aborts a pass.
"""

from __future__ import annotations

import os
from collections import defaultdict
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Protocol

import structlog

from codegraft.config.models import ExtractionConfig
from codegraft.core.errors import ExtractionError
from codegraft.core.excludes import is_prunable
from codegraft.core.languages import is_test_file
from codegraft.extraction.packs import get_pack_for_path
from codegraft.extraction.treesitter import ParsedEntity, ParsedFile, TreeSitterParser
from codegraft.graph.identity import line_based_key
from codegraft.graph.models import (
    DependencyEdge,
    Entity,
    EntityClass,
    LineRange,
    TemporalState,
)

log = structlog.get_logger(__name__)

# Kinds never used as relationship targets: impl blocks share their type's name
_NON_TARGET_KINDS = frozenset({"impl"})
_TEST_MODULE_NAMES = frozenset({"tests", "test"})


class StructuralParser(Protocol):
    """Anything that can turn one source file into entities and relationships."""

    def parse_file(self, path: str, source: str) -> ParsedFile: ...


@dataclass(frozen=True, slots=True)
class ExtractionFailure:
    """A file that was skipped during extraction."""

    path: str
    reason: str
    code: int

    @classmethod
    def from_error(cls, path: str, error: ExtractionError) -> ExtractionFailure:
        return cls(path=path, reason=error.message, code=int(error.code))

    def to_dict(self) -> dict[str, Any]:
        return {"path": self.path, "reason": self.reason, "code": self.code}


@dataclass
class ExtractionResult:
    """Entities, resolved edges and per-file failures of one pass."""

    entities: list[Entity] = field(default_factory=list)
    edges: list[DependencyEdge] = field(default_factory=list)
    failures: list[ExtractionFailure] = field(default_factory=list)
    files_scanned: int = 0


def discover_files(project_root: Path, config: ExtractionConfig | None = None) -> list[str]:
    """Relative POSIX paths of every file a language pack can parse.

    Prunable and configured directories are skipped. The result is sorted so
    repeated passes see files in the same order.
    """
    config = config or ExtractionConfig()
    extra = frozenset(config.exclude_dirs)
    languages = set(config.languages) if config.languages is not None else None

    found: list[str] = []
    for dirpath, dirnames, filenames in os.walk(project_root):
        dirnames[:] = [d for d in dirnames if not is_prunable(d, extra)]
        for filename in filenames:
            pack = get_pack_for_path(filename)
            if pack is None:
                continue
            if languages is not None and pack.name not in languages:
                continue
            rel = (Path(dirpath) / filename).relative_to(project_root)
            found.append(rel.as_posix())
    found.sort()
    return found


class Extractor:
    """Runs the structural parser over a project and resolves its output."""

    def __init__(
        self,
        parser: StructuralParser | None = None,
        config: ExtractionConfig | None = None,
    ) -> None:
        self.parser: StructuralParser = parser if parser is not None else TreeSitterParser()
        self.config = config or ExtractionConfig()

    def extract(self, project_root: Path) -> ExtractionResult:
        """Extract every supported file under ``project_root``."""
        result = ExtractionResult()
        parsed_files: list[ParsedFile] = []

        for rel_path in discover_files(project_root, self.config):
            result.files_scanned += 1
            try:
                parsed = self._parse_one(project_root, rel_path)
            except ExtractionError as e:
                failure = ExtractionFailure.from_error(rel_path, e)
                result.failures.append(failure)
                log.warning(
                    "extraction_failed",
                    path=rel_path,
                    code=failure.code,
                    reason=failure.reason,
                )
                continue
            if parsed.error_count:
                log.warning("extraction_syntax_errors", path=rel_path, errors=parsed.error_count)
            parsed_files.append(parsed)

        resolver = _Resolver()
        for parsed in parsed_files:
            result.entities.extend(resolver.add_file(parsed))
        result.edges = resolver.resolve_edges(parsed_files)

        log.info(
            "extraction_completed",
            files=result.files_scanned,
            entities=len(result.entities),
            edges=len(result.edges),
            failures=len(result.failures),
        )
        return result

    def _parse_one(self, project_root: Path, rel_path: str) -> ParsedFile:
        full_path = project_root / rel_path
        max_bytes = self.config.max_file_size_kb * 1024
        try:
            size = full_path.stat().st_size
            if size > max_bytes:
                raise ExtractionError.parse_failed(
                    rel_path,
                    f"file is {size // 1024} KB, limit is {self.config.max_file_size_kb} KB",
                )
            content = full_path.read_bytes()
        except OSError as e:
            raise ExtractionError.parse_failed(rel_path, str(e)) from e

        try:
            source = content.decode("utf-8")
        except UnicodeDecodeError as e:
            raise ExtractionError.parse_failed(rel_path, "not valid UTF-8") from e

        try:
            parsed = self.parser.parse_file(rel_path, source)
        except ExtractionError:
            raise
        except Exception as e:
            log.warning("parser_crashed", path=rel_path, exc_info=True)
            raise ExtractionError.parse_failed(rel_path, f"parser error: {e}") from e
        parsed.path = rel_path
        return parsed


class _Resolver:
    """Assigns identities and resolves relationship names across files."""

    def __init__(self) -> None:
        self._seen: set[str] = set()
        # (path, qualified name, start line) -> identity
        self._owners: dict[tuple[str, str, int], str] = {}
        # (path, qualified name) -> identities, for parsers that omit from_line
        self._owners_by_name: dict[tuple[str, str], list[str]] = defaultdict(list)
        self._file_targets: dict[tuple[str, str], list[str]] = defaultdict(list)
        self._global_targets: dict[str, list[str]] = defaultdict(list)

    def add_file(self, parsed: ParsedFile) -> list[Entity]:
        entities: list[Entity] = []
        test_spans = [
            (e.start_line, e.end_line)
            for e in parsed.entities
            if e.kind == "module" and e.name in _TEST_MODULE_NAMES
        ]
        test_file = is_test_file(parsed.path)

        for parsed_entity in parsed.entities:
            identity = line_based_key(
                parsed.language,
                parsed_entity.kind,
                parsed_entity.name,
                parsed.path,
                parsed_entity.start_line,
                parsed_entity.end_line,
            )
            if identity in self._seen:
                log.debug("duplicate_identity", identity=identity)
                continue
            self._seen.add(identity)

            qualified = parsed_entity.qualified_name
            self._owners[(parsed.path, qualified, parsed_entity.start_line)] = identity
            self._owners_by_name[(parsed.path, qualified)].append(identity)
            if parsed_entity.kind not in _NON_TARGET_KINDS:
                self._file_targets[(parsed.path, parsed_entity.name)].append(identity)
                self._global_targets[parsed_entity.name].append(identity)

            is_test = test_file or _is_test_entity(parsed_entity, test_spans)
            entities.append(
                Entity(
                    identity=identity,
                    signature=parsed_entity.signature,
                    state=TemporalState.UNCHANGED,
                    current_code=parsed_entity.code,
                    future_code=None,
                    classification=(
                        EntityClass.TEST_IMPLEMENTATION
                        if is_test
                        else EntityClass.CODE_IMPLEMENTATION
                    ),
                    file_path=parsed.path,
                    language=parsed.language,
                    entity_kind=parsed_entity.kind,
                    line_range=LineRange(parsed_entity.start_line, parsed_entity.end_line),
                )
            )
        return entities

    def resolve_edges(self, parsed_files: list[ParsedFile]) -> list[DependencyEdge]:
        edges: dict[tuple[str, str, str], DependencyEdge] = {}
        for parsed in parsed_files:
            for rel in parsed.relationships:
                source = self._owner(parsed.path, rel.from_name, rel.from_line)
                if source is None:
                    continue
                target = self._target(parsed.path, rel.to_name)
                if target is None:
                    log.debug("unresolved_reference", path=parsed.path, name=rel.to_name)
                    continue
                key = (source, target, rel.edge_kind)
                if key not in edges:
                    edges[key] = DependencyEdge(
                        from_identity=source,
                        to_identity=target,
                        edge_kind=rel.edge_kind,
                        source_location=rel.location,
                    )
        return [edges[key] for key in sorted(edges)]

    def _owner(self, path: str, qualified: str, line: int | None) -> str | None:
        if line is not None:
            return self._owners.get((path, qualified, line))
        candidates = self._owners_by_name.get((path, qualified), [])
        return candidates[0] if len(candidates) == 1 else None

    def _target(self, path: str, name: str) -> str | None:
        local = self._file_targets.get((path, name), [])
        if len(local) == 1:
            return local[0]
        if local:
            return None
        anywhere = self._global_targets.get(name, [])
        return anywhere[0] if len(anywhere) == 1 else None


def _is_test_entity(entity: ParsedEntity, test_spans: list[tuple[int, int]]) -> bool:
    if entity.kind == "test":
        return True
    return any(start <= entity.start_line and entity.end_line <= end for start, end in test_spans)
