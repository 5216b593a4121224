"""Syntax preflight for proposed code.

Parses every pending ``future_code`` with its language's grammar and reports
ERROR and missing nodes. This is syntax only: names, types and imports are
never checked.
"""

from __future__ import annotations

import textwrap
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

import structlog

from codegraft.core.errors import ExtractionError, MalformedIdentityError
from codegraft.extraction.packs import get_pack, get_pack_for_path
from codegraft.extraction.treesitter import TreeSitterParser
from codegraft.graph.identity import desanitize_path, is_line_based, parse_hash_key
from codegraft.graph.models import Entity
from codegraft.store.repository import EntityFilter

if TYPE_CHECKING:
    from codegraft.store.repository import CodeGraphStore

log = structlog.get_logger(__name__)


@dataclass(frozen=True, slots=True)
class ValidationIssue:
    """One syntax problem in an entity's proposed code."""

    identity: str
    language: str
    line: int
    column: int
    message: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "identity": self.identity,
            "language": self.language,
            "line": self.line,
            "column": self.column,
            "message": self.message,
        }


@dataclass
class ValidationReport:
    """Outcome of one preflight pass."""

    checked: int = 0
    issues: list[ValidationIssue] = field(default_factory=list)
    # identity -> reason, for entities whose language could not be checked
    skipped: dict[str, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.issues

    @property
    def failing_identities(self) -> list[str]:
        return sorted({issue.identity for issue in self.issues})

    def to_dict(self) -> dict[str, Any]:
        return {
            "ok": self.ok,
            "checked": self.checked,
            "issues": [issue.to_dict() for issue in self.issues],
            "skipped": dict(sorted(self.skipped.items())),
        }


class SyntaxValidator:
    """Checks pending create and edit proposals for syntax errors."""

    def __init__(self, store: CodeGraphStore, parser: TreeSitterParser | None = None) -> None:
        self._store = store
        self._parser = parser if parser is not None else TreeSitterParser()

    def validate(self) -> ValidationReport:
        report = ValidationReport()
        known_paths = self._store.file_paths()

        for entity in self._store.scan(EntityFilter.CHANGED_ONLY):
            if not entity.future_code:
                continue
            language = _language_for(entity, known_paths)
            if language is None:
                report.skipped[entity.identity] = "unknown language"
                continue
            try:
                found = self._parser.check_syntax(language, textwrap.dedent(entity.future_code))
            except ExtractionError as e:
                report.skipped[entity.identity] = e.message
                log.warning("validation_skipped", identity=entity.identity, reason=e.message)
                continue

            report.checked += 1
            for issue in found:
                report.issues.append(
                    ValidationIssue(
                        identity=entity.identity,
                        language=language,
                        line=issue.line,
                        column=issue.column,
                        message=issue.message,
                    )
                )

        log.info(
            "validation_completed",
            checked=report.checked,
            issues=len(report.issues),
            skipped=len(report.skipped),
        )
        return report


def _language_for(entity: Entity, known_paths: list[str]) -> str | None:
    """Pack name for an entity: its recorded language, else its file extension."""
    if entity.language and get_pack(entity.language) is not None:
        return entity.language

    path = entity.file_path
    if path is None and not is_line_based(entity.identity):
        try:
            path = desanitize_path(parse_hash_key(entity.identity).path_token, known_paths)
        except MalformedIdentityError:
            return None
    if path is None:
        return None
    pack = get_pack_for_path(path)
    return pack.name if pack is not None else None
