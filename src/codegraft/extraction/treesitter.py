"""Tree-sitter structural parser.

Turns one source file into entities (functions, types, traits, impls,
modules, ...) and name-level relationship facts:

- ``Calls``: a call site inside an entity names another entity
- ``Uses``: a type reference inside an entity names another entity
- ``Implements``: an impl/class declares a trait, interface or base

Relationships carry names, not identities. Resolving names to identities
across files is the extractor's job.

Note: this is syntax only. A call to ``new`` is recorded as a call to
whatever is named ``new``; no type information is consulted.
"""

from __future__ import annotations

import importlib
from dataclasses import dataclass, field
from typing import Any

import tree_sitter
from tree_sitter import Query as _TSQuery
from tree_sitter import QueryCursor as _TSQueryCursor

from codegraft.core.errors import ExtractionError
from codegraft.extraction.packs import (
    LanguagePack,
    SymbolQueryConfig,
    get_pack,
    get_pack_for_path,
)
from codegraft.graph.models import EdgeKind, InterfaceSignature


@dataclass
class ParsedEntity:
    """An entity definition found by the parser."""

    kind: str
    name: str
    signature: InterfaceSignature
    start_line: int  # 1-based inclusive
    end_line: int
    code: str
    parent_name: str | None = None
    start_byte: int = 0
    end_byte: int = 0

    @property
    def qualified_name(self) -> str:
        return f"{self.parent_name}.{self.name}" if self.parent_name else self.name


@dataclass
class ParsedRelationship:
    """Name-level relationship fact, ``from_name`` is a qualified name in the same file."""

    from_name: str
    to_name: str
    edge_kind: str
    location: str
    from_line: int | None = None  # start line of the owning entity


@dataclass
class ParsedFile:
    """Parser output for one file."""

    path: str
    language: str
    entities: list[ParsedEntity] = field(default_factory=list)
    relationships: list[ParsedRelationship] = field(default_factory=list)
    error_count: int = 0


@dataclass
class SyntaxIssue:
    """An ERROR or missing node in a parse tree."""

    line: int
    column: int
    message: str

    def to_dict(self) -> dict[str, Any]:
        return {"line": self.line, "column": self.column, "message": self.message}


@dataclass
class TreeSitterParser:
    """
    Tree-sitter parser implementing the StructuralParser protocol.

    Usage::

        parser = TreeSitterParser()
        parsed = parser.parse_file("src/lib.rs", source_text)
        issues = parser.check_syntax("rust", "fn broken( {")
    """

    _parser: Any = field(default=None, repr=False)
    _languages: dict[str, Any] = field(default_factory=dict, repr=False)
    _queries: dict[tuple[str, str], Any] = field(default_factory=dict, repr=False)

    def __post_init__(self) -> None:
        self._parser = tree_sitter.Parser()

    # ------------------------------------------------------------------
    # Grammar loading
    # ------------------------------------------------------------------

    def _get_language(self, pack: LanguagePack) -> Any:
        """Get or load the tree-sitter Language for a pack."""
        if pack.name in self._languages:
            return self._languages[pack.name]
        try:
            mod = importlib.import_module(pack.grammar_module)
            lang_fn = getattr(mod, pack.language_func or "language")
            lang = tree_sitter.Language(lang_fn())
        except (ImportError, AttributeError) as err:
            raise ExtractionError.unsupported_language(
                f"{pack.name} (install {pack.grammar_package})"
            ) from err
        self._languages[pack.name] = lang
        return lang

    def _get_query(self, pack: LanguagePack, key: str, text: str) -> Any:
        cache_key = (pack.name, key)
        if cache_key not in self._queries:
            self._queries[cache_key] = _TSQuery(self._get_language(pack), text)
        return self._queries[cache_key]

    def _parse_tree(self, pack: LanguagePack, content: bytes) -> Any:
        self._parser.language = self._get_language(pack)
        return self._parser.parse(content)

    # ------------------------------------------------------------------
    # StructuralParser protocol
    # ------------------------------------------------------------------

    def parse_file(self, path: str, source: str) -> ParsedFile:
        """Parse one file into entities and name-level relationships.

        Raises:
            ExtractionError: If no grammar is available or a query fails.
        """
        pack = get_pack_for_path(path)
        if pack is None or pack.symbol_config is None:
            raise ExtractionError.unsupported_language(path)

        content = source.encode("utf-8")
        try:
            root = self._parse_tree(pack, content).root_node
            entities = self._extract_entities(pack, pack.symbol_config, root, content)
            relationships = self._extract_relationships(pack, root, entities, path)
        except (ValueError, RuntimeError) as err:
            # tree_sitter.QueryError subclasses ValueError
            raise ExtractionError.parse_failed(path, str(err)) from err

        return ParsedFile(
            path=path,
            language=pack.name,
            entities=entities,
            relationships=relationships,
            error_count=len(_collect_issues(root, limit=None)),
        )

    def check_syntax(self, language: str, source: str, *, limit: int = 20) -> list[SyntaxIssue]:
        """Syntax errors in ``source`` for a pack name (e.g. ``rust``).

        Raises:
            ExtractionError: If the language has no pack or grammar.
        """
        pack = get_pack(language)
        if pack is None:
            raise ExtractionError.unsupported_language(language)
        tree = self._parse_tree(pack, source.encode("utf-8"))
        return _collect_issues(tree.root_node, limit=limit)

    # ------------------------------------------------------------------
    # Entities
    # ------------------------------------------------------------------

    def _extract_entities(
        self,
        pack: LanguagePack,
        config: SymbolQueryConfig,
        root: Any,
        content: bytes,
    ) -> list[ParsedEntity]:
        query = self._get_query(pack, "symbols", config.query_text)
        matches: list[tuple[int, dict[str, list[Any]]]] = _TSQueryCursor(query).matches(root)

        entities: list[ParsedEntity] = []
        for pattern_idx, captures in matches:
            if pattern_idx >= len(config.patterns):
                continue
            pattern = config.patterns[pattern_idx]

            name_nodes = captures.get("name")
            node_list = captures.get("node")
            if not name_nodes or not node_list:
                continue
            name = _text(name_nodes[0])
            node = node_list[0]

            kind = pattern.kind
            parent_name = None
            if config.container_types:
                parent_name = _find_container_name(
                    node, config.container_types, config.container_name_field
                )
                if parent_name and pattern.nested_kind:
                    kind = pattern.nested_kind

            attributes = _preceding_attributes(node)
            if kind in ("function", "method") and any(
                attr in pack.test_attributes for attr in attributes
            ):
                kind = "test"

            params = captures.get("params")
            signature = InterfaceSignature(
                name=name,
                kind=kind,
                visibility=_visibility(pack, node, name),
                parameters=_text(params[0]) if params else None,
                return_type=_return_type(node),
                module_path=parent_name,
                documentation=_docstring(node, config.body_node_types),
            )
            entities.append(
                ParsedEntity(
                    kind=kind,
                    name=name,
                    signature=signature,
                    start_line=node.start_point[0] + 1,
                    end_line=node.end_point[0] + 1,
                    code=content[node.start_byte : node.end_byte].decode("utf-8", errors="replace"),
                    parent_name=parent_name,
                    start_byte=node.start_byte,
                    end_byte=node.end_byte,
                )
            )

        entities.sort(key=lambda e: (e.start_byte, -e.end_byte, e.name))
        return entities

    # ------------------------------------------------------------------
    # Relationships
    # ------------------------------------------------------------------

    def _extract_relationships(
        self,
        pack: LanguagePack,
        root: Any,
        entities: list[ParsedEntity],
        path: str,
    ) -> list[ParsedRelationship]:
        if not entities:
            return []

        facts: list[ParsedRelationship] = []
        seen: set[tuple[int, str, str]] = set()

        def add(owner: ParsedEntity, target: str, kind: str, node: Any) -> None:
            key = (owner.start_byte, target, kind)
            if key in seen:
                return
            seen.add(key)
            facts.append(
                ParsedRelationship(
                    from_name=owner.qualified_name,
                    to_name=target,
                    edge_kind=kind,
                    location=f"{path}:{node.start_point[0] + 1}",
                    from_line=owner.start_line,
                )
            )

        if pack.call_query:
            query = self._get_query(pack, "calls", pack.call_query)
            for node in _captures(query, root, "callee"):
                owner = _innermost(entities, node.start_byte)
                if owner is not None:
                    add(owner, _text(node), EdgeKind.CALLS, node)

        if pack.uses_query:
            query = self._get_query(pack, "uses", pack.uses_query)
            for node in _captures(query, root, "type_ref"):
                owner = _innermost(entities, node.start_byte)
                target = _text(node)
                if owner is not None and target != owner.name:
                    add(owner, target, EdgeKind.USES, node)

        if pack.implements_query:
            query = self._get_query(pack, "implements", pack.implements_query)
            by_span = {(e.start_byte, e.end_byte): e for e in entities}
            for _idx, captures in _TSQueryCursor(query).matches(root):
                node_list = captures.get("node")
                for iface in captures.get("interface", []):
                    if not node_list:
                        continue
                    owner = by_span.get((node_list[0].start_byte, node_list[0].end_byte))
                    if owner is not None:
                        add(owner, _text(iface), EdgeKind.IMPLEMENTS, iface)

        return facts


# ----------------------------------------------------------------------
# Node helpers
# ----------------------------------------------------------------------


def _text(node: Any) -> str:
    return str(node.text.decode("utf-8"))


def _captures(query: Any, root: Any, name: str) -> list[Any]:
    captured: dict[str, list[Any]] = _TSQueryCursor(query).captures(root)
    nodes = captured.get(name, [])
    return sorted(nodes, key=lambda n: n.start_byte)


def _innermost(entities: list[ParsedEntity], offset: int) -> ParsedEntity | None:
    """Smallest entity whose byte span contains ``offset``."""
    best: ParsedEntity | None = None
    for entity in entities:
        if entity.start_byte <= offset < entity.end_byte:
            size = entity.end_byte - entity.start_byte
            if best is None or size < best.end_byte - best.start_byte:
                best = entity
    return best


def _find_container_name(node: Any, container_types: frozenset[str], name_field: str) -> str | None:
    """Walk ancestors to find the nearest container and return its name."""
    current = node.parent
    while current is not None:
        if current.type in container_types:
            name_node = current.child_by_field_name(name_field)
            if name_node is None:
                # Rust impl blocks are named by their type
                name_node = current.child_by_field_name("type")
            return _text(name_node) if name_node is not None else None
        current = current.parent
    return None


def _preceding_attributes(node: Any) -> list[str]:
    """Rust ``attribute_item`` siblings directly above a definition."""
    attributes: list[str] = []
    prev = node.prev_named_sibling
    while prev is not None and prev.type in ("attribute_item", "line_comment"):
        if prev.type == "attribute_item":
            attributes.append(_text(prev).strip())
        prev = prev.prev_named_sibling
    return attributes


def _visibility(pack: LanguagePack, node: Any, name: str) -> str:
    if pack.name == "rust":
        for child in node.children:
            if child.type == "visibility_modifier":
                return _text(child)
        return "private"
    if pack.name == "python":
        return "private" if name.startswith("_") and not name.startswith("__") else "public"
    if pack.name == "go":
        return "public" if name[:1].isupper() else "private"
    parent = node.parent
    if parent is not None and parent.type == "export_statement":
        return "public"
    return "private" if name.startswith("#") else "public"


def _return_type(node: Any) -> str | None:
    for field_name in ("return_type", "result"):
        type_node = node.child_by_field_name(field_name)
        if type_node is not None:
            text = _text(type_node).strip()
            if len(text) < 200:
                return text.lstrip(":").strip()
    return None


def _docstring(node: Any, body_node_types: frozenset[str]) -> str | None:
    """First paragraph of a Python docstring or the preceding doc comment."""
    for child in node.children:
        if child.type in body_node_types:
            if child.child_count > 0:
                first = child.children[0]
                if first.type == "expression_statement" and first.child_count > 0:
                    string_node = first.children[0]
                    if string_node.type == "string":
                        raw = _text(string_node).strip()
                        for q in ('"""', "'''"):
                            if raw.startswith(q) and raw.endswith(q):
                                raw = raw[3:-3].strip()
                                break
                        first_para = raw.split("\n\n")[0].strip()
                        if first_para:
                            return " ".join(first_para.split())
            break

    lines: list[str] = []
    prev = node.prev_named_sibling
    while prev is not None and prev.type in ("comment", "line_comment", "attribute_item"):
        if prev.type != "attribute_item":
            text = _text(prev).strip()
            if text.startswith("///") or text.startswith("/**") or text.startswith("//"):
                lines.insert(0, text.lstrip("/*! ").rstrip("*/ ").strip())
        prev = prev.prev_named_sibling
    doc = " ".join(line for line in lines if line)
    return doc or None


def _collect_issues(root: Any, *, limit: int | None) -> list[SyntaxIssue]:
    """ERROR and missing nodes, in document order."""
    issues: list[SyntaxIssue] = []
    if not root.has_error:
        return issues

    stack = [root]
    while stack:
        node = stack.pop()
        if node.type == "ERROR":
            issues.append(
                SyntaxIssue(
                    line=node.start_point[0] + 1,
                    column=node.start_point[1] + 1,
                    message=f"unexpected {_text(node)[:40]!r}",
                )
            )
        elif node.is_missing:
            issues.append(
                SyntaxIssue(
                    line=node.start_point[0] + 1,
                    column=node.start_point[1] + 1,
                    message=f"missing {node.type!r}",
                )
            )
        if node.has_error:
            stack.extend(reversed(node.children))
        if limit is not None and len(issues) >= limit:
            break

    issues.sort(key=lambda i: (i.line, i.column))
    return issues
