"""LanguagePack: single source of truth for per-language tree-sitter config.

Each supported language has exactly one pack holding:
- Grammar metadata (PyPI package, import module, loader function)
- File extension detection
- Entity queries (S-expression patterns + SymbolPattern mappings)
- Relationship queries: call sites, type references, implementations

The PACKS registry is the canonical lookup: ``PACKS["rust"]``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

# =========================================================================
# Dataclasses
# =========================================================================


@dataclass(frozen=True)
class SymbolPattern:
    """Maps a query pattern index to entity kind metadata."""

    kind: str
    nested_kind: str | None = None  # Kind when inside a container


@dataclass(frozen=True)
class SymbolQueryConfig:
    """Entity query for a language.

    Patterns capture ``@name``, ``@node`` and optionally ``@params``.
    """

    query_text: str = ""
    patterns: tuple[SymbolPattern, ...] = ()
    container_types: frozenset[str] = frozenset()
    container_name_field: str = "name"
    body_node_types: frozenset[str] = frozenset({"block", "body", "class_body"})


@dataclass(frozen=True)
class LanguagePack:
    """All tree-sitter configuration for one language."""

    name: str
    grammar_package: str  # PyPI package ("tree-sitter-rust")
    grammar_module: str  # Python import ("tree_sitter_rust")
    # Non-standard loader function (e.g. "language_typescript")
    language_func: str | None = None

    extensions: frozenset[str] = field(default_factory=frozenset)

    symbol_config: SymbolQueryConfig | None = None

    # Call sites; captures @callee
    call_query: str | None = None
    # Type references; captures @type_ref
    uses_query: str | None = None
    # Implementations; captures @node (the implementing entity) and @interface
    implements_query: str | None = None

    # Attribute text marking a function as a test (Rust #[test], ...)
    test_attributes: tuple[str, ...] = ()


# =========================================================================
# RUST
# =========================================================================

_RUST_SYMBOLS = SymbolQueryConfig(
    query_text="""
        (function_item
            name: (identifier) @name
            parameters: (parameters) @params) @node
        (struct_item
            name: (type_identifier) @name) @node
        (enum_item
            name: (type_identifier) @name) @node
        (trait_item
            name: (type_identifier) @name) @node
        (impl_item
            type: (type_identifier) @name) @node
        (type_item
            name: (type_identifier) @name) @node
        (const_item
            name: (identifier) @name) @node
        (static_item
            name: (identifier) @name) @node
        (mod_item
            name: (identifier) @name) @node
        (macro_definition
            name: (identifier) @name) @node
    """,
    patterns=(
        SymbolPattern(kind="function", nested_kind="method"),
        SymbolPattern(kind="struct"),
        SymbolPattern(kind="enum"),
        SymbolPattern(kind="trait"),
        SymbolPattern(kind="impl"),
        SymbolPattern(kind="type_alias"),
        SymbolPattern(kind="constant"),
        SymbolPattern(kind="variable"),
        SymbolPattern(kind="module"),
        SymbolPattern(kind="macro"),
    ),
    container_types=frozenset({"impl_item", "trait_item"}),
    body_node_types=frozenset({"block", "declaration_list"}),
)

RUST_PACK = LanguagePack(
    name="rust",
    grammar_package="tree-sitter-rust",
    grammar_module="tree_sitter_rust",
    extensions=frozenset({"rs"}),
    symbol_config=_RUST_SYMBOLS,
    call_query="""
        (call_expression function: (identifier) @callee)
        (call_expression
            function: (field_expression
                field: (field_identifier) @callee))
        (call_expression
            function: (scoped_identifier
                name: (identifier) @callee))
        (macro_invocation macro: (identifier) @callee)
    """,
    uses_query="""
        (type_identifier) @type_ref
    """,
    implements_query="""
        (impl_item
            trait: (type_identifier) @interface) @node
    """,
    test_attributes=("#[test]", "#[tokio::test]"),
)


# =========================================================================
# PYTHON
# =========================================================================

_PYTHON_SYMBOLS = SymbolQueryConfig(
    query_text="""
        (function_definition
            name: (identifier) @name
            parameters: (parameters) @params) @node
        (class_definition
            name: (identifier) @name) @node
    """,
    patterns=(
        SymbolPattern(kind="function", nested_kind="method"),
        SymbolPattern(kind="class"),
    ),
    container_types=frozenset({"class_definition"}),
    body_node_types=frozenset({"block"}),
)

PYTHON_PACK = LanguagePack(
    name="python",
    grammar_package="tree-sitter-python",
    grammar_module="tree_sitter_python",
    extensions=frozenset({"py", "pyi"}),
    symbol_config=_PYTHON_SYMBOLS,
    call_query="""
        (call function: (identifier) @callee)
        (call function: (attribute attribute: (identifier) @callee))
    """,
    implements_query="""
        (class_definition
            superclasses: (argument_list (identifier) @interface)) @node
    """,
)


# =========================================================================
# JAVASCRIPT
# =========================================================================

_JAVASCRIPT_SYMBOLS = SymbolQueryConfig(
    query_text="""
        (function_declaration
            name: (identifier) @name
            parameters: (formal_parameters) @params) @node
        (generator_function_declaration
            name: (identifier) @name
            parameters: (formal_parameters) @params) @node
        (class_declaration
            name: (identifier) @name) @node
        (method_definition
            name: (property_identifier) @name
            parameters: (formal_parameters) @params) @node
    """,
    patterns=(
        SymbolPattern(kind="function"),
        SymbolPattern(kind="function"),
        SymbolPattern(kind="class"),
        SymbolPattern(kind="method"),
    ),
    container_types=frozenset({"class_declaration"}),
    body_node_types=frozenset({"statement_block", "class_body"}),
)

_JS_CALLS = """
    (call_expression function: (identifier) @callee)
    (call_expression
        function: (member_expression
            property: (property_identifier) @callee))
    (new_expression constructor: (identifier) @callee)
"""

JAVASCRIPT_PACK = LanguagePack(
    name="javascript",
    grammar_package="tree-sitter-javascript",
    grammar_module="tree_sitter_javascript",
    extensions=frozenset({"js", "jsx", "mjs", "cjs"}),
    symbol_config=_JAVASCRIPT_SYMBOLS,
    call_query=_JS_CALLS,
    implements_query="""
        (class_declaration
            (class_heritage (identifier) @interface)) @node
    """,
)


# =========================================================================
# TYPESCRIPT
# =========================================================================

_TYPESCRIPT_SYMBOLS = SymbolQueryConfig(
    query_text="""
        (function_declaration
            name: (identifier) @name
            parameters: (formal_parameters) @params) @node
        (generator_function_declaration
            name: (identifier) @name
            parameters: (formal_parameters) @params) @node
        (class_declaration
            name: (type_identifier) @name) @node
        (method_definition
            name: (property_identifier) @name
            parameters: (formal_parameters) @params) @node
        (interface_declaration
            name: (type_identifier) @name) @node
        (type_alias_declaration
            name: (type_identifier) @name) @node
        (enum_declaration
            name: (identifier) @name) @node
    """,
    patterns=(
        SymbolPattern(kind="function"),
        SymbolPattern(kind="function"),
        SymbolPattern(kind="class"),
        SymbolPattern(kind="method"),
        SymbolPattern(kind="interface"),
        SymbolPattern(kind="type_alias"),
        SymbolPattern(kind="enum"),
    ),
    container_types=frozenset({"class_declaration"}),
    body_node_types=frozenset({"statement_block", "class_body"}),
)

_TS_IMPLEMENTS = """
    (class_declaration
        (class_heritage
            (implements_clause (type_identifier) @interface))) @node
    (class_declaration
        (class_heritage
            (extends_clause value: (identifier) @interface))) @node
"""

TYPESCRIPT_PACK = LanguagePack(
    name="typescript",
    grammar_package="tree-sitter-typescript",
    grammar_module="tree_sitter_typescript",
    language_func="language_typescript",
    extensions=frozenset({"ts", "mts", "cts"}),
    symbol_config=_TYPESCRIPT_SYMBOLS,
    call_query=_JS_CALLS,
    uses_query="""
        (type_identifier) @type_ref
    """,
    implements_query=_TS_IMPLEMENTS,
)

TSX_PACK = LanguagePack(
    name="tsx",
    grammar_package="tree-sitter-typescript",
    grammar_module="tree_sitter_typescript",
    language_func="language_tsx",
    extensions=frozenset({"tsx"}),
    symbol_config=_TYPESCRIPT_SYMBOLS,
    call_query=_JS_CALLS,
    uses_query="""
        (type_identifier) @type_ref
    """,
    implements_query=_TS_IMPLEMENTS,
)


# =========================================================================
# GO
# =========================================================================

_GO_SYMBOLS = SymbolQueryConfig(
    query_text="""
        (function_declaration
            name: (identifier) @name
            parameters: (parameter_list) @params) @node
        (method_declaration
            name: (field_identifier) @name
            parameters: (parameter_list) @params) @node
        (type_declaration
            (type_spec
                name: (type_identifier) @name) @node)
    """,
    patterns=(
        SymbolPattern(kind="function"),
        SymbolPattern(kind="method"),
        SymbolPattern(kind="type"),
    ),
)

GO_PACK = LanguagePack(
    name="go",
    grammar_package="tree-sitter-go",
    grammar_module="tree_sitter_go",
    extensions=frozenset({"go"}),
    symbol_config=_GO_SYMBOLS,
    call_query="""
        (call_expression function: (identifier) @callee)
        (call_expression
            function: (selector_expression
                field: (field_identifier) @callee))
    """,
    uses_query="""
        (type_identifier) @type_ref
    """,
)


# =========================================================================
# Registry
# =========================================================================

_ALL_PACKS: tuple[LanguagePack, ...] = (
    RUST_PACK,
    PYTHON_PACK,
    JAVASCRIPT_PACK,
    TYPESCRIPT_PACK,
    TSX_PACK,
    GO_PACK,
)

PACKS: dict[str, LanguagePack] = {pack.name: pack for pack in _ALL_PACKS}

_EXT_TO_PACK: dict[str, LanguagePack] = {}
for _pack in _ALL_PACKS:
    for _ext in _pack.extensions:
        _EXT_TO_PACK[_ext] = _pack


def get_pack(name: str) -> LanguagePack | None:
    """Get a LanguagePack by language name."""
    return PACKS.get(name)


def get_pack_for_ext(ext: str) -> LanguagePack | None:
    """Get a LanguagePack for a file extension (without leading dot)."""
    return _EXT_TO_PACK.get(ext.lower())


def get_pack_for_path(path: str | Path) -> LanguagePack | None:
    return get_pack_for_ext(Path(path).suffix.lstrip("."))
