"""Source extraction: discovery, tree-sitter parsing and name resolution."""

from codegraft.extraction.ops import (
    ExtractionFailure,
    ExtractionResult,
    Extractor,
    StructuralParser,
    discover_files,
)
from codegraft.extraction.treesitter import (
    ParsedEntity,
    ParsedFile,
    ParsedRelationship,
    SyntaxIssue,
    TreeSitterParser,
)

__all__ = [
    "ExtractionFailure",
    "ExtractionResult",
    "Extractor",
    "ParsedEntity",
    "ParsedFile",
    "ParsedRelationship",
    "StructuralParser",
    "SyntaxIssue",
    "TreeSitterParser",
    "discover_files",
]
