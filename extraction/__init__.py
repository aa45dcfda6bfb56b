"""
Extraction Engine

Tree-sitter-based Rust source code parser and entity extractor.
Extracts functions, structs, enums and impl methods together with their
doc comments and surrounding source context.
"""

from extraction.errors import (
    ExtractionError,
    FileExtractionError,
    SourceReadError,
    SourceParseError,
    TraversalError,
    SpanError,
)
from extraction.models import (
    CodeEntity,
    Context,
    Declaration,
    DeclarationKind,
    EntityKind,
    FileExtractionResult,
)
from extraction.source import SourceFile, read_source_file, split_lines
from extraction.parser import create_parser, parse_bytes, count_error_nodes
from extraction.declarations import declarations_from_tree
from extraction.spans import slice_span
from extraction.context import FileIdentity, build_context, resolve_file_identity
from extraction.traversal import (
    extract_entities_from_declarations,
    extract_entities_from_tree,
)
from extraction.extractor import (
    extract_file,
    extract_directory,
    extract_to_dict_list,
    discover_rust_files,
    partition_entities,
    iter_ordered_entities,
    ExtractionStats,
)
from extraction.emitter import emit_results, serialize_entity, write_jsonl

__all__ = [
    # Errors
    "ExtractionError",
    "FileExtractionError",
    "SourceReadError",
    "SourceParseError",
    "TraversalError",
    "SpanError",
    # Data models
    "CodeEntity",
    "Context",
    "Declaration",
    "DeclarationKind",
    "EntityKind",
    "FileExtractionResult",
    "ExtractionStats",
    # Source and parsing
    "SourceFile",
    "read_source_file",
    "split_lines",
    "create_parser",
    "parse_bytes",
    "count_error_nodes",
    "declarations_from_tree",
    # Span and context
    "slice_span",
    "FileIdentity",
    "build_context",
    "resolve_file_identity",
    # Classification
    "extract_entities_from_declarations",
    "extract_entities_from_tree",
    # High-level orchestration
    "extract_file",
    "extract_directory",
    "extract_to_dict_list",
    "discover_rust_files",
    "partition_entities",
    "iter_ordered_entities",
    # Emission
    "emit_results",
    "serialize_entity",
    "write_jsonl",
]
