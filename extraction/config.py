"""
Configuration constants for Rust AST extraction.

Defines the tree-sitter node type strings used for entity extraction and the
defaults for file discovery and span policy.
"""

from typing import Set, Tuple

# Top-level item node types we classify
FUNCTION_ITEM: str = "function_item"
STRUCT_ITEM: str = "struct_item"
ENUM_ITEM: str = "enum_item"
IMPL_ITEM: str = "impl_item"

# Outer attribute node type (#[...]); inner attributes (#![...]) are not attached
ATTRIBUTE_ITEM: str = "attribute_item"

# Comment node types (includes //, ///, //!, /* */, /** */)
COMMENT_TYPES: Set[str] = {
    "line_comment",
    "block_comment",
}

# Outer doc comment markers and the longer prefixes that demote them to plain comments
LINE_DOC_PREFIX: str = "///"
LINE_DOC_EXCLUDED_PREFIX: str = "////"
BLOCK_DOC_PREFIX: str = "/**"
BLOCK_DOC_EXCLUDED_PREFIXES: Tuple[str, ...] = ("/***", "/**/")
BLOCK_COMMENT_SUFFIX: str = "*/"

# Inner doc comment markers belong to the enclosing module, not the next item
INNER_DOC_PREFIXES: Tuple[str, ...] = ("//!", "/*!")

# Nodes rendered as a single token in signature text
ATOMIC_TOKEN_TYPES: Set[str] = {
    "string_literal",
    "raw_string_literal",
    "char_literal",
    "lifetime",
}

# Rust file extensions
RUST_EXTENSIONS: Set[str] = {
    ".rs",
}

# Directory names treated as build output and never descended into
DEFAULT_EXCLUDED_DIRS: Set[str] = {
    "target",
}

# Function span policies:
#   "name"        -> span starts on the identifier line (leading attributes dropped)
#   "declaration" -> span starts at the first leading attribute, like every other kind
FUNCTION_SPAN_NAME: str = "name"
FUNCTION_SPAN_DECLARATION: str = "declaration"
FUNCTION_SPAN_POLICIES: Tuple[str, ...] = (FUNCTION_SPAN_NAME, FUNCTION_SPAN_DECLARATION)

# Extraction policy defaults
DEFAULT_FUNCTION_SPAN: str = FUNCTION_SPAN_NAME
DEFAULT_TOLERATE_SYNTAX_ERRORS: bool = False
DEFAULT_SKIP_HIDDEN_DIRS: bool = False
DEFAULT_WORKERS: int = 1
