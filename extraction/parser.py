"""
Tree-sitter parser initialization and source parsing utilities.

This module provides functions to initialize the Rust parser and parse source.
"""

import logging
import tree_sitter_rust as tsrust
from tree_sitter import Language, Node, Parser, Tree

# Configure logging
logger = logging.getLogger(__name__)

# Module-level language constant
RUST_LANGUAGE = Language(tsrust.language())


def create_parser() -> Parser:
    """Create and configure a tree-sitter parser for Rust.

    Parsers are not shared between threads; each call returns a new one.

    Returns:
        A Parser instance configured with the Rust language.

    Example:
        >>> parser = create_parser()
        >>> tree = parser.parse(b"fn main() {}")
    """
    parser = Parser(RUST_LANGUAGE)
    logger.debug("Created tree-sitter Rust parser")
    return parser


def parse_bytes(source: bytes) -> Tree:
    """Parse raw bytes of Rust source code.

    Args:
        source: UTF-8 encoded bytes of Rust source code.

    Returns:
        A Tree object representing the parsed AST. Syntax errors do not raise;
        they appear as ERROR or MISSING nodes (see ``count_error_nodes``).

    Raises:
        TypeError: If source is not bytes.

    Example:
        >>> tree = parse_bytes(b"fn foo() {}")
        >>> tree.root_node.type
        'source_file'
    """
    if not isinstance(source, bytes):
        raise TypeError(f"Source must be bytes, got {type(source).__name__}")

    parser = create_parser()
    tree = parser.parse(source)

    logger.debug("Parsed %d bytes of Rust code", len(source))
    return tree


def count_error_nodes(tree: Tree) -> int:
    """Count ERROR and MISSING nodes in a parsed tree.

    Args:
        tree: The parsed AST.

    Returns:
        Number of syntax error nodes; 0 for a clean parse.
    """
    if not tree.root_node.has_error:
        return 0

    count = 0
    stack = [tree.root_node]
    while stack:
        node: Node = stack.pop()
        if node.type == "ERROR" or node.is_missing:
            count += 1
        if node.has_error:
            stack.extend(node.children)
    return count
