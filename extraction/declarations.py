"""
Tree-sitter to Declaration adapter for Rust.

This module turns the top-level items of a parsed Rust file into
language-neutral ``Declaration`` values: kind, identifier, spans, attached
doc comment, signature rendering and, for ``impl`` blocks, the subject type
and member declarations.
"""

import logging
import re
from typing import Iterator, List, Optional
from tree_sitter import Node, Tree

from extraction.config import (
    FUNCTION_ITEM,
    STRUCT_ITEM,
    ENUM_ITEM,
    IMPL_ITEM,
    ATTRIBUTE_ITEM,
    COMMENT_TYPES,
    LINE_DOC_PREFIX,
    LINE_DOC_EXCLUDED_PREFIX,
    BLOCK_DOC_PREFIX,
    BLOCK_DOC_EXCLUDED_PREFIXES,
    BLOCK_COMMENT_SUFFIX,
    INNER_DOC_PREFIXES,
    ATOMIC_TOKEN_TYPES,
)
from extraction.models import Declaration, DeclarationKind

logger = logging.getLogger(__name__)
_SPACE_RE = re.compile(r"\s+")
_DOC_ATTRIBUTE_RE = re.compile(
    r'^#\s*\[\s*doc\s*=\s*"((?:[^"\\]|\\.)*)"\s*\]$',
    re.DOTALL,
)

_KIND_MAP = {
    FUNCTION_ITEM: DeclarationKind.FUNCTION,
    STRUCT_ITEM: DeclarationKind.STRUCT,
    ENUM_ITEM: DeclarationKind.ENUM,
    IMPL_ITEM: DeclarationKind.IMPL,
}

# Named nodes that decorate items rather than being items themselves
_NON_DECLARATION_TYPES = COMMENT_TYPES | {ATTRIBUTE_ITEM, "inner_attribute_item"}


def node_text(node: Node) -> str:
    """Decode the source text covered by a node."""
    return node.text.decode("utf-8") if node.text else ""


def is_outer_doc_comment(node: Node) -> bool:
    """Check if a comment node is an outer doc comment (``///`` or ``/** */``).

    Args:
        node: A tree-sitter node.

    Returns:
        True for outer doc comments; False for plain comments, inner doc
        comments (``//!``, ``/*!``) and any non-comment node.
    """
    if node.type not in COMMENT_TYPES:
        return False
    text = node_text(node)
    if text.startswith(LINE_DOC_PREFIX):
        return not text.startswith(LINE_DOC_EXCLUDED_PREFIX)
    if text.startswith(BLOCK_DOC_PREFIX):
        return not text.startswith(BLOCK_DOC_EXCLUDED_PREFIXES)
    return False


def doc_text(node: Node) -> Optional[str]:
    """Return the verbatim body of a doc comment or ``#[doc = "..."]`` attribute.

    The comment marker is removed; the body is otherwise untouched, apart from
    the line break some grammar versions include in line comments.

    Args:
        node: An attribute or comment node.

    Returns:
        The doc body, or None if the node is not documentation.
    """
    if is_outer_doc_comment(node):
        text = node_text(node)
        if text.startswith(LINE_DOC_PREFIX):
            return text[len(LINE_DOC_PREFIX):].rstrip("\r\n")
        body = text[len(BLOCK_DOC_PREFIX):]
        if body.endswith(BLOCK_COMMENT_SUFFIX):
            body = body[:-len(BLOCK_COMMENT_SUFFIX)]
        return body

    if node.type == ATTRIBUTE_ITEM:
        match = _DOC_ATTRIBUTE_RE.match(node_text(node).strip())
        if match:
            return match.group(1)

    return None


def get_leading_attributes(node: Node) -> List[Node]:
    """Collect attributes and doc comments attached before an item.

    Walks backward over siblings. Plain comments are skipped without being
    attached; any other node (including inner doc comments) ends the walk.

    Args:
        node: An item node.

    Returns:
        Attached attribute and doc comment nodes in source order.
    """
    attached = []
    sibling = node.prev_named_sibling
    while sibling is not None:
        if sibling.type == ATTRIBUTE_ITEM or is_outer_doc_comment(sibling):
            attached.append(sibling)
        elif sibling.type in COMMENT_TYPES:
            if node_text(sibling).startswith(INNER_DOC_PREFIXES):
                break
        else:
            break
        sibling = sibling.prev_named_sibling
    attached.reverse()
    return attached


def iter_tokens(node: Node) -> Iterator[str]:
    """Yield the token texts under a node, skipping comments."""
    if node.type in COMMENT_TYPES:
        return
    if node.child_count == 0 or node.type in ATOMIC_TOKEN_TYPES:
        text = node_text(node)
        if text:
            yield text
        return
    for child in node.children:
        yield from iter_tokens(child)


def render_tokens(nodes: List[Node]) -> str:
    """Render nodes as their tokens joined by single spaces."""
    tokens = []
    for node in nodes:
        tokens.extend(iter_tokens(node))
    return " ".join(tokens)


def render_function_signature(node: Node) -> str:
    """Render a function's signature: qualifiers through return type and where clause.

    Visibility and body are excluded.

    Example:
        ``pub fn add(a: i32) -> i32 { a }`` renders as ``fn add ( a : i32 ) -> i32``.
    """
    body = node.child_by_field_name("body")
    parts = []
    for child in node.children:
        if child.type == "visibility_modifier":
            continue
        if body is not None and child.start_byte >= body.start_byte:
            break
        parts.append(child)
    return render_tokens(parts)


def extract_impl_subject(node: Node) -> Optional[str]:
    """Extract the type an ``impl`` block is for, as written (generics included)."""
    type_node = node.child_by_field_name("type")
    if type_node is None:
        logger.debug(f"impl block at line {node.start_point.row + 1} has no subject type")
        return None
    return _SPACE_RE.sub(" ", node_text(type_node)).strip() or None


def node_to_declaration(node: Node) -> Optional[Declaration]:
    """Convert an item node into a Declaration.

    Args:
        node: A named item node (top level or inside an ``impl`` body).

    Returns:
        A Declaration, or None for attributes and comments.
    """
    if node.type in _NON_DECLARATION_TYPES:
        return None

    kind = _KIND_MAP.get(node.type, DeclarationKind.OTHER)
    attributes = get_leading_attributes(node)

    start_line = (attributes[0] if attributes else node).start_point.row + 1
    end_line = node.end_point.row + 1

    name_node = node.child_by_field_name("name")
    name = node_text(name_node) if name_node is not None else None
    name_line = (name_node or node).start_point.row + 1

    body = node.child_by_field_name("body")
    body_end_line = body.end_point.row + 1 if body is not None else end_line

    # First entry with a non-empty body; a bare "///" line carries no text
    doc = None
    for attribute in attributes:
        doc = doc_text(attribute)
        if doc:
            break

    signature = ""
    subject = None
    members = ()
    if kind == DeclarationKind.FUNCTION:
        signature = render_function_signature(node)
    elif kind in (DeclarationKind.STRUCT, DeclarationKind.ENUM):
        signature = render_tokens(
            [attribute for attribute in attributes if doc_text(attribute) is None] + [node]
        )
    elif kind == DeclarationKind.IMPL:
        subject = extract_impl_subject(node)
        if body is not None:
            members = tuple(declarations_from_children(body))

    return Declaration(
        kind=kind,
        name=name,
        name_line=name_line,
        start_line=start_line,
        end_line=end_line,
        body_end_line=body_end_line,
        doc=doc or None,
        signature=signature,
        subject=subject,
        members=members,
    )


def declarations_from_children(node: Node) -> Iterator[Declaration]:
    """Yield Declarations for the named children of a container node."""
    for child in node.named_children:
        declaration = node_to_declaration(child)
        if declaration is not None:
            yield declaration


def declarations_from_tree(tree: Tree) -> List[Declaration]:
    """Convert the top-level items of a parsed Rust file into Declarations.

    This is the syntax tree provider entry point.

    Args:
        tree: The parsed AST tree.

    Returns:
        Declarations in source order.
    """
    return list(declarations_from_children(tree.root_node))
