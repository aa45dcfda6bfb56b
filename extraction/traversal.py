"""
Entity classification and extraction logic.

This module maps Declarations to CodeEntity records: free functions, structs
and enums at the top level, and one Method record per function inside an
``impl`` block. Every other declaration kind is ignored.
"""

import logging
from typing import List, Sequence
from tree_sitter import Tree

from extraction.config import (
    DEFAULT_FUNCTION_SPAN,
    FUNCTION_SPAN_NAME,
    FUNCTION_SPAN_POLICIES,
)
from extraction.context import FileIdentity, build_context
from extraction.declarations import declarations_from_tree
from extraction.models import CodeEntity, Declaration, DeclarationKind, EntityKind

logger = logging.getLogger(__name__)

_TYPE_KINDS = {
    DeclarationKind.STRUCT: EntityKind.STRUCT,
    DeclarationKind.ENUM: EntityKind.ENUM,
}


def _function_span(declaration: Declaration, function_span: str) -> tuple:
    """Span of a free function under the given policy.

    The "name" policy starts at the identifier line and ends with the body,
    so leading attributes and doc comments fall into ``before_text``.
    """
    if function_span == FUNCTION_SPAN_NAME:
        return declaration.name_line, declaration.body_end_line
    return declaration.start_line, declaration.end_line


def extract_function_entity(
    declaration: Declaration,
    lines: Sequence[str],
    identity: FileIdentity,
    function_span: str = DEFAULT_FUNCTION_SPAN,
) -> CodeEntity:
    """Build a Function entity from a free function declaration.

    Args:
        declaration: A FUNCTION declaration.
        lines: Physical lines of the file.
        identity: Identity of the file.
        function_span: Span policy, "name" or "declaration".

    Returns:
        The Function entity.
    """
    line_from, line_to = _function_span(declaration, function_span)
    return CodeEntity(
        name=declaration.name,
        signature=declaration.signature,
        kind=EntityKind.FUNCTION,
        doc=declaration.doc,
        name_line=declaration.name_line,
        line_from=line_from,
        line_to=line_to,
        context=build_context(identity, lines, line_from, line_to),
    )


def extract_type_entity(
    declaration: Declaration,
    lines: Sequence[str],
    identity: FileIdentity,
) -> CodeEntity:
    """Build a Struct or Enum entity spanning the whole declaration."""
    return CodeEntity(
        name=declaration.name,
        signature=declaration.signature,
        kind=_TYPE_KINDS[declaration.kind],
        doc=declaration.doc,
        name_line=declaration.name_line,
        line_from=declaration.start_line,
        line_to=declaration.end_line,
        context=build_context(
            identity, lines, declaration.start_line, declaration.end_line
        ),
    )


def extract_impl_methods(
    declaration: Declaration,
    lines: Sequence[str],
    identity: FileIdentity,
) -> List[CodeEntity]:
    """Build one Method entity per function member of an ``impl`` block.

    Methods always span their full declaration, leading attributes included.
    Associated consts, types and macro invocations are skipped.

    Args:
        declaration: An IMPL declaration.
        lines: Physical lines of the file.
        identity: Identity of the file.

    Returns:
        Method entities in member order.
    """
    enclosing_type = declaration.subject
    if not enclosing_type:
        logger.debug(f"Skipping impl block without subject at line {declaration.start_line}")
        return []

    methods = []
    for member in declaration.members:
        if member.kind != DeclarationKind.FUNCTION or not member.name:
            continue
        methods.append(
            CodeEntity(
                name=member.name,
                signature=member.signature,
                kind=EntityKind.METHOD,
                doc=member.doc,
                name_line=member.name_line,
                line_from=member.start_line,
                line_to=member.end_line,
                context=build_context(
                    identity,
                    lines,
                    member.start_line,
                    member.end_line,
                    enclosing_type=enclosing_type,
                ),
            )
        )
    return methods


def classify_declaration(
    declaration: Declaration,
    lines: Sequence[str],
    identity: FileIdentity,
    function_span: str = DEFAULT_FUNCTION_SPAN,
) -> List[CodeEntity]:
    """Classify one top-level declaration into zero or more entities.

    Args:
        declaration: A top-level declaration.
        lines: Physical lines of the file.
        identity: Identity of the file.
        function_span: Span policy for free functions.

    Returns:
        A single Function/Struct/Enum entity, the Methods of an ``impl``
        block, or an empty list for anything else.

    Raises:
        SpanError: If a declaration span does not fit ``lines``.
    """
    if declaration.kind == DeclarationKind.IMPL:
        return extract_impl_methods(declaration, lines, identity)

    if declaration.kind == DeclarationKind.OTHER:
        return []

    if not declaration.name:
        logger.debug(
            f"Skipping anonymous {declaration.kind.value} at line {declaration.start_line}"
        )
        return []

    if declaration.kind == DeclarationKind.FUNCTION:
        return [extract_function_entity(declaration, lines, identity, function_span)]

    return [extract_type_entity(declaration, lines, identity)]


def extract_entities_from_declarations(
    declarations: Sequence[Declaration],
    lines: Sequence[str],
    identity: FileIdentity,
    function_span: str = DEFAULT_FUNCTION_SPAN,
) -> List[CodeEntity]:
    """Extract all entities from a file's top-level declarations.

    Args:
        declarations: Top-level declarations in source order.
        lines: Physical lines of the file.
        identity: Identity of the file.
        function_span: Span policy for free functions.

    Returns:
        Entities in declaration order.

    Raises:
        ValueError: If ``function_span`` is not a known policy.
        SpanError: If a declaration span does not fit ``lines``.
    """
    if function_span not in FUNCTION_SPAN_POLICIES:
        raise ValueError(
            f"Unknown function span policy {function_span!r}; "
            f"expected one of {FUNCTION_SPAN_POLICIES}"
        )

    entities = []
    for declaration in declarations:
        entities.extend(classify_declaration(declaration, lines, identity, function_span))
    return entities


def extract_entities_from_tree(
    tree: Tree,
    lines: Sequence[str],
    identity: FileIdentity,
    function_span: str = DEFAULT_FUNCTION_SPAN,
) -> List[CodeEntity]:
    """Extract all entities from a parsed Rust AST.

    This is the main entry point for entity extraction.

    Args:
        tree: The parsed AST tree.
        lines: Physical lines of the parsed source.
        identity: Identity of the file.
        function_span: Span policy for free functions.

    Returns:
        List of all extracted entities.
    """
    declarations = declarations_from_tree(tree)
    entities = extract_entities_from_declarations(declarations, lines, identity, function_span)
    logger.debug(f"Extracted {len(entities)} entities from {identity.file_path}")
    return entities
