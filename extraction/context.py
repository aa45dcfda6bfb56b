"""
Per-entity context construction.

File identity (module, relative path, file name) is resolved once per file;
``build_context`` then combines it with the span-dependent text slices for
each entity.
"""

import logging
import os
from dataclasses import dataclass
from typing import Optional, Sequence

from extraction.errors import TraversalError
from extraction.models import Context
from extraction.spans import slice_span

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FileIdentity:
    """Identity fields shared by every entity of one file."""

    module: Optional[str]
    file_path: str
    file_name: str


def resolve_file_identity(scan_root: str, file_path: str) -> FileIdentity:
    """Resolve a file's identity relative to the scan root.

    Args:
        scan_root: Root directory of the scan.
        file_path: Path of a file discovered under ``scan_root``.

    Returns:
        FileIdentity whose ``module`` is the last segment of the file's
        directory relative to the root, or None for files at the root.

    Raises:
        TraversalError: If ``file_path`` is not located under ``scan_root``.

    Example:
        >>> resolve_file_identity("/repo", "/repo/src/lib.rs").module
        'src'
    """
    root = os.path.abspath(scan_root)
    path = os.path.abspath(file_path)

    try:
        relative_path = os.path.relpath(path, root)
    except ValueError as e:
        raise TraversalError(f"Cannot express {path} relative to {root}: {e}") from e

    if (
        os.path.isabs(relative_path)
        or relative_path == os.curdir
        or relative_path == os.pardir
        or relative_path.startswith(os.pardir + os.sep)
    ):
        raise TraversalError(f"File {path} is not under scan root {root}")

    module = os.path.basename(os.path.dirname(relative_path)) or None

    return FileIdentity(
        module=module,
        file_path=relative_path.replace(os.sep, "/"),
        file_name=os.path.basename(path),
    )


def build_context(
    identity: FileIdentity,
    lines: Sequence[str],
    line_from: int,
    line_to: int,
    enclosing_type: Optional[str] = None,
) -> Context:
    """Build the context of one entity.

    Args:
        identity: Identity of the file the entity belongs to.
        lines: Physical lines of the file.
        line_from: First line of the entity span (1-indexed, inclusive).
        line_to: Last line of the entity span (1-indexed, inclusive).
        enclosing_type: Implementation block subject, for methods only.

    Returns:
        A Context carrying the file identity and the three text slices.

    Raises:
        SpanError: If the span is out of bounds for ``lines``.
    """
    snippet, before_text, after_text = slice_span(lines, line_from, line_to)
    return Context(
        module=identity.module,
        file_path=identity.file_path,
        file_name=identity.file_name,
        enclosing_type=enclosing_type,
        snippet=snippet,
        before_text=before_text,
        after_text=after_text,
    )
