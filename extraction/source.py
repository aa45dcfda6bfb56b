"""
Source file reading and line splitting.

Lines are split on ``\\n`` only so that line numbers agree with the rows
tree-sitter reports; a single trailing ``\\r`` is dropped from each line.
"""

import logging
from dataclasses import dataclass
from typing import List, Tuple

from extraction.errors import SourceReadError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SourceFile:
    """Raw bytes of a source file together with its physical lines."""

    path: str
    source_bytes: bytes
    lines: Tuple[str, ...]

    @property
    def line_count(self) -> int:
        return len(self.lines)


def split_lines(text: str) -> List[str]:
    """Split text into physical lines.

    A trailing newline does not produce an extra empty line, but blank lines
    before it are kept.

    Example:
        >>> split_lines("a\\r\\n\\nb\\n")
        ['a', '', 'b']
    """
    if not text:
        return []
    lines = text.split("\n")
    if lines[-1] == "":
        lines.pop()
    return [line[:-1] if line.endswith("\r") else line for line in lines]


def read_source_file(file_path: str) -> SourceFile:
    """Read a source file from disk.

    Args:
        file_path: Path to the file.

    Returns:
        SourceFile with the raw bytes and decoded lines.

    Raises:
        SourceReadError: If the file cannot be read or is not valid UTF-8.
    """
    try:
        with open(file_path, "rb") as f:
            source_bytes = f.read()
    except OSError as e:
        raise SourceReadError(f"Cannot read {file_path}: {e}") from e

    try:
        text = source_bytes.decode("utf-8")
    except UnicodeDecodeError as e:
        raise SourceReadError(f"File {file_path} is not valid UTF-8: {e}") from e

    lines = split_lines(text)
    logger.debug("Read %d lines from %s", len(lines), file_path)
    return SourceFile(path=file_path, source_bytes=source_bytes, lines=tuple(lines))
