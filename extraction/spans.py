"""
Line span slicing.

Splits a file's lines around an inclusive 1-indexed span. Every output line is
newline-terminated, so ``before + snippet + after`` rebuilds the file.
"""

from typing import Sequence, Tuple

from extraction.errors import SpanError


def _join_lines(lines: Sequence[str]) -> str:
    return "".join(line + "\n" for line in lines)


def validate_span(line_count: int, line_from: int, line_to: int) -> None:
    """Check ``1 <= line_from <= line_to <= line_count``.

    Raises:
        SpanError: If the span does not fit the file.
    """
    if not 1 <= line_from <= line_to <= line_count:
        raise SpanError(
            f"Invalid span [{line_from}, {line_to}] for a file of {line_count} lines"
        )


def slice_span(
    lines: Sequence[str],
    line_from: int,
    line_to: int,
) -> Tuple[str, str, str]:
    """Slice lines into the span text and the text around it.

    Args:
        lines: Physical lines of the file, without terminators.
        line_from: First line of the span (1-indexed, inclusive).
        line_to: Last line of the span (1-indexed, inclusive).

    Returns:
        A tuple of (snippet, before_text, after_text).

    Raises:
        SpanError: If the span is out of bounds.

    Example:
        >>> slice_span(["a", "b", "c"], 2, 2)
        ('b\\n', 'a\\n', 'c\\n')
    """
    validate_span(len(lines), line_from, line_to)
    snippet = _join_lines(lines[line_from - 1:line_to])
    before_text = _join_lines(lines[:line_from - 1])
    after_text = _join_lines(lines[line_to:])
    return snippet, before_text, after_text
