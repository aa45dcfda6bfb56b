"""
Exception hierarchy for Rust entity extraction.

Per-file errors (``FileExtractionError`` and subclasses) are isolated to the
offending file by the directory driver. ``TraversalError`` and ``SpanError``
indicate internal invariant violations and abort the run.
"""


class ExtractionError(Exception):
    """Base class for all extraction errors."""


class FileExtractionError(ExtractionError):
    """A single file could not be extracted; other files are unaffected."""


class SourceReadError(FileExtractionError):
    """The file could not be read or is not valid UTF-8."""


class SourceParseError(FileExtractionError):
    """The file contains syntax errors.

    Attributes:
        error_count: Number of ERROR/MISSING nodes in the parsed tree.
    """

    def __init__(self, message: str, error_count: int = 0):
        super().__init__(message)
        self.error_count = error_count


class TraversalError(ExtractionError):
    """A discovered file cannot be expressed relative to the scan root."""


class SpanError(ExtractionError, ValueError):
    """A line span falls outside the file it was computed for."""
