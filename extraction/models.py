"""
Data models for extracted Rust entities.
"""

from dataclasses import dataclass, asdict
from enum import Enum
from typing import Optional, Dict, Any, Tuple

from extraction.errors import FileExtractionError


class EntityKind(str, Enum):
    """Closed set of entity classifications."""

    FUNCTION = "Function"
    STRUCT = "Struct"
    ENUM = "Enum"
    METHOD = "Method"

    @property
    def is_callable(self) -> bool:
        return self in (EntityKind.FUNCTION, EntityKind.METHOD)


class DeclarationKind(str, Enum):
    """Kinds of declarations a syntax tree provider reports."""

    FUNCTION = "function"
    STRUCT = "struct"
    ENUM = "enum"
    IMPL = "impl"
    OTHER = "other"


@dataclass(frozen=True)
class Declaration:
    """Language-neutral view of one declaration in a parsed file.

    The entity classifier only consumes this shape, so any parser adapter that
    produces it can drive extraction.

    Attributes:
        kind: Declaration kind.
        name: Identifier, or None when the declaration has none.
        name_line: 1-indexed line of the identifier.
        start_line: 1-indexed first line, including leading attributes and doc comments.
        end_line: 1-indexed last line (closing delimiter).
        body_end_line: 1-indexed last line of the body, for callables.
        doc: Text of the first attached doc comment, or None.
        signature: Canonical rendering of the signature (callables) or the
            whole declaration (types).
        subject: Type an implementation block is for, as written.
        members: Member declarations of an implementation block.
    """

    kind: DeclarationKind
    name: Optional[str]
    name_line: int
    start_line: int
    end_line: int
    body_end_line: int
    doc: Optional[str] = None
    signature: str = ""
    subject: Optional[str] = None
    members: Tuple["Declaration", ...] = ()


@dataclass(frozen=True)
class Context:
    """Positional and textual metadata surrounding an entity.

    Attributes:
        module: Name of the file's immediate directory relative to the scan
            root, or None for files at the root.
        file_path: Path relative to the scan root, '/'-separated.
        file_name: Base name of the file.
        enclosing_type: Implementation block subject; only set for methods.
        snippet: Source lines of the entity span, each newline-terminated.
        before_text: Source lines before the span, each newline-terminated.
        after_text: Source lines after the span, each newline-terminated.
    """

    module: Optional[str]
    file_path: str
    file_name: str
    enclosing_type: Optional[str]
    snippet: str
    before_text: str
    after_text: str


@dataclass(frozen=True)
class CodeEntity:
    """One extracted Rust entity (function, struct, enum, or method)."""

    name: str
    signature: str
    kind: EntityKind
    doc: Optional[str]
    name_line: int
    line_from: int
    line_to: int
    context: Context

    def to_dict(self) -> Dict[str, Any]:
        """Convert the entity to a dictionary suitable for JSON serialization.

        Returns:
            Dictionary representation with ``kind`` as its string tag.
        """
        payload = asdict(self)
        payload["kind"] = self.kind.value
        return payload


@dataclass(frozen=True)
class FileExtractionResult:
    """Outcome of extracting a single file.

    A failed result never carries entities.
    """

    file_path: str
    entities: Tuple[CodeEntity, ...] = ()
    error: Optional[FileExtractionError] = None
    parse_error_count: int = 0

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def failure(
        cls,
        file_path: str,
        error: FileExtractionError,
        parse_error_count: int = 0,
    ) -> "FileExtractionResult":
        return cls(
            file_path=file_path,
            entities=(),
            error=error,
            parse_error_count=parse_error_count,
        )
