"""
JSON-lines emission of extracted entities.

Each entity is written as one JSON object per line. Structs and enums are
written before functions and methods; there is no wrapping array and no
trailing summary.
"""

import json
import logging
from typing import Iterable, TextIO

from extraction.extractor import iter_ordered_entities
from extraction.models import CodeEntity, FileExtractionResult

logger = logging.getLogger(__name__)


def serialize_entity(entity: CodeEntity) -> str:
    """Serialize one entity as a single JSON line (without the newline)."""
    return json.dumps(entity.to_dict(), ensure_ascii=False)


def write_jsonl(entities: Iterable[CodeEntity], stream: TextIO) -> int:
    """Write entities to a stream, one JSON object per line.

    Args:
        entities: Entities in emission order.
        stream: Writable text stream.

    Returns:
        Number of lines written.
    """
    lines_written = 0
    for entity in entities:
        stream.write(serialize_entity(entity) + "\n")
        lines_written += 1
    return lines_written


def emit_results(results: Iterable[FileExtractionResult], stream: TextIO) -> int:
    """Write every entity of the given results, non-callables first.

    Args:
        results: Per-file results in discovery order.
        stream: Writable text stream.

    Returns:
        Number of lines written.
    """
    lines_written = write_jsonl(iter_ordered_entities(results), stream)
    stream.flush()
    logger.info("Wrote %d records", lines_written)
    return lines_written
