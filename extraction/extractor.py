"""
High-level orchestrator for Rust entity extraction.

This module provides the main entry points for extracting entities from
single files or entire directory trees. Each file is extracted independently
into a ``FileExtractionResult``; a separate reduction step merges the results
in discovery order.
"""

import concurrent.futures
import logging
import os
from itertools import chain
from typing import Collection, Iterable, Iterator, List, Optional, Dict, Any, Tuple

from extraction.config import (
    RUST_EXTENSIONS,
    DEFAULT_EXCLUDED_DIRS,
    DEFAULT_FUNCTION_SPAN,
    FUNCTION_SPAN_POLICIES,
    DEFAULT_SKIP_HIDDEN_DIRS,
    DEFAULT_TOLERATE_SYNTAX_ERRORS,
    DEFAULT_WORKERS,
)
from extraction.context import resolve_file_identity
from extraction.errors import (
    FileExtractionError,
    SourceParseError,
    SpanError,
    TraversalError,
)
from extraction.models import CodeEntity, FileExtractionResult
from extraction.parser import parse_bytes, count_error_nodes
from extraction.source import read_source_file
from extraction.traversal import extract_entities_from_tree

logger = logging.getLogger(__name__)


class ExtractionStats:
    """Statistics for an extraction operation."""

    def __init__(self):
        self.files_processed = 0
        self.files_failed = 0
        self.entities_extracted = 0
        self.parse_errors = 0

    def record(self, result: FileExtractionResult) -> None:
        """Fold one file result into the counters."""
        self.parse_errors += result.parse_error_count
        if result.ok:
            self.files_processed += 1
            self.entities_extracted += len(result.entities)
        else:
            self.files_failed += 1

    def to_dict(self) -> Dict[str, int]:
        """Convert stats to dictionary."""
        return {
            "files_processed": self.files_processed,
            "files_failed": self.files_failed,
            "entities_extracted": self.entities_extracted,
            "parse_errors": self.parse_errors,
        }

    def __str__(self) -> str:
        """String representation of stats."""
        return (
            f"ExtractionStats(processed={self.files_processed}, "
            f"failed={self.files_failed}, entities={self.entities_extracted}, "
            f"parse_errors={self.parse_errors})"
        )


def _extract_file_result(
    file_path: str,
    scan_root: str,
    function_span: str,
    tolerate_syntax_errors: bool,
) -> FileExtractionResult:
    """Extract entities from a single file, isolating per-file failures."""
    identity = resolve_file_identity(scan_root, file_path)
    relative_path = identity.file_path

    logger.debug("Extracting entities from %s", relative_path)

    parse_error_count = 0
    try:
        source = read_source_file(file_path)
        tree = parse_bytes(source.source_bytes)
        parse_error_count = count_error_nodes(tree)

        if tree.root_node.has_error:
            if not tolerate_syntax_errors:
                raise SourceParseError(
                    f"{relative_path} contains syntax errors "
                    f"({parse_error_count} error nodes)",
                    error_count=parse_error_count,
                )
            logger.warning(
                "File %s contains syntax errors (%d error nodes); extracting anyway",
                relative_path,
                parse_error_count,
            )
    except FileExtractionError as e:
        logger.warning("Skipping %s: %s", relative_path, e)
        return FileExtractionResult.failure(relative_path, e, parse_error_count)

    entities = extract_entities_from_tree(
        tree=tree,
        lines=source.lines,
        identity=identity,
        function_span=function_span,
    )
    logger.debug("Extracted %d entities from %s", len(entities), relative_path)

    return FileExtractionResult(
        file_path=relative_path,
        entities=tuple(entities),
        parse_error_count=parse_error_count,
    )


def _check_rust_file(file_path: str, extensions: Collection[str]) -> None:
    if not os.path.isfile(file_path):
        raise FileNotFoundError(f"File not found: {file_path}")

    ext = os.path.splitext(file_path)[1]
    if ext not in extensions:
        raise ValueError(
            f"File {file_path} is not a Rust source file. "
            f"Expected one of: {sorted(extensions)}"
        )


def extract_file(
    file_path: str,
    scan_root: Optional[str] = None,
    function_span: str = DEFAULT_FUNCTION_SPAN,
    tolerate_syntax_errors: bool = DEFAULT_TOLERATE_SYNTAX_ERRORS,
    extensions: Collection[str] = RUST_EXTENSIONS,
) -> FileExtractionResult:
    """Extract all entities from a single Rust source file.

    Read and parse failures are returned as a failed result rather than
    raised, so callers can keep going with other files.

    Args:
        file_path: Absolute or relative path to the Rust file.
        scan_root: Root the file identity is computed against.
            If None, uses the file's parent directory.
        function_span: Span policy for free functions ("name" or "declaration").
        tolerate_syntax_errors: Extract from files with syntax errors
            instead of skipping them.
        extensions: Accepted file extensions.

    Returns:
        The file's extraction result.

    Raises:
        FileNotFoundError: If the file does not exist.
        ValueError: If the file is not a Rust source file.
        TraversalError: If the file is not under ``scan_root``.

    Example:
        >>> result = extract_file("src/lib.rs", "/path/to/crate")
        >>> for entity in result.entities:
        ...     print(entity.kind.value, entity.name)
    """
    file_path = os.path.abspath(file_path)
    _check_rust_file(file_path, extensions)

    if scan_root is None:
        scan_root = os.path.dirname(file_path)

    return _extract_file_result(
        file_path=file_path,
        scan_root=scan_root,
        function_span=function_span,
        tolerate_syntax_errors=tolerate_syntax_errors,
    )


def discover_rust_files(
    directory: str,
    excluded_dirs: Collection[str] = DEFAULT_EXCLUDED_DIRS,
    extensions: Collection[str] = RUST_EXTENSIONS,
    skip_hidden_dirs: bool = DEFAULT_SKIP_HIDDEN_DIRS,
) -> List[str]:
    """Recursively discover all Rust source files in a directory.

    Args:
        directory: Root directory to search.
        excluded_dirs: Directory names never descended into (build output).
        extensions: File extensions to collect.
        skip_hidden_dirs: Whether to skip directories starting with '.'.

    Returns:
        Sorted list of absolute paths to Rust files.

    Example:
        >>> files = discover_rust_files("/path/to/crate")
        >>> len(files)
        42
    """
    rust_files = []
    directory = os.path.abspath(directory)

    logger.info("Discovering Rust files in %s", directory)

    for root, dirs, files in os.walk(directory):
        dirs[:] = sorted(
            d for d in dirs
            if d not in excluded_dirs and not (skip_hidden_dirs and d.startswith("."))
        )

        for file in files:
            ext = os.path.splitext(file)[1]
            path = os.path.join(root, file)
            if ext in extensions and os.path.isfile(path):
                rust_files.append(path)

    logger.info("Found %d Rust files", len(rust_files))
    return sorted(rust_files)


def extract_directory(
    directory: str,
    scan_root: Optional[str] = None,
    workers: int = DEFAULT_WORKERS,
    function_span: str = DEFAULT_FUNCTION_SPAN,
    tolerate_syntax_errors: bool = DEFAULT_TOLERATE_SYNTAX_ERRORS,
    excluded_dirs: Collection[str] = DEFAULT_EXCLUDED_DIRS,
    extensions: Collection[str] = RUST_EXTENSIONS,
    skip_hidden_dirs: bool = DEFAULT_SKIP_HIDDEN_DIRS,
) -> Tuple[List[FileExtractionResult], ExtractionStats]:
    """Extract entities from all Rust files in a directory tree.

    Args:
        directory: Root directory to process.
        scan_root: Root for computing relative paths and modules.
                   If None, uses the directory parameter.
        workers: Number of files extracted concurrently. 1 runs sequentially.
        function_span: Span policy for free functions.
        tolerate_syntax_errors: Extract from files with syntax errors
            instead of skipping them.
        excluded_dirs: Directory names never descended into.
        extensions: File extensions to collect.
        skip_hidden_dirs: Whether to skip directories starting with '.'.

    Returns:
        A tuple of (results, stats) where:
        - results: One FileExtractionResult per discovered file, in discovery order
        - stats: ExtractionStats object with processing statistics

    Raises:
        FileNotFoundError: If directory does not exist.
        ValueError: If workers is less than 1.
        TraversalError: If a discovered file is not under ``scan_root``.
        SpanError: If an entity span does not fit its file.

    Example:
        >>> results, stats = extract_directory("/path/to/crate", workers=4)
        >>> print(f"Extracted {stats.entities_extracted} entities from {stats.files_processed} files")
    """
    directory = os.path.abspath(directory)

    if not os.path.isdir(directory):
        raise FileNotFoundError(f"Directory not found: {directory}")

    if workers < 1:
        raise ValueError(f"workers must be at least 1, got {workers}")

    if function_span not in FUNCTION_SPAN_POLICIES:
        raise ValueError(
            f"Unknown function span policy {function_span!r}; "
            f"expected one of {FUNCTION_SPAN_POLICIES}"
        )

    # Use directory as scan_root if not specified
    if scan_root is None:
        scan_root = directory
    else:
        scan_root = os.path.abspath(scan_root)

    stats = ExtractionStats()

    rust_files = discover_rust_files(
        directory,
        excluded_dirs=excluded_dirs,
        extensions=extensions,
        skip_hidden_dirs=skip_hidden_dirs,
    )

    if not rust_files:
        logger.warning("No Rust files found in %s", directory)
        return [], stats

    logger.info(
        "Processing %d Rust files from %s with %d worker(s)",
        len(rust_files),
        directory,
        workers,
    )

    def run(file_path: str) -> FileExtractionResult:
        try:
            return _extract_file_result(
                file_path=file_path,
                scan_root=scan_root,
                function_span=function_span,
                tolerate_syntax_errors=tolerate_syntax_errors,
            )
        except (TraversalError, SpanError):
            raise
        except Exception as e:
            logger.error(f"Unexpected error processing {file_path}: {e}", exc_info=True)
            return FileExtractionResult.failure(
                os.path.relpath(file_path, scan_root).replace(os.sep, "/"),
                FileExtractionError(f"Unexpected error: {e}"),
            )

    if workers == 1:
        results = [run(file_path) for file_path in rust_files]
    else:
        results = _run_pool(run, rust_files, workers)

    for result in results:
        stats.record(result)

    logger.info("Extraction complete: %s", stats)
    return results, stats


def _run_pool(run, file_paths: List[str], workers: int) -> List[FileExtractionResult]:
    """Run ``run`` over files on a bounded thread pool, keeping input order."""
    results: List[Optional[FileExtractionResult]] = [None] * len(file_paths)
    with concurrent.futures.ThreadPoolExecutor(max_workers=workers) as executor:
        future_to_index = {
            executor.submit(run, file_path): index
            for index, file_path in enumerate(file_paths)
        }
        try:
            for future in concurrent.futures.as_completed(future_to_index):
                results[future_to_index[future]] = future.result()
        except BaseException:
            # Stop scheduling files that have not started yet
            for future in future_to_index:
                future.cancel()
            raise
    return results


def partition_entities(
    results: Iterable[FileExtractionResult],
) -> Tuple[List[CodeEntity], List[CodeEntity]]:
    """Split entities into non-callable (Struct, Enum) and callable (Function, Method).

    Args:
        results: Per-file results in the order they should be emitted.

    Returns:
        A tuple of (non_callable, callable), each in traversal order.
    """
    non_callable = []
    callable_ = []
    for result in results:
        for entity in result.entities:
            if entity.kind.is_callable:
                callable_.append(entity)
            else:
                non_callable.append(entity)
    return non_callable, callable_


def iter_ordered_entities(results: Iterable[FileExtractionResult]) -> Iterator[CodeEntity]:
    """Yield all non-callable entities, then all callable entities."""
    non_callable, callable_ = partition_entities(results)
    return chain(non_callable, callable_)


def extract_to_dict_list(
    source: str,
    scan_root: Optional[str] = None,
    **options: Any,
) -> List[Dict[str, Any]]:
    """Extract entities and return as a list of dictionaries.

    This is a convenience function that automatically detects whether
    the source is a file or directory and returns results in emission order
    (structs and enums first, then functions and methods), ready for JSON
    serialization.

    Args:
        source: Path to a file or directory.
        scan_root: Root for relative paths and modules.
        **options: Extra keyword arguments for ``extract_file`` or
            ``extract_directory``.

    Returns:
        List of entity dictionaries.

    Example:
        >>> entities = extract_to_dict_list("src/")
        >>> import json
        >>> json.dump(entities, open("entities.json", "w"), indent=2)
    """
    source = os.path.abspath(source)

    if os.path.isfile(source):
        results = [extract_file(source, scan_root, **options)]
    elif os.path.isdir(source):
        results, stats = extract_directory(source, scan_root, **options)
        logger.info("Extraction stats: %s", stats)
    else:
        raise FileNotFoundError(f"Source not found: {source}")

    return [entity.to_dict() for entity in iter_ordered_entities(results)]
