#!/usr/bin/env python3
"""
Command-line entry point for Rust entity extraction.

Walks a crate or workspace directory, extracts functions, structs, enums and
impl methods, and writes one JSON record per line. Structs and enums are
written first, then functions and methods. Logs go to stderr.

Usage:
    python run_extract.py /path/to/crate/src > entities.jsonl
    python run_extract.py ./src --workers 4 --output out/entities.jsonl
    python run_extract.py ./src --function-span declaration --report-dir out/run_reports
"""

import argparse
import logging
import os
import sys
import time
from typing import List, Optional, TextIO

from core.run_artifacts import build_run_report, write_run_report
from core.settings import ConfigValidationError, ExtractorSettings, resolve_settings
from core.structured_logging import configure_structured_logging, phase_scope, set_run_id
from extraction.config import FUNCTION_SPAN_POLICIES
from extraction.emitter import emit_results
from extraction.errors import ExtractionError
from extraction.extractor import extract_directory

logger = logging.getLogger(__name__)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command-line arguments.

    Returns:
        Parsed argument namespace.
    """
    parser = argparse.ArgumentParser(
        prog="rsextract",
        description="Extract Rust functions, structs, enums and methods as JSON lines.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  rsextract ./src > entities.jsonl\n"
            "  rsextract ./src --workers 4 --output out/entities.jsonl\n"
        ),
    )

    parser.add_argument(
        "scan_root",
        help="Directory to scan recursively for .rs files.",
    )
    parser.add_argument(
        "--output",
        default="-",
        help="Output JSONL path, or '-' for stdout. Default: stdout",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="YAML settings file. Default: $RSEXTRACT_CONFIG if set.",
    )
    parser.add_argument(
        "--strict-config",
        action="store_true",
        default=None,
        help="Treat unreadable config files and unknown keys as errors.",
    )
    parser.add_argument(
        "--workers",
        type=int,
        default=None,
        help="Number of files extracted concurrently. Default: 1",
    )
    parser.add_argument(
        "--exclude-dir",
        action="append",
        default=None,
        dest="excluded_dirs",
        metavar="NAME",
        help="Directory name to skip (repeatable). Replaces the default 'target'.",
    )
    parser.add_argument(
        "--function-span",
        choices=FUNCTION_SPAN_POLICIES,
        default=None,
        help="Where free-function spans start: identifier line or first attribute.",
    )
    parser.add_argument(
        "--tolerate-syntax-errors",
        action="store_true",
        default=None,
        help="Extract from files with syntax errors instead of skipping them.",
    )
    parser.add_argument(
        "--report-dir",
        default=None,
        help="If set, write a JSON run report into this directory.",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        help="Log level (DEBUG, INFO, WARNING, ERROR). Default: INFO",
    )

    return parser.parse_args(argv)


def _open_output(path: str) -> TextIO:
    if path == "-":
        return sys.stdout
    parent = os.path.dirname(os.path.abspath(path))
    os.makedirs(parent, exist_ok=True)
    return open(path, "w", encoding="utf-8")


def run(scan_root: str, settings: ExtractorSettings, output: str, report_dir: Optional[str], run_id: str) -> int:
    """Extract entities under ``scan_root`` and write them to ``output``.

    Returns:
        Number of records written.

    Raises:
        FileNotFoundError: If scan_root does not exist.
        ExtractionError: On traversal or span invariant violations.
    """
    scan_root = os.path.abspath(scan_root)
    logger.info("Scan root : %s", scan_root)
    logger.info("Settings  : %s", settings.to_dict())

    t0 = time.time()
    with phase_scope("extract"):
        results, stats = extract_directory(
            scan_root,
            workers=settings.workers,
            function_span=settings.function_span,
            tolerate_syntax_errors=settings.tolerate_syntax_errors,
            excluded_dirs=settings.excluded_dirs,
            extensions=settings.extensions,
            skip_hidden_dirs=settings.skip_hidden_dirs,
        )

    with phase_scope("emit"):
        stream = _open_output(output)
        try:
            lines_written = emit_results(results, stream)
        finally:
            if stream is not sys.stdout:
                stream.close()

    logger.info(
        "Extraction completed in %.2fs: %d records, %s",
        time.time() - t0,
        lines_written,
        stats,
    )

    if report_dir:
        failures = [
            {
                "file_path": result.file_path,
                "error_type": type(result.error).__name__,
                "reason": str(result.error),
            }
            for result in results
            if not result.ok
        ]
        report = build_run_report(
            scan_root=scan_root,
            stats=stats.to_dict(),
            failures=failures,
            settings=settings.to_dict(),
            lines_written=lines_written,
        )
        path = write_run_report(report, run_id=run_id, output_dir=report_dir)
        logger.info("Run report written to %s", path)

    return lines_written


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point. Returns the process exit code."""
    args = parse_args(argv)

    configure_structured_logging(logging.INFO)
    run_id = set_run_id()

    try:
        settings = resolve_settings(
            config_path=args.config,
            strict=args.strict_config,
            overrides={
                "workers": args.workers,
                "excluded_dirs": args.excluded_dirs,
                "function_span": args.function_span,
                "tolerate_syntax_errors": args.tolerate_syntax_errors,
                "log_level": args.log_level,
            },
        )
    except ConfigValidationError as e:
        logger.error(f"Invalid configuration: {e}")
        return 1

    configure_structured_logging(settings.log_level)

    try:
        run(args.scan_root, settings, args.output, args.report_dir, run_id)
    except FileNotFoundError as e:
        logger.error(f"File error: {e}")
        return 1
    except ExtractionError as e:
        logger.error(f"Extraction aborted: {e}", exc_info=True)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
