"""Run report helpers for operational reporting of extraction runs."""

from __future__ import annotations

import json
import os
import tempfile
from datetime import datetime, timezone
from typing import Any, Iterable, Mapping


def build_run_report(
    scan_root: str,
    stats: Mapping[str, int],
    failures: Iterable[Mapping[str, str]],
    settings: Mapping[str, Any],
    lines_written: int,
) -> dict[str, Any]:
    """Assemble the summary of one extraction run.

    Args:
        scan_root: Absolute scan root.
        stats: Extraction counters.
        failures: One ``{"file_path", "error_type", "reason"}`` entry per skipped file.
        settings: Effective settings of the run.
        lines_written: Number of records emitted.
    """
    failure_list = sorted(
        (dict(failure) for failure in failures),
        key=lambda failure: failure["file_path"],
    )
    return {
        "status": "partial" if failure_list else "success",
        "scan_root": scan_root,
        "records_written": lines_written,
        "stats": dict(stats),
        "failures": failure_list,
        "settings": dict(settings),
    }


def write_run_report(
    report: dict[str, Any],
    run_id: str,
    output_dir: str = "output/run_reports",
) -> str:
    """Write a JSON run report atomically and return its path."""
    os.makedirs(output_dir, exist_ok=True)
    payload = dict(report)
    payload.setdefault("run_id", run_id)
    payload.setdefault("timestamp_utc", datetime.now(timezone.utc).isoformat())
    path = os.path.join(output_dir, f"rsextract-{run_id}.json")

    fd, tmp_path = tempfile.mkstemp(dir=output_dir, suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump(payload, f, indent=2, sort_keys=True)
        os.replace(tmp_path, path)
    except BaseException:
        if os.path.exists(tmp_path):
            os.unlink(tmp_path)
        raise
    return path
