"""
End-to-end tests for the rsextract command line.
"""

import json
import logging
import os
import tempfile
import unittest

import pytest

from core.structured_logging import _StructuredHandler
from run_extract import main, parse_args


@pytest.mark.integration
class TestCommandLine(unittest.TestCase):
    """Run ``main`` against a small crate on disk."""

    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.root = os.path.join(self._tmp.name, "crate")
        os.makedirs(os.path.join(self.root, "src", "geo"))
        with open(os.path.join(self.root, "src", "lib.rs"), "w") as f:
            f.write("pub fn run() {}\n\n/// A point.\npub struct Point { x: i32 }\n")
        with open(os.path.join(self.root, "src", "geo", "mod.rs"), "w") as f:
            f.write("pub enum Axis { X, Y }\n\nimpl Axis {\n    pub fn flip(&self) {}\n}\n")
        with open(os.path.join(self.root, "src", "bad.rs"), "w") as f:
            f.write("fn broken( {\n")
        self.output = os.path.join(self._tmp.name, "out", "entities.jsonl")

    def tearDown(self):
        root_logger = logging.getLogger()
        for handler in list(root_logger.handlers):
            if isinstance(handler, _StructuredHandler):
                root_logger.removeHandler(handler)
        self._tmp.cleanup()

    def _records(self):
        with open(self.output, encoding="utf-8") as f:
            return [json.loads(line) for line in f]

    def test_writes_jsonl_non_callables_first(self):
        exit_code = main([self.root, "--output", self.output])

        self.assertEqual(exit_code, 0)
        records = self._records()
        self.assertEqual(
            [(r["kind"], r["name"]) for r in records],
            [("Enum", "Axis"), ("Struct", "Point"), ("Method", "flip"), ("Function", "run")],
        )
        point = records[1]
        self.assertEqual(point["doc"], " A point.")
        self.assertEqual(point["context"]["module"], "src")
        self.assertEqual(point["context"]["file_path"], "src/lib.rs")
        self.assertIsNone(point["context"]["enclosing_type"])
        self.assertEqual(records[2]["context"]["enclosing_type"], "Axis")
        self.assertIsNone(records[3]["doc"])

    def test_parallel_output_identical(self):
        main([self.root, "--output", self.output])
        sequential = self._records()

        main([self.root, "--output", self.output, "--workers", "3"])
        self.assertEqual(self._records(), sequential)

    def test_report_dir(self):
        report_dir = os.path.join(self._tmp.name, "reports")

        exit_code = main([self.root, "--output", self.output, "--report-dir", report_dir])

        self.assertEqual(exit_code, 0)
        (name,) = os.listdir(report_dir)
        self.assertTrue(name.startswith("rsextract-"))
        with open(os.path.join(report_dir, name), encoding="utf-8") as f:
            report = json.load(f)
        self.assertEqual(report["status"], "partial")
        self.assertEqual(report["records_written"], 4)
        self.assertEqual(report["failures"][0]["file_path"], "src/bad.rs")
        self.assertEqual(report["failures"][0]["error_type"], "SourceParseError")

    def test_missing_scan_root(self):
        exit_code = main([os.path.join(self._tmp.name, "missing"), "--output", self.output])
        self.assertEqual(exit_code, 1)

    def test_invalid_workers(self):
        exit_code = main([self.root, "--output", self.output, "--workers", "0"])
        self.assertEqual(exit_code, 1)
        self.assertFalse(os.path.exists(self.output))


class TestParseArgs(unittest.TestCase):
    def test_defaults(self):
        args = parse_args(["src"])
        self.assertEqual(args.scan_root, "src")
        self.assertEqual(args.output, "-")
        self.assertIsNone(args.workers)
        self.assertIsNone(args.excluded_dirs)
        self.assertIsNone(args.tolerate_syntax_errors)

    def test_repeated_exclude_dir(self):
        args = parse_args(["src", "--exclude-dir", "target", "--exclude-dir", "vendor"])
        self.assertEqual(args.excluded_dirs, ["target", "vendor"])

    def test_unknown_function_span_is_usage_error(self):
        with self.assertRaises(SystemExit) as ctx:
            parse_args(["src", "--function-span", "body"])
        self.assertEqual(ctx.exception.code, 2)


if __name__ == "__main__":
    unittest.main()
