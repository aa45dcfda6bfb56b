"""Tests for file identity resolution and per-entity context building."""

import os
import tempfile
import unittest

from extraction.context import FileIdentity, build_context, resolve_file_identity
from extraction.errors import SpanError, TraversalError


class TestResolveFileIdentity(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.root = self._tmp.name

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def test_file_at_root_has_no_module(self) -> None:
        identity = resolve_file_identity(self.root, os.path.join(self.root, "lib.rs"))
        self.assertIsNone(identity.module)
        self.assertEqual(identity.file_path, "lib.rs")
        self.assertEqual(identity.file_name, "lib.rs")

    def test_module_is_immediate_directory(self) -> None:
        path = os.path.join(self.root, "segment", "index", "hnsw.rs")
        identity = resolve_file_identity(self.root, path)
        self.assertEqual(identity.module, "index")
        self.assertEqual(identity.file_path, "segment/index/hnsw.rs")
        self.assertEqual(identity.file_name, "hnsw.rs")

    def test_relative_scan_root_is_accepted(self) -> None:
        cwd = os.getcwd()
        os.chdir(self.root)
        try:
            identity = resolve_file_identity(".", os.path.join("src", "main.rs"))
        finally:
            os.chdir(cwd)
        self.assertEqual(identity.module, "src")
        self.assertEqual(identity.file_path, "src/main.rs")

    def test_file_outside_root_raises(self) -> None:
        outside = os.path.join(os.path.dirname(self.root), "elsewhere", "x.rs")
        with self.assertRaises(TraversalError):
            resolve_file_identity(self.root, outside)

    def test_root_itself_raises(self) -> None:
        with self.assertRaises(TraversalError):
            resolve_file_identity(self.root, self.root)


class TestBuildContext(unittest.TestCase):
    def setUp(self) -> None:
        self.identity = FileIdentity(module="src", file_path="src/lib.rs", file_name="lib.rs")
        self.lines = ["impl S {", "    fn m() {}", "}"]

    def test_identity_fields_copied(self) -> None:
        context = build_context(self.identity, self.lines, 2, 2, enclosing_type="S")
        self.assertEqual(context.module, "src")
        self.assertEqual(context.file_path, "src/lib.rs")
        self.assertEqual(context.file_name, "lib.rs")
        self.assertEqual(context.enclosing_type, "S")

    def test_slices(self) -> None:
        context = build_context(self.identity, self.lines, 2, 2)
        self.assertEqual(context.snippet, "    fn m() {}\n")
        self.assertEqual(context.before_text, "impl S {\n")
        self.assertEqual(context.after_text, "}\n")
        self.assertIsNone(context.enclosing_type)

    def test_out_of_bounds_span_raises(self) -> None:
        with self.assertRaises(SpanError):
            build_context(self.identity, self.lines, 2, 9)


if __name__ == "__main__":
    unittest.main()
