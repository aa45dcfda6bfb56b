"""
Unit tests for declarations.py

Tests the tree-sitter to Declaration adapter: kinds, spans, attached doc
comments, signature rendering and impl block members.
"""

import unittest
from extraction.declarations import (
    declarations_from_tree,
    is_outer_doc_comment,
)
from extraction.models import DeclarationKind
from extraction.parser import parse_bytes


def _declarations(source: str):
    return declarations_from_tree(parse_bytes(source.encode("utf-8")))


class TestDeclarationKinds(unittest.TestCase):
    """Test mapping of item nodes to declaration kinds."""

    def test_kinds_in_source_order(self):
        source = """use std::fmt;

const LIMIT: usize = 3;

fn free() {}

struct S;

enum E { A }

trait T {}

impl S {}
"""
        kinds = [d.kind for d in _declarations(source)]
        self.assertEqual(
            kinds,
            [
                DeclarationKind.OTHER,
                DeclarationKind.OTHER,
                DeclarationKind.FUNCTION,
                DeclarationKind.STRUCT,
                DeclarationKind.ENUM,
                DeclarationKind.OTHER,
                DeclarationKind.IMPL,
            ],
        )

    def test_comments_and_attributes_are_not_declarations(self):
        source = """// plain comment
/// doc comment
#[derive(Debug)]
struct S;
"""
        declarations = _declarations(source)
        self.assertEqual(len(declarations), 1)
        self.assertEqual(declarations[0].name, "S")

    def test_empty_source(self):
        self.assertEqual(_declarations(""), [])


class TestDeclarationSpans(unittest.TestCase):
    """Test start/end/name lines."""

    def test_struct_span_includes_attributes(self):
        source = """use std::fmt;

/// A point.
#[derive(Debug)]
struct P {
    x: i32,
}
"""
        (_, point) = _declarations(source)
        self.assertEqual(point.start_line, 3)
        self.assertEqual(point.name_line, 5)
        self.assertEqual(point.end_line, 7)

    def test_function_lines(self):
        source = """#[inline]
pub fn
double(x: i32) -> i32 {
    x * 2
}
"""
        (function,) = _declarations(source)
        self.assertEqual(function.start_line, 1)
        self.assertEqual(function.name_line, 3)
        self.assertEqual(function.body_end_line, 5)
        self.assertEqual(function.end_line, 5)

    def test_plain_comment_not_part_of_span(self):
        source = """// not attached
struct S;
"""
        (struct,) = _declarations(source)
        self.assertEqual(struct.start_line, 2)

    def test_attributes_of_previous_item_not_attached(self):
        source = """fn a() {}
struct S;
"""
        (_, struct) = _declarations(source)
        self.assertEqual(struct.start_line, 2)


class TestDocComments(unittest.TestCase):
    """Test doc comment detection and extraction."""

    def test_line_doc(self):
        (function,) = _declarations("/// Adds numbers.\nfn add() {}\n")
        self.assertEqual(function.doc, " Adds numbers.")

    def test_first_doc_line_only(self):
        (struct,) = _declarations("/// First.\n/// Second.\nstruct S;\n")
        self.assertEqual(struct.doc, " First.")

    def test_block_doc(self):
        (struct,) = _declarations("/** Block doc */\nstruct B;\n")
        self.assertEqual(struct.doc, " Block doc ")

    def test_doc_attribute(self):
        (struct,) = _declarations('#[doc = "Attr doc"]\nstruct D;\n')
        self.assertEqual(struct.doc, "Attr doc")

    def test_blank_first_doc_line_skipped(self):
        (function,) = _declarations("///\n/// Adds numbers.\nfn add() {}\n")
        self.assertEqual(function.doc, " Adds numbers.")

    def test_only_blank_doc_lines_is_none(self):
        (function,) = _declarations("///\n///\nfn f() {}\n")
        self.assertIsNone(function.doc)

    def test_doc_before_other_attribute(self):
        (struct,) = _declarations("/// Doc.\n#[derive(Clone)]\nstruct C;\n")
        self.assertEqual(struct.doc, " Doc.")
        self.assertEqual(struct.start_line, 1)

    def test_plain_comment_is_not_doc(self):
        (function,) = _declarations("// plain\nfn f() {}\n")
        self.assertIsNone(function.doc)

    def test_four_slashes_is_not_doc(self):
        (function,) = _declarations("//// separator\nfn f() {}\n")
        self.assertIsNone(function.doc)

    def test_no_doc(self):
        (function,) = _declarations("fn f() {}\n")
        self.assertIsNone(function.doc)

    def test_is_outer_doc_comment_on_nodes(self):
        tree = parse_bytes(b"/// outer\n//! inner\n// plain\n/* block */\nfn f() {}\n")
        flags = [
            is_outer_doc_comment(child)
            for child in tree.root_node.named_children
            if child.type != "function_item"
        ]
        self.assertEqual(flags, [True, False, False, False])


class TestSignatures(unittest.TestCase):
    """Test signature rendering."""

    def test_function_signature_excludes_body_and_visibility(self):
        (function,) = _declarations("pub fn add(a: i32, b: i32) -> i32 {\n    a + b\n}\n")
        self.assertEqual(function.signature, "fn add ( a : i32 , b : i32 ) -> i32")

    def test_function_signature_keeps_qualifiers(self):
        (function,) = _declarations("pub async fn fetch() {}\n")
        self.assertTrue(function.signature.startswith("async fn fetch"))

    def test_signature_skips_comments(self):
        (function,) = _declarations("fn f(/* none */) {}\n")
        self.assertEqual(function.signature, "fn f ( )")

    def test_struct_signature_is_whole_declaration(self):
        source = """#[derive(Debug)]
pub struct P {
    x: i32,
}
"""
        (struct,) = _declarations(source)
        self.assertTrue(struct.signature.startswith("# [ derive"))
        self.assertIn("pub struct P {", struct.signature)
        self.assertIn("x : i32", struct.signature)
        self.assertTrue(struct.signature.endswith("}"))

    def test_string_literal_stays_one_token(self):
        (struct,) = _declarations('#[deprecated(note = "two words")]\nstruct S;\n')
        self.assertIn('"two words"', struct.signature)

    def test_doc_attributes_not_in_type_signature(self):
        source = '/// Line doc.\n#[doc = "Attr doc"]\n#[derive(Clone)]\nenum E { A }\n'
        (enum,) = _declarations(source)
        self.assertEqual(enum.signature, "# [ derive ( Clone ) ] enum E { A }")
        self.assertEqual(enum.doc, " Line doc.")


class TestImplBlocks(unittest.TestCase):
    """Test impl subjects and members."""

    def test_subject_and_members(self):
        source = """impl S {
    const X: i32 = 1;

    /// Makes one.
    #[inline]
    pub fn new() -> Self {
        S
    }

    fn get(&self) -> i32 { 1 }
}
"""
        (block,) = _declarations(source)
        self.assertEqual(block.kind, DeclarationKind.IMPL)
        self.assertEqual(block.subject, "S")
        self.assertIsNone(block.name)

        kinds = [member.kind for member in block.members]
        self.assertEqual(
            kinds,
            [DeclarationKind.OTHER, DeclarationKind.FUNCTION, DeclarationKind.FUNCTION],
        )

        new = block.members[1]
        self.assertEqual(new.name, "new")
        self.assertEqual(new.start_line, 4)
        self.assertEqual(new.name_line, 6)
        self.assertEqual(new.end_line, 8)
        self.assertEqual(new.doc, " Makes one.")
        self.assertEqual(new.signature, "fn new ( ) -> Self")

        get = block.members[2]
        self.assertEqual(get.start_line, 10)
        self.assertIsNone(get.doc)

    def test_generic_subject_as_written(self):
        (block,) = _declarations("impl<T: Clone> Wrapper<T> {\n    fn get(&self) {}\n}\n")
        self.assertEqual(block.subject, "Wrapper<T>")

    def test_trait_impl_subject_is_self_type(self):
        source = """impl fmt::Display for S {
    fn fmt(&self, f: &mut fmt::Formatter) -> fmt::Result { Ok(()) }
}
"""
        (block,) = _declarations(source)
        self.assertEqual(block.subject, "S")
        self.assertEqual(block.members[0].name, "fmt")


if __name__ == "__main__":
    unittest.main()
