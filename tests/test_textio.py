"""
Unit tests for the matrix text format.
Tests formatting, parsing, escaping and custom parse rules.
"""

import unittest
import os
import sys

# Add the parent directory to the path so we can import the mathq module
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from mathq import (Matrix, IntMatrix, DoubleMatrix, ParseToString, ParseFromString,
                   matrix_from_string, matrix_to_string)
from mathq.errors import MatrixParseError
from mathq.textio import escape, unescape


class TestFormatting(unittest.TestCase):
    """Test cases for writing matrices as text."""

    def test_numeric_matrix_is_unquoted(self):
        self.assertEqual(str(IntMatrix([[1, 2], [3, 4]])), "[[1, 2]\n [3, 4]]")

    def test_single_row(self):
        self.assertEqual(str(IntMatrix([88, 77, 66, 55])), "[[88, 77, 66, 55]]")

    def test_generic_matrix_is_quoted_and_escaped(self):
        matrix = Matrix([["a b", "c,d"], ["e\nf", "g"]])
        self.assertEqual(str(matrix), '[["a\\ b", "c\\,d"]\n ["e\\nf", "g"]]')

    def test_custom_format_rule(self):
        zipped = IntMatrix([[1, 2]]).zip(Matrix([["x", "y"]])).to_matrix()
        rule = ParseToString().add(tuple, lambda pair: f"<{pair[0]}-{pair[1]}>")
        self.assertEqual(zipped.to_string(rule), '[["<1-x>", "<2-y>"]]')
        self.assertEqual(matrix_to_string(zipped, rule), zipped.to_string(rule))


class TestParsing(unittest.TestCase):
    """Test cases for reading matrices from text."""

    def test_parse_strings(self):
        text = '[["sfe", "wrf"]\n ["rhj", "sgd"]\n ["dfg", "qac"]]'
        matrix = Matrix.from_string(text)
        self.assertEqual(matrix.shape, (3, 2))
        self.assertEqual(matrix[2, 1], "qac")

    def test_parse_numeric(self):
        matrix = IntMatrix.from_string("[[1, 2]\n [3, 4]]")
        self.assertIsInstance(matrix, IntMatrix)
        self.assertEqual(matrix.to_list(), [[1, 2], [3, 4]])

        doubles = DoubleMatrix.from_string("[[0.5, -2.25]]")
        self.assertEqual(doubles.to_list(), [[0.5, -2.25]])

    def test_round_trip_with_special_characters(self):
        matrix = Matrix([["a, b", "x\ny"], ["back\\slash", "\t\r\f"]])
        self.assertEqual(Matrix.from_string(str(matrix)).to_list(), matrix.to_list())

    def test_custom_parse_rule(self):
        rule = ParseFromString().add(int, lambda text: int(text, 16))
        matrix = matrix_from_string("[[ff, 10]]", IntMatrix, rule=rule)
        self.assertEqual(matrix.to_list(), [[255, 16]])

    def test_element_type_override(self):
        rule = ParseFromString().add(int, int)
        matrix = Matrix.from_string('[["1", "2"]]', rule=rule, element_type=int)
        self.assertEqual(matrix.to_list(), [[1, 2]])

    def test_invalid_strings(self):
        for text in ["", "[]", "[1, 2]", "[[1, 2]\n [3]]", "[[a, b]]", "[[1, 2]"]:
            with self.subTest(text=text):
                with self.assertRaises(MatrixParseError):
                    IntMatrix.from_string(text)

    def test_generic_elements_must_be_quoted(self):
        with self.assertRaises(ValueError):
            Matrix.from_string("[[abc]]")


class TestEscaping(unittest.TestCase):
    """Test cases for escape and unescape."""

    def test_escape(self):
        self.assertEqual(escape("a b,c\n\\"), "a\\ b\\,c\\n\\\\")

    def test_unescape_inverts_escape(self):
        for text in ["plain", " lead", "trail ", "\\\\", "\r\n\t\f", "a, b, c"]:
            with self.subTest(text=text):
                self.assertEqual(unescape(escape(text)), text)

    def test_trailing_backslash_is_dropped(self):
        self.assertEqual(unescape("abc\\"), "abc")


if __name__ == '__main__':
    unittest.main()
