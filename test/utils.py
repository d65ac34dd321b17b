"""
Tests for the internal helpers (sentinel, coalesce, wrap).

Scope
- Unset sentinel semantics relied upon by every sanitizer.
- coalesce() only replaces Unset.
- wrap() line breaking, prefixes and whitespace normalization, as used by the
  usage renderer.

Conventions
- Test method names follow CamelCase per project convention.
"""
import unittest
from unittest import TestCase

from cmdtree.utils import *


class TestUnset(TestCase):

    def testSingleton(self):
        self.assertIs(UnsetType(), Unset)

    def testFalsyAndPrintable(self):
        self.assertFalse(Unset)
        self.assertEqual(repr(Unset), "Unset")

    def testUnionWithBuiltinTypes(self):
        self.assertIsInstance(Unset, str | Unset)
        self.assertIsInstance("text", str | Unset)
        self.assertNotIsInstance(3, str | Unset)

    def testFinal(self):
        with self.assertRaises(TypeError):
            class Derived(UnsetType):  # NOQA
                pass

    def testCoalesce(self):
        self.assertEqual(coalesce(Unset, "fallback"), "fallback")
        self.assertIsNone(coalesce(Unset))
        self.assertEqual(coalesce("", "fallback"), "")
        self.assertIsNone(coalesce(None, "fallback"))


class TestWrap(TestCase):

    def testShortTextFitsOnOneLine(self):
        self.assertEqual(wrap("hello", 70, "  "), "  hello\n")

    def testBreakAtLastSpaceThatFits(self):
        self.assertEqual(wrap("one two three", 9, "  "), "  one two\n  three\n")

    def testHardBreakWithoutSpaces(self):
        self.assertEqual(wrap("abcdefghij", 4), "abcd\nefgh\nij\n")

    def testHangingPrefixes(self):
        self.assertEqual(
            wrap("alpha beta gamma", 12, ["* ", "  "]),
            "* alpha beta\n  gamma\n",
        )

    def testLastPrefixRepeats(self):
        block = wrap("aa bb cc dd", 5, ["1 ", "2 "])
        self.assertEqual(block, "1 aa\n2 bb\n2 cc\n2 dd\n")

    def testWhitespaceIsCollapsed(self):
        self.assertEqual(wrap("  a \n\t b  ", 10), "a b\n")

    def testEveryLineFitsTheWidth(self):
        text = "lorem ipsum dolor sit amet consectetur adipiscing elit " * 6
        for line in wrap(text, 30, "    ").splitlines():
            self.assertLessEqual(len(line), 30)
            self.assertTrue(line.startswith("    "))

    def testLongWordFillsTheCurrentLine(self):
        self.assertEqual(wrap("aa bbbbbbbbbbbbb", 10), "aa bbbbbbb\nbbbbbb\n")

    def testEmptyTextKeepsOnePrefixedLine(self):
        self.assertEqual(wrap(" ", 10, "  "), "  \n")

    def testPrefixWiderThanWidthStillProgresses(self):
        block = wrap("abc", 2, "----")
        self.assertEqual(block, "----a\n----b\n----c\n")

    def testRejectsBadArguments(self):
        with self.assertRaises(TypeError):
            wrap(1, 10)
        with self.assertRaises(ValueError):
            wrap("text", 0)


if __name__ == "__main__":
    unittest.main()
