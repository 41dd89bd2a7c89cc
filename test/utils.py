"""
Tests for the internal helpers (Unset sentinel, coalesce, rename, mirror).

This module verifies:
- Singleton identity, falsy semantics and finality of `Unset`.
- coalesce() only replaces the sentinel.
- rename() in function and decorator forms.
- mirror() hands out read-only views of builtin containers.
"""
import copy
import pickle
import unittest
from unittest import TestCase

from pennant.utils import *


class UnsetTest(TestCase):
    """
    Test suite for the `Unset` sentinel.
    """

    def testSingleton(self) -> None:
        """
        The constructor returns the exported instance on every call.
        """
        self.assertIs(UnsetType(), Unset)
        self.assertIs(UnsetType(), UnsetType())

    def testFalsy(self) -> None:
        self.assertFalse(Unset)
        self.assertNotEqual(Unset, None)
        self.assertNotEqual(Unset, False)  # noqa: E712

    def testRepr(self) -> None:
        self.assertEqual(repr(Unset), "Unset")

    def testUnion(self) -> None:
        """
        `str | Unset` builds a union usable with isinstance().
        """
        self.assertIsInstance(Unset, str | Unset)
        self.assertIsInstance("name", str | Unset)
        self.assertNotIsInstance(3, Unset | str)

    def testCopyAndPicklePreserveSingleton(self) -> None:
        self.assertIs(copy.copy(Unset), Unset)
        self.assertIs(copy.deepcopy(Unset), Unset)
        self.assertIs(pickle.loads(pickle.dumps(Unset)), Unset)

    def testFinalClass(self) -> None:
        with self.assertRaises(TypeError):
            type("Sentinel", (UnsetType,), {})


class CoalesceTest(TestCase):

    def testReplacesOnlyUnset(self) -> None:
        self.assertEqual(coalesce(Unset, "fallback"), "fallback")
        self.assertEqual(coalesce("name", "fallback"), "name")
        self.assertIsNone(coalesce(None, "fallback"))
        self.assertEqual(coalesce(0, 5), 0)
        self.assertEqual(coalesce("", "x"), "")

    def testDefaultIsNone(self) -> None:
        self.assertIsNone(coalesce(Unset))


class RenameTest(TestCase):

    def testFunctionForm(self) -> None:
        def function():
            pass

        self.assertIs(rename(function, "renamed"), function)
        self.assertEqual(function.__name__, "renamed")
        self.assertEqual(function.__qualname__, "renamed")

    def testDecoratorForm(self) -> None:
        @rename("declared")
        def function():
            pass

        self.assertEqual(function.__name__, "declared")

    def testBadArguments(self) -> None:
        with self.assertRaises(TypeError):
            rename(42, "name")
        with self.assertRaises(TypeError):
            rename(lambda: None, 42)
        with self.assertRaises(TypeError):
            rename(42)
        with self.assertRaises(TypeError):
            rename()
        with self.assertRaises(TypeError):
            rename("name")(42)


class MirrorTest(TestCase):

    class Holder:
        def __init__(self, value):
            self._value = value

        value = mirror("value")

    def testListsBecomeTuples(self) -> None:
        self.assertEqual(self.Holder(["a", "b"]).value, ("a", "b"))

    def testDictsBecomeReadOnly(self) -> None:
        view = self.Holder({"a": 1}).value
        self.assertEqual(view["a"], 1)
        with self.assertRaises(TypeError):
            view["b"] = 2

    def testSetsBecomeFrozen(self) -> None:
        self.assertIsInstance(self.Holder({1, 2}).value, frozenset)

    def testOtherObjectsPassThrough(self) -> None:
        class Listing(list):
            pass

        listing = Listing()
        self.assertIs(self.Holder(listing).value, listing)
        self.assertEqual(self.Holder(3).value, 3)

    def testReadOnly(self) -> None:
        with self.assertRaises(AttributeError):
            self.Holder(1).value = 2

    def testNameMustBeString(self) -> None:
        with self.assertRaises(TypeError):
            mirror(1)


if __name__ == '__main__':
    unittest.main()
