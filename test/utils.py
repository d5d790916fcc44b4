"""
Tests for the flagset utilities.

This module verifies semantic guarantees of the internal helpers:
- The `Unset` sentinel: singleton identity, falsy semantics, copy/pickle identity, finality.
- coalesce(): only Unset is replaced, other falsy values survive.
- rename(): both the direct and the decorator forms.
- mirror(): read-only properties returning immutable views.
- dashed() / kebab(): command-line spellings of fields and class names.
"""
import copy
import pickle
import unittest
from types import MappingProxyType
from unittest import TestCase

from flagset.utils import *


class UnsetTest(TestCase):
    """
    Test suite for the `Unset` sentinel.

    This suite asserts that:
    - UnsetType() always returns the same instance (singleton).
    - The sentinel is falsy but not equal to other falsy values.
    - Copy/deepcopy/pickle round-trips preserve identity.
    - The type is final and cannot be subclassed.
    """

    def testSingleton(self) -> None:
        """
        The constructor returns the exported sentinel on every call.
        """
        self.assertIs(UnsetType(), Unset)
        self.assertIs(UnsetType(), UnsetType())

    def testFalsely(self) -> None:
        """
        The sentinel is falsy, yet distinct from None and False.
        """
        self.assertFalse(bool(Unset))
        self.assertNotEqual(Unset, None)
        self.assertNotEqual(Unset, False)  # noqa: E712

    def testRepr(self) -> None:
        """
        __repr__() is the literal string 'Unset'.
        """
        self.assertEqual(repr(Unset), "Unset")

    def testCopyDeepcopyPreserveSingleton(self) -> None:
        """
        copy() and deepcopy() preserve the identity of the singleton.
        """
        self.assertIs(copy.copy(Unset), Unset)
        self.assertIs(copy.deepcopy(Unset), Unset)

    def testPickleRoundTrip(self) -> None:
        """
        Pickle round-trips preserve the identity of the singleton.
        """
        self.assertIs(pickle.loads(pickle.dumps(Unset)), Unset)

    def testFinalClass(self) -> None:
        """
        The class is final: attempts to subclass must fail with TypeError.
        """
        with self.assertRaises(TypeError):
            type("UnsetType", (UnsetType,), {})

    def testNotATypeOperand(self) -> None:
        """
        The sentinel is a value, not a type: it takes no part in `X | Y` unions.
        """
        with self.assertRaises(TypeError):
            str | Unset
        with self.assertRaises(TypeError):
            Unset | int


class CoalesceTest(TestCase):
    """coalesce() replaces Unset and nothing else."""

    def testUnsetReplaced(self) -> None:
        self.assertEqual(coalesce(Unset, "fallback"), "fallback")
        self.assertIsNone(coalesce(Unset))

    def testFalsyValuesPreserved(self) -> None:
        for value in (None, 0, "", False, ()):
            with self.subTest(value=value):
                self.assertIs(coalesce(value, "fallback"), value)


class RenameTest(TestCase):
    """rename() assigns __name__ and __qualname__."""

    def testDirectForm(self) -> None:
        def function():
            pass

        self.assertIs(rename(function, "renamed"), function)
        self.assertEqual(function.__name__, "renamed")
        self.assertEqual(function.__qualname__, "renamed")

    def testDecoratorForm(self) -> None:
        @rename("__repr__")
        def function(self):
            pass

        self.assertEqual(function.__name__, "__repr__")

    def testInvalidArguments(self) -> None:
        with self.assertRaises(TypeError):
            rename(42, "name")
        with self.assertRaises(TypeError):
            rename(lambda: None, 42)
        with self.assertRaises(TypeError):
            rename()
        with self.assertRaises(TypeError):
            rename("name")(42)


class MirrorTest(TestCase):
    """mirror() exposes private fields through read-only, immutable views."""

    class Holder:
        items = mirror("items")
        mapping = mirror("mapping")
        tags = mirror("tags")
        label = mirror("label")

        def __init__(self):
            self._items = [1, 2]
            self._mapping = {"key": "value"}
            self._tags = {"a"}
            self._label = "text"

    def testImmutableViews(self) -> None:
        holder = self.Holder()
        self.assertEqual(holder.items, (1, 2))
        self.assertIsInstance(holder.mapping, MappingProxyType)
        self.assertIsInstance(holder.tags, frozenset)
        self.assertEqual(holder.label, "text")

    def testReadOnly(self) -> None:
        with self.assertRaises(AttributeError):
            self.Holder().items = ()

    def testPropertyName(self) -> None:
        self.assertEqual(self.Holder.items.fget.__name__, "items")

    def testNameMustBeString(self) -> None:
        with self.assertRaises(TypeError):
            mirror(42)


class NamingTest(TestCase):
    """Command-line spellings of Python names."""

    def testDashed(self) -> None:
        self.assertEqual(dashed("dry_run"), "dry-run")
        self.assertEqual(dashed("force"), "force")

    def testKebab(self) -> None:
        self.assertEqual(kebab("DryRun"), "dry-run")
        self.assertEqual(kebab("Add"), "add")
        self.assertEqual(kebab("Run_all"), "run-all")


if __name__ == '__main__':
    unittest.main()
