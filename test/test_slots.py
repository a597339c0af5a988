"""
Slot behavioral tests (plain and masked writes, declaration defaults).

Conventions
- Test method names follow CamelCase per project convention.
"""

import unittest
from unittest import TestCase

from argscope import Registry, Slot


class TestSlot(TestCase):
    """Direct Slot writes."""

    def testDefaultValueIsNone(self):
        self.assertIsNone(Slot().value)

    def testUnmaskedAssignStoresBoolean(self):
        slot = Slot(7)
        slot.assign(True)
        self.assertIs(slot.value, True)
        slot.assign(0)
        self.assertIs(slot.value, False)

    def testMaskedAssignSetsOnlyMaskBits(self):
        slot = Slot(0b01)
        slot.assign(True, 0b10)
        self.assertEqual(slot.value, 0b11)

    def testMaskedAssignClearsOnlyMaskBits(self):
        slot = Slot(0b111)
        slot.assign(False, 0b010)
        self.assertEqual(slot.value, 0b101)

    def testMaskedAssignTreatsNoneAsZero(self):
        slot = Slot()
        slot.assign(True, 0b100)
        self.assertEqual(slot.value, 0b100)

    def testBooleanMaskIsRejected(self):
        with self.assertRaises(TypeError):
            Slot(0).assign(True, True)

    def testRepr(self):
        self.assertEqual(repr(Slot(3)), "Slot(3)")


class TestDeclarationDefaults(TestCase):
    """Slots receive their defaults when declared."""

    def setUp(self):
        self.registry = Registry()
        self.registry.init("prog")

    def testDeclarationReturnsGivenSlot(self):
        slot = Slot()
        self.assertIs(self.registry.add_param_int(0, "count", slot=slot), slot)

    def testDeclarationCreatesSlotWhenOmitted(self):
        self.assertIsInstance(self.registry.add_param_flag(0, "v"), Slot)

    def testFlagDefaultsToFalse(self):
        self.assertIs(self.registry.add_param_flag(0, "v").value, False)

    def testScalarDefaultsAreWritten(self):
        self.assertIs(self.registry.add_param_bool(0, "color", default=True).value, True)
        self.assertEqual(self.registry.add_param_int(0, "count", default=3).value, 3)
        self.assertEqual(self.registry.add_param_string(0, "name", default="x").value, "x")
        self.assertIsNone(self.registry.add_param_string(0, "other").value)

    def testMaskedDefaultPreservesOtherBits(self):
        slot = Slot(0b101)
        self.registry.add_param_flag(0, "a", slot=slot, mask=0b001)
        self.registry.add_param_bool(0, "bee", default=True, slot=slot, mask=0b010)
        self.assertEqual(slot.value, 0b110)

    def testArgumentSlotIsUntouched(self):
        slot = Slot("untouched")
        self.registry.add_arg_string(0, "path", slot=slot)
        self.assertEqual(slot.value, "untouched")


if __name__ == '__main__':
    unittest.main()
