"""
Registry behavioral tests (lifecycle, declaration invariants, views).

Scope
- Validate the Uninitialized → Declaring → Parsed lifecycle.
- Validate every declaration fault and the fault context it carries.
- Validate misuse errors (TypeError/ValueError) for malformed metadata.
- Validate the read-only views used by the renderers.

Conventions
- Test method names follow CamelCase per project convention.
- Registries run with shell=False so faults are raised, not printed.
"""

import unittest
from unittest import TestCase

from argscope import (
    Registry,
    ParseMode,
    State,
    Kind,
    Parameter,
    FaultCode,
    DeclarationError,
    NotInitializedError,
    AlreadyParsedError,
    InvalidNameError,
    ScopeReservedZeroError,
    DuplicateSubcommandError,
    UnknownScopeError,
    DuplicateNameError,
    UnknownTargetError,
)


class TestLifecycle(TestCase):
    """State transitions of the registry."""

    def testInitialState(self):
        registry = Registry()
        self.assertIs(registry.state, State.UNINITIALIZED)
        self.assertIsNone(registry.program)
        self.assertIsNone(registry.result)

    def testDeclareBeforeInitRaises(self):
        registry = Registry()
        with self.assertRaises(NotInitializedError) as context:
            registry.add_param_flag(0, "v")
        self.assertIs(context.exception.options["code"], FaultCode.NOT_INITIALIZED)

    def testParseBeforeInitRaises(self):
        with self.assertRaises(NotInitializedError):
            Registry().parse(["prog"])

    def testInitEntersDeclaring(self):
        registry = Registry()
        registry.init("prog", "1.2.3", "MIT", "does things", True)
        self.assertIs(registry.state, State.DECLARING)
        self.assertEqual(registry.program, "prog")
        self.assertEqual(registry.version, "1.2.3")
        self.assertEqual(registry.license, "MIT")
        self.assertEqual(registry.descr, "does things")
        self.assertTrue(registry.scope(0).unnamed)

    def testSecondInitRaises(self):
        registry = Registry()
        registry.init("prog")
        with self.assertRaises(TypeError):
            registry.init("prog")

    def testInitAfterParseRaises(self):
        registry = Registry()
        registry.init("prog")
        registry.parse(["prog"])
        with self.assertRaises(AlreadyParsedError):
            registry.init("prog")

    def testDeclareAfterParseRaises(self):
        registry = Registry()
        registry.init("prog")
        registry.parse(["prog"])
        self.assertIs(registry.state, State.PARSED)
        with self.assertRaises(AlreadyParsedError):
            registry.add_param_flag(0, "v")

    def testDeclarationsAreDroppedAfterParse(self):
        registry = Registry()
        registry.init("prog")
        registry.add_subcommand(1, "build")
        registry.add_param_string(0, "mode", restrict=True)
        registry.add_restricted_value(0, "mode", "fast")
        registry.parse(["prog"])
        self.assertEqual(registry.parameters, ())
        self.assertEqual(registry.options, ())
        self.assertEqual(registry.subcommands, ())

    def testEmptyInitValuesRaise(self):
        with self.assertRaises(ValueError):
            Registry().init("prog", version="  ")
        with self.assertRaises(TypeError):
            Registry().init("prog", license=3)


class TestConfiguration(TestCase):
    """Construction-time options."""

    def testDefaults(self):
        registry = Registry()
        self.assertIs(registry.mode, ParseMode.PARSE)
        self.assertFalse(registry.shell)
        self.assertFalse(registry.fancy)
        self.assertFalse(registry.colorful)

    def testModeAcceptsStringValue(self):
        self.assertIs(Registry(mode="synopsis").mode, ParseMode.SYNOPSIS)

    def testUnknownModeRaises(self):
        with self.assertRaises(ValueError):
            Registry(mode="manual")


class TestScopes(TestCase):
    """Subcommand declarations."""

    def setUp(self):
        self.registry = Registry()
        self.registry.init("prog")

    def testMainScopeIsImplicit(self):
        scope = self.registry.scope(0)
        self.assertTrue(scope.main)
        self.assertEqual(scope.name, "prog")
        self.registry.add_param_flag(0, "v")

    def testSubcommandIsRegistered(self):
        scope = self.registry.add_subcommand(7, "build", "compile sources", True)
        self.assertEqual(scope.id, 7)
        self.assertFalse(scope.main)
        self.assertIs(self.registry.scope(7), scope)
        self.assertEqual(self.registry.scopes, (self.registry.scope(0), scope))

    def testUnknownScopeLookupIsNone(self):
        self.assertIsNone(self.registry.scope(3))

    def testReservedZeroRaises(self):
        with self.assertRaises(ScopeReservedZeroError) as context:
            self.registry.add_subcommand(0, "build")
        self.assertEqual(context.exception.options["name"], "build")

    def testDuplicateIdRaises(self):
        self.registry.add_subcommand(1, "build")
        with self.assertRaises(DuplicateSubcommandError):
            self.registry.add_subcommand(1, "clean")

    def testDuplicateNameRaises(self):
        self.registry.add_subcommand(1, "build")
        with self.assertRaises(DuplicateSubcommandError):
            self.registry.add_subcommand(2, "build")

    def testInvalidSubcommandNameRaises(self):
        with self.assertRaises(InvalidNameError):
            self.registry.add_subcommand(1, "2fast")

    def testNonIntegerIdRaises(self):
        with self.assertRaises(TypeError):
            self.registry.add_subcommand("1", "build")


class TestParameters(TestCase):
    """Parameter and argument declarations."""

    def setUp(self):
        self.registry = Registry()
        self.registry.init("prog")
        self.registry.add_subcommand(1, "build")

    def testDuplicateNameInScopeRaises(self):
        self.registry.add_param_int(0, "count")
        with self.assertRaises(DuplicateNameError) as context:
            self.registry.add_param_string(0, "count")
        self.assertEqual(context.exception.options["name"], "count")
        self.assertEqual(context.exception.options["scope"], 0)

    def testFlagSharesNamespace(self):
        self.registry.add_param_flag(0, "v")
        with self.assertRaises(DuplicateNameError):
            self.registry.add_param_bool(0, "v")

    def testSameNameInDifferentScopes(self):
        self.registry.add_param_int(0, "count")
        self.registry.add_param_int(1, "count")
        self.assertEqual(len(self.registry.parameters), 2)

    def testUnknownScopeRaises(self):
        with self.assertRaises(UnknownScopeError) as context:
            self.registry.add_param_int(9, "count")
        self.assertEqual(context.exception.options["scope"], 9)

    def testFlagNameMustBeOneLetter(self):
        for name in ("vv", "1", "", "-"):
            with self.subTest(name=name), self.assertRaises(InvalidNameError):
                self.registry.add_param_flag(0, name)

    def testParameterNameRules(self):
        for name in ("1st", "-name", "with space", "ümlaut", ""):
            with self.subTest(name=name), self.assertRaises(InvalidNameError):
                self.registry.add_param_string(0, name)
        self.registry.add_param_string(0, "dry-run_mode")

    def testDeclarationErrorsShareBase(self):
        with self.assertRaises(DeclarationError):
            self.registry.add_param_int(9, "count")

    def testDeclarationOrderIsKept(self):
        self.registry.add_arg_string(1, "input")
        self.registry.add_param_flag(1, "v")
        self.registry.add_arg_string(1, "output")
        names = [parameter.name for parameter in self.registry.entries(1, required=True)]
        self.assertEqual(names, ["input", "output"])

    def testKindsAreRecorded(self):
        self.registry.add_param_flag(0, "v")
        self.registry.add_param_bool(0, "color")
        self.registry.add_arg_int(0, "level")
        self.assertEqual([p.kind for p in self.registry.parameters], [Kind.FLAG, Kind.BOOL, Kind.INT])
        self.assertTrue(self.registry.lookup(0, "level").required)

    def testMalformedMetadataRaises(self):
        with self.assertRaises(TypeError):
            self.registry.add_param_int(0, "count", default="3")
        with self.assertRaises(TypeError):
            self.registry.add_param_bool(0, "color", default=1)
        with self.assertRaises(ValueError):
            self.registry.add_param_flag(0, "v", mask=-1)
        with self.assertRaises(TypeError):
            self.registry.add_param_string(0, "name", descr=42)
        with self.assertRaises(ValueError):
            self.registry.add_param_string(0, "name", descr="   ")
        with self.assertRaises(TypeError):
            self.registry.add_param_int(0, "count", slot=[0])


class TestRestrictedValues(TestCase):
    """Restricted value declarations."""

    def setUp(self):
        self.registry = Registry()
        self.registry.init("prog")

    def testChoicesAreKeptInOrder(self):
        self.registry.add_param_string(0, "format", restrict=True)
        self.registry.add_restricted_value(0, "format", "json")
        option = self.registry.add_restricted_value(0, "format", "yaml")
        self.assertEqual(option.value, "yaml")
        self.assertEqual(self.registry.choices(0, "format"), ("json", "yaml"))

    def testMissingTargetRaises(self):
        with self.assertRaises(UnknownTargetError) as context:
            self.registry.add_restricted_value(0, "format", "json")
        self.assertEqual(context.exception.options["name"], "format")

    def testTargetInOtherScopeRaises(self):
        self.registry.add_subcommand(1, "build")
        self.registry.add_param_string(1, "format", restrict=True)
        with self.assertRaises(UnknownTargetError):
            self.registry.add_restricted_value(0, "format", "json")

    def testNonStringTargetRaises(self):
        self.registry.add_param_int(0, "count")
        with self.assertRaises(UnknownTargetError):
            self.registry.add_restricted_value(0, "count", "1")

    def testDuplicateLiteralRaises(self):
        self.registry.add_arg_string(0, "format", restrict=True)
        self.registry.add_restricted_value(0, "format", "json")
        with self.assertRaises(ValueError):
            self.registry.add_restricted_value(0, "format", "json")

    def testRestrictOnlyForStrings(self):
        with self.assertRaises(TypeError):
            Parameter(0, "count", Kind.INT, restricted=True)


if __name__ == '__main__':
    unittest.main()
