"""
Argscope faults (declaration and parse errors) and rendering.

Scope
- FaultCode: canonical, stable numeric identifiers for every error the engine
  can surface. Declaration errors live in the 110xx range, parse errors in 111xx.
- ArgscopeError: base type carrying a message plus options, rendering itself via
  rich as "[ program — code | title ]", the message, and a single hint.
- DeclarationError / ParseError: the two families. Declaration errors are
  programmer mistakes in the grammar; parse errors come from user input.
- trigger(): central entry point to surface a fault (raise, or print and exit in
  shell mode).
- getdoc(): optional description lookup for a code from the host application.

Integration
- The registry and the parser call Registry.trigger(fault, **ctx), which merges
  program name and shell/fancy/colorful options before calling trigger().
- A triggered fault never returns: it is raised, or printed and followed by
  sys.exit(1).
"""
import copy
import sys
from collections import defaultdict
from enum import IntEnum
from types import MappingProxyType

from rich.console import Console, Group
from rich.panel import Panel
from rich.text import Text

from .utils import Unset

console = Console(stderr=True)


class FaultCode(IntEnum):
    """
    canonical fault codes (stable identifiers).

    grouping
    - lifecycle (1100x)
      • NOT_INITIALIZED, ALREADY_PARSED
    - naming (1101x)
      • INVALID_NAME
    - scopes (1102x)
      • SCOPE_RESERVED_ZERO, DUPLICATE_SUBCOMMAND, UNKNOWN_SCOPE
    - entries (1103x)
      • DUPLICATE_NAME, UNKNOWN_TARGET
    - parameters (1111x)
      • UNKNOWN_PARAMETER, MISSING_VALUE, INVALID_VALUE
    - arguments (1112x / 1114x)
      • MISSING_ARGUMENT, UNEXPECTED_ARGUMENTS

    the host can remap displayed labels through a __codes__ mapping in __main__.
    """
    # --- lifecycle errors (110xx) ---
    NOT_INITIALIZED             = 11001
    ALREADY_PARSED              = 11002

    # --- naming errors (110xx) ---
    INVALID_NAME                = 11011

    # --- scope errors (110xx) ---
    SCOPE_RESERVED_ZERO         = 11021
    DUPLICATE_SUBCOMMAND        = 11022
    UNKNOWN_SCOPE               = 11023

    # --- entry errors (110xx) ---
    DUPLICATE_NAME              = 11031
    UNKNOWN_TARGET              = 11032

    # --- parameter errors (111xx) ---
    UNKNOWN_PARAMETER           = 11111
    MISSING_VALUE               = 11112
    INVALID_VALUE               = 11113

    # --- argument errors (111xx) ---
    MISSING_ARGUMENT            = 11121
    UNEXPECTED_ARGUMENTS        = 11141

    def normalize(self):
        """
        return a host-normalized string for this code.

        when __main__ defines a __codes__ mapping, its label wins; otherwise
        the numeric value is returned as a string.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


class ArgscopeError(Exception):
    __palette__ = {
        # header parts
        "prog-name": "bold #E6E6F0",  # near-white program name
        "code": "bold #00E5FF",  # neon cyan fault code
        "error-title": "bold #FF4DA6",  # friendly pinky title

        # body
        "error-message": "#C8C8D0",  # soft light gray message
        "hint-arrow": "#9CE19C dim",  # gentle green arrow
        "hint": "italic #9CE19C",  # gentle green hint text
    }

    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        super().__init__(*(() if message is Unset else (message,)))
        self.message = message
        self.options = MappingProxyType(options)

    def __rich__(self):
        main = __import__("__main__")

        styles = defaultdict(str, type(self).__palette__ | getattr(main, "__styles__", {}))
        colorful = self.options.get("colorful", False)
        fancy = self.options.get("fancy", False)

        def styler(style):
            return styles[style] if colorful else ""

        def text(fragment, style=""):
            if not fragment:
                return Text("")
            if not colorful:
                return Text(str(fragment))
            if isinstance(fragment, Text):
                return fragment
            return Text(str(fragment), style)

        prog = text(self.options.get("program") or "program", styler("prog-name"))
        code = self.options.get("code")

        header = Text.assemble(
            "[ ",
            prog,
            " — ",
            text(code.normalize() if isinstance(code, FaultCode) else "?", styler("code")),
            " | ",
            text(str(self.options.get("title", "error")).title(), styler("error-title")),
            " ]"
        )
        message = text(self.message, styler("error-message"))
        renders = [message]
        if hint := self.options.get("hint"):
            renders.append(Text.assemble(text(" → ", styler("hint-arrow")), text(hint, styler("hint"))))

        if fancy:
            return Panel(Group(*renders), title=header, title_align="left")

        return Group(header, *renders)

    def __trigger__(self):
        if not self.options.get("shell", False):
            raise self from None
        console.print(self)
        sys.exit(1)

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class DeclarationError(ArgscopeError):
    """
    A grammar declaration is invalid; the embedding program is misconfigured.
    """


class NotInitializedError(DeclarationError): ...
class AlreadyParsedError(DeclarationError): ...
class InvalidNameError(DeclarationError): ...
class ScopeReservedZeroError(DeclarationError): ...
class DuplicateSubcommandError(DeclarationError): ...
class UnknownScopeError(DeclarationError): ...
class DuplicateNameError(DeclarationError): ...
class UnknownTargetError(DeclarationError): ...


class ParseError(ArgscopeError):
    """
    The command line given by the user does not match the declared grammar.
    """
    __palette__ = ArgscopeError.__palette__ | {
        "code": "bold #FFB400",  # amber code tells user errors apart
        "error-title": "bold #FFC2E0",  # softer pinky title
    }

    def __trigger__(self):
        if self.options.get("shell", False) and (usage := self.options.get("usage")):
            console.print(usage)
        super().__trigger__()


class UnknownParameterError(ParseError): ...
class MissingValueError(ParseError): ...
class InvalidValueError(ParseError): ...
class MissingArgumentError(ParseError): ...
class UnexpectedArgumentsError(ParseError): ...


def trigger(fault, /, **options):
    """
    surface a fault with the given runtime options.

    contract
    - fault must provide __trigger__ and __replace__ methods (see ArgscopeError).
    - options are merged into the fault via copy.replace(fault, **options).
    - in shell mode the fault is printed to stderr and the process exits with
      status 1; otherwise it is raised. either way, this never returns.

    typical options
    - program, shell, fancy, colorful, title, code, hint, docs, usage, and any
      error-specific context (name, token, tokens, scope, index).
    """
    if (
        not hasattr(fault, "__trigger__") or
        not callable(fault.__trigger__) or
        not hasattr(fault, "__replace__") or
        not callable(fault.__replace__)
    ):
        raise TypeError("trigger() argument must have a __trigger__ and __replace__ methods")
    copy.replace(fault, **options).__trigger__()
    raise RuntimeError("unreachable")


def getdoc(code, /):
    """
    optional documentation fetch for a fault code.

    the host application may expose a __docs__ mapping in __main__ where keys
    are FaultCode instances and values are short documentation strings.
    """
    if not isinstance(code, FaultCode):
        raise TypeError("getdoc() argument must be a fault-code")
    try:
        return getattr(__import__("__main__"), "__docs__", {})[code]
    except KeyError:
        return None


__all__ = (
    "ArgscopeError",
    "DeclarationError",
    "NotInitializedError",
    "AlreadyParsedError",
    "InvalidNameError",
    "ScopeReservedZeroError",
    "DuplicateSubcommandError",
    "UnknownScopeError",
    "DuplicateNameError",
    "UnknownTargetError",
    "ParseError",
    "UnknownParameterError",
    "MissingValueError",
    "InvalidValueError",
    "MissingArgumentError",
    "UnexpectedArgumentsError",
    "FaultCode",
    "trigger",
    "getdoc",
)
