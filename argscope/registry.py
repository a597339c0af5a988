"""
Argscope registry: declare a command-line grammar, then parse it once.

What this module provides
- Registry: owns every declared scope, parameter/argument and restricted value,
  enforces declare-time invariants, and runs the single parse call.
- ParseMode: what parse() does (parse normally, dump a synopsis, dump the
  options listing).
- State: Uninitialized → Declaring → Parsed.
- ParseResult: (consumed, scope) as returned by parse().

Lifecycle
    >>> from argscope import Registry
    >>> registry = Registry()
    >>> registry.init("demo", "1.0.0", descr="showcase program", unnamed=True)
    >>> verbose = registry.add_param_flag(0, "v", "increase verbosity")
    >>> registry.parse(["demo", "-v", "x", "y"])
    ParseResult(consumed=2, scope=0)
    >>> verbose.value
    True

Declaration order is significant: required arguments are consumed in the order
they were declared. After parse() the registry drops its entries; any further
call fails with AlreadyParsedError.
"""
import enum
import logging
import sys
from collections.abc import Iterable
from typing import NamedTuple

from rich.text import Text

from .declarations import Kind, Scope, Parameter, RestrictedOption
from .faults import *
from .parser import Parser
from .render import render_options, render_synopsis
from .utils import *

logger = logging.getLogger(__name__)


class ParseMode(enum.StrEnum):
    """
    Terminal behaviour of Registry.parse(), chosen once at construction.

    - PARSE: consume the argument vector.
    - SYNOPSIS: print a one-line usage per scope and exit successfully.
    - OPTIONS: print the full options listing and exit successfully.
    """
    PARSE = "parse"
    SYNOPSIS = "synopsis"
    OPTIONS = "options"


class State(enum.Enum):
    UNINITIALIZED = "uninitialized"
    DECLARING = "declaring"
    PARSED = "parsed"


class ParseResult(NamedTuple):
    """
    Outcome of a successful parse.

    - consumed: leading tokens read, argument 0 included.
    - scope: id of the active scope (0 for the main scope).
    """
    consumed: int
    scope: int


class Registry:
    """
    Declaration registry and one-shot parser entry point.

    Responsibilities
    - Hold the main scope (created by init()) and the declared subcommands,
      parameters/arguments and restricted values, in declaration order.
    - Reject invalid declarations immediately (fail-fast): bad names, reserved or
      duplicated subcommand ids, unknown scopes, duplicate names, unknown targets.
    - Run parse() exactly once, then discard the declarations.

    Configuration (keyword-only, fixed at construction)
    - mode: ParseMode | str
    - shell: print faults to stderr and exit(1) instead of raising.
    - fancy: draw rendered output inside rich panels.
    - colorful: apply the colour palette.

    Read-only views
    - program, version, license, descr, scopes, parameters, options,
      mode, shell, fancy, colorful, state, result.
    """

    program = property(lambda self: self._main.name if self._main else None)
    descr = property(lambda self: self._main.descr if self._main else None)
    version = mirror("version")
    license = mirror("license")
    parameters = mirror("parameters")
    options = mirror("options")
    mode = mirror("mode")
    shell = mirror("shell")
    fancy = mirror("fancy")
    colorful = mirror("colorful")
    state = mirror("state")
    result = property(lambda self: self._result)

    def __init__(self, *, mode=ParseMode.PARSE, shell=False, fancy=False, colorful=False):
        try:
            self._mode = ParseMode(mode)
        except ValueError:
            raise ValueError(f"registry 'mode' must be one of {", ".join(map(repr, map(str, ParseMode)))}") from None
        self._shell = bool(shell)
        self._fancy = bool(fancy)
        self._colorful = bool(colorful)

        self._state = State.UNINITIALIZED
        self._result = None
        self._main = None
        self._version = None
        self._license = None
        self._subcommands = []
        self._parameters = []
        self._options = []

    def __rich_repr__(self):
        yield "program", self.program
        yield "version", self.version
        yield "state", self.state.value
        yield "mode", str(self.mode)
        yield "scopes", self.scopes
        yield "parameters", self.parameters

    def __repr__(self):
        return f"registry(program={self.program!r}, state={self.state.value!r}, mode={str(self.mode)!r})"

    @property
    def scopes(self):
        """
        All scopes, main scope first, subcommands in declaration order.
        """
        return tuple(([self._main] if self._main else []) + self._subcommands)

    @property
    def subcommands(self):
        return tuple(self._subcommands)

    def scope(self, id, /):
        """
        Return the declared scope for `id`, or None.
        """
        for scope in self.scopes:
            if scope.id == id:
                return scope
        return None

    def entries(self, scope, /, *, required=Unset):
        """
        Parameters/arguments of a scope in declaration order, optionally filtered
        on the required flag.
        """
        return tuple(
            parameter for parameter in self._parameters
            if parameter.scope == scope and (required is Unset or parameter.required is bool(required))
        )

    def lookup(self, scope, name, /):
        """
        Return the entry named `name` in `scope`, or None.
        """
        for parameter in self._parameters:
            if parameter.scope == scope and parameter.name == name:
                return parameter
        return None

    def choices(self, scope, name, /):
        """
        Literal values declared for a restricted entry, in declaration order.
        """
        return tuple(option.value for option in self._options if option.scope == scope and option.target == name)

    def trigger(self, fault, /, **options):
        """
        Surface a fault with this registry's program name and runtime flags.

        Never returns: the fault is raised, or printed and followed by exit(1)
        in shell mode.
        """
        trigger(
            fault,
            **options,
            program=self.program or "program",
            shell=self.shell,
            fancy=self.fancy,
            colorful=self.colorful
        )

    # ── Validator (declare-time) ───────────────────────────────────────────

    def _check_lifecycle(self):
        if self._state is State.UNINITIALIZED:
            self.trigger(NotInitializedError(
                "the registry has not been initialized",
                title="not initialized",
                code=FaultCode.NOT_INITIALIZED,
                hint="call init(program, ...) before declaring or parsing",
                docs=getdoc(FaultCode.NOT_INITIALIZED),
            ))
        if self._state is State.PARSED:
            self.trigger(AlreadyParsedError(
                "the registry has already parsed its command line",
                title="already parsed",
                code=FaultCode.ALREADY_PARSED,
                hint="declare everything first, then call parse() exactly once",
                docs=getdoc(FaultCode.ALREADY_PARSED),
            ))

    def _check_name(self, name, /, *, flag=False, what="parameter/argument"):
        if isflagname(name) if flag else isname(name):
            return
        rule = "a single ASCII letter" if flag else "an ASCII letter followed by letters, '-' or '_'"
        self.trigger(InvalidNameError(
            "invalid %s name %r" % (what, name),
            title="invalid name",
            code=FaultCode.INVALID_NAME,
            name=name,
            hint="use %s" % rule,
            docs=getdoc(FaultCode.INVALID_NAME),
        ))

    def _check_scope(self, id, /):
        if not isinstance(id, int) or isinstance(id, bool):
            raise TypeError("registry scope id must be an integer")
        if self.scope(id) is None:
            self.trigger(UnknownScopeError(
                "subcommand %r has not been declared" % id,
                title="unknown scope",
                code=FaultCode.UNKNOWN_SCOPE,
                scope=id,
                hint="declare it with add_subcommand(%r, ...) first" % id,
                docs=getdoc(FaultCode.UNKNOWN_SCOPE),
            ))

    def _check_unique(self, scope, name, /):
        if self.lookup(scope, name) is None:
            return
        self.trigger(DuplicateNameError(
            "parameter/argument %r is already declared in %s" % (name, self._describe(scope)),
            title="duplicate name",
            code=FaultCode.DUPLICATE_NAME,
            scope=scope,
            name=name,
            hint="pick another name; flags share the namespace of the other parameters",
            docs=getdoc(FaultCode.DUPLICATE_NAME),
        ))

    def _describe(self, scope, /):
        if scope == 0:
            return "the main scope"
        return "subcommand %r" % self.scope(scope).name

    # ── Declaration API ────────────────────────────────────────────────────

    def init(self, program, version=Unset, license=Unset, descr=Unset, unnamed=False):
        """
        Initialize the registry and create the main scope (id 0).

        Parameters
        - program: program name shown in help and faults.
        - version: optional version string; enables --version.
        - license: optional license string, printed after the version.
        - descr: optional program description.
        - unnamed: whether the main scope accepts trailing unnamed arguments.
        """
        if self._state is State.PARSED:
            self._check_lifecycle()
        if self._state is State.DECLARING:
            raise TypeError("registry is already initialized")

        for name, object in (("version", version), ("license", license)):
            if not isinstance(object, str | Text | Unset):
                raise TypeError(f"registry {name!r} must be a string")
            elif isinstance(object, str) and not object.strip():
                raise ValueError(f"registry {name!r} cannot be empty")

        self._main = Scope(0, program, descr, unnamed)
        self._version = coalesce(version)
        self._license = coalesce(license)
        self._state = State.DECLARING
        logger.debug("init(): program %r, version %r", self._main.name, self._version)

    def add_subcommand(self, id, name, descr=Unset, unnamed=False):
        """
        Declare a subcommand scope with a caller-chosen nonzero id.
        """
        self._check_lifecycle()
        if not isinstance(id, int) or isinstance(id, bool):
            raise TypeError("registry subcommand id must be an integer")
        self._check_name(name, what="subcommand")
        if id == 0:
            self.trigger(ScopeReservedZeroError(
                "subcommand id 0 is reserved for the main scope",
                title="reserved scope",
                code=FaultCode.SCOPE_RESERVED_ZERO,
                scope=id,
                name=name,
                hint="give subcommand %r a nonzero id" % name,
                docs=getdoc(FaultCode.SCOPE_RESERVED_ZERO),
            ))
        for scope in self._subcommands:
            if scope.id == id or scope.name == name:
                self.trigger(DuplicateSubcommandError(
                    "subcommand %r (id %r) clashes with subcommand %r (id %r)" % (name, id, scope.name, scope.id),
                    title="duplicate subcommand",
                    code=FaultCode.DUPLICATE_SUBCOMMAND,
                    scope=id,
                    name=name,
                    hint="subcommand ids and names must both be unique",
                    docs=getdoc(FaultCode.DUPLICATE_SUBCOMMAND),
                ))

        self._subcommands.append(scope := Scope(id, name, descr, unnamed))
        logger.debug("add_subcommand(): %r as id %r", name, id)
        return scope

    def _add(self, scope, name, kind, descr, *, flag=False, **options):
        self._check_lifecycle()
        self._check_name(name, flag=flag)
        self._check_scope(scope)
        self._check_unique(scope, name)

        parameter = Parameter(scope, name, kind, descr, **options)
        parameter.reset()
        self._parameters.append(parameter)
        logger.debug(
            "declared %s %s %r in scope %r",
            parameter.kind, "argument" if parameter.required else "parameter", name, scope
        )
        return parameter.slot

    def add_param_flag(self, scope, name, descr=Unset, slot=Unset, mask=0):
        """
        Declare a single-letter flag (-x). Returns the output slot.
        """
        return self._add(scope, name, Kind.FLAG, descr, flag=True, slot=slot, mask=mask)

    def add_param_bool(self, scope, name, descr=Unset, default=False, slot=Unset, mask=0):
        """
        Declare a boolean parameter (--name / --no-name). Returns the output slot.
        """
        return self._add(scope, name, Kind.BOOL, descr, default=default, slot=slot, mask=mask)

    def add_param_int(self, scope, name, descr=Unset, default=0, slot=Unset):
        """
        Declare an integer parameter (--name value). Returns the output slot.
        """
        return self._add(scope, name, Kind.INT, descr, default=default, slot=slot)

    def add_param_string(self, scope, name, descr=Unset, default=None, slot=Unset, restrict=False):
        """
        Declare a string parameter (--name value), optionally restricted to the
        values later declared with add_restricted_value(). Returns the output slot.
        """
        return self._add(scope, name, Kind.STRING, descr, default=default, slot=slot, restricted=restrict)

    def add_arg_int(self, scope, name, descr=Unset, slot=Unset):
        """
        Declare a required positional integer argument. Returns the output slot.
        """
        return self._add(scope, name, Kind.INT, descr, required=True, slot=slot)

    def add_arg_string(self, scope, name, descr=Unset, slot=Unset, restrict=False):
        """
        Declare a required positional string argument. Returns the output slot.
        """
        return self._add(scope, name, Kind.STRING, descr, required=True, slot=slot, restricted=restrict)

    def add_restricted_value(self, scope, target, value):
        """
        Allow `value` for the restricted string parameter/argument `target` of `scope`.
        """
        self._check_lifecycle()
        self._check_scope(scope)
        self._check_name(target)

        parameter = self.lookup(scope, target)
        if parameter is None or parameter.kind is not Kind.STRING:
            self.trigger(UnknownTargetError(
                "no string parameter/argument %r in %s" % (target, self._describe(scope)),
                title="unknown target",
                code=FaultCode.UNKNOWN_TARGET,
                scope=scope,
                name=target,
                hint="declare %r with add_param_string() or add_arg_string() first" % target,
                docs=getdoc(FaultCode.UNKNOWN_TARGET),
            ))
        if not isinstance(value, str):
            raise TypeError("registry restricted value must be a string")
        if value in self.choices(scope, target):
            raise ValueError(f"registry restricted value {value!r} is already declared for {target!r}")

        self._options.append(option := RestrictedOption(scope, target, value))
        logger.debug("add_restricted_value(): %r for %r in scope %r", value, target, scope)
        return option

    # ── Parsing API ────────────────────────────────────────────────────────

    def parse(self, argv, /):
        """
        Parse an argument vector once.

        Parameters
        - argv: Iterable[str] whose first element is the program name.

        Returns
        - ParseResult(consumed, scope): leading tokens consumed (argument 0
          included) and the active scope id. The caller handles argv[consumed:].

        Behavior
        - ParseMode.SYNOPSIS / ParseMode.OPTIONS print and exit(0) instead.
        - --help / --version print and exit(0).
        - Any fault is raised (or printed with exit(1) in shell mode).
        - The registry enters the Parsed state immediately and drops its
          declarations when this call ends, whatever the outcome.
        """
        if isinstance(argv, str | bytes) or not isinstance(argv, Iterable):
            raise TypeError("parse() argument must be an iterable of strings")
        tokens = list(argv)
        if not all(isinstance(token, str) for token in tokens):
            raise TypeError("parse() argument must be an iterable of strings")
        if not tokens:
            raise ValueError("parse() argument must contain at least the program name")

        self._check_lifecycle()
        self._state = State.PARSED

        try:
            match self.mode:
                case ParseMode.SYNOPSIS:
                    render_synopsis(self)
                    sys.exit(0)
                case ParseMode.OPTIONS:
                    render_options(self)
                    sys.exit(0)

            self._result = ParseResult(*Parser(self, tokens).parse())
            logger.debug("parse(): consumed %d token(s) in scope %r", *self._result)
            return self._result
        finally:
            self._subcommands.clear()
            self._parameters.clear()
            self._options.clear()


__all__ = (
    "Registry",
    "ParseMode",
    "ParseResult",
    "State",
)
