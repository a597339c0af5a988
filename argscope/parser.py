"""
Argscope parsing engine.

A Parser runs the four stages of a parse over a registry that is already in
its Parsed state, writing converted values into the declared output slots:

1. scope resolution: token 1 selects a subcommand on an exact name match,
   otherwise the main scope (id 0) stays active and nothing is consumed.
2. parameter tokens, for the active scope only:
   • "--"            ends parameters (consumed).
   • "-x"            sets flag x.
   • "--no-name"     clears bool name.
   • "--name"        sets a flag/bool, or takes the next token as the value of
                     an int/string parameter.
   • "--help"        prints help for the active scope and exits successfully.
   • "--version"     prints the version (when one was declared) and exits.
   • anything else   ends parameters (not consumed).
3. required arguments, in declaration order, one token each.
4. trailing check: leftovers are an error unless the scope accepts unnamed
   arguments.

Every fault goes through Registry.trigger() at the point of detection and never
returns, so a parse either completes or stops without returning a partial
result.
"""
import logging
import re
import sys

from .declarations import Kind
from .faults import *
from .render import render_help, render_usage, render_version
from .utils import *

logger = logging.getLogger(__name__)


class Parser:
    """
    One-shot parse of an argument vector against a registry.

    Attributes
    - registry: the owning Registry (read-only use, plus slot writes).
    - tokens: the full argument vector; tokens[0] is the program name.
    - index: number of tokens consumed so far (starts at 1 for argument 0).
    - scope: the active Scope once resolved.
    """

    def __init__(self, registry, tokens, /):
        self.registry = registry
        self.tokens = list(tokens)
        self.index = 1
        self.scope = registry.scope(0)

    @property
    def current(self):
        """
        Next unconsumed token, or None at end of input.
        """
        try:
            return self.tokens[self.index]
        except IndexError:
            return None

    @property
    def route(self):
        """
        Program name followed by the active subcommand, as typed by the user.
        """
        if self.scope.main:
            return self.registry.program
        return f"{self.registry.program} {self.scope.name}"

    def trigger(self, fault, /, **options):
        self.registry.trigger(fault, usage=render_usage(self.registry, self.scope), **options)

    # ── Scope Resolver ─────────────────────────────────────────────────────

    def _resolve_scope(self):
        if (token := self.current) is None:
            return
        for scope in self.registry.subcommands:
            if scope.name == token:
                self.scope = scope
                self.index += 1
                logger.debug("subcommand %r selected (id %r)", scope.name, scope.id)
                return

    # ── Validator (parse-time) ─────────────────────────────────────────────

    def _convert(self, parameter, token, /):
        """
        Convert a raw token for an int/string entry, checking restricted values.
        """
        kind = "argument" if parameter.required else "parameter"

        if parameter.kind is Kind.INT:
            if not re.fullmatch(r"[+-]?[0-9]+", token):
                self.trigger(InvalidValueError(
                    "value %r for %s %r at %s position is not an integer" % (
                        token, kind, parameter.name, ordinal(self.index)
                    ),
                    title="invalid value",
                    code=FaultCode.INVALID_VALUE,
                    name=parameter.name,
                    token=token,
                    index=self.index,
                    hint="use a decimal integer such as 42 or -7",
                    docs=getdoc(FaultCode.INVALID_VALUE),
                ))
            return int(token)

        if parameter.restricted:
            choices = self.registry.choices(parameter.scope, parameter.name)
            if token not in choices:
                self.trigger(InvalidValueError(
                    "value %r for %s %r at %s position is not allowed" % (
                        token, kind, parameter.name, ordinal(self.index)
                    ),
                    title="invalid value",
                    code=FaultCode.INVALID_VALUE,
                    name=parameter.name,
                    token=token,
                    index=self.index,
                    choices=choices,
                    hint="use one of: %s" % " · ".join(choices) if choices else
                         "no value is accepted; run '%s --help' for details" % self.route,
                    docs=getdoc(FaultCode.INVALID_VALUE),
                ))
        return token

    # ── Token Parser ───────────────────────────────────────────────────────

    def _find(self, name, /, *kinds):
        parameter = self.registry.lookup(self.scope.id, name)
        if parameter is None or parameter.required or parameter.kind not in kinds:
            return None
        return parameter

    def _unknown(self, token, /):
        self.trigger(UnknownParameterError(
            "unknown parameter %r at %s position" % (token, ordinal(self.index)),
            title="unknown parameter",
            code=FaultCode.UNKNOWN_PARAMETER,
            token=token,
            index=self.index,
            hint="run '%s --help' to see the available parameters" % self.route,
            docs=getdoc(FaultCode.UNKNOWN_PARAMETER),
        ))

    def _parse_named(self, token, name, /):
        parameter = self._find(name, Kind.FLAG, Kind.BOOL, Kind.INT, Kind.STRING)

        if parameter is None:
            if name == "help":
                render_help(self.registry, self.scope)
                sys.exit(0)
            if name == "version" and self.registry.version:
                render_version(self.registry)
                sys.exit(0)
            self._unknown(token)

        if parameter.kind.boolean:
            parameter.store(True)
            self.index += 1
            return

        if (value := self.tokens[self.index + 1] if self.index + 1 < len(self.tokens) else None) is None:
            self.trigger(MissingValueError(
                "parameter %r at %s position requires a value" % (token, ordinal(self.index)),
                title="missing value",
                code=FaultCode.MISSING_VALUE,
                name=parameter.name,
                index=self.index,
                hint="provide a value (e.g., %s %s)" % (token, parameter.metavar),
                docs=getdoc(FaultCode.MISSING_VALUE),
            ))

        self.index += 1
        parameter.store(self._convert(parameter, value))
        self.index += 1

    def _parse_parameters(self):
        while (token := self.current) is not None:
            if token == "--":
                self.index += 1
                logger.debug("end-of-parameters marker at %s position", ordinal(self.index - 1))
                return

            if re.fullmatch(r"-[A-Za-z]", token):
                if (parameter := self._find(token[1], Kind.FLAG)) is None:
                    self._unknown(token)
                parameter.store(True)
                self.index += 1
            elif token.startswith("--no-") and (parameter := self._find(token[5:], Kind.BOOL)):
                parameter.store(False)
                self.index += 1
            elif token.startswith("--"):
                self._parse_named(token, token[2:])
            else:
                return
            logger.debug("parameter %r consumed", token)

    # ── Argument Consumer ──────────────────────────────────────────────────

    def _consume_arguments(self):
        for argument in self.registry.entries(self.scope.id, required=True):
            if (token := self.current) is None:
                self.trigger(MissingArgumentError(
                    "missing required argument %r at %s position" % (argument.name, ordinal(self.index)),
                    title="missing argument",
                    code=FaultCode.MISSING_ARGUMENT,
                    name=argument.name,
                    index=self.index,
                    hint="add the missing %s; run '%s --help' to see the expected order" % (argument.metavar, self.route),
                    docs=getdoc(FaultCode.MISSING_ARGUMENT),
                ))
            argument.store(self._convert(argument, token))
            self.index += 1
            logger.debug("argument %r consumed", argument.name)

    def _check_trailing(self):
        if self.scope.unnamed or self.index >= len(self.tokens):
            return
        leftover = self.tokens[self.index:]
        self.trigger(UnexpectedArgumentsError(
            "unexpected argument%s %s from %s position" % (
                "s" * (len(leftover) > 1), " ".join(map(repr, leftover)), ordinal(self.index)
            ),
            title="unexpected arguments",
            code=FaultCode.UNEXPECTED_ARGUMENTS,
            tokens=tuple(leftover),
            index=self.index,
            hint="remove the extra inputs; run '%s --help' to see valid forms" % self.route,
            docs=getdoc(FaultCode.UNEXPECTED_ARGUMENTS),
        ))

    def parse(self):
        """
        Run every stage and return (consumed, scope id).
        """
        self._resolve_scope()
        self._parse_parameters()
        self._consume_arguments()
        self._check_trailing()
        return self.index, self.scope.id


__all__ = ("Parser",)
