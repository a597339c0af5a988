r"""
Argscope declaration entities.

Overview
- Kind: the four value kinds an entry can have (flag, bool, int, string).
- Scope: the main program scope (id 0) or one subcommand.
- Parameter: a named parameter or a required positional argument, bound to the
  caller's output Slot.
- RestrictedOption: one literal value a restricted string entry may take.

Entities are immutable once built: every field is exposed through a read-only
property (see DeclarationType), and only the registry builds them. Naming and
uniqueness rules that depend on the rest of the grammar (reserved ids, unknown
scopes, duplicate names) are enforced by the registry, because they need the
registry's state; shape checks that depend on the entity alone are enforced here.

Metadata (sanitized on construction)
- descr: Unset | str | Text, trimmed, non-empty when provided; None when Unset.
- Parameter
  • flag/bool: default must be a bool, mask a non-negative int.
  • int: default must be an int (bool rejected).
  • string: default must be a str or None; restricted is a bool.
  • required entries are int or string only.
"""
import enum
import functools
import operator
import re

from rich.text import Text

from .slots import Slot
from .utils import *


class DeclarationType(type):
    """
    Metaclass giving declaration entities read-only fields and stable reprs.

    - Every name in __introspectable__ becomes a mirror() property over "_name".
    - __typename__ is the hyphenated, lowercased class name, used in messages.
    - __repr__/__rich_repr__ list the __introspectable__ fields.
    - Classes built with final=True cannot be subclassed.
    """
    __introspectable__ = ()

    def __new__(cls, name, bases, namespace, **options):
        self = super().__new__(
            cls,
            name,
            bases,
            namespace | {
                "__typename__": re.sub(r"(?<!^)(?=[A-Z])", r"-", name).lower(),
            } | {
                name: mirror(name) for name in namespace.get("__introspectable__", ())
            },
        )

        @rename("__repr__")
        def __repr__(self):
            return f"{type(self).__typename__}({
                ", ".join(map(functools.partial(operator.mod, "%s=%r"), self.__rich_repr__()))
            })"
        self.__repr__ = __repr__

        @rename("__rich_repr__")
        def __rich_repr__(self):
            for name in type(self).__introspectable__:
                yield name, getattr(self, name)
        self.__rich_repr__ = __rich_repr__

        if options.get("final", False):
            @rename("__init_subclass__")
            def __init_subclass__(cls, **options):  # NOQA: F-841
                raise TypeError(f"type {self.__name__!r} is not an acceptable base type")
            self.__init_subclass__ = classmethod(__init_subclass__)

        return self


class Kind(enum.StrEnum):
    """
    Value kind of a parameter or argument.
    """
    FLAG = "flag"
    BOOL = "bool"
    INT = "int"
    STRING = "string"

    @property
    def boolean(self):
        """
        True for kinds written through Slot.assign (flag and bool).
        """
        return self in (Kind.FLAG, Kind.BOOL)


def _sanitize_descr(cls, descr, /):
    """
    Internal: validate an optional description and materialize it.

    Returns None when Unset, the trimmed string otherwise (Text kept as-is).
    """
    if not isinstance(descr, str | Text | Unset):
        raise TypeError(f"{cls.__typename__} 'descr' must be a string")
    elif isinstance(descr, str) and not (descr := descr.strip()):
        raise ValueError(f"{cls.__typename__} 'descr' cannot be empty")
    return coalesce(descr)


def _sanitize_id(cls, id, /):
    if not isinstance(id, int) or isinstance(id, bool):
        raise TypeError(f"{cls.__typename__} 'id' must be an integer")
    return id


class Scope(metaclass=DeclarationType, final=True):
    """
    The main scope (id 0) or a subcommand scope.

    Fields
    - id: 0 for the main scope, the caller-chosen nonzero id otherwise.
    - name: program name (main scope) or subcommand name.
    - descr: optional description.
    - unnamed: whether trailing unnamed arguments are accepted.
    """

    __introspectable__ = (
        "id",
        "name",
        "descr",
        "unnamed",
    )

    def __init__(self, id, name, /, descr=Unset, unnamed=False):
        if not isinstance(name, str) or not name.strip():
            raise TypeError(f"{type(self).__typename__} 'name' must be a non-empty string")
        self._id = _sanitize_id(type(self), id)
        self._name = name.strip()
        self._descr = _sanitize_descr(type(self), descr)
        self._unnamed = bool(unnamed)

    @property
    def main(self):
        """
        True for the implicit program scope.
        """
        return self._id == 0


class Parameter(metaclass=DeclarationType, final=True):
    """
    A parameter (optional, named) or argument (required, positional).

    Fields
    - scope: owning scope id.
    - name: one ASCII letter for flags, [A-Za-z][A-Za-z_-]* otherwise.
    - descr: optional description.
    - kind: Kind.
    - required: True for positional arguments.
    - default: default value (unused for required entries).
    - slot: the caller's output Slot.
    - mask: bit-mask for flag/bool writes (0 means the whole slot).
    - restricted: string entries only; value must match a RestrictedOption.
    """

    __introspectable__ = (
        "scope",
        "name",
        "descr",
        "kind",
        "required",
        "default",
        "slot",
        "mask",
        "restricted",
    )

    def __init__(
            self,
            scope,
            name,
            kind,
            /,
            descr=Unset,
            *,
            required=False,
            default=Unset,
            slot=Unset,
            mask=0,
            restricted=False
    ):
        cls = type(self)
        kind = Kind(kind)

        if required and kind.boolean:
            raise TypeError(f"{kind} {cls.__typename__} cannot be a required argument")

        if not isinstance(mask, int) or isinstance(mask, bool):
            raise TypeError(f"{cls.__typename__} 'mask' must be an integer")
        elif mask < 0:
            raise ValueError(f"{cls.__typename__} 'mask' must be non-negative")
        elif mask and not kind.boolean:
            raise TypeError(f"{kind} {cls.__typename__} cannot have a 'mask'")

        if restricted and kind is not Kind.STRING:
            raise TypeError(f"{kind} {cls.__typename__} cannot be restricted")

        match kind:
            case Kind.FLAG | Kind.BOOL:
                default = coalesce(default, False)
                if not isinstance(default, bool):
                    raise TypeError(f"{kind} {cls.__typename__} 'default' must be a boolean")
            case Kind.INT:
                default = coalesce(default, None if required else 0)
                if not required and (not isinstance(default, int) or isinstance(default, bool)):
                    raise TypeError(f"{kind} {cls.__typename__} 'default' must be an integer")
            case Kind.STRING:
                default = coalesce(default)
                if not isinstance(default, str | None):
                    raise TypeError(f"{kind} {cls.__typename__} 'default' must be a string")

        if slot is Unset:
            slot = Slot(0 if mask else None)
        elif not isinstance(slot, Slot):
            raise TypeError(f"{cls.__typename__} 'slot' must be a slot")

        self._scope = _sanitize_id(cls, scope)
        self._name = name
        self._descr = _sanitize_descr(cls, descr)
        self._kind = kind
        self._required = bool(required)
        self._default = default
        self._slot = slot
        self._mask = mask
        self._restricted = bool(restricted)

    @property
    def metavar(self):
        """
        Placeholder shown for the value in help ("<int>", "<string>", or the
        argument name for positionals).
        """
        if self._required:
            return f"<{self._name}>"
        return f"<{self._kind}>"

    def store(self, value, /):
        """
        Write a parsed value into the output slot (masked for flag/bool).
        """
        if self._kind.boolean:
            self._slot.assign(value, self._mask)
        else:
            self._slot.value = value

    def reset(self):
        """
        Write the default into the output slot; arguments are left untouched.
        """
        if not self._required:
            self.store(self._default)


class RestrictedOption(metaclass=DeclarationType, final=True):
    """
    One allowed literal for a restricted string parameter/argument.
    """

    __introspectable__ = (
        "scope",
        "target",
        "value",
    )

    def __init__(self, scope, target, value, /):
        if not isinstance(value, str):
            raise TypeError(f"{type(self).__typename__} 'value' must be a string")
        self._scope = _sanitize_id(type(self), scope)
        self._target = target
        self._value = value


__all__ = (
    "Kind",
    "Scope",
    "Parameter",
    "RestrictedOption",
)

del DeclarationType
