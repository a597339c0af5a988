"""
Argscope utilities (internal helpers, carefully exposed)

Scope
- Small building blocks shared by declarations, the registry, the parser and
  the renderers, so naming rules and "not provided" semantics stay consistent.

Overview
- UnsetType / Unset
  • Singleton sentinel for "value not provided", distinct from None.
- coalesce(value, default=None)
  • Replace Unset with a concrete default, preserving None/0/""/False.
- rename(callable, name) / @rename("name")
  • Assign stable __name__/__qualname__ to generated helpers.
- mirror("attr")
  • Read-only property exposing a private backing field (self._attr).
- isname(text) / isflagname(text)
  • Declaration naming rules: multi-character names match
    [A-Za-z][A-Za-z_-]*, flag names are one ASCII letter.
- ordinal(number)
  • "first", "second", ..., "11th" for position-first messages.
"""
import builtins
import functools
import re
from collections.abc import Sequence, Mapping, Set
from typing import final


@final
class UnsetType:
    """
    Internal sentinel type representing a value that was not provided.

    Characteristics
    - Boolean-false, but distinct from None and 0.
    - repr(Unset) -> "Unset".
    - Sealed and singleton per process.
    """

    def __or__(self, other, /):
        try:
            return other | type(self)
        except TypeError:
            return NotImplemented

    def __ror__(self, other, /):
        try:
            return other | type(self)
        except TypeError:
            return NotImplemented

    @functools.cache
    def __new__(cls):
        return super().__new__(cls)

    def __bool__(self):
        return False

    def __repr__(self):
        return "Unset"

    def __init_subclass__(cls, **options):
        raise TypeError("type 'UnsetType' is not an acceptable base type")


def coalesce(object, default=None, /):
    """
    Return `object` unless it is the Unset sentinel, in which case return `default`.

    Falsey values such as None, 0, "" or False are preserved as-is.
    """
    return object if object is not Unset else default


def rename(*parameters):
    """
    Set a stable __name__/__qualname__ on a callable, or return a decorator doing so.

    Forms
    - rename(callable, name) -> callable
    - rename(name) -> decorator
    """
    match len(parameters):
        case 2:
            callable, name = parameters
            if not builtins.callable(callable):
                raise TypeError("rename() first argument must be callable")
            if not isinstance(name, str):
                raise TypeError("rename() second argument must be a string")
            try:
                callable.__qualname__ = name
                callable.__name__ = name
            except (AttributeError, TypeError):
                raise TypeError("rename() first argument must be a updatable callable") from None
            return callable
        case 1:
            name, = parameters
            if not isinstance(name, str):
                raise TypeError("@rename() argument must be a string")

            def wrapper(callable):
                if not builtins.callable(callable):
                    raise TypeError("@rename() must be applied to a callable")
                return rename(callable, name)

            return rename(wrapper, "rename")
        case _:
            raise TypeError("rename takes 1 to 2 arguments but %d were given" % len(parameters))


def _immortalize(object):
    """
    Copy container values so callers cannot mutate internal state through a view.

    Sequences become tuples, mappings become dicts, sets become frozensets; any
    other object (slots included) is returned as-is.
    """
    if isinstance(object, Sequence) and not isinstance(object, str):
        return tuple(object)
    elif isinstance(object, Mapping):
        return dict(object)
    elif isinstance(object, Set):
        return frozenset(object)
    return object


def mirror(name, /):
    """
    Define a read-only property that mirrors the private attribute "_{name}".

    Containers are returned as shallow copies; other values are returned as-is,
    so identity-bearing objects (like output slots) keep their identity.
    """
    if not isinstance(name, str):
        raise TypeError("mirror() argument must be a string")

    @rename(name)
    def getter(self):
        return _immortalize(getattr(self, "_" + name))

    return property(getter)


def isname(text, /):
    """
    Check a multi-character declaration name: an ASCII letter followed by
    ASCII letters, '-' or '_'.
    """
    return isinstance(text, str) and re.fullmatch(r"[A-Za-z][A-Za-z_-]*", text) is not None


def isflagname(text, /):
    """
    Check a flag name: exactly one ASCII letter.
    """
    return isinstance(text, str) and re.fullmatch(r"[A-Za-z]", text) is not None


@functools.cache
def ordinal(number, /):
    """
    Return a human-friendly ordinal label for a 1-based position.

    1..10 are spelled out; other numbers use numeric suffixes (11th, 21st, 102nd).
    """
    try:
        return {
            1: "first",
            2: "second",
            3: "third",
            4: "fourth",
            5: "fifth",
            6: "sixth",
            7: "seventh",
            8: "eighth",
            9: "ninth",
            10: "tenth",
        }[number]
    except KeyError:
        pass

    if 10 < number % 100 < 20:
        return f"{number}th"

    return f'{number}%s' % {1: "st", 2: "nd", 3: "rd"}.get(number % 10, "th")


Unset = UnsetType()
"""
Internal sentinel for "not provided"; materialize with coalesce(value, default).
"""


__all__ = (
    # Functions
    "coalesce",
    "rename",
    "mirror",
    "isname",
    "isflagname",
    "ordinal",

    # Types
    "UnsetType",

    # Constants
    "Unset",
)
