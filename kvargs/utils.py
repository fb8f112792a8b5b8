"""
kvargs utilities (internal helpers, carefully exposed)

Scope
- Small building blocks shared by the records, arguments and parsers layers.
- Public-but-internal leaning: stable enough for consumers, designed primarily
  to support the higher-level modules.

Overview
- UnsetType / Unset
  • Singleton sentinel to represent “value not provided” without conflating with None.
  • Falsey (bool(Unset) is False), printable as "Unset", and non-subclassable.

- coalesce(value, default=None)
  • Replace Unset with a concrete default, but preserve legitimate falsey values like "".

- rename(callable, name) / @rename("name")
  • Assign stable __name__/__qualname__ to generated accessors for clean tracebacks.

- view("attr")
  • Read-only property factory exposing a private backing field (self._attr) as an
    immutable view (tuple / MappingProxyType / frozenset).

- pluralize(word, count)
  • Tiny English pluralizer for fault messages ("1 value", "2 values").

- argmax()
  • Platform bound on the number of arguments a process may receive (nargs ceiling).

Quick examples
    >>> coalesce(Unset, "fallback")
    'fallback'
    >>> coalesce("", "fallback")
    ''
    >>> pluralize("value", 2)
    '2 values'
"""
import builtins
import functools
import os
from collections.abc import Sequence, Set
from types import MappingProxyType
from typing import final


@final
class UnsetType:
    """
    Internal sentinel type representing a value that was not provided.

    Text is the only payload type of this package, so the empty string is a
    legitimate user value; Unset is how the builder tells “not provided” apart
    from “provided as empty”.

    Characteristics
    - Boolean-false: bool(Unset) is False, but it is distinct from None and "".
    - Printable: repr(Unset) -> "Unset".
    - Non-subclassable.
    - Singleton per process: UnsetType() always yields the same instance.
    """

    def __or__(self, other, /):
        """
        Support PEP 604 unions in isinstance checks (e.g., str | Unset).
        """
        try:
            return type(self) | other
        except TypeError:
            return NotImplemented

    def __ror__(self, other, /):
        """
        Support reversed PEP 604 unions when Unset appears on the right.
        """
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

    def __copy__(self):
        return self

    def __deepcopy__(self, memo, /):
        return self

    def __init_subclass__(cls, **options):
        raise TypeError("type 'UnsetType' is not an acceptable base type")


def coalesce(object, default=None, /):
    """
    Resolve the Unset sentinel to a concrete default.

    Falsey values like None, "" or an empty container are preserved as-is;
    only Unset is replaced.

    Examples
    - coalesce("name", "fallback") -> "name"
    - coalesce(Unset, "fallback")  -> "fallback"
    - coalesce("", "fallback")     -> ""
    """
    return object if object is not Unset else default


def rename(*parameters):
    """
    Set a stable __name__/__qualname__ on a callable, or return a decorator
    that will do so later.

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


def view(name, /):
    """
    Define a read-only property over the private backing attribute "_{name}".

    Containers are exposed as immutable views so the public surface of a spec
    cannot be used to alter it:
    - Sequence (non-str) → tuple
    - dict              → MappingProxyType
    - Set               → frozenset
    - other types       → returned as-is (records.Container is already immutable)
    """
    if not isinstance(name, str):
        raise TypeError("view() argument must be a string")

    @rename(name)
    def getter(self):
        value = getattr(self, "_" + name)
        if isinstance(value, Sequence) and not isinstance(value, str):
            return tuple(value)
        if isinstance(value, dict):
            return MappingProxyType(value)
        if isinstance(value, Set):
            return frozenset(value)
        return value

    return property(getter)


def pluralize(word, count, /):
    """
    Render "<count> <word>" with a naive English plural for count != 1.

    Only the vocabulary of this package's messages is expected here
    (value, argument, token), so the rule set stays deliberately small.
    """
    if count == 1:
        return "%d %s" % (count, word)
    if word.endswith(("s", "sh", "ch", "x", "z")):
        return "%d %ses" % (count, word)
    return "%d %ss" % (count, word)


@functools.cache
def argmax():
    """
    Return the platform bound on process arguments (used as the nargs ceiling).

    Falls back to the POSIX minimum guaranteed value when the platform does not
    expose SC_ARG_MAX (e.g. Windows).
    """
    try:
        bound = os.sysconf("SC_ARG_MAX")
    except (AttributeError, ValueError, OSError):
        return 4096
    return bound if bound > 0 else 4096


Unset = UnsetType()
"""
Internal sentinel for “not provided”.

Typical pattern: value = coalesce(user_value, default) to materialize a fallback
only when user_value is Unset.
"""


__all__ = (
    # Functions
    "coalesce",
    "rename",
    "view",
    "pluralize",
    "argmax",

    # Types
    "UnsetType",

    # Constants
    "Unset",
)
