r"""
kvargs argument specifications.

Overview
- Argument: immutable schema of one command line argument, either positional
  (declared with a `name`) or optional (declared with a `short` and/or `long`
  flag). It records the action applied when the argument is matched, its arity
  (nargs), default/const values, the required marker, a choice set, and the
  help metadata (help, metavar, version).

- Actions
  • value-taking: store, append, extend
  • presence-only: store_const, append_const, store_true, store_false, count
  • terminal: help, version
  • delegating: sub_command (hands every remaining token to a sub-parser),
    sub_argument (hands one bounded token run per occurrence to a sub-parser)

Attributes (given as flat key/value items and/or keywords)
- name, short, long, destination (alias dest), action, nargs, default, const,
  required, choices, help, metavar, version.

Validation highlights (every violation is a SchemaError raised through trigger)
- name and short/long are mutually exclusive; each attribute at most once.
- nargs: positive integer up to the platform argument bound, or "?", "*", "+".
- choices must be a records.Container (its keys are the allowed values).
- only store and sub_command may be positional.
- nargs="?" needs a default on positionals (parser argument_default counts)
  and a const on optionals.
- action specific restrictions, see FORBIDDEN and REQUIRED below.

Quick example:
    >>> from kvargs.arguments import Argument
    >>> Argument(("short", "v", "action", "count"), {}, {})
    Traceback (most recent call last):
    ...
    kvargs.faults.UndeducibleDestinationError: unable to deduce ...
    >>> Argument(("short", "v", "long", "verbose", "action", "count"), {}, {}).key
    '--verbose'
"""
import functools
import operator
import re

from .faults import *
from .records import Container
from .utils import *

ACTIONS = (
    "store",
    "append",
    "extend",
    "store_const",
    "append_const",
    "store_true",
    "store_false",
    "count",
    "version",
    "help",
    "sub_command",
    "sub_argument",
)

# Actions that consume value tokens according to nargs.
VALUED = frozenset(("store", "append", "extend"))

# Actions that never consume a value token.
NULLARY = frozenset(("store_const", "append_const", "store_true", "store_false", "count", "help", "version"))

# Actions that delegate to registered sub-parsers.
DELEGATING = frozenset(("sub_command", "sub_argument"))

# Actions accepted on positional arguments.
POSITIONAL = frozenset(("store", "sub_command"))

ATTRIBUTES = (
    "name",
    "short",
    "long",
    "destination",
    "action",
    "nargs",
    "default",
    "const",
    "required",
    "choices",
    "help",
    "metavar",
    "version",
)

# Attributes an action refuses.
FORBIDDEN = {
    "store": (),
    "append": (),
    "extend": (),
    "store_const": ("nargs", "choices", "metavar"),
    "append_const": ("nargs", "choices", "metavar"),
    "store_true": ("default", "const", "nargs", "choices", "metavar"),
    "store_false": ("default", "const", "nargs", "choices", "metavar"),
    "count": ("const", "nargs", "choices", "metavar"),
    "version": ("default", "const", "required", "choices", "nargs", "metavar"),
    "help": ("default", "const", "required", "choices", "nargs", "metavar", "version"),
    "sub_command": ("default", "const", "choices", "nargs"),
    "sub_argument": ("default", "const", "choices", "nargs"),
}

# Attributes an action cannot do without.
REQUIRED = {
    "store_const": ("const",),
    "append_const": ("const",),
    "version": ("version",),
}


def collect(owner, items, attributes, known, context, /, aliases=None):
    """
    Internal: merge flat key/value items and keyword attributes into one dict.

    - items: flat sequence (key, value, key, value, ...); an odd length is a TypeError.
    - attributes: keyword attributes, merged after items.
    - known: accepted attribute names; anything else is an UnknownAttributeError.
    - aliases: optional mapping of alternative spellings to canonical names.
    - an attribute given twice (in any mix of items/keywords/aliases) is a
      DuplicateAttributeError.
    """
    if len(items) % 2:
        raise TypeError("%s expects attribute/value pairs, got an odd number of items" % owner)
    aliases = aliases or {}
    metadata = {}
    for name, value in [*zip(items[::2], items[1::2]), *attributes.items()]:
        if not isinstance(name, str):
            raise TypeError("%s attribute names must be strings" % owner)
        canonical = aliases.get(name, name)
        if canonical not in known:
            trigger(UnknownAttributeError(
                "%s does not recognise the attribute %r" % (owner, name),
                title="unknown attribute",
                code=FaultCode.UNKNOWN_ATTRIBUTE,
                argument=name,
                hint="use one of: %s" % ", ".join(known),
                docs=getdoc(FaultCode.UNKNOWN_ATTRIBUTE),
            ), **context)
        if canonical in metadata:
            trigger(DuplicateAttributeError(
                "%s attribute %r specified more than once" % (owner, canonical),
                title="duplicated attribute",
                code=FaultCode.DUPLICATED_ATTRIBUTE,
                argument=canonical,
                hint="keep a single %r attribute" % canonical,
                docs=getdoc(FaultCode.DUPLICATED_ATTRIBUTE),
            ), **context)
        metadata[canonical] = value
    return metadata


def boolean(owner, name, value, /):
    """
    Internal: accept a bool or the texts "true"/"false" (case-insensitive).
    """
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.strip().lower() in ("true", "false"):
        return value.strip().lower() == "true"
    raise TypeError("%s %r must be a boolean or 'true'/'false'" % (owner, name))


def _fail(context, fault, message, code, title, hint, /, **options):
    trigger(fault(
        message,
        title=title,
        code=code,
        hint=hint,
        docs=getdoc(code),
        **options
    ), **context)


def _sanitize_placement(cls, metadata, context, /):
    """
    Internal: resolve positional vs optional placement and the destination.

    - name excludes short/long (PlacementConflictError).
    - short: one character, a single leading '-' is accepted and dropped.
    - long: word characters and inner hyphens, a leading '--' is accepted and dropped.
    - destination: destination, else name, else long; '-' becomes '_'.
    """
    name = metadata.get("name", Unset)
    short = metadata.get("short", Unset)
    long = metadata.get("long", Unset)

    if name is not Unset and (short is not Unset or long is not Unset):
        _fail(context, PlacementConflictError,
              "both name and short/long specified; an argument cannot be both positional and optional",
              FaultCode.PLACEMENT_CONFLICT, "positional and optional",
              "declare a positional with 'name' or an optional with 'short'/'long', not both",
              argument=coalesce(name))

    if name is not Unset:
        if not isinstance(name, str):
            raise TypeError("%s 'name' must be a string" % cls.__typename__)
        if not (name := name.strip()) or name.startswith("-"):
            _fail(context, InvalidPlacementError,
                  "positional name %r must be non-empty and cannot start with '-'" % name,
                  FaultCode.INVALID_PLACEMENT, "invalid positional name",
                  "use 'short'/'long' to declare an optional argument",
                  argument=coalesce(name))

    if short is not Unset:
        if not isinstance(short, str):
            raise TypeError("%s 'short' must be a string" % cls.__typename__)
        if len(short) == 2 and short.startswith("-"):
            short = short[1:]
        if len(short) != 1 or short == "-" or short.isspace():
            _fail(context, InvalidSwitchError,
                  "short option attribute value %r is not a single character" % short,
                  FaultCode.INVALID_SWITCH, "invalid short option",
                  "use one character, for example short='v'",
                  argument=coalesce(short))

    if long is not Unset:
        if not isinstance(long, str):
            raise TypeError("%s 'long' must be a string" % cls.__typename__)
        if long.startswith("--"):
            long = long[2:]
        if not re.fullmatch(r"\w[\w-]*", long):
            _fail(context, InvalidSwitchError,
                  "long option attribute value %r is not a valid option name" % long,
                  FaultCode.INVALID_SWITCH, "invalid long option",
                  "use letters, digits, '_' and inner '-', for example long='dry-run'",
                  argument=long)

    if name is Unset and short is Unset and long is Unset:
        _fail(context, UndeducibleDestinationError,
              "none of name, long or short attributes provided for argument",
              FaultCode.UNDEDUCIBLE_DESTINATION, "missing argument name",
              "give a positional 'name' or an optional 'short'/'long' flag")

    destination = metadata.get("destination", Unset)
    if destination is not Unset and not isinstance(destination, str):
        raise TypeError("%s 'destination' must be a string" % cls.__typename__)
    destination = coalesce(destination, coalesce(name, coalesce(long, ""))).strip().replace("-", "_")
    if not destination:
        _fail(context, UndeducibleDestinationError,
              "unable to deduce destination name for argument value from destination, name or long attribute values",
              FaultCode.UNDEDUCIBLE_DESTINATION, "missing destination",
              "add a 'destination' attribute (for example destination='verbose')",
              argument=coalesce(short))

    metadata["name"] = coalesce(name)
    metadata["short"] = coalesce(short)
    metadata["long"] = coalesce(long)
    metadata["destination"] = destination


def _sanitize_values(cls, metadata, context, /):
    """
    Internal: validate action, nargs, choices and the scalar attributes.
    """
    action = metadata.get("action", "store")
    if action not in ACTIONS:
        _fail(context, UnknownActionError,
              "unknown action %r" % (action,),
              FaultCode.UNKNOWN_ACTION, "unknown action",
              "use one of: %s" % ", ".join(ACTIONS),
              argument=metadata["destination"])
    metadata["action"] = action

    nargs = metadata.get("nargs", Unset)
    if isinstance(nargs, str) and nargs.strip().isdigit():
        nargs = int(nargs)
    if nargs is not Unset:
        if isinstance(nargs, bool) or not isinstance(nargs, str | int) or (
                isinstance(nargs, str) and nargs not in ("?", "*", "+")
        ) or (
                isinstance(nargs, int) and not 0 < nargs <= argmax()
        ):
            _fail(context, InvalidNargsError,
                  "invalid nargs value %r" % (nargs,),
                  FaultCode.INVALID_NARGS, "invalid nargs",
                  "use a positive integer up to %d, or one of '?', '*', '+'" % argmax(),
                  argument=metadata["destination"])
    metadata["nargs"] = coalesce(nargs)

    choices = metadata.get("choices", Unset)
    if choices is not Unset and not isinstance(choices, Container):
        _fail(context, InvalidChoicesError,
              "choices attribute for %r is not a container" % metadata["destination"],
              FaultCode.INVALID_CHOICES, "invalid choices",
              "build the choice set with declare('red', '_', 'blue', '_')",
              argument=metadata["destination"])
    metadata["choices"] = coalesce(choices)

    default = metadata.get("default", Unset)
    if not isinstance(default, str | Container | Unset):
        raise TypeError("%s 'default' must be a string or a container" % cls.__typename__)
    metadata["default"] = coalesce(default)

    for name in ("const", "help", "metavar", "version"):
        if not isinstance(value := metadata.get(name, Unset), str | Unset):
            raise TypeError("%s %r must be a string" % (cls.__typename__, name))
        metadata[name] = coalesce(value)

    metadata["required"] = boolean(cls.__typename__, "required", metadata.get("required", False))


def _sanitize_action(cls, metadata, given, context, /):
    """
    Internal: enforce placement and per-action attribute rules.

    - given: attribute names the caller actually provided (before defaults).
    """
    action = metadata["action"]
    destination = metadata["destination"]
    positional = metadata["name"] is not None

    if positional and action not in POSITIONAL:
        _fail(context, InvalidPlacementError,
              "action %r cannot be used with the positional argument %r" % (action, destination),
              FaultCode.INVALID_PLACEMENT, "invalid positional action",
              "positional arguments accept only the 'store' and 'sub_command' actions",
              argument=destination)
    if positional and "required" in given:
        _fail(context, InvalidPlacementError,
              "'required' is not accepted on the positional argument %r" % destination,
              FaultCode.INVALID_PLACEMENT, "invalid positional attribute",
              "positionals are required unless nargs is '?' or '*'",
              argument=destination)

    for name in FORBIDDEN[action]:
        if name in given:
            _fail(context, ActionConflictError,
                  "action %r does not accept the %r attribute (argument %r)" % (action, name, destination),
                  FaultCode.ACTION_CONFLICT, "conflicting attribute",
                  "remove %r or choose another action" % name,
                  argument=destination)
    for name in REQUIRED.get(action, ()):
        if name not in given:
            _fail(context, ActionConflictError,
                  "action %r requires the %r attribute (argument %r)" % (action, name, destination),
                  FaultCode.ACTION_CONFLICT, "missing attribute",
                  "add a %r attribute" % name,
                  argument=destination)

    if metadata["nargs"] == "?":
        if positional and metadata["default"] is None and getattr(context.get("parser"), "argument_default", None) is None:
            _fail(context, MissingDefaultError,
                  "optional positional %r (nargs '?') has no default" % destination,
                  FaultCode.MISSING_DEFAULT, "missing default",
                  "add a 'default' attribute or an 'argument_default' on the parser",
                  argument=destination)
        if not positional and metadata["const"] is None:
            _fail(context, MissingConstError,
                  "optional flag %r with nargs '?' has no const" % destination,
                  FaultCode.MISSING_CONST, "missing const",
                  "add a 'const' attribute used when the flag is given without a value",
                  argument=destination)

    if "version" in given and action != "version":
        trigger(UnusedAttributeWarning(
            "the 'version' attribute of %r is unused by action %r" % (destination, action),
            title="unused attribute",
            code=FaultCode.UNUSED_ATTRIBUTE,
            argument=destination,
            hint="only the 'version' action prints a version string",
            docs=getdoc(FaultCode.UNUSED_ATTRIBUTE),
        ), **context)
    if "const" in given and action in VALUED and metadata["nargs"] != "?":
        trigger(UnusedAttributeWarning(
            "the 'const' attribute of %r is unused without nargs '?'" % destination,
            title="unused attribute",
            code=FaultCode.UNUSED_ATTRIBUTE,
            argument=destination,
            hint="set nargs='?' so the const is stored when no value follows the flag",
            docs=getdoc(FaultCode.UNUSED_ATTRIBUTE),
        ), **context)


class ArgumentType(type):
    """
    Metaclass that turns specs into introspectable, read-only descriptors.

    Responsibilities
    - Derive __typename__ from the class name (camel-case split with hyphens)
      for messages.
    - Expose every name listed in __introspectable__ as a read-only property
      over the "_<name>" backing field (see utils.view).
    - Provide stable __repr__/__rich_repr__ implementations.
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
                name: view(name) for name in namespace.get("__introspectable__", ())
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
                if (value := getattr(self, name)) is not None:
                    yield name, value
        self.__rich_repr__ = __rich_repr__

        return self


class Argument(metaclass=ArgumentType):
    """
    Immutable specification of one positional or optional argument.

    Construction
    - Argument(items, attributes, context)
      • items: flat (attribute, value, ...) sequence.
      • attributes: keyword attributes (mapping).
      • context: trigger options of the owning parser (parser, shell, fancy, colorful).
    - Normally built by parsers.add_argument(), which also registers it.

    Derived attributes
    - key: internal disambiguation key ("--long", else "-s", else the destination).
    - positional: True for positional arguments.
    - flags: option strings ("-s", "--long") in that order.
    - label: how messages refer to the argument ("--long"/"-s" or the positional name).
    """

    __introspectable__ = (
        "destination",
        "name",
        "short",
        "long",
        "action",
        "nargs",
        "default",
        "const",
        "required",
        "choices",
        "help",
        "metavar",
        "version",
    )

    def __new__(cls, items, attributes, context, /):
        metadata = collect("add_argument()", tuple(items), dict(attributes), ATTRIBUTES, context, {"dest": "destination"})
        given = frozenset(metadata)

        _sanitize_placement(cls, metadata, context)
        _sanitize_values(cls, metadata, context)
        _sanitize_action(cls, metadata, given, context)

        self = super().__new__(cls)
        for name in cls.__introspectable__:
            object.__setattr__(self, "_" + name, metadata[name])
        return self

    def __setattr__(self, name, value, /):
        raise AttributeError("%s is read-only once built" % type(self).__typename__)

    @property
    def positional(self):
        return self._name is not None

    @property
    def key(self):
        if self._long is not None:
            return "--" + self._long
        if self._short is not None:
            return "-" + self._short
        return self._destination

    @property
    def flags(self):
        return tuple(flag for flag in (
            "-" + self._short if self._short is not None else None,
            "--" + self._long if self._long is not None else None,
        ) if flag)

    @property
    def label(self):
        return self.key if not self.positional else self._name

    @property
    def nullary(self):
        return self._action in NULLARY


__all__ = (
    "Argument",
    "ACTIONS",
    "ATTRIBUTES",
)

# Remove the internal metaclass from the module namespace to avoid accidental
# exposure in docs, autocompletion, or star-imports. Not part of the public API.
del ArgumentType
