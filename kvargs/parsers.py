"""
kvargs parser descriptors and the builder API.

A Parser is an immutable descriptor: every builder call returns an updated
copy (through copy.replace), so a parser registered somewhere can never be
altered behind its holder's back.

Tables kept by a parser
- arguments: disambiguation key → Argument, in declaration order.
- positionals: keys of positional arguments, in declaration order.
- shorts / longs: flag text (without hyphens) → key.
- subparsers: destination → {id → Parser}; aliases: destination → {alias → id}.

Builder API
- new_parser(*items, **attributes) → Parser
- add_argument(parser, *items, **attributes) → Parser
- add_subparser(parser, destination, id, subparser, *aliases) → Parser
- isparser(value) → bool
"""
import copy
import os
import sys
from types import MappingProxyType

from .arguments import Argument, boolean, collect
from .faults import *
from .records import Container
from .utils import *

ATTRIBUTES = (
    "prog",
    "usage",
    "description",
    "epilogue",
    "argument_default",
    "add_help",
    "shell",
    "colorful",
    "fancy",
)


class Parser:
    """
    Immutable parser descriptor.

    Build it with new_parser(); extend it with add_argument() and
    add_subparser(). Direct attribute assignment raises AttributeError.

    Runtime flags
    - shell: surface faults the way a shell tool does (print, then exit).
    - colorful: style rendered faults and help with the rich palette.
    - fancy: wrap rendered faults in a panel.
    """

    prog = property(lambda self: self._prog if self._prog is not None else _default_prog())
    usage = view("usage")
    description = view("description")
    epilogue = view("epilogue")
    argument_default = view("argument_default")
    add_help = view("add_help")
    shell = view("shell")
    colorful = view("colorful")
    fancy = view("fancy")
    arguments = view("arguments")
    positionals = view("positionals")
    shorts = view("shorts")
    longs = view("longs")

    def __new__(cls, /, **fields):
        self = super().__new__(cls)
        for name, value in (_FIELDS | fields).items():
            object.__setattr__(self, "_" + name, value)
        return self

    def __setattr__(self, name, value, /):
        raise AttributeError("parser is immutable; use the builder functions to obtain an updated copy")

    def __replace__(self, /, **changes):
        unknown = changes.keys() - _FIELDS.keys()
        if unknown:
            raise TypeError("parser has no field(s) %s" % ", ".join(sorted(unknown)))
        return type(self)(**{name: getattr(self, "_" + name) for name in _FIELDS} | changes)

    def __copy__(self):
        return self

    def __deepcopy__(self, memo, /):
        return self

    def __repr__(self):
        return "parser(prog=%r, arguments=%r)" % (self.prog, tuple(self._arguments))

    @property
    def context(self):
        """
        Options merged into every fault this parser surfaces.
        """
        return {"parser": self, "shell": self._shell, "colorful": self._colorful, "fancy": self._fancy}

    @property
    def options(self):
        """
        Registered short flags as one string, in registration order ("hvo").

        The engine scans short clusters ("-vo") against it.
        """
        return "".join(self._shorts)

    @property
    def subcommand(self):
        """
        The sub_command argument of this parser, or None.
        """
        for argument in self._arguments.values():
            if argument.action == "sub_command":
                return argument
        return None

    def subparsers(self, destination, /):
        """
        Registered id → Parser mapping for a destination (empty when none).
        """
        return MappingProxyType(self._subparsers.get(destination, {}))

    def aliases(self, destination, id, /):
        """
        Aliases registered for one sub-parser id, in registration order.
        """
        return tuple(alias for alias, target in self._aliases.get(destination, {}).items() if target == id)

    def resolve(self, destination, name, /):
        """
        Map an id or alias typed by the user to the registered id (None when unknown).
        """
        if name in self._subparsers.get(destination, {}):
            return name
        return self._aliases.get(destination, {}).get(name)

    def subparser(self, destination, id, /):
        """
        Return the registered sub-parser as it runs under this parser.

        The runtime flags are inherited, and the program name becomes
        "<prog> <id>" unless the sub-parser was given its own.
        """
        parser = self._subparsers[destination][id]
        return copy.replace(
            parser,
            prog=parser._prog if parser._prog is not None else "%s %s" % (self.prog, id),
            shell=self._shell,
            colorful=self._colorful,
            fancy=self._fancy,
        )


_FIELDS = {
    "prog": None,
    "usage": None,
    "description": None,
    "epilogue": None,
    "argument_default": None,
    "add_help": True,
    "shell": False,
    "colorful": False,
    "fancy": False,
    "arguments": {},
    "positionals": (),
    "shorts": {},
    "longs": {},
    "subparsers": {},
    "aliases": {},
}


def _default_prog():
    if prog := getattr(__import__("__main__"), "__prog__", None):
        return prog
    return os.path.basename(sys.argv[0]) if sys.argv and sys.argv[0] else "kvargs"


def _check_parser(object, function, /):
    if not isinstance(object, Parser):
        raise NotAParserError(
            "%s() expects a parser, got %s" % (function, type(object).__name__),
            title="not a parser",
            code=FaultCode.NOT_A_PARSER,
            hint="build one with new_parser()",
            docs=getdoc(FaultCode.NOT_A_PARSER),
        )


def isparser(value, /):
    """
    Type discriminant: True when value is a parser descriptor. Never raises.
    """
    return isinstance(value, Parser)


def new_parser(*items, **attributes):
    """
    Create a parser descriptor.

    attributes
    - prog: program name (default: __main__.__prog__, else basename of sys.argv[0]).
    - usage, description, epilogue: help texts.
    - argument_default: fallback default for every argument without one.
    - add_help: register -h/--help (default true).
    - shell, colorful, fancy: runtime flags (see Parser).
    """
    metadata = collect("new_parser()", items, attributes, ATTRIBUTES, {})
    flags = {name: boolean("new_parser()", name, metadata.get(name, name == "add_help"))
             for name in ("add_help", "shell", "colorful", "fancy")}

    for name in ("prog", "usage", "description", "epilogue"):
        if not isinstance(metadata.get(name, Unset), str | Unset):
            raise TypeError("new_parser() %r must be a string" % name)
    if not isinstance(metadata.get("argument_default", Unset), str | Container | Unset):
        raise TypeError("new_parser() 'argument_default' must be a string or a container")

    parser = Parser(
        prog=metadata.get("prog"),
        usage=metadata.get("usage"),
        description=metadata.get("description"),
        epilogue=metadata.get("epilogue"),
        argument_default=metadata.get("argument_default"),
        **flags
    )
    if parser.add_help:
        parser = add_argument(
            parser,
            "short", "h",
            "long", "help",
            "action", "help",
            "help", "show this help message and exit",
        )
    return parser


def add_argument(parser, *items, **attributes):
    """
    Return a copy of parser with one more argument registered.

    items/attributes follow Argument: flat (attribute, value, ...) pairs and/or
    keywords; see kvargs.arguments for the accepted names and their checks.
    Registration adds the parser-level checks: flags must be unique, a
    positional destination is declared once, and at most one sub_command
    argument exists per parser.
    """
    _check_parser(parser, "add_argument")
    context = parser.context
    argument = Argument(items, attributes, context)

    if argument.short is not None and argument.short in parser._shorts:
        trigger(DuplicateSwitchError(
            "short option -%s is already registered" % argument.short,
            title="duplicated option",
            code=FaultCode.DUPLICATED_SWITCH,
            argument="-" + argument.short,
            hint="pick another short flag or drop it",
            docs=getdoc(FaultCode.DUPLICATED_SWITCH),
        ), **context)
    if argument.long is not None and argument.long in parser._longs:
        trigger(DuplicateSwitchError(
            "long option --%s is already registered" % argument.long,
            title="duplicated option",
            code=FaultCode.DUPLICATED_SWITCH,
            argument="--" + argument.long,
            hint="pick another long flag or drop it",
            docs=getdoc(FaultCode.DUPLICATED_SWITCH),
        ), **context)
    if argument.positional and argument.key in parser._arguments:
        trigger(DuplicateSwitchError(
            "positional argument %r is already registered" % argument.name,
            title="duplicated positional",
            code=FaultCode.DUPLICATED_SWITCH,
            argument=argument.name,
            hint="give each positional its own name",
            docs=getdoc(FaultCode.DUPLICATED_SWITCH),
        ), **context)
    if argument.action == "sub_command" and (previous := parser.subcommand) is not None:
        trigger(MultipleSubcommandsError(
            "parser already has the sub_command argument %r" % previous.label,
            title="multiple sub commands",
            code=FaultCode.MULTIPLE_SUBCOMMANDS,
            argument=argument.label,
            hint="a parser dispatches to one sub_command; use sub_argument for repeatable sub-parsers",
            docs=getdoc(FaultCode.MULTIPLE_SUBCOMMANDS),
        ), **context)

    return copy.replace(
        parser,
        arguments=parser._arguments | {argument.key: argument},
        positionals=parser._positionals + (argument.key,) * argument.positional,
        shorts=parser._shorts | ({argument.short: argument.key} if argument.short is not None else {}),
        longs=parser._longs | ({argument.long: argument.key} if argument.long is not None else {}),
    )


def add_subparser(parser, destination, id, subparser, /, *aliases):
    """
    Return a copy of parser with subparser registered under (destination, id).

    - destination: the destination of a sub_command/sub_argument argument
      ('-' is turned into '_' like argument destinations).
    - id: the token that selects the sub-parser on the command line.
    - aliases: further tokens selecting the same sub-parser.
    """
    _check_parser(parser, "add_subparser")
    _check_parser(subparser, "add_subparser")
    for name, value in (("destination", destination), ("id", id), *(("alias", alias) for alias in aliases)):
        if not isinstance(value, str) or not value:
            raise TypeError("add_subparser() %s must be a non-empty string" % name)

    destination = destination.replace("-", "_")
    registered = parser._subparsers.get(destination, {})
    known = parser._aliases.get(destination, {})
    seen = set(registered) | set(known)
    for name in (id, *aliases):
        if name in seen:
            trigger(DuplicateSubcommandError(
                "sub command %r is already registered for %r" % (name, destination),
                title="duplicated sub command",
                code=FaultCode.DUPLICATED_SUBCOMMAND,
                argument=destination,
                input=name,
                hint="each id and alias selects exactly one sub-parser",
                docs=getdoc(FaultCode.DUPLICATED_SUBCOMMAND),
            ), **parser.context)
        seen.add(name)

    return copy.replace(
        parser,
        subparsers=parser._subparsers | {destination: registered | {id: subparser}},
        aliases=parser._aliases | {destination: known | dict.fromkeys(aliases, id)},
    )


__all__ = (
    "Parser",
    "new_parser",
    "add_argument",
    "add_subparser",
    "isparser",
)
