"""
kvargs parsing engine.

One Engine runs one (sub-)parse: it owns the token queue, the positional
cursor and the raw result, so a recursive descent into a sub-parser is just a
fresh Engine; nothing has to be saved or restored around it.

Loop (one token per iteration)
- "--": stray value boundary, discarded.
- "--name" / "--name=value": long option.
- "-xyz": cluster of short flags; presence-only flags apply and scanning goes
  on, the first value-taking flag takes the rest of the token as its first value.
- anything else: the next expected positional, or an excess token. A
  bounded engine (one sub_argument occurrence) stops there instead and leaves
  the rest of its tokens to the enclosing parse.

Value boundaries
- where a value is required, an option-looking token means "missing" unless
  it is preceded by a literal "--", which is consumed and forces the next
  token to be the value.
- "?", "*" and the tail of "+" stop at an option-looking token, at the end of
  input, or at a literal "--" (consumed).

parse_arguments() runs the engine and then validation.validate() on its raw
result; help/version actions end the whole parse (nested ones included)
through the private Halt exception.
"""
import difflib
import shlex
import sys
from collections import deque

from . import records
from .faults import *
from .helps import print_help, print_version
from .parsers import isparser
from .records import Container
from .utils import *
from .validation import validate


# Actions that build on the destination's previous value (or its default).
ACCUMULATING = frozenset(("append", "extend", "append_const", "count"))


class Halt(Exception):
    """
    Internal: a help/version action finished the parse successfully.
    """


def optionlike(token, /):
    """
    True for tokens that look like a flag ("-x", "--name", and the bare "--").
    """
    return token.startswith("-") and len(token) > 1


def indexed(values, /):
    """
    Build the index-keyed container ("0", "1", ...) of a multi-value argument.
    """
    return Container((str(index), value) for index, value in enumerate(values))


def _seeded(argument, current, /):
    """
    Starting value of an accumulating action: the parsed value so far, else its default.
    """
    if current is not None or argument.default is None or argument.action not in ACCUMULATING:
        return current
    if argument.action == "count" or isinstance(argument.default, Container):
        return argument.default
    return indexed((argument.default,))


def _appended(container, value, /):
    if not isinstance(container, Container):
        container = Container()
    return records.set(container, str(records.size(container)), value)


class Engine:
    """
    Per-invocation parse state.

    - parser: the descriptor being applied (already carrying its runtime prog/flags).
    - tokens: deque of the remaining input tokens.
    - positionals: deque of positional keys not consumed yet.
    - result: raw result container (input-produced values only).
    - excess: positional tokens nobody expected.
    - bounded: stop at the first unexpected positional token, leaving it and
      everything after it in tokens.
    """

    def __init__(self, parser, tokens, /, bounded=False):
        self.parser = parser
        self.tokens = deque(tokens)
        self.positionals = deque(parser.positionals)
        self.result = Container()
        self.excess = []
        self.bounded = bounded

    def trigger(self, fault, /, **options):
        trigger(fault, **(self.parser.context | options))

    def run(self):
        """
        Consume every token and return the raw result container.
        """
        while self.tokens:
            token = self.tokens.popleft()
            if token == "--":
                continue
            if token.startswith("--"):
                self._long(token)
            elif optionlike(token):
                self._cluster(token)
            elif self.positionals:
                self.tokens.appendleft(token)
                argument = self.parser.arguments[self.positionals.popleft()]
                self._apply(argument, argument.name)
            elif self.bounded:
                self.tokens.appendleft(token)
                break
            else:
                self.excess.append(token)

        if self.excess:
            self.trigger(ExcessPositionalsWarning(
                "unrecognized positional %s discarded: %s" % (
                    "argument" if len(self.excess) == 1 else "arguments", " ".join(map(repr, self.excess))
                ),
                title="excess positionals",
                code=FaultCode.EXCESS_POSITIONALS,
                input=tuple(self.excess),
                hint="run '%s --help' to see the expected usage" % self.parser.prog,
                docs=getdoc(FaultCode.EXCESS_POSITIONALS),
            ))
        return self.result

    def _unknown(self, input):
        switches = ["--" + name for name in self.parser.longs] + ["-" + name for name in self.parser.shorts]
        suggestions = difflib.get_close_matches(input, switches, 5)
        try:
            hint = "did you mean %r? you can also run '%s --help' to see all options" % (suggestions[0], self.parser.prog)
        except IndexError:
            hint = "try '%s --help' to see all available options" % self.parser.prog
        self.trigger(UnknownSwitchError(
            "unrecognized option %r" % input,
            title="unknown option",
            code=FaultCode.UNKNOWN_SWITCH,
            input=input,
            suggestions=suggestions,
            hint=hint,
            docs=getdoc(FaultCode.UNKNOWN_SWITCH),
        ))

    def _long(self, token):
        name, equals, value = token[2:].partition("=")
        if (key := self.parser.longs.get(name)) is None:
            return self._unknown("--" + name)
        argument = self.parser.arguments[key]
        if equals and argument.nullary:
            self.trigger(FlagAssignmentError(
                "option --%s does not take a value" % name,
                title="flag cannot take a value",
                code=FaultCode.FLAG_ASSIGNMENT,
                input=token,
                argument=argument.label,
                hint="remove everything from '=' (for example: --%s)" % name,
                docs=getdoc(FaultCode.FLAG_ASSIGNMENT),
            ))
        self._apply(argument, "--" + name, value if equals else None)

    def _cluster(self, token):
        chars, options = token[1:], self.parser.options
        for position, char in enumerate(chars):
            if char not in options:
                return self._unknown("-" + char)
            argument = self.parser.arguments[self.parser.shorts[char]]
            if argument.nullary:
                self._apply(argument, "-" + char)
                continue
            self._apply(argument, "-" + char, chars[position + 1:] or None)
            return

    # --- value collection ---

    def _required(self):
        """
        Pop one required value, or return None when it is missing.
        """
        if not self.tokens:
            return None
        if self.tokens[0] == "--":
            self.tokens.popleft()
            return self.tokens.popleft() if self.tokens else None
        if optionlike(self.tokens[0]):
            return None
        return self.tokens.popleft()

    def _optional(self):
        """
        Pop one optional value, or return None at a boundary ("--" is consumed).
        """
        if not self.tokens:
            return None
        if self.tokens[0] == "--":
            self.tokens.popleft()
            return None
        if optionlike(self.tokens[0]):
            return None
        return self.tokens.popleft()

    def _greedy(self, values):
        while (value := self._optional()) is not None:
            values.append(value)
        return values

    def _missing(self, argument, input, expected, got):
        if expected == 1:
            return self.trigger(MissingValueError(
                "argument %s expected one value" % input,
                title="missing value",
                code=FaultCode.MISSING_VALUE,
                input=input,
                argument=argument.label,
                hint="pass a value after %s (use '-- VALUE' for values starting with '-')" % input,
                docs=getdoc(FaultCode.MISSING_VALUE),
            ))
        self.trigger(NotEnoughValuesError(
            "argument %s expected %s, got %d" % (input, pluralize("value", expected), got),
            title="not enough values",
            code=FaultCode.NOT_ENOUGH_VALUES,
            input=input,
            argument=argument.label,
            hint="pass exactly %s after %s" % (pluralize("value", expected), input),
            docs=getdoc(FaultCode.NOT_ENOUGH_VALUES),
        ))

    def _values(self, argument, input, inline=None):
        """
        Collect the value(s) of a value-taking argument according to its nargs.

        Returns a scalar (absent nargs, "?"), an index-keyed container (N, "*",
        "+"), or None when a "?" optional found no value (the caller uses const).
        """
        match argument.nargs:
            case None:
                if inline is None and (inline := self._required()) is None:
                    self._missing(argument, input, 1, 0)
                return inline
            case "?":
                return inline if inline is not None else self._optional()
            case "*":
                return indexed(self._greedy([inline] if inline is not None else []))
            case "+":
                if inline is None and (inline := self._required()) is None:
                    self._missing(argument, input, 1, 0)
                return indexed(self._greedy([inline]))
            case int() as nargs:
                values = [inline] if inline is not None else []
                while len(values) < nargs:
                    if (value := self._required()) is None:
                        self._missing(argument, input, nargs, len(values))
                    values.append(value)
                return indexed(values)

    # --- actions ---

    def _store(self, destination, value):
        self.result = records.set(self.result, destination, value)

    def _apply(self, argument, input, inline=None):
        destination = argument.destination
        current = _seeded(argument, records.get(self.result, destination))
        match argument.action:
            case "store":
                self._store(destination, self._value(argument, input, inline))
            case "append":
                self._store(destination, _appended(current, self._value(argument, input, inline)))
            case "extend":
                value = self._value(argument, input, inline)
                for element in value.values() if isinstance(value, Container) else (value,):
                    current = _appended(current, element)
                self._store(destination, current)
            case "store_const":
                self._store(destination, argument.const)
            case "append_const":
                self._store(destination, _appended(current, argument.const))
            case "store_true":
                self._store(destination, "true")
            case "store_false":
                self._store(destination, "false")
            case "count":
                count = int(current) if isinstance(current, str) and current.isdigit() else 0
                self._store(destination, str(count + 1))
            case "help":
                print_help(self.parser)
                raise Halt
            case "version":
                print_version(self.parser, argument)
                raise Halt
            case "sub_command":
                self._subcommand(argument, input, inline)
            case "sub_argument":
                self._subargument(argument, input, inline)

    def _value(self, argument, input, inline):
        value = self._values(argument, input, inline)
        if value is None and argument.nargs == "?":
            return argument.const if not argument.positional else argument.default
        return value

    def _select(self, argument, input, inline):
        """
        Read the sub-parser id (aliases resolve to it) and return (id, sub-parser).
        """
        destination = argument.destination
        name = inline if inline is not None else self._optional()
        choices = tuple(self.parser.subparsers(destination))
        if name is None:
            self.trigger(MissingSubcommandError(
                "argument %s expected a sub command (choose from %s)" % (input, ", ".join(map(repr, choices))),
                title="missing sub command",
                code=FaultCode.MISSING_SUBCOMMAND,
                input=input,
                argument=argument.label,
                hint="run '%s --help' to see available sub commands" % self.parser.prog,
                docs=getdoc(FaultCode.MISSING_SUBCOMMAND),
            ))
        if (id := self.parser.resolve(destination, name)) is None:
            suggestions = difflib.get_close_matches(name, choices, 5)
            try:
                hint = "did you mean %r? you can also run '%s --help' to see available sub commands" % (
                    suggestions[0], self.parser.prog
                )
            except IndexError:
                hint = "run '%s --help' to see available sub commands" % self.parser.prog
            self.trigger(UnknownSubcommandError(
                "invalid sub command %r for %s (choose from %s)" % (name, input, ", ".join(map(repr, choices))),
                title="unknown sub command",
                code=FaultCode.UNKNOWN_SUBCOMMAND,
                input=name,
                argument=argument.label,
                suggestions=suggestions,
                hint=hint,
                docs=getdoc(FaultCode.UNKNOWN_SUBCOMMAND),
            ))
        return id, self.parser.subparser(destination, id)

    def _subcommand(self, argument, input, inline):
        id, subparser = self._select(argument, input, inline)
        tokens, self.tokens = self.tokens, deque()
        self._store(argument.destination, records.declare(id, Engine(subparser, tokens).run()))

    def _subargument(self, argument, input, inline):
        id, subparser = self._select(argument, input, inline)
        tokens = []
        while self.tokens:
            if self.tokens[0] == "--":
                self.tokens.popleft()
                break
            if optionlike(token := self.tokens[0]) and not _registered(subparser, token):
                break
            tokens.append(self.tokens.popleft())
        engine = Engine(subparser, tokens, bounded=True)
        result = records.declare(id, engine.run())
        # Tokens the occurrence had no use for go back to this parse, in order
        self.tokens.extendleft(reversed(engine.tokens))
        self._store(argument.destination, _appended(records.get(self.result, argument.destination), result))


def _registered(parser, token):
    if token.startswith("--"):
        return token[2:].partition("=")[0] in parser.longs
    return token[1] in parser.options


def parse_arguments(parser, tokens=None, /):
    """
    Parse tokens against parser and return the validated result container.

    - tokens: None (sys.argv[1:]), a command line string (split like a POSIX
      shell), or an iterable of strings.
    - returns None when a help/version action ended the parse; in shell mode
      the process exits with status 0 instead.
    """
    if not isparser(parser):
        raise NotAParserError(
            "parse_arguments() expects a parser, got %s" % type(parser).__name__,
            title="not a parser",
            code=FaultCode.NOT_A_PARSER,
            hint="build one with new_parser()",
            docs=getdoc(FaultCode.NOT_A_PARSER),
        )
    if tokens is None:
        tokens = sys.argv[1:]
    elif isinstance(tokens, str):
        tokens = shlex.split(tokens)
    tokens = list(tokens)
    for token in tokens:
        if not isinstance(token, str):
            raise TypeError("parse_arguments() tokens must be strings, not %s" % type(token).__name__)

    try:
        result = Engine(parser, tokens).run()
    except Halt:
        if parser.shell:
            sys.exit(0)
        return None
    return validate(parser, result)


__all__ = (
    "Engine",
    "parse_arguments",
)
