"""
kvargs faults (errors and warnings) and rendering.

Scope
- FaultCode: canonical, stable numeric identifiers for all user-facing issues
  (errors and warnings). Codes are grouped by domain to keep copy consistent
  and make logs/searches predictable.
- ParserException / ParserWarning: base types that carry message + options and
  know how to render themselves through rich.
- SchemaError / KindError / ParseError: the three error kinds (malformed
  argument specification, wrong value kind, rejected command line).
- trigger(): central entry point to surface any fault (respecting shell/fancy/colorful).
- getdoc(): optional description lookup for a code from the host application.

Integration
- builders and the parsing engine call trigger(fault, **ctx) with the parser
  runtime flags merged in.
- outside shell mode, exceptions are raised and warnings go through warnings.warn;
  in shell mode, both are rendered on stderr via rich and errors exit with status 1.
"""
import copy
import sys
import warnings
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
    canonical fault codes used across the package (stable identifiers).

    grouping (by high-level domain)
    - schema (101xx): malformed argument/parser specifications and container misuse
    - type (102xx): an operation received the wrong kind of value
    - parse (111xx): the command line was rejected
    - warnings (121xx): suspicious specifications and discarded input

    normalize() allows host remapping to custom labels while keeping code-stability.
    """
    # --- schema errors (101xx) ---
    PLACEMENT_CONFLICT          = 10101
    DUPLICATED_ATTRIBUTE        = 10102
    INVALID_NARGS               = 10103
    INVALID_CHOICES             = 10104
    UNKNOWN_ATTRIBUTE           = 10105
    UNKNOWN_ACTION              = 10106
    INVALID_PLACEMENT           = 10107
    MISSING_DEFAULT             = 10108
    MISSING_CONST               = 10109
    DUPLICATED_SWITCH           = 10111
    INVALID_SWITCH              = 10112
    UNDEDUCIBLE_DESTINATION     = 10113
    ACTION_CONFLICT             = 10114
    MULTIPLE_SUBCOMMANDS        = 10115
    DUPLICATED_SUBCOMMAND       = 10116
    DUPLICATED_KEY              = 10121
    RESERVED_CHARACTER          = 10122
    MALFORMED_RECORD            = 10123

    # --- type errors (102xx) ---
    NOT_A_CONTAINER             = 10201
    NOT_A_PARSER                = 10202

    # --- parse errors (111xx) ---
    UNKNOWN_SUBCOMMAND          = 11102
    MISSING_SUBCOMMAND          = 11103
    UNKNOWN_SWITCH              = 11112
    FLAG_ASSIGNMENT             = 11113
    MISSING_VALUE               = 11117
    NOT_ENOUGH_VALUES           = 11122
    INVALID_CHOICE              = 11124
    MISSING_POSITIONAL          = 11125
    REQUIRED_ARGUMENT           = 11126

    # --- warnings (121xx) ---
    UNUSED_ATTRIBUTE            = 12113
    EXCESS_POSITIONALS          = 12121

    def normalize(self):
        """
        return a host-normalized string for this code.

        the host application can provide a __codes__ mapping in __main__
        to override numeric ids with friendlier labels. when no mapping
        is present, the numeric value is returned as a string.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


def _prog(options):
    """
    resolve the program name shown in fault headers.

    the reporting parser's prog wins (it already falls back to __main__.__prog__);
    without a parser, __main__.__prog__ is used, then "kvargs".
    """
    if (parser := options.get("parser")) is not None:
        return parser.prog
    return getattr(__import__("__main__"), "__prog__", "kvargs")


def _render(fault, palette, title):
    """
    shared rich rendering for exceptions and warnings.

    layout
    - header: "[ <prog> — <code> | <Title> ]"
    - body: the message, then an arrow-led hint when one was given.
    - fancy mode wraps everything in a left-titled panel.
    """
    main = __import__("__main__")
    options = fault.options
    colorful = options.get("colorful", False)

    styles = defaultdict(str, palette | getattr(main, "__styles__", {}))

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

    code = options.get("code")
    header = Text.assemble(
        "[ ",
        text(_prog(options), styler("prog-name")),
        " — ",
        text(code.normalize() if isinstance(code, FaultCode) else "-", styler("code")),
        " | ",
        text(str(options.get("title", type(fault).__name__)).title(), styler(title)),
        " ]"
    )
    message = text(fault.message, styler(title.replace("title", "message")))
    renders = [message]
    if hint := options.get("hint"):
        renders.append(Text.assemble(text(" → ", styler("hint-arrow")), text(hint, styler("hint"))))

    if options.get("fancy", False):
        return Panel(Group(*renders), title=header, title_align="left")
    return Group(header, *renders)


class ParserException(Exception):
    """
    base class of every error surfaced by kvargs.

    carries
    - message: one-sentence description of what went wrong.
    - options: read-only mapping with the fault context; common keys are
      code (FaultCode), title, hint, parser, argument (the offending
      destination or flag), input (the offending token) and the runtime flags
      shell/fancy/colorful.
    """
    kind = "fault"

    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        super().__init__(message)
        self.message = message
        self.options = MappingProxyType(options)

    def __str__(self):
        return str(self.message)

    @property
    def code(self):
        return self.options.get("code")

    @property
    def argument(self):
        return self.options.get("argument")

    def __rich__(self):
        return _render(self, {
            # header parts
            "prog-name": "bold #E6E6F0",  # near-white program name
            "code": "bold #00E5FF",  # neon cyan fault code
            "error-title": "bold #FF4DA6",  # friendly pinky title

            # body
            "error-message": "#C8C8D0",  # soft light gray message
            "hint-arrow": "#9CE19C dim",  # gentle green arrow
            "hint": "italic #9CE19C",  # gentle green hint text
        }, "error-title")

    def __trigger__(self) -> None:
        if not self.options.get("shell", False):
            raise self from None
        console.print(self)
        sys.exit(1)

    def __replace__(self, *unused, **overrides):
        assert not unused, "unused arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class SchemaError(ParserException):
    kind = "schema"


class KindError(ParserException, TypeError):
    kind = "type"


class ParseError(ParserException):
    kind = "parse"


# schema errors
class PlacementConflictError(SchemaError): ...
class DuplicateAttributeError(SchemaError): ...
class InvalidNargsError(SchemaError): ...
class InvalidChoicesError(SchemaError): ...
class UnknownAttributeError(SchemaError): ...
class UnknownActionError(SchemaError): ...
class InvalidPlacementError(SchemaError): ...
class MissingDefaultError(SchemaError): ...
class MissingConstError(SchemaError): ...
class DuplicateSwitchError(SchemaError): ...
class InvalidSwitchError(SchemaError): ...
class UndeducibleDestinationError(SchemaError): ...
class ActionConflictError(SchemaError): ...
class MultipleSubcommandsError(SchemaError): ...
class DuplicateSubcommandError(SchemaError): ...
class DuplicateKeyError(SchemaError): ...
class ReservedCharacterError(SchemaError): ...
class MalformedRecordError(SchemaError): ...

# type errors
class NotAContainerError(KindError): ...
class NotAParserError(KindError): ...

# parse errors
class UnknownSubcommandError(ParseError): ...
class MissingSubcommandError(ParseError): ...
class UnknownSwitchError(ParseError): ...
class FlagAssignmentError(ParseError): ...
class MissingValueError(ParseError): ...
class NotEnoughValuesError(ParseError): ...
class InvalidChoiceError(ParseError): ...
class MissingPositionalError(ParseError): ...
class RequiredArgumentError(ParseError): ...


class ParserWarning(Warning):
    """
    base class of every non-fatal fault; parsing continues after it is surfaced.
    """

    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        super().__init__(message)
        self.message = message
        self.options = MappingProxyType(options)

    def __str__(self):
        return str(self.message)

    @property
    def code(self):
        return self.options.get("code")

    def __rich__(self):
        return _render(self, {
            # header parts
            "prog-name": "bold #E6E6F0",  # near-white program name
            "code": "bold #FFB400",  # amber fault code for warnings
            "warning-title": "bold #FFC2E0",  # softer pinky title for warnings

            # body
            "warning-message": "#D6D6DE",  # slightly lighter gray body
            "hint-arrow": "#B8EFAF dim",  # softer green arrow
            "hint": "italic #B8EFAF",  # softer green hint text
        }, "warning-title")

    def __trigger__(self) -> None:
        if not self.options.get("shell", False):
            return warnings.warn(self, stacklevel=4)
        console.print(self)

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class UnusedAttributeWarning(ParserWarning): ...
class ExcessPositionalsWarning(ParserWarning): ...


def trigger(fault, /, **options):
    """
    surface a fault with the given runtime options.

    contract
    - fault must provide __trigger__ and __replace__ methods (see base classes).
    - options are merged into the fault via copy.replace(fault, **options) before triggering.
    - errors never return: they are raised (non-shell) or end the process (shell).
    - warnings return None once emitted.

    typical options
    - parser, shell, fancy, colorful, title, code, hint, docs, and any other
      context the reporter may want to show (argument, input, index).
    """
    if (
        not hasattr(fault, "__trigger__") or
        not callable(fault.__trigger__) or
        not hasattr(fault, "__replace__") or
        not callable(fault.__replace__)
    ):
        raise TypeError("trigger() argument must have a __trigger__ and __replace__ methods")
    copy.replace(fault, **options).__trigger__()


def getdoc(code, /):
    """
    optional documentation fetch for a fault code.

    lookup
    - the host application may expose a __docs__ mapping in __main__ where keys
      are FaultCode instances and values are short documentation strings.
    - when not found, returns None (renderers treat docs as optional).
    """
    if not isinstance(code, FaultCode):
        raise TypeError("getdoc() argument must be a fault-code")
    try:
        return getattr(__import__("__main__"), "__docs__", {})[code]
    except KeyError:
        return None


__all__ = (
    "FaultCode",
    "ParserException",
    "SchemaError",
    "KindError",
    "ParseError",
    "PlacementConflictError",
    "DuplicateAttributeError",
    "InvalidNargsError",
    "InvalidChoicesError",
    "UnknownAttributeError",
    "UnknownActionError",
    "InvalidPlacementError",
    "MissingDefaultError",
    "MissingConstError",
    "DuplicateSwitchError",
    "InvalidSwitchError",
    "UndeducibleDestinationError",
    "ActionConflictError",
    "MultipleSubcommandsError",
    "DuplicateSubcommandError",
    "DuplicateKeyError",
    "ReservedCharacterError",
    "MalformedRecordError",
    "NotAContainerError",
    "NotAParserError",
    "UnknownSubcommandError",
    "MissingSubcommandError",
    "UnknownSwitchError",
    "FlagAssignmentError",
    "MissingValueError",
    "NotEnoughValuesError",
    "InvalidChoiceError",
    "MissingPositionalError",
    "RequiredArgumentError",
    "ParserWarning",
    "UnusedAttributeWarning",
    "ExcessPositionalsWarning",
    "trigger",
    "getdoc",
)
