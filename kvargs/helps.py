"""
kvargs help and version rendering.

Layout
- usage: the explicit `usage` attribute, else "usage: PROG" followed by one
  item per argument (optionals first, then positionals), packed at WIDTH
  columns with a hanging indent; when the hanging indent leaves fewer than
  MINIMUM columns, continuation lines are indented by 2 spaces instead.
  Items are never split.
- description, "positional arguments:", "options:" and the epilogue, each
  separated by a blank line. Argument help starts at COLUMN; an invocation
  too wide for the column pushes its help to the next line.
- sub_command/sub_argument arguments list their sub-parsers underneath
  (id, aliases and description).

Styling
- Output goes through a rich console. With colorful=True the palette below is
  applied; a mapping named __styles__ in __main__ overrides any entry.
"""
from collections import defaultdict, deque

from rich.console import Console
from rich.containers import Lines
from rich.text import Text

from .parsers import isparser
from .faults import *

WIDTH = 79
MINIMUM = 24
COLUMN = 24
PADDING = 2

_measure = Console(width=WIDTH, highlight=False)


def _styler(parser):
    styles = defaultdict(str, {
        # === Head sections ===
        "usage-label": "bold #00E6FF",  # CYAN → signature info color
        "program-name": "bold #FF4D94",  # MAGENTA-PINK → brand pop
        "usage-section": "bold #36C5F0",  # SKY-BLUE → softer than cyan
        "description-section": "italic #A3A3A3",  # Neutral gray
        "epilog-section": "#737373",  # Dim footer gray

        # === Groups / arguments ===
        "group-label": "bold #FFFFFF",  # Pure white headers
        "argument-description": "#9CA3AF",  # Muted gray

        # === Names / metavars ===
        "option-name": "bold #00E6FF",  # CYAN for value-taking options
        "flag-name": "bold #22C55E",  # GREEN for presence-only flags
        "metavar": "bold #FFD600",  # AMBER for parameters
        "choice": "bold #FF4D94",  # MAGENTA → choices stand out

        # === Sub-parsers ===
        "children": "bold #36C5F0",  # Sky-blue sub command ids
        "children-description": "#9CA3AF",
        "version": "bold #FFFFFF",
    } | getattr(__import__("__main__"), "__styles__", {}))

    def styler(style):
        return styles[style] if parser.colorful else ""

    return styler


def _metavar(parser, argument, styler):
    """
    Build the metavar Text of one argument.
    """
    if argument.metavar is not None:
        return Text(argument.metavar, styler("metavar"))
    if argument.action in ("sub_command", "sub_argument"):
        return Text.assemble("{", Text(",").join(
            Text(id, styler("choice")) for id in parser.subparsers(argument.destination)
        ), "}")
    if argument.choices is not None:
        return Text.assemble("{", Text(",").join(
            Text(choice, styler("choice")) for choice in argument.choices
        ), "}")
    if argument.positional:
        return Text(argument.destination, styler("metavar"))
    return Text(argument.destination.upper(), styler("metavar"))


def _arity(parser, argument, styler):
    """
    Shape the metavar according to nargs ("[X]", "[X ...]", "X [X ...]", "X X").
    """
    metavar = _metavar(parser, argument, styler)
    match argument.nargs:
        case "?":
            return Text.assemble("[", metavar, "]")
        case "*":
            return Text.assemble("[", metavar, " ...]")
        case "+":
            return Text.assemble(metavar, " [", metavar, " ...]")
        case int():
            return Text(" ").join(metavar.copy() for _ in range(argument.nargs))
        case _ if argument.action in ("sub_command", "sub_argument"):
            return Text.assemble(metavar, " ...")
        case _:
            return metavar


def _flag(argument, flag, styler):
    return Text(flag, styler("flag-name" if argument.nullary else "option-name"))


def _item(parser, argument, styler):
    """
    One usage item: "[-s X]" for optionals (bare when required), arity form for positionals.
    """
    if argument.positional:
        return _arity(parser, argument, styler)
    item = _flag(argument, argument.flags[0], styler)
    if not argument.nullary:
        item = Text.assemble(item, " ", _arity(parser, argument, styler))
    return item if argument.required else Text.assemble("[", item, "]")


def _usage(parser, prog, styler):
    usage = Text()
    usage.append("usage", styler("usage-label")).append(": ")
    if parser.usage is not None:
        return usage.append(Text(parser.usage, styler("usage-section")))

    usage.append(Text(prog, styler("program-name")))
    arguments = parser.arguments.values()
    inputs = deque(_item(parser, argument, styler) for argument in (
        *(argument for argument in arguments if not argument.positional),
        *(argument for argument in arguments if argument.positional),
    ))
    if not inputs:
        return usage

    usage.append(" ")
    start = offset = len(usage)
    if WIDTH - offset < MINIMUM:
        offset = PADDING

    # Wrap usage items across the width; an item never breaks
    lines = Lines([inputs.popleft()])
    while inputs:
        column = start if len(lines) == 1 else offset
        if len(lines[-1]) + 1 + len(input := inputs.popleft()) > WIDTH - column:
            lines.append(input)
        else:
            lines[-1].append(Text(" ") + input)

    usage.append(lines.pop(0))
    for line in lines:
        usage.append("\n").append(" " * offset).append(line)
    return usage


def _paragraph(text):
    lines = text.wrap(_measure, WIDTH)
    for line in lines:
        line.rstrip()
    return Text("\n").join(lines)


def _entry(invocation, help, styler, *, padding=PADDING):
    """
    Stitch "<padding><invocation>" and its wrapped help at COLUMN.
    """
    section = Text(" " * padding).append(invocation)
    if help:
        if len(section) + PADDING > COLUMN:
            section.append("\n").append(" " * COLUMN)
        else:
            section.append(" " * (COLUMN - len(section)))
        wrapped = Text(help, styler("argument-description")).wrap(_measure, WIDTH - COLUMN)
        for line in wrapped:
            line.rstrip()
        section.append(wrapped.pop(0))
        for line in wrapped:
            section.append("\n").append(" " * COLUMN).append(line)
    return section


def _invocation(parser, argument, styler):
    if argument.positional:
        return _metavar(parser, argument, styler)
    if argument.nullary:
        return Text(", ").join(_flag(argument, flag, styler) for flag in argument.flags)
    arity = _arity(parser, argument, styler)
    return Text(", ").join(
        Text.assemble(_flag(argument, flag, styler), " ", arity.copy()) for flag in argument.flags
    )


def _children(parser, argument, styler):
    """
    Sub-parser block listed beneath a sub_command/sub_argument argument.
    """
    block = []
    for id, subparser in parser.subparsers(argument.destination).items():
        name = Text(id, styler("children"))
        if aliases := parser.aliases(argument.destination, id):
            name.append(" (aliases: %s)" % ", ".join(aliases))
        block.append(_entry(name, subparser.description, lambda style: styler("children-description"), padding=2 * PADDING))
    return block


def _help(parser, prog, styler):
    renders = [_usage(parser, prog, styler)]

    if parser.description:
        renders.append(_paragraph(Text(parser.description, styler("description-section"))))

    arguments = parser.arguments.values()
    for group, members in (
            ("positional arguments", [argument for argument in arguments if argument.positional]),
            ("options", [argument for argument in arguments if not argument.positional]),
    ):
        if not members:
            continue
        section = [Text(group, styler("group-label")).append(":")]
        for argument in members:
            section.append(_entry(_invocation(parser, argument, styler), argument.help, styler))
            if argument.action in ("sub_command", "sub_argument"):
                section.extend(_children(parser, argument, styler))
        renders.append(Text("\n").join(section))

    if parser.epilogue:
        renders.append(_paragraph(Text(parser.epilogue, styler("epilog-section"))))

    return Text("\n\n").join(renders)


def _version(parser, argument, styler):
    return Text(argument.version.replace("%(prog)s", parser.prog), styler("version"))


def _check(parser, function):
    if not isparser(parser):
        raise NotAParserError(
            "%s() expects a parser, got %s" % (function, type(parser).__name__),
            title="not a parser",
            code=FaultCode.NOT_A_PARSER,
            hint="build one with new_parser()",
            docs=getdoc(FaultCode.NOT_A_PARSER),
        )


def format_usage(parser, prog=None, /):
    """
    Return the usage line(s) as plain text.
    """
    _check(parser, "format_usage")
    return _usage(parser, prog or parser.prog, _styler(parser)).plain


def format_help(parser, prog=None, /):
    """
    Return the full help text as plain text.
    """
    _check(parser, "format_help")
    return _help(parser, prog or parser.prog, _styler(parser)).plain


def format_version(parser, argument, /):
    """
    Return the version string of a version action, with %(prog)s expanded.
    """
    _check(parser, "format_version")
    return _version(parser, argument, _styler(parser)).plain


def print_help(parser, prog=None, /, *, file=None):
    _check(parser, "print_help")
    Console(file=file, highlight=False, soft_wrap=True).print(_help(parser, prog or parser.prog, _styler(parser)))


def print_version(parser, argument, /, *, file=None):
    _check(parser, "print_version")
    Console(file=file, highlight=False, soft_wrap=True).print(_version(parser, argument, _styler(parser)))


__all__ = (
    "format_usage",
    "format_help",
    "format_version",
    "print_help",
    "print_version",
)
