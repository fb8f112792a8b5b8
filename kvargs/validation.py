"""
kvargs validation and fixup of raw parse results.

validate(parser, result) runs, in order:
1. choices: every input-produced value (scalars, and every leaf of multi-value
   containers) of an argument with a choice set must be one of its keys.
2. positionals not consumed: own default, else the parser argument_default,
   else an empty container for nargs "*", else MissingPositionalError
   (MissingSubcommandError for a positional sub_command).
3. absent optionals: own default, else the parser argument_default, else
   "false"/"true" for store_true/store_false, else RequiredArgumentError when
   required; otherwise they stay absent.
4. sub_command/sub_argument results are validated against their sub-parsers;
   an absent required sub tree raises MissingSubcommandError.
"""
from . import records
from .faults import *
from .parsers import isparser
from .records import Container


def _leaves(value):
    if isinstance(value, Container):
        for element in value.values():
            yield from _leaves(element)
    else:
        yield value


def _choices(parser, result):
    positionals = parser.positionals
    for argument in parser.arguments.values():
        if argument.choices is None or (value := records.get(result, argument.destination)) is None:
            continue
        for leaf in _leaves(value):
            if leaf in argument.choices:
                continue
            allowed = ", ".join(map(repr, argument.choices))
            if argument.positional:
                index = positionals.index(argument.key) + 1
                message = "invalid choice %r for positional argument %d (%s) (choose from %s)" % (
                    leaf, index, argument.name, allowed
                )
            else:
                index = None
                message = "invalid choice %r for option %s (choose from %s)" % (leaf, argument.label, allowed)
            trigger(InvalidChoiceError(
                message,
                title="invalid choice",
                code=FaultCode.INVALID_CHOICE,
                input=leaf,
                argument=argument.label,
                index=index,
                hint="use one of: %s" % allowed,
                docs=getdoc(FaultCode.INVALID_CHOICE),
            ), **parser.context)


def _positionals(parser, result):
    for index, key in enumerate(parser.positionals, start=1):
        argument = parser.arguments[key]
        if argument.destination in result:
            continue
        if argument.action == "sub_command":
            trigger(MissingSubcommandError(
                "the sub command %s is required (choose from %s)" % (
                    argument.name, ", ".join(map(repr, parser.subparsers(argument.destination)))
                ),
                title="missing sub command",
                code=FaultCode.MISSING_SUBCOMMAND,
                argument=argument.label,
                index=index,
                hint="run '%s --help' to see available sub commands" % parser.prog,
                docs=getdoc(FaultCode.MISSING_SUBCOMMAND),
            ), **parser.context)
        if argument.default is not None:
            value = argument.default
        elif parser.argument_default is not None:
            value = parser.argument_default
        elif argument.nargs == "*":
            value = Container()
        else:
            trigger(MissingPositionalError(
                "the positional argument %d (%s) is required" % (index, argument.name),
                title="missing positional",
                code=FaultCode.MISSING_POSITIONAL,
                argument=argument.label,
                index=index,
                hint="run '%s --help' to see the expected usage" % parser.prog,
                docs=getdoc(FaultCode.MISSING_POSITIONAL),
            ), **parser.context)
        result = records.set(result, argument.destination, value)
    return result


def _optionals(parser, result):
    for argument in parser.arguments.values():
        if argument.positional or argument.action in ("help", "version", "sub_command", "sub_argument"):
            continue
        if argument.destination in result:
            continue
        if argument.default is not None:
            value = argument.default
        elif parser.argument_default is not None:
            value = parser.argument_default
        elif argument.action in ("store_true", "store_false"):
            value = "false" if argument.action == "store_true" else "true"
        elif argument.required:
            trigger(RequiredArgumentError(
                "Required option %s was not provided" % argument.label,
                title="required option",
                code=FaultCode.REQUIRED_ARGUMENT,
                argument=argument.label,
                hint="pass %s on the command line" % " or ".join(argument.flags),
                docs=getdoc(FaultCode.REQUIRED_ARGUMENT),
            ), **parser.context)
            continue
        else:
            continue
        result = records.set(result, argument.destination, value)
    return result


def _descend(parser, result):
    for argument in parser.arguments.values():
        if argument.action not in ("sub_command", "sub_argument"):
            continue
        destination = argument.destination
        if (value := records.get(result, destination)) is None:
            if argument.required:
                trigger(MissingSubcommandError(
                    "Required option %s was not provided (choose from %s)" % (
                        argument.label, ", ".join(map(repr, parser.subparsers(destination)))
                    ),
                    title="missing sub command",
                    code=FaultCode.MISSING_SUBCOMMAND,
                    argument=argument.label,
                    hint="run '%s --help' to see available sub commands" % parser.prog,
                    docs=getdoc(FaultCode.MISSING_SUBCOMMAND),
                ), **parser.context)
            continue
        if argument.action == "sub_command":
            value = _subtree(parser, destination, value)
        else:
            value = Container((index, _subtree(parser, destination, occurrence)) for index, occurrence in value.items())
        result = records.set(result, destination, value)
    return result


def _subtree(parser, destination, tree):
    (id, subresult), = tree.items()
    return records.declare(id, validate(parser.subparser(destination, id), subresult))


def validate(parser, result, /):
    """
    Apply choices, defaults and required checks to a raw result (recursively).

    Returns the fixed-up container; faults go through trigger() with the
    parser runtime flags.
    """
    if not isparser(parser):
        raise NotAParserError(
            "validate() expects a parser, got %s" % type(parser).__name__,
            title="not a parser",
            code=FaultCode.NOT_A_PARSER,
            hint="build one with new_parser()",
            docs=getdoc(FaultCode.NOT_A_PARSER),
        )
    if not isinstance(result, Container):
        raise NotAContainerError(
            "validate() expects a container, got %s" % type(result).__name__,
            title="not a container",
            code=FaultCode.NOT_A_CONTAINER,
            hint="pass the raw result produced by the parsing engine",
            docs=getdoc(FaultCode.NOT_A_CONTAINER),
        )
    _choices(parser, result)
    result = _positionals(parser, result)
    result = _optionals(parser, result)
    return _descend(parser, result)


__all__ = (
    "validate",
)
