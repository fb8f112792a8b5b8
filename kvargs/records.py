r"""
kvargs records: the ordered, nestable key/value container.

Overview
- Container: immutable, insertion-ordered mapping of text keys to values, where
  a value is either text (a scalar) or another Container (nesting to any depth).
  Equality is structural and order-sensitive; every "mutation" returns a new
  container, so a container is never altered behind its holder's back.

- Functional API (mirrors the shell-era `dict_*` helpers)
  • declare(k1, v1, k2, v2, ...) → new container (duplicate keys rejected).
  • get / set / remove → lookups and updated copies.
  • size (cached, O(1)) and count (full traversal, O(n)); both always agree.
  • foreach(container, callback, *args) → callback(key, value, index, *args).
  • iscontainer(value) → type discriminant, never raises.
  • pformat / prettyprint → decorated recursive rendering.
  • dumps / loads → the legacy single-string wire format, for interop with
    scripts that still pass records around as one string.
  • todict → plain nested dicts.

Reserved characters
- The four ASCII separators FS (\x1c), GS (\x1d), RS (\x1e) and US (\x1f) are
  reserved by the wire format and rejected in keys and scalar values.

Wire format
- record  := key US value US RS
- value   := scalar | GS escape(dumps(nested))
- escape  := every reserved character c becomes FS chr(ord(c) + 0x20)

Quick example:
    >>> from kvargs.records import declare, set, get, size
    >>> c = declare("name", "kvargs", "kind", "library")
    >>> c = set(c, "nested", declare("depth", "2"))
    >>> get(get(c, "nested"), "depth")
    '2'
    >>> size(c)
    3
"""
import textwrap
from collections.abc import Mapping

from rich.console import Console

from .faults import *

FS = "\x1c"
GS = "\x1d"
RS = "\x1e"
US = "\x1f"
RESERVED = frozenset((FS, GS, RS, US))

console = Console(highlight=False)

# Decoration options understood by pformat(); unset ones render as "".
PRINT_OPTIONS = (
    "print_prefix",
    "print_suffix",
    "dict_prefix",
    "dict_suffix",
    "record_separator",
    "record_prefix",
    "record_suffix",
    "key_prefix",
    "key_suffix",
    "value_prefix",
    "value_suffix",
    "nesting_prefix",
    "nesting_suffix",
    "nesting_indent",
)


def _check_text(text, what, /):
    """
    Validate a key or scalar value: must be str and free of reserved separators.
    """
    if not isinstance(text, str):
        raise TypeError("container %s must be a string, not %s" % (what, type(text).__name__))
    if RESERVED.intersection(text):
        raise ReservedCharacterError(
            "container %s %r contains a reserved separator character" % (what, text),
            title="reserved character",
            code=FaultCode.RESERVED_CHARACTER,
            argument=text,
            hint="remove the ASCII FS/GS/RS/US characters (\\x1c-\\x1f) from the %s" % what,
            docs=getdoc(FaultCode.RESERVED_CHARACTER),
        )


def _check_value(value, /):
    if isinstance(value, Container):
        return
    _check_text(value, "value")


def _check_container(object, function, /):
    if not isinstance(object, Container):
        raise NotAContainerError(
            "%s() expects a container, got %s" % (function, type(object).__name__),
            title="not a container",
            code=FaultCode.NOT_A_CONTAINER,
            hint="build one with declare() or pass the container returned by set()",
            docs=getdoc(FaultCode.NOT_A_CONTAINER),
        )


class Container(Mapping):
    """
    Immutable, ordered, nestable key/value container.

    Storage
    - _entries: tuple of (key, value) pairs in insertion order.
    - _index: key → position in _entries (O(1) lookups).
    - _size: entry count maintained incrementally by the functional API;
      count() recomputes it by traversal and the two always agree.

    Construction
    - Container() is the empty container.
    - Container(pairs) builds from an iterable of (key, value) pairs and
      rejects duplicate keys with DuplicateKeyError.
    """
    __slots__ = ("_entries", "_index", "_size")

    def __new__(cls, pairs=(), /):
        entries = []
        index = {}
        for key, value in pairs:
            _check_text(key, "key")
            _check_value(value)
            if key in index:
                raise DuplicateKeyError(
                    "duplicate key %r in container declaration" % key,
                    title="duplicated key",
                    code=FaultCode.DUPLICATED_KEY,
                    argument=key,
                    hint="each key can be declared only once; use set() to update a value",
                    docs=getdoc(FaultCode.DUPLICATED_KEY),
                )
            index[key] = len(entries)
            entries.append((key, value))
        return cls._make(tuple(entries), index, len(entries))

    @classmethod
    def _make(cls, entries, index, size):
        self = super().__new__(cls)
        object.__setattr__(self, "_entries", entries)
        object.__setattr__(self, "_index", index)
        object.__setattr__(self, "_size", size)
        return self

    def __setattr__(self, name, value, /):
        raise AttributeError("container is immutable; use set() to obtain an updated copy")

    def __delattr__(self, name, /):
        raise AttributeError("container is immutable; use remove() to obtain an updated copy")

    def __getitem__(self, key, /):
        return self._entries[self._index[key]][1]

    def __contains__(self, key, /):
        return key in self._index

    def __iter__(self):
        return (key for key, _ in self._entries)

    def __len__(self):
        return self._size

    def __eq__(self, other, /):
        if not isinstance(other, Container):
            return NotImplemented
        return self._entries == other._entries

    def __hash__(self):
        return hash(self._entries)

    def __copy__(self):
        return self

    def __deepcopy__(self, memo, /):
        return self

    def __reduce__(self):
        return type(self), (self._entries,)

    def __repr__(self):
        return "container({%s})" % ", ".join("%r: %r" % entry for entry in self._entries)

    def __rich_repr__(self):
        yield from self._entries


def declare(*items, **entries):
    """
    Build a container from a flat key/value sequence, then keyword entries.

    Examples
    - declare() → empty container
    - declare("a", "1", "b", "2") → {'a': '1', 'b': '2'}
    - declare("a", "1", "a", "2") → DuplicateKeyError
    """
    if len(items) % 2:
        raise TypeError("declare() expects key/value pairs, got an odd number of arguments")
    return Container([*zip(items[::2], items[1::2]), *entries.items()])


def get(container, key, default=None, /):
    """
    Return the value stored under key, or default when the key is absent.
    """
    _check_container(container, "get")
    try:
        position = container._index[key]
    except (KeyError, TypeError):
        return default
    return container._entries[position][1]


def set(container, key, value, /):
    """
    Return a copy of container with key bound to value.

    An existing key keeps its position; a new key is appended. Untouched keys
    keep their original order.
    """
    _check_container(container, "set")
    _check_text(key, "key")
    _check_value(value)
    entries = list(container._entries)
    index = container._index
    size = container._size
    if key in index:
        entries[index[key]] = (key, value)
    else:
        index = index | {key: len(entries)}
        entries.append((key, value))
        size += 1
    return Container._make(tuple(entries), index, size)


def remove(container, key, /):
    """
    Return a copy of container without key (an equal copy when key is absent).
    """
    _check_container(container, "remove")
    if key not in container._index:
        return container
    entries = tuple(entry for entry in container._entries if entry[0] != key)
    index = {name: position for position, (name, _) in enumerate(entries)}
    return Container._make(entries, index, container._size - 1)


def size(container, /):
    """
    Return the cached entry count (O(1)).
    """
    _check_container(container, "size")
    return container._size


def count(container, /):
    """
    Count entries by full traversal (O(n)); always equal to size(container).
    """
    _check_container(container, "count")
    total = 0
    for _ in container._entries:
        total += 1
    return total


def foreach(container, callback, /, *args):
    """
    Invoke callback(key, value, index, *args) for every entry in insertion order.

    index is 1-based. Return values of the callback are ignored.
    """
    _check_container(container, "foreach")
    if not callable(callback):
        raise TypeError("foreach() callback must be callable")
    for index, (key, value) in enumerate(container._entries, start=1):
        callback(key, value, index, *args)


def iscontainer(value, /):
    """
    Type discriminant: True when value is a Container. Never raises.
    """
    return isinstance(value, Container)


def pformat(container, spec=None, /):
    """
    Render container recursively with the decorations named in spec.

    spec is a Container or mapping whose keys come from PRINT_OPTIONS; every
    unset option renders as the empty string.

    layout
    - print_prefix DICT print_suffix
    - DICT   := dict_prefix RECORD (record_separator RECORD)* dict_suffix
    - RECORD := record_prefix key_prefix KEY key_suffix value_prefix VALUE value_suffix record_suffix
    - nested VALUE := nesting_prefix indent(DICT) nesting_suffix, where indent
      prepends nesting_indent to every line of the nested render.
    """
    _check_container(container, "pformat")
    options = dict.fromkeys(PRINT_OPTIONS, "")
    if spec is not None:
        if not isinstance(spec, Mapping):
            raise TypeError("pformat() spec must be a container or a mapping")
        for name, value in spec.items():
            if name not in options:
                raise UnknownAttributeError(
                    "unknown print option %r" % name,
                    title="unknown print option",
                    code=FaultCode.UNKNOWN_ATTRIBUTE,
                    argument=name,
                    hint="use one of: %s" % ", ".join(PRINT_OPTIONS),
                    docs=getdoc(FaultCode.UNKNOWN_ATTRIBUTE),
                )
            if not isinstance(value, str):
                raise TypeError("pformat() option %r must be a string" % name)
            options[name] = value

    def render(container):
        records = []
        for key, value in container._entries:
            if isinstance(value, Container):
                value = "".join((
                    options["nesting_prefix"],
                    textwrap.indent(render(value), options["nesting_indent"], lambda line: True),
                    options["nesting_suffix"],
                ))
            records.append("".join((
                options["record_prefix"],
                options["key_prefix"], key, options["key_suffix"],
                options["value_prefix"], value, options["value_suffix"],
                options["record_suffix"],
            )))
        return options["dict_prefix"] + options["record_separator"].join(records) + options["dict_suffix"]

    return options["print_prefix"] + render(container) + options["print_suffix"]


def prettyprint(container, spec=None, /, *, file=None):
    """
    Write pformat(container, spec) to standard output (or file) verbatim.
    """
    target = Console(file=file, highlight=False) if file is not None else console
    target.out(pformat(container, spec), end="", highlight=False)


def _escape(text):
    return "".join(FS + chr(ord(char) + 0x20) if char in RESERVED else char for char in text)


def _unescape(text):
    result = []
    chars = iter(text)
    for char in chars:
        if char == FS:
            if (char := chr(ord(next(chars, "\x20")) - 0x20)) not in RESERVED:
                raise _malformed("dangling or unknown escape sequence in nested record")
        elif char in RESERVED:
            raise _malformed("unescaped separator inside nested record")
        result.append(char)
    return "".join(result)


def _malformed(message):
    return MalformedRecordError(
        message,
        title="malformed record",
        code=FaultCode.MALFORMED_RECORD,
        hint="only strings produced by dumps() can be decoded",
        docs=getdoc(FaultCode.MALFORMED_RECORD),
    )


def dumps(container, /):
    """
    Encode container into the legacy single-string wire format.
    """
    _check_container(container, "dumps")
    records = []
    for key, value in container._entries:
        if isinstance(value, Container):
            value = GS + _escape(dumps(value))
        records.append(key + US + value + US + RS)
    return "".join(records)


def loads(text, /):
    """
    Decode a string produced by dumps() back into a Container.

    Raises MalformedRecordError for anything that is not a well-formed record
    sequence, and DuplicateKeyError when a key repeats.
    """
    if not isinstance(text, str):
        raise TypeError("loads() argument must be a string")
    *records, tail = text.split(RS)
    if tail:
        raise _malformed("trailing data after the last record separator")
    pairs = []
    for record in records:
        if not record.endswith(US):
            raise _malformed("record %r is not terminated by a field separator" % record)
        key, separator, value = record[:-1].partition(US)
        if not separator or RESERVED.intersection(key):
            raise _malformed("record %r has no valid key field" % record)
        if value.startswith(GS):
            value = loads(_unescape(value[1:]))
        elif RESERVED.intersection(value):
            raise _malformed("record %r has a value with raw separators" % record)
        pairs.append((key, value))
    return Container(pairs)


def todict(container, /):
    """
    Convert container (recursively) into plain dicts, preserving order.
    """
    _check_container(container, "todict")
    return {
        key: todict(value) if isinstance(value, Container) else value
        for key, value in container._entries
    }


__all__ = (
    # Type
    "Container",

    # Functional API
    "declare",
    "get",
    "set",
    "remove",
    "size",
    "count",
    "foreach",
    "iscontainer",
    "pformat",
    "prettyprint",
    "dumps",
    "loads",
    "todict",
)
