r"""
Clapper command definitions: the declarative tree the resolver walks.

Overview
- Command: a named node with an optional zero-argument action, its own
  arguments, and an ordered list of subcommands.
- Subcommand: a Command that can also be selected by aliases, by long/short
  flags (`tool --build`, `tool -b`), or implicitly as its parent's default.
- Argument: a positional slot or a flag, with an arity policy (nargs), default
  and implicit values, and value-shape rules (inline, delimiter, last).
- Arity: normalized (minimum, maximum) value count of an argument.

Construction rules
- Definitions are immutable once built: every field is exposed through a
  read-only property, collections come back as tuples.
- Construction only sanitizes Python types (TypeError) and empty names
  (ValueError). Structural rules (a single default subcommand, single-letter
  short flags, ...) are checked by clapper.validate before any resolution.
- Flag names are stored bare: long="build", short="b" (no dashes).

nargs forms (normalized into Arity)
- False / 0          → no values (a switch)
- n                  → exactly n values
- (min, max)         → at least min, at most max (max may be ... or None for unbounded)
- True / ...         → any number of values
- omitted            → exactly one value for positionals and `last` gets any number;
                       flags take none

Quick example:
    >>> tool = Command(
    ...     "tool",
    ...     arguments=[Argument("verbose", long="verbose", short="v")],
    ...     subcommands=[
    ...         Subcommand("build", long="build", short="b", default=True, arguments=[
    ...             Argument("target", positional=True),
    ...         ]),
    ...     ],
    ... )
"""
import functools
import math
import operator
import re
from collections.abc import Iterable
from typing import NamedTuple

from .utils import *


class Arity(NamedTuple):
    """
    how many values an argument takes: minimum..maximum (maximum may be math.inf).
    """
    minimum: int
    maximum: int | float

    @property
    def switch(self):
        """an argument that takes no values at all."""
        return self.maximum == 0

    @property
    def unbounded(self):
        return self.maximum == math.inf

    def __repr__(self):
        if self.minimum == self.maximum:
            return f"arity({self.minimum})"
        return f"arity({self.minimum}, {'...' if self.unbounded else self.maximum})"


class DefinitionType(type):
    """
    Metaclass that turns definitions into introspectable, read-only records.

    Responsibilities
    - Expose every name listed in __introspectable__ as a read-only property
      mirroring the private "_{name}" backing field (see mirror()).
    - Provide stable, readable __repr__/__rich_repr__ for diagnostics.

    Conventions
    - __typename__ is derived from the class name (camel-case split with hyphens)
      and used in messages (e.g., "subcommand 'name' must be a string").
    - __displayable__ (if set) narrows which properties are shown by __rich_repr__;
      otherwise __introspectable__ is used.
    """
    __introspectable__ = ()
    __displayable__ = Unset

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
            """
            Return a concise, stable representation with key metadata.

            Example
            - argument(name='verbose', positional=False, long='verbose', ...)
            """
            return f"{type(self).__typename__}({
                ", ".join(map(functools.partial(operator.mod, "%s=%r"), self.__rich_repr__()))
            })"
        self.__repr__ = __repr__

        @rename("__rich_repr__")
        def __rich_repr__(self):
            """
            Yield (name, object) pairs for pretty printers (e.g., rich).
            """
            for name in coalesce(type(self).__displayable__, type(self).__introspectable__):
                yield name, getattr(self, name)
        self.__rich_repr__ = __rich_repr__

        return self


def _sanitize_name(cls, metadata, /):
    """
    name: required non-empty string (trimmed).
    """
    if not isinstance(name := metadata["name"], str):
        raise TypeError(f"{cls.__typename__} 'name' must be a string")
    elif not (name := name.strip()):
        raise ValueError(f"{cls.__typename__} 'name' cannot be empty")
    metadata["name"] = name

    if not isinstance(descr := metadata["descr"], str | Unset):
        raise TypeError(f"{cls.__typename__} {name!r} 'descr' must be a string")
    metadata["descr"] = coalesce(descr)


def _sanitize_booleans(cls, metadata, /, *fields):
    for field in fields:
        if not isinstance(metadata[field], bool):
            raise TypeError(f"{cls.__typename__} {metadata['name']!r} {field!r} must be a boolean")


def _sanitize_strings(cls, metadata, /, *fields):
    """
    collections of strings: any non-string iterable of strings, stored as a tuple.
    """
    for field in fields:
        if isinstance(values := metadata[field], str) or not isinstance(values, Iterable):
            raise TypeError(f"{cls.__typename__} {metadata['name']!r} {field!r} must be an iterable of strings")
        values = tuple(values)
        if not all(isinstance(value, str) for value in values):
            raise TypeError(f"{cls.__typename__} {metadata['name']!r} {field!r} must contain only strings")
        metadata[field] = values


def _sanitize_flags(cls, metadata, /):
    """
    long/short flag names and their aliases (types only; shapes are validated later).
    """
    for field in ("long", "short"):
        if not isinstance(value := metadata[field], str | Unset):
            raise TypeError(f"{cls.__typename__} {metadata['name']!r} {field!r} must be a string")
        metadata[field] = coalesce(value)
    _sanitize_strings(cls, metadata, "long_aliases", "short_aliases")


def _sanitize_nargs(cls, metadata, /):
    """
    normalize the nargs policy into an Arity.

    bools are checked before ints (bool is an int subclass); the range form
    accepts ... or None as an unbounded maximum.
    """
    nargs = metadata.pop("nargs")

    if nargs is Unset:
        if metadata["last"]:
            arity = Arity(0, math.inf)
        else:
            arity = Arity(1, 1) if metadata["positional"] else Arity(0, 0)
    elif isinstance(nargs, bool):
        arity = Arity(0, math.inf) if nargs else Arity(0, 0)
    elif nargs is Ellipsis:
        arity = Arity(0, math.inf)
    elif isinstance(nargs, int):
        arity = Arity(nargs, nargs)
    elif isinstance(nargs, tuple | list) and len(nargs) == 2:
        minimum, maximum = nargs
        if maximum is Ellipsis or maximum is None:
            maximum = math.inf
        if (
            isinstance(minimum, bool) or not isinstance(minimum, int) or
            isinstance(maximum, bool) or not (isinstance(maximum, int) or maximum == math.inf)
        ):
            raise TypeError(f"{cls.__typename__} {metadata['name']!r} 'nargs' range must hold integers")
        arity = Arity(minimum, maximum)
    else:
        raise TypeError(f"{cls.__typename__} {metadata['name']!r} 'nargs' must be a bool, an int, a (min, max) pair or ...")

    metadata["arity"] = arity


class Argument(metaclass=DefinitionType):
    """
    Declaration of one argument of a command.

    Positional arguments fill slots in declaration order; flag arguments are
    matched by `--long`/`-s` (or aliases). Values are always opaque strings.

    Fields
    - name: key under which values are reported by the resolution.
    - positional / required / last: binding mode and presence rules.
    - long, long_aliases, short, short_aliases: flag names (bare, no dashes).
    - arity: normalized nargs.
    - default: value(s) reported when the argument is absent.
    - implicit: value(s) used when the flag is present without any value.
    - inline: the long form needs `--name=value` (a following word is not taken).
    - delimiter: split every received value on this string.
    """
    __introspectable__ = (
        "name",
        "descr",
        "positional",
        "required",
        "long",
        "long_aliases",
        "short",
        "short_aliases",
        "arity",
        "default",
        "implicit",
        "inline",
        "delimiter",
        "last",
    )

    __displayable__ = (
        "name",
        "positional",
        "required",
        "long",
        "short",
        "arity",
    )

    def __init__(
            self,
            name,
            /,
            *,
            descr=Unset,
            positional=False,
            required=False,
            long=Unset,
            long_aliases=(),
            short=Unset,
            short_aliases=(),
            nargs=Unset,
            default=Unset,
            implicit=Unset,
            inline=False,
            delimiter=Unset,
            last=False,
    ):
        metadata = {
            "name": name,
            "descr": descr,
            "positional": positional,
            "required": required,
            "long": long,
            "long_aliases": long_aliases,
            "short": short,
            "short_aliases": short_aliases,
            "nargs": nargs,
            "default": default,
            "implicit": implicit,
            "inline": inline,
            "delimiter": delimiter,
            "last": last,
        }
        _sanitize_name(type(self), metadata)
        _sanitize_booleans(type(self), metadata, "positional", "required", "inline", "last")
        _sanitize_flags(type(self), metadata)
        _sanitize_nargs(type(self), metadata)

        if not isinstance(delimiter, str | Unset):
            raise TypeError(f"{type(self).__typename__} {metadata['name']!r} 'delimiter' must be a string")
        elif delimiter == "":
            raise ValueError(f"{type(self).__typename__} {metadata['name']!r} 'delimiter' cannot be empty")
        metadata["delimiter"] = coalesce(delimiter)

        for name, object in metadata.items():
            setattr(self, "_" + name, object)

    @property
    def flags(self):
        """
        Every dashed spelling of this argument: ("--long", "--alias", "-s", "-t").
        """
        longs = (self.long, *self.long_aliases) if self.long else self.long_aliases
        shorts = (self.short, *self.short_aliases) if self.short else self.short_aliases
        return tuple("--" + long for long in longs) + tuple("-" + short for short in shorts)


class Command(metaclass=DefinitionType):
    """
    A node of the command tree.

    Fields
    - name: the word that selects this command (subcommands) or the program name (root).
    - action: zero-argument callable invoked when resolution ends on this command.
    - descr: short description (metadata only).
    - arguments: this command's own Argument declarations.
    - required: fail when resolution ends here without selecting a subcommand.
    - subcommands: ordered Subcommand declarations.
    """
    __introspectable__ = (
        "name",
        "descr",
        "action",
        "arguments",
        "required",
        "subcommands",
    )

    __displayable__ = (
        "name",
        "arguments",
        "required",
        "subcommands",
    )

    def __init__(
            self,
            name,
            /,
            action=Unset,
            *,
            descr=Unset,
            arguments=(),
            required=False,
            subcommands=(),
    ):
        metadata = {
            "name": name,
            "descr": descr,
            "action": action,
            "arguments": arguments,
            "required": required,
            "subcommands": subcommands,
        }
        self._initialize(metadata)

    def _initialize(self, metadata, /):
        cls = type(self)

        _sanitize_name(cls, metadata)
        _sanitize_booleans(cls, metadata, "required")

        if not callable(action := metadata["action"]) and action is not Unset:
            raise TypeError(f"{cls.__typename__} {metadata['name']!r} 'action' must be callable")
        metadata["action"] = coalesce(action)

        for field, kind in (("arguments", Argument), ("subcommands", Subcommand)):
            if not isinstance(items := metadata[field], Iterable):
                raise TypeError(f"{cls.__typename__} {metadata['name']!r} {field!r} must be iterable")
            items = tuple(items)
            if not all(isinstance(item, kind) for item in items):
                raise TypeError(f"{cls.__typename__} {metadata['name']!r} {field!r} must only contain {kind.__typename__}s")
            metadata[field] = items

        for name, object in metadata.items():
            setattr(self, "_" + name, object)

    @property
    def positionals(self):
        """
        Positional slots in declaration order (the `last` argument is not a slot).
        """
        return tuple(argument for argument in self._arguments if argument.positional and not argument.last)

    @property
    def switches(self):
        """
        Mapping of every dashed flag spelling to its argument; the first declaration wins.
        """
        switches = {}
        for argument in self._arguments:
            if argument.positional:
                continue
            for flag in argument.flags:
                switches.setdefault(flag, argument)
        return switches

    @property
    def fallback(self):
        """
        The default subcommand, or None.
        """
        return next((subcommand for subcommand in self._subcommands if subcommand.default), None)


class Subcommand(Command):
    """
    A Command nested under another one.

    Extra fields
    - default: selected implicitly when no token selects a sibling.
    - aliases: extra words that select this subcommand.
    - long, long_aliases, short, short_aliases: flags that select it (`--build`, `-b`).
    - flagged: only flags select it; its bare name is not a selector.
    """
    __introspectable__ = Command.__introspectable__ + (
        "default",
        "aliases",
        "long",
        "long_aliases",
        "short",
        "short_aliases",
        "flagged",
    )

    __displayable__ = (
        "name",
        "default",
        "long",
        "short",
        "arguments",
        "subcommands",
    )

    def __init__(
            self,
            name,
            /,
            action=Unset,
            *,
            descr=Unset,
            arguments=(),
            required=False,
            subcommands=(),
            default=False,
            aliases=(),
            long=Unset,
            long_aliases=(),
            short=Unset,
            short_aliases=(),
            flagged=False,
    ):
        metadata = {
            "name": name,
            "descr": descr,
            "action": action,
            "arguments": arguments,
            "required": required,
            "subcommands": subcommands,
            "default": default,
            "aliases": aliases,
            "long": long,
            "long_aliases": long_aliases,
            "short": short,
            "short_aliases": short_aliases,
            "flagged": flagged,
        }
        _sanitize_booleans(type(self), metadata, "default", "flagged")
        _sanitize_strings(type(self), metadata, "aliases")
        _sanitize_flags(type(self), metadata)
        self._initialize(metadata)


__all__ = (
    "Arity",
    "Argument",
    "Command",
    "Subcommand",
)
