r"""
Clapper tokenizer: classify raw arguments according to Unix conventions.

Rules (one token per raw string, no command knowledge involved)
- `foo`           → Text("foo")
- `--flag`        → LongFlag("--flag", None)
- `--option=val`  → LongFlag("--option", "val")     (split at the first '=')
- `-f` / `-abcd`  → ShortFlagBundle("f") / ShortFlagBundle("abcd")
- `-`             → ShortFlagBundle("")
- `--`            → EndOfOptions(); every later string becomes Text, even `-x`/`--y`

Tokens are frozen dataclasses, so they compare by kind and value and can be taken
apart with structural pattern matching:

    >>> match token:
    ...     case LongFlag(name, value): ...
    ...     case ShortFlagBundle(letters): ...

Prompt normalization
- split(prompt) turns the accepted prompt shapes into a list of raw strings:
  Unset → sys.argv[1:], str → shlex.split(str), Iterable[str] → list.
"""
import logging
import shlex
import sys
from collections.abc import Iterable
from dataclasses import dataclass

from .utils import Unset

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Text:
    """a bare positional word."""
    value: str


@dataclass(frozen=True, slots=True)
class LongFlag:
    """a `--name` or `--name=value` argument; name keeps its dashes."""
    name: str
    value: str | None = None


@dataclass(frozen=True, slots=True)
class ShortFlagBundle:
    """
    a `-abc` argument: several single-letter flags, or one flag with an attached value.
    """
    letters: str


@dataclass(frozen=True, slots=True)
class EndOfOptions:
    """the literal `--`."""


type Token = Text | LongFlag | ShortFlagBundle | EndOfOptions


def tokenize(raw, /):
    """
    Classify each raw string into a token, preserving order.

    Total and deterministic: any string is representable as some token, and the
    result has exactly one token per input string. Only the exact string "--"
    switches to end-of-options mode.
    """
    tokens = []
    ended = False

    for argument in raw:
        if not isinstance(argument, str):
            raise TypeError("tokenize() argument must be an iterable of strings")
        if ended:
            tokens.append(Text(argument))
        elif argument == "--":
            tokens.append(EndOfOptions())
            ended = True
        elif argument.startswith("--"):
            name, equals, value = argument.partition("=")
            tokens.append(LongFlag(name, value if equals else None))
        elif argument.startswith("-"):
            tokens.append(ShortFlagBundle(argument[1:]))
        else:
            tokens.append(Text(argument))

    logger.debug("tokenized %d argument(s): %r", len(tokens), tokens)
    return tuple(tokens)


def split(prompt=Unset, /):
    """
    Normalize a prompt into a list of raw argument strings.

    - Unset: the process arguments (sys.argv[1:]; the program path is stripped).
    - str: shell-style splitting via shlex.split.
    - Iterable[str]: used item by item; items are kept verbatim (empty strings
      are legitimate arguments).

    Raises
    - TypeError: when prompt is none of the above, or an item is not a string.
    """
    if prompt is Unset:
        return sys.argv[1:]
    if isinstance(prompt, str):
        return shlex.split(prompt)
    if isinstance(prompt, Iterable):
        items = list(prompt)
        if not all(isinstance(item, str) for item in items):
            raise TypeError("split() argument must be a string or an iterable of strings")
        return items
    raise TypeError("split() argument must be a string or an iterable of strings")


__all__ = (
    "Text",
    "LongFlag",
    "ShortFlagBundle",
    "EndOfOptions",
    "Token",
    "tokenize",
    "split",
)
