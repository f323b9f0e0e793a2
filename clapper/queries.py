"""
Clapper flag queries: ask about flags without declaring any command.

Useful for quick scripts that only need "is --verbose here?" or "what follows
--output?". The answers come straight from the token sequence; no command tree
is involved (see clapper.resolution for the tree-aware engine).

Flag specs
- long:  "--name"
- short: "-n" (exactly one dash and one character)
- pair:  ("--name", "-n"), passed as two arguments

Example
    >>> arguments = parse(["5", "--add", "3", "-m2", "--divide=4"])
    >>> arguments.get("--add", "-a")
    '3'
    >>> arguments.get("--multiply", "-m")
    '2'
    >>> arguments.has("-d")
    False
"""
import sys

from .faults import InvalidFlagSpecError
from .tokens import Text, LongFlag, ShortFlagBundle, tokenize, split
from .utils import Unset, mirror


def _resolve_spec(spec, short, /):
    """
    Split a flag spec into (long, short-letter); either side may be None.
    """
    if not isinstance(spec, str):
        raise InvalidFlagSpecError("flag spec must be a string, not %s" % type(spec).__name__)

    if spec.startswith("--"):
        long = spec
    elif spec.startswith("-"):
        if short is not Unset:
            raise InvalidFlagSpecError(
                "flag spec %r is short, a long flag must come first in a pair" % spec,
                hint="pass the pair as (%r, %r)" % ("--" + spec[1:], spec),
            )
        long, short = None, spec
    else:
        raise InvalidFlagSpecError(
            "flag spec %r must start with a dash" % spec,
            hint="use '--%s' for a long flag or '-%s' for a short one" % (spec, spec[:1]),
        )

    if short is Unset:
        return long, None
    if not isinstance(short, str) or len(short) != 2 or short[0] != "-" or short == "--":
        raise InvalidFlagSpecError(
            "short flag spec %r must be a dash followed by a single character" % (short,),
            hint="for example: '-v'",
        )
    return long, short[1]


class Arguments:
    """
    Parsed view over one argument vector.

    Attributes
    - raw: the raw strings, as given.
    - tokens: their tokens (see clapper.tokens.tokenize).
    - available: whether the host exposes an argument vector at all.
    """
    raw = mirror("raw")
    tokens = mirror("tokens")

    def __init__(self, raw, /):
        self._raw = tuple(raw)
        self._tokens = tokenize(self._raw)

    @property
    def available(self):
        return bool(sys.argv)

    def has(self, spec, short=Unset, /):
        """
        Check whether a flag is present anywhere, assuming no short flag takes a value.

        A short flag counts as present when its letter appears anywhere in a
        bundle ("-aBc" contains -a, -B and -c); matching is case-sensitive.
        """
        long, letter = _resolve_spec(spec, short)

        for token in self._tokens:
            match token:
                case LongFlag(name) if name == long:
                    return True
                case ShortFlagBundle(letters) if letter and letter in letters:
                    return True
        return False

    def get(self, spec, short=Unset, /):
        """
        Get the value of a flag, assuming it takes one value.

        Later occurrences overwrite earlier ones. A long flag takes its inline
        value, else the following word, else "". A short flag takes whatever is
        attached after its letter ("-m2" → "2"), and only counts when its letter
        opens the bundle. Returns None when the flag never appears.
        """
        long, letter = _resolve_spec(spec, short)

        value = None
        for index, token in enumerate(self._tokens):
            match token:
                case LongFlag(name, inline) if name == long:
                    if inline is not None:
                        value = inline
                        continue
                    try:
                        following = self._tokens[index + 1]
                    except IndexError:
                        following = None
                    value = following.value if isinstance(following, Text) else ""
                case ShortFlagBundle(letters) if letter and letters[:1] == letter:
                    value = letters[1:]
        return value

    def __repr__(self):
        return f"arguments(raw={self._raw!r})"


def parse(prompt=Unset, /):
    """
    Tokenize a prompt (Unset → sys.argv[1:], str → shlex, Iterable[str]) into Arguments.
    """
    return Arguments(split(prompt))


__all__ = (
    "Arguments",
    "parse",
)
