"""
Clapper faults (errors and warnings) and rendering.

Scope
- ErrorKind: who is to blame for a fault (library bug, developer, end user).
- FaultCode: canonical, stable numeric identifiers for all issues, grouped by
  kind to keep copy consistent and make logs/searches predictable.
- CommandException / CommandWarning: base types that carry message + options and
  know how to render themselves in a friendly, lowercased, and actionable way.
- trigger(): central entry point to surface any fault (respecting shell/fancy/colorful).
- getdoc(): optional description lookup for a code from the host application.

Blame model
- library-bug: an internal invariant was violated; always raised, report upstream.
- developer-induced: the command tree (or a flag spec) is invalid; always raised,
  never depends on what the end user typed.
- invalid-user-input: the arguments do not fit a valid tree; the only faults expected
  in normal operation, rendered via rich in shell mode, raised otherwise.

UX goals
- Position-first messages: every user-input message includes the ordinal position
  of the offending argument (“at third position”).
- Soft but technical language: short titles, one-sentence bodies, a single clear hint.
- Lowercased tone with readable styling (configurable via __styles__ in __main__).
"""
import copy
import inspect
import sys
import warnings
from abc import ABC
from collections import defaultdict
from enum import IntEnum, StrEnum
from types import MappingProxyType

from rich.console import Console, Group
from rich.panel import Panel
from rich.text import Text

from .utils import Unset

console = Console(stderr=True)


class ErrorKind(StrEnum):
    """
    blame classes for faults, ordered from library to end user.
    """
    LIBRARY_BUG        = "library-bug"
    DEVELOPER_INDUCED  = "developer-induced"
    INVALID_USER_INPUT = "invalid-user-input"


class FaultCode(IntEnum):
    """
    canonical fault codes used across the parser (stable identifiers).

    grouping (by blame)
    - library bugs (10xxx)
      • UNREACHABLE
    - configuration (11xxx)
      • BAD_CONFIGURATION, INVALID_FLAG_SPEC
    - routing (121xx)
      • SUBCOMMAND_REQUIRED, SUBCOMMAND_LONG_FLAG_VALUE
    - switches (122xx)
      • UNKNOWN_SWITCH, FLAG_ASSIGNMENT, MISSING_INLINE_VALUE,
        NOT_ENOUGH_VALUES, TOO_MANY_VALUES, MISSING_ARGUMENT
    - positionals (123xx)
      • UNEXPECTED_POSITIONAL
    - warnings (13xxx)
      • EMPTY_INLINE_VALUE

    spacing leaves room for future additions without reshuffling existing codes.
    """
    # --- library bugs (10xxx) ---
    UNREACHABLE                = 10001

    # --- configuration errors (11xxx) ---
    BAD_CONFIGURATION          = 11001
    INVALID_FLAG_SPEC          = 11002

    # --- routing errors (121xx) ---
    SUBCOMMAND_REQUIRED        = 12101
    SUBCOMMAND_LONG_FLAG_VALUE = 12102

    # --- switch errors (122xx) ---
    UNKNOWN_SWITCH             = 12201
    FLAG_ASSIGNMENT            = 12202
    MISSING_INLINE_VALUE       = 12203
    NOT_ENOUGH_VALUES          = 12204
    TOO_MANY_VALUES            = 12205
    MISSING_ARGUMENT           = 12206

    # --- positional errors (123xx) ---
    UNEXPECTED_POSITIONAL      = 12301

    # --- warnings (13xxx) ---
    EMPTY_INLINE_VALUE         = 13101

    @property
    def kind(self):
        """
        blame class derived from the code range.
        """
        if self.value < 11000:
            return ErrorKind.LIBRARY_BUG
        if self.value < 12000:
            return ErrorKind.DEVELOPER_INDUCED
        return ErrorKind.INVALID_USER_INPUT

    def normalize(self):
        """
        return a host-normalized string for this code.

        the host application can provide a __codes__ mapping in __main__
        to override numeric ids with friendlier labels. when no mapping
        is present, the numeric value is returned as a string.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


def _render(self, styles, title):
    """
    shared rich layout for exceptions and warnings: header, message, hint.
    """
    main = __import__("__main__")
    colorful = self.options.get("colorful", False)
    fancy = self.options.get("fancy", False)

    styles = defaultdict(str, styles | getattr(main, "__styles__", {}))

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

    try:
        name = self.options["tool"].name
    except KeyError:
        name = "clapper"
    prog = text(getattr(main, "__prog__", name), styler("prog-name"))

    header = Text.assemble(
        "[ ",
        prog,
        " — ",
        text(self.options.get("code", self.code).normalize(), styler("code")),
        " | ",
        text(self.options.get("title", self.title).title(), styler(title)),
        " ]"
    )
    message = text(self.message, styler(title.replace("title", "message")))
    hint = self.options.get("hint")
    hint = Text.assemble(text(" → ", styler("hint-arrow")), text(hint, styler("hint"))) if hint else Text("")

    if fancy:
        return Panel(Group(message, hint), title=header, title_align="left")

    return Group(header, message, hint)


class CommandException(Exception):
    """
    base for every clapper error.

    carries a message and a read-only mapping of options (title, code, hint,
    input, position, ...). kind/code/title are class-level defaults that the
    options may override for rendering.
    """
    kind = ErrorKind.LIBRARY_BUG
    code = FaultCode.UNREACHABLE
    title = "error"

    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        super().__init__(*(() if message is Unset else (message,)))
        self.message = message
        self.options = MappingProxyType(options)

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
        if not self.options.get("shell", False) or self.kind is not ErrorKind.INVALID_USER_INPUT:
            raise self from None
        console.print(self)
        sys.exit(1)

    def __replace__(self, *unused, **overrides):
        assert not unused, "unused arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class UnreachableError(CommandException):
    title = "unreachable state"


class ConfigurationError(CommandException):
    kind = ErrorKind.DEVELOPER_INDUCED
    code = FaultCode.BAD_CONFIGURATION
    title = "bad configuration"


class InvalidFlagSpecError(ConfigurationError, TypeError):
    code = FaultCode.INVALID_FLAG_SPEC
    title = "invalid flag spec"


class UserInputError(CommandException):
    kind = ErrorKind.INVALID_USER_INPUT


class SubcommandRequiredError(UserInputError):
    code = FaultCode.SUBCOMMAND_REQUIRED
    title = "subcommand required"


class SubcommandLongFlagValueError(UserInputError):
    code = FaultCode.SUBCOMMAND_LONG_FLAG_VALUE
    title = "subcommand flag cannot take a value"


class UnknownSwitchError(UserInputError):
    code = FaultCode.UNKNOWN_SWITCH
    title = "unknown flag"


class FlagAssignmentError(UserInputError):
    code = FaultCode.FLAG_ASSIGNMENT
    title = "flag cannot take a value"


class MissingInlineValueError(UserInputError):
    code = FaultCode.MISSING_INLINE_VALUE
    title = "missing inline value"


class NotEnoughValuesError(UserInputError):
    code = FaultCode.NOT_ENOUGH_VALUES
    title = "not enough values"


class TooManyValuesError(UserInputError):
    code = FaultCode.TOO_MANY_VALUES
    title = "too many values"


class MissingArgumentError(UserInputError):
    code = FaultCode.MISSING_ARGUMENT
    title = "missing argument"


class UnexpectedPositionalError(UserInputError):
    code = FaultCode.UNEXPECTED_POSITIONAL
    title = "unexpected positional"


class CommandWarning(ABC, Warning):
    code = FaultCode.EMPTY_INLINE_VALUE
    title = "warning"

    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        super().__init__(*(() if message is Unset else (message,)))
        self.message = message
        self.options = MappingProxyType(options)

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
            return warnings.warn(self, stacklevel=len(inspect.stack()))
        console.print(self)

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class EmptyInlineValueWarning(CommandWarning):
    code = FaultCode.EMPTY_INLINE_VALUE
    title = "empty inline value"


def trigger(fault, /, **options):
    """
    surface a fault with the given runtime options.

    contract
    - fault must provide __trigger__ and __replace__ methods (see base classes).
    - options are merged into the fault via copy.replace(fault, **options) before triggering.
    - in shell mode, user-input faults are rendered via the rich console (errors exit
      with status 1); everything else is raised (errors) or warned (warnings).

    typical options
    - tool, shell, fancy, colorful, title, code, hint, docs, and any other
      context the reporter may want to show (e.g., input/position/argument).
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

    the host application may expose a __docs__ mapping in __main__ where keys
    are FaultCode instances and values are short documentation strings.
    when not found, returns None (renderers treat docs as optional).
    """
    if not isinstance(code, FaultCode):
        raise TypeError("getdoc() argument must be a fault-code")
    try:
        return getattr(__import__("__main__"), "__docs__", {})[code]
    except KeyError:
        return None


__all__ = (
    "ErrorKind",
    "FaultCode",
    "CommandException",
    "UnreachableError",
    "ConfigurationError",
    "InvalidFlagSpecError",
    "UserInputError",
    "SubcommandRequiredError",
    "SubcommandLongFlagValueError",
    "UnknownSwitchError",
    "FlagAssignmentError",
    "MissingInlineValueError",
    "NotEnoughValuesError",
    "TooManyValuesError",
    "MissingArgumentError",
    "UnexpectedPositionalError",
    "CommandWarning",
    "EmptyInlineValueWarning",
    "trigger",
    "getdoc",
)
