"""
Clapper definition validator: reject misconfigured command trees up front.

The walk is depth-first (a command's own rules, its arguments, then each
subcommand in order) and stops at the first violation with a
ConfigurationError naming the offending command and the broken rule. These
faults are always raised, whatever the runtime options: they are the
developer's to fix and never depend on what the end user typed.

Command rules
- a required subcommand needs at least one declared subcommand.
- at most one direct subcommand may be the default.

Subcommand rules
- flag-only subcommands need a long or a short flag.
- short flags and short flag aliases are single characters.
- flag aliases need their primary flag.

Argument rules
- names and flag spellings are unique within a command.
- short flags, short flag aliases and flag aliases follow the subcommand rules.
- positional arguments take at least one value and declare no flags.
- flag arguments (neither positional nor last) need a long or a short flag.
- arity ranges are non-negative and ordered; a command has at most one `last` argument.
- long flags never start with a dash (names are stored bare).
"""
import logging
import weakref

from .definitions import Command, Subcommand
from .faults import ConfigurationError

logger = logging.getLogger(__name__)

# trees that already passed; definitions are immutable so a pass is final
_validated = weakref.WeakSet()


def _fail(command, message, /, *, hint):
    kind = "subcommand" if isinstance(command, Subcommand) else "command"
    raise ConfigurationError(f"in {kind} {command.name!r}, {message}", hint=hint, command=command)


def _validate_flags(command, holder, /, label=""):
    """
    flag-shape rules shared by subcommands and arguments; `label` prefixes argument messages.
    """
    for short in filter(None, (holder.short, *holder.short_aliases)):
        if len(short) != 1:
            _fail(
                command,
                f"{label}a short flag {short!r} was specified; only single-letter short flags are supported",
                hint="use a single character, for example short=%r" % short[:1],
            )

    for long in filter(None, (holder.long, *holder.long_aliases)):
        if long.startswith("-"):
            _fail(
                command,
                f"{label}the long flag {long!r} starts with a dash",
                hint="declare long flags without dashes, for example long=%r" % long.lstrip("-"),
            )

    for type in ("long", "short"):
        if getattr(holder, f"{type}_aliases") and not getattr(holder, type):
            _fail(
                command,
                f"{label}an alias for a {type} flag has been provided while {type!r} is not specified",
                hint=f"set {type}= to the primary flag or drop {type}_aliases",
            )


def _validate_arguments(command, /):
    names = set()
    spellings = set()
    last = None

    for argument in command.arguments:
        label = f"argument {argument.name!r}: "

        if argument.name in names:
            _fail(command, f"argument name {argument.name!r} is declared twice", hint="give every argument a distinct name")
        names.add(argument.name)

        _validate_flags(command, argument, label)

        for flag in argument.flags:
            if flag in spellings:
                _fail(command, f"{label}flag {flag!r} is already declared by another argument", hint="keep each flag spelling unique")
            spellings.add(flag)

        minimum, maximum = argument.arity
        if minimum < 0 or maximum < minimum:
            _fail(
                command,
                f"{label}takes between {minimum} and {maximum} values",
                hint="use a non-negative minimum that does not exceed the maximum",
            )

        if argument.last:
            if last:
                _fail(command, f"{label}is last, yet {last.name!r} already is", hint="keep a single last argument per command")
            last = argument
        elif argument.positional:
            if argument.flags:
                _fail(command, f"{label}is positional, yet declares flags", hint="drop long=/short= or positional=True")
            if maximum == 0:
                _fail(command, f"{label}is positional, yet takes no values", hint="positional arguments take at least one value")
        elif not argument.flags:
            _fail(command, f"{label}is neither positional nor reachable by a flag", hint="set long=, short= or positional=True")


def _validate_command(command, /):
    if command.required and not command.subcommands:
        _fail(
            command,
            "a subcommand is required, yet no subcommands are specified",
            hint="declare subcommands or drop required=True",
        )

    defaults = [subcommand.name for subcommand in command.subcommands if subcommand.default]
    if len(defaults) > 1:
        _fail(
            command,
            "multiple subcommands are specified as default: %s" % ", ".join(defaults),
            hint="keep default=True on a single subcommand",
        )

    if isinstance(command, Subcommand):
        if command.flagged and not (command.long or command.short):
            _fail(
                command,
                "calling without flag is disallowed, yet neither 'long' nor 'short' is specified",
                hint="set long= or short=, or drop flagged=True",
            )
        _validate_flags(command, command)

    _validate_arguments(command)

    for subcommand in command.subcommands:
        _validate_command(subcommand)


def validate(command, /):
    """
    Check a whole command tree, raising ConfigurationError on the first violation.

    Trees that passed once are remembered and not walked again.
    """
    if not isinstance(command, Command):
        raise TypeError("validate() argument must be a command")
    if command in _validated:
        return command
    _validate_command(command)
    _validated.add(command)
    logger.debug("validated command tree %r", command.name)
    return command


__all__ = (
    "validate",
)
