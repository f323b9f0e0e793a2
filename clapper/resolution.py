"""
Clapper resolution engine: walk a command tree with a token stream.

What this module provides
- resolve(command, prompt): validate the tree, tokenize the prompt, find the
  invoked (sub)command, bind every argument value, run the action.
- Resolution: the outcome (terminal command, path, bound values).

The state machine
- state: a work queue of (position, token) pairs and the current command,
  starting at the root.
- each step pops one token and tries, in this order:
  1. select a subcommand of the current command (declaration order):
     • Text(word)            → name or alias (unless the subcommand is flag-only)
     • LongFlag(--name)      → long flag or alias (an inline value is an error)
     • ShortFlagBundle(x...) → short flag or alias on the first letter; the rest
                               of the bundle is pushed back as a new bundle
  2. fall through to the default subcommand, keeping the token for it;
  3. bind the token to the current command's own arguments.
- after `--` no token selects a subcommand anymore: words go to the `last`
  argument when one is declared, else to positional slots.
- the queue only shrinks (pushed-back bundles are strictly shorter) and the
  pointer only moves down a finite tree, so resolution always terminates.

Binding
- positional words fill the next non-full slot in declaration order; a slot
  that reached its minimum is closed early when the later slots need every
  remaining word. Once the current command has no free slot, words overflow
  to the nearest ancestor with one.
- a positional slot left short of its minimum fails, unless it is absent and
  declares a default.
- flags bind by long/short spelling. Valued flags take an inline value
  (`--name=value`), an attached value (`-n2`), or following words (up to the
  maximum arity; never with `inline=True` on the long form).
- `delimiter` splits values, `implicit` stands in for a flag given without
  values, `default` stands in for an absent argument.
- a repeated flag keeps its last occurrence.

Faults
- user-input faults carry the ordinal position of the offending token and a
  hint; in shell mode they are printed via rich and the process exits with 1,
  otherwise they are raised (see clapper.faults.trigger).
- the first fault stops resolution; no action runs.
"""
import copy
import difflib
import logging
from collections import deque

from .definitions import Command
from .faults import *
from .tokens import Text, LongFlag, ShortFlagBundle, EndOfOptions, tokenize, split
from .utils import *
from .validate import validate

logger = logging.getLogger(__name__)


def _as_values(object, /):
    """
    default/implicit values as a tuple: sequences are spread, anything else is one value.
    """
    if isinstance(object, list | tuple):
        return tuple(object)
    return (object,)


def _split(argument, words, /):
    if argument.delimiter is None:
        return list(words)
    return [piece for word in words for piece in word.split(argument.delimiter)]


def _plural(count, /):
    return "value" if count == 1 else "values"


class Resolution:
    """
    Outcome of a successful resolution.

    Attributes
    - command: the terminal (deepest reached) command; its action has run.
    - path: commands from the root to the terminal one.
    - values: argument name → tuple of values, defaults included; when a
      parent and a subcommand share an argument name, the deeper one wins.
    """
    command = mirror("command")
    path = mirror("path")
    values = mirror("values")

    def __init__(self, path, values, present, /):
        self._command = path[-1]
        self._path = tuple(path)
        self._values = dict(values)
        self._present = frozenset(present)

    def has(self, name, /):
        """
        Whether the user supplied the argument (defaults do not count).
        """
        return name in self._present

    def get(self, name, default=None, /):
        """
        The last value of an argument, its declared default when absent, else `default`.
        """
        values = self._values.get(name)
        return values[-1] if values else default

    def getall(self, name, /):
        """
        Every value of an argument, in order (empty when none).
        """
        return self._values.get(name, ())

    def __repr__(self):
        return f"resolution(command={self._command.name!r}, values={self._values!r})"


class _Binding:
    """
    per-command binding state: bound values, supplied names, unfilled positional slots.
    """

    def __init__(self, command, /):
        self.command = command
        self.switches = command.switches
        self.slots = deque(command.positionals)
        self.last = next((argument for argument in command.arguments if argument.last), None)
        self.values = {}
        self.present = set()


class Resolver:
    """
    One resolution pass over one command tree (single use).
    """

    def __init__(self, command, /, *, shell=False, fancy=False, colorful=False):
        self._root = command
        self._path = [command]
        self._bindings = [_Binding(command)]
        self._ended = False
        self._shell = shell
        self._fancy = fancy
        self._colorful = colorful

    @property
    def _current(self):
        return self._path[-1]

    @property
    def _binding(self):
        return self._bindings[-1]

    @property
    def _route(self):
        return " ".join(command.name for command in self._path)

    def trigger(self, fault, /, **options):
        """
        Surface a fault with this pass's runtime options (see clapper.faults.trigger).
        """
        fault = copy.replace(fault, **options, tool=self._root, shell=self._shell, fancy=self._fancy, colorful=self._colorful)
        trigger(fault)

    def _descend(self, subcommand, /, *, reason):
        logger.debug("descending from %r into %r (%s)", self._current.name, subcommand.name, reason)
        self._path.append(subcommand)
        self._bindings.append(_Binding(subcommand))

    def _select(self, position, token, queue, /):
        """
        Return the subcommand of the current command that this token selects, or None.
        """
        for subcommand in self._current.subcommands:
            match token:
                case Text(word) if not subcommand.flagged and word in (subcommand.name, *subcommand.aliases):
                    return subcommand
                case LongFlag(name, value) if subcommand.long and name[2:] in (subcommand.long, *subcommand.long_aliases):
                    if value is not None:
                        self.trigger(SubcommandLongFlagValueError(
                            "subcommand flag %r at %s position cannot take a value (got %r)" % (name, ordinal(position), value),
                            code=FaultCode.SUBCOMMAND_LONG_FLAG_VALUE,
                            input=name,
                            value=value,
                            position=position,
                            hint="remove everything from '=' (for example: %s)" % name,
                            docs=getdoc(FaultCode.SUBCOMMAND_LONG_FLAG_VALUE),
                        ))
                    return subcommand
                case ShortFlagBundle(letters) if subcommand.short and letters[:1] in (subcommand.short, *subcommand.short_aliases):
                    if len(letters) > 1:
                        # the remaining letters still belong to whatever comes next
                        queue.appendleft((position, ShortFlagBundle(letters[1:])))
                    return subcommand
        return None

    def _unknown(self, input, position, /):
        switches = self._binding.switches
        suggestions = difflib.get_close_matches(input, switches.keys(), 5)
        try:
            hint = "did you mean %r? the flags of '%s' are: %s" % (suggestions[0], self._route, ", ".join(switches))
        except IndexError:
            if switches:
                hint = "the flags of '%s' are: %s" % (self._route, ", ".join(switches))
            else:
                hint = "'%s' does not take any flag" % self._route
        self.trigger(UnknownSwitchError(
            "unknown flag %r at %s position" % (input, ordinal(position)),
            code=FaultCode.UNKNOWN_SWITCH,
            input=input,
            position=position,
            suggestions=suggestions,
            hint=hint,
            docs=getdoc(FaultCode.UNKNOWN_SWITCH),
        ))

    def _collect(self, argument, queue, /):
        """
        Take following words for a valued flag, up to its maximum arity.
        """
        words = []
        while queue and len(words) < argument.arity.maximum and isinstance(queue[0][1], Text):
            words.append(queue.popleft()[1].value)
        return words

    def _store(self, argument, input, position, words, /):
        """
        Check a flag's values against its arity and record them (last occurrence wins).
        """
        minimum, maximum = argument.arity
        values = _split(argument, words)

        if not values and argument.implicit is not Unset:
            values = list(_as_values(argument.implicit))
        elif len(values) > maximum:
            self.trigger(TooManyValuesError(
                "%r at %s position takes at most %d %s, got %d" % (input, ordinal(position), maximum, _plural(maximum), len(values)),
                code=FaultCode.TOO_MANY_VALUES,
                input=input,
                position=position,
                argument=argument,
                hint="pass at most %d %s to %s" % (maximum, _plural(maximum), input),
                docs=getdoc(FaultCode.TOO_MANY_VALUES),
            ))
        elif len(values) < minimum:
            self.trigger(NotEnoughValuesError(
                "%r at %s position takes at least %d %s, got %d" % (input, ordinal(position), minimum, _plural(minimum), len(values)),
                code=FaultCode.NOT_ENOUGH_VALUES,
                input=input,
                position=position,
                argument=argument,
                hint="add the missing %s after %s" % (_plural(minimum - len(values)), input),
                docs=getdoc(FaultCode.NOT_ENOUGH_VALUES),
            ))

        self._binding.values[argument.name] = values
        self._binding.present.add(argument.name)
        logger.debug("bound %r of %r to %r", argument.name, self._current.name, values)

    def _bind_positional(self, value, position, queue, /):
        # words still to come, this one included; flag values and subcommand names are counted too
        remaining = 1 + sum(isinstance(token, Text) for _, token in queue)

        # current command first, then ancestors nearest-first
        for binding in reversed(self._bindings):
            # a slot that reached its minimum yields when later slots need every remaining word
            while len(binding.slots) > 1:
                argument, *later = binding.slots
                needed = sum(slot.arity.minimum for slot in later)
                if len(binding.values.get(argument.name, ())) < argument.arity.minimum or remaining > needed:
                    break
                binding.slots.popleft()

            if binding.slots:
                argument = binding.slots[0]
                values = binding.values.setdefault(argument.name, [])
                values.append(value)
                binding.present.add(argument.name)
                if len(values) >= argument.arity.maximum:
                    binding.slots.popleft()
                logger.debug("bound positional %r of %r to %r", argument.name, binding.command.name, value)
                return

        self.trigger(UnexpectedPositionalError(
            "unexpected positional argument %r at %s position" % (value, ordinal(position)),
            code=FaultCode.UNEXPECTED_POSITIONAL,
            input=value,
            position=position,
            hint="remove this extra value, '%s' takes no more positional arguments" % self._route,
            docs=getdoc(FaultCode.UNEXPECTED_POSITIONAL),
        ))

    def _bind_long(self, name, value, position, queue, /):
        try:
            argument = self._binding.switches[name]
        except KeyError:
            return self._unknown(name, position)

        if argument.arity.switch:
            if value is not None:
                self.trigger(FlagAssignmentError(
                    "flag %r at %s position cannot have an inline value" % (name, ordinal(position)),
                    code=FaultCode.FLAG_ASSIGNMENT,
                    input=name,
                    position=position,
                    argument=argument,
                    hint="remove everything from '=' (for example: %s)" % name,
                    docs=getdoc(FaultCode.FLAG_ASSIGNMENT),
                ))
            return self._store(argument, name, position, [])

        if value is not None:
            if not value:
                self.trigger(EmptyInlineValueWarning(
                    "empty inline value for %r at %s position" % (name, ordinal(position)),
                    code=FaultCode.EMPTY_INLINE_VALUE,
                    input=name,
                    position=position,
                    argument=argument,
                    hint="add a value after '=' (for example: %s=<value>)" % name,
                    docs=getdoc(FaultCode.EMPTY_INLINE_VALUE),
                ))
            return self._store(argument, name, position, [value])

        if argument.inline:
            if argument.implicit is Unset and argument.arity.minimum:
                self.trigger(MissingInlineValueError(
                    "%r at %s position must include an inline value" % (name, ordinal(position)),
                    code=FaultCode.MISSING_INLINE_VALUE,
                    input=name,
                    position=position,
                    argument=argument,
                    hint="use the inline form: %s=<value>" % name,
                    docs=getdoc(FaultCode.MISSING_INLINE_VALUE),
                ))
            return self._store(argument, name, position, [])

        return self._store(argument, name, position, self._collect(argument, queue))

    def _bind_short(self, letters, position, queue, /):
        flag, rest = "-" + letters[0], letters[1:]
        try:
            argument = self._binding.switches[flag]
        except KeyError:
            return self._unknown(flag, position)

        if argument.arity.switch:
            self._store(argument, flag, position, [])
            if rest:
                queue.appendleft((position, ShortFlagBundle(rest)))
            return

        if rest:
            # attached value: -m2, -ofile
            return self._store(argument, flag, position, [rest])
        return self._store(argument, flag, position, self._collect(argument, queue))

    def _bind(self, position, token, queue, /):
        """
        Hand a token that selects no subcommand to the current command's arguments.
        """
        match token:
            case EndOfOptions():
                self._ended = True
                if last := self._binding.last:
                    words = [token.value for _, token in queue]
                    queue.clear()
                    self._store(last, "--", position, words)
            case Text(value):
                self._bind_positional(value, position, queue)
            case LongFlag(name, value):
                self._bind_long(name, value, position, queue)
            case ShortFlagBundle(""):
                # a lone dash is a word by convention (stdin/stdout)
                self._bind_positional("-", position, queue)
            case ShortFlagBundle(letters):
                self._bind_short(letters, position, queue)
            case _:
                self.trigger(UnreachableError(
                    "unexpected token %r at %s position" % (token, ordinal(position)),
                    code=FaultCode.UNREACHABLE,
                    hint="this is a bug in clapper, please report it",
                ))

    def _finalize(self):
        """
        Check required subcommands/arguments and positional minimums; apply defaults.
        """
        while fallback := self._current.fallback:
            self._descend(fallback, reason="default at end of input")

        if self._current.required:
            names = ", ".join(subcommand.name for subcommand in self._current.subcommands)
            self.trigger(SubcommandRequiredError(
                "%r requires a subcommand" % self._route,
                code=FaultCode.SUBCOMMAND_REQUIRED,
                input=self._current.name,
                hint="choose one of: %s (for example: '%s %s')" % (names, self._route, self._current.subcommands[0].name),
                docs=getdoc(FaultCode.SUBCOMMAND_REQUIRED),
            ))

        values = {}
        present = set()
        for binding in self._bindings:
            for argument in binding.command.arguments:
                name = argument.name
                if name in binding.present:
                    if argument.positional and not argument.last:
                        words = binding.values[name]
                        if len(words) < argument.arity.minimum:
                            self.trigger(NotEnoughValuesError(
                                "positional %r of '%s' takes at least %d %s, got %d" % (
                                    name, binding.command.name, argument.arity.minimum, _plural(argument.arity.minimum), len(words)
                                ),
                                code=FaultCode.NOT_ENOUGH_VALUES,
                                input=name,
                                argument=argument,
                                hint="add the missing %s for %r" % (_plural(argument.arity.minimum - len(words)), name),
                                docs=getdoc(FaultCode.NOT_ENOUGH_VALUES),
                            ))
                        binding.values[name] = _split(argument, words)
                    values[name] = tuple(binding.values[name])
                    present.add(name)
                elif argument.required:
                    spelling = argument.flags[0] if argument.flags else name.upper()
                    self.trigger(MissingArgumentError(
                        "required argument %r of '%s' is missing" % (name, binding.command.name),
                        code=FaultCode.MISSING_ARGUMENT,
                        input=name,
                        argument=argument,
                        hint="add %s to the command line" % spelling,
                        docs=getdoc(FaultCode.MISSING_ARGUMENT),
                    ))
                elif argument.default is not Unset:
                    values[name] = _as_values(argument.default)
                elif argument.positional and not argument.last and argument.arity.minimum:
                    self.trigger(NotEnoughValuesError(
                        "positional %r of '%s' takes at least %d %s, got none" % (
                            name, binding.command.name, argument.arity.minimum, _plural(argument.arity.minimum)
                        ),
                        code=FaultCode.NOT_ENOUGH_VALUES,
                        input=name,
                        argument=argument,
                        hint="add %s to the command line" % name.upper(),
                        docs=getdoc(FaultCode.NOT_ENOUGH_VALUES),
                    ))

        return Resolution(self._path, values, present)

    def run(self, tokens, /):
        """
        Resolve a token sequence, invoke the terminal action, and return the Resolution.
        """
        queue = deque(enumerate(tokens, 1))

        while queue:
            position, token = queue.popleft()

            if not self._ended:
                if subcommand := self._select(position, token, queue):
                    self._descend(subcommand, reason="selected at position %d" % position)
                    continue
                if fallback := self._current.fallback:
                    # the default subcommand gets the very same token
                    queue.appendleft((position, token))
                    self._descend(fallback, reason="default at position %d" % position)
                    continue

            self._bind(position, token, queue)

        resolution = self._finalize()
        logger.debug("resolved %r with %r", self._route, dict(resolution.values))

        if action := resolution.command.action:
            action()
        return resolution


def resolve(command, prompt=Unset, /, *, shell=False, fancy=False, colorful=False):
    """
    Resolve a prompt against a command tree and run the matched command's action.

    Parameters
    - command: the root Command (validated once; ConfigurationError on a bad tree).
    - prompt:
      • Unset: read sys.argv[1:].
      • str: split with shlex.split.
      • Iterable[str]: use items as arguments.
    - shell: render user-input faults with rich and exit(1) instead of raising.
    - fancy / colorful: panel chrome and colors for shell rendering.

    Returns
    - Resolution: terminal command, path and bound values.
    """
    if not isinstance(command, Command):
        raise TypeError("resolve() first argument must be a command")
    for name, option in (("shell", shell), ("fancy", fancy), ("colorful", colorful)):
        if not isinstance(option, bool):
            raise TypeError(f"resolve() {name!r} must be a boolean")

    validate(command)
    return Resolver(command, shell=shell, fancy=fancy, colorful=colorful).run(tokenize(split(prompt)))


__all__ = (
    "Resolution",
    "resolve",
)
