"""
Flagset recursive-descent parser.

parse(Command, tokens) walks the tokens once, left to right, against the schema
of the command class. Each command level owns its own values; a subcommand name
hands the remaining tokens to the nested level and stores its result in the
parent's `command` field.

Token classification (first match wins)
1. ""              → EmptyArgumentError
2. "--help" / "-h" → print this level's help to stdout, raise PrintedHelp
3. "--"            → every remaining token is positional, then end of stream
4. "--name"        → long flag; valued flags consume the next token verbatim
5. "-"             → UnrecognizedArgumentError
6. "-abc"          → switch cluster; only the last switch may take a value
7. subcommand name → recurse with the command path extended ("git add")
8. anything else   → next positional, or the trailing handler once they run out

End of stream
- flags: default, else False (boolean) / None (optional), else MissingFlagError
- positionals: default, else None (optional), else MissingArgumentError
- subcommands: MissingCommandError when the command declares some and none matched

Every fault is printed once ("Error: <message>" on stderr) at the point of
detection and propagates unchanged through the enclosing levels.
"""
import shlex
import sys
from collections import deque

from rich.console import Console
from rich.text import Text

from . import faults
from .colors import DEFAULT_COLORS
from .commands import Command
from .faults import *
from .help import generate, render
from .logger import logger
from .utils import Unset, UnsetType, coalesce

terminal = Console()


class Diagnostics:
    """
    Caller-owned record of the command level being parsed.

    After parse() returns or fails, `command` is the path of the deepest level
    reached ("git add") and `help` is its help: the custom help text of the
    command when it declares one, otherwise the generated Help. `usage` is always
    the generated usage of that level.
    """

    def __init__(self):
        self.command = None
        self.help = None
        self.usage = None

    def print_help(self, console=Unset, colors=DEFAULT_COLORS):
        if self.help is None:
            raise RuntimeError("no command was parsed")
        text = Text(self.help) if isinstance(self.help, str) else self.help.render(colors)
        coalesce(console, terminal).print(text, soft_wrap=True, highlight=False, end="")

    def print_usage(self, console=Unset, colors=DEFAULT_COLORS):
        if self.usage is None:
            raise RuntimeError("no command was parsed")
        coalesce(console, terminal).print(self.usage.render(colors), soft_wrap=True, highlight=False, end="")

    def __repr__(self):
        return f"Diagnostics(command={self.command!r})"


class Trailing(list):
    """
    Trailing-token collector: pass an instance as `trailing=` to keep the tokens
    left over once every positional is filled.

    With a capacity, one token too many raises TrailingOverflowError.
    """

    def __init__(self, capacity=None, /):
        if capacity is not None and (not isinstance(capacity, int) or capacity < 0):
            raise TypeError("Trailing() capacity must be a non-negative integer")
        super().__init__()
        self.capacity = capacity

    def __call__(self, token, /):
        if self.capacity is not None and len(self) >= self.capacity:
            raise TrailingOverflowError(
                "too many trailing arguments (max = %d)" % self.capacity, token=token, capacity=self.capacity
            )
        self.append(token)


def _build(cls, values, /):
    """Instantiate a result class without running its constructor."""
    instance = object.__new__(cls)
    for field, value in values.items():
        object.__setattr__(instance, field, value)
    return instance


class Parser:
    """
    Single-use parse state: the pending tokens plus the output settings.

    One Parser serves one parse() call; recursion into subcommands shares the
    token deque, while values stay local to each level.
    """

    def __init__(self, tokens, /, *, colors=DEFAULT_COLORS, diagnostics=None, trailing=None, width=80, stdout=Unset, stderr=Unset):
        if trailing is not None and not callable(trailing):
            raise TypeError("parser 'trailing' must be callable")
        self._tokens = deque(tokens)
        self._colors = colors
        self._diagnostics = diagnostics
        self._trailing = trailing
        self._width = width
        self._stdout = coalesce(stdout, terminal)
        self._stderr = coalesce(stderr, faults.stderr)

    def trigger(self, fault, command, /, **options):
        """Report a fault for the given command path (prints, then raises)."""
        trigger(fault, console=self._stderr, colors=self._colors, command=command, **options)

    def parse(self, schema, command, /):
        """Parse the pending tokens as `command`, a level described by `schema`."""
        logger.debug("parsing %r", command)
        if self._diagnostics is not None:
            help = generate(schema, command, width=self._width)
            self._diagnostics.command = command
            self._diagnostics.help = schema.help if schema.help is not None else help
            self._diagnostics.usage = help.usage

        flags = {}
        positionals = {}
        selected = Unset

        while self._tokens:
            token = self._tokens.popleft()

            if not token:
                self.trigger(EmptyArgumentError("empty argument", token=token), command)

            if token in ("--help", "-h"):
                self._stdout.print(
                    render(schema, command, colors=self._colors, width=self._width),
                    soft_wrap=True,
                    highlight=False,
                    end="",
                )
                raise PrintedHelp(command)

            if token == "--":
                while self._tokens:
                    self._positional(schema, command, positionals, self._tokens.popleft())
                break

            if token.startswith("--"):
                if (flag := schema.flag(token)) is None:
                    self.trigger(UnrecognizedFlagError("unrecognized flag: %s" % token, token=token), command)
                flags[flag.field] = self._value(flag, token, command)
                continue

            if token == "-":
                self.trigger(UnrecognizedArgumentError("unrecognized argument: '-'", token=token), command)

            if token.startswith("-"):
                cluster = token[1:]
                for position, char in enumerate(cluster, 1):
                    if (flag := schema.switch(char)) is None:
                        self.trigger(UnrecognizedSwitchError("unrecognized switch: %s" % char, token=token, switch=char), command)
                    if not flag.boolean and position < len(cluster):
                        self.trigger(MissingValueError("missing value after switch: %s" % char, token=token, switch=char), command)
                    flags[flag.field] = self._value(flag, "-" + char, command)
                continue

            if (subcommand := schema.subcommand(token)) is not None:
                logger.debug("dispatching %r to subcommand %r", command, subcommand.name)
                selected = self.parse(subcommand.schema, f"{command} {subcommand.name}")
                continue

            self._positional(schema, command, positionals, token)

        return self._resolve(schema, command, flags, positionals, selected)

    def _value(self, flag, spelled, command, /):
        """Value of a flag that was just passed; valued flags take the next token."""
        if flag.boolean:
            return True
        if not self._tokens:
            self.trigger(MissingValueError("missing value for '%s'" % spelled, flag=flag.name), command)
        return self._coerce(flag.kind, self._tokens.popleft(), command, flag.name)

    def _positional(self, schema, command, positionals, token, /):
        if len(positionals) < len(schema.positionals):
            positional = schema.positionals[len(positionals)]
            positionals[positional.field] = self._coerce(positional.kind, token, command, positional.name)
        elif self._trailing is not None:
            logger.debug("trailing token %r after %r", token, command)
            try:
                self._trailing(token)
            except CommandException as fault:
                self.trigger(fault, command)
        else:
            self.trigger(UnexpectedPositionalError("unexpected argument: %s" % token, token=token), command)

    def _coerce(self, kind, token, command, target, /):
        try:
            return kind.coerce(token)
        except CoercionError as fault:
            self.trigger(fault, command, target=target)

    def _resolve(self, schema, command, flags, positionals, selected, /):
        """End-of-stream resolution: flags, then positionals, then the subcommand."""
        for flag in schema.flags:
            if flag.field in flags:
                continue
            if (value := flag.initial()) is Unset:
                self.trigger(MissingFlagError("missing required flag: %s" % flag.name, flag=flag.name), command)
            flags[flag.field] = value

        for positional in schema.positionals:
            if positional.field in positionals:
                continue
            if (value := positional.initial()) is Unset:
                self.trigger(MissingArgumentError("missing required argument: %s" % positional.name, target=positional.name), command)
            positionals[positional.field] = value

        if schema.subcommands and selected is Unset:
            self.trigger(MissingCommandError("missing subcommand"), command)

        values = dict(flags)
        if schema.group is not None:
            values["positional"] = _build(schema.group, positionals)
        if schema.subcommands:
            values["command"] = selected
        return _build(schema.target, values)


def _tokens(tokens, skip_first, /):
    match tokens:
        case UnsetType():
            tokens, skip_first = sys.argv, coalesce(skip_first, True)
        case str():
            tokens = shlex.split(tokens)
    tokens = list(tokens)
    for token in tokens:
        if not isinstance(token, str):
            raise TypeError(f"parse() tokens must be strings, found {token!r}")
    return tokens[1:] if coalesce(skip_first, False) else tokens


def parse(command, tokens=Unset, /, *, name=Unset, skip_first=Unset, colors=DEFAULT_COLORS, diagnostics=None, trailing=None, width=80, stdout=Unset, stderr=Unset):
    """
    Parse tokens into an instance of a Command subclass.

    Parameters
    - command: the root Command subclass.
    - tokens: Unset (read sys.argv, skipping the executable by default), a string
      (split like a shell would, with shlex) or an iterable of strings.
    - name: root command name shown in usage and help (default: the schema name).
    - skip_first: drop the first token (default: True for sys.argv, False otherwise).
    - colors: ColorScheme of help and error output; ColorScheme() disables styling.
    - diagnostics: Diagnostics updated with the deepest command level reached.
    - trailing: callable receiving tokens left over once every positional is filled
      (e.g. a Trailing instance or list.append); by default they are errors.
    - width: line budget of the usage synopsis.
    - stdout / stderr: rich consoles receiving help and error reports.

    Raises
    - CommandException subclasses (already printed to stderr) on invalid input.
    - PrintedHelp after help was printed to stdout.
    """
    if not isinstance(command, type) or not issubclass(command, Command) or command.__schema__ is None:
        raise TypeError("parse() first argument must be a Command subclass")
    schema = command.__schema__
    parser = Parser(
        _tokens(tokens, skip_first),
        colors=colors,
        diagnostics=diagnostics,
        trailing=trailing,
        width=width,
        stdout=stdout,
        stderr=stderr,
    )
    return parser.parse(schema, coalesce(name, schema.name))


def parse_or_exit(command, tokens=Unset, /, **options):
    """parse(), exiting with status 0 after help and status 1 on any parse error."""
    try:
        return parse(command, tokens, **options)
    except PrintedHelp as signal:
        sys.exit(signal.exit_code)
    except CommandException as fault:
        sys.exit(fault.exit_code)


__all__ = (
    "Diagnostics",
    "Trailing",
    "Parser",
    "parse",
    "parse_or_exit",
)
