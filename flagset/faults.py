"""
Flagset faults (parse errors, control signals and authoring errors).

Scope
- FaultCode: canonical, stable numeric identifiers for every user-facing parse error.
  Codes are grouped by domain to keep logs and searches predictable.
- CommandException: base type of parse errors; carries a message plus read-only
  context options and knows how to render itself ("Error: <message>").
- PrintedHelp: control signal raised after help was printed. It is not an error.
- SchemaError: authoring defect in a command declaration, raised at class creation.
- trigger(): central entry point to surface a fault (print it, then raise it).
- fatal(): print an error in the same format and exit with status 1.

Options carried by faults
- console: rich Console receiving the report (defaults to a stderr console).
- colors: ColorScheme used for the "Error: " label and the message.
- command: command path of the level that failed ("git add").
- token / flag / switch / kind / choices: context of the failure, when relevant.
"""
import copy
import sys
from enum import IntEnum
from types import MappingProxyType

from rich.console import Console
from rich.text import Text

from .colors import DEFAULT_COLORS
from .logger import logger
from .utils import Unset, coalesce

stderr = Console(stderr=True)


class FaultCode(IntEnum):
    """
    canonical fault codes used across the parser (stable identifiers).

    grouping (by high-level domain)
    - tokens (211xx)
      • EMPTY_ARGUMENT, UNRECOGNIZED_FLAG, UNRECOGNIZED_SWITCH,
        UNRECOGNIZED_ARGUMENT, MISSING_VALUE
    - values (212xx)
      • UNRECOGNIZED_OPTION, INTEGER_OVERFLOW, INVALID_INTEGER, INVALID_FLOAT
    - structure (213xx)
      • MISSING_FLAG, MISSING_ARGUMENT, MISSING_COMMAND, UNEXPECTED_ARGUMENT,
        TRAILING_OVERFLOW
    """
    # --- token errors (211xx) ---
    EMPTY_ARGUMENT        = 21101
    UNRECOGNIZED_FLAG     = 21102
    UNRECOGNIZED_SWITCH   = 21103
    UNRECOGNIZED_ARGUMENT = 21104
    MISSING_VALUE         = 21105

    # --- value errors (212xx) ---
    UNRECOGNIZED_OPTION   = 21201
    INTEGER_OVERFLOW      = 21202
    INVALID_INTEGER       = 21203
    INVALID_FLOAT         = 21204

    # --- structural errors (213xx) ---
    MISSING_FLAG          = 21301
    MISSING_ARGUMENT      = 21302
    MISSING_COMMAND       = 21303
    UNEXPECTED_ARGUMENT   = 21304
    TRAILING_OVERFLOW     = 21305


class CommandException(Exception):
    """
    Base class of every parse error.

    The message is the user-facing sentence ("missing required flag: --name");
    options hold the context. Instances are immutable: copy.replace() returns a
    new fault with merged options, which is how trigger() attaches the console
    and colors of the running parse.
    """
    code = Unset
    exit_code = 1

    def __init__(self, message, /, **options):
        assert isinstance(message, str)
        super().__init__(message)
        self.message = message
        self.options = MappingProxyType(options)

    def __str__(self):
        return self.message

    def __rich__(self):
        colors = self.options.get("colors", DEFAULT_COLORS)
        return Text.assemble(
            colors.text("Error: ", "error_label"),
            colors.text(self.message, "error_message"),
        )

    def __trigger__(self):
        logger.debug("fault %s (%s) at %r", int(coalesce(self.code, 0)), type(self).__name__, self.options.get("command"))
        self.options.get("console", stderr).print(self, highlight=False, soft_wrap=True)
        raise self from None

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class EmptyArgumentError(CommandException):
    code = FaultCode.EMPTY_ARGUMENT


class UnrecognizedFlagError(CommandException):
    code = FaultCode.UNRECOGNIZED_FLAG


class UnrecognizedSwitchError(CommandException):
    code = FaultCode.UNRECOGNIZED_SWITCH


class UnrecognizedArgumentError(CommandException):
    code = FaultCode.UNRECOGNIZED_ARGUMENT


class MissingValueError(CommandException):
    code = FaultCode.MISSING_VALUE


class CoercionError(CommandException):
    """A token could not be converted to the kind of its flag or positional."""


class UnrecognizedOptionError(CoercionError):
    """No enum variant matches the token; the accepted names are in options["choices"]."""
    code = FaultCode.UNRECOGNIZED_OPTION


class IntegerOverflowError(CoercionError):
    code = FaultCode.INTEGER_OVERFLOW


class InvalidIntegerError(CoercionError):
    code = FaultCode.INVALID_INTEGER


class InvalidFloatError(CoercionError):
    code = FaultCode.INVALID_FLOAT


class MissingFlagError(CommandException):
    code = FaultCode.MISSING_FLAG


class MissingArgumentError(CommandException):
    code = FaultCode.MISSING_ARGUMENT


class MissingCommandError(CommandException):
    code = FaultCode.MISSING_COMMAND


class UnexpectedPositionalError(CommandException):
    code = FaultCode.UNEXPECTED_ARGUMENT


class TrailingOverflowError(CommandException):
    code = FaultCode.TRAILING_OVERFLOW


class PrintedHelp(Exception):
    """
    Control signal: help for `command` was printed and parsing stopped.

    Not a CommandException, so `except CommandException` never swallows it.
    """
    exit_code = 0

    def __init__(self, command, /):
        super().__init__(command)
        self.command = command


class SchemaError(TypeError):
    """A command declaration is invalid (raised when the class statement runs)."""


def trigger(fault, /, **options):
    """
    surface a fault with the given runtime options.

    contract
    - fault must provide __trigger__ and __replace__ methods (see CommandException).
    - options are merged into the fault via copy.replace() before triggering.
    - the fault is printed to options["console"] and raised.
    """
    if (
        not hasattr(fault, "__trigger__") or
        not callable(fault.__trigger__) or
        not hasattr(fault, "__replace__") or
        not callable(fault.__replace__)
    ):
        raise TypeError("trigger() argument must have a __trigger__ and __replace__ methods")
    copy.replace(fault, **options).__trigger__()


def fatal(message, /, *args, console=Unset, colors=DEFAULT_COLORS):
    """Print "Error: <message % args>" and exit the process with status 1."""
    fault = CommandException(message % args if args else message, colors=colors)
    coalesce(console, stderr).print(fault, highlight=False, soft_wrap=True)
    sys.exit(fault.exit_code)


__all__ = (
    "FaultCode",
    "CommandException",
    "EmptyArgumentError",
    "UnrecognizedFlagError",
    "UnrecognizedSwitchError",
    "UnrecognizedArgumentError",
    "MissingValueError",
    "CoercionError",
    "UnrecognizedOptionError",
    "IntegerOverflowError",
    "InvalidIntegerError",
    "InvalidFloatError",
    "MissingFlagError",
    "MissingArgumentError",
    "MissingCommandError",
    "UnexpectedPositionalError",
    "TrailingOverflowError",
    "PrintedHelp",
    "SchemaError",
    "trigger",
    "fatal",
)
