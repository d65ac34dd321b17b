"""
cmdtree faults (parse and registration errors) and rendering.

Scope
- FaultCode: one number per fault class, grouped in blocks of ten.
- CommandException: message plus frozen context options. Printed through rich
  when the caller does not want it raised.
- trigger(): raise or print, per the throw_on_error flag.

Integration
- Registration code raises faults directly (programming errors belong to the caller).
- parse()/execute() route faults raised by the state machine through trigger()
  so the caller decides between “raise” and “print and return”.
"""
from collections import defaultdict
from enum import IntEnum
from types import MappingProxyType

from rich.console import Console, Group
from rich.text import Text

from .utils import Unset

console = Console(stderr=True)

# Overridable per key through __main__.__styles__.
PALETTE = {
    "prog-name": "bold white",
    "code": "bold cyan",
    "error-title": "bold red",
    "error-message": "default",
    "hint-arrow": "dim green",
    "hint": "italic green",
}


class FaultCode(IntEnum):
    """
    Stable numeric identifiers, one per fault class.

    Blocks of ten per concern:
    - tokens (2110x)
      • UNKNOWN_OPTION, MISSING_OPTION_ARGUMENT, UNKNOWN_SUBCOMMAND
    - validation (2111x)
      • REPEATED_OPTION, INVALID_OPTION_VALUE, MISSING_REQUIRED_OPTION
    - actions (2112x)
      • CONFLICTING_SWITCHES, SWITCH_SUBCOMMAND_CONFLICT
    - registration (2113x)
      • DUPLICATE_OPTION, DUPLICATE_SUBCOMMAND, STATE_ERROR

    Gaps inside each block are reserved.
    """
    # --- token errors (2110x) ---
    UNKNOWN_OPTION              = 21101
    MISSING_OPTION_ARGUMENT     = 21102
    UNKNOWN_SUBCOMMAND          = 21103

    # --- validation errors (2111x) ---
    REPEATED_OPTION             = 21111
    INVALID_OPTION_VALUE        = 21112
    MISSING_REQUIRED_OPTION     = 21113

    # --- action errors (2112x) ---
    CONFLICTING_SWITCHES        = 21121
    SWITCH_SUBCOMMAND_CONFLICT  = 21122

    # --- registration errors (2113x) ---
    DUPLICATE_OPTION            = 21131
    DUPLICATE_SUBCOMMAND        = 21132
    STATE_ERROR                 = 21133

    def normalize(self):
        """Display label: __main__.__codes__[self] when the host defines one, else the number."""
        labels = getattr(__import__("__main__"), "__codes__", {})
        return str(labels.get(self, self.value))

    @property
    def title(self):
        return self.name.replace("_", " ").lower()


class CommandException(Exception):
    """
    Base class of every fault raised while building, parsing or running commands.

    The message is the user-facing text (also what str() returns). Options are
    free-form context (the offending option, token, command, ...) frozen into a
    read-only mapping.
    """
    code = Unset

    def __init__(self, message, /, **options):
        assert isinstance(message, str)
        super().__init__(message)
        self.message = message
        self.options = MappingProxyType(options)

    def __str__(self):
        return self.message

    def __rich__(self):
        main = __import__("__main__")
        styles = defaultdict(str, PALETTE) | getattr(main, "__styles__", {})

        command = self.options.get("command")
        prog = command.root.name if command is not None else getattr(main, "__prog__", "cmdtree")
        code, title = (self.code.normalize(), self.code.title.title()) if self.code else ("?", "error")

        lines = [
            Text.assemble(
                "[ ", (prog, styles["prog-name"]),
                " — ", (code, styles["code"]),
                " | ", (title, styles["error-title"]), " ]",
            ),
            Text(self.message, styles["error-message"]),
        ]
        if hint := self.options.get("hint"):
            lines.append(Text.assemble((" → ", styles["hint-arrow"]), (hint, styles["hint"])))
        return Group(*lines)

    def __trigger__(self, throw_on_error=True):
        if throw_on_error:
            raise self
        console.print(self)

    def __replace__(self, /, **overrides):
        replica = type(self)(self.message, **{**self.options, **overrides})
        replica.__traceback__ = self.__traceback__
        return replica


class MissingRequiredOptionError(CommandException):
    code = FaultCode.MISSING_REQUIRED_OPTION


class RepeatedOptionError(CommandException):
    code = FaultCode.REPEATED_OPTION


class InvalidOptionValueError(CommandException):
    code = FaultCode.INVALID_OPTION_VALUE


class MissingOptionArgumentError(CommandException):
    code = FaultCode.MISSING_OPTION_ARGUMENT


class UnknownOptionError(CommandException):
    code = FaultCode.UNKNOWN_OPTION


class UnknownSubcommandError(CommandException):
    code = FaultCode.UNKNOWN_SUBCOMMAND


class DuplicateOptionError(CommandException):
    code = FaultCode.DUPLICATE_OPTION


class DuplicateSubcommandError(CommandException):
    code = FaultCode.DUPLICATE_SUBCOMMAND


class ConflictingSwitchesError(CommandException):
    code = FaultCode.CONFLICTING_SWITCHES


class SwitchSubcommandConflictError(CommandException):
    code = FaultCode.SWITCH_SUBCOMMAND_CONFLICT


class StateError(CommandException):
    code = FaultCode.STATE_ERROR


def trigger(fault, /, *, throw_on_error=True, **options):
    """
    Raise or print a fault.

    Extra options are folded into a copy of the fault (via __replace__) first.
    With throw_on_error the copy is raised; without it, it is printed to stderr
    and None is returned.
    """
    if not all(callable(getattr(fault, hook, None)) for hook in ("__trigger__", "__replace__")):
        raise TypeError(f"trigger() cannot surface {type(fault).__name__!r} objects")
    if options:
        fault = fault.__replace__(**options)
    fault.__trigger__(throw_on_error)


__all__ = (
    "CommandException",
    "MissingRequiredOptionError",
    "RepeatedOptionError",
    "InvalidOptionValueError",
    "MissingOptionArgumentError",
    "UnknownOptionError",
    "UnknownSubcommandError",
    "DuplicateOptionError",
    "DuplicateSubcommandError",
    "ConflictingSwitchesError",
    "SwitchSubcommandConflictError",
    "StateError",
    "FaultCode",
    "trigger",
)
