"""
cmdtree engine: process-wide setup around a command's execution.

Command.execute() runs its dispatch callback through Engine.run() unless the
command was built with no_engine=True.

Responsibilities
- Configure the package logger once per process (see cmdtree.logs).
- Invoke the zero-argument callback exactly once and hand back its result.
- Apply the caller's throw_on_error policy to anything the callback lets escape,
  Ctrl-C included.
"""
import logging

from rich.text import Text

from .faults import CommandException, console, trigger
from .logs import LOGGER_NAME, get_logger, setup_logging

logger = get_logger(__name__)


def report(error, /):
    """Render an arbitrary exception on stderr; faults use their own rich layout."""
    if isinstance(error, CommandException):
        console.print(error)
    else:
        console.print(Text(f"{type(error).__name__}: {error}", style="bold red"))


class Engine:
    """
    Wrapper running a callback with logging configured and errors contained.

    Parameters
    - level: int | None. Log level handed to setup_logging() the first time an
      engine runs in a process that has no cmdtree handler yet.
    """

    def __init__(self, *, level=None):
        self._level = level

    def run(self, callback, /, *, throw_on_error=False):
        """
        Invoke callback() once.

        Returns
        - The callback's result, or None when an error was reported instead of raised.
        """
        if not callable(callback):
            raise TypeError("run() argument must be callable")
        if not logging.getLogger(LOGGER_NAME).handlers:
            setup_logging(self._level)

        logger.debug("running %s", getattr(callback, "__qualname__", callback))
        try:
            return callback()
        except CommandException as error:
            trigger(error, throw_on_error=throw_on_error)
        except KeyboardInterrupt:
            if throw_on_error:
                raise
            console.print(Text("interrupted", style="bold red"))
        except Exception as error:
            if throw_on_error:
                raise
            logger.debug("callback failed", exc_info=True)
            report(error)
        return None


__all__ = (
    "Engine",
    "report",
)
