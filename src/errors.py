"""Exception types raised inside rawsh.

Everything deriving from ShellError is reported and swallowed by the
dispatcher so that one bad command line never ends the session.
ShellExit and InputAborted are control flow: they unwind to the REPL.
"""
from __future__ import annotations


class ShellError(Exception):
    """Base class for per-command failures."""


class RedirectionSyntaxError(ShellError):
    """A redirection operator had no file name after it."""


class CommandNotFound(ShellError):
    def __init__(self, name: str) -> None:
        super().__init__(f"{name}: command not found")
        self.name = name


class RedirectionOpenError(ShellError):
    """A redirection target could not be created or opened."""

    def __init__(self, target: str, reason: str) -> None:
        super().__init__(f"{target}: {reason}")
        self.target = target
        self.reason = reason


class LaunchError(ShellError):
    """A resolved executable could not be started."""

    def __init__(self, name: str, reason: str) -> None:
        super().__init__(f"{name}: {reason}")
        self.name = name
        self.reason = reason


class BuiltinError(ShellError):
    """Raised by a built-in handler; the message is already prefixed."""


class ShellExit(Exception):
    def __init__(self, code: int = 0) -> None:
        super().__init__(code)
        self.code = code


class InputAborted(Exception):
    """Ctrl-C was pressed at the prompt."""
