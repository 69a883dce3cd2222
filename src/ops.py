from __future__ import annotations

import os
import sys
from contextlib import ExitStack
from typing import Any, Optional, Tuple

from command import Handler, Streams, find_executable, get_builtin, launch
from errors import (
    BuiltinError,
    CommandNotFound,
    LaunchError,
    RedirectionOpenError,
    RedirectionSyntaxError,
)
from tokens import ParsedCommand, RedirectionPlan, format_plan, parse_line

SHELL_NAME = "rawsh"
DEBUG = bool(os.environ.get("RAWSH_DEBUG"))

EXIT_SYNTAX = 2
EXIT_CANNOT_EXECUTE = 126
EXIT_NOT_FOUND = 127


def debug(msg: str) -> None:
    if DEBUG:
        sys.stderr.write(f"[DEBUG] {msg}\n")
        sys.stderr.flush()


class ShellSession:
    """Holds session-wide shell context: the shell's own streams and status.

    Streams default to whatever sys.stdout/sys.stderr are at the time of use.
    """

    def __init__(self, prompt: str = "$ ", stdout: Any = None, stderr: Any = None) -> None:
        self.prompt: str = prompt
        self._stdout = stdout
        self._stderr = stderr
        self.last_status: int = 0

    @property
    def stdout(self) -> Any:
        return self._stdout if self._stdout is not None else sys.stdout

    @property
    def stderr(self) -> Any:
        return self._stderr if self._stderr is not None else sys.stderr

    def report(self, message: str) -> None:
        """Write a diagnostic to the shell's own stderr, never a redirect target."""
        self.stderr.write(f"{SHELL_NAME}: {message}\n")
        self.stderr.flush()


# --------- Redirection targets ---------

def _open_target(target: str, append: bool, binary: bool) -> Any:
    mode = ('a' if append else 'w') + ('b' if binary else '')
    try:
        if binary:
            return open(target, mode)
        return open(target, mode, encoding='utf-8')
    except OSError as e:
        raise RedirectionOpenError(target, e.strerror or str(e)) from e


def _open_plan(plan: RedirectionPlan, stack: ExitStack, *, binary: bool) -> Tuple[Optional[Any], Optional[Any]]:
    # Files registered on the stack are closed whichever way the caller leaves
    out = err = None
    if plan.stdout_target is not None:
        out = stack.enter_context(_open_target(plan.stdout_target, plan.stdout_append, binary))
    if plan.stderr_target is not None:
        err = stack.enter_context(_open_target(plan.stderr_target, plan.stderr_append, binary))
    return out, err


# --------- Execution ---------

def _run_builtin(handler: Handler, cmd: ParsedCommand, session: ShellSession) -> int:
    try:
        with ExitStack() as stack:
            out, err = _open_plan(cmd.plan, stack, binary=False)
            streams = Streams(
                stdout=out if out is not None else session.stdout,
                stderr=err if err is not None else session.stderr,
            )
            try:
                return handler(cmd.argv, streams)
            except BuiltinError as e:
                streams.stderr.write(f"{e}\n")
                streams.stderr.flush()
                return 1
    except OSError as e:
        # Write or close failures on a target, or a vanished cwd
        session.report(f"{cmd.argv[0]}: {e.strerror or e}")
        return 1


def _resolve(name: str) -> str:
    path = find_executable(name)
    if path is None:
        raise CommandNotFound(name)
    return path


def _report_not_found(e: CommandNotFound, plan: RedirectionPlan, session: ShellSession) -> None:
    message = f"{e}\n"
    if plan.stderr_target is None:
        session.stderr.write(message)
        session.stderr.flush()
        return
    with _open_target(plan.stderr_target, plan.stderr_append, binary=False) as f:
        f.write(message)


def _run_external(cmd: ParsedCommand, session: ShellSession) -> int:
    try:
        path = _resolve(cmd.argv[0])
    except CommandNotFound as e:
        _report_not_found(e, cmd.plan, session)
        return EXIT_NOT_FOUND

    # The child writes straight to the inherited descriptors
    session.stdout.flush()
    session.stderr.flush()
    with ExitStack() as stack:
        out, err = _open_plan(cmd.plan, stack, binary=True)
        try:
            return launch(path, cmd.argv, stdout=out, stderr=err)
        except LaunchError as e:
            if err is None:
                session.report(str(e))
            else:
                err.write(f"{SHELL_NAME}: {e}\n".encode('utf-8'))
            return EXIT_CANNOT_EXECUTE


def execute_line(line: str, session: ShellSession) -> int:
    """Run one command line and return its exit status.

    Every per-command failure is reported here; only ShellExit escapes.
    """
    if not line.strip():
        return 0
    try:
        cmd = parse_line(line)
    except RedirectionSyntaxError as e:
        session.report(f"syntax error: {e}")
        session.last_status = EXIT_SYNTAX
        return EXIT_SYNTAX
    if not cmd.argv:
        return 0
    debug(f"argv={cmd.argv!r} redirect={format_plan(cmd.plan)}")

    handler = get_builtin(cmd.argv[0])
    try:
        if handler is not None:
            rc = _run_builtin(handler, cmd, session)
        else:
            rc = _run_external(cmd, session)
    except RedirectionOpenError as e:
        session.report(str(e))
        rc = 1
    session.last_status = rc
    return rc
