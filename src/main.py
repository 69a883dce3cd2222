#!/usr/bin/env python3

# Entry of rawsh

from __future__ import annotations

import argparse
import os
import sys
from typing import Optional

from completion import Completer
from editor import LineEditor, Terminal
from errors import InputAborted, ShellExit
from ops import ShellSession, execute_line  # local module in the same folder

DEFAULT_PROMPT = "$ "
EXIT_INTERRUPTED = 130


def default_prompt() -> str:
    return os.environ.get("RAWSH_PROMPT") or DEFAULT_PROMPT


def repl(prompt: Optional[str] = None, terminal: Optional[Terminal] = None,
         editor: Optional[LineEditor] = None) -> int:
    session = ShellSession(prompt=prompt if prompt is not None else default_prompt())
    terminal = terminal or Terminal()
    editor = editor or LineEditor(session.prompt, Completer())

    while True:
        try:
            line = editor.read_line(terminal)
        except EOFError:
            # Ctrl-D on empty line or end of piped input
            return session.last_status
        except InputAborted:
            # Terminal mode is already restored when this reaches us
            return 0
        except OSError as e:
            session.report(f"cannot read input: {e}")
            return 1

        try:
            execute_line(line, session)
        except ShellExit as e:
            return e.code
        except KeyboardInterrupt:
            # SIGINT reached us while a child was running
            session.stdout.write("\n")
            session.stdout.flush()
            return EXIT_INTERRUPTED


def run_command(line: str) -> int:
    session = ShellSession(prompt=default_prompt())
    try:
        return execute_line(line, session)
    except ShellExit as e:
        return e.code


def parse_args(args=None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="rawsh - a small interactive shell with tab completion",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  rawsh                        # Interactive prompt
  rawsh --prompt 'rawsh> '     # Custom prompt
  rawsh -c 'echo hi > out.txt' # Run one command line and exit

Environment:
  RAWSH_PROMPT  default prompt text
  RAWSH_DEBUG   print parsed commands to stderr
"""
    )

    parser.add_argument(
        "--prompt", "-p",
        metavar="TEXT",
        default=None,
        help="Prompt to display (default: $RAWSH_PROMPT or '$ ')"
    )
    parser.add_argument(
        "--command", "-c",
        metavar="LINE",
        help="Execute a single command line and exit with its status"
    )

    return parser.parse_args(args)


def main() -> None:
    args = parse_args()
    if args.command is not None:
        sys.exit(run_command(args.command))
    sys.exit(repl(prompt=args.prompt))


if __name__ == "__main__":
    main()
