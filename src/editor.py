"""Raw-mode line editor with tab completion.

The editor is a small state machine: ``LineEditor.handle_key`` applies one
keystroke to an ``EditorState`` and repaints the line. Terminal handling
lives in ``Terminal`` so the state machine can be driven from tests with a
plain iterable of keys.
"""
from __future__ import annotations

import codecs
import os
import sys
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Iterator, Optional

from completion import Completer
from errors import InputAborted

CTRL_C = "\x03"
CTRL_D = "\x04"
BACKSPACE_KEYS = ("\x7f", "\x08")
ENTER_KEYS = ("\r", "\n")
TAB = "\t"
ESC = "\x1b"
BELL = "\a"
CLEAR_LINE = "\r\x1b[K"
NEWLINE = "\r\n"


@dataclass
class EditorState:
    buffer: str = ""
    last_prefix: Optional[str] = None
    tab_presses: int = 0
    # Partially read escape sequence (arrow keys etc.), discarded when complete
    pending_escape: str = ""

    def clear_tabs(self) -> None:
        self.last_prefix = None
        self.tab_presses = 0

    def reset(self) -> None:
        self.buffer = ""
        self.pending_escape = ""
        self.clear_tabs()


class Terminal:
    """Keystroke source bound to a file descriptor (stdin by default)."""

    def __init__(self, stdin: Any = None) -> None:
        stream = stdin if stdin is not None else sys.stdin
        self.fd: int = stream if isinstance(stream, int) else stream.fileno()

    def is_tty(self) -> bool:
        return os.isatty(self.fd)

    @contextmanager
    def raw_mode(self) -> Iterator[None]:
        """Deliver keys unbuffered and unechoed; restore the old mode on exit.

        Piped input has no terminal mode, so this is a no-op there.
        """
        if not self.is_tty():
            yield
            return
        import termios
        import tty

        saved = termios.tcgetattr(self.fd)
        try:
            tty.setraw(self.fd, termios.TCSANOW)
            yield
        finally:
            termios.tcsetattr(self.fd, termios.TCSADRAIN, saved)

    def keys(self) -> Iterator[str]:
        decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        while True:
            data = os.read(self.fd, 1)
            if not data:
                yield from decoder.decode(b"", final=True)
                return
            yield from decoder.decode(data)


class LineEditor:
    def __init__(self, prompt: str = "$ ", completer: Optional[Completer] = None, out: Any = None) -> None:
        self.prompt = prompt
        self.completer = completer if completer is not None else Completer()
        self._out = out
        self.state = EditorState()

    @property
    def out(self) -> Any:
        return self._out if self._out is not None else sys.stdout

    def _emit(self, text: str) -> None:
        self.out.write(text)
        self.out.flush()

    def render(self) -> None:
        self._emit(CLEAR_LINE + self.prompt + self.state.buffer)

    # ---- Key handling ----

    def handle_key(self, key: str) -> Optional[str]:
        """Apply one keystroke. Returns the finished line on Enter."""
        st = self.state
        if st.pending_escape:
            self._consume_escape(key)
            return None

        if key == CTRL_C:
            self._emit(NEWLINE)
            st.reset()
            raise InputAborted()
        if key in ENTER_KEYS:
            line = st.buffer
            self._emit(NEWLINE)
            st.reset()
            return line
        if key == CTRL_D:
            if not st.buffer:
                self._emit(NEWLINE)
                raise EOFError()
            return None
        if key in BACKSPACE_KEYS:
            st.buffer = st.buffer[:-1]
            st.clear_tabs()
            self.render()
        elif key == TAB:
            self._complete()
        elif key == ESC:
            st.pending_escape = key
        elif key.isprintable():
            st.buffer += key
            st.clear_tabs()
            self.render()
        return None

    def _consume_escape(self, key: str) -> None:
        # ESC [ params final, ESC O x, or ESC x
        seq = self.state.pending_escape + key
        if len(seq) == 2:
            self.state.pending_escape = seq if key in "[O" else ""
        elif seq[1] == "O" or "@" <= key <= "~":
            self.state.pending_escape = ""
        else:
            self.state.pending_escape = seq

    def _complete(self) -> None:
        st = self.state
        prefix = st.buffer
        if ' ' in prefix:
            st.clear_tabs()
            return
        if prefix != st.last_prefix:
            st.tab_presses = 0
            st.last_prefix = prefix
        st.tab_presses += 1

        result = self.completer.complete(prefix, st.tab_presses)
        if result.suffix is not None:
            st.buffer += result.suffix + " "
            st.clear_tabs()
            self.render()
        elif result.matches and st.tab_presses > 1:
            self._emit(NEWLINE + "  ".join(result.matches) + NEWLINE)
            self.render()
        else:
            self._emit(BELL)

    # ---- Line reading ----

    def read_line(self, terminal: Terminal) -> str:
        """Read one line from ``terminal``.

        Raises EOFError when input ends on an empty line and InputAborted on
        Ctrl-C. The terminal mode is restored on every path out.
        """
        self.state.reset()
        with terminal.raw_mode():
            self._emit("\r" + self.prompt)
            for key in terminal.keys():
                line = self.handle_key(key)
                if line is not None:
                    return line
        if self.state.buffer:
            line = self.state.buffer
            self._emit(NEWLINE)
            self.state.reset()
            return line
        raise EOFError()
