"""Tokenization and redirection utilities for rawsh.

This module turns a raw input line into word tokens, honoring single
quotes, double quotes and backslash escapes, and then pulls the output
redirection operators out of the token list.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from errors import RedirectionSyntaxError

# Characters a backslash may escape inside double quotes
DQUOTE_ESCAPABLE = frozenset('$`"\\\n')

# operator -> (stream, append)
REDIRECT_OPERATORS = {
    ">": ("stdout", False),
    "1>": ("stdout", False),
    ">>": ("stdout", True),
    "1>>": ("stdout", True),
    "2>": ("stderr", False),
    "2>>": ("stderr", True),
}


@dataclass
class RedirectionPlan:
    """Where stdout/stderr go for one command. None means inherit."""
    stdout_target: Optional[str] = None
    stdout_append: bool = False
    stderr_target: Optional[str] = None
    stderr_append: bool = False

    def is_empty(self) -> bool:
        return self.stdout_target is None and self.stderr_target is None


@dataclass
class ParsedCommand:
    """A command's argv (argv[0] is the program) plus its redirections."""
    argv: list[str]
    plan: RedirectionPlan = field(default_factory=RedirectionPlan)


# --- Tokenization ---

def tokenize(line: str) -> list[str]:
    """Split a line into words.

    Never fails: an unterminated quote simply extends to the end of the line.
    """
    tokens: list[str] = []
    buf: list[str] = []
    in_single = False
    in_double = False
    escaped = False

    for ch in line:
        if escaped:
            if in_double and ch not in DQUOTE_ESCAPABLE:
                buf.append('\\')
            buf.append(ch)
            escaped = False
            continue

        if ch == '\\':
            if in_single:
                buf.append(ch)
            else:
                escaped = True
        elif ch == "'":
            if in_double:
                buf.append(ch)
            else:
                in_single = not in_single
        elif ch == '"':
            if in_single:
                buf.append(ch)
            else:
                in_double = not in_double
        elif ch == ' ' and not in_single and not in_double:
            if buf:
                tokens.append(''.join(buf))
                buf = []
        else:
            buf.append(ch)

    if buf:
        tokens.append(''.join(buf))
    return tokens


# --- Redirection ---

def extract_redirections(tokens: list[str]) -> ParsedCommand:
    """Remove redirection operators and their targets from ``tokens``.

    tokens[0] is the command name and is never read as an operator. When a
    stream is redirected twice, the last operator wins.
    """
    if not tokens:
        return ParsedCommand(argv=[])

    argv = [tokens[0]]
    plan = RedirectionPlan()
    i = 1
    while i < len(tokens):
        tok = tokens[i]
        if tok not in REDIRECT_OPERATORS:
            argv.append(tok)
            i += 1
            continue
        if i + 1 >= len(tokens):
            raise RedirectionSyntaxError("no file specified for redirection")
        stream, append = REDIRECT_OPERATORS[tok]
        if stream == "stdout":
            plan.stdout_target = tokens[i + 1]
            plan.stdout_append = append
        else:
            plan.stderr_target = tokens[i + 1]
            plan.stderr_append = append
        i += 2
    return ParsedCommand(argv=argv, plan=plan)


def parse_line(line: str) -> ParsedCommand:
    return extract_redirections(tokenize(line))


# --- Formatting (debug / test aid) ---

def format_plan(plan: RedirectionPlan) -> str:
    if plan.is_empty():
        return "<inherit>"
    parts: list[str] = []
    if plan.stdout_target is not None:
        parts.append(("1>> " if plan.stdout_append else "1> ") + plan.stdout_target)
    if plan.stderr_target is not None:
        parts.append(("2>> " if plan.stderr_append else "2> ") + plan.stderr_target)
    return ", ".join(parts)
