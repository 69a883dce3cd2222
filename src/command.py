# module for command execution

from __future__ import annotations

import os
import shutil
import subprocess
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

from errors import BuiltinError, LaunchError, ShellExit


@dataclass
class Streams:
    """Output streams handed to a built-in for one call."""
    stdout: Any
    stderr: Any


# ---- Search path ----

def search_path(path: Optional[str] = None) -> List[str]:
    """Directories of ``path`` (default: $PATH) in lookup order."""
    raw = os.environ.get("PATH", os.defpath) if path is None else path
    return [d for d in raw.split(os.pathsep) if d]


def find_executable(name: str, path: Optional[str] = None) -> Optional[str]:
    """Resolve a command name to an absolute executable path, or None."""
    if not name:
        return None
    env_path = os.environ.get("PATH", os.defpath) if path is None else path
    found = shutil.which(name, mode=os.F_OK | os.X_OK, path=env_path)
    return os.path.abspath(found) if found else None


def list_executables(directory: str) -> List[str]:
    """Names of the non-directory entries in ``directory``.

    Missing or unreadable directories yield nothing.
    """
    names: List[str] = []
    try:
        with os.scandir(directory) as it:
            for entry in it:
                try:
                    if entry.is_dir():
                        continue
                except OSError:
                    continue
                names.append(entry.name)
    except OSError:
        return []
    return names


# ---- Process launcher ----

def launch(path: str, argv: List[str], stdout: Any = None, stderr: Any = None) -> int:
    """Run ``path`` with ``argv`` (argv[0] is the name as typed) to completion.

    ``stdout``/``stderr`` are file objects or None to inherit the shell's.
    Returns the exit status; a child killed by a signal gives 128 + signo.
    """
    try:
        completed = subprocess.run(argv, executable=path, stdout=stdout, stderr=stderr)
    except OSError as e:
        raise LaunchError(argv[0], e.strerror or str(e)) from e
    rc = completed.returncode
    return 128 - rc if rc < 0 else rc


# ---- Built-ins ----

Handler = Callable[[List[str], Streams], int]


def _write(stream: Any, text: str) -> None:
    stream.write(text + "\n")
    stream.flush()


def builtin_exit(argv: List[str], io: Streams) -> int:
    if len(argv) < 2:
        raise ShellExit(0)
    try:
        code = int(argv[1])
    except ValueError:
        _write(io.stderr, f"exit: {argv[1]}: numeric argument required")
        raise ShellExit(2)
    raise ShellExit(code & 0xFF)


def builtin_echo(argv: List[str], io: Streams) -> int:
    _write(io.stdout, " ".join(argv[1:]))
    return 0


def builtin_type(argv: List[str], io: Streams) -> int:
    if len(argv) < 2:
        raise BuiltinError("type: missing argument")
    rc = 0
    for name in argv[1:]:
        if name in builtin_commands:
            _write(io.stdout, f"{name} is a shell builtin")
            continue
        path = find_executable(name)
        if path:
            _write(io.stdout, f"{name} is {path}")
        else:
            _write(io.stdout, f"{name}: not found")
            rc = 1
    return rc


def builtin_pwd(argv: List[str], io: Streams) -> int:
    _write(io.stdout, os.getcwd())
    return 0


def _expand_home(target: str) -> str:
    home = os.environ.get("HOME") or os.path.expanduser("~")
    if target == "~":
        return home
    if target.startswith("~/"):
        return home + target[1:]
    return target


def builtin_cd(argv: List[str], io: Streams) -> int:
    if len(argv) < 2:
        target = os.environ.get("HOME") or os.path.expanduser("~")
    else:
        target = _expand_home(argv[1])
    try:
        os.chdir(target)
    except OSError as e:
        raise BuiltinError(f"cd: {target}: {e.strerror or 'No such file or directory'}") from e
    os.environ["PWD"] = os.getcwd()
    return 0


builtin_commands: Dict[str, Handler] = {
    "exit": builtin_exit,
    "echo": builtin_echo,
    "type": builtin_type,
    "pwd": builtin_pwd,
    "cd": builtin_cd,
}

BUILTIN_NAMES = tuple(builtin_commands)


def get_builtin(name: str) -> Optional[Handler]:
    return builtin_commands.get(name)
