import os
import stat
import sys
from io import StringIO
from pathlib import Path

import pytest

# Ensure we can import modules from src/ before test modules are collected
SRC = Path(__file__).resolve().parents[1] / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))


@pytest.fixture()
def sandbox(tmp_path, monkeypatch):
    # Work in an isolated temp directory
    work = tmp_path / "work"
    work.mkdir()
    monkeypatch.chdir(work)
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setenv("PWD", str(work))
    monkeypatch.setenv("PATH", os.environ.get("PATH", "/usr/bin:/bin"))
    return work


@pytest.fixture()
def bindir(tmp_path, monkeypatch):
    """An empty directory prepended to PATH for fake executables."""
    d = tmp_path / "bin"
    d.mkdir()
    monkeypatch.setenv("PATH", str(d) + os.pathsep + os.environ.get("PATH", "/usr/bin:/bin"))
    return d


def make_script(directory: Path, name: str, body: str) -> Path:
    script = directory / name
    script.write_text("#!/bin/sh\n" + body + "\n")
    script.chmod(script.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return script


@pytest.fixture()
def session(sandbox):
    from ops import ShellSession
    return ShellSession(prompt="$ ", stdout=StringIO(), stderr=StringIO())
