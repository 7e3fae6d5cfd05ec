import os
import stat
from pathlib import Path

import pytest
from obfuscate.util.logs import configure_logging


def write_go(dir_: Path, files: dict[str, str]) -> Path:
    dir_.mkdir(parents=True, exist_ok=True)
    for name, src in files.items():
        (dir_ / name).write_text(src, encoding="utf-8")
    return dir_


def _script(bin_dir: Path, name: str, body: str) -> Path:
    bin_dir.mkdir(parents=True, exist_ok=True)
    p = bin_dir / name
    p.write_text("#!/bin/sh\n" + body, encoding="utf-8")
    p.chmod(p.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return p


@pytest.fixture
def log():
    return configure_logging(verbose=True).bind(stage="test")


@pytest.fixture
def sample_pkg(tmp_path):
    return write_go(
        tmp_path / "sample",
        {
            "sample.go": (
                "package sample\n\n"
                "type Token string\n\n"
                "type Count int\n"
            ),
        },
    )


@pytest.fixture
def fake_goimports(tmp_path, monkeypatch):
    """A `goimports` on PATH that records its arguments and succeeds."""
    bin_dir = tmp_path / "bin"
    calls = bin_dir / "calls.log"
    _script(bin_dir, "goimports", f'echo "$@" >> "{calls}"\nexit 0\n')
    monkeypatch.setenv("PATH", f"{bin_dir}{os.pathsep}{os.environ.get('PATH', '')}")
    return calls


@pytest.fixture
def broken_goimports(tmp_path, monkeypatch):
    bin_dir = tmp_path / "bin"
    _script(bin_dir, "goimports", 'echo "gen.go:3:1: expected declaration" >&2\nexit 2\n')
    monkeypatch.setenv("PATH", f"{bin_dir}{os.pathsep}{os.environ.get('PATH', '')}")


@pytest.fixture
def no_goimports(tmp_path, monkeypatch):
    empty = tmp_path / "empty-bin"
    empty.mkdir()
    monkeypatch.setenv("PATH", str(empty))
