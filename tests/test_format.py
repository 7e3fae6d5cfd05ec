import os

import pytest

from obfuscate.errors import FormatterError
from obfuscate.steps.format import Format

from conftest import _script


def test_format_runs_goimports(tmp_path, fake_goimports, log):
    target = tmp_path / "gen_token_obfuscated.go"
    target.write_text("package sample\n", encoding="utf-8")
    res = Format().run(target, ("goimports", "-w"), 5, log)
    assert res.returncode == 0
    assert fake_goimports.read_text().strip() == f"-w {target}"


def test_format_failure_surfaces_output(tmp_path, broken_goimports, log):
    target = tmp_path / "gen.go"
    target.write_text("package sample\n", encoding="utf-8")
    with pytest.raises(FormatterError) as exc:
        Format().run(target, ("goimports", "-w"), 5, log)
    assert exc.value.returncode == 2
    assert "expected declaration" in exc.value.output
    assert "exit status 2" in str(exc.value)


def test_format_missing_tool(tmp_path, no_goimports, log):
    with pytest.raises(FormatterError, match="not found in PATH"):
        Format().run(tmp_path / "gen.go", ("goimports", "-w"), 5, log)


def test_format_empty_command(tmp_path, log):
    with pytest.raises(FormatterError, match="no formatter"):
        Format().run(tmp_path / "gen.go", (), 5, log)


@pytest.mark.timeout(10)
def test_format_timeout(tmp_path, monkeypatch, log):
    bin_dir = tmp_path / "bin"
    _script(bin_dir, "slowfmt", "exec sleep 5\n")
    monkeypatch.setenv("PATH", f"{bin_dir}{os.pathsep}{os.environ.get('PATH', '')}")
    with pytest.raises(FormatterError, match="timed out"):
        Format().run(tmp_path / "gen.go", ("slowfmt",), 0.5, log)
