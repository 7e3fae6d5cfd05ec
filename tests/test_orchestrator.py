import asyncio
import time
from unittest.mock import patch

import pytest

from obfuscate.config import RunConfig
from obfuscate.errors import FormatterError, ResolveTimeoutError, SymbolNotFoundError
from obfuscate.orchestrator import Deadline, run_generate
from obfuscate.steps.classify import Shape


def test_run_generate_textual(sample_pkg, fake_goimports, log):
    cfg = RunConfig(type_name="Token", unit_dir=sample_pkg)
    result = asyncio.run(run_generate(cfg, log))

    assert result.pkg_name == "sample"
    assert result.shape is Shape.TEXTUAL
    assert result.receiver_name == "t"
    assert result.output_path == sample_pkg / "gen_token_obfuscated.go"
    assert result.formatter_cmd.endswith(f"-w {result.output_path}")
    assert 'strings.Repeat("*", len(string(t)))' in result.output_path.read_text()


def test_run_generate_not_found_writes_nothing(sample_pkg, fake_goimports, log):
    cfg = RunConfig(type_name="Missing", unit_dir=sample_pkg)
    with pytest.raises(SymbolNotFoundError):
        asyncio.run(run_generate(cfg, log))
    assert not list(sample_pkg.glob("gen_*"))
    assert not fake_goimports.exists()


def test_run_generate_formatter_failure_keeps_artifact(sample_pkg, broken_goimports, log):
    cfg = RunConfig(type_name="Token", unit_dir=sample_pkg)
    with pytest.raises(FormatterError):
        asyncio.run(run_generate(cfg, log))
    assert (sample_pkg / "gen_token_obfuscated.go").exists()


@pytest.mark.timeout(10)
def test_run_generate_resolve_deadline(sample_pkg, fake_goimports, log):
    def slow_run(*args, **kwargs):
        time.sleep(3.0)

    with patch("obfuscate.orchestrator.Resolve") as MockResolve:
        MockResolve.return_value.run.side_effect = slow_run
        cfg = RunConfig(type_name="Token", unit_dir=sample_pkg, timeout_s=0.2)
        start = time.monotonic()
        with pytest.raises(ResolveTimeoutError, match="timed out after 0.2s"):
            asyncio.run(run_generate(cfg, log))
    # The call returns at the deadline instead of waiting for the slow load.
    assert time.monotonic() - start < 1.5
    assert not list(sample_pkg.glob("gen_*"))


def test_deadline_remaining():
    d = Deadline(timeout_s=30, started=time.monotonic() - 10)
    assert 19 < d.remaining() <= 20
