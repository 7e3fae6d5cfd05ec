"""Formatter invoker.

CONTRACT
- Inputs: path of the generated file, formatter argv prefix, timeout
- Outputs (required):
  - The file rewritten in place by the formatter (imports normalized)
  - CmdResult of the formatter run
- Invariants:
  - Formatter is resolved via PATH before it is started
  - Runs with shell=False: `<formatter...> <path>`
- Failure:
  - Raises FormatterError when the tool is missing, exits non-zero, or times
    out; the tool's combined output is attached verbatim
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

from ..errors import FormatterError
from ..util.shell import CmdResult, run_cmd, which

if TYPE_CHECKING:
    from loguru import Logger


@dataclass
class Format:
    name: str = "format"

    def run(self, path: Path, formatter: tuple[str, ...], timeout_s: float | None, log: Logger) -> CmdResult:
        log = log.bind(stage=self.name)
        if not formatter:
            raise FormatterError("no formatter command configured")

        exe = which(formatter[0])
        if exe is None:
            raise FormatterError(f"could not run {formatter[0]}: not found in PATH")

        cmd = [exe, *formatter[1:], str(path)]
        log.debug(f"running {' '.join(cmd)}")
        res = run_cmd(cmd, cwd=path.parent, timeout_s=timeout_s)
        if res.timed_out:
            raise FormatterError(
                f"could not run {formatter[0]}: timed out after {timeout_s:g}s",
                output=res.output,
                returncode=res.returncode,
            )
        if res.returncode != 0:
            raise FormatterError(
                f"could not run {formatter[0]}: {res.cmd}: exit status {res.returncode}",
                output=res.output,
                returncode=res.returncode,
            )
        log.debug(f"{formatter[0]} finished in {res.elapsed_s:.2f}s")
        return res
