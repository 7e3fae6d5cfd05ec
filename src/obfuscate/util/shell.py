from __future__ import annotations

"""Shell command execution.

CONTRACT
- Inputs: Command argv, cwd, timeout
- Outputs (required):
  - CmdResult(returncode, output, elapsed_s)
- Invariants:
  - stdout and stderr are captured together, in the order the tool wrote them
  - Respects timeout_s (returncode 124 if exceeded)
  - A missing executable yields returncode 127, an unrunnable one 126
- Failure:
  - Returns CmdResult with exit code (does NOT raise on non-zero exit)
"""

import os
import subprocess
import time
from dataclasses import dataclass
from pathlib import Path

TIMEOUT_RC = 124
CANNOT_EXEC_RC = 126
NOT_FOUND_RC = 127


def which(cmd: str) -> str | None:
    if os.sep in cmd:
        p = Path(cmd)
        return str(p) if p.exists() and os.access(p, os.X_OK) else None
    for p in os.environ.get("PATH", "").split(os.pathsep):
        if not p:
            continue
        candidate = Path(p) / cmd
        if candidate.is_file() and os.access(candidate, os.X_OK):
            return str(candidate)
    return None


@dataclass(frozen=True)
class CmdResult:
    cmd: str
    returncode: int
    output: str
    elapsed_s: float

    @property
    def timed_out(self) -> bool:
        return self.returncode == TIMEOUT_RC


def run_cmd(
    cmd: list[str],
    cwd: Path,
    timeout_s: float | None = None,
) -> CmdResult:
    """Run a command and capture its combined output.

    CONTRACT:
    - Runs cmd as an argv list, never through a shell.
    - Never raises for non-zero exit; caller inspects return code.
    - Records duration.
    """
    display = " ".join(cmd)

    start_t = time.monotonic()
    try:
        p = subprocess.run(
            cmd,
            cwd=str(cwd),
            shell=False,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            timeout=timeout_s,
            text=True,
        )
        rc = p.returncode
        output = p.stdout or ""
    except subprocess.TimeoutExpired as e:
        rc = TIMEOUT_RC
        partial = e.output or ""
        if isinstance(partial, bytes):
            partial = partial.decode("utf-8", errors="replace")
        output = partial + "\nTimeout expired.\n"
    except FileNotFoundError as e:
        rc = NOT_FOUND_RC
        output = f"Exception: {e}\n"
    except OSError as e:
        rc = CANNOT_EXEC_RC
        output = f"Exception: {e}\n"

    return CmdResult(
        cmd=display,
        returncode=rc,
        output=output,
        elapsed_s=time.monotonic() - start_t,
    )


if __name__ == "__main__":
    import argparse
    import sys

    parser = argparse.ArgumentParser(description="Run a command and show its combined output")
    parser.add_argument("cmd", nargs=argparse.REMAINDER, help="Command and arguments")
    parser.add_argument("--cwd", default=".", help="Working directory")
    parser.add_argument("--timeout", type=float, default=10, help="Timeout in seconds")
    args = parser.parse_args()

    if not args.cmd:
        parser.error("no command given")

    res = run_cmd(cmd=args.cmd, cwd=Path(args.cwd), timeout_s=args.timeout)
    print(f"Exit code: {res.returncode}")
    print(res.output, end="")
    sys.exit(res.returncode)
