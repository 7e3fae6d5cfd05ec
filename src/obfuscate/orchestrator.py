from __future__ import annotations

"""Orchestrator for a generation run.

CONTRACT
- Inputs: RunConfig, bound logger
- Outputs (required):
  - GenerateResult
  - gen_<type>_obfuscated.go in the output directory, formatted
- Invariants:
  - Stages run strictly in order: resolve, classify, render, write, format
  - One deadline (cfg.timeout_s) covers the whole run; package loading and
    the formatter each get whatever time is left
  - Package loading runs on a daemon thread that is abandoned, not joined,
    once the deadline passes
  - Nothing is retried and nothing is rolled back
- Failure:
  - Propagates ObfuscateError from the failing stage; never exits the process
"""

import asyncio
import threading
import time
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

from .config import RunConfig
from .errors import FormatterError, ResolveTimeoutError
from .schemas import GenerateResult, TemplateVars
from .steps.classify import classify
from .steps.format import Format
from .steps.render import render
from .steps.resolve import GoPackage, Resolve, Symbol
from .steps.write import Write

if TYPE_CHECKING:
    from loguru import Logger


@dataclass(frozen=True)
class Deadline:
    timeout_s: float
    started: float

    @classmethod
    def start(cls, timeout_s: float) -> Deadline:
        return cls(timeout_s=timeout_s, started=time.monotonic())

    def remaining(self) -> float:
        return self.timeout_s - (time.monotonic() - self.started)


def _start_daemon(fn, *args) -> asyncio.Future:
    """Run fn(*args) on a daemon thread and return a future for its result.

    The thread is never joined: when the caller stops waiting, an overrunning
    call is left behind and dies with the interpreter.
    """
    loop = asyncio.get_running_loop()
    fut = loop.create_future()

    def _settle(value, exc):
        if fut.done():
            return
        if exc is not None:
            fut.set_exception(exc)
        else:
            fut.set_result(value)

    def _target():
        try:
            value, exc = fn(*args), None
        except BaseException as e:
            value, exc = None, e
        try:
            loop.call_soon_threadsafe(_settle, value, exc)
        except RuntimeError:
            # Loop already closed; nobody is waiting anymore.
            pass

    threading.Thread(target=_target, name="obfuscate-resolve", daemon=True).start()
    return fut


async def _resolve(cfg: RunConfig, deadline: Deadline, log: Logger) -> tuple[GoPackage, Symbol]:
    fut = _start_daemon(Resolve().run, cfg.unit_dir, cfg.type_name, log)
    try:
        return await asyncio.wait_for(fut, timeout=max(deadline.remaining(), 0))
    except asyncio.TimeoutError as e:
        raise ResolveTimeoutError(cfg.timeout_s) from e


async def run_generate(cfg: RunConfig, log: Logger) -> GenerateResult:
    deadline = Deadline.start(cfg.timeout_s)

    pkg, sym = await _resolve(cfg, deadline, log)

    shape = classify(sym)
    log.debug(f"{sym.name} classified as {shape.value}")

    tmpl_vars = TemplateVars.for_type(cfg.type_name, pkg.name)
    text = render(shape, tmpl_vars, log)

    out_path = Write().run(cfg.type_name, text, cfg.unit_dir, log)

    remaining = deadline.remaining()
    if remaining <= 0:
        raise FormatterError(f"run deadline of {cfg.timeout_s:g}s exceeded before formatting")
    res = Format().run(out_path, cfg.formatter, remaining, log)

    return GenerateResult(
        type_name=cfg.type_name,
        pkg_name=pkg.name,
        underlying=sym.underlying,
        shape=shape,
        receiver_name=tmpl_vars.receiver_name,
        output_path=Path(out_path),
        formatter_cmd=res.cmd,
    )
