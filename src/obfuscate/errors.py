"""Error taxonomy for a generation run.

CONTRACT
- Every failure raised by a pipeline step is an ObfuscateError subclass
- Each error names the stage it came from
- Steps raise; only the CLI turns errors into exit codes
"""

from __future__ import annotations


class ObfuscateError(Exception):
    """Base class for all fatal run errors."""

    stage: str = "run"

    def __init__(self, message: str, *, stage: str | None = None) -> None:
        super().__init__(message)
        if stage is not None:
            self.stage = stage


class ResolveError(ObfuscateError):
    """The package could not be loaded, checked, or searched."""

    stage = "resolve"


class UnitCountError(ResolveError):
    """Zero or several packages were found in the working directory."""

    def __init__(self, count: int, names: list[str] | None = None) -> None:
        self.count = count
        self.names = list(names or [])
        detail = f": {self.names}" if self.names else ""
        super().__init__(f"expecting only one package, received {count}{detail}")


class SymbolNotFoundError(ResolveError):
    def __init__(self, name: str, pkg_name: str) -> None:
        self.name = name
        self.pkg_name = pkg_name
        super().__init__(f"type {name!r} not found in package {pkg_name!r}")


class NotATypeError(ResolveError):
    def __init__(self, name: str, kind: str) -> None:
        self.name = name
        self.kind = kind
        super().__init__(f"{name!r} is not a type (declared as {kind})")


class ResolveTimeoutError(ResolveError):
    def __init__(self, timeout_s: float) -> None:
        self.timeout_s = timeout_s
        super().__init__(f"package loading timed out after {timeout_s:g}s")


class RenderError(ObfuscateError):
    stage = "render"


class OutputError(ObfuscateError):
    stage = "write"


class FormatterError(ObfuscateError):
    """The external formatter is missing, failed, or ran out of time."""

    stage = "format"

    def __init__(self, message: str, *, output: str = "", returncode: int | None = None) -> None:
        super().__init__(message)
        self.output = output
        self.returncode = returncode
