"""Go build context: which files of a package directory belong to this build.

CONTRACT
- Inputs: target GOOS/GOARCH (from the environment, else the host), file
  names, build-constraint comment lines
- Outputs (required):
  - match_file(name): False for `_<goos>`, `_<goarch>` and `_<goos>_<goarch>`
    suffixes naming another platform
  - match_go_build(expr) / match_plus_build(lines): constraint evaluation
- Invariants:
  - Tags satisfied: GOOS, GOARCH, "unix" on unix systems, "gc", "cgo" unless
    CGO_ENABLED=0, go1.1 through the current release, and the GOOS aliases
    android->linux, ios->darwin, illumos->solaris
  - Every other tag (including "ignore") is unsatisfied
- Failure:
  - ValueError on a malformed //go:build expression
"""

from __future__ import annotations

import os
import platform
import re
import sys
from dataclasses import dataclass

GO_RELEASE = 24

KNOWN_OS = frozenset(
    "aix android darwin dragonfly freebsd hurd illumos ios js linux nacl netbsd "
    "openbsd plan9 solaris wasip1 windows zos".split()
)
UNIX_OS = frozenset(
    "aix android darwin dragonfly freebsd hurd illumos ios linux netbsd openbsd solaris".split()
)
KNOWN_ARCH = frozenset(
    "386 amd64 amd64p32 arm armbe arm64 arm64be loong64 mips mipsle mips64 mips64le "
    "mips64p32 mips64p32le ppc ppc64 ppc64le riscv riscv64 s390 s390x sparc sparc64 wasm".split()
)

_OS_ALIASES = {"android": "linux", "ios": "darwin", "illumos": "solaris"}

_PLATFORMS = {
    "linux": "linux",
    "darwin": "darwin",
    "win32": "windows",
    "cygwin": "windows",
    "freebsd": "freebsd",
    "openbsd": "openbsd",
    "netbsd": "netbsd",
    "dragonfly": "dragonfly",
    "aix": "aix",
    "sunos": "solaris",
}

_MACHINES = {
    "x86_64": "amd64",
    "amd64": "amd64",
    "i386": "386",
    "i686": "386",
    "x86": "386",
    "aarch64": "arm64",
    "arm64": "arm64",
    "armv6l": "arm",
    "armv7l": "arm",
    "ppc64le": "ppc64le",
    "ppc64": "ppc64",
    "s390x": "s390x",
    "riscv64": "riscv64",
    "loongarch64": "loong64",
    "mips64": "mips64",
}

_TOKEN_RE = re.compile(r"\s*(\(|\)|!|&&|\|\||[A-Za-z0-9_.]+)")


def host_goos() -> str:
    for prefix, goos in _PLATFORMS.items():
        if sys.platform.startswith(prefix):
            return goos
    return sys.platform


def host_goarch() -> str:
    machine = platform.machine().lower()
    return _MACHINES.get(machine, machine)


@dataclass(frozen=True)
class BuildContext:
    goos: str
    goarch: str
    cgo: bool = True
    compiler: str = "gc"
    release: int = GO_RELEASE

    @classmethod
    def from_env(cls) -> BuildContext:
        """GOOS/GOARCH/CGO_ENABLED from the environment, as the go command reads them."""
        return cls(
            goos=os.environ.get("GOOS") or host_goos(),
            goarch=os.environ.get("GOARCH") or host_goarch(),
            cgo=os.environ.get("CGO_ENABLED", "1") != "0",
        )

    def match_tag(self, tag: str) -> bool:
        if tag in (self.goos, self.goarch, self.compiler):
            return True
        if tag == "cgo":
            return self.cgo
        if _OS_ALIASES.get(self.goos) == tag:
            return True
        if tag == "unix":
            return self.goos in UNIX_OS
        m = re.fullmatch(r"go1\.(\d+)", tag)
        return m is not None and 1 <= int(m.group(1)) <= self.release

    def match_file(self, name: str) -> bool:
        """Apply the GOOS/GOARCH file-name suffix rule (`x_linux.go`, `x_windows_amd64.go`)."""
        stem = name.split(".", 1)[0]
        i = stem.find("_")
        if i < 0:
            return True
        parts = stem[i:].split("_")
        if parts[-1] == "test":
            parts = parts[:-1]
        if len(parts) >= 2 and parts[-2] in KNOWN_OS and parts[-1] in KNOWN_ARCH:
            return self.match_tag(parts[-2]) and self.match_tag(parts[-1])
        if parts and (parts[-1] in KNOWN_OS or parts[-1] in KNOWN_ARCH):
            return self.match_tag(parts[-1])
        return True

    def match_go_build(self, expr: str) -> bool:
        """Evaluate a `//go:build` expression (`!`, `&&`, `||`, parentheses)."""
        return _ExprParser(expr, self.match_tag).parse()

    def match_plus_build(self, lines: list[str]) -> bool:
        """Evaluate legacy `// +build` lines.

        Options on one line are ORed, comma-separated terms are ANDed, and
        separate lines are ANDed together.
        """
        for line in lines:
            if not any(self._match_option(opt) for opt in line.split()):
                return False
        return True

    def _match_option(self, option: str) -> bool:
        for term in option.split(","):
            neg = term.startswith("!")
            tag = term[1:] if neg else term
            if not tag or self.match_tag(tag) == neg:
                return False
        return True


class _ExprParser:
    def __init__(self, expr: str, match_tag) -> None:
        self.expr = expr
        self.match_tag = match_tag
        self.tokens = self._tokenize(expr)
        self.pos = 0

    def _tokenize(self, expr: str) -> list[str]:
        tokens: list[str] = []
        i = 0
        while i < len(expr):
            if expr[i:].strip() == "":
                break
            m = _TOKEN_RE.match(expr, i)
            if m is None:
                raise ValueError(f"invalid //go:build expression: {expr!r}")
            tokens.append(m.group(1))
            i = m.end()
        if not tokens:
            raise ValueError("empty //go:build expression")
        return tokens

    def _peek(self) -> str | None:
        return self.tokens[self.pos] if self.pos < len(self.tokens) else None

    def _take(self) -> str:
        tok = self._peek()
        if tok is None:
            raise ValueError(f"unexpected end of //go:build expression: {self.expr!r}")
        self.pos += 1
        return tok

    def parse(self) -> bool:
        value = self._or()
        if self._peek() is not None:
            raise ValueError(f"unexpected {self._peek()!r} in //go:build expression: {self.expr!r}")
        return value

    # Both operands are always parsed so that syntax errors surface.
    def _or(self) -> bool:
        value = self._and()
        while self._peek() == "||":
            self._take()
            rhs = self._and()
            value = value or rhs
        return value

    def _and(self) -> bool:
        value = self._not()
        while self._peek() == "&&":
            self._take()
            rhs = self._not()
            value = value and rhs
        return value

    def _not(self) -> bool:
        if self._peek() == "!":
            self._take()
            return not self._not()
        return self._atom()

    def _atom(self) -> bool:
        tok = self._take()
        if tok == "(":
            value = self._or()
            if self._take() != ")":
                raise ValueError(f"missing ')' in //go:build expression: {self.expr!r}")
            return value
        if tok in (")", "!", "&&", "||"):
            raise ValueError(f"unexpected {tok!r} in //go:build expression: {self.expr!r}")
        return self.match_tag(tok)


if __name__ == "__main__":
    import argparse

    parser = argparse.ArgumentParser(description="Evaluate Go build constraints for this host")
    parser.add_argument("expr", nargs="?", help="//go:build expression, e.g. 'linux && !cgo'")
    parser.add_argument("--file", action="append", default=[], help="File name to check against GOOS/GOARCH")
    args = parser.parse_args()

    ctx = BuildContext.from_env()
    print(f"GOOS={ctx.goos} GOARCH={ctx.goarch} cgo={ctx.cgo}")
    if args.expr:
        try:
            print(f"{args.expr}: {ctx.match_go_build(args.expr)}")
        except ValueError as e:
            print(f"Error: {e}", file=sys.stderr)
            sys.exit(1)
    for name in args.file:
        print(f"{name}: {ctx.match_file(name)}")
