"""Type resolver step.

CONTRACT
- Inputs: Package directory, target type name
- Outputs (required):
  - GoPackage (name, files, package-scope declarations)
  - Symbol (name, underlying representation, declaring file/line)
- Invariants:
  - Exactly one package must load from the directory (`*_test.go` files,
    files starting with `_` or `.`, files whose GOOS/GOARCH suffix or build
    constraint excludes the current build context are skipped)
  - Underlying types follow named types inside the package until a
    predeclared type or a type literal is reached
  - An alias target must end at a type defined in the package (methods
    cannot be declared on predeclared or imported types)
  - Read-only: no file is modified
- Failure:
  - Raises ResolveError (or a subclass) on syntax errors, wrong package count,
    invalid UTF-8, malformed build constraints, redeclarations, undefined or
    recursive types, aliases of non-local types, and missing names
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Iterator

import tree_sitter_go
from tree_sitter import Language, Node, Parser

from ..errors import NotATypeError, ResolveError, SymbolNotFoundError, UnitCountError
from ..util.buildctx import BuildContext

if TYPE_CHECKING:
    from loguru import Logger

GO_LANGUAGE = Language(tree_sitter_go.language())

PREDECLARED_TYPES = frozenset(
    {
        "any",
        "bool",
        "byte",
        "comparable",
        "complex64",
        "complex128",
        "error",
        "float32",
        "float64",
        "int",
        "int8",
        "int16",
        "int32",
        "int64",
        "rune",
        "string",
        "uint",
        "uint8",
        "uint16",
        "uint32",
        "uint64",
        "uintptr",
    }
)

_GO_BUILD_RE = re.compile(r"^//go:build(?:\s|$)(.*)$")
_PLUS_BUILD_RE = re.compile(r"^//\s*\+build(?:\s|$)")


@dataclass(frozen=True)
class TypeDecl:
    """A package-level type declaration.

    `kind` is "named" when the right-hand side refers to another type by name
    (`text` holds that name), "qualified" for a type from another package, and
    "literal" for a type literal such as a struct or slice.
    """

    name: str
    kind: str
    text: str
    alias: bool
    file: Path
    line: int

    def where(self) -> str:
        return f"{self.file.name}:{self.line}"


@dataclass(frozen=True)
class Symbol:
    name: str
    underlying: str
    decl: TypeDecl
    external: bool = False


@dataclass(frozen=True)
class ParsedFile:
    path: Path
    package: str
    types: list[TypeDecl]
    objects: list[tuple[str, str]]


@dataclass
class GoPackage:
    name: str
    dir: Path
    files: list[Path]
    types: dict[str, TypeDecl] = field(default_factory=dict)
    objects: dict[str, str] = field(default_factory=dict)

    def lookup(self, name: str) -> Symbol | None:
        """Look a type up in package scope; None when no type has that name."""
        decl = self.types.get(name)
        if decl is None:
            return None
        underlying, external = self._underlying(decl)
        return Symbol(name=name, underlying=underlying, decl=decl, external=external)

    def _underlying(self, decl: TypeDecl) -> tuple[str, bool]:
        chain = [decl.name]
        cur = decl
        while cur.kind == "named":
            ref = cur.text
            nxt = self.types.get(ref)
            if nxt is None:
                if ref in PREDECLARED_TYPES:
                    return ref, False
                raise ResolveError(f"{cur.where()}: undefined: {ref}")
            if ref in chain:
                raise ResolveError(
                    f"{decl.where()}: invalid recursive type {decl.name}: "
                    + " -> ".join(chain + [ref])
                )
            chain.append(ref)
            cur = nxt
        return cur.text, cur.kind == "qualified"

    def alias_target(self, decl: TypeDecl) -> TypeDecl:
        """Follow `type A = B` aliases to the declaration they denote.

        The result is still an alias when the chain leaves the package's own
        defined types (a predeclared, qualified or literal type).
        """
        cur = decl
        seen = {decl.name}
        while cur.alias and cur.kind == "named" and cur.text in self.types and cur.text not in seen:
            seen.add(cur.text)
            cur = self.types[cur.text]
        return cur


def _text(node: Node) -> str:
    return node.text.decode("utf-8")


def _normalize(text: str) -> str:
    return " ".join(text.split())


def _walk(node: Node) -> Iterator[Node]:
    stack = [node]
    while stack:
        n = stack.pop()
        yield n
        stack.extend(reversed(n.children))


def _first_error(root: Node) -> Node | None:
    for n in _walk(root):
        if n.type == "ERROR" or n.is_missing:
            return n
    return None


def _header_comments(root: Node) -> tuple[list[Node], int]:
    """Comments before the package clause, and the row of the last blank line among them."""
    header: list[Node] = []
    end_row = root.end_point[0] + 1
    for node in root.children:
        if node.type != "comment":
            end_row = node.start_point[0]
            break
        header.append(node)
    occupied = {row for n in header for row in range(n.start_point[0], n.end_point[0] + 1)}
    blank = [row for row in range(end_row) if row not in occupied]
    return header, max(blank, default=-1)


def _build_excluded(root: Node, path: Path, ctx: BuildContext) -> bool:
    header, last_blank = _header_comments(root)
    go_build: str | None = None
    plus_build: list[str] = []
    for node in header:
        text = _text(node).strip()
        m = _GO_BUILD_RE.match(text)
        if m is not None:
            if go_build is not None:
                raise ResolveError(f"could not load packages: {path.name}: multiple //go:build comments")
            go_build = m.group(1).strip()
        elif _PLUS_BUILD_RE.match(text) and node.end_point[0] < last_blank:
            # +build lines only count when a blank line separates them from the package doc.
            plus_build.append(text.split("+build", 1)[1])

    try:
        if go_build is not None:
            return not ctx.match_go_build(go_build)
    except ValueError as e:
        raise ResolveError(f"could not load packages: {path.name}: {e}") from e
    return not ctx.match_plus_build(plus_build)


def _describe_type(node: Node) -> tuple[str, str]:
    while node.type == "parenthesized_type":
        node = next(ch for ch in node.named_children if ch.type != "comment")
    if node.type == "generic_type":
        node = node.child_by_field_name("type") or node
    if node.type == "type_identifier":
        return "named", _text(node)
    if node.type == "qualified_type":
        return "qualified", _normalize(_text(node))
    return "literal", _normalize(_text(node))


def _type_decl(spec: Node, path: Path) -> TypeDecl:
    line = spec.start_point[0] + 1
    name_node = spec.child_by_field_name("name")
    type_node = spec.child_by_field_name("type")
    if name_node is None or type_node is None:
        raise ResolveError(f"could not load packages: {path.name}:{line}: malformed type declaration")
    kind, text = _describe_type(type_node)
    return TypeDecl(
        name=_text(name_node),
        kind=kind,
        text=text,
        alias=spec.type == "type_alias",
        file=path,
        line=line,
    )


def parse_file(parser: Parser, path: Path, ctx: BuildContext) -> ParsedFile | None:
    """Parse one Go file. Returns None when a build constraint excludes it."""
    source = path.read_bytes()
    try:
        source.decode("utf-8")
    except UnicodeDecodeError as e:
        line = source.count(b"\n", 0, e.start) + 1
        raise ResolveError(f"could not load packages: {path.name}:{line}: illegal UTF-8 encoding") from e

    tree = parser.parse(source)
    root = tree.root_node
    if _build_excluded(root, path, ctx):
        return None
    if root.has_error:
        bad = _first_error(root)
        line = bad.start_point[0] + 1 if bad is not None else 1
        raise ResolveError(f"could not load packages: {path.name}:{line}: syntax error")

    package: str | None = None
    types: list[TypeDecl] = []
    objects: list[tuple[str, str]] = []
    for node in root.named_children:
        if node.type == "package_clause":
            for ch in node.named_children:
                if ch.type == "package_identifier":
                    package = _text(ch)
        elif node.type == "type_declaration":
            for spec in node.named_children:
                if spec.type in ("type_spec", "type_alias"):
                    types.append(_type_decl(spec, path))
        elif node.type == "function_declaration":
            name = node.child_by_field_name("name")
            if name is not None:
                objects.append((_text(name), "func"))
        elif node.type in ("var_declaration", "const_declaration"):
            kind = "var" if node.type == "var_declaration" else "const"
            for n in _walk(node):
                if n.type == f"{kind}_spec":
                    for name in n.children_by_field_name("name"):
                        objects.append((_text(name), kind))

    if package is None:
        raise ResolveError(f"could not load packages: {path.name}: expected 'package' clause")
    return ParsedFile(path=path, package=package, types=types, objects=objects)


def source_files(unit_dir: Path, ctx: BuildContext) -> list[Path]:
    return [
        p
        for p in sorted(unit_dir.glob("*.go"))
        if p.is_file()
        and not p.name.endswith("_test.go")
        and not p.name.startswith(("_", "."))
        and ctx.match_file(p.name)
    ]


def resolve_unit(unit_dir: Path, log: Logger, ctx: BuildContext | None = None) -> GoPackage:
    """Load and check the single Go package in `unit_dir` for `ctx` (default: GOOS/GOARCH from the environment)."""
    if not unit_dir.is_dir():
        raise ResolveError(f"could not load packages: {unit_dir} is not a directory")

    ctx = ctx or BuildContext.from_env()
    log.debug(f"build context: GOOS={ctx.goos} GOARCH={ctx.goarch}")

    parser = Parser(GO_LANGUAGE)
    parsed: list[ParsedFile] = []
    for path in source_files(unit_dir, ctx):
        try:
            pf = parse_file(parser, path, ctx)
        except OSError as e:
            raise ResolveError(f"could not load packages: {e}") from e
        if pf is None:
            log.debug(f"skipping {path.name}: excluded by build constraint")
            continue
        parsed.append(pf)

    names = sorted({pf.package for pf in parsed})
    if len(names) != 1:
        raise UnitCountError(len(names), names)

    pkg = GoPackage(name=names[0], dir=unit_dir, files=[pf.path for pf in parsed])
    for pf in parsed:
        for obj_name, kind in pf.objects:
            pkg.objects.setdefault(obj_name, kind)
    for pf in parsed:
        for decl in pf.types:
            if decl.name == "_":
                continue
            prev = pkg.types.get(decl.name)
            if prev is not None:
                raise ResolveError(
                    f"{decl.where()}: {decl.name} redeclared in this block (other declaration at {prev.where()})"
                )
            if decl.name in pkg.objects:
                raise ResolveError(
                    f"{decl.where()}: {decl.name} redeclared in this block (also a {pkg.objects[decl.name]})"
                )
            pkg.types[decl.name] = decl

    log.debug(f"loaded package {pkg.name!r}: {len(pkg.files)} file(s), {len(pkg.types)} type(s)")
    return pkg


@dataclass
class Resolve:
    name: str = "resolve"

    def run(self, unit_dir: Path, type_name: str, log: Logger) -> tuple[GoPackage, Symbol]:
        log = log.bind(stage=self.name)
        pkg = resolve_unit(unit_dir, log)

        log.debug(f"looking into package {pkg.name!r} for type {type_name!r}")
        sym = pkg.lookup(type_name)
        if sym is None:
            kind = pkg.objects.get(type_name)
            if kind is not None:
                raise NotATypeError(type_name, kind)
            raise SymbolNotFoundError(type_name, pkg.name)

        if sym.decl.alias:
            target = pkg.alias_target(sym.decl)
            if target.alias:
                raise ResolveError(f"{sym.decl.where()}: cannot define new methods on non-local type {target.text}")
            log.debug(f"{type_name} is an alias for {target.name} ({target.where()})")

        if sym.external:
            log.warning(
                f"{type_name} is declared from another package ({sym.underlying}); "
                "its underlying type cannot be checked here"
            )
        log.debug(f"{type_name} ({sym.decl.where()}) has underlying type {sym.underlying}")
        return pkg, sym


if __name__ == "__main__":
    import argparse
    import sys

    from loguru import logger

    parser = argparse.ArgumentParser(description="Type Resolver CLI")
    parser.add_argument("--dir", default=".", help="Package directory")
    parser.add_argument("--type", required=True, help="Type name to resolve")
    args = parser.parse_args()

    try:
        pkg, sym = Resolve().run(Path(args.dir).resolve(), args.type, logger.bind(stage="main"))
        print(f"package {pkg.name}: type {sym.name} -> {sym.underlying}")
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
