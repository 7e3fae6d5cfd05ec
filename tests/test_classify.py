from pathlib import Path

from obfuscate.steps.classify import Shape, classify
from obfuscate.steps.resolve import Symbol, TypeDecl


def _sym(underlying: str) -> Symbol:
    decl = TypeDecl(name="T", kind="named", text=underlying, alias=False, file=Path("t.go"), line=1)
    return Symbol(name="T", underlying=underlying, decl=decl)


def test_classify_string_is_textual():
    assert classify(_sym("string")) is Shape.TEXTUAL


def test_classify_everything_else_is_other():
    for underlying in ["int", "[]byte", "rune", "struct { S string }", "*string", "time.Duration"]:
        assert classify(_sym(underlying)) is Shape.OTHER
