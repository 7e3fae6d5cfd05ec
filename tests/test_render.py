import pytest
from pydantic import ValidationError

from obfuscate.errors import RenderError
from obfuscate.schemas import TemplateVars, receiver_name
from obfuscate.steps import render as render_mod
from obfuscate.steps.classify import Shape
from obfuscate.steps.render import render


def test_receiver_name():
    assert receiver_name("Token") == "t"
    assert receiver_name("count") == "c"
    assert receiver_name("Ärger") == "ä"
    # "İ".lower() is two code points; the receiver stays one character.
    assert receiver_name("İpek") == "i"
    with pytest.raises(ValueError):
        receiver_name("")


def test_template_vars_frozen():
    v = TemplateVars.for_type("Token", "sample")
    assert v.replace_by == "*"
    assert v.receiver_name == "t"
    with pytest.raises(ValidationError):
        v.type_name = "Other"


def test_render_textual(log):
    out = render(Shape.TEXTUAL, TemplateVars.for_type("Token", "sample"), log)
    assert out.startswith("// Code generated by obfuscate. DO NOT EDIT.\n")
    assert "\npackage sample\n" in out
    assert '"fmt"' in out and '"strings"' in out
    assert "func (t Token) String() string {" in out
    assert "func (t Token) GoString() string {" in out
    assert out.count('fmt.Sprint(strings.Repeat("*", len(string(t))))') == 2
    assert "10" not in out


def test_render_other(log):
    out = render(Shape.OTHER, TemplateVars.for_type("Count", "sample"), log)
    assert "func (c Count) String() string {" in out
    assert "func (c Count) GoString() string {" in out
    assert out.count('fmt.Sprint(strings.Repeat("*", 10))') == 2
    assert "len(" not in out


def test_render_template_failure(log, monkeypatch):
    monkeypatch.setitem(render_mod.TEMPLATES, Shape.OTHER, "missing.go.j2")
    with pytest.raises(RenderError, match="missing.go.j2"):
        render(Shape.OTHER, TemplateVars.for_type("Count", "sample"), log)
