"""Template renderer.

CONTRACT
- Inputs: Shape, TemplateVars
- Outputs (required):
  - Go source text: generated header, package clause, `fmt`/`strings` imports,
    String() and GoString() methods on the named type
- Invariants:
  - Shape.TEXTUAL masks with one `replace_by` per character of the value
  - Shape.OTHER masks with exactly 10 characters
  - Both methods render the mask expression independently
- Failure:
  - Raises RenderError if a template cannot be loaded, parsed, or executed
"""

from __future__ import annotations

from functools import lru_cache
from typing import TYPE_CHECKING

import jinja2

from ..errors import RenderError
from ..schemas import TemplateVars
from .classify import Shape

if TYPE_CHECKING:
    from loguru import Logger

TEMPLATES = {
    Shape.TEXTUAL: "textual.go.j2",
    Shape.OTHER: "other.go.j2",
}


@lru_cache(maxsize=1)
def _environment() -> jinja2.Environment:
    return jinja2.Environment(
        loader=jinja2.PackageLoader("obfuscate", "templates"),
        undefined=jinja2.StrictUndefined,
        keep_trailing_newline=True,
        autoescape=False,
    )


def choose_template(shape: Shape) -> str:
    return TEMPLATES[shape]


def render(shape: Shape, tmpl_vars: TemplateVars, log: Logger) -> str:
    name = choose_template(shape)
    log.bind(stage="render").debug(f"rendering {name} for {tmpl_vars.type_name} (receiver {tmpl_vars.receiver_name!r})")
    try:
        template = _environment().get_template(name)
        return template.render(**tmpl_vars.model_dump())
    except jinja2.TemplateError as e:
        raise RenderError(f"could not execute template {name} for {tmpl_vars.type_name}: {e}") from e


if __name__ == "__main__":
    import argparse

    from loguru import logger

    parser = argparse.ArgumentParser(description="Render obfuscation methods for a type")
    parser.add_argument("--type", required=True, help="Type name")
    parser.add_argument("--package", required=True, help="Package name")
    parser.add_argument("--textual", action="store_true", help="Underlying type is string")
    args = parser.parse_args()

    shape = Shape.TEXTUAL if args.textual else Shape.OTHER
    print(render(shape, TemplateVars.for_type(args.type, args.package), logger), end="")
