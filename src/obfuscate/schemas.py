from __future__ import annotations

"""Run records.

CONTRACT
- Inputs: Pydantic models
- Outputs:
  - TemplateVars: the flat, immutable record handed to the renderer
  - GenerateResult: what a finished run produced
- Invariants:
  - receiver_name is the lowercase first character of type_name
- Failure:
  - Raises ValidationError on schema mismatch
"""

from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field

from .config import REPLACE_BY
from .steps.classify import Shape


def receiver_name(type_name: str) -> str:
    if not type_name:
        raise ValueError("type name must not be empty")
    # str.lower() may expand one code point ("İ" -> "i\u0307"); keep the first.
    return type_name[0].lower()[0]


class TemplateVars(BaseModel):
    model_config = ConfigDict(frozen=True)

    pkg_name: str = Field(min_length=1)
    type_name: str = Field(min_length=1)
    receiver_name: str
    replace_by: str = REPLACE_BY

    @classmethod
    def for_type(cls, type_name: str, pkg_name: str) -> TemplateVars:
        return cls(
            pkg_name=pkg_name,
            type_name=type_name,
            receiver_name=receiver_name(type_name),
        )


class GenerateResult(BaseModel):
    schema_version: int = 1
    type_name: str
    pkg_name: str
    underlying: str
    shape: Shape
    receiver_name: str
    output_path: Path
    formatter_cmd: str = ""
