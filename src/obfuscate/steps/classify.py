"""Shape classifier.

CONTRACT
- Inputs: resolved Symbol
- Outputs (required):
  - Shape.TEXTUAL when the underlying type is the predeclared `string`
  - Shape.OTHER otherwise
- Invariants:
  - Pure and total; no error path
"""

from __future__ import annotations

from enum import Enum

from .resolve import Symbol

TEXTUAL_TYPE = "string"


class Shape(str, Enum):
    TEXTUAL = "textual"
    OTHER = "other"


def classify(symbol: Symbol) -> Shape:
    return Shape.TEXTUAL if symbol.underlying == TEXTUAL_TYPE else Shape.OTHER
