"""Output writer.

CONTRACT
- Inputs: type name, rendered text, output directory
- Outputs (required):
  - gen_<lowercased type name>_obfuscated.go in the output directory
- Invariants:
  - The file name is a pure function of the type name
  - An existing file of the same name is overwritten without warning
  - The file is closed before run() returns
- Failure:
  - Raises OutputError if the file cannot be created, written, or closed
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

from ..errors import OutputError

if TYPE_CHECKING:
    from loguru import Logger

FILENAME_TMPL = "gen_{}_obfuscated.go"


def generated_filename(type_name: str) -> str:
    return FILENAME_TMPL.format(type_name.lower())


@dataclass
class Write:
    name: str = "write"

    def run(self, type_name: str, text: str, output_dir: Path, log: Logger) -> Path:
        log = log.bind(stage=self.name)
        path = output_dir / generated_filename(type_name)
        try:
            f = path.open("w", encoding="utf-8")
        except OSError as e:
            raise OutputError(f"could not create file {path}: {e}") from e
        try:
            with f:
                f.write(text)
        except OSError as e:
            raise OutputError(f"could not write file {path}: {e}") from e
        log.debug(f"wrote {len(text)} chars to {path}")
        return path
