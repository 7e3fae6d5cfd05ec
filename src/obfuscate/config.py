from __future__ import annotations

"""Configuration models.

CONTRACT
- Inputs: type name, package directory, optional `.obfuscate.yaml`
- Outputs (required):
  - Validated RunConfig
- Invariants:
  - The masking character is a constant, never configured
  - Defaults run `goimports -w` with a 30 second deadline
- Failure:
  - Raises ValueError on an invalid config file
"""

from dataclasses import dataclass, field, replace
from pathlib import Path

import yaml

CONFIG_FILENAME = ".obfuscate.yaml"
DEFAULT_FORMATTER = ("goimports", "-w")
DEFAULT_TIMEOUT_S = 30.0

REPLACE_BY = "*"


@dataclass(frozen=True)
class RunConfig:
    type_name: str
    unit_dir: Path
    formatter: tuple[str, ...] = field(default=DEFAULT_FORMATTER)
    timeout_s: float = DEFAULT_TIMEOUT_S


CONFIG_SCHEMA = {
    "type": "object",
    "properties": {
        "formatter": {
            "type": "array",
            "items": {"type": "string", "minLength": 1},
            "minItems": 1,
        },
        "timeout_s": {"type": "number", "exclusiveMinimum": 0},
    },
    "additionalProperties": False,
}


def load_config_file(path: Path) -> dict:
    import jsonschema  # lazy import

    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except (OSError, yaml.YAMLError) as e:
        raise ValueError(f"Invalid {path.name}: {e}") from e
    try:
        jsonschema.validate(instance=data, schema=CONFIG_SCHEMA)
    except jsonschema.ValidationError as e:
        raise ValueError(f"Invalid {path.name}: {e.message}") from e
    return data


def build_config(
    type_name: str,
    unit_dir: Path | None = None,
    *,
    config_file: Path | None = None,
) -> RunConfig:
    """Build the run config, applying `.obfuscate.yaml` overrides when present."""
    unit_dir = (unit_dir or Path.cwd()).resolve()
    cfg = RunConfig(type_name=type_name, unit_dir=unit_dir)

    path = config_file or unit_dir / CONFIG_FILENAME
    if config_file is None and not path.exists():
        return cfg

    data = load_config_file(path)
    if "formatter" in data:
        cfg = replace(cfg, formatter=tuple(str(a) for a in data["formatter"]))
    if "timeout_s" in data:
        cfg = replace(cfg, timeout_s=float(data["timeout_s"]))
    return cfg


if __name__ == "__main__":
    import argparse
    import sys

    parser = argparse.ArgumentParser(description="Config Loader CLI")
    parser.add_argument("--dir", default=".", help="Package directory")
    parser.add_argument("--config", help="Explicit config file")
    args = parser.parse_args()

    try:
        cfg = build_config("T", Path(args.dir), config_file=Path(args.config) if args.config else None)
        print(f"Formatter: {' '.join(cfg.formatter)}")
        print(f"Timeout: {cfg.timeout_s:g}s")
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
