"""obfuscate package.

Generates redacting String()/GoString() methods for a Go type:

    import obfuscate

    result = obfuscate.generate("Token", unit_dir="path/to/go/package")
    print(result.output_path)  # .../gen_token_obfuscated.go
"""

import asyncio
from pathlib import Path
from typing import Optional

from .config import RunConfig, build_config
from .errors import ObfuscateError
from .orchestrator import run_generate
from .schemas import GenerateResult
from .util.logs import configure_logging

__version__ = "0.1.0"


def generate(
    type_name: str,
    *,
    unit_dir: Optional[str | Path] = None,
    config_file: Optional[str | Path] = None,
    verbose: bool = False,
) -> GenerateResult:
    """Generate the obfuscation file for `type_name`.

    Args:
        type_name: Go type declared in the package
        unit_dir: Go package directory (default: current dir)
        config_file: Optional path to a `.obfuscate.yaml`-style file
        verbose: Log debug messages to stderr

    Raises:
        ObfuscateError: on the first failing stage
    """
    cfg = build_config(
        type_name,
        Path(unit_dir) if unit_dir else None,
        config_file=Path(config_file) if config_file else None,
    )
    log = configure_logging(verbose)
    return asyncio.run(run_generate(cfg, log))


__all__ = [
    "generate",
    "GenerateResult",
    "ObfuscateError",
    "RunConfig",
    "run_generate",
    "__version__",
]
