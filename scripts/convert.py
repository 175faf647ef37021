#!/usr/bin/env python3
"""
Convert downloaded CRD files to KCL schemas.

Each CRD is handed to `kcl import -m crd` and the output is written straight
into the API version directory derived from the CRD's logical name:

    {batch_root}/{api_version}/{name}.k

Any callable taking (input_path, output_path) can stand in for kcl_import,
which keeps the placement logic testable without the kcl binary.
"""

import subprocess
from collections.abc import Callable
from pathlib import Path

from common import (
    KCL_EXTENSION,
    UNKNOWN_API_VERSION,
    ConversionError,
    extract_api_version,
    get_logger,
    strip_crd_suffix,
)

log = get_logger("convert")

Converter = Callable[[Path, Path], None]


def kcl_import(input_path: Path, output_path: Path, verbose: bool = False, executable: str = "kcl"):
    """Run `kcl import -m crd <input> -o <output>`.

    Converter output is passed through to the console only when verbose.
    """
    cmd = [executable, "import", "-m", "crd", str(input_path), "-o", str(output_path)]
    log.debug("Running: %s", " ".join(cmd))

    try:
        if verbose:
            result = subprocess.run(cmd)
        else:
            result = subprocess.run(cmd, capture_output=True, text=True, errors="replace")
    except OSError as e:
        raise ConversionError(f"Conversion failed for {input_path}: error running command {executable}: {e}") from e

    if result.returncode != 0:
        message = f"Conversion failed for {input_path}: {executable} exited with status {result.returncode}"
        detail = "" if verbose else (result.stderr or "").strip()
        if detail:
            message += f": {detail}"
        raise ConversionError(message)


def output_path_for(name: str, batch_root: Path) -> Path:
    """Return where the KCL output for a logical CRD name belongs."""
    stem = strip_crd_suffix(name)
    try:
        api_version = extract_api_version(stem)
    except Exception as e:
        log.error("Failed to determine version for %s: %s", stem, e)
        api_version = UNKNOWN_API_VERSION

    return Path(batch_root) / api_version / f"{stem}{KCL_EXTENSION}"


def convert_crd(input_path: Path, name: str, batch_root: Path, converter: Converter = kcl_import) -> Path:
    """
    Convert one CRD file into its API version directory.

    Returns the output path. Raises ConversionError if the converter fails.
    """
    output_file = output_path_for(name, batch_root)
    output_file.parent.mkdir(parents=True, exist_ok=True)

    log.info("Converting %s to %s...", input_path, output_file)
    converter(Path(input_path), output_file)

    return output_file
