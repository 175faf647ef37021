#!/usr/bin/env python3
"""
CRD to KCL Importer

Downloads CRDs, converts them to KCL schemas with `kcl import -m crd`, and
lays the results out by API version:

- modules/{moduleName}/crds/{name}.yaml    raw CRD sources
- modules/{moduleName}/{api_version}/{name}.k    generated schemas

A job is described by a JSON config:

    {"moduleName": "cert-manager", "crds": {"certificates_v1": "https://..."}}

or discovered from a GitHub directory page, in which case the config is
written to config/{moduleName}.json before anything is converted.

Usage:
    python extract.py --config config/cert-manager.json
    python extract.py --url https://github.com/org/repo/tree/main/crds --name cert-manager
"""

import argparse
import sys
from functools import partial
from pathlib import Path

from common import (
    CRD_EXTENSION,
    CRDToKCLError,
    configure_logging,
    get_logger,
    load_config,
    save_config,
    strip_crd_suffix,
)
from convert import Converter, convert_crd, kcl_import
from discover import extract_raw_links
from download import download_file
from organize import move_kcl_files, remove_empty_dirs

log = get_logger("extract")


def import_crd(name: str, url: str, batch_root: Path, converter: Converter) -> Path:
    """Download one CRD into {batch_root}/crds and convert it. Errors propagate."""
    crd_file = Path(batch_root) / "crds" / f"{strip_crd_suffix(name)}{CRD_EXTENSION}"

    log.info("Downloading %s from %s...", name, url)
    download_file(url, crd_file)

    return convert_crd(crd_file, name, batch_root, converter)


def run_batch(config: dict, modules_dir: Path, converter: Converter = kcl_import) -> Path:
    """
    Run one conversion job and return its batch root.

    Entries are fetched and converted one at a time; the first download or
    conversion error propagates and stops the batch. Layout problems are
    only logged.
    """
    batch_root = Path(modules_dir) / config["moduleName"]
    (batch_root / "crds").mkdir(parents=True, exist_ok=True)

    crds = config.get("crds", {})
    log.info("Importing %d CRDs into %s", len(crds), batch_root)

    for name, url in crds.items():
        import_crd(name, url, batch_root, converter)

    move_kcl_files(batch_root)
    remove_empty_dirs(batch_root)

    return batch_root


def run_discovery(
    url: str,
    module_name: str,
    modules_dir: Path,
    config_dir: Path,
    converter: Converter = kcl_import,
) -> Path:
    """
    Build a job config from a GitHub directory page, save it, then run it.

    Raises DiscoveryError before anything is written if the page can't be read.
    """
    crds = extract_raw_links(url)

    config_path = save_config({"moduleName": module_name, "crds": crds}, config_dir)
    log.info("JSON configuration saved to %s", config_path)

    return run_batch(load_config(config_path), modules_dir, converter)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Convert Kubernetes CRDs to KCL modules")
    parser.add_argument("--url", help="GitHub directory for raw links")
    parser.add_argument("--name", help="Module name")
    parser.add_argument("--config", help="Path to JSON config")
    parser.add_argument("--debug", "--verbose", dest="verbose", action="store_true", help="Enable debugging")
    parser.add_argument("--modules-dir", default="modules", help="Output directory for modules")
    parser.add_argument("--config-dir", default="config", help="Directory for discovered configs")
    parser.add_argument("--converter", default="kcl", help="kcl executable")
    return parser


def main(argv: list[str] | None = None):
    parser = build_parser()
    args = parser.parse_args(argv)

    discovery = bool(args.url and args.name)
    if not discovery and not args.config:
        parser.error("Configuration path is missing: pass --config, or --url together with --name")

    configure_logging(verbose=args.verbose)

    modules_dir = Path(args.modules_dir)
    config_dir = Path(args.config_dir)
    modules_dir.mkdir(parents=True, exist_ok=True)
    config_dir.mkdir(parents=True, exist_ok=True)

    converter = partial(kcl_import, verbose=args.verbose, executable=args.converter)

    try:
        if discovery:
            run_discovery(args.url, args.name, modules_dir, config_dir, converter)
        else:
            run_batch(load_config(Path(args.config)), modules_dir, converter)
    except CRDToKCLError as e:
        log.error("%s", e)
        sys.exit(1)

    log.info("All tasks completed successfully.")


if __name__ == "__main__":
    main()
