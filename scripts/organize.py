#!/usr/bin/env python3
"""
Arrange generated KCL files into API version directories.

This module handles:
1. Moving every .k file to {batch_root}/{api_version}/
2. Keeping one `regex_match = regex.match` per version directory
3. Removing directories left empty by the moves

Failures here are logged and skipped; they never abort a run.

Usage:
    python organize.py modules/cert-manager
"""

import argparse
import os
import shutil
from pathlib import Path

from common import (
    KCL_EXTENSION,
    KNOWN_API_VERSIONS,
    REGEX_MATCH_DECLARATION,
    configure_logging,
    extract_api_version,
    get_logger,
)

log = get_logger("organize")


def find_kcl_files(root: Path) -> list[Path]:
    """Return every generated .k file under root."""
    kcl_files = []
    for dirpath, _dirnames, filenames in os.walk(root):
        for filename in filenames:
            path = Path(dirpath) / filename
            if filename.endswith(KCL_EXTENSION) and path.is_file():
                kcl_files.append(path)
    return kcl_files


def move_kcl_files(batch_root: Path) -> list[Path]:
    """
    Move each .k file into the directory named after its API version.

    Files whose name carries no known version go to {batch_root}/unknown.
    Returns the final location of every file that is in place afterwards.
    """
    batch_root = Path(batch_root)
    placed = []

    # Collect first so moves don't disturb the walk
    for path in find_kcl_files(batch_root):
        api_version = extract_api_version(path.name)
        new_dir = batch_root / api_version
        new_path = new_dir / path.name

        if path.parent == new_dir:
            placed.append(path)
            continue

        log.info("Moving %s to %s...", path, new_path)
        try:
            new_dir.mkdir(parents=True, exist_ok=True)
            shutil.move(str(path), str(new_path))
        except OSError as e:
            log.error("Failed to move file '%s': %s", path, e)
            continue

        placed.append(new_path)

    remove_redundant_regex_match(batch_root)

    return placed


def remove_redundant_regex_match(batch_root: Path) -> list[Path]:
    """
    Leave a single `regex_match = regex.match` in each version directory.

    Version directories are visited in KNOWN_API_VERSIONS order and files
    in lexicographic name order. The first file carrying the declaration
    keeps it; every later one has its first occurrence removed.
    Returns the files that were rewritten.
    """
    batch_root = Path(batch_root)
    declaration = REGEX_MATCH_DECLARATION.encode()
    edited = []

    for api_version in KNOWN_API_VERSIONS:
        dir_path = batch_root / api_version
        try:
            # Name order, not conversion order, decides which file keeps the declaration
            names = sorted(os.listdir(dir_path))
        except OSError:
            continue

        found = False
        for name in names:
            if not name.endswith(KCL_EXTENSION):
                continue

            file_path = dir_path / name
            try:
                content = file_path.read_bytes()
            except OSError:
                continue

            if declaration not in content:
                continue

            if not found:
                found = True
                continue

            new_content = content.replace(declaration, b"", 1)
            try:
                file_path.write_bytes(new_content)
            except OSError as e:
                log.error("Failed to write file '%s': %s", file_path, e)
                continue

            log.debug("Removed '%s' from '%s'", REGEX_MATCH_DECLARATION, file_path)
            edited.append(file_path)

    return edited


def find_empty_dirs(root: Path) -> list[Path]:
    """Return empty directories under root (root included), parents before children."""
    empty_dirs = []
    for dirpath, dirnames, filenames in os.walk(root):
        if not dirnames and not filenames:
            empty_dirs.append(Path(dirpath))
    return empty_dirs


def remove_empty_dirs(root: Path) -> list[Path]:
    """
    Remove empty directories under root until none are left.

    Removing a leaf can empty its parent, so the tree is rescanned after
    each pass. Stops early if a pass cannot remove anything.
    Returns the removed directories.
    """
    root = Path(root)
    removed = []

    while True:
        empty_dirs = find_empty_dirs(root)
        if not empty_dirs:
            break

        removed_this_pass = 0
        for path in reversed(empty_dirs):
            log.debug("Removing empty directory '%s'...", path)
            try:
                path.rmdir()
            except OSError as e:
                log.error("Failed to remove directory '%s': %s", path, e)
                continue
            removed.append(path)
            removed_this_pass += 1

        if removed_this_pass == 0:
            break

    return removed


def main():
    parser = argparse.ArgumentParser(description="Organize generated KCL files by API version")
    parser.add_argument("batch_root", help="Module output directory")
    parser.add_argument("--debug", "--verbose", dest="verbose", action="store_true", help="Enable debugging")

    args = parser.parse_args()
    configure_logging(verbose=args.verbose)

    batch_root = Path(args.batch_root)
    placed = move_kcl_files(batch_root)
    removed = remove_empty_dirs(batch_root)

    print(f"Organized {len(placed)} files, removed {len(removed)} empty directories")


if __name__ == "__main__":
    main()
