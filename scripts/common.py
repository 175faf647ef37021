#!/usr/bin/env python3
"""
Common utilities for CRD to KCL conversion.

This module contains shared functionality used across all conversion scripts:
- API version classification
- Job configuration loading and saving
- Logging setup
- Error types
"""

import json
import logging
import re
from pathlib import Path

import yaml

# =============================================================================
# CONSTANTS
# =============================================================================

# Declaration order matters: deduplication walks version directories in this order.
KNOWN_API_VERSIONS = [
    "v1", "v2", "v3", "v4", "v5", "v6", "v7", "v8", "v9", "v10",
    "v1alpha1", "v1alpha2", "v1alpha3", "v1alpha4", "v1alpha5",
    "v2alpha1", "v2alpha2", "v2alpha3", "v2alpha4", "v2alpha5",
    "v3alpha1", "v3alpha2", "v3alpha3", "v3alpha4", "v3alpha5",
    "v1beta1", "v1beta2", "v1beta3", "v1beta4", "v1beta5",
    "v2beta1", "v2beta2", "v2beta3", "v2beta4", "v2beta5",
    "v3beta1", "v3beta2", "v3beta3", "v3beta4", "v3beta5",
]

UNKNOWN_API_VERSION = "unknown"

KCL_EXTENSION = ".k"
CRD_EXTENSION = ".yaml"

# Emitted by `kcl import` in every file that uses regex checks; KCL only
# allows one definition per package directory.
REGEX_MATCH_DECLARATION = "regex_match = regex.match"

REQUEST_TIMEOUT = 30

_API_VERSION_PATTERN = re.compile(r"_v([0-9a-zA-Z]+)")

# =============================================================================
# ERRORS
# =============================================================================


class CRDToKCLError(Exception):
    """Base class for errors that stop a conversion run."""


class ConfigError(CRDToKCLError):
    """Job configuration is missing or malformed."""


class DownloadError(CRDToKCLError):
    """A CRD source could not be fetched."""


class ConversionError(CRDToKCLError):
    """The external converter failed for one CRD file."""


class DiscoveryError(CRDToKCLError):
    """CRD links could not be extracted from a listing page."""


# =============================================================================
# LOGGING
# =============================================================================

_LOGGER_NAME = "crdtokcl"


def get_logger(name: str | None = None) -> logging.Logger:
    """Return a logger under the crdtokcl hierarchy."""
    full_name = f"{_LOGGER_NAME}.{name}" if name else _LOGGER_NAME
    return logging.getLogger(full_name)


def configure_logging(verbose: bool = False) -> logging.Logger:
    """Configure console output; verbose switches on debug detail."""
    level = logging.DEBUG if verbose else logging.INFO
    logger = logging.getLogger(_LOGGER_NAME)
    logger.setLevel(level)
    logger.propagate = False

    # Reset handlers so repeated invocations don't duplicate output
    for handler in list(logger.handlers):
        logger.removeHandler(handler)

    handler = logging.StreamHandler()
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter("[crdtokcl] %(levelname)s %(message)s"))
    logger.addHandler(handler)

    return logger


log = get_logger("common")

# =============================================================================
# API VERSION CLASSIFICATION
# =============================================================================


def extract_api_version(name: str) -> str:
    """
    Extract the API version from a resource or file name.

    Only the first `_v<token>` occurrence is considered. Tokens that are not
    in KNOWN_API_VERSIONS resolve to UNKNOWN_API_VERSION.

    Example:
        extract_api_version("certificates_v1alpha1.k")  # "v1alpha1"
        extract_api_version("foo_v2_bar_v1beta1")        # "v2"
        extract_api_version("plainresource")             # "unknown"
    """
    log.debug("Checking name '%s' for API version...", name)

    match = _API_VERSION_PATTERN.search(name)
    if match:
        api_version = "v" + match.group(1)
        log.debug("Found API version: '%s'", api_version)
        if api_version in KNOWN_API_VERSIONS:
            log.debug("API version '%s' is known", api_version)
            return api_version

    log.debug("No known version found in name '%s'", name)
    return UNKNOWN_API_VERSION


def strip_crd_suffix(name: str) -> str:
    """Drop a trailing .yaml/.yml so discovered file names work as logical names."""
    for suffix in (".yaml", ".yml"):
        if name.endswith(suffix):
            return name[: -len(suffix)]
    return name


# =============================================================================
# JOB CONFIGURATION
# =============================================================================


def load_config(path: Path) -> dict:
    """
    Load a job configuration file.

    The file is JSON as written by save_config; YAML is accepted too since
    it is parsed with yaml.safe_load.
    """
    path = Path(path)
    try:
        with open(path) as f:
            config = yaml.safe_load(f)
    except FileNotFoundError as e:
        raise ConfigError(f"File not found: {path}. {e}") from e
    except (OSError, yaml.YAMLError) as e:
        raise ConfigError(f"Failed to decode config: {path}! {e}") from e

    if not isinstance(config, dict):
        raise ConfigError(f"Config {path} must be a mapping")
    module_name = config.get("moduleName")
    if not module_name:
        raise ConfigError(f"Config {path} is missing 'moduleName'")
    if not isinstance(module_name, str):
        raise ConfigError(f"Config {path}: 'moduleName' must be a string, got {module_name!r}")
    # The module name becomes a single directory under the modules dir
    if "/" in module_name or "\\" in module_name:
        raise ConfigError(f"Config {path}: 'moduleName' must not contain a path separator: {module_name!r}")

    crds = config.get("crds")
    if not isinstance(crds, dict):
        raise ConfigError(f"Config {path} is missing a 'crds' mapping")
    for name, url in crds.items():
        if not isinstance(name, str) or not isinstance(url, str):
            raise ConfigError(f"Config {path}: crds entry {name!r}: {url!r} must map a name to a URL string")

    return config


def save_config(config: dict, config_dir: Path) -> Path:
    """Write a job configuration to {config_dir}/{moduleName}.json."""
    config_dir = Path(config_dir)
    config_dir.mkdir(parents=True, exist_ok=True)

    config_path = config_dir / f"{config['moduleName']}.json"
    try:
        with open(config_path, "w") as f:
            json.dump(config, f, indent=4)
    except OSError as e:
        raise ConfigError(f"Failed to write JSON file {config_path}: {e}") from e

    return config_path
