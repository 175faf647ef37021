#!/usr/bin/env python3
"""
Discover CRD files in a GitHub directory listing.

GitHub tree pages embed the directory contents as JSON inside a
`<script type="application/json" data-target="react-app.embeddedData">`
tag. Every `.yaml` entry in that listing is turned into a
raw.githubusercontent.com download link.

Usage:
    python discover.py https://github.com/cert-manager/cert-manager/tree/master/deploy/crds
"""

import argparse
import json
import sys

import requests
from bs4 import BeautifulSoup
from common import REQUEST_TIMEOUT, DiscoveryError, configure_logging, get_logger

log = get_logger("discover")

EMBEDDED_DATA_SELECTOR = 'script[type="application/json"][data-target="react-app.embeddedData"]'


def to_raw_base_url(url: str) -> str:
    """
    Turn a GitHub tree URL into the matching raw content base URL.

    https://github.com/owner/repo/tree/main/crds
    -> https://raw.githubusercontent.com/owner/repo/main/crds
    """
    raw_url = url.replace("https://github.com/", "https://raw.githubusercontent.com/", 1)
    return raw_url.replace("/tree/", "/", 1)


def parse_tree_items(html: str) -> list[dict]:
    """Return payload.tree.items from the page's embedded data block."""
    soup = BeautifulSoup(html, "lxml")

    script = soup.select_one(EMBEDDED_DATA_SELECTOR)
    if script is None:
        raise DiscoveryError("JSON data not found.")

    try:
        data = json.loads(script.get_text())
    except json.JSONDecodeError as e:
        raise DiscoveryError(f"Failed to parse JSON: {e}") from e

    try:
        items = data["payload"]["tree"]["items"]
    except (KeyError, TypeError) as e:
        raise DiscoveryError(f"Unexpected JSON structure, missing {e}") from e

    if not isinstance(items, list):
        raise DiscoveryError("Unexpected JSON structure, tree items is not a list")

    return items


def extract_raw_links(url: str) -> dict[str, str]:
    """
    Map each .yaml file name in a GitHub directory page to its raw link.

    Raises DiscoveryError if the page can't be fetched or has no usable
    embedded listing.
    """
    log.debug("Fetching content from: %s", url)

    try:
        response = requests.get(url, timeout=REQUEST_TIMEOUT)
    except requests.RequestException as e:
        raise DiscoveryError(f"Failed to fetch URL: {e}") from e

    if response.status_code != 200:
        raise DiscoveryError(f"Request failed: {response.status_code} {response.reason}")

    items = parse_tree_items(response.text)

    base_raw_url = to_raw_base_url(url).rstrip("/")
    log.debug("Raw data URL: %s", base_raw_url)

    crds = {}
    for item in items:
        name = item.get("name", "") if isinstance(item, dict) else ""
        if name.endswith(".yaml"):
            raw_link = f"{base_raw_url}/{name}"
            crds[name] = raw_link
            log.debug("Found raw link: %s", raw_link)

    return crds


def main():
    parser = argparse.ArgumentParser(description="List raw CRD links in a GitHub directory")
    parser.add_argument("url", help="GitHub directory URL")
    parser.add_argument("--debug", "--verbose", dest="verbose", action="store_true", help="Enable debugging")

    args = parser.parse_args()
    logger = configure_logging(verbose=args.verbose)

    try:
        crds = extract_raw_links(args.url)
    except DiscoveryError as e:
        logger.error("%s", e)
        sys.exit(1)

    print(json.dumps(crds, indent=4))


if __name__ == "__main__":
    main()
