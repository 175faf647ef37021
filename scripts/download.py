#!/usr/bin/env python3
"""
Download raw CRD sources.
"""

from pathlib import Path

import requests
from common import REQUEST_TIMEOUT, DownloadError, get_logger

log = get_logger("download")

CHUNK_SIZE = 64 * 1024


def download_file(url: str, dest_path: Path) -> Path:
    """
    Stream the body of url into dest_path, overwriting any existing file.

    Raises DownloadError on network errors, non-2xx responses, or local
    write failures.
    """
    dest_path = Path(dest_path)

    try:
        dest_path.parent.mkdir(parents=True, exist_ok=True)
        with requests.get(url, stream=True, timeout=REQUEST_TIMEOUT) as response:
            response.raise_for_status()
            with open(dest_path, "wb") as f:
                for chunk in response.iter_content(chunk_size=CHUNK_SIZE):
                    if chunk:
                        f.write(chunk)

    except requests.RequestException as e:
        raise DownloadError(f"Download failed for {url}: {e}") from e
    except OSError as e:
        raise DownloadError(f"Download failed for {url}: cannot write {dest_path}: {e}") from e

    return dest_path
