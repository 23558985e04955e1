#!/usr/bin/env python3

"""
github-exec - Execute binaries from GitHub releases
Features:
- Picks the release asset that best matches the local OS
- Caches downloads per repository and asset, refreshed when the latest tag moves
- Verifies SHA-256 checksums published alongside the release
- Hands the cached executable the remaining command-line arguments
"""

__version__ = "0.1.0"

from .core.errors import (
    GithubExecError,
    InvalidInput,
    NotFoundError,
    NoAssetsError,
    DownloadError,
    IntegrityError,
    FilesystemError,
)
from .core.fetcher import prepare_executable, resolve_local_path, fetch_and_verify
from .core.resolver import resolve_release, select_asset, find_checksum
from .utils.cache import clear_cache, get_cache_info
from .cli.cli import run_cli
