#!/usr/bin/env python3

import os
import shutil
import signal
import tempfile
from contextlib import contextmanager
from typing import Dict, Iterator, Optional

from ..core.errors import FilesystemError, InvalidInput
from .system import get_real_home

# Default paths
CACHE_DIR = os.path.join(get_real_home(), ".cache/github-exec")
EPHEMERAL_PREFIX = "github-exec-"

PAYLOAD_SUFFIX = ".bin"
TAG_SUFFIX = ".version"


class CacheEntry:
    """Payload file plus release-tag sidecar for one (repo, asset) key"""

    def __init__(self, root: str, repo: str, asset_name: str):
        if (
            not asset_name
            or asset_name in (".", "..")
            or "/" in asset_name
            or "\\" in asset_name
        ):
            raise InvalidInput(f"Refusing to cache asset with unsafe name: {asset_name!r}")
        owner, name = repo.split("/", 1)
        self.root = root
        self.repo = repo
        self.asset_name = asset_name
        self.directory = os.path.join(root, owner, name)
        self.payload_path = os.path.join(self.directory, asset_name + PAYLOAD_SUFFIX)
        self.tag_path = os.path.join(self.directory, asset_name + TAG_SUFFIX)

    def __repr__(self) -> str:
        return f"CacheEntry({self.repo!r}, {self.asset_name!r}, root={self.root!r})"

    def has_payload(self) -> bool:
        return os.path.isfile(self.payload_path)

    def read_tag(self) -> Optional[str]:
        """Return the recorded release tag, or None if missing or unreadable"""
        try:
            with open(self.tag_path, "r") as f:
                tag = f.read().strip()
        except (OSError, UnicodeDecodeError):
            return None
        return tag or None

    def write_tag(self, tag: str) -> None:
        """Record tag atomically; a failed write leaves no temp file behind"""
        tmp_path = None
        try:
            fd, tmp_path = tempfile.mkstemp(
                dir=self.directory, prefix=f".{self.asset_name}.", suffix=".version.tmp"
            )
            with os.fdopen(fd, "w") as f:
                f.write(tag + "\n")
            os.replace(tmp_path, self.tag_path)
        except OSError as e:
            raise FilesystemError(
                f"Failed to write version file: {e}", context={"path": self.tag_path}
            ) from e
        finally:
            if tmp_path is not None and os.path.exists(tmp_path):
                os.remove(tmp_path)

    def ensure_directory(self) -> None:
        try:
            os.makedirs(self.directory, exist_ok=True)
        except OSError as e:
            raise FilesystemError(
                f"Cannot create cache directory: {e}", context={"path": self.directory}
            ) from e


def ensure_cache_dir(root: str) -> None:
    """Ensure the cache directory exists"""
    try:
        os.makedirs(root, exist_ok=True)
    except OSError as e:
        raise FilesystemError(
            f"Cannot create cache directory: {e}", context={"path": root}
        ) from e


def _raise_system_exit(signum, frame):
    raise SystemExit(128 + signum)


@contextmanager
def ephemeral_cache_dir() -> Iterator[str]:
    """Process-scoped cache root, removed on every exit path.

    SIGTERM and SIGHUP are turned into SystemExit while inside the scope so
    the removal in ``finally`` still runs when the process is terminated.
    """
    try:
        path = tempfile.mkdtemp(prefix=EPHEMERAL_PREFIX)
    except OSError as e:
        raise FilesystemError(f"Cannot create temporary cache directory: {e}") from e

    previous = {}
    for name in ("SIGTERM", "SIGHUP"):
        signum = getattr(signal, name, None)
        if signum is None:
            continue
        try:
            previous[signum] = signal.signal(signum, _raise_system_exit)
        except ValueError:
            # not on the main thread
            pass

    try:
        yield path
    finally:
        shutil.rmtree(path, ignore_errors=True)
        for signum, handler in previous.items():
            signal.signal(signum, handler)


def clear_cache(root: str = CACHE_DIR) -> bool:
    """Clear all cached executables under root"""
    if not os.path.isdir(root):
        return False

    try:
        for item in os.listdir(root):
            item_path = os.path.join(root, item)
            if os.path.isdir(item_path) and not os.path.islink(item_path):
                shutil.rmtree(item_path)
            else:
                os.remove(item_path)
    except OSError as e:
        raise FilesystemError(f"Failed to clear cache: {e}", context={"path": root}) from e
    return True


def get_cache_info(root: str = CACHE_DIR) -> Dict:
    """Get information about the cache"""
    info = {
        "exists": os.path.isdir(root),
        "path": root,
        "size_bytes": 0,
        "entries": 0,
    }

    if not info["exists"]:
        return info

    for dirpath, _, filenames in os.walk(root):
        for filename in filenames:
            file_path = os.path.join(dirpath, filename)
            try:
                info["size_bytes"] += os.path.getsize(file_path)
            except OSError:
                continue
            if filename.endswith(PAYLOAD_SUFFIX):
                info["entries"] += 1

    return info
