#!/usr/bin/env python3

import hashlib
import os
import stat
import tempfile
from typing import Optional

from ..utils import console
from ..utils.cache import CacheEntry, ensure_cache_dir
from ..utils.config import ExecConfig
from .errors import DownloadError, FilesystemError, IntegrityError
from .github import GitHubClient
from .models import (
    LATEST,
    AssetDescriptor,
    ExecutionPlan,
    PlatformHint,
    ReleaseMetadata,
    ReleaseQuery,
)
from .resolver import resolve_asset, resolve_release, select_asset

EXECUTABLE_BITS = stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH


def sha256_file(path: str) -> str:
    digest = hashlib.sha256()
    with open(path, "rb") as f:
        for chunk in iter(lambda: f.read(1024 * 1024), b""):
            digest.update(chunk)
    return digest.hexdigest()


def download_reason(
    entry: CacheEntry, tag: str, force: bool, version: str
) -> Optional[str]:
    """Why the cached payload cannot be reused, or None if it can"""
    if force:
        return "forced"
    if not entry.has_payload():
        return "not cached"
    if version != LATEST:
        # explicit tags are treated as immutable
        return None
    if entry.read_tag() != tag:
        return "stale"
    return None


def fetch_and_verify(
    client: GitHubClient,
    url: str,
    entry: CacheEntry,
    tag: str,
    expected_checksum: Optional[str] = None,
) -> str:
    """Download url into the cache entry, verifying it before it becomes visible.

    The payload is written to a temporary file in the entry's directory and
    only moved over the real path once complete and verified, so a failure
    leaves any previously cached payload untouched.
    """
    entry.ensure_directory()
    try:
        fd, tmp_path = tempfile.mkstemp(
            dir=entry.directory, prefix=f".{entry.asset_name}.", suffix=".tmp"
        )
        os.close(fd)
    except OSError as e:
        raise FilesystemError(
            f"Cannot create temporary file: {e}", context={"path": entry.directory}
        ) from e

    try:
        try:
            client.download(url, tmp_path)
        except DownloadError as e:
            e.context.setdefault("asset", entry.asset_name)
            raise

        if expected_checksum:
            console.info("🔍 Validating checksum...")
            actual = sha256_file(tmp_path)
            if actual.lower() != expected_checksum.lower():
                raise IntegrityError(
                    f"Checksum mismatch for {entry.asset_name}! "
                    f"Expected {expected_checksum.lower()} but got {actual}",
                    context={"url": url},
                )

        try:
            mode = os.stat(tmp_path).st_mode
            os.chmod(tmp_path, mode | stat.S_IRUSR | stat.S_IRGRP | stat.S_IROTH | EXECUTABLE_BITS)
            os.replace(tmp_path, entry.payload_path)
        except OSError as e:
            raise FilesystemError(
                f"Failed to move download into the cache: {e}",
                context={"path": entry.payload_path},
            ) from e
    finally:
        if os.path.exists(tmp_path):
            os.remove(tmp_path)

    entry.write_tag(tag)
    return entry.payload_path


def resolve_local_path(
    client: GitHubClient,
    entry: CacheEntry,
    metadata: ReleaseMetadata,
    asset: AssetDescriptor,
    force: bool = False,
    version: str = LATEST,
) -> str:
    """Return a path to a runnable copy of asset, downloading only when needed"""
    reason = download_reason(entry, metadata.tag, force, version)
    if reason is None:
        console.info(f"📦 Using cached version: {entry.payload_path}")
        return entry.payload_path

    if reason == "stale":
        console.info("Cached version mismatch, refreshing...")

    selected = resolve_asset(client, metadata, asset)
    console.info(f"⬇️  Downloading {selected.name} ({metadata.tag})...")
    console.info(f"Download URL: {selected.url}")
    path = fetch_and_verify(client, selected.url, entry, metadata.tag, selected.checksum)
    console.success(f"✅ Download completed: {path}")
    return path


def prepare_executable(
    config: ExecConfig,
    client: GitHubClient,
    hint: PlatformHint,
    cache_root: Optional[str] = None,
) -> ExecutionPlan:
    """Resolve, select, fetch if needed, and return what to run"""
    query = ReleaseQuery(repo=config.repo, version=config.version)
    root = cache_root or config.cache_dir
    ensure_cache_dir(root)

    metadata = resolve_release(client, query)
    asset = select_asset(metadata, hint)
    console.info(f"Selected asset: {asset.name}")

    entry = CacheEntry(root, query.repo, asset.name)
    console.debug(f"Platform: {hint}")
    console.debug(f"Cache entry: {entry.payload_path}")
    path = resolve_local_path(
        client, entry, metadata, asset, force=config.force, version=query.version
    )
    return ExecutionPlan(path=path, args=tuple(config.args))
