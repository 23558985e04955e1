#!/usr/bin/env python3

import re
from typing import Iterable, Optional

from ..utils import console
from .errors import DownloadError, NoAssetsError
from .github import GitHubClient
from .models import (
    AssetDescriptor,
    PlatformHint,
    ReleaseMetadata,
    ReleaseQuery,
    SelectedAsset,
)

# checksum.txt, checksums.txt, or anything mentioning sha256
CHECKSUM_ASSET_PATTERN = re.compile(r"checksums?.txt|sha256", re.IGNORECASE)
SHA256_HEX = re.compile(r"^[0-9a-fA-F]{64}$")


def resolve_release(client: GitHubClient, query: ReleaseQuery) -> ReleaseMetadata:
    """Look up the release a query points at.

    Raises NotFoundError for an unknown repo/tag, NoAssetsError for a
    release without downloadable assets.
    """
    console.info(f"📥 Fetching release info for {query.repo}...")
    payload = client.get_release(query)

    try:
        metadata = ReleaseMetadata.from_api(payload)
    except ValueError as e:
        raise DownloadError(
            f"Unexpected release info for {query.repo}@{query.version}: {e}",
            context={"url": client.release_url(query)},
        ) from e

    if not metadata.assets:
        raise NoAssetsError(
            f"No assets found in release {metadata.tag} of {query.repo}",
            context={"repo": query.repo, "version": query.version},
        )

    console.info("Available assets:")
    for name in metadata.asset_names():
        console.info(f"  - {name}")
    return metadata


def _first_containing(
    assets: Iterable[AssetDescriptor], token: Optional[str]
) -> Optional[AssetDescriptor]:
    if not token:
        return None
    needle = token.lower()
    for asset in assets:
        if needle in asset.name.lower():
            return asset
    return None


def select_asset(metadata: ReleaseMetadata, hint: PlatformHint) -> AssetDescriptor:
    """Pick the asset for this machine.

    Priority, first hit wins, case-insensitive substring match:
    distro+version, distro family, kernel family, then the first asset.
    Architecture tokens are not consulted.
    """
    if not metadata.assets:
        raise NoAssetsError(f"No assets found in release {metadata.tag}")

    tokens = [hint.distro_version, hint.distro] + list(hint.kernel_tokens)
    for token in tokens:
        match = _first_containing(metadata.assets, token)
        if match is not None:
            return match

    return metadata.assets[0]


def find_checksum_asset(metadata: ReleaseMetadata) -> Optional[AssetDescriptor]:
    for asset in metadata.assets:
        if CHECKSUM_ASSET_PATTERN.search(asset.name):
            return asset
    return None


def parse_checksum(text: str, asset_name: str) -> Optional[str]:
    """Find the digest for asset_name in sha256sum-style text.

    A line matches when its filename field equals the asset name, ignoring
    case, a leading ``*`` binary marker and a leading ``./``.
    """
    wanted = asset_name.lower()
    for line in text.splitlines():
        fields = line.split()
        if len(fields) < 2:
            continue
        filename = fields[1]
        if filename.startswith("*"):
            filename = filename[1:]
        if filename.startswith("./"):
            filename = filename[2:]
        if filename.lower() != wanted:
            continue

        digest = fields[0]
        if not SHA256_HEX.match(digest):
            console.warn(f"Ignoring malformed checksum for {asset_name}: {digest}")
            return None
        return digest.lower()
    return None


def find_checksum(
    client: GitHubClient, metadata: ReleaseMetadata, asset_name: str
) -> Optional[str]:
    """Expected SHA-256 for asset_name, or None when the release publishes none"""
    checksum_asset = find_checksum_asset(metadata)
    if checksum_asset is None:
        return None

    console.info(f"Fetching checksum file: {checksum_asset.name}")
    checksum = parse_checksum(client.get_text(checksum_asset.url), asset_name)
    if checksum is None:
        console.warn(f"{checksum_asset.name} has no entry for {asset_name}, skipping verification")
    return checksum


def resolve_asset(
    client: GitHubClient,
    metadata: ReleaseMetadata,
    asset: AssetDescriptor,
) -> SelectedAsset:
    """Pair an asset with its published checksum, fetching the checksum list"""
    return SelectedAsset(asset=asset, checksum=find_checksum(client, metadata, asset.name))
