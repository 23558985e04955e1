#!/usr/bin/env python3

import re
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple

from .errors import InvalidInput

LATEST = "latest"

# GitHub owner and repository names
_REPO_PART = re.compile(r"^[A-Za-z0-9_.-]+$")


@dataclass(frozen=True)
class ReleaseQuery:
    """What to look up: an owner/name pair and a version selector"""

    repo: str
    version: str = LATEST

    def __post_init__(self):
        if not self.repo or self.repo.count("/") != 1:
            raise InvalidInput(
                f"Invalid repository identifier: {self.repo!r}",
                hint="Use the owner/name form, e.g. zacuke/run-node",
            )
        for part in self.repo.split("/"):
            if not _REPO_PART.match(part) or part in (".", ".."):
                raise InvalidInput(
                    f"Invalid repository identifier: {self.repo!r}",
                    hint="Use the owner/name form, e.g. zacuke/run-node",
                )
        if not self.version:
            raise InvalidInput("Version selector must not be empty")

    @property
    def owner(self) -> str:
        return self.repo.split("/")[0]

    @property
    def name(self) -> str:
        return self.repo.split("/")[1]

    @property
    def is_latest(self) -> bool:
        return self.version == LATEST


@dataclass(frozen=True)
class AssetDescriptor:
    name: str
    url: str


@dataclass(frozen=True)
class ReleaseMetadata:
    """A resolved release: authoritative tag plus assets in API order"""

    tag: str
    assets: Tuple[AssetDescriptor, ...] = ()

    @classmethod
    def from_api(cls, payload: Dict[str, Any]) -> "ReleaseMetadata":
        """Build from a GitHub release object, ignoring unknown fields.

        Raises ValueError when a field the release shape requires is
        missing or has the wrong type.
        """
        if not isinstance(payload, dict):
            raise ValueError("release payload is not an object")

        tag = payload.get("tag_name")
        if not isinstance(tag, str) or not tag:
            raise ValueError("release has no tag_name")

        raw_assets = payload.get("assets")
        if raw_assets is None:
            raw_assets = []
        if not isinstance(raw_assets, list):
            raise ValueError("release assets is not a list")

        assets = []
        for item in raw_assets:
            if not isinstance(item, dict):
                raise ValueError("release asset is not an object")
            name = item.get("name")
            url = item.get("browser_download_url")
            if not isinstance(name, str) or not name:
                raise ValueError("release asset has no name")
            if not isinstance(url, str) or "://" not in url:
                raise ValueError(f"asset {name} has no absolute download URL")
            assets.append(AssetDescriptor(name=name, url=url))

        return cls(tag=tag, assets=tuple(assets))

    def asset_names(self) -> Tuple[str, ...]:
        return tuple(asset.name for asset in self.assets)


@dataclass(frozen=True)
class SelectedAsset:
    asset: AssetDescriptor
    checksum: Optional[str] = None

    @property
    def name(self) -> str:
        return self.asset.name

    @property
    def url(self) -> str:
        return self.asset.url


@dataclass(frozen=True)
class PlatformHint:
    """Tokens describing the invoking machine, most specific first"""

    distro_version: Optional[str] = None
    distro: Optional[str] = None
    kernel_tokens: Tuple[str, ...] = ("linux",)
    arch: Optional[str] = None


@dataclass(frozen=True)
class ExecutionPlan:
    """Resolved executable and the argv to hand it"""

    path: str
    args: Tuple[str, ...] = field(default_factory=tuple)

    @property
    def argv(self) -> Tuple[str, ...]:
        return (self.path,) + tuple(self.args)
