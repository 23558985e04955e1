"""Shared test fixtures."""

import hashlib
from typing import Dict, List, Optional

import pytest

from ghexec.core.errors import DownloadError, NotFoundError
from ghexec.core.models import PlatformHint, ReleaseQuery


def release_payload(tag: str, names: List[str], base: str = "https://example.test/dl") -> Dict:
    """GitHub-shaped release object, with some fields the client never reads"""
    return {
        "url": f"https://api.example.test/releases/{tag}",
        "tag_name": tag,
        "name": f"Release {tag}",
        "draft": False,
        "assets": [
            {
                "id": index,
                "name": name,
                "size": 123,
                "browser_download_url": f"{base}/{tag}/{name}",
            }
            for index, name in enumerate(names)
        ],
    }


def sha256_hex(data: bytes) -> str:
    return hashlib.sha256(data).hexdigest()


class FakeClient:
    """In-memory stand-in for GitHubClient that records every network call"""

    def __init__(self):
        self.releases: Dict = {}
        self.files: Dict[str, bytes] = {}
        self.failing_urls = set()
        self.release_calls: List[ReleaseQuery] = []
        self.downloads: List[str] = []
        self.text_calls: List[str] = []

    def add_release(self, repo: str, tag: str, names: List[str], version: Optional[str] = None):
        payload = release_payload(tag, names)
        self.releases[(repo, version or tag)] = payload
        for asset in payload["assets"]:
            self.files.setdefault(asset["browser_download_url"], f"{asset['name']}@{tag}".encode())
        return payload

    def set_latest(self, repo: str, tag: str, names: List[str]):
        payload = self.add_release(repo, tag, names)
        self.releases[(repo, "latest")] = payload
        return payload

    def url_for(self, repo: str, version: str, name: str) -> str:
        for asset in self.releases[(repo, version)]["assets"]:
            if asset["name"] == name:
                return asset["browser_download_url"]
        raise KeyError(name)

    def release_url(self, query: ReleaseQuery) -> str:
        return f"https://api.example.test/repos/{query.repo}/releases/{query.version}"

    def get_release(self, query: ReleaseQuery):
        self.release_calls.append(query)
        try:
            return self.releases[(query.repo, query.version)]
        except KeyError:
            raise NotFoundError(
                f"Repository or release not found: {query.repo}@{query.version}"
            ) from None

    def get_text(self, url: str) -> str:
        self.text_calls.append(url)
        if url in self.failing_urls:
            raise DownloadError(f"Failed to download {url}")
        return self.files[url].decode()

    def download(self, url: str, dest: str) -> None:
        self.downloads.append(url)
        if url in self.failing_urls:
            with open(dest, "wb") as f:
                f.write(b"partial")
            raise DownloadError(f"Failed to download {url}")
        with open(dest, "wb") as f:
            f.write(self.files[url])

    @property
    def network_calls(self) -> int:
        return len(self.downloads) + len(self.text_calls)


@pytest.fixture
def client() -> FakeClient:
    return FakeClient()


@pytest.fixture
def ubuntu_hint() -> PlatformHint:
    return PlatformHint(
        distro_version="ubuntu22.04",
        distro="ubuntu",
        kernel_tokens=("linux",),
        arch="x86_64",
    )


@pytest.fixture
def bare_hint() -> PlatformHint:
    """No distribution detection, Linux kernel only"""
    return PlatformHint(kernel_tokens=("linux",))
