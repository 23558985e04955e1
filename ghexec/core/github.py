#!/usr/bin/env python3

from typing import Any, Dict, Optional
from urllib.parse import quote

import requests

from .. import __version__
from .errors import DownloadError, FilesystemError, NotFoundError
from .models import ReleaseQuery

CHUNK_SIZE = 64 * 1024


class GitHubClient:
    """Thin requests wrapper for the release API and asset downloads"""

    def __init__(
        self,
        api_url: str = "https://api.github.com",
        token: Optional[str] = None,
        timeout: Optional[float] = None,
        session: Optional[requests.Session] = None,
    ):
        self.api_url = api_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers["User-Agent"] = f"github-exec/{__version__}"
        if token:
            self.session.headers["Authorization"] = f"token {token}"

    def release_url(self, query: ReleaseQuery) -> str:
        repo_path = f"{quote(query.owner, safe='')}/{quote(query.name, safe='')}"
        if query.is_latest:
            return f"{self.api_url}/repos/{repo_path}/releases/latest"
        return f"{self.api_url}/repos/{repo_path}/releases/tags/{quote(query.version, safe='')}"

    def get_release(self, query: ReleaseQuery) -> Dict[str, Any]:
        """Fetch the raw release object for a query"""
        url = self.release_url(query)
        not_found = NotFoundError(
            f"Repository or release not found: {query.repo}@{query.version}",
            context={"repo": query.repo, "version": query.version},
        )

        try:
            response = self.session.get(
                url,
                headers={"Accept": "application/vnd.github+json"},
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise DownloadError(
                f"Failed to fetch release info for {query.repo}@{query.version}: {e}",
                context={"url": url},
            ) from e

        if response.status_code == 404:
            raise not_found

        try:
            response.raise_for_status()
            data = response.json()
        except requests.HTTPError as e:
            raise DownloadError(
                f"Failed to fetch release info for {query.repo}@{query.version}: {e}",
                context={"url": url},
            ) from e
        except ValueError as e:
            raise DownloadError(
                f"Release info for {query.repo}@{query.version} is not valid JSON",
                context={"url": url},
            ) from e

        if isinstance(data, dict) and data.get("message") == "Not Found":
            raise not_found
        return data

    def get_text(self, url: str) -> str:
        """Fetch a small text file such as a checksum list"""
        try:
            response = self.session.get(url, timeout=self.timeout)
            response.raise_for_status()
        except requests.RequestException as e:
            raise DownloadError(f"Failed to download {url}: {e}", context={"url": url}) from e
        return response.text

    def download(self, url: str, dest: str) -> None:
        """Stream url into dest, which is created or truncated"""
        try:
            with self.session.get(url, stream=True, timeout=self.timeout) as response:
                response.raise_for_status()
                try:
                    with open(dest, "wb") as f:
                        for chunk in response.iter_content(CHUNK_SIZE):
                            f.write(chunk)
                except OSError as e:
                    raise FilesystemError(
                        f"Failed to write download: {e}", context={"path": dest}
                    ) from e
        except requests.RequestException as e:
            raise DownloadError(f"Failed to download {url}: {e}", context={"url": url}) from e
