#!/usr/bin/env python3

from typing import Dict, Optional


class GithubExecError(Exception):
    """Base error for every failure that ends an invocation"""

    code = "E_GITHUB_EXEC"

    def __init__(
        self,
        message: str,
        hint: Optional[str] = None,
        context: Optional[Dict[str, str]] = None,
    ):
        super().__init__(message)
        self.hint = hint
        self.context = dict(context or {})

    def __str__(self) -> str:
        parts = [super().__str__()]
        for key, value in self.context.items():
            if value:
                parts.append(f"  {key}: {value}")
        if self.hint:
            parts.append(f"Hint: {self.hint}")
        return "\n".join(parts)


class InvalidInput(GithubExecError):
    """Malformed repository identifier, arguments or config file"""

    code = "E_INVALID_INPUT"


class NotFoundError(GithubExecError):
    """Repository or tagged release does not exist remotely"""

    code = "E_NOT_FOUND"


class NoAssetsError(GithubExecError):
    """Release exists but has nothing to download"""

    code = "E_NO_ASSETS"


class DownloadError(GithubExecError):
    """Network or transport failure fetching metadata, an asset or a checksum file"""

    code = "E_DOWNLOAD"


class IntegrityError(GithubExecError):
    """Downloaded payload does not match the published checksum"""

    code = "E_INTEGRITY"


class FilesystemError(GithubExecError):
    """Cache directory or payload could not be created, written or moved"""

    code = "E_FILESYSTEM"
