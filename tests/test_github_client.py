import json
from pathlib import Path

import pytest
import requests

from ghexec.core.errors import DownloadError, NotFoundError
from ghexec.core.github import GitHubClient
from ghexec.core.models import ReleaseQuery


def make_response(status: int, body: bytes, url: str = "https://api.example.test") -> requests.Response:
    response = requests.Response()
    response.status_code = status
    response._content = body
    response._content_consumed = True
    response.url = url
    response.reason = "Not Found" if status == 404 else "Error"
    response.encoding = "utf-8"
    return response


class FakeSession:
    def __init__(self, responses=None, exc=None):
        self.headers = {}
        self.responses = list(responses or [])
        self.exc = exc
        self.requests = []

    def get(self, url, **kwargs):
        self.requests.append((url, kwargs))
        if self.exc is not None:
            raise self.exc
        return self.responses.pop(0)


def test_release_urls():
    client = GitHubClient(api_url="https://api.github.com/", session=FakeSession())
    assert client.release_url(ReleaseQuery("acme/tool")) == (
        "https://api.github.com/repos/acme/tool/releases/latest"
    )
    assert client.release_url(ReleaseQuery("acme/tool", "v1.2.3")) == (
        "https://api.github.com/repos/acme/tool/releases/tags/v1.2.3"
    )


def test_release_url_escapes_tag():
    client = GitHubClient(session=FakeSession())
    url = client.release_url(ReleaseQuery("acme/tool", "v1#beta"))
    assert url.endswith("/releases/tags/v1%23beta")
    assert requests.Request("GET", url).prepare().url.endswith("/tags/v1%23beta")

    assert client.release_url(ReleaseQuery("acme/tool", "v1/../x")).endswith(
        "/releases/tags/v1%2F..%2Fx"
    )
    assert client.release_url(ReleaseQuery("acme/tool", "50%")).endswith("/tags/50%25")


def test_headers_and_timeout():
    session = FakeSession([make_response(200, b'{"tag_name": "v1", "assets": []}')])
    client = GitHubClient(token="secret", timeout=12, session=session)

    assert client.get_release(ReleaseQuery("acme/tool"))["tag_name"] == "v1"
    assert session.headers["Authorization"] == "token secret"
    assert session.headers["User-Agent"].startswith("github-exec/")
    _, kwargs = session.requests[0]
    assert kwargs["timeout"] == 12
    assert kwargs["headers"]["Accept"] == "application/vnd.github+json"


def test_not_found_status():
    body = json.dumps({"message": "Not Found"}).encode()
    client = GitHubClient(session=FakeSession([make_response(404, body)]))
    with pytest.raises(NotFoundError) as excinfo:
        client.get_release(ReleaseQuery("acme/ghost", "v9.9.9"))
    assert "acme/ghost@v9.9.9" in str(excinfo.value)


def test_not_found_message_body():
    body = json.dumps({"message": "Not Found", "documentation_url": "x"}).encode()
    client = GitHubClient(session=FakeSession([make_response(200, body)]))
    with pytest.raises(NotFoundError):
        client.get_release(ReleaseQuery("acme/ghost"))


def test_server_error():
    client = GitHubClient(session=FakeSession([make_response(500, b"oops")]))
    with pytest.raises(DownloadError):
        client.get_release(ReleaseQuery("acme/tool"))


def test_invalid_json():
    client = GitHubClient(session=FakeSession([make_response(200, b"<html>")]))
    with pytest.raises(DownloadError):
        client.get_release(ReleaseQuery("acme/tool"))


def test_transport_error():
    session = FakeSession(exc=requests.ConnectionError("unreachable"))
    client = GitHubClient(session=session)
    with pytest.raises(DownloadError) as excinfo:
        client.download("https://example.test/tool", "/nonexistent/tool")
    assert "https://example.test/tool" in str(excinfo.value)


def test_download_writes_file(tmp_path: Path):
    session = FakeSession([make_response(200, b"binary-bytes", url="https://example.test/tool")])
    client = GitHubClient(session=session)
    dest = tmp_path / "tool"

    client.download("https://example.test/tool", str(dest))

    assert dest.read_bytes() == b"binary-bytes"
    _, kwargs = session.requests[0]
    assert kwargs["stream"] is True


def test_download_http_error(tmp_path: Path):
    client = GitHubClient(session=FakeSession([make_response(404, b"", url="https://example.test/x")]))
    with pytest.raises(DownloadError):
        client.download("https://example.test/x", str(tmp_path / "x"))


def test_get_text():
    client = GitHubClient(session=FakeSession([make_response(200, b"abc  tool\n")]))
    assert client.get_text("https://example.test/checksums.txt") == "abc  tool\n"
