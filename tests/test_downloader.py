import pytest
import requests

from hearthmods.core.download import ArchiveDownloader
from hearthmods.core.errors import FileCreateError, HTTPClientError


class _FakeResponse:
    def __init__(self, chunks, status_code=200, fail_midway=False):
        self.chunks = chunks
        self.status_code = status_code
        self.fail_midway = fail_midway
        self.headers = {"content-length": str(sum(len(c) for c in chunks))}

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")

    def iter_content(self, chunk_size=1):
        for chunk in self.chunks:
            yield chunk
        if self.fail_midway:
            raise requests.exceptions.ChunkedEncodingError("connection reset")

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False


class _FakeSession:
    def __init__(self, response):
        self.headers = {}
        self.response = response

    def get(self, url, **kwargs):
        return self.response


def test_download_writes_file_and_reports_progress(tmp_path):
    session = _FakeSession(_FakeResponse([b"abcd", b"", b"efgh"]))
    progress = []

    path = ArchiveDownloader(session=session).download(
        "https://thunderstore.io/package/download/A/B/1.0.0/",
        tmp_path / "A-B-1.0.0.zip",
        progress.append,
    )

    assert path.read_bytes() == b"abcdefgh"
    assert progress == [50, 100, 100]


def test_error_status(tmp_path):
    session = _FakeSession(_FakeResponse([], status_code=500))
    with pytest.raises(HTTPClientError):
        ArchiveDownloader(session=session).download("https://x.invalid/a.zip", tmp_path / "a.zip")


def test_interrupted_download(tmp_path):
    session = _FakeSession(_FakeResponse([b"abc"], fail_midway=True))
    with pytest.raises(HTTPClientError):
        ArchiveDownloader(session=session).download("https://x.invalid/a.zip", tmp_path / "a.zip")


def test_unwritable_destination(tmp_path):
    session = _FakeSession(_FakeResponse([b"abc"]))
    with pytest.raises(FileCreateError):
        ArchiveDownloader(session=session).download(
            "https://x.invalid/a.zip", tmp_path / "missing-dir" / "a.zip"
        )
