import json

import pytest
import requests

from hearthmods.core.api import ThunderstoreAPI
from hearthmods.core.errors import (
    ByteIOError,
    HTTPClientError,
    JSONParseError,
    PackageNotFoundError,
    ThunderstoreAPIError,
)

PACKAGE = {
    "namespace": "ValheimModding",
    "name": "Jotunn",
    "full_name": "ValheimModding-Jotunn",
    "owner": "ValheimModding",
    "package_url": "https://thunderstore.io/c/valheim/p/ValheimModding/Jotunn/",
    "date_created": "2021-02-17T19:04:54.813573Z",
    "date_updated": "2024-05-01T10:00:00Z",
    "rating_score": 150,
    "is_pinned": False,
    "is_deprecated": False,
    "total_downloads": 9000000,
    "latest": {
        "namespace": "ValheimModding",
        "name": "Jotunn",
        "version_number": "2.20.0",
        "full_name": "ValheimModding-Jotunn-2.20.0",
        "description": "Jötunn, the Valheim Library.",
        "icon": "https://gcdn.thunderstore.io/live/repository/icons/ValheimModding-Jotunn-2.20.0.png",
        "dependencies": ["denikson-BepInExPack_Valheim-5.4.2202"],
        "download_url": "https://thunderstore.io/package/download/ValheimModding/Jotunn/2.20.0/",
        "downloads": 12345,
        "date_created": "2024-05-01T10:00:00Z",
        "website_url": "https://github.com/Valheim-Modding/Jotunn",
        "is_active": True,
    },
    "community_listings": [
        {"community": "valheim", "categories": ["Libraries"], "has_nsfw_content": False,
         "review_status": "unreviewed"},
    ],
}


class _FakeResponse:
    def __init__(self, status_code=200, body=b"", broken=False):
        self.status_code = status_code
        self._body = body
        self._broken = broken
        self.closed = False

    @property
    def content(self):
        if self._broken:
            raise requests.exceptions.ChunkedEncodingError("connection reset")
        return self._body

    def close(self):
        self.closed = True


class _FakeSession:
    def __init__(self, response=None, error=None):
        self.headers = {}
        self.response = response
        self.error = error
        self.requests = []

    def get(self, url, **kwargs):
        self.requests.append((url, kwargs))
        if self.error:
            raise self.error
        return self.response


def test_get_package_parses_document():
    session = _FakeSession(_FakeResponse(body=json.dumps(PACKAGE).encode()))

    package = ThunderstoreAPI(session=session).get_package("ValheimModding", "Jotunn")

    url, kwargs = session.requests[0]
    assert url == "https://thunderstore.io/api/experimental/package/ValheimModding/Jotunn/"
    assert kwargs["timeout"] == 10
    assert session.headers["User-Agent"].startswith("HearthMods/")
    assert package.full_name == "ValheimModding-Jotunn"
    assert package.latest.version_number == "2.20.0"
    assert package.latest.dependencies == ["denikson-BepInExPack_Valheim-5.4.2202"]
    assert package.community_listings[0].categories == ["Libraries"]
    assert session.response.closed


def test_missing_package():
    session = _FakeSession(_FakeResponse(status_code=404, body=b'{"detail": "Not found."}'))
    with pytest.raises(PackageNotFoundError):
        ThunderstoreAPI(session=session).get_package("Nobody", "Nothing")


def test_server_error():
    session = _FakeSession(_FakeResponse(status_code=503))
    with pytest.raises(ThunderstoreAPIError):
        ThunderstoreAPI(session=session).get_package("ValheimModding", "Jotunn")


def test_transport_failure():
    session = _FakeSession(error=requests.ConnectionError("dns failure"))
    with pytest.raises(HTTPClientError):
        ThunderstoreAPI(session=session).get_package("ValheimModding", "Jotunn")


def test_body_read_failure():
    session = _FakeSession(_FakeResponse(broken=True))
    with pytest.raises(ByteIOError):
        ThunderstoreAPI(session=session).get_package("ValheimModding", "Jotunn")
    assert session.response.closed


@pytest.mark.parametrize("body", [b"<html>", b"[]", b'{"name": "Jotunn"}'])
def test_malformed_documents(body):
    session = _FakeSession(_FakeResponse(body=body))
    with pytest.raises(JSONParseError):
        ThunderstoreAPI(session=session).get_package("ValheimModding", "Jotunn")
