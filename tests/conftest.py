import hashlib
import io
import zipfile
from pathlib import Path

import pytest

from hearthmods.storage import create_tables, open_database


@pytest.fixture
def db():
    connection = open_database(":memory:")
    create_tables(connection)
    yield connection
    connection.close()


def make_zip(entries: dict) -> bytes:
    """Builds an in-memory zip archive from a name -> content mapping"""
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w") as archive:
        for name, content in entries.items():
            archive.writestr(name, content)
    return buffer.getvalue()


def snapshot(root: Path) -> dict:
    """Relative path -> sha256 of every file under root"""
    return {
        path.relative_to(root).as_posix(): hashlib.sha256(path.read_bytes()).hexdigest()
        for path in sorted(root.rglob("*"))
        if path.is_file()
    }


class FakeDownloader:
    """Writes canned archive bytes instead of hitting the network"""

    def __init__(self, archives: dict):
        self.archives = archives
        self.calls = []

    def download(self, url, destination, progress_callback=None):
        self.calls.append(url)
        Path(destination).write_bytes(self.archives[url])
        if progress_callback:
            progress_callback(100)
        return Path(destination)
