"""Shared fixtures: fake HTTP session and sample config."""

import json
import threading
from pathlib import Path

import pytest

from cloudy.config import CloudinaryConfig, Config


class FakeResponse:
    def __init__(self, status_code=200, payload=None, text=None):
        self.status_code = status_code
        self._payload = payload
        self.text = text if text is not None else json.dumps(payload)

    @property
    def ok(self):
        return self.status_code < 400

    def json(self):
        return json.loads(self.text)


class FakeSession:
    """Stands in for requests.Session; records every post."""

    def __init__(self, handler=None):
        self.handler = handler or success_handler
        self.calls = []
        self.closed = False
        self._lock = threading.Lock()

    def post(self, url, data=None, files=None, timeout=None):
        with self._lock:
            self.calls.append({"url": url, "data": dict(data), "files": files, "timeout": timeout})
        return self.handler(url, data, files)

    def close(self):
        self.closed = True


def upload_payload(name: str, resource_type: str = "image") -> dict:
    return {
        "public_id": name,
        "version": 1700000000,
        "signature": "0" * 40,
        "width": 10,
        "height": 10,
        "format": "jpg",
        "resource_type": resource_type,
        "created_at": "2024-01-01T00:00:00Z",
        "tags": [],
        "bytes": 3,
        "url": f"http://res.cloudinary.com/demo/{resource_type}/upload/{name}",
        "secure_url": f"https://res.cloudinary.com/demo/{resource_type}/upload/{name}",
    }


def success_handler(url, data, files):
    filename = files["file"][0]
    resource_type = url.rsplit("/", 2)[-2]
    return FakeResponse(200, upload_payload(Path(filename).stem, resource_type))


@pytest.fixture
def cloudinary_config():
    return CloudinaryConfig(
        cloud_name="demo",
        api_key="123456789012345",
        api_secret="abcdefghij",
        default_folder="",
    )


@pytest.fixture
def config(cloudinary_config):
    return Config(cloudinary=cloudinary_config)


@pytest.fixture
def fake_session():
    return FakeSession()


@pytest.fixture
def make_files(tmp_path):
    """Create small files with the given names and return their paths."""

    def _make(*names: str) -> list[Path]:
        paths = []
        for name in names:
            path = tmp_path / name
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(b"abc")
            paths.append(path)
        return paths

    return _make
