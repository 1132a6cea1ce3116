"""Configuration for pytest fixtures used in task-net tests."""

from __future__ import annotations

import io
import tarfile
import zipfile
from pathlib import Path
from typing import Callable
from unittest.mock import MagicMock

import pytest
import requests

import tasknet.utils


@pytest.fixture(autouse=True)
def _no_github_token(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("GITHUB_TOKEN", raising=False)


@pytest.fixture
def create_dummy_archive() -> Callable:
    r"""Create an archive with the given members for testing.

    Returns a function that writes a tar.gz or zip archive. ``files`` maps
    member names to either ``bytes`` (a regular file, mode ``0o755``) or a
    ``(bytes, mode)`` tuple; a name ending in ``/`` is a directory.

    Usage:
        archive_path = create_dummy_archive(
            dest_path=tmp_path / "task_linux_amd64.tar.gz",
            files={"task": b"#!/bin/sh\necho test", "completion/": b""},
            archive_type="tar.gz",
        )
    """

    def _create_archive(
        dest_path: Path,
        files: dict[str, bytes | tuple[bytes, int]],
        archive_type: str = "tar.gz",
    ) -> Path:
        if archive_type == "tar.gz":
            with tarfile.open(dest_path, "w:gz") as tar:
                for name, content in files.items():
                    data, mode = content if isinstance(content, tuple) else (content, 0o755)
                    info = tarfile.TarInfo(name=name.rstrip("/"))
                    if name.endswith("/"):
                        info.type = tarfile.DIRTYPE
                        info.mode = 0o700
                        tar.addfile(info)
                    else:
                        info.size = len(data)
                        info.mode = mode
                        tar.addfile(info, io.BytesIO(data))
        elif archive_type == "zip":
            with zipfile.ZipFile(dest_path, "w") as zipf:
                for name, content in files.items():
                    data, mode = content if isinstance(content, tuple) else (content, 0o755)
                    zip_info = zipfile.ZipInfo(name)
                    if name.endswith("/"):
                        zip_info.external_attr = (0o40700 << 16) | 0x10
                        zipf.writestr(zip_info, b"")
                    else:
                        zip_info.external_attr = (0o100000 | mode) << 16
                        zipf.writestr(zip_info, data)
        else:  # pragma: no cover
            msg = f"Unsupported archive type: {archive_type}"
            raise ValueError(msg)
        return dest_path

    return _create_archive


class FakeHTTP:
    """Serves canned JSON payloads in place of ``requests.get``.

    A payload that is an ``int`` is answered with that HTTP error status, a
    ``str`` is an unparsable body and an exception instance is raised from
    the request itself. Unknown URLs answer 404.
    """

    def __init__(self) -> None:
        self.responses: dict[str, object] = {}
        self.calls: list[tuple[str, dict]] = []

    def get(self, url: str, **kwargs: object) -> MagicMock:
        self.calls.append((url, kwargs))
        payload = self.responses.get(url, 404)
        if isinstance(payload, Exception):
            raise payload
        response = MagicMock()
        if isinstance(payload, int):
            response.status_code = payload
            response.raise_for_status.side_effect = requests.HTTPError(
                f"{payload} Error for url: {url}",
            )
        elif isinstance(payload, str):
            response.status_code = 200
            response.json.side_effect = ValueError("Expecting value")
        else:
            response.status_code = 200
            response.json.return_value = payload
        return response


@pytest.fixture
def mock_http(monkeypatch: pytest.MonkeyPatch) -> FakeHTTP:
    """Replace ``requests.get`` used for JSON lookups with a FakeHTTP."""
    fake = FakeHTTP()
    monkeypatch.setattr(tasknet.utils.requests, "get", fake.get)
    return fake
