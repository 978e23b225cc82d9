"""Shared fixtures for bugreport layer tests."""

import io
import struct
import zipfile
from pathlib import Path

import pytest

from bugreport_layer.config.settings import get_settings


def build_zip(entries: dict) -> bytes:
    """
    Build a zip archive in memory.

    Values are bytes/str for files, or None for directory entries.
    """
    buf = io.BytesIO()
    with zipfile.ZipFile(buf, "w", zipfile.ZIP_DEFLATED) as zf:
        for name, content in entries.items():
            if content is None:
                zf.writestr(zipfile.ZipInfo(name.rstrip("/") + "/"), b"")
            elif isinstance(content, str):
                zf.writestr(name, content.encode("utf-8"))
            else:
                zf.writestr(name, content)
    return buf.getvalue()


def corrupt_first_member(data: bytes) -> bytes:
    """Overwrite the compressed payload of the first member with 0xFF bytes.

    0xFF starts a deflate block of the reserved type, so decompression fails
    while the zip directory itself stays valid.
    """
    name_len, extra_len = struct.unpack_from("<HH", data, 26)
    compressed_size = struct.unpack_from("<I", data, 18)[0]
    start = 30 + name_len + extra_len
    return data[:start] + b"\xff" * compressed_size + data[start + compressed_size:]


@pytest.fixture
def make_archive(tmp_path):
    """Write an archive into tmp_path and return its path."""

    def _make(name: str, entries: dict) -> Path:
        path = tmp_path / name
        path.write_bytes(build_zip(entries))
        return path

    return _make


@pytest.fixture
def config_dir(tmp_path) -> Path:
    path = tmp_path / "config"
    path.mkdir()
    return path


@pytest.fixture(autouse=True)
def _clear_settings_cache():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
