"""Tests for zip packaging of the app package stream."""

import io
import zipfile

import aiofiles
import pytest

from devcenter_deploy.deploy.packager import package_appx


def _entries(data: bytes) -> dict:
    with zipfile.ZipFile(io.BytesIO(data)) as zf:
        return {name: zf.read(name) for name in zf.namelist()}


@pytest.mark.asyncio
async def test_single_entry_with_fixed_name():
    payload = b"appx-bytes" * 10000
    data = await package_appx(io.BytesIO(payload))
    assert _entries(data) == {"package.appx": payload}


@pytest.mark.asyncio
async def test_empty_stream_still_produces_archive():
    data = await package_appx(io.BytesIO(b""))
    assert _entries(data) == {"package.appx": b""}


@pytest.mark.asyncio
async def test_raw_bytes_source():
    data = await package_appx(b"raw", entry_name="other.appx")
    assert _entries(data) == {"other.appx": b"raw"}


@pytest.mark.asyncio
async def test_async_file_source(tmp_path):
    path = tmp_path / "app.appx"
    path.write_bytes(b"from disk")

    async with aiofiles.open(path, "rb") as f:
        data = await package_appx(f)

    assert _entries(data) == {"package.appx": b"from disk"}


@pytest.mark.asyncio
async def test_stream_error_is_not_wrapped():
    class Boom:
        def read(self, size=-1):
            raise ValueError("stream broke")

    with pytest.raises(ValueError, match="stream broke"):
        await package_appx(Boom())


@pytest.mark.asyncio
async def test_small_archive_has_no_zip64_records():
    data = await package_appx(io.BytesIO(b"small package"))
    with zipfile.ZipFile(io.BytesIO(data)) as zf:
        info = zf.getinfo("package.appx")
    assert info.extra == b""
    assert info.compress_type == zipfile.ZIP_DEFLATED
    # Minimal zip version, not the 4.5 that ZIP64 requires.
    assert info.extract_version < zipfile.ZIP64_VERSION
