"""Wrap a package stream into the zip container the store expects."""

from __future__ import annotations

import inspect
import io
import time
import zipfile
from typing import Any

import structlog

from devcenter_deploy.deploy.models import PACKAGE_FILE_NAME


logger = structlog.get_logger()

CHUNK_SIZE = 64 * 1024


async def _read_chunk(source: Any, size: int) -> bytes:
    """Read from a sync file object or an async one (e.g. aiofiles)."""
    chunk = source.read(size)
    if inspect.isawaitable(chunk):
        chunk = await chunk
    return chunk


async def package_appx(source: Any, entry_name: str = PACKAGE_FILE_NAME) -> bytes:
    """Drain ``source`` into a single-entry zip archive held in memory.

    ``source`` may be raw bytes or any object with a ``read(size)`` method,
    sync or async. Errors raised while reading propagate unchanged.
    """
    if isinstance(source, (bytes, bytearray, memoryview)):
        payload = bytes(source)
    else:
        chunks = []
        while True:
            chunk = await _read_chunk(source, CHUNK_SIZE)
            if not chunk:
                break
            chunks.append(chunk)
        payload = b"".join(chunks)
    total = len(payload)

    info = zipfile.ZipInfo(entry_name, date_time=time.localtime(time.time())[:6])
    info.compress_type = zipfile.ZIP_DEFLATED
    info.external_attr = 0o644 << 16

    # Size is known up front, so ZIP64 records are only written past 4 GiB.
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w", zipfile.ZIP_DEFLATED) as zf:
        zf.writestr(info, payload)

    data = buffer.getvalue()
    logger.debug("Packaged artifact", entry=entry_name, input_bytes=total, archive_bytes=len(data))
    return data
